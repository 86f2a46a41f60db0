"""Typed dataclasses describing docsgraph site configuration structures."""

from __future__ import annotations

import dataclasses as dc
from pathlib import Path

from docsgraph._constants import ROOT_SECTION_ID
from docsgraph.errors import ConfigurationError


@dc.dataclass(slots=True)
class RepoConfig:
    """Source repository that owns a section's markdown, used for edit links."""

    name: str
    branch: str = "main"
    docs_path: str = "docs"


@dc.dataclass(slots=True)
class SectionConfig:
    """A registered top-level docs section."""

    id: str
    label: str
    order: int
    icon: str
    repo: RepoConfig


@dc.dataclass(slots=True)
class HeaderButtonConfig:
    """Header link exposed to the site chrome."""

    href: str
    label: str | None = None
    icon: str | None = None


@dc.dataclass(slots=True)
class SiteInfo:
    """Public site metadata shared with the render layer."""

    name: str = "Documentation"
    org: str = ""
    title: str = "Documentation"
    description: str = ""
    url: str = ""
    logo_asset_path: str = "/logo.svg"
    theme_color: str = "#1a191f"
    header_buttons: list[HeaderButtonConfig] = dc.field(default_factory=list)


@dc.dataclass(slots=True)
class SearchSettings:
    """Search index construction and query options."""

    fuzzy: float = 0.15
    prefix: bool = True
    combine_with: str = "AND"
    max_index_text_length: int = 600
    snippet_max_length: int = 140
    snippet_context_chars: int = 40
    ellipsis: str = "..."
    highlight_tag: str = "mark"
    boost: dict[str, int] = dc.field(
        default_factory=lambda: {"title": 4, "section": 2, "text": 1}
    )


@dc.dataclass(slots=True)
class RenderSettings:
    """Options for turning the graph into static HTML pages."""

    output_dir: Path = Path("build")
    pygments_style: str = "monokai"
    base_path: str = ""
    assets_public_path: str = "/docs-assets"


@dc.dataclass(slots=True)
class SiteConfig:
    """Fully resolved site configuration.

    Attributes
    ----------
    root_dir : Path
        Workspace root; relative paths in the YAML file resolve against it and
        generated artifacts must stay inside it.
    docs_dir : Path
        Directory holding the markdown tree and its assets.
    output_dir : Path
        Directory receiving the generated JSON artifacts.
    edit_base_url : str
        Prefix used to build "edit this page" links.
    sections : dict[str, SectionConfig]
        Section registry in declaration order.
    """

    root_dir: Path
    docs_dir: Path
    output_dir: Path
    edit_base_url: str
    sections: dict[str, SectionConfig]
    site: SiteInfo = dc.field(default_factory=SiteInfo)
    search: SearchSettings = dc.field(default_factory=SearchSettings)
    render: RenderSettings = dc.field(default_factory=RenderSettings)

    def get_section(self, section_id: str) -> SectionConfig:
        """Return the registered section or raise ``ConfigurationError``."""
        try:
            return self.sections[section_id]
        except KeyError as exc:
            msg = f"Missing section definition for '{section_id}'"
            raise ConfigurationError(msg) from exc

    @property
    def content_section_ids(self) -> frozenset[str]:
        """Section ids a top-level docs directory may map onto."""
        return frozenset(key for key in self.sections if key != ROOT_SECTION_ID)


__all__ = [
    "ConfigurationError",
    "HeaderButtonConfig",
    "RenderSettings",
    "RepoConfig",
    "SearchSettings",
    "SectionConfig",
    "SiteConfig",
    "SiteInfo",
]
