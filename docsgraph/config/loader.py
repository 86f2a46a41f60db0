"""Load site configuration YAML into typed dataclasses."""

from __future__ import annotations

import os
import typing as typ
from pathlib import Path

from ruamel.yaml import YAML

from docsgraph.errors import ConfigurationError

from .helpers import (
    SITE_URL_ENV,
    _build_header_buttons,
    _build_search_settings,
    _coerce_int,
    _optional_str,
    _require_mapping,
    _resolve_path,
    _resolve_site_url,
)
from .models import RenderSettings, RepoConfig, SectionConfig, SiteConfig, SiteInfo


def load_site_config(path: Path) -> SiteConfig:
    """Load the YAML configuration describing the docs tree and its sections.

    Parameters
    ----------
    path : Path
        Filesystem path to the YAML configuration file (for example,
        ``docs.yaml``). Its directory becomes the workspace root.

    Returns
    -------
    SiteConfig
        Parsed site configuration including the section registry, site
        metadata, search options, and render options.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist at ``path``.
    ConfigurationError
        If the YAML is not a mapping, no sections are defined, or a field has
        the wrong shape.
    YAMLError
        If the YAML content cannot be parsed by the underlying loader.

    Examples
    --------
    >>> from pathlib import Path
    >>> from docsgraph.config import load_site_config
    >>> config = load_site_config(Path("docs.yaml"))  # doctest: +SKIP
    >>> list(config.sections)[:2]  # doctest: +SKIP
    ['_root', 'patcher']
    """
    if not path.exists():
        msg = f"Configuration file '{path}' not found."
        raise FileNotFoundError(msg)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or {}
    if not isinstance(loaded, dict):
        msg = "Top-level YAML structure must be a mapping."
        raise ConfigurationError(msg)
    raw: dict[str, typ.Any] = dict(loaded)
    root_dir = path.resolve().parent

    sections_raw = _require_mapping(raw.get("sections"), "sections")
    if not sections_raw:
        msg = "No sections defined in site configuration."
        raise ConfigurationError(msg)
    sections = {
        str(key): _build_section_config(str(key), payload)
        for key, payload in sections_raw.items()
    }

    render_raw = _require_mapping(raw.get("render"), "render")
    base = RenderSettings()
    render = RenderSettings(
        output_dir=_resolve_path(root_dir, render_raw.get("output_dir"), "build"),
        pygments_style=render_raw.get("pygments_style", base.pygments_style),
        base_path=str(render_raw.get("base_path", base.base_path) or "").rstrip("/"),
        assets_public_path=render_raw.get(
            "assets_public_path", base.assets_public_path
        ),
    )

    return SiteConfig(
        root_dir=root_dir,
        docs_dir=_resolve_path(root_dir, raw.get("docs_dir"), "docs"),
        output_dir=_resolve_path(root_dir, raw.get("output_dir"), ".generated"),
        edit_base_url=str(raw.get("edit_base_url", "")).rstrip("/"),
        sections=sections,
        site=_build_site_info(_require_mapping(raw.get("site"), "site")),
        search=_build_search_settings(_require_mapping(raw.get("search"), "search")),
        render=render,
    )


def _build_section_config(key: str, payload: object) -> SectionConfig:
    """Build a SectionConfig for one registry entry."""
    data = _require_mapping(payload, f"sections.{key}")
    repo_raw = _require_mapping(data.get("repo"), f"sections.{key}.repo")
    repo_name = _optional_str(repo_raw.get("name"))
    if not repo_name:
        msg = f"Section '{key}' is missing 'repo.name'."
        raise ConfigurationError(msg)
    repo = RepoConfig(
        name=repo_name,
        branch=_optional_str(repo_raw.get("branch")) or "main",
        docs_path=(_optional_str(repo_raw.get("docs_path")) or "docs").strip("/"),
    )
    return SectionConfig(
        id=key,
        label=_optional_str(data.get("label")) or key.replace("-", " ").title(),
        order=_coerce_int(data.get("order", 0), f"sections.{key}.order"),
        icon=_optional_str(data.get("icon")) or "",
        repo=repo,
    )


def _build_site_info(payload: typ.Mapping[str, typ.Any]) -> SiteInfo:
    """Build SiteInfo, applying the ``SITE_URL_OVERRIDE`` environment variable."""
    base = SiteInfo()
    name = _optional_str(payload.get("name")) or base.name
    org = _optional_str(payload.get("org")) or base.org
    default_title = f"{org} {name}" if org else name
    url = os.getenv(SITE_URL_ENV) or payload.get("url")
    return SiteInfo(
        name=name,
        org=org,
        title=_optional_str(payload.get("title")) or default_title,
        description=_optional_str(payload.get("description")) or base.description,
        url=_resolve_site_url(_optional_str(url)),
        logo_asset_path=_optional_str(payload.get("logo_asset_path"))
        or base.logo_asset_path,
        theme_color=_optional_str(payload.get("theme_color")) or base.theme_color,
        header_buttons=_build_header_buttons(payload.get("header_buttons")),
    )


__all__ = ["load_site_config"]
