r"""Assemble the docs graph from a markdown source tree.

:class:`DocsGraphBuilder` discovers markdown documents and assets under the
configured docs directory, parses each document, rejects duplicate sources
and routes, validates every internal reference, and orders sections and
documents into a :class:`~docsgraph.models.DocsGraph`.

Example
-------
>>> from pathlib import Path
>>> from docsgraph.config import load_site_config
>>> from docsgraph.graph import DocsGraphBuilder
>>> config = load_site_config(Path("docs.yaml"))  # doctest: +SKIP
>>> graph = DocsGraphBuilder(config).build()  # doctest: +SKIP
>>> graph.sections[0].pages[:1]  # doctest: +SKIP
['/getting-started']
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import datetime as dt
import logging
import math
import os
import posixpath
import typing as typ
from pathlib import Path

from docsgraph._constants import MARKDOWN_SUFFIX, ROOT_SECTION_ID
from docsgraph.errors import (
    ConfigurationError,
    DuplicateRouteError,
    DuplicateSourceError,
    PathEscapeError,
)
from docsgraph.frontmatter import parse_frontmatter
from docsgraph.markdown_parser import extract_document
from docsgraph.models import DocNode, DocsGraph, SectionNode
from docsgraph.paths import (
    build_edit_url,
    derive_doc_location,
    strip_markdown_extension,
    title_case,
)

from .assets import ImageProbe, collect_asset_metadata, probe_image_dimensions
from .validator import validate_references

if typ.TYPE_CHECKING:
    from docsgraph.config import SectionConfig, SiteConfig
    from docsgraph.frontmatter import Frontmatter
    from docsgraph.markdown_parser import ExtractedDocument

logger = logging.getLogger(__name__)

Clock = cabc.Callable[[], dt.datetime]


@dc.dataclass(slots=True, frozen=True)
class SourceTree:
    """Docs-root-relative markdown and asset paths, each sorted."""

    markdown: list[str]
    assets: list[str]


def _utc_now() -> dt.datetime:
    return dt.datetime.now(dt.UTC)


def format_timestamp(moment: dt.datetime) -> str:
    """Format ``moment`` as an ISO-8601 UTC timestamp with millisecond precision.

    Examples
    --------
    >>> format_timestamp(dt.datetime(2024, 5, 1, 12, 30, tzinfo=dt.UTC))
    '2024-05-01T12:30:00.000Z'
    """
    utc = moment.astimezone(dt.UTC)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _is_hidden(name: str) -> bool:
    return name.startswith(".")


def _ensure_within(path: Path, workspace_root: Path) -> None:
    real = Path(os.path.realpath(path))
    if not real.is_relative_to(workspace_root):
        msg = f"Path '{path}' resolves outside the workspace: {real}"
        raise PathEscapeError(msg)


def discover_sources(docs_dir: Path, workspace_root: Path) -> SourceTree:
    """Walk ``docs_dir`` and split its files into markdown documents and assets.

    Hidden files and directories are skipped. Symbolic links are followed,
    but every resolved path must stay inside ``workspace_root``.

    Raises
    ------
    ConfigurationError
        If ``docs_dir`` is not a directory.
    PathEscapeError
        If a file or directory resolves outside the workspace.
    """
    if not docs_dir.is_dir():
        msg = f"Docs directory '{docs_dir}' does not exist"
        raise ConfigurationError(msg)

    root = Path(os.path.realpath(workspace_root))
    _ensure_within(docs_dir, root)
    markdown: list[str] = []
    assets: list[str] = []
    visited: set[str] = set()
    for dirpath, dirnames, filenames in os.walk(docs_dir, followlinks=True):
        real_dir = os.path.realpath(dirpath)
        if real_dir in visited:
            dirnames[:] = []
            continue
        visited.add(real_dir)
        dirnames[:] = sorted(name for name in dirnames if not _is_hidden(name))
        for name in dirnames:
            _ensure_within(Path(dirpath, name), root)
        for name in filenames:
            if _is_hidden(name):
                continue
            full_path = Path(dirpath, name)
            _ensure_within(full_path, root)
            rel = full_path.relative_to(docs_dir).as_posix()
            if name.lower().endswith(MARKDOWN_SUFFIX):
                markdown.append(rel)
            else:
                assets.append(rel)
    return SourceTree(markdown=sorted(markdown), assets=sorted(assets))


def _sort_key(doc: DocNode) -> tuple[float, str]:
    order = math.inf if doc.sidebar_order is None else doc.sidebar_order
    return order, doc.route_path


def organize_sections(
    docs: cabc.Iterable[DocNode],
    sections: cabc.Mapping[str, SectionConfig],
) -> tuple[list[SectionNode], list[DocNode]]:
    """Group documents by section and order both levels.

    Sections follow their declared ``order`` (declaration order breaks ties)
    and sections without documents are dropped. Documents are ordered by
    sidebar order, missing orders last, then by route path.

    Returns
    -------
    tuple[list[SectionNode], list[DocNode]]
        The ordered sections and the documents flattened in the same order.
    """
    members: dict[str, list[DocNode]] = {}
    for doc in docs:
        members.setdefault(doc.section_id, []).append(doc)

    section_nodes: list[SectionNode] = []
    ordered_docs: list[DocNode] = []
    for section in sorted(sections.values(), key=lambda entry: entry.order):
        section_docs = sorted(members.get(section.id, []), key=_sort_key)
        if not section_docs:
            continue
        is_root = section.id == ROOT_SECTION_ID
        section_nodes.append(
            SectionNode(
                id=section.id,
                title=section.label,
                order=section.order,
                base_path="" if is_root else section.id,
                is_page_anchor=not is_root,
                icon=section.icon,
                pages=[doc.route_path for doc in section_docs],
            )
        )
        ordered_docs.extend(section_docs)
    return section_nodes, ordered_docs


class DocsGraphBuilder:
    """Build a :class:`DocsGraph` for one site configuration."""

    def __init__(
        self,
        config: SiteConfig,
        *,
        clock: Clock = _utc_now,
        probe: ImageProbe = probe_image_dimensions,
        max_workers: int | None = None,
    ) -> None:
        """Initialize the builder.

        Parameters
        ----------
        config : SiteConfig
            Resolved site configuration.
        clock : callable, optional
            Source of the ``generated_at`` timestamp.
        probe : callable, optional
            Image dimension probe used for every asset.
        max_workers : int, optional
            Size of the asset probing thread pool.
        """
        self.config = config
        self._clock = clock
        self._probe = probe
        self._max_workers = max_workers

    def build(self) -> DocsGraph:
        """Discover, parse, validate, and order the docs tree.

        Raises
        ------
        ConfigurationError
            For invalid frontmatter, slugs, or unknown sections.
        DuplicateSourceError, DuplicateRouteError
            When two documents collide.
        DuplicateHeadingIdError
            When a document repeats a heading id.
        ReferenceValidationError
            When any internal reference is broken.
        PathEscapeError
            When a discovered path resolves outside the workspace.
        """
        tree = discover_sources(self.config.docs_dir, self.config.root_dir)
        logger.info(
            "discovered %d documents and %d assets in %s",
            len(tree.markdown),
            len(tree.assets),
            self.config.docs_dir,
        )
        return self.assemble(tree)

    def assemble(self, tree: SourceTree) -> DocsGraph:
        """Parse, validate, and order the documents listed in ``tree``.

        Raises the same errors as :meth:`build` apart from discovery failures.
        """
        nodes: list[DocNode] = []
        extractions: dict[str, ExtractedDocument] = {}
        routes: dict[str, str] = {}
        for source_path in tree.markdown:
            if source_path in extractions:
                msg = f"Duplicate source path '{source_path}'"
                raise DuplicateSourceError(msg)
            node, extraction = self.parse_document(source_path)
            existing = routes.get(node.route_path)
            if existing is not None:
                msg = (
                    f"Duplicate route path '{node.route_path}' for "
                    f"'{source_path}' and '{existing}'"
                )
                raise DuplicateRouteError(msg)
            routes[node.route_path] = source_path
            extractions[source_path] = extraction
            nodes.append(node)

        validate_references(extractions, tree.assets)
        metadata = collect_asset_metadata(
            self.config.docs_dir,
            tree.assets,
            probe=self._probe,
            max_workers=self._max_workers,
        )
        sections, ordered_docs = organize_sections(nodes, self.config.sections)
        return DocsGraph(
            generated_at=format_timestamp(self._clock()),
            docs=ordered_docs,
            sections=sections,
            assets=tree.assets,
            asset_metadata=metadata,
        )

    def read_source(self, source_path: str) -> str:
        """Return the UTF-8 text of a docs-root-relative markdown file."""
        path = self.config.docs_dir.joinpath(*source_path.split("/"))
        try:
            return path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            msg = f"Cannot decode '{source_path}' as UTF-8: {exc}"
            raise ConfigurationError(msg) from exc

    def parse_document(self, source_path: str) -> tuple[DocNode, ExtractedDocument]:
        """Parse one source file into its graph node and extraction result."""
        raw = self.read_source(source_path)
        frontmatter, body = parse_frontmatter(raw, source_path)
        location = derive_doc_location(
            source_path,
            frontmatter.slug,
            section_ids=self.config.content_section_ids,
        )
        section = self.config.get_section(location.section_id)
        extraction = extract_document(body, source_path)
        title = self._resolve_title(source_path, frontmatter, extraction)
        node = DocNode(
            source_path=source_path,
            section_id=location.section_id,
            section_title=section.label,
            content_slug=location.content_slug,
            slug=location.slug,
            route_path=location.route_path,
            category=location.category,
            title=title,
            sidebar_label=frontmatter.sidebar_label or title,
            sidebar_order=frontmatter.sidebar_order,
            description=frontmatter.description,
            headings=extraction.headings,
            search_sections=extraction.search_sections,
            plain_text=extraction.plain_text,
            edit_url=build_edit_url(
                location.section_id, source_path, section, self.config.edit_base_url
            ),
        )
        return node, extraction

    @staticmethod
    def _resolve_title(
        source_path: str, frontmatter: Frontmatter, extraction: ExtractedDocument
    ) -> str:
        if frontmatter.title:
            return frontmatter.title
        if extraction.primary_title:
            return extraction.primary_title
        file_name = posixpath.basename(strip_markdown_extension(source_path))
        return title_case(file_name)


__all__ = [
    "DocsGraphBuilder",
    "SourceTree",
    "discover_sources",
    "format_timestamp",
    "organize_sections",
]
