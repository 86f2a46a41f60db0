"""Dataclasses describing the docs graph and its runtime projection.

The graph is built once per generation run, serialized with ``msgspec`` and
treated as an immutable snapshot by every consumer.
"""

from __future__ import annotations

import dataclasses as dc


@dc.dataclass(slots=True, frozen=True)
class TableOfContentsHeading:
    """A level 2-6 heading listed in a page's table of contents."""

    id: str
    title: str
    level: int


@dc.dataclass(slots=True, frozen=True)
class SearchSection:
    """A heading-delimited span of document text used for search indexing.

    Attributes
    ----------
    heading : str
        Heading title, empty for content preceding the first heading.
    anchor : str
        Heading id, empty for content preceding the first heading.
    text : str
        Whitespace-collapsed plain text of the span.
    """

    heading: str
    anchor: str
    text: str


@dc.dataclass(slots=True, frozen=True)
class AssetDimensions:
    """Pixel dimensions probed from an image asset."""

    width: int
    height: int


@dc.dataclass(slots=True, frozen=True)
class DocNode:
    """One source markdown document.

    Attributes
    ----------
    source_path : str
        Docs-root-relative POSIX path; unique across the graph.
    section_id : str
        Owning section identifier.
    section_title : str
        Label of the owning section.
    content_slug : str
        Path below the section, without extension.
    slug : str
        Normalized URL slug.
    route_path : str
        Public route; unique across the graph.
    category : str
        Intervening directories joined by ``" / "``.
    title : str
        Page title.
    sidebar_label : str
        Navigation label.
    sidebar_order : float | None
        Optional ordering hint within the section.
    description : str | None
        Optional frontmatter description.
    headings : list[TableOfContentsHeading]
        Table of contents entries.
    search_sections : list[SearchSection]
        Searchable spans in document order.
    plain_text : str
        Whole-document plain text.
    edit_url : str
        Link to edit the source in its repository.
    """

    source_path: str
    section_id: str
    section_title: str
    content_slug: str
    slug: str
    route_path: str
    category: str
    title: str
    sidebar_label: str
    sidebar_order: float | None
    description: str | None
    headings: list[TableOfContentsHeading]
    search_sections: list[SearchSection]
    plain_text: str
    edit_url: str

    def to_runtime(self) -> RuntimeDocNode:
        """Project the node onto the fields the render layer needs."""
        return RuntimeDocNode(
            source_path=self.source_path,
            section_id=self.section_id,
            section_title=self.section_title,
            content_slug=self.content_slug,
            slug=self.slug,
            route_path=self.route_path,
            category=self.category,
            title=self.title,
            sidebar_label=self.sidebar_label,
            headings=list(self.headings),
            edit_url=self.edit_url,
        )


@dc.dataclass(slots=True, frozen=True)
class RuntimeDocNode:
    """Runtime projection of a DocNode without text payloads."""

    source_path: str
    section_id: str
    section_title: str
    content_slug: str
    slug: str
    route_path: str
    category: str
    title: str
    sidebar_label: str
    headings: list[TableOfContentsHeading]
    edit_url: str


@dc.dataclass(slots=True, frozen=True)
class SectionNode:
    """A populated section with its ordered member routes."""

    id: str
    title: str
    order: int
    base_path: str
    is_page_anchor: bool
    icon: str
    pages: list[str]


@dc.dataclass(slots=True, frozen=True)
class DocsGraph:
    """Root aggregate produced by one generation run."""

    generated_at: str
    docs: list[DocNode]
    sections: list[SectionNode]
    assets: list[str]
    asset_metadata: dict[str, AssetDimensions]

    def to_runtime(self) -> RuntimeDocsGraph:
        """Return the trimmed graph consumed at render time."""
        return RuntimeDocsGraph(
            generated_at=self.generated_at,
            docs=[doc.to_runtime() for doc in self.docs],
            sections=list(self.sections),
        )


@dc.dataclass(slots=True, frozen=True)
class RuntimeDocsGraph:
    """Runtime projection of the docs graph."""

    generated_at: str
    docs: list[RuntimeDocNode]
    sections: list[SectionNode]


__all__ = [
    "AssetDimensions",
    "DocNode",
    "DocsGraph",
    "RuntimeDocNode",
    "RuntimeDocsGraph",
    "SearchSection",
    "SectionNode",
    "TableOfContentsHeading",
]
