"""Rewrite document links, image sources, and heading ids while rendering.

The :class:`DocLinkExtension` plugs into Python-Markdown and, for one source
document, turns relative ``.md`` links into site routes, points local images
at the published assets directory, and gives top-level headings the same ids
the graph builder recorded for them.
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import typing as typ
from xml.etree.ElementTree import Element as EtreeElement

from markdown.extensions import Extension
from markdown.treeprocessors import Treeprocessor

from docsgraph.errors import ReferenceValidationError
from docsgraph.hrefs import (
    parse_local_asset_href,
    parse_markdown_doc_href,
    resolve_doc_relative_path,
    with_query_and_hash,
)
from docsgraph.markdown_parser import HeadingSlugger, convert_children, raw_text

if typ.TYPE_CHECKING:
    from markdown import Markdown

    from docsgraph.models import AssetDimensions, DocsGraph

_HEADING_TAGS = frozenset({"h1", "h2", "h3", "h4", "h5", "h6"})


def with_base_path(pathname: str, site_base_path: str) -> str:
    """Prefix ``pathname`` with the site base path, if any.

    Examples
    --------
    >>> with_base_path("/patcher/intro", "/docs/")
    '/docs/patcher/intro'
    """
    if not site_base_path or site_base_path == "/":
        return pathname
    return f"{site_base_path.rstrip('/')}{pathname}"


def _positive_dimension(value: str | None) -> float | None:
    if value is None:
        return None
    normalized = value.strip().lower()
    if not normalized or normalized.endswith("%"):
        return None
    normalized = normalized.removesuffix("px").strip()
    try:
        parsed = float(normalized)
    except ValueError:
        return None
    return parsed if parsed > 0 else None


def _format_number(value: float) -> str:
    return str(int(value)) if value.is_integer() else str(value)


def placeholder_style(width: str | None, height: str | None) -> str | None:
    """Return the inline style reserving layout space for an image."""
    parsed_width = _positive_dimension(width)
    parsed_height = _positive_dimension(height)
    if parsed_width is None or parsed_height is None:
        return None
    w = _format_number(parsed_width)
    h = _format_number(parsed_height)
    return f"width:min(100%,{w}px);max-width:{w}px;aspect-ratio:{w}/{h}"


@dc.dataclass(slots=True, frozen=True)
class LinkContext:
    """Graph facts the rewriter needs, shared by every rendered document."""

    source_to_route: cabc.Mapping[str, str]
    asset_paths: frozenset[str]
    asset_metadata: cabc.Mapping[str, AssetDimensions]
    site_base_path: str = ""
    assets_public_path: str = "/docs-assets"

    @classmethod
    def from_graph(
        cls,
        graph: DocsGraph,
        *,
        site_base_path: str = "",
        assets_public_path: str = "/docs-assets",
    ) -> LinkContext:
        """Collect route, asset, and metadata lookups from ``graph``."""
        return cls(
            source_to_route={doc.source_path: doc.route_path for doc in graph.docs},
            asset_paths=frozenset(graph.assets),
            asset_metadata=dict(graph.asset_metadata),
            site_base_path=site_base_path,
            assets_public_path=assets_public_path,
        )


class DocLinkExtension(Extension):
    """Rewrite links and images of one source document into site URLs."""

    def __init__(self, context: LinkContext, source_path: str) -> None:
        super().__init__()
        self.context = context
        self.source_path = source_path

    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]  # noqa: N802
        """Register the link treeprocessor on the Markdown instance."""
        processor = DocLinkTreeprocessor(md, self.context, self.source_path)
        md.treeprocessors.register(processor, "docsgraph_doc_links", 15)


class DocLinkTreeprocessor(Treeprocessor):
    """Resolve links, images, and heading ids on the parsed element tree."""

    def __init__(self, md: Markdown, context: LinkContext, source_path: str) -> None:
        super().__init__(md)
        self.context = context
        self.source_path = source_path

    def run(self, root: EtreeElement) -> EtreeElement:
        """Rewrite the tree in place."""
        self._assign_heading_ids(root)
        for parent in list(root.iter()):
            for index, child in enumerate(list(parent)):
                if child.tag == "a":
                    self._rewrite_link(child)
                elif child.tag == "img":
                    self._rewrite_image(child)
                    parent[index] = _wrap_with_placeholder(child)
        return root

    def _assign_heading_ids(self, root: EtreeElement) -> None:
        slugger = HeadingSlugger(self.source_path)
        for child in root:
            if child.tag in _HEADING_TAGS:
                text = raw_text(convert_children(child, self.md.htmlStash))
                child.set("id", slugger.slug(text.strip()))

    def _rewrite_link(self, element: EtreeElement) -> None:
        href = element.get("href")
        if href is None:
            return
        parsed = parse_markdown_doc_href(href)
        if parsed is None:
            return
        resolved = resolve_doc_relative_path(self.source_path, parsed.target_path)
        route = self.context.source_to_route.get(resolved)
        if route is None:
            msg = (
                f"Unresolved markdown link '{href}' in '{self.source_path}' "
                f"(resolved '{resolved}')"
            )
            raise ReferenceValidationError([msg])
        base_route = with_base_path(route, self.context.site_base_path)
        element.set("href", with_query_and_hash(base_route, parsed.query, parsed.hash))

    def _rewrite_image(self, element: EtreeElement) -> None:
        src = element.get("src")
        if src is None:
            return
        parsed = parse_local_asset_href(src)
        if parsed is not None:
            resolved = resolve_doc_relative_path(self.source_path, parsed.target_path)
            if resolved in self.context.asset_paths:
                public = self.context.assets_public_path.rstrip("/")
                url = with_base_path(
                    f"{public}/{resolved}", self.context.site_base_path
                )
                element.set("src", with_query_and_hash(url, parsed.query, parsed.hash))
                metadata = self.context.asset_metadata.get(resolved)
                if metadata is not None:
                    if element.get("width") is None:
                        element.set("width", str(metadata.width))
                    if element.get("height") is None:
                        element.set("height", str(metadata.height))
            elif resolved.startswith("assets/"):
                url = with_base_path(f"/{resolved}", self.context.site_base_path)
                element.set("src", with_query_and_hash(url, parsed.query, parsed.hash))
            else:
                msg = (
                    f"Unresolved image link '{src}' in '{self.source_path}' "
                    f"(resolved '{resolved}')"
                )
                raise ReferenceValidationError([msg])
        if element.get("loading") is None:
            element.set("loading", "lazy")
        if element.get("decoding") is None:
            element.set("decoding", "async")


def _wrap_with_placeholder(image: EtreeElement) -> EtreeElement:
    """Wrap an image in a span that reserves its space while it loads."""
    wrapper = EtreeElement("span", {"class": "img-placeholder-wrapper"})
    style = placeholder_style(image.get("width"), image.get("height"))
    if style is not None:
        wrapper.set("style", style)
    spinner = EtreeElement(
        "span", {"class": "spinner img-spinner", "aria-hidden": "true"}
    )
    wrapper.append(spinner)
    wrapper.tail = image.tail
    image.tail = None
    wrapper.append(image)
    return wrapper


__all__ = [
    "DocLinkExtension",
    "DocLinkTreeprocessor",
    "LinkContext",
    "placeholder_style",
    "with_base_path",
]
