r"""Extract headings, searchable sections, plain text, and references from markdown.

The body is parsed once with Python-Markdown. A treeprocessor captures the
element tree after inline processing and converts it into a small set of
typed nodes which every extraction pass walks.

Example
-------
>>> from docsgraph.markdown_parser import extract_document
>>> doc = extract_document("# Guide\n\nIntro.\n\n## Setup\n\nRun it.\n", "guide.md")
>>> doc.primary_title, [heading.id for heading in doc.headings]
('Guide', ['setup'])
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import html
import re
import typing as typ

from markdown import Markdown
from markdown.extensions import Extension
from markdown.treeprocessors import Treeprocessor
from markdown.util import HTML_PLACEHOLDER_RE

from docsgraph.errors import DuplicateHeadingIdError
from docsgraph.hrefs import ParsedHref, parse_local_asset_href, parse_markdown_doc_href
from docsgraph.models import SearchSection, TableOfContentsHeading

if typ.TYPE_CHECKING:
    from xml.etree.ElementTree import Element as EtreeElement

    from markdown.util import HtmlStash

FENCED_INDENT_PATTERN = re.compile(r"^[ ]{1,3}([`~]{3,})", re.MULTILINE)
FENCE_LABEL_PATTERN = re.compile(
    r"^([`~]{3,})([A-Za-z0-9_+#.-]+)?(,[^\r\n]+)$", re.MULTILINE
)
_ESCAPED_CHAR_PATTERN = re.compile("\x02(\\d+)\x03")
_TAG_PATTERN = re.compile(r"<[^>]*>")
_WHITESPACE_PATTERN = re.compile(r"\s+")
_HEADING_ID_STRIP_PATTERN = re.compile(r"[^\w\- ]")
_HEADING_LEVELS = {f"h{level}": level for level in range(1, 7)}
_BLOCK_TAGS = frozenset(
    {
        "blockquote",
        "dd",
        "div",
        "dl",
        "dt",
        "hr",
        "li",
        "ol",
        "p",
        "pre",
        "table",
        "tbody",
        "td",
        "th",
        "thead",
        "tr",
        "ul",
    }
)
BASE_EXTENSIONS = ("fenced_code", "tables", "sane_lists")


@dc.dataclass(slots=True, frozen=True)
class Text:
    """Literal text."""

    value: str


@dc.dataclass(slots=True, frozen=True)
class Heading:
    """A heading of ``level`` 1-6."""

    level: int
    children: tuple[Node, ...]


@dc.dataclass(slots=True, frozen=True)
class Link:
    """An inline link."""

    url: str
    children: tuple[Node, ...]


@dc.dataclass(slots=True, frozen=True)
class Image:
    """An inline image; its alt text counts as document text."""

    url: str
    alt: str


@dc.dataclass(slots=True, frozen=True)
class Element:
    """Any other container element, identified by its HTML tag."""

    tag: str
    children: tuple[Node, ...]


Node = Text | Heading | Link | Image | Element


@dc.dataclass(slots=True, frozen=True)
class ExtractedDocument:
    """Structural facts about one markdown body.

    Attributes
    ----------
    headings : list[TableOfContentsHeading]
        Level 2-6 top-level headings in document order.
    search_sections : list[SearchSection]
        Heading-delimited spans with non-empty text.
    plain_text : str
        Whitespace-collapsed text of the whole body.
    primary_title : str | None
        Text of the first non-empty top-level ``#`` heading.
    links : list[ParsedHref]
        Candidate document links.
    images : list[ParsedHref]
        Candidate local image assets.
    heading_anchors : frozenset[str]
        Every heading id generated for the body, including level 1.
    """

    headings: list[TableOfContentsHeading]
    search_sections: list[SearchSection]
    plain_text: str
    primary_title: str | None
    links: list[ParsedHref]
    images: list[ParsedHref]
    heading_anchors: frozenset[str]


def heading_slug(text: str) -> str:
    """Return the GitHub-style anchor id for a heading's text.

    Examples
    --------
    >>> heading_slug("Install & Configure")
    'install--configure'
    """
    return _HEADING_ID_STRIP_PATTERN.sub("", text.lower()).replace(" ", "-")


class HeadingSlugger:
    """Assign heading ids for one document and reject duplicates."""

    def __init__(self, source_path: str) -> None:
        self.source_path = source_path
        self._seen: set[str] = set()

    def slug(self, text: str) -> str:
        """Return the id for ``text``; raise if the id was already issued."""
        candidate = heading_slug(text)
        if candidate in self._seen:
            msg = (
                f"Duplicate heading id '{candidate}' detected in "
                f"'{self.source_path}'"
            )
            raise DuplicateHeadingIdError(msg)
        self._seen.add(candidate)
        return candidate

    @property
    def anchors(self) -> frozenset[str]:
        """Return every id issued so far."""
        return frozenset(self._seen)


def normalize_fenced_blocks(text: str) -> str:
    """Dedent fence markers and drop attribute suffixes from fence labels."""
    without_indent = FENCED_INDENT_PATTERN.sub(r"\1", text)

    def _strip_labels(match: re.Match[str]) -> str:
        fence, language, _extras = match.groups()
        return f"{fence}{language or ''}"

    return FENCE_LABEL_PATTERN.sub(_strip_labels, without_indent)


class _TreeCapture(Treeprocessor):
    """Convert the inline-processed element tree into typed nodes."""

    def __init__(self, md: Markdown, sink: list[Node]) -> None:
        super().__init__(md)
        self.sink = sink

    def run(self, root: EtreeElement) -> EtreeElement:
        """Store the converted top-level nodes and leave the tree untouched."""
        self.sink.extend(convert_children(root, self.md.htmlStash))
        return root


class _TreeCaptureExtension(Extension):
    def __init__(self, sink: list[Node]) -> None:
        super().__init__()
        self.sink = sink

    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]  # noqa: N802
        """Register the capture processor after inline processing."""
        md.treeprocessors.register(
            _TreeCapture(md, self.sink), "docsgraph_tree_capture", 15
        )


def parse_markdown(body: str) -> tuple[Node, ...]:
    """Parse ``body`` and return its top-level nodes."""
    sink: list[Node] = []
    md = Markdown(extensions=[*BASE_EXTENSIONS, _TreeCaptureExtension(sink)])
    md.convert(normalize_fenced_blocks(body))
    return tuple(sink)


def _unescape_chars(text: str) -> str:
    return _ESCAPED_CHAR_PATTERN.sub(lambda match: chr(int(match.group(1))), text)


def _decode_text(text: str, stash: HtmlStash) -> str:
    """Resolve stash placeholders and entities into literal text."""

    def _raw_html(match: re.Match[str]) -> str:
        index = int(match.group(1))
        if index >= len(stash.rawHtmlBlocks):
            return ""
        block = stash.rawHtmlBlocks[index]
        if not isinstance(block, str):
            return ""
        return _TAG_PATTERN.sub("", block)

    resolved = HTML_PLACEHOLDER_RE.sub(_raw_html, text)
    return html.unescape(_unescape_chars(resolved))


def _convert(element: EtreeElement, stash: HtmlStash) -> Node:
    tag = element.tag
    if tag == "img":
        return Image(
            url=_unescape_chars(element.get("src", "")),
            alt=_decode_text(element.get("alt", ""), stash),
        )
    children = convert_children(element, stash)
    if tag in _HEADING_LEVELS:
        return Heading(level=_HEADING_LEVELS[tag], children=children)
    if tag == "a":
        return Link(url=_unescape_chars(element.get("href", "")), children=children)
    return Element(tag=str(tag), children=children)


def convert_children(element: EtreeElement, stash: HtmlStash) -> tuple[Node, ...]:
    """Convert the text and children of an element tree node into typed nodes."""
    nodes: list[Node] = []
    if element.text:
        nodes.append(Text(_decode_text(element.text, stash)))
    for child in element:
        nodes.append(_convert(child, stash))
        if child.tail:
            nodes.append(Text(_decode_text(child.tail, stash)))
    return tuple(nodes)


def _collect_text(nodes: cabc.Iterable[Node], parts: list[str]) -> None:
    for node in nodes:
        match node:
            case Text(value=value):
                parts.append(value)
            case Image(alt=alt):
                parts.append(alt)
            case Link(children=children):
                _collect_text(children, parts)
            case Heading(children=children):
                _collect_text(children, parts)
                parts.append(" ")
            case Element(tag=tag, children=children):
                _collect_text(children, parts)
                if tag in _BLOCK_TAGS:
                    parts.append(" ")


def raw_text(nodes: cabc.Iterable[Node]) -> str:
    """Concatenate the text of ``nodes`` without collapsing whitespace."""
    parts: list[str] = []
    _collect_text(nodes, parts)
    return "".join(parts)


def to_plain_text(nodes: cabc.Iterable[Node]) -> str:
    """Return the whitespace-collapsed text of ``nodes``."""
    return _WHITESPACE_PATTERN.sub(" ", raw_text(nodes)).strip()


def iter_references(nodes: cabc.Iterable[Node]) -> cabc.Iterator[Link | Image]:
    """Yield every link and image in document order, at any depth."""
    for node in nodes:
        match node:
            case Link(children=children):
                yield node
                yield from iter_references(children)
            case Image():
                yield node
            case Heading(children=children) | Element(children=children):
                yield from iter_references(children)


def _build_sections(
    nodes: cabc.Sequence[Node], slugger: HeadingSlugger
) -> tuple[list[TableOfContentsHeading], list[SearchSection]]:
    headings: list[TableOfContentsHeading] = []
    sections: list[SearchSection] = []
    current_heading = ""
    current_anchor = ""
    current_nodes: list[Node] = []

    def _flush() -> None:
        if not current_nodes and not current_heading:
            return
        text = to_plain_text(current_nodes)
        if text:
            sections.append(
                SearchSection(heading=current_heading, anchor=current_anchor, text=text)
            )

    for node in nodes:
        if not isinstance(node, Heading):
            current_nodes.append(node)
            continue
        _flush()
        title = to_plain_text(node.children)
        anchor = slugger.slug(raw_text(node.children).strip())
        if 2 <= node.level <= 6:
            headings.append(
                TableOfContentsHeading(id=anchor, title=title, level=node.level)
            )
        current_heading = title
        current_anchor = anchor
        current_nodes = []
    _flush()
    return headings, sections


def _primary_title(nodes: cabc.Iterable[Node]) -> str | None:
    for node in nodes:
        if isinstance(node, Heading) and node.level == 1:
            title = to_plain_text(node.children)
            if title:
                return title
    return None


def extract_document(body: str, source_path: str) -> ExtractedDocument:
    """Extract the structural facts of a markdown body.

    Parameters
    ----------
    body : str
        Markdown without frontmatter.
    source_path : str
        Docs-root-relative path, used in error messages.

    Returns
    -------
    ExtractedDocument
        Headings, sections, text, and reference candidates.

    Raises
    ------
    DuplicateHeadingIdError
        If two top-level headings produce the same id.
    """
    nodes = parse_markdown(body)
    slugger = HeadingSlugger(source_path)
    headings, sections = _build_sections(nodes, slugger)

    links: list[ParsedHref] = []
    images: list[ParsedHref] = []
    for reference in iter_references(nodes):
        if isinstance(reference, Link):
            parsed = parse_markdown_doc_href(reference.url)
            if parsed is not None:
                links.append(parsed)
        else:
            parsed = parse_local_asset_href(reference.url)
            if parsed is not None:
                images.append(parsed)

    return ExtractedDocument(
        headings=headings,
        search_sections=sections,
        plain_text=to_plain_text(nodes),
        primary_title=_primary_title(nodes),
        links=links,
        images=images,
        heading_anchors=slugger.anchors,
    )


__all__ = [
    "BASE_EXTENSIONS",
    "Element",
    "ExtractedDocument",
    "Heading",
    "HeadingSlugger",
    "Image",
    "Link",
    "Node",
    "Text",
    "convert_children",
    "extract_document",
    "heading_slug",
    "iter_references",
    "normalize_fenced_blocks",
    "parse_markdown",
    "raw_text",
    "to_plain_text",
]
