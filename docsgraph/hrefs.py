"""Classify markdown link and image targets and resolve them against the docs root.

Both the structural extractor (collecting candidate references) and the
reference validator (resolving them) rely on these helpers, as does the
render-time link rewriter.
"""

from __future__ import annotations

import dataclasses as dc
import posixpath
from urllib.parse import urlsplit

from docsgraph._constants import MARKDOWN_SUFFIX
from docsgraph.errors import PathEscapeError


@dc.dataclass(slots=True, frozen=True)
class ParsedHref:
    """An internal link or image target split into its parts.

    Attributes
    ----------
    full_href : str
        The raw href exactly as written in the markdown source.
    target_path : str
        Path component to resolve (``.md`` appended for extension-less links).
    query : str
        Text after the first ``?`` (without the ``?``).
    hash : str
        Text after the first ``#`` (without the ``#``).
    """

    full_href: str
    target_path: str
    query: str = ""
    hash: str = ""


def normalize_path(value: str) -> str:
    """Convert Windows separators to POSIX ones."""
    return value.replace("\\", "/")


def split_href(href: str) -> tuple[str, str, str]:
    """Return ``(pathname, query, hash)`` for ``href``; the hash is split first."""
    pathname, _, hash_part = href.partition("#")
    pathname, _, query = pathname.partition("?")
    return pathname, query, hash_part


def is_external_href(href: str) -> bool:
    """Return True for protocol-relative hrefs and absolute URLs with a scheme."""
    if href.startswith("//"):
        return True
    try:
        return bool(urlsplit(href).scheme)
    except ValueError:
        return False


def parse_markdown_doc_href(href: str) -> ParsedHref | None:
    """Return a document link candidate, or None for anything that is not one.

    Anchor-only and external hrefs are skipped, as are links whose path has
    a non-markdown extension. Extension-less paths get ``.md`` appended, or
    ``README.md`` when they end in ``/``.
    """
    if href.startswith("#") or is_external_href(href):
        return None

    pathname, query, hash_part = split_href(href)
    if not pathname:
        return None

    extension = posixpath.splitext(pathname)[1].lower()
    if extension and extension != MARKDOWN_SUFFIX:
        return None

    target_path = pathname
    if not extension:
        suffix = "README.md" if pathname.endswith("/") else MARKDOWN_SUFFIX
        target_path = f"{pathname}{suffix}"
    return ParsedHref(
        full_href=href, target_path=target_path, query=query, hash=hash_part
    )


def parse_local_asset_href(href: str) -> ParsedHref | None:
    """Return a local asset candidate for an image source, or None."""
    if href.startswith(("#", "/")) or is_external_href(href):
        return None

    pathname, query, hash_part = split_href(href)
    if not pathname or pathname.lower().endswith(MARKDOWN_SUFFIX):
        return None
    return ParsedHref(full_href=href, target_path=pathname, query=query, hash=hash_part)


def resolve_doc_relative_path(current_source_path: str, target_path: str) -> str:
    """Resolve ``target_path`` relative to the document at ``current_source_path``.

    A leading ``/`` makes the target relative to the docs root; otherwise it
    is joined with the current document's directory. ``.`` and ``..``
    segments are normalized.

    Raises
    ------
    PathEscapeError
        If the normalized path would leave the docs root.

    Examples
    --------
    >>> resolve_doc_relative_path("patcher/intro.md", "../cli/usage.md")
    'cli/usage.md'
    """
    if target_path.startswith("/"):
        normalized = posixpath.normpath(target_path[1:])
    else:
        current_dir = posixpath.dirname(current_source_path)
        normalized = posixpath.normpath(posixpath.join(current_dir, target_path))

    if normalized == ".." or normalized.startswith("../"):
        msg = f"Relative path escapes docs root: {target_path}"
        raise PathEscapeError(msg)
    return normalized


def with_query_and_hash(pathname: str, query: str, hash_part: str) -> str:
    """Reattach optional query and hash parts to ``pathname``."""
    query_part = f"?{query}" if query else ""
    hash_suffix = f"#{hash_part}" if hash_part else ""
    return f"{pathname}{query_part}{hash_suffix}"


__all__ = [
    "ParsedHref",
    "is_external_href",
    "normalize_path",
    "parse_local_asset_href",
    "parse_markdown_doc_href",
    "resolve_doc_relative_path",
    "split_href",
    "with_query_and_hash",
]
