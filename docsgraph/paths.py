r"""Derive sections, slugs, and route paths from document source paths.

Every function here is pure: the same source path and override always produce
the same location, which keeps regeneration idempotent.

Example
-------
>>> from docsgraph.paths import derive_doc_location
>>> location = derive_doc_location(
...     "patcher/Getting Started!.md", None, section_ids={"patcher"}
... )
>>> location.route_path
'/patcher/getting-started'
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import re
import typing as typ
import unicodedata

from docsgraph._constants import ROOT_SECTION_ID
from docsgraph.errors import ConfigurationError

if typ.TYPE_CHECKING:
    from docsgraph.config import SectionConfig

MARKDOWN_EXTENSION_PATTERN = re.compile(r"\.md$", re.IGNORECASE)
_DIACRITICS_PATTERN = re.compile("[\u0300-\u036f]")
_SEPARATOR_PATTERN = re.compile(r"[_\s]+")
_REPEATED_HYPHENS = re.compile(r"-{2,}")
_WORD_START_PATTERN = re.compile(r"\b\w")


@dc.dataclass(slots=True, frozen=True)
class DocLocation:
    """Routing information derived from a source path.

    Attributes
    ----------
    section_id : str
        Owning section, or ``_root`` when the first directory is not a
        registered section.
    content_slug : str
        Path below the section, without the markdown extension.
    slug : str
        Normalized URL slug (override or content slug).
    route_path : str
        Public route, ``/{slug}`` or ``/{section_id}/{slug}``.
    category : str
        Intervening directories joined by ``" / "``.
    """

    section_id: str
    content_slug: str
    slug: str
    route_path: str
    category: str


def strip_markdown_extension(file_path: str) -> str:
    """Remove a trailing ``.md`` extension, ignoring case."""
    return MARKDOWN_EXTENSION_PATTERN.sub("", file_path)


def slugify(value: str) -> str:
    """Normalize one path segment into a URL-safe slug.

    Diacritics are stripped after NFKD decomposition, anything other than
    letters, digits, whitespace, ``_`` and ``-`` is dropped, and whitespace
    and underscore runs collapse into single hyphens.
    """
    decomposed = _DIACRITICS_PATTERN.sub("", unicodedata.normalize("NFKD", value))
    kept = "".join(
        char for char in decomposed if char.isalnum() or char in "_-" or char.isspace()
    )
    slug = _SEPARATOR_PATTERN.sub("-", kept.strip().lower())
    return _REPEATED_HYPHENS.sub("-", slug).strip("-")


def slugify_path(value: str, source_path: str) -> str:
    """Slugify every ``/``-delimited segment of ``value``.

    Raises
    ------
    ConfigurationError
        If ``value`` is empty or whitespace-only, or a segment normalizes to
        an empty string (for example a segment made only of emoji).
    """
    normalized = value.strip().strip("/")
    if not normalized.strip():
        msg = f"Invalid empty slug override in '{source_path}'"
        raise ConfigurationError(msg)

    slug_segments: list[str] = []
    for segment in (part for part in normalized.split("/") if part):
        slugged = slugify(segment)
        if not slugged:
            msg = (
                f"Slug segment '{segment}' in '{source_path}' produced an empty slug "
                "(contains only special characters or emoji)"
            )
            raise ConfigurationError(msg)
        slug_segments.append(slugged)
    return "/".join(slug_segments)


def resolve_section_id(dir_name: str, section_ids: cabc.Container[str]) -> str:
    """Return ``dir_name`` when it names a registered section, else the root id."""
    if dir_name != ROOT_SECTION_ID and dir_name in section_ids:
        return dir_name
    return ROOT_SECTION_ID


def derive_doc_location(
    source_path: str,
    slug_override: str | None,
    *,
    section_ids: cabc.Container[str],
) -> DocLocation:
    """Derive section, slugs, route path, and category for a document.

    Parameters
    ----------
    source_path : str
        Docs-root-relative POSIX path such as ``patcher/advanced/setup.md``.
    slug_override : str, optional
        Frontmatter ``slug``; replaces the content slug when not ``None``.
    section_ids : Container[str]
        Registered section identifiers.

    Returns
    -------
    DocLocation
        The derived routing information.

    Raises
    ------
    ConfigurationError
        If the path has no segments or the slug cannot be normalized.
    """
    parts = [part for part in strip_markdown_extension(source_path).split("/") if part]
    if not parts:
        msg = f"Invalid docs path: {source_path}"
        raise ConfigurationError(msg)

    section_id = ROOT_SECTION_ID
    category = ""
    if len(parts) == 1:
        content_slug = parts[0]
    else:
        top_level_dir = parts[0]
        section_id = resolve_section_id(top_level_dir, section_ids)
        if section_id == ROOT_SECTION_ID:
            content_slug = "/".join(parts)
            category = top_level_dir
        else:
            content_slug = "/".join(parts[1:])
            category = " / ".join(parts[1:-1])

    slug_source = slug_override if slug_override is not None else content_slug
    slug = slugify_path(slug_source, source_path)
    if section_id == ROOT_SECTION_ID:
        route_path = f"/{slug}"
    else:
        route_path = f"/{section_id}/{slug}"
    return DocLocation(
        section_id=section_id,
        content_slug=content_slug,
        slug=slug,
        route_path=route_path,
        category=category,
    )


def title_case(value: str) -> str:
    """Turn a file name into a title: separators become spaces, words capitalized."""
    spaced = value.replace("_", " ").replace("-", " ")
    return _WORD_START_PATTERN.sub(lambda match: match.group(0).upper(), spaced)


def build_edit_url(
    section_id: str, source_path: str, section: SectionConfig, edit_base_url: str
) -> str:
    """Return the "edit this page" URL in the section's source repository.

    Raises
    ------
    ConfigurationError
        If a non-root document does not live under its section directory.
    """
    repo = section.repo
    repo_relative_path = source_path
    if section_id != ROOT_SECTION_ID:
        prefix = f"{section_id}/"
        if not source_path.startswith(prefix):
            msg = (
                f"Source path '{source_path}' does not match "
                f"section prefix '{prefix}'"
            )
            raise ConfigurationError(msg)
        repo_relative_path = source_path[len(prefix) :]
    return (
        f"{edit_base_url}/{repo.name}/edit/{repo.branch}/"
        f"{repo.docs_path}/{repo_relative_path}"
    )


__all__ = [
    "DocLocation",
    "build_edit_url",
    "derive_doc_location",
    "resolve_section_id",
    "slugify",
    "slugify_path",
    "strip_markdown_extension",
    "title_case",
]
