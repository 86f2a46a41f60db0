"""Check every internal link, anchor, and image reference of a document set.

Validation is collect-all: every document is inspected and every problem is
recorded before a single :class:`ReferenceValidationError` summarizing all
of them is raised. No I/O happens here.
"""

from __future__ import annotations

import collections.abc as cabc
import logging
import typing as typ
from urllib.parse import unquote

from docsgraph.errors import PathEscapeError, ReferenceValidationError
from docsgraph.hrefs import resolve_doc_relative_path

if typ.TYPE_CHECKING:
    from docsgraph.hrefs import ParsedHref
    from docsgraph.markdown_parser import ExtractedDocument

logger = logging.getLogger(__name__)


def decode_hash(hash_part: str) -> str:
    """Percent-decode an anchor; malformed encodings are returned verbatim.

    Examples
    --------
    >>> decode_hash("caf%C3%A9")
    'café'
    >>> decode_hash("bad%FF")
    'bad%FF'
    """
    try:
        return unquote(hash_part, errors="strict")
    except UnicodeDecodeError:
        return hash_part


class ValidationReporter:
    """Accumulate reference issues and raise them together."""

    def __init__(self) -> None:
        self.issues: list[str] = []

    def report(self, message: str) -> None:
        """Record one issue."""
        self.issues.append(message)

    def raise_if_any(self) -> None:
        """Raise ``ReferenceValidationError`` listing every recorded issue."""
        if self.issues:
            logger.info("reference validation found %d issue(s)", len(self.issues))
            raise ReferenceValidationError(self.issues)


def _check_link(
    source_path: str,
    link: ParsedHref,
    documents: cabc.Mapping[str, ExtractedDocument],
    reporter: ValidationReporter,
) -> None:
    try:
        target = resolve_doc_relative_path(source_path, link.target_path)
    except PathEscapeError as exc:
        reporter.report(
            f"Invalid markdown link in '{source_path}': '{link.full_href}' ({exc})"
        )
        return

    target_doc = documents.get(target)
    if target_doc is None:
        reporter.report(
            f"Unresolved markdown link in '{source_path}': '{link.full_href}' "
            f"resolves to '{target}'"
        )
        return

    if not link.hash:
        return
    anchor = decode_hash(link.hash)
    if anchor not in target_doc.heading_anchors:
        reporter.report(
            f"Unresolved markdown anchor in '{source_path}': '{link.full_href}' "
            f"points to missing '#{anchor}' in '{target}'"
        )


def _check_image(
    source_path: str,
    image: ParsedHref,
    asset_paths: cabc.Container[str],
    reporter: ValidationReporter,
) -> None:
    try:
        target = resolve_doc_relative_path(source_path, image.target_path)
    except PathEscapeError as exc:
        reporter.report(
            f"Invalid image link in '{source_path}': '{image.full_href}' ({exc})"
        )
        return

    if target not in asset_paths:
        reporter.report(
            f"Unresolved image link in '{source_path}': '{image.full_href}' "
            f"resolves to '{target}'"
        )


def validate_references(
    documents: cabc.Mapping[str, ExtractedDocument],
    asset_paths: cabc.Collection[str],
) -> None:
    """Validate every candidate reference of ``documents``.

    Parameters
    ----------
    documents : Mapping[str, ExtractedDocument]
        Extraction results keyed by docs-root-relative source path, in
        discovery order.
    asset_paths : Collection[str]
        Known asset paths.

    Raises
    ------
    ReferenceValidationError
        If any link target, anchor, or image cannot be resolved. Its
        ``issues`` attribute lists every problem in discovery order.
    """
    known_assets = frozenset(asset_paths)
    reporter = ValidationReporter()
    for source_path, document in documents.items():
        for link in document.links:
            _check_link(source_path, link, documents, reporter)
        for image in document.images:
            _check_image(source_path, image, known_assets, reporter)
    reporter.raise_if_any()


__all__ = ["ValidationReporter", "decode_hash", "validate_references"]
