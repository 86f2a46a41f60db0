"""Exception hierarchy raised while generating and consuming the docs graph.

Every error is fatal for a generation run: nothing is retried and no partial
artifact is written. The CLI reports the message and exits non-zero.
"""

from __future__ import annotations

import collections.abc as cabc


class DocsGraphError(Exception):
    """Base class for every docs graph failure."""


class ConfigurationError(DocsGraphError, ValueError):
    """Raised for invalid site configuration, frontmatter, or slug overrides."""


class PathEscapeError(DocsGraphError, ValueError):
    """Raised when a path resolves outside the docs root or the workspace."""


class DuplicateRouteError(DocsGraphError):
    """Raised when two documents resolve to the same route path."""


class DuplicateSourceError(DocsGraphError):
    """Raised when the same source path is discovered twice."""


class DuplicateHeadingIdError(DocsGraphError):
    """Raised when two headings of one document produce the same anchor id."""


class GraphIntegrityError(DocsGraphError):
    """Raised when a serialized runtime graph breaks its structural invariants."""


class ReferenceValidationError(DocsGraphError):
    """Raised when internal links, anchors, or images cannot be resolved.

    Attributes
    ----------
    issues : list[str]
        Every problem found during the validation pass, in discovery order.
    """

    def __init__(self, issues: cabc.Iterable[str]) -> None:
        self.issues = list(issues)
        super().__init__("\n".join(self.issues))


__all__ = [
    "ConfigurationError",
    "DocsGraphError",
    "DuplicateHeadingIdError",
    "DuplicateRouteError",
    "DuplicateSourceError",
    "GraphIntegrityError",
    "PathEscapeError",
    "ReferenceValidationError",
]
