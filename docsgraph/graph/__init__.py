"""Build, validate, and query the docs graph.

The :class:`DocsGraphBuilder` turns a markdown tree into a
:class:`~docsgraph.models.DocsGraph`; :class:`DocsRepository` and
:class:`DocsNavigation` serve lookups over its runtime projection.
"""

from .assembler import (
    DocsGraphBuilder,
    SourceTree,
    discover_sources,
    organize_sections,
)
from .assets import collect_asset_metadata, probe_image_dimensions
from .navigation import DocsNavigation, Pagination, RouteData
from .repository import DocsRepository, validate_runtime_graph
from .validator import validate_references

__all__ = [
    "DocsGraphBuilder",
    "DocsNavigation",
    "DocsRepository",
    "Pagination",
    "RouteData",
    "SourceTree",
    "collect_asset_metadata",
    "discover_sources",
    "organize_sections",
    "probe_image_dimensions",
    "validate_references",
    "validate_runtime_graph",
]
