"""Read-only lookups over a validated runtime docs graph.

A :class:`DocsRepository` is built once, either straight from a freshly built
graph or by loading ``docs-runtime-graph.json``, and then shared by every
consumer for the lifetime of a render.
"""

from __future__ import annotations

import typing as typ

import msgspec

from docsgraph.errors import GraphIntegrityError
from docsgraph.models import RuntimeDocsGraph

if typ.TYPE_CHECKING:
    from pathlib import Path

    from docsgraph.models import DocsGraph, RuntimeDocNode, SectionNode


def validate_runtime_graph(graph: RuntimeDocsGraph) -> None:
    """Check the structural invariants of a runtime graph.

    Raises
    ------
    GraphIntegrityError
        If section ids are empty or repeated, a route does not start with
        ``/``, a source path is not markdown, a document names an unknown
        section, two documents share a route, or a section lists a route no
        document owns.
    """
    section_ids: set[str] = set()
    for section in graph.sections:
        if not section.id:
            msg = "Runtime graph contains a section with an empty id"
            raise GraphIntegrityError(msg)
        if section.id in section_ids:
            msg = f"Runtime graph contains duplicate section id '{section.id}'"
            raise GraphIntegrityError(msg)
        section_ids.add(section.id)

    routes: set[str] = set()
    for doc in graph.docs:
        if not doc.route_path.startswith("/"):
            msg = (
                f"Route path '{doc.route_path}' of '{doc.source_path}' "
                "must start with '/'"
            )
            raise GraphIntegrityError(msg)
        if not doc.source_path.endswith(".md"):
            msg = f"Source path '{doc.source_path}' is not a markdown file"
            raise GraphIntegrityError(msg)
        if doc.section_id not in section_ids:
            msg = (
                f"Document '{doc.source_path}' references unknown section "
                f"'{doc.section_id}'"
            )
            raise GraphIntegrityError(msg)
        if doc.route_path in routes:
            msg = f"Runtime graph contains duplicate route path '{doc.route_path}'"
            raise GraphIntegrityError(msg)
        routes.add(doc.route_path)

    for section in graph.sections:
        for route in section.pages:
            if route not in routes:
                msg = f"Section '{section.id}' references unknown route '{route}'"
                raise GraphIntegrityError(msg)


class DocsRepository:
    """Immutable route and source lookups over a runtime docs graph."""

    def __init__(self, graph: RuntimeDocsGraph) -> None:
        validate_runtime_graph(graph)
        self.graph = graph
        self._by_route = {doc.route_path: doc for doc in graph.docs}
        self._by_source = {doc.source_path: doc for doc in graph.docs}
        self._sections = {section.id: section for section in graph.sections}

    @classmethod
    def from_graph(cls, graph: DocsGraph) -> DocsRepository:
        """Build a repository from a full graph via its runtime projection."""
        return cls(graph.to_runtime())

    @classmethod
    def load(cls, path: Path) -> DocsRepository:
        """Load ``docs-runtime-graph.json`` (or the full graph file) from disk.

        Raises
        ------
        GraphIntegrityError
            If the file does not decode into a runtime graph or breaks its
            invariants.
        """
        try:
            graph = msgspec.json.decode(path.read_bytes(), type=RuntimeDocsGraph)
        except msgspec.DecodeError as exc:
            msg = f"Cannot decode runtime graph '{path}': {exc}"
            raise GraphIntegrityError(msg) from exc
        return cls(graph)

    @property
    def docs(self) -> list[RuntimeDocNode]:
        """Documents in graph order."""
        return self.graph.docs

    @property
    def sections(self) -> list[SectionNode]:
        """Sections in graph order."""
        return self.graph.sections

    def lookup_by_route(self, route_path: str) -> RuntimeDocNode | None:
        """Return the document served at ``route_path``."""
        return self._by_route.get(route_path)

    def lookup_by_source(self, source_path: str) -> RuntimeDocNode | None:
        """Return the document built from ``source_path``."""
        return self._by_source.get(source_path)

    def get_section(self, section_id: str) -> SectionNode | None:
        """Return the populated section with ``section_id``."""
        return self._sections.get(section_id)

    def all_routes(self) -> list[str]:
        """Return every route path in graph order."""
        return [doc.route_path for doc in self.graph.docs]


__all__ = ["DocsRepository", "validate_runtime_graph"]
