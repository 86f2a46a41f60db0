"""Tests for runtime graph integrity checks and repository lookups."""

from __future__ import annotations

import dataclasses as dc
from pathlib import Path

import msgspec
import pytest

from docsgraph.errors import GraphIntegrityError
from docsgraph.graph import DocsGraphBuilder, DocsRepository, validate_runtime_graph
from docsgraph.models import RuntimeDocNode, RuntimeDocsGraph, SectionNode


def _doc(
    route_path: str, source_path: str, section_id: str = "guide"
) -> RuntimeDocNode:
    slug = route_path.rsplit("/", 1)[-1]
    return RuntimeDocNode(
        source_path=source_path,
        section_id=section_id,
        section_title=section_id.title(),
        content_slug=slug,
        slug=slug,
        route_path=route_path,
        category="",
        title=slug.title(),
        sidebar_label=slug.title(),
        headings=[],
        edit_url="",
    )


def _section(section_id: str = "guide", pages: list[str] | None = None) -> SectionNode:
    return SectionNode(
        id=section_id,
        title=section_id.title(),
        order=0,
        base_path=section_id,
        is_page_anchor=True,
        icon="",
        pages=pages if pages is not None else ["/guide/intro"],
    )


def _graph(
    docs: list[RuntimeDocNode] | None = None,
    sections: list[SectionNode] | None = None,
) -> RuntimeDocsGraph:
    return RuntimeDocsGraph(
        generated_at="2024-05-01T12:00:00.000Z",
        docs=docs if docs is not None else [_doc("/guide/intro", "guide/intro.md")],
        sections=sections if sections is not None else [_section()],
    )


def test_valid_graph_passes() -> None:
    """A consistent graph raises nothing."""
    validate_runtime_graph(_graph())


@pytest.mark.parametrize(
    ("graph", "fragment"),
    [
        (_graph(sections=[_section(""), _section()]), "empty id"),
        (_graph(sections=[_section(), _section()]), "duplicate section id"),
        (_graph(docs=[_doc("guide/intro", "guide/intro.md")]), "must start with '/'"),
        (_graph(docs=[_doc("/guide/intro", "guide/intro.txt")]), "not a markdown"),
        (
            _graph(docs=[_doc("/guide/intro", "guide/intro.md", "other")]),
            "unknown section 'other'",
        ),
        (
            _graph(
                docs=[
                    _doc("/guide/intro", "guide/intro.md"),
                    _doc("/guide/intro", "guide/copy.md"),
                ]
            ),
            "duplicate route path",
        ),
        (
            _graph(sections=[_section(pages=["/guide/intro", "/guide/gone"])]),
            "unknown route '/guide/gone'",
        ),
    ],
)
def test_broken_graphs_are_rejected(graph: RuntimeDocsGraph, fragment: str) -> None:
    """Each structural violation raises ``GraphIntegrityError``."""
    with pytest.raises(GraphIntegrityError, match=fragment):
        validate_runtime_graph(graph)


def test_lookups_by_route_source_and_section() -> None:
    """The repository indexes documents and sections."""
    repository = DocsRepository(_graph())

    assert repository.lookup_by_route("/guide/intro") is repository.docs[0]
    assert repository.lookup_by_source("guide/intro.md") is repository.docs[0]
    assert repository.lookup_by_route("/missing") is None, "unknown routes are None"
    assert repository.get_section("guide") is repository.sections[0]
    assert repository.get_section("nope") is None, "unknown sections are None"
    assert repository.all_routes() == ["/guide/intro"]


def test_repository_rejects_invalid_graph() -> None:
    """Construction validates the graph first."""
    broken = dc.replace(_graph(), sections=[])

    with pytest.raises(GraphIntegrityError):
        DocsRepository(broken)


def test_load_round_trips_the_runtime_file(
    docs_workspace, clock, tmp_path: Path
) -> None:
    """A runtime graph written as JSON loads back into an equal repository."""
    config = docs_workspace(
        {"index.md": "# Home\n\n## Start\n\nGo.\n", "cli/usage.md": "Use it.\n"}
    )
    graph = DocsGraphBuilder(config, clock=clock).build()
    path = tmp_path / "runtime.json"
    path.write_bytes(msgspec.json.encode(graph.to_runtime()))

    repository = DocsRepository.load(path)

    assert repository.graph == graph.to_runtime(), "runtime graph should round-trip"
    assert repository.all_routes() == ["/index", "/cli/usage"]


def test_full_graph_file_also_loads(docs_workspace, clock, tmp_path: Path) -> None:
    """Extra fields of the full graph are ignored when loading."""
    config = docs_workspace({"index.md": "Home.\n"})
    graph = DocsGraphBuilder(config, clock=clock).build()
    path = tmp_path / "graph.json"
    path.write_bytes(msgspec.json.encode(graph))

    repository = DocsRepository.load(path)

    assert repository.all_routes() == ["/index"]


def test_load_rejects_undecodable_files(tmp_path: Path) -> None:
    """Bad JSON and wrong shapes are integrity errors."""
    garbage = tmp_path / "garbage.json"
    garbage.write_text("{not json", encoding="utf-8")
    wrong = tmp_path / "wrong.json"
    wrong.write_text('{"docs": 1}', encoding="utf-8")

    with pytest.raises(GraphIntegrityError, match="Cannot decode"):
        DocsRepository.load(garbage)
    with pytest.raises(GraphIntegrityError, match="Cannot decode"):
        DocsRepository.load(wrong)
