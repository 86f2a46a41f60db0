"""Tests for the single-file ``llms.txt`` export."""

from __future__ import annotations

import dataclasses as dc

import pytest

from docsgraph.errors import GraphIntegrityError
from docsgraph.graph import DocsGraphBuilder
from docsgraph.llms import build_llms_document, docs_dir_reader

LLMS_TREE = {
    "index.md": "# Home\n\nWelcome.\n",
    "patcher/intro.md": "---\nllms: false\n---\n# Hidden\n\nInternal notes.\n",
    "cli/usage.md": "---\ntitle: Usage Guide\n---\n\nRun it.\n\n",
    "cli/empty.md": "---\ntitle: Empty\n---\n",
}


def test_export_concatenates_pages_by_section(docs_workspace, clock) -> None:
    """Opted-out and empty pages are skipped along with emptied sections."""
    config = docs_workspace(LLMS_TREE)
    graph = DocsGraphBuilder(config, clock=clock).build()

    document = build_llms_document(
        graph,
        title=config.site.title,
        description=config.site.description,
        read_source=docs_dir_reader(config.docs_dir),
    )

    assert document == (
        "# Example Manual\n"
        "\n"
        "Example project documentation\n"
        "\n"
        "---\n"
        "## Overview\n"
        "\n"
        "### Home\n"
        "Source: /index\n"
        "\n"
        "# Home\n"
        "\n"
        "Welcome.\n"
        "\n"
        "---\n"
        "## CLI\n"
        "\n"
        "### Usage Guide\n"
        "Source: /cli/usage\n"
        "\n"
        "Run it.\n"
    ), f"unexpected export {document!r}"


def test_export_reads_through_the_given_reader(docs_workspace, clock) -> None:
    """Sources come from the injected reader, not the filesystem."""
    config = docs_workspace({"index.md": "On disk.\n"})
    graph = DocsGraphBuilder(config, clock=clock).build()

    document = build_llms_document(
        graph, title="T", description="D", read_source=lambda path: f"From {path}\n"
    )

    assert document.endswith("From index.md\n"), "reader output should be used"


def test_missing_route_is_an_integrity_error(docs_workspace, clock) -> None:
    """A section listing an unknown route fails the export."""
    config = docs_workspace({"index.md": "Home.\n"})
    graph = DocsGraphBuilder(config, clock=clock).build()
    section = dc.replace(graph.sections[0], pages=["/index", "/ghost"])
    broken = dc.replace(graph, sections=[section])

    with pytest.raises(GraphIntegrityError, match="'/ghost'"):
        build_llms_document(
            broken,
            title="T",
            description="D",
            read_source=docs_dir_reader(config.docs_dir),
        )
