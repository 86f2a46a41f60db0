"""Tests for writing the JSON build artifacts.

``generate_artifacts`` builds the graph and search index and then writes four
files into the configured output directory. These tests check their shapes,
that regeneration is byte-stable apart from the timestamp, and that nothing
is written for an invalid tree or outside the workspace.
"""

from __future__ import annotations

from pathlib import Path

import msgspec
import pytest

from docsgraph.artifacts import (
    build_site_public_config,
    encode_json,
    generate_artifacts,
    write_json_file,
)
from docsgraph.errors import PathEscapeError, ReferenceValidationError
from docsgraph.graph import DocsGraphBuilder, DocsRepository
from docsgraph.search import SearchIndex

ARTIFACT_TREE = {
    "index.md": "# Home\n\nWelcome to the manual.\n",
    "patcher/intro.md": "# Intro\n\n## Install\n\nRun the installer.\n",
}


def test_generate_writes_every_artifact(docs_workspace, clock, make_png) -> None:
    """The four artifacts are written in a fixed order."""
    config = docs_workspace({**ARTIFACT_TREE, "patcher/img/d.png": make_png(3, 2)})

    result = generate_artifacts(config, builder=DocsGraphBuilder(config, clock=clock))

    assert [path.name for path in result.written] == [
        "docs-graph.json",
        "docs-runtime-graph.json",
        "search-index.json",
        "site-public.json",
    ], f"unexpected artifacts {result.written!r}"
    assert all(path.parent == config.output_dir for path in result.written)

    graph_json = msgspec.json.decode(result.written[0].read_bytes())
    assert graph_json["generated_at"] == "2024-05-01T12:00:00.000Z"
    assert graph_json["asset_metadata"] == {
        "patcher/img/d.png": {"width": 3, "height": 2}
    }, "asset metadata is serialized by path"

    runtime_json = msgspec.json.decode(result.written[1].read_bytes())
    assert "plain_text" not in runtime_json["docs"][0], "runtime graph is slimmer"
    assert DocsRepository.load(result.written[1]).all_routes() == [
        "/index",
        "/patcher/intro",
    ], "runtime graph loads back"

    index = SearchIndex.load(result.written[2])
    assert [hit.url for hit in index.search("installer")] == ["/patcher/intro"]


def test_regeneration_is_stable(docs_workspace, clock) -> None:
    """Two runs over the same tree produce identical bytes."""
    config = docs_workspace(ARTIFACT_TREE)

    first = generate_artifacts(config, builder=DocsGraphBuilder(config, clock=clock))
    first_bytes = [path.read_bytes() for path in first.written]
    second = generate_artifacts(config, builder=DocsGraphBuilder(config, clock=clock))

    assert [path.read_bytes() for path in second.written] == first_bytes, (
        "artifacts must be deterministic for a fixed clock"
    )


def test_invalid_tree_writes_nothing(docs_workspace, clock) -> None:
    """Validation failures abort before any file is written."""
    config = docs_workspace({"index.md": "[Broken](missing.md)\n"})

    with pytest.raises(ReferenceValidationError):
        generate_artifacts(config, builder=DocsGraphBuilder(config, clock=clock))

    assert not config.output_dir.exists(), "no artifact should be written"


def test_site_public_config_shape(docs_workspace) -> None:
    """Public config exposes site metadata, section icons, and the site URL."""
    config = docs_workspace({"index.md": "Home.\n"})

    public = build_site_public_config(config)

    assert public["site"]["title"] == "Example Manual", "title defaults to org+name"
    assert public["site"]["header_buttons"] == [
        {"href": "https://github.com/example", "label": "GitHub", "icon": "github"}
    ]
    assert public["sections"] == {
        "_root": {"icon": ""},
        "patcher": {"icon": "wrench"},
        "cli": {"icon": "terminal"},
    }
    assert public["site_url"] == "https://docs.example.test"


def test_write_refuses_paths_outside_workspace(tmp_path: Path) -> None:
    """Artifacts may only be written inside the workspace root."""
    workspace = tmp_path / "workspace"
    workspace.mkdir()

    with pytest.raises(PathEscapeError, match="outside the workspace"):
        write_json_file(tmp_path / "escape.json", {}, workspace_root=workspace)

    written = write_json_file(
        workspace / "out" / "ok.json", {"a": 1}, workspace_root=workspace
    )
    assert written.read_bytes() == b'{\n  "a": 1\n}\n'


def test_encode_json_is_indented_with_newline() -> None:
    """Encoded JSON is pretty-printed and newline-terminated."""
    assert encode_json({"b": [1]}) == b'{\n  "b": [\n    1\n  ]\n}\n'
