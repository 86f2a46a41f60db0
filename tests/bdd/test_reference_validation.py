"""Behaviour tests for reference validation during graph assembly.

These pytest-bdd scenarios build a small docs tree with the ``docs_workspace``
fixture and check that the graph builder accepts resolvable links and rejects
broken links, anchors, and images with a single collect-all error.

Usage
-----
Run ``pytest tests/bdd/test_reference_validation.py -v`` after installing the
test extra (``pip install -e .[test]``). The scenarios only touch ``tmp_path``.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from pytest_bdd import given, parsers, scenarios, then, when

from docsgraph.errors import ReferenceValidationError
from docsgraph.graph import DocsGraphBuilder

FEATURE_FILE = (
    Path(__file__).resolve().parents[2] / "features" / "reference_validation.feature"
)
scenarios(FEATURE_FILE)


@pytest.fixture
def scenario_state() -> dict[str, object]:
    """Return a mutable dict used to share scenario state across BDD steps."""
    return {}


@given("a docs tree where the patcher intro links to the cli usage flags")
def given_linked_tree(docs_workspace, scenario_state: dict[str, object]) -> None:
    """Lay out two sections joined by an anchored link."""
    scenario_state["config"] = docs_workspace(
        {
            "patcher/intro.md": "# Intro\n\nSee [flags](../cli/usage.md#flags).\n",
            "cli/usage.md": "# Usage\n\n## Flags\n\nAll flags.\n",
        }
    )


@given("a docs tree with a missing page link and a missing anchor")
def given_broken_links(docs_workspace, scenario_state: dict[str, object]) -> None:
    """Lay out a page with one dangling link and one dangling anchor."""
    scenario_state["config"] = docs_workspace(
        {
            "patcher/intro.md": (
                "# Intro\n\n[Gone](missing.md) and [Nowhere](setup.md#nowhere).\n"
            ),
            "patcher/setup.md": "# Setup\n\n## Install\n\nSteps.\n",
        }
    )


@given("a docs tree with an image that does not exist")
def given_missing_image(docs_workspace, scenario_state: dict[str, object]) -> None:
    """Lay out a page referencing an absent image."""
    scenario_state["config"] = docs_workspace(
        {"patcher/intro.md": "# Intro\n\n![Diagram](img/diagram.png)\n"}
    )


@when("I build the docs graph")
def when_build_graph(clock, scenario_state: dict[str, object]) -> None:
    """Build the graph and capture either the result or the validation error."""
    builder = DocsGraphBuilder(scenario_state["config"], clock=clock)
    try:
        scenario_state["graph"] = builder.build()
    except ReferenceValidationError as exc:
        scenario_state["error"] = exc


@then(parsers.parse('the graph contains the routes "{first}" and "{second}"'))
def then_graph_routes(
    scenario_state: dict[str, object], first: str, second: str
) -> None:
    """Assert both routes are present in the built graph."""
    graph = scenario_state["graph"]
    routes = {doc.route_path for doc in graph.docs}
    assert {first, second} <= routes, f"missing routes in {sorted(routes)!r}"


@then("no validation issues are reported")
def then_no_issues(scenario_state: dict[str, object]) -> None:
    """Assert the build succeeded."""
    assert "error" not in scenario_state, "build should not fail"


@then(parsers.parse("the build fails with {count:d} validation issues"))
def then_issue_count(scenario_state: dict[str, object], count: int) -> None:
    """Assert the number of collected issues."""
    error = scenario_state.get("error")
    assert isinstance(error, ReferenceValidationError), "build should have failed"
    assert len(error.issues) == count, f"unexpected issues {error.issues!r}"


@then(parsers.parse('an issue mentions "{fragment}"'))
def then_issue_mentions(scenario_state: dict[str, object], fragment: str) -> None:
    """Assert at least one issue contains ``fragment``."""
    error = scenario_state["error"]
    assert any(fragment in issue for issue in error.issues), (
        f"{fragment!r} not found in {error.issues!r}"
    )
