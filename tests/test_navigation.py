"""Tests for sidebar navigation, pagination, and route data."""

from __future__ import annotations

import pytest

from docsgraph.errors import GraphIntegrityError
from docsgraph.graph import DocsGraphBuilder, DocsNavigation, DocsRepository, Pagination
from docsgraph.graph.navigation import route_slug
from docsgraph.models import TableOfContentsHeading

NAV_TREE = {
    "index.md": "# Home\n\nWelcome.\n",
    "patcher/intro.md": (
        "---\nsidebar:\n  order: 1\n  label: Intro\n---\n"
        "# Patcher Introduction\n\n## Concepts\n\nPatches.\n"
    ),
    "patcher/advanced/hooks.md": "---\nsidebar_order: 2\n---\n# Hooks\n",
    "cli/usage.md": "# Usage\n",
}


@pytest.fixture
def navigation(docs_workspace, clock) -> DocsNavigation:
    """Navigation over ``NAV_TREE``."""
    graph = DocsGraphBuilder(docs_workspace(NAV_TREE), clock=clock).build()
    return DocsNavigation(DocsRepository.from_graph(graph))


def test_sections_list_pages_with_relative_slugs(navigation: DocsNavigation) -> None:
    """Page slugs are relative to their section's base path."""
    layout = {
        section.id: [(page.slug, page.title) for page in section.pages]
        for section in navigation.sections
    }

    assert layout == {
        "_root": [("index", "Home")],
        "patcher": [("intro", "Intro"), ("advanced/hooks", "Hooks")],
        "cli": [("usage", "Usage")],
    }, f"unexpected navigation {layout!r}"


def test_nav_page_keeps_page_title_and_category(navigation: DocsNavigation) -> None:
    """Sidebar entries carry the full title and category too."""
    info = navigation.page_info("/patcher/advanced/hooks")

    assert info is not None, "route should be known"
    section, page = info
    assert section.id == "patcher", "page belongs to patcher"
    assert (page.page_title, page.category) == ("Hooks", "advanced")


def test_pagination_crosses_section_boundaries(navigation: DocsNavigation) -> None:
    """Prev and next follow the flattened sidebar order."""
    pagination = navigation.pagination("/patcher/intro")

    assert pagination.prev is not None, "intro follows the root page"
    assert pagination.prev.route_path == "/index", "previous is the last root page"
    assert pagination.next is not None, "intro has a successor"
    assert (pagination.next.route_path, pagination.next.section_icon) == (
        "/patcher/advanced/hooks",
        "wrench",
    ), "next page stays in the section"


def test_pagination_ends_are_open(navigation: DocsNavigation) -> None:
    """The first page has no prev and the last page has no next."""
    assert navigation.pagination("/index").prev is None, "first page"
    assert navigation.pagination("/cli/usage").next is None, "last page"
    assert navigation.pagination("/unknown") == Pagination(), "unknown route"


def test_route_data_bundles_page_information(navigation: DocsNavigation) -> None:
    """Route data combines the entry, navigation, and pagination."""
    data = navigation.route_data(["patcher", "intro"])

    assert data is not None, "route should resolve"
    assert (data.id, data.slug, data.route_path) == (
        "patcher/intro.md",
        "patcher/intro",
        "/patcher/intro",
    ), "identifiers derive from the route"
    assert data.title == "Patcher Introduction", "page title comes from the H1"
    assert data.headings == [
        TableOfContentsHeading(id="concepts", title="Concepts", level=2)
    ], "headings feed the table of contents"
    assert data.edit_url.endswith("/example-patcher/edit/dev/docs/intro.md")
    assert data.pagination == navigation.pagination("/patcher/intro")


def test_unknown_route_has_no_data(navigation: DocsNavigation) -> None:
    """Unknown slugs yield None rather than raising."""
    assert navigation.route_data(["missing"]) is None
    assert navigation.page_info_for_slug(["cli", "usage"]) is not None


def test_route_slug_requires_matching_base_path() -> None:
    """Routes outside the section base path are integrity errors."""
    with pytest.raises(GraphIntegrityError, match="does not match section base"):
        route_slug("/cli/usage", "patcher")
