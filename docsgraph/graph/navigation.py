"""Sidebar navigation, pagination, and per-route page data.

Everything here is derived from a
:class:`~docsgraph.graph.repository.DocsRepository` once, when
:class:`DocsNavigation` is constructed, and is read-only afterwards.
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import typing as typ

from docsgraph.errors import GraphIntegrityError

if typ.TYPE_CHECKING:
    from docsgraph.models import RuntimeDocNode, SectionNode, TableOfContentsHeading

    from .repository import DocsRepository


@dc.dataclass(slots=True, frozen=True)
class NavPage:
    """A page entry in the sidebar.

    Attributes
    ----------
    slug : str
        Route path relative to the section base path.
    title : str
        Sidebar label.
    page_title : str
        Full page title.
    """

    slug: str
    content_slug: str
    title: str
    page_title: str
    category: str
    route_path: str
    source_path: str


@dc.dataclass(slots=True, frozen=True)
class NavSection:
    """A sidebar section with its ordered pages."""

    id: str
    title: str
    base_path: str
    is_page_anchor: bool
    icon: str
    order: int
    pages: list[NavPage]


@dc.dataclass(slots=True, frozen=True)
class PaginationLink:
    """Neighbouring page reference used by prev/next links."""

    route_path: str
    title: str
    section_id: str
    section_title: str
    section_icon: str


@dc.dataclass(slots=True, frozen=True)
class Pagination:
    """Previous and next pages in flattened navigation order."""

    prev: PaginationLink | None = None
    next: PaginationLink | None = None


@dc.dataclass(slots=True, frozen=True)
class RouteData:
    """Everything a page template needs for one route."""

    id: str
    slug: str
    route_path: str
    entry: RuntimeDocNode
    section: NavSection
    page: NavPage
    headings: list[TableOfContentsHeading]
    title: str
    edit_url: str
    pagination: Pagination


def route_slug(route_path: str, base_path: str) -> str:
    """Return ``route_path`` relative to a section base path.

    Examples
    --------
    >>> route_slug("/patcher/intro", "patcher")
    'intro'
    >>> route_slug("/intro", "")
    'intro'
    """
    if not base_path:
        return route_path[1:]
    prefix = f"/{base_path}/"
    if not route_path.startswith(prefix):
        msg = f"Route '{route_path}' does not match section base path '{base_path}'"
        raise GraphIntegrityError(msg)
    return route_path[len(prefix) :]


class DocsNavigation:
    """Navigation tree and pagination over a docs repository."""

    def __init__(self, repository: DocsRepository) -> None:
        self.repository = repository
        self.sections = [
            self._build_section(section) for section in repository.sections
        ]
        self._page_info: dict[str, tuple[NavSection, NavPage]] = {
            page.route_path: (section, page)
            for section in self.sections
            for page in section.pages
        }
        self._pagination = _build_pagination(self.sections)

    def _build_section(self, section: SectionNode) -> NavSection:
        pages: list[NavPage] = []
        for route_path in section.pages:
            doc = self.repository.lookup_by_route(route_path)
            if doc is None:
                msg = f"Missing doc for route '{route_path}'"
                raise GraphIntegrityError(msg)
            pages.append(
                NavPage(
                    slug=route_slug(route_path, section.base_path),
                    content_slug=doc.content_slug,
                    title=doc.sidebar_label,
                    page_title=doc.title,
                    category=doc.category,
                    route_path=doc.route_path,
                    source_path=doc.source_path,
                )
            )
        return NavSection(
            id=section.id,
            title=section.title,
            base_path=section.base_path,
            is_page_anchor=section.is_page_anchor,
            icon=section.icon,
            order=section.order,
            pages=pages,
        )

    def page_info(self, route_path: str) -> tuple[NavSection, NavPage] | None:
        """Return the section and page served at ``route_path``."""
        return self._page_info.get(route_path)

    def page_info_for_slug(
        self, slug_parts: cabc.Sequence[str]
    ) -> tuple[NavSection, NavPage] | None:
        """Return the section and page for URL slug segments."""
        return self.page_info(f"/{'/'.join(slug_parts)}")

    def pagination(self, route_path: str) -> Pagination:
        """Return prev/next links for ``route_path`` (both None when unknown)."""
        return self._pagination.get(route_path, Pagination())

    def route_data(self, slug_parts: cabc.Sequence[str]) -> RouteData | None:
        """Bundle the page data for URL slug segments, or None for unknown routes."""
        info = self.page_info_for_slug(slug_parts)
        if info is None:
            return None
        section, page = info
        route_path = page.route_path
        entry = self.repository.lookup_by_source(page.source_path)
        if entry is None:
            msg = f"Missing docs graph entry for {page.source_path}"
            raise GraphIntegrityError(msg)
        return RouteData(
            id=entry.source_path,
            slug=route_path[1:],
            route_path=route_path,
            entry=entry,
            section=section,
            page=page,
            headings=entry.headings,
            title=entry.title,
            edit_url=entry.edit_url,
            pagination=self.pagination(route_path),
        )


def _build_pagination(sections: cabc.Sequence[NavSection]) -> dict[str, Pagination]:
    ordered = [
        PaginationLink(
            route_path=page.route_path,
            title=page.title,
            section_id=section.id,
            section_title=section.title,
            section_icon=section.icon,
        )
        for section in sections
        for page in section.pages
    ]
    return {
        link.route_path: Pagination(
            prev=ordered[index - 1] if index > 0 else None,
            next=ordered[index + 1] if index + 1 < len(ordered) else None,
        )
        for index, link in enumerate(ordered)
    }


__all__ = [
    "DocsNavigation",
    "NavPage",
    "NavSection",
    "Pagination",
    "PaginationLink",
    "RouteData",
    "route_slug",
]
