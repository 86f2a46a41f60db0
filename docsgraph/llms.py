"""Export the whole documentation set as a single ``llms.txt`` document."""

from __future__ import annotations

import collections.abc as cabc
import typing as typ

from docsgraph.errors import GraphIntegrityError
from docsgraph.frontmatter import parse_frontmatter

if typ.TYPE_CHECKING:
    from pathlib import Path

    from docsgraph.models import DocsGraph

SourceReader = cabc.Callable[[str], str]


def build_llms_document(
    graph: DocsGraph,
    *,
    title: str,
    description: str,
    read_source: SourceReader,
) -> str:
    """Concatenate every page's markdown body in navigation order.

    Pages whose frontmatter sets ``llms: false`` or whose body is empty are
    left out, as are sections left without pages.

    Parameters
    ----------
    graph : DocsGraph
        Assembled docs graph.
    title : str
        Site title used as the top-level heading.
    description : str
        Site description placed under the title.
    read_source : callable
        Returns the raw markdown for a docs-root-relative source path.

    Returns
    -------
    str
        The document, ending with exactly one newline.
    """
    docs_by_route = {doc.route_path: doc for doc in graph.docs}
    parts = [f"# {title}", "", description, ""]
    for section in graph.sections:
        section_parts: list[str] = []
        for route_path in section.pages:
            doc = docs_by_route.get(route_path)
            if doc is None:
                msg = f"Missing docs graph node for route '{route_path}'"
                raise GraphIntegrityError(msg)
            frontmatter, body = parse_frontmatter(
                read_source(doc.source_path), doc.source_path
            )
            content = body.strip()
            if not frontmatter.llms or not content:
                continue
            section_parts.extend(
                [f"### {doc.title}", f"Source: {doc.route_path}", "", content, ""]
            )
        if section_parts:
            parts.extend(["---", f"## {section.title}", "", *section_parts])
    return "\n".join(parts).rstrip() + "\n"


def docs_dir_reader(docs_dir: Path) -> SourceReader:
    """Return a reader for UTF-8 sources below ``docs_dir``."""

    def _read(source_path: str) -> str:
        return docs_dir.joinpath(*source_path.split("/")).read_text(encoding="utf-8")

    return _read


__all__ = ["SourceReader", "build_llms_document", "docs_dir_reader"]
