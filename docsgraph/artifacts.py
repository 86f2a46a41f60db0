"""Generate and persist the JSON artifacts of one docs build.

Artifacts are written only after the graph and the search index were both
built successfully, so a failed run leaves the previous artifacts untouched.
"""

from __future__ import annotations

import dataclasses as dc
import logging
import os
import typing as typ
from pathlib import Path

import msgspec

from docsgraph._constants import (
    DOCS_GRAPH_FILENAME,
    DOCS_RUNTIME_GRAPH_FILENAME,
    SEARCH_INDEX_FILENAME,
    SITE_PUBLIC_CONFIG_FILENAME,
)
from docsgraph.errors import PathEscapeError
from docsgraph.graph import DocsGraphBuilder
from docsgraph.search import SearchIndex

if typ.TYPE_CHECKING:
    from docsgraph.config import SiteConfig
    from docsgraph.models import DocsGraph

logger = logging.getLogger(__name__)


@dc.dataclass(slots=True, frozen=True)
class GenerationResult:
    """The graph and search index of a run with the files written for them."""

    graph: DocsGraph
    search_index: SearchIndex
    written: list[Path]


def encode_json(payload: object) -> bytes:
    """Encode ``payload`` as indented JSON with a trailing newline."""
    return msgspec.json.format(msgspec.json.encode(payload), indent=2) + b"\n"


def write_json_file(path: Path, payload: object, *, workspace_root: Path) -> Path:
    """Write ``payload`` to ``path`` after checking it stays in the workspace.

    Raises
    ------
    PathEscapeError
        If ``path`` resolves outside ``workspace_root``.
    """
    root = Path(os.path.realpath(workspace_root))
    target = Path(os.path.realpath(path))
    if not target.is_relative_to(root):
        msg = f"Refusing to write '{path}' outside the workspace '{root}'"
        raise PathEscapeError(msg)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(encode_json(payload))
    logger.debug("wrote %s", target)
    return path


def build_site_public_config(config: SiteConfig) -> dict[str, typ.Any]:
    """Return the public site metadata consumed by the page chrome."""
    site = config.site
    return {
        "site": {
            "name": site.name,
            "org": site.org,
            "title": site.title,
            "description": site.description,
            "logo_asset_path": site.logo_asset_path,
            "header_buttons": [
                {
                    key: value
                    for key, value in msgspec.to_builtins(button).items()
                    if value is not None
                }
                for button in site.header_buttons
            ],
            "theme_color": site.theme_color,
        },
        "sections": {
            section_id: {"icon": section.icon}
            for section_id, section in config.sections.items()
        },
        "site_url": site.url,
    }


def generate_artifacts(
    config: SiteConfig, *, builder: DocsGraphBuilder | None = None
) -> GenerationResult:
    """Build the docs graph and search index, then write every JSON artifact.

    Parameters
    ----------
    config : SiteConfig
        Resolved site configuration.
    builder : DocsGraphBuilder, optional
        Preconfigured builder (for example with a fixed clock).

    Returns
    -------
    GenerationResult
        The built graph, the search index, and the written paths in order:
        graph, runtime graph, search index, public site config.
    """
    graph = (builder or DocsGraphBuilder(config)).build()
    search_index = SearchIndex.from_graph(graph, config.search)

    payloads: list[tuple[str, object]] = [
        (DOCS_GRAPH_FILENAME, graph),
        (DOCS_RUNTIME_GRAPH_FILENAME, graph.to_runtime()),
        (SEARCH_INDEX_FILENAME, search_index.to_payload()),
        (SITE_PUBLIC_CONFIG_FILENAME, build_site_public_config(config)),
    ]
    written = [
        write_json_file(
            config.output_dir / filename, payload, workspace_root=config.root_dir
        )
        for filename, payload in payloads
    ]
    logger.info(
        "generated docs graph with %d documents in %d sections",
        len(graph.docs),
        len(graph.sections),
    )
    return GenerationResult(graph=graph, search_index=search_index, written=written)


__all__ = [
    "GenerationResult",
    "build_site_public_config",
    "encode_json",
    "generate_artifacts",
    "write_json_file",
]
