"""Cyclopts CLI entrypoint for building the docs graph, pages, and llms export.

The ``docsgraph`` console script defined here validates a markdown docs tree
and writes the graph, runtime graph, search index, and public site config
artifacts (``generate``), renders static HTML pages (``render``), and exports
the whole documentation set as ``llms.txt`` (``llms``). Every option can also
be supplied through an ``INPUT_*`` environment variable, which keeps CI
workflows declarative.

Examples
--------
Generate the artifacts for the default configuration:

>>> from docsgraph.cli import main
>>> main()  # doctest: +SKIP

Render pages into a custom directory:

>>> from docsgraph.cli import app
>>> app(["render", "--output-dir", "dist"])  # doctest: +SKIP
"""

from __future__ import annotations

import logging
import sys
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter
from ruamel.yaml.error import YAMLError

from ._constants import LLMS_FILENAME
from .artifacts import generate_artifacts
from .config import load_site_config
from .errors import DocsGraphError, PathEscapeError
from .generator import SitePageGenerator
from .graph import DocsGraphBuilder
from .llms import build_llms_document, docs_dir_reader

DEFAULT_CONFIG = Path("docs.yaml")

app = App(name="docsgraph", config=cyclopts.config.Env("INPUT_", command=False))  # type: ignore[unknown-argument]


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command(help="Validate the docs tree and write the graph and search artifacts.")
def generate(
    *,
    config: typ.Annotated[
        Path, Parameter(help="Path to site config", env_var="INPUT_CONFIG")
    ] = DEFAULT_CONFIG,
    verbose: typ.Annotated[
        bool, Parameter(help="Log diagnostics to stderr", env_var="INPUT_VERBOSE")
    ] = False,
) -> None:
    """Build the docs graph and write every JSON artifact.

    Parameters
    ----------
    config : Path, optional
        Path to the ``docs.yaml`` configuration file (overridable via
        ``INPUT_CONFIG``).
    verbose : bool, optional
        Enable debug logging.

    Raises
    ------
    DocsGraphError
        If the docs tree is invalid; no artifact is written in that case.
    """
    _configure_logging(verbose)
    site_config = load_site_config(config)
    result = generate_artifacts(site_config)
    for path in result.written:
        print(f"wrote {_format_path(path)}")


@app.command(help="Render the docs graph into static HTML pages.")
def render(
    *,
    config: typ.Annotated[
        Path, Parameter(help="Path to site config", env_var="INPUT_CONFIG")
    ] = DEFAULT_CONFIG,
    output_dir: typ.Annotated[
        Path | None,
        Parameter(help="Override the output folder", env_var="INPUT_OUTPUT_DIR"),
    ] = None,
    verbose: typ.Annotated[
        bool, Parameter(help="Log diagnostics to stderr", env_var="INPUT_VERBOSE")
    ] = False,
) -> None:
    """Build the graph and render one ``index.html`` per route.

    Parameters
    ----------
    config : Path, optional
        Path to the site configuration file.
    output_dir : Path or None, optional
        Override for ``render.output_dir``.
    verbose : bool, optional
        Enable debug logging.
    """
    _configure_logging(verbose)
    site_config = load_site_config(config)
    graph = DocsGraphBuilder(site_config).build()
    generator = SitePageGenerator(site_config, graph, output_dir=output_dir)
    for path in generator.run():
        print(f"wrote {_format_path(path)}")


@app.command(help="Export every page as a single llms.txt document.")
def llms(
    *,
    config: typ.Annotated[
        Path, Parameter(help="Path to site config", env_var="INPUT_CONFIG")
    ] = DEFAULT_CONFIG,
    output: typ.Annotated[
        Path | None,
        Parameter(help="Override the llms.txt path", env_var="INPUT_OUTPUT"),
    ] = None,
) -> None:
    """Write ``llms.txt`` next to the rendered pages.

    Parameters
    ----------
    config : Path, optional
        Path to the site configuration file.
    output : Path or None, optional
        Destination file; defaults to ``{render.output_dir}/llms.txt``.

    Raises
    ------
    PathEscapeError
        If the destination lies outside the workspace.
    """
    site_config = load_site_config(config)
    graph = DocsGraphBuilder(site_config).build()
    document = build_llms_document(
        graph,
        title=site_config.site.title,
        description=site_config.site.description,
        read_source=docs_dir_reader(site_config.docs_dir),
    )
    target = output or site_config.render.output_dir / LLMS_FILENAME
    resolved = target.resolve()
    if not resolved.is_relative_to(site_config.root_dir.resolve()):
        msg = f"Refusing to write '{target}' outside the workspace"
        raise PathEscapeError(msg)
    resolved.parent.mkdir(parents=True, exist_ok=True)
    resolved.write_text(document, encoding="utf-8")
    print(f"wrote {_format_path(target)}")


def main() -> None:
    """Invoke the Cyclopts application that powers the ``docsgraph`` command.

    Docs graph failures, missing configuration files, and malformed YAML are
    reported on stderr and end the process with exit status 1.
    """
    try:
        app()
    except (DocsGraphError, FileNotFoundError, YAMLError) as exc:
        print(f"docsgraph: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
