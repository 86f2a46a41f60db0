"""Render every document of the docs graph into a static HTML page.

:class:`SitePageGenerator` renders each route to ``{route}/index.html`` under
the render output directory using the package's Jinja templates, and copies
the docs assets below the public assets path.

Example
-------
>>> from pathlib import Path
>>> from docsgraph.config import load_site_config
>>> from docsgraph.graph import DocsGraphBuilder
>>> from docsgraph.generator import SitePageGenerator
>>> config = load_site_config(Path("docs.yaml"))  # doctest: +SKIP
>>> graph = DocsGraphBuilder(config).build()  # doctest: +SKIP
>>> SitePageGenerator(config, graph).run()  # doctest: +SKIP
[PosixPath('build/index.html'), ...]
"""

from __future__ import annotations

import datetime as dt
import logging
import shutil
import typing as typ
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from docsgraph.errors import GraphIntegrityError
from docsgraph.frontmatter import parse_frontmatter
from docsgraph.graph import DocsNavigation, DocsRepository

from .link_rewriter import DocLinkExtension, LinkContext, with_base_path
from .renderer import HtmlContentRenderer

if typ.TYPE_CHECKING:
    from docsgraph.config import SiteConfig
    from docsgraph.graph.navigation import RouteData
    from docsgraph.models import DocsGraph

logger = logging.getLogger(__name__)


class SitePageGenerator:
    """Render graph documents into themed HTML files."""

    def __init__(
        self,
        config: SiteConfig,
        graph: DocsGraph,
        *,
        templates_dir: Path | None = None,
        output_dir: Path | None = None,
    ) -> None:
        """Initialize the generator with configuration and template context.

        Parameters
        ----------
        config : SiteConfig
            Resolved site configuration.
        graph : DocsGraph
            Graph built for the same configuration.
        templates_dir : Path, optional
            Directory containing Jinja templates; defaults to the package templates.
        output_dir : Path, optional
            Override for the HTML output directory; defaults to ``render.output_dir``.
        """
        self.config = config
        self.graph = graph
        self.output_dir = output_dir or config.render.output_dir
        default_templates = Path(__file__).resolve().parents[1] / "templates"
        self.templates_dir = templates_dir or default_templates
        self.renderer = HtmlContentRenderer(config.render.pygments_style)
        self.repository = DocsRepository.from_graph(graph)
        self.navigation = DocsNavigation(self.repository)
        self.link_context = LinkContext.from_graph(
            graph,
            site_base_path=config.render.base_path,
            assets_public_path=config.render.assets_public_path,
        )
        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=select_autoescape(["html", "xml", "jinja"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["with_base"] = self._with_base
        self.template = self.env.get_template("doc_page.jinja")

    def _with_base(self, route_path: str) -> str:
        return with_base_path(route_path, self.config.render.base_path)

    def run(self) -> list[Path]:
        """Render every page and copy the docs assets.

        Returns
        -------
        list[Path]
            Paths of the generated HTML documents in navigation order.
        """
        written: list[Path] = []
        generated_at = dt.datetime.now(dt.UTC)
        stylesheet = self.renderer.stylesheet
        for route_path in self.repository.all_routes():
            route_data = self.navigation.route_data(route_path[1:].split("/"))
            if route_data is None:
                msg = f"Route '{route_path}' is missing from the navigation"
                raise GraphIntegrityError(msg)
            html = self.render_page(
                route_data, generated_at=generated_at, stylesheet=stylesheet
            )
            output_path = self.output_dir.joinpath(*route_path[1:].split("/"))
            output_path = output_path / "index.html"
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(html, encoding="utf-8")
            written.append(output_path)
        self.copy_assets()
        logger.info("rendered %d pages into %s", len(written), self.output_dir)
        return written

    def render_content(self, source_path: str) -> str:
        """Render the markdown body of ``source_path`` into HTML."""
        raw = self.config.docs_dir.joinpath(*source_path.split("/")).read_text(
            encoding="utf-8"
        )
        _frontmatter, body = parse_frontmatter(raw, source_path)
        extension = DocLinkExtension(self.link_context, source_path)
        return self.renderer.markdown(body, link_extension=extension)

    def render_page(
        self,
        route_data: RouteData,
        *,
        generated_at: dt.datetime,
        stylesheet: str | None = None,
    ) -> str:
        """Render the full HTML document for one route."""
        site = self.config.site
        context = {
            "route": route_data,
            "content_html": self.render_content(route_data.entry.source_path),
            "nav_sections": self.navigation.sections,
            "site": site,
            "html_title": f"{route_data.title} | {site.title}",
            "pygments_css": stylesheet or self.renderer.stylesheet,
            "generated_at": generated_at,
        }
        return self.template.render(**context)

    def copy_assets(self) -> list[Path]:
        """Copy docs assets below the public assets path of the output directory."""
        public = self.config.render.assets_public_path.strip("/")
        target_root = self.output_dir
        if public:
            target_root = target_root.joinpath(*public.split("/"))
        copied: list[Path] = []
        for asset in self.graph.assets:
            source = self.config.docs_dir.joinpath(*asset.split("/"))
            target = target_root.joinpath(*asset.split("/"))
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, target)
            copied.append(target)
        return copied


__all__ = ["SitePageGenerator"]
