"""Render the docs graph into static HTML pages."""

from .link_rewriter import DocLinkExtension, LinkContext
from .page_generator import SitePageGenerator
from .renderer import CODE_BLOCK_PATTERN, HtmlContentRenderer

__all__ = [
    "CODE_BLOCK_PATTERN",
    "DocLinkExtension",
    "HtmlContentRenderer",
    "LinkContext",
    "SitePageGenerator",
]
