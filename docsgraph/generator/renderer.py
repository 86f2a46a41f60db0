"""Render document bodies to HTML with Pygments-highlighted fenced blocks."""

from __future__ import annotations

import re
import typing as typ
from html import escape

from markdown import Markdown
from pygments.formatters.html import HtmlFormatter

from docsgraph.markdown_parser import BASE_EXTENSIONS, normalize_fenced_blocks

if typ.TYPE_CHECKING:
    from markdown.extensions import Extension

CODE_BLOCK_PATTERN = re.compile(r"```([A-Za-z0-9_+#.-]+)?[^\n]*\n(.*?)```", re.DOTALL)
CODEHILITE_OPEN_TAG = re.compile(r'<div class="codehilite">')


class HtmlContentRenderer:
    """Render markdown bodies and tag each highlighted block with its language."""

    def __init__(self, pygments_style: str = "monokai") -> None:
        """Initialize a renderer with a Pygments style.

        Parameters
        ----------
        pygments_style : str, optional
            Name of the Pygments style used for syntax highlighting. Defaults to
            ``"monokai"``.
        """
        self.pygments_style = pygments_style
        self._formatter = HtmlFormatter(style=pygments_style, cssclass="codehilite")

    @property
    def stylesheet(self) -> str:
        """Return the CSS used for highlighted code blocks."""
        return self._formatter.get_style_defs(".codehilite")

    def markdown(self, text: str, link_extension: Extension | None = None) -> str:
        """Render markdown into HTML.

        Parameters
        ----------
        text : str
            Markdown body without frontmatter.
        link_extension : Extension, optional
            Extension resolving document links, images, and heading ids; pass
            ``None`` to render the markdown as written.
        """
        normalized = normalize_fenced_blocks(text)
        if not normalized.strip():
            return ""
        extensions: list[Extension | str] = [*BASE_EXTENSIONS, "codehilite"]
        if link_extension is not None:
            extensions.append(link_extension)
        md = Markdown(
            extensions=extensions,
            extension_configs={
                "codehilite": {
                    "linenums": False,
                    "guess_lang": False,
                    "css_class": "codehilite",
                    "pygments_style": self.pygments_style,
                }
            },
        )
        html = md.convert(normalized)
        return self._annotate_codehilite(html, normalized)

    def _annotate_codehilite(self, html: str, source_markdown: str) -> str:
        """Attach language metadata to each highlighted block, in source order."""
        languages = [
            match.group(1) or "text"
            for match in CODE_BLOCK_PATTERN.finditer(source_markdown)
        ]
        if not languages:
            return html
        lang_iter = iter(languages)

        def _repl(match: re.Match[str]) -> str:
            lang = next(lang_iter, "text")
            return (
                f'<div class="codehilite" data-language="{escape(lang, quote=True)}">'
            )

        return CODEHILITE_OPEN_TAG.sub(_repl, html, len(languages))


__all__ = ["CODE_BLOCK_PATTERN", "HtmlContentRenderer"]
