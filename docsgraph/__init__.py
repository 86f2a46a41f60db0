"""Build and validate a static documentation site from a markdown tree.

This package discovers markdown documents, derives their routes, validates
every internal link, anchor, and image, and emits a docs graph plus a search
index; the CLI also renders HTML pages and an ``llms.txt`` export.

Exports
-------
- ``app``: Cyclopts application entry for subcommands.
- ``main``: Convenience function that invokes the Cyclopts app.

Examples
--------
>>> from docsgraph import main
>>> main()  # doctest: +SKIP
>>> from docsgraph import app
>>> callable(app)
True
"""

from __future__ import annotations

from .cli import app, main

__all__ = ["app", "main"]
