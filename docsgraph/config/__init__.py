"""Load and validate site configuration YAML for docsgraph builds.

This subpackage parses the project's ``docs.yaml`` file into strongly typed
dataclasses (:class:`SiteConfig`, :class:`SectionConfig`, etc.) that the graph
assembler, search index builder, and renderer consume. The primary entry point
is :func:`load_site_config`.

Examples
--------
>>> from pathlib import Path
>>> from docsgraph.config import load_site_config
>>> site = load_site_config(Path("docs.yaml"))  # doctest: +SKIP
>>> site.get_section("patcher").repo.name  # doctest: +SKIP
'example-patcher'
"""

from .loader import load_site_config
from .models import (
    ConfigurationError,
    HeaderButtonConfig,
    RenderSettings,
    RepoConfig,
    SearchSettings,
    SectionConfig,
    SiteConfig,
    SiteInfo,
)

__all__ = [
    "ConfigurationError",
    "HeaderButtonConfig",
    "RenderSettings",
    "RepoConfig",
    "SearchSettings",
    "SectionConfig",
    "SiteConfig",
    "SiteInfo",
    "load_site_config",
]
