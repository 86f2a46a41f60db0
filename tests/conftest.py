"""Shared fixtures for building throwaway docs workspaces.

``docs_workspace`` writes a ``docs.yaml`` registering a root section plus the
``patcher`` and ``cli`` sections, and returns a factory that lays out a
markdown tree under ``docs/`` and loads the resulting site configuration.
Tests describe their tree as a ``{relative path: content}`` mapping, with
``bytes`` values for binary assets.
"""

from __future__ import annotations

import collections.abc as cabc
import datetime as dt
import io
from pathlib import Path

import pytest
from PIL import Image

from docsgraph.config import SiteConfig, load_site_config

SITE_CONFIG_YAML = """\
edit_base_url: https://github.com/example/
site:
  name: Manual
  org: Example
  description: Example project documentation
  url: https://docs.example.test/
  header_buttons:
    - href: https://github.com/example
      label: GitHub
      icon: github
sections:
  _root:
    label: Overview
    order: 0
    repo:
      name: example-docs
  patcher:
    label: Patcher
    order: 1
    icon: wrench
    repo:
      name: example-patcher
      branch: dev
      docs_path: /docs/
  cli:
    label: CLI
    order: 2
    icon: terminal
    repo:
      name: example-cli
"""

FIXED_NOW = dt.datetime(2024, 5, 1, 12, 0, tzinfo=dt.UTC)

WorkspaceFactory = cabc.Callable[[cabc.Mapping[str, str | bytes]], SiteConfig]


def png_bytes(width: int, height: int) -> bytes:
    """Return an in-memory PNG of the given size."""
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color=(20, 40, 60)).save(buffer, format="PNG")
    return buffer.getvalue()


def fixed_clock() -> dt.datetime:
    """Return a constant timestamp so graphs compare equal across runs."""
    return FIXED_NOW


@pytest.fixture
def docs_workspace(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> WorkspaceFactory:
    """Return a factory writing a docs tree and loading its site config."""
    monkeypatch.delenv("SITE_URL_OVERRIDE", raising=False)

    def _factory(files: cabc.Mapping[str, str | bytes]) -> SiteConfig:
        config_path = tmp_path / "docs.yaml"
        config_path.write_text(SITE_CONFIG_YAML, encoding="utf-8")
        docs_dir = tmp_path / "docs"
        docs_dir.mkdir(exist_ok=True)
        for rel, content in files.items():
            target = docs_dir / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                target.write_bytes(content)
            else:
                target.write_text(content, encoding="utf-8")
        return load_site_config(config_path)

    return _factory


@pytest.fixture
def make_png() -> cabc.Callable[[int, int], bytes]:
    """Return the PNG factory."""
    return png_bytes


@pytest.fixture
def clock() -> cabc.Callable[[], dt.datetime]:
    """Return a clock frozen at ``FIXED_NOW``."""
    return fixed_clock
