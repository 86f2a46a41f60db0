"""Utility helpers shared by the docsgraph configuration loader."""

from __future__ import annotations

import math
import typing as typ
from pathlib import Path
from urllib.parse import urlsplit

from docsgraph.errors import ConfigurationError

from .models import HeaderButtonConfig, SearchSettings

SITE_URL_ENV = "SITE_URL_OVERRIDE"
COMBINE_MODES = ("AND", "OR")


def _optional_str(value: object | None) -> str | None:
    """Return a stripped string value or None when empty."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _require_mapping(value: object, where: str) -> dict[str, typ.Any]:
    """Return ``value`` as a dict, treating ``None`` as empty."""
    match value:
        case None:
            return {}
        case dict():
            return dict(value)
        case _:
            msg = f"Expected a mapping for '{where}', got {type(value).__name__}"
            raise ConfigurationError(msg)


def _resolve_path(root: Path, value: object | None, default: str) -> Path:
    """Resolve ``value`` (or ``default``) against ``root`` unless absolute."""
    path = Path(str(value)) if value not in (None, "") else Path(default)
    if not path.is_absolute():
        path = root / path
    return path


def _coerce_int(value: object, where: str) -> int:
    """Return ``value`` as an int, rejecting booleans, floats and other shapes."""
    if isinstance(value, bool) or not isinstance(value, int):
        msg = f"Expected an integer for '{where}', got {value!r}"
        raise ConfigurationError(msg)
    return value


def _resolve_site_url(raw: str | None) -> str:
    """Validate an http(s) site URL and drop its trailing slashes."""
    text = (raw or "").strip()
    if not text:
        return ""
    parsed = urlsplit(text)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        msg = f"Site URL must be an absolute http or https URL, got '{text}'"
        raise ConfigurationError(msg)
    pathname = parsed.path.rstrip("/")
    return f"{parsed.scheme}://{parsed.netloc}{pathname}"


def _build_header_buttons(value: object) -> list[HeaderButtonConfig]:
    """Build header button entries, skipping entries without an href."""
    if value is None:
        return []
    if not isinstance(value, list):
        msg = "Expected a list for 'site.header_buttons'"
        raise ConfigurationError(msg)
    buttons: list[HeaderButtonConfig] = []
    for entry in value:
        payload = _require_mapping(entry, "site.header_buttons[]")
        href = _optional_str(payload.get("href"))
        if not href:
            continue
        buttons.append(
            HeaderButtonConfig(
                href=href,
                label=_optional_str(payload.get("label")),
                icon=_optional_str(payload.get("icon")),
            )
        )
    return buttons


def _build_search_settings(payload: typ.Mapping[str, typ.Any]) -> SearchSettings:
    """Merge search overrides into the default ``SearchSettings``."""
    base = SearchSettings()
    fuzzy = payload.get("fuzzy", base.fuzzy)
    if (
        isinstance(fuzzy, bool)
        or not isinstance(fuzzy, int | float)
        or not math.isfinite(fuzzy)
        or fuzzy < 0
    ):
        msg = f"Expected a non-negative number for 'search.fuzzy', got {fuzzy!r}"
        raise ConfigurationError(msg)
    combine_with = str(payload.get("combine_with", base.combine_with)).upper()
    if combine_with not in COMBINE_MODES:
        msg = (
            f"'search.combine_with' must be one of {COMBINE_MODES}, "
            f"got {combine_with!r}"
        )
        raise ConfigurationError(msg)
    boost = dict(base.boost)
    for field, weight in _require_mapping(payload.get("boost"), "search.boost").items():
        boost[str(field)] = _coerce_int(weight, f"search.boost.{field}")
    return SearchSettings(
        fuzzy=float(fuzzy),
        prefix=bool(payload.get("prefix", base.prefix)),
        combine_with=combine_with,
        max_index_text_length=_coerce_int(
            payload.get("max_index_text_length", base.max_index_text_length),
            "search.max_index_text_length",
        ),
        snippet_max_length=_coerce_int(
            payload.get("snippet_max_length", base.snippet_max_length),
            "search.snippet_max_length",
        ),
        snippet_context_chars=_coerce_int(
            payload.get("snippet_context_chars", base.snippet_context_chars),
            "search.snippet_context_chars",
        ),
        ellipsis=str(payload.get("ellipsis", base.ellipsis)),
        highlight_tag=str(payload.get("highlight_tag", base.highlight_tag)),
        boost=boost,
    )


__all__ = [
    "COMBINE_MODES",
    "SITE_URL_ENV",
    "_build_header_buttons",
    "_build_search_settings",
    "_coerce_int",
    "_optional_str",
    "_require_mapping",
    "_resolve_path",
    "_resolve_site_url",
]
