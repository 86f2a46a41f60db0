r"""Split YAML frontmatter from markdown and validate it into a typed record.

Only the recognized keys are read; everything else in the block is ignored.
String options must be strings and the sidebar order must be a finite number
or a numeric string, so malformed values fail the run instead of being
silently coerced.

Example
-------
>>> from docsgraph.frontmatter import parse_frontmatter
>>> meta, body = parse_frontmatter("---\ntitle: Intro\n---\n# Body\n", "intro.md")
>>> meta.title, body
('Intro', '# Body\n')
"""

from __future__ import annotations

import dataclasses as dc
import math
import re
import typing as typ

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from docsgraph.errors import ConfigurationError

FRONTMATTER_PATTERN = re.compile(
    r"\A---[ \t]*\r?\n(?P<yaml>.*?)^(?:---|\.\.\.)[ \t]*(?:\r?\n|\Z)",
    re.DOTALL | re.MULTILINE,
)


@dc.dataclass(slots=True, frozen=True)
class Frontmatter:
    """Recognized frontmatter options of one document.

    Attributes
    ----------
    title : str | None
        Page title override.
    description : str | None
        Short page description.
    slug : str | None
        Full slug override; an empty string is kept so the resolver can
        reject it.
    sidebar_label : str | None
        Navigation label (``sidebar.label`` or ``sidebar_label``).
    sidebar_order : float | None
        Ordering hint (``sidebar.order``, ``sidebar_position`` or
        ``sidebar_order``, first present wins).
    llms : bool
        ``False`` excludes the page from the llms export.
    """

    title: str | None = None
    description: str | None = None
    slug: str | None = None
    sidebar_label: str | None = None
    sidebar_order: float | None = None
    llms: bool = True


def split_frontmatter(raw: str) -> tuple[str | None, str]:
    """Return the raw YAML block (or None) and the markdown body."""
    match = FRONTMATTER_PATTERN.match(raw)
    if match is None:
        return None, raw
    return match.group("yaml"), raw[match.end() :]


def parse_frontmatter(raw: str, source_path: str) -> tuple[Frontmatter, str]:
    """Parse the frontmatter of ``raw`` and return it with the remaining body.

    Raises
    ------
    ConfigurationError
        If the block is not valid YAML, is not a mapping, or holds a
        recognized key with the wrong shape.
    """
    block, body = split_frontmatter(raw)
    if block is None:
        return Frontmatter(), body
    data = _load_mapping(block, source_path)

    sidebar = data.get("sidebar")
    sidebar_data: dict[str, typ.Any] = sidebar if isinstance(sidebar, dict) else {}

    label = _string_field(sidebar_data, "label", source_path, "sidebar.label")
    if label is None:
        label = _string_field(data, "sidebar_label", source_path)

    order_raw = _first_present(
        (sidebar_data, "order"), (data, "sidebar_position"), (data, "sidebar_order")
    )
    return (
        Frontmatter(
            title=_non_empty(_string_field(data, "title", source_path)),
            description=_non_empty(_string_field(data, "description", source_path)),
            slug=_string_field(data, "slug", source_path),
            sidebar_label=_non_empty(label),
            sidebar_order=_parse_sidebar_order(order_raw, source_path),
            llms=data.get("llms") is not False,
        ),
        body,
    )


def _load_mapping(block: str, source_path: str) -> dict[str, typ.Any]:
    loader = YAML(typ="safe")
    loader.version = (1, 2)
    try:
        loaded = loader.load(block)
    except YAMLError as exc:
        msg = f"Invalid frontmatter in {source_path}: {exc}"
        raise ConfigurationError(msg) from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        msg = f"Frontmatter in {source_path} must be a mapping"
        raise ConfigurationError(msg)
    return dict(loaded)


def _string_field(
    data: typ.Mapping[str, typ.Any],
    key: str,
    source_path: str,
    label: str | None = None,
) -> str | None:
    """Return a stripped string option, None when absent, or fail on other shapes."""
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        msg = (
            f"Invalid {label or key} in {source_path}: expected a string, "
            f"got {value!r}"
        )
        raise ConfigurationError(msg)
    return value.strip()


def _non_empty(value: str | None) -> str | None:
    return value or None


def _first_present(*candidates: tuple[typ.Mapping[str, typ.Any], str]) -> object:
    for mapping, key in candidates:
        value = mapping.get(key)
        if value is not None:
            return value
    return None


def _parse_sidebar_order(value: object, source_path: str) -> float | None:
    """Return a finite sidebar order, None when absent, or raise on bad input."""
    match value:
        case None:
            return None
        case bool():
            pass
        case int() | float() if math.isfinite(value):
            return float(value)
        case str() if not value.strip():
            return None
        case str():
            try:
                numeric = float(value.strip())
            except ValueError:
                numeric = math.nan
            if math.isfinite(numeric):
                return numeric
    msg = f"Invalid sidebar order in {source_path}: expected a number, got {value!r}"
    raise ConfigurationError(msg)


__all__ = ["Frontmatter", "parse_frontmatter", "split_frontmatter"]
