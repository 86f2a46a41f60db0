"""Discover non-markdown assets under the docs root and probe image sizes."""

from __future__ import annotations

import collections.abc as cabc
import logging
import math
import re
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from xml.etree import ElementTree

from PIL import Image, UnidentifiedImageError

from docsgraph.models import AssetDimensions

logger = logging.getLogger(__name__)

ImageProbe = cabc.Callable[[Path], AssetDimensions | None]

SVG_SUFFIX = ".svg"
_SVG_LENGTH_PATTERN = re.compile(r"^\s*([0-9]*\.?[0-9]+)\s*(px)?\s*$")


def _svg_length(value: str | None) -> int | None:
    if value is None:
        return None
    match = _SVG_LENGTH_PATTERN.match(value)
    if match is None:
        return None
    return round(float(match.group(1)))


def _svg_view_box(value: str | None) -> tuple[int, int] | None:
    if value is None:
        return None
    parts = value.replace(",", " ").split()
    if len(parts) != 4:
        return None
    try:
        width, height = float(parts[2]), float(parts[3])
    except ValueError:
        return None
    if not (math.isfinite(width) and math.isfinite(height)):
        return None
    return round(width), round(height)


def probe_svg_dimensions(path: Path) -> AssetDimensions | None:
    """Return the size declared on the root ``<svg>`` element, or None.

    Absolute ``width``/``height`` attributes (unitless or ``px``) win; the
    ``viewBox`` size fills in whichever is missing or relative.
    """
    try:
        root = ElementTree.parse(path).getroot()
    except (OSError, ElementTree.ParseError) as exc:
        logger.debug("no svg metadata for %s: %s", path, exc)
        return None
    if root.tag.rsplit("}", 1)[-1] != "svg":
        return None
    width = _svg_length(root.get("width"))
    height = _svg_length(root.get("height"))
    view_box = _svg_view_box(root.get("viewBox"))
    if view_box is not None:
        width = view_box[0] if width is None else width
        height = view_box[1] if height is None else height
    if width is None or height is None or width <= 0 or height <= 0:
        return None
    return AssetDimensions(width=width, height=height)


def probe_image_dimensions(path: Path) -> AssetDimensions | None:
    """Return the pixel size of the image at ``path``, or None.

    SVG files are sized from their root element. Files Pillow cannot
    identify (fonts, archives) and unreadable files yield None; the failure
    is logged at debug level and never raised.
    """
    if path.suffix.lower() == SVG_SUFFIX:
        return probe_svg_dimensions(path)
    try:
        with Image.open(path) as image:
            width, height = image.size
    except (
        OSError,
        UnidentifiedImageError,
        Image.DecompressionBombError,
        ValueError,
    ) as exc:
        logger.debug("no image metadata for %s: %s", path, exc)
        return None
    if width <= 0 or height <= 0:
        return None
    return AssetDimensions(width=width, height=height)


def collect_asset_metadata(
    docs_dir: Path,
    asset_paths: cabc.Sequence[str],
    *,
    probe: ImageProbe = probe_image_dimensions,
    max_workers: int | None = None,
) -> dict[str, AssetDimensions]:
    """Probe every asset concurrently and keep the successful results.

    Parameters
    ----------
    docs_dir : Path
        Docs root the asset paths are relative to.
    asset_paths : Sequence[str]
        Docs-root-relative POSIX asset paths.
    probe : callable, optional
        Dimension probe; defaults to the Pillow-backed probe.
    max_workers : int, optional
        Thread pool size; ``None`` lets the executor decide.

    Returns
    -------
    dict[str, AssetDimensions]
        Dimensions keyed by asset path, in sorted key order.
    """
    if not asset_paths:
        return {}
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        results = list(
            pool.map(lambda rel: probe(docs_dir.joinpath(*rel.split("/"))), asset_paths)
        )
    metadata = {
        rel: dims
        for rel, dims in sorted(
            zip(asset_paths, results, strict=True), key=lambda item: item[0]
        )
        if dims is not None
    }
    logger.info("probed %d assets, %d with dimensions", len(asset_paths), len(metadata))
    return metadata


__all__ = [
    "ImageProbe",
    "collect_asset_metadata",
    "probe_image_dimensions",
    "probe_svg_dimensions",
]
