from __future__ import annotations

import logging
import math
import re
from collections import Counter
from pathlib import Path
from urllib.parse import urlparse

import numpy as np
from skimage import color as skcolor
from skimage.color import deltaE_ciede2000
from sklearn.cluster import KMeans

from .colors import RGB, hex_to_rgb, parse_css_color, rgb_to_hex, rgb_to_hsl
from .errors import ExtractionError, UnsupportedImageError
from .io import is_url, read_image_rgba, read_svg_text
from .models import CandidateColor

logger = logging.getLogger(__name__)

RASTER_EXTENSIONS = (".jpg", ".jpeg", ".png")
VECTOR_EXTENSIONS = (".svg",)
SUPPORTED_EXTENSIONS = RASTER_EXTENSIONS + VECTOR_EXTENSIONS

MIN_INERTIA_GAIN = 0.12
MERGE_DELTA_E = 10.0
FLAT_TOLERANCE = 2.0

NAMED_COLORS = {
    "black": "#000000",
    "white": "#ffffff",
    "red": "#ff0000",
    "green": "#008000",
    "blue": "#0000ff",
    "gray": "#808080",
    "grey": "#808080",
    "yellow": "#ffff00",
    "orange": "#ffa500",
    "purple": "#800080",
}

_SVG_COLOR_PATTERN = re.compile(
    r"(?<![\w-])(fill|stroke|stop-color|color|background-color|background)"
    r"\s*[:=]\s*[\"']?\s*([^;\"'>}]+)",
    re.IGNORECASE,
)


def image_extension(image_path: str | Path) -> str:
    if is_url(image_path):
        return Path(urlparse(str(image_path)).path).suffix.lower()
    return Path(image_path).suffix.lower()


def extract_candidates(
    image_path: str | Path,
    max_colors: int = 8,
    random_state: int = 42,
    sample_size: int = 10000,
) -> list[CandidateColor]:
    ext = image_extension(image_path)
    if ext in VECTOR_EXTENSIONS:
        candidates = extract_from_svg(read_svg_text(image_path))
    elif ext in RASTER_EXTENSIONS:
        candidates = extract_from_pixels(
            read_image_rgba(image_path),
            max_colors=max_colors,
            random_state=random_state,
            sample_size=sample_size,
        )
    else:
        raise UnsupportedImageError(
            f"unsupported image format '{ext}'. "
            f"Supported formats are: {', '.join(SUPPORTED_EXTENSIONS)}"
        )

    if not candidates:
        raise ExtractionError(f"failed to extract colors from {image_path}")

    logger.info("Extracted %d colors from %s", len(candidates), image_path)
    return candidates


def extract_from_pixels(
    image_rgba: np.ndarray,
    max_colors: int = 8,
    random_state: int = 42,
    sample_size: int = 10000,
) -> list[CandidateColor]:
    if image_rgba.ndim != 3 or image_rgba.shape[2] not in (3, 4):
        raise ValueError("image must have shape (H, W, 3) or (H, W, 4)")

    pixels = _visible_pixels(image_rgba)
    if len(pixels) == 0:
        return []
    if len(pixels) > sample_size:
        keep = np.random.default_rng(random_state).choice(
            len(pixels), sample_size, replace=False
        )
        pixels = pixels[keep]

    lab = skcolor.rgb2lab(pixels[np.newaxis].astype(np.float64) / 255.0)[0]
    centers, weights = _cluster(lab, max(1, int(max_colors)), random_state)
    centers, weights = _merge_close_centers(centers, weights)

    shares = weights / weights.sum()
    return [
        _candidate_from_rgb(_lab_to_rgb(centers[i]), float(shares[i]))
        for i in np.argsort(-shares, kind="stable")
    ]


def extract_from_svg(svg_text: str) -> list[CandidateColor]:
    counts: Counter[str] = Counter()
    for _, raw_value in _SVG_COLOR_PATTERN.findall(svg_text):
        value = raw_value.strip().lower()
        if value.startswith(("none", "currentcolor", "url(", "transparent", "inherit")):
            continue
        rgb = parse_css_color(NAMED_COLORS.get(value, value))
        if rgb is None:
            logger.debug("Ignoring unparsable SVG color %r", raw_value)
            continue
        counts[rgb_to_hex(rgb)] += 1

    total = sum(counts.values())
    if total == 0:
        return []

    # most_common keeps first-seen order among equal counts
    return [
        _candidate_from_rgb(hex_to_rgb(hex_value), count / total)
        for hex_value, count in counts.most_common()
    ]


def _candidate_from_rgb(rgb: RGB, area: float) -> CandidateColor:
    hue, saturation, lightness = rgb_to_hsl(rgb)
    return CandidateColor(
        hex=rgb_to_hex(rgb),
        red=rgb[0],
        green=rgb[1],
        blue=rgb[2],
        hue=hue,
        saturation=saturation,
        lightness=lightness,
        area=area,
    )


def _visible_pixels(image: np.ndarray) -> np.ndarray:
    flat = image.reshape(-1, image.shape[2])
    if flat.shape[1] == 3:
        return flat
    visible = flat[flat[:, 3] > 0]
    if len(visible) == 0:
        logger.warning("Image is fully transparent, sampling every pixel")
        visible = flat
    return visible[:, :3]


def _is_flat(lab: np.ndarray, tolerance: float = FLAT_TOLERANCE) -> bool:
    chroma = np.hypot(lab[:, 1], lab[:, 2])
    return float(np.std(lab[:, 0])) <= tolerance and float(np.std(chroma)) <= tolerance


def _cluster(
    lab: np.ndarray, max_clusters: int, random_state: int
) -> tuple[np.ndarray, np.ndarray]:
    """Cluster LAB pixels, growing k while each extra cluster still cuts
    inertia by at least ``MIN_INERTIA_GAIN``.

    Returns cluster centers and their pixel counts. Near-uniform images skip
    k-means and come back as their mean color.
    """
    if _is_flat(lab):
        return lab.mean(axis=0, keepdims=True), np.array([float(len(lab))])

    distinct = len(np.unique(np.round(lab, 4), axis=0))
    limit = max(1, min(max_clusters, int(math.sqrt(len(lab))), distinct))

    best = KMeans(n_clusters=1, n_init=10, random_state=random_state).fit(lab)
    for k in range(2, limit + 1):
        model = KMeans(n_clusters=k, n_init=10, random_state=random_state).fit(lab)
        gain = (best.inertia_ - model.inertia_) / max(best.inertia_, 1e-9)
        if gain < MIN_INERTIA_GAIN:
            break
        best = model

    weights = np.bincount(best.labels_, minlength=best.n_clusters).astype(np.float64)
    logger.debug("Chose %d clusters out of at most %d", best.n_clusters, limit)
    return best.cluster_centers_, weights


def _merge_close_centers(
    centers: np.ndarray, weights: np.ndarray, max_delta_e: float = MERGE_DELTA_E
) -> tuple[np.ndarray, np.ndarray]:
    """Fold every center within ``max_delta_e`` (CIEDE2000) of a heavier one
    into it, averaging by pixel count."""
    if len(centers) <= 1:
        return centers, weights

    rows, cols = np.broadcast_arrays(centers[:, np.newaxis, :], centers[np.newaxis, :, :])
    distances = deltaE_ciede2000(rows, cols)
    remaining = np.ones(len(centers), dtype=bool)
    merged_centers: list[np.ndarray] = []
    merged_weights: list[float] = []
    for anchor in np.argsort(-weights, kind="stable"):
        if not remaining[anchor]:
            continue
        group = remaining & (distances[anchor] <= max_delta_e)
        remaining &= ~group
        total = float(weights[group].sum())
        if total <= 0:
            continue
        merged_centers.append((centers[group] * weights[group, np.newaxis]).sum(axis=0) / total)
        merged_weights.append(total)

    return np.array(merged_centers), np.array(merged_weights)


def _lab_to_rgb(lab_color: np.ndarray) -> RGB:
    srgb = skcolor.lab2rgb(np.reshape(lab_color, (1, 1, 3)).astype(np.float64))[0, 0]
    red, green, blue = (int(round(float(np.clip(c, 0.0, 1.0)) * 255)) for c in srgb)
    return red, green, blue
