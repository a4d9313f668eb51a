from __future__ import annotations

import numpy as np
import pytest
from PIL import Image

from themify.errors import ExtractionError, UnsupportedImageError
from themify.extract import (
    _merge_close_centers,
    extract_candidates,
    extract_from_pixels,
    extract_from_svg,
)


def _write_image(path, array, mode="RGB"):
    Image.fromarray(array.astype(np.uint8), mode=mode).save(path)


def test_solid_color_gives_single_full_area_candidate(tmp_path):
    image = np.zeros((120, 120, 3), dtype=np.uint8)
    image[:, :] = [180, 50, 40]
    image_path = tmp_path / "solid.png"
    _write_image(image_path, image)

    candidates = extract_candidates(image_path)

    assert len(candidates) == 1
    assert candidates[0].area == pytest.approx(1.0)
    assert all(abs(a - b) <= 1 for a, b in zip(candidates[0].rgb, (180, 50, 40)))


def test_bicolor_returns_areas_in_dominance_order(tmp_path):
    image = np.zeros((100, 100, 3), dtype=np.uint8)
    image[:, :70] = [200, 30, 30]
    image[:, 70:] = [30, 60, 200]
    image_path = tmp_path / "bicolor.png"
    _write_image(image_path, image)

    candidates = extract_candidates(image_path, random_state=7)

    assert len(candidates) == 2
    assert abs(candidates[0].area - 0.7) < 0.05
    assert abs(candidates[1].area - 0.3) < 0.05
    assert candidates[0].red > candidates[0].blue
    assert candidates[1].blue > candidates[1].red
    assert candidates[0].hue < 0.05 or candidates[0].hue > 0.95


def test_transparent_pixels_are_ignored(tmp_path):
    image = np.zeros((60, 60, 4), dtype=np.uint8)
    image[:, :30] = [0, 255, 0, 0]
    image[:, 30:] = [200, 30, 30, 255]
    image_path = tmp_path / "logo.png"
    _write_image(image_path, image, mode="RGBA")

    candidates = extract_candidates(image_path)

    assert len(candidates) == 1
    assert candidates[0].area == pytest.approx(1.0)
    assert candidates[0].red > 150
    assert candidates[0].green < 60


def test_extraction_is_repeatable():
    rng = np.random.default_rng(5)
    image = rng.integers(0, 256, size=(90, 90, 3), dtype=np.uint8)

    first = extract_from_pixels(image, random_state=3)
    second = extract_from_pixels(image, random_state=3)

    assert [c.hex for c in first] == [c.hex for c in second]
    assert [c.area for c in first] == [c.area for c in second]
    assert sum(c.area for c in first) == pytest.approx(1.0)


def test_svg_color_literals_are_scraped():
    svg = """
    <svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 10 10">
      <rect fill="#ff0000" stroke="rgb(0, 0, 255)"/>
      <circle fill="#FF0000" style="fill:#fff;stroke:none"/>
      <path fill="url(#grad)"/>
      <path fill="none"/>
    </svg>
    """

    candidates = extract_from_svg(svg)

    assert [c.hex for c in candidates] == ["#FF0000", "#0000FF", "#FFFFFF"]
    assert [c.area for c in candidates] == [0.5, 0.25, 0.25]
    assert candidates[0].saturation == pytest.approx(1.0)
    assert candidates[2].lightness == pytest.approx(1.0)


def test_svg_gradient_stops_and_style_blocks(tmp_path):
    svg_path = tmp_path / "brand.svg"
    svg_path.write_text(
        "<svg><style>.a { fill: hsl(120, 100%, 25%); }</style>"
        "<linearGradient><stop stop-color='#123456'/></linearGradient>"
        "<g color='white'/></svg>",
        encoding="utf-8",
    )

    candidates = extract_candidates(svg_path)

    assert {c.hex for c in candidates} == {"#008000", "#123456", "#FFFFFF"}


def test_svg_alpha_hex_and_space_separated_rgb_are_kept():
    svg = '<svg><rect fill="#ff000080"/><rect fill="#00ff00"/><rect fill="rgb(0 0 255)"/></svg>'

    candidates = extract_from_svg(svg)

    assert [c.hex for c in candidates] == ["#FF0000", "#00FF00", "#0000FF"]


def test_svg_without_colors_raises(tmp_path):
    svg_path = tmp_path / "empty.svg"
    svg_path.write_text("<svg><path d='M0 0'/></svg>", encoding="utf-8")

    with pytest.raises(ExtractionError):
        extract_candidates(svg_path)


def test_unsupported_extension_raises(tmp_path):
    with pytest.raises(UnsupportedImageError):
        extract_candidates(tmp_path / "animation.gif")


def test_close_clusters_merge_into_the_heavier_one():
    centers = np.array([[50.0, 10.0, 10.0], [51.0, 10.0, 10.0], [90.0, -40.0, 40.0]])
    weights = np.array([30.0, 10.0, 60.0])

    merged, merged_weights = _merge_close_centers(centers, weights)

    assert merged_weights.tolist() == [60.0, 40.0]
    assert merged[1][0] == pytest.approx(50.25)
