from __future__ import annotations

import io
import json
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
import requests
from PIL import Image

if TYPE_CHECKING:
    from .pipeline import ThemeResult

REQUEST_TIMEOUT = 10


def is_url(location: str | Path) -> bool:
    return str(location).startswith(("http://", "https://"))


def _fetch(url: str) -> bytes:
    response = requests.get(url, timeout=REQUEST_TIMEOUT)
    response.raise_for_status()
    return response.content


def read_image_rgba(image_path: str | Path) -> np.ndarray:
    path_str = str(image_path)
    if is_url(path_str):
        image_data = io.BytesIO(_fetch(path_str))
        with Image.open(image_data) as image:
            rgba = image.convert("RGBA")
            return np.asarray(rgba, dtype=np.uint8)

    path = Path(image_path)
    with Image.open(path) as image:
        rgba = image.convert("RGBA")
        return np.asarray(rgba, dtype=np.uint8)


def read_svg_text(image_path: str | Path) -> str:
    path_str = str(image_path)
    if is_url(path_str):
        return _fetch(path_str).decode("utf-8", errors="replace")
    return Path(image_path).read_text(encoding="utf-8", errors="replace")


def write_result_json(result: ThemeResult, output_path: str | Path) -> None:
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = json.dumps(result.to_dict(), indent=2)
    path.write_text(payload + "\n", encoding="utf-8")
