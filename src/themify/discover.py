from __future__ import annotations

import logging
from pathlib import Path

from rich.console import Console
from rich.prompt import IntPrompt
from rich.table import Table

from .errors import ImageDiscoveryError
from .extract import SUPPORTED_EXTENSIONS

logger = logging.getLogger(__name__)


def find_images(public_dir: str | Path) -> list[Path]:
    root = Path(public_dir)
    if not root.is_dir():
        raise ImageDiscoveryError(
            f"public folder not found at {root}. Run from the project root."
        )

    images = sorted(
        path
        for path in root.rglob("*")
        if path.is_file() and path.suffix.lower() in SUPPORTED_EXTENSIONS
    )
    if not images:
        raise ImageDiscoveryError(
            f"no supported images ({', '.join(SUPPORTED_EXTENSIONS)}) in {root}"
        )

    logger.info("Found %d images in %s", len(images), root)
    return images


def choose_image(
    images: list[Path], console: Console, relative_to: str | Path | None = None
) -> Path:
    if not images:
        raise ImageDiscoveryError("no images to choose from")
    if len(images) == 1:
        return images[0]

    table = Table(title="Select an image to base your theme on")
    table.add_column("#", justify="right", style="cyan")
    table.add_column("Image")
    for index, image in enumerate(images, start=1):
        label = image.relative_to(relative_to) if relative_to else image
        table.add_row(str(index), str(label))
    console.print(table)

    choice = IntPrompt.ask(
        "Image number",
        console=console,
        choices=[str(i) for i in range(1, len(images) + 1)],
        default=1,
        show_choices=False,
    )
    return images[choice - 1]
