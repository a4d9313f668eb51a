from __future__ import annotations

import logging
import os
import re
from collections.abc import Mapping
from pathlib import Path

from .errors import StylesheetError

logger = logging.getLogger(__name__)

STYLESHEET_CANDIDATES = (
    "globals.css",
    "src/app/globals.css",
    "app/globals.css",
    "styles/globals.css",
)

_ROOT_BLOCK_PATTERN = re.compile(r"(:root\s*\{)([^}]*)(\})", re.DOTALL)


def find_stylesheet(
    project_root: str | Path, explicit: str | Path | None = None
) -> Path:
    root = Path(project_root)
    if explicit is not None:
        path = Path(explicit)
        if not path.is_absolute():
            path = root / path
        if not path.is_file():
            raise StylesheetError(f"stylesheet does not exist: {path}")
        return path

    for candidate in STYLESHEET_CANDIDATES:
        path = root / candidate
        if path.is_file() and os.access(path, os.R_OK | os.W_OK):
            logger.info("Found stylesheet at %s", path)
            return path

    raise StylesheetError(
        f"could not find globals.css under {root}. "
        f"Looked in: {', '.join(STYLESHEET_CANDIDATES)}"
    )


def merge_root_variables(css_text: str, variables: Mapping[str, str]) -> str:
    """Rewrite the first ``:root { }`` block of ``css_text``.

    Existing declarations of a variable are replaced in place; variables the
    block does not declare yet are appended at the end of the block.
    """
    match = _ROOT_BLOCK_PATTERN.search(css_text)
    if not match:
        raise StylesheetError("stylesheet does not contain a :root block")

    body = match.group(2)
    for name, value in variables.items():
        # the last declaration of a block may omit its semicolon
        declaration = re.compile(
            rf"(?<![\w-]){re.escape(name)}\s*:\s*[^;]*?(?:;|(?=\s*\Z))"
        )
        if declaration.search(body):
            body = declaration.sub(lambda _: f"{name}: {value};", body)
            continue
        body = body.rstrip()
        if body and not body.endswith(";"):
            body += ";"
        body += f"\n  {name}: {value};\n"

    return css_text[: match.start(2)] + body + css_text[match.end(2) :]


def write_theme(css_path: str | Path, variables: Mapping[str, str]) -> Path:
    path = Path(css_path)
    original = path.read_text(encoding="utf-8")
    updated = merge_root_variables(original, variables)

    backup_path = path.with_name(path.name + ".backup")
    backup_path.write_text(original, encoding="utf-8")
    logger.info("Created backup of %s at %s", path, backup_path)

    path.write_text(updated, encoding="utf-8")
    logger.info("Wrote %d theme variables to %s", len(variables), path)
    return backup_path
