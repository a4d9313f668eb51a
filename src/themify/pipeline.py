from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import numpy as np

from .extract import extract_candidates
from .models import CandidateColor, Theme
from .stylesheet import write_theme
from .theme import AssignerConfig, assign_theme

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ThemeResult:
    theme: Theme
    candidates: list[CandidateColor]
    source: str
    stylesheet: Path | None = None
    backup: Path | None = None

    def to_dict(self) -> dict[str, Any]:
        payload = self.theme.to_dict()
        payload["source"] = self.source
        payload["candidates"] = [color.to_dict() for color in self.candidates]
        payload["stylesheet"] = None if self.stylesheet is None else str(self.stylesheet)
        payload["backup"] = None if self.backup is None else str(self.backup)
        return payload


class ThemePipeline:
    def __init__(
        self,
        assigner_config: AssignerConfig | None = None,
        max_colors: int = 8,
        random_state: int = 42,
        seed: int | None = None,
    ) -> None:
        self.assigner_config = assigner_config or AssignerConfig()
        self.max_colors = max_colors
        self.random_state = random_state
        self.seed = seed

    def build(self, image_path: str | Path) -> ThemeResult:
        candidates = extract_candidates(
            image_path,
            max_colors=self.max_colors,
            random_state=self.random_state,
        )
        theme = assign_theme(
            candidates,
            config=self.assigner_config,
            rng=np.random.default_rng(self.seed),
        )
        return ThemeResult(theme=theme, candidates=candidates, source=str(image_path))

    def run(
        self, image_path: str | Path, stylesheet_path: str | Path | None = None
    ) -> ThemeResult:
        result = self.build(image_path)
        if stylesheet_path is None:
            return result

        backup = write_theme(stylesheet_path, result.theme.variables)
        logger.info(
            "Applied %s theme from %s to %s",
            "dark" if result.theme.is_dark else "light",
            result.source,
            stylesheet_path,
        )
        return ThemeResult(
            theme=result.theme,
            candidates=result.candidates,
            source=result.source,
            stylesheet=Path(stylesheet_path),
            backup=backup,
        )
