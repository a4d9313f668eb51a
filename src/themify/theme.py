from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace
from typing import Any

import numpy as np

from .colors import clamp, contrast_ratio, format_hsl
from .errors import EmptyCandidatesError
from .models import CandidateColor, InvalidCandidate, Theme, parse_candidate

logger = logging.getLogger(__name__)

FALLBACK_CANDIDATE = CandidateColor(
    hex="#6366F1",
    red=99,
    green=102,
    blue=241,
    hue=0.6666,
    saturation=0.8,
    lightness=0.6,
    area=1.0,
)

DESTRUCTIVE = "#ff4444"
DESTRUCTIVE_FOREGROUND = "#ffffff"
BLACK_TEXT = "#000000"
WHITE_TEXT = "#ffffff"

ROLE_NAMES = (
    "background",
    "foreground",
    "card",
    "card-foreground",
    "popover",
    "popover-foreground",
    "primary",
    "primary-foreground",
    "secondary",
    "secondary-foreground",
    "accent",
    "accent-foreground",
    "muted",
    "muted-foreground",
    "destructive",
    "destructive-foreground",
    "border",
    "input",
    "ring",
)
RADIUS_VARIABLE = "--radius"


@dataclass(frozen=True)
class AssignerConfig:
    working_set_size: int = 6
    min_contrast: float = 4.5
    max_repair_attempts: int = 20
    repair_step: float = 0.05
    # None turns empty input into an EmptyCandidatesError
    fallback: CandidateColor | None = FALLBACK_CANDIDATE

    def __post_init__(self) -> None:
        if self.working_set_size < 3:
            raise ValueError("working_set_size must be at least 3")
        if self.max_repair_attempts < 0:
            raise ValueError("max_repair_attempts must not be negative")


def build_working_set(
    candidates: Iterable[CandidateColor | Mapping[str, Any]],
    config: AssignerConfig | None = None,
) -> list[CandidateColor]:
    config = config or AssignerConfig()

    valid: list[CandidateColor] = []
    for raw in candidates:
        parsed = parse_candidate(raw)
        if isinstance(parsed, InvalidCandidate):
            logger.debug("Dropping candidate %r: %s", parsed.raw, parsed.reason)
            continue
        valid.append(parsed)

    if not valid:
        if config.fallback is None:
            raise EmptyCandidatesError(
                "no valid candidate colors and no fallback color configured"
            )
        logger.info("No valid candidate colors, using fallback %s", config.fallback.hex)
        valid = [config.fallback]

    working = sorted(valid, key=lambda color: color.area, reverse=True)
    working = working[: config.working_set_size]

    base = working[0]
    while len(working) < config.working_set_size:
        slot = len(working)
        variation = base.with_hsl(
            hue=base.hue + slot * 0.1,
            lightness=0.3 + (slot * 0.1) % 0.7,
        )
        working.append(replace(variation, area=0.0))

    return working


def readable_text_color(color: CandidateColor) -> str:
    return BLACK_TEXT if color.luminance > 0.5 else WHITE_TEXT


def ensure_contrast(
    color: CandidateColor,
    background: CandidateColor,
    min_contrast: float = 4.5,
    max_attempts: int = 20,
    step: float = 0.05,
) -> CandidateColor:
    """Step ``color``'s lightness away from ``background`` until the WCAG
    contrast reaches ``min_contrast``.

    Gives up after ``max_attempts`` and returns the best attempt seen, so the
    threshold is a target rather than a guarantee.
    """
    delta = -step if background.lightness > 0.5 else step

    best = current = color
    best_ratio = ratio = contrast_ratio(color.rgb, background.rgb)
    attempts = 0
    while ratio < min_contrast and attempts < max_attempts:
        current = current.with_hsl(
            lightness=clamp(current.lightness + delta, 0.05, 0.95)
        )
        ratio = contrast_ratio(current.rgb, background.rgb)
        attempts += 1
        if ratio > best_ratio:
            best, best_ratio = current, ratio

    if best_ratio < min_contrast:
        logger.debug(
            "Contrast %.2f for %s on %s is below %.1f after %d attempts",
            best_ratio,
            best.hex,
            background.hex,
            min_contrast,
            attempts,
        )
    return best


def _shift_lightness(color: CandidateColor, amount: float) -> CandidateColor:
    return color.with_hsl(lightness=color.lightness + amount)


def assign_theme(
    candidates: Iterable[CandidateColor | Mapping[str, Any]] | None,
    config: AssignerConfig | None = None,
    rng: np.random.Generator | None = None,
) -> Theme:
    config = config or AssignerConfig()
    rng = rng if rng is not None else np.random.default_rng()

    working = build_working_set([] if candidates is None else candidates, config)
    by_luminance = sorted(working, key=lambda color: color.luminance)
    by_saturation = sorted(working, key=lambda color: color.saturation, reverse=True)

    is_dark = working[0].lightness < 0.5
    # +1 moves away from a dark background, -1 away from a light one
    away = 1.0 if is_dark else -1.0

    darkest, lightest = by_luminance[0], by_luminance[-1]
    darker = darkest.with_hsl(lightness=max(0.05, darkest.lightness - 0.1))
    lighter = lightest.with_hsl(lightness=min(0.95, lightest.lightness + 0.1))
    background, foreground = (darker, lighter) if is_dark else (lighter, darker)

    def repaired(color: CandidateColor, surface: CandidateColor) -> CandidateColor:
        return ensure_contrast(
            color,
            surface,
            min_contrast=config.min_contrast,
            max_attempts=config.max_repair_attempts,
            step=config.repair_step,
        )

    primary = by_saturation[0]

    secondary_source = by_saturation[min(2, len(by_saturation) - 1)]
    if is_dark:
        secondary = secondary_source.with_hsl(
            lightness=min(0.8, secondary_source.lightness + 0.1)
        )
    else:
        secondary = secondary_source.with_hsl(
            lightness=max(0.2, secondary_source.lightness - 0.1)
        )

    accent = primary.with_hsl(
        hue=primary.hue + 1.0 / 3.0,
        saturation=min(1.0, primary.saturation * 1.1),
    )

    muted_source = by_luminance[1] if is_dark else by_luminance[-2]
    muted = muted_source.with_hsl(saturation=min(0.3, muted_source.saturation))

    if is_dark:
        border = background.with_hsl(lightness=min(0.5, background.lightness + 0.15))
    else:
        border = background.with_hsl(lightness=max(0.5, background.lightness - 0.15))

    card = _shift_lightness(background, away * 0.05)
    popover = _shift_lightness(background, away * 0.08)
    field_input = _shift_lightness(border, away * 0.05)
    ring = primary.with_hsl(
        saturation=primary.saturation + 0.1,
        lightness=primary.lightness + away * 0.1,
    )

    text = repaired(foreground, background)
    roles: dict[str, CandidateColor] = {
        "background": background,
        "foreground": text,
        "card": card,
        "card-foreground": repaired(text, card),
        "popover": popover,
        "popover-foreground": repaired(text, popover),
        "primary": primary,
        "secondary": secondary,
        "accent": accent,
        "muted": muted,
        "muted-foreground": repaired(_shift_lightness(text, -away * 0.15), background),
        "border": border,
        "input": field_input,
        "ring": ring,
    }

    literals = {
        "primary-foreground": readable_text_color(primary),
        "secondary-foreground": readable_text_color(secondary),
        "accent-foreground": readable_text_color(accent),
        "destructive": DESTRUCTIVE,
        "destructive-foreground": DESTRUCTIVE_FOREGROUND,
    }

    variables: dict[str, str] = {}
    for name in ROLE_NAMES:
        if name in literals:
            variables[f"--{name}"] = literals[name]
        else:
            color = roles[name]
            variables[f"--{name}"] = format_hsl(
                color.hue, color.saturation, color.lightness
            )
    variables[RADIUS_VARIABLE] = f"{rng.uniform(0.3, 0.8):.3f}rem"

    logger.debug(
        "Assigned %s theme: background %s, foreground %s, primary %s",
        "dark" if is_dark else "light",
        background.hex,
        text.hex,
        primary.hex,
    )

    return Theme(
        variables=variables,
        is_dark=is_dark,
        working_set=tuple(working),
        by_luminance=tuple(by_luminance),
        roles=roles,
    )
