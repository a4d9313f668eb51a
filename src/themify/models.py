from __future__ import annotations

import math
import numbers
from collections.abc import Mapping
from dataclasses import asdict, dataclass, field
from typing import Any

from .colors import RGB, clamp, hex_to_rgb, hsl_to_rgb, relative_luminance, rgb_to_hex


@dataclass(frozen=True)
class CandidateColor:
    hex: str
    red: int
    green: int
    blue: int
    hue: float
    saturation: float
    lightness: float
    area: float = 0.0

    @classmethod
    def from_hsl(
        cls,
        hue: float,
        saturation: float,
        lightness: float,
        area: float = 0.0,
    ) -> CandidateColor:
        hue = hue % 1.0
        saturation = clamp(saturation)
        lightness = clamp(lightness)
        rgb = hsl_to_rgb(hue, saturation, lightness)
        return cls(
            hex=rgb_to_hex(rgb),
            red=rgb[0],
            green=rgb[1],
            blue=rgb[2],
            hue=hue,
            saturation=saturation,
            lightness=lightness,
            area=clamp(area),
        )

    @property
    def rgb(self) -> RGB:
        return self.red, self.green, self.blue

    @property
    def luminance(self) -> float:
        return relative_luminance(self.rgb)

    def with_hsl(
        self,
        hue: float | None = None,
        saturation: float | None = None,
        lightness: float | None = None,
    ) -> CandidateColor:
        """Return a copy with adjusted HSL and RGB/hex recomputed to match."""
        return CandidateColor.from_hsl(
            self.hue if hue is None else hue,
            self.saturation if saturation is None else saturation,
            self.lightness if lightness is None else lightness,
            area=self.area,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "hex": self.hex,
            "rgb": list(self.rgb),
            "hue": float(self.hue),
            "saturation": float(self.saturation),
            "lightness": float(self.lightness),
            "area": float(self.area),
        }


@dataclass(frozen=True)
class InvalidCandidate:
    raw: Any
    reason: str


def _as_finite(value: Any) -> float | None:
    # bool is an int subclass but never a meaningful color channel
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return None
    number = float(value)
    return number if math.isfinite(number) else None


def parse_candidate(raw: Any) -> CandidateColor | InvalidCandidate:
    if isinstance(raw, CandidateColor):
        raw = asdict(raw)
    if not isinstance(raw, Mapping):
        return InvalidCandidate(raw=raw, reason="expected a mapping")

    hsl: list[float] = []
    for key in ("hue", "saturation", "lightness"):
        value = _as_finite(raw.get(key))
        if value is None:
            return InvalidCandidate(raw=raw, reason=f"non-numeric '{key}'")
        hsl.append(value)
    hue, saturation, lightness = hsl[0] % 1.0, clamp(hsl[1]), clamp(hsl[2])

    area = _as_finite(raw.get("area"))
    area = clamp(area) if area is not None else 0.0

    channels = [_as_finite(raw.get(key)) for key in ("red", "green", "blue")]
    if all(channel is not None for channel in channels):
        rgb = tuple(int(clamp(round(c), 0, 255)) for c in channels)  # type: ignore[arg-type]
    elif isinstance(raw.get("hex"), str):
        try:
            rgb = hex_to_rgb(raw["hex"])
        except ValueError:
            rgb = hsl_to_rgb(hue, saturation, lightness)
    else:
        rgb = hsl_to_rgb(hue, saturation, lightness)

    return CandidateColor(
        hex=rgb_to_hex(rgb),  # type: ignore[arg-type]
        red=rgb[0],
        green=rgb[1],
        blue=rgb[2],
        hue=hue,
        saturation=saturation,
        lightness=lightness,
        area=area,
    )


@dataclass(frozen=True)
class Theme:
    variables: dict[str, str]
    is_dark: bool
    working_set: tuple[CandidateColor, ...]
    by_luminance: tuple[CandidateColor, ...]
    roles: dict[str, CandidateColor] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "variables": dict(self.variables),
            "is_dark": self.is_dark,
            "working_set": [color.to_dict() for color in self.working_set],
        }
