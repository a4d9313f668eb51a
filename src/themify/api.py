from __future__ import annotations

from dataclasses import replace

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field, field_validator
from starlette.concurrency import run_in_threadpool

from .io import is_url
from .pipeline import ThemePipeline
from .theme import AssignerConfig


class ThemeRequest(BaseModel):
    image_url: str = Field(..., description="HTTP(S) URL of a PNG, JPEG or SVG image")
    seed: int | None = Field(
        default=None, description="Seed for the randomized border radius"
    )
    strict: bool = Field(
        default=False,
        description="Fail instead of using the fallback color when no colors are usable",
    )
    max_colors: int = Field(
        default=8, ge=1, le=16, description="Maximum colors to extract"
    )

    @field_validator("image_url")
    @classmethod
    def require_http_url(cls, value: str) -> str:
        # server-side file paths are never opened
        if not is_url(value):
            raise ValueError("image_url must be an http(s) URL")
        return value


class CandidateItem(BaseModel):
    hex: str
    hue: float
    saturation: float
    lightness: float
    area: float


class ThemeResponse(BaseModel):
    variables: dict[str, str]
    is_dark: bool
    candidates: list[CandidateItem]


app = FastAPI(
    title="Themify API",
    version="1.0.0",
    description="Derive CSS theme variables from an image URL.",
)


def _build_pipeline(strict: bool, max_colors: int, seed: int | None) -> ThemePipeline:
    config = AssignerConfig()
    if strict:
        config = replace(config, fallback=None)
    return ThemePipeline(assigner_config=config, max_colors=max_colors, seed=seed)


@app.post("/theme", response_model=ThemeResponse)
async def create_theme(payload: ThemeRequest) -> ThemeResponse:
    pipeline = _build_pipeline(
        strict=payload.strict, max_colors=payload.max_colors, seed=payload.seed
    )
    try:
        result = await run_in_threadpool(pipeline.build, payload.image_url)
    except Exception as exc:
        raise HTTPException(
            status_code=400, detail=f"failed_to_build_theme: {exc}"
        ) from exc

    return ThemeResponse(
        variables=dict(result.theme.variables),
        is_dark=result.theme.is_dark,
        candidates=[
            CandidateItem(
                hex=color.hex,
                hue=float(color.hue),
                saturation=float(color.saturation),
                lightness=float(color.lightness),
                area=float(color.area),
            )
            for color in result.candidates
        ],
    )
