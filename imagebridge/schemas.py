"""Pydantic models shared by the FastAPI endpoints and the form controller."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class AspectRatioOption(BaseModel):
    label: str
    value: str


ASPECT_RATIO_OPTIONS: List[AspectRatioOption] = [
    AspectRatioOption(label="Square (1:1)", value="1:1"),
    AspectRatioOption(label="Portrait (4:3)", value="4:3"),
    AspectRatioOption(label="Widescreen (16:9)", value="16:9"),
]

DEFAULT_ASPECT_RATIO = ASPECT_RATIO_OPTIONS[0].value


class GenerateImageRequest(BaseModel):
    prompt: Optional[str] = Field(None, description="Text prompt for image generation")
    aspectRatio: Optional[str] = Field(None, description="Aspect ratio label, e.g. '16:9'")
    negativePrompt: Optional[str] = Field(None, description="Things the image should avoid")


class GenerateImageResponse(BaseModel):
    imageUrl: str = Field(..., description="Base64-encoded PNG as a data URL")


class ErrorResponse(BaseModel):
    error: str = Field(..., description="Human-readable failure message")


class HealthResponse(BaseModel):
    status: str
    imageModel: str
    apiKeyConfigured: bool
