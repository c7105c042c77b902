"""Pydantic models shared by the proxy endpoint and the Gemini client."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


DEFAULT_MIME_TYPE = "image/jpeg"


class GenerationRequest(BaseModel):
    prompt: str = Field(..., min_length=1, description="Text prompt for image generation")
    base64Image: Optional[str] = Field(None, description="Optional base64-encoded reference image")
    mimeType: Optional[str] = Field(None, description="Mime type of the reference image")


class ImageResponse(BaseModel):
    imageUrl: str = Field(..., description="Generated image as a data URI")


class ErrorResponse(BaseModel):
    error: str


# ---- Gemini generateContent envelope ----
class InlineData(BaseModel):
    mimeType: str
    data: str


class ContentPart(BaseModel):
    inlineData: Optional[InlineData] = None
    text: Optional[str] = None


class Content(BaseModel):
    parts: List[ContentPart]


class GenerationConfig(BaseModel):
    responseModalities: List[str] = Field(default_factory=lambda: ["TEXT", "IMAGE"])


class GenerateContentRequest(BaseModel):
    contents: List[Content]
    generationConfig: GenerationConfig = Field(default_factory=GenerationConfig)
# ------------------------------------------
