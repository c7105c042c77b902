from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Union

from ..schemas import GenerationRequest


@dataclass(frozen=True)
class GeneratedImage:
    """Base64 image data returned by the upstream model."""

    data: str
    mime_type: Optional[str] = None

    @property
    def data_url(self) -> str:
        return f"data:image/png;base64,{self.data}"


@dataclass(frozen=True)
class GenerationFailure:
    """An upstream failure tagged with the status to report to the caller."""

    status_code: int
    message: str


GenerationResult = Union[GeneratedImage, GenerationFailure]


class ImageGenerationClient(ABC):
    """Abstract interface for an image generation client.

    Implementations perform exactly one upstream call per request and report
    upstream rejections as a :class:`GenerationFailure` instead of raising.
    """

    @abstractmethod
    async def generate(self, request: GenerationRequest) -> GenerationResult:
        """Generate an image from a prompt and optional reference image."""
