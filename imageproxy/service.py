"""Domain logic for turning validated requests into generated images."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends, status

from .aiservices.geminiimagegenerationclient import (
    UNEXPECTED_ERROR_MESSAGE,
    GeminiImageGenerationClient,
)
from .aiservices.imagegenerationclient import (
    GenerationFailure,
    GenerationResult,
    ImageGenerationClient,
)
from .config import Settings, get_settings
from .schemas import GenerationRequest

logger = logging.getLogger(__name__)


class ImageProxyService:
    """Outermost failure boundary around the image generation client."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        image_client: Optional[ImageGenerationClient] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._image_client = image_client or GeminiImageGenerationClient(self.settings)

    async def generate_image(self, request: GenerationRequest) -> GenerationResult:
        """Generate an image; never raises, every failure becomes a GenerationFailure."""
        try:
            return await self._image_client.generate(request)
        except Exception as exc:
            logger.exception("Gemini API proxy error")
            return GenerationFailure(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                message=str(exc) or UNEXPECTED_ERROR_MESSAGE,
            )


def get_image_proxy_service(settings: Settings = Depends(get_settings)) -> ImageProxyService:
    return ImageProxyService(settings)
