"""Gemini ``generateContent`` client used for image generation."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx
from fastapi import status

from ..config import Settings, get_settings
from ..schemas import (
    DEFAULT_MIME_TYPE,
    Content,
    ContentPart,
    GenerateContentRequest,
    GenerationRequest,
    InlineData,
)
from .imagegenerationclient import (
    GeneratedImage,
    GenerationFailure,
    GenerationResult,
    ImageGenerationClient,
)

logger = logging.getLogger(__name__)

NO_IMAGE_MESSAGE = "API did not return image data."
UNEXPECTED_ERROR_MESSAGE = "Unexpected server error."


def build_payload(request: GenerationRequest) -> Dict[str, Any]:
    """Build the generateContent body: optional reference image first, prompt last."""
    parts: List[ContentPart] = []
    if request.base64Image:
        parts.append(
            ContentPart(
                inlineData=InlineData(
                    mimeType=request.mimeType or DEFAULT_MIME_TYPE,
                    data=request.base64Image,
                )
            )
        )
    parts.append(ContentPart(text=request.prompt))

    envelope = GenerateContentRequest(contents=[Content(parts=parts)])
    return envelope.model_dump(exclude_none=True)


def _error_message(body: Any) -> Optional[str]:
    if not isinstance(body, dict):
        return None
    error = body.get("error")
    if not isinstance(error, dict):
        return None
    message = error.get("message")
    return message if isinstance(message, str) and message else None


def _first_candidate_parts(body: Any) -> List[Dict[str, Any]]:
    if not isinstance(body, dict):
        return []
    candidates = body.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        return []
    candidate = candidates[0]
    if not isinstance(candidate, dict):
        return []
    content = candidate.get("content")
    if not isinstance(content, dict):
        return []
    parts = content.get("parts")
    if not isinstance(parts, list):
        return []
    return [part for part in parts if isinstance(part, dict)]


def map_generate_content_response(status_code: int, body: Any) -> GenerationResult:
    """
    Translate a generateContent reply into a generation result.

    Args:
        status_code (int): Upstream HTTP status.
        body (Any): Parsed JSON body, or None when the body was not JSON.

    Returns:
        GenerationResult: The first inline image of the first candidate, or a
        failure carrying the status and message to report.
    """
    if not 200 <= status_code < 300:
        message = _error_message(body) or f"Gemini API request failed with status {status_code}."
        logger.warning("Gemini API rejected the request (status=%s): %s", status_code, message)
        return GenerationFailure(status_code=status_code, message=message)

    parts = _first_candidate_parts(body)

    # Only the first part carrying inline data is considered.
    image_part = next((part for part in parts if part.get("inlineData")), None)
    if image_part is not None:
        inline = image_part["inlineData"]
        data = inline.get("data") if isinstance(inline, dict) else None
        if data:
            return GeneratedImage(data=data, mime_type=inline.get("mimeType"))

    text = next((part["text"] for part in parts if part.get("text")), None)
    logger.warning("Gemini API returned no image data (text=%r)", text)
    return GenerationFailure(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        message=str(text) if text else NO_IMAGE_MESSAGE,
    )


class GeminiImageGenerationClient(ImageGenerationClient):
    """Calls a Gemini image model through the REST ``generateContent`` endpoint.

    A fresh :class:`httpx.AsyncClient` is opened for every call; ``transport``
    can be supplied to route requests somewhere other than the network.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._transport = transport

    @property
    def endpoint(self) -> str:
        base_url = self.settings.gemini_api_base_url.rstrip("/")
        model = self.settings.gemini_model
        if model.startswith("models/"):
            model = model[len("models/"):]
        return f"{base_url}/models/{model}:generateContent"

    def _auth(self) -> tuple[Dict[str, str], Dict[str, str]]:
        api_key = self.settings.api_key or ""
        headers = {"Content-Type": "application/json"}
        params: Dict[str, str] = {}
        if self.settings.api_key_transport == "query":
            params["key"] = api_key
        else:
            headers["x-goog-api-key"] = api_key
        return headers, params

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        payload = build_payload(request)
        headers, params = self._auth()
        logger.debug(
            "Calling Gemini generateContent model=%s url=%s reference_image=%s",
            self.settings.gemini_model,
            self.endpoint,
            bool(request.base64Image),
        )

        try:
            async with httpx.AsyncClient(
                timeout=self.settings.request_timeout_seconds,
                transport=self._transport,
            ) as client:
                response = await client.post(
                    self.endpoint,
                    json=payload,
                    headers=headers,
                    params=params or None,
                )
        except httpx.HTTPError as exc:
            logger.exception("Gemini API proxy error")
            return GenerationFailure(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                message=str(exc) or UNEXPECTED_ERROR_MESSAGE,
            )

        try:
            body = response.json()
        except ValueError:
            body = None

        return map_generate_content_response(response.status_code, body)
