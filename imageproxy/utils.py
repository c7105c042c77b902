import json
from typing import Any, Mapping, Optional

from fastapi import Request, status
from pydantic import ValidationError

from .schemas import GenerationRequest

_MIB = 1024 * 1024


class ProxyError(Exception):
    """A terminal failure rendered to the client as ``{"error": message}``."""

    def __init__(
        self,
        status_code: int,
        message: str,
        headers: Optional[Mapping[str, str]] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.headers = dict(headers) if headers else None


def _describe_size(limit: int) -> str:
    if limit % _MIB == 0:
        return f"{limit // _MIB} MiB"
    return f"{limit} bytes"


def _payload_too_large(limit: int) -> ProxyError:
    return ProxyError(
        status.HTTP_400_BAD_REQUEST,
        f"Request body exceeds the size limit of {_describe_size(limit)}.",
    )


async def read_body(request: Request, max_bytes: int) -> bytes:
    """
    Accumulate the request body chunk by chunk, refusing to hold more than
    ``max_bytes`` in memory.

    Args:
        request (Request): The inbound request whose body has not been consumed.
        max_bytes (int): Largest accepted body size.

    Returns:
        bytes: The full request body.

    Raises:
        ProxyError: 400 when the declared or actual size exceeds ``max_bytes``.
    """
    declared = request.headers.get("content-length")
    if declared is not None and declared.isdigit() and int(declared) > max_bytes:
        raise _payload_too_large(max_bytes)

    chunks = []
    received = 0
    async for chunk in request.stream():
        received += len(chunk)
        if received > max_bytes:
            raise _payload_too_large(max_bytes)
        chunks.append(chunk)
    return b"".join(chunks)


def parse_body(body: Any) -> Any:
    """
    Turn a request body into a JSON value.

    Empty bodies become an empty object, already-parsed bodies are returned
    untouched and text is decoded as JSON.
    """
    if not body:
        return {}
    if not isinstance(body, (bytes, bytearray, str)):
        return body

    try:
        if isinstance(body, (bytes, bytearray)):
            body = body.decode("utf-8")
        return json.loads(body)
    except (UnicodeDecodeError, ValueError, RecursionError) as exc:
        raise ProxyError(status.HTTP_400_BAD_REQUEST, "Invalid JSON payload.") from exc


def extract_generation_request(body: Any) -> GenerationRequest:
    prompt = body.get("prompt") if isinstance(body, dict) else None
    if not prompt:
        raise ProxyError(status.HTTP_400_BAD_REQUEST, "Prompt is required.")

    try:
        return GenerationRequest.model_validate(body)
    except ValidationError as exc:
        raise ProxyError(status.HTTP_400_BAD_REQUEST, "Invalid request payload.") from exc
