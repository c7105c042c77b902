"""FastAPI entry point exposing the image generation proxy."""

from __future__ import annotations

import logging

from fastapi import Depends, FastAPI, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .aiservices.imagegenerationclient import GenerationFailure
from .config import Settings, get_settings
from .schemas import ErrorResponse, ImageResponse
from .service import ImageProxyService, get_image_proxy_service
from .utils import ProxyError, extract_generation_request, parse_body, read_body

logger = logging.getLogger(__name__)


# All methods reach the handler; only POST and OPTIONS are served.
_ROUTED_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def _error_response(status_code: int, message: str, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
        headers=headers,
    )


class JSONCORSMiddleware(CORSMiddleware):
    """CORSMiddleware whose rejected preflights use the `{"error": ...}` body."""

    def preflight_response(self, request_headers) -> Response:
        response = super().preflight_response(request_headers)
        if response.status_code == status.HTTP_200_OK:
            return response
        headers = {
            key: value
            for key, value in response.headers.items()
            if key.lower() not in ("content-length", "content-type")
        }
        return _error_response(response.status_code, bytes(response.body).decode("utf-8"), headers)


app = FastAPI(title="Image Generation Proxy", version="1.0.0")

app.add_middleware(
    JSONCORSMiddleware,
    allow_origins=["*"],
    allow_methods=["POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)


@app.exception_handler(ProxyError)
async def proxy_error_handler(request: Request, exc: ProxyError) -> JSONResponse:
    return _error_response(exc.status_code, exc.message, exc.headers)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error_response(exc.status_code, str(exc.detail), getattr(exc, "headers", None))


@app.get("/health", summary="Health Check Endpoint")
async def healthcheck(settings: Settings = Depends(get_settings)):
    return {
        "status": "ok",
        "imageModel": settings.gemini_model,
        "apiKeyConfigured": settings.api_key is not None,
    }


@app.api_route(
    "/api/generate-image",
    methods=_ROUTED_METHODS,
    response_model=ImageResponse,
    responses={
        400: {"model": ErrorResponse},
        405: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
    summary="Generate an image from a prompt and optional reference image",
)
async def generate_image(
    request: Request,
    settings: Settings = Depends(get_settings),
    service: ImageProxyService = Depends(get_image_proxy_service),
):
    if request.method == "OPTIONS":
        return Response(status_code=status.HTTP_200_OK, headers=CORS_HEADERS)

    if request.method != "POST":
        raise ProxyError(
            status.HTTP_405_METHOD_NOT_ALLOWED,
            "Method Not Allowed",
            headers={"Allow": "POST"},
        )

    if not settings.api_key:
        raise ProxyError(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Missing GEMINI_API_KEY environment variable.",
        )

    raw_body = await read_body(request, settings.max_body_bytes)
    payload = extract_generation_request(parse_body(raw_body))

    result = await service.generate_image(payload)
    if isinstance(result, GenerationFailure):
        return _error_response(result.status_code, result.message)

    return ImageResponse(imageUrl=result.data_url)


__all__ = ["app"]


if __name__ == "__main__":  # pragma: no cover - convenience entry point
    import uvicorn

    uvicorn.run("imageproxy.main:app", host="0.0.0.0", port=8000, reload=True)
