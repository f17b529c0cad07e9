"""
Response Composer

Builds every response the relay can send:
- the chosen image with cache and size telemetry headers
- the 302 fallback to the original image
- the JSON error for malformed requests
"""

from typing import Dict
from urllib.parse import quote

from fastapi.responses import JSONResponse, Response

from .config import SERVICE_NAME, SERVICE_VERSION
from .models import CompressionMode, ErrorBody, SelectionResult

CACHE_CONTROL = "public, max-age=31536000, stale-while-revalidate"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Accept, Origin",
    "Access-Control-Expose-Headers": "X-Original-Size, X-Compressed-Size, X-Compression-Mode, X-Target-Size",
}

IDENTITY_HEADERS = {
    "X-Compression-Relay": f"{SERVICE_NAME}/{SERVICE_VERSION}",
    "X-Manga-Optimization": "enabled",
}

RELAY_HEADERS = {**CORS_HEADERS, **IDENTITY_HEADERS}


def relay_headers() -> Dict[str, str]:
    """CORS and service identity headers sent on every response."""
    return dict(RELAY_HEADERS)


def compose_image_response(selection: SelectionResult, mode: CompressionMode = CompressionMode.STRICT) -> Response:
    """Serve the chosen payload with its telemetry."""
    headers = {
        "Cache-Control": CACHE_CONTROL,
        "X-Original-Size": str(selection.original_size),
        "X-Compressed-Size": str(selection.compressed_size),
        "X-Compression-Mode": mode.value,
        "X-Target-Size": f"{mode.target_size_kb}KB",
        **RELAY_HEADERS,
    }
    return Response(
        content=selection.chosen.data,
        media_type=selection.chosen.content_type,
        headers=headers,
    )


def build_redirect_response(url: str) -> Response:
    """
    302 to the original image.

    Location carries the URL exactly as received, except for characters
    a header value cannot hold: control characters (CR/LF would split the
    header) and anything outside latin-1. Those are percent-encoded.
    """
    location = "".join(_header_safe(char) for char in url)

    return Response(
        status_code=302,
        headers={"Location": location, **RELAY_HEADERS},
    )


def _header_safe(char: str) -> str:
    code = ord(char)
    if code < 0x20 or code == 0x7F or code > 0xFF:
        return quote(char, safe="")
    return char


def build_error_response(status_code: int, message: str) -> JSONResponse:
    body = ErrorBody(error=message)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(),
        headers=relay_headers(),
    )
