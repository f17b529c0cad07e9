"""
Compression Relay API Routes

Provides endpoints for:
- Compressing a remote image (smaller of original / WebP, else redirect)
- CORS preflight
- Health and service information
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse, Response

from .composer import build_error_response, relay_headers
from .config import SERVICE_NAME, SERVICE_VERSION, RelayConfig
from .controller import CompressionRelay
from .engine import engine_registry
from .models import CompressionMode, HealthBody, InfoBody, OptimizationProfile

logger = logging.getLogger(__name__)

# ============================================
# Configuration
# ============================================

config = RelayConfig.from_env()

relay = CompressionRelay.from_config(config)

# ============================================
# Router
# ============================================

router = APIRouter(tags=["Compression Relay"])


def _profile() -> OptimizationProfile:
    return OptimizationProfile(
        target_quality=relay.config.quality,
        effort=relay.config.effort,
        max_width=relay.config.max_width,
        max_height=relay.config.max_height,
        format="webp",
        transcoder=relay.transcoder.name,
    )


# ============================================
# Endpoints
# ============================================

@router.get("/")
@router.get("/api/compress")
async def compress_image(
    url: Optional[str] = Query(None, description="URL of the image to compress"),
    mode: Optional[str] = Query(None, description="Advisory size target: strict (50KB) or relaxed (100KB)"),
    health: Optional[str] = Query(None, description="Any non-empty value answers like /health"),
    info: Optional[str] = Query(None, description="Any non-empty value answers like /info"),
):
    """
    Serve a smaller version of a remote image.

    This endpoint:
    1. Fetches the image from its origin with mobile browser headers
    2. Resizes it to 600px wide and re-encodes it as WebP
    3. Returns whichever of original / WebP is smaller
    4. Redirects (302) to the original URL if anything goes wrong

    Example:
        GET /?url=https://example.com/chapter-1/001.jpg&mode=strict
    """
    if health:
        return await health_check()
    if info:
        return await service_info()
    if not url:
        return build_error_response(400, "URL required")

    return await relay.handle(url, CompressionMode.parse(mode))


@router.options("/")
@router.options("/api/compress")
async def preflight():
    """CORS preflight."""
    return Response(status_code=200, headers=relay_headers())


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    body = HealthBody(
        status="ok",
        service=SERVICE_NAME,
        version=SERVICE_VERSION,
        timestamp=datetime.now(timezone.utc).isoformat(),
        engine_ready=engine_registry.is_ready,
        optimization=_profile(),
    )
    return JSONResponse(content=body.model_dump(), headers=relay_headers())


@router.get("/info")
async def service_info():
    """Describe the service, its endpoints and the compression profile."""
    body = InfoBody(
        service=f"{SERVICE_NAME} v{SERVICE_VERSION}",
        description="Bandwidth-saving image relay for manga and manhwa readers",
        endpoints={
            "compression": "/?url=IMAGE_URL&mode=strict|relaxed",
            "compression_alias": "/api/compress?url=IMAGE_URL",
            "health": "/health or /?health=1",
            "info": "/info or /?info=1",
        },
        compression_config=_profile(),
        modes={mode.value: f"{mode.target_size_kb}KB target (advisory)" for mode in CompressionMode},
    )
    return JSONResponse(content=body.model_dump(), headers=relay_headers())
