"""
Image Transcoders

Two interchangeable ways to turn the original image into a smaller WebP:
- EmbeddedEngineTranscoder: decode/resize/encode in-process with Pillow
- ManagedServiceTranscoder: hand the bytes to an external resize service

Both encode exactly once at the configured quality. There is no
iterative re-encoding towards a byte budget.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Callable, Optional

import httpx

from .config import TRANSCODER_EMBEDDED, TRANSCODER_MANAGED, RelayConfig
from .engine import PillowEngine, get_engine
from .errors import TranscodeError
from .models import ImageAsset, TranscodeRequest

logger = logging.getLogger(__name__)


class ImageTranscoder(ABC):
    """Capability: produce a transcoded candidate for an image."""

    name: str = "transcoder"

    @abstractmethod
    async def transcode(self, asset: ImageAsset, request: TranscodeRequest) -> bytes:
        """Return the encoded candidate or raise TranscodeError."""

    async def close(self) -> None:
        return None


class EmbeddedEngineTranscoder(ImageTranscoder):
    """
    Transcodes with the process-wide Pillow engine.

    The CPU-bound work runs in a worker thread so other requests keep
    moving while a large page is being encoded.
    """

    name = TRANSCODER_EMBEDDED

    def __init__(self, engine_provider: Callable[[], PillowEngine] = get_engine):
        self._engine_provider = engine_provider

    async def transcode(self, asset: ImageAsset, request: TranscodeRequest) -> bytes:
        return await asyncio.to_thread(self.transcode_sync, request)

    def transcode_sync(self, request: TranscodeRequest) -> bytes:
        engine = self._engine_provider()

        img = engine.decode(request.source_bytes)
        resized = None
        try:
            resized = engine.resize(img, request.max_width, request.max_height)
            encoded = engine.encode_webp(resized, request.quality, request.effort)
            logger.debug(
                f"[Transcoder] {img.width}x{img.height} -> "
                f"{resized.width}x{resized.height}, {len(encoded)} bytes"
            )
        finally:
            # PIL keeps pixel buffers alive until close()
            if resized is not None:
                resized.close()
            img.close()

        return encoded


class ManagedServiceTranscoder(ImageTranscoder):
    """
    Delegates the transcode to an external image-resizing service.

    The service is a black box: it receives the source bytes as the
    request body, the policy as query parameters, and answers with the
    encoded image.
    """

    name = TRANSCODER_MANAGED

    def __init__(self, endpoint: str, http_client: Optional[httpx.AsyncClient] = None, timeout: float = 30.0):
        self.endpoint = endpoint
        self.http_client = http_client or httpx.AsyncClient(timeout=timeout, follow_redirects=True)

    async def close(self) -> None:
        await self.http_client.aclose()

    async def transcode(self, asset: ImageAsset, request: TranscodeRequest) -> bytes:
        params = {
            "width": request.max_width,
            "height": request.max_height,
            "quality": request.quality,
            "format": request.target_codec.value,
            "effort": request.effort,
        }
        try:
            response = await self.http_client.post(
                self.endpoint,
                params=params,
                content=request.source_bytes,
                headers={"Content-Type": asset.content_type},
            )
        except httpx.HTTPError as e:
            raise TranscodeError("managed_service", f"request failed: {e!r}") from e

        if not response.is_success:
            raise TranscodeError("managed_service", f"service returned HTTP {response.status_code}")
        if not response.content:
            raise TranscodeError("managed_service", "service returned an empty body")

        # the payload is served under the target codec's mime type
        content_type = response.headers.get("content-type", "").split(";")[0].strip().lower()
        if content_type != request.target_codec.mime_type:
            raise TranscodeError(
                "managed_service",
                f"service answered '{content_type or 'no content type'}', expected {request.target_codec.mime_type}",
            )

        return response.content


def build_transcoder(config: RelayConfig) -> ImageTranscoder:
    """Pick the transcoder variant named by the configuration."""
    if config.transcoder_backend == TRANSCODER_MANAGED:
        if not config.managed_transcoder_url:
            raise ValueError("MANAGED_TRANSCODER_URL is required when TRANSCODER_BACKEND=managed")
        return ManagedServiceTranscoder(config.managed_transcoder_url, timeout=config.fetch_timeout)
    if config.transcoder_backend != TRANSCODER_EMBEDDED:
        raise ValueError(f"Unknown TRANSCODER_BACKEND: {config.transcoder_backend}")
    return EmbeddedEngineTranscoder()
