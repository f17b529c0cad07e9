"""
Fallback Controller

Runs one request through the pipeline:

    start -> fetching -> transcoding -> selecting -> composing -> done

A failure in any stage stops the walk and yields a PipelineFailure tagged
with that stage. resolve_outcome() is the single place where outcomes turn
into HTTP: a composed response passes through, every failure becomes a 302
to the original image URL. Callers never see an error body from here.
"""

import logging
from typing import Optional

from fastapi.responses import Response

from .composer import build_redirect_response, compose_image_response
from .config import RelayConfig
from .errors import RelayError
from .fetcher import OriginFetcher
from .models import (
    CompressionMode,
    PipelineFailure,
    PipelineOutcome,
    PipelineStage,
    TranscodeRequest,
)
from .selector import select_smaller
from .transcoder import ImageTranscoder, build_transcoder

logger = logging.getLogger(__name__)


class CompressionRelay:
    """
    Fetch, transcode, select and compose for a single image URL.

    Usage:
        relay = CompressionRelay.from_config(RelayConfig.from_env())
        response = await relay.handle("https://example.com/001.jpg")
    """

    def __init__(
        self,
        fetcher: OriginFetcher,
        transcoder: ImageTranscoder,
        config: Optional[RelayConfig] = None,
    ):
        self.fetcher = fetcher
        self.transcoder = transcoder
        self.config = config or RelayConfig()

    @classmethod
    def from_config(cls, config: RelayConfig) -> "CompressionRelay":
        fetcher = OriginFetcher(
            OriginFetcher.build_client(config.fetch_timeout),
            max_input_bytes=config.max_input_bytes,
        )
        return cls(fetcher, build_transcoder(config), config)

    async def close(self) -> None:
        await self.fetcher.close()
        await self.transcoder.close()

    def build_request(self, source_bytes: bytes) -> TranscodeRequest:
        return TranscodeRequest(
            source_bytes=source_bytes,
            max_width=self.config.max_width,
            max_height=self.config.max_height,
            quality=self.config.quality,
            effort=self.config.effort,
        )

    async def run(self, url: str, mode: CompressionMode = CompressionMode.STRICT) -> PipelineOutcome:
        stage = PipelineStage.START
        try:
            stage = PipelineStage.FETCHING
            original = await self.fetcher.fetch(url)

            stage = PipelineStage.TRANSCODING
            compressed = await self.transcoder.transcode(original, self.build_request(original.data))

            stage = PipelineStage.SELECTING
            selection = select_smaller(original, compressed)

            stage = PipelineStage.COMPOSING
            response = compose_image_response(selection, mode)
        except Exception as e:
            return PipelineFailure(stage=stage, error=e)

        logger.info(
            f"[CompressionRelay] {PipelineStage.DONE.value}: {url[:60]}... "
            f"({selection.original_size//1024}KB -> {selection.compressed_size//1024}KB, "
            f"compressed={selection.was_compressed}, mode={mode.value})"
        )
        return response

    async def handle(self, url: str, mode: CompressionMode = CompressionMode.STRICT) -> Response:
        logger.info(f"[CompressionRelay] Processing: {url[:80]} (mode: {mode.value})")
        return resolve_outcome(await self.run(url, mode), url)


def resolve_outcome(outcome: PipelineOutcome, url: str) -> Response:
    """Map any pipeline outcome to the response the caller receives."""
    if not isinstance(outcome, PipelineFailure):
        return outcome

    logger.warning(
        f"[CompressionRelay] {PipelineStage.FALLBACK.value} from {outcome.stage.value}: "
        f"{outcome.kind}: {outcome.message} (url={url[:120]})",
        exc_info=None if isinstance(outcome.error, RelayError) else outcome.error,
    )
    return build_redirect_response(url)
