"""
Compression Relay Models

Internal records passed between pipeline stages plus the pydantic bodies
of the JSON endpoints.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Union

from pydantic import BaseModel
from fastapi.responses import Response

from .errors import RelayError


# ============================================
# Enums
# ============================================

class TargetCodec(str, Enum):
    """Output codecs the transcoder can produce"""
    WEBP = "webp"

    @property
    def mime_type(self) -> str:
        return f"image/{self.value}"


class CompressionMode(str, Enum):
    """Advisory output-size target requested by the caller"""
    STRICT = "strict"
    RELAXED = "relaxed"

    @property
    def target_size_kb(self) -> int:
        return 50 if self is CompressionMode.STRICT else 100

    @classmethod
    def parse(cls, value: Optional[str]) -> "CompressionMode":
        """Unknown or missing values fall back to strict."""
        try:
            return cls((value or cls.STRICT.value).strip().lower())
        except ValueError:
            return cls.STRICT


class PipelineStage(str, Enum):
    """States of the fallback controller"""
    START = "start"
    FETCHING = "fetching"
    TRANSCODING = "transcoding"
    SELECTING = "selecting"
    COMPOSING = "composing"
    DONE = "done"
    FALLBACK = "fallback"


# ============================================
# Pipeline Records
# ============================================

@dataclass(frozen=True)
class ImageAsset:
    """Image payload; byte_length is always derived from data."""
    data: bytes
    content_type: str
    byte_length: int = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, "byte_length", len(self.data))


@dataclass(frozen=True)
class TranscodeRequest:
    """One-shot transcode parameters."""
    source_bytes: bytes
    max_width: int = 600
    max_height: int = 15000
    target_codec: TargetCodec = TargetCodec.WEBP
    quality: int = 5
    effort: int = 6

    def __post_init__(self):
        if not 0 <= self.quality <= 100:
            raise ValueError(f"quality must be within 0-100, got {self.quality}")
        if self.max_width < 1 or self.max_height < 1:
            raise ValueError("max_width and max_height must be positive")


@dataclass(frozen=True)
class SelectionResult:
    """Which asset is served, plus both sizes for telemetry."""
    chosen: ImageAsset
    original_size: int
    compressed_size: int
    was_compressed: bool


@dataclass(frozen=True)
class PipelineFailure:
    """A stage failed; the reducer turns this into a redirect."""
    stage: PipelineStage
    error: Exception

    @property
    def kind(self) -> str:
        return type(self.error).__name__

    @property
    def message(self) -> str:
        if isinstance(self.error, RelayError):
            return self.error.message
        return str(self.error)


FetchOutcome = Union[ImageAsset, PipelineFailure]
PipelineOutcome = Union[Response, PipelineFailure]


# ============================================
# JSON Bodies
# ============================================

class ErrorBody(BaseModel):
    """Body of the 400 returned before any fetch is attempted"""
    error: str
    usage: str = "/?url=IMAGE_URL"


class OptimizationProfile(BaseModel):
    """Fixed compression policy applied to every request"""
    target_quality: int
    effort: int
    max_width: int
    max_height: int
    format: str
    target_size: str = "50-100KB"
    transcoder: str


class HealthBody(BaseModel):
    status: str
    service: str
    version: str
    timestamp: str
    engine_ready: bool
    optimization: OptimizationProfile


class InfoBody(BaseModel):
    service: str
    description: str
    endpoints: Dict[str, str]
    compression_config: OptimizationProfile
    modes: Dict[str, str]
