"""
Image Engine

Pillow-backed decode/resize/encode primitives, loaded lazily once per
process. Loading registers every codec plugin and verifies that WebP
encoding is available; a process without it cannot transcode, so each
request falls back to the original image until a later load succeeds.

Thread-safety:
    Transcodes run in worker threads, so first use is guarded by a
    threading.Lock with a double-checked ready flag. Late arrivals block
    on the lock and then reuse the engine the first caller built.
"""

import logging
from io import BytesIO
from threading import Lock
from typing import Callable, Optional, Tuple

from PIL import Image, UnidentifiedImageError, features

from .errors import DecodeError, EngineInitError, TranscodeError

logger = logging.getLogger(__name__)


class PillowEngine:
    """Thin wrapper over PIL for the three transcode steps."""

    def __init__(self):
        self.webp_version: Optional[str] = None

    def load(self) -> None:
        Image.init()
        if not features.check("webp"):
            raise EngineInitError("Pillow was built without WebP support")
        self.webp_version = features.version("webp")
        logger.info(f"[ImageEngine] Loaded Pillow engine (libwebp {self.webp_version})")

    def decode(self, data: bytes) -> Image.Image:
        try:
            img = Image.open(BytesIO(data))
            img.load()
        except (UnidentifiedImageError, Image.DecompressionBombError) as e:
            raise DecodeError(str(e)) from e
        except (OSError, ValueError, SyntaxError) as e:
            # truncated or malformed payloads surface as these from the plugins
            raise DecodeError(f"{type(e).__name__}: {e}") from e
        return img

    @staticmethod
    def fit_size(width: int, height: int, max_width: int, max_height: int) -> Tuple[int, int]:
        """
        Size that makes the width max_width while keeping the aspect ratio,
        unless that would push the height over max_height. Images narrower
        than max_width are scaled up like the rest.
        """
        ratio = min(max_width / width, max_height / height)
        return max(1, round(width * ratio)), max(1, round(height * ratio))

    def resize(self, img: Image.Image, max_width: int, max_height: int) -> Image.Image:
        """Always returns a new image; the caller still owns img."""
        try:
            source = img
            if img.mode not in ("RGB", "RGBA"):
                has_alpha = "A" in img.getbands() or "transparency" in img.info
                source = img.convert("RGBA" if has_alpha else "RGB")
            new_size = self.fit_size(source.width, source.height, max_width, max_height)
            resized = source.resize(new_size, Image.Resampling.LANCZOS)
            if source is not img:
                source.close()
            return resized
        except (OSError, ValueError) as e:
            raise TranscodeError("resize", str(e)) from e

    def encode_webp(self, img: Image.Image, quality: int, effort: int) -> bytes:
        output = BytesIO()
        try:
            img.save(output, format="WEBP", quality=quality, method=effort)
        except (OSError, ValueError, KeyError) as e:
            raise TranscodeError("encode", str(e)) from e
        return output.getvalue()


class EngineRegistry:
    """
    Process-wide holder for the image engine.

    The factory runs at most once successfully; a failed load leaves the
    registry empty so the next request tries again.
    """

    def __init__(self, factory: Callable[[], PillowEngine] = PillowEngine):
        self._factory = factory
        self._engine: Optional[PillowEngine] = None
        self._lock = Lock()

    @property
    def is_ready(self) -> bool:
        return self._engine is not None

    def get(self) -> PillowEngine:
        engine = self._engine
        if engine is not None:
            return engine

        with self._lock:
            if self._engine is None:
                self._engine = self._build()
            return self._engine

    def _build(self) -> PillowEngine:
        try:
            engine = self._factory()
            engine.load()
        except EngineInitError as e:
            logger.error(f"[ImageEngine] Engine load failed: {e}")
            raise
        except Exception as e:
            logger.error(f"[ImageEngine] Engine load failed: {e}")
            raise EngineInitError(f"Image engine unavailable: {e}") from e
        return engine


engine_registry = EngineRegistry()


def get_engine() -> PillowEngine:
    """Return the shared engine, loading it on first use."""
    return engine_registry.get()
