"""
Compression relay test configuration

Fixtures build:
- real images in memory (Pillow) to feed the pipeline
- fake origins served through httpx.MockTransport
- relays wired to those origins

Run:
    pytest                   # whole suite, from the repository root
    pytest -m "not slow"     # skip the multi-megapixel encodes
    pytest -k fetcher -v     # one area

Key ideas:
- No network: every origin request is answered by a MockTransport handler
- Real transcoding: the embedded transcoder runs the actual Pillow engine
- Fakes only where a test needs a specific transcoder outcome
"""

import os
import random
import sys
from io import BytesIO
from pathlib import Path
from typing import Callable, Dict, Optional, Tuple

import httpx
import pytest
from PIL import Image

# Add backend directory to the Python path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

from compression_relay.config import RelayConfig
from compression_relay.controller import CompressionRelay
from compression_relay.errors import TranscodeError
from compression_relay.fetcher import OriginFetcher
from compression_relay.models import ImageAsset, TranscodeRequest
from compression_relay.transcoder import EmbeddedEngineTranscoder, ImageTranscoder


# ============================================
# Image helpers
# ============================================

def make_image_bytes(
    width: int,
    height: int,
    fmt: str = "JPEG",
    noise: bool = False,
    color: Tuple[int, int, int] = (200, 180, 160),
    mode: str = "RGB",
    **save_kwargs,
) -> bytes:
    """
    Encode a synthetic image.

    noise=True fills every pixel from a seeded RNG, which makes the file
    large and hard to compress (a stand-in for a detailed scan).
    """
    if noise:
        rng = random.Random(width * 10007 + height)
        img = Image.frombytes("RGB", (width, height), rng.randbytes(width * height * 3))
    else:
        img = Image.new("RGB", (width, height), color)

    if mode != "RGB":
        img = img.convert(mode)

    output = BytesIO()
    img.save(output, format=fmt, **save_kwargs)
    img.close()
    return output.getvalue()


def image_size(data: bytes) -> Tuple[int, int]:
    with Image.open(BytesIO(data)) as img:
        return img.size


def image_format(data: bytes) -> Optional[str]:
    with Image.open(BytesIO(data)) as img:
        return img.format


@pytest.fixture(scope="session")
def large_jpeg() -> bytes:
    """Detailed 1200x1800 JPEG of roughly 2MB."""
    return make_image_bytes(1200, 1800, "JPEG", noise=True, quality=95)


@pytest.fixture(scope="session")
def tiny_webp() -> bytes:
    """10x10 flat WebP, already far smaller than any 600px re-encode."""
    return make_image_bytes(10, 10, "WEBP", quality=5)


# ============================================
# Fake origin
# ============================================

OriginRoute = Tuple[int, Dict[str, str], bytes]


def build_origin(routes: Dict[str, OriginRoute], seen: Optional[list] = None) -> httpx.MockTransport:
    """
    MockTransport answering from a {url: (status, headers, body)} table.

    Unknown URLs get a 404. Every request is appended to `seen` when given.
    """
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        status, headers, body = routes.get(str(request.url), (404, {}, b"not found"))
        return httpx.Response(status, headers=headers, content=body)

    return httpx.MockTransport(handler)


def build_fetcher(transport: httpx.BaseTransport, max_input_bytes: int = 15 * 1024 * 1024) -> OriginFetcher:
    client = httpx.AsyncClient(transport=transport, follow_redirects=True, timeout=5.0)
    return OriginFetcher(client, max_input_bytes=max_input_bytes)


class FakeTranscoder(ImageTranscoder):
    """Returns canned bytes (or raises) and records what it was asked."""

    name = "fake"

    def __init__(self, output: bytes = b"", error: Optional[Exception] = None):
        self.output = output
        self.error = error
        self.requests = []

    async def transcode(self, asset: ImageAsset, request: TranscodeRequest) -> bytes:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.output


@pytest.fixture
def relay_factory() -> Callable[..., CompressionRelay]:
    """
    Build a relay around a routes table.

    Usage:
        relay = relay_factory({URL: (200, {"content-type": "image/jpeg"}, data)})
        relay = relay_factory(routes, transcoder=FakeTranscoder(b"x"))
    """
    def factory(
        routes: Dict[str, OriginRoute],
        transcoder: Optional[ImageTranscoder] = None,
        config: Optional[RelayConfig] = None,
        seen: Optional[list] = None,
    ) -> CompressionRelay:
        config = config or RelayConfig()
        fetcher = build_fetcher(build_origin(routes, seen), config.max_input_bytes)
        return CompressionRelay(fetcher, transcoder or EmbeddedEngineTranscoder(), config)

    return factory


@pytest.fixture(autouse=True)
def _clean_relay_env(monkeypatch):
    """Keep developer environment variables out of config tests."""
    for key in list(os.environ):
        if key.startswith("RELAY_") or key in ("TRANSCODER_BACKEND", "MANAGED_TRANSCODER_URL"):
            monkeypatch.delenv(key, raising=False)


def assert_redirects_to(response, url: str):
    """Assert the response is the 302 fallback to `url`."""
    assert response.status_code == 302, f"Expected 302, got {response.status_code}"
    assert response.headers["location"] == url


def assert_transcode_stage(error: Exception, stage: str):
    assert isinstance(error, TranscodeError), f"Expected TranscodeError, got {type(error).__name__}"
    assert error.stage == stage
