"""
Origin Fetcher

Downloads the source image with browser-like headers and validates that
the response is a reasonably sized image. One attempt, no retries.
"""

import logging
from urllib.parse import urlparse

import httpx

from .errors import InvalidContentType, InvalidUrl, TooLarge, UpstreamError
from .headers import build_origin_headers
from .models import ImageAsset

logger = logging.getLogger(__name__)


def parse_origin(url: str) -> str:
    """
    Validate an image URL and return its domain.

    The domain is scheme://host[:port] and only feeds the Referer header.
    Credentials in the URL never make it into the domain.
    """
    try:
        parsed = urlparse(url)
        port = parsed.port
    except ValueError as e:
        raise InvalidUrl(url, str(e)) from e

    if parsed.scheme not in ("http", "https"):
        raise InvalidUrl(url, f"unsupported scheme '{parsed.scheme}'")
    host = parsed.hostname
    if not host:
        raise InvalidUrl(url, "missing host")

    if ":" in host:
        host = f"[{host}]"
    if port is not None:
        host = f"{host}:{port}"
    return f"{parsed.scheme}://{host}"


class OriginFetcher:
    """
    Fetches images from third-party origins.

    Usage:
        fetcher = OriginFetcher(OriginFetcher.build_client(30.0))
        asset = await fetcher.fetch("https://example.com/page-01.jpg")
    """

    def __init__(self, http_client: httpx.AsyncClient, max_input_bytes: int = 15 * 1024 * 1024):
        self.http_client = http_client
        self.max_input_bytes = max_input_bytes

    @staticmethod
    def build_client(timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=timeout, follow_redirects=True)

    async def close(self):
        """Close HTTP client."""
        await self.http_client.aclose()

    async def fetch(self, url: str) -> ImageAsset:
        """
        Fetch and validate an origin image.

        The body is streamed and the download stops as soon as it passes
        max_input_bytes, since Content-Length is not trustworthy.

        Raises:
            InvalidUrl: URL is not a usable http(s) URL
            UpstreamError: non-2xx status, timeout or transport failure
            InvalidContentType: response is not image/*
            TooLarge: body exceeds max_input_bytes
        """
        domain = parse_origin(url)

        logger.info(f"[OriginFetcher] Fetching: {url[:80]}...")
        try:
            async with self.http_client.stream("GET", url, headers=build_origin_headers(domain)) as response:
                if not response.is_success:
                    raise UpstreamError(response.status_code)

                content_type = response.headers.get("content-type", "").strip()
                if not _is_image_type(content_type):
                    raise InvalidContentType(content_type or None)

                data = await self._read_limited(response)
        except httpx.TimeoutException as e:
            raise UpstreamError(None, f"Timeout fetching origin: {e!r}") from e
        except httpx.InvalidURL as e:
            raise InvalidUrl(url, str(e)) from e
        except httpx.HTTPError as e:
            raise UpstreamError(None, f"Origin unreachable: {e!r}") from e

        asset = ImageAsset(data=data, content_type=content_type)
        logger.debug(f"[OriginFetcher] Fetched {asset.byte_length} bytes ({content_type})")
        return asset

    async def _read_limited(self, response: httpx.Response) -> bytes:
        chunks = []
        received = 0
        async for chunk in response.aiter_bytes():
            received += len(chunk)
            if received > self.max_input_bytes:
                raise TooLarge(received, self.max_input_bytes)
            chunks.append(chunk)
        return b"".join(chunks)


def _is_image_type(content_type: str) -> bool:
    return content_type.split(";")[0].strip().lower().startswith("image/")
