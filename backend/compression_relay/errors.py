"""
Compression Relay Errors

Every failure the pipeline can raise once a candidate image URL is known.
The controller turns all of them into a redirect to the original image,
so each error carries enough context for the log line and nothing more.
"""

from typing import Optional


class RelayError(Exception):
    """Base class for pipeline failures."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidUrl(RelayError):
    """The image URL could not be parsed or is not http(s)."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Invalid URL ({reason}): {url[:80]}")
        self.url = url
        self.reason = reason


class UpstreamError(RelayError):
    """The origin answered with a non-2xx status, or could not be reached."""

    def __init__(self, status: Optional[int], message: Optional[str] = None):
        if message is None:
            message = f"Upstream returned HTTP {status}"
        super().__init__(message)
        self.status = status


class InvalidContentType(RelayError):
    """The origin response is not declared as an image."""

    def __init__(self, content_type: Optional[str]):
        super().__init__(f"Not an image content-type: {content_type or '<missing>'}")
        self.content_type = content_type


class TooLarge(RelayError):
    """The origin body exceeds the configured input limit."""

    def __init__(self, size_bytes: int, limit_bytes: int):
        super().__init__(f"Image too large: {size_bytes} bytes (limit {limit_bytes})")
        self.size_bytes = size_bytes
        self.limit_bytes = limit_bytes


class TranscodeError(RelayError):
    """A transcode stage (decode, resize, encode, managed_service) failed."""

    def __init__(self, stage: str, message: str):
        super().__init__(f"Transcode failed at {stage}: {message}")
        self.stage = stage


class DecodeError(TranscodeError):
    """Source bytes are corrupt or in a format the engine cannot read."""

    def __init__(self, message: str):
        super().__init__("decode", message)


class EngineInitError(RelayError):
    """The image engine could not be loaded in this process."""
