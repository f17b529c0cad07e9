"""
Compression Relay Module

Fetches a remote image, re-encodes it as a small WebP and serves
whichever of the two is smaller. Any failure redirects the caller to the
original image so readers are never left without a page.

Features:
- Mobile-browser request headers to get past hotlink blocking
- 600px wide WebP at quality 5, encoded once
- Embedded (Pillow) or managed-service transcoding
- Size telemetry headers for the reader UI
"""

from .routes_fastapi import router, relay
from .controller import CompressionRelay, resolve_outcome

__all__ = ["router", "relay", "CompressionRelay", "resolve_outcome"]
