"""
Compression Relay Configuration

All knobs are read from environment variables once at startup.
"""

import os
from dataclasses import dataclass
from typing import Optional

SERVICE_NAME = "compression-relay"
SERVICE_VERSION = "1.0.0"

TRANSCODER_EMBEDDED = "embedded"
TRANSCODER_MANAGED = "managed"


@dataclass
class RelayConfig:
    """Settings for fetch limits, transcode policy and backend selection."""
    # Fetch settings
    max_input_mb: int = 15          # Largest origin body accepted
    fetch_timeout: float = 30.0     # Origin fetch timeout in seconds

    # Transcode policy
    max_width: int = 600            # Output width in pixels
    max_height: int = 15000         # Height cap for very tall strips
    quality: int = 5                # WebP quality (0-100)
    effort: int = 6                 # WebP method (0-6)

    # Backend selection
    transcoder_backend: str = TRANSCODER_EMBEDDED
    managed_transcoder_url: Optional[str] = None

    @property
    def max_input_bytes(self) -> int:
        return self.max_input_mb * 1024 * 1024

    @classmethod
    def from_env(cls) -> "RelayConfig":
        return cls(
            max_input_mb=int(os.getenv("RELAY_MAX_INPUT_MB", "15")),
            fetch_timeout=float(os.getenv("RELAY_FETCH_TIMEOUT", "30")),
            max_width=int(os.getenv("RELAY_MAX_WIDTH", "600")),
            max_height=int(os.getenv("RELAY_MAX_HEIGHT", "15000")),
            quality=int(os.getenv("RELAY_WEBP_QUALITY", "5")),
            effort=int(os.getenv("RELAY_WEBP_EFFORT", "6")),
            transcoder_backend=os.getenv("TRANSCODER_BACKEND", TRANSCODER_EMBEDDED).lower(),
            managed_transcoder_url=os.getenv("MANAGED_TRANSCODER_URL") or None,
        )
