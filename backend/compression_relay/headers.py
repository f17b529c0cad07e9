"""
Outbound request headers that look like a mobile Chrome browser.

Some image hosts refuse requests without a browser user agent or a
same-site Referer, so every origin fetch goes out with these.
"""

from typing import Dict, Optional

MOBILE_USER_AGENT = (
    "Mozilla/5.0 (Linux; Android 10; K) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/137.0.0.0 Mobile Safari/537.36"
)
IMAGE_ACCEPT = "image/webp,image/apng,image/*,*/*;q=0.8"
FALLBACK_REFERER = "https://www.google.com/"


def build_origin_headers(domain: Optional[str] = None) -> Dict[str, str]:
    """
    Build headers for an origin request.

    Args:
        domain: Origin as scheme://host, used for the Referer. When None,
            a generic search-engine referer is sent instead.
    """
    return {
        "User-Agent": MOBILE_USER_AGENT,
        "Accept": IMAGE_ACCEPT,
        "Referer": f"{domain}/" if domain else FALLBACK_REFERER,
        "Connection": "keep-alive",
        "Upgrade-Insecure-Requests": "1",
    }
