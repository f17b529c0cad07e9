"""
Origin header tests

Run:
    cd backend
    pytest tests/test_headers.py -v
"""

from compression_relay.headers import FALLBACK_REFERER, build_origin_headers


class TestBuildOriginHeaders:
    """Mobile browser header set"""

    def test_referer_uses_domain_with_trailing_slash(self):
        """Test: Referer is the origin domain plus '/'"""
        headers = build_origin_headers("https://cdn.example.com")

        assert headers["Referer"] == "https://cdn.example.com/"

    def test_referer_falls_back_without_domain(self):
        """Test: no domain -> generic referer"""
        assert build_origin_headers()["Referer"] == FALLBACK_REFERER
        assert build_origin_headers("")["Referer"] == FALLBACK_REFERER

    def test_looks_like_mobile_chrome(self):
        """Test: user agent identifies a mobile browser"""
        headers = build_origin_headers("https://example.com")

        assert "Android" in headers["User-Agent"]
        assert "Mobile" in headers["User-Agent"]
        assert headers["Accept"].startswith("image/webp")
        assert headers["Connection"] == "keep-alive"

    def test_returns_fresh_mapping(self):
        """Test: callers can mutate the result without affecting others"""
        first = build_origin_headers("https://a.example")
        first["Referer"] = "changed"

        assert build_origin_headers("https://a.example")["Referer"] == "https://a.example/"
