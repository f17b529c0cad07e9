"""
Selector tests

Run:
    cd backend
    pytest tests/test_selector.py -v
"""

from compression_relay.models import ImageAsset
from compression_relay.selector import select_smaller


class TestSelectSmaller:
    """Never serve more bytes than the origin did"""

    def test_smaller_candidate_wins(self):
        """Test: compressed < original -> WebP is served"""
        original = ImageAsset(data=b"o" * 1000, content_type="image/jpeg")

        result = select_smaller(original, b"c" * 100)

        assert result.was_compressed is True
        assert result.chosen.data == b"c" * 100
        assert result.chosen.content_type == "image/webp"
        assert (result.original_size, result.compressed_size) == (1000, 100)

    def test_larger_candidate_loses(self):
        """Test: compressed > original -> original unchanged"""
        original = ImageAsset(data=b"o" * 100, content_type="image/webp")

        result = select_smaller(original, b"c" * 250)

        assert result.was_compressed is False
        assert result.chosen is original
        assert result.compressed_size == result.original_size == 100

    def test_tie_keeps_original(self):
        """Test: equal size is not worth a format change"""
        original = ImageAsset(data=b"o" * 64, content_type="image/png")

        result = select_smaller(original, b"c" * 64)

        assert result.chosen is original
        assert result.chosen.content_type == "image/png"

    def test_chosen_never_larger_than_original(self):
        """Test: holds for a spread of candidate sizes"""
        original = ImageAsset(data=b"o" * 500, content_type="image/jpeg")

        for size in (0, 1, 499, 500, 501, 5000):
            result = select_smaller(original, b"c" * size)
            assert result.chosen.byte_length <= original.byte_length


class TestImageAsset:
    def test_byte_length_is_derived(self):
        asset = ImageAsset(data=b"12345", content_type="image/jpeg")

        assert asset.byte_length == 5
