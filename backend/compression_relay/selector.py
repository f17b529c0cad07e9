"""Pick whichever payload is smaller: the original or the transcoded one."""

from .models import ImageAsset, SelectionResult, TargetCodec


def select_smaller(
    original: ImageAsset,
    compressed: bytes,
    codec: TargetCodec = TargetCodec.WEBP,
) -> SelectionResult:
    """
    Choose the transcoded candidate only when it is strictly smaller.

    Ties and growth keep the original untouched, so the response is never
    larger than what the origin served.
    """
    candidate = ImageAsset(data=compressed, content_type=codec.mime_type)

    if candidate.byte_length < original.byte_length:
        return SelectionResult(
            chosen=candidate,
            original_size=original.byte_length,
            compressed_size=candidate.byte_length,
            was_compressed=True,
        )

    return SelectionResult(
        chosen=original,
        original_size=original.byte_length,
        compressed_size=original.byte_length,
        was_compressed=False,
    )
