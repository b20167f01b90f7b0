"""Content-addressed object keys, all stemmed on the source fingerprint."""

from slideshow_processor.layout.models import LayoutType


def original_key(fingerprint: str, extension: str) -> str:
    return f"images/originals/{fingerprint}.{extension}"


def thumbnail_key(fingerprint: str) -> str:
    return f"processed/thumbnails/{fingerprint}"


def variant_key(layout_type: LayoutType, width: int, height: int, fingerprint: str) -> str:
    return f"processed/{layout_type.value}/{width}x{height}/{fingerprint}.jpg"


def contain_variant_key(
    layout_type: LayoutType, width: int, height: int, fingerprint: str
) -> str:
    return f"processed/{layout_type.value}/{width}x{height}/contain/{fingerprint}.jpg"


def palette_key(fingerprint: str) -> str:
    return f"images/quantized/{fingerprint}.json"
