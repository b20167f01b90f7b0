from dataclasses import dataclass, field


@dataclass(frozen=True)
class ImageMetadata:
    """Intrinsic properties of a decoded source image."""

    width: int
    height: int
    format: str
    mime_type: str
    exif: dict[str, str] = field(default_factory=dict)

    @property
    def extension(self) -> str:
        return "jpg" if self.format == "jpeg" else self.format


@dataclass(frozen=True)
class RenderedImage:
    """Encoded output of a single render."""

    data: bytes
    width: int
    height: int
    content_type: str = "image/jpeg"

    @property
    def size_bytes(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class ColorPalette:
    """Ranked representative colours as upper-case #RRGGBB strings."""

    colors: list[str]
    source: str
