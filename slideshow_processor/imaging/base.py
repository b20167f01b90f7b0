from abc import ABC, abstractmethod

from slideshow_processor.imaging.models import ColorPalette, ImageMetadata, RenderedImage


class BaseImageRenderer(ABC):
    """Contract for image decode/resize/encode adapters."""

    @abstractmethod
    def read_metadata(self, data: bytes) -> ImageMetadata:
        """Decode enough of the image to report its size, format and EXIF.

        Raises:
            ImageDecodeError: if the bytes are not a supported image.
        """

    @abstractmethod
    def render_cover(self, data: bytes, width: int, height: int) -> RenderedImage:
        """Fill exactly width x height, cropping whatever overhangs."""

    @abstractmethod
    def render_contain(self, data: bytes, width: int, height: int) -> RenderedImage:
        """Fit inside width x height without cropping."""

    @abstractmethod
    def render_thumbnail(self, data: bytes, size: int) -> RenderedImage:
        """Square preview thumbnail."""


class BasePaletteExtractor(ABC):
    """Contract for representative-colour extraction adapters."""

    @abstractmethod
    def extract(self, data: bytes) -> ColorPalette:
        """Return the ranked palette of the encoded image."""
