class ImagingError(Exception):
    """Base exception for all image decoding and rendering errors."""


class ImageDecodeError(ImagingError):
    """Raised when source bytes cannot be decoded as an image."""


class RenderError(ImagingError):
    """Raised when a resize or encode operation fails."""


class PaletteError(ImagingError):
    """Raised when colour extraction fails."""
