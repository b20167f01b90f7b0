"""Pillow-backed implementation of the renderer contract."""

import io

from PIL import ExifTags, Image, ImageOps, UnidentifiedImageError

from slideshow_processor.imaging.base import BaseImageRenderer
from slideshow_processor.imaging.exceptions import ImageDecodeError, ImagingError, RenderError
from slideshow_processor.imaging.models import ImageMetadata, RenderedImage

CROP_ANCHORS = ("entropy", "center")
THUMBNAIL_QUALITY = 85
_ENTROPY_SLICES = 10
# Multi-picture JPEGs from phone cameras decode as MPO.
_FORMAT_ALIASES = {"mpo": "jpeg"}


def open_image(data: bytes) -> Image.Image:
    """Decode bytes into a fully loaded Pillow image."""
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, OSError) as exc:
        raise ImageDecodeError(f"Cannot decode image: {exc}") from exc
    return image


def ensure_rgb(image: Image.Image) -> Image.Image:
    """Convert to RGB, flattening any transparency onto white."""
    has_alpha = image.mode in ("RGBA", "LA") or (
        image.mode == "P" and "transparency" in image.info
    )
    if has_alpha:
        rgba = image.convert("RGBA")
        background = Image.new("RGB", rgba.size, (255, 255, 255))
        background.paste(rgba, mask=rgba.getchannel("A"))
        return background
    if image.mode != "RGB":
        return image.convert("RGB")
    return image


class PillowImageRenderer(BaseImageRenderer):
    """Renders cover, contain and thumbnail JPEGs with Pillow."""

    def __init__(self, *, crop_anchor: str = "entropy", jpeg_quality: int = 90) -> None:
        if crop_anchor not in CROP_ANCHORS:
            raise ValueError(
                f"Unknown crop anchor '{crop_anchor}'. Choose from: {list(CROP_ANCHORS)}"
            )
        self._crop_anchor = crop_anchor
        self._jpeg_quality = jpeg_quality

    def read_metadata(self, data: bytes) -> ImageMetadata:
        image = open_image(data)
        image_format = (image.format or "jpeg").lower()
        image_format = _FORMAT_ALIASES.get(image_format, image_format)
        return ImageMetadata(
            width=image.width,
            height=image.height,
            format=image_format,
            mime_type=Image.MIME.get(image_format.upper(), f"image/{image_format}"),
            exif=self._read_exif(image),
        )

    def render_cover(self, data: bytes, width: int, height: int) -> RenderedImage:
        image = ensure_rgb(open_image(data))
        try:
            box = self._crop_box(image, width / height)
            fitted = image.crop(box).resize((width, height), Image.Resampling.LANCZOS)
        except (OSError, ValueError) as exc:
            raise RenderError(f"Cover render {width}x{height} failed: {exc}") from exc
        return self._encode(fitted, self._jpeg_quality)

    def render_contain(self, data: bytes, width: int, height: int) -> RenderedImage:
        image = ensure_rgb(open_image(data))
        try:
            fitted = ImageOps.contain(image, (width, height), Image.Resampling.LANCZOS)
        except (OSError, ValueError) as exc:
            raise RenderError(f"Contain render {width}x{height} failed: {exc}") from exc
        return self._encode(fitted, self._jpeg_quality)

    def render_thumbnail(self, data: bytes, size: int) -> RenderedImage:
        image = ensure_rgb(open_image(data))
        try:
            fitted = ImageOps.fit(image, (size, size), Image.Resampling.LANCZOS)
        except (OSError, ValueError) as exc:
            raise RenderError(f"Thumbnail render {size}x{size} failed: {exc}") from exc
        return self._encode(fitted, THUMBNAIL_QUALITY)

    def _crop_box(
        self, image: Image.Image, target_ratio: float
    ) -> tuple[int, int, int, int]:
        source_width, source_height = image.size
        if source_width / source_height > target_ratio:
            crop_width = max(1, round(source_height * target_ratio))
            crop_height = source_height
        else:
            crop_width = source_width
            crop_height = max(1, round(source_width / target_ratio))

        if self._crop_anchor == "entropy":
            return self._entropy_window(image, crop_width, crop_height)
        left = (source_width - crop_width) // 2
        top = (source_height - crop_height) // 2
        return left, top, left + crop_width, top + crop_height

    @staticmethod
    def _entropy_window(
        image: Image.Image, crop_width: int, crop_height: int
    ) -> tuple[int, int, int, int]:
        """Trim the less detailed edge slice until the window has the crop size."""
        gray = image.convert("L")
        left, top, right, bottom = 0, 0, gray.width, gray.height

        slice_width = max(1, (gray.width - crop_width) // _ENTROPY_SLICES)
        while right - left > crop_width:
            step = min(slice_width, right - left - crop_width)
            left_entropy = gray.crop((left, top, left + step, bottom)).entropy()
            right_entropy = gray.crop((right - step, top, right, bottom)).entropy()
            if left_entropy < right_entropy:
                left += step
            else:
                right -= step

        slice_height = max(1, (gray.height - crop_height) // _ENTROPY_SLICES)
        while bottom - top > crop_height:
            step = min(slice_height, bottom - top - crop_height)
            top_entropy = gray.crop((left, top, right, top + step)).entropy()
            bottom_entropy = gray.crop((left, bottom - step, right, bottom)).entropy()
            if top_entropy < bottom_entropy:
                top += step
            else:
                bottom -= step

        return left, top, right, bottom

    @staticmethod
    def _encode(image: Image.Image, quality: int) -> RenderedImage:
        buffer = io.BytesIO()
        try:
            image.save(buffer, format="JPEG", quality=quality)
        except OSError as exc:
            raise RenderError(f"JPEG encode failed: {exc}") from exc
        return RenderedImage(data=buffer.getvalue(), width=image.width, height=image.height)

    @staticmethod
    def _read_exif(image: Image.Image) -> dict[str, str]:
        try:
            exif = image.getexif()
        except (OSError, ValueError) as exc:
            raise ImagingError(f"Unreadable EXIF block: {exc}") from exc
        return {
            ExifTags.TAGS.get(tag, str(tag)): _exif_text(value)
            for tag, value in exif.items()
        }


def _exif_text(value: object) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace").rstrip("\x00")
    return str(value)
