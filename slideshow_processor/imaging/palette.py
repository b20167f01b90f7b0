from PIL import Image

from slideshow_processor.imaging.base import BasePaletteExtractor
from slideshow_processor.imaging.exceptions import PaletteError
from slideshow_processor.imaging.models import ColorPalette
from slideshow_processor.imaging.pillow_adapter import open_image

FALLBACK_COLOR = "#4285F4"


def to_hex(rgb: tuple[int, int, int]) -> str:
    return "#{:02X}{:02X}{:02X}".format(*rgb)


def _distance(a: tuple[int, int, int], b: tuple[int, int, int]) -> float:
    return sum((x - y) ** 2 for x, y in zip(a, b)) ** 0.5


class PillowPaletteExtractor(BasePaletteExtractor):
    """Median-cut palette over a downscaled proxy of the opaque pixels."""

    PROXY_SIZE = 256
    QUANTIZE_COLORS = 128
    MIN_COLOR_DISTANCE = 24.0

    def __init__(self, desired: int = 8) -> None:
        if desired < 1:
            raise ValueError("desired palette size must be at least 1")
        self._desired = desired

    def extract(self, data: bytes) -> ColorPalette:
        proxy = open_image(data).convert("RGBA")
        proxy.thumbnail((self.PROXY_SIZE, self.PROXY_SIZE))

        opaque = self._opaque_pixels(proxy.tobytes())
        if not opaque:
            return ColorPalette(colors=[FALLBACK_COLOR], source=FALLBACK_COLOR)

        try:
            strip = Image.frombytes("RGB", (len(opaque) // 3, 1), opaque)
            quantized = strip.quantize(
                colors=min(self.QUANTIZE_COLORS, len(opaque) // 3),
                method=Image.Quantize.MEDIANCUT,
            )
        except (OSError, ValueError) as exc:
            raise PaletteError(f"Quantization failed: {exc}") from exc

        colors = [to_hex(rgb) for rgb in self._rank(quantized)]
        return ColorPalette(colors=colors, source=colors[0])

    @staticmethod
    def _opaque_pixels(rgba: bytes) -> bytes:
        return b"".join(
            rgba[i : i + 3] for i in range(0, len(rgba), 4) if rgba[i + 3] == 255
        )

    def _rank(self, quantized: Image.Image) -> list[tuple[int, int, int]]:
        palette = quantized.getpalette() or []
        populations = quantized.getcolors(maxcolors=256) or []
        chosen: list[tuple[int, int, int]] = []
        for _count, index in sorted(populations, key=lambda item: item[0], reverse=True):
            rgb = (palette[index * 3], palette[index * 3 + 1], palette[index * 3 + 2])
            if any(_distance(rgb, seen) < self.MIN_COLOR_DISTANCE for seen in chosen):
                continue
            chosen.append(rgb)
            if len(chosen) >= self._desired:
                break
        return chosen
