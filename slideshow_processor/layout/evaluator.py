from slideshow_processor.layout.geometry import crop_cost_percent
from slideshow_processor.layout.models import DeviceGeometry, LayoutCandidate, LayoutType
from slideshow_processor.logging.logger import Log

MAX_CROP_PERCENT = 50.0

_TILE_COUNT = {
    LayoutType.PAIRED: 2,
    LayoutType.TRIPLE: 3,
}


def is_eligible(cost_percent: float, max_crop_percent: float = MAX_CROP_PERCENT) -> bool:
    """A candidate is acceptable while its crop cost does not exceed the bound."""
    return cost_percent <= max_crop_percent


def layout_dimensions(
    layout_type: LayoutType,
    device_width: int,
    device_height: int,
    gap: int = 0,
) -> tuple[int, int]:
    """Target (width, height) of one tile of the layout on the device.

    Multi-image layouts split the device's longer axis; tall devices stack
    tiles vertically, everything else places them side by side.
    """
    if layout_type is LayoutType.SINGLE:
        return device_width, device_height
    tiles = _TILE_COUNT[layout_type]
    gaps = gap * (tiles - 1)
    if device_height > device_width:
        return device_width, (device_height - gaps) // tiles
    return (device_width - gaps) // tiles, device_height


class LayoutEvaluator:
    """Computes, filters and ranks layout candidates for a source on a device."""

    def __init__(self, max_crop_percent: float = MAX_CROP_PERCENT) -> None:
        self._max_crop_percent = max_crop_percent

    def evaluate(
        self,
        source_width: int,
        source_height: int,
        device: DeviceGeometry,
    ) -> list[LayoutCandidate]:
        """Return eligible candidates, least cropping first.

        Equal costs keep construction order (single, paired, triple).
        """
        if source_width <= 0 or source_height <= 0:
            raise ValueError(
                f"Source dimensions must be positive, got {source_width}x{source_height}"
            )

        enabled = device.enabled_layouts()
        if not enabled:
            return [self._legacy_single(source_width, source_height, device)]

        if not self._within_aspect_bounds(source_width, source_height, device):
            Log.debug(
                f"Source {source_width}x{source_height} outside aspect bounds of "
                f"device {device.label}"
            )
            return []

        candidates: list[LayoutCandidate] = []
        for layout_type in enabled:
            width, height = layout_dimensions(
                layout_type, device.width, device.height, device.gap
            )
            if width <= 0 or height <= 0:
                Log.warning(
                    f"Skipping {layout_type.value} layout on device {device.label}: "
                    f"gap {device.gap} leaves no room for tiles"
                )
                continue
            cost = crop_cost_percent(source_width, source_height, width, height)
            if not is_eligible(cost, self._max_crop_percent):
                Log.debug(
                    f"Rejected {layout_type.value} {width}x{height} on device "
                    f"{device.label}: crop {cost:.1f}% > {self._max_crop_percent}%"
                )
                continue
            candidates.append(LayoutCandidate(layout_type, width, height, cost))

        return sorted(candidates, key=lambda candidate: candidate.crop_cost_percent)

    @staticmethod
    def _legacy_single(
        source_width: int,
        source_height: int,
        device: DeviceGeometry,
    ) -> LayoutCandidate:
        cost = crop_cost_percent(source_width, source_height, device.width, device.height)
        return LayoutCandidate(LayoutType.SINGLE, device.width, device.height, cost)

    @staticmethod
    def _within_aspect_bounds(
        source_width: int,
        source_height: int,
        device: DeviceGeometry,
    ) -> bool:
        ratio = source_width / source_height
        if device.min_aspect_ratio is not None and ratio < device.min_aspect_ratio:
            return False
        if device.max_aspect_ratio is not None and ratio > device.max_aspect_ratio:
            return False
        return True
