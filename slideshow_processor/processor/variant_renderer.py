from slideshow_processor.imaging.base import BaseImageRenderer
from slideshow_processor.layout.evaluator import LayoutEvaluator
from slideshow_processor.layout.geometry import classify_orientation
from slideshow_processor.layout.models import DeviceGeometry, LayoutCandidate, LayoutType
from slideshow_processor.logging.logger import Log
from slideshow_processor.processor.models import LayoutFailure, Variant, VariantSet
from slideshow_processor.storage.base import BaseBlobStorage
from slideshow_processor.storage.paths import contain_variant_key, variant_key


class VariantRenderer:
    """Renders and uploads one variant per eligible layout of every device.

    A failing layout is recorded in the returned VariantSet and never stops
    its sibling layouts or devices.
    """

    def __init__(
        self,
        *,
        renderer: BaseImageRenderer,
        storage: BaseBlobStorage,
        evaluator: LayoutEvaluator,
        render_contain: bool = True,
    ) -> None:
        self._renderer = renderer
        self._storage = storage
        self._evaluator = evaluator
        self._render_contain = render_contain

    def render_all(
        self,
        data: bytes,
        fingerprint: str,
        source_width: int,
        source_height: int,
        devices: list[DeviceGeometry],
    ) -> VariantSet:
        variant_set = VariantSet()
        produced: set[tuple[LayoutType, int, int]] = set()

        for device in devices:
            candidates = self._evaluator.evaluate(source_width, source_height, device)
            Log.info(f"Device {device.label}: {len(candidates)} eligible layout(s)")

            for candidate in candidates:
                identity = (
                    candidate.layout_type,
                    candidate.target_width,
                    candidate.target_height,
                )
                if identity in produced:
                    Log.debug(
                        f"Variant {candidate.layout_type.value} "
                        f"{candidate.target_width}x{candidate.target_height} already rendered"
                    )
                    continue
                try:
                    variant = self._render_one(data, fingerprint, candidate)
                except Exception as exc:
                    Log.error(
                        f"Layout {candidate.layout_type.value} "
                        f"{candidate.target_width}x{candidate.target_height} failed: {exc}",
                        device=device.label,
                    )
                    variant_set.failures.append(
                        LayoutFailure(
                            device=device.label,
                            layout_type=candidate.layout_type,
                            width=candidate.target_width,
                            height=candidate.target_height,
                            reason=str(exc),
                        )
                    )
                    continue
                produced.add(identity)
                variant_set.variants.append(variant)
                Log.info(
                    f"Rendered {candidate.layout_type.value}: "
                    f"{candidate.target_width}x{candidate.target_height} "
                    f"(crop: {candidate.crop_cost_percent:.1f}%)"
                )

        return variant_set

    def _render_one(self, data: bytes, fingerprint: str, candidate: LayoutCandidate) -> Variant:
        width, height = candidate.target_width, candidate.target_height

        # Both renders complete before the first upload.
        cover = self._renderer.render_cover(data, width, height)
        contain = (
            self._renderer.render_contain(data, width, height)
            if self._render_contain
            else None
        )

        storage_path = self._storage.upload(
            cover.data,
            variant_key(candidate.layout_type, width, height, fingerprint),
            cover.content_type,
        )
        contain_path: str | None = None
        if contain is not None:
            contain_path = self._storage.upload(
                contain.data,
                contain_variant_key(candidate.layout_type, width, height, fingerprint),
                contain.content_type,
            )

        return Variant(
            width=width,
            height=height,
            orientation=classify_orientation(width, height),
            layout_type=candidate.layout_type,
            storage_path=storage_path,
            file_size_bytes=cover.size_bytes,
            contain_storage_path=contain_path,
            crop_cost_percent=candidate.crop_cost_percent,
        )
