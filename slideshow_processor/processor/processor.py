from slideshow_processor.backend.client import BackendClient
from slideshow_processor.backend.schemas import Source
from slideshow_processor.config.settings import Settings
from slideshow_processor.imaging.palette import PillowPaletteExtractor
from slideshow_processor.imaging.pillow_adapter import PillowImageRenderer
from slideshow_processor.layout.evaluator import LayoutEvaluator
from slideshow_processor.layout.geometry import classify_orientation
from slideshow_processor.layout.models import DeviceGeometry
from slideshow_processor.logging.logger import Log
from slideshow_processor.processor.exceptions import PipelineStateError
from slideshow_processor.processor.models import (
    ProcessingResult,
    ProcessingStatus,
    SourceMetadata,
)
from slideshow_processor.processor.pipeline import PipelineContext, PipelineStep
from slideshow_processor.processor.steps import (
    DeduplicationStep,
    ExtractPaletteStep,
    FingerprintStep,
    LoadSourceStep,
    ReadMetadataStep,
    RenderVariantsStep,
    ThumbnailStep,
    UploadOriginalStep,
)
from slideshow_processor.processor.variant_renderer import VariantRenderer
from slideshow_processor.storage.base import BaseBlobStorage
from slideshow_processor.storage.source_loader import SourceLoader


class Processor:
    """Runs the per-source pipeline.

    Pipeline: load -> fingerprint -> dedup -> metadata -> original ->
    thumbnail -> palette -> variants. A duplicate stops the run right after
    the dedup check, before any render or upload.
    """

    def __init__(self, steps: list[PipelineStep]) -> None:
        self._steps = steps

    def process(self, source: Source, devices: list[DeviceGeometry]) -> ProcessingResult:
        Log.info(f"Processing source {source.id} for {len(devices)} device(s)")
        context = PipelineContext(source=source, devices=list(devices))
        for step in self._steps:
            context = step.run(context)
            if context.is_duplicate:
                return ProcessingResult.duplicate(context.fingerprint)
        return self._build_result(context)

    @staticmethod
    def _build_result(context: PipelineContext) -> ProcessingResult:
        metadata = context.image_metadata
        if metadata is None or not context.original_uri:
            raise PipelineStateError(
                f"Pipeline for source {context.source.id} finished without a stored original"
            )
        variant_set = context.variant_set
        if variant_set.has_failures:
            Log.warning(
                f"Source {context.source.id}: {len(variant_set.failures)} layout(s) failed, "
                f"{len(variant_set.variants)} variant(s) produced"
            )
        return ProcessingResult(
            status=ProcessingStatus.PROCESSED,
            fingerprint=context.fingerprint,
            source_metadata=SourceMetadata(
                storage_path=context.original_uri,
                thumbnail_path=context.thumbnail_uri,
                width=metadata.width,
                height=metadata.height,
                aspect_ratio=round(metadata.width / metadata.height, 5),
                orientation=classify_orientation(metadata.width, metadata.height),
                file_size_bytes=len(context.raw_bytes),
                mime_type=metadata.mime_type,
                exif=metadata.exif,
            ),
            color_palette=context.palette,
            variants=list(variant_set.variants),
            layout_failures=list(variant_set.failures),
        )


def build_processor(
    settings: Settings,
    storage: BaseBlobStorage,
    backend: BackendClient,
) -> Processor:
    """Build a Processor with all required adapters."""
    renderer = PillowImageRenderer(
        crop_anchor=settings.crop_anchor,
        jpeg_quality=settings.jpeg_quality,
    )
    variant_renderer = VariantRenderer(
        renderer=renderer,
        storage=storage,
        evaluator=LayoutEvaluator(settings.max_crop_percent),
        render_contain=settings.render_contain,
    )
    steps: list[PipelineStep] = [
        LoadSourceStep(SourceLoader(storage)),
        FingerprintStep(),
        DeduplicationStep(backend),
        ReadMetadataStep(renderer),
        UploadOriginalStep(storage),
        ThumbnailStep(renderer, storage, size=settings.thumbnail_size),
        ExtractPaletteStep(
            PillowPaletteExtractor(desired=settings.palette_size),
            storage,
            write_sidecar=settings.write_palette_sidecar,
        ),
        RenderVariantsStep(variant_renderer),
    ]
    return Processor(steps)
