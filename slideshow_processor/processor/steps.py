import json

from slideshow_processor.backend.client import BackendClient
from slideshow_processor.imaging.base import BaseImageRenderer, BasePaletteExtractor
from slideshow_processor.logging.logger import Log
from slideshow_processor.processor.exceptions import PipelineStateError
from slideshow_processor.processor.fingerprint import fingerprint
from slideshow_processor.processor.pipeline import PipelineContext, PipelineStep
from slideshow_processor.processor.variant_renderer import VariantRenderer
from slideshow_processor.storage.base import BaseBlobStorage
from slideshow_processor.storage.paths import original_key, palette_key, thumbnail_key
from slideshow_processor.storage.source_loader import SourceLoader


class LoadSourceStep(PipelineStep):
    def __init__(self, loader: SourceLoader) -> None:
        self._loader = loader

    def run(self, context: PipelineContext) -> PipelineContext:
        Log.info(f"Downloading source {context.source.id} from {context.source.staging_path}")
        context.raw_bytes = self._loader.load(context.source.staging_path)
        Log.info(f"Loaded {len(context.raw_bytes)} bytes for source {context.source.id}")
        return context


class FingerprintStep(PipelineStep):
    def run(self, context: PipelineContext) -> PipelineContext:
        context.fingerprint = fingerprint(context.raw_bytes)
        Log.info(f"Source {context.source.id} fingerprint {context.fingerprint}")
        return context


class DeduplicationStep(PipelineStep):
    """Flags the context as duplicate when the backend already knows the blob."""

    def __init__(self, backend: BackendClient) -> None:
        self._backend = backend

    def run(self, context: PipelineContext) -> PipelineContext:
        if not context.fingerprint:
            raise PipelineStateError("fingerprint must be set before the dedup check")
        context.is_duplicate = self._backend.blob_exists(context.fingerprint)
        if context.is_duplicate:
            Log.info(f"Duplicate detected for source {context.source.id}, skipping render")
        return context


class ReadMetadataStep(PipelineStep):
    def __init__(self, renderer: BaseImageRenderer) -> None:
        self._renderer = renderer

    def run(self, context: PipelineContext) -> PipelineContext:
        metadata = self._renderer.read_metadata(context.raw_bytes)
        context.image_metadata = metadata
        Log.info(
            f"Source {context.source.id} dimensions {metadata.width}x{metadata.height} "
            f"({metadata.format})"
        )
        return context


class UploadOriginalStep(PipelineStep):
    def __init__(self, storage: BaseBlobStorage) -> None:
        self._storage = storage

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.image_metadata is None:
            raise PipelineStateError("image_metadata must be set before uploading the original")
        key = original_key(context.fingerprint, context.image_metadata.extension)
        context.original_uri = self._storage.upload(
            context.raw_bytes, key, context.image_metadata.mime_type
        )
        Log.info(f"Uploaded original: {key}")
        return context


class ThumbnailStep(PipelineStep):
    def __init__(
        self,
        renderer: BaseImageRenderer,
        storage: BaseBlobStorage,
        size: int = 200,
    ) -> None:
        self._renderer = renderer
        self._storage = storage
        self._size = size

    def run(self, context: PipelineContext) -> PipelineContext:
        thumbnail = self._renderer.render_thumbnail(context.raw_bytes, self._size)
        context.thumbnail_uri = self._storage.upload(
            thumbnail.data, thumbnail_key(context.fingerprint), thumbnail.content_type
        )
        return context


class ExtractPaletteStep(PipelineStep):
    def __init__(
        self,
        extractor: BasePaletteExtractor,
        storage: BaseBlobStorage,
        write_sidecar: bool = True,
    ) -> None:
        self._extractor = extractor
        self._storage = storage
        self._write_sidecar = write_sidecar

    def run(self, context: PipelineContext) -> PipelineContext:
        palette = self._extractor.extract(context.raw_bytes)
        context.palette = palette
        Log.info(f"Extracted {len(palette.colors)} colours, source {palette.source}")
        if self._write_sidecar:
            sidecar = json.dumps({"colors": palette.colors, "source": palette.source})
            self._storage.upload(
                sidecar.encode("utf-8"), palette_key(context.fingerprint), "application/json"
            )
        return context


class RenderVariantsStep(PipelineStep):
    def __init__(self, variant_renderer: VariantRenderer) -> None:
        self._variant_renderer = variant_renderer

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.image_metadata is None:
            raise PipelineStateError("image_metadata must be set before rendering variants")
        Log.info(f"Generating variants for {len(context.devices)} device(s)")
        context.variant_set = self._variant_renderer.render_all(
            context.raw_bytes,
            context.fingerprint,
            context.image_metadata.width,
            context.image_metadata.height,
            context.devices,
        )
        return context
