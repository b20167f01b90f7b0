import json

from slideshow_processor.backend.schemas import (
    BlobData,
    ColorData,
    FinalizeRequest,
    VariantPayload,
)
from slideshow_processor.processor.models import ProcessingResult, SourceMetadata, Variant


class FinalizePayloadBuilder:
    """Converts a ProcessingResult into the backend finalize request."""

    def build(self, source_id: str, result: ProcessingResult) -> FinalizeRequest:
        palette = result.color_palette
        return FinalizeRequest(
            source_id=source_id,
            fingerprint=result.fingerprint,
            blob_data=(
                self._blob_data(result.source_metadata)
                if result.source_metadata is not None
                else None
            ),
            color_data=(
                ColorData.from_colors(palette.colors, palette.source)
                if palette is not None
                else None
            ),
            variants=[self._variant_payload(v) for v in result.variants],
        )

    @staticmethod
    def _blob_data(metadata: SourceMetadata) -> BlobData:
        return BlobData(
            storage_path=metadata.storage_path,
            thumbnail_path=metadata.thumbnail_path,
            width=metadata.width,
            height=metadata.height,
            aspect_ratio=metadata.aspect_ratio,
            orientation=metadata.orientation.value,
            file_size=metadata.file_size_bytes,
            mime_type=metadata.mime_type,
            exif_data=json.dumps(metadata.exif) if metadata.exif else None,
        )

    @staticmethod
    def _variant_payload(variant: Variant) -> VariantPayload:
        return VariantPayload(
            width=variant.width,
            height=variant.height,
            orientation=variant.orientation.value,
            layout_type=variant.layout_type.value,
            storage_path=variant.storage_path,
            contain_storage_path=variant.contain_storage_path,
            file_size=variant.file_size_bytes,
        )
