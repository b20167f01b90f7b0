from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from slideshow_processor.backend.schemas import Source
from slideshow_processor.imaging.models import ColorPalette, ImageMetadata
from slideshow_processor.layout.models import DeviceGeometry
from slideshow_processor.processor.models import VariantSet


@dataclass(slots=True)
class PipelineContext:
    source: Source
    devices: list[DeviceGeometry] = field(default_factory=list)
    raw_bytes: bytes = b""
    fingerprint: str = ""
    is_duplicate: bool = False
    image_metadata: ImageMetadata | None = None
    original_uri: str = ""
    thumbnail_uri: str | None = None
    palette: ColorPalette | None = None
    variant_set: VariantSet = field(default_factory=VariantSet)


class PipelineStep(ABC):
    @abstractmethod
    def run(self, context: PipelineContext) -> PipelineContext:
        raise NotImplementedError
