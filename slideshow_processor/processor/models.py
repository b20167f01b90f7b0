from dataclasses import dataclass, field
from enum import Enum

from slideshow_processor.imaging.models import ColorPalette
from slideshow_processor.layout.geometry import Orientation
from slideshow_processor.layout.models import LayoutType


class ProcessingStatus(str, Enum):
    PROCESSED = "processed"
    DUPLICATE = "duplicate"


@dataclass(frozen=True)
class Variant:
    """One rendered artifact, identified by (fingerprint, layout, width, height)."""

    width: int
    height: int
    orientation: Orientation
    layout_type: LayoutType
    storage_path: str
    file_size_bytes: int
    contain_storage_path: str | None = None
    crop_cost_percent: float = 0.0


@dataclass(frozen=True)
class LayoutFailure:
    """A layout whose render or upload failed, with the reason."""

    device: str
    layout_type: LayoutType
    width: int
    height: int
    reason: str


@dataclass
class VariantSet:
    """Outcome of rendering every device: what succeeded and what did not."""

    variants: list[Variant] = field(default_factory=list)
    failures: list[LayoutFailure] = field(default_factory=list)

    @property
    def has_failures(self) -> bool:
        return bool(self.failures)


@dataclass(frozen=True)
class SourceMetadata:
    """Facts about the stored original reported to the backend."""

    storage_path: str
    width: int
    height: int
    aspect_ratio: float
    orientation: Orientation
    file_size_bytes: int
    mime_type: str
    thumbnail_path: str | None = None
    exif: dict[str, str] = field(default_factory=dict)


@dataclass
class ProcessingResult:
    """Everything the backend needs to finalize one source."""

    status: ProcessingStatus
    fingerprint: str
    source_metadata: SourceMetadata | None = None
    color_palette: ColorPalette | None = None
    variants: list[Variant] = field(default_factory=list)
    layout_failures: list[LayoutFailure] = field(default_factory=list)

    @classmethod
    def duplicate(cls, fingerprint: str) -> "ProcessingResult":
        return cls(status=ProcessingStatus.DUPLICATE, fingerprint=fingerprint)
