"""Request and response records for every backend endpoint."""

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from slideshow_processor.layout.models import DeviceGeometry


class Source(BaseModel):
    """One staged image awaiting processing."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(min_length=1)
    staging_path: str = Field(min_length=1)
    origin: str
    external_id: str | None = None


class CheckHashResponse(BaseModel):
    exists: bool


class StagedSourcesResponse(BaseModel):
    # Raw entries in batch order; the worker validates each one as a Source.
    sources: list[Any]


class DeviceDimensionsResponse(BaseModel):
    devices: list[DeviceGeometry]


class StartAttemptRequest(BaseModel):
    attempt: int = Field(ge=1)


class StartAttemptResponse(BaseModel):
    attempt: int
    # None: backend defers to the batch-level device list; []: nothing to render.
    devices: list[DeviceGeometry] | None = None


class BlobData(BaseModel):
    storage_path: str
    thumbnail_path: str | None = None
    width: int
    height: int
    aspect_ratio: float
    orientation: str
    file_size: int
    mime_type: str
    exif_data: str | None = None


class ColorData(BaseModel):
    palette: str
    source: str

    @classmethod
    def from_colors(cls, colors: list[str], source: str) -> "ColorData":
        return cls(palette=json.dumps(colors), source=source)


class VariantPayload(BaseModel):
    width: int
    height: int
    orientation: str
    layout_type: str
    storage_path: str
    contain_storage_path: str | None = None
    file_size: int


class FinalizeRequest(BaseModel):
    source_id: str
    fingerprint: str
    blob_data: BlobData | None = None
    color_data: ColorData | None = None
    variants: list[VariantPayload] = Field(default_factory=list)


class TerminalFailureRequest(BaseModel):
    error_message: str
    attempt_count: int


class TransientFailureRequest(BaseModel):
    error: str
    attempt: int
