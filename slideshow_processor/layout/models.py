from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, model_validator


class LayoutType(str, Enum):
    SINGLE = "single"
    PAIRED = "paired"
    TRIPLE = "triple"


class LayoutFlags(BaseModel):
    """Which multi-image layouts a device can show."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    single: bool = False
    paired: bool = False
    triple: bool = False

    def enabled(self) -> list[LayoutType]:
        """Enabled layouts in evaluation order: single, paired, triple."""
        flags = {
            LayoutType.SINGLE: self.single,
            LayoutType.PAIRED: self.paired,
            LayoutType.TRIPLE: self.triple,
        }
        return [layout for layout, on in flags.items() if on]


class DeviceGeometry(BaseModel):
    """Rendering requirements of one display target.

    `layouts` absent (legacy devices) or with every flag off means the device
    only takes a full-bleed single render at its raw width x height.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str | None = None
    width: PositiveInt
    height: PositiveInt
    orientation: str | None = None
    gap: int = Field(default=0, ge=0)
    layouts: LayoutFlags | None = None
    min_aspect_ratio: float | None = Field(default=None, gt=0)
    max_aspect_ratio: float | None = Field(default=None, gt=0)

    @model_validator(mode="after")
    def _check_aspect_bounds(self) -> "DeviceGeometry":
        if (
            self.min_aspect_ratio is not None
            and self.max_aspect_ratio is not None
            and self.min_aspect_ratio > self.max_aspect_ratio
        ):
            raise ValueError("min_aspect_ratio must not exceed max_aspect_ratio")
        return self

    @property
    def label(self) -> str:
        size = f"{self.width}x{self.height}"
        return f"{self.name} ({size})" if self.name else size

    def enabled_layouts(self) -> list[LayoutType]:
        if self.layouts is None:
            return []
        return self.layouts.enabled()


@dataclass(frozen=True)
class LayoutCandidate:
    """One way of placing a source on a device, with its crop cost."""

    layout_type: LayoutType
    target_width: int
    target_height: int
    crop_cost_percent: float
