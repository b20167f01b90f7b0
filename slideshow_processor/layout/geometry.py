from enum import Enum

SQUARE_TOLERANCE = 0.05
RATIO_MATCH_TOLERANCE = 0.001


class Orientation(str, Enum):
    PORTRAIT = "portrait"
    LANDSCAPE = "landscape"
    SQUARE = "square"


def classify_orientation(width: int, height: int) -> Orientation:
    """Classify dimensions; ratios strictly within 5% of 1:1 count as square."""
    ratio = width / height
    if abs(ratio - 1) < SQUARE_TOLERANCE:
        return Orientation.SQUARE
    return Orientation.LANDSCAPE if width > height else Orientation.PORTRAIT


def crop_cost_percent(
    source_width: int,
    source_height: int,
    target_width: int,
    target_height: int,
) -> float:
    """Percentage of a cover-fit render that falls outside the target window.

    The source is scaled until it covers the target box; the overhang on the
    constrained axis, relative to the scaled length of that axis, is what a
    centre or attention crop discards.
    """
    source_ratio = source_width / source_height
    target_ratio = target_width / target_height

    if abs(source_ratio - target_ratio) < RATIO_MATCH_TOLERANCE:
        return 0.0

    if source_ratio > target_ratio:
        used_width = target_height * source_ratio
        return (used_width - target_width) / used_width * 100
    used_height = target_width / source_ratio
    return (used_height - target_height) / used_height * 100
