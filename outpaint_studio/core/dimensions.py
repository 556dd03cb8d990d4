"""Canonical canvas size for every target format."""

from typing import Dict, Union

from ..models.enums import TargetFormat
from ..models.schemas import Dimensions
from ..utils.errors import InvalidRequestError

# Longest edge the generation model accepts comfortably
MAX_LONG_EDGE = 2048

DIMENSION_TABLE: Dict[TargetFormat, Dimensions] = {
    TargetFormat.RATIO_1_1: Dimensions(width=1024, height=1024),
    TargetFormat.RATIO_2_3: Dimensions(width=1024, height=1536),
    TargetFormat.RATIO_3_2: Dimensions(width=1536, height=1024),
    TargetFormat.RATIO_3_4: Dimensions(width=1024, height=1365),
    TargetFormat.RATIO_4_3: Dimensions(width=1365, height=1024),
    TargetFormat.RATIO_9_16: Dimensions(width=1024, height=1820),
    TargetFormat.RATIO_16_9: Dimensions(width=1820, height=1024),
    # Short side below 1024 so the long side stays within MAX_LONG_EDGE
    TargetFormat.RATIO_21_9: Dimensions(width=2048, height=878),
}


def parse_format(value: Union[str, TargetFormat]) -> TargetFormat:
    """
    Coerce a tag such as ``"16:9"`` to a TargetFormat.

    Raises:
        InvalidRequestError: If the tag is not one of the supported formats
    """
    try:
        return TargetFormat(value)
    except ValueError:
        supported = ", ".join(f.value for f in TargetFormat)
        raise InvalidRequestError(
            f"Unsupported format '{value}'. Supported formats: {supported}"
        )


def dimensions_for(fmt: Union[str, TargetFormat]) -> Dimensions:
    """Return the canvas size for a format."""
    return DIMENSION_TABLE[parse_format(fmt)]
