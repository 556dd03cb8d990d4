"""Data models and schemas for the outpaint studio."""

from .schemas import (
    SourceImage,
    Dimensions,
    Placement,
    CompositeImage,
    GeneratedResult,
    Stroke,
    FormatOutcome,
    BatchOutcome,
)
from .enums import (
    TargetFormat,
    FormatStatus,
    BatchStatus,
)

__all__ = [
    "SourceImage",
    "Dimensions",
    "Placement",
    "CompositeImage",
    "GeneratedResult",
    "Stroke",
    "FormatOutcome",
    "BatchOutcome",
    "TargetFormat",
    "FormatStatus",
    "BatchStatus",
]
