"""Enumerations for the outpaint studio."""

from enum import Enum


class TargetFormat(str, Enum):
    """Target aspect ratio of a generated image."""
    RATIO_1_1 = "1:1"
    RATIO_2_3 = "2:3"
    RATIO_3_2 = "3:2"
    RATIO_3_4 = "3:4"
    RATIO_4_3 = "4:3"
    RATIO_9_16 = "9:16"
    RATIO_16_9 = "16:9"
    RATIO_21_9 = "21:9"

    @property
    def ratio(self) -> float:
        """Width divided by height."""
        width, height = self.value.split(":")
        return int(width) / int(height)

    @property
    def slug(self) -> str:
        """Filesystem and URL safe tag, e.g. ``16x9``."""
        return self.value.replace(":", "x")


class FormatStatus(str, Enum):
    """Outcome of one per-format pipeline."""
    SUCCESS = "success"
    FAILED = "failed"


class BatchStatus(str, Enum):
    """Aggregate outcome of a batch run."""
    COMPLETE = "complete"
    PARTIAL = "partial"
    FAILED = "failed"
    STALE = "stale"
