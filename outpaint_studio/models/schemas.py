"""Pydantic schemas for data validation."""

from typing import Annotated, List, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime, timezone

from .enums import TargetFormat, FormatStatus, BatchStatus

ColorChannel = Annotated[int, Field(ge=0, le=255)]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SourceImage(BaseModel):
    """Uploaded photo, immutable once created."""
    model_config = ConfigDict(frozen=True)

    data_uri: str
    filename: str
    content_type: str
    size_bytes: int


class Dimensions(BaseModel):
    """Pixel size of a target canvas."""
    model_config = ConfigDict(frozen=True)

    width: int
    height: int


class Placement(BaseModel):
    """Where the scaled source landed on the canvas."""
    x: int
    y: int
    width: int
    height: int


class CompositeImage(BaseModel):
    """Target-sized canvas with the source centered on a sentinel fill."""
    format: TargetFormat
    width: int
    height: int
    placement: Placement
    data_uri: str


class GeneratedResult(BaseModel):
    """One generated image in the session's result set."""
    id: str
    format: TargetFormat
    image_data: str
    revision: int = 0
    created_at: datetime = Field(default_factory=_utc_now)


class Stroke(BaseModel):
    """Freehand stroke drawn over a result, in image pixel coordinates."""
    points: List[Tuple[float, float]] = Field(..., min_length=1)
    width: int = Field(5, gt=0)
    color: Tuple[ColorChannel, ColorChannel, ColorChannel, ColorChannel] = (255, 0, 0, 178)


class FormatOutcome(BaseModel):
    """Status of a single format within a batch."""
    format: TargetFormat
    status: FormatStatus
    result_id: Optional[str] = None
    error: Optional[str] = None


class BatchOutcome(BaseModel):
    """Result set of one generation run plus per-format status."""
    status: BatchStatus
    results: List[GeneratedResult] = Field(default_factory=list)
    formats: List[FormatOutcome] = Field(default_factory=list)
    token: int = 0
    processing_time_seconds: Optional[float] = None

    @property
    def succeeded(self) -> List[TargetFormat]:
        return [f.format for f in self.formats if f.status == FormatStatus.SUCCESS]

    @property
    def failed(self) -> List[TargetFormat]:
        return [f.format for f in self.formats if f.status == FormatStatus.FAILED]

    @property
    def partial_failure(self) -> bool:
        """True when fewer formats succeeded than were requested."""
        return len(self.succeeded) < len(self.formats)
