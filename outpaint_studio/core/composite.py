"""Outpainting composite: source photo centered on a sentinel-filled canvas."""

import asyncio
from typing import Tuple
from PIL import Image

from .dimensions import dimensions_for
from ..models.enums import TargetFormat
from ..models.schemas import CompositeImage, Placement
from ..utils.images import decode_image, image_to_data_uri
from ..utils.logger import get_logger

logger = get_logger(__name__)

# Marks the region the generation model has to synthesize
SENTINEL_COLOR: Tuple[int, int, int] = (0, 0, 0)


def contain_placement(
    source_size: Tuple[int, int],
    canvas_size: Tuple[int, int],
) -> Placement:
    """
    Compute where a source lands when scaled to fit inside a canvas.

    The scale is the largest one that keeps the whole source visible
    (contain, never cover). The placed box is centered; when the free
    space is odd the extra pixel goes to the right/bottom margin.

    Args:
        source_size: (w, h) of the source
        canvas_size: (W, H) of the canvas

    Returns:
        Placement with integer offset and size
    """
    w, h = source_size
    canvas_w, canvas_h = canvas_size

    ratio = min(canvas_w / w, canvas_h / h)

    placed_w = min(canvas_w, max(1, round(w * ratio)))
    placed_h = min(canvas_h, max(1, round(h * ratio)))

    return Placement(
        x=(canvas_w - placed_w) // 2,
        y=(canvas_h - placed_h) // 2,
        width=placed_w,
        height=placed_h,
    )


class CompositeBuilder:
    """Builds the target-sized canvas sent to the generation model."""

    def __init__(self, fill_color: Tuple[int, int, int] = SENTINEL_COLOR):
        self.fill_color = fill_color

    async def build_composite(self, source_data_uri: str, fmt: TargetFormat) -> CompositeImage:
        """
        Place the source image on a blank canvas of the format's size.

        Decoding and encoding run in a worker thread.

        Raises:
            DecodeError: If the source is not a readable raster image
        """
        return await asyncio.to_thread(self._build, source_data_uri, fmt)

    def _build(self, source_data_uri: str, fmt: TargetFormat) -> CompositeImage:
        target = dimensions_for(fmt)

        canvas = Image.new("RGB", (target.width, target.height), self.fill_color)

        source = decode_image(source_data_uri)
        placement = contain_placement(source.size, (target.width, target.height))

        if source.mode not in ("RGB", "RGBA"):
            source = source.convert("RGBA" if self._has_alpha(source) else "RGB")

        scaled = source.resize((placement.width, placement.height), Image.LANCZOS)

        if scaled.mode == "RGBA":
            canvas.paste(scaled, (placement.x, placement.y), mask=scaled)
        else:
            canvas.paste(scaled, (placement.x, placement.y))

        logger.debug(
            f"Composite built for {fmt.value}",
            extra={
                "format": fmt.value,
                "source_size": list(source.size),
                "canvas_size": [target.width, target.height],
                "placement": placement.model_dump(),
            }
        )

        return CompositeImage(
            format=fmt,
            width=target.width,
            height=target.height,
            placement=placement,
            data_uri=image_to_data_uri(canvas),
        )

    @staticmethod
    def _has_alpha(image: Image.Image) -> bool:
        return "A" in image.getbands() or "transparency" in image.info
