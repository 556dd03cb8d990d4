"""Render user-drawn strokes over a copy of a result."""

import asyncio
from typing import List
from PIL import Image, ImageDraw

from ..models.schemas import Stroke
from ..utils.images import decode_image, image_to_data_uri
from ..utils.errors import InvalidRequestError


async def render_overlay(image_data: str, strokes: List[Stroke]) -> str:
    """
    Draw strokes onto a copy of the image and return it as a PNG data URI.

    Raises:
        InvalidRequestError: If there are no strokes
        DecodeError: If the image cannot be decoded
    """
    if not strokes:
        raise InvalidRequestError("No strokes to draw")

    return await asyncio.to_thread(_render, image_data, strokes)


def _render(image_data: str, strokes: List[Stroke]) -> str:
    base = decode_image(image_data).convert("RGBA")

    # Strokes are semi-transparent, so draw on a layer and blend once
    layer = Image.new("RGBA", base.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(layer)

    for stroke in strokes:
        points = [(float(x), float(y)) for x, y in stroke.points]
        radius = stroke.width / 2

        if len(points) > 1:
            draw.line(points, fill=stroke.color, width=stroke.width, joint="curve")

        # round caps and single-point dabs
        for x, y in (points[0], points[-1]):
            draw.ellipse(
                (x - radius, y - radius, x + radius, y + radius),
                fill=stroke.color,
            )

    return image_to_data_uri(Image.alpha_composite(base, layer).convert("RGB"))
