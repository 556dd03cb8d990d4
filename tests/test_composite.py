"""Tests for composite geometry and canvas rendering."""

import pytest

from outpaint_studio.core.composite import CompositeBuilder, contain_placement
from outpaint_studio.core.dimensions import dimensions_for
from outpaint_studio.models import TargetFormat
from outpaint_studio.utils.errors import DecodeError

from conftest import png_data_uri, decode_uri

SOURCE_SIZES = [
    (400, 300),
    (300, 400),
    (1000, 1000),
    (160, 90),
    (4032, 3024),
    (2000, 100),
    (100, 2000),
    (7, 13),
]


@pytest.mark.parametrize("fmt", list(TargetFormat))
@pytest.mark.parametrize("source_size", SOURCE_SIZES)
def test_placement_fits_and_touches_an_edge(fmt, source_size):
    """Test the source is contained, scaled to fit, and centered."""
    dims = dimensions_for(fmt)
    w, h = source_size

    placement = contain_placement(source_size, (dims.width, dims.height))

    # contained
    assert placement.x >= 0 and placement.y >= 0
    assert placement.x + placement.width <= dims.width
    assert placement.y + placement.height <= dims.height

    # fits one dimension exactly
    assert placement.width == dims.width or placement.height == dims.height

    # both axes scaled by the same factor, within rounding
    ratio = min(dims.width / w, dims.height / h)
    assert abs(placement.width - w * ratio) <= 0.5 + 1e-6
    assert abs(placement.height - h * ratio) <= 0.5 + 1e-6

    # centered, odd remainder to the right/bottom
    right = dims.width - placement.x - placement.width
    bottom = dims.height - placement.y - placement.height
    assert right - placement.x in (0, 1)
    assert bottom - placement.y in (0, 1)


def test_landscape_on_square_canvas():
    """Test letterboxing of a 4:3 source on 1:1."""
    placement = contain_placement((400, 300), (1024, 1024))

    assert (placement.x, placement.y, placement.width, placement.height) == (0, 128, 1024, 768)


def test_matching_aspect_fills_canvas():
    """Test a source with the target's aspect gets no border."""
    placement = contain_placement((160, 90), (1820, 1024))

    assert (placement.x, placement.y, placement.width, placement.height) == (0, 0, 1820, 1024)


def test_placement_never_collapses():
    """Test extreme sources keep at least one pixel."""
    placement = contain_placement((10000, 1), (1024, 1024))

    assert placement.height == 1
    assert placement.width == 1024


@pytest.mark.asyncio
async def test_composite_canvas_and_fill():
    """Test the canvas has the target size, black margins and the source inside."""
    builder = CompositeBuilder()
    source = png_data_uri(size=(400, 300), color=(255, 0, 0))

    composite = await builder.build_composite(source, TargetFormat.RATIO_1_1)

    assert (composite.width, composite.height) == (1024, 1024)
    assert composite.data_uri.startswith("data:image/png;base64,")

    image = decode_uri(composite.data_uri).convert("RGB")
    assert image.size == (1024, 1024)

    # margins above and below are sentinel black
    assert image.getpixel((512, 0)) == (0, 0, 0)
    assert image.getpixel((512, 127)) == (0, 0, 0)
    assert image.getpixel((512, 1023)) == (0, 0, 0)

    # the placed region carries the source
    r, g, b = image.getpixel((512, 512))
    assert r > 250 and g < 5 and b < 5


@pytest.mark.asyncio
async def test_composite_is_deterministic():
    """Test the same source and format give the same composite."""
    builder = CompositeBuilder()
    source = png_data_uri(size=(640, 480), color=(20, 120, 200))

    first = await builder.build_composite(source, TargetFormat.RATIO_9_16)
    second = await builder.build_composite(source, TargetFormat.RATIO_9_16)

    assert first.placement == second.placement
    assert first.data_uri == second.data_uri


@pytest.mark.asyncio
async def test_transparent_source_leaves_sentinel():
    """Test fully transparent pixels do not cover the fill."""
    builder = CompositeBuilder()
    source = png_data_uri(size=(300, 300), color=(255, 255, 255, 0), mode="RGBA")

    composite = await builder.build_composite(source, TargetFormat.RATIO_16_9)

    image = decode_uri(composite.data_uri).convert("RGB")
    assert image.getpixel((910, 512)) == (0, 0, 0)


@pytest.mark.asyncio
async def test_palette_and_jpeg_sources():
    """Test non-RGB sources are normalized before scaling."""
    builder = CompositeBuilder()

    jpeg = png_data_uri(size=(200, 100), color=(0, 200, 0), fmt="JPEG")
    composite = await builder.build_composite(jpeg, TargetFormat.RATIO_4_3)
    assert (composite.width, composite.height) == (1365, 1024)

    grayscale = png_data_uri(size=(200, 100), color=128, mode="L")
    composite = await builder.build_composite(grayscale, TargetFormat.RATIO_4_3)
    image = decode_uri(composite.data_uri).convert("RGB")
    r, g, b = image.getpixel((682, 512))
    assert abs(r - 128) <= 2 and r == g == b


@pytest.mark.asyncio
async def test_undecodable_source():
    """Test garbage input raises DecodeError."""
    builder = CompositeBuilder()

    with pytest.raises(DecodeError):
        await builder.build_composite("data:image/png;base64,bm90IGFuIGltYWdl", TargetFormat.RATIO_1_1)

    with pytest.raises(DecodeError):
        await builder.build_composite("not a data uri", TargetFormat.RATIO_1_1)
