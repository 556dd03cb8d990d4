"""Pytest configuration and shared fixtures."""

import asyncio
import base64
from io import BytesIO
from typing import List, NamedTuple, Optional, Set

import pytest
from PIL import Image

from outpaint_studio.core import (
    CompositeBuilder,
    ImageGenerator,
    BatchCoordinator,
    EditCoordinator,
    ImageAnalyzer,
    SessionStore,
    OutpaintWorkflow,
)
from outpaint_studio.models import SourceImage, TargetFormat
from outpaint_studio.providers import ImageGenerationBackend, ImageDescriptionBackend
from outpaint_studio.utils.errors import ProviderError

BASE_PROMPT = "Fill the black areas."
EDIT_PREFIX = "Edit the marked area"


def png_data_uri(size=(400, 300), color=(255, 0, 0), mode="RGB", fmt="PNG") -> str:
    """Solid-color image encoded as a data URI."""
    image = Image.new(mode, size, color)
    buffer = BytesIO()
    image.save(buffer, format=fmt)
    media_type = "image/png" if fmt == "PNG" else f"image/{fmt.lower()}"
    return f"data:{media_type};base64,{base64.b64encode(buffer.getvalue()).decode()}"


def decode_uri(data_uri: str) -> Image.Image:
    payload = data_uri.split(",", 1)[1]
    return Image.open(BytesIO(base64.b64decode(payload)))


class GenerationCall(NamedTuple):
    base_image: str
    prompt: str
    target_format: TargetFormat


class FakeGenerationBackend(ImageGenerationBackend):
    """
    In-process generation capability.

    Echoes the base image back unless ``output`` is set. Formats listed in
    ``fail_formats`` raise a provider error. When ``gate`` is set every call
    waits for it, which lets tests interleave other operations mid-flight.
    """

    def __init__(
        self,
        fail_formats: Optional[Set[TargetFormat]] = None,
        output: Optional[str] = None,
        gate: Optional[asyncio.Event] = None,
        fail_all: bool = False,
    ):
        self.fail_formats = fail_formats or set()
        self.output = output
        self.gate = gate
        self.fail_all = fail_all
        self.calls: List[GenerationCall] = []
        self.in_flight = 0

    async def generate_image(self, base_image, prompt, target_format):
        self.calls.append(GenerationCall(base_image, prompt, target_format))
        self.in_flight += 1
        try:
            if self.gate is not None:
                await self.gate.wait()
            else:
                await asyncio.sleep(0)
        finally:
            self.in_flight -= 1

        if self.fail_all or target_format in self.fail_formats:
            raise ProviderError("fake", f"quota exceeded for {target_format.value}", 429)

        return self.output or base_image


class FakeDescriptionBackend(ImageDescriptionBackend):
    """In-process vision capability."""

    def __init__(
        self,
        description: str = "A red wall in soft light.",
        fail: bool = False,
        gate: Optional[asyncio.Event] = None,
    ):
        self.description = description
        self.fail = fail
        self.gate = gate
        self.calls = 0

    async def describe_image(self, image, prompt):
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            raise ProviderError("fake", "vision model unavailable", 503)
        return self.description


@pytest.fixture
def source_uri() -> str:
    return png_data_uri()


@pytest.fixture
def source_image(source_uri) -> SourceImage:
    return SourceImage(
        data_uri=source_uri,
        filename="photo.png",
        content_type="image/png",
        size_bytes=len(source_uri),
    )


@pytest.fixture
def backend() -> FakeGenerationBackend:
    return FakeGenerationBackend()


@pytest.fixture
def generator(backend) -> ImageGenerator:
    return ImageGenerator(backend)


@pytest.fixture
def batch(generator) -> BatchCoordinator:
    return BatchCoordinator(
        composite_builder=CompositeBuilder(),
        generator=generator,
        base_prompt=BASE_PROMPT,
    )


@pytest.fixture
def editor(generator) -> EditCoordinator:
    return EditCoordinator(generator=generator, edit_prefix=EDIT_PREFIX)


@pytest.fixture
def workflow(batch, editor) -> OutpaintWorkflow:
    return OutpaintWorkflow(
        store=SessionStore(),
        batch=batch,
        editor=editor,
        analyzer=None,
        max_upload_bytes=1024 * 1024,
    )


@pytest.fixture
def png_bytes() -> bytes:
    return base64.b64decode(png_data_uri().split(",", 1)[1])


@pytest.fixture
def make_analyzer():
    def _make(**kwargs) -> ImageAnalyzer:
        return ImageAnalyzer(FakeDescriptionBackend(**kwargs), prompt="Describe.")
    return _make
