"""Tests for concurrent batch generation."""

import asyncio

import pytest

from outpaint_studio.core import BatchCoordinator, CompositeBuilder, ImageGenerator
from outpaint_studio.models import TargetFormat, BatchStatus, FormatStatus, SourceImage
from outpaint_studio.utils.errors import InvalidRequestError

from conftest import BASE_PROMPT, FakeGenerationBackend, decode_uri

FORMATS = [TargetFormat.RATIO_1_1, TargetFormat.RATIO_16_9, TargetFormat.RATIO_9_16]


def make_batch(backend: FakeGenerationBackend) -> BatchCoordinator:
    return BatchCoordinator(
        composite_builder=CompositeBuilder(),
        generator=ImageGenerator(backend),
        base_prompt=BASE_PROMPT,
    )


@pytest.mark.asyncio
async def test_all_formats_succeed(batch, backend, source_image):
    """Test one result per requested format."""
    outcome = await batch.run_batch(source_image, FORMATS, token=3)

    assert outcome.status == BatchStatus.COMPLETE
    assert outcome.token == 3
    assert not outcome.partial_failure
    assert [r.format for r in outcome.results] == FORMATS
    assert len(backend.calls) == 3

    ids = [r.id for r in outcome.results]
    assert len(set(ids)) == len(ids)
    assert ids[1].startswith("16x9-")


@pytest.mark.asyncio
async def test_results_have_target_dimensions(batch, source_image):
    """Test each result (echoed composite) has its format's canvas size."""
    outcome = await batch.run_batch(source_image, [TargetFormat.RATIO_21_9, TargetFormat.RATIO_2_3])

    sizes = {r.format: decode_uri(r.image_data).size for r in outcome.results}
    assert sizes[TargetFormat.RATIO_21_9] == (2048, 878)
    assert sizes[TargetFormat.RATIO_2_3] == (1024, 1536)


@pytest.mark.asyncio
async def test_partial_failure_is_reported(source_image):
    """Test a failing format does not abort the others."""
    backend = FakeGenerationBackend(fail_formats={TargetFormat.RATIO_16_9})
    batch = make_batch(backend)

    outcome = await batch.run_batch(source_image, FORMATS)

    assert outcome.status == BatchStatus.PARTIAL
    assert outcome.partial_failure
    assert {r.format for r in outcome.results} == {TargetFormat.RATIO_1_1, TargetFormat.RATIO_9_16}
    assert outcome.failed == [TargetFormat.RATIO_16_9]

    failed = [f for f in outcome.formats if f.status == FormatStatus.FAILED]
    assert len(failed) == 1
    assert "16:9" in failed[0].error
    assert failed[0].result_id is None


@pytest.mark.asyncio
async def test_all_formats_fail(source_image):
    """Test a fully failed batch is returned, not raised."""
    batch = make_batch(FakeGenerationBackend(fail_all=True))

    outcome = await batch.run_batch(source_image, FORMATS)

    assert outcome.status == BatchStatus.FAILED
    assert outcome.results == []
    assert outcome.failed == FORMATS


@pytest.mark.asyncio
async def test_empty_selection_makes_no_calls(batch, backend, source_image):
    """Test an empty format list is rejected before any remote call."""
    with pytest.raises(InvalidRequestError):
        await batch.run_batch(source_image, [])

    assert backend.calls == []


@pytest.mark.asyncio
async def test_missing_source_makes_no_calls(batch, backend):
    """Test a batch without a source is rejected."""
    with pytest.raises(InvalidRequestError):
        await batch.run_batch(None, FORMATS)

    assert backend.calls == []


@pytest.mark.asyncio
async def test_undecodable_source_fails_every_format(batch, backend):
    """Test decode failures are per-format and skip the remote call."""
    source = SourceImage(
        data_uri="data:image/png;base64,bm90IGFuIGltYWdl",
        filename="broken.png",
        content_type="image/png",
        size_bytes=12,
    )

    outcome = await batch.run_batch(source, FORMATS)

    assert outcome.status == BatchStatus.FAILED
    assert len(outcome.failed) == 3
    assert backend.calls == []


@pytest.mark.asyncio
async def test_duplicate_formats_are_collapsed(batch, backend, source_image):
    """Test each format is generated once."""
    outcome = await batch.run_batch(
        source_image,
        [TargetFormat.RATIO_1_1, TargetFormat.RATIO_1_1, TargetFormat.RATIO_3_2],
    )

    assert len(outcome.results) == 2
    assert len(backend.calls) == 2


@pytest.mark.asyncio
async def test_context_is_appended_to_prompt(batch, backend, source_image):
    """Test the image description enriches the outpainting prompt."""
    await batch.run_batch(source_image, [TargetFormat.RATIO_1_1], context_text="A sunny beach.")

    assert backend.calls[0].prompt == f"{BASE_PROMPT}\n\nImage Context: A sunny beach."


@pytest.mark.asyncio
async def test_blank_context_is_ignored(batch, backend, source_image):
    """Test an empty description leaves the base prompt alone."""
    await batch.run_batch(source_image, [TargetFormat.RATIO_1_1], context_text="  ")

    assert backend.calls[0].prompt == BASE_PROMPT


@pytest.mark.asyncio
async def test_formats_run_concurrently(source_image):
    """Test every format is in flight before any completes."""
    gate = asyncio.Event()
    backend = FakeGenerationBackend(gate=gate)
    batch = make_batch(backend)

    task = asyncio.create_task(batch.run_batch(source_image, FORMATS))

    for _ in range(200):
        if backend.in_flight == len(FORMATS):
            break
        await asyncio.sleep(0.01)

    assert backend.in_flight == len(FORMATS)

    gate.set()
    outcome = await asyncio.wait_for(task, timeout=5)
    assert outcome.status == BatchStatus.COMPLETE
