"""Concurrent per-format generation with partial-failure reporting."""

import asyncio
import time
from typing import Iterable, List, Optional

from .composite import CompositeBuilder
from .image_generator import ImageGenerator
from .prompts import build_outpainting_prompt
from ..models.enums import TargetFormat, FormatStatus, BatchStatus
from ..models.schemas import SourceImage, GeneratedResult, FormatOutcome, BatchOutcome
from ..utils.logger import get_logger
from ..utils.errors import InvalidRequestError

logger = get_logger(__name__)


class BatchCoordinator:
    """Runs one outpainting pipeline per selected format."""

    def __init__(
        self,
        composite_builder: CompositeBuilder,
        generator: ImageGenerator,
        base_prompt: str,
    ):
        """
        Initialize batch coordinator.

        Args:
            composite_builder: Builds the canvas for each format
            generator: Issues the remote generation call
            base_prompt: Fixed outpainting instruction
        """
        self.composite_builder = composite_builder
        self.generator = generator
        self.base_prompt = base_prompt

    async def run_single(
        self,
        source: SourceImage,
        fmt: TargetFormat,
        prompt: str,
        index: int,
    ) -> GeneratedResult:
        """
        Composite, then generate, for one format.

        Raises:
            DecodeError: If the source cannot be decoded
            GenerationError: If the remote call fails
        """
        composite = await self.composite_builder.build_composite(source.data_uri, fmt)

        image_data = await self.generator.generate(
            composite_image=composite.data_uri,
            prompt=prompt,
            fmt=fmt,
        )

        return GeneratedResult(
            id=f"{fmt.slug}-{int(time.time() * 1000)}-{index}",
            format=fmt,
            image_data=image_data,
        )

    async def run_batch(
        self,
        source: Optional[SourceImage],
        formats: Iterable[TargetFormat],
        context_text: Optional[str] = None,
        token: int = 0,
    ) -> BatchOutcome:
        """
        Generate every requested format concurrently.

        Failures of individual formats never escape; they are reported in
        the outcome's per-format status list.

        Args:
            source: Uploaded image
            formats: Selected formats (duplicates are ignored)
            context_text: Optional description appended to the prompt
            token: Generation token echoed back in the outcome

        Returns:
            BatchOutcome

        Raises:
            InvalidRequestError: If there is no source or no format
        """
        if source is None:
            raise InvalidRequestError("No source image uploaded")

        requested: List[TargetFormat] = list(dict.fromkeys(formats))
        if not requested:
            raise InvalidRequestError("No target format selected")

        start_time = time.time()
        prompt = build_outpainting_prompt(self.base_prompt, context_text)

        logger.info(
            f"Starting parallel generation for {len(requested)} formats",
            extra={
                "formats": [f.value for f in requested],
                "token": token,
                "has_context": bool(context_text),
            }
        )

        tasks = [
            self.run_single(source, fmt, prompt, index)
            for index, fmt in enumerate(requested)
        ]

        # Execute in parallel with exception handling
        outcomes = await asyncio.gather(*tasks, return_exceptions=True)

        results: List[GeneratedResult] = []
        statuses: List[FormatOutcome] = []

        for fmt, outcome in zip(requested, outcomes):
            if isinstance(outcome, BaseException):
                logger.error(
                    f"Generation failed for {fmt.value}",
                    extra={
                        "format": fmt.value,
                        "error": str(outcome),
                        "error_type": type(outcome).__name__,
                    }
                )
                statuses.append(FormatOutcome(
                    format=fmt,
                    status=FormatStatus.FAILED,
                    error=str(outcome) or type(outcome).__name__,
                ))
            else:
                results.append(outcome)
                statuses.append(FormatOutcome(
                    format=fmt,
                    status=FormatStatus.SUCCESS,
                    result_id=outcome.id,
                ))

        if len(results) == len(requested):
            status = BatchStatus.COMPLETE
        elif results:
            status = BatchStatus.PARTIAL
        else:
            status = BatchStatus.FAILED

        logger.info(
            f"Parallel generation complete: {len(results)}/{len(requested)} successful",
            extra={
                "successful": len(results),
                "failed": len(requested) - len(results),
                "status": status.value,
                "token": token,
            }
        )

        return BatchOutcome(
            status=status,
            results=results,
            formats=statuses,
            token=token,
            processing_time_seconds=round(time.time() - start_time, 3),
        )
