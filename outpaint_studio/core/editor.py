"""Masked, prompt-guided edit of one generated result."""

from .image_generator import ImageGenerator
from .prompts import build_edit_prompt
from ..models.schemas import GeneratedResult
from ..utils.logger import get_logger
from ..utils.errors import InvalidRequestError

logger = get_logger(__name__)


class EditCoordinator:
    """Submits a single edit generation for one result."""

    def __init__(self, generator: ImageGenerator, edit_prefix: str):
        self.generator = generator
        self.edit_prefix = edit_prefix

    async def apply_edit(
        self,
        target: GeneratedResult,
        overlay_image_data: str,
        instruction_text: str,
    ) -> str:
        """
        Send the overlay (result plus user strokes) with the wrapped instruction.

        The target itself is not modified; the caller commits the returned
        image data.

        Args:
            target: Result being edited
            overlay_image_data: Target raster with strokes, as data URI
            instruction_text: What to change in the marked area

        Returns:
            New image data URI

        Raises:
            InvalidRequestError: If instruction or overlay is empty
            GenerationError: If the remote call fails
        """
        if not instruction_text or not instruction_text.strip():
            raise InvalidRequestError("Edit instruction is empty")
        if not overlay_image_data:
            raise InvalidRequestError("Edit overlay is empty")

        prompt = build_edit_prompt(self.edit_prefix, instruction_text)

        logger.info(
            f"Applying edit to {target.id}",
            extra={
                "result_id": target.id,
                "format": target.format.value,
                "revision": target.revision,
                "instruction": instruction_text[:100],
            }
        )

        return await self.generator.generate(
            composite_image=overlay_image_data,
            prompt=prompt,
            fmt=target.format,
        )
