"""Best-effort vision description of the uploaded photo."""

import time

from ..providers.base import ImageDescriptionBackend
from ..utils.logger import get_logger
from ..utils.errors import AnalysisError

logger = get_logger(__name__)


class ImageAnalyzer:
    """Describes the source image to enrich the outpainting prompt."""

    def __init__(self, backend: ImageDescriptionBackend, prompt: str):
        """
        Initialize image analyzer.

        Args:
            backend: Remote vision capability
            prompt: Instruction sent alongside the image
        """
        self.backend = backend
        self.prompt = prompt

    async def describe(self, image: str) -> str:
        """
        Describe an image.

        Raises:
            AnalysisError: If the backend fails or answers with nothing
        """
        api_start = time.time()

        try:
            description = await self.backend.describe_image(image, self.prompt)
        except Exception as e:
            raise AnalysisError(f"Description failed: {e}") from e

        if not description or not description.strip():
            raise AnalysisError("Empty description")

        logger.info(
            "Image description ready",
            extra={
                "api_duration_seconds": round(time.time() - api_start, 2),
                "description_length": len(description),
            }
        )

        return description.strip()

    async def describe_best_effort(self, image: str) -> str:
        """Describe an image, returning an empty string on failure."""
        try:
            return await self.describe(image)
        except AnalysisError as e:
            logger.warning(
                f"Image analysis failed, continuing without context: {e}",
                extra={"error": str(e)}
            )
            return ""
