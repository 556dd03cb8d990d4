"""Single remote generation call."""

from ..providers.base import ImageGenerationBackend
from ..models.enums import TargetFormat
from ..utils.images import is_data_uri
from ..utils.logger import get_logger
from ..utils.errors import GenerationError

logger = get_logger(__name__)


class ImageGenerator:
    """Sends one composite and prompt to the generation backend."""

    def __init__(self, backend: ImageGenerationBackend):
        """
        Initialize image generator.

        Args:
            backend: Remote generation capability
        """
        self.backend = backend

    async def generate(
        self,
        composite_image: str,
        prompt: str,
        fmt: TargetFormat,
    ) -> str:
        """
        Generate an image for one format.

        Args:
            composite_image: Base raster as data URI
            prompt: Full instruction text
            fmt: Target format of the output

        Returns:
            Resulting raster as data URI

        Raises:
            GenerationError: On any remote failure or malformed response
        """
        logger.info(
            f"Generating image for {fmt.value}",
            extra={"format": fmt.value}
        )

        try:
            result = await self.backend.generate_image(
                base_image=composite_image,
                prompt=prompt,
                target_format=fmt,
            )
        except GenerationError:
            raise
        except Exception as e:
            logger.error(
                f"Generation failed for {fmt.value}",
                extra={"format": fmt.value, "error": str(e), "error_type": type(e).__name__}
            )
            raise GenerationError(str(e), format=fmt.value) from e

        if not is_data_uri(result):
            logger.error(
                f"Malformed generation response for {fmt.value}",
                extra={"format": fmt.value, "response_type": type(result).__name__}
            )
            raise GenerationError("Response is not an image data URI", format=fmt.value)

        logger.info(
            f"Image generated for {fmt.value}",
            extra={"format": fmt.value, "size_kb": len(result) * 0.75 / 1024}
        )

        return result
