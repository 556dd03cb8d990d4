"""OpenRouter API client for vision description."""

import httpx
from typing import Optional

from .base import BaseProvider, ImageDescriptionBackend
from ..utils.logger import get_logger
from ..utils.errors import ProviderError

logger = get_logger(__name__)


class OpenRouterClient(BaseProvider, ImageDescriptionBackend):
    """Client for OpenRouter chat completions with image input."""

    provider_name = "openrouter"

    def __init__(
        self,
        api_key: str,
        model: str = "google/gemini-2.5-flash",
        timeout: float = 60.0,
        max_tokens: int = 400,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize OpenRouter client.

        Args:
            api_key: OpenRouter API key
            model: Vision-capable model id
            timeout: Request timeout in seconds
            max_tokens: Completion length limit
            transport: Optional httpx transport
        """
        super().__init__(
            api_key=api_key,
            base_url="https://openrouter.ai/api/v1",
            timeout=timeout,
            transport=transport,
        )
        self.model = model
        self.max_tokens = max_tokens

    def _get_default_headers(self) -> dict:
        """Get default headers for OpenRouter requests."""
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "X-Title": "Outpaint Studio",
        }

    async def describe_image(self, image: str, prompt: str) -> str:
        """Describe a data-URI image with the configured vision model."""
        self._ensure_client()

        payload = {
            "model": self.model,
            "messages": [
                {
                    "role": "user",
                    "content": [
                        {
                            "type": "text",
                            "text": prompt
                        },
                        {
                            "type": "image_url",
                            "image_url": {
                                "url": image
                            }
                        }
                    ]
                }
            ],
            "max_tokens": self.max_tokens,
        }

        try:
            response = await self.client.post(
                f"{self.base_url}/chat/completions",
                json=payload,
            )
        except httpx.RequestError as e:
            raise ProviderError(self.provider_name, f"Request failed: {e}")

        self._handle_response_errors(response)

        data = response.json()

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            raise ProviderError(self.provider_name, "Malformed completion response")

        logger.info(
            "Description complete",
            extra={
                "model_requested": self.model,
                "model_actual": data.get("model", "unknown"),
                "length": len(content or ""),
            }
        )

        return (content or "").strip()
