"""WaveSpeedAI API client for image fill and edit generation."""

import asyncio
import time
import httpx
from typing import Optional

from .base import BaseProvider, ImageGenerationBackend
from ..models.enums import TargetFormat
from ..utils.logger import get_logger
from ..utils.errors import ProviderError
from ..utils.images import bytes_to_data_uri, is_data_uri

logger = get_logger(__name__)


class WaveSpeedAIClient(BaseProvider, ImageGenerationBackend):
    """Client for WaveSpeedAI image editing API."""

    provider_name = "wavespeed"

    def __init__(
        self,
        api_key: str,
        model_id: str = "google/nano-banana/edit",
        timeout: float = 120.0,
        max_wait: int = 180,
        poll_interval: float = 2.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(
            api_key=api_key,
            base_url="https://api.wavespeed.ai/api/v3",
            timeout=timeout,
            transport=transport,
        )
        self.model_id = model_id
        self.max_wait = max_wait
        self.poll_interval = poll_interval

    def _get_default_headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    async def generate_image(
        self,
        base_image: str,
        prompt: str,
        target_format: TargetFormat,
    ) -> str:
        """Submit one edit task, wait for it and return the output as a data URI.

        Single attempt: any failure is raised to the caller.
        """
        self._ensure_client()

        payload = {
            "images": [base_image],
            "prompt": prompt,
            "aspect_ratio": target_format.value,
            "output_format": "png",
            "enable_base64_output": True,
            "enable_sync_mode": False,
        }

        logger.info(
            f"Submitting to WaveSpeed: {self.model_id}",
            extra={
                "model_id": self.model_id,
                "format": target_format.value,
                "prompt": prompt[:100],
            }
        )

        try:
            # STEP 1: Submit task
            response = await self.client.post(
                f"{self.base_url}/{self.model_id}",
                json=payload,
            )
            self._handle_response_errors(response)

            result = response.json()
            if result.get("code") != 200:
                raise ProviderError(
                    self.provider_name,
                    f"API error: {result.get('message', 'Unknown error')}"
                )

            task_id = (result.get("data") or {}).get("id")
            if not task_id:
                raise ProviderError(self.provider_name, "No task ID in response")

            logger.info(
                f"Task submitted: {task_id}",
                extra={"task_id": task_id, "format": target_format.value}
            )

            # STEP 2: Poll for completion
            output = await self._poll_for_result(task_id)

            # STEP 3: Normalize output to a data URI
            return await self._output_to_data_uri(output)

        except httpx.RequestError as e:
            logger.error(
                f"WaveSpeed request failed: {type(e).__name__}: {e}",
                extra={"format": target_format.value, "error": str(e)}
            )
            raise ProviderError(self.provider_name, f"Request failed: {e}")

    async def _poll_for_result(self, task_id: str) -> str:
        """Poll for task completion and return the first output."""
        start_time = time.monotonic()

        while time.monotonic() - start_time < self.max_wait:
            response = await self.client.get(
                f"{self.base_url}/predictions/{task_id}/result",
            )

            if response.status_code != 200:
                self._handle_response_errors(response)
                await asyncio.sleep(self.poll_interval)
                continue

            result = response.json()
            data = result.get("data") or {}
            status = data.get("status")

            logger.debug(
                f"Task status: {status}",
                extra={"task_id": task_id, "status": status}
            )

            if status == "completed":
                outputs = data.get("outputs") or []
                if not outputs:
                    raise ProviderError(self.provider_name, "No outputs in completed task")

                logger.info(
                    f"Task completed in {data.get('executionTime', 0)}ms",
                    extra={"task_id": task_id}
                )
                return outputs[0]

            if status == "failed":
                error = data.get("error") or "Unknown error"
                raise ProviderError(self.provider_name, f"Task failed: {error}")

            await asyncio.sleep(self.poll_interval)

        raise ProviderError(self.provider_name, f"Task timeout after {self.max_wait}s")

    async def _output_to_data_uri(self, output: str) -> str:
        """Outputs arrive as a data URI, a URL or bare base64 depending on the model."""
        if is_data_uri(output):
            return output

        if output.startswith(("http://", "https://")):
            response = await self.client.get(output)
            self._handle_response_errors(response)
            media_type = response.headers.get("content-type", "image/png").split(";")[0]
            return bytes_to_data_uri(response.content, media_type)

        return f"data:image/png;base64,{output}"
