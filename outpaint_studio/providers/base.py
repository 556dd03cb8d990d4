"""Abstract base classes for API providers and the capabilities they offer."""

from abc import ABC, abstractmethod
import httpx
from typing import Optional

from ..models.enums import TargetFormat
from ..utils.logger import get_logger
from ..utils.errors import ProviderError, AuthenticationError, RateLimitError

logger = get_logger(__name__)


class ImageGenerationBackend(ABC):
    """Remote capability that fills or edits an image from a prompt."""

    @abstractmethod
    async def generate_image(
        self,
        base_image: str,
        prompt: str,
        target_format: TargetFormat,
    ) -> str:
        """
        Run one generation.

        Args:
            base_image: Raster as data URI
            prompt: Instruction text
            target_format: Aspect ratio of the requested output

        Returns:
            Resulting raster as data URI
        """
        pass


class ImageDescriptionBackend(ABC):
    """Remote capability that describes an image in free text."""

    @abstractmethod
    async def describe_image(self, image: str, prompt: str) -> str:
        """Return a text description of a data-URI raster."""
        pass


class BaseProvider(ABC):
    """Abstract base class for all HTTP API providers."""

    provider_name = "provider"

    def __init__(
        self,
        api_key: str,
        base_url: str,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize provider.

        Args:
            api_key: API key for authentication
            base_url: Base URL for API endpoints
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used to stub the network)
        """
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        self.transport = transport
        self.client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        """Async context manager entry."""
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def initialize(self):
        """Initialize the HTTP client."""
        if self.client is None:
            self.client = httpx.AsyncClient(
                timeout=self.timeout,
                headers=self._get_default_headers(),
                transport=self.transport,
            )
            logger.info(
                f"{self.__class__.__name__} initialized",
                extra={"provider": self.__class__.__name__}
            )

    async def close(self):
        """Close the HTTP client."""
        if self.client:
            await self.client.aclose()
            self.client = None
            logger.info(
                f"{self.__class__.__name__} closed",
                extra={"provider": self.__class__.__name__}
            )

    @abstractmethod
    def _get_default_headers(self) -> dict:
        """Get default headers for requests."""
        pass

    def _ensure_client(self):
        """Ensure client is initialized."""
        if self.client is None:
            raise RuntimeError(
                f"{self.__class__.__name__} not initialized. "
                "Call initialize() or use as async context manager."
            )

    def _handle_response_errors(self, response: httpx.Response):
        """Map HTTP error statuses to provider exceptions."""
        if response.status_code == 401:
            raise AuthenticationError(self.provider_name)
        elif response.status_code == 429:
            retry_after = response.headers.get("Retry-After")
            raise RateLimitError(
                self.provider_name,
                int(retry_after) if retry_after and retry_after.isdigit() else None
            )
        elif response.status_code >= 400:
            try:
                error_data = response.json()
            except ValueError:
                error_data = None

            error_message = response.text
            if isinstance(error_data, dict):
                error = error_data.get("error")
                if isinstance(error, dict):
                    error_message = error.get("message", response.text)
                elif error_data.get("message"):
                    error_message = error_data["message"]

            raise ProviderError(
                self.provider_name,
                error_message,
                response.status_code
            )
