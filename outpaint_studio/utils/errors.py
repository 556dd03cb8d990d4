"""Custom exception classes for the outpaint studio."""

from typing import Optional


class OutpaintStudioError(Exception):
    """Base exception for all studio errors."""
    pass


class ConfigurationError(OutpaintStudioError):
    """Configuration or initialization errors."""
    pass


class APIError(OutpaintStudioError):
    """Base class for API-related errors."""
    pass


class ProviderError(APIError):
    """Generic provider API error with status code."""

    def __init__(self, provider: str, message: str, status_code: Optional[int] = None):
        self.provider = provider
        self.status_code = status_code
        super().__init__(f"{provider} error: {message}")


class AuthenticationError(ProviderError):
    """API authentication failed."""

    def __init__(self, provider: str):
        super().__init__(provider, "Authentication failed", 401)


class RateLimitError(ProviderError):
    """API rate limit or quota exceeded."""

    def __init__(self, provider: str, retry_after: Optional[int] = None):
        self.retry_after = retry_after
        message = "Rate limit exceeded"
        if retry_after:
            message += f", retry after {retry_after}s"
        super().__init__(provider, message, 429)


class DecodeError(OutpaintStudioError):
    """Source image could not be decoded as a raster image."""
    pass


class InvalidRequestError(OutpaintStudioError):
    """Request rejected before any remote call was made."""
    pass


class UnsupportedMediaTypeError(InvalidRequestError):
    """Uploaded file is not an image."""
    pass


class PayloadTooLargeError(InvalidRequestError):
    """Uploaded file exceeds the size limit."""
    pass


class GenerationError(OutpaintStudioError):
    """Remote generation failed for one format."""

    def __init__(self, message: str, format: Optional[str] = None):
        self.format = format
        if format:
            message = f"[{format}] {message}"
        super().__init__(message)


class AnalysisError(OutpaintStudioError):
    """Vision description failed."""
    pass


class StaleResultError(OutpaintStudioError):
    """Edit targets a result that changed or disappeared since it was read."""
    pass


class SessionNotFoundError(OutpaintStudioError):
    """Unknown or expired session."""
    pass


class ResultNotFoundError(OutpaintStudioError):
    """Unknown result id in the session's current result set."""
    pass
