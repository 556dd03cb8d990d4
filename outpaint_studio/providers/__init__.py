"""API provider clients for external services."""

from .base import ImageGenerationBackend, ImageDescriptionBackend
from .openrouter import OpenRouterClient
from .wavespeed import WaveSpeedAIClient

__all__ = [
    "ImageGenerationBackend",
    "ImageDescriptionBackend",
    "OpenRouterClient",
    "WaveSpeedAIClient",
]
