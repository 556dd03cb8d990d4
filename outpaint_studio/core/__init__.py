"""Core business logic components."""

from .dimensions import dimensions_for, DIMENSION_TABLE, MAX_LONG_EDGE
from .composite import CompositeBuilder
from .image_generator import ImageGenerator
from .batch import BatchCoordinator
from .editor import EditCoordinator
from .image_analyzer import ImageAnalyzer
from .session import Session, SessionStore
from .workflow import OutpaintWorkflow

__all__ = [
    "dimensions_for",
    "DIMENSION_TABLE",
    "MAX_LONG_EDGE",
    "CompositeBuilder",
    "ImageGenerator",
    "BatchCoordinator",
    "EditCoordinator",
    "ImageAnalyzer",
    "Session",
    "SessionStore",
    "OutpaintWorkflow",
]
