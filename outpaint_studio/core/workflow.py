"""Top-level workflow tying uploads, batches and edits to sessions."""

from typing import Iterable, List, Optional, Tuple

from .batch import BatchCoordinator
from .editor import EditCoordinator
from .image_analyzer import ImageAnalyzer
from .overlay import render_overlay
from .session import Session, SessionStore
from ..models.enums import TargetFormat
from ..models.schemas import SourceImage, GeneratedResult, BatchOutcome, Stroke
from ..utils.images import bytes_to_data_uri, data_uri_to_png_bytes, is_data_uri
from ..utils.logger import get_logger
from ..utils.errors import (
    InvalidRequestError,
    UnsupportedMediaTypeError,
    PayloadTooLargeError,
    ResultNotFoundError,
    StaleResultError,
)

logger = get_logger(__name__)


def build_source_image(
    content: bytes,
    filename: Optional[str],
    content_type: Optional[str],
    max_bytes: int,
) -> SourceImage:
    """
    Validate an upload and wrap it as a SourceImage.

    Raises:
        UnsupportedMediaTypeError: If the content type is not image/*
        PayloadTooLargeError: If the file exceeds max_bytes
        InvalidRequestError: If the file is empty
    """
    if not content_type or not content_type.startswith("image/"):
        raise UnsupportedMediaTypeError(
            f"Only image uploads are accepted, got '{content_type}'"
        )
    if not content:
        raise InvalidRequestError("Uploaded file is empty")
    if len(content) > max_bytes:
        raise PayloadTooLargeError(
            f"Uploaded file is {len(content)} bytes, limit is {max_bytes}"
        )

    return SourceImage(
        data_uri=bytes_to_data_uri(content, content_type),
        filename=filename or "upload",
        content_type=content_type,
        size_bytes=len(content),
    )


class OutpaintWorkflow:
    """Coordinates the studio's user-facing operations."""

    def __init__(
        self,
        store: SessionStore,
        batch: BatchCoordinator,
        editor: EditCoordinator,
        analyzer: Optional[ImageAnalyzer] = None,
        max_upload_bytes: int = 20 * 1024 * 1024,
    ):
        """
        Initialize workflow.

        Args:
            store: Session store
            batch: Batch coordinator
            editor: Edit coordinator
            analyzer: Image analyzer, None disables analysis
            max_upload_bytes: Upload size limit
        """
        self.store = store
        self.batch = batch
        self.editor = editor
        self.analyzer = analyzer
        self.max_upload_bytes = max_upload_bytes

    async def _describe(self, source: SourceImage) -> str:
        if self.analyzer is None:
            return ""
        return await self.analyzer.describe_best_effort(source.data_uri)

    async def upload(
        self,
        content: bytes,
        filename: Optional[str],
        content_type: Optional[str],
    ) -> Session:
        """Create a session for a new upload and describe the image."""
        source = build_source_image(content, filename, content_type, self.max_upload_bytes)
        session = self.store.create(source)
        session.description = await self._describe(source)
        return session

    async def replace_image(
        self,
        session_id: str,
        content: bytes,
        filename: Optional[str],
        content_type: Optional[str],
    ) -> Session:
        """Swap the session's source image; in-flight batches become stale."""
        session = self.store.get(session_id)
        source = build_source_image(content, filename, content_type, self.max_upload_bytes)
        session.replace_source(source)

        description = await self._describe(source)

        # Another upload may have landed while the description was running
        if session.source is source:
            session.description = description
        return session

    async def generate(
        self,
        session_id: str,
        formats: Iterable[TargetFormat],
    ) -> BatchOutcome:
        """Run a batch for the session and commit it if still current."""
        session = self.store.get(session_id)
        formats = list(formats)
        if not formats:
            raise InvalidRequestError("No target format selected")

        token = session.begin_batch()
        outcome = await self.batch.run_batch(
            source=session.source,
            formats=formats,
            context_text=session.description,
            token=token,
        )
        return session.commit_batch(outcome)

    def get_result(self, session_id: str, result_id: str) -> Tuple[Session, GeneratedResult]:
        session = self.store.get(session_id)
        try:
            return session, session.get_result(result_id)
        except KeyError:
            raise ResultNotFoundError(f"Result {result_id} not found")

    async def edit(
        self,
        session_id: str,
        result_id: str,
        instruction: str,
        overlay_image: Optional[str] = None,
        strokes: Optional[List[Stroke]] = None,
        base_revision: Optional[int] = None,
    ) -> GeneratedResult:
        """
        Apply a masked edit to one result.

        The overlay is either supplied ready-made or rendered from strokes.
        On any failure the session's results are left untouched.

        Raises:
            StaleResultError: If the result changed before or during the edit
        """
        session, target = self.get_result(session_id, result_id)

        if base_revision is None:
            base_revision = target.revision
        elif base_revision != target.revision:
            raise StaleResultError(
                f"Result {result_id} is at revision {target.revision}, "
                f"edit based on {base_revision}"
            )

        if strokes:
            overlay = await render_overlay(target.image_data, strokes)
        elif overlay_image:
            if not is_data_uri(overlay_image):
                raise InvalidRequestError("overlay_image must be an image data URI")
            overlay = overlay_image
        else:
            raise InvalidRequestError("Provide either overlay_image or strokes")

        image_data = await self.editor.apply_edit(target, overlay, instruction)
        updated = session.commit_edit(result_id, base_revision, image_data)

        logger.info(
            f"Edit committed for {result_id}",
            extra={"session_id": session_id, "result_id": result_id, "revision": updated.revision}
        )
        return updated

    def download(self, session_id: str, result_id: str) -> Tuple[str, bytes]:
        """Return (filename, png_bytes) for a result."""
        _, result = self.get_result(session_id, result_id)
        return f"resized-{result.format.slug}.png", data_uri_to_png_bytes(result.image_data)
