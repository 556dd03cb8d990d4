"""In-memory session state: source image, description and current results."""

import time
import uuid
from typing import Dict, List, Optional

from ..models.enums import BatchStatus
from ..models.schemas import SourceImage, GeneratedResult, BatchOutcome
from ..utils.logger import get_logger
from ..utils.errors import SessionNotFoundError, StaleResultError

logger = get_logger(__name__)


class Session:
    """
    One user's working state.

    ``generation_token`` advances on every upload and every batch start.
    A batch may only commit its results while the token it captured is
    still current, so a batch that outlives a new upload (or a newer
    batch) is dropped instead of overwriting fresher state.

    Each result carries a ``revision``; an edit commits only against the
    revision it was computed from.
    """

    def __init__(self, source: SourceImage, description: str = ""):
        self.id = uuid.uuid4().hex
        self.source = source
        self.description = description
        self.generation_token = 0
        self.results: Dict[str, GeneratedResult] = {}
        self.created_at = time.time()
        self.last_access = self.created_at

    def touch(self):
        self.last_access = time.time()

    def replace_source(self, source: SourceImage, description: str = ""):
        """New upload: invalidate in-flight batches and clear results."""
        self.source = source
        self.description = description
        self.generation_token += 1
        self.results = {}

        logger.info(
            "Session source replaced",
            extra={"session_id": self.id, "token": self.generation_token}
        )

    def begin_batch(self) -> int:
        """Start a batch and return the token it must commit with."""
        self.generation_token += 1
        return self.generation_token

    def is_current(self, token: int) -> bool:
        return token == self.generation_token

    def commit_batch(self, outcome: BatchOutcome) -> BatchOutcome:
        """
        Replace the result set with the outcome's results if still current.

        Returns:
            The outcome, marked STALE with its results dropped when superseded
        """
        if not self.is_current(outcome.token):
            logger.warning(
                "Dropping results of superseded batch",
                extra={
                    "session_id": self.id,
                    "batch_token": outcome.token,
                    "current_token": self.generation_token,
                    "dropped": len(outcome.results),
                }
            )
            return outcome.model_copy(update={"status": BatchStatus.STALE, "results": []})

        self.results = {result.id: result for result in outcome.results}
        return outcome

    def list_results(self) -> List[GeneratedResult]:
        return list(self.results.values())

    def get_result(self, result_id: str) -> GeneratedResult:
        """
        Raises:
            KeyError: If the result is not in the current set
        """
        return self.results[result_id]

    def commit_edit(self, result_id: str, base_revision: int, image_data: str) -> GeneratedResult:
        """
        Replace one result's image data.

        Raises:
            StaleResultError: If the result vanished or changed since base_revision
        """
        current = self.results.get(result_id)
        if current is None:
            raise StaleResultError(f"Result {result_id} no longer exists")
        if current.revision != base_revision:
            raise StaleResultError(
                f"Result {result_id} changed (revision {current.revision}, "
                f"edit based on {base_revision})"
            )

        updated = current.model_copy(update={
            "image_data": image_data,
            "revision": current.revision + 1,
        })
        self.results[result_id] = updated
        return updated


class SessionStore:
    """Sessions keyed by id with TTL expiry."""

    def __init__(self, ttl_seconds: int = 3600, cleanup_interval: int = 100):
        self.ttl_seconds = ttl_seconds
        self.cleanup_interval = cleanup_interval
        self._sessions: Dict[str, Session] = {}
        self._access_counter = 0

    def __len__(self) -> int:
        return len(self._sessions)

    def create(self, source: SourceImage, description: str = "") -> Session:
        session = Session(source, description)
        self._sessions[session.id] = session

        logger.info(
            "Session created",
            extra={
                "session_id": session.id,
                "source_filename": source.filename,
                "total_sessions": len(self._sessions),
            }
        )
        return session

    def get(self, session_id: str) -> Session:
        """
        Raises:
            SessionNotFoundError: If unknown or expired
        """
        self._access_counter += 1
        if self._access_counter % self.cleanup_interval == 0:
            self.cleanup_expired()

        session: Optional[Session] = self._sessions.get(session_id)
        if session is None or self._is_expired(session):
            self._sessions.pop(session_id, None)
            raise SessionNotFoundError(f"Session {session_id} not found")

        session.touch()
        return session

    def delete(self, session_id: str):
        if self._sessions.pop(session_id, None) is None:
            raise SessionNotFoundError(f"Session {session_id} not found")
        logger.info("Session deleted", extra={"session_id": session_id})

    def cleanup_expired(self) -> int:
        """Remove all expired sessions."""
        expired = [sid for sid, s in self._sessions.items() if self._is_expired(s)]

        for session_id in expired:
            del self._sessions[session_id]

        if expired:
            logger.info(
                f"Session cleanup: {len(expired)} expired sessions removed",
                extra={"remaining": len(self._sessions)}
            )
        return len(expired)

    def _is_expired(self, session: Session) -> bool:
        return time.time() - session.last_access > self.ttl_seconds
