"""In-memory registry of pending and streaming chat sessions.

A session is created when a prompt is submitted and lives until its stream
ends. Lookups that miss are normal (stale ids, retried stop requests) and are
reported as ``None`` / ``False`` rather than raised.
"""

import asyncio
import logging
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from pakscholar.streaming.attachments import remove_attachment
from pakscholar.streaming.history import Part

logger = logging.getLogger(__name__)

DEFAULT_PENDING_TIMEOUT = 60.0


class SessionStatus(str, Enum):
    """Lifecycle status of a live session. Ended sessions are deleted."""

    PENDING = "pending"
    STREAMING = "streaming"


class CancellationToken:
    """Shared flag set by the stop path and polled by the relay."""

    def __init__(self) -> None:
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True


@dataclass
class SessionRecord:
    """State for one prompt submission.

    Attributes:
        id: Opaque identifier handed to the client.
        input_parts: Prompt segments as submitted.
        attachment_path: Transient upload owned by this session.
        mime_type: Declared content type of the attachment.
        status: Current lifecycle status.
        token: Cancellation token, installed on activation.
        accumulated_text: Response text produced so far.
    """

    id: str
    input_parts: tuple[Part, ...]
    attachment_path: Path | None = None
    mime_type: str | None = None
    status: SessionStatus = SessionStatus.PENDING
    token: CancellationToken | None = None
    accumulated_text: str = ""
    created_at: float = field(default_factory=time.monotonic)

    _timer: asyncio.TimerHandle | None = field(default=None, repr=False)


class SessionRegistry:
    """Maps session ids to records and enforces their lifecycle."""

    def __init__(self, pending_timeout: float = DEFAULT_PENDING_TIMEOUT) -> None:
        self._pending_timeout = pending_timeout
        self._sessions: dict[str, SessionRecord] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def get(self, session_id: str) -> SessionRecord | None:
        return self._sessions.get(session_id)

    def create(
        self,
        input_parts: list[Part],
        attachment_path: Path | None = None,
        mime_type: str | None = None,
    ) -> str:
        """Store a pending session and schedule its expiry.

        Must be called from within a running event loop.

        Args:
            input_parts: Prompt segments submitted by the client.
            attachment_path: Optional stored upload the session takes ownership of.
            mime_type: Content type of the upload.

        Returns:
            The new session id.
        """
        session_id = uuid.uuid4().hex
        while session_id in self._sessions:
            session_id = uuid.uuid4().hex

        record = SessionRecord(
            id=session_id,
            input_parts=tuple(input_parts),
            attachment_path=attachment_path,
            mime_type=mime_type,
        )
        loop = asyncio.get_running_loop()
        record._timer = loop.call_later(self._pending_timeout, self._expire, session_id)
        self._sessions[session_id] = record

        logger.info(f"[{session_id}] Pending stream created")
        return session_id

    def activate(self, session_id: str) -> SessionRecord | None:
        """Move a pending session to streaming.

        Returns:
            The record, or None if the id is unknown or was already activated.
        """
        record = self._sessions.get(session_id)
        if record is None or record.status is not SessionStatus.PENDING:
            logger.info(f"[{session_id}] Invalid or already processed stream ID")
            return None

        record.status = SessionStatus.STREAMING
        record.token = CancellationToken()
        if record._timer is not None:
            record._timer.cancel()
            record._timer = None

        logger.info(f"[{session_id}] Stream activated")
        return record

    def request_stop(self, session_id: str) -> bool:
        """Signal cancellation to a streaming session.

        Returns:
            True if the session was streaming and has been signaled.
        """
        record = self._sessions.get(session_id)
        if record is None or record.status is not SessionStatus.STREAMING:
            logger.info(f"[{session_id}] Stop request for invalid or non-streaming ID")
            return False

        if record.token is not None:
            record.token.cancel()
        logger.info(f"[{session_id}] Stop signal received")
        return True

    def delete(self, session_id: str) -> bool:
        """Remove a session and release its attachment.

        Returns:
            True for the call that removed the record, False afterwards.
        """
        record = self._sessions.pop(session_id, None)
        if record is None:
            return False

        if record._timer is not None:
            record._timer.cancel()
            record._timer = None
        remove_attachment(record.attachment_path, session_id)
        logger.info(f"[{session_id}] Session deleted")
        return True

    def _expire(self, session_id: str) -> None:
        # Status is checked here, not at schedule time.
        record = self._sessions.get(session_id)
        if record is None or record.status is not SessionStatus.PENDING:
            return
        logger.info(f"[{session_id}] Cleaning up timed-out pending stream")
        self.delete(session_id)
