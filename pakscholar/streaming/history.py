"""Conversation turns and the bounded, process-wide history buffer."""

import logging
from enum import Enum

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class Role(str, Enum):
    """Speaker of a conversation turn."""

    USER = "user"
    MODEL = "model"


class Part(BaseModel):
    """One segment of a turn: either text or inline image bytes.

    Attributes:
        text: Text segment.
        data: Raw image bytes for an inline attachment.
        mime_type: Declared content type of ``data``.
    """

    text: str | None = None
    data: bytes | None = None
    mime_type: str | None = None

    @classmethod
    def from_text(cls, text: str) -> "Part":
        return cls(text=text)

    @classmethod
    def from_image(cls, data: bytes, mime_type: str) -> "Part":
        return cls(data=data, mime_type=mime_type)


class Turn(BaseModel):
    """A role-tagged message in the conversation."""

    role: Role
    parts: list[Part] = Field(default_factory=list)


class ConversationHistory:
    """Rolling history shared by all sessions.

    Holds at most ``max_turns`` user/model exchanges, i.e. ``2 * max_turns``
    turns. Oldest turns are evicted first.
    """

    def __init__(self, max_turns: int = 5) -> None:
        self._max_turns = max_turns
        self._turns: list[Turn] = []

    @property
    def max_messages(self) -> int:
        return self._max_turns * 2

    def __len__(self) -> int:
        return len(self._turns)

    def snapshot(self) -> list[Turn]:
        """Return the turns oldest-first as a new list."""
        return list(self._turns)

    def append_exchange(self, user_parts: list[Part], model_text: str) -> None:
        """Record a completed exchange and trim to the configured bound."""
        self._turns.append(Turn(role=Role.USER, parts=list(user_parts)))
        self._turns.append(Turn(role=Role.MODEL, parts=[Part.from_text(model_text)]))
        self._trim()

    def clear(self) -> None:
        self._turns.clear()

    def _trim(self) -> None:
        overflow = len(self._turns) - self.max_messages
        if overflow > 0:
            del self._turns[:overflow]
            logger.debug(f"Trimmed history by {overflow} turns")
