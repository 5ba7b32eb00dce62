from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class EventType(str, Enum):
    """Type values for push channel events."""

    CHUNK = "chunk"
    INFO = "info"
    ERROR = "error"
    DONE = "done"


class StreamEvent(BaseModel):
    """One event on a session's push channel.

    Attributes:
        type: Event type. ``info``, ``error`` and ``done`` end the stream.
        content: Text payload.
    """

    type: EventType
    content: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.type is not EventType.CHUNK

    @classmethod
    def chunk(cls, content: str) -> "StreamEvent":
        return cls(type=EventType.CHUNK, content=content)

    @classmethod
    def info(cls, content: str) -> "StreamEvent":
        return cls(type=EventType.INFO, content=content)

    @classmethod
    def error(cls, content: str) -> "StreamEvent":
        return cls(type=EventType.ERROR, content=content)

    @classmethod
    def done(cls, content: str | None = None) -> "StreamEvent":
        return cls(type=EventType.DONE, content=content)

    def to_sse(self) -> str:
        """Format as a Server-Sent Events data frame."""
        return f"data: {self.model_dump_json(exclude_none=True)}\n\n"


class DirectResponse(BaseModel):
    """Submission answered without contacting the model (FAQ or redirect)."""

    model_config = ConfigDict(populate_by_name=True)

    direct_response: str = Field(..., alias="directResponse")


class StreamHandle(BaseModel):
    """Submission accepted; the client connects to ``/stream/{streamId}``."""

    model_config = ConfigDict(populate_by_name=True)

    stream_id: str = Field(..., alias="streamId")


class StopResponse(BaseModel):
    """Acknowledgement of a processed stop request."""

    message: str
