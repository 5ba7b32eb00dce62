"""Streaming session lifecycle.

Bridges a prompt submission to a cancellable Server-Sent Events stream.

Responsibilities:
    - Session registry with pending timeouts and stop signaling
    - Stream relay driving the model call and forwarding chunks
    - Bounded conversation history shared across sessions
    - Cleanup of transient uploads owned by sessions
"""

from pakscholar.streaming.config import StreamSettings, get_stream_settings
from pakscholar.streaming.errors import (
    InputValidationError,
    SafetyRejection,
    StreamError,
    UpstreamError,
)
from pakscholar.streaming.history import ConversationHistory, Part, Role, Turn
from pakscholar.streaming.registry import (
    CancellationToken,
    SessionRecord,
    SessionRegistry,
    SessionStatus,
)
from pakscholar.streaming.relay import RelayState, StreamRelay

__all__ = [
    "CancellationToken",
    "ConversationHistory",
    "InputValidationError",
    "Part",
    "RelayState",
    "Role",
    "SafetyRejection",
    "SessionRecord",
    "SessionRegistry",
    "SessionStatus",
    "StreamError",
    "StreamRelay",
    "StreamSettings",
    "Turn",
    "UpstreamError",
    "get_stream_settings",
]
