"""FastAPI dependencies resolving the process-wide streaming objects."""

from fastapi import Request

from pakscholar.agent import get_chat_agent
from pakscholar.streaming import (
    ConversationHistory,
    SessionRegistry,
    StreamRelay,
    StreamSettings,
)


def get_settings(request: Request) -> StreamSettings:
    return request.app.state.settings


def get_registry(request: Request) -> SessionRegistry:
    return request.app.state.registry


def get_history(request: Request) -> ConversationHistory:
    return request.app.state.history


def get_relay(request: Request) -> StreamRelay:
    """Return the app's relay, creating the Gemini-backed one on first use."""
    state = request.app.state
    if state.relay is None:
        state.relay = StreamRelay(state.registry, state.history, get_chat_agent())
    return state.relay
