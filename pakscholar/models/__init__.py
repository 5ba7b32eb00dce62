"""Pydantic models for API requests, responses and stream events.

Provides type safety, validation, and automatic OpenAPI documentation.

Models:
    - StreamEvent: Event sent on a session's push channel
    - DirectResponse: Submission answered by the FAQ/topic filter
    - StreamHandle: Submission accepted for streaming
    - StopResponse: Stop request acknowledgement
"""

from pakscholar.models.schemas import (
    DirectResponse,
    EventType,
    StopResponse,
    StreamEvent,
    StreamHandle,
)

__all__ = ["DirectResponse", "EventType", "StopResponse", "StreamEvent", "StreamHandle"]
