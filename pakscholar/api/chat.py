"""Chat endpoints: prompt submission, SSE stream, and stop.

A submission either gets an immediate answer (FAQ or off-topic redirect) or
a stream id. The client then opens ``GET /stream/{stream_id}`` to receive
``data: {"type": ..., "content": ...}`` events, and may call
``POST /stop/{stream_id}`` to end generation early.
"""

import logging
from collections.abc import AsyncGenerator, AsyncIterator
from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from pakscholar.api.dependencies import get_registry, get_relay, get_settings
from pakscholar.api.uploads import store_upload, validate_image
from pakscholar.faq import DirectAnswer, Redirect, classify
from pakscholar.models.schemas import DirectResponse, StopResponse, StreamEvent, StreamHandle
from pakscholar.streaming import (
    InputValidationError,
    Part,
    SessionRecord,
    SessionRegistry,
    StreamRelay,
    StreamSettings,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


async def _sse_frames(events: AsyncGenerator[StreamEvent]) -> AsyncIterator[str]:
    try:
        async for event in events:
            yield event.to_sse()
    finally:
        await events.aclose()


async def _release_session(relay: StreamRelay, record: SessionRecord) -> None:
    relay.release(record)


@router.post("/request-stream", response_model=DirectResponse | StreamHandle)
async def request_stream(
    msg: str = Form(""),
    image: UploadFile | None = File(None),
    registry: SessionRegistry = Depends(get_registry),
    settings: StreamSettings = Depends(get_settings),
) -> DirectResponse | StreamHandle:
    """Submit a prompt with an optional image.

    Returns:
        DirectResponse for FAQ matches and off-topic text, otherwise a
        StreamHandle whose id must be connected within the pending timeout.

    Raises:
        400: No text and no image, or a non-image attachment.
        413: Attachment exceeds the upload limit.
    """
    user_input = msg.strip()
    if not user_input and image is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="'msg' text or an image file is required.",
        )

    attachment_path = None
    mime_type = None
    if image is not None:
        attachment_path, mime_type = await store_upload(
            image, settings.upload_dir, settings.max_upload_bytes
        )
        try:
            validate_image(attachment_path, mime_type, image.filename)
        except InputValidationError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message) from e
    else:
        verdict = classify(user_input)
        if isinstance(verdict, DirectAnswer):
            logger.info(f'[FAQ] Matched: "{user_input}". Sending predefined response.')
            return DirectResponse(direct_response=verdict.answer)
        if isinstance(verdict, Redirect):
            logger.info(f'[OFF_TOPIC] Query: "{user_input}". Redirecting to scholarship topic.')
            return DirectResponse(direct_response=verdict.message)

    parts = [Part.from_text(user_input)] if user_input else []
    stream_id = registry.create(parts, attachment_path, mime_type)
    logger.info(
        f'[{stream_id}] Received request. User: "{user_input or "(No text)"}", '
        f"File: {image.filename if image is not None else 'None'}"
    )
    return StreamHandle(stream_id=stream_id)


@router.get("/stream/{stream_id}")
async def stream(
    stream_id: str,
    registry: SessionRegistry = Depends(get_registry),
    relay: StreamRelay = Depends(get_relay),
) -> StreamingResponse:
    """Open the event stream for a submitted prompt.

    Raises:
        404: Unknown, expired, or already connected stream id.
    """
    record = registry.activate(stream_id)
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Invalid or expired stream ID.",
        )

    logger.info(f"[{stream_id}] Client connected for streaming")
    return StreamingResponse(
        _sse_frames(relay.stream(record)),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
        background=BackgroundTask(_release_session, relay, record),
    )


@router.post("/stop/{stream_id}", response_model=StopResponse)
async def stop(
    stream_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> StopResponse:
    """Request cancellation of an active stream.

    Raises:
        404: The stream is not currently streaming.
    """
    if not registry.request_stop(stream_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Stream not found or not actively streaming.",
        )
    return StopResponse(message="Stop signal processed.")
