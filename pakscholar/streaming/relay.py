"""Drives one generation call per activated session and relays its output.

Each session moves through ``connecting -> forwarding`` and ends in exactly
one of ``completed``, ``cancelled`` or ``failed``. Whatever the ending, the
session is released through the registry, which removes the record and its
attachment once.

The relay is an async generator of StreamEvent objects. A closed push channel
shows up as the generator being closed or cancelled by its consumer, so no
further events are produced on that path.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import aclosing
from enum import Enum

from pakscholar.agent.prompts import SCHOLARSHIP_CONTEXT
from pakscholar.agent.source import GenerationSource
from pakscholar.models.schemas import StreamEvent
from pakscholar.streaming.attachments import read_attachment
from pakscholar.streaming.errors import SafetyRejection, StreamError, UpstreamError
from pakscholar.streaming.history import ConversationHistory, Part, Role, Turn
from pakscholar.streaming.registry import CancellationToken, SessionRecord, SessionRegistry

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "An error occurred on the server during streaming."


class RelayState(str, Enum):
    """Per-session relay state."""

    CONNECTING = "connecting"
    FORWARDING = "forwarding"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


class StreamRelay:
    """Forwards model output for activated sessions to their push channels."""

    def __init__(
        self,
        registry: SessionRegistry,
        history: ConversationHistory,
        source: GenerationSource,
    ) -> None:
        self._registry = registry
        self._history = history
        self._source = source

    async def build_turn(self, record: SessionRecord) -> list[Part]:
        """Assemble the current user turn, reading the attachment if any.

        Raises:
            UpstreamError: If the attachment cannot be read or the turn is empty.
        """
        parts = list(record.input_parts)
        if record.attachment_path is not None and record.mime_type:
            logger.info(f"[{record.id}] Reading image file: {record.attachment_path}")
            try:
                data = await read_attachment(record.attachment_path)
            except OSError as e:
                logger.error(f"[{record.id}] Failed to read image file: {e}")
                raise UpstreamError("Failed to process uploaded image file.") from e
            parts.append(Part.from_image(data, record.mime_type))

        if not parts:
            raise UpstreamError("Cannot generate content with empty prompt parts.")
        return parts

    def build_contents(self, turn_parts: list[Part]) -> list[Turn]:
        """Prepend history and frame the first text segment of the current turn."""
        framed = list(turn_parts)
        if framed and framed[0].text:
            framed[0] = Part.from_text(SCHOLARSHIP_CONTEXT + framed[0].text)
        return [*self._history.snapshot(), Turn(role=Role.USER, parts=framed)]

    async def stream(self, record: SessionRecord) -> AsyncIterator[StreamEvent]:
        """Run the generation call for an activated session.

        Args:
            record: A record returned by ``SessionRegistry.activate``.

        Yields:
            Zero or more chunk events followed by one terminal event.
        """
        token = record.token or CancellationToken()
        state = RelayState.CONNECTING
        try:
            turn_parts = await self.build_turn(record)
            contents = self.build_contents(turn_parts)
            logger.info(
                f"[{record.id}] Starting model stream. "
                f"History length: {len(contents) - 1}. Current parts: {len(turn_parts)}"
            )

            state = RelayState.FORWARDING
            async with aclosing(self._source.stream(contents)) as units:
                async for unit in units:
                    if token.cancelled:
                        break
                    if unit.blocked:
                        logger.warning(f"[{record.id}] Content blocked due to safety settings")
                        raise SafetyRejection()
                    if unit.text:
                        record.accumulated_text += unit.text
                        yield StreamEvent.chunk(unit.text)

            if token.cancelled:
                state = RelayState.CANCELLED
                logger.info(f"[{record.id}] Stream stopped before completion")
                yield StreamEvent.info("Stream stopped.")
            else:
                state = RelayState.COMPLETED
                self._commit(record, turn_parts)
                logger.info(f"[{record.id}] Stream finished naturally")
                yield StreamEvent.done("Stream finished.")

        except StreamError as e:
            state = RelayState.FAILED
            logger.warning(f"[{record.id}] Stream failed: {e.message}")
            yield StreamEvent.error(e.message)
        except Exception:
            state = RelayState.FAILED
            logger.exception(f"[{record.id}] Unexpected error during streaming")
            yield StreamEvent.error(GENERIC_ERROR_MESSAGE)
        finally:
            logger.info(f"[{record.id}] Cleaning up stream resources (state={state.value})")
            self.release(record)

    def release(self, record: SessionRecord) -> bool:
        """Delete the session and its attachment. Safe to call repeatedly."""
        return self._registry.delete(record.id)

    def _commit(self, record: SessionRecord, turn_parts: list[Part]) -> None:
        if not record.accumulated_text.strip():
            logger.info(f"[{record.id}] Turn not added to history (empty response)")
            return
        self._history.append_exchange(turn_parts, record.accumulated_text)
        logger.info(f"[{record.id}] Added turn to history. History length: {len(self._history)}")
