"""Unit tests for StreamRelay event sequences and cleanup."""

from collections.abc import Callable
from pathlib import Path

import pytest
import pytest_check as check

from pakscholar.agent.prompts import SCHOLARSHIP_CONTEXT
from pakscholar.agent.source import GeneratedUnit
from pakscholar.models.schemas import EventType, StreamEvent
from pakscholar.streaming import registry as registry_module
from pakscholar.streaming.errors import UpstreamError
from pakscholar.streaming.history import ConversationHistory, Part, Role
from pakscholar.streaming.registry import SessionRecord, SessionRegistry
from pakscholar.streaming.relay import GENERIC_ERROR_MESSAGE, StreamRelay
from tests.fakes import PNG_BYTES, GatedSource, ScriptedSource

QUESTION = "What is DAAD deadline?"


def _activate(registry: SessionRegistry, *args, **kwargs) -> SessionRecord:
    session_id = registry.create(*args, **kwargs)
    record = registry.activate(session_id)
    assert record is not None
    return record


async def _collect(relay: StreamRelay, record: SessionRecord) -> list[StreamEvent]:
    return [event async for event in relay.stream(record)]


@pytest.fixture
def removals(monkeypatch: pytest.MonkeyPatch) -> list[Path | None]:
    """Record every attachment removal made by the registry."""
    calls: list[Path | None] = []
    real_remove = registry_module.remove_attachment

    def _counting(path: Path | None, stream_id: str = "N/A") -> None:
        calls.append(path)
        real_remove(path, stream_id)

    monkeypatch.setattr(registry_module, "remove_attachment", _counting)
    return calls


class TestCompletedStream:
    """Tests for streams that run to the end."""

    async def test_chunks_in_order_then_done(
        self, relay: StreamRelay, registry: SessionRegistry, history: ConversationHistory
    ) -> None:
        record = _activate(registry, [Part.from_text(QUESTION)])

        events = await _collect(relay, record)

        check.equal(
            [(e.type, e.content) for e in events],
            [
                (EventType.CHUNK, "Hel"),
                (EventType.CHUNK, "lo, "),
                (EventType.CHUNK, "world"),
                (EventType.DONE, "Stream finished."),
            ],
        )
        check.equal(len(history), 2)
        check.is_false(record.id in registry)

    async def test_history_holds_unframed_prompt(
        self,
        relay: StreamRelay,
        registry: SessionRegistry,
        history: ConversationHistory,
        source: ScriptedSource,
    ) -> None:
        """The scholarship framing goes to the model only."""
        record = _activate(registry, [Part.from_text(QUESTION)])

        await _collect(relay, record)

        sent = source.calls[0][-1]
        check.equal(sent.role, Role.USER)
        check.equal(sent.parts[0].text, SCHOLARSHIP_CONTEXT + QUESTION)

        user_turn, model_turn = history.snapshot()
        check.equal(user_turn.parts[0].text, QUESTION)
        check.equal(model_turn.parts[0].text, "Hello, world")

    async def test_history_is_prepended_to_next_call(
        self, relay: StreamRelay, registry: SessionRegistry, source: ScriptedSource
    ) -> None:
        await _collect(relay, _activate(registry, [Part.from_text(QUESTION)]))
        await _collect(relay, _activate(registry, [Part.from_text("And Chevening?")]))

        second_call = source.calls[1]
        check.equal(len(second_call), 3)
        check.equal(second_call[0].parts[0].text, QUESTION)
        check.equal(second_call[1].role, Role.MODEL)

    async def test_empty_response_not_added_to_history(
        self, registry: SessionRegistry, history: ConversationHistory
    ) -> None:
        relay = StreamRelay(registry, history, ScriptedSource(["", GeneratedUnit(text=None)]))
        record = _activate(registry, [Part.from_text(QUESTION)])

        events = await _collect(relay, record)

        check.equal([e.type for e in events], [EventType.DONE])
        check.equal(len(history), 0)


class TestCancelledStream:
    """Tests for cooperative stop."""

    async def test_stop_mid_stream_emits_info(
        self, registry: SessionRegistry, history: ConversationHistory
    ) -> None:
        source = GatedSource(["one ", "two ", "three"])
        relay = StreamRelay(registry, history, source)
        record = _activate(registry, [Part.from_text(QUESTION)])
        events = relay.stream(record)

        source.step()
        first = await anext(events)
        assert registry.request_stop(record.id) is True
        source.step()
        rest = [event async for event in events]

        check.equal(first, StreamEvent.chunk("one "))
        check.equal(rest, [StreamEvent.info("Stream stopped.")])
        check.equal(len(history), 0)
        check.is_false(record.id in registry)
        check.is_true(source.closed)

    async def test_stop_after_last_unit_still_single_terminal(
        self,
        registry: SessionRegistry,
        history: ConversationHistory,
        make_attachment: Callable[[str], Path],
        removals: list[Path | None],
    ) -> None:
        """A stop racing the natural end yields one terminal event and one cleanup."""
        source = GatedSource(["only"])
        relay = StreamRelay(registry, history, source)
        path = make_attachment("race")
        record = _activate(registry, [Part.from_text(QUESTION)], path, "image/png")
        events = relay.stream(record)

        source.step()
        await anext(events)
        registry.request_stop(record.id)
        rest = [event async for event in events]

        check.equal(len(rest), 1)
        check.is_true(rest[0].is_terminal)
        check.is_false(record.id in registry)
        check.is_false(relay.release(record))
        check.equal(removals, [path])
        check.is_false(path.exists())


class TestFailedStream:
    """Tests for error paths."""

    async def test_safety_block_emits_error(
        self, registry: SessionRegistry, history: ConversationHistory
    ) -> None:
        source = ScriptedSource(["partial ", GeneratedUnit(text=None, blocked=True), "never"])
        relay = StreamRelay(registry, history, source)
        record = _activate(registry, [Part.from_text(QUESTION)])

        events = await _collect(relay, record)

        check.equal(
            events,
            [
                StreamEvent.chunk("partial "),
                StreamEvent.error("Response blocked due to safety settings."),
            ],
        )
        check.equal(len(history), 0)
        check.is_true(source.closed)

    async def test_upstream_error_message_is_forwarded(
        self, registry: SessionRegistry, history: ConversationHistory
    ) -> None:
        source = ScriptedSource(["a"], error=UpstreamError("The model service failed."))
        relay = StreamRelay(registry, history, source)
        record = _activate(registry, [Part.from_text(QUESTION)])

        events = await _collect(relay, record)

        check.equal(events[-1], StreamEvent.error("The model service failed."))
        check.equal(len(history), 0)

    async def test_unexpected_error_uses_generic_message(
        self, registry: SessionRegistry, history: ConversationHistory
    ) -> None:
        source = ScriptedSource(["a"], error=RuntimeError("socket exploded at 10.0.0.3"))
        relay = StreamRelay(registry, history, source)
        record = _activate(registry, [Part.from_text(QUESTION)])

        events = await _collect(relay, record)

        check.equal(events[-1], StreamEvent.error(GENERIC_ERROR_MESSAGE))
        check.is_false(record.id in registry)

    async def test_missing_attachment_fails(
        self, relay: StreamRelay, registry: SessionRegistry, upload_dir: Path
    ) -> None:
        record = _activate(registry, [], upload_dir / "vanished", "image/png")

        events = await _collect(relay, record)

        assert events == [StreamEvent.error("Failed to process uploaded image file.")]

    async def test_empty_parts_fail(
        self, relay: StreamRelay, registry: SessionRegistry, source: ScriptedSource
    ) -> None:
        record = _activate(registry, [])

        events = await _collect(relay, record)

        check.equal(events, [StreamEvent.error("Cannot generate content with empty prompt parts.")])
        check.equal(source.calls, [])


class TestAttachments:
    """Tests for image attachments flowing through the relay."""

    async def test_attachment_sent_and_deleted(
        self,
        relay: StreamRelay,
        registry: SessionRegistry,
        source: ScriptedSource,
        make_attachment: Callable[[str], Path],
    ) -> None:
        path = make_attachment("scan")
        record = _activate(registry, [Part.from_text("Is this eligible?")], path, "image/png")

        await _collect(relay, record)

        parts = source.calls[0][-1].parts
        check.equal(len(parts), 2)
        check.equal(parts[1].mime_type, "image/png")
        check.equal(parts[1].data, PNG_BYTES)
        check.is_false(path.exists())

    async def test_image_only_turn_is_not_framed(
        self,
        relay: StreamRelay,
        registry: SessionRegistry,
        source: ScriptedSource,
        make_attachment: Callable[[str], Path],
    ) -> None:
        record = _activate(registry, [], make_attachment("only"), "image/jpeg")

        await _collect(relay, record)

        parts = source.calls[0][-1].parts
        check.equal(len(parts), 1)
        check.is_none(parts[0].text)


class TestCleanup:
    """Tests for exactly-once session release."""

    async def test_disconnect_releases_session(
        self,
        registry: SessionRegistry,
        history: ConversationHistory,
        make_attachment: Callable[[str], Path],
        removals: list[Path | None],
    ) -> None:
        source = GatedSource(["one ", "two"])
        relay = StreamRelay(registry, history, source)
        path = make_attachment("disconnect")
        record = _activate(registry, [Part.from_text(QUESTION)], path, "image/png")
        events = relay.stream(record)

        source.step()
        await anext(events)
        await events.aclose()

        check.is_false(record.id in registry)
        check.is_false(path.exists())
        check.equal(removals, [path])
        check.equal(len(history), 0)

    async def test_release_after_completion_is_noop(
        self,
        relay: StreamRelay,
        registry: SessionRegistry,
        make_attachment: Callable[[str], Path],
        removals: list[Path | None],
    ) -> None:
        path = make_attachment("done")
        record = _activate(registry, [Part.from_text(QUESTION)], path, "image/png")

        await _collect(relay, record)

        check.is_false(relay.release(record))
        check.is_false(registry.request_stop(record.id))
        check.equal(removals, [path])
