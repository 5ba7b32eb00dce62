"""Scripted generation sources standing in for Gemini, plus SSE helpers."""

import asyncio
from collections.abc import AsyncGenerator

from httpx import AsyncClient

from pakscholar.agent.source import GeneratedUnit
from pakscholar.models.schemas import StreamEvent
from pakscholar.streaming.history import Turn

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


class ScriptedSource:
    """Yields a fixed script of units, optionally failing at the end.

    Attributes:
        calls: Contents received by each ``stream`` call.
        closed: Whether the last stream was closed.
    """

    def __init__(
        self,
        units: list[str | GeneratedUnit] | None = None,
        error: Exception | None = None,
        delay: float = 0.0,
    ) -> None:
        self.units = [
            unit if isinstance(unit, GeneratedUnit) else GeneratedUnit(text=unit)
            for unit in (units or [])
        ]
        self.error = error
        self.delay = delay
        self.calls: list[list[Turn]] = []
        self.closed = False

    async def stream(self, contents: list[Turn]) -> AsyncGenerator[GeneratedUnit]:
        self.calls.append(contents)
        self.closed = False
        try:
            for unit in self.units:
                if self.delay:
                    await asyncio.sleep(self.delay)
                yield unit
            if self.error is not None:
                raise self.error
        finally:
            self.closed = True


class GatedSource:
    """Releases one unit each time ``step`` is called."""

    def __init__(self, units: list[str]) -> None:
        self.units = units
        self._gate = asyncio.Queue[None]()
        self.calls: list[list[Turn]] = []
        self.closed = False

    def step(self, count: int = 1) -> None:
        for _ in range(count):
            self._gate.put_nowait(None)

    async def stream(self, contents: list[Turn]) -> AsyncGenerator[GeneratedUnit]:
        self.calls.append(contents)
        try:
            for text in self.units:
                await self._gate.get()
                yield GeneratedUnit(text=text)
        finally:
            self.closed = True


async def read_events(client: AsyncClient, stream_id: str) -> list[StreamEvent]:
    """Collect every event sent on a stream."""
    events: list[StreamEvent] = []
    async with client.stream("GET", f"/stream/{stream_id}") as response:
        assert response.status_code == 200
        async for line in response.aiter_lines():
            if line.startswith("data: "):
                events.append(StreamEvent.model_validate_json(line[len("data: ") :]))
    return events
