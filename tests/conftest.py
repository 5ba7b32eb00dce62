"""Pytest fixtures and shared test configuration.

Provides reusable fixtures for unit and integration tests.

Fixtures:
    - upload_dir: Temporary directory for transient uploads
    - stream_settings: StreamSettings pointing at upload_dir
    - registry / history: Fresh streaming state per test
    - source: Scripted generation source
    - app / async_client: FastAPI app wired to the scripted source
    - make_attachment: Factory writing a fake image into upload_dir
"""

from collections.abc import AsyncGenerator, Callable
from pathlib import Path

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from pakscholar.api.app import create_app
from pakscholar.streaming import (
    ConversationHistory,
    SessionRegistry,
    StreamRelay,
    StreamSettings,
)
from tests.fakes import PNG_BYTES, ScriptedSource


@pytest.fixture
def upload_dir(tmp_path: Path) -> Path:
    """Return a fresh directory for uploads."""
    path = tmp_path / "uploads"
    path.mkdir()
    return path


@pytest.fixture
def stream_settings(upload_dir: Path) -> StreamSettings:
    return StreamSettings(upload_dir=upload_dir, max_history_turns=5, pending_timeout=60.0)


@pytest.fixture
def registry() -> SessionRegistry:
    return SessionRegistry(pending_timeout=60.0)


@pytest.fixture
def history() -> ConversationHistory:
    return ConversationHistory(max_turns=5)


@pytest.fixture
def source() -> ScriptedSource:
    """Default script answering in three chunks."""
    return ScriptedSource(["Hel", "lo, ", "world"])


@pytest.fixture
def relay(
    registry: SessionRegistry, history: ConversationHistory, source: ScriptedSource
) -> StreamRelay:
    return StreamRelay(registry, history, source)


@pytest.fixture
def make_attachment(upload_dir: Path) -> Callable[[str], Path]:
    """Return a factory writing a small PNG into the upload directory."""

    def _make(name: str = "image") -> Path:
        path = upload_dir / name
        path.write_bytes(PNG_BYTES)
        return path

    return _make


@pytest.fixture
def app(source: ScriptedSource, stream_settings: StreamSettings) -> FastAPI:
    return create_app(source=source, settings=stream_settings)


@pytest.fixture
async def async_client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client for API testing.

    Yields:
        Configured AsyncClient for making test requests.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
