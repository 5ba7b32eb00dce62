"""HTTP client for the chat API used by the NiceGUI page."""

import os
from collections.abc import AsyncIterator
from types import TracebackType

import httpx

from pakscholar.models.schemas import DirectResponse, StreamEvent, StreamHandle

DEFAULT_API_BASE_URL = "http://localhost:8000"

# (filename, content, content type)
ImageUpload = tuple[str, bytes, str]


class ApiError(Exception):
    """Raised when the API answers with an unexpected status."""

    def __init__(self, status_code: int, detail: str) -> None:
        super().__init__(f"HTTP {status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail


async def _raise_for_error(response: httpx.Response) -> None:
    if response.is_success:
        return
    await response.aread()
    try:
        detail = response.json().get("detail", response.text)
    except ValueError:
        detail = response.text
    raise ApiError(response.status_code, str(detail))


class ChatApiClient:
    """Submits prompts, consumes stream events and sends stop requests.

    Args:
        base_url: API root. Defaults to ``API_BASE_URL`` as set when the
            client is created.
        client: Preconfigured httpx client, used as is.
        timeout: Request timeout for the default client.
    """

    def __init__(
        self,
        base_url: str | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float = 120.0,
    ) -> None:
        if base_url is None:
            base_url = os.getenv("API_BASE_URL", DEFAULT_API_BASE_URL)
        self.base_url = base_url
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def __aenter__(self) -> "ChatApiClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def submit(
        self, message: str, image: ImageUpload | None = None
    ) -> DirectResponse | StreamHandle:
        """Submit a prompt, returning either a direct answer or a stream handle."""
        response = await self._client.post(
            "/request-stream",
            data={"msg": message},
            files={"image": image} if image is not None else None,
        )
        await _raise_for_error(response)

        data = response.json()
        if "directResponse" in data:
            return DirectResponse.model_validate(data)
        return StreamHandle.model_validate(data)

    async def events(self, stream_id: str) -> AsyncIterator[StreamEvent]:
        """Yield events for a stream until its terminal event."""
        async with self._client.stream(
            "GET",
            f"/stream/{stream_id}",
            headers={"Accept": "text/event-stream"},
        ) as response:
            await _raise_for_error(response)
            async for line in response.aiter_lines():
                if not line.startswith("data: "):
                    continue
                event = StreamEvent.model_validate_json(line.removeprefix("data: "))
                yield event
                if event.is_terminal:
                    return

    async def stop(self, stream_id: str) -> bool:
        """Ask the server to stop a stream. False if it was no longer active."""
        response = await self._client.post(f"/stop/{stream_id}")
        if response.status_code == httpx.codes.NOT_FOUND:
            return False
        await _raise_for_error(response)
        return True
