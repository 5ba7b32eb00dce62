"""NiceGUI chat interface with SSE streaming and stop support."""

from datetime import datetime
from enum import Enum

import httpx
from nicegui import events, ui

from pakscholar.models.schemas import DirectResponse, EventType
from pakscholar.streaming.config import MAX_UPLOAD_SIZE
from pakscholar.ui.client import ApiError, ChatApiClient, ImageUpload

GREETING = (
    "Hello! I am PakScholarship Assist. Ask me about Master's scholarships "
    "abroad for Pakistani students."
)

CUSTOM_CSS = """
<link href="https://fonts.googleapis.com/css2?family=Inter:wght@400;500;600&display=swap"
      rel="stylesheet">
<style>
    * { font-family: 'Inter', sans-serif; }
    body { background: #f5f5f5; min-height: 100vh; }

    .app-container {
        background: white;
        border-radius: 12px;
        box-shadow: 0 2px 8px rgba(0, 0, 0, 0.1);
        overflow: hidden;
    }
    .header { background: linear-gradient(135deg, #047857 0%, #065f46 100%); }

    .message-user {
        background: #047857;
        color: white;
        border-radius: 18px 18px 4px 18px;
    }
    .message-model {
        background: #f3f4f6;
        color: #1f2937;
        border-radius: 18px 18px 18px 4px;
    }
    .message-error { border: 1px solid #dc2626; }
    .message-info { font-style: italic; color: #6b7280; }
</style>
"""


class UiState(str, Enum):
    """State of the chat page, driving controls and the status line."""

    IDLE = "idle"
    REQUESTING = "requesting"
    STREAMING = "streaming"
    STOPPED = "stopped"
    ERROR = "error"

    @property
    def label(self) -> str:
        return STATUS_LABELS[self]

    @property
    def accepts_input(self) -> bool:
        return self in (UiState.IDLE, UiState.STOPPED, UiState.ERROR)


STATUS_LABELS = {
    UiState.IDLE: "Ready",
    UiState.REQUESTING: "Sending request...",
    UiState.STREAMING: "Assistant is responding...",
    UiState.STOPPED: "Generation stopped",
    UiState.ERROR: "Error occurred",
}


class ChatSession:
    """Manages chat state for one browser tab."""

    def __init__(self) -> None:
        self.messages: list[dict] = []
        self.state = UiState.IDLE
        self.stream_id: str | None = None
        self.pending_image: ImageUpload | None = None

    def add_message(self, role: str, content: str, kind: str = "normal") -> dict:
        message = {
            "role": role,
            "content": content,
            "kind": kind,
            "time": datetime.now().strftime("%I:%M %p"),
        }
        self.messages.append(message)
        return message


@ui.page("/")
def chat_page() -> None:
    """Main chat page."""
    ui.add_head_html(CUSTOM_CSS)
    session = ChatSession()
    session.add_message("model", GREETING)

    messages_container: ui.column
    status_label: ui.label
    input_field: ui.textarea
    send_btn: ui.button
    stop_btn: ui.button
    upload: ui.upload

    def set_state(state: UiState) -> None:
        session.state = state
        busy = not state.accepts_input
        status_label.set_text(state.label)
        input_field.set_enabled(not busy)
        upload.set_enabled(not busy)
        send_btn.set_visibility(state is not UiState.STREAMING)
        send_btn.set_enabled(not busy)
        stop_btn.set_visibility(state is UiState.STREAMING)

    def render_message(msg: dict) -> ui.markdown:
        is_user = msg["role"] == "user"
        align = "justify-end" if is_user else "justify-start"
        bubble = "message-user" if is_user else "message-model"
        if msg["kind"] != "normal":
            bubble += f" message-{msg['kind']}"

        with ui.row().classes(f"w-full {align} gap-3 items-end"):
            with ui.column().classes("max-w-[75%] gap-1"):
                with ui.element("div").classes(f"px-4 py-3 {bubble}"):
                    body = ui.markdown(msg["content"]).classes("text-sm leading-relaxed")
                ui.label(msg["time"]).classes(
                    f"text-[10px] text-gray-400 {'self-end' if is_user else 'self-start'}"
                )
        return body

    def append_message(role: str, content: str, kind: str = "normal") -> ui.markdown:
        msg = session.add_message(role, content, kind)
        with messages_container:
            return render_message(msg)

    async def handle_upload(e: events.UploadEventArguments) -> None:
        if not (e.file.content_type or "").startswith("image/"):
            append_message("model", "Please select an image file (JPEG, PNG, GIF, WEBP).", "error")
            upload.reset()
            return
        session.pending_image = (e.file.name, await e.file.read(), e.file.content_type)
        append_message("user", f"Ready to send: {e.file.name}", "info")
        upload.reset()

    async def run_stream(
        api: ChatApiClient, stream_id: str, message: dict, body: ui.markdown
    ) -> None:
        async for event in api.events(stream_id):
            if event.type is EventType.CHUNK:
                message["content"] += event.content or ""
                body.set_content(message["content"])
            elif event.type is EventType.DONE:
                set_state(UiState.IDLE)
            elif event.type is EventType.INFO:
                message["content"] += f"\n\n*[Info: {event.content}]*"
                body.set_content(message["content"])
                set_state(UiState.STOPPED)
            elif event.type is EventType.ERROR:
                message["content"] += f"\n\n**[Error: {event.content}]**"
                body.set_content(message["content"])
                set_state(UiState.ERROR)

    async def send_message() -> None:
        text = input_field.value.strip()
        if not session.state.accepts_input or (not text and session.pending_image is None):
            return

        image = session.pending_image
        session.pending_image = None
        input_field.value = ""
        append_message("user", text or f"Sent File: {image[0] if image else 'Unknown'}")
        set_state(UiState.REQUESTING)

        message = session.add_message("model", "")
        with messages_container:
            body = render_message(message)

        try:
            async with ChatApiClient() as api:
                result = await api.submit(text, image)
                if isinstance(result, DirectResponse):
                    message["content"] = result.direct_response
                    body.set_content(message["content"])
                    set_state(UiState.IDLE)
                    return

                session.stream_id = result.stream_id
                set_state(UiState.STREAMING)
                await run_stream(api, result.stream_id, message, body)
                if session.state is UiState.STREAMING:
                    # Channel closed without a terminal event.
                    set_state(UiState.ERROR)
        except (ApiError, httpx.HTTPError) as e:
            message["content"] = f"[Error: {e}]"
            body.set_content(message["content"])
            set_state(UiState.ERROR)
            ui.notify(str(e), type="negative")
        finally:
            session.stream_id = None

    async def stop_streaming() -> None:
        stream_id = session.stream_id
        if stream_id is None:
            return
        stop_btn.disable()
        try:
            async with ChatApiClient() as api:
                stopped = await api.stop(stream_id)
            if not stopped:
                ui.notify("Stream already finished", type="info")
        except (ApiError, httpx.HTTPError) as e:
            ui.notify(f"Error stopping stream: {e}", type="negative")
        finally:
            stop_btn.enable()

    def new_chat() -> None:
        session.messages.clear()
        messages_container.clear()
        append_message("model", GREETING)

    # === UI Layout ===
    with (
        ui.element("div").classes("w-full min-h-screen p-4 md:p-8"),
        ui.column().classes("w-full max-w-3xl mx-auto app-container").style(
            "height: calc(100vh - 4rem)"
        ),
    ):
        # Header
        with ui.row().classes("w-full header px-5 py-4 items-center justify-between"):
            with ui.row().classes("items-center gap-3"):
                ui.icon("school").classes("text-white text-3xl")
                ui.label("PakScholarship Assist").classes("text-lg font-semibold text-white")
            with ui.row().classes("items-center gap-3"):
                status_label = ui.label(UiState.IDLE.label).classes("text-xs text-white/80")
                ui.button(icon="add", on_click=new_chat).props("flat round color=white")

        # Messages
        with (
            ui.scroll_area().classes("flex-grow w-full bg-gray-50"),
            ui.column().classes("w-full p-5"),
        ):
            messages_container = ui.column().classes("w-full gap-4")
            with messages_container:
                for msg in session.messages:
                    render_message(msg)

        # Input
        with ui.row().classes("w-full p-4 gap-3 items-end bg-white border-t"):
            upload = (
                ui.upload(on_upload=handle_upload, auto_upload=True, max_file_size=MAX_UPLOAD_SIZE)
                .props("accept=image/* flat dense hide-upload-btn")
                .classes("w-40")
            )
            input_field = (
                ui.textarea(placeholder="Ask about scholarships...")
                .props("autogrow borderless dense rows=1")
                .classes("flex-grow")
                .on("keydown.enter.prevent", send_message)
            )
            send_btn = ui.button(icon="send", on_click=send_message).props("round unelevated")
            stop_btn = ui.button(icon="stop", on_click=stop_streaming).props(
                "round unelevated color=negative"
            )

    set_state(UiState.IDLE)


def main() -> None:
    ui.run(title="PakScholarship Assist", port=8080, reload=False)


if __name__ == "__main__":
    main()
