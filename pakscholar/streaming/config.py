"""Streaming session settings with environment variable loading."""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()

MAX_UPLOAD_SIZE = 10 * 1024 * 1024  # 10MB


class StreamSettings(BaseModel):
    """Configuration for the session registry, relay and upload storage.

    Attributes:
        upload_dir: Directory holding transient image uploads.
        max_history_turns: Number of user/model exchanges kept in history.
        pending_timeout: Seconds a submitted session may wait for its stream.
        max_upload_bytes: Largest accepted attachment.
    """

    upload_dir: Path = Field(
        default_factory=lambda: Path(os.getenv("UPLOAD_DIR", "uploads")),
        description="Directory for transient uploads",
    )
    max_history_turns: int = Field(
        default_factory=lambda: int(os.getenv("MAX_HISTORY_TURNS", "5")),
        ge=0,
        description="User/model exchanges kept in conversation history",
    )
    pending_timeout: float = Field(
        default_factory=lambda: float(os.getenv("STREAM_TIMEOUT", "60")),
        gt=0,
        description="Seconds before an unconnected session is discarded",
    )
    max_upload_bytes: int = Field(default=MAX_UPLOAD_SIZE, ge=1)


def get_stream_settings() -> StreamSettings:
    """Create stream settings from environment."""
    return StreamSettings()
