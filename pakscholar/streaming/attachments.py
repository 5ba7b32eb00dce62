"""Reading and releasing transient upload files owned by a session."""

import asyncio
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


async def read_attachment(path: Path) -> bytes:
    """Read an attachment without blocking the event loop."""
    return await asyncio.to_thread(path.read_bytes)


def remove_attachment(path: Path | None, stream_id: str = "N/A") -> None:
    """Delete a transient upload. Missing files are logged, not raised."""
    if path is None:
        return
    try:
        path.unlink()
        logger.info(f"[{stream_id}] Deleted temp file: {path}")
    except FileNotFoundError:
        logger.warning(f"[{stream_id}] Temp file already gone: {path}")
    except OSError as e:
        logger.error(f"[{stream_id}] Error deleting temp file {path}: {e}")
