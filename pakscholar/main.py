"""Command-line entry point for PakScholar Assist.

Two run modes, selected with ``RUN_MODE``:

- ``integrated`` (default): the chat page is mounted onto the FastAPI app
  and both are served by one uvicorn process.
- ``separate``: the API and the NiceGUI page run as two processes; the page
  reaches the API through ``API_BASE_URL``.

Settings are read from the environment after ``.env`` is loaded.
"""

import logging
import os
import subprocess
import sys
import time

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

UI_PORT = 8080


def configure_logging() -> None:
    """Send log records for every module to stdout."""
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def check_model_config() -> bool:
    """Validate Gemini settings up front so a missing key is reported at startup."""
    from pydantic import ValidationError

    from pakscholar.agent import get_agent_config

    try:
        config = get_agent_config()
    except ValidationError as e:
        logger.error(f"Invalid model configuration: {e.errors()[0]['msg']}")
        return False
    logger.info(f"Using model {config.model_name} (safety: {config.safety_threshold})")
    return True


def run_integrated(host: str, port: int) -> None:
    """Serve the API and the chat page from a single process."""
    import uvicorn
    from nicegui import ui

    # The page calls the API it is mounted on unless told otherwise.
    os.environ.setdefault("API_BASE_URL", f"http://localhost:{port}")

    from pakscholar.api.app import create_app
    from pakscholar.ui.chat_page import chat_page  # noqa: F401 - Registers the page

    app = create_app()
    ui.run_with(
        app,
        title="PakScholarship Assist",
        favicon="🎓",
        storage_secret=os.getenv("NICEGUI_STORAGE_SECRET", "pakscholar-secret"),
    )

    logger.info(f"Chat UI on http://{host}:{port}/ (API docs at /docs)")
    uvicorn.run(app, host=host, port=port, log_level=os.getenv("LOG_LEVEL", "info").lower())


def run_separate(host: str, port: int) -> None:
    """Run the API and the chat page as child processes until either exits."""
    env = {**os.environ, "API_BASE_URL": f"http://localhost:{port}"}
    commands = {
        "api": [
            sys.executable, "-m", "uvicorn", "pakscholar.api.app:app",
            "--host", host, "--port", str(port),
        ],
        "ui": [sys.executable, "-c", "from pakscholar.ui.chat_page import main; main()"],
    }
    procs = {name: subprocess.Popen(cmd, env=env) for name, cmd in commands.items()}
    logger.info(f"API on http://{host}:{port}, chat UI on http://localhost:{UI_PORT}")

    try:
        while all(proc.poll() is None for proc in procs.values()):
            time.sleep(1)
        exited = [name for name, proc in procs.items() if proc.returncode is not None]
        logger.warning(f"Process exited: {', '.join(exited)}. Stopping the rest.")
    except KeyboardInterrupt:
        logger.info("Shutting down...")
    finally:
        for proc in procs.values():
            proc.terminate()
        for proc in procs.values():
            proc.wait()


def main() -> None:
    """Application entry point."""
    configure_logging()
    if not check_model_config():
        sys.exit(1)

    mode = os.getenv("RUN_MODE", "integrated").lower()
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))
    logger.info(f"Starting PakScholar Assist in {mode} mode")

    if mode == "separate":
        run_separate(host, port)
    else:
        run_integrated(host, port)


if __name__ == "__main__":
    main()
