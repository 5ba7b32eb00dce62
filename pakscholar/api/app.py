"""FastAPI application factory and configuration.

Main application entry point with lifespan management, middleware,
and router registration. The session registry, conversation history and
stream relay are created here and shared through ``app.state``.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from pakscholar.agent import GenerationSource
from pakscholar.api.chat import router as chat_router
from pakscholar.streaming import (
    ConversationHistory,
    SessionRegistry,
    StreamRelay,
    StreamSettings,
    get_stream_settings,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage application startup and shutdown lifecycle.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control to the application while it runs.
    """
    settings: StreamSettings = app.state.settings
    settings.upload_dir.mkdir(parents=True, exist_ok=True)
    logger.info(f"Starting PakScholar Assist API (uploads in {settings.upload_dir})")
    yield
    logger.info(f"Shutting down PakScholar Assist API ({len(app.state.registry)} open sessions)")


async def unhandled_exception_handler(request: Request, exc: Exception) -> PlainTextResponse:
    """Log unexpected faults and hide internals from the client."""
    logger.error(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
    return PlainTextResponse(
        "Something broke on the server!",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def create_app(
    source: GenerationSource | None = None,
    settings: StreamSettings | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        source: Generation source for the relay. The Gemini agent is created
                lazily on the first stream when omitted.
        settings: Stream settings. Loads from environment if not provided.

    Returns:
        Configured FastAPI application instance.
    """
    settings = settings or get_stream_settings()

    application = FastAPI(
        title="PakScholar Assist API",
        description=(
            "Scholarship assistant for Pakistani students seeking Master's degrees "
            "abroad. Answers common questions directly and streams Gemini responses "
            "over Server-Sent Events with stop support."
        ),
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    registry = SessionRegistry(pending_timeout=settings.pending_timeout)
    history = ConversationHistory(max_turns=settings.max_history_turns)
    application.state.settings = settings
    application.state.registry = registry
    application.state.history = history
    application.state.relay = (
        StreamRelay(registry, history, source) if source is not None else None
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["*"],
    )
    application.add_exception_handler(Exception, unhandled_exception_handler)

    application.include_router(chat_router)

    @application.get("/health")
    async def health_check() -> dict[str, str]:
        """Check service health status."""
        return {"status": "healthy", "service": "pakscholar-assist"}

    return application


app = create_app()
