"""FastAPI endpoints for the scholarship assistant.

HTTP and streaming routes with async request handling.
Supports Server-Sent Events for real-time chat streaming.

Endpoints:
    - GET /health: Service health status
    - POST /request-stream: Submit a prompt (text and optional image)
    - GET /stream/{stream_id}: Server-Sent Events for a submitted prompt
    - POST /stop/{stream_id}: Stop an active stream
"""

from pakscholar.api.app import create_app

__all__ = ["create_app"]
