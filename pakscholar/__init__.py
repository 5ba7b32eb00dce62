"""PakScholar Assist - scholarship chatbot with streaming Gemini responses.

Combines FastAPI for Server-Sent Events, google-genai for generation,
NiceGUI for the chat page, and Pydantic for data validation.

Components:
    - api: HTTP endpoints, uploads and the SSE stream
    - streaming: session registry, stream relay and conversation history
    - agent: Gemini generation source and its configuration
    - faq: canned answers and topic filtering
    - ui: web interface for chat interactions
    - models: request/response and event schemas
"""

__version__ = "0.1.0"
