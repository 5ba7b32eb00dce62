"""NiceGUI interface - thin visualization layer for chat interactions.

Responsibilities:
    - Chat message display with live streaming and a stop control
    - Image attachment for multimodal prompts
    - Explicit UI state (idle, requesting, streaming, stopped, error)

Contains minimal business logic. Delegates all operations to the API
through ChatApiClient.
"""
