"""Integration tests for components working together as a system.

Coverage:
    - API endpoints with real HTTP requests over ASGITransport
    - Image uploads from submission to removal
    - The UI's ChatApiClient against the real app
    - Live Gemini streaming (when GEMINI_API_KEY is configured)

Generation is scripted unless a test is marked ``requires_api_key``.
"""
