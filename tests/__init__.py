"""Test package for PakScholar Assist.

Provides test coverage for all components with unit tests for isolated
logic and integration tests for HTTP workflows.

Structure:
    - unit/: Registry, relay, history, FAQ filter and agent tests
    - integration/: End-to-end submission, streaming and upload flows
    - fakes.py: Scripted generation sources replacing Gemini

Leverages pytest with pytest-asyncio and pytest-check for soft assertions.
"""
