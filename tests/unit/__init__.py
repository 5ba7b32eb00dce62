"""Unit tests for individual components in isolation.

Coverage:
    - streaming/: Session registry, stream relay, conversation history
    - faq/: Prompt classification
    - agent/: Agent configuration and Gemini response conversion

Uses scripted generation sources instead of the model. Leverages
pytest-check for multiple assertions per test.
"""
