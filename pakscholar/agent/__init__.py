"""Model access for the scholarship assistant.

Handles streaming generation against Google Gemini.

Responsibilities:
    - Generation source interface consumed by the stream relay
    - Gemini client configuration, persona and safety thresholds
    - Per-chunk safety detection and SDK error wrapping

Maintains clean separation from the HTTP layer and the session lifecycle.
"""

from pakscholar.agent.chat_agent import GeminiChatAgent, get_chat_agent
from pakscholar.agent.config import AgentConfig, get_agent_config
from pakscholar.agent.source import GeneratedUnit, GenerationSource

__all__ = [
    "AgentConfig",
    "GeminiChatAgent",
    "GeneratedUnit",
    "GenerationSource",
    "get_agent_config",
    "get_chat_agent",
]
