"""Gemini generation source with streaming and safety filtering.

Core module for the chatbot's connection to the hosted model.

Architecture Decisions:

1. **Stateless calls** - The model receives the full conversation on every
   request. History is owned by the process-wide ConversationHistory, so the
   client here keeps no session state of its own.

2. **Singleton Pattern** - The google-genai client holds an HTTP connection
   pool. The singleton ensures one client is shared by all sessions.

3. **Unit-level safety** - Each streamed chunk is checked for blocked safety
   ratings, a policy finish reason (SAFETY, PROHIBITED_CONTENT, BLOCKLIST,
   SPII), or a prompt block reason, and reported as a blocked unit so the
   relay can end the turn with an error event.

4. **Error wrapping** - SDK errors are logged with details and re-raised as
   UpstreamError carrying a message safe to show to the user.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import aclosing

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from pakscholar.agent.config import AgentConfig, get_agent_config
from pakscholar.agent.prompts import PERSONA_INSTRUCTION
from pakscholar.agent.source import GeneratedUnit
from pakscholar.streaming.errors import UpstreamError
from pakscholar.streaming.history import Turn

logger = logging.getLogger(__name__)

SAFETY_CATEGORIES = (
    types.HarmCategory.HARM_CATEGORY_HARASSMENT,
    types.HarmCategory.HARM_CATEGORY_HATE_SPEECH,
    types.HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT,
    types.HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT,
)

# Finish reasons meaning the model stopped on a content policy.
SAFETY_FINISH_REASONS = frozenset(
    {
        types.FinishReason.SAFETY,
        types.FinishReason.PROHIBITED_CONTENT,
        types.FinishReason.BLOCKLIST,
        types.FinishReason.SPII,
    }
)


def to_content(turn: Turn) -> types.Content:
    """Convert a conversation turn to the SDK's content type."""
    parts: list[types.Part] = []
    for part in turn.parts:
        if part.data is not None:
            parts.append(
                types.Part.from_bytes(data=part.data, mime_type=part.mime_type or "image/jpeg")
            )
        elif part.text is not None:
            parts.append(types.Part.from_text(text=part.text))
    return types.Content(role=turn.role.value, parts=parts)


def to_unit(chunk: types.GenerateContentResponse) -> GeneratedUnit:
    """Extract text and safety state from one streamed response chunk."""
    feedback = chunk.prompt_feedback
    if feedback is not None and feedback.block_reason:
        return GeneratedUnit(blocked=True)

    if chunk.candidates:
        candidate = chunk.candidates[0]
        if candidate.finish_reason in SAFETY_FINISH_REASONS:
            return GeneratedUnit(blocked=True)
        if any(rating.blocked for rating in candidate.safety_ratings or []):
            return GeneratedUnit(blocked=True)

    return GeneratedUnit(text=chunk.text)


class GeminiChatAgent:
    """Streams Gemini responses for a conversation.

    Wraps google-genai with:
    - Persona system instruction and sampling limits from AgentConfig
    - Uniform safety thresholds across harm categories
    - Per-chunk safety detection
    - Centralized error handling
    """

    def __init__(self, config: AgentConfig | None = None) -> None:
        """Initialize the agent.

        Args:
            config: Optional agent configuration.
                    Loads from environment if not provided.
        """
        self._config = config or get_agent_config()
        self._client = genai.Client(api_key=self._config.api_key)
        self._generation_config = self._create_generation_config()

    def _create_generation_config(self) -> types.GenerateContentConfig:
        threshold = types.HarmBlockThreshold(self._config.safety_threshold)
        return types.GenerateContentConfig(
            system_instruction=PERSONA_INSTRUCTION,
            temperature=self._config.temperature,
            max_output_tokens=self._config.max_tokens,
            safety_settings=[
                types.SafetySetting(category=category, threshold=threshold)
                for category in SAFETY_CATEGORIES
            ],
        )

    async def stream(self, contents: list[Turn]) -> AsyncGenerator[GeneratedUnit]:
        """Stream response units for a conversation.

        Args:
            contents: History turns followed by the current user turn.

        Yields:
            Units in the order the model produced them.

        Raises:
            UpstreamError: If the model request fails.
        """
        try:
            response_stream = await self._client.aio.models.generate_content_stream(
                model=self._config.model_name,
                contents=[to_content(turn) for turn in contents],
                config=self._generation_config,
            )
            async with aclosing(response_stream) as chunks:
                async for chunk in chunks:
                    yield to_unit(chunk)
        except genai_errors.APIError as e:
            logger.error(f"Gemini request failed ({e.code}): {e.message}")
            raise UpstreamError("The model service failed to generate a response.") from e


# Module-level singleton instance
_chat_agent: GeminiChatAgent | None = None


def get_chat_agent() -> GeminiChatAgent:
    """Get or create the global chat agent.

    Returns:
        The GeminiChatAgent instance.
    """
    global _chat_agent
    if _chat_agent is None:
        _chat_agent = GeminiChatAgent()
    return _chat_agent

