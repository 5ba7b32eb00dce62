"""Agent configuration with environment variable loading.

Pydantic-based configuration for the Gemini generation source.
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

# Load environment variables from .env file
load_dotenv()

SAFETY_THRESHOLDS = (
    "BLOCK_LOW_AND_ABOVE",
    "BLOCK_MEDIUM_AND_ABOVE",
    "BLOCK_ONLY_HIGH",
    "BLOCK_NONE",
)


class AgentConfig(BaseModel):
    """Configuration for the Gemini model behind the chat stream.

    Attributes:
        api_key: API key for model access.
        model_name: Model identifier to use.
        temperature: Sampling temperature (0.0 = deterministic, 2.0 = creative).
        max_tokens: Maximum tokens in generated response.
        safety_threshold: Block threshold applied to every harm category.
    """

    api_key: str = Field(
        default_factory=lambda: os.getenv("GEMINI_API_KEY", os.getenv("GOOGLE_API_KEY", "")),
        description="API key for Gemini",
    )
    model_name: str = Field(
        default_factory=lambda: os.getenv("GEMINI_MODEL", "gemini-2.0-flash"),
        description="Model to use",
    )
    temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        description="Sampling temperature for response generation",
    )
    max_tokens: int = Field(
        default=1024,
        ge=1,
        le=8192,
        description="Maximum tokens in generated response",
    )
    safety_threshold: str = Field(
        default_factory=lambda: os.getenv("GEMINI_SAFETY_THRESHOLD", "BLOCK_MEDIUM_AND_ABOVE"),
        description="Harm block threshold for all safety categories",
    )

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, v: str) -> str:
        """Validate that API key is provided and non-empty."""
        if not v or not v.strip():
            raise ValueError("API key required. Set GEMINI_API_KEY in .env")
        return v.strip()

    @field_validator("safety_threshold")
    @classmethod
    def validate_safety_threshold(cls, v: str) -> str:
        threshold = v.strip().upper()
        if threshold not in SAFETY_THRESHOLDS:
            raise ValueError(f"safety_threshold must be one of {', '.join(SAFETY_THRESHOLDS)}")
        return threshold


def get_agent_config() -> AgentConfig:
    """Create agent configuration from environment.

    Returns:
        Configured AgentConfig instance.

    Raises:
        ValueError: If no API key is set.
    """
    return AgentConfig()
