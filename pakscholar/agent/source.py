"""Interface between the stream relay and a text-generation backend."""

from collections.abc import AsyncGenerator
from typing import TYPE_CHECKING, Protocol

from pydantic import BaseModel

if TYPE_CHECKING:
    from pakscholar.streaming.history import Turn


class GeneratedUnit(BaseModel):
    """One increment produced by the model.

    Attributes:
        text: Text of this increment, if any.
        blocked: Whether the model's safety filter rejected this increment.
    """

    text: str | None = None
    blocked: bool = False


class GenerationSource(Protocol):
    """Produces a lazy, finite stream of units for an ordered conversation."""

    def stream(self, contents: "list[Turn]") -> AsyncGenerator[GeneratedUnit]: ...
