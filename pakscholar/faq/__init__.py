"""FAQ answers and topic filtering applied before a prompt reaches the model."""

from pakscholar.faq.classifier import (
    REDIRECT_MESSAGE,
    DirectAnswer,
    Redirect,
    Relevant,
    classify,
    is_scholarship_query,
)

__all__ = [
    "REDIRECT_MESSAGE",
    "DirectAnswer",
    "Redirect",
    "Relevant",
    "classify",
    "is_scholarship_query",
]
