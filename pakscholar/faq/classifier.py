"""Keyword-based classification of user prompts.

Exact FAQ matches get a canned answer, prompts mentioning a scholarship
keyword go to the model, and everything else is redirected back on topic.
"""

from dataclasses import dataclass

FAQS: dict[str, str] = {
    "what scholarships are available?": (
        "I can help with scholarships for Pakistani students! Some options include "
        "Chevening (UK), DAAD (Germany), Fulbright (USA), Erasmus Mundus (Europe), and "
        "Australia Awards (Australia). Ask about a specific scholarship or country!"
    ),
    "hello": (
        "Hello! I'm PakScholarship Assist, here to help Pakistani students find Master's "
        "scholarships abroad. Ask me about scholarships like Chevening or DAAD!"
    ),
    "hi": (
        "Hi there! I can help with Master's scholarships for Pakistani students studying "
        "abroad. What would you like to know?"
    ),
    "thanks": "You're welcome! Let me know if you have more questions about scholarships.",
    "thank you": "You're welcome! Feel free to ask more about scholarships for studying abroad.",
    "help": (
        "I can provide information about Master's scholarships abroad for Pakistani "
        "students. Ask me about eligibility, application processes, deadlines, or specific "
        "countries like the UK, USA, Germany, etc."
    ),
    "what can you do?": (
        "I'm PakScholarship Assist, specializing in Master's scholarships for Pakistani "
        "students aiming to study overseas. I can help with eligibility, funding, deadlines, "
        "and more. Ask about scholarships like Chevening, DAAD, or Fulbright!"
    ),
    "how to apply for a scholarship?": (
        "The application process depends on the scholarship. For example, Chevening "
        "requires an online application, essays, and references, while DAAD often needs "
        "a research proposal. Which scholarship are you interested in?"
    ),
    "what is the deadline for chevening?": (
        "The deadline for the Chevening Scholarship is usually in November each year. "
        "Check their official website for exact dates: https://www.chevening.org."
    ),
    "what scholarships are available in germany?": (
        "For Pakistani students, the DAAD Scholarship is a great option in Germany. It "
        "offers a monthly stipend, travel allowance, and insurance. Deadlines vary by "
        "program, so check https://www.daad.de for details."
    ),
}

SCHOLARSHIP_KEYWORDS = (
    "scholarship", "master", "abroad", "funding", "study", "pakistani",
    "chevening", "daad", "fulbright", "erasmus", "australia awards",
    "uk", "usa", "germany", "europe", "australia", "japan", "korea", "malaysia",
)

REDIRECT_MESSAGE = (
    "I'm PakScholarship Assist, here to help with Master's scholarships abroad for "
    "Pakistani students! Please ask about scholarships, like Chevening, DAAD, or Fulbright."
)


@dataclass(frozen=True)
class DirectAnswer:
    answer: str


@dataclass(frozen=True)
class Relevant:
    pass


@dataclass(frozen=True)
class Redirect:
    message: str = REDIRECT_MESSAGE


Classification = DirectAnswer | Relevant | Redirect


def is_scholarship_query(text: str) -> bool:
    """Return True if the text mentions any scholarship keyword."""
    lowered = text.lower()
    return any(keyword in lowered for keyword in SCHOLARSHIP_KEYWORDS)


def classify(text: str) -> Classification:
    """Decide whether a prompt is answered directly, streamed, or redirected."""
    answer = FAQS.get(text.strip().lower())
    if answer is not None:
        return DirectAnswer(answer)
    if is_scholarship_query(text):
        return Relevant()
    return Redirect()
