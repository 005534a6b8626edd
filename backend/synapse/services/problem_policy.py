"""Decide whether an unlinked chat message should spawn a new problem."""

from synapse.config import settings

PROBLEM_KEYWORDS = (
    "problem", "issue", "bug", "error", "fix", "solve", "help", "trouble",
    "difficulty", "challenge", "question", "how ", "why", "what ",
    "broken", "not working", "failed", "stuck", "confused", "need help",
    "chat", "discuss", "talk", "conversation", "ask", "tell", "explain",
)

LONG_MESSAGE_LENGTH = 20
TITLE_MAX_WORDS = 6
TITLE_MIN_WORD_LENGTH = 3  # words must be strictly longer
TITLE_FALLBACK_LENGTH = 80
ELLIPSIS = "..."


def creation_signals(message: str, is_first_message: bool) -> list[str]:
    """Return the names of the signals that fire for ``message``."""
    lowered = message.lower()
    signals = []
    if any(keyword in lowered for keyword in PROBLEM_KEYWORDS):
        signals.append("keyword")
    if len(message) > LONG_MESSAGE_LENGTH:
        signals.append("long_message")
    if "?" in message:
        signals.append("question_mark")
    if is_first_message:
        signals.append("first_message")
    return signals


def should_create_problem(
    message: str,
    is_first_message: bool,
    min_signals: int | None = None,
) -> bool:
    """True when at least ``min_signals`` signals fire.

    ``min_signals=0`` creates a problem for every unmatched message.
    """
    if min_signals is None:
        min_signals = settings.problem_creation_min_signals
    return len(creation_signals(message, is_first_message)) >= min_signals


def synthesize_title(message: str) -> str:
    """Build a problem title from the first significant words of ``message``."""
    words = [w for w in message.split() if len(w) > TITLE_MIN_WORD_LENGTH]
    if words:
        title = " ".join(words[:TITLE_MAX_WORDS])
        if len(words) > TITLE_MAX_WORDS:
            title += ELLIPSIS
        return title

    if len(message) > TITLE_FALLBACK_LENGTH:
        return message[:TITLE_FALLBACK_LENGTH] + ELLIPSIS
    return message
