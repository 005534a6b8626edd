"""Match an incoming chat message to one of the actor's existing problems."""

from collections.abc import Iterable

from synapse.config import settings
from synapse.models.problem import Problem
from synapse.services.similarity import similarity


def problem_text(problem: Problem) -> str:
    return f"{problem.title} {problem.description or ''}"


def shared_words(message: str, text: str, min_length: int) -> list[str]:
    """Message tokens longer than ``min_length`` that also appear in ``text``.

    Tokens are lowercased and split on whitespace. A word repeated in the
    message counts once per occurrence.
    """
    text_words = set(text.lower().split())
    return [w for w in message.lower().split() if len(w) > min_length and w in text_words]


def match_problem(
    message: str,
    candidates: Iterable[Problem],
    strategy: str | None = None,
    min_shared_words: int | None = None,
    min_word_length: int | None = None,
    similarity_threshold: float | None = None,
) -> Problem | None:
    """Return the first candidate related to ``message``, or None.

    Candidates are scanned in the order given and the scan stops at the first
    hit; there is no best-of-N ranking.

    Strategies:
        overlap:    at least ``min_shared_words`` message words longer than
                    ``min_word_length`` characters also found in the
                    candidate, repeats counted (default).
        similarity: ``similarity(message, title + description)`` reaches
                    ``similarity_threshold``.
    """
    strategy = strategy or settings.autolink_match_strategy
    if min_shared_words is None:
        min_shared_words = settings.autolink_min_shared_words
    if min_word_length is None:
        min_word_length = settings.autolink_min_word_length
    if similarity_threshold is None:
        similarity_threshold = settings.autolink_similarity_threshold

    for problem in candidates:
        text = problem_text(problem)
        if strategy == "similarity":
            if similarity(message, text) >= similarity_threshold:
                return problem
        elif len(shared_words(message, text, min_word_length)) >= min_shared_words:
            return problem
    return None
