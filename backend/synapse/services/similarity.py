"""Keyword-overlap similarity between short texts (problem titles, messages).

Score rules, in order:
  - identical after lowercasing/trimming → 1.0
  - one is a substring of the other     → 0.8 (the empty string included)
  - otherwise Jaccard over content words (stop words and words of ≤ 2 chars
    removed), plus a 0.2 bonus when two distinct words share a stem,
    clamped to 1.0
"""

STOP_WORDS = frozenset({
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of",
    "with", "by", "is", "are", "was", "were", "be", "been", "have", "has", "had",
    "do", "does", "did", "will", "would", "could", "should", "may", "might",
    "can", "must",
})

SUBSTRING_SCORE = 0.8
STEM_BONUS = 0.2
MIN_TOKEN_LENGTH = 3


def content_words(text: str) -> set[str]:
    """Lowercase, split on whitespace and drop stop words / short tokens."""
    return {
        word
        for word in text.lower().split()
        if word not in STOP_WORDS and len(word) >= MIN_TOKEN_LENGTH
    }


def share_stem(a: str, b: str) -> bool:
    """Crude stem test: prefix relation, or an -ing / -s pair."""
    if a.startswith(b) or b.startswith(a):
        return True
    return (a.endswith("ing") and b.endswith("s")) or (a.endswith("s") and b.endswith("ing"))


def similarity(a: str, b: str) -> float:
    """Return a relatedness score in [0.0, 1.0]. Symmetric in its arguments."""
    s1 = a.lower().strip()
    s2 = b.lower().strip()

    if s1 == s2:
        return 1.0
    if s1 in s2 or s2 in s1:
        return SUBSTRING_SCORE

    words1 = content_words(s1)
    words2 = content_words(s2)
    if not words1 or not words2:
        return 0.0

    jaccard = len(words1 & words2) / len(words1 | words2)

    bonus = 0.0
    if any(w1 != w2 and share_stem(w1, w2) for w1 in words1 for w2 in words2):
        bonus = STEM_BONUS

    return min(1.0, jaccard + bonus)
