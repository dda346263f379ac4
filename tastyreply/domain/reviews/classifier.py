"""Review sentiment classification and keyword extraction."""

from __future__ import annotations

import re

from tastyreply.domain.reviews.models import Sentiment

POSITIVE_WORDS = ("good", "nice", "great", "excellent", "love", "delicious", "friendly")

NEGATIVE_WORDS = ("bad", "poor", "terrible", "awful", "hate", "cold", "slow", "rude")

STOP_WORDS = frozenset(
    {
        "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for",
        "of", "with", "by", "from", "was", "were", "been", "be", "have", "has",
        "had", "do", "does", "did", "will", "would", "could", "should", "may",
        "might", "must", "can", "is", "are", "am",
    }
)

_NON_WORD = re.compile(r"[^\w\s]")


def classify_sentiment(*, rating: int, text: str | None) -> Sentiment:
    """Classify review sentiment.

    Rules:
        - rating >= 4 -> positive, rating <= 2 -> negative
        - rating == 3 -> count listed positive vs negative words appearing as
          case-insensitive substrings of the text (each word counts once);
          the larger side wins, a tie is neutral

    Examples:
        >>> classify_sentiment(rating=5, text="awful")
        <Sentiment.POSITIVE: 'positive'>
        >>> classify_sentiment(rating=3, text="Great food but slow and cold")
        <Sentiment.NEGATIVE: 'negative'>
        >>> classify_sentiment(rating=3, text="")
        <Sentiment.NEUTRAL: 'neutral'>

    """
    if rating >= 4:
        return Sentiment.POSITIVE
    if rating <= 2:
        return Sentiment.NEGATIVE

    text_lower = (text or "").lower()
    positive = sum(1 for w in POSITIVE_WORDS if w in text_lower)
    negative = sum(1 for w in NEGATIVE_WORDS if w in text_lower)

    if positive > negative:
        return Sentiment.POSITIVE
    if negative > positive:
        return Sentiment.NEGATIVE
    return Sentiment.NEUTRAL


def extract_keywords(text: str | None, limit: int = 5) -> list[str]:
    """Return up to ``limit`` most frequent content words.

    Ties in frequency keep first-occurrence order.

    Examples:
        >>> extract_keywords("The pasta was amazing and the pasta was fresh")
        ['pasta', 'amazing', 'fresh']

    """
    cleaned = _NON_WORD.sub("", (text or "").lower())
    words = [w for w in cleaned.split() if len(w) > 3 and w not in STOP_WORDS]

    counts: dict[str, int] = {}
    first_seen: dict[str, int] = {}
    for idx, word in enumerate(words):
        counts[word] = counts.get(word, 0) + 1
        first_seen.setdefault(word, idx)

    ranked = sorted(counts, key=lambda w: (-counts[w], first_seen[w]))
    return ranked[:limit]


__all__ = [
    "POSITIVE_WORDS",
    "NEGATIVE_WORDS",
    "STOP_WORDS",
    "classify_sentiment",
    "extract_keywords",
]
