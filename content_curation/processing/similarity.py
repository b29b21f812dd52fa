"""
Bounded similarity scores between texts and between URLs.

Text similarity blends two signals computed on normalized text:
1. Word-level Jaccard similarity (words longer than two characters)
2. Character-level similarity derived from the Levenshtein edit distance

URL similarity compares paths when two URLs share a host and heavily
discounts matches across hosts.
"""

from dataclasses import dataclass
from urllib.parse import urlparse

from rapidfuzz.distance import Levenshtein

from ..utils import normalize_url
from .text_utils import extract_words, normalize_for_comparison

WORD_WEIGHT = 0.7
CHARACTER_WEIGHT = 0.3
CROSS_DOMAIN_DISCOUNT = 0.3


@dataclass(frozen=True)
class PreparedText:
    """Text with its normalized form and word set computed once."""
    raw: str
    normalized: str
    words: frozenset[str]

    @classmethod
    def of(cls, text: str | None) -> "PreparedText":
        text = text or ""
        normalized = normalize_for_comparison(text)
        return cls(raw=text, normalized=normalized, words=extract_words(normalized))


@dataclass(frozen=True)
class PreparedUrl:
    """URL with its normalized form, host and path pre-parsed."""
    normalized: str
    text: PreparedText
    host: str | None
    path: PreparedText

    @classmethod
    def of(cls, url: str | None) -> "PreparedUrl":
        normalized = normalize_url(url or "")
        host = None
        path = ""
        try:
            parsed = urlparse(normalized)
            if parsed.scheme and parsed.netloc:
                host = parsed.hostname or ""
                path = parsed.path or "/"
                if parsed.query:
                    path += f"?{parsed.query}"
        except ValueError:
            host = None

        return cls(
            normalized=normalized,
            text=PreparedText.of(normalized),
            host=host,
            path=PreparedText.of(path),
        )


def levenshtein_distance(text1: str, text2: str) -> int:
    """Edit distance with unit cost for insertion, deletion and substitution."""
    return Levenshtein.distance(text1, text2)


def character_similarity(text1: str, text2: str) -> float:
    """Share of the longer string left untouched by the edit distance."""
    longest = max(len(text1), len(text2))
    if longest == 0:
        return 1.0
    return (longest - levenshtein_distance(text1, text2)) / longest


def jaccard_similarity(words1: frozenset[str], words2: frozenset[str]) -> float:
    """Jaccard index of two word sets.

    Two empty sets are identical; one empty set shares nothing.
    """
    if not words1 and not words2:
        return 1.0
    if not words1 or not words2:
        return 0.0
    return len(words1 & words2) / len(words1 | words2)


def _shortcut(text1: PreparedText, text2: PreparedText) -> float | None:
    if text1.raw == text2.raw:
        return 1.0
    if not text1.raw or not text2.raw:
        return 0.0
    if text1.normalized == text2.normalized:
        return 1.0
    if not text1.words and not text2.words:
        return 1.0
    if not text1.words or not text2.words:
        return 0.0
    return None


def prepared_similarity(text1: PreparedText, text2: PreparedText) -> float:
    """Similarity of two prepared texts, in [0, 1]."""
    shortcut = _shortcut(text1, text2)
    if shortcut is not None:
        return shortcut

    jaccard = jaccard_similarity(text1.words, text2.words)
    chars = character_similarity(text1.normalized, text2.normalized)
    return WORD_WEIGHT * jaccard + CHARACTER_WEIGHT * chars


def similarity_if_at_least(
    text1: PreparedText, text2: PreparedText, threshold: float
) -> float | None:
    """Return the similarity when it can reach ``threshold``, else None.

    The edit distance is skipped when even a perfect character score could
    not lift the blend to the threshold.
    """
    shortcut = _shortcut(text1, text2)
    if shortcut is not None:
        return shortcut if shortcut >= threshold else None

    jaccard = jaccard_similarity(text1.words, text2.words)
    lengths = sorted((len(text1.normalized), len(text2.normalized)))
    best_chars = lengths[0] / lengths[1] if lengths[1] else 1.0
    if WORD_WEIGHT * jaccard + CHARACTER_WEIGHT * best_chars < threshold:
        return None

    similarity = WORD_WEIGHT * jaccard + CHARACTER_WEIGHT * character_similarity(
        text1.normalized, text2.normalized
    )
    return similarity if similarity >= threshold else None


def text_similarity(text1: str, text2: str) -> float:
    """Calculate similarity between two texts.

    Args:
        text1: First text
        text2: Second text

    Returns:
        Similarity score (0.0 to 1.0); symmetric, and 1.0 for identical input
    """
    return prepared_similarity(PreparedText.of(text1), PreparedText.of(text2))


def prepared_url_similarity(url1: PreparedUrl, url2: PreparedUrl) -> float:
    """Similarity of two prepared URLs, in [0, 1]."""
    if url1.normalized == url2.normalized:
        return 1.0

    if url1.host is None or url2.host is None:
        return prepared_similarity(url1.text, url2.text)

    if url1.host != url2.host:
        return prepared_similarity(url1.text, url2.text) * CROSS_DOMAIN_DISCOUNT

    return prepared_similarity(url1.path, url2.path)


def url_similarity(url1: str, url2: str) -> float:
    """Calculate similarity between two URLs.

    Args:
        url1: First URL
        url2: Second URL

    Returns:
        Similarity score (0.0 to 1.0); URLs on different hosts never
        score above 0.3
    """
    return prepared_url_similarity(PreparedUrl.of(url1), PreparedUrl.of(url2))
