"""Text normalization utilities for similarity scoring and hashing."""

import re

STOP_WORDS = (
    'the', 'a', 'an', 'and', 'or', 'but', 'in', 'on', 'at', 'to', 'for',
    'of', 'with', 'by', 'from', 'up', 'about', 'into', 'through', 'during',
)

_WHITESPACE_RE = re.compile(r'\s+')
_COMPARISON_STRIP_RE = re.compile(r'[^\w\s\-.,!?]')
_HASHING_STRIP_RE = re.compile(r'[^\w\s]')
_STOP_WORDS_RE = re.compile(r'\b(?:' + '|'.join(STOP_WORDS) + r')\b')


def normalize_for_comparison(text: str) -> str:
    """Normalize text before similarity scoring.

    Lowercases, collapses whitespace, keeps word characters and the
    punctuation ``- . , ! ?``, then drops stop words.

    Args:
        text: Raw text

    Returns:
        Normalized text (may contain runs of spaces where stop words were)
    """
    if not text:
        return ""

    text = text.lower().strip()
    text = _WHITESPACE_RE.sub(' ', text)
    text = _COMPARISON_STRIP_RE.sub('', text)
    text = _STOP_WORDS_RE.sub('', text)
    return text.strip()


def normalize_for_hashing(text: str) -> str:
    """Convert text to canonical form for hashing.

    Args:
        text: Raw text

    Returns:
        Lowercase text with punctuation removed and whitespace collapsed
    """
    if not text:
        return ""

    text = text.lower().strip()
    text = _HASHING_STRIP_RE.sub('', text)
    text = _WHITESPACE_RE.sub(' ', text)
    return text.strip()


def extract_words(normalized: str, min_length: int = 3) -> frozenset[str]:
    """Split normalized text into the set of words used for Jaccard scoring.

    Args:
        normalized: Output of ``normalize_for_comparison``
        min_length: Minimum word length

    Returns:
        Set of words
    """
    return frozenset(word for word in normalized.split() if len(word) >= min_length)
