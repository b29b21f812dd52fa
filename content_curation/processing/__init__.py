"""Content processing module."""

from .dedupe import (
    ContentDeduplicator,
    DeduplicationResult,
    DeduplicationStats,
    DuplicateGroup,
    content_hash,
    deduplicate,
    get_deduplication_stats,
)
from .relevance import RelevanceScorer, relevance_score
from .scoring import (
    ContentScorer,
    ItemScore,
    ScoredItem,
    ScoreWeights,
    get_optimized_weights,
    score_multiple_items,
)
from .similarity import levenshtein_distance, text_similarity, url_similarity
from .text_utils import normalize_for_comparison, normalize_for_hashing

__all__ = [
    'deduplicate',
    'get_deduplication_stats',
    'content_hash',
    'ContentDeduplicator',
    'DeduplicationResult',
    'DeduplicationStats',
    'DuplicateGroup',
    'relevance_score',
    'RelevanceScorer',
    'score_multiple_items',
    'get_optimized_weights',
    'ContentScorer',
    'ItemScore',
    'ScoredItem',
    'ScoreWeights',
    'text_similarity',
    'url_similarity',
    'levenshtein_distance',
    'normalize_for_comparison',
    'normalize_for_hashing',
]
