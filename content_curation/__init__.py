"""Content Curation Engine: near-duplicate removal and profile-aware ranking."""

__version__ = "0.1.0"

from .pipeline import CurationPipeline, CurationResult, curate, load_content_items
from .processing import (
    ContentDeduplicator,
    ContentScorer,
    DeduplicationResult,
    DuplicateGroup,
    ScoredItem,
    ScoreWeights,
    content_hash,
    deduplicate,
    get_deduplication_stats,
    get_optimized_weights,
    score_multiple_items,
)
from .types import ContentDepth, ContentItem, ContentRecord, UserProfile

__all__ = [
    '__version__',
    'deduplicate',
    'get_deduplication_stats',
    'content_hash',
    'score_multiple_items',
    'get_optimized_weights',
    'curate',
    'load_content_items',
    'CurationPipeline',
    'CurationResult',
    'ContentDeduplicator',
    'ContentScorer',
    'DeduplicationResult',
    'DuplicateGroup',
    'ScoredItem',
    'ScoreWeights',
    'ContentRecord',
    'ContentItem',
    'ContentDepth',
    'UserProfile',
]
