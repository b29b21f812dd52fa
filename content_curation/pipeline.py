"""Curation pass for one user: deduplicate, rank, threshold and cap."""

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from .config import Settings, get_settings
from .logging import PerformanceLogger, get_logger, log_processing_stage
from .processing.dedupe import (
    ContentDeduplicator,
    DeduplicationResult,
    DeduplicationStats,
    content_hash,
    get_deduplication_stats,
)
from .processing.scoring import ContentScorer, ScoredItem, ScoreWeights
from .types import ContentItem, ContentRecord, UserProfile, parse_source_metadata
from .utils import format_datetime_iso, parse_date_string

logger = get_logger(__name__)


@dataclass
class CuratedItem:
    """A ranked item ready for storage."""
    scored: ScoredItem
    content_hash: str

    def to_dict(self) -> dict[str, Any]:
        item = self.scored
        breakdown = item.breakdown
        return {
            'id': item.id,
            'title': item.title,
            'content': item.content,
            'url': item.url,
            'sourcePlatform': item.source_platform,
            'publishedAt': format_datetime_iso(item.published_at),
            'topics': list(item.topics),
            'relevanceScore': item.relevance_score,
            'contentHash': self.content_hash,
            'scoreReasoning': breakdown.reasoning if breakdown else None,
        }


@dataclass
class CurationResult:
    """Outcome of one curation pass."""
    items: list[CuratedItem] = field(default_factory=list)
    deduplication: DeduplicationResult = field(default_factory=DeduplicationResult)
    stats: DeduplicationStats | None = None
    weights: ScoreWeights | None = None
    skipped_reason: str | None = None


def load_content_item(data: Mapping[str, Any]) -> ContentItem:
    """Build a content item from a feed dict (camelCase or snake_case keys)."""
    platform = str(data.get('sourcePlatform', data.get('source_platform')) or 'unknown')
    published = data.get('publishedAt', data.get('published_at'))
    if isinstance(published, datetime):
        published_at = published
    else:
        published_at = parse_date_string(str(published or '')) or datetime.now(UTC)

    topics = data.get('topics') or ()
    if isinstance(topics, str):
        topics = (topics,)

    return ContentItem(
        id=str(data.get('id') or ''),
        title=str(data.get('title') or ''),
        content=str(data.get('content') or ''),
        url=str(data.get('url') or ''),
        source_platform=platform,
        source_metadata=parse_source_metadata(
            platform, data.get('sourceMetadata', data.get('source_metadata'))
        ),
        published_at=published_at,
        topics=tuple(str(t) for t in topics),
    )


def load_content_items(raw_items: Iterable[Mapping[str, Any]]) -> list[ContentItem]:
    """Build content items from a list of feed dicts."""
    return [load_content_item(data) for data in raw_items]


class CurationPipeline:
    """Runs the dedupe → score → select stages for one user."""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self.deduplicator = ContentDeduplicator(self.settings)
        self.scorer = ContentScorer(self.settings)

    def run(self, items: Sequence[ContentItem], profile: UserProfile,
            existing_hashes: Iterable[str] | None = None,
            now: datetime | None = None) -> CurationResult:
        """Curate a batch of items for a profile.

        Args:
            items: Fetched items, in feed order
            profile: The user's preferences
            existing_hashes: Content hashes already stored for this user
            now: Reference time for recency scoring

        Returns:
            Ranked, thresholded and capped items plus stage statistics
        """
        if not profile.interests and not profile.tech_stack:
            logger.info("Skipping curation - no interests or tech stack defined")
            return CurationResult(skipped_reason="empty profile")

        if not items:
            logger.info("No content to curate")
            return CurationResult(skipped_reason="no content")

        with PerformanceLogger("curation_pass", logger):
            records: list[ContentRecord] = [item.to_record() for item in items]
            deduplication = self.deduplicator.deduplicate(records)
            stats = get_deduplication_stats(deduplication)
            logger.info(
                "processing_stage",
                **log_processing_stage(
                    "deduplication", len(records), stats.total_unique,
                    duplicates_by_reason=stats.duplicates_by_reason,
                    deduplication_rate=round(stats.deduplication_rate, 1),
                )
            )

            # Records and items share positions, so keep items by record identity
            unique_ids = {id(record) for record in deduplication.unique_content}
            unique_items = [
                item for item, record in zip(items, records, strict=True)
                if id(record) in unique_ids
            ]

            stored = set(existing_hashes or ())
            if stored:
                fresh_items = [item for item in unique_items if content_hash(item) not in stored]
                logger.info(
                    "processing_stage",
                    **log_processing_stage("stored_hash_filter", len(unique_items), len(fresh_items))
                )
                unique_items = fresh_items

            weights = self.scorer.get_optimized_weights(profile)
            scored = self.scorer.score_multiple_items(unique_items, profile, weights, now=now)

            selected = [
                item for item in scored
                if item.relevance_score >= self.settings.min_relevance_score
            ][: self.settings.max_items]
            logger.info(
                "processing_stage",
                **log_processing_stage(
                    "selection", len(scored), len(selected),
                    min_relevance_score=self.settings.min_relevance_score,
                    max_items=self.settings.max_items,
                )
            )

        if not selected:
            logger.info("No content survived deduplication and thresholding")

        return CurationResult(
            items=[CuratedItem(scored=item, content_hash=content_hash(item)) for item in selected],
            deduplication=deduplication,
            stats=stats,
            weights=weights,
        )


def curate(items: Sequence[ContentItem], profile: UserProfile,
           settings: Settings | None = None,
           existing_hashes: Iterable[str] | None = None) -> CurationResult:
    """Convenience function for a single curation pass."""
    pipeline = CurationPipeline(settings)
    return pipeline.run(items, profile, existing_hashes)
