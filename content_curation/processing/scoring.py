"""
Weighted scoring system for ranking curated content.

This module combines independent per-item scores with tunable weights:
- Relevance to the user's profile
- Platform-specific content quality
- Recency (linear decay)
- A diversity penalty against items already placed in the ranking
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, fields
from datetime import UTC, datetime
from typing import Any

from ..config import CurationConfig, Settings, get_curation_config, get_settings
from ..logging import get_logger
from ..types import (
    AggregatorMetadata,
    ContentDepth,
    ContentItem,
    RedditMetadata,
    SourceMetadata,
    UnknownMetadata,
    UserProfile,
    parse_source_metadata,
)
from ..utils import clamp, ensure_aware
from .relevance import RelevanceScorer
from .similarity import PreparedText, prepared_similarity

logger = get_logger(__name__)


@dataclass
class ScoreWeights:
    """Weights of the scoring factors, always renormalized to sum to 1.0."""
    relevance: float = 0.4
    quality: float = 0.3
    recency: float = 0.2
    diversity: float = 0.1

    def __post_init__(self) -> None:
        values = [max(0.0, float(getattr(self, f.name))) for f in fields(self)]
        total = sum(values)
        if total <= 0:
            values = [f.default for f in fields(self)]
            total = sum(values)
        for f, value in zip(fields(self), values, strict=True):
            setattr(self, f.name, value / total)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ScoreWeights":
        return cls(
            relevance=settings.w_relevance,
            quality=settings.w_quality,
            recency=settings.w_recency,
            diversity=settings.w_diversity,
        )

    @classmethod
    def from_overrides(cls, overrides: Mapping[str, float],
                       base: "ScoreWeights | None" = None) -> "ScoreWeights":
        """Apply a partial mapping of weights on top of ``base``."""
        base = base or cls()
        values = {f.name: getattr(base, f.name) for f in fields(cls)}
        values.update({k: v for k, v in overrides.items() if k in values})
        return cls(**values)

    def as_dict(self) -> dict[str, float]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass
class ItemScore:
    """Complete scoring breakdown for an item."""
    total_score: float
    relevance_score: float
    quality_score: float
    recency_score: float
    diversity_penalty: float
    reasoning: str


@dataclass(frozen=True)
class ScoredItem(ContentItem):
    """A content item with its combined ranking score (0 to 100)."""
    relevance_score: float = 0.0
    breakdown: ItemScore | None = None

    @classmethod
    def from_item(cls, item: ContentItem, score: ItemScore) -> "ScoredItem":
        values = {f.name: getattr(item, f.name) for f in fields(ContentItem)}
        return cls(**values, relevance_score=score.total_score, breakdown=score)


@dataclass
class _BaseScores:
    item: ContentItem
    relevance: float
    quality: float
    recency: float
    text: PreparedText


class ContentScorer:
    """Weighted, diversity-aware scoring of content items for one user."""

    # (similarity above, penalty added) checked from the top
    DIVERSITY_PENALTY_TIERS = (
        (0.7, 50.0),
        (0.5, 30.0),
        (0.3, 15.0),
    )

    REDDIT_ENGAGEMENT_DIVISOR = 5
    REDDIT_ENGAGEMENT_CAP = 60.0
    REDDIT_LENGTH_BONUSES = ((500, 20.0), (200, 15.0), (50, 10.0))
    REDDIT_SUBREDDIT_BONUS = 20.0

    AGGREGATOR_VOTES_CAP = 40.0
    AGGREGATOR_COMMENTS_CAP = 20.0
    AGGREGATOR_CATEGORY_POINTS = 8.0
    AGGREGATOR_CATEGORY_CAP = 25.0
    AGGREGATOR_LENGTH_BONUSES = ((200, 15.0), (100, 10.0), (50, 5.0))

    GENERIC_BASE_SCORE = 50.0
    GENERIC_LENGTH_BONUSES = ((300, 20.0), (100, 10.0))
    GENERIC_TOPIC_BONUS = 15.0
    GENERIC_MANY_TOPICS = 3

    def __init__(self, settings: Settings | None = None,
                 curation_config: CurationConfig | None = None):
        """Initialize scorer with configured weights and allow-lists."""
        self.settings = settings or get_settings()
        config = curation_config or get_curation_config()

        self.relevance_scorer = RelevanceScorer(config)
        allow_lists = config.get_quality_allow_lists()
        self.quality_subreddits = {s.lower() for s in allow_lists.reddit_subreddits}
        self.quality_categories = [c.lower() for c in allow_lists.aggregator_categories]

        self.max_age_hours = self.settings.max_age_hours
        self.default_weights = ScoreWeights.from_settings(self.settings)

    # ── Individual factors ─────────────────────────────────────────────────

    def relevance_score(self, item: ContentItem, profile: UserProfile) -> float:
        """Calculate relevance score (0 to 100)."""
        return self.relevance_scorer.score(item, profile)

    @staticmethod
    def _length_bonus(length: int, bonuses: tuple[tuple[int, float], ...]) -> float:
        for minimum, bonus in bonuses:
            if length > minimum:
                return bonus
        return 0.0

    @staticmethod
    def _metadata(item: ContentItem) -> SourceMetadata:
        metadata: Any = item.source_metadata
        if isinstance(metadata, (RedditMetadata, AggregatorMetadata)):
            return metadata
        raw = metadata.raw if isinstance(metadata, UnknownMetadata) else metadata
        return parse_source_metadata(item.source_platform, raw)

    def _reddit_quality(self, item: ContentItem, metadata: RedditMetadata) -> float:
        engagement = (metadata.score + metadata.comments) / self.REDDIT_ENGAGEMENT_DIVISOR
        score = min(engagement, self.REDDIT_ENGAGEMENT_CAP)
        score += self._length_bonus(len(item.content), self.REDDIT_LENGTH_BONUSES)
        if metadata.subreddit.lower() in self.quality_subreddits:
            score += self.REDDIT_SUBREDDIT_BONUS
        return score

    def _aggregator_quality(self, item: ContentItem, metadata: AggregatorMetadata) -> float:
        score = min(metadata.votes_count / 2, self.AGGREGATOR_VOTES_CAP)
        score += min(metadata.comments_count * 2, self.AGGREGATOR_COMMENTS_CAP)

        matching = [
            category for category in metadata.categories
            if any(q in category.lower() for q in self.quality_categories)
        ]
        score += min(len(matching) * self.AGGREGATOR_CATEGORY_POINTS, self.AGGREGATOR_CATEGORY_CAP)
        score += self._length_bonus(len(item.content), self.AGGREGATOR_LENGTH_BONUSES)
        return score

    def _generic_quality(self, item: ContentItem) -> float:
        score = self.GENERIC_BASE_SCORE
        score += self._length_bonus(len(item.content), self.GENERIC_LENGTH_BONUSES)
        if item.topics:
            score += self.GENERIC_TOPIC_BONUS
        if len(item.topics) > self.GENERIC_MANY_TOPICS:
            score += self.GENERIC_TOPIC_BONUS
        return score

    def quality_score(self, item: ContentItem) -> float:
        """Calculate platform-specific quality score (0 to 100)."""
        metadata = self._metadata(item)

        if isinstance(metadata, RedditMetadata):
            score = self._reddit_quality(item, metadata)
        elif isinstance(metadata, AggregatorMetadata):
            score = self._aggregator_quality(item, metadata)
        else:
            score = self._generic_quality(item)

        return clamp(score)

    def recency_score(self, item: ContentItem, max_age_hours: float | None = None,
                      now: datetime | None = None) -> float:
        """Calculate recency score with linear decay (0 to 100)."""
        max_age = self.max_age_hours if max_age_hours is None else max_age_hours
        if max_age <= 0:
            return 0.0

        now = ensure_aware(now or datetime.now(UTC))
        age_hours = (now - ensure_aware(item.published_at)).total_seconds() / 3600

        if age_hours >= max_age:
            return 0.0
        return clamp(100 * (1 - age_hours / max_age))

    @staticmethod
    def _item_text(item: ContentItem) -> PreparedText:
        return PreparedText.of(f"{item.title} {item.content}")

    def _penalty(self, candidate: PreparedText, ranked: Sequence[PreparedText]) -> float:
        penalty = 0.0
        for existing in ranked:
            similarity = prepared_similarity(candidate, existing)
            for threshold, increment in self.DIVERSITY_PENALTY_TIERS:
                if similarity > threshold:
                    penalty += increment
                    break
        return penalty

    def diversity_penalty(self, candidate: ContentItem,
                          already_ranked: Sequence[ContentItem]) -> float:
        """Penalty for resembling items already placed in the ranking.

        Summed over every ranked item; not capped.
        """
        return self._penalty(
            self._item_text(candidate),
            [self._item_text(existing) for existing in already_ranked],
        )

    # ── Combination ────────────────────────────────────────────────────────

    def _resolve_weights(self, weights: ScoreWeights | Mapping[str, float] | None) -> ScoreWeights:
        if weights is None:
            return self.default_weights
        if isinstance(weights, ScoreWeights):
            return weights
        return ScoreWeights.from_overrides(weights, base=self.default_weights)

    @staticmethod
    def _combine(relevance: float, quality: float, recency: float, penalty: float,
                 weights: ScoreWeights) -> ItemScore:
        total = clamp(
            relevance * weights.relevance
            + quality * weights.quality
            + recency * weights.recency
            - penalty * weights.diversity
        )
        reasoning = " | ".join([
            f"Relevance: {relevance:.1f}",
            f"Quality: {quality:.1f}",
            f"Recency: {recency:.1f}",
            f"Diversity penalty: {penalty:.1f}",
        ])
        return ItemScore(
            total_score=total,
            relevance_score=relevance,
            quality_score=quality,
            recency_score=recency,
            diversity_penalty=penalty,
            reasoning=reasoning,
        )

    def score_item(self, item: ContentItem, profile: UserProfile,
                   already_ranked: Sequence[ContentItem] = (),
                   weights: ScoreWeights | Mapping[str, float] | None = None,
                   now: datetime | None = None) -> ItemScore:
        """Calculate the full scoring breakdown for an item."""
        return self._combine(
            self.relevance_score(item, profile),
            self.quality_score(item),
            self.recency_score(item, now=now),
            self.diversity_penalty(item, already_ranked),
            self._resolve_weights(weights),
        )

    def overall_score(self, item: ContentItem, profile: UserProfile,
                      already_ranked: Sequence[ContentItem] = (),
                      weights: ScoreWeights | Mapping[str, float] | None = None,
                      now: datetime | None = None) -> float:
        """Calculate the combined score (0 to 100)."""
        return self.score_item(item, profile, already_ranked, weights, now).total_score

    def score_multiple_items(self, items: Sequence[ContentItem], profile: UserProfile,
                             weights: ScoreWeights | Mapping[str, float] | None = None,
                             now: datetime | None = None) -> list[ScoredItem]:
        """Score and rank items with a diversity penalty.

        Base scores do not depend on order and are computed first. Items are
        then visited by descending relevance and each one is penalized only
        against the items placed before it, so lower-priority near-duplicates
        sink.
        """
        if not items:
            logger.info("No items to score")
            return []

        resolved = self._resolve_weights(weights)
        now = now or datetime.now(UTC)

        base = [
            _BaseScores(
                item=item,
                relevance=self.relevance_score(item, profile),
                quality=self.quality_score(item),
                recency=self.recency_score(item, now=now),
                text=self._item_text(item),
            )
            for item in items
        ]
        base.sort(key=lambda b: b.relevance, reverse=True)

        scored_items: list[ScoredItem] = []
        placed: list[PreparedText] = []
        for entry in base:
            penalty = self._penalty(entry.text, placed)
            score = self._combine(entry.relevance, entry.quality, entry.recency, penalty, resolved)
            scored_items.append(ScoredItem.from_item(entry.item, score))
            placed.append(entry.text)

        scored_items.sort(key=lambda s: s.relevance_score, reverse=True)

        logger.info(
            "Scoring complete",
            items=len(scored_items),
            top_score=round(scored_items[0].relevance_score, 3),
        )
        return scored_items

    # ── Weight optimization ────────────────────────────────────────────────

    def get_optimized_weights(self, profile: UserProfile) -> ScoreWeights:
        """Derive weights from the user's content depth preference.

        Detailed readers trade recency for quality; brief readers trade
        quality for recency.
        """
        weights = ScoreWeights.from_settings(self.settings)
        shift = self.settings.depth_weight_shift

        if profile.content_depth is ContentDepth.DETAILED:
            quality = weights.quality + shift
            recency = weights.recency - shift
        else:
            quality = weights.quality - shift
            recency = weights.recency + shift

        return ScoreWeights(
            relevance=weights.relevance,
            quality=quality,
            recency=recency,
            diversity=weights.diversity,
        )


def score_multiple_items(items: Sequence[ContentItem], profile: UserProfile,
                         weights: ScoreWeights | Mapping[str, float] | None = None,
                         settings: Settings | None = None) -> list[ScoredItem]:
    """Convenience function for ranking items."""
    scorer = ContentScorer(settings)
    return scorer.score_multiple_items(items, profile, weights)


def get_optimized_weights(profile: UserProfile,
                          settings: Settings | None = None) -> ScoreWeights:
    """Convenience function for profile-tuned weights."""
    return ContentScorer(settings).get_optimized_weights(profile)
