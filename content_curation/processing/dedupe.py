"""
Deduplication of content batches gathered from several feeds.

Each pair of records is checked with increasingly expensive strategies,
stopping at the first that fires:
1. Identical normalized URL
2. Similar URLs (same host, similar path)
3. Similar titles
4. Similar body content
5. Identical canonical content hash
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Protocol

from ..config import Settings, get_settings
from ..logging import get_logger
from ..types import ContentRecord
from ..utils import generate_content_hash, normalize_url
from .similarity import (
    PreparedText,
    PreparedUrl,
    prepared_url_similarity,
    similarity_if_at_least,
)
from .text_utils import normalize_for_hashing

logger = get_logger(__name__)


class Hashable(Protocol):
    title: str
    content: str
    url: str


def content_hash(record: Hashable) -> str:
    """Stable identity hash of normalized title, content and URL.

    Args:
        record: Anything exposing ``title``, ``content`` and ``url``

    Returns:
        64-character hexadecimal SHA-256 digest
    """
    hash_input = "|".join((
        normalize_for_hashing(record.title),
        normalize_for_hashing(record.content),
        normalize_url(record.url),
    ))
    return generate_content_hash(hash_input)


@dataclass
class DuplicateGroup:
    """An original record and the records judged duplicates of it."""
    original: ContentRecord
    duplicates: list[ContentRecord]
    reasons: list[str]  # one per duplicate

    @property
    def reason(self) -> str:
        return self.reasons[0] if self.reasons else ""


@dataclass
class DeduplicationResult:
    """Partition of a batch into unique records and duplicate groups."""
    unique_content: list[ContentRecord] = field(default_factory=list)
    duplicate_groups: list[DuplicateGroup] = field(default_factory=list)


@dataclass
class DeduplicationStats:
    """Summary counts derived from a deduplication result."""
    total_original: int
    total_unique: int
    total_duplicates: int
    deduplication_rate: float  # percent
    duplicates_by_reason: dict[str, int]


@dataclass
class DuplicateCheck:
    """Outcome of comparing two records."""
    is_duplicate: bool
    reason: str | None = None
    similarity: float | None = None  # score of the check that fired, when it has one


@dataclass(frozen=True)
class _RecordFeatures:
    """Per-batch precomputed comparison inputs for one record."""
    record: ContentRecord
    url: PreparedUrl
    title: PreparedText
    content: PreparedText
    content_hash: str

    @classmethod
    def of(cls, record: ContentRecord) -> "_RecordFeatures":
        return cls(
            record=record,
            url=PreparedUrl.of(record.url),
            title=PreparedText.of(record.title),
            content=PreparedText.of(record.content),
            content_hash=content_hash(record),
        )


class ContentDeduplicator:
    """Pairwise similarity deduplication for a batch of content records."""

    def __init__(self, settings: Settings | None = None):
        """Initialize deduplicator."""
        self.settings = settings or get_settings()

        # Thresholds
        self.url_similarity_threshold = self.settings.url_similarity_threshold
        self.title_similarity_threshold = self.settings.title_similarity_threshold
        self.content_similarity_threshold = self.settings.content_similarity_threshold
        self.transitive = self.settings.transitive_dedupe

    def _check(self, first: _RecordFeatures, second: _RecordFeatures) -> DuplicateCheck:
        if first.url.normalized == second.url.normalized:
            return DuplicateCheck(True, "Identical URL", 1.0)

        url_similarity = prepared_url_similarity(first.url, second.url)
        if url_similarity >= self.url_similarity_threshold:
            reason = f"Similar URLs ({url_similarity * 100:.1f}% similarity)"
            return DuplicateCheck(True, reason, url_similarity)

        title_similarity = similarity_if_at_least(
            first.title, second.title, self.title_similarity_threshold
        )
        if title_similarity is not None:
            reason = f"Similar titles ({title_similarity * 100:.1f}% similarity)"
            return DuplicateCheck(True, reason, title_similarity)

        # Body text is the most expensive comparison
        content_similarity = similarity_if_at_least(
            first.content, second.content, self.content_similarity_threshold
        )
        if content_similarity is not None:
            reason = f"Similar content ({content_similarity * 100:.1f}% similarity)"
            return DuplicateCheck(True, reason, content_similarity)

        if first.content_hash == second.content_hash:
            return DuplicateCheck(True, "Identical content hash", 1.0)

        return DuplicateCheck(False)

    def is_duplicate(self, first: ContentRecord, second: ContentRecord) -> DuplicateCheck:
        """Check whether two records describe the same content."""
        return self._check(_RecordFeatures.of(first), _RecordFeatures.of(second))

    def _sweep(self, features: list[_RecordFeatures]) -> DeduplicationResult:
        """Group each record with later unclaimed records similar to it.

        Not transitive: a record similar only to an already-claimed
        duplicate stays unique.
        """
        result = DeduplicationResult()
        processed: set[int] = set()

        for i, current in enumerate(features):
            if i in processed:
                continue

            duplicates: list[ContentRecord] = []
            reasons: list[str] = []
            for j in range(i + 1, len(features)):
                if j in processed:
                    continue

                check = self._check(current, features[j])
                if check.is_duplicate:
                    duplicates.append(features[j].record)
                    reasons.append(check.reason or "")
                    processed.add(j)

            processed.add(i)
            result.unique_content.append(current.record)
            if duplicates:
                result.duplicate_groups.append(DuplicateGroup(
                    original=current.record,
                    duplicates=duplicates,
                    reasons=reasons,
                ))

        return result

    def _cluster(self, features: list[_RecordFeatures]) -> DeduplicationResult:
        """Group records transitively with union-find.

        The lowest index of each cluster is its original; every other member
        keeps the reason of the first comparison that linked it.
        """
        parent = list(range(len(features)))
        link_reasons: dict[int, str] = {}

        def find(index: int) -> int:
            while parent[index] != index:
                parent[index] = parent[parent[index]]
                index = parent[index]
            return index

        for i in range(len(features)):
            for j in range(i + 1, len(features)):
                root_i, root_j = find(i), find(j)
                if root_i == root_j:
                    continue

                check = self._check(features[i], features[j])
                if check.is_duplicate:
                    parent[max(root_i, root_j)] = min(root_i, root_j)
                    link_reasons.setdefault(i, check.reason or "")
                    link_reasons.setdefault(j, check.reason or "")

        members: dict[int, list[int]] = {}
        for index in range(len(features)):
            members.setdefault(find(index), []).append(index)

        result = DeduplicationResult()
        for root in sorted(members):
            result.unique_content.append(features[root].record)
            others = [index for index in members[root] if index != root]
            if others:
                result.duplicate_groups.append(DuplicateGroup(
                    original=features[root].record,
                    duplicates=[features[index].record for index in others],
                    reasons=[link_reasons[index] for index in others],
                ))

        return result

    def deduplicate(self, records: Sequence[ContentRecord]) -> DeduplicationResult:
        """Partition a batch into unique records and duplicate groups."""
        features = [_RecordFeatures.of(record) for record in records]

        if self.transitive:
            result = self._cluster(features)
        else:
            result = self._sweep(features)

        logger.info(
            "Deduplication complete",
            total=len(records),
            unique=len(result.unique_content),
            duplicate_groups=len(result.duplicate_groups),
            transitive=self.transitive,
        )
        return result


def get_deduplication_stats(result: DeduplicationResult) -> DeduplicationStats:
    """Summarize a deduplication result.

    Reasons are grouped by their prefix before any ``(`` detail, and
    counted once per duplicate record.
    """
    total_duplicates = sum(len(group.duplicates) for group in result.duplicate_groups)
    total_original = len(result.unique_content) + total_duplicates
    rate = (total_duplicates / total_original) * 100 if total_original > 0 else 0.0

    duplicates_by_reason: dict[str, int] = {}
    for group in result.duplicate_groups:
        for reason in group.reasons:
            main_reason = reason.split('(')[0].strip()
            duplicates_by_reason[main_reason] = duplicates_by_reason.get(main_reason, 0) + 1

    return DeduplicationStats(
        total_original=total_original,
        total_unique=len(result.unique_content),
        total_duplicates=total_duplicates,
        deduplication_rate=rate,
        duplicates_by_reason=duplicates_by_reason,
    )


def deduplicate(records: Sequence[ContentRecord],
                settings: Settings | None = None) -> DeduplicationResult:
    """Convenience function for batch deduplication."""
    deduplicator = ContentDeduplicator(settings)
    return deduplicator.deduplicate(records)
