"""Data model shared by the deduplication and scoring stages."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Union


class SourcePlatform(Enum):
    """Feeds whose metadata the quality scorer understands."""
    REDDIT = "reddit"
    PRODUCTHUNT = "producthunt"
    UNKNOWN = "unknown"

    @classmethod
    def from_name(cls, name: str | None) -> "SourcePlatform":
        try:
            return cls(str(name or "").strip().lower())
        except ValueError:
            return cls.UNKNOWN


class ContentDepth(Enum):
    """How much detail a user wants from curated content."""
    BRIEF = "brief"
    DETAILED = "detailed"

    @classmethod
    def from_name(cls, name: "str | ContentDepth | None") -> "ContentDepth":
        if isinstance(name, ContentDepth):
            return name
        try:
            return cls(str(name or "").strip().lower())
        except ValueError:
            return cls.DETAILED


@dataclass(frozen=True)
class RedditMetadata:
    """Engagement data for forum posts."""
    score: int = 0
    comments: int = 0
    subreddit: str = ""


@dataclass(frozen=True)
class AggregatorMetadata:
    """Engagement data for product-aggregator launches."""
    votes_count: int = 0
    comments_count: int = 0
    categories: tuple[str, ...] = ()


@dataclass(frozen=True)
class UnknownMetadata:
    """Metadata from a platform the scorer has no heuristic for."""
    raw: Mapping[str, Any] = field(default_factory=dict)


SourceMetadata = Union[RedditMetadata, AggregatorMetadata, UnknownMetadata]


def _as_count(value: Any) -> int:
    try:
        return max(0, int(value))
    except (TypeError, ValueError, OverflowError):
        return 0


def _as_strings(values: Any) -> tuple[str, ...]:
    if isinstance(values, str):
        return (values,)
    if not isinstance(values, Iterable):
        return ()
    return tuple(str(v) for v in values if v is not None)


def parse_source_metadata(platform: str | None, raw: Mapping[str, Any] | None) -> SourceMetadata:
    """Build the metadata variant for a platform from a loose mapping.

    Malformed values never raise: counts that are not numbers become 0 and
    an unrecognised platform yields ``UnknownMetadata``.
    """
    raw = raw if isinstance(raw, Mapping) else {}
    source = SourcePlatform.from_name(platform)

    if source is SourcePlatform.REDDIT:
        return RedditMetadata(
            score=_as_count(raw.get('score')),
            comments=_as_count(raw.get('comments', raw.get('num_comments'))),
            subreddit=str(raw.get('subreddit') or ''),
        )
    if source is SourcePlatform.PRODUCTHUNT:
        return AggregatorMetadata(
            votes_count=_as_count(raw.get('votesCount', raw.get('votes_count'))),
            comments_count=_as_count(raw.get('commentsCount', raw.get('comments_count'))),
            categories=_as_strings(raw.get('categories') or ()),
        )
    return UnknownMetadata(raw=dict(raw))


@dataclass(frozen=True)
class ContentRecord:
    """A fetched item as handed over by a source client."""
    id: str
    title: str
    content: str
    url: str
    source_platform: str = SourcePlatform.UNKNOWN.value


@dataclass(frozen=True)
class ContentItem:
    """Scoring view over a content record plus its platform metadata."""
    title: str = ""
    content: str = ""
    source_platform: str = SourcePlatform.UNKNOWN.value
    source_metadata: SourceMetadata = field(default_factory=UnknownMetadata)
    published_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    topics: tuple[str, ...] = ()
    id: str = ""
    url: str = ""

    @classmethod
    def from_record(
        cls,
        record: ContentRecord,
        source_metadata: SourceMetadata | Mapping[str, Any] | None = None,
        published_at: datetime | None = None,
        topics: Iterable[str] = (),
    ) -> "ContentItem":
        if not isinstance(source_metadata, (RedditMetadata, AggregatorMetadata, UnknownMetadata)):
            source_metadata = parse_source_metadata(record.source_platform, source_metadata)
        return cls(
            title=record.title,
            content=record.content,
            source_platform=record.source_platform,
            source_metadata=source_metadata,
            published_at=published_at or datetime.now(UTC),
            topics=tuple(topics),
            id=record.id,
            url=record.url,
        )

    def to_record(self) -> ContentRecord:
        return ContentRecord(
            id=self.id,
            title=self.title,
            content=self.content,
            url=self.url,
            source_platform=self.source_platform,
        )


@dataclass
class UserProfile:
    """Preferences of the user content is curated for."""
    interests: list[str] = field(default_factory=list)
    tech_stack: list[str] = field(default_factory=list)
    content_depth: ContentDepth = ContentDepth.DETAILED
    professional_role: str | None = None
    industry: str | None = None

    def __post_init__(self) -> None:
        self.interests = list(self.interests or [])
        self.tech_stack = list(self.tech_stack or [])
        self.content_depth = ContentDepth.from_name(self.content_depth)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "UserProfile":
        """Build a profile from camelCase or snake_case keys."""
        return cls(
            interests=list(_as_strings(data.get('interests') or ())),
            tech_stack=list(_as_strings(data.get('techStack', data.get('tech_stack')) or ())),
            content_depth=ContentDepth.from_name(data.get('contentDepth', data.get('content_depth'))),
            professional_role=data.get('professionalRole', data.get('professional_role')),
            industry=data.get('industry'),
        )
