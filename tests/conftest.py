"""Pytest configuration and fixtures."""

import os
from datetime import UTC, datetime

import pytest

# Set test environment
os.environ["LOG_LEVEL"] = "DEBUG"
os.environ["JSON_LOGGING"] = "false"

NOW = datetime(2025, 7, 18, 12, 0, tzinfo=UTC)


@pytest.fixture
def now():
    """Fixed reference time for recency scoring."""
    return NOW


@pytest.fixture
def settings():
    """Fresh settings built from defaults and the test environment."""
    from content_curation.config import Settings
    return Settings()


@pytest.fixture
def sample_records():
    """Batch where the first two records share a URL."""
    from content_curation.types import ContentRecord

    return [
        ContentRecord(
            id="content1",
            title="React Development Guide",
            content="Learn how to build React applications with modern best practices",
            url="https://example.com/react-guide",
            source_platform="reddit",
        ),
        ContentRecord(
            id="content2",
            title="React Development Tutorial",
            content="Learn how to build React applications with modern best practices",
            url="https://example.com/react-guide",
            source_platform="producthunt",
        ),
        ContentRecord(
            id="content3",
            title="TypeScript Introduction",
            content="Getting started with TypeScript for JavaScript developers",
            url="https://typescript.org/intro",
            source_platform="reddit",
        ),
        ContentRecord(
            id="content4",
            title="Python Data Science",
            content="Analyzing data with Python pandas and numpy libraries",
            url="https://datascience.com/python",
            source_platform="reddit",
        ),
    ]


@pytest.fixture
def make_item(now):
    """Factory for content items published at the fixed reference time."""
    from content_curation.types import ContentItem, parse_source_metadata

    def _make(title="Sample", content="", platform="unknown", metadata=None,
              published_at=None, topics=(), id="item", url="https://example.com/item"):
        return ContentItem(
            id=id,
            title=title,
            content=content,
            url=url,
            source_platform=platform,
            source_metadata=parse_source_metadata(platform, metadata),
            published_at=published_at or now,
            topics=tuple(topics),
        )

    return _make


@pytest.fixture
def developer_profile():
    """Profile interested in React and TypeScript."""
    from content_curation.types import ContentDepth, UserProfile

    return UserProfile(
        interests=["react"],
        tech_stack=["typescript"],
        content_depth=ContentDepth.DETAILED,
        professional_role="developer",
    )
