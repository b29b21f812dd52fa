"""Tests for relevance, quality, recency and combined scoring."""

from datetime import timedelta

import pytest

from content_curation.config import Settings
from content_curation.processing.relevance import RelevanceScorer
from content_curation.processing.scoring import (
    ContentScorer,
    ScoreWeights,
    get_optimized_weights,
)
from content_curation.types import (
    AggregatorMetadata,
    ContentDepth,
    ContentItem,
    ContentRecord,
    RedditMetadata,
    UserProfile,
)


@pytest.fixture
def scorer(settings):
    return ContentScorer(settings)


# Relevance


def test_relevance_counts_each_profile_term(scorer, make_item, developer_profile):
    item = make_item(title="Building React apps with TypeScript",
                     content="A deep dive into hooks", topics=["react", "frontend"])

    assert scorer.relevance_score(item, developer_profile) == 18.0


def test_relevance_role_bonus(scorer, make_item):
    profile = UserProfile(professional_role="Developer")

    assert scorer.relevance_score(make_item(title="Tips for every developer"), profile) == 10.0
    assert scorer.relevance_score(make_item(title="Tips for every manager"), profile) == 0.0


def test_relevance_interest_cap(scorer, make_item):
    terms = ["alpha", "beta", "gamma", "delta", "epsilon", "zeta"]
    item = make_item(content=" ".join(terms))

    assert scorer.relevance_score(item, UserProfile(interests=terms)) == 50.0
    assert scorer.relevance_score(item, UserProfile(tech_stack=terms)) == 40.0


def test_relevance_uses_keyword_variations(scorer, make_item):
    item = make_item(title="Shipping a FastAPI service")

    assert scorer.relevance_score(item, UserProfile(interests=["Python"])) == 10.0


def test_blank_terms_never_match(make_item):
    relevance = RelevanceScorer()
    match = relevance.match_terms(make_item(title="Anything"), UserProfile(interests=["", "  "]))

    assert match.terms == []
    assert not relevance.is_text_match("anything", None)


def test_variations_match_whole_words_only(scorer, make_item):
    profile = UserProfile(interests=["frontend"], tech_stack=["typescript"])
    false_hits = make_item(title="A guide to build its own parser")
    true_hits = make_item(title="New UI kit", content="Written in TS")

    assert scorer.relevance_score(false_hits, profile) == 0.0
    assert scorer.relevance_score(true_hits, profile) == 18.0


def test_terms_still_match_inside_words(scorer, make_item):
    item = make_item(title="Migrating to React-Native")

    assert scorer.relevance_score(item, UserProfile(interests=["react"])) == 10.0


def test_relevance_without_matches(scorer, make_item, developer_profile):
    assert scorer.relevance_score(make_item(title="Gardening"), developer_profile) == 0.0


# Quality


def test_reddit_quality_full_marks(scorer, make_item):
    item = make_item(platform="reddit", content="x" * 600,
                     metadata={"score": 200, "comments": 100, "subreddit": "programming"})

    assert scorer.quality_score(item) == 100.0


def test_reddit_quality_low_engagement(scorer, make_item):
    item = make_item(platform="reddit", content="short",
                     metadata={"score": 10, "num_comments": 5, "subreddit": "cats"})

    assert scorer.quality_score(item) == pytest.approx(3.0)


def test_reddit_subreddit_bonus_is_case_insensitive(scorer, make_item):
    listed = make_item(platform="reddit", metadata={"subreddit": "machinelearning"})
    unlisted = make_item(platform="reddit", metadata={"subreddit": "cooking"})

    assert scorer.quality_score(listed) - scorer.quality_score(unlisted) == 20.0


def test_aggregator_quality(scorer, make_item):
    item = make_item(platform="producthunt", content="x" * 150,
                     metadata={"votesCount": 100, "commentsCount": 15,
                               "categories": ["Developer Tools", "Games"]})

    assert scorer.quality_score(item) == 78.0


def test_aggregator_category_cap(scorer, make_item):
    item = make_item(platform="producthunt",
                     metadata={"categories": ["API", "SaaS", "Productivity", "Design Tools"]})

    assert scorer.quality_score(item) == 25.0


def test_generic_quality(scorer, make_item):
    assert scorer.quality_score(make_item()) == 50.0

    rich = make_item(content="x" * 400, topics=["a", "b", "c", "d", "e"])
    assert scorer.quality_score(rich) == 100.0


def test_malformed_metadata_does_not_raise(scorer, make_item):
    item = make_item(platform="reddit", metadata={"score": "lots", "comments": None})

    assert 0.0 <= scorer.quality_score(item) <= 100.0


def test_infinite_counts_become_zero(scorer, make_item):
    reddit = make_item(platform="reddit", metadata={"score": float("inf"), "comments": 1})
    launch = make_item(platform="producthunt",
                       metadata={"votesCount": float("-inf"), "commentsCount": float("nan")})

    assert reddit.source_metadata == RedditMetadata(score=0, comments=1)
    assert launch.source_metadata == AggregatorMetadata()
    assert scorer.quality_score(reddit) == pytest.approx(0.2)
    assert scorer.quality_score(launch) == 0.0


def test_item_from_record_with_infinite_counts():
    record = ContentRecord(id="r1", title="Post", content="", url="https://example.com/r1",
                           source_platform="reddit")

    item = ContentItem.from_record(record, {"score": float("inf"), "comments": 1})

    assert item.source_metadata.score == 0


# Recency


def test_recency_fresh_item(scorer, make_item, now):
    assert scorer.recency_score(make_item(), now=now) == 100.0


def test_recency_linear_decay(scorer, make_item, now):
    item = make_item(published_at=now - timedelta(hours=24))

    assert scorer.recency_score(item, max_age_hours=48, now=now) == pytest.approx(50.0)
    assert scorer.recency_score(item, now=now) == pytest.approx(100 * (1 - 24 / 168))


def test_recency_expired(scorer, make_item, now):
    at_limit = make_item(published_at=now - timedelta(hours=168))
    older = make_item(published_at=now - timedelta(hours=200))

    assert scorer.recency_score(at_limit, now=now) == 0.0
    assert scorer.recency_score(older, now=now) == 0.0


def test_recency_future_item_is_capped(scorer, make_item, now):
    assert scorer.recency_score(make_item(published_at=now + timedelta(hours=5)), now=now) == 100.0


def test_recency_naive_timestamps_are_utc(scorer, make_item, now):
    naive = make_item(published_at=(now - timedelta(hours=12)).replace(tzinfo=None))

    assert scorer.recency_score(naive, now=now) == pytest.approx(100 * (1 - 12 / 168))


def test_recency_is_monotonic(scorer, make_item, now):
    scores = [
        scorer.recency_score(make_item(published_at=now - timedelta(hours=hours)), now=now)
        for hours in (0, 6, 30, 90, 167, 400)
    ]

    assert scores == sorted(scores, reverse=True)


# Diversity


def test_diversity_penalty_tiers(scorer, make_item):
    candidate = make_item(title="React Hooks Guide", content="Learn useState and useEffect in React")
    different = make_item(title="Rust ownership explained", content="Borrow checker rules")

    assert scorer.diversity_penalty(candidate, []) == 0.0
    assert scorer.diversity_penalty(candidate, [candidate]) == 50.0
    assert scorer.diversity_penalty(candidate, [different]) == 0.0


def test_diversity_penalty_accumulates_without_cap(scorer, make_item):
    candidate = make_item(title="React Hooks Guide", content="Learn useState and useEffect in React")

    assert scorer.diversity_penalty(candidate, [candidate] * 3) == 150.0


# Combined score


def test_overall_score_components(scorer, make_item, now):
    item = make_item(title="React Hooks Guide", content="Learn useState and useEffect in React")
    profile = UserProfile(interests=["react"])

    breakdown = scorer.score_item(item, profile, weights=ScoreWeights(), now=now)

    assert breakdown.relevance_score == 10.0
    assert breakdown.quality_score == 50.0
    assert breakdown.recency_score == 100.0
    assert breakdown.total_score == pytest.approx(39.0)
    assert breakdown.reasoning == (
        "Relevance: 10.0 | Quality: 50.0 | Recency: 100.0 | Diversity penalty: 0.0"
    )

    penalized = scorer.overall_score(item, profile, [item], weights=ScoreWeights(), now=now)
    assert penalized == pytest.approx(34.0)


def test_custom_weights_change_the_score(scorer, make_item, now):
    item = make_item(title="React Hooks Guide")
    profile = UserProfile(interests=["react"])

    by_relevance = scorer.overall_score(
        item, profile, weights=ScoreWeights(relevance=1, quality=0, recency=0, diversity=0), now=now
    )
    by_quality = scorer.overall_score(item, profile, weights={"relevance": 0, "quality": 1,
                                                              "recency": 0, "diversity": 0}, now=now)

    assert by_relevance == pytest.approx(10.0)
    assert by_quality == pytest.approx(50.0)


def test_overall_score_is_bounded(scorer, make_item, now):
    item = make_item(title="Nothing relevant", published_at=now - timedelta(days=30))
    crowd = [item] * 10

    score = scorer.overall_score(item, UserProfile(interests=["react"]), crowd, now=now)

    assert score == 0.0


def test_score_multiple_items_penalizes_repeats(scorer, make_item, now):
    items = [
        make_item(id=str(n), title=f"React Guide {n}",
                  content="Learn React hooks and components in depth")
        for n in (1, 2, 3)
    ]

    ranked = scorer.score_multiple_items(items, UserProfile(interests=["react"]),
                                         weights=ScoreWeights(), now=now)

    assert [item.id for item in ranked] == ["1", "2", "3"]
    assert [item.breakdown.diversity_penalty for item in ranked] == [0.0, 50.0, 100.0]
    assert ranked[0].relevance_score > ranked[1].relevance_score > ranked[2].relevance_score
    assert [round(item.relevance_score) for item in ranked] == [39, 34, 29]


def test_score_multiple_items_visits_by_relevance(scorer, make_item, now):
    """The more relevant of two near-duplicates is placed first and keeps its score."""
    weak = make_item(id="weak", title="Hooks in React", content="useState patterns explained")
    strong = make_item(id="strong", title="Hooks in React with TypeScript",
                       content="useState patterns explained")
    profile = UserProfile(interests=["react"], tech_stack=["typescript"])

    ranked = scorer.score_multiple_items([weak, strong], profile, now=now)

    assert [item.id for item in ranked] == ["strong", "weak"]
    assert ranked[0].breakdown.diversity_penalty == 0.0
    assert ranked[1].breakdown.diversity_penalty > 0.0


def test_score_multiple_items_empty(scorer, developer_profile):
    assert scorer.score_multiple_items([], developer_profile) == []


def test_scored_item_keeps_item_fields(scorer, make_item, now, developer_profile):
    item = make_item(id="x1", title="React", url="https://example.com/x1", topics=["react"])

    scored = scorer.score_multiple_items([item], developer_profile, now=now)[0]

    assert scored.id == "x1"
    assert scored.url == "https://example.com/x1"
    assert scored.topics == ("react",)
    assert 0.0 <= scored.relevance_score <= 100.0


# Weights


def test_weights_are_normalized():
    weights = ScoreWeights(relevance=2, quality=2, recency=0, diversity=0)

    assert weights.relevance == pytest.approx(0.5)
    assert weights.quality == pytest.approx(0.5)
    assert sum(weights.as_dict().values()) == pytest.approx(1.0)


def test_negative_weights_are_clamped():
    weights = ScoreWeights(relevance=-1, quality=1, recency=0, diversity=0)

    assert weights.relevance == 0.0
    assert weights.quality == pytest.approx(1.0)


def test_zero_weights_fall_back_to_defaults():
    weights = ScoreWeights(relevance=0, quality=0, recency=0, diversity=0)

    assert weights.as_dict() == pytest.approx(ScoreWeights().as_dict())


def test_partial_weight_overrides():
    weights = ScoreWeights.from_overrides({"quality": 0.9, "unknown": 5})

    assert sum(weights.as_dict().values()) == pytest.approx(1.0)
    assert weights.quality == max(weights.as_dict().values())


def test_optimized_weights_by_depth(settings):
    detailed = get_optimized_weights(UserProfile(content_depth=ContentDepth.DETAILED), settings)
    brief = get_optimized_weights(UserProfile(content_depth="brief"), settings)

    assert detailed.as_dict() == pytest.approx(
        {"relevance": 0.4, "quality": 0.4, "recency": 0.1, "diversity": 0.1}
    )
    assert brief.as_dict() == pytest.approx(
        {"relevance": 0.4, "quality": 0.2, "recency": 0.3, "diversity": 0.1}
    )
    assert detailed.quality > brief.quality
    assert brief.recency > detailed.recency


def test_optimized_weights_follow_settings():
    settings = Settings(w_relevance=0.5, w_quality=0.2, w_recency=0.2, w_diversity=0.1)

    weights = get_optimized_weights(UserProfile(), settings)

    assert weights.relevance == pytest.approx(0.5)
    assert weights.quality == pytest.approx(0.3)
    assert sum(weights.as_dict().values()) == pytest.approx(1.0)
