"""
Profile-based relevance scoring for content items.

Relevance is keyword driven: profile interests, tech stack and professional
role are matched as case-insensitive substrings of the item's title, body
and topics. Configured spelling variations also count when they appear as
whole words.
"""

import re
from dataclasses import dataclass

from ..config import CurationConfig, get_curation_config
from ..logging import get_logger
from ..types import ContentItem, UserProfile

logger = get_logger(__name__)


@dataclass
class RelevanceMatch:
    """Profile terms found in an item."""
    interests: list[str]
    tech_stack: list[str]
    role: bool

    @property
    def terms(self) -> list[str]:
        return self.interests + self.tech_stack


class RelevanceScorer:
    """Keyword relevance of content items against a user profile."""

    INTEREST_POINTS = 10
    INTEREST_CAP = 50
    TECH_POINTS = 8
    TECH_CAP = 40
    ROLE_BONUS = 10
    MAX_SCORE = 100

    def __init__(self, curation_config: CurationConfig | None = None):
        """Initialize relevance scorer."""
        config = curation_config or get_curation_config()
        self.keyword_variations = config.get_keyword_variations()

        # Variations only match as whole words ("ts" never inside "its")
        self.variation_patterns = {
            term: re.compile(r"\b(?:" + "|".join(re.escape(v) for v in variations) + r")\b")
            for term, variations in self.keyword_variations.items()
            if variations
        }

    @staticmethod
    def _search_text(item: ContentItem) -> str:
        return f"{item.title} {item.content} {' '.join(item.topics)}".lower()

    def is_text_match(self, text: str, term: str | None) -> bool:
        """Whether ``term`` or one of its variations occurs in lowercase ``text``.

        The term itself matches as a substring; variations match at word
        boundaries.
        """
        keyword = (term or "").strip().lower()
        if not keyword:
            return False
        if keyword in text:
            return True
        pattern = self.variation_patterns.get(keyword)
        return bool(pattern and pattern.search(text))

    def match_terms(self, item: ContentItem, profile: UserProfile) -> RelevanceMatch:
        """Find the profile terms present in an item."""
        text = self._search_text(item)
        return RelevanceMatch(
            interests=[term for term in profile.interests if self.is_text_match(text, term)],
            tech_stack=[term for term in profile.tech_stack if self.is_text_match(text, term)],
            role=self.is_text_match(text, profile.professional_role),
        )

    def score(self, item: ContentItem, profile: UserProfile) -> float:
        """Calculate relevance score (0 to 100)."""
        match = self.match_terms(item, profile)

        score = min(len(match.interests) * self.INTEREST_POINTS, self.INTEREST_CAP)
        score += min(len(match.tech_stack) * self.TECH_POINTS, self.TECH_CAP)
        if match.role:
            score += self.ROLE_BONUS

        return float(min(score, self.MAX_SCORE))


def relevance_score(item: ContentItem, profile: UserProfile) -> float:
    """Convenience function for relevance scoring."""
    return RelevanceScorer().score(item, profile)
