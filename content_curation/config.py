"""Configuration management for the Content Curation Engine."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CURATION_CONFIG = Path(__file__).parent / "curation.yaml"


class QualityAllowLists(BaseModel):
    """Curated sources and categories that earn a quality bonus."""
    reddit_subreddits: list[str] = Field(default_factory=list)
    aggregator_categories: list[str] = Field(default_factory=list)


class Settings(BaseSettings):
    """Main application settings."""

    # ── Deduplication ──────────────────────────────────────────────────────
    url_similarity_threshold: float = Field(0.8, description="URL similarity threshold")
    title_similarity_threshold: float = Field(0.85, description="Title similarity threshold")
    content_similarity_threshold: float = Field(0.7, description="Body similarity threshold")
    transitive_dedupe: bool = Field(
        False, description="Cluster duplicates transitively (union-find) instead of a single sweep"
    )

    # ── Scoring Weights ────────────────────────────────────────────────────
    w_relevance: float = Field(0.4, description="Relevance weight")
    w_quality: float = Field(0.3, description="Quality weight")
    w_recency: float = Field(0.2, description="Recency weight")
    w_diversity: float = Field(0.1, description="Diversity penalty weight")
    depth_weight_shift: float = Field(
        0.1, description="Weight moved between recency and quality by content depth"
    )

    # ── Ranking ────────────────────────────────────────────────────────────
    max_age_hours: float = Field(168.0, description="Age at which recency score reaches zero")
    min_relevance_score: float = Field(30.0, description="Minimum combined score kept by the pipeline")
    max_items: int = Field(20, description="Maximum items handed to storage per run")

    # ── Curation Data ──────────────────────────────────────────────────────
    curation_config_path: Path = Field(
        DEFAULT_CURATION_CONFIG, description="YAML file with allow-lists and keyword variations"
    )

    # ── Logging ────────────────────────────────────────────────────────────
    log_level: str = Field("INFO", description="Log level")
    json_logging: bool = Field(True, description="Enable JSON logging")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("w_relevance", "w_quality", "w_recency", "w_diversity", "depth_weight_shift")
    @classmethod
    def validate_weights(cls, v: float) -> float:
        """Validate weight values are between 0 and 1."""
        if not 0 <= v <= 1:
            raise ValueError("Weight must be between 0 and 1")
        return v

    @field_validator(
        "url_similarity_threshold", "title_similarity_threshold", "content_similarity_threshold"
    )
    @classmethod
    def validate_threshold(cls, v: float) -> float:
        """Validate similarity thresholds."""
        if not 0 <= v <= 1:
            raise ValueError("Similarity threshold must be between 0 and 1")
        return v

    @field_validator("max_age_hours")
    @classmethod
    def validate_max_age(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("max_age_hours must be positive")
        return v


class CurationConfig:
    """Curation data loader (allow-lists and keyword variations)."""

    def __init__(self, config_path: str | Path = DEFAULT_CURATION_CONFIG):
        self.config_path = Path(config_path)
        self._config: dict[str, Any] = {}
        self.load_config()

    def load_config(self) -> None:
        """Load curation data from YAML file."""
        if not self.config_path.exists():
            raise FileNotFoundError(f"Curation config file not found: {self.config_path}")

        with open(self.config_path, encoding="utf-8") as f:
            self._config = yaml.safe_load(f) or {}

    def get_quality_allow_lists(self) -> QualityAllowLists:
        """Get quality allow-lists."""
        return QualityAllowLists(**self._config.get("quality_allow_lists", {}))

    def get_keyword_variations(self) -> dict[str, list[str]]:
        """Get keyword variations, keyed by lowercase term."""
        variations = self._config.get("keyword_variations", {})
        return {
            term.lower(): [v.lower() for v in values]
            for term, values in variations.items()
        }


# Global instances
settings = Settings()
curation_config = CurationConfig(settings.curation_config_path)


def get_settings() -> Settings:
    """Get application settings."""
    return settings


def get_curation_config() -> CurationConfig:
    """Get curation data configuration."""
    return curation_config


def validate_config(settings: Settings) -> bool:
    """Validate configuration completeness."""
    try:
        weight_sum = (
            settings.w_relevance
            + settings.w_quality
            + settings.w_recency
            + settings.w_diversity
        )
        if abs(weight_sum - 1.0) > 0.01:
            raise ValueError(f"Scoring weights sum to {weight_sum}, should be 1.0")

        config = CurationConfig(settings.curation_config_path)
        config.get_quality_allow_lists()

        return True

    except Exception as e:
        print(f"Configuration validation failed: {e}")
        return False


if __name__ == "__main__":
    if validate_config(get_settings()):
        print("✅ Configuration is valid")
    else:
        print("❌ Configuration validation failed")
        exit(1)
