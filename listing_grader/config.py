"""
Configuration and environment handling for the listing grader.
"""
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Load environment variables
load_dotenv()


class QualityConfig(BaseModel):
    """Weights for the corpus quality score used to rank exemplars."""
    review_weight: float = Field(default=10.0, description="Multiplier for rating x ln(1 + reviews)")
    freshness_weight: float = Field(default=5.0)
    popularity_weight: float = Field(default=3.0)
    completeness_weight: float = Field(default=8.0)
    best_seller_bonus: float = Field(default=100.0, description="Added once for pinned best sellers")

    # (max days since update, credit) steps, checked in order
    freshness_steps: list[tuple[int, float]] = Field(
        default_factory=lambda: [(180, 10.0), (365, 7.0), (730, 4.0)]
    )
    stale_credit: float = Field(default=1.0, description="Credit beyond the last freshness step")


class SelectionConfig(BaseModel):
    """Exemplar selection defaults."""
    top_n: int = Field(default=20, ge=1, description="Exemplars kept per category")
    top_percent: Optional[float] = Field(
        default=None,
        gt=0,
        le=100,
        description="Keep this percentage of each category instead of a fixed count",
    )


class RuleGenerationConfig(BaseModel):
    """Benchmark-to-rules derivation settings."""
    min_sample_size: int = Field(default=3, ge=1, description="Below this, fallback rules are used")
    high_confidence_sample: int = Field(default=15)
    medium_confidence_sample: int = Field(default=5)
    max_relative_spread: float = Field(
        default=0.5,
        description="Mean std/mean of core benchmarks allowed for high confidence",
    )
    weight_nudge: float = Field(default=0.25, ge=0, lt=1, description="Max fractional weight shift per dimension")
    top_tags: int = Field(default=15)
    top_title_keywords: int = Field(default=25)
    min_freshness_days: int = Field(default=90, description="Never require updates more often than this")


class GradeBandConfig(BaseModel):
    """Letter-grade cutoffs on the 0-100 composite."""
    a: float = Field(default=90.0)
    b: float = Field(default=80.0)
    c: float = Field(default=70.0)
    d: float = Field(default=60.0)


class PathsConfig(BaseModel):
    """File locations."""
    rules_file: Path = Field(
        default_factory=lambda: Path(os.getenv("LISTING_GRADER_RULES_FILE", "data/category_rules.json"))
    )


class Config(BaseModel):
    """Main configuration."""
    quality: QualityConfig = Field(default_factory=QualityConfig)
    selection: SelectionConfig = Field(default_factory=SelectionConfig)
    rules: RuleGenerationConfig = Field(default_factory=RuleGenerationConfig)
    grade_bands: GradeBandConfig = Field(default_factory=GradeBandConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)

    log_level: str = Field(default_factory=lambda: os.getenv("LISTING_GRADER_LOG_LEVEL", "INFO"))


# Singleton config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create the singleton config instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config
