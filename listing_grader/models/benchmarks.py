"""
Benchmark models - distribution summaries of a category's exemplars.
"""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class DistributionStats(BaseModel):
    """Population statistics for one numeric exemplar attribute."""
    model_config = ConfigDict(frozen=True)

    n: int = Field(description="Number of values summarized")
    median: float
    mean: float
    std: float = Field(ge=0, description="Population standard deviation")
    p25: float = Field(description="25th percentile")
    p75: float = Field(description="75th percentile")
    min_value: float
    max_value: float

    @property
    def iqr(self) -> float:
        return self.p75 - self.p25

    @property
    def relative_spread(self) -> float:
        """std / mean; an all-zero attribute counts as perfectly consistent."""
        if self.mean <= 0:
            return 0.0
        return self.std / self.mean


class TermFrequency(BaseModel):
    """A vocabulary term and how many exemplars used it."""
    model_config = ConfigDict(frozen=True)

    term: str
    count: int


class CategoryBenchmarks(BaseModel):
    """
    Statistics of a category's exemplar set.
    Describes what good looks like, not what is typical.
    """
    model_config = ConfigDict(frozen=True)

    category: Optional[str] = None
    sample_size: int

    # Content
    title_length: DistributionStats
    short_description_length: DistributionStats
    long_description_length: DistributionStats
    long_description_words: DistributionStats
    tag_count: DistributionStats
    bullet_count: DistributionStats

    # Pricing
    price: DistributionStats

    # Media
    image_count: DistributionStats
    video_count: DistributionStats
    median_images: float
    median_videos: float
    video_presence_rate: float = Field(ge=0, le=1, description="Share of exemplars with at least one video")

    # Trust signals, only when the exemplars carry the data
    rating: Optional[DistributionStats] = None
    review_count: Optional[DistributionStats] = None
    days_since_update: Optional[DistributionStats] = None

    # Vocabulary
    top_tags: list[TermFrequency] = Field(default_factory=list)
    top_title_keywords: list[TermFrequency] = Field(default_factory=list)

    avg_quality_score: float = 0.0
