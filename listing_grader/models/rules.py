"""
Rules models - weights, thresholds and confidence for grading one category.
"""
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from .benchmarks import CategoryBenchmarks


DIMENSIONS = ("content", "media", "trust", "findability")


class _Weights(BaseModel):
    """Sub-item weights of one dimension; the ceiling is their sum."""
    model_config = ConfigDict(frozen=True)

    @property
    def ceiling(self) -> float:
        return float(sum(getattr(self, name) for name in type(self).model_fields))

    def scaled(self, factor: float):
        """Return a copy with every sub-item multiplied by factor."""
        return self.model_copy(update={
            name: round(getattr(self, name) * factor, 3) for name in type(self).model_fields
        })


class ContentWeights(_Weights):
    title: float = 6
    short_description: float = 6
    long_description: float = 8
    bullets: float = 7
    cta: float = 3
    uvp: float = 5


class MediaWeights(_Weights):
    images: float = 8
    video: float = 8
    animated_preview: float = 4


class TrustWeights(_Weights):
    freshness: float = 6
    documentation: float = 3
    completeness: float = 2
    update_notes: float = 1
    rating: float = 4
    reviews: float = 3


class FindabilityWeights(_Weights):
    tag_coverage: float = 7
    title_keywords: float = 5
    price_position: float = 3


class WeightConfig(BaseModel):
    """Relative importance of the four grading dimensions and their items."""
    model_config = ConfigDict(frozen=True)

    content: ContentWeights = Field(default_factory=ContentWeights)
    media: MediaWeights = Field(default_factory=MediaWeights)
    trust: TrustWeights = Field(default_factory=TrustWeights)
    findability: FindabilityWeights = Field(default_factory=FindabilityWeights)

    def ceilings(self) -> dict[str, float]:
        return {name: getattr(self, name).ceiling for name in DIMENSIONS}

    @property
    def total(self) -> float:
        return sum(self.ceilings().values())


class ThresholdBand(BaseModel):
    """
    Cutoffs for an "at least" metric.
    Below minimum earns nothing, target earns full credit, above maximum (if set) earns nothing.
    """
    model_config = ConfigDict(frozen=True)

    minimum: float
    target: float
    excellent: float
    maximum: Optional[float] = None


class FreshnessThreshold(BaseModel):
    model_config = ConfigDict(frozen=True)

    # Full credit up to max_days, half credit up to twice that
    max_days: int = 180


class ThresholdConfig(BaseModel):
    """Numeric cutoffs the grader compares a listing against."""
    model_config = ConfigDict(frozen=True)

    title_length: ThresholdBand = ThresholdBand(minimum=50, target=60, excellent=70, maximum=80)
    short_description_length: ThresholdBand = ThresholdBand(minimum=120, target=150, excellent=170, maximum=180)
    long_description_words: ThresholdBand = ThresholdBand(minimum=300, target=350, excellent=500)
    bullets: ThresholdBand = ThresholdBand(minimum=4, target=6, excellent=8)
    images: ThresholdBand = ThresholdBand(minimum=3, target=5, excellent=8)
    videos: ThresholdBand = ThresholdBand(minimum=1, target=1, excellent=2)
    tags: ThresholdBand = ThresholdBand(minimum=5, target=10, excellent=15)
    rating: ThresholdBand = ThresholdBand(minimum=3.5, target=4.2, excellent=4.5)
    reviews: ThresholdBand = ThresholdBand(minimum=10, target=50, excellent=100)
    freshness: FreshnessThreshold = Field(default_factory=FreshnessThreshold)
    tag_coverage: ThresholdBand = ThresholdBand(minimum=0.35, target=0.6, excellent=0.8)
    title_keywords: ThresholdBand = ThresholdBand(minimum=1, target=2, excellent=3)
    max_price_z: float = Field(default=1.5, description="Largest |z| of price vs category still counted as in range")


class GradeBands(BaseModel):
    """Score-to-letter mapping; cutoffs are inclusive lower bounds."""
    model_config = ConfigDict(frozen=True)

    a: float = 90.0
    b: float = 80.0
    c: float = 70.0
    d: float = 60.0

    def letter_for(self, score: float) -> Literal["A", "B", "C", "D", "F"]:
        if score >= self.a:
            return "A"
        if score >= self.b:
            return "B"
        if score >= self.c:
            return "C"
        if score >= self.d:
            return "D"
        return "F"


class RuleConfidence(BaseModel):
    """How far the rules for a category can be trusted."""
    model_config = ConfigDict(frozen=True)

    level: Literal["high", "medium", "low"]
    sample_size: int
    relative_spread: float = Field(default=0.0, description="Mean std/mean across core benchmarks")
    explanation: str = ""


class CategoryRules(BaseModel):
    """
    Operational grading configuration for one category.
    Produced by the rule generator, consumed read-only by the grader.
    """
    model_config = ConfigDict(frozen=True)

    category: str
    weights: WeightConfig = Field(default_factory=WeightConfig)
    thresholds: ThresholdConfig = Field(default_factory=ThresholdConfig)
    grade_bands: GradeBands = Field(default_factory=GradeBands)
    confidence: RuleConfidence
    benchmarks: Optional[CategoryBenchmarks] = None

    # Which dimensions were tightened or relaxed relative to the defaults
    dimension_spread: dict[str, float] = Field(default_factory=dict)

    common_failures: list[str] = Field(default_factory=list)
    success_patterns: list[str] = Field(default_factory=list)

    is_fallback: bool = False


FALLBACK_RULES = CategoryRules(
    category="*",
    confidence=RuleConfidence(
        level="low",
        sample_size=0,
        explanation="Static defaults; not derived from exemplars",
    ),
    common_failures=[
        "Insufficient visual demonstrations (fewer than 3 images)",
        "Outdated listing (no update in over 2 years)",
        "Poor rating (below 3.5/5.0)",
        "Thin long description (under 300 words)",
    ],
    is_fallback=True,
)
