"""
Grading models - per-dimension scores and the final grade for one listing.
"""
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class DimensionScore(BaseModel):
    """Score for one grading dimension with the reasons points were lost."""
    model_config = ConfigDict(frozen=True)

    score: float = Field(ge=0)
    max_score: float = Field(ge=0)
    reasons: list[str] = Field(default_factory=list)

    @property
    def ratio(self) -> float:
        if self.max_score <= 0:
            return 0.0
        return self.score / self.max_score


class GradeBreakdown(BaseModel):
    """The four dimension sub-scores."""
    model_config = ConfigDict(frozen=True)

    content: DimensionScore
    media: DimensionScore
    trust: DimensionScore
    findability: DimensionScore

    def dimensions(self) -> dict[str, DimensionScore]:
        return {
            "content": self.content,
            "media": self.media,
            "trust": self.trust,
            "findability": self.findability,
        }


class GradeResult(BaseModel):
    """Complete grade for a candidate listing."""
    model_config = ConfigDict(frozen=True)

    listing_id: str
    category: str
    score: float = Field(ge=0, le=100, description="Composite score normalized to 0-100")
    letter: Literal["A", "B", "C", "D", "F"]
    breakdown: GradeBreakdown
    reasons: list[str] = Field(default_factory=list, description="Point deductions, content first")

    # Which rules produced this grade
    rules_category: str
    used_fallback: bool = False
    confidence: Literal["high", "medium", "low"]

    @property
    def weakest_dimension(self) -> str:
        """Dimension with the lowest share of its ceiling."""
        dims = self.breakdown.dimensions()
        return min(dims, key=lambda name: dims[name].ratio)
