"""
Pydantic models for the listing grader.
All data contracts are defined here for strict validation.
"""

from .listing import ListingRecord, QualityBreakdown, Exemplar
from .benchmarks import DistributionStats, TermFrequency, CategoryBenchmarks
from .rules import (
    ContentWeights,
    MediaWeights,
    TrustWeights,
    FindabilityWeights,
    WeightConfig,
    ThresholdBand,
    FreshnessThreshold,
    ThresholdConfig,
    GradeBands,
    RuleConfidence,
    CategoryRules,
    FALLBACK_RULES,
)
from .grading import DimensionScore, GradeBreakdown, GradeResult
from .export import RulesFileMetadata, RulesFile

__all__ = [
    # Listing
    "ListingRecord",
    "QualityBreakdown",
    "Exemplar",
    # Benchmarks
    "DistributionStats",
    "TermFrequency",
    "CategoryBenchmarks",
    # Rules
    "ContentWeights",
    "MediaWeights",
    "TrustWeights",
    "FindabilityWeights",
    "WeightConfig",
    "ThresholdBand",
    "FreshnessThreshold",
    "ThresholdConfig",
    "GradeBands",
    "RuleConfidence",
    "CategoryRules",
    "FALLBACK_RULES",
    # Grading
    "DimensionScore",
    "GradeBreakdown",
    "GradeResult",
    # Export
    "RulesFileMetadata",
    "RulesFile",
]
