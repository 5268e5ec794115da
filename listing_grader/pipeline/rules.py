"""
Rule generator - turn a category's benchmarks into grading rules.
"""
import math
import logging
from typing import Optional

import numpy as np

from ..config import Config, get_config
from ..models.benchmarks import CategoryBenchmarks, DistributionStats
from ..models.rules import (
    DIMENSIONS,
    CategoryRules,
    FALLBACK_RULES,
    FreshnessThreshold,
    GradeBands,
    RuleConfidence,
    ThresholdBand,
    ThresholdConfig,
    WeightConfig,
)


logger = logging.getLogger(__name__)


# Benchmarks whose dispersion decides confidence
CORE_BENCHMARKS = ("title_length", "short_description_length", "long_description_words", "tag_count")

# Benchmarks whose dispersion nudges each dimension's weight
DIMENSION_BENCHMARKS = {
    "content": ("title_length", "short_description_length", "long_description_words", "bullet_count"),
    "media": ("image_count", "video_count"),
    "trust": ("rating", "review_count", "days_since_update"),
    "findability": ("tag_count", "price"),
}

# Relative spread is capped so one wild attribute cannot flatten a dimension
MAX_SPREAD = 2.0


class RuleGenerator:
    """
    Derives CategoryRules from benchmarks.
    Thresholds follow the exemplar quartiles, weights favour the dimensions
    where top listings agree most.
    """

    def __init__(self, config: Optional[Config] = None):
        config = config or get_config()
        self.config = config.rules
        self.grade_bands = GradeBands(**config.grade_bands.model_dump())

    def generate(
        self,
        benchmarks: CategoryBenchmarks,
        sample_size: int,
        category: Optional[str] = None,
    ) -> CategoryRules:
        """
        Build the rules for one category.

        Args:
            benchmarks: Statistics of the category's exemplars
            sample_size: Number of exemplars behind the benchmarks
            category: Category name; defaults to the benchmarks' category

        Returns:
            CategoryRules, or FALLBACK_RULES itself when the sample is below the floor
        """
        if benchmarks is None:
            raise TypeError("benchmarks must not be None")
        if sample_size < 0:
            raise ValueError(f"sample_size must not be negative, got {sample_size}")

        category = category or benchmarks.category or FALLBACK_RULES.category

        if sample_size < self.config.min_sample_size:
            logger.warning(
                f"Category '{category}' has {sample_size} exemplars "
                f"(floor {self.config.min_sample_size}), using fallback rules"
            )
            return FALLBACK_RULES

        spreads = self.dimension_spreads(benchmarks)
        confidence = self.assess_confidence(benchmarks, sample_size)
        weights = self.derive_weights(spreads)
        thresholds = self.derive_thresholds(benchmarks)

        rules = CategoryRules(
            category=category,
            weights=weights,
            thresholds=thresholds,
            grade_bands=self.grade_bands,
            confidence=confidence,
            benchmarks=benchmarks,
            dimension_spread={name: round(value, 4) for name, value in spreads.items()},
            common_failures=self._failure_patterns(thresholds, benchmarks),
            success_patterns=self._success_patterns(benchmarks),
        )

        logger.info(
            f"Rules for '{category}': {confidence.level} confidence from {sample_size} exemplars, "
            f"ceilings {', '.join(f'{k} {v:.1f}' for k, v in weights.ceilings().items())}"
        )
        return rules

    def assess_confidence(self, benchmarks: CategoryBenchmarks, sample_size: int) -> RuleConfidence:
        """High needs a large and consistent sample; medium needs a moderate one."""
        cfg = self.config
        spread = float(np.mean([
            _spread(getattr(benchmarks, name)) for name in CORE_BENCHMARKS
        ]))

        if sample_size >= cfg.high_confidence_sample and spread <= cfg.max_relative_spread:
            level = "high"
            explanation = f"{sample_size} exemplars with consistent benchmarks (spread {spread:.2f})"
        elif sample_size >= cfg.medium_confidence_sample:
            level = "medium"
            if sample_size >= cfg.high_confidence_sample:
                explanation = f"{sample_size} exemplars but widely spread benchmarks (spread {spread:.2f})"
            else:
                explanation = f"Moderate sample of {sample_size} exemplars"
        else:
            level = "low"
            explanation = f"Only {sample_size} exemplars; benchmarks may not be representative"

        return RuleConfidence(
            level=level,
            sample_size=sample_size,
            relative_spread=round(spread, 4),
            explanation=explanation,
        )

    @staticmethod
    def dimension_spreads(benchmarks: CategoryBenchmarks) -> dict[str, float]:
        """Mean relative spread of each dimension's benchmarks; dimensions without data are left out."""
        spreads = {}
        for dimension, names in DIMENSION_BENCHMARKS.items():
            values = [
                _spread(getattr(benchmarks, name))
                for name in names
                if getattr(benchmarks, name) is not None
            ]
            if values:
                spreads[dimension] = float(np.mean(values))
        return spreads

    def derive_weights(self, spreads: dict[str, float]) -> WeightConfig:
        """
        Nudge default dimension weights toward consistent dimensions.
        The total of all ceilings stays equal to the defaults.
        """
        defaults = WeightConfig()
        if not spreads:
            return defaults

        nudge = self.config.weight_nudge
        consistency = {name: 1.0 / (1.0 + spread) for name, spread in spreads.items()}
        mean_consistency = float(np.mean(list(consistency.values())))

        factors = {}
        for name in DIMENSIONS:
            if name not in consistency or mean_consistency <= 0:
                factors[name] = 1.0
                continue
            shift = nudge * (consistency[name] - mean_consistency) / mean_consistency
            factors[name] = float(np.clip(1.0 + shift, 1.0 - nudge, 1.0 + nudge))

        ceilings = defaults.ceilings()
        nudged_total = sum(ceilings[name] * factors[name] for name in DIMENSIONS)
        norm = defaults.total / nudged_total

        return WeightConfig(**{
            name: getattr(defaults, name).scaled(factors[name] * norm) for name in DIMENSIONS
        })

    def derive_thresholds(self, benchmarks: CategoryBenchmarks) -> ThresholdConfig:
        """Minimum at the 25th percentile, target at the median, excellent at the 75th."""
        base = FALLBACK_RULES.thresholds

        freshness = base.freshness
        days = benchmarks.days_since_update
        if days is not None:
            freshness = FreshnessThreshold(
                max_days=max(math.ceil(days.p75), self.config.min_freshness_days),
            )

        return ThresholdConfig(
            title_length=_band(benchmarks.title_length, base.title_length, bounded=True),
            short_description_length=_band(
                benchmarks.short_description_length, base.short_description_length, bounded=True
            ),
            long_description_words=_band(benchmarks.long_description_words, base.long_description_words),
            bullets=_band(benchmarks.bullet_count, base.bullets),
            images=_band(benchmarks.image_count, base.images),
            videos=_band(benchmarks.video_count, base.videos),
            tags=_band(benchmarks.tag_count, base.tags),
            rating=_band(benchmarks.rating, base.rating, precision=1),
            reviews=_band(benchmarks.review_count, base.reviews),
            freshness=freshness,
            tag_coverage=base.tag_coverage,
            title_keywords=base.title_keywords,
            max_price_z=base.max_price_z,
        )

    def _success_patterns(self, benchmarks: CategoryBenchmarks) -> list[str]:
        patterns = []

        if benchmarks.median_images >= 6:
            patterns.append(f"Top listings in this category typically have {int(benchmarks.median_images)}+ images")
        if benchmarks.video_presence_rate > 0.7:
            patterns.append(f"{benchmarks.video_presence_rate:.0%} of top listings include a video")
        if benchmarks.rating is not None and benchmarks.rating.median >= 4.5:
            patterns.append(f"Top listings keep ratings around {benchmarks.rating.median:.1f}/5.0")
        if benchmarks.bullet_count.median >= 4:
            patterns.append(f"Descriptions list about {int(benchmarks.bullet_count.median)} feature bullets")
        if benchmarks.top_tags:
            terms = ", ".join(t.term for t in benchmarks.top_tags[:5])
            patterns.append(f"Most used tags: {terms}")

        return patterns

    @staticmethod
    def _failure_patterns(thresholds: ThresholdConfig, benchmarks: CategoryBenchmarks) -> list[str]:
        failures = [
            f"Fewer than {thresholds.images.minimum:g} images",
            f"Long description under {thresholds.long_description_words.minimum:g} words",
            f"Fewer than {thresholds.tags.minimum:g} tags",
            f"No update in over {thresholds.freshness.max_days} days",
        ]
        if benchmarks.video_presence_rate >= 0.5:
            failures.append("No video demonstration")
        if benchmarks.rating is not None:
            failures.append(f"Rating below {thresholds.rating.minimum:.1f}/5.0")
        return failures


def _spread(stats: Optional[DistributionStats]) -> float:
    if stats is None:
        return 0.0
    return min(stats.relative_spread, MAX_SPREAD)


def _band(
    stats: Optional[DistributionStats],
    default: ThresholdBand,
    bounded: bool = False,
    precision: int = 0,
) -> ThresholdBand:
    """
    Threshold band from a distribution, or the default when there is none.
    A bounded band also gets an upper limit well past the 75th percentile.
    """
    if stats is None:
        return default

    scale = 10 ** precision
    minimum = math.floor(stats.p25 * scale) / scale

    maximum = None
    if bounded and stats.p75 > 0:
        maximum = float(math.ceil(max(stats.p75 + 1.5 * stats.iqr, stats.p75 * 1.25)))

    return ThresholdBand(
        minimum=minimum,
        target=stats.median,
        excellent=stats.p75,
        maximum=maximum,
    )


def generate_rules(
    benchmarks: CategoryBenchmarks,
    sample_size: int,
    config: Optional[Config] = None,
) -> CategoryRules:
    """Rules for one category; FALLBACK_RULES when the sample is too small."""
    return RuleGenerator(config).generate(benchmarks, sample_size)
