"""
Pipeline orchestrator - runs the batch pass from corpus to rules file.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Iterable, Optional, Sequence

from ..config import Config, get_config
from ..models.listing import Exemplar, ListingRecord
from ..models.rules import CategoryRules
from ..models.export import RulesFile, RulesFileMetadata

from .exemplars import ExemplarSelector
from .benchmarks import BenchmarkExtractor
from .rules import RuleGenerator


logger = logging.getLogger(__name__)


def run_batch(
    corpus: Sequence[ListingRecord],
    now: datetime,
    *,
    count: Optional[int] = None,
    percent: Optional[float] = None,
    best_sellers: Optional[Iterable[str]] = None,
    max_workers: int = 1,
    config: Optional[Config] = None,
) -> RulesFile:
    """
    Run the full batch pass.

    Pipeline steps:
    1. Score every listing and select exemplars per category
    2. Extract benchmarks from each category's exemplars
    3. Generate rules per category, falling back when the sample is too small
    4. Assemble the rules file with run metadata

    Args:
        corpus: All listings; read-only
        now: Reference time for freshness and the generation timestamp
        count: Exemplars per category
        percent: Share of each category to keep instead of a count
        best_sellers: Listing ids or URLs always kept as exemplars
        max_workers: Threads for the per-category stages
        config: Settings; defaults from get_config()

    Returns:
        RulesFile ready to be saved and loaded by the grader
    """
    if corpus is None:
        raise TypeError("corpus must not be None")
    if max_workers < 1:
        raise ValueError(f"max_workers must be at least 1, got {max_workers}")

    config = config or get_config()
    selector = ExemplarSelector(count=count, percent=percent, config=config)
    extractor = BenchmarkExtractor(config)
    generator = RuleGenerator(config)

    logger.info(f"Starting batch run over {len(corpus)} listings")

    # Step 1: Select exemplars
    logger.info("Step 1: Selecting exemplars")
    exemplar_sets = selector.select(corpus, now, best_sellers)

    # Steps 2-3: Benchmarks and rules per category
    def derive(category: str, exemplars: list[Exemplar]) -> CategoryRules:
        benchmarks = extractor.extract(exemplars, now, category=category)
        return generator.generate(benchmarks, len(exemplars), category=category)

    logger.info(f"Steps 2-3: Deriving rules for {len(exemplar_sets)} categories")
    if max_workers > 1 and len(exemplar_sets) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            futures = {
                category: pool.submit(derive, category, exemplars)
                for category, exemplars in exemplar_sets.items()
            }
            # Collected in category order, not completion order
            derived = {category: future.result() for category, future in futures.items()}
    else:
        derived = {
            category: derive(category, exemplars)
            for category, exemplars in exemplar_sets.items()
        }

    # Step 4: Assemble
    rules = {}
    fallback_categories = []
    confidence_distribution = {"high": 0, "medium": 0, "low": 0}
    for category, category_rules in derived.items():
        if category_rules.is_fallback:
            fallback_categories.append(category)
            continue
        rules[category] = category_rules
        confidence_distribution[category_rules.confidence.level] += 1

    exemplar_counts = {category: len(exemplars) for category, exemplars in exemplar_sets.items()}
    metadata = RulesFileMetadata(
        generated_at=now,
        corpus_size=len(corpus),
        selection=selector.description,
        total_categories=len(exemplar_sets),
        total_exemplars=sum(exemplar_counts.values()),
        exemplar_counts=exemplar_counts,
        fallback_categories=fallback_categories,
        confidence_distribution=confidence_distribution,
    )

    if fallback_categories:
        logger.warning(
            f"{len(fallback_categories)} categories use fallback rules: {', '.join(fallback_categories)}"
        )
    logger.info(
        f"Batch run completed: {len(rules)} categories with rules "
        f"(high {confidence_distribution['high']}, medium {confidence_distribution['medium']}, "
        f"low {confidence_distribution['low']})"
    )
    return RulesFile(metadata=metadata, rules=rules)
