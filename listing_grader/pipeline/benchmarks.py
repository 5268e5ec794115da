"""
Benchmark extractor - summarize what a category's exemplars look like.
"""
import logging
from collections import Counter
from datetime import datetime
from typing import Optional, Sequence, Union

import numpy as np

from ..config import Config, get_config
from ..models.benchmarks import CategoryBenchmarks, DistributionStats, TermFrequency
from ..models.listing import Exemplar, ListingRecord
from .text import count_bullets, days_since, strip_markup, tokenize, word_count


logger = logging.getLogger(__name__)


def summarize(values: Sequence[float]) -> Optional[DistributionStats]:
    """
    Population statistics of a sequence of numbers.
    Returns None for an empty sequence.
    """
    if not values:
        return None

    arr = np.asarray(values, dtype=float)
    return DistributionStats(
        n=int(arr.size),
        median=float(np.median(arr)),
        mean=float(np.mean(arr)),
        std=float(np.std(arr)),  # ddof=0
        p25=float(np.percentile(arr, 25)),
        p75=float(np.percentile(arr, 75)),
        min_value=float(np.min(arr)),
        max_value=float(np.max(arr)),
    )


class BenchmarkExtractor:
    """
    Computes CategoryBenchmarks from one category's exemplar sequence.
    """

    def __init__(self, config: Optional[Config] = None):
        self.config = (config or get_config()).rules

    def extract(
        self,
        exemplars: Sequence[Union[Exemplar, ListingRecord]],
        now: Optional[datetime] = None,
        category: Optional[str] = None,
    ) -> CategoryBenchmarks:
        """
        Summarize exemplar attributes.

        Args:
            exemplars: Non-empty exemplar sequence of one category
            now: Reference time; days-since-update stats are skipped without it
            category: Label stored on the benchmarks

        Returns:
            CategoryBenchmarks for the category
        """
        if exemplars is None:
            raise TypeError("exemplars must not be None")
        if len(exemplars) == 0:
            raise ValueError("cannot extract benchmarks from an empty exemplar sequence")

        listings = [e.listing if isinstance(e, Exemplar) else e for e in exemplars]
        scores = [e.quality_score for e in exemplars if isinstance(e, Exemplar)]
        if category is None and isinstance(exemplars[0], Exemplar):
            category = exemplars[0].category

        titles = [len(l.title) for l in listings]
        short_lengths = [len(strip_markup(l.short_description)) for l in listings]
        long_lengths = [len(strip_markup(l.long_description)) for l in listings]
        long_words = [word_count(l.long_description) for l in listings]
        tag_counts = [len(l.tags) for l in listings]
        bullets = [count_bullets(l.long_description) for l in listings]
        prices = [l.price for l in listings]
        images = [l.image_count for l in listings]
        videos = [l.video_count for l in listings]

        # Trust data is optional on listings; summarize only what exists
        ratings = [l.rating for l in listings if l.rating is not None]
        reviews = [l.review_count for l in listings if l.review_count is not None]
        days = []
        if now is not None:
            for listing in listings:
                d = days_since(listing.last_update, now)
                if d is not None:
                    days.append(d)

        image_stats = summarize(images)
        video_stats = summarize(videos)

        benchmarks = CategoryBenchmarks(
            category=category,
            sample_size=len(listings),
            title_length=summarize(titles),
            short_description_length=summarize(short_lengths),
            long_description_length=summarize(long_lengths),
            long_description_words=summarize(long_words),
            tag_count=summarize(tag_counts),
            bullet_count=summarize(bullets),
            price=summarize(prices),
            image_count=image_stats,
            video_count=video_stats,
            median_images=image_stats.median,
            median_videos=video_stats.median,
            video_presence_rate=sum(1 for v in videos if v > 0) / len(videos),
            rating=summarize(ratings),
            review_count=summarize(reviews),
            days_since_update=summarize(days),
            top_tags=self._top_tags(listings),
            top_title_keywords=self._top_title_keywords(listings),
            avg_quality_score=float(np.mean(scores)) if scores else 0.0,
        )

        logger.debug(
            f"Benchmarks for '{category}': n={benchmarks.sample_size}, "
            f"title median {benchmarks.title_length.median:.0f}, "
            f"images median {benchmarks.median_images:.1f}, "
            f"price median {benchmarks.price.median:.2f}"
        )
        return benchmarks

    def _top_tags(self, listings: list[ListingRecord]) -> list[TermFrequency]:
        """Most common tags, counted once per exemplar."""
        counter = Counter()
        for listing in listings:
            counter.update({tag.lower() for tag in listing.tags})
        return self._most_common(counter, self.config.top_tags)

    def _top_title_keywords(self, listings: list[ListingRecord]) -> list[TermFrequency]:
        counter = Counter()
        for listing in listings:
            counter.update(set(tokenize(listing.title)))
        return self._most_common(counter, self.config.top_title_keywords)

    @staticmethod
    def _most_common(counter: Counter, limit: int) -> list[TermFrequency]:
        # Alphabetical on equal counts so the vocabulary is reproducible
        ranked = sorted(counter.items(), key=lambda item: (-item[1], item[0]))
        return [TermFrequency(term=term, count=count) for term, count in ranked[:limit]]


def extract_benchmarks(
    exemplars: Sequence[Union[Exemplar, ListingRecord]],
    now: Optional[datetime] = None,
    config: Optional[Config] = None,
) -> CategoryBenchmarks:
    """Benchmarks of one category's exemplars; see BenchmarkExtractor."""
    return BenchmarkExtractor(config).extract(exemplars, now)
