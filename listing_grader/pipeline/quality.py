"""
Quality scorer - rank listings within a category for exemplar selection.
"""
import math
import logging
from datetime import datetime
from typing import Optional

from ..config import Config, get_config
from ..models.listing import ListingRecord, QualityBreakdown
from .text import days_since, strip_markup


logger = logging.getLogger(__name__)


class QualityScorer:
    """
    Additive, category-agnostic quality score.
    Scores are only compared relatively, so there is no upper bound.
    """

    def __init__(self, config: Optional[Config] = None):
        self.config = (config or get_config()).quality

    def score(
        self,
        listing: ListingRecord,
        now: datetime,
        is_best_seller: bool = False,
    ) -> float:
        """Total quality score for one listing."""
        return self.breakdown(listing, now, is_best_seller).total

    def breakdown(
        self,
        listing: ListingRecord,
        now: datetime,
        is_best_seller: bool = False,
    ) -> QualityBreakdown:
        """
        Compute each weighted term of the quality score.

        Args:
            listing: The listing to score
            now: Reference time for freshness
            is_best_seller: Whether to add the best-seller bonus

        Returns:
            QualityBreakdown whose total is the quality score
        """
        if listing is None:
            raise TypeError("listing must not be None")

        cfg = self.config
        rating = listing.rating or 0.0
        reviews = listing.review_count or 0

        # rating x ln(1 + reviews)
        review_strength = rating * math.log1p(reviews) * cfg.review_weight
        freshness = self.freshness_credit(listing, now) * cfg.freshness_weight
        popularity = math.log1p(reviews + listing.favorite_count) * cfg.popularity_weight
        completeness = self.completeness_credit(listing) * cfg.completeness_weight
        bonus = cfg.best_seller_bonus if is_best_seller else 0.0

        result = QualityBreakdown(
            review_strength=review_strength,
            freshness=freshness,
            popularity=popularity,
            completeness=completeness,
            best_seller_bonus=bonus,
        )

        logger.debug(
            f"Quality score {result.total:.1f} for {listing.listing_id} "
            f"(reviews {review_strength:.1f}, fresh {freshness:.1f}, "
            f"popular {popularity:.1f}, complete {completeness:.1f})"
        )
        return result

    def freshness_credit(self, listing: ListingRecord, now: datetime) -> float:
        """Step credit for days since last update; 0 when the date is missing or unparseable."""
        days = days_since(listing.last_update, now)
        if days is None:
            return 0.0
        for max_days, credit in self.config.freshness_steps:
            if days <= max_days:
                return credit
        return self.config.stale_credit

    @staticmethod
    def completeness_credit(listing: ListingRecord) -> float:
        """Bounded 0-10 credit for media, description and tags."""
        score = 0.0

        # Images presence and count
        if listing.image_count >= 5:
            score += 3
        elif listing.image_count >= 3:
            score += 2
        elif listing.image_count >= 1:
            score += 1

        if listing.video_count > 0:
            score += 2

        # Description richness, markup stripped
        description = listing.long_description or listing.short_description
        length = len(strip_markup(description))
        if length >= 500:
            score += 3
        elif length >= 200:
            score += 2
        elif length >= 50:
            score += 1

        if len(listing.tags) >= 4:
            score += 2
        elif len(listing.tags) >= 2:
            score += 1

        return score


def compute_quality_score(
    listing: ListingRecord,
    now: datetime,
    config: Optional[Config] = None,
) -> float:
    """Quality score of a single listing."""
    return QualityScorer(config).score(listing, now)
