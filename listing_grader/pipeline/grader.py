"""
Grader - score a candidate listing against its category's rules.
"""
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from ..models.listing import ListingRecord
from ..models.rules import CategoryRules, FALLBACK_RULES, ThresholdBand
from ..models.grading import DimensionScore, GradeBreakdown, GradeResult
from ..models.export import RulesFile
from ..storage import load_rules_file
from .exemplars import UNCATEGORIZED, normalize_category
from .text import (
    category_terms,
    count_bullets,
    days_since,
    has_cta,
    has_documentation,
    has_update_notes,
    has_uvp,
    strip_markup,
    tag_tokens,
    tokenize,
    word_count,
)


logger = logging.getLogger(__name__)


def band_credit(value: float, band: ThresholdBand) -> float:
    """
    Share of an item's weight earned by value.
    Full at or above target, 50-100% between minimum and target, nothing
    below minimum or above the optional maximum.
    """
    if band.maximum is not None and value > band.maximum:
        return 0.0
    if value >= band.target:
        return 1.0
    if value < band.minimum:
        return 0.0
    return 0.5 + 0.5 * (value - band.minimum) / (band.target - band.minimum)


class _Items:
    """Collects weighted item scores and reasons for one dimension."""

    def __init__(self, weights):
        self.weights = weights
        self.score = 0.0
        self.reasons = []

    def add(self, item: str, credit: float, reason: Optional[str] = None):
        self.score += getattr(self.weights, item) * credit
        if credit < 1.0 and reason:
            self.reasons.append(reason)

    def result(self) -> DimensionScore:
        ceiling = self.weights.ceiling
        return DimensionScore(
            score=round(min(self.score, ceiling), 3),
            max_score=round(ceiling, 3),
            reasons=self.reasons,
        )


class Grader:
    """
    Applies one CategoryRules object to candidate listings.
    Stateless between calls; a single instance can be shared across threads.
    """

    def __init__(self, rules: Optional[CategoryRules] = None):
        self.rules = rules or FALLBACK_RULES

    def grade(
        self,
        listing: ListingRecord,
        now: datetime,
        category: Optional[str] = None,
    ) -> GradeResult:
        """
        Grade a listing.

        Args:
            listing: The candidate listing
            now: Reference time for freshness, always supplied by the caller
            category: Category to grade under; derived from the listing when omitted

        Returns:
            GradeResult with composite score, letter and reasons
        """
        if listing is None:
            raise TypeError("listing must not be None")
        if now is None:
            raise TypeError("now must be supplied explicitly")

        category = (category or "").strip().strip("/") or normalize_category(listing)

        content = self._score_content(listing)
        media = self._score_media(listing)
        trust = self._score_trust(listing, category, now)
        findability = self._score_findability(listing, category)
        breakdown = GradeBreakdown(content=content, media=media, trust=trust, findability=findability)

        earned = sum(d.score for d in breakdown.dimensions().values())
        ceiling = sum(d.max_score for d in breakdown.dimensions().values())
        score = 100.0 * earned / ceiling if ceiling > 0 else 0.0
        score = round(max(0.0, min(100.0, score)), 1)

        reasons = []
        for dimension in breakdown.dimensions().values():
            reasons.extend(dimension.reasons)

        result = GradeResult(
            listing_id=listing.listing_id,
            category=category,
            score=score,
            letter=self.rules.grade_bands.letter_for(score),
            breakdown=breakdown,
            reasons=reasons,
            rules_category=self.rules.category,
            used_fallback=self.rules.is_fallback,
            confidence=self.rules.confidence.level,
        )

        logger.debug(
            f"Graded {listing.listing_id} under '{self.rules.category}': {score} ({result.letter}); "
            f"content {content.score:.1f}/{content.max_score:.1f}, "
            f"media {media.score:.1f}/{media.max_score:.1f}, "
            f"trust {trust.score:.1f}/{trust.max_score:.1f}, "
            f"findability {findability.score:.1f}/{findability.max_score:.1f}"
        )
        return result

    def _score_content(self, listing: ListingRecord) -> DimensionScore:
        t = self.rules.thresholds
        items = _Items(self.rules.weights.content)

        title_length = len(listing.title.strip())
        if title_length == 0:
            items.add("title", 0.0, "Title is missing")
        else:
            items.add(
                "title",
                band_credit(title_length, t.title_length),
                _length_reason("Title", title_length, "characters", t.title_length),
            )

        short_length = len(strip_markup(listing.short_description))
        if short_length == 0:
            items.add("short_description", 0.0, "Short description is missing")
        else:
            items.add(
                "short_description",
                band_credit(short_length, t.short_description_length),
                _length_reason("Short description", short_length, "characters", t.short_description_length),
            )

        words = word_count(listing.long_description)
        if words == 0:
            items.add("long_description", 0.0, "Long description is missing")
        else:
            items.add(
                "long_description",
                band_credit(words, t.long_description_words),
                _length_reason("Long description", words, "words", t.long_description_words),
            )

        bullets = count_bullets(listing.long_description)
        items.add(
            "bullets",
            band_credit(bullets, t.bullets),
            f"Only {bullets} feature bullets (aim for {t.bullets.target:g})",
        )

        text = f"{listing.short_description} {listing.long_description}"
        items.add("cta", 1.0 if has_cta(text) else 0.0, "No call to action in the description")

        opening = listing.short_description or listing.long_description
        items.add(
            "uvp",
            1.0 if has_uvp(opening) else 0.0,
            "Opening line does not say what the asset is for",
        )

        return items.result()

    def _score_media(self, listing: ListingRecord) -> DimensionScore:
        t = self.rules.thresholds
        items = _Items(self.rules.weights.media)

        if listing.image_count == 0:
            items.add("images", 0.0, "No images provided")
        else:
            items.add(
                "images",
                band_credit(listing.image_count, t.images),
                f"Only {listing.image_count} images (aim for {t.images.target:g})",
            )

        if listing.video_count == 0:
            items.add("video", band_credit(0, t.videos), "No video demonstration")
        else:
            items.add(
                "video",
                band_credit(listing.video_count, t.videos),
                f"Only {listing.video_count} videos (aim for {t.videos.target:g})",
            )

        # Unknown preview status falls back to whether any video exists
        preview = listing.has_animated_preview
        if preview is None:
            preview = listing.video_count > 0
        items.add("animated_preview", 1.0 if preview else 0.0, "No animated preview")

        return items.result()

    def _score_trust(self, listing: ListingRecord, category: str, now: datetime) -> DimensionScore:
        t = self.rules.thresholds
        items = _Items(self.rules.weights.trust)

        days = days_since(listing.last_update, now)
        max_days = t.freshness.max_days
        if days is None:
            items.add("freshness", 0.0, "No last update date")
        elif days <= max_days:
            items.add("freshness", 1.0)
        elif days <= 2 * max_days:
            items.add("freshness", 0.5, f"Last updated {days} days ago (aim for under {max_days})")
        else:
            items.add("freshness", 0.0, f"Outdated listing: last updated {days} days ago")

        text = f"{listing.short_description} {listing.long_description}"
        items.add(
            "documentation",
            1.0 if has_documentation(text) else 0.0,
            "No documentation or tutorial mentioned",
        )

        present = {
            "title": bool(listing.title.strip()),
            "short description": bool(listing.short_description.strip()),
            "long description": bool(listing.long_description.strip()),
            "tags": bool(listing.tags),
            "images": listing.image_count > 0,
            "category": bool(category) and category != UNCATEGORIZED,
        }
        missing = [name for name, ok in present.items() if not ok]
        items.add(
            "completeness",
            (len(present) - len(missing)) / len(present),
            f"Listing is incomplete: missing {', '.join(missing)}",
        )

        notes = bool(listing.release_notes and listing.release_notes.strip())
        items.add(
            "update_notes",
            1.0 if notes or has_update_notes(listing.long_description) else 0.0,
            "No update notes or changelog",
        )

        if listing.rating is None:
            items.add("rating", 0.0, "No ratings yet")
        else:
            items.add(
                "rating",
                band_credit(listing.rating, t.rating),
                f"Rating {listing.rating:.1f}/5.0 is below the category target of {t.rating.target:.1f}",
            )

        reviews = listing.review_count or 0
        if reviews == 0:
            items.add("reviews", 0.0, "No reviews yet")
        else:
            items.add(
                "reviews",
                band_credit(reviews, t.reviews),
                f"Only {reviews} reviews (category target {t.reviews.target:g})",
            )

        return items.result()

    def _score_findability(self, listing: ListingRecord, category: str) -> DimensionScore:
        t = self.rules.thresholds
        benchmarks = self.rules.benchmarks
        items = _Items(self.rules.weights.findability)

        hierarchy = [] if category == UNCATEGORIZED else category_terms(category)
        top_tags = []
        top_keywords = []
        if benchmarks is not None:
            reference_size = max(1, int(round(t.tags.target)))
            top_tags = [tf.term for tf in benchmarks.top_tags[:reference_size]]
            top_keywords = [tf.term for tf in benchmarks.top_title_keywords]

        # Tag coverage
        if not listing.tags:
            items.add("tag_coverage", 0.0, "No tags provided")
        else:
            tokens = tag_tokens(listing.tags)
            shares = []
            if hierarchy:
                shares.append(sum(1 for term in hierarchy if term in tokens) / len(hierarchy))
            if top_tags:
                shares.append(sum(1 for term in top_tags if term in tokens) / len(top_tags))

            if shares:
                coverage = sum(shares) / len(shares)
                missing_terms = [term for term in hierarchy + top_tags if term not in tokens]
                items.add(
                    "tag_coverage",
                    band_credit(coverage, t.tag_coverage),
                    f"Tags cover {coverage:.0%} of the category's key terms"
                    + (f"; consider: {', '.join(dict.fromkeys(missing_terms[:5]))}" if missing_terms else ""),
                )
            else:
                # Nothing to compare against; judge on tag count alone
                items.add(
                    "tag_coverage",
                    band_credit(len(listing.tags), t.tags),
                    f"Only {len(listing.tags)} tags (aim for {t.tags.target:g})",
                )

        # Title keywords; short hierarchy terms such as "3d" count too
        vocabulary = set(hierarchy) | set(top_keywords)
        matched = {token for token in tokenize(listing.title, min_length=1) if token in vocabulary}
        if not listing.title.strip():
            items.add("title_keywords", 0.0, "Title has no category keywords")
        else:
            items.add(
                "title_keywords",
                band_credit(len(matched), t.title_keywords),
                f"Title has {len(matched)} category keywords (aim for {t.title_keywords.target:g})",
            )

        # Price position
        z = 0.0
        if benchmarks is not None and benchmarks.price.std > 0:
            z = (listing.price - benchmarks.price.mean) / benchmarks.price.std
        items.add(
            "price_position",
            1.0 if abs(z) <= t.max_price_z else 0.0,
            f"Price ${listing.price:.2f} is far from the category norm (z = {z:+.1f})",
        )

        return items.result()


def _length_reason(label: str, value: int, unit: str, band: ThresholdBand) -> str:
    if band.maximum is not None and value > band.maximum:
        return f"{label} is too long ({value} {unit}, keep under {band.maximum:g})"
    return f"{label} is short ({value} {unit}, aim for {band.target:.0f})"


class ListingGrader:
    """
    Online grading against a loaded rules file.
    Resolves each listing's category to its rules and grades it.
    """

    def __init__(self, rules_file: RulesFile):
        self.rules_file = rules_file
        self._graders: dict[str, Grader] = {}

    @classmethod
    def from_file(cls, path: Optional[Union[str, Path]] = None) -> "ListingGrader":
        return cls(load_rules_file(path))

    def grade(
        self,
        listing: ListingRecord,
        now: datetime,
        category: Optional[str] = None,
    ) -> GradeResult:
        if listing is None:
            raise TypeError("listing must not be None")

        category = (category or "").strip().strip("/") or normalize_category(listing)
        rules = self.rules_file.rules_for(category)
        if rules.is_fallback:
            logger.debug(f"No rules for '{category}', grading {listing.listing_id} with fallback rules")

        grader = self._graders.get(rules.category)
        if grader is None:
            grader = Grader(rules)
            self._graders[rules.category] = grader
        return grader.grade(listing, now, category)


def grade(
    listing: ListingRecord,
    category: Optional[str] = None,
    rules: Optional[CategoryRules] = None,
    now: Optional[datetime] = None,
) -> GradeResult:
    """
    Grade one listing.
    Without rules the fallback rules apply; now must always be given.
    """
    return Grader(rules).grade(listing, now, category)
