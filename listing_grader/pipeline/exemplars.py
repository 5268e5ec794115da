"""
Exemplar selector - keep the top-scoring listings of each category.
"""
import math
import re
import logging
from collections import defaultdict
from datetime import datetime
from typing import Callable, Iterable, Optional, Sequence

from ..config import Config, get_config
from ..models.listing import Exemplar, ListingRecord
from .quality import QualityScorer


logger = logging.getLogger(__name__)


UNCATEGORIZED = "Uncategorized"

PACKAGES_PATH_PATTERN = re.compile(r"/packages/([^?#]+)", re.IGNORECASE)


def category_from_field(listing: ListingRecord) -> Optional[str]:
    """Declared category, trimmed."""
    if listing.category and listing.category.strip():
        return listing.category.strip().strip("/")
    return None


def category_from_url(listing: ListingRecord) -> Optional[str]:
    """
    Category path from a storefront URL.
    '/packages/3d/characters/humanoids/knight-123' -> '3D/Characters/Humanoids'.
    The last segment is the item slug and is dropped when there is more than one.
    """
    if not listing.url:
        return None
    match = PACKAGES_PATH_PATTERN.search(listing.url)
    if not match:
        return None
    segments = [s for s in match.group(1).split("/") if s]
    if len(segments) > 1:
        segments = segments[:-1]
    if not segments:
        return None
    return "/".join(s.replace("-", " ").title() for s in segments)


def category_from_tags(listing: ListingRecord) -> Optional[str]:
    if listing.tags:
        return listing.tags[0]
    return None


# Tried in order; the first non-empty result wins
CATEGORY_EXTRACTORS: list[Callable[[ListingRecord], Optional[str]]] = [
    category_from_field,
    category_from_url,
    category_from_tags,
]


def normalize_category(listing: ListingRecord) -> str:
    """Resolve the category a listing is grouped under."""
    for extractor in CATEGORY_EXTRACTORS:
        category = extractor(listing)
        if category:
            return category
    return UNCATEGORIZED


def normalize_url(url: Optional[str]) -> str:
    """Lowercase, no query/fragment, no trailing slash."""
    if not url:
        return ""
    return re.sub(r"[?#].*$", "", url.lower()).rstrip("/")


class ExemplarSelector:
    """
    Groups a corpus by category and keeps the top-scoring listings of each.
    Either a fixed count or a percentage of every category is kept.
    """

    def __init__(
        self,
        count: Optional[int] = None,
        percent: Optional[float] = None,
        config: Optional[Config] = None,
    ):
        """
        Args:
            count: Exemplars per category; wins over percent when both are given
            percent: Share of each category to keep, in (0, 100]
            config: Settings; defaults from get_config()
        """
        config = config or get_config()

        if count is None and percent is None:
            count = config.selection.top_n
            percent = config.selection.top_percent
            if percent is not None:
                count = None

        if count is not None and count < 1:
            raise ValueError(f"count must be at least 1, got {count}")
        if count is None and not (0 < percent <= 100):
            raise ValueError(f"percent must be in (0, 100], got {percent}")

        self.count = count
        self.percent = None if count is not None else percent
        self.scorer = QualityScorer(config)

    @property
    def description(self) -> str:
        if self.percent is not None:
            return f"top {self.percent:g}%"
        return f"top {self.count}"

    def slots_for(self, group_size: int) -> int:
        """How many exemplars a category of this size keeps."""
        if group_size <= 0:
            return 0
        if self.percent is not None:
            slots = math.ceil(group_size * self.percent / 100)
        else:
            slots = min(self.count, group_size)
        return max(1, slots)

    def select(
        self,
        corpus: Sequence[ListingRecord],
        now: datetime,
        best_sellers: Optional[Iterable[str]] = None,
    ) -> dict[str, list[Exemplar]]:
        """
        Select exemplars per category.

        Args:
            corpus: All listings; only read
            now: Reference time for freshness scoring
            best_sellers: Listing ids or URLs that are always kept

        Returns:
            Category -> exemplars sorted by descending quality score,
            categories in order of first appearance
        """
        if corpus is None:
            raise TypeError("corpus must not be None")

        best_sellers = list(best_sellers or [])
        lookup = set()
        for identifier in best_sellers:
            if identifier:
                lookup.add(str(identifier))
                lookup.add(normalize_url(str(identifier)))
        logger.info(
            f"Selecting exemplars from {len(corpus)} listings using {self.description}, "
            f"with {len(best_sellers)} best sellers"
        )

        groups: dict[str, list[Exemplar]] = defaultdict(list)
        for index, listing in enumerate(corpus):
            category = normalize_category(listing)
            is_best_seller = self._is_best_seller(listing, lookup)
            groups[category].append(Exemplar(
                listing=listing,
                category=category,
                quality_score=self.scorer.score(listing, now, is_best_seller),
                corpus_index=index,
                is_best_seller=is_best_seller,
            ))

        exemplars = {}
        for category, members in groups.items():
            exemplars[category] = self._select_group(members)

            selected = exemplars[category]
            pinned = sum(1 for e in selected if e.is_best_seller)
            logger.info(
                f"Category '{category}': {len(members)} listings, "
                f"selected {len(selected)} exemplars ({pinned} best sellers)"
            )

        return exemplars

    def _select_group(self, members: list[Exemplar]) -> list[Exemplar]:
        """Best sellers first, then regular listings, both by score with corpus order on ties."""
        def rank(e: Exemplar) -> tuple[float, int]:
            return (-e.quality_score, e.corpus_index)

        best = sorted((e for e in members if e.is_best_seller), key=rank)
        regular = sorted((e for e in members if not e.is_best_seller), key=rank)

        slots = self.slots_for(len(members))
        if len(best) >= slots:
            return best
        return best + regular[: slots - len(best)]

    @staticmethod
    def _is_best_seller(listing: ListingRecord, lookup: set[str]) -> bool:
        if not lookup:
            return False
        if listing.listing_id and listing.listing_id in lookup:
            return True
        url = normalize_url(listing.url)
        return bool(url) and url in lookup


def select_exemplars(
    corpus: Sequence[ListingRecord],
    now: datetime,
    count: Optional[int] = None,
    percent: Optional[float] = None,
    best_sellers: Optional[Iterable[str]] = None,
    config: Optional[Config] = None,
) -> dict[str, list[Exemplar]]:
    """Select exemplars per category; see ExemplarSelector."""
    selector = ExemplarSelector(count=count, percent=percent, config=config)
    return selector.select(corpus, now, best_sellers)
