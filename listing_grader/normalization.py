"""
Normalization module for converting scraped storefront items to ListingRecords.
"""
import logging
from typing import Any, Optional

from .models.listing import ListingRecord


logger = logging.getLogger(__name__)


def _first(raw_item: dict[str, Any], keys: list[str]) -> Any:
    """First non-None value among keys."""
    for key in keys:
        if key in raw_item and raw_item[key] is not None:
            return raw_item[key]
    return None


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def _count(value: Any) -> Optional[int]:
    """Counts arrive as numbers, numeric strings or as the media lists themselves."""
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return len(value)
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return None


def summarize_ratings(distribution: list[Any]) -> tuple[Optional[float], int]:
    """
    Reduce a star-rating distribution to (average, total).

    Entries look like {"value": "5", "count": "12"}; malformed entries are skipped.
    Returns (None, 0) when nothing usable remains.
    """
    total = 0
    weighted = 0.0
    for entry in distribution:
        if not isinstance(entry, dict):
            continue
        try:
            stars = float(entry.get("value"))
            count = int(float(entry.get("count")))
        except (TypeError, ValueError):
            logger.debug(f"Skipping malformed rating entry: {entry!r}")
            continue
        if count <= 0 or not (0 <= stars <= 5):
            continue
        total += count
        weighted += stars * count

    if total == 0:
        return None, 0
    return weighted / total, total


def normalize_listing(raw_item: dict[str, Any]) -> ListingRecord:
    """
    Convert a raw scraped item to a ListingRecord.

    Safely extracts fields with null fallbacks for missing data.
    Accepts the storefront's own field names as well as ListingRecord's.
    """
    # Extract listing ID - storefront uses 'id' or 'package_id'
    listing_id = _first(raw_item, ["listing_id", "id", "package_id", "packageId"])

    # Rating - either a plain average or a star distribution
    rating = None
    rating_count = _count(_first(raw_item, ["rating_count", "ratings_count"]))
    rating_val = raw_item.get("rating")
    if isinstance(rating_val, list):
        rating, total = summarize_ratings(rating_val)
        if rating_count is None:
            rating_count = total
    elif isinstance(rating_val, dict):
        rating = rating_val.get("average") or rating_val.get("value")
        if rating_count is None:
            rating_count = _count(rating_val.get("count"))
    else:
        rating = rating_val

    # Media - counts or the media lists themselves
    image_count = _count(_first(raw_item, ["image_count", "images_count", "images"]))
    video_count = _count(_first(raw_item, ["video_count", "videos_count", "videos"]))

    return ListingRecord(
        listing_id=listing_id,
        url=_text(_first(raw_item, ["url", "canonical_url", "share_url"])),
        category=_text(_first(raw_item, ["category", "category_path"])),
        title=_first(raw_item, ["title", "name"]),
        short_description=_first(raw_item, ["short_description", "summary"]),
        long_description=_first(raw_item, ["long_description", "description"]),
        tags=raw_item.get("tags"),
        price=raw_item.get("price"),
        image_count=image_count,
        video_count=video_count,
        has_animated_preview=raw_item.get("has_animated_preview"),
        rating=rating,
        rating_count=rating_count,
        review_count=_count(_first(raw_item, ["review_count", "reviews_count", "reviews"])),
        last_update=_first(raw_item, ["last_update", "updated_at", "lastUpdate"]),
        favorite_count=_count(_first(raw_item, ["favorite_count", "favorites", "favourites"])),
        publisher=_text(_first(raw_item, ["publisher", "publisher_name"])),
        version=_text(raw_item.get("version")),
        release_notes=_text(_first(raw_item, ["release_notes", "releaseNotes", "changelog"])),
    )


def normalize_listings(raw_items: list[dict[str, Any]]) -> list[ListingRecord]:
    """
    Normalize a list of raw scraped items.
    """
    return [normalize_listing(item) for item in raw_items]
