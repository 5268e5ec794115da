"""
Listing models - the normalized marketplace item and its exemplar wrapper.
"""
import re
from collections.abc import Iterable
from datetime import datetime
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


# "24,99": a comma is the decimal point only with exactly two digits after it
DECIMAL_COMMA = re.compile(r"\d+,\d{2}")


def parse_price(v: Any) -> float:
    """Price from a number, a formatted string or a {"value"|"amount": ...} dict; 0 when unparseable."""
    if v is None or isinstance(v, bool):
        return 0.0
    if isinstance(v, (int, float)):
        return max(0.0, float(v))
    if isinstance(v, str):
        # "$1,299.99", "24,99 USD", "Free"
        cleaned = v.replace("$", "").replace("USD", "").replace("€", "").replace(" ", "")
        if DECIMAL_COMMA.fullmatch(cleaned):
            cleaned = cleaned.replace(",", ".")
        else:
            cleaned = cleaned.replace(",", "")
        try:
            return max(0.0, float(cleaned))
        except ValueError:
            return 0.0
    if isinstance(v, dict):
        return parse_price(v.get("value") or v.get("amount"))
    return 0.0


class ListingRecord(BaseModel):
    """
    One marketplace item as produced by the upstream acquisition process.
    Read-only for the whole grading pipeline.
    """
    model_config = ConfigDict(frozen=True)

    listing_id: str
    url: Optional[str] = None
    category: Optional[str] = Field(default=None, description="Slash-delimited path, e.g. '3D/Characters'")
    title: str = ""
    short_description: str = ""
    long_description: str = Field(default="", description="May contain limited markup")
    tags: list[str] = Field(default_factory=list)
    price: float = Field(default=0.0, ge=0)
    image_count: int = 0
    video_count: int = 0
    has_animated_preview: Optional[bool] = None
    rating: Optional[float] = Field(default=None, description="Average star rating, 0-5")
    rating_count: Optional[int] = None
    review_count: Optional[int] = None
    last_update: Optional[Union[datetime, str]] = Field(
        default=None,
        description="Kept as supplied; parsed lazily when scoring",
    )
    favorite_count: int = 0
    publisher: Optional[str] = None
    version: Optional[str] = None
    release_notes: Optional[str] = None

    @field_validator("listing_id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> str:
        """Accept numeric ids from the storefront."""
        if v is None:
            return ""
        return str(v)

    @field_validator("title", "short_description", "long_description", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> str:
        if v is None:
            return ""
        return str(v)

    @field_validator("tags", mode="before")
    @classmethod
    def dedupe_tags(cls, v: Any) -> list[str]:
        """Strip, drop empties and de-duplicate case-insensitively, keeping first spelling."""
        if not v:
            return []
        if isinstance(v, str):
            v = v.split(",")
        elif isinstance(v, (dict, bytes)) or not isinstance(v, Iterable):
            return []
        seen = set()
        tags = []
        for tag in v:
            if tag is None:
                continue
            cleaned = str(tag).strip()
            key = cleaned.lower()
            if cleaned and key not in seen:
                seen.add(key)
                tags.append(cleaned)
        return tags

    @field_validator("price", mode="before")
    @classmethod
    def coerce_price(cls, v: Any) -> float:
        return parse_price(v)

    @field_validator("image_count", "video_count", "favorite_count", mode="before")
    @classmethod
    def non_negative_count(cls, v: Any) -> int:
        if v is None:
            return 0
        try:
            return max(0, int(v))
        except (TypeError, ValueError):
            return 0

    @field_validator("review_count", "rating_count", mode="before")
    @classmethod
    def optional_count(cls, v: Any) -> Optional[int]:
        if v is None:
            return None
        try:
            return max(0, int(v))
        except (TypeError, ValueError):
            return None

    @field_validator("rating", mode="before")
    @classmethod
    def clamp_rating(cls, v: Any) -> Optional[float]:
        if v is None:
            return None
        try:
            return min(5.0, max(0.0, float(v)))
        except (TypeError, ValueError):
            return None


class QualityBreakdown(BaseModel):
    """Weighted terms of the corpus quality score."""
    review_strength: float = 0.0
    freshness: float = 0.0
    popularity: float = 0.0
    completeness: float = 0.0
    best_seller_bonus: float = 0.0

    @property
    def total(self) -> float:
        return (
            self.review_strength
            + self.freshness
            + self.popularity
            + self.completeness
            + self.best_seller_bonus
        )


class Exemplar(BaseModel):
    """A listing selected as representative of quality in its category."""
    model_config = ConfigDict(frozen=True)

    listing: ListingRecord
    category: str = Field(description="Normalized category the listing was grouped under")
    quality_score: float
    corpus_index: int = Field(description="Position in the input corpus, used to break score ties")
    is_best_seller: bool = False
