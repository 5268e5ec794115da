"""
Shared fixtures: a consistent 20-listing category and a candidate built at its medians.
"""
from datetime import datetime, timedelta, timezone

import pytest

from listing_grader.config import Config
from listing_grader.models.listing import ListingRecord


NOW = datetime(2026, 6, 1, tzinfo=timezone.utc)

HUMANOIDS = "3D/Characters/Humanoids"

SHORT_DESCRIPTION = (
    "Complete kit for building stylized humanoid characters. "
    "Download now and start creating your game cast today."
)

LONG_DESCRIPTION = """Stylized humanoid characters ready for any fantasy or sci-fi project.
Every model ships with clean topology, hand painted textures and a shared skeleton
so animations can be retargeted across the whole cast without extra work.

- Fully rigged humanoid skeleton compatible with common retargeting tools
- Four texture variations per character in PBR and stylized shading modes
- Modular armor, hair and accessory meshes with consistent pivots
- Twenty idle, walk, run and combat animations included in the pack
- Optimized levels of detail for mobile, desktop and console targets
- Demo scene with lighting presets and a character selection screen

Full documentation and video tutorials are included with the package, covering
import settings, material setup, animation retargeting and performance tuning.

Changelog: version 1.4 adds two new characters, improved facial blend shapes
and fixes for the shader graph materials on the latest render pipelines."""

HUMANOID_TAGS = ["3d", "characters", "humanoids", "stylized", "rigged"]


def make_listing(listing_id: str = "listing", **overrides) -> ListingRecord:
    """A complete listing; override any field."""
    fields = dict(
        listing_id=listing_id,
        url=f"https://assets.example.com/packages/3d/characters/humanoids/{listing_id}",
        category=HUMANOIDS,
        title="Stylized Humanoids Characters Bundle 00",
        short_description=SHORT_DESCRIPTION,
        long_description=LONG_DESCRIPTION,
        tags=HUMANOID_TAGS,
        price=22.0,
        image_count=6,
        video_count=1,
        rating=4.6,
        review_count=50,
        last_update=NOW - timedelta(days=10),
        favorite_count=100,
    )
    fields.update(overrides)
    return ListingRecord(**fields)


@pytest.fixture
def now() -> datetime:
    """Fixed reference time."""
    return NOW


@pytest.fixture
def config() -> Config:
    """Default configuration, independent of the environment singleton."""
    return Config()


@pytest.fixture
def humanoid_corpus() -> list[ListingRecord]:
    """Twenty consistent listings of one category."""
    return [
        make_listing(
            f"hum-{i:02d}",
            title=f"Stylized Humanoids Characters Bundle {i:02d}",
            image_count=4 + i % 5,
            video_count=i % 2,
            rating=4.5 + (i % 3) * 0.1,
            review_count=40 + i,
            last_update=NOW - timedelta(days=i + 1),
            price=20 + i % 5,
            favorite_count=10 * i,
        )
        for i in range(20)
    ]


@pytest.fixture
def median_candidate() -> ListingRecord:
    """Candidate sitting on every benchmark target of the humanoid corpus."""
    return make_listing(
        "candidate",
        title="Stylized Humanoids Characters Bundle 20",
        image_count=6,
        video_count=1,
        rating=4.8,
        review_count=100,
        last_update=NOW - timedelta(days=30),
        price=22.0,
        release_notes="Added two new characters",
    )
