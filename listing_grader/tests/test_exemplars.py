"""
Tests for category normalization and exemplar selection.
"""
from datetime import timedelta

import pytest

from listing_grader.config import Config, SelectionConfig
from listing_grader.models.listing import ListingRecord
from listing_grader.pipeline.exemplars import (
    UNCATEGORIZED,
    ExemplarSelector,
    normalize_category,
    select_exemplars,
)

from conftest import NOW, make_listing


class TestCategoryNormalization:
    """Tests for the category extractor chain."""

    def test_declared_category_wins(self):
        """Test that the category field is used first."""
        listing = ListingRecord(listing_id="1", category=" Tools/Utilities/ ", tags=["other"])
        assert normalize_category(listing) == "Tools/Utilities"

    def test_category_from_url(self):
        """Test category path derived from a storefront URL."""
        listing = ListingRecord(
            listing_id="1",
            url="https://assets.example.com/packages/3d/characters/humanoids/knight-pack-123?ref=home",
        )
        assert normalize_category(listing) == "3D/Characters/Humanoids"

    def test_single_segment_url(self):
        """Test that a lone segment is kept as the category."""
        listing = ListingRecord(listing_id="1", url="https://assets.example.com/packages/templates")
        assert normalize_category(listing) == "Templates"

    def test_hyphens_in_url_segments(self):
        """Test slug hyphens become spaces."""
        listing = ListingRecord(listing_id="1", url="https://x.test/packages/visual-scripting/pack-9")
        assert normalize_category(listing) == "Visual Scripting"

    def test_category_from_first_tag(self):
        """Test the tag fallback when there is no category or usable URL."""
        listing = ListingRecord(listing_id="1", url="https://x.test/item/1", tags=["Shaders", "VFX"])
        assert normalize_category(listing) == "Shaders"

    def test_uncategorized_sentinel(self):
        """Test the final fallback."""
        assert normalize_category(ListingRecord(listing_id="1")) == UNCATEGORIZED


class TestExemplarSelector:
    """Tests for ExemplarSelector."""

    @pytest.fixture
    def mixed_corpus(self) -> list[ListingRecord]:
        """Three categories of different sizes."""
        corpus = []
        for i in range(25):
            corpus.append(make_listing(f"tool-{i}", category="Tools/Utilities", review_count=i * 10))
        for i in range(4):
            corpus.append(make_listing(f"audio-{i}", category="Audio/Music", review_count=i))
        corpus.append(make_listing("lonely", category="2D/Fonts", review_count=0))
        return corpus

    def test_every_category_has_exemplars(self, mixed_corpus, config):
        """Test that each input category appears with at least one exemplar."""
        result = select_exemplars(mixed_corpus, NOW, count=20, config=config)

        assert set(result) == {"Tools/Utilities", "Audio/Music", "2D/Fonts"}
        assert all(len(exemplars) >= 1 for exemplars in result.values())

    def test_fixed_count(self, mixed_corpus, config):
        """Test min(N, group size) selection."""
        result = select_exemplars(mixed_corpus, NOW, count=20, config=config)

        assert len(result["Tools/Utilities"]) == 20
        assert len(result["Audio/Music"]) == 4
        assert len(result["2D/Fonts"]) == 1

    def test_percentage(self, mixed_corpus, config):
        """Test ceil(group size x P / 100) with a floor of one."""
        result = select_exemplars(mixed_corpus, NOW, percent=10, config=config)

        assert len(result["Tools/Utilities"]) == 3
        assert len(result["Audio/Music"]) == 1
        assert len(result["2D/Fonts"]) == 1

    def test_sorted_descending(self, mixed_corpus, config):
        """Test exemplars are ordered by quality score."""
        result = select_exemplars(mixed_corpus, NOW, count=10, config=config)
        scores = [e.quality_score for e in result["Tools/Utilities"]]

        assert scores == sorted(scores, reverse=True)
        assert result["Tools/Utilities"][0].listing.listing_id == "tool-24"

    def test_deterministic(self, mixed_corpus, config):
        """Test that repeated runs give identical ordered exemplars."""
        first = select_exemplars(mixed_corpus, NOW, count=5, config=config)
        second = select_exemplars(mixed_corpus, NOW, count=5, config=config)

        assert first == second

    def test_ties_broken_by_corpus_order(self, config):
        """Test that identical scores keep input order."""
        corpus = [make_listing(f"same-{i}") for i in range(6)]
        result = select_exemplars(corpus, NOW, count=3, config=config)

        ids = [e.listing.listing_id for e in result[corpus[0].category]]
        assert ids == ["same-0", "same-1", "same-2"]

    def test_default_count_from_config(self):
        """Test that the configured default count is used."""
        config = Config(selection=SelectionConfig(top_n=2))
        corpus = [make_listing(f"x-{i}") for i in range(5)]

        result = ExemplarSelector(config=config).select(corpus, NOW)
        assert len(result[corpus[0].category]) == 2

    def test_count_wins_over_percent(self, config):
        """Test that an explicit count takes precedence."""
        selector = ExemplarSelector(count=3, percent=50, config=config)
        assert selector.slots_for(100) == 3
        assert selector.description == "top 3"

    def test_best_sellers_pinned(self, config):
        """Test that best sellers are kept ahead of better-scoring listings."""
        corpus = [
            make_listing("strong-1", review_count=5000),
            make_listing("strong-2", review_count=4000),
            make_listing("weak", rating=1.0, review_count=0, last_update=NOW - timedelta(days=2000)),
        ]
        result = select_exemplars(corpus, NOW, count=1, best_sellers=["weak"], config=config)
        exemplars = result[corpus[0].category]

        assert [e.listing.listing_id for e in exemplars] == ["weak"]
        assert exemplars[0].is_best_seller is True

    def test_best_sellers_by_url(self, config):
        """Test best-seller matching on normalized URLs."""
        corpus = [make_listing("a", review_count=500), make_listing("b", review_count=0)]
        best = [corpus[1].url.upper() + "/?utm=1"]

        result = select_exemplars(corpus, NOW, count=1, best_sellers=best, config=config)
        assert result[corpus[0].category][0].listing.listing_id == "b"

    def test_all_best_sellers_kept_beyond_slots(self, config):
        """Test that best sellers are never cut to fit the count."""
        corpus = [make_listing(f"bs-{i}") for i in range(4)]
        result = select_exemplars(corpus, NOW, count=2, best_sellers=[l.listing_id for l in corpus], config=config)

        assert len(result[corpus[0].category]) == 4

    def test_empty_corpus(self, config):
        """Test that no listings means no categories."""
        assert select_exemplars([], NOW, config=config) == {}

    def test_none_corpus_raises(self, config):
        """Test that a missing corpus is a caller bug."""
        with pytest.raises(TypeError):
            select_exemplars(None, NOW, config=config)

    @pytest.mark.parametrize("kwargs", [{"count": 0}, {"percent": 0}, {"percent": 150}])
    def test_invalid_selection_rule(self, kwargs, config):
        """Test that invalid counts and percentages are rejected."""
        with pytest.raises(ValueError):
            ExemplarSelector(config=config, **kwargs)
