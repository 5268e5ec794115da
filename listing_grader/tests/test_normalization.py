"""
Tests for normalizing scraped storefront items.
"""
import pytest

from listing_grader.normalization import normalize_listing, normalize_listings, summarize_ratings


class TestSummarizeRatings:
    """Tests for star-distribution reduction."""

    def test_weighted_average(self):
        """Test average and total from string entries."""
        average, total = summarize_ratings([
            {"value": "5", "count": "30"},
            {"value": "4", "count": "10"},
            {"value": "1", "count": "0"},
        ])
        assert average == pytest.approx(4.75)
        assert total == 40

    def test_malformed_entries_skipped(self):
        """Test that bad entries are ignored, not raised."""
        average, total = summarize_ratings([
            {"value": "five", "count": "3"},
            {"value": "4"},
            "junk",
            {"value": "3", "count": 2},
        ])
        assert average == 3.0
        assert total == 2

    def test_empty_distribution(self):
        """Test that no ratings give no average."""
        assert summarize_ratings([]) == (None, 0)


class TestNormalizeListing:
    """Tests for normalize_listing."""

    @pytest.fixture
    def raw_item(self) -> dict:
        """A scraped item in storefront field names."""
        return {
            "id": 98765,
            "url": "https://assets.example.com/packages/tools/utilities/fast-import-98765",
            "title": "Fast Import",
            "short_description": "Import assets faster.",
            "long_description": "<p>Batch importer</p><ul><li>Presets</li><li>Undo</li></ul>",
            "tags": ["Tools", "Import"],
            "category": "Tools/Utilities",
            "price": "$15.00",
            "images": [{"src": "a.png"}, {"src": "b.png"}, {"src": "c.png"}],
            "videos_count": "1",
            "rating": [{"value": "5", "count": "8"}, {"value": "3", "count": "2"}],
            "reviews_count": 6,
            "favorites": 120,
            "last_update": "Mar 3, 2026",
            "publisher": "Example Tools",
            "version": 2.1,
        }

    def test_storefront_fields(self, raw_item):
        """Test field mapping from storefront names."""
        listing = normalize_listing(raw_item)

        assert listing.listing_id == "98765"
        assert listing.title == "Fast Import"
        assert listing.category == "Tools/Utilities"
        assert listing.price == 15.0
        assert listing.image_count == 3
        assert listing.video_count == 1
        assert listing.review_count == 6
        assert listing.favorite_count == 120
        assert listing.last_update == "Mar 3, 2026"
        assert listing.version == "2.1"

    def test_rating_distribution(self, raw_item):
        """Test that a star distribution becomes average and count."""
        listing = normalize_listing(raw_item)

        assert listing.rating == pytest.approx(4.6)
        assert listing.rating_count == 10

    def test_plain_rating(self, raw_item):
        """Test a plain numeric rating."""
        raw_item["rating"] = "4.2"
        assert normalize_listing(raw_item).rating == pytest.approx(4.2)

    def test_missing_fields(self):
        """Test safe defaults for a sparse item."""
        listing = normalize_listing({"package_id": "1"})

        assert listing.listing_id == "1"
        assert listing.title == ""
        assert listing.image_count == 0
        assert listing.rating is None
        assert listing.review_count is None

    @pytest.mark.parametrize("price,expected", [
        ("$1,299.99", 1299.99),
        ({"value": "$5", "currency": "USD"}, 5.0),
        ({"value": "contact seller"}, 0.0),
    ])
    def test_storefront_price_forms(self, raw_item, price, expected):
        """Test that formatted and nested prices normalize without raising."""
        raw_item["price"] = price
        assert normalize_listing(raw_item).price == expected

    def test_description_alias(self):
        """Test the generic description field."""
        listing = normalize_listing({"id": "2", "description": "Long text"})
        assert listing.long_description == "Long text"

    def test_normalize_listings(self, raw_item):
        """Test batch normalization keeps order."""
        listings = normalize_listings([raw_item, {"id": "other"}])
        assert [l.listing_id for l in listings] == ["98765", "other"]
