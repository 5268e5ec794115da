"""
Tests for text and time helpers.
"""
from datetime import datetime, timezone

import pytest

from listing_grader.pipeline.text import (
    category_terms,
    count_bullets,
    days_since,
    has_cta,
    has_documentation,
    has_update_notes,
    has_uvp,
    parse_timestamp,
    strip_markup,
    tag_tokens,
    tokenize,
    word_count,
)

from conftest import NOW


class TestTextHelpers:
    """Tests for markup, counting and tokenizing."""

    def test_strip_markup(self):
        """Test that tags are removed and whitespace collapsed."""
        assert strip_markup("<p>Hello</p>\n\n<b>world</b>") == "Hello world"
        assert strip_markup(None) == ""

    def test_word_count(self):
        """Test word counting after stripping markup."""
        assert word_count("<p>one two</p><p>three</p>") == 3
        assert word_count("") == 0

    @pytest.mark.parametrize("text,expected", [
        ("<ul><li>a</li><li>b</li><li>c</li></ul>", 3),
        ("Intro\n- first\n- second\n* third", 3),
        ("1. one\n2) two", 2),
        ("<p>• point</p><p>• another</p>", 2),
        ("No bullets - just a dash", 0),
        ("", 0),
    ])
    def test_count_bullets(self, text, expected):
        """Test HTML and plain-text bullet forms."""
        assert count_bullets(text) == expected

    def test_tokenize(self):
        """Test lowercase tokens without stop words, digits or short tokens."""
        assert tokenize("The Ultimate FPS Kit for Unity 2024 - v2") == ["ultimate", "fps", "kit", "unity"]

    def test_tokenize_min_length(self):
        """Test that short tokens can be kept on request."""
        assert tokenize("3D UI Kit", min_length=1) == ["3d", "ui", "kit"]

    def test_tokenize_keeps_stop_words_when_asked(self):
        """Test the stop-word switch."""
        assert "the" in tokenize("The kit", drop_stop_words=False)

    def test_category_terms(self):
        """Test hierarchy terms of a category path."""
        assert category_terms("3D/Characters/Humanoids") == ["3d", "characters", "humanoids"]
        assert category_terms("Tools/Sprite Management") == ["tools", "sprite", "management"]
        assert category_terms(None) == []

    def test_tag_tokens(self):
        """Test whole tags and their words."""
        assert tag_tokens(["Low Poly", "RPG"]) == {"low poly", "low", "poly", "rpg"}


class TestSignals:
    """Tests for description signal detection."""

    def test_cta(self):
        assert has_cta("Download now and start building")
        assert not has_cta("A set of models")

    def test_uvp_only_in_opening(self):
        """Test that the value proposition must appear early."""
        assert has_uvp("Complete toolkit for level design")
        assert not has_uvp("x" * 100 + " complete toolkit for level design")

    def test_documentation(self):
        assert has_documentation("See the online documentation")
        assert not has_documentation("Just models")

    def test_update_notes(self):
        assert has_update_notes("Changelog: fixed shaders")
        assert has_update_notes("1.2.0 - improved import speed")
        assert not has_update_notes("Stable and tested")


class TestTimestamps:
    """Tests for timestamp parsing and day counting."""

    @pytest.mark.parametrize("value", [
        "2026-05-01T00:00:00Z",
        "2026-05-01T00:00:00+00:00",
        "2026-05-01",
        "May 1, 2026",
        "2026/05/01",
        datetime(2026, 5, 1),
        datetime(2026, 5, 1, tzinfo=timezone.utc),
    ])
    def test_supported_formats(self, value):
        """Test that known formats parse to the same aware datetime."""
        assert parse_timestamp(value) == datetime(2026, 5, 1, tzinfo=timezone.utc)

    def test_unparseable(self):
        """Test that garbage parses to None."""
        assert parse_timestamp("yesterday-ish") is None
        assert parse_timestamp(None) is None

    def test_days_since(self):
        """Test whole days with future dates floored at zero."""
        assert days_since("2026-05-01", NOW) == 31
        assert days_since("2027-01-01", NOW) == 0
        assert days_since(None, NOW) is None

    def test_naive_now_treated_as_utc(self):
        """Test that a naive reference time is taken as UTC."""
        assert days_since("2026-05-01T00:00:00Z", datetime(2026, 5, 11)) == 10
