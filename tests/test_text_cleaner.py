"""Tests for description keyword extraction."""

from utils.text_cleaner import extract_keywords, normalise_text


class TestNormaliseText:

    def test_lowercases_and_strips_punctuation(self):
        assert normalise_text("Large POTHOLE, on Main St.!") == "large pothole on main st"

    def test_empty(self):
        assert normalise_text("") == ""
        assert normalise_text(None) == ""


class TestExtractKeywords:

    def test_keeps_original_order(self):
        assert extract_keywords("large pothole on Main Street") == [
            "large", "pothole", "main", "street",
        ]

    def test_drops_short_tokens_and_stop_words(self):
        assert extract_keywords("it is on the road near my house") == ["road", "house"]

    def test_caps_at_max(self):
        words = "alpha bravo charlie delta echo foxtrot golf"
        assert extract_keywords(words) == ["alpha", "bravo", "charlie", "delta", "echo"]
        assert extract_keywords(words, max_keywords=2) == ["alpha", "bravo"]

    def test_collapses_repeats(self):
        assert extract_keywords("trash trash everywhere, TRASH!") == ["trash", "everywhere"]

    def test_empty_description(self):
        assert extract_keywords("") == []
        assert extract_keywords("   ?!  ") == []

    def test_zero_max(self):
        assert extract_keywords("broken lamp", max_keywords=0) == []
