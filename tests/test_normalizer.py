"""
Tests for normalizer.py.

Covers:
  - sanitize: trimming, empty → None, non-string values
  - title_case: lowercase + first letter of every space-separated word
  - compute_confidence: full boundary table
  - normalize: field mapping, which fields get title-cased, determinism
"""
from __future__ import annotations

import pytest

from normalizer import NormalizedProduct, compute_confidence, normalize, sanitize, title_case
from providers.base import RawProduct


# ── sanitize ──────────────────────────────────────────────────────────────────

class TestSanitize:
    def test_trims_whitespace(self):
        assert sanitize("  500 g \n") == "500 g"

    def test_none_stays_none(self):
        assert sanitize(None) is None

    def test_empty_string_becomes_none(self):
        assert sanitize("") is None

    def test_whitespace_only_becomes_none(self):
        assert sanitize("   \t ") is None

    def test_non_string_is_stringified(self):
        assert sanitize(330) == "330"


# ── title_case ────────────────────────────────────────────────────────────────

class TestTitleCase:
    def test_basic(self):
        assert title_case("coca cola") == "Coca Cola"

    def test_uppercase_input_is_lowered_first(self):
        assert title_case("NUTELLA HAZELNUT SPREAD") == "Nutella Hazelnut Spread"

    def test_hyphenated_word_keeps_inner_lowercase(self):
        assert title_case("the coca-cola co") == "The Coca-cola Co"

    def test_apostrophe_not_capitalised(self):
        assert title_case("kellogg's corn flakes") == "Kellogg's Corn Flakes"

    def test_repeated_spaces_preserved(self):
        assert title_case("green  tea") == "Green  Tea"

    def test_none_passes_through(self):
        assert title_case(None) is None


# ── compute_confidence ────────────────────────────────────────────────────────

class TestComputeConfidence:
    @pytest.mark.parametrize(
        "name, brand, quantity, expected",
        [
            ("Cola", "Coke", "500ml", 0.9),
            ("Cola", "Coke", None, 0.75),
            ("Cola", None, "500ml", 0.6),
            ("Cola", None, None, 0.6),
            (None, "Coke", "500ml", 0.3),
            (None, "Coke", None, 0.3),
            (None, None, "500ml", 0.3),
            (None, None, None, 0.3),
        ],
    )
    def test_boundary_table(self, name, brand, quantity, expected):
        assert compute_confidence(name, brand, quantity) == expected


# ── normalize ─────────────────────────────────────────────────────────────────

class TestNormalize:
    def test_example_product(self):
        raw = RawProduct(name="  coca cola  ", brand="the coca-cola co", quantity="500ml")
        result = normalize(raw)
        assert result.name == "Coca Cola"
        assert result.brand == "The Coca-cola Co"
        assert result.quantity == "500ml"
        assert result.confidence == 0.9

    def test_deterministic(self):
        raw = RawProduct(name="  coca cola  ", brand="the coca-cola co", quantity="500ml")
        results = [normalize(raw) for _ in range(5)]
        assert all(r == results[0] for r in results)

    def test_category_is_title_cased(self):
        result = normalize(RawProduct(name="x", category="BEVERAGES, carbonated drinks"))
        assert result.category == "Beverages, Carbonated Drinks"

    def test_quantity_image_source_not_case_transformed(self):
        raw = RawProduct(
            name="x",
            quantity=" 1 L ",
            image=" https://IMG.example.org/Front.JPG ",
            source=" openfoodfacts ",
        )
        result = normalize(raw)
        assert result.quantity == "1 L"
        assert result.image == "https://IMG.example.org/Front.JPG"
        assert result.source == "openfoodfacts"

    def test_empty_fields_become_none(self):
        result = normalize(RawProduct(name="", brand="   ", quantity="", category=" ", image="", source=""))
        assert result == NormalizedProduct(
            name=None, brand=None, quantity=None, category=None,
            image=None, source=None, confidence=0.3,
        )

    def test_whitespace_brand_does_not_count_for_confidence(self):
        result = normalize(RawProduct(name="water", brand="   ", quantity="1L"))
        assert result.brand is None
        assert result.confidence == 0.6

    def test_missing_name_scores_lowest_even_with_brand_and_quantity(self):
        result = normalize(RawProduct(name=None, brand="acme", quantity="1 kg"))
        assert result.confidence == 0.3
        assert result.brand == "Acme"

    def test_input_not_mutated(self):
        raw = RawProduct(name="  coca cola  ")
        normalize(raw)
        assert raw.name == "  coca cola  "
