"""
Tests for suggestion parsing and catalog reconciliation.
"""
import json
from decimal import Decimal

import pytest

from smartbundle.services.suggestion_parser import (
    PARSE_ERROR_MESSAGE,
    MatchRank,
    SuggestionParseError,
    extract_json_array,
    normalize_discount,
    parse_suggestions,
    rank_match,
    resolve_reference,
)

from conftest import FakeShopifyClient


@pytest.fixture
def catalog():
    return FakeShopifyClient().catalog


class TestExtractJsonArray:
    def test_plain_array(self):
        assert extract_json_array('[{"name": "A"}]') == [{"name": "A"}]

    def test_strips_json_fence(self):
        raw = '```json\n[{"name": "A"}]\n```'
        assert extract_json_array(raw) == [{"name": "A"}]

    def test_strips_bare_fence(self):
        raw = '```\n[]\n```'
        assert extract_json_array(raw) == []

    def test_rejects_object(self):
        with pytest.raises(SuggestionParseError):
            extract_json_array('{"name": "A"}')

    def test_rejects_prose(self):
        with pytest.raises(SuggestionParseError):
            extract_json_array("Here are some bundles you might like")


class TestMatching:
    def test_rank_order(self):
        assert rank_match("Red Mug", "red mug") == MatchRank.EXACT
        assert rank_match("Red Mug Lid", "Red Mug") == MatchRank.CATALOG_CONTAINS
        assert rank_match("Mug", "Red Mug") == MatchRank.CONTAINED_BY
        assert rank_match("Tea Towel", "Red Mug") is None

    def test_blank_reference_never_matches(self):
        assert rank_match("Red Mug", "   ") is None

    def test_exact_match_beats_earlier_substring_match(self, catalog):
        # "Red Mug Lid" contains "Red Mug" but the exact title wins
        reordered = [catalog[1], catalog[0]]
        product, rank = resolve_reference("Red Mug", reordered)

        assert product.id == "gid://shopify/Product/1001"
        assert rank == MatchRank.EXACT

    def test_equal_ranks_prefer_catalog_order(self, catalog):
        product, rank = resolve_reference("red", catalog)

        assert product.title == "Red Mug"
        assert rank == MatchRank.CATALOG_CONTAINS

    def test_reference_containing_catalog_title(self, catalog):
        product, rank = resolve_reference("Premium Coffee Beans 1kg", catalog)

        assert product.title == "Coffee Beans"
        assert rank == MatchRank.CONTAINED_BY

    def test_unknown_reference(self, catalog):
        assert resolve_reference("Bicycle", catalog) is None


class TestNormalizeDiscount:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (15, Decimal("15")),
            ("20", Decimal("20")),
            (12.5, Decimal("12.5")),
            (0, Decimal("10")),
            (100, Decimal("10")),
            (-5, Decimal("10")),
            ("lots", Decimal("10")),
            (None, Decimal("10")),
            (True, Decimal("10")),
        ],
    )
    def test_values(self, value, expected):
        assert normalize_discount(value) == expected


class TestParseSuggestions:
    def test_resolves_titles_to_catalog_products(self, catalog):
        raw = json.dumps([
            {
                "name": "Coffee Lover",
                "products": ["Red Mug", "Coffee Beans"],
                "reason": "Brew and sip",
                "discount": 15,
            }
        ])

        result = parse_suggestions(raw, catalog)

        assert result.error is None
        assert len(result.suggestions) == 1
        suggestion = result.suggestions[0]
        assert suggestion.name == "Coffee Lover"
        assert suggestion.discount == Decimal("15")
        assert [p.id for p in suggestion.products] == [
            "gid://shopify/Product/1001",
            "gid://shopify/Product/1003",
        ]
        assert suggestion.products[0].match_rank == "EXACT"
        assert suggestion.products[0].variant_id == "gid://shopify/ProductVariant/10010"

    def test_fenced_completion(self, catalog):
        raw = '```json\n[{"name": "Kit", "products": ["Tea Towel", "Red Mug Lid"]}]\n```'

        result = parse_suggestions(raw, catalog)

        assert len(result.suggestions) == 1
        assert result.suggestions[0].discount == Decimal("10")

    def test_drops_suggestions_with_fewer_than_two_products(self, catalog):
        raw = json.dumps([
            {"name": "Lonely", "products": ["Red Mug", "Bicycle"]},
            {"name": "Pair", "products": ["Tea Towel", "Coffee Beans"]},
        ])

        result = parse_suggestions(raw, catalog)

        assert [s.name for s in result.suggestions] == ["Pair"]

    def test_duplicate_references_count_once(self, catalog):
        raw = json.dumps([{"name": "Echo", "products": ["Red Mug", "red mug"]}])

        result = parse_suggestions(raw, catalog)

        assert result.suggestions == []

    def test_skips_malformed_items(self, catalog):
        raw = json.dumps([
            "not an object",
            {"name": "No products"},
            {"name": "Bad refs", "products": [1, None, "Red Mug", "Tea Towel"]},
        ])

        result = parse_suggestions(raw, catalog)

        assert len(result.suggestions) == 1
        assert result.suggestions[0].name == "Bad refs"

    def test_missing_name_gets_default(self, catalog):
        raw = json.dumps([{"products": ["Red Mug", "Tea Towel"]}])

        result = parse_suggestions(raw, catalog)

        assert result.suggestions[0].name == "AI Bundle"

    def test_unparseable_completion_reports_error(self, catalog):
        result = parse_suggestions("Sorry, I cannot help with that.", catalog)

        assert result.suggestions == []
        assert result.error == PARSE_ERROR_MESSAGE

    def test_empty_array(self, catalog):
        result = parse_suggestions("[]", catalog)

        assert result.suggestions == []
        assert result.error is None
