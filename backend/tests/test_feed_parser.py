"""
Tests for backend/src/services/feed_parser.py

Tests ID and price parsing, variant extraction and per-entry validation
of feed products.
"""

import logging
from decimal import Decimal

import pytest

from backend.src.services.feed_parser import (
    extract_product_nodes,
    extract_variants,
    parse_external_id,
    parse_feed_product,
    parse_price,
)


# ============================================================================
# SCALAR PARSING TESTS
# ============================================================================

class TestParseExternalId:
    """Tests for parse_external_id()."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (7401234567, 7401234567),
            ("7401234567", 7401234567),
            ("  42 ", 42),
            (42.0, 42),
            (2**63 - 1, 2**63 - 1),
        ],
    )
    def test_numeric_values(self, value, expected):
        assert parse_external_id(value) == expected

    @pytest.mark.parametrize(
        "value",
        [None, "", "abc", "12a", 4.5, True, False, [], {}, "\u00b2", "\u0663", "99999999999999999999", 2**63],
    )
    def test_non_numeric_values(self, value):
        assert parse_external_id(value) is None

    @pytest.mark.parametrize("value", [0, "0", -5, "-5", -5.0])
    def test_non_positive_values(self, value):
        assert parse_external_id(value) is None


class TestParsePrice:
    """Tests for parse_price()."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("299.00", Decimal("299.00")),
            ("0", Decimal("0")),
            (149, Decimal("149")),
            (" 19.90 ", Decimal("19.90")),
        ],
    )
    def test_valid_prices(self, value, expected):
        assert parse_price(value) == expected

    def test_unparsable_price_reads_as_zero_and_logs(self, capture_logs):
        """A price of "abc" becomes 0 with a warning."""
        assert parse_price("abc", variant_id=99) == Decimal("0")

        warnings = [r for r in capture_logs.records if r.levelno == logging.WARNING]
        assert len(warnings) == 1
        assert warnings[0].getMessage() == "Invalid price format for variant"
        assert warnings[0].variant_id == 99

    @pytest.mark.parametrize("value", ["-5", "NaN", "Infinity"])
    def test_negative_and_non_finite_read_as_zero(self, value, capture_logs):
        assert parse_price(value) == Decimal("0")
        assert any(r.levelno == logging.WARNING for r in capture_logs.records)

    def test_missing_price_is_zero_without_warning(self, capture_logs):
        assert parse_price(None) == Decimal("0")
        assert not any(r.levelno == logging.WARNING for r in capture_logs.records)


# ============================================================================
# VARIANT TESTS
# ============================================================================

class TestExtractVariants:
    """Tests for extract_variants()."""

    @pytest.mark.parametrize("node", [None, "variants", {"id": 1}, 12])
    def test_non_array_yields_empty(self, node):
        assert extract_variants(node) == []

    def test_fields_are_copied(self):
        variants = extract_variants(
            [
                {"id": 1, "title": "S", "price": "10.00", "sku": "A-S", "available": True},
                {"id": "2", "title": "M", "price": "12.50", "sku": None, "available": "true"},
                {"id": 3, "price": "abc"},
            ]
        )

        assert [v.shopify_variant_id for v in variants] == [1, 2, 3]
        assert [v.price for v in variants] == [Decimal("10.00"), Decimal("12.50"), Decimal("0")]
        assert variants[0].sku == "A-S"
        assert variants[1].sku is None
        assert variants[1].available is True
        assert variants[2].title is None
        assert variants[2].available is False

    def test_non_object_entries_are_skipped(self):
        variants = extract_variants(["oops", None, {"id": 5, "price": "1"}])

        assert len(variants) == 1
        assert variants[0].shopify_variant_id == 5


# ============================================================================
# PRODUCT ENTRY TESTS
# ============================================================================

class TestParseFeedProduct:
    """Tests for parse_feed_product()."""

    def test_valid_entry(self, feed_product):
        product = parse_feed_product(feed_product(3))

        assert product is not None
        assert product.id is None
        assert product.shopify_product_id == 1_003
        assert product.title == "Product 3"
        assert product.handle == "product-3"
        assert product.product_type == "Activewear"
        assert product.price == Decimal("302")
        assert len(product.variants) == 1

    def test_price_is_minimum_variant_price(self, feed_product):
        node = feed_product(0)
        node["variants"] = [
            {"id": 1, "price": "59.00"},
            {"id": 2, "price": "39.00"},
            {"id": 3, "price": "49.00"},
        ]

        assert parse_feed_product(node).price == Decimal("39.00")

    def test_no_variants_means_zero_price(self, feed_product):
        node = feed_product(0)
        del node["variants"]

        product = parse_feed_product(node)

        assert product.price == Decimal("0")
        assert product.variants == []

    @pytest.mark.parametrize("field", ["id", "title", "handle"])
    def test_missing_required_field_skips_entry(self, feed_product, field, capture_logs):
        node = feed_product(0)
        del node[field]

        assert parse_feed_product(node) is None
        assert any(
            r.getMessage() == "Skipping product with missing id, title or handle"
            for r in capture_logs.records
        )

    @pytest.mark.parametrize(
        "field,value",
        [("id", "not-a-number"), ("id", None), ("title", "   "), ("handle", ""), ("title", 12)],
    )
    def test_blank_or_wrong_type_skips_entry(self, feed_product, field, value):
        node = feed_product(0)
        node[field] = value

        assert parse_feed_product(node) is None

    def test_non_object_entry(self):
        assert parse_feed_product(["not", "an", "object"]) is None

    def test_digit_string_id_accepted(self, feed_product):
        node = feed_product(0)
        node["id"] = "8812"

        assert parse_feed_product(node).shopify_product_id == 8812


class TestExtractProductNodes:
    """Tests for extract_product_nodes()."""

    def test_products_array(self):
        assert extract_product_nodes({"products": [{"id": 1}]}) == [{"id": 1}]

    def test_empty_array_is_valid(self):
        assert extract_product_nodes({"products": []}) == []

    @pytest.mark.parametrize("document", [None, {}, {"products": "x"}, {"products": None}, [], "products"])
    def test_missing_array(self, document):
        assert extract_product_nodes(document) is None
