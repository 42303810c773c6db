"""Unit tests for key construction."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from models.keys import (CUSTOMER_INDEXES, ORDER_INDEXES, ORDER_LINE_INDEXES,
                         PRODUCT_INDEXES, customer_key, index_attributes,
                         index_key_value,
                         order_key, order_line_key, order_lines_prefix,
                         product_index_sort_key, product_key)
from models.product import ProductStatus

CREATED_AT = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


class TestPrimaryKeys:
    """Tests for primary key builders."""

    def test_order_key(self) -> None:
        """Test orders live in the ORDER partition keyed by id."""
        assert order_key("abc") == {"PK": "ORDER", "SK": "abc"}

    def test_order_line_key(self) -> None:
        """Test order lines are keyed by order and line id."""
        assert order_line_key("o1", "l1") == {
            "PK": "ORDER_LINE",
            "SK": "ORDER_ID#o1#LINE_ID#l1",
        }

    def test_order_line_key_starts_with_order_prefix(self) -> None:
        """Test every line key of an order starts with the order's prefix."""
        assert order_line_key("o1", "l1")["SK"].startswith(order_lines_prefix("o1"))

    def test_order_prefix_does_not_match_longer_order_id(self) -> None:
        """Test an order id that prefixes another does not match its lines."""
        assert not order_line_key("o12", "l1")["SK"].startswith(order_lines_prefix("o1"))

    def test_customer_key(self) -> None:
        """Test customers live in the CUSTOMER partition."""
        assert customer_key("c1") == {"PK": "CUSTOMER", "SK": "c1"}

    def test_product_key(self) -> None:
        """Test products use the same prefixed value for PK and SK."""
        assert product_key("p1") == {"PK": "PRODUCT#p1", "SK": "PRODUCT#p1"}

    def test_keys_are_repeatable(self) -> None:
        """Test key derivation is pure."""
        assert order_key("x") == order_key("x")
        assert product_key("x") == product_key("x")


class TestProductIndexSortKey:
    """Tests for product GSI sort keys."""

    def test_value_and_creation_time(self) -> None:
        """Test the sort key joins the value and the creation time."""
        assert (
            product_index_sort_key("Electronics", CREATED_AT)
            == "Electronics#2024-01-02T03:04:05+00:00"
        )

    def test_missing_value_uses_unknown(self) -> None:
        """Test absent values sort under UNKNOWN."""
        assert product_index_sort_key(None, CREATED_AT).startswith("UNKNOWN#")
        assert product_index_sort_key("", CREATED_AT).startswith("UNKNOWN#")

    def test_enum_value(self) -> None:
        """Test enum values use their string value."""
        assert product_index_sort_key(ProductStatus.ACTIVE, CREATED_AT).startswith(
            "ACTIVE#"
        )


class TestIndexAttributes:
    """Tests for GSI attribute construction."""

    def test_order_indexes(self) -> None:
        """Test every order index gets its tag and value."""
        attributes = index_attributes(
            ORDER_INDEXES,
            {
                "customer_id": "c1",
                "customer_account_manager": "jane",
                "customer_email": "a@b.example",
                "branch_id": "b1",
                "created_by": "user",
            },
        )

        assert attributes == {
            "GSI1_PK": "CUSTOMER_ID",
            "GSI1_SK": "c1",
            "GSI2_PK": "CUSTOMER_ACCOUNT_MANAGER",
            "GSI2_SK": "jane",
            "GSI3_PK": "CUSTOMER_EMAIL",
            "GSI3_SK": "a@b.example",
            "GSI4_PK": "BRANCH",
            "GSI4_SK": "b1",
            "GSI5_PK": "CREATED_BY",
            "GSI5_SK": "user",
        }

    def test_order_line_numbers_become_strings(self) -> None:
        """Test quantity and price are indexed as strings."""
        attributes = index_attributes(
            ORDER_LINE_INDEXES, {"product_id": "p1", "quantity": 3, "price": "9.5"}
        )

        assert attributes["GSI2_PK"] == "QUANTITY"
        assert attributes["GSI2_SK"] == "3"
        assert attributes["GSI3_SK"] == "9.5"

    @pytest.mark.parametrize(
        "price, expected",
        [
            (Decimal("10"), "10"),
            (Decimal("10.00"), "10"),
            (Decimal("9.50"), "9.5"),
            (Decimal("1E+2"), "100"),
            (Decimal("0.00"), "0"),
        ],
    )
    def test_decimal_index_values_are_normalised(self, price: Decimal, expected: str) -> None:
        """Test equal prices share one index sort key."""
        attributes = index_attributes(ORDER_LINE_INDEXES, {"price": price})

        assert attributes["GSI3_SK"] == expected
        assert index_key_value(price) == expected

    def test_customer_indexes(self) -> None:
        """Test customer index tags."""
        attributes = index_attributes(
            CUSTOMER_INDEXES, {"name": "n", "email": "e", "account_manager": "m"}
        )

        assert attributes["GSI1_PK"] == "CUSTOMER_NAME"
        assert attributes["GSI2_PK"] == "CUSTOMER_EMAIL"
        assert attributes["GSI3_PK"] == "ACCOUNT_MANAGER"

    def test_product_indexes_share_partition(self) -> None:
        """Test all product indexes use the PRODUCT partition."""
        attributes = index_attributes(
            PRODUCT_INDEXES,
            {"product_type": "a#t", "product_category": "b#t", "status": "ACTIVE#t"},
        )

        assert attributes == {
            "GSI1PK": "PRODUCT",
            "GSI1SK": "a#t",
            "GSI2PK": "PRODUCT",
            "GSI2SK": "b#t",
            "GSI3PK": "PRODUCT",
            "GSI3SK": "ACTIVE#t",
        }

    def test_missing_value_leaves_index_out(self) -> None:
        """Test a record without a value is not written to that index."""
        attributes = index_attributes(ORDER_INDEXES[4:], {"created_by": None})

        assert attributes == {}
