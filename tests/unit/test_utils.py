"""
Unit tests for utils.py module.

Tests money helpers, calendar arithmetic and payload parsing.
"""

import json
from datetime import date
from decimal import Decimal, InvalidOperation

import pandas as pd
import pytest

from cashproj.exceptions import TimeIndexError
from cashproj.utils import (
    add_months,
    end_of_month,
    month_index,
    months_between,
    parse_amount,
    parse_bonus_groups,
    parse_custom_months,
    parse_year_month,
    round_money,
    round_whole,
    to_decimal,
)


class TestMoneyHelpers:
    """Tests for decimal coercion and rounding."""

    def test_to_decimal(self):
        assert to_decimal("12.50") == Decimal("12.50")
        assert to_decimal(" 7 ") == Decimal("7")
        assert to_decimal(0.1) == Decimal("0.1")
        assert to_decimal(3) == Decimal("3")

    def test_to_decimal_rejects(self):
        with pytest.raises(TypeError):
            to_decimal(True)
        with pytest.raises(TypeError):
            to_decimal([1])
        with pytest.raises(InvalidOperation):
            to_decimal("abc")

    @pytest.mark.parametrize("value", [None, "", "abc", "-5", "NaN", "Infinity", True, [1]])
    def test_parse_amount_unusable(self, value):
        assert parse_amount(value) is None

    def test_parse_amount_valid(self):
        assert parse_amount("0") == Decimal("0")
        assert parse_amount(1500) == Decimal("1500")

    def test_round_money_half_up(self):
        assert round_money(Decimal("0.125")) == Decimal("0.13")
        assert round_money(Decimal("-0.125")) == Decimal("-0.13")
        assert round_money(Decimal("0.124")) == Decimal("0.12")

    def test_round_whole(self):
        assert round_whole(Decimal("2220.5")) == Decimal("2221")
        assert round_whole(Decimal("2220.49")) == Decimal("2220")


class TestCalendarHelpers:
    """Tests for month arithmetic."""

    def test_add_months(self):
        assert add_months(date(2025, 1, 31), 1) == date(2025, 2, 1)
        assert add_months(date(2025, 11, 15), 3) == date(2026, 2, 1)
        assert add_months(date(2025, 1, 1), -1) == date(2024, 12, 1)

    def test_end_of_month(self):
        assert end_of_month(date(2024, 2, 10)) == date(2024, 2, 29)
        assert end_of_month(date(2025, 2, 10)) == date(2025, 2, 28)

    def test_months_between(self):
        assert months_between(date(2025, 11, 30), date(2026, 2, 1)) == 3
        assert months_between(date(2025, 3, 1), date(2025, 1, 1)) == -2

    def test_parse_year_month(self):
        assert parse_year_month("2025-03") == date(2025, 3, 1)
        assert parse_year_month("2025-03-17") == date(2025, 3, 1)

    @pytest.mark.parametrize("value", ["2025-13", "March", "2025/03", ""])
    def test_parse_year_month_invalid(self, value):
        with pytest.raises(TimeIndexError):
            parse_year_month(value)

    def test_month_index(self):
        idx = month_index(date(2025, 1, 15), 3)
        assert list(idx) == [pd.Timestamp("2025-01-01"), pd.Timestamp("2025-02-01"),
                             pd.Timestamp("2025-03-01")]
        assert len(month_index(date(2025, 1, 1), 0)) == 0


class TestPayloadHelpers:
    """Tests for custom month and bonus group parsing."""

    def test_custom_months(self):
        assert parse_custom_months([1, 7]) == frozenset({1, 7})
        assert parse_custom_months("[3, 9]") == frozenset({3, 9})
        assert parse_custom_months([1, 13, True, "2"]) == frozenset({1})
        assert parse_custom_months("oops") == frozenset()
        assert parse_custom_months(None) == frozenset()

    def test_bonus_groups_stored_form(self):
        raw = json.dumps([{"month": 12, "amount": "1.5"}, {"month": 6, "amount": "1"}])
        assert parse_bonus_groups(raw) == ((12, Decimal("1.5")), (6, Decimal("1")))

    def test_bonus_groups_multiplier_key_and_pairs(self):
        assert parse_bonus_groups([{"month": 3, "multiplier": 2}]) == ((3, Decimal("2")),)
        assert parse_bonus_groups([(4, "0.5")]) == ((4, Decimal("0.5")),)

    def test_bonus_groups_drops_invalid(self):
        groups = [
            {"month": 0, "amount": "1"},
            {"month": 5, "amount": "0"},
            {"month": 5, "amount": "x"},
            "junk",
            {"month": 8, "amount": "1"},
        ]
        assert parse_bonus_groups(groups) == ((8, Decimal("1")),)
        assert parse_bonus_groups("{not json") == ()
