"""
Unit tests for FX rate resolution.

Tests cover:
- Direct and inverted rows
- Latest observation wins, ties keep the direct row
- Zero rates and unrelated rows are skipped
- RateTable lookups and conversion
"""

from datetime import datetime
from decimal import Decimal

import pytest
import pytz

from portfolio_client.core.exceptions import FxRateUnavailableError
from portfolio_client.domain.models import CurrencyRate
from portfolio_client.services import RateTable, resolve_rates_to_base


def _row(from_currency: str, to_currency: str, rate: str, day: int) -> CurrencyRate:
    return CurrencyRate(
        from_currency=from_currency,
        to_currency=to_currency,
        rate=Decimal(rate),
        date=pytz.utc.localize(datetime(2024, 6, day)),
    )


# =============================================================================
# RESOLUTION TESTS
# =============================================================================


class TestResolveRatesToBase:
    """Tests for resolve_rates_to_base."""

    def test_base_is_always_one(self):
        """
        GIVEN no rate rows
        WHEN rates are resolved
        THEN the table holds only the base currency at 1
        """
        table = resolve_rates_to_base([], base="USD")

        assert table.as_dict() == {"USD": Decimal("1")}

    def test_direct_row_used_as_is(self):
        table = resolve_rates_to_base([_row("HKD", "USD", "0.128", 1)])

        assert table["HKD"] == Decimal("0.128")

    def test_inverted_row_is_reciprocal(self):
        """
        GIVEN only a USD -> HKD row at 7.8125
        WHEN rates are resolved
        THEN HKD -> USD is 1 / 7.8125 = 0.128
        """
        table = resolve_rates_to_base([_row("USD", "HKD", "7.8125", 1)])

        assert table["HKD"] == Decimal("0.128")

    def test_latest_observation_wins(self):
        rows = [
            _row("HKD", "USD", "0.127", 1),
            _row("HKD", "USD", "0.129", 3),
            _row("USD", "HKD", "8", 2),
        ]

        table = resolve_rates_to_base(rows)

        assert table["HKD"] == Decimal("0.129")

    def test_newer_inverted_row_beats_older_direct_row(self):
        rows = [_row("HKD", "USD", "0.127", 1), _row("USD", "HKD", "8", 2)]

        table = resolve_rates_to_base(rows)

        assert table["HKD"] == Decimal("0.125")

    def test_tie_keeps_direct_row(self):
        rows = [_row("USD", "HKD", "8", 2), _row("HKD", "USD", "0.127", 2)]

        table = resolve_rates_to_base(rows)

        assert table["HKD"] == Decimal("0.127")

    def test_zero_rate_is_skipped(self):
        """
        GIVEN a USD -> CNY row with rate 0
        WHEN rates are resolved
        THEN CNY stays unavailable instead of dividing by zero
        """
        table = resolve_rates_to_base([_row("USD", "CNY", "0", 1)])

        assert "CNY" not in table

    def test_rows_not_touching_base_are_ignored(self):
        table = resolve_rates_to_base([_row("HKD", "CNY", "0.92", 1)])

        assert set(table) == {"USD"}

    def test_other_base_currency(self):
        table = resolve_rates_to_base([_row("USD", "HKD", "7.8125", 1)], base="hkd")

        assert table.base == "HKD"
        assert table["USD"] == Decimal("7.8125")
        assert table["HKD"] == Decimal("1")


# =============================================================================
# RATE TABLE TESTS
# =============================================================================


class TestRateTable:
    """Tests for RateTable."""

    def test_lookup_is_case_insensitive(self):
        table = RateTable({"hkd": "0.128"})

        assert table.get("HKD") == Decimal("0.128")
        assert table["hkd"] == Decimal("0.128")

    def test_require_missing_raises(self):
        table = RateTable({}, base="USD")

        with pytest.raises(FxRateUnavailableError) as exc_info:
            table.require("EUR")

        assert exc_info.value.currencies == ["EUR"]
        assert exc_info.value.message == "Missing FX rate for EUR."

    def test_missing_lists_sorted_unique_codes(self):
        table = RateTable({"HKD": "0.128"})

        assert table.missing(["eur", "HKD", "CNY", "EUR"]) == ["CNY", "EUR"]

    def test_convert_through_base(self):
        table = RateTable({"HKD": "0.128", "CNY": "0.14"})

        assert table.convert(Decimal("100"), "USD", "HKD") == Decimal("781.25")
        assert table.convert(Decimal("5"), "HKD", "HKD") == Decimal("5")

    def test_convert_with_missing_currency_raises(self):
        table = RateTable({"HKD": "0.128"})

        with pytest.raises(FxRateUnavailableError) as exc_info:
            table.convert(Decimal("1"), "EUR", "JPY")

        assert exc_info.value.message == "Missing FX rates for selected currencies."
