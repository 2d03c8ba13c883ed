"""
Integration tests for AnalysisService paging and comparison.

Tests cover:
- Backward pagination of NAV history
- Page limits and start-date cut-off
- Benchmark comparison and normalized series
- Failure of either history
"""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from portfolio_client.core.exceptions import ServerError
from portfolio_client.services import AnalysisService, PortfolioDataService, TimeRange

from tests.conftest import (
    FakeBackend,
    benchmark_row,
    history_row,
    assert_decimal_equal,
)

TODAY = date(2024, 6, 15)


def _seed_history(backend: FakeBackend, navs: list[str]) -> None:
    """One row per day ending today, oldest first."""
    first = TODAY - timedelta(days=len(navs) - 1)
    backend.seed(
        "historical_portfolio_snapshots",
        *[
            history_row(first + timedelta(days=i), str(Decimal(nav) * 10000), nav)
            for i, nav in enumerate(navs)
        ],
    )


def _seed_benchmark(backend: FakeBackend, symbol: str, prices: list[str]) -> None:
    first = TODAY - timedelta(days=len(prices) - 1)
    backend.seed(
        "historical_benchmark_snapshots",
        *[benchmark_row(symbol, first + timedelta(days=i), p) for i, p in enumerate(prices)],
    )


# =============================================================================
# PAGINATION TESTS
# =============================================================================


class TestHistoryPaging:
    """Tests for paging NAV history backwards."""

    def test_pages_until_short_page(
        self, backend: FakeBackend, analysis_service: AnalysisService
    ):
        """
        GIVEN 8 daily rows and a page size of 3
        WHEN 3M history is loaded
        THEN three pages are requested, each ending the day before the last
        AND all 8 rows come back newest first
        """
        _seed_history(backend, ["1.00", "1.01", "1.02", "1.03", "1.04", "1.05", "1.06", "1.07"])

        rows = analysis_service.load_portfolio_history(TimeRange.THREE_MONTHS, today=TODAY)

        assert len(rows) == 8
        assert rows[0].snapshot_date == TODAY
        assert rows[-1].snapshot_date == date(2024, 6, 8)
        ends = [
            dict((k, v) for k, v in query if v.startswith("lte."))["snapshot_date"]
            for query in backend.calls("GET", "historical_portfolio_snapshots")
        ]
        assert ends == ["lte.2024-06-15", "lte.2024-06-12", "lte.2024-06-09"]

    def test_start_date_bounds_the_window(
        self, backend: FakeBackend, analysis_service: AnalysisService
    ):
        backend.seed(
            "historical_portfolio_snapshots",
            history_row(date(2023, 1, 1), "9000", "0.90"),
            history_row(date(2024, 6, 1), "10000", "1.00"),
        )

        rows = analysis_service.load_portfolio_history(TimeRange.THREE_MONTHS, today=TODAY)

        assert [r.snapshot_date for r in rows] == [date(2024, 6, 1)]
        query = backend.calls("GET", "historical_portfolio_snapshots")[0]
        assert ("snapshot_date", "gte.2024-03-17") in query

    def test_all_history_has_no_start(
        self, backend: FakeBackend, analysis_service: AnalysisService
    ):
        backend.seed(
            "historical_portfolio_snapshots",
            history_row(date(2015, 1, 1), "9000", "0.90"),
        )

        rows = analysis_service.load_portfolio_history(TimeRange.ALL, today=TODAY)

        assert len(rows) == 1
        query = backend.calls("GET", "historical_portfolio_snapshots")[0]
        assert not any(v.startswith("gte.") for _, v in query)

    def test_max_pages_caps_requests(
        self, backend: FakeBackend, data_service: PortfolioDataService
    ):
        _seed_history(backend, ["1"] * 10)
        service = AnalysisService(data_service, page_size=2, max_pages=2)

        rows = service.load_portfolio_history(TimeRange.ONE_YEAR, today=TODAY)

        assert len(rows) == 4
        assert len(backend.calls("GET", "historical_portfolio_snapshots")) == 2


# =============================================================================
# COMPARISON TESTS
# =============================================================================


class TestCompare:
    """Tests for portfolio vs benchmark comparison."""

    def test_compare_against_benchmark(
        self, backend: FakeBackend, analysis_service: AnalysisService
    ):
        """
        GIVEN NAV rising from 1.00 to 1.10
        AND the S&P 500 rising from 100 to 105
        WHEN the 3M comparison is built
        THEN the portfolio gained 10%, the benchmark 5% and the difference is 5
        AND both series start at 100
        """
        _seed_history(backend, ["1.00", "1.05", "1.02", "1.10"])
        _seed_benchmark(backend, "^GSPC", ["100", "102", "101", "105"])

        result = analysis_service.compare(TimeRange.THREE_MONTHS, "^GSPC", today=TODAY)

        assert_decimal_equal(result.portfolio_performance, Decimal("10"))
        assert_decimal_equal(result.benchmark_performance, Decimal("5"))
        assert_decimal_equal(result.relative_performance, Decimal("5"))
        assert result.portfolio_series[0].value == Decimal("100")
        assert_decimal_equal(result.benchmark_series[-1].value, Decimal("105"))
        assert result.time_range == "3M"
        assert result.risk.max_drawdown > 0

    def test_missing_benchmark_data(
        self, backend: FakeBackend, analysis_service: AnalysisService
    ):
        _seed_history(backend, ["1.00", "1.10"])

        result = analysis_service.compare(TimeRange.THREE_MONTHS, "^HSI", today=TODAY)

        assert result.benchmark_performance is None
        assert result.relative_performance is None
        assert result.benchmark_series == []
        assert_decimal_equal(result.portfolio_performance, Decimal("10"))

    def test_failed_history_fails_comparison(
        self, backend: FakeBackend, analysis_service: AnalysisService
    ):
        _seed_benchmark(backend, "^GSPC", ["100", "105"])
        backend.fail("GET", "historical_portfolio_snapshots", status=500)

        with pytest.raises(ServerError):
            analysis_service.compare(TimeRange.THREE_MONTHS, "^GSPC", today=TODAY)
