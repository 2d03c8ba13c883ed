"""
Integration tests for PortfolioDataService against the fake backend.

Tests cover:
- Query filters sent for each read
- Parallel dashboard load and its failure behavior
- Price, previous close and rate lookups
- Ledger and master-data writes
"""

from datetime import date
from decimal import Decimal

import pytest

from portfolio_client.core.exceptions import ServerError
from portfolio_client.services import PortfolioDataService

from tests.conftest import (
    FakeBackend,
    account_row,
    rate_row,
    seed_portfolio,
)

TODAY = date(2024, 6, 15)


# =============================================================================
# READ TESTS
# =============================================================================


class TestReads:
    """Tests for the backend reads."""

    def test_fetch_all_loads_every_collection(
        self, backend: FakeBackend, data_service: PortfolioDataService
    ):
        """
        GIVEN a seeded portfolio
        WHEN I fetch everything for June 15
        THEN each collection is decoded and yesterday's snapshot is June 14
        """
        seed_portfolio(backend)

        fetched = data_service.fetch_all(TODAY)

        assert fetched.settings.base_currency == "USD"
        assert [p.symbol for p in fetched.positions] == ["0700.HK", "AAPL"]
        assert [a.currency for a in fetched.accounts] == ["HKD", "USD"]
        assert len(fetched.cash_ledger) == 3
        assert fetched.cash_ledger[0].id == "c1"
        assert fetched.cash_transactions[0].id == "c3"
        assert fetched.snapshot.snapshot_date == date(2024, 6, 14)
        assert fetched.yesterday_snapshot.snapshot_date == date(2024, 6, 14)

    def test_fetch_all_fails_as_a_batch(
        self, backend: FakeBackend, data_service: PortfolioDataService
    ):
        seed_portfolio(backend)
        backend.fail("GET", "portfolio_positions", status=500)

        with pytest.raises(ServerError):
            data_service.fetch_all(TODAY)

    def test_positions_and_accounts_filters(
        self, backend: FakeBackend, data_service: PortfolioDataService
    ):
        archived = account_row("acct-old", "EUR", "Old")
        archived["archived_at"] = "2024-01-01T00:00:00Z"
        backend.seed("portfolio_cash_accounts", account_row("acct-usd", "USD", "USD"), archived)

        accounts = data_service.fetch_cash_accounts()
        data_service.fetch_positions()

        assert [a.id for a in accounts] == ["acct-usd"]
        assert ("archived_at", "is.null") in backend.calls("GET", "portfolio_cash_accounts")[0]
        assert ("total_shares", "gt.0") in backend.calls("GET", "portfolio_positions")[0]

    def test_yesterday_snapshot_excludes_today(
        self, backend: FakeBackend, data_service: PortfolioDataService
    ):
        backend.seed(
            "portfolio_snapshots",
            {"id": "s1", "snapshot_date": "2024-06-14", "total_value": "100"},
            {"id": "s2", "snapshot_date": "2024-06-15", "total_value": "200"},
        )

        snapshot = data_service.fetch_yesterday_snapshot(TODAY)

        assert snapshot.total_value == Decimal("100")
        query = backend.calls("GET", "portfolio_snapshots")[0]
        assert ("snapshot_date", "lt.2024-06-15") in query

    def test_latest_prices_and_previous_closes(
        self, backend: FakeBackend, data_service: PortfolioDataService
    ):
        seed_portfolio(backend)

        latest = data_service.fetch_latest_prices(["AAPL", "0700.HK", "NOPE"])
        previous = data_service.fetch_previous_closes(["AAPL", "0700.HK"], TODAY)

        assert latest == {"AAPL": Decimal("160"), "0700.HK": Decimal("320")}
        assert previous == {"AAPL": Decimal("155"), "0700.HK": Decimal("310")}

    def test_rates_query_both_directions(
        self, backend: FakeBackend, data_service: PortfolioDataService
    ):
        """
        GIVEN an HKD -> USD row and a USD -> JPY row
        WHEN rates to USD are resolved
        THEN both rows are fetched and JPY is inverted
        """
        backend.seed(
            "currency_rates",
            rate_row("HKD", "USD", "0.128", "2024-06-14T00:00:00Z"),
            rate_row("USD", "JPY", "160", "2024-06-14T00:00:00Z"),
        )

        table = data_service.fetch_rates_to_base("usd")

        assert table["HKD"] == Decimal("0.128")
        assert table["JPY"] == Decimal("1") / Decimal("160")
        queries = backend.calls("GET", "currency_rates")
        assert len(queries) == 2

    def test_history_page_sends_date_bounds(
        self, backend: FakeBackend, data_service: PortfolioDataService
    ):
        data_service.fetch_history_page(date(2024, 1, 1), TODAY, 100)

        query = backend.calls("GET", "historical_portfolio_snapshots")[0]
        assert ("snapshot_date", "gte.2024-01-01") in query
        assert ("snapshot_date", "lte.2024-06-15") in query
        assert ("limit", "100") in query


# =============================================================================
# WRITE TESTS
# =============================================================================


class TestWrites:
    """Tests for ledger and master-data writes."""

    def test_delete_group_legs_removes_cash_then_stock(
        self, backend: FakeBackend, data_service: PortfolioDataService
    ):
        backend.seed("cash_transactions", {"id": "c1", "group_id": "g1"}, {"id": "c2", "group_id": "g2"})
        backend.seed("stock_transactions", {"id": "s1", "group_id": "g1"})

        removed = data_service.delete_group_legs("g1")

        assert removed == 2
        assert [r["id"] for r in backend.rows("cash_transactions")] == ["c2"]
        deletes = [(m, p) for m, p, _ in backend.requests if m == "DELETE"]
        assert deletes == [
            ("DELETE", "/rest/v1/cash_transactions"),
            ("DELETE", "/rest/v1/stock_transactions"),
        ]

    def test_create_stock_normalizes_fields(
        self, backend: FakeBackend, data_service: PortfolioDataService
    ):
        stock = data_service.create_stock(" msft ", " Microsoft ", "us", "usd")

        assert stock.symbol == "MSFT"
        assert stock.name == "Microsoft"
        assert stock.market == "US"
        assert stock.currency == "USD"
        assert "exchange" not in backend.rows("stocks_master")[0]

    def test_cash_account_create_and_archive(
        self, backend: FakeBackend, data_service: PortfolioDataService, fixed_now
    ):
        account = data_service.create_cash_account("eur", "Euro Cash")

        archived = data_service.archive_cash_account(account.id, fixed_now)

        assert account.currency == "EUR"
        assert archived.is_archived
        assert backend.rows("portfolio_cash_accounts")[0]["archived_at"] == "2024-06-15T18:30:00.000Z"
