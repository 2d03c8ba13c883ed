"""
Pytest configuration and fixtures for portfolio client tests.

This module provides:
- In-memory SQLite database fixtures
- An in-memory credential store
- A fake REST backend served through httpx.MockTransport
- Row factories for seeding the fake backend
- Service and repository fixtures
- Time helpers for Eastern timezone
"""

import json
import threading
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

import httpx
import pytest
import pytz
from sqlalchemy import create_engine, StaticPool
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from portfolio_client.app_context import AppContext
from portfolio_client.config.settings import Settings, reset_settings
from portfolio_client.main import create_app
from portfolio_client.repositories.sqlalchemy.database import Base
# Import ORM models to register them with Base before creating tables
from portfolio_client.repositories.sqlalchemy import orm_models  # noqa: F401
from portfolio_client.repositories.sqlalchemy import (
    SqlAlchemyCacheRepository,
    SqlAlchemyPendingGroupRepository,
    SqlAlchemyTickerRepository,
    SqlAlchemyLocalTransactionRepository,
    SqlAlchemyCapitalRepository,
    SqlAlchemyHoldingRepository,
)
from portfolio_client.remote import AuthService, BackendClient
from portfolio_client.services import (
    AnalysisService,
    LocalPortfolioService,
    PortfolioCache,
    PortfolioDataService,
    PortfolioStore,
    RateTable,
    TransactionSubmitter,
)
from portfolio_client.domain.models import CashAccount, Stock

EASTERN_TZ = pytz.timezone("US/Eastern")
BACKEND_URL = "http://backend.test"


# =============================================================================
# TIMEZONE HELPERS
# =============================================================================


def eastern_datetime(
    year: int,
    month: int,
    day: int,
    hour: int = 10,
    minute: int = 0,
    second: int = 0,
) -> datetime:
    """Create a localized datetime in US/Eastern timezone."""
    return EASTERN_TZ.localize(datetime(year, month, day, hour, minute, second))


def utc_iso(dt: datetime) -> str:
    """Format an aware datetime the way the backend returns timestamps."""
    return dt.astimezone(pytz.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"


@pytest.fixture
def fixed_now() -> datetime:
    """Fixed 'now' timestamp for deterministic tests."""
    return eastern_datetime(2024, 6, 15, 14, 30, 0)


# =============================================================================
# DATABASE FIXTURES
# =============================================================================


@pytest.fixture(scope="function")
def test_engine():
    """Create test database engine with shared in-memory SQLite."""
    # Reset settings for clean state
    reset_settings()

    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def test_sessions(test_engine) -> sessionmaker:
    """Session factory on the test database."""
    return sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


# =============================================================================
# REPOSITORY FIXTURES
# =============================================================================


@pytest.fixture
def cache_repo(test_sessions) -> SqlAlchemyCacheRepository:
    return SqlAlchemyCacheRepository(test_sessions)


@pytest.fixture
def pending_repo(test_sessions) -> SqlAlchemyPendingGroupRepository:
    return SqlAlchemyPendingGroupRepository(test_sessions)


@pytest.fixture
def ticker_repo(test_sessions) -> SqlAlchemyTickerRepository:
    return SqlAlchemyTickerRepository(test_sessions)


@pytest.fixture
def local_transaction_repo(test_sessions) -> SqlAlchemyLocalTransactionRepository:
    return SqlAlchemyLocalTransactionRepository(test_sessions)


@pytest.fixture
def capital_repo(test_sessions) -> SqlAlchemyCapitalRepository:
    return SqlAlchemyCapitalRepository(test_sessions)


@pytest.fixture
def holding_repo(test_sessions) -> SqlAlchemyHoldingRepository:
    return SqlAlchemyHoldingRepository(test_sessions)


# =============================================================================
# CREDENTIALS
# =============================================================================


class InMemoryCredentialStore:
    """CredentialStore kept in a dict instead of the OS keychain."""

    def __init__(self):
        self.values: dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value

    def delete(self, key: str) -> None:
        self.values.pop(key, None)


@pytest.fixture
def credentials() -> InMemoryCredentialStore:
    return InMemoryCredentialStore()


# =============================================================================
# FAKE BACKEND
# =============================================================================


def _comparable(value: Any) -> Any:
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return str(value)


def _matches(row: dict, column: str, expression: str) -> bool:
    """Evaluate one PostgREST filter (``eq.x``, ``lt.x``, ``is.null`` ...)."""
    operator, _, argument = expression.partition(".")
    value = row.get(column)
    if operator == "is":
        return value is None if argument == "null" else value is not None
    if value is None:
        return False
    if operator == "eq":
        return str(value) == argument
    left, right = _comparable(value), _comparable(argument)
    if type(left) is not type(right):
        left, right = str(value), argument
    if operator == "gt":
        return left > right
    if operator == "gte":
        return left >= right
    if operator == "lt":
        return left < right
    if operator == "lte":
        return left <= right
    raise ValueError(f"Unsupported operator: {operator}")


class FakeBackend:
    """
    Minimal in-memory PostgREST and auth server.

    Tables are lists of JSON-ready dicts. Every request is recorded in
    ``requests`` as (method, path, query pairs). ``fail`` makes a table
    operation answer with an error status after a number of successes, and
    ``network_down`` makes every request raise a transport error.
    """

    def __init__(self):
        self.tables: dict[str, list[dict]] = {}
        self.requests: list[tuple[str, str, list[tuple[str, str]]]] = []
        self.users: dict[str, dict] = {}
        self.tokens: dict[str, str] = {}
        self.network_down = False
        self._failures: dict[tuple[str, str], list[int]] = {}
        self._counter = 0
        self._lock = threading.Lock()

    # Setup

    def seed(self, table: str, *rows: dict) -> None:
        self.tables.setdefault(table, []).extend(dict(row) for row in rows)

    def rows(self, table: str) -> list[dict]:
        return self.tables.get(table, [])

    def fail(self, method: str, table: str, status: int = 500, after: int = 0) -> None:
        """Answer ``method`` on ``table`` with ``status`` once ``after`` calls have succeeded."""
        self._failures[(method, table)] = [after, status]

    def add_user(self, email: str, password: str, user_id: str = "user-1") -> None:
        self.users[email] = {"id": user_id, "email": email, "password": password}

    def calls(self, method: str, table: str) -> list[list[tuple[str, str]]]:
        """Query pairs of every recorded call of ``method`` on ``table``."""
        path = f"/rest/v1/{table}"
        return [query for m, p, query in self.requests if m == method and p == path]

    # Transport

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def handle(self, request: httpx.Request) -> httpx.Response:
        with self._lock:
            if self.network_down:
                raise httpx.ConnectError("Connection refused", request=request)
            query = list(request.url.params.multi_items())
            path = request.url.path
            self.requests.append((request.method, path, query))
            if path.startswith("/auth/v1/"):
                return self._handle_auth(request, path[len("/auth/v1/"):])
            if path.startswith("/rest/v1/"):
                return self._handle_rest(request, path[len("/rest/v1/"):], query)
            return httpx.Response(404, json={"message": "not found"})

    def _next_id(self, table: str) -> str:
        self._counter += 1
        return f"{table}-{self._counter}"

    def _handle_rest(
        self, request: httpx.Request, table: str, query: list[tuple[str, str]]
    ) -> httpx.Response:
        failure = self._failures.get((request.method, table))
        if failure is not None:
            if failure[0] > 0:
                failure[0] -= 1
            else:
                return httpx.Response(failure[1], json={"message": f"{table} unavailable"})

        rows = self.tables.setdefault(table, [])
        filters = [(k, v) for k, v in query if k not in ("select", "order", "limit")]
        selected = [row for row in rows if all(_matches(row, k, v) for k, v in filters)]

        if request.method == "GET":
            for key, value in query:
                if key == "order":
                    column, _, direction = value.partition(".")
                    selected.sort(
                        key=lambda row: _comparable(row.get(column)),
                        reverse=direction == "desc",
                    )
            limit = dict(query).get("limit")
            if limit is not None:
                selected = selected[: int(limit)]
            return httpx.Response(200, json=selected)

        if request.method == "POST":
            row = json.loads(request.content)
            row.setdefault("id", self._next_id(table))
            rows.append(row)
            return httpx.Response(201, json=[row])

        if request.method == "PATCH":
            changes = json.loads(request.content)
            for row in selected:
                row.update(changes)
            return httpx.Response(200, json=selected)

        if request.method == "DELETE":
            self.tables[table] = [row for row in rows if row not in selected]
            return httpx.Response(200, json=selected)

        return httpx.Response(405, json={"message": "method not allowed"})

    def _handle_auth(self, request: httpx.Request, action: str) -> httpx.Response:
        if action == "token":
            body = json.loads(request.content)
            user = self.users.get(body.get("email"))
            if user is None or user["password"] != body.get("password"):
                return httpx.Response(
                    400,
                    json={"error": "invalid_grant", "error_description": "Invalid login credentials"},
                )
            return httpx.Response(200, json=self._session_for(user))

        if action == "signup":
            body = json.loads(request.content)
            if body.get("email") in self.users:
                return httpx.Response(422, json={"msg": "User already registered"})
            self.add_user(body["email"], body["password"], user_id=f"user-{len(self.users) + 1}")
            user = self.users[body["email"]]
            return httpx.Response(
                200,
                json={"user": {"id": user["id"], "email": user["email"]}, "session": self._session_for(user)},
            )

        if action == "user":
            token = request.headers.get("Authorization", "").removeprefix("Bearer ")
            email = self.tokens.get(token)
            if email is None:
                return httpx.Response(401, json={"message": "invalid token"})
            user = self.users[email]
            return httpx.Response(200, json={"id": user["id"], "email": user["email"]})

        return httpx.Response(404, json={"message": "not found"})

    def _session_for(self, user: dict) -> dict:
        token = f"token-{user['id']}-{len(self.tokens) + 1}"
        self.tokens[token] = user["email"]
        return {
            "access_token": token,
            "refresh_token": f"refresh-{user['id']}",
            "expires_in": 3600,
            "user": {"id": user["id"], "email": user["email"]},
        }


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


# =============================================================================
# ROW FACTORIES (fake backend seeding)
# =============================================================================


def stock_row(
    stock_id: str,
    symbol: str,
    currency: str = "USD",
    market: str = "US",
    name: Optional[str] = None,
) -> dict:
    return {
        "id": stock_id,
        "symbol": symbol,
        "name": name or f"{symbol} Inc.",
        "currency": currency,
        "market": market,
        "exchange": None,
    }


def account_row(account_id: str, currency: str, display_name: str) -> dict:
    return {
        "id": account_id,
        "currency": currency,
        "display_name": display_name,
        "archived_at": None,
    }


def position_row(
    stock_id: str,
    symbol: str,
    shares: str,
    cost_base: str,
    cost_native: Optional[str] = None,
) -> dict:
    return {
        "id": f"pos-{symbol}",
        "stock_id": stock_id,
        "symbol": symbol,
        "total_shares": shares,
        "total_cost_base": cost_base,
        "total_cost_native": cost_native,
    }


def rate_row(from_currency: str, to_currency: str, rate: str, when: str) -> dict:
    return {
        "id": f"rate-{from_currency}-{to_currency}-{when}",
        "from_currency": from_currency,
        "to_currency": to_currency,
        "rate": rate,
        "date": when,
    }


def price_row(symbol: str, price: str, day: str) -> dict:
    return {"id": f"price-{symbol}-{day}", "symbol": symbol, "price": price, "date": day}


def snapshot_row(day: str, total_value: str) -> dict:
    return {"id": f"snap-{day}", "snapshot_date": day, "total_value": total_value}


def cash_row(
    row_id: str,
    account_id: str,
    leg_type: str,
    direction: str,
    amount: str,
    base_amount: str,
    occurred_at: str,
    currency: str = "USD",
) -> dict:
    return {
        "id": row_id,
        "group_id": f"group-{row_id}",
        "cash_account_id": account_id,
        "leg_type": leg_type,
        "direction": direction,
        "amount": amount,
        "currency": currency,
        "base_amount": base_amount,
        "occurred_at": occurred_at,
    }


def history_row(day: date, total_value: str, nav: str, principle: str = "10000") -> dict:
    return {
        "id": f"hist-{day.isoformat()}",
        "snapshot_date": day.isoformat(),
        "total_value": total_value,
        "principle": principle,
        "nav_per_share": nav,
    }


def benchmark_row(symbol: str, day: date, price: str) -> dict:
    return {
        "id": f"bench-{symbol}-{day.isoformat()}",
        "index_symbol": symbol,
        "snapshot_date": day.isoformat(),
        "price": price,
    }


def seed_portfolio(backend: FakeBackend) -> None:
    """
    A USD and an HKD account, AAPL and 0700.HK positions, prices and rates.

    - USD account: 10,000 deposited, 1,505 spent on AAPL
    - HKD account: 7,812.50 HKD (1,000 USD at 7.8125)
    - AAPL: 10 shares, cost 1,505, last 160, previous close 155
    - 0700.HK: 100 shares, cost 4,000 USD, last 320 HKD, previous close 310 HKD
    """
    backend.seed(
        "stocks_master",
        stock_row("stk-aapl", "AAPL"),
        stock_row("stk-0700", "0700.HK", currency="HKD", market="HK", name="Tencent"),
    )
    backend.seed(
        "portfolio_cash_accounts",
        account_row("acct-usd", "USD", "USD Cash"),
        account_row("acct-hkd", "HKD", "HKD Cash"),
    )
    backend.seed(
        "portfolio_positions",
        position_row("stk-aapl", "AAPL", "10", "1505"),
        position_row("stk-0700", "0700.HK", "100", "4000", cost_native="31250"),
    )
    backend.seed(
        "user_portfolio_settings",
        {"user_id": "user-1", "base_currency": "USD"},
    )
    backend.seed(
        "currency_rates",
        rate_row("HKD", "USD", "0.128", "2024-06-14T00:00:00Z"),
    )
    backend.seed(
        "historical_prices",
        price_row("AAPL", "155", "2024-06-14"),
        price_row("AAPL", "160", "2024-06-15"),
        price_row("0700.HK", "310", "2024-06-14"),
        price_row("0700.HK", "320", "2024-06-15"),
    )
    backend.seed(
        "portfolio_snapshots",
        snapshot_row("2024-06-13", "11000"),
        snapshot_row("2024-06-14", "13000"),
    )
    backend.seed(
        "cash_transactions",
        cash_row(
            "c1", "acct-usd", "deposit", "inflow", "10000", "10000.0000",
            "2024-06-01T14:00:00.000Z",
        ),
        cash_row(
            "c2", "acct-usd", "stock_buy", "outflow", "1505", "-1505.0000",
            "2024-06-03T14:00:00.000Z",
        ),
        cash_row(
            "c3", "acct-hkd", "deposit", "inflow", "7812.50", "1000.0000",
            "2024-06-04T14:00:00.000Z", currency="HKD",
        ),
    )


# =============================================================================
# MODEL FACTORIES
# =============================================================================


def make_stock(
    stock_id: str = "stk-aapl",
    symbol: str = "AAPL",
    currency: str = "USD",
    market: str = "US",
) -> Stock:
    return Stock(**stock_row(stock_id, symbol, currency=currency, market=market))


def make_account(
    account_id: str = "acct-usd",
    currency: str = "USD",
    display_name: Optional[str] = None,
    archived_at: Optional[str] = None,
) -> CashAccount:
    row = account_row(account_id, currency, display_name or f"{currency} Cash")
    row["archived_at"] = archived_at
    return CashAccount(**row)


def usd_hkd_rates() -> RateTable:
    """USD base with HKD at 0.128 (7.8125 HKD per USD)."""
    return RateTable({"HKD": Decimal("0.128")}, base="USD")


# =============================================================================
# SERVICE FIXTURES
# =============================================================================


@pytest.fixture
def backend_client(backend, credentials) -> BackendClient:
    client = BackendClient(
        base_url=BACKEND_URL,
        api_key="test-key",
        credentials=credentials,
        transport=backend.transport(),
    )
    yield client
    client.close()


@pytest.fixture
def auth_service(backend_client, credentials) -> AuthService:
    return AuthService(backend_client, credentials)


@pytest.fixture
def data_service(backend_client) -> PortfolioDataService:
    return PortfolioDataService(backend_client)


@pytest.fixture
def portfolio_cache(cache_repo) -> PortfolioCache:
    cache = PortfolioCache(cache_repo)
    cache.ensure_schema()
    return cache


@pytest.fixture
def submitter(data_service, pending_repo) -> TransactionSubmitter:
    return TransactionSubmitter(data_service, pending_repo)


@pytest.fixture
def store(data_service, portfolio_cache, submitter, fixed_now) -> PortfolioStore:
    """PortfolioStore on the fake backend with the clock fixed at ``fixed_now``."""
    return PortfolioStore(
        data_service,
        portfolio_cache,
        submitter,
        tz=EASTERN_TZ,
        clock=lambda: fixed_now,
    )


@pytest.fixture
def analysis_service(data_service) -> AnalysisService:
    return AnalysisService(data_service, page_size=3, max_pages=10)


@pytest.fixture
def local_service(
    ticker_repo,
    local_transaction_repo,
    capital_repo,
    holding_repo,
) -> LocalPortfolioService:
    return LocalPortfolioService(
        ticker_repo=ticker_repo,
        transaction_repo=local_transaction_repo,
        capital_repo=capital_repo,
        holding_repo=holding_repo,
    )


# =============================================================================
# API TEST CLIENT FIXTURE
# =============================================================================


@pytest.fixture
def app_context(test_sessions, backend, credentials, tmp_path) -> AppContext:
    settings = Settings(
        data_dir=tmp_path,
        backend_url=BACKEND_URL,
        backend_api_key="test-key",
        timezone="US/Eastern",
    )
    return AppContext(
        settings=settings,
        session_factory=test_sessions,
        credentials=credentials,
        transport=backend.transport(),
    )


@pytest.fixture
def client(app_context) -> TestClient:
    """Provide FastAPI test client over the fake backend and test database."""
    app = create_app(app_context)
    with TestClient(app) as c:
        yield c
    reset_settings()


# =============================================================================
# HELPER FUNCTIONS (exported for use in tests)
# =============================================================================


def assert_decimal_equal(
    actual: Decimal,
    expected: Decimal,
    places: int = 4,
    msg: str = "",
) -> None:
    """Assert two decimals are equal to the given number of places."""
    quantizer = Decimal(1).scaleb(-places)
    actual_q = Decimal(actual).quantize(quantizer)
    expected_q = Decimal(expected).quantize(quantizer)
    assert actual_q == expected_q, f"{msg} Expected {expected_q}, got {actual_q}"
