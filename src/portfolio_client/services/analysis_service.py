"""Analysis service: NAV history, benchmark comparison and risk metrics."""

import logging
from datetime import date, timedelta
from decimal import Decimal
from enum import Enum
from typing import Callable, Optional, Sequence, TypeVar

from portfolio_client.core.money import ZERO, HUNDRED
from portfolio_client.core.timezone import today_local
from portfolio_client.domain.models import HistoricalPortfolioSnapshot, BenchmarkSnapshot
from portfolio_client.domain.views import RiskMetrics, SeriesPoint, PerformanceComparison
from portfolio_client.services.portfolio_data_service import PortfolioDataService, run_all

logger = logging.getLogger(__name__)

TRADING_DAYS_PER_YEAR = 252

R = TypeVar("R")


class TimeRange(str, Enum):
    """Look-back windows offered on the analysis screen."""

    THREE_MONTHS = "3M"
    SIX_MONTHS = "6M"
    ONE_YEAR = "1Y"
    THREE_YEARS = "3Y"
    FIVE_YEARS = "5Y"
    TEN_YEARS = "10Y"
    ALL = "ALL"

    @property
    def days(self) -> Optional[int]:
        return _RANGE_DAYS[self]

    def start_date(self, end: Optional[date] = None) -> Optional[date]:
        """First day of the window ending on ``end``, or None for all history."""
        if self.days is None:
            return None
        return (end or today_local()) - timedelta(days=self.days)


_RANGE_DAYS = {
    TimeRange.THREE_MONTHS: 90,
    TimeRange.SIX_MONTHS: 180,
    TimeRange.ONE_YEAR: 365,
    TimeRange.THREE_YEARS: 365 * 3,
    TimeRange.FIVE_YEARS: 365 * 5,
    TimeRange.TEN_YEARS: 365 * 10,
    TimeRange.ALL: None,
}

# Benchmark index symbol -> display name
BENCHMARKS = {
    "^GSPC": "S&P 500",
    "^IXIC": "NASDAQ",
    "^DJI": "Dow Jones",
    "000001.SS": "SSE Composite",
    "399001.SZ": "SZSE Component",
    "000300.SS": "CSI 300",
    "^FTSE": "FTSE 100",
    "^HSI": "Hang Seng",
}

DEFAULT_BENCHMARK = "^GSPC"


# Metrics over a NAV series in ascending date order


def daily_returns(navs: Sequence[Decimal]) -> list[Decimal]:
    """Day-over-day returns; days following a non-positive NAV are skipped."""
    returns = []
    for previous, current in zip(navs, navs[1:]):
        if previous > ZERO:
            returns.append((current - previous) / previous)
    return returns


def annualized_volatility(navs: Sequence[Decimal]) -> Decimal:
    """Population standard deviation of daily returns, annualized, in percent."""
    returns = daily_returns(navs)
    if not returns:
        return ZERO
    mean = sum(returns, ZERO) / len(returns)
    variance = sum(((r - mean) ** 2 for r in returns), ZERO) / len(returns)
    return variance.sqrt() * Decimal(TRADING_DAYS_PER_YEAR).sqrt() * HUNDRED


def max_drawdown(navs: Sequence[Decimal]) -> Decimal:
    """Largest peak-to-trough decline, in percent."""
    worst = ZERO
    peak: Optional[Decimal] = None
    for nav in navs:
        if peak is None or nav > peak:
            peak = nav
        if peak > ZERO:
            worst = max(worst, (peak - nav) / peak)
    return worst * HUNDRED


def sharpe_ratio(navs: Sequence[Decimal], risk_free_rate: Decimal = Decimal("0.04")) -> Decimal:
    """Annualized excess return over annualized volatility; zero without volatility."""
    returns = daily_returns(navs)
    if not returns:
        return ZERO
    volatility = annualized_volatility(navs) / HUNDRED
    if volatility <= ZERO:
        return ZERO
    annual_return = sum(returns, ZERO) / len(returns) * TRADING_DAYS_PER_YEAR
    return (annual_return - risk_free_rate) / volatility


def performance_percent(first: Optional[Decimal], last: Optional[Decimal]) -> Optional[Decimal]:
    """Percent change from ``first`` to ``last``; None when undefined."""
    if first is None or last is None or first <= ZERO:
        return None
    return (last - first) / first * HUNDRED


def normalize_to_100(points: Sequence[tuple[date, Decimal]]) -> list[SeriesPoint]:
    """Rebase an ascending series so its first value is 100."""
    if not points or points[0][1] <= ZERO:
        return []
    first = points[0][1]
    return [SeriesPoint(day=day, value=value / first * HUNDRED) for day, value in points]


def _nav_points(snapshots: Sequence[HistoricalPortfolioSnapshot]) -> list[tuple[date, Decimal]]:
    """Ascending (date, NAV per share) pairs; rows without a NAV are dropped."""
    return [
        (s.snapshot_date, s.nav_per_share)
        for s in sorted(snapshots, key=lambda s: s.snapshot_date)
        if s.nav_per_share is not None
    ]


def _price_points(snapshots: Sequence[BenchmarkSnapshot]) -> list[tuple[date, Decimal]]:
    return [(s.snapshot_date, s.price) for s in sorted(snapshots, key=lambda s: s.snapshot_date)]


class AnalysisService:
    """
    Service for the analysis screen.

    Loads NAV and benchmark history page by page and derives performance
    and risk figures. All metrics read the series in ascending date order.
    """

    def __init__(
        self,
        data_service: PortfolioDataService,
        page_size: int = 1000,
        max_pages: int = 20,
        risk_free_rate: Decimal = Decimal("0.04"),
    ):
        self._data = data_service
        self._page_size = page_size
        self._max_pages = max_pages
        self._risk_free_rate = risk_free_rate

    def _paginate(
        self,
        fetch_page: Callable[[Optional[date], date, int], list[R]],
        start: Optional[date],
        end: date,
    ) -> list[R]:
        """
        Collect pages walking backwards from ``end``.

        Stops on an empty page, a short page, once the oldest row reaches
        ``start`` or after ``max_pages`` requests. Rows are deduplicated by
        id and returned newest first.
        """
        rows: list = []
        current_end = end
        for _ in range(self._max_pages):
            page = fetch_page(start, current_end, self._page_size)
            if not page:
                break
            rows.extend(page)
            if len(page) < self._page_size:
                break
            oldest = min(row.snapshot_date for row in page)
            current_end = oldest - timedelta(days=1)
            if start is not None and oldest <= start:
                break
        else:
            logger.warning("Stopped paging after %d pages", self._max_pages)

        unique = {}
        for row in rows:
            unique.setdefault(row.id, row)
        return sorted(unique.values(), key=lambda row: row.snapshot_date, reverse=True)

    def load_portfolio_history(
        self,
        time_range: TimeRange = TimeRange.THREE_MONTHS,
        today: Optional[date] = None,
    ) -> list[HistoricalPortfolioSnapshot]:
        """NAV history for ``time_range``, newest first."""
        today = today or today_local()
        return self._paginate(
            self._data.fetch_history_page,
            TimeRange(time_range).start_date(today),
            today,
        )

    def load_benchmark_history(
        self,
        symbol: str = DEFAULT_BENCHMARK,
        time_range: TimeRange = TimeRange.THREE_MONTHS,
        today: Optional[date] = None,
    ) -> list[BenchmarkSnapshot]:
        """Index levels for ``symbol`` over ``time_range``, newest first."""
        today = today or today_local()
        return self._paginate(
            lambda start, end, limit: self._data.fetch_benchmark_page(symbol, start, end, limit),
            TimeRange(time_range).start_date(today),
            today,
        )

    def risk_metrics(self, snapshots: Sequence[HistoricalPortfolioSnapshot]) -> RiskMetrics:
        navs = [nav for _, nav in _nav_points(snapshots)]
        return RiskMetrics(
            volatility=annualized_volatility(navs),
            max_drawdown=max_drawdown(navs),
            sharpe_ratio=sharpe_ratio(navs, self._risk_free_rate),
        )

    def compare(
        self,
        time_range: TimeRange = TimeRange.THREE_MONTHS,
        benchmark: str = DEFAULT_BENCHMARK,
        today: Optional[date] = None,
    ) -> PerformanceComparison:
        """
        Portfolio NAV vs a benchmark over ``time_range``.

        Both histories load in parallel; if either fails nothing is returned.
        Performance figures are percent changes from the first to the last
        point, and the relative figure is their difference when both exist.
        """
        time_range = TimeRange(time_range)
        today = today or today_local()
        results = run_all(
            {
                "portfolio": lambda: self.load_portfolio_history(time_range, today),
                "benchmark": lambda: self.load_benchmark_history(benchmark, time_range, today),
            }
        )
        nav_points = _nav_points(results["portfolio"])
        price_points = _price_points(results["benchmark"])

        portfolio_perf = (
            performance_percent(nav_points[0][1], nav_points[-1][1]) if nav_points else None
        )
        benchmark_perf = (
            performance_percent(price_points[0][1], price_points[-1][1]) if price_points else None
        )
        relative = None
        if portfolio_perf is not None and benchmark_perf is not None:
            relative = portfolio_perf - benchmark_perf

        return PerformanceComparison(
            time_range=time_range.value,
            benchmark_symbol=benchmark,
            portfolio_performance=portfolio_perf,
            benchmark_performance=benchmark_perf,
            relative_performance=relative,
            risk=self.risk_metrics(results["portfolio"]),
            portfolio_series=normalize_to_100(nav_points),
            benchmark_series=normalize_to_100(price_points),
        )
