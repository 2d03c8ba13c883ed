"""View models for analysis outputs."""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional


@dataclass
class RiskMetrics:
    """Risk figures over a NAV-per-share series (all in percent except Sharpe)."""

    volatility: Decimal = field(default_factory=lambda: Decimal("0"))
    max_drawdown: Decimal = field(default_factory=lambda: Decimal("0"))
    sharpe_ratio: Decimal = field(default_factory=lambda: Decimal("0"))


@dataclass
class SeriesPoint:
    """One dated value of a normalized series."""

    day: date
    value: Decimal


@dataclass
class PerformanceComparison:
    """Portfolio vs benchmark over a time range."""

    time_range: str
    benchmark_symbol: str
    portfolio_performance: Optional[Decimal] = None
    benchmark_performance: Optional[Decimal] = None
    relative_performance: Optional[Decimal] = None
    risk: RiskMetrics = field(default_factory=RiskMetrics)
    portfolio_series: list[SeriesPoint] = field(default_factory=list)
    benchmark_series: list[SeriesPoint] = field(default_factory=list)
