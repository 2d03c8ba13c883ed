"""Pydantic schemas for analysis endpoints."""

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel


class RiskMetricsResponse(BaseModel):
    """Volatility and drawdown in percent, Sharpe as a ratio."""

    model_config = {"from_attributes": True}

    volatility: Decimal
    max_drawdown: Decimal
    sharpe_ratio: Decimal


class SeriesPointResponse(BaseModel):
    model_config = {"from_attributes": True}

    day: date
    value: Decimal


class ComparisonResponse(BaseModel):
    """Portfolio vs benchmark over a time range."""

    model_config = {"from_attributes": True}

    time_range: str
    benchmark_symbol: str
    portfolio_performance: Optional[Decimal] = None
    benchmark_performance: Optional[Decimal] = None
    relative_performance: Optional[Decimal] = None
    risk: RiskMetricsResponse
    portfolio_series: list[SeriesPointResponse]
    benchmark_series: list[SeriesPointResponse]


class BenchmarkResponse(BaseModel):
    symbol: str
    name: str
