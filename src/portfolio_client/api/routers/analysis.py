"""Performance and risk analysis endpoints."""

from fastapi import APIRouter, Depends, Query

from portfolio_client.api.deps import get_analysis_service
from portfolio_client.api.schemas import (
    BenchmarkResponse,
    ComparisonResponse,
    RiskMetricsResponse,
)
from portfolio_client.core.exceptions import ValidationError
from portfolio_client.services import AnalysisService, TimeRange, BENCHMARKS

router = APIRouter(prefix="/analysis", tags=["analysis"])


@router.get("/benchmarks", response_model=list[BenchmarkResponse])
def list_benchmarks() -> list[BenchmarkResponse]:
    return [BenchmarkResponse(symbol=symbol, name=name) for symbol, name in BENCHMARKS.items()]


@router.get("/compare", response_model=ComparisonResponse)
def compare(
    time_range: TimeRange = Query(TimeRange.THREE_MONTHS),
    benchmark: str = Query("^GSPC", description="Benchmark index symbol"),
    analysis: AnalysisService = Depends(get_analysis_service),
):
    """Compare portfolio NAV performance with a benchmark index."""
    if benchmark not in BENCHMARKS:
        raise ValidationError(f"Unknown benchmark: {benchmark}", field="benchmark")
    return analysis.compare(time_range, benchmark)


@router.get("/risk", response_model=RiskMetricsResponse)
def risk(
    time_range: TimeRange = Query(TimeRange.THREE_MONTHS),
    analysis: AnalysisService = Depends(get_analysis_service),
):
    """Volatility, max drawdown and Sharpe ratio over the NAV history."""
    return analysis.risk_metrics(analysis.load_portfolio_history(time_range))
