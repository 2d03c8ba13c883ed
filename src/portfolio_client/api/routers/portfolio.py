"""Cloud portfolio endpoints: loading, valuation and master data."""

from decimal import Decimal

from fastapi import APIRouter, Depends, Query

from portfolio_client.api.deps import get_portfolio_store
from portfolio_client.api.schemas import (
    CashBalancesResponse,
    PositionResponse,
    PositionDetailResponse,
    SummaryResponse,
    LoadResponse,
    CashAccountCreate,
    StockCreate,
    StockUpdate,
)
from portfolio_client.core.exceptions import NotFoundError
from portfolio_client.domain.models import CashAccount, Stock
from portfolio_client.services import PortfolioStore, HoldingSortOption

router = APIRouter(prefix="/portfolio", tags=["portfolio"])


def _load_response(store: PortfolioStore) -> LoadResponse:
    state = store.state
    return LoadResponse(
        positions=len(state.positions),
        accounts=len(state.accounts),
        prices=len(state.latest_prices),
        last_updated=store.last_updated,
    )


@router.post("/load", response_model=LoadResponse)
def load(
    force: bool = Query(False, description="Refetch everything even if already loaded"),
    store: PortfolioStore = Depends(get_portfolio_store),
) -> LoadResponse:
    """Load the portfolio (prices only once a full load has happened)."""
    store.load(force=force)
    return _load_response(store)


@router.post("/refresh-prices", response_model=LoadResponse)
def refresh_prices(
    force: bool = Query(False, description="Ignore the refresh interval"),
    store: PortfolioStore = Depends(get_portfolio_store),
) -> LoadResponse:
    store.refresh_prices(force=force)
    return _load_response(store)


@router.get("/summary", response_model=SummaryResponse)
def get_summary(store: PortfolioStore = Depends(get_portfolio_store)):
    """Get holdings value, cash, day change and gain/loss."""
    return store.summary()


@router.get("/positions", response_model=list[PositionResponse])
def list_positions(
    sort: HoldingSortOption = Query(HoldingSortOption.TICKER),
    ascending: bool = Query(True),
    store: PortfolioStore = Depends(get_portfolio_store),
):
    """Get positions with market value and gains."""
    return store.positions(sort, ascending)


@router.get("/positions/{symbol}", response_model=PositionDetailResponse)
def get_position(
    symbol: str,
    store: PortfolioStore = Depends(get_portfolio_store),
) -> PositionDetailResponse:
    """Get one position with its dividend income and trade count."""
    for metrics in store.position_metrics():
        if metrics.symbol == symbol:
            base = PositionResponse.model_validate(metrics)
            return PositionDetailResponse(
                **base.model_dump(),
                dividend_income=store.dividend_income(symbol),
                transaction_count=store.transaction_count(symbol),
            )
    raise NotFoundError("Position", symbol)


@router.get("/cash", response_model=CashBalancesResponse)
def get_cash_balances(store: PortfolioStore = Depends(get_portfolio_store)):
    """Get per-account balances in native and base currency."""
    return store.cash_balances()


@router.get("/rates", response_model=dict[str, Decimal])
def get_rates(store: PortfolioStore = Depends(get_portfolio_store)) -> dict[str, Decimal]:
    """Get the resolved rates to the base currency."""
    return store.rates.as_dict()


@router.post("/cash-accounts", response_model=CashAccount, status_code=201)
def create_cash_account(
    data: CashAccountCreate,
    store: PortfolioStore = Depends(get_portfolio_store),
) -> CashAccount:
    return store.add_cash_account(data.currency, data.display_name)


@router.delete("/cash-accounts/{account_id}", status_code=204)
def archive_cash_account(
    account_id: str,
    store: PortfolioStore = Depends(get_portfolio_store),
) -> None:
    """Archive a cash account; its history is kept."""
    store.archive_cash_account(account_id)


@router.get("/stocks", response_model=list[Stock])
def list_stocks(store: PortfolioStore = Depends(get_portfolio_store)) -> list[Stock]:
    return store.state.stocks


@router.post("/stocks", response_model=Stock, status_code=201)
def create_stock(
    data: StockCreate,
    store: PortfolioStore = Depends(get_portfolio_store),
) -> Stock:
    return store.add_stock(data.symbol, data.name, data.market, data.currency, data.exchange)


@router.put("/stocks/{stock_id}", status_code=204)
def update_stock(
    stock_id: str,
    data: StockUpdate,
    store: PortfolioStore = Depends(get_portfolio_store),
) -> None:
    store.update_stock(stock_id, data.name, data.exchange)


@router.delete("/stocks/{stock_id}", status_code=204)
def delete_stock(
    stock_id: str,
    store: PortfolioStore = Depends(get_portfolio_store),
) -> None:
    store.delete_stock(stock_id)
