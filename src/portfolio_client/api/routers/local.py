"""Offline ledger endpoints: tickers, trades, holdings and capital."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from portfolio_client.api.deps import get_local_service
from portfolio_client.api.schemas import (
    TickerCreate,
    TickerUpdate,
    TickerResponse,
    LocalTransactionRequest,
    LocalTransactionResponse,
    HoldingResponse,
    CapitalRequest,
    CapitalResponse,
    CapitalSummaryResponse,
)
from portfolio_client.services import LocalPortfolioService, LocalTransactionCreate

router = APIRouter(prefix="/local", tags=["local"])


# Tickers


@router.get("/tickers", response_model=list[TickerResponse])
def list_tickers(service: LocalPortfolioService = Depends(get_local_service)):
    return service.list_tickers()


@router.post("/tickers", response_model=TickerResponse, status_code=201)
def create_ticker(
    data: TickerCreate,
    service: LocalPortfolioService = Depends(get_local_service),
):
    return service.add_ticker(data.code, data.name, data.market, data.currency)


@router.put("/tickers/{ticker_id}", response_model=TickerResponse)
def update_ticker(
    ticker_id: str,
    data: TickerUpdate,
    service: LocalPortfolioService = Depends(get_local_service),
):
    return service.update_ticker(ticker_id, data.name, data.market, data.currency)


@router.delete("/tickers/{ticker_id}", status_code=204)
def delete_ticker(
    ticker_id: str,
    service: LocalPortfolioService = Depends(get_local_service),
) -> None:
    """Delete a ticker with its transactions and holding."""
    service.delete_ticker(ticker_id)


# Transactions and holdings


@router.get("/transactions", response_model=list[LocalTransactionResponse])
def list_transactions(
    ticker_id: Optional[str] = Query(None),
    service: LocalPortfolioService = Depends(get_local_service),
):
    return service.list_transactions(ticker_id)


@router.post("/transactions", response_model=LocalTransactionResponse, status_code=201)
def create_transaction(
    data: LocalTransactionRequest,
    service: LocalPortfolioService = Depends(get_local_service),
):
    """Record a trade or dividend and update the holding."""
    return service.add_transaction(LocalTransactionCreate(**data.model_dump()))


@router.delete("/transactions/{txn_id}", status_code=204)
def delete_transaction(
    txn_id: str,
    service: LocalPortfolioService = Depends(get_local_service),
) -> None:
    """Delete a transaction; holdings are rebuilt from the rest."""
    service.delete_transaction(txn_id)


@router.get("/holdings", response_model=list[HoldingResponse])
def list_holdings(service: LocalPortfolioService = Depends(get_local_service)):
    return service.get_holdings()


@router.post("/holdings/rebuild", response_model=list[HoldingResponse])
def rebuild_holdings(service: LocalPortfolioService = Depends(get_local_service)):
    """Recompute every holding from the full transaction history."""
    return service.rebuild()


# Capital


@router.get("/capital", response_model=list[CapitalResponse])
def list_capital(service: LocalPortfolioService = Depends(get_local_service)):
    return service.list_capital()


@router.post("/capital", response_model=CapitalResponse, status_code=201)
def create_capital(
    data: CapitalRequest,
    service: LocalPortfolioService = Depends(get_local_service),
):
    return service.add_capital(data.capital_type, data.amount, data.operation_date, data.note)


@router.delete("/capital/{operation_id}", status_code=204)
def delete_capital(
    operation_id: str,
    service: LocalPortfolioService = Depends(get_local_service),
) -> None:
    service.delete_capital(operation_id)


@router.get("/capital/summary", response_model=CapitalSummaryResponse)
def capital_summary(
    service: LocalPortfolioService = Depends(get_local_service),
) -> CapitalSummaryResponse:
    summary = service.capital_summary()
    return CapitalSummaryResponse(
        initial_deposit=summary.initial_deposit,
        deposits=summary.deposits,
        withdrawals=summary.withdrawals,
        interest=summary.interest,
        capital_balance=summary.current_cash_balance,
        cash_balance=service.cash_balance(),
    )
