"""Transaction entry endpoints."""

from fastapi import APIRouter, Depends

from portfolio_client.api.deps import get_portfolio_store
from portfolio_client.api.schemas import (
    TransactionEntryRequest,
    EntryPreviewResponse,
    SubmissionResponse,
    PendingGroupResponse,
    ReconciliationResponse,
)
from portfolio_client.services import PortfolioStore

router = APIRouter(prefix="/transactions", tags=["transactions"])


@router.post("/preview", response_model=EntryPreviewResponse)
def preview_transaction(
    data: TransactionEntryRequest,
    store: PortfolioStore = Depends(get_portfolio_store),
):
    """Validate an entry and return the amounts to confirm."""
    return store.preview(data.to_entry())


@router.post("", response_model=SubmissionResponse, status_code=201)
def submit_transaction(
    data: TransactionEntryRequest,
    store: PortfolioStore = Depends(get_portfolio_store),
):
    """Validate an entry, create its group and legs, then reload."""
    return store.submit(data.to_entry())


@router.get("/pending", response_model=list[PendingGroupResponse])
def list_pending_groups(store: PortfolioStore = Depends(get_portfolio_store)):
    """List groups left behind by failed submissions."""
    return store.pending_groups()


@router.post("/reconcile", response_model=ReconciliationResponse)
def reconcile(store: PortfolioStore = Depends(get_portfolio_store)):
    """Delete the rows of every pending group."""
    return store.reconcile()
