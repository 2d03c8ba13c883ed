"""API routers package."""

from portfolio_client.api.routers.auth import router as auth_router
from portfolio_client.api.routers.portfolio import router as portfolio_router
from portfolio_client.api.routers.transactions import router as transactions_router
from portfolio_client.api.routers.analysis import router as analysis_router
from portfolio_client.api.routers.local import router as local_router

__all__ = [
    "auth_router",
    "portfolio_router",
    "transactions_router",
    "analysis_router",
    "local_router",
]
