"""Dependency injection for FastAPI."""

from fastapi import Request

from portfolio_client.app_context import AppContext
from portfolio_client.remote import AuthService
from portfolio_client.services import (
    AnalysisService,
    LocalPortfolioService,
    PortfolioStore,
)


def get_context(request: Request) -> AppContext:
    """Provide the AppContext the app was created with."""
    return request.app.state.context


def get_auth_service(request: Request) -> AuthService:
    return get_context(request).auth


def get_portfolio_store(request: Request) -> PortfolioStore:
    """Provide the long-lived PortfolioStore."""
    return get_context(request).store


def get_analysis_service(request: Request) -> AnalysisService:
    return get_context(request).analysis


def get_local_service(request: Request) -> LocalPortfolioService:
    """Provide LocalPortfolioService instance."""
    return get_context(request).local
