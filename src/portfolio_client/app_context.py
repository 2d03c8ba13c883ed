"""Application context: the composition root for every long-lived service.

One AppContext is built at startup and handed to whoever needs services
(the FastAPI app keeps it on ``app.state``). Nothing here is global; a
second context with other settings is fully independent.
"""

from typing import Optional

import httpx
from sqlalchemy.orm import sessionmaker

from portfolio_client.config.settings import Settings, set_settings
from portfolio_client.remote import AuthService, BackendClient
from portfolio_client.repositories.keyring_store import KeyringCredentialStore
from portfolio_client.repositories.protocols import CredentialStore
from portfolio_client.repositories.sqlalchemy.database import (
    open_database,
    close_database,
    get_session_factory,
)
from portfolio_client.repositories.sqlalchemy import (
    SqlAlchemyCacheRepository,
    SqlAlchemyPendingGroupRepository,
    SqlAlchemyTickerRepository,
    SqlAlchemyLocalTransactionRepository,
    SqlAlchemyCapitalRepository,
    SqlAlchemyHoldingRepository,
)
from portfolio_client.services import (
    AnalysisService,
    LocalPortfolioService,
    PortfolioCache,
    PortfolioDataService,
    PortfolioStore,
    TransactionSubmitter,
)


class AppContext:
    """
    Owns the settings, local database, HTTP client and services.

    Services are created lazily on first access and live as long as the
    context. Repositories open a short session per operation from the
    session factory, so services can be called from several threads. Pass
    ``session_factory``, ``credentials`` or ``transport`` to replace the
    SQLite file, the OS keyring or the network (as tests do).
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        session_factory: Optional[sessionmaker] = None,
        credentials: Optional[CredentialStore] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self._settings = settings or Settings()
        self._session_factory = session_factory
        self._credentials = credentials
        self._transport = transport
        self._initialized = False
        self._owns_database = False

        self._client: Optional[BackendClient] = None
        self._auth: Optional[AuthService] = None
        self._data: Optional[PortfolioDataService] = None
        self._cache: Optional[PortfolioCache] = None
        self._submitter: Optional[TransactionSubmitter] = None
        self._store: Optional[PortfolioStore] = None
        self._analysis: Optional[AnalysisService] = None
        self._local: Optional[LocalPortfolioService] = None

    def initialize(self) -> None:
        """Open the local database (unless a session factory was given) and prepare the cache."""
        set_settings(self._settings)
        if self._session_factory is None:
            open_database(self._settings.get_database_url())
            self._owns_database = True
            self._session_factory = get_session_factory()
        self.cache.ensure_schema()
        self._initialized = True

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def sessions(self) -> sessionmaker:
        if self._session_factory is None:
            raise RuntimeError("AppContext.initialize() must be called first")
        return self._session_factory

    # Remote collaborators

    @property
    def credentials(self) -> CredentialStore:
        if self._credentials is None:
            self._credentials = KeyringCredentialStore(self._settings.keyring_service_name)
        return self._credentials

    @property
    def client(self) -> BackendClient:
        if self._client is None:
            self._client = BackendClient(
                base_url=self._settings.backend_url,
                api_key=self._settings.backend_api_key,
                credentials=self.credentials,
                timeout=self._settings.request_timeout_seconds,
                transport=self._transport,
            )
        return self._client

    @property
    def auth(self) -> AuthService:
        if self._auth is None:
            self._auth = AuthService(self.client, self.credentials)
        return self._auth

    # Cloud portfolio

    @property
    def data(self) -> PortfolioDataService:
        if self._data is None:
            self._data = PortfolioDataService(
                self.client,
                stock_transaction_limit=self._settings.stock_transaction_fetch_limit,
                cash_transaction_limit=self._settings.cash_transaction_fetch_limit,
                group_limit=self._settings.transaction_group_fetch_limit,
            )
        return self._data

    @property
    def cache(self) -> PortfolioCache:
        if self._cache is None:
            self._cache = PortfolioCache(SqlAlchemyCacheRepository(self.sessions))
        return self._cache

    @property
    def submitter(self) -> TransactionSubmitter:
        if self._submitter is None:
            self._submitter = TransactionSubmitter(
                self.data, SqlAlchemyPendingGroupRepository(self.sessions)
            )
        return self._submitter

    @property
    def store(self) -> PortfolioStore:
        """The portfolio store, seeded from the offline cache on first access."""
        if self._store is None:
            self._store = PortfolioStore(
                self.data,
                self.cache,
                self.submitter,
                default_base_currency=self._settings.base_currency,
                allow_zero_net_dividend=self._settings.allow_zero_net_dividend,
                price_refresh_interval_seconds=self._settings.price_refresh_interval_seconds,
            )
            self._store.load_cached()
        return self._store

    @property
    def analysis(self) -> AnalysisService:
        if self._analysis is None:
            self._analysis = AnalysisService(
                self.data,
                page_size=self._settings.snapshot_page_size,
                max_pages=self._settings.snapshot_max_pages,
                risk_free_rate=self._settings.risk_free_rate,
            )
        return self._analysis

    # Offline ledger

    @property
    def local(self) -> LocalPortfolioService:
        if self._local is None:
            self._local = LocalPortfolioService(
                ticker_repo=SqlAlchemyTickerRepository(self.sessions),
                transaction_repo=SqlAlchemyLocalTransactionRepository(self.sessions),
                capital_repo=SqlAlchemyCapitalRepository(self.sessions),
                holding_repo=SqlAlchemyHoldingRepository(self.sessions),
            )
        return self._local

    def close(self) -> None:
        """Release the HTTP client and the database, if this context opened it."""
        if self._client is not None:
            self._client.close()
            self._client = None
        if self._owns_database:
            close_database()
            self._session_factory = None
            self._owns_database = False
        self._initialized = False
