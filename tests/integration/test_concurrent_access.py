"""
Integration tests for services shared between request threads.

Tests cover:
- Cache writes, ticker writes and reads running in parallel on one context
- Pending group markers written from several threads
"""

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime

import pytest

from portfolio_client.app_context import AppContext
from portfolio_client.config.settings import Settings, reset_settings
from portfolio_client.domain.models import PendingGroup
from portfolio_client.repositories.sqlalchemy import SqlAlchemyPendingGroupRepository
from portfolio_client.services import PortfolioState

from tests.conftest import BACKEND_URL, InMemoryCredentialStore

WORKERS = 8


@pytest.fixture
def file_context(tmp_path):
    """Context on a SQLite file, as the running application uses."""
    context = AppContext(
        settings=Settings(data_dir=tmp_path, backend_url=BACKEND_URL),
        credentials=InMemoryCredentialStore(),
    )
    context.initialize()
    # Build the lazy services before threads share them
    context.local
    context.submitter
    yield context
    context.close()
    reset_settings()


def _run_parallel(calls) -> list:
    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        futures = [pool.submit(call) for call in calls]
    return [f.exception() for f in futures]


class TestParallelRequests:
    """Tests for one context used from several threads at once."""

    def test_cache_and_ledger_writes_in_parallel(self, file_context: AppContext):
        """
        GIVEN one application context on a SQLite file
        WHEN cache saves, ticker creation and reads run on 8 threads at once
        THEN every call succeeds and every write is stored
        """
        calls = []
        for i in range(4):
            calls.append(lambda: file_context.cache.save_state(PortfolioState()))
            calls.append(lambda i=i: file_context.local.add_ticker(f"T{i}", f"Ticker {i}"))
            calls.append(file_context.local.list_tickers)
            calls.append(file_context.submitter.pending_groups)

        errors = _run_parallel(calls)

        assert errors == [None] * len(calls)
        assert sorted(t.code for t in file_context.local.list_tickers()) == [
            "T0", "T1", "T2", "T3",
        ]
        assert file_context.cache.has_cached_data() is True

    def test_pending_markers_from_several_threads(self, file_context: AppContext):
        repo = SqlAlchemyPendingGroupRepository(file_context.sessions)
        calls = [
            lambda i=i: repo.add(
                PendingGroup(group_id=f"g-{i}", created_at=datetime(2024, 6, 15, 10, i))
            )
            for i in range(WORKERS)
        ]

        errors = _run_parallel(calls)

        assert errors == [None] * WORKERS
        assert len(file_context.submitter.pending_groups()) == WORKERS
