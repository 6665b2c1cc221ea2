# anoma_explorer/services/dashboard.py
# SPDX-License-Identifier: Apache-2.0
"""Dual fetch behind the dashboard: stats and recent transactions together.

Both queries run on a two-worker pool and are joined with one deadline. The
dashboard only ever shows a matching pair, so if either side fails or the
deadline passes the whole load raises and the page shows the error instead
of half the data. In-flight requests are not cancelled; their results are
simply dropped.
"""

from __future__ import annotations

import logging
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Protocol

from ..core.constants import DASHBOARD_JOIN_TIMEOUT_SECONDS, RECENT_TRANSACTIONS
from ..core.errors import IndexerTimeoutError
from .records import Stats, Transaction

log = logging.getLogger(__name__)


class DashboardSource(Protocol):
    def get_stats(self) -> Stats: ...

    def list_transactions(self, *, limit: int = ..., offset: int = ...) -> list[Transaction]: ...


@dataclass(frozen=True)
class DashboardData:
    stats: Stats
    transactions: list[Transaction]
    loaded_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


def load_dashboard(
    client: DashboardSource,
    *,
    recent: int = RECENT_TRANSACTIONS,
    timeout: float = DASHBOARD_JOIN_TIMEOUT_SECONDS,
) -> DashboardData:
    """Fetch stats and the `recent` newest transactions concurrently.

    Raises:
        IndexerTimeoutError: when both results are not in within `timeout`.
        IndexerError: whichever error the failing query raised (stats first
            when both failed).
    """
    pool = ThreadPoolExecutor(max_workers=2, thread_name_prefix="dashboard")
    try:
        stats_future = pool.submit(client.get_stats)
        txs_future = pool.submit(client.list_transactions, limit=recent)
        done, pending = wait([stats_future, txs_future], timeout=timeout, return_when=FIRST_EXCEPTION)

        for future in (stats_future, txs_future):
            exc = future.exception() if future in done else None
            if exc is not None:
                log.error("Dashboard load failed: %s", exc)
                raise exc
        if pending:
            log.error("Dashboard load timed out after %ss", timeout)
            raise IndexerTimeoutError(timeout)

        return DashboardData(stats=stats_future.result(), transactions=txs_future.result())
    finally:
        pool.shutdown(wait=False, cancel_futures=True)
