# anoma_explorer/pages/dashboard.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Streamlit page: Dashboard

Purpose
-------
Landing page: headline counters and the newest transactions, refreshed on a
timer.

Design Notes
------------
- Stats and recent transactions are fetched together by
  `services.dashboard.load_dashboard`; a failure of either shows one error
  and no partial data.
- The last result is kept in the session view data, so reruns caused by
  other widgets do not refetch; entering the page again does. The refresh fragment reloads once the
  result is `DASHBOARD_REFRESH_SECONDS` old, or when "Refresh" is clicked.
- When the indexer was unreachable, the same timer re-probes it and reloads
  the whole page once it answers again.
"""

from datetime import datetime, timezone
from typing import Final

import streamlit as st

from ..core import state as session
from ..core.connection import ConnectionStatus
from ..core.constants import STATS_SAMPLE_LIMIT
from ..core.errors import IndexerError
from ..core.formatting import format_error, format_number, format_time, format_timestamp
from ..services import networks
from ..services.dashboard import DashboardData, load_dashboard
from ..services.indexer import IndexerClient
from ..ui.components import chain_label, detail_url, records_table, short
from ..ui.indexer_status import current_probe, require_indexer
from ..ui.keys import k
from ..ui.layout import page_header

PAGE: Final[str] = "dashboard"
_DATA: Final[str] = k(PAGE, "data")
_ERROR: Final[str] = k(PAGE, "error")


def _stale(data: DashboardData | None, max_age: float) -> bool:
    if data is None:
        return True
    age = (datetime.now(timezone.utc) - data.loaded_at).total_seconds()
    return age >= max_age


def _load(client: IndexerClient) -> None:
    try:
        with st.spinner("Loading dashboard…"):
            session.put_view_data(_DATA, load_dashboard(client))
        session.put_view_data(_ERROR, None)
    except IndexerError as e:
        session.put_view_data(_DATA, None)
        session.put_view_data(_ERROR, format_error(e))


def _metrics(data: DashboardData) -> None:
    s = data.stats
    cols = st.columns(4)
    cols[0].metric("Transactions", format_number(s.transactions))
    cols[1].metric("Resources", format_number(s.resources))
    cols[2].metric("Consumed", format_number(s.consumed))
    cols[3].metric("Created", format_number(s.created))
    cols = st.columns(4)
    cols[0].metric("Actions", format_number(s.actions))
    cols[1].metric("Compliance units", format_number(s.compliances))
    cols[2].metric("Logic inputs", format_number(s.logics))
    if STATS_SAMPLE_LIMIT in (s.transactions, s.resources, s.actions, s.compliances, s.logics):
        st.caption(f"Counts are sampled from at most {format_number(STATS_SAMPLE_LIMIT)} records each.")


def _recent(data: DashboardData) -> None:
    st.subheader("Recent transactions")
    records_table(
        PAGE,
        [
            {
                "Tx hash": short(tx.tx_hash),
                "Network": chain_label(tx.chain_id),
                "Block": format_number(tx.block_number),
                "Resources": len(tx.tags),
                "Time": format_timestamp(tx.timestamp),
                "Details": detail_url("transactions", tx.id),
                "Explorer": networks.tx_url(tx.chain_id, tx.tx_hash),
            }
            for tx in data.transactions
        ],
        links={"Details": "Details", "Explorer": "Explorer"},
        empty_message="No transactions indexed yet.",
    )


def _live(client: IndexerClient, refresh_seconds: int) -> None:
    @st.fragment(run_every=refresh_seconds)
    def _body() -> None:
        head, button = st.columns([4, 1])
        clicked = button.button("Refresh", key=k(PAGE, "refresh"), use_container_width=True)
        if clicked or _stale(session.get_view_data(_DATA), refresh_seconds):
            _load(client)

        data: DashboardData | None = session.get_view_data(_DATA)
        error = session.get_view_data(_ERROR)
        if data is not None:
            head.caption(f"Updated {format_time(data.loaded_at)} UTC")
        if error:
            st.error(error)
            return
        if data is not None:
            _metrics(data)
            _recent(data)

    _body()


def _reconnect_timer(client: IndexerClient, refresh_seconds: int) -> None:
    @st.fragment(run_every=refresh_seconds)
    def _retry() -> None:
        if current_probe(client).ready:
            st.rerun(scope="app")

    _retry()


def render(ctx: dict) -> None:
    """Render the Dashboard page."""
    page_header("Dashboard", "Anoma Protocol Adapter activity indexed by Envio.")
    client: IndexerClient = ctx["client"]
    refresh_seconds = ctx["settings"].refresh_seconds
    if not require_indexer(ctx):
        probe = session.cached_probe()
        if probe is not None and probe.status is ConnectionStatus.CONNECTION_ERROR:
            _reconnect_timer(client, refresh_seconds)
        return
    _live(client, refresh_seconds)
