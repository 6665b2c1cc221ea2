# anoma_explorer/ui/sidebar.py
# SPDX-License-Identifier: Apache-2.0
"""Sidebar composition for the explorer.

This module renders the left-hand sidebar shared by every page: a transaction
hash search box, the indexer endpoint currently in use, and the admin gate's
status with its unlock / lock controls.

Behavior
--------
- Submitting a non-empty search (after trimming) stores the hash in the
  session and switches to the Transactions page, which pre-fills its
  `tx_hash` filter from it. Blank input does nothing.
- The endpoint shown is the effective one: the URL saved in the settings
  store, else `ENVIO_GRAPHQL_URL`, else "not configured".
- Messages queued with `core.state.flash()` before a rerun are shown here as
  toasts, once.

Returns
-------
`render_sidebar_and_status()` returns a context dictionary containing:
- `settings`: the `core.config.Settings` instance.
- `store`: the `SettingsStore` for networks, protocols and app settings.
- `client`: the `IndexerClient` for the effective endpoint.
- `admin`: the `AdminGate`.
- `admin_state`: this session's `AdminState`.

This context object is passed to every page's `render(ctx)`.
"""

from __future__ import annotations

from typing import Any

import streamlit as st

from ..core import state as session
from ..core.clients import current_indexer, get_admin_gate, get_settings, get_store
from ..core.formatting import truncate_value
from .admin import render_admin_controls
from .keys import k


def _search_box(search_page: Any) -> None:
    with st.sidebar.form(key=k("sidebar", "search"), clear_on_submit=True):
        query = st.text_input(
            "Search transactions", placeholder="Transaction hash (0x…)", key=k("sidebar", "query")
        )
        submitted = st.form_submit_button("Search", use_container_width=True)
    query = (query or "").strip()
    if submitted and query:
        st.session_state[session.PENDING_SEARCH] = query
        st.switch_page(search_page)


def render_sidebar_and_status(search_page: Any) -> dict[str, Any]:
    """Render the sidebar and return the context dict for page use.

    Args:
      search_page: The `st.Page` of the transactions list; the search box
        switches to it.
    """
    # Ensure session keys exist before we reference them anywhere.
    session.ensure_defaults()

    settings = get_settings()
    store = get_store(settings.database_url)
    client = current_indexer(settings, store)
    gate = get_admin_gate(settings.admin_secret_key, settings.admin_timeout_ms)
    admin_state = session.admin_state()

    message = session.pop_flash()
    if message:
        st.toast(message)

    _search_box(search_page)

    st.sidebar.markdown("---")
    st.sidebar.markdown("**Indexer**")
    if client.url:
        st.sidebar.caption(f"`{truncate_value(client.url, 48)}`")
    else:
        st.sidebar.caption("Not configured")

    st.sidebar.markdown("**Admin**")
    render_admin_controls(gate, admin_state)

    return dict(
        settings=settings,
        store=store,
        client=client,
        admin=gate,
        admin_state=admin_state,
    )
