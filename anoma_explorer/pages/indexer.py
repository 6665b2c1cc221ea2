# anoma_explorer/pages/indexer.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Streamlit page: Indexer endpoint (settings)

Shows which Envio GraphQL endpoint the explorer is using and where that
value comes from (settings database or `ENVIO_GRAPHQL_URL`), lets anyone test
a URL, and lets an admin save a new one or remove the stored one so the
environment fallback applies again.
"""

from typing import Final

import streamlit as st

from ..core import state as session
from ..core.constants import ENVIO_URL_SETTING_KEY
from ..core.errors import SettingsNotFoundError
from ..services.indexer import IndexerClient
from ..services.settings_store import SettingsStore
from ..ui.admin import gated
from ..ui.components import watch_settings
from ..ui.indexer_status import current_probe, save_endpoint
from ..ui.keys import k, vk
from ..ui.layout import page_header

PAGE: Final[str] = "indexer"


def _source(store: SettingsStore, env_url: str | None) -> str:
    if store.get_app_setting(ENVIO_URL_SETTING_KEY):
        return "settings database"
    if env_url:
        return "ENVIO_GRAPHQL_URL environment variable"
    return "not configured"


def _current(client: IndexerClient, store: SettingsStore, env_url: str | None) -> None:
    st.subheader("Current endpoint")
    if not client.url:
        st.warning("Indexer endpoint not configured")
        return
    st.code(client.url, language=None)
    st.caption(f"Source: {_source(store, env_url)}")
    result = current_probe(client)
    if result.ready:
        st.success(result.message)
    else:
        st.error(result.message)
    if st.button("Re-test", key=k(PAGE, "retest")):
        session.clear_probe()
        st.rerun()


def render(ctx: dict) -> None:
    """Render the Indexer endpoint settings page."""
    store: SettingsStore = ctx["store"]
    client: IndexerClient = ctx["client"]
    env_url = ctx["settings"].envio_graphql_url
    page_header("Indexer endpoint", "Envio Hyperindex GraphQL endpoint used by every page.")
    watch_settings(store)

    _current(client, store, env_url)

    st.subheader("Change endpoint")
    url = st.text_input(
        "GraphQL URL",
        value=client.url or "",
        placeholder="https://indexer.example.com/v1/graphql",
        key=vk(PAGE, "url", store.revision),
    ).strip()
    test_col, save_col, clear_col, _ = st.columns([1, 1, 1, 2])
    if test_col.button("Test", key=k(PAGE, "test"), disabled=not url):
        with st.spinner("Testing connection…"):
            ok, message = client.test_connection(url)
        (st.success if ok else st.error)(message)
    if save_col.button("Save", key=k(PAGE, "save"), type="primary"):
        save_endpoint(ctx, store, url)
    stored = store.get_app_setting(ENVIO_URL_SETTING_KEY)
    if clear_col.button("Remove stored URL", key=k(PAGE, "clear"), disabled=not stored):
        try:
            removed = gated(
                ctx["admin"], ctx["admin_state"], lambda: store.delete_app_setting(ENVIO_URL_SETTING_KEY)
            )
        except SettingsNotFoundError:
            st.info("The stored URL was already removed in another session.")
            removed = None
        if removed is not None:
            session.clear_probe()
            session.clear_view_data()
            session.flash("Stored indexer endpoint removed")
            st.rerun()
