# anoma_explorer/ui/indexer_status.py
# SPDX-License-Identifier: Apache-2.0
"""Connection gate for indexer-backed pages.

Call `require_indexer(ctx)` at the top of a page's `render`. It probes the
configured endpoint (at most once per session while it keeps succeeding) and,
when the indexer is not usable, draws the setup panel or the connection-error
panel instead of the page and returns False.

The setup panel auto-tests the URL field once it has been left alone for a
moment (`SetupForm` debounce) and saves it through the admin gate.
"""

from __future__ import annotations

import logging
import time
from typing import Any

import streamlit as st

from ..core import state as session
from ..core.connection import ConnectionStatus, ProbeResult, SetupForm, probe, should_probe
from ..core.errors import SettingsValidationError
from ..services.indexer import IndexerClient
from ..services.settings_store import SettingsStore
from .admin import gated
from .components import validation_errors
from .keys import k

log = logging.getLogger(__name__)

_PAGE = "setup"
SAVED = "Indexer endpoint saved successfully"


def current_probe(client: IndexerClient) -> ProbeResult:
    """Cached probe result for the client's URL, probing again when needed."""
    previous = session.cached_probe()
    if not should_probe(previous, client.url or ""):
        assert previous is not None
        return previous
    result = probe(client.url, client.test_connection)
    session.store_probe(result)
    return result


def require_indexer(ctx: dict[str, Any]) -> bool:
    """True when the page may query the indexer; otherwise renders a panel.

    Data the view fetched from another endpoint is dropped first.
    """
    client: IndexerClient = ctx["client"]
    session.bind_endpoint(client.url)
    result = current_probe(client)
    if result.ready:
        return True
    if result.status is ConnectionStatus.NOT_CONFIGURED:
        render_setup_panel(ctx)
    else:
        render_connection_error(result)
    return False


def render_connection_error(result: ProbeResult) -> None:
    st.error(f"**Cannot reach the indexer**  \n{result.message}")
    if result.url:
        st.caption(f"Endpoint: `{result.url}`")
    if st.button("Retry", key=k(_PAGE, "retry"), type="primary"):
        session.clear_probe()
        st.rerun()


def _status_line(form: SetupForm) -> None:
    if form.testing:
        st.caption("Testing connection…")
    elif form.status is not None:
        ok, message = form.status
        (st.success if ok else st.error)(message)


def render_setup_panel(ctx: dict[str, Any]) -> None:
    """Endpoint form shown while no indexer URL is configured."""
    client: IndexerClient = ctx["client"]
    store: SettingsStore = ctx["store"]
    form = session.setup_form()

    st.subheader("Configure the indexer")
    st.write(
        "No Envio GraphQL endpoint is configured. Enter the URL of your indexer; "
        "it is tested automatically once you stop typing."
    )
    url = st.text_input(
        "GraphQL URL",
        value=form.url_input,
        placeholder="https://indexer.example.com/v1/graphql",
        key=k(_PAGE, "url"),
    )
    form.edit(url, time.monotonic())

    @st.fragment(run_every=0.5 if form.testing else None)
    def _auto_test() -> None:
        if form.due_for_auto_test(time.monotonic()):
            target = form.url_input
            form.record_test(target, client.test_connection(target))
        _status_line(form)

    _auto_test()

    test_col, save_col, _ = st.columns([1, 1, 3])
    if test_col.button("Test connection", key=k(_PAGE, "test"), disabled=not form.url_input):
        target = form.url_input
        with st.spinner("Testing connection…"):
            form.record_test(target, client.test_connection(target))
        st.rerun()
    if save_col.button("Save", key=k(_PAGE, "save"), type="primary", disabled=not form.url_input):
        save_endpoint(ctx, store, form.url_input)


def save_endpoint(ctx: dict[str, Any], store: SettingsStore, url: str) -> None:
    """Persist `url` (admin gated), drop the cached probe and rerun."""
    try:
        saved = gated(ctx["admin"], ctx["admin_state"], lambda: store.set_envio_url(url))
    except SettingsValidationError as e:
        validation_errors(e)
        return
    if saved is None:
        return
    log.info("Indexer endpoint updated to %s", saved.value)
    session.clear_probe()
    session.clear_view_data()
    session.flash(SAVED)
    st.rerun()
