# tests/test_indexer_status.py
# SPDX-License-Identifier: Apache-2.0
"""Connection gate routing: setup panel, error panel or the page itself."""

from __future__ import annotations

from unittest.mock import Mock

from streamlit.testing.v1 import AppTest

from .conftest import INDEXER_URL


def gated_page(client):
    import streamlit as st

    from anoma_explorer.core import state as session
    from anoma_explorer.services.admin_auth import AdminGate
    from anoma_explorer.ui.indexer_status import require_indexer

    ctx = {
        "client": client,
        "store": None,
        "admin": AdminGate(None, 60_000),
        "admin_state": session.admin_state(),
    }
    if require_indexer(ctx):
        st.success("page body")


def run_page(client: Mock) -> AppTest:
    at = AppTest.from_function(gated_page, args=(client,), default_timeout=10)
    at.run()
    assert not at.exception
    return at


def make_client(url: str | None, ok: bool = True, message: str = "Connected") -> Mock:
    return Mock(url=url, test_connection=Mock(return_value=(ok, message)))


class TestRequireIndexer:
    def test_not_configured_shows_setup_panel(self):
        client = make_client(None)
        at = run_page(client)
        assert [s.value for s in at.subheader] == ["Configure the indexer"]
        assert not at.success
        client.test_connection.assert_not_called()

    def test_unreachable_shows_error_panel(self):
        at = run_page(make_client(INDEXER_URL, ok=False, message="Failed to connect to indexer"))
        assert len(at.error) == 1
        assert "Cannot reach the indexer" in at.error[0].value
        assert "Failed to connect to indexer" in at.error[0].value
        assert [b.label for b in at.button] == ["Retry"]
        assert not at.success

    def test_ready_renders_page(self):
        client = make_client(INDEXER_URL)
        at = run_page(client)
        assert [s.value for s in at.success] == ["page body"]
        assert not at.error
        client.test_connection.assert_called_once_with(INDEXER_URL)

    def test_successful_check_is_not_repeated(self):
        client = make_client(INDEXER_URL)
        at = run_page(client)
        at.run()
        client.test_connection.assert_called_once()

    def test_retry_checks_again(self):
        client = make_client(INDEXER_URL, ok=False, message="refused")
        at = run_page(client)
        client.test_connection.return_value = (True, "Connected")
        at.button[0].click().run()
        assert [s.value for s in at.success] == ["page body"]
        assert client.test_connection.call_count == 2
