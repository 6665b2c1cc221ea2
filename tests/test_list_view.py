# tests/test_list_view.py
# SPDX-License-Identifier: Apache-2.0
"""List pages driven through Streamlit's AppTest: filters, re-entry and endpoint changes."""

from __future__ import annotations

import pytest
from streamlit.testing.v1 import AppTest

from anoma_explorer.core.state import VIEW_DATA
from anoma_explorer.ui.keys import k, vk

OLD_URL = "http://old.test/v1/graphql"
NEW_URL = "http://new.test/v1/graphql"


class EndpointFetch:
    """Fake `list_*` method answering with one row named after the current endpoint."""

    def __init__(self, nav: dict):
        self.nav = nav
        self.calls: list[tuple[str, dict]] = []

    def __call__(self, **kwargs):
        endpoint = self.nav["endpoint"]
        self.calls.append((endpoint, kwargs))
        return [f"{endpoint}-row"]


def list_page(fetch, nav):
    import streamlit as st

    from anoma_explorer.core import state as session
    from anoma_explorer.core.listing import FilterField, ListController
    from anoma_explorer.ui import list_view

    session.enter_view(nav["view"])
    session.bind_endpoint(nav["endpoint"])
    if nav["view"] == "transactions":
        controller = ListController(fetch, (FilterField("tx_hash"),), page_size=2)
        state = list_view.load_state("transactions", controller)
        state = list_view.apply_form("transactions", controller, state)
        for item in state.items:
            st.text(item)


@pytest.fixture
def nav() -> dict:
    return {"view": "transactions", "endpoint": OLD_URL}


@pytest.fixture
def fetch(nav) -> EndpointFetch:
    return EndpointFetch(nav)


@pytest.fixture
def app(fetch, nav) -> AppTest:
    at = AppTest.from_function(list_page, args=(fetch, nav), default_timeout=10)
    at.run()
    assert not at.exception
    return at


def list_state(at: AppTest):
    return at.session_state[VIEW_DATA][k("transactions", "list")]


def button(at: AppTest, label: str):
    return next(b for b in at.button if b.label == label)


def shown_rows(at: AppTest) -> list[str]:
    return [t.value for t in at.text]


class TestFilterForm:
    def test_apply_sends_filter(self, app, fetch):
        version = list_state(app).filter_version
        app.text_input(key=vk("transactions", "tx_hash", version)).input("0xab")
        button(app, "Apply").click().run()
        assert fetch.calls[-1][1] == {"limit": 3, "offset": 0, "tx_hash": "0xab"}
        assert list_state(app).filters == {"tx_hash": "0xab"}

    def test_clear_bumps_version_and_resets_inputs(self, app, fetch):
        version = list_state(app).filter_version
        app.text_input(key=vk("transactions", "tx_hash", version)).input("0xab")
        button(app, "Apply").click().run()
        button(app, "Clear").click().run()

        state = list_state(app)
        assert state.filter_version == version + 1
        assert state.filters == {"tx_hash": ""}
        assert app.text_input(key=vk("transactions", "tx_hash", version + 1)).value == ""
        assert fetch.calls[-1][1] == {"limit": 3, "offset": 0}


class TestViewLifetime:
    def test_rerun_on_same_page_does_not_refetch(self, app, fetch):
        app.run()
        assert len(fetch.calls) == 1

    def test_reentering_page_refetches(self, app, fetch, nav):
        nav["view"] = "dashboard"
        app.run()
        nav["view"] = "transactions"
        app.run()
        assert len(fetch.calls) == 2
        assert shown_rows(app) == [f"{OLD_URL}-row"]

    def test_leaving_page_drops_its_state(self, app, nav):
        nav["view"] = "dashboard"
        app.run()
        assert k("transactions", "list") not in app.session_state[VIEW_DATA]

    def test_endpoint_change_refetches_from_new_endpoint(self, app, fetch, nav):
        assert shown_rows(app) == [f"{OLD_URL}-row"]
        nav["endpoint"] = NEW_URL
        app.run()
        assert [endpoint for endpoint, _ in fetch.calls] == [OLD_URL, NEW_URL]
        assert shown_rows(app) == [f"{NEW_URL}-row"]

    def test_filters_do_not_survive_endpoint_change(self, app, fetch, nav):
        version = list_state(app).filter_version
        app.text_input(key=vk("transactions", "tx_hash", version)).input("0xab")
        button(app, "Apply").click().run()
        nav["endpoint"] = NEW_URL
        app.run()
        state = list_state(app)
        assert state.filters == {"tx_hash": ""}
        assert state.filter_version > version
        assert fetch.calls[-1] == (NEW_URL, {"limit": 3, "offset": 0})
