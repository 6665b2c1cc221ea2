# anoma_explorer/core/state.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Session-scoped UI state helpers for the explorer.

This module centralizes the keys and **default values** expected in
`st.session_state` and provides one entry point to initialize them, plus
typed accessors for the few objects (admin state, setup form, probe result,
list states) that pages share.

Design notes
------------
- Primitive defaults live in `DEFAULTS`; objects are created by factories in
  `_FACTORIES` so each browser session gets its own instance.
- Initialization is **idempotent**: calling `ensure_defaults()` on every rerun
  is safe; existing values are preserved.
- Data a view fetched (list states, the dashboard snapshot) lives in one
  `VIEW_DATA` mapping keyed by `k(page, ...)`. It belongs to the view being
  shown and to the indexer endpoint it was fetched from: `enter_view()` and
  `bind_endpoint()` drop it when either changes, so the next render
  refetches.

Usage
-----
Call `ensure_defaults()` near the top of the entrypoint (the sidebar does
it) before pages read from `st.session_state`.
"""

from collections.abc import Callable, Mapping
from typing import Any, Final

import streamlit as st

from ..services.admin_auth import AdminState
from .connection import ProbeResult, SetupForm
from .listing import ListState

ADMIN_STATE: Final[str] = "ADMIN_STATE"
SETUP_FORM: Final[str] = "SETUP_FORM"
PROBE_RESULT: Final[str] = "PROBE_RESULT"
# Revision of the settings store last seen by this session.
SETTINGS_REVISION: Final[str] = "SETTINGS_REVISION"
# Tx hash typed into the sidebar search, consumed by the transactions page.
PENDING_SEARCH: Final[str] = "PENDING_SEARCH"
# One-shot message shown as a toast after the next rerun.
FLASH: Final[str] = "FLASH"
# Fetched data of the current view, keyed by `k(page, ...)`.
VIEW_DATA: Final[str] = "VIEW_DATA"
# View (navigation url path) rendered last.
CURRENT_VIEW: Final[str] = "CURRENT_VIEW"
# Indexer URL the view data was fetched from.
DATA_ENDPOINT: Final[str] = "DATA_ENDPOINT"
# Above every filter version handed out so far; seeds new list states.
VIEW_EPOCH: Final[str] = "VIEW_EPOCH"

DEFAULTS: Final[Mapping[str, Any]] = {
    PROBE_RESULT: None,
    SETTINGS_REVISION: 0,
    PENDING_SEARCH: "",
    FLASH: None,
    CURRENT_VIEW: None,
    DATA_ENDPOINT: None,
    VIEW_EPOCH: 0,
}

_FACTORIES: Final[Mapping[str, Callable[[], Any]]] = {
    VIEW_DATA: dict,
    ADMIN_STATE: AdminState,
    SETUP_FORM: SetupForm,
}

__all__ = [
    "DEFAULTS",
    "ensure_defaults",
    "admin_state",
    "setup_form",
    "cached_probe",
    "store_probe",
    "clear_probe",
    "get_list_state",
    "put_list_state",
    "get_view_data",
    "put_view_data",
    "clear_view_data",
    "view_epoch",
    "enter_view",
    "bind_endpoint",
    "flash",
    "pop_flash",
]


def ensure_defaults() -> None:
    """Ensure all expected session keys exist; never overwrite existing values."""
    for key, default_value in DEFAULTS.items():
        st.session_state.setdefault(key, default_value)
    for key, factory in _FACTORIES.items():
        if key not in st.session_state:
            st.session_state[key] = factory()


def admin_state() -> AdminState:
    ensure_defaults()
    return st.session_state[ADMIN_STATE]


def setup_form() -> SetupForm:
    ensure_defaults()
    return st.session_state[SETUP_FORM]


def cached_probe() -> ProbeResult | None:
    return st.session_state.get(PROBE_RESULT)


def store_probe(result: ProbeResult) -> None:
    st.session_state[PROBE_RESULT] = result


def clear_probe() -> None:
    st.session_state[PROBE_RESULT] = None


def get_view_data(key: str) -> Any:
    ensure_defaults()
    return st.session_state[VIEW_DATA].get(key)


def put_view_data(key: str, value: Any) -> None:
    ensure_defaults()
    st.session_state[VIEW_DATA][key] = value


def clear_view_data() -> None:
    """Forget everything the current view fetched."""
    ensure_defaults()
    versions = [getattr(value, "filter_version", 0) for value in st.session_state[VIEW_DATA].values()]
    st.session_state[VIEW_EPOCH] = max([st.session_state[VIEW_EPOCH], *versions]) + 1
    st.session_state[VIEW_DATA] = {}


def view_epoch() -> int:
    ensure_defaults()
    return st.session_state[VIEW_EPOCH]


def enter_view(name: str) -> bool:
    """Record that `name` is being rendered; True when it was not the last view.

    Moving to another view drops the previous view's data.
    """
    ensure_defaults()
    if st.session_state[CURRENT_VIEW] == name:
        return False
    st.session_state[CURRENT_VIEW] = name
    clear_view_data()
    return True


def bind_endpoint(url: str | None) -> bool:
    """Tie view data to `url`; True (and data dropped) when the endpoint changed."""
    ensure_defaults()
    if st.session_state[DATA_ENDPOINT] == url:
        return False
    st.session_state[DATA_ENDPOINT] = url
    clear_view_data()
    return True


def get_list_state(key: str) -> ListState | None:
    return get_view_data(key)


def put_list_state(key: str, state: ListState) -> None:
    put_view_data(key, state)


def flash(message: str) -> None:
    """Queue `message` for display after an `st.rerun()`."""
    st.session_state[FLASH] = message


def pop_flash() -> str | None:
    return st.session_state.pop(FLASH, None)
