# anoma_explorer/ui/list_view.py
# SPDX-License-Identifier: Apache-2.0
"""Glue between `core.listing.ListController` and Streamlit widgets.

A list page keeps its `ListState` in the session view data under
`k(page, "list")`.
Each rerun the page:

1. loads (or initializes and fetches) that state with `load_state`; the
   state is dropped when the user navigates away or the endpoint changes
   (see `core.state.enter_view` and `bind_endpoint`), so re-entering a page
   fetches again,
2. draws the filter form and feeds its outcome back with `apply_form`,
3. draws the table from `state.items`,
4. draws the pager with `paginate`, which reruns when a page move happened.

Detail views (`?id=`) fetch through `fetch_detail`, which turns service
errors into an inline message.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Collection, Mapping, Sequence
from dataclasses import replace
from typing import Any, TypeVar

import streamlit as st

from ..core import state as session
from ..core.errors import IndexerError
from ..core.formatting import format_error
from ..core.listing import (
    ApplyFilters,
    ClearFilters,
    Event,
    ListController,
    ListState,
    NextPage,
    PrevPage,
    Refresh,
    SetFilter,
)
from ..services import networks
from .components import filter_form, pager
from .keys import k, vk

log = logging.getLogger(__name__)

T = TypeVar("T")


def _save(page: str, state: ListState) -> ListState:
    session.put_list_state(k(page, "list"), state)
    return state


def dispatch(page: str, controller: ListController, state: ListState, event: Event) -> ListState:
    """Run `event` through the controller and persist the result."""
    with st.spinner("Loading…"):
        new = controller.dispatch(state, event)
    return _save(page, new)


def _fresh_state(controller: ListController, overrides: Mapping[str, Any] | None = None) -> ListState:
    # Inputs of a dropped state may still be in the session under old keys.
    return replace(controller.initial_state(overrides), filter_version=session.view_epoch())


def load_state(page: str, controller: ListController) -> ListState:
    """The page's list state; entering the page fetches page 0 with default filters."""
    state = session.get_list_state(k(page, "list"))
    if state is None:
        state = dispatch(page, controller, _fresh_state(controller), Refresh())
    return state


def reset_state(
    page: str, controller: ListController, overrides: Mapping[str, Any]
) -> ListState:
    """Start over with `overrides` as the filters and fetch page 0.

    The filter version moves on so the form's inputs show the new values.
    """
    previous = session.get_list_state(k(page, "list"))
    state = _fresh_state(controller, overrides)
    if previous is not None:
        state = replace(
            state,
            filter_version=max(previous.filter_version + 1, state.filter_version),
            request_seq=previous.request_seq,
        )
    return dispatch(page, controller, state, Refresh())


def apply_form(
    page: str,
    controller: ListController,
    state: ListState,
    *,
    choices: Mapping[str, Sequence[tuple[str, str]]] | None = None,
    hidden: Collection[str] = (),
) -> ListState:
    """Draw the filter form and apply its Apply / Clear outcome."""
    action, values = filter_form(page, controller.fields, state, choices=choices, hidden=hidden)
    if action == "apply":
        return dispatch(page, controller, state, ApplyFilters(values))
    if action == "clear":
        dispatch(page, controller, state, ClearFilters())
        # Redraw so the inputs are recreated under the new filter version.
        st.rerun()
    return state


def refresh_button(page: str, controller: ListController, state: ListState) -> ListState:
    if st.button("Refresh", key=k(page, "refresh"), disabled=state.loading):
        return dispatch(page, controller, state, Refresh())
    return state


def paginate(page: str, controller: ListController, state: ListState) -> None:
    """Prev / Next; a move refetches and reruns so the table shows the new page."""
    if not state.items and state.page == 0:
        return
    move = pager(page, state)
    if move is None:
        return
    event: Event = PrevPage() if move == "prev" else NextPage()
    new = dispatch(page, controller, state, event)
    if new is not state:
        st.rerun()


def fetch_detail(loader: Callable[[str], T], record_id: str) -> T | None:
    """Load one record for a detail view, or show why it could not be loaded."""
    try:
        with st.spinner("Loading…"):
            return loader(record_id)
    except IndexerError as e:
        log.info("Detail lookup for %r failed: %s", record_id, e)
        st.error(format_error(e))
        return None


_STATUS_LABELS = {"": "All", "true": "Consumed", "false": "Created"}


def status_toggle(
    page: str, controller: ListController, state: ListState, name: str = "is_consumed"
) -> ListState:
    """All / Consumed / Created switch bound to a boolean filter."""
    options = list(_STATUS_LABELS)
    current = str(state.filters.get(name, ""))
    choice = st.radio(
        "Status",
        options,
        index=options.index(current) if current in options else 0,
        format_func=_STATUS_LABELS.get,
        horizontal=True,
        label_visibility="collapsed",
        key=vk(page, "status", state.filter_version),
    )
    if choice != current:
        return dispatch(page, controller, state, SetFilter(name, choice))
    return state


def chain_choices() -> list[tuple[str, str]]:
    """(value, label) options for a chain-id select box."""
    return [("", "Any")] + [(str(chain_id), label) for chain_id, label in networks.list_chains()]
