# anoma_explorer/core/listing.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Filter and paging state for the explorer's list views.

Every list page (transactions, resources, actions, ...) behaves the same way:
a filter form, a result table and Prev/Next buttons. This module holds that
behaviour once, as an explicit reducer over immutable `ListState` values, so
pages only wire widgets to events and tests can drive it without Streamlit.

Design notes
------------
- `reduce(state, event, defaults)` is pure. Events that need new data (apply,
  clear, page moves, single-filter changes, refresh) return a state with
  `loading=True` and a bumped `request_seq`; `ListController.dispatch` sees the
  bump, runs the fetch and feeds the outcome back in as another event.
- Results carry the `seq` of the request that produced them. A result whose
  `seq` is not the current `request_seq` is stale and is dropped, so a slow
  response for an old filter can never overwrite a newer one.
- Paging fetches `page_size + 1` rows; the extra row only tells us whether a
  next page exists and is never shown.
- Filter values are kept as the strings the form produced. `build_options`
  turns them into typed keyword arguments for the `IndexerClient.list_*` call.

Usage
-----
    controller = ListController(client.list_resources, RESOURCE_FIELDS)
    state = controller.dispatch(controller.initial_state(), Refresh())
    state = controller.dispatch(state, ApplyFilters({"tag": "0xab"}))
"""

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field, replace
from typing import Any, Literal

from .constants import PAGE_SIZE
from .errors import IndexerError, NotConfiguredError
from .formatting import format_error

log = logging.getLogger(__name__)

FieldKind = Literal["text", "int", "bool"]


@dataclass(frozen=True)
class FilterField:
    """One input of a filter form."""

    name: str
    kind: FieldKind = "text"
    label: str = ""

    @property
    def title(self) -> str:
        return self.label or self.name.replace("_", " ").capitalize()


@dataclass(frozen=True)
class ListState:
    filters: Mapping[str, str] = field(default_factory=dict)
    page: int = 0
    has_more: bool = False
    loading: bool = False
    items: tuple[Any, ...] = ()
    error: str | None = None
    # Bumped on "clear" so the form's widget keys change and inputs reset.
    filter_version: int = 0
    request_seq: int = 0
    configured: bool = True


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ApplyFilters:
    values: Mapping[str, Any]


@dataclass(frozen=True)
class ClearFilters:
    pass


@dataclass(frozen=True)
class NextPage:
    pass


@dataclass(frozen=True)
class PrevPage:
    pass


@dataclass(frozen=True)
class SetFilter:
    name: str
    value: Any


@dataclass(frozen=True)
class Refresh:
    """Reload the current page with the current filters."""


@dataclass(frozen=True)
class FetchStarted:
    seq: int


@dataclass(frozen=True)
class FetchSucceeded:
    seq: int
    rows: Sequence[Any]


@dataclass(frozen=True)
class FetchFailed:
    seq: int
    error: str


@dataclass(frozen=True)
class MarkNotConfigured:
    seq: int


Event = (
    ApplyFilters
    | ClearFilters
    | NextPage
    | PrevPage
    | SetFilter
    | Refresh
    | FetchStarted
    | FetchSucceeded
    | FetchFailed
    | MarkNotConfigured
)


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _refetch(state: ListState, **changes: Any) -> ListState:
    return replace(state, loading=True, request_seq=state.request_seq + 1, **changes)


def reduce(
    state: ListState,
    event: Event,
    defaults: Mapping[str, str],
    page_size: int = PAGE_SIZE,
) -> ListState:
    """Return the state after `event`. Pure; never fetches."""
    if isinstance(event, ApplyFilters):
        merged = {**defaults, **{k: _text(v) for k, v in event.values.items()}}
        return _refetch(state, filters=merged, page=0)
    if isinstance(event, ClearFilters):
        return _refetch(
            state, filters=dict(defaults), page=0, filter_version=state.filter_version + 1
        )
    if isinstance(event, SetFilter):
        return _refetch(state, filters={**state.filters, event.name: _text(event.value)}, page=0)
    if isinstance(event, NextPage):
        if not state.has_more or state.loading:
            return state
        return _refetch(state, page=state.page + 1)
    if isinstance(event, PrevPage):
        if state.page <= 0 or state.loading:
            return state
        return _refetch(state, page=state.page - 1)
    if isinstance(event, Refresh):
        return _refetch(state)
    if isinstance(event, FetchStarted):
        return replace(state, loading=True, request_seq=max(state.request_seq, event.seq))

    # Outcomes of a fetch: anything but the latest request is stale.
    if event.seq != state.request_seq:
        log.debug("Dropping stale list result seq=%s (current %s)", event.seq, state.request_seq)
        return state
    if isinstance(event, FetchSucceeded):
        rows = tuple(event.rows)
        return replace(
            state,
            loading=False,
            configured=True,
            error=None,
            items=rows[:page_size],
            has_more=len(rows) > page_size,
        )
    if isinstance(event, FetchFailed):
        return replace(state, loading=False, configured=True, error=event.error, items=(), has_more=False)
    if isinstance(event, MarkNotConfigured):
        return replace(state, loading=False, configured=False, error=None, items=(), has_more=False)
    raise TypeError(f"unknown list event: {event!r}")


# ---------------------------------------------------------------------------
# Options and counts
# ---------------------------------------------------------------------------


def _parse_int(raw: str) -> int | None:
    try:
        return int(raw)
    except ValueError:
        return None


def _parse_bool(raw: str) -> bool | None:
    lowered = raw.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    return None


def build_options(
    filters: Mapping[str, Any],
    fields: Iterable[FilterField],
    page: int,
    page_size: int = PAGE_SIZE,
) -> dict[str, Any]:
    """Keyword arguments for an `IndexerClient.list_*` call.

    Blank values are omitted. `int` fields that do not parse are omitted
    rather than rejected; `bool` fields accept only "true" and "false".
    """
    options: dict[str, Any] = {"limit": page_size + 1, "offset": page * page_size}
    for f in fields:
        raw = _text(filters.get(f.name)).strip()
        if not raw:
            continue
        if f.kind == "int":
            value: Any = _parse_int(raw)
        elif f.kind == "bool":
            value = _parse_bool(raw)
        else:
            value = raw
        if value is not None:
            options[f.name] = value
    return options


def active_filter_count(filters: Mapping[str, Any], exclude: Iterable[str] = ()) -> int:
    """Number of non-blank filters, ignoring the names in `exclude`."""
    skip = set(exclude)
    return sum(1 for name, value in filters.items() if name not in skip and _text(value).strip())


# ---------------------------------------------------------------------------
# Controller
# ---------------------------------------------------------------------------


class ListController:
    """Runs the reducer and performs the fetches it asks for.

    Args:
        fetch: A `list_*` method (or any callable taking `limit`, `offset` and
            the filter names as keywords) returning a list of rows.
        fields: The filter form's fields; their names are the default keys.
        page_size: Rows shown per page.
    """

    def __init__(
        self,
        fetch: Callable[..., Sequence[Any]],
        fields: Sequence[FilterField],
        page_size: int = PAGE_SIZE,
    ):
        self.fetch = fetch
        self.fields = tuple(fields)
        self.page_size = page_size

    @property
    def defaults(self) -> dict[str, str]:
        return {f.name: "" for f in self.fields}

    def initial_state(self, overrides: Mapping[str, Any] | None = None) -> ListState:
        """A fresh state whose filters are the defaults overlaid with `overrides`."""
        filters = {**self.defaults, **{k: _text(v) for k, v in (overrides or {}).items()}}
        return ListState(filters=filters)

    def options(self, state: ListState) -> dict[str, Any]:
        return build_options(state.filters, self.fields, state.page, self.page_size)

    def dispatch(self, state: ListState, event: Event) -> ListState:
        new = reduce(state, event, self.defaults, self.page_size)
        if new.loading and new.request_seq != state.request_seq:
            return self._load(new)
        return new

    def _load(self, state: ListState) -> ListState:
        seq = state.request_seq
        try:
            rows = self.fetch(**self.options(state))
        except NotConfiguredError:
            outcome: Event = MarkNotConfigured(seq)
        except IndexerError as e:
            outcome = FetchFailed(seq, format_error(e))
        else:
            outcome = FetchSucceeded(seq, rows)
        return reduce(state, outcome, self.defaults, self.page_size)
