# anoma_explorer/ui/components.py
# SPDX-License-Identifier: Apache-2.0
"""Reusable Streamlit UI components.

Presentation only: these helpers take already-fetched records or states and
draw them. Anything that talks to the indexer or the database lives in
`services/`; anything that decides *what* to fetch lives in `core/listing.py`.

Currently provided:
  • detail_url(): relative link to a record's detail view.
  • md_link(), short(): cell and field text helpers.
  • link_columns(), records_table(): dataframe with labelled link columns and
    row-click navigation.
  • filter_form(): versioned filter inputs with Apply / Clear.
  • pager(): Prev / Next buttons guarded by the list state.
  • list_status(): loading / error / empty messages for a list state.
  • chain_label(), chain_popover(): chain id display.
  • field_table(): label/value pairs for detail views.
  • validation_errors(): settings-form error messages.
  • watch_settings(): rerun when another session changed the settings.
"""

from __future__ import annotations

from collections.abc import Collection, Mapping, Sequence
from typing import Any, Literal
from urllib.parse import quote

import streamlit as st

from ..core import state as session
from ..core.errors import SettingsValidationError
from ..core.formatting import PLACEHOLDER, format_number, truncate_hash
from ..core.listing import FilterField, ListState, active_filter_count
from ..services import networks
from ..services.settings_store import SettingsStore
from .keys import k, vk

_BOOL_CHOICES = ("", "true", "false")


def detail_url(page: str, record_id: str | None) -> str | None:
    if not record_id:
        return None
    return f"{page}?id={quote(record_id, safe='')}"


def md_link(url: str | None, text: str | None) -> str | None:
    """Markdown link for `field_table`; plain text when there is no URL."""
    if not text:
        return None
    return f"[{text}]({url})" if url else text


def short(value: Any) -> str:
    """`truncate_hash` for table cells (non-strings are stringified first)."""
    return truncate_hash(None if value is None else str(value))


def link_columns(links: Mapping[str, str]) -> dict[str, Any]:
    """`LinkColumn` configs whose cells read as the column label, e.g. "Transaction"."""
    return {name: st.column_config.LinkColumn(label, display_text=label) for name, label in links.items()}


def records_table(
    page: str,
    rows: Sequence[Mapping[str, Any]],
    *,
    links: Mapping[str, str] | None = None,
    id_column: str | None = None,
    empty_message: str = "No records found.",
) -> None:
    """Render `rows` as a dataframe.

    Args:
      page: Namespace for the widget key.
      rows: One mapping per row; key order is column order.
      links: Column name → label for columns holding URLs. The label is both
        the header and the text of each link.
      id_column: Column whose value is the record id; selecting a row opens
        the detail view of that record on this page.
      empty_message: Shown instead of an empty table.
    """
    if not rows:
        st.info(empty_message)
        return

    column_config = link_columns(links or {})
    if id_column:
        column_config[id_column] = None  # hidden; used for navigation only

    event = st.dataframe(
        list(rows),
        column_config=column_config,
        hide_index=True,
        use_container_width=True,
        key=k(page, "table"),
        on_select="rerun" if id_column else "ignore",
        selection_mode="single-row",
    )
    if id_column:
        selected = event.selection.rows if event else []
        if selected:
            record_id = rows[selected[0]].get(id_column)
            if record_id:
                # Forget the selection so returning to the list does not reopen it.
                st.session_state.pop(k(page, "table"), None)
                st.query_params["id"] = str(record_id)
                st.rerun()


def filter_form(
    page: str,
    fields: Sequence[FilterField],
    state: ListState,
    *,
    choices: Mapping[str, Sequence[tuple[str, str]]] | None = None,
    hidden: Collection[str] = (),
    columns: int = 3,
) -> tuple[Literal["apply", "clear"] | None, dict[str, str]]:
    """Draw the filter inputs and return (action, values).

    Input keys include `state.filter_version`, so clearing recreates them
    with their defaults. `choices` turns a field into a select box of
    (value, label) pairs; `bool` fields get Any / Yes / No automatically.
    Fields named in `hidden` are driven by other widgets: they are not drawn
    and keep their current value on Apply.
    """
    choices = choices or {}
    active = active_filter_count(state.filters, exclude=hidden)
    title = f"Filters ({active} active)" if active else "Filters"
    values: dict[str, str] = {}

    with st.expander(title, expanded=active > 0):
        with st.form(key=vk(page, "filters", state.filter_version), border=False):
            cols = st.columns(columns)
            visible = [f for f in fields if f.name not in hidden]
            for i, field in enumerate(visible):
                key = vk(page, field.name, state.filter_version)
                current = str(state.filters.get(field.name, ""))
                with cols[i % columns]:
                    if field.name in choices or field.kind == "bool":
                        options = list(choices.get(field.name) or [(c, c) for c in _BOOL_CHOICES])
                        labels = dict(options)
                        if field.kind == "bool" and field.name not in choices:
                            labels = {"": "Any", "true": "Yes", "false": "No"}
                        keys = [value for value, _ in options]
                        values[field.name] = st.selectbox(
                            field.title,
                            keys,
                            index=keys.index(current) if current in keys else 0,
                            format_func=lambda v, labels=labels: labels.get(v, v),
                            key=key,
                        )
                    else:
                        values[field.name] = st.text_input(field.title, value=current, key=key)
            apply_col, clear_col, _ = st.columns([1, 1, 4])
            applied = apply_col.form_submit_button("Apply", type="primary", use_container_width=True)
            cleared = clear_col.form_submit_button("Clear", use_container_width=True)

    if cleared:
        return "clear", {}
    if applied:
        values.update({name: str(state.filters.get(name, "")) for name in hidden})
        return "apply", values
    return None, values


def pager(page: str, state: ListState) -> Literal["prev", "next"] | None:
    """Prev / Next buttons; disabled per the list state's guards."""
    prev_col, label_col, next_col = st.columns([1, 2, 1])
    prev_clicked = prev_col.button(
        "← Prev",
        key=k(page, "prev"),
        disabled=state.page <= 0 or state.loading,
        use_container_width=True,
    )
    label_col.markdown(
        f"<div style='text-align:center'>Page {state.page + 1}</div>", unsafe_allow_html=True
    )
    next_clicked = next_col.button(
        "Next →",
        key=k(page, "next"),
        disabled=not state.has_more or state.loading,
        use_container_width=True,
    )
    if prev_clicked:
        return "prev"
    if next_clicked:
        return "next"
    return None


def list_status(state: ListState) -> bool:
    """Show error / not-configured messages; True when items can be drawn."""
    if not state.configured:
        st.warning("Indexer endpoint not configured")
        return False
    if state.error:
        st.error(state.error)
        return False
    return True


def chain_label(chain_id: int | None) -> str:
    if chain_id is None:
        return PLACEHOLDER
    return networks.short_name(chain_id)


def chain_popover(chain_id: int | None) -> None:
    """Compact chain badge that expands into name, id and explorer link."""
    info = networks.chain_info(chain_id)
    with st.popover(info.short, use_container_width=False):
        st.markdown(f"**{info.name}**")
        st.caption(f"Chain ID: {format_number(chain_id)}")
        if info.explorer:
            st.markdown(f"[Block explorer]({info.explorer})")


def field_table(pairs: Sequence[tuple[str, Any]]) -> None:
    """Render detail fields as a two-column label/value grid."""
    for label, value in pairs:
        left, right = st.columns([1, 3])
        left.markdown(f"**{label}**")
        if value is None or value == "":
            right.write(PLACEHOLDER)
        elif isinstance(value, str) and value.startswith(("http://", "https://", "[")):
            right.markdown(value)
        else:
            right.code(str(value), language=None)


def validation_errors(exc: SettingsValidationError) -> None:
    """One `st.error` per field message, e.g. "Name has already been taken"."""
    for field_name, messages in exc.errors.items():
        label = field_name.replace("_", " ").capitalize()
        for message in messages:
            st.error(f"{label} {message}")


def watch_settings(store: SettingsStore, interval: float = 5.0) -> None:
    """Rerun the page when the settings store revision moves past the one drawn."""
    st.session_state[session.SETTINGS_REVISION] = store.revision

    @st.fragment(run_every=interval)
    def _watch() -> None:
        if store.revision != st.session_state.get(session.SETTINGS_REVISION):
            st.rerun(scope="app")

    _watch()
