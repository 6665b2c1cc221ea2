# anoma_explorer/pages/logics.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Streamlit page: Logic inputs

Inputs to resource logic proofs. The "Verifying key" filter matches the
input's logic ref, which is the verifying key of the resource logic.
"""

from typing import Final

import streamlit as st

from ..core.formatting import format_bool, format_number, format_status, truncate_value
from ..core.listing import FilterField, ListController
from ..services.indexer import IndexerClient
from ..services.records import LogicInput
from ..ui import list_view
from ..ui.components import (
    chain_label,
    chain_popover,
    detail_url,
    field_table,
    list_status,
    md_link,
    records_table,
    short,
)
from ..ui.indexer_status import require_indexer
from ..ui.layout import detail_header, page_header

PAGE: Final[str] = "logics"

FIELDS: Final[list[FilterField]] = [
    FilterField("is_consumed", "bool", "Consumed"),
    FilterField("tag"),
    FilterField("logic_ref", label="Verifying key"),
]


def _payload_total(item: LogicInput) -> int:
    counts = (
        item.application_payload_count,
        item.discovery_payload_count,
        item.external_payload_count,
        item.resource_payload_count,
    )
    return sum(c or 0 for c in counts)


def _render_list(client: IndexerClient) -> None:
    page_header("Logic inputs")
    controller = ListController(client.list_logic_inputs, FIELDS)
    state = list_view.load_state(PAGE, controller)
    state = list_view.status_toggle(PAGE, controller, state)
    state = list_view.apply_form(PAGE, controller, state, hidden=("is_consumed",), columns=2)
    state = list_view.refresh_button(PAGE, controller, state)
    if list_status(state):
        rows = []
        for i in state.items:
            tx = i.action.transaction if i.action else None
            rows.append(
                {
                    "id": i.id,
                    "Tag": short(i.tag),
                    "Status": format_status(i.is_consumed),
                    "Verifying key": short(i.logic_ref),
                    "Payloads": _payload_total(i),
                    "Network": chain_label(i.action.chain_id if i.action else None),
                    "Transaction": detail_url("transactions", tx.id if tx else None),
                }
            )
        records_table(
            PAGE,
            rows,
            links={"Transaction": "Transaction"},
            id_column="id",
            empty_message="No logic inputs found.",
        )
    list_view.paginate(PAGE, controller, state)


def _render_detail(client: IndexerClient, input_id: str) -> None:
    detail_header("Logic input", PAGE, "logic inputs")
    item = list_view.fetch_detail(client.get_logic_input, input_id)
    if item is None:
        return

    action = item.action
    resource = item.resource
    chain_popover(action.chain_id if action else None)
    field_table(
        [
            ("Tag", item.tag),
            ("Index", format_number(item.index)),
            ("Consumed", format_bool(item.is_consumed)),
            ("Verifying key", item.logic_ref),
            ("Application payloads", format_number(item.application_payload_count)),
            ("Discovery payloads", format_number(item.discovery_payload_count)),
            ("External payloads", format_number(item.external_payload_count)),
            ("Resource payloads", format_number(item.resource_payload_count)),
            ("Resource", md_link(detail_url("resources", resource.id if resource else None), short(resource.tag) if resource else None)),
            ("Action", md_link(detail_url("actions", action.id if action else None), short(action.action_tree_root) if action else None)),
        ]
    )
    if item.proof:
        with st.expander("Proof"):
            st.caption(truncate_value(item.proof, 80))
            st.code(item.proof, language=None)


def render(ctx: dict) -> None:
    if not require_indexer(ctx):
        return
    record_id = st.query_params.get("id")
    if record_id:
        _render_detail(ctx["client"], record_id)
    else:
        _render_list(ctx["client"])
