# anoma_explorer/pages/actions.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""Streamlit page: Actions (list, and `?id=` detail with compliance units and logic inputs)."""

from typing import Final

import streamlit as st

from ..core.formatting import format_number, format_status, format_timestamp, format_timestamp_full
from ..core.listing import FilterField, ListController
from ..services import networks
from ..services.indexer import IndexerClient
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

PAGE: Final[str] = "actions"

FIELDS: Final[list[FilterField]] = [
    FilterField("action_tree_root", label="Action tree root"),
    FilterField("chain_id", "int", "Chain"),
    FilterField("block_min", "int", "Block from"),
    FilterField("block_max", "int", "Block to"),
]


def _render_list(client: IndexerClient) -> None:
    page_header("Actions", "Each action groups the compliance units and logic inputs of one transaction step.")
    controller = ListController(client.list_actions, FIELDS)
    state = list_view.load_state(PAGE, controller)
    state = list_view.apply_form(
        PAGE, controller, state, choices={"chain_id": list_view.chain_choices()}, columns=2
    )
    state = list_view.refresh_button(PAGE, controller, state)
    if list_status(state):
        records_table(
            PAGE,
            [
                {
                    "id": a.id,
                    "Action tree root": short(a.action_tree_root),
                    "Network": chain_label(a.chain_id),
                    "Tags": format_number(a.tag_count),
                    "Block": format_number(a.block_number),
                    "Time": format_timestamp(a.timestamp),
                    "Transaction": detail_url("transactions", a.transaction.id if a.transaction else None),
                }
                for a in state.items
            ],
            links={"Transaction": "Transaction"},
            id_column="id",
            empty_message="No actions found.",
        )
    list_view.paginate(PAGE, controller, state)


def _render_detail(client: IndexerClient, action_id: str) -> None:
    detail_header("Action", PAGE, "actions")
    action = list_view.fetch_detail(client.get_action, action_id)
    if action is None:
        return

    chain = action.chain_id
    tx = action.transaction
    chain_popover(chain)
    field_table(
        [
            ("Action tree root", action.action_tree_root),
            ("Index", format_number(action.index)),
            ("Tag count", format_number(action.tag_count)),
            ("Block", md_link(networks.block_url(chain, action.block_number), format_number(action.block_number))),
            ("Time", format_timestamp_full(action.timestamp)),
            ("Transaction", md_link(detail_url("transactions", tx.id if tx else None), tx.tx_hash if tx else None)),
        ]
    )

    st.subheader(f"Compliance units ({len(action.compliance_units)})")
    records_table(
        f"{PAGE}:compliances",
        [
            {
                "Consumed nullifier": short(u.consumed_nullifier),
                "Created commitment": short(u.created_commitment),
                "Consumed logic ref": short(u.consumed_logic_ref),
                "Created logic ref": short(u.created_logic_ref),
                "Open": detail_url("compliances", u.id),
            }
            for u in action.compliance_units
        ],
        links={"Open": "Compliance unit"},
        empty_message="No compliance units in this action.",
    )

    st.subheader(f"Logic inputs ({len(action.logic_inputs)})")
    records_table(
        f"{PAGE}:logics",
        [
            {
                "Tag": short(i.tag),
                "Status": format_status(i.is_consumed),
                "Logic ref": short(i.logic_ref),
                "Resource": detail_url("resources", i.resource.id if i.resource else None),
                "Open": detail_url("logics", i.id),
            }
            for i in action.logic_inputs
        ],
        links={"Resource": "Resource", "Open": "Logic input"},
        empty_message="No logic inputs in this action.",
    )


def render(ctx: dict) -> None:
    if not require_indexer(ctx):
        return
    record_id = st.query_params.get("id")
    if record_id:
        _render_detail(ctx["client"], record_id)
    else:
        _render_list(ctx["client"])
