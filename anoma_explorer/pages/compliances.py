# anoma_explorer/pages/compliances.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Streamlit page: Compliance units

A compliance unit pairs one consumed resource (by nullifier) with one created
resource (by commitment) and proves the pair balances. The logic-ref filter
matches either side.
"""

from typing import Final

import streamlit as st

from ..core.formatting import format_number, truncate_value
from ..core.listing import FilterField, ListController
from ..services import networks
from ..services.indexer import IndexerClient
from ..services.records import Action
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

PAGE: Final[str] = "compliances"

FIELDS: Final[list[FilterField]] = [
    FilterField("nullifier"),
    FilterField("commitment"),
    FilterField("logic_ref", label="Logic ref"),
]


def _tx_url(action: Action | None) -> str | None:
    tx = action.transaction if action else None
    return detail_url("transactions", tx.id if tx else None)


def _render_list(client: IndexerClient) -> None:
    page_header("Compliance units")
    controller = ListController(client.list_compliance_units, FIELDS)
    state = list_view.load_state(PAGE, controller)
    state = list_view.apply_form(PAGE, controller, state)
    state = list_view.refresh_button(PAGE, controller, state)
    if list_status(state):
        records_table(
            PAGE,
            [
                {
                    "id": u.id,
                    "Consumed nullifier": short(u.consumed_nullifier),
                    "Created commitment": short(u.created_commitment),
                    "Network": chain_label(u.action.chain_id if u.action else None),
                    "Block": format_number(u.action.block_number if u.action else None),
                    "Transaction": _tx_url(u.action),
                }
                for u in state.items
            ],
            links={"Transaction": "Transaction"},
            id_column="id",
            empty_message="No compliance units found.",
        )
    list_view.paginate(PAGE, controller, state)


def _render_detail(client: IndexerClient, unit_id: str) -> None:
    detail_header("Compliance unit", PAGE, "compliance units")
    unit = list_view.fetch_detail(client.get_compliance_unit, unit_id)
    if unit is None:
        return

    action = unit.action
    chain = action.chain_id if action else None
    block = action.block_number if action else None
    chain_popover(chain)
    field_table(
        [
            ("Index", format_number(unit.index)),
            ("Consumed nullifier", unit.consumed_nullifier),
            ("Consumed logic ref", unit.consumed_logic_ref),
            ("Consumed commitment tree root", unit.consumed_commitment_tree_root),
            ("Created commitment", unit.created_commitment),
            ("Created logic ref", unit.created_logic_ref),
            ("Unit delta X", unit.unit_delta_x),
            ("Unit delta Y", unit.unit_delta_y),
            ("Action", md_link(detail_url("actions", action.id if action else None), short(action.action_tree_root) if action else None)),
            ("Block", md_link(networks.block_url(chain, block), format_number(block))),
            ("Transaction", md_link(_tx_url(action), action.transaction.tx_hash if action and action.transaction else None)),
        ]
    )

    st.subheader("Resources")
    consumed, created = st.columns(2)
    for col, label, resource in (
        (consumed, "Consumed", unit.consumed_resource),
        (created, "Created", unit.created_resource),
    ):
        with col:
            st.markdown(f"**{label}**")
            if resource is None:
                st.caption("Not indexed")
                continue
            st.markdown(md_link(detail_url("resources", resource.id), short(resource.tag)) or "-")
            st.caption(f"Logic ref: {short(resource.logic_ref)}")

    if unit.proof:
        with st.expander("Proof"):
            st.caption(truncate_value(unit.proof, 80))
            st.code(unit.proof, language=None)


def render(ctx: dict) -> None:
    """Render the Compliance units page (list or `?id=` detail)."""
    if not require_indexer(ctx):
        return
    record_id = st.query_params.get("id")
    if record_id:
        _render_detail(ctx["client"], record_id)
    else:
        _render_list(ctx["client"])
