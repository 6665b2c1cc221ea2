# anoma_explorer/pages/commitments.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Streamlit page: Commitments

Two tabs:
  • Commitments: created-resource commitments, from the compliance units that
    carry one.
  • Tree roots: commitment-tree roots emitted by the Protocol Adapter; rows
    open the root's detail view (`?id=`).
"""

from typing import Final

import streamlit as st

from ..core.formatting import format_number, format_timestamp, format_timestamp_full
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

PAGE: Final[str] = "commitments"
ROOTS: Final[str] = "commitments:roots"

COMMITMENT_FIELDS: Final[list[FilterField]] = [FilterField("commitment")]

ROOT_FIELDS: Final[list[FilterField]] = [
    FilterField("root"),
    FilterField("tx_hash", label="Transaction hash"),
    FilterField("chain_id", "int", "Chain"),
    FilterField("block_min", "int", "Block from"),
    FilterField("block_max", "int", "Block to"),
]


def _commitments(client: IndexerClient) -> None:
    controller = ListController(client.list_commitments, COMMITMENT_FIELDS)
    state = list_view.load_state(PAGE, controller)
    state = list_view.apply_form(PAGE, controller, state, columns=1)
    state = list_view.refresh_button(PAGE, controller, state)
    if list_status(state):
        rows = []
        for u in state.items:
            action = u.action
            tx = action.transaction if action else None
            rows.append(
                {
                    "Commitment": short(u.created_commitment),
                    "Logic ref": short(u.created_logic_ref),
                    "Created resource": detail_url(
                        "resources", u.created_resource.id if u.created_resource else None
                    ),
                    "Network": chain_label(action.chain_id if action else None),
                    "Block": format_number(action.block_number if action else None),
                    "Transaction": detail_url("transactions", tx.id if tx else None),
                }
            )
        records_table(
            PAGE,
            rows,
            links={"Created resource": "Created resource", "Transaction": "Transaction"},
            empty_message="No commitments found.",
        )
    list_view.paginate(PAGE, controller, state)


def _roots(client: IndexerClient) -> None:
    controller = ListController(client.list_commitment_roots, ROOT_FIELDS)
    state = list_view.load_state(ROOTS, controller)
    state = list_view.apply_form(
        ROOTS, controller, state, choices={"chain_id": list_view.chain_choices()}
    )
    state = list_view.refresh_button(ROOTS, controller, state)
    if list_status(state):
        records_table(
            ROOTS,
            [
                {
                    "id": r.id,
                    "Root": short(r.root),
                    "Network": chain_label(r.chain_id),
                    "Block": format_number(r.block_number),
                    "Time": format_timestamp(r.timestamp),
                    "Tx hash": short(r.tx_hash),
                    "Search": f"transactions?search={r.tx_hash}" if r.tx_hash else None,
                }
                for r in state.items
            ],
            links={"Search": "Transaction"},
            id_column="id",
            empty_message="No commitment tree roots found.",
        )
    list_view.paginate(ROOTS, controller, state)


def _render_detail(client: IndexerClient, root_id: str) -> None:
    detail_header("Commitment tree root", PAGE, "commitments")
    root = list_view.fetch_detail(client.get_commitment_root, root_id)
    if root is None:
        return
    chain = root.chain_id
    chain_popover(chain)
    field_table(
        [
            ("Root", root.root),
            ("Index", format_number(root.index)),
            ("Block", md_link(networks.block_url(chain, root.block_number), format_number(root.block_number))),
            ("Time", format_timestamp_full(root.timestamp)),
            ("Transaction hash", md_link(networks.tx_url(chain, root.tx_hash), root.tx_hash)),
        ]
    )
    if root.tx_hash:
        st.markdown(f"[Find this transaction in the explorer](transactions?search={root.tx_hash})")


def render(ctx: dict) -> None:
    """Render the Commitments page (tabs, or a tree root's `?id=` detail)."""
    if not require_indexer(ctx):
        return
    client = ctx["client"]
    record_id = st.query_params.get("id")
    if record_id:
        _render_detail(client, record_id)
        return
    page_header("Commitments", "Created commitments and commitment-tree roots.")
    commitments_tab, roots_tab = st.tabs(["Commitments", "Tree roots"])
    with commitments_tab:
        _commitments(client)
    with roots_tab:
        _roots(client)
