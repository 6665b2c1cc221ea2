# anoma_explorer/pages/transactions.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Streamlit page: Transactions

Purpose
-------
Browse indexed Protocol Adapter transactions, newest block first, and open a
single transaction with its resources and actions.

Modes
-----
- List (default): filter form (hash, chain, block range, contract), paged
  table, Prev/Next.
- Detail (`?id=<transaction id>`): EVM fields, fee, tags, logic refs, and the
  resources/actions the transaction produced, each linking to its own page.

Search
------
`?search=<hash>` and the sidebar search box both start a fresh list with the
`tx_hash` filter pre-filled.
"""

from typing import Final

import streamlit as st

from ..core import state as session
from ..core.formatting import (
    format_eth,
    format_gwei,
    format_number,
    format_status,
    format_timestamp,
    format_timestamp_full,
    format_tx_fee,
)
from ..core.listing import FilterField, ListController
from ..services import networks
from ..services.indexer import IndexerClient
from ..services.records import EvmTransaction, Transaction
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

PAGE: Final[str] = "transactions"

FIELDS: Final[list[FilterField]] = [
    FilterField("tx_hash", label="Transaction hash"),
    FilterField("chain_id", "int", "Chain"),
    FilterField("contract_address", label="Contract address"),
    FilterField("block_min", "int", "Block from"),
    FilterField("block_max", "int", "Block to"),
]


def _pending_search() -> str | None:
    """Hash from `?search=` or the sidebar, consumed on read."""
    query = st.query_params.get("search")
    if query is not None:
        del st.query_params["search"]
    pending = st.session_state.get(session.PENDING_SEARCH) or ""
    st.session_state[session.PENDING_SEARCH] = ""
    value = (query or pending).strip()
    return value or None


def _rows(txs: tuple[Transaction, ...]) -> list[dict]:
    return [
        {
            "id": tx.id,
            "Tx hash": short(tx.tx_hash),
            "Network": chain_label(tx.chain_id),
            "Block": format_number(tx.block_number),
            "From": short(tx.evm.from_address if tx.evm else None),
            "Value": format_eth(tx.evm.value if tx.evm else None),
            "Resources": len(tx.tags),
            "Time": format_timestamp(tx.timestamp),
            "Explorer": networks.tx_url(tx.chain_id, tx.tx_hash),
        }
        for tx in txs
    ]


def _render_list(client: IndexerClient) -> None:
    page_header("Transactions", "Protocol Adapter transactions, newest first.")
    controller = ListController(client.list_transactions, FIELDS)

    search = _pending_search()
    if search:
        state = list_view.reset_state(PAGE, controller, {"tx_hash": search})
    else:
        state = list_view.load_state(PAGE, controller)

    state = list_view.apply_form(
        PAGE, controller, state, choices={"chain_id": list_view.chain_choices()}
    )
    state = list_view.refresh_button(PAGE, controller, state)
    if list_status(state):
        records_table(
            PAGE,
            _rows(state.items),
            links={"Explorer": "Explorer"},
            id_column="id",
            empty_message="No transactions found.",
        )
    list_view.paginate(PAGE, controller, state)


def _render_detail(client: IndexerClient, tx_id: str) -> None:
    detail_header("Transaction", PAGE, "transactions")
    tx = list_view.fetch_detail(client.get_transaction, tx_id)
    if tx is None:
        return

    evm = tx.evm or EvmTransaction()
    chain = tx.chain_id
    chain_popover(tx.chain_id)
    field_table(
        [
            ("Transaction hash", md_link(networks.tx_url(chain, tx.tx_hash), tx.tx_hash)),
            ("Block", md_link(networks.block_url(chain, tx.block_number), format_number(tx.block_number))),
            ("Time", format_timestamp_full(tx.timestamp)),
            ("Contract", md_link(networks.address_url(chain, tx.contract_address), tx.contract_address)),
            ("From", md_link(networks.address_url(chain, evm.from_address), evm.from_address)),
            ("Value", format_eth(evm.value)),
            ("Gas price", format_gwei(evm.gas_price)),
            ("Gas used", format_number(evm.gas_used)),
            ("Transaction fee", format_tx_fee(evm.gas_used, evm.gas_price)),
        ]
    )

    with st.expander(f"Tags ({len(tx.tags)})"):
        for tag in tx.tags:
            st.code(tag, language=None)
    with st.expander(f"Logic refs ({len(tx.logic_refs)})"):
        for ref in tx.logic_refs:
            st.code(ref, language=None)

    st.subheader(f"Resources ({len(tx.resources)})")
    records_table(
        f"{PAGE}:resources",
        [
            {
                "Tag": short(r.tag),
                "Type": format_status(r.is_consumed),
                "Logic ref": short(r.logic_ref),
                "Decoding": r.decoding_status or "-",
                "Open": detail_url("resources", r.id),
            }
            for r in tx.resources
        ],
        links={"Open": "Resource"},
        empty_message="This transaction has no resources.",
    )

    st.subheader(f"Actions ({len(tx.actions)})")
    records_table(
        f"{PAGE}:actions",
        [
            {
                "Action tree root": short(a.action_tree_root),
                "Tags": format_number(a.tag_count),
                "Open": detail_url("actions", a.id),
            }
            for a in tx.actions
        ],
        links={"Open": "Action"},
        empty_message="This transaction has no actions.",
    )


def render(ctx: dict) -> None:
    """Render the Transactions page (list or `?id=` detail)."""
    if not require_indexer(ctx):
        return
    record_id = st.query_params.get("id")
    if record_id:
        _render_detail(ctx["client"], record_id)
    else:
        _render_list(ctx["client"])
