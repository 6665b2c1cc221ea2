# anoma_explorer/pages/resources.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Streamlit page: Resources

Lists consumed and created resources with an All / Consumed / Created switch
above the filter form. `?id=` opens one resource with its decoding status,
raw blob and payloads.
"""

from typing import Final

import streamlit as st

from ..core.formatting import format_number, format_status, truncate_value
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

PAGE: Final[str] = "resources"

FIELDS: Final[list[FilterField]] = [
    FilterField("is_consumed", "bool", "Consumed"),
    FilterField("tag"),
    FilterField("logic_ref", label="Logic ref"),
    FilterField("chain_id", "int", "Chain"),
    FilterField("decoding_status", label="Decoding status"),
    FilterField("block_min", "int", "Block from"),
    FilterField("block_max", "int", "Block to"),
]

DECODING_CHOICES: Final[list[tuple[str, str]]] = [
    ("", "Any"),
    ("success", "Success"),
    ("failed", "Failed"),
    ("pending", "Pending"),
]


def _render_list(client: IndexerClient) -> None:
    page_header(
        "Resources",
        "Resources are consumed (identified by nullifier) or created (identified by commitment).",
    )
    controller = ListController(client.list_resources, FIELDS)
    state = list_view.load_state(PAGE, controller)
    state = list_view.status_toggle(PAGE, controller, state)
    state = list_view.apply_form(
        PAGE,
        controller,
        state,
        choices={"chain_id": list_view.chain_choices(), "decoding_status": DECODING_CHOICES},
        hidden=("is_consumed",),
    )
    state = list_view.refresh_button(PAGE, controller, state)
    if list_status(state):
        records_table(
            PAGE,
            [
                {
                    "id": r.id,
                    "Tag": short(r.tag),
                    "Status": format_status(r.is_consumed),
                    "Logic ref": short(r.logic_ref),
                    "Network": chain_label(r.chain_id),
                    "Block": format_number(r.block_number),
                    "Decoding": r.decoding_status or "-",
                    "Transaction": detail_url("transactions", r.transaction.id if r.transaction else None),
                }
                for r in state.items
            ],
            links={"Transaction": "Transaction"},
            id_column="id",
            empty_message="No resources found.",
        )
    list_view.paginate(PAGE, controller, state)


def _render_detail(client: IndexerClient, resource_id: str) -> None:
    detail_header("Resource", PAGE, "resources")
    resource = list_view.fetch_detail(client.get_resource, resource_id)
    if resource is None:
        return

    chain = resource.chain_id
    tx = resource.transaction
    chain_popover(chain)
    field_table(
        [
            ("Tag", resource.tag),
            ("Status", format_status(resource.is_consumed)),
            ("Index", format_number(resource.index)),
            ("Logic ref", resource.logic_ref),
            ("Block", md_link(networks.block_url(chain, resource.block_number), format_number(resource.block_number))),
            ("Transaction", md_link(detail_url("transactions", tx.id if tx else None), tx.tx_hash if tx else None)),
            ("Decoding status", resource.decoding_status),
            ("Decoding error", resource.decoding_error),
        ]
    )

    if resource.raw_blob:
        st.subheader("Raw blob")
        st.caption(truncate_value(resource.raw_blob, 80))
        with st.expander("Full blob"):
            st.code(resource.raw_blob, language=None)

    st.subheader(f"Payloads ({len(resource.payloads)})")
    records_table(
        f"{PAGE}:payloads",
        [
            {
                "Kind": p.kind or "-",
                "Index": format_number(p.index),
                "Tag": short(p.tag),
                "Blob": truncate_value(p.blob, 60) or "-",
            }
            for p in resource.payloads
        ],
        empty_message="No payloads attached to this resource.",
    )


def render(ctx: dict) -> None:
    """Render the Resources page (list or `?id=` detail)."""
    if not require_indexer(ctx):
        return
    record_id = st.query_params.get("id")
    if record_id:
        _render_detail(ctx["client"], record_id)
    else:
        _render_list(ctx["client"])
