# anoma_explorer/pages/nullifiers.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Streamlit page: Nullifiers

Every consumed resource publishes a nullifier. This list shows the compliance
units carrying one; rows open the compliance unit.
"""

from typing import Final

from ..core.formatting import format_number
from ..core.listing import FilterField, ListController
from ..ui import list_view
from ..ui.components import chain_label, detail_url, list_status, records_table, short
from ..ui.indexer_status import require_indexer
from ..ui.layout import page_header

PAGE: Final[str] = "nullifiers"

FIELDS: Final[list[FilterField]] = [FilterField("nullifier")]


def render(ctx: dict) -> None:
    if not require_indexer(ctx):
        return
    page_header("Nullifiers", "Nullifiers of consumed resources.")
    controller = ListController(ctx["client"].list_nullifiers, FIELDS)
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
                    "Nullifier": short(u.consumed_nullifier),
                    "Logic ref": short(u.consumed_logic_ref),
                    "Consumed resource": detail_url(
                        "resources", u.consumed_resource.id if u.consumed_resource else None
                    ),
                    "Network": chain_label(action.chain_id if action else None),
                    "Block": format_number(action.block_number if action else None),
                    "Transaction": detail_url("transactions", tx.id if tx else None),
                    "Compliance unit": detail_url("compliances", u.id),
                }
            )
        records_table(
            PAGE,
            rows,
            links={
                "Consumed resource": "Consumed resource",
                "Transaction": "Transaction",
                "Compliance unit": "Compliance unit",
            },
            empty_message="No nullifiers found.",
        )
    list_view.paginate(PAGE, controller, state)
