# anoma_explorer/pages/networks.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Streamlit page: Networks (settings)

Purpose
-------
Maintain the chains the explorer knows about: slug name, display name, chain
id, explorer and RPC URLs, testnet flag and active flag. Contract addresses
refer to networks by their slug.

Design Notes
------------
- Anyone can read the table; adding, editing and deleting go through the
  admin gate (`ui.admin.gated`).
- Validation happens in `SettingsStore`; its field errors are shown under
  the form.
- The page polls the store revision, so edits made in another browser
  session show up without a manual reload.
"""

from typing import Any, Final

import streamlit as st

from ..core import state as session
from ..core.errors import SettingsNotFoundError, SettingsValidationError
from ..core.formatting import format_bool, format_number
from ..services.models import Network
from ..services.settings_store import SettingsStore
from ..ui.admin import gated
from ..ui.components import validation_errors, watch_settings
from ..ui.keys import k, vk
from ..ui.layout import page_header

PAGE: Final[str] = "networks"


def _network_form(key: str, network: Network | None = None) -> tuple[bool, dict[str, Any]]:
    """Draw the network inputs; returns (submitted, values)."""
    with st.form(key=key):
        left, right = st.columns(2)
        values: dict[str, Any] = {
            "name": left.text_input(
                "Name",
                value=network.name if network else "",
                help="Lowercase slug, e.g. eth-mainnet",
                key=f"{key}:name",
            ),
            "display_name": right.text_input(
                "Display name", value=network.display_name if network else "", key=f"{key}:display_name"
            ),
            "chain_id": left.text_input(
                "Chain ID",
                value=str(network.chain_id) if network and network.chain_id is not None else "",
                key=f"{key}:chain_id",
            ),
            "explorer_url": right.text_input(
                "Explorer URL",
                value=(network.explorer_url or "") if network else "",
                key=f"{key}:explorer_url",
            ),
            "rpc_url": left.text_input(
                "RPC URL", value=(network.rpc_url or "") if network else "", key=f"{key}:rpc_url"
            ),
        }
        values["is_testnet"] = right.checkbox(
            "Testnet", value=network.is_testnet if network else False, key=f"{key}:is_testnet"
        )
        values["active"] = right.checkbox(
            "Active", value=network.active if network else True, key=f"{key}:active"
        )
        submitted = st.form_submit_button("Save" if network else "Add network", type="primary")
    return submitted, values


def _done(message: str) -> None:
    session.flash(message)
    st.rerun()


def _table(networks: list[Network]) -> None:
    if not networks:
        st.info("No networks configured. Add one below or run `python scripts/manage.py seed`.")
        return
    st.dataframe(
        [
            {
                "Name": n.name,
                "Display name": n.display_name,
                "Chain ID": format_number(n.chain_id),
                "Testnet": format_bool(n.is_testnet),
                "Active": format_bool(n.active),
                "Explorer": n.explorer_url,
                "RPC": n.rpc_url,
            }
            for n in networks
        ],
        column_config={"Explorer": st.column_config.LinkColumn("Explorer")},
        hide_index=True,
        use_container_width=True,
    )


def _add(ctx: dict, store: SettingsStore) -> None:
    with st.expander("Add network"):
        submitted, values = _network_form(vk(PAGE, "add", store.revision))
        if not submitted:
            return
        try:
            created = gated(ctx["admin"], ctx["admin_state"], lambda: store.create_network(values))
        except SettingsValidationError as e:
            validation_errors(e)
            return
        if created is not None:
            _done(f"Network {created.name} created")


def _edit(ctx: dict, store: SettingsStore, networks: list[Network]) -> None:
    if not networks:
        return
    with st.expander("Edit or delete a network"):
        by_id = {n.id: n for n in networks}
        network_id = st.selectbox(
            "Network",
            list(by_id),
            format_func=lambda i: f"{by_id[i].display_name} ({by_id[i].name})",
            key=k(PAGE, "pick"),
        )
        network = by_id[network_id]
        submitted, values = _network_form(vk(PAGE, f"edit:{network.id}", store.revision), network)
        delete = st.button("Delete network", key=k(PAGE, "delete"))
        try:
            if submitted:
                updated = gated(
                    ctx["admin"], ctx["admin_state"], lambda: store.update_network(network.id, values)
                )
                if updated is not None:
                    _done(f"Network {updated.name} updated")
            if delete:
                deleted = gated(ctx["admin"], ctx["admin_state"], lambda: store.delete_network(network.id))
                if deleted is not None:
                    _done(f"Network {deleted.name} deleted")
        except SettingsValidationError as e:
            validation_errors(e)
        except SettingsNotFoundError as e:
            st.warning(f"{e} (it may have been deleted in another session)")


def render(ctx: dict) -> None:
    """Render the Networks settings page."""
    store: SettingsStore = ctx["store"]
    page_header("Networks", "Chains known to the explorer. Changes require admin access.")
    watch_settings(store)

    networks = store.list_networks()
    _table(networks)
    _add(ctx, store)
    _edit(ctx, store, networks)
