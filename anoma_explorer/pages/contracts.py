# anoma_explorer/pages/contracts.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Streamlit page: Contracts (settings)

Protocols and their deployed contract addresses, grouped as
protocol → category → version, one address per network. Reading is open;
every mutation goes through the admin gate. Deleting a protocol deletes its
addresses.
"""

from collections.abc import Callable
from typing import Any, Final, TypeVar

import streamlit as st

from ..core import state as session
from ..core.errors import SettingsNotFoundError, SettingsValidationError
from ..core.formatting import format_bool
from ..services.models import ContractAddress, Network, Protocol
from ..services.settings_store import SettingsStore
from ..ui.admin import gated
from ..ui.components import validation_errors, watch_settings
from ..ui.keys import k, vk
from ..ui.layout import page_header

PAGE: Final[str] = "contracts"

T = TypeVar("T")


def _done(message: str) -> None:
    session.flash(message)
    st.rerun()


def _run(ctx: dict, action: Callable[[], T], message: Callable[[T], str]) -> None:
    """Gate `action`; on success flash `message(result)` and rerun."""
    try:
        result = gated(ctx["admin"], ctx["admin_state"], action)
    except SettingsValidationError as e:
        validation_errors(e)
        return
    except SettingsNotFoundError as e:
        st.warning(f"{e} (it may have been deleted in another session)")
        return
    if result is not None:
        _done(message(result))


def _address_link(row: ContractAddress, networks: dict[str, Network]) -> str | None:
    network = networks.get(row.network)
    if network is None or not network.explorer_url:
        return None
    return f"{network.explorer_url.rstrip('/')}/address/{row.address}"


def _network_label(name: str, networks: dict[str, Network]) -> str:
    network = networks.get(name)
    return network.display_name if network else name


# ---------------------------------------------------------------------------
# Read-only overview
# ---------------------------------------------------------------------------


def _overview(store: SettingsStore, networks: dict[str, Network]) -> None:
    grouped = store.list_addresses_by_protocol()
    if not grouped:
        st.info("No protocols configured. Add one below or run `python scripts/manage.py seed`.")
        return
    for protocol, categories in grouped.items():
        title = protocol.name if protocol.active else f"{protocol.name} (inactive)"
        with st.expander(title, expanded=True):
            if protocol.description:
                st.caption(protocol.description)
            if protocol.github_url:
                st.markdown(f"[Source]({protocol.github_url})")
            if not categories:
                st.caption("No contract addresses yet.")
            for category, versions in categories.items():
                for version, rows in versions.items():
                    st.markdown(f"**{category}** · `{version}`")
                    st.dataframe(
                        [
                            {
                                "Network": _network_label(r.network, networks),
                                "Address": r.address,
                                "Active": format_bool(r.active),
                                "Explorer": _address_link(r, networks),
                            }
                            for r in rows
                        ],
                        column_config={
                            "Explorer": st.column_config.LinkColumn("Explorer", display_text="Open")
                        },
                        hide_index=True,
                        use_container_width=True,
                    )


# ---------------------------------------------------------------------------
# Protocols
# ---------------------------------------------------------------------------


def _protocol_form(key: str, protocol: Protocol | None = None) -> tuple[bool, dict[str, Any]]:
    with st.form(key=key):
        values: dict[str, Any] = {
            "name": st.text_input("Name", value=protocol.name if protocol else "", key=f"{key}:name"),
            "description": st.text_area(
                "Description",
                value=(protocol.description or "") if protocol else "",
                height=80,
                key=f"{key}:description",
            ),
            "github_url": st.text_input(
                "GitHub URL", value=(protocol.github_url or "") if protocol else "", key=f"{key}:github_url"
            ),
            "active": st.checkbox(
                "Active", value=protocol.active if protocol else True, key=f"{key}:active"
            ),
        }
        submitted = st.form_submit_button("Save" if protocol else "Add protocol", type="primary")
    return submitted, values


def _protocols(ctx: dict, store: SettingsStore, protocols: list[Protocol]) -> None:
    with st.expander("Add protocol"):
        submitted, values = _protocol_form(vk(PAGE, "add_protocol", store.revision))
        if submitted:
            _run(ctx, lambda: store.create_protocol(values), lambda p: f"Protocol {p.name} created")

    if not protocols:
        return
    with st.expander("Edit or delete a protocol"):
        by_id = {p.id: p for p in protocols}
        protocol_id = st.selectbox(
            "Protocol", list(by_id), format_func=lambda i: by_id[i].name, key=k(PAGE, "pick_protocol")
        )
        protocol = by_id[protocol_id]
        submitted, values = _protocol_form(vk(PAGE, f"edit_protocol:{protocol.id}", store.revision), protocol)
        if submitted:
            _run(
                ctx,
                lambda: store.update_protocol(protocol.id, values),
                lambda p: f"Protocol {p.name} updated",
            )
        st.caption("Deleting a protocol also deletes all of its contract addresses.")
        if st.button("Delete protocol", key=k(PAGE, "delete_protocol")):
            _run(
                ctx,
                lambda: store.delete_protocol(protocol.id),
                lambda p: f"Protocol {p.name} deleted",
            )


# ---------------------------------------------------------------------------
# Contract addresses
# ---------------------------------------------------------------------------


def _address_form(
    key: str,
    protocols: list[Protocol],
    network_names: list[str],
    row: ContractAddress | None = None,
) -> tuple[bool, dict[str, Any]]:
    names = {p.id: p.name for p in protocols}
    ids = list(names)
    with st.form(key=key):
        left, right = st.columns(2)
        protocol_id = left.selectbox(
            "Protocol",
            ids,
            index=ids.index(row.protocol_id) if row and row.protocol_id in ids else 0,
            format_func=names.get,
            key=f"{key}:protocol_id",
        )
        if row and row.network not in network_names:
            network_names = [row.network, *network_names]
        network = right.selectbox(
            "Network",
            network_names,
            index=network_names.index(row.network) if row else 0,
            key=f"{key}:network",
        )
        values: dict[str, Any] = {
            "protocol_id": protocol_id,
            "network": network,
            "category": left.text_input(
                "Category",
                value=row.category if row else "",
                help="e.g. protocol_adapter",
                key=f"{key}:category",
            ),
            "version": right.text_input(
                "Version", value=row.version if row else "", help="e.g. v1.0", key=f"{key}:version"
            ),
            "address": st.text_input(
                "Address", value=row.address if row else "", placeholder="0x…", key=f"{key}:address"
            ),
            "active": st.checkbox("Active", value=row.active if row else True, key=f"{key}:active"),
        }
        submitted = st.form_submit_button("Save" if row else "Add address", type="primary")
    return submitted, values


def _addresses(
    ctx: dict, store: SettingsStore, protocols: list[Protocol], networks: dict[str, Network]
) -> None:
    if not protocols or not networks:
        st.caption("Add at least one protocol and one network to register contract addresses.")
        return
    network_names = list(networks)

    with st.expander("Add contract address"):
        submitted, values = _address_form(vk(PAGE, "add_address", store.revision), protocols, network_names)
        if submitted:
            _run(
                ctx,
                lambda: store.create_contract_address(values),
                lambda r: f"Address for {r.category} {r.version} on {r.network} created",
            )

    rows = store.list_contract_addresses()
    if not rows:
        return
    with st.expander("Edit or delete a contract address"):
        by_id = {r.id: r for r in rows}
        address_id = st.selectbox(
            "Contract address",
            list(by_id),
            format_func=lambda i: (
                f"{by_id[i].protocol.name} · {by_id[i].category} · {by_id[i].version} · {by_id[i].network}"
            ),
            key=k(PAGE, "pick_address"),
        )
        row = by_id[address_id]
        submitted, values = _address_form(
            vk(PAGE, f"edit_address:{row.id}", store.revision), protocols, network_names, row
        )
        if submitted:
            _run(
                ctx,
                lambda: store.update_contract_address(row.id, values),
                lambda r: f"Address for {r.category} {r.version} on {r.network} updated",
            )
        if st.button("Delete contract address", key=k(PAGE, "delete_address")):
            _run(
                ctx,
                lambda: store.delete_contract_address(row.id),
                lambda r: f"Address for {r.category} {r.version} on {r.network} deleted",
            )


def render(ctx: dict) -> None:
    """Render the Contracts settings page."""
    store: SettingsStore = ctx["store"]
    page_header("Contracts", "Protocols and their deployed contract addresses.")
    watch_settings(store)

    networks = {n.name: n for n in store.list_networks()}
    protocols = store.list_protocols()

    _overview(store, networks)
    st.subheader("Manage")
    _protocols(ctx, store, protocols)
    _addresses(ctx, store, protocols, networks)
