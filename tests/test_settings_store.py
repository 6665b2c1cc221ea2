# tests/test_settings_store.py
# SPDX-License-Identifier: Apache-2.0
"""SettingsStore CRUD, validation and change notification on in-memory SQLite."""

from __future__ import annotations

import pytest

from anoma_explorer.core.constants import ENVIO_URL_SETTING_KEY
from anoma_explorer.core.errors import SettingsNotFoundError, SettingsValidationError
from anoma_explorer.services.settings_store import ADDRESS_TAKEN, BLANK, TAKEN, SettingsChange

ADDR = "0xDD4F4F0875DA48EF6D8F32ACB890EC81F435FF3A"


def _network(store, name="eth-mainnet", **extra):
    return store.create_network({"name": name, "display_name": name.title(), **extra})


def _address(store, protocol_id, **extra):
    values = {
        "protocol_id": protocol_id,
        "category": "protocol_adapter",
        "version": "v1.0",
        "network": "eth-mainnet",
        "address": ADDR,
        **extra,
    }
    return store.create_contract_address(values)


class TestNetworks:
    def test_create_with_defaults(self, store):
        network = _network(store, chain_id="1", explorer_url=" https://etherscan.io ")
        assert network.id is not None
        assert network.chain_id == 1
        assert network.explorer_url == "https://etherscan.io"
        assert network.is_testnet is False
        assert network.active is True

    def test_required_fields(self, store):
        with pytest.raises(SettingsValidationError) as exc_info:
            store.create_network({"name": "  "})
        assert exc_info.value.errors == {"name": [BLANK], "display_name": [BLANK]}

    def test_slug_format(self, store):
        with pytest.raises(SettingsValidationError) as exc_info:
            _network(store, name="Eth Mainnet")
        assert exc_info.value.errors["name"] == [
            "must contain only lowercase letters, numbers, and hyphens"
        ]

    def test_invalid_chain_id(self, store):
        with pytest.raises(SettingsValidationError) as exc_info:
            _network(store, chain_id="one")
        assert exc_info.value.errors == {"chain_id": ["is invalid"]}

    def test_duplicate_name(self, store):
        _network(store)
        with pytest.raises(SettingsValidationError) as exc_info:
            _network(store)
        assert exc_info.value.errors == {"name": [TAKEN]}

    def test_update_merges_fields(self, store):
        network = _network(store, chain_id=1)
        updated = store.update_network(network.id, {"display_name": "Ethereum", "is_testnet": "true"})
        assert updated.display_name == "Ethereum"
        assert updated.is_testnet is True
        assert updated.chain_id == 1
        assert store.get_network(network.id).display_name == "Ethereum"

    def test_rename_to_existing_name(self, store):
        _network(store, name="eth-mainnet")
        other = _network(store, name="base-mainnet")
        with pytest.raises(SettingsValidationError):
            store.update_network(other.id, {"name": "eth-mainnet"})

    def test_update_and_delete_missing(self, store):
        with pytest.raises(SettingsNotFoundError):
            store.update_network(999, {"display_name": "x"})
        with pytest.raises(SettingsNotFoundError):
            store.delete_network(999)

    def test_delete(self, store):
        network = _network(store)
        deleted = store.delete_network(network.id)
        assert deleted.name == "eth-mainnet"
        assert store.list_networks() == []

    def test_list_orders_mainnets_first_and_filters(self, store):
        _network(store, name="eth-sepolia", is_testnet=True)
        _network(store, name="eth-mainnet")
        _network(store, name="base-mainnet", active=False)
        assert [n.name for n in store.list_networks()] == ["base-mainnet", "eth-mainnet", "eth-sepolia"]
        assert [n.name for n in store.list_networks(active=True, is_testnet=False)] == ["eth-mainnet"]
        assert store.get_network_by_name("eth-sepolia").is_testnet is True


class TestProtocolsAndAddresses:
    def test_protocol_crud(self, store):
        protocol = store.create_protocol({"name": "Protocol Adapter", "description": ""})
        assert protocol.description is None
        updated = store.update_protocol(protocol.id, {"active": False})
        assert updated.active is False
        assert store.list_protocols(active=True) == []
        with pytest.raises(SettingsValidationError):
            store.create_protocol({"name": "Protocol Adapter"})

    def test_address_is_lowercased(self, store):
        protocol = store.create_protocol({"name": "PA"})
        row = _address(store, protocol.id)
        assert row.address == ADDR.lower()

    @pytest.mark.parametrize(
        "address, message",
        [
            ("dd4f4f0875da48ef6d8f32acb890ec81f435ff3a", "must start with 0x"),
            ("0x1234", "must have exactly 40 hex characters after 0x"),
            ("0x" + "g" * 40, "contains invalid hex characters"),
        ],
    )
    def test_address_format(self, store, address, message):
        protocol = store.create_protocol({"name": "PA"})
        with pytest.raises(SettingsValidationError) as exc_info:
            _address(store, protocol.id, address=address)
        assert exc_info.value.errors == {"address": [message]}

    def test_unknown_protocol(self, store):
        with pytest.raises(SettingsValidationError) as exc_info:
            _address(store, 42)
        assert exc_info.value.errors == {"protocol_id": ["does not exist"]}

    def test_unique_per_protocol_category_version_network(self, store):
        protocol = store.create_protocol({"name": "PA"})
        _address(store, protocol.id)
        with pytest.raises(SettingsValidationError) as exc_info:
            _address(store, protocol.id, address="0x" + "1" * 40)
        assert exc_info.value.errors == {"protocol_id": [ADDRESS_TAKEN]}
        # Another version on the same network is fine.
        _address(store, protocol.id, version="v1.1")

    def test_get_address(self, store):
        protocol = store.create_protocol({"name": "PA"})
        _address(store, protocol.id)
        _address(store, protocol.id, network="base-mainnet", active=False)
        assert store.get_address("PA", "protocol_adapter", "v1.0", "eth-mainnet") == ADDR.lower()
        assert store.get_address(protocol.id, "protocol_adapter", "v1.0", "eth-mainnet") == ADDR.lower()
        assert store.get_address("PA", "protocol_adapter", "v1.0", "base-mainnet") is None
        assert store.get_address("Unknown", "protocol_adapter", "v1.0", "eth-mainnet") is None

    def test_grouping_and_versions(self, store):
        protocol = store.create_protocol({"name": "PA"})
        store.create_protocol({"name": "Empty"})
        _address(store, protocol.id, version="v1.0")
        _address(store, protocol.id, version="v1.1")
        _address(store, protocol.id, version="v1.1", network="base-mainnet")

        grouped = store.list_addresses_by_protocol()
        by_name = {p.name: categories for p, categories in grouped.items()}
        assert by_name["Empty"] == {}
        versions = by_name["PA"]["protocol_adapter"]
        assert sorted(versions) == ["v1.0", "v1.1"]
        assert [r.network for r in versions["v1.1"]] == ["base-mainnet", "eth-mainnet"]
        assert store.get_versions_for_contract(protocol.id, "protocol_adapter") == ["v1.1", "v1.0"]
        assert len(store.get_active_addresses(protocol.id, "protocol_adapter")) == 3

    def test_listed_addresses_carry_protocol(self, store):
        protocol = store.create_protocol({"name": "PA"})
        _address(store, protocol.id)
        (row,) = store.list_contract_addresses()
        assert row.protocol.name == "PA"

    def test_update_address(self, store):
        protocol = store.create_protocol({"name": "PA"})
        row = _address(store, protocol.id)
        updated = store.update_contract_address(row.id, {"active": False})
        assert updated.active is False
        assert store.list_active_addresses() == []

    def test_deleting_protocol_deletes_addresses(self, store):
        protocol = store.create_protocol({"name": "PA"})
        row = _address(store, protocol.id)
        store.delete_protocol(protocol.id)
        assert store.get_contract_address(row.id) is None
        assert store.list_contract_addresses() == []


class TestAppSettings:
    def test_set_get_delete(self, store):
        store.set_app_setting("theme", "dark", "UI theme")
        assert store.get_app_setting("theme") == "dark"
        row = store.set_app_setting("theme", "light")
        assert row.description == "UI theme"
        store.delete_app_setting("theme")
        assert store.get_app_setting("theme") is None
        with pytest.raises(SettingsNotFoundError):
            store.delete_app_setting("theme")

    def test_envio_url_overrides_fallback(self, store):
        assert store.get_envio_url("http://env/graphql") == "http://env/graphql"
        store.set_envio_url("  https://db/v1/graphql ")
        assert store.get_app_setting(ENVIO_URL_SETTING_KEY) == "https://db/v1/graphql"
        assert store.get_envio_url("http://env/graphql") == "https://db/v1/graphql"

    @pytest.mark.parametrize(
        "url, message",
        [("", BLANK), ("indexer.local/graphql", "must start with http:// or https://")],
    )
    def test_envio_url_validation(self, store, url, message):
        with pytest.raises(SettingsValidationError) as exc_info:
            store.set_envio_url(url)
        assert exc_info.value.errors == {"url": [message]}


class TestChangeNotification:
    def test_revision_moves_on_mutation_only(self, store):
        start = store.revision
        store.list_networks()
        assert store.revision == start
        _network(store)
        assert store.revision == start + 1
        with pytest.raises(SettingsValidationError):
            _network(store)
        assert store.revision == start + 1

    def test_listeners_receive_changes(self, store):
        seen: list[SettingsChange] = []
        unsubscribe = store.subscribe(seen.append)
        network = _network(store)
        store.delete_network(network.id)
        assert [c.kind for c in seen] == ["network_created", "network_deleted"]
        unsubscribe()
        _network(store, name="base-mainnet")
        assert len(seen) == 2

    def test_failing_listener_does_not_break_writes(self, store):
        def broken(change):
            raise RuntimeError("listener bug")

        seen: list[str] = []
        store.subscribe(broken)
        store.subscribe(lambda change: seen.append(change.kind))
        store.set_envio_url("https://db/v1/graphql")
        assert seen == ["app_setting_updated"]
