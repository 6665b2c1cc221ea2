# tests/test_manage.py
# SPDX-License-Identifier: Apache-2.0
"""The operator CLI in scripts/manage.py."""

from __future__ import annotations

import importlib.util
import json
import pathlib

import pytest

from anoma_explorer.core.constants import ENVIO_URL_SETTING_KEY, SEED_NETWORKS, SEED_PROTOCOLS
from anoma_explorer.services.settings_store import SettingsStore

MANAGE_PATH = pathlib.Path(__file__).resolve().parent.parent / "scripts" / "manage.py"


@pytest.fixture(scope="module")
def manage():
    loader_spec = importlib.util.spec_from_file_location("manage", MANAGE_PATH)
    module = importlib.util.module_from_spec(loader_spec)
    loader_spec.loader.exec_module(module)
    return module


class TestSeed:
    def test_seed_inserts_everything_once(self, manage, store):
        addresses = sum(len(p[5]) for p in SEED_PROTOCOLS)
        assert manage.seed(store) == {
            "networks_created": len(SEED_NETWORKS),
            "protocols_created": len(SEED_PROTOCOLS),
            "addresses_created": addresses,
        }
        assert manage.seed(store) == {"networks_created": 0, "protocols_created": 0, "addresses_created": 0}
        assert store.get_address("Protocol Adapter", "protocol_adapter", "v1.0", "eth-mainnet") == (
            "0xdd4f4f0875da48ef6d8f32acb890ec81f435ff3a"
        )

    def test_seed_keeps_existing_rows(self, manage, store):
        store.create_network({"name": "eth-mainnet", "display_name": "My Mainnet"})
        counts = manage.seed(store)
        assert counts["networks_created"] == len(SEED_NETWORKS) - 1
        assert store.get_network_by_name("eth-mainnet").display_name == "My Mainnet"


class TestMain:
    @pytest.fixture
    def db_url(self, tmp_path):
        return f"sqlite:///{tmp_path / 'settings.db'}"

    def test_init_db(self, manage, db_url, tmp_path):
        assert manage.main(["--database-url", db_url, "init-db"]) == 0
        assert (tmp_path / "settings.db").exists()

    def test_seed_prints_counts(self, manage, db_url, capsys):
        assert manage.main(["--database-url", db_url, "seed"]) == 0
        assert json.loads(capsys.readouterr().out)["networks_created"] == len(SEED_NETWORKS)

    def test_set_indexer_url(self, manage, db_url):
        assert manage.main(["--database-url", db_url, "set-indexer-url", "https://indexer.test/v1/graphql"]) == 0
        store = SettingsStore.from_url(db_url)
        assert store.get_app_setting(ENVIO_URL_SETTING_KEY) == "https://indexer.test/v1/graphql"

    def test_set_indexer_url_rejects_bad_url(self, manage, db_url):
        assert manage.main(["--database-url", db_url, "set-indexer-url", "indexer.test"]) == 2

    def test_check_indexer_not_configured(self, manage, db_url, capsys, monkeypatch):
        monkeypatch.delenv("ENVIO_GRAPHQL_URL", raising=False)
        assert manage.main(["--database-url", db_url, "check-indexer"]) == 1
        assert json.loads(capsys.readouterr().out)["status"] == "not_configured"
