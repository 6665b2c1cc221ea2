# scripts/manage.py
# SPDX-License-Identifier: Apache-2.0
#
# High-level purpose:
# -------------------
# Operator commands for the explorer's settings database and indexer endpoint,
# usable without starting the Streamlit app.
#
# Commands:
#   init-db            Create the settings tables if they are missing.
#   seed               Insert the known networks and protocol contract addresses.
#                      Rows that already exist (by name / protocol+category+
#                      version+network) are left untouched.
#   check-indexer      Probe the effective (or given) GraphQL endpoint.
#   set-indexer-url    Store a new GraphQL endpoint in the settings database.
#
# Usage:
#   python scripts/manage.py init-db
#   python scripts/manage.py seed
#   python scripts/manage.py check-indexer [--url https://…/v1/graphql]
#   python scripts/manage.py set-indexer-url https://…/v1/graphql
#
# Configuration comes from the same environment / .env as the app
# (DATABASE_URL, ENVIO_GRAPHQL_URL, timeouts, LOG_LEVEL).
#
# Output (JSON to stdout) for seed / check-indexer, e.g.:
#   { "networks_created": 6, "protocols_created": 2, "addresses_created": 12 }

from __future__ import annotations

import argparse
import json
import logging
import pathlib
import sys

ROOT_DIR = pathlib.Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from anoma_explorer.core.config import Settings, configure_logging  # noqa: E402
from anoma_explorer.core.connection import probe  # noqa: E402
from anoma_explorer.core.constants import SEED_NETWORKS, SEED_PROTOCOLS  # noqa: E402
from anoma_explorer.core.errors import SettingsValidationError  # noqa: E402
from anoma_explorer.services.indexer import IndexerClient  # noqa: E402
from anoma_explorer.services.settings_store import SettingsStore  # noqa: E402

log = logging.getLogger("manage")


# ------------------------------------------------------------------------------
# Commands
# ------------------------------------------------------------------------------


def seed(store: SettingsStore) -> dict[str, int]:
    """Insert seed networks, protocols and addresses; returns created counts."""
    counts = {"networks_created": 0, "protocols_created": 0, "addresses_created": 0}

    for name, display_name, chain_id, explorer_url, is_testnet in SEED_NETWORKS:
        if store.get_network_by_name(name) is not None:
            log.debug("Network %s already present", name)
            continue
        store.create_network(
            {
                "name": name,
                "display_name": display_name,
                "chain_id": chain_id,
                "explorer_url": explorer_url,
                "is_testnet": is_testnet,
            }
        )
        counts["networks_created"] += 1

    for name, description, github_url, category, version, addresses in SEED_PROTOCOLS:
        protocol = store.get_protocol_by_name(name)
        if protocol is None:
            protocol = store.create_protocol(
                {"name": name, "description": description, "github_url": github_url}
            )
            counts["protocols_created"] += 1
        for network, address in addresses.items():
            existing = store.list_contract_addresses(
                protocol_id=protocol.id, category=category, version=version, network=network
            )
            if existing:
                continue
            store.create_contract_address(
                {
                    "protocol_id": protocol.id,
                    "category": category,
                    "version": version,
                    "network": network,
                    "address": address,
                }
            )
            counts["addresses_created"] += 1

    log.info("Seed finished: %s", counts)
    return counts


def check_indexer(settings: Settings, store: SettingsStore, url: str | None) -> dict[str, object]:
    target = url or store.get_envio_url(settings.envio_graphql_url)
    client = IndexerClient(
        target,
        timeout=settings.query_timeout,
        connect_timeout=settings.connect_timeout,
        raw_timeout=settings.raw_timeout,
    )
    result = probe(client.url, client.test_connection)
    return {"url": result.url, "status": result.status.value, "message": result.message}


# ------------------------------------------------------------------------------
# CLI
# ------------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        description="Manage the Anoma Explorer settings database and indexer endpoint.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    ap.add_argument(
        "--database-url",
        default=None,
        help="SQLAlchemy URL of the settings database (defaults to DATABASE_URL)",
    )
    sub = ap.add_subparsers(dest="command", required=True)
    sub.add_parser("init-db", help="Create the settings tables")
    sub.add_parser("seed", help="Insert known networks, protocols and contract addresses")
    check = sub.add_parser("check-indexer", help="Test the GraphQL endpoint")
    check.add_argument("--url", default=None, help="Endpoint to test instead of the configured one")
    set_url = sub.add_parser("set-indexer-url", help="Store the GraphQL endpoint URL")
    set_url.add_argument("url", help="http(s) URL of the Envio GraphQL endpoint")
    return ap


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = Settings.from_env()
    configure_logging(settings)
    database_url = args.database_url or settings.database_url

    # Opening the store creates any missing tables.
    store = SettingsStore.from_url(database_url)

    if args.command == "init-db":
        log.info("Settings tables ready at %s", database_url)
        return 0

    if args.command == "seed":
        print(json.dumps(seed(store), indent=2))
        return 0

    if args.command == "check-indexer":
        report = check_indexer(settings, store, args.url)
        print(json.dumps(report, indent=2))
        return 0 if report["status"] == "ready" else 1

    if args.command == "set-indexer-url":
        try:
            row = store.set_envio_url(args.url)
        except SettingsValidationError as e:
            log.error("Rejected: %s", e)
            return 2
        log.info("Indexer endpoint stored: %s", row.value)
        return 0

    return 2


if __name__ == "__main__":
    sys.exit(main())
