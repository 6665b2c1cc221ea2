# anoma_explorer/core/clients.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Cached factories for the long-lived objects the explorer shares across reruns.

- `get_settings()`    → `core.config.Settings` (also configures logging once)
- `get_store(url)`    → `services.settings_store.SettingsStore`
- `get_indexer(...)`  → `services.indexer.IndexerClient` for one endpoint
- `get_admin_gate(...)` → `services.admin_auth.AdminGate`

All are wrapped with `@st.cache_resource`, so a single instance lives per
Streamlit process and survives reruns. Objects are stored as resources (not
pickled), which is appropriate for sessions, engines and HTTP pools.

The indexer client is cached **per URL and timeouts**: saving a new endpoint
in the settings store changes the key, so the next rerun gets a fresh client
without clearing any cache. Only the `INDEXER_CLIENT_CACHE_ENTRIES` most
recent endpoints keep a client (and its HTTP pool) alive.

Security notes:
  * The admin secret is passed to `get_admin_gate` only to construct the gate;
    it is never logged.

Testing:
  * Services are plain classes; tests construct them directly instead of
    going through these factories.
"""

import logging

import streamlit as st

from ..services.admin_auth import AdminGate
from ..services.indexer import IndexerClient
from ..services.settings_store import SettingsStore
from .config import Settings, configure_logging
from .constants import INDEXER_CLIENT_CACHE_ENTRIES

log = logging.getLogger(__name__)


@st.cache_resource(show_spinner=False)
def get_settings() -> Settings:
    """Load settings from the environment once per process."""
    settings = Settings.from_env()
    configure_logging(settings)
    log.info("Explorer settings loaded (database=%s)", settings.database_url)
    return settings


@st.cache_resource(show_spinner=False)
def get_store(database_url: str) -> SettingsStore:
    """Open the settings database (creating tables on first use)."""
    return SettingsStore.from_url(database_url)


@st.cache_resource(show_spinner=False, max_entries=INDEXER_CLIENT_CACHE_ENTRIES)
def get_indexer(
    url: str | None, timeout: int, connect_timeout: int, raw_timeout: int
) -> IndexerClient:
    # No eager health check here; pages run the connection probe themselves.
    return IndexerClient(
        url, timeout=timeout, connect_timeout=connect_timeout, raw_timeout=raw_timeout
    )


@st.cache_resource(show_spinner=False)
def get_admin_gate(secret: str | None, timeout_ms: int) -> AdminGate:
    return AdminGate(secret, timeout_ms)


def current_indexer(settings: Settings, store: SettingsStore) -> IndexerClient:
    """Client for the effective endpoint: stored URL first, then `ENVIO_GRAPHQL_URL`."""
    url = store.get_envio_url(settings.envio_graphql_url)
    return get_indexer(url, settings.query_timeout, settings.connect_timeout, settings.raw_timeout)
