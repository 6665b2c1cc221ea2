# anoma_explorer/core/config.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Centralized, immutable application configuration for the explorer.

This module defines a frozen `Settings` dataclass whose fields are populated
from environment variables (loaded via python-dotenv if a `.env` file is
present). Unlike a module-level singleton, the instance is built once by the
entrypoint through `Settings.from_env()` and handed to pages inside the `ctx`
dict, so tests can construct their own.

Design goals
------------
- **Single source of truth**: All tunables live here; other modules consume
  a `Settings` instance rather than reading environment variables directly.
- **Immutability**: `@dataclass(frozen=True)` prevents accidental mutation at
  runtime. Changes require process restart (or re-instantiation in tests).
- **Fast import**: Only minimal work at import time (dotenv load). No network
  calls here.
- **Safe defaults**: The indexer URL and admin secret default to unset, which
  renders the setup panel and disables the admin gate respectively.

Security notes
--------------
- `ADMIN_SECRET_KEY` is kept out of `repr()` so it never ends up in logs or
  in Streamlit's exception traces.
- The database-stored indexer URL takes precedence over `ENVIO_GRAPHQL_URL`;
  see `services.settings_store.SettingsStore.get_envio_url`.

Testing
-------
Pass an explicit mapping instead of touching the process environment:
    >>> s = Settings.from_env({"ADMIN_SECRET_KEY": "s3cret"})
    >>> s.admin_enabled
    True
"""

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Final

from dotenv import load_dotenv

from .constants import (
    DEFAULT_ADMIN_TIMEOUT_MINUTES,
    DEFAULT_CONNECT_TIMEOUT_SECONDS,
    DEFAULT_QUERY_TIMEOUT_SECONDS,
    DEFAULT_RAW_TIMEOUT_SECONDS,
    DEFAULT_REFRESH_SECONDS,
)

log = logging.getLogger(__name__)

# Load key-value pairs from a local `.env` file into process environment, if
# present. `override=False` by default, so pre-set env vars take precedence.
load_dotenv()

DEFAULT_DATABASE_URL: Final[str] = "sqlite:///anoma_explorer.db"
LOG_FORMAT: Final[str] = "%(asctime)s %(levelname)-8s: %(message)s"


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = (env.get(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        log.warning("Ignoring non-integer %s=%r, using %d", name, raw, default)
        return default


def _env_str(env: Mapping[str, str], name: str) -> str | None:
    value = (env.get(name) or "").strip()
    return value or None


@dataclass(frozen=True)
class Settings:
    """
    Immutable application settings.

    Each attribute maps to the environment variable named in its comment;
    when unset, the documented default is used.
    """

    # --- Indexer (Envio GraphQL) ----------------------------------------------
    # ENVIO_GRAPHQL_URL: fallback endpoint when none is stored in the database.
    envio_graphql_url: str | None = None
    # GRAPHQL_TIMEOUT_SECONDS / GRAPHQL_CONNECT_TIMEOUT_SECONDS
    query_timeout: int = DEFAULT_QUERY_TIMEOUT_SECONDS
    connect_timeout: int = DEFAULT_CONNECT_TIMEOUT_SECONDS
    # GRAPHQL_RAW_TIMEOUT_SECONDS: playground queries may be heavier.
    raw_timeout: int = DEFAULT_RAW_TIMEOUT_SECONDS

    # --- Admin gate -----------------------------------------------------------
    # ADMIN_SECRET_KEY: unset or empty disables the gate entirely.
    admin_secret_key: str | None = field(default=None, repr=False)
    # ADMIN_TIMEOUT_MINUTES
    admin_timeout_minutes: int = DEFAULT_ADMIN_TIMEOUT_MINUTES

    # --- Storage / runtime ----------------------------------------------------
    # DATABASE_URL: any SQLAlchemy URL; SQLite file by default.
    database_url: str = DEFAULT_DATABASE_URL
    # DASHBOARD_REFRESH_SECONDS
    refresh_seconds: int = DEFAULT_REFRESH_SECONDS
    # LOG_LEVEL
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> Settings:
        """Build settings from `env` (defaults to `os.environ`)."""
        env = os.environ if env is None else env
        return cls(
            envio_graphql_url=_env_str(env, "ENVIO_GRAPHQL_URL"),
            query_timeout=_env_int(env, "GRAPHQL_TIMEOUT_SECONDS", DEFAULT_QUERY_TIMEOUT_SECONDS),
            connect_timeout=_env_int(
                env, "GRAPHQL_CONNECT_TIMEOUT_SECONDS", DEFAULT_CONNECT_TIMEOUT_SECONDS
            ),
            raw_timeout=_env_int(env, "GRAPHQL_RAW_TIMEOUT_SECONDS", DEFAULT_RAW_TIMEOUT_SECONDS),
            admin_secret_key=_env_str(env, "ADMIN_SECRET_KEY"),
            admin_timeout_minutes=_env_int(
                env, "ADMIN_TIMEOUT_MINUTES", DEFAULT_ADMIN_TIMEOUT_MINUTES
            ),
            database_url=_env_str(env, "DATABASE_URL") or DEFAULT_DATABASE_URL,
            refresh_seconds=_env_int(env, "DASHBOARD_REFRESH_SECONDS", DEFAULT_REFRESH_SECONDS),
            log_level=(_env_str(env, "LOG_LEVEL") or "INFO").upper(),
        )

    @property
    def admin_enabled(self) -> bool:
        """True when an admin secret is configured."""
        return bool(self.admin_secret_key)

    @property
    def admin_timeout_ms(self) -> int:
        return self.admin_timeout_minutes * 60 * 1000


def configure_logging(settings: Settings) -> None:
    """Configure root logging once for the Streamlit process."""
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
