# anoma_explorer/services/settings_store.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Persistence for networks, protocols, contract addresses and app settings.

`SettingsStore` is the only code that opens database sessions. Pages call it
with plain dicts (form values) and get ORM rows back; rows stay readable
after the session closes because the factory is built with
`expire_on_commit=False` (see `services.models.make_session_factory`).

Validation
----------
Every create/update validates the merged row before writing and raises
`SettingsValidationError` with a `{field: [messages]}` mapping, so a form can
show messages next to the offending inputs. Uniqueness is checked up front
and again by the database constraints; a constraint violation that slips
through (two operators saving at once) is reported the same way.

Change notification
-------------------
Each successful mutation bumps `revision` and calls subscribed listeners
with a `SettingsChange`. Listeners run synchronously in the writer's thread;
read-only views poll `revision` on rerun and reload when it moved. Concurrent
edits are last-writer-wins.
"""

import logging
import re
import threading
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload, sessionmaker

from ..core.constants import ENVIO_URL_SETTING_KEY
from ..core.errors import SettingsNotFoundError, SettingsValidationError
from .models import AppSetting, ContractAddress, Network, Protocol, make_session_factory

log = logging.getLogger(__name__)

NETWORK_FIELDS = ("name", "display_name", "chain_id", "explorer_url", "rpc_url", "is_testnet", "active")
PROTOCOL_FIELDS = ("name", "description", "github_url", "active")
ADDRESS_FIELDS = ("protocol_id", "category", "version", "network", "address", "active")

_NETWORK_NAME_RE = re.compile(r"^[a-z0-9-]+$")
_ADDRESS_RE = re.compile(r"^0x[0-9a-f]{40}$")

BLANK = "can't be blank"
TAKEN = "has already been taken"
ADDRESS_TAKEN = "already exists for this protocol, category, version, and network"


@dataclass(frozen=True)
class SettingsChange:
    """What changed: `kind` is e.g. "network_created", `entity` the row or key."""

    kind: str
    entity: Any


Listener = Callable[[SettingsChange], None]


# ---------------------------------------------------------------------------
# Attribute cleaning and validation
# ---------------------------------------------------------------------------


def _clean(attrs: Mapping[str, Any], allowed: tuple[str, ...]) -> dict[str, Any]:
    """Keep known keys; strip strings; blank strings become None."""
    out: dict[str, Any] = {}
    for key in allowed:
        if key not in attrs:
            continue
        value = attrs[key]
        if isinstance(value, str):
            value = value.strip() or None
        out[key] = value
    return out


def _coerce_int(values: dict[str, Any], key: str, errors: dict[str, list[str]]) -> None:
    value = values.get(key)
    if value is None or (isinstance(value, int) and not isinstance(value, bool)):
        return
    try:
        values[key] = int(str(value))
    except ValueError:
        errors.setdefault(key, []).append("is invalid")


def _coerce_bool(values: dict[str, Any], key: str) -> None:
    value = values.get(key)
    if isinstance(value, str):
        values[key] = value.lower() in ("true", "1", "yes", "on")


def _require(values: dict[str, Any], key: str, errors: dict[str, list[str]]) -> None:
    if values.get(key) is None:
        errors.setdefault(key, []).append(BLANK)


def _length(values: dict[str, Any], key: str, maximum: int, errors: dict[str, list[str]]) -> None:
    value = values.get(key)
    if isinstance(value, str) and len(value) > maximum:
        errors.setdefault(key, []).append(f"should be at most {maximum} character(s)")


def address_errors(address: str) -> list[str]:
    """Messages for a malformed EVM address (empty list when valid)."""
    lowered = address.lower()
    if not lowered.startswith("0x"):
        return ["must start with 0x"]
    if len(lowered) != 42:
        return ["must have exactly 40 hex characters after 0x"]
    if not _ADDRESS_RE.match(lowered):
        return ["contains invalid hex characters"]
    return []


def validate_network(values: dict[str, Any]) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    _coerce_int(values, "chain_id", errors)
    _coerce_bool(values, "is_testnet")
    _coerce_bool(values, "active")
    _require(values, "name", errors)
    _require(values, "display_name", errors)
    _length(values, "name", 100, errors)
    _length(values, "display_name", 100, errors)
    name = values.get("name")
    if isinstance(name, str) and not _NETWORK_NAME_RE.match(name):
        errors.setdefault("name", []).append(
            "must contain only lowercase letters, numbers, and hyphens"
        )
    return errors


def validate_protocol(values: dict[str, Any]) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    _coerce_bool(values, "active")
    _require(values, "name", errors)
    _length(values, "name", 100, errors)
    return errors


def validate_address(values: dict[str, Any]) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    _coerce_int(values, "protocol_id", errors)
    _coerce_bool(values, "active")
    for key in ("protocol_id", "category", "version", "network", "address"):
        _require(values, key, errors)
    _length(values, "category", 100, errors)
    _length(values, "version", 50, errors)
    address = values.get("address")
    if isinstance(address, str):
        values["address"] = address.lower()
        problems = address_errors(address)
        if problems:
            errors.setdefault("address", []).extend(problems)
    return errors


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class SettingsStore:
    """CRUD over the settings tables plus change notification."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory
        self._listeners: list[Listener] = []
        self._lock = threading.Lock()
        self._revision = 0

    @classmethod
    def from_url(cls, database_url: str) -> SettingsStore:
        return cls(make_session_factory(database_url))

    # -- notification ----------------------------------------------------

    @property
    def revision(self) -> int:
        return self._revision

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register `listener`; returns a function that unregisters it."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, kind: str, entity: Any) -> None:
        with self._lock:
            self._revision += 1
            listeners = list(self._listeners)
        log.info("Settings changed: %s", kind)
        change = SettingsChange(kind, entity)
        for listener in listeners:
            try:
                listener(change)
            except Exception:
                log.exception("Settings listener failed for %s", kind)

    # -- helpers ---------------------------------------------------------

    def _session(self) -> Session:
        return self._session_factory()

    def _commit(self, session: Session, row: Any, unique_errors: dict[str, list[str]]) -> None:
        session.add(row)
        try:
            session.commit()
        except IntegrityError as e:
            session.rollback()
            log.warning("Settings write rejected by database: %s", e.orig)
            raise SettingsValidationError(unique_errors) from e

    @staticmethod
    def _fetch(session: Session, model: type, row_id: int, entity: str) -> Any:
        row = session.get(model, row_id)
        if row is None:
            raise SettingsNotFoundError(entity, row_id)
        return row

    # -- networks --------------------------------------------------------

    def list_networks(self, *, active: bool | None = None, is_testnet: bool | None = None) -> list[Network]:
        stmt = select(Network).order_by(Network.is_testnet, Network.name)
        if active is not None:
            stmt = stmt.where(Network.active == active)
        if is_testnet is not None:
            stmt = stmt.where(Network.is_testnet == is_testnet)
        with self._session() as session:
            return list(session.scalars(stmt))

    def get_network(self, network_id: int) -> Network | None:
        with self._session() as session:
            return session.get(Network, network_id)

    def get_network_by_name(self, name: str) -> Network | None:
        with self._session() as session:
            return session.scalars(select(Network).where(Network.name == name)).first()

    def _save_network(self, session: Session, network: Network, values: dict[str, Any]) -> Network:
        errors = validate_network(values)
        if not errors:
            stmt = select(Network.id).where(Network.name == values["name"])
            if network.id is not None:
                stmt = stmt.where(Network.id != network.id)
            if session.scalars(stmt).first() is not None:
                errors["name"] = [TAKEN]
        if errors:
            raise SettingsValidationError(errors)
        for key, value in values.items():
            setattr(network, key, value)
        self._commit(session, network, {"name": [TAKEN]})
        return network

    def create_network(self, attrs: Mapping[str, Any]) -> Network:
        values = {"is_testnet": False, "active": True, **_clean(attrs, NETWORK_FIELDS)}
        values.setdefault("name", None)
        values.setdefault("display_name", None)
        with self._session() as session:
            network = self._save_network(session, Network(), values)
        self._notify("network_created", network)
        return network

    def update_network(self, network_id: int, attrs: Mapping[str, Any]) -> Network:
        with self._session() as session:
            network = self._fetch(session, Network, network_id, "Network")
            current = {key: getattr(network, key) for key in NETWORK_FIELDS}
            network = self._save_network(session, network, {**current, **_clean(attrs, NETWORK_FIELDS)})
        self._notify("network_updated", network)
        return network

    def delete_network(self, network_id: int) -> Network:
        with self._session() as session:
            network = self._fetch(session, Network, network_id, "Network")
            session.delete(network)
            session.commit()
        self._notify("network_deleted", network)
        return network

    # -- protocols -------------------------------------------------------

    def list_protocols(self, *, active: bool | None = None) -> list[Protocol]:
        stmt = select(Protocol).order_by(Protocol.name)
        if active is not None:
            stmt = stmt.where(Protocol.active == active)
        with self._session() as session:
            return list(session.scalars(stmt))

    def get_protocol(self, protocol_id: int) -> Protocol | None:
        with self._session() as session:
            return session.get(Protocol, protocol_id)

    def get_protocol_by_name(self, name: str) -> Protocol | None:
        with self._session() as session:
            return session.scalars(select(Protocol).where(Protocol.name == name)).first()

    def _save_protocol(self, session: Session, protocol: Protocol, values: dict[str, Any]) -> Protocol:
        errors = validate_protocol(values)
        if not errors:
            stmt = select(Protocol.id).where(Protocol.name == values["name"])
            if protocol.id is not None:
                stmt = stmt.where(Protocol.id != protocol.id)
            if session.scalars(stmt).first() is not None:
                errors["name"] = [TAKEN]
        if errors:
            raise SettingsValidationError(errors)
        for key, value in values.items():
            setattr(protocol, key, value)
        self._commit(session, protocol, {"name": [TAKEN]})
        return protocol

    def create_protocol(self, attrs: Mapping[str, Any]) -> Protocol:
        values = {"active": True, **_clean(attrs, PROTOCOL_FIELDS)}
        values.setdefault("name", None)
        with self._session() as session:
            protocol = self._save_protocol(session, Protocol(), values)
        self._notify("protocol_created", protocol)
        return protocol

    def update_protocol(self, protocol_id: int, attrs: Mapping[str, Any]) -> Protocol:
        with self._session() as session:
            protocol = self._fetch(session, Protocol, protocol_id, "Protocol")
            current = {key: getattr(protocol, key) for key in PROTOCOL_FIELDS}
            protocol = self._save_protocol(session, protocol, {**current, **_clean(attrs, PROTOCOL_FIELDS)})
        self._notify("protocol_updated", protocol)
        return protocol

    def delete_protocol(self, protocol_id: int) -> Protocol:
        """Delete a protocol together with all of its contract addresses."""
        with self._session() as session:
            protocol = self._fetch(session, Protocol, protocol_id, "Protocol")
            session.delete(protocol)
            session.commit()
        self._notify("protocol_deleted", protocol)
        return protocol

    # -- contract addresses ----------------------------------------------

    def list_contract_addresses(
        self,
        *,
        protocol_id: int | None = None,
        category: str | None = None,
        version: str | None = None,
        network: str | None = None,
        active: bool | None = None,
    ) -> list[ContractAddress]:
        stmt = (
            select(ContractAddress)
            .options(selectinload(ContractAddress.protocol))
            .order_by(ContractAddress.category, ContractAddress.version, ContractAddress.network)
        )
        if protocol_id is not None:
            stmt = stmt.where(ContractAddress.protocol_id == protocol_id)
        if category is not None:
            stmt = stmt.where(ContractAddress.category == category)
        if version is not None:
            stmt = stmt.where(ContractAddress.version == version)
        if network is not None:
            stmt = stmt.where(ContractAddress.network == network)
        if active is not None:
            stmt = stmt.where(ContractAddress.active == active)
        with self._session() as session:
            return list(session.scalars(stmt))

    def get_contract_address(self, address_id: int) -> ContractAddress | None:
        with self._session() as session:
            return session.get(ContractAddress, address_id)

    def _save_address(
        self, session: Session, row: ContractAddress, values: dict[str, Any]
    ) -> ContractAddress:
        errors = validate_address(values)
        if not errors and session.get(Protocol, values["protocol_id"]) is None:
            errors["protocol_id"] = ["does not exist"]
        if not errors:
            stmt = select(ContractAddress.id).where(
                ContractAddress.protocol_id == values["protocol_id"],
                ContractAddress.category == values["category"],
                ContractAddress.version == values["version"],
                ContractAddress.network == values["network"],
            )
            if row.id is not None:
                stmt = stmt.where(ContractAddress.id != row.id)
            if session.scalars(stmt).first() is not None:
                errors["protocol_id"] = [ADDRESS_TAKEN]
        if errors:
            raise SettingsValidationError(errors)
        for key, value in values.items():
            setattr(row, key, value)
        self._commit(session, row, {"protocol_id": [ADDRESS_TAKEN]})
        return row

    def create_contract_address(self, attrs: Mapping[str, Any]) -> ContractAddress:
        values = {"active": True, **_clean(attrs, ADDRESS_FIELDS)}
        for key in ("protocol_id", "category", "version", "network", "address"):
            values.setdefault(key, None)
        with self._session() as session:
            row = self._save_address(session, ContractAddress(), values)
        self._notify("contract_address_created", row)
        return row

    def update_contract_address(self, address_id: int, attrs: Mapping[str, Any]) -> ContractAddress:
        with self._session() as session:
            row = self._fetch(session, ContractAddress, address_id, "Contract address")
            current = {key: getattr(row, key) for key in ADDRESS_FIELDS}
            row = self._save_address(session, row, {**current, **_clean(attrs, ADDRESS_FIELDS)})
        self._notify("contract_address_updated", row)
        return row

    def delete_contract_address(self, address_id: int) -> ContractAddress:
        with self._session() as session:
            row = self._fetch(session, ContractAddress, address_id, "Contract address")
            session.delete(row)
            session.commit()
        self._notify("contract_address_deleted", row)
        return row

    # -- lookups ---------------------------------------------------------

    def get_address(self, protocol: int | str, category: str, version: str, network: str) -> str | None:
        """Active address for protocol (id or name), category, version and network."""
        with self._session() as session:
            if isinstance(protocol, str):
                protocol_id = session.scalars(
                    select(Protocol.id).where(Protocol.name == protocol)
                ).first()
                if protocol_id is None:
                    return None
            else:
                protocol_id = protocol
            return session.scalars(
                select(ContractAddress.address).where(
                    ContractAddress.protocol_id == protocol_id,
                    ContractAddress.category == category,
                    ContractAddress.version == version,
                    ContractAddress.network == network,
                    ContractAddress.active.is_(True),
                )
            ).first()

    def list_addresses_by_protocol(self) -> dict[Protocol, dict[str, dict[str, list[ContractAddress]]]]:
        """Nested view for the contracts page: protocol → category → version → rows."""
        stmt = (
            select(Protocol)
            .options(selectinload(Protocol.contract_addresses))
            .order_by(Protocol.name)
        )
        grouped: dict[Protocol, dict[str, dict[str, list[ContractAddress]]]] = {}
        with self._session() as session:
            for protocol in session.scalars(stmt):
                by_category: dict[str, dict[str, list[ContractAddress]]] = {}
                rows = sorted(
                    protocol.contract_addresses, key=lambda c: (c.category, c.version, c.network)
                )
                for row in rows:
                    by_category.setdefault(row.category, {}).setdefault(row.version, []).append(row)
                grouped[protocol] = by_category
        return grouped

    def get_versions_for_contract(self, protocol_id: int, category: str) -> list[str]:
        stmt = (
            select(ContractAddress.version)
            .where(ContractAddress.protocol_id == protocol_id, ContractAddress.category == category)
            .distinct()
            .order_by(ContractAddress.version.desc())
        )
        with self._session() as session:
            return list(session.scalars(stmt))

    def get_active_addresses(self, protocol_id: int, category: str) -> list[ContractAddress]:
        return self.list_contract_addresses(protocol_id=protocol_id, category=category, active=True)

    def list_active_addresses(self) -> list[ContractAddress]:
        return self.list_contract_addresses(active=True)

    # -- app settings ----------------------------------------------------

    def get_app_setting(self, key: str) -> str | None:
        with self._session() as session:
            return session.scalars(select(AppSetting.value).where(AppSetting.key == key)).first()

    def set_app_setting(self, key: str, value: str | None, description: str | None = None) -> AppSetting:
        with self._session() as session:
            row = session.scalars(select(AppSetting).where(AppSetting.key == key)).first()
            if row is None:
                row = AppSetting(key=key)
            row.value = value
            if description is not None:
                row.description = description
            self._commit(session, row, {"key": [TAKEN]})
        self._notify("app_setting_updated", row)
        return row

    def delete_app_setting(self, key: str) -> AppSetting:
        with self._session() as session:
            row = session.scalars(select(AppSetting).where(AppSetting.key == key)).first()
            if row is None:
                raise SettingsNotFoundError("App setting", key)
            session.delete(row)
            session.commit()
        self._notify("app_setting_deleted", row)
        return row

    def get_envio_url(self, fallback: str | None = None) -> str | None:
        """Stored indexer URL, else `fallback` (normally `ENVIO_GRAPHQL_URL`)."""
        return self.get_app_setting(ENVIO_URL_SETTING_KEY) or fallback

    def set_envio_url(self, url: str) -> AppSetting:
        url = (url or "").strip()
        if not url:
            raise SettingsValidationError({"url": [BLANK]})
        if not url.startswith(("http://", "https://")):
            raise SettingsValidationError({"url": ["must start with http:// or https://"]})
        return self.set_app_setting(ENVIO_URL_SETTING_KEY, url, "Envio Hyperindex GraphQL endpoint URL")
