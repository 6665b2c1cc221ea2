# anoma_explorer/services/records.py
# SPDX-License-Identifier: Apache-2.0
"""Typed views over the loosely-shaped JSON the indexer returns.

Each entity gets a frozen dataclass whose fields are all optional. The
``from_dict`` constructors read the known camelCase keys and nothing else, so
a missing or null field becomes ``None`` (or an empty tuple) instead of a
``KeyError`` deep inside a page. Numeric fields are parsed permissively
because the indexer serializes BigInt columns as strings.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

Raw = Mapping[str, Any]


def _int(raw: Raw, key: str) -> int | None:
    value = raw.get(key)
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value))
    except ValueError:
        return None


def _str(raw: Raw, key: str) -> str | None:
    value = raw.get(key)
    return None if value is None else str(value)


def _bool(raw: Raw, key: str) -> bool | None:
    value = raw.get(key)
    return value if isinstance(value, bool) else None


def _strs(raw: Raw, key: str) -> tuple[str, ...]:
    value = raw.get(key)
    if not isinstance(value, list):
        return ()
    return tuple(str(v) for v in value if v is not None)


def _obj(raw: Raw, key: str) -> Raw | None:
    value = raw.get(key)
    return value if isinstance(value, Mapping) else None


def _objs(raw: Raw, key: str) -> list[Raw]:
    value = raw.get(key)
    if not isinstance(value, list):
        return []
    return [v for v in value if isinstance(v, Mapping)]


@dataclass(frozen=True)
class EvmTransaction:
    id: str | None = None
    tx_hash: str | None = None
    block_number: int | None = None
    timestamp: int | None = None
    chain_id: int | None = None
    from_address: str | None = None
    value: int | None = None
    gas_price: int | None = None
    gas: int | None = None
    gas_used: int | None = None

    @classmethod
    def from_dict(cls, raw: Raw | None) -> EvmTransaction | None:
        if raw is None:
            return None
        return cls(
            id=_str(raw, "id"),
            tx_hash=_str(raw, "txHash"),
            block_number=_int(raw, "blockNumber"),
            timestamp=_int(raw, "timestamp"),
            chain_id=_int(raw, "chainId"),
            from_address=_str(raw, "from"),
            value=_int(raw, "value"),
            gas_price=_int(raw, "gasPrice"),
            gas=_int(raw, "gas"),
            gas_used=_int(raw, "gasUsed"),
        )


@dataclass(frozen=True)
class TransactionRef:
    """The ``transaction { id evmTransaction { txHash ... } }`` stub."""

    id: str | None = None
    tx_hash: str | None = None
    block_number: int | None = None

    @classmethod
    def from_dict(cls, raw: Raw | None) -> TransactionRef | None:
        if raw is None:
            return None
        evm = _obj(raw, "evmTransaction") or {}
        return cls(id=_str(raw, "id"), tx_hash=_str(evm, "txHash"), block_number=_int(evm, "blockNumber"))


@dataclass(frozen=True)
class Payload:
    id: str | None = None
    kind: str | None = None
    tag: str | None = None
    index: int | None = None
    blob: str | None = None

    @classmethod
    def from_dict(cls, raw: Raw) -> Payload:
        return cls(
            id=_str(raw, "id"),
            kind=_str(raw, "kind"),
            tag=_str(raw, "tag"),
            index=_int(raw, "index"),
            blob=_str(raw, "blob"),
        )


@dataclass(frozen=True)
class Resource:
    id: str | None = None
    tag: str | None = None
    index: int | None = None
    is_consumed: bool | None = None
    block_number: int | None = None
    chain_id: int | None = None
    logic_ref: str | None = None
    raw_blob: str | None = None
    decoding_status: str | None = None
    decoding_error: str | None = None
    transaction: TransactionRef | None = None
    payloads: tuple[Payload, ...] = ()

    @classmethod
    def from_dict(cls, raw: Raw | None) -> Resource | None:
        if raw is None:
            return None
        return cls(
            id=_str(raw, "id"),
            tag=_str(raw, "tag"),
            index=_int(raw, "index"),
            is_consumed=_bool(raw, "isConsumed"),
            block_number=_int(raw, "blockNumber"),
            chain_id=_int(raw, "chainId"),
            logic_ref=_str(raw, "logicRef"),
            raw_blob=_str(raw, "rawBlob"),
            decoding_status=_str(raw, "decodingStatus"),
            decoding_error=_str(raw, "decodingError"),
            transaction=TransactionRef.from_dict(_obj(raw, "transaction")),
            payloads=tuple(Payload.from_dict(p) for p in _objs(raw, "payloads")),
        )


@dataclass(frozen=True)
class ComplianceUnit:
    id: str | None = None
    index: int | None = None
    consumed_nullifier: str | None = None
    created_commitment: str | None = None
    consumed_logic_ref: str | None = None
    created_logic_ref: str | None = None
    consumed_commitment_tree_root: str | None = None
    unit_delta_x: str | None = None
    unit_delta_y: str | None = None
    proof: str | None = None
    consumed_resource: Resource | None = None
    created_resource: Resource | None = None
    action: Action | None = None

    @classmethod
    def from_dict(cls, raw: Raw) -> ComplianceUnit:
        return cls(
            id=_str(raw, "id"),
            index=_int(raw, "index"),
            consumed_nullifier=_str(raw, "consumedNullifier"),
            created_commitment=_str(raw, "createdCommitment"),
            consumed_logic_ref=_str(raw, "consumedLogicRef"),
            created_logic_ref=_str(raw, "createdLogicRef"),
            consumed_commitment_tree_root=_str(raw, "consumedCommitmentTreeRoot"),
            unit_delta_x=_str(raw, "unitDeltaX"),
            unit_delta_y=_str(raw, "unitDeltaY"),
            proof=_str(raw, "proof"),
            consumed_resource=Resource.from_dict(_obj(raw, "consumedResource")),
            created_resource=Resource.from_dict(_obj(raw, "createdResource")),
            action=Action.from_dict(_obj(raw, "action")),
        )


@dataclass(frozen=True)
class LogicInput:
    id: str | None = None
    index: int | None = None
    tag: str | None = None
    is_consumed: bool | None = None
    logic_ref: str | None = None
    proof: str | None = None
    application_payload_count: int | None = None
    discovery_payload_count: int | None = None
    external_payload_count: int | None = None
    resource_payload_count: int | None = None
    action: Action | None = None
    resource: Resource | None = None

    @classmethod
    def from_dict(cls, raw: Raw) -> LogicInput:
        return cls(
            id=_str(raw, "id"),
            index=_int(raw, "index"),
            tag=_str(raw, "tag"),
            is_consumed=_bool(raw, "isConsumed"),
            logic_ref=_str(raw, "logicRef"),
            proof=_str(raw, "proof"),
            application_payload_count=_int(raw, "applicationPayloadCount"),
            discovery_payload_count=_int(raw, "discoveryPayloadCount"),
            external_payload_count=_int(raw, "externalPayloadCount"),
            resource_payload_count=_int(raw, "resourcePayloadCount"),
            action=Action.from_dict(_obj(raw, "action")),
            resource=Resource.from_dict(_obj(raw, "resource")),
        )


@dataclass(frozen=True)
class Action:
    id: str | None = None
    action_tree_root: str | None = None
    tag_count: int | None = None
    index: int | None = None
    block_number: int | None = None
    chain_id: int | None = None
    timestamp: int | None = None
    transaction: TransactionRef | None = None
    compliance_units: tuple[ComplianceUnit, ...] = ()
    logic_inputs: tuple[LogicInput, ...] = ()

    @classmethod
    def from_dict(cls, raw: Raw | None) -> Action | None:
        if raw is None:
            return None
        return cls(
            id=_str(raw, "id"),
            action_tree_root=_str(raw, "actionTreeRoot"),
            tag_count=_int(raw, "tagCount"),
            index=_int(raw, "index"),
            block_number=_int(raw, "blockNumber"),
            chain_id=_int(raw, "chainId"),
            timestamp=_int(raw, "timestamp"),
            transaction=TransactionRef.from_dict(_obj(raw, "transaction")),
            compliance_units=tuple(ComplianceUnit.from_dict(u) for u in _objs(raw, "complianceUnits")),
            logic_inputs=tuple(LogicInput.from_dict(i) for i in _objs(raw, "logicInputs")),
        )


@dataclass(frozen=True)
class Transaction:
    id: str | None = None
    contract_address: str | None = None
    tags: tuple[str, ...] = ()
    logic_refs: tuple[str, ...] = ()
    evm: EvmTransaction | None = None
    resources: tuple[Resource, ...] = ()
    actions: tuple[Action, ...] = ()

    @classmethod
    def from_dict(cls, raw: Raw) -> Transaction:
        return cls(
            id=_str(raw, "id"),
            contract_address=_str(raw, "contractAddress"),
            tags=_strs(raw, "tags"),
            logic_refs=_strs(raw, "logicRefs"),
            evm=EvmTransaction.from_dict(_obj(raw, "evmTransaction")),
            resources=tuple(r for r in (Resource.from_dict(x) for x in _objs(raw, "resources")) if r),
            actions=tuple(a for a in (Action.from_dict(x) for x in _objs(raw, "actions")) if a),
        )

    @property
    def tx_hash(self) -> str | None:
        return self.evm.tx_hash if self.evm else None

    @property
    def chain_id(self) -> int | None:
        return self.evm.chain_id if self.evm else None

    @property
    def block_number(self) -> int | None:
        return self.evm.block_number if self.evm else None

    @property
    def timestamp(self) -> int | None:
        return self.evm.timestamp if self.evm else None


@dataclass(frozen=True)
class CommitmentTreeRoot:
    id: str | None = None
    root: str | None = None
    index: int | None = None
    block_number: int | None = None
    chain_id: int | None = None
    timestamp: int | None = None
    tx_hash: str | None = None

    @classmethod
    def from_dict(cls, raw: Raw) -> CommitmentTreeRoot:
        return cls(
            id=_str(raw, "id"),
            root=_str(raw, "root"),
            index=_int(raw, "index"),
            block_number=_int(raw, "blockNumber"),
            chain_id=_int(raw, "chainId"),
            timestamp=_int(raw, "timestamp"),
            tx_hash=_str(raw, "txHash"),
        )


@dataclass(frozen=True)
class Stats:
    """Dashboard counters (each sampled, see `STATS_SAMPLE_LIMIT`)."""

    transactions: int = 0
    resources: int = 0
    consumed: int = 0
    created: int = 0
    actions: int = 0
    compliances: int = 0
    logics: int = 0
