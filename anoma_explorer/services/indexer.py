# anoma_explorer/services/indexer.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
HTTP client for the Envio GraphQL indexer.

`IndexerClient` wraps a `requests.Session` and exposes one method per query
the explorer needs: `list_*` for paginated tables and `get_*` for detail
views, plus `get_stats` for the dashboard and `execute_raw` for the
playground.

Design notes
------------
- The client is constructed with an explicit URL and timeouts (see
  `core.clients.get_indexer`); it never reads configuration on its own. A
  `None` URL is legal and makes every call raise `NotConfiguredError`, which
  pages turn into the setup panel.
- Failures are raised as the `core.errors` taxonomy. Nothing is retried; the
  operator recovers by refreshing, paging or re-applying filters.
- `list_*` methods return typed records from `services.records`. They take
  `limit`/`offset` plus keyword filters whose names match the filter form
  fields in `pages/`, so a page can pass `ListController` options straight
  through.
- Every query is built as text. User-supplied values only enter a query via
  `query_builder.render_value`, which emits quoted GraphQL literals.

Testing
-------
Inject a fake session:
    >>> session = unittest.mock.Mock()
    >>> client = IndexerClient("http://indexer/v1/graphql", session=session)
"""

import logging
from typing import Any

import requests

from ..core.constants import (
    DEFAULT_CONNECT_TIMEOUT_SECONDS,
    DEFAULT_QUERY_TIMEOUT_SECONDS,
    DEFAULT_RAW_TIMEOUT_SECONDS,
    PAGE_SIZE,
    PROBE_CONNECT_TIMEOUT_SECONDS,
    PROBE_TIMEOUT_SECONDS,
    STATS_SAMPLE_LIMIT,
)
from ..core.errors import (
    GraphQLQueryError,
    IndexerConnectionError,
    IndexerDecodeError,
    IndexerHTTPError,
    IndexerTimeoutError,
    NotConfiguredError,
    RecordNotFoundError,
)
from .query_builder import Where, render_value
from .records import (
    Action,
    CommitmentTreeRoot,
    ComplianceUnit,
    LogicInput,
    Resource,
    Stats,
    Transaction,
)

log = logging.getLogger(__name__)

PROBE_QUERY = "{ Transaction(limit: 1) { id } }"

# ---------------------------------------------------------------------------
# Field selections shared across queries
# ---------------------------------------------------------------------------

_EVM_FIELDS = "id txHash blockNumber timestamp chainId from value gasPrice gas gasUsed"
_TX_REF = "transaction { id evmTransaction { txHash blockNumber } }"
_ACTION_REF = f"action {{ id actionTreeRoot blockNumber chainId timestamp {_TX_REF} }}"
_COMPLIANCE_FIELDS = (
    "id index consumedNullifier createdCommitment consumedLogicRef createdLogicRef "
    "consumedCommitmentTreeRoot unitDeltaX unitDeltaY"
)
_LOGIC_FIELDS = (
    "id index tag isConsumed logicRef applicationPayloadCount discoveryPayloadCount "
    "externalPayloadCount resourcePayloadCount"
)
_ROOT_FIELDS = "id root index blockNumber chainId timestamp txHash"


def _window(limit: int, offset: int) -> str:
    return f"limit: {int(limit)}, offset: {int(offset)}"


class IndexerClient:
    """
    Typed access to the indexer's GraphQL API.

    Args:
        url: GraphQL endpoint; `None`/blank means "not configured".
        timeout: Read timeout (seconds) for list/detail queries.
        connect_timeout: Connect timeout (seconds) for every request.
        raw_timeout: Read timeout for playground queries.
        session: Optional pre-built `requests.Session` (tests inject a mock).
    """

    def __init__(
        self,
        url: str | None,
        *,
        timeout: float = DEFAULT_QUERY_TIMEOUT_SECONDS,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT_SECONDS,
        raw_timeout: float = DEFAULT_RAW_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ):
        self.url = (url or "").strip() or None
        self.timeout = timeout
        self.connect_timeout = connect_timeout
        self.raw_timeout = raw_timeout
        self._session = session or requests.Session()
        self._session.headers.update({"Content-Type": "application/json"})

    @property
    def configured(self) -> bool:
        return self.url is not None

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _post(
        self,
        query: str,
        *,
        read_timeout: float,
        connect_timeout: float | None = None,
        url: str | None = None,
    ) -> dict[str, Any]:
        target = url or self.url
        if not target:
            raise NotConfiguredError()
        connect = self.connect_timeout if connect_timeout is None else connect_timeout
        try:
            resp = self._session.post(target, json={"query": query}, timeout=(connect, read_timeout))
        except requests.Timeout as e:
            log.error("GraphQL request to %s timed out: %s", target, e)
            raise IndexerTimeoutError(read_timeout) from e
        except requests.RequestException as e:
            log.error("GraphQL connection error for %s: %s", target, e)
            raise IndexerConnectionError(str(e)) from e

        if resp.status_code != 200:
            body = resp.text or ""
            log.error("GraphQL HTTP error: status=%s, body=%s", resp.status_code, body[:200])
            raise IndexerHTTPError(resp.status_code, body)

        try:
            doc = resp.json()
        except ValueError as e:
            log.error("Failed to decode GraphQL response: %s", e)
            raise IndexerDecodeError(str(e)) from e
        if not isinstance(doc, dict):
            raise IndexerDecodeError("expected a JSON object")
        return doc

    def execute(self, query: str) -> dict[str, Any]:
        """Run `query` and return its ``data`` object."""
        doc = self._post(query, read_timeout=self.timeout)
        data = doc.get("data")
        if isinstance(data, dict):
            return data
        errors = doc.get("errors")
        if errors:
            log.warning("GraphQL query returned errors: %s", errors)
            raise GraphQLQueryError(errors if isinstance(errors, list) else [errors])
        raise IndexerDecodeError("response has neither data nor errors")

    def execute_raw(self, query: str) -> dict[str, Any]:
        """Run `query` and return the whole response document (data and errors)."""
        return self._post(query, read_timeout=self.raw_timeout)

    def test_connection(self, url: str | None = None) -> tuple[bool, str]:
        """
        Probe `url` (or the configured URL) with a one-row query.

        Returns:
            `(True, "Connected successfully")` or `(False, <reason>)`. Never
            raises; the reason is suitable for display next to the URL field.
        """
        target = (url or "").strip() or self.url
        if not target:
            return False, "Indexer endpoint not configured"
        if not target.startswith(("http://", "https://")):
            return False, "Invalid URL"
        try:
            doc = self._post(
                PROBE_QUERY,
                read_timeout=PROBE_TIMEOUT_SECONDS,
                connect_timeout=PROBE_CONNECT_TIMEOUT_SECONDS,
                url=target,
            )
        except IndexerTimeoutError:
            return False, "Connection failed: Connection timed out"
        except IndexerConnectionError:
            return False, "Connection failed: Unable to reach server"
        except IndexerHTTPError as e:
            return False, f"HTTP {e.status_code}"
        except IndexerDecodeError:
            return False, "Invalid response format"
        if "data" in doc:
            return True, "Connected successfully"
        if doc.get("errors"):
            return False, f"GraphQL error: {GraphQLQueryError(doc['errors'])}"
        return False, "Invalid response format"

    def _rows(self, query: str, entity: str) -> list[dict[str, Any]]:
        rows = self.execute(query).get(entity)
        return rows if isinstance(rows, list) else []

    def _one(self, query: str, entity: str, record_id: str, label: str) -> dict[str, Any]:
        rows = self._rows(query, entity)
        if not rows:
            raise RecordNotFoundError(label, record_id)
        return rows[0]

    # ------------------------------------------------------------------
    # Dashboard
    # ------------------------------------------------------------------

    def get_stats(self) -> Stats:
        """Entity counts for the dashboard, each capped at `STATS_SAMPLE_LIMIT`."""
        n = STATS_SAMPLE_LIMIT
        query = f"""
        query {{
          transactions: Transaction(limit: {n}) {{ id }}
          resources: Resource(limit: {n}) {{ id isConsumed }}
          actions: Action(limit: {n}) {{ id }}
          compliances: ComplianceUnit(limit: {n}) {{ id }}
          logics: LogicInput(limit: {n}) {{ id }}
        }}
        """
        data = self.execute(query)
        resources = data.get("resources") or []
        consumed = sum(1 for r in resources if isinstance(r, dict) and r.get("isConsumed") is True)
        return Stats(
            transactions=len(data.get("transactions") or []),
            resources=len(resources),
            consumed=consumed,
            created=len(resources) - consumed,
            actions=len(data.get("actions") or []),
            compliances=len(data.get("compliances") or []),
            logics=len(data.get("logics") or []),
        )

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def list_transactions(
        self,
        *,
        limit: int = PAGE_SIZE,
        offset: int = 0,
        tx_hash: str | None = None,
        chain_id: int | None = None,
        block_min: int | None = None,
        block_max: int | None = None,
        contract_address: str | None = None,
    ) -> list[Transaction]:
        """Transactions, newest block first."""
        where = (
            Where()
            .ilike("txHash", tx_hash, parent="evmTransaction")
            .eq("chainId", chain_id, parent="evmTransaction")
            .between("blockNumber", block_min, block_max, parent="evmTransaction")
            .ilike("contractAddress", contract_address)
        )
        query = f"""
        query {{
          Transaction({_window(limit, offset)}, order_by: {{evmTransaction: {{blockNumber: desc}}}}{where.clause()}) {{
            id contractAddress tags logicRefs
            evmTransaction {{ {_EVM_FIELDS} }}
          }}
        }}
        """
        return [Transaction.from_dict(r) for r in self._rows(query, "Transaction")]

    def get_transaction(self, tx_id: str) -> Transaction:
        query = f"""
        query {{
          Transaction(where: {{id: {{_eq: {render_value(tx_id)}}}}}) {{
            id contractAddress tags logicRefs
            evmTransaction {{ {_EVM_FIELDS} }}
            resources {{ id tag isConsumed logicRef decodingStatus }}
            actions {{ id actionTreeRoot tagCount }}
          }}
        }}
        """
        return Transaction.from_dict(self._one(query, "Transaction", tx_id, "Transaction"))

    # ------------------------------------------------------------------
    # Resources
    # ------------------------------------------------------------------

    def list_resources(
        self,
        *,
        limit: int = PAGE_SIZE,
        offset: int = 0,
        is_consumed: bool | None = None,
        tag: str | None = None,
        logic_ref: str | None = None,
        chain_id: int | None = None,
        decoding_status: str | None = None,
        block_min: int | None = None,
        block_max: int | None = None,
    ) -> list[Resource]:
        where = (
            Where()
            .boolean("isConsumed", is_consumed)
            .ilike("tag", tag)
            .ilike("logicRef", logic_ref)
            .eq("chainId", chain_id)
            .eq("decodingStatus", decoding_status)
            .between("blockNumber", block_min, block_max)
        )
        query = f"""
        query {{
          Resource({_window(limit, offset)}, order_by: {{blockNumber: desc}}{where.clause()}) {{
            id tag isConsumed blockNumber chainId logicRef decodingStatus
            {_TX_REF}
          }}
        }}
        """
        return [r for r in (Resource.from_dict(x) for x in self._rows(query, "Resource")) if r]

    def get_resource(self, resource_id: str) -> Resource:
        query = f"""
        query {{
          Resource(where: {{id: {{_eq: {render_value(resource_id)}}}}}) {{
            id tag index isConsumed blockNumber chainId logicRef rawBlob
            decodingStatus decodingError
            {_TX_REF}
            payloads {{ id kind tag index blob }}
          }}
        }}
        """
        raw = self._one(query, "Resource", resource_id, "Resource")
        resource = Resource.from_dict(raw)
        assert resource is not None
        return resource

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def list_actions(
        self,
        *,
        limit: int = PAGE_SIZE,
        offset: int = 0,
        action_tree_root: str | None = None,
        chain_id: int | None = None,
        block_min: int | None = None,
        block_max: int | None = None,
    ) -> list[Action]:
        where = (
            Where()
            .ilike("actionTreeRoot", action_tree_root)
            .eq("chainId", chain_id)
            .between("blockNumber", block_min, block_max)
        )
        query = f"""
        query {{
          Action({_window(limit, offset)}, order_by: {{blockNumber: desc}}{where.clause()}) {{
            id actionTreeRoot tagCount blockNumber chainId timestamp
            {_TX_REF}
          }}
        }}
        """
        return [a for a in (Action.from_dict(x) for x in self._rows(query, "Action")) if a]

    def get_action(self, action_id: str) -> Action:
        query = f"""
        query {{
          Action(where: {{id: {{_eq: {render_value(action_id)}}}}}) {{
            id actionTreeRoot tagCount index blockNumber chainId timestamp
            {_TX_REF}
            complianceUnits {{ {_COMPLIANCE_FIELDS} }}
            logicInputs {{ id tag isConsumed logicRef resource {{ id tag }} }}
          }}
        }}
        """
        action = Action.from_dict(self._one(query, "Action", action_id, "Action"))
        assert action is not None
        return action

    # ------------------------------------------------------------------
    # Compliance units
    # ------------------------------------------------------------------

    def list_compliance_units(
        self,
        *,
        limit: int = PAGE_SIZE,
        offset: int = 0,
        nullifier: str | None = None,
        commitment: str | None = None,
        logic_ref: str | None = None,
    ) -> list[ComplianceUnit]:
        """`logic_ref` matches either the consumed or the created logic ref."""
        where = (
            Where()
            .ilike("consumedNullifier", nullifier)
            .ilike("createdCommitment", commitment)
            .ilike_any(["consumedLogicRef", "createdLogicRef"], logic_ref)
        )
        query = f"""
        query {{
          ComplianceUnit({_window(limit, offset)}{where.clause()}) {{
            {_COMPLIANCE_FIELDS}
            {_ACTION_REF}
          }}
        }}
        """
        return [ComplianceUnit.from_dict(r) for r in self._rows(query, "ComplianceUnit")]

    def get_compliance_unit(self, unit_id: str) -> ComplianceUnit:
        query = f"""
        query {{
          ComplianceUnit(where: {{id: {{_eq: {render_value(unit_id)}}}}}) {{
            {_COMPLIANCE_FIELDS} proof
            consumedResource {{ id tag logicRef }}
            createdResource {{ id tag logicRef }}
            {_ACTION_REF}
          }}
        }}
        """
        return ComplianceUnit.from_dict(
            self._one(query, "ComplianceUnit", unit_id, "Compliance unit")
        )

    # ------------------------------------------------------------------
    # Logic inputs
    # ------------------------------------------------------------------

    def list_logic_inputs(
        self,
        *,
        limit: int = PAGE_SIZE,
        offset: int = 0,
        tag: str | None = None,
        is_consumed: bool | None = None,
        logic_ref: str | None = None,
    ) -> list[LogicInput]:
        where = (
            Where()
            .ilike("tag", tag)
            .boolean("isConsumed", is_consumed)
            .ilike("logicRef", logic_ref)
        )
        query = f"""
        query {{
          LogicInput({_window(limit, offset)}{where.clause()}) {{
            {_LOGIC_FIELDS}
            {_ACTION_REF}
            resource {{ id tag }}
          }}
        }}
        """
        return [LogicInput.from_dict(r) for r in self._rows(query, "LogicInput")]

    def get_logic_input(self, input_id: str) -> LogicInput:
        query = f"""
        query {{
          LogicInput(where: {{id: {{_eq: {render_value(input_id)}}}}}) {{
            {_LOGIC_FIELDS} proof
            {_ACTION_REF}
            resource {{ id tag logicRef isConsumed }}
          }}
        }}
        """
        return LogicInput.from_dict(self._one(query, "LogicInput", input_id, "Logic input"))

    # ------------------------------------------------------------------
    # Commitments, roots and nullifiers
    # ------------------------------------------------------------------

    def list_commitment_roots(
        self,
        *,
        limit: int = PAGE_SIZE,
        offset: int = 0,
        root: str | None = None,
        tx_hash: str | None = None,
        chain_id: int | None = None,
        block_min: int | None = None,
        block_max: int | None = None,
    ) -> list[CommitmentTreeRoot]:
        where = (
            Where()
            .ilike("root", root)
            .ilike("txHash", tx_hash)
            .eq("chainId", chain_id)
            .between("blockNumber", block_min, block_max)
        )
        query = f"""
        query {{
          CommitmentTreeRoot({_window(limit, offset)}, order_by: {{blockNumber: desc}}{where.clause()}) {{
            {_ROOT_FIELDS}
          }}
        }}
        """
        return [CommitmentTreeRoot.from_dict(r) for r in self._rows(query, "CommitmentTreeRoot")]

    def get_commitment_root(self, root_id: str) -> CommitmentTreeRoot:
        query = f"""
        query {{
          CommitmentTreeRoot(where: {{id: {{_eq: {render_value(root_id)}}}}}) {{
            {_ROOT_FIELDS}
          }}
        }}
        """
        return CommitmentTreeRoot.from_dict(
            self._one(query, "CommitmentTreeRoot", root_id, "Commitment tree root")
        )

    def list_nullifiers(
        self, *, limit: int = PAGE_SIZE, offset: int = 0, nullifier: str | None = None
    ) -> list[ComplianceUnit]:
        """Compliance units that consumed a resource, i.e. carry a nullifier."""
        where = Where().not_null("consumedNullifier").ilike("consumedNullifier", nullifier)
        query = f"""
        query {{
          ComplianceUnit({_window(limit, offset)}{where.clause()}) {{
            id consumedNullifier consumedLogicRef consumedCommitmentTreeRoot
            consumedResource {{ id tag }}
            {_ACTION_REF}
          }}
        }}
        """
        return [ComplianceUnit.from_dict(r) for r in self._rows(query, "ComplianceUnit")]

    def list_commitments(
        self, *, limit: int = PAGE_SIZE, offset: int = 0, commitment: str | None = None
    ) -> list[ComplianceUnit]:
        """Compliance units that created a resource, i.e. carry a commitment."""
        where = Where().not_null("createdCommitment").ilike("createdCommitment", commitment)
        query = f"""
        query {{
          ComplianceUnit({_window(limit, offset)}{where.clause()}) {{
            id createdCommitment createdLogicRef
            createdResource {{ id tag }}
            {_ACTION_REF}
          }}
        }}
        """
        return [ComplianceUnit.from_dict(r) for r in self._rows(query, "ComplianceUnit")]
