# anoma_explorer/services/playground.py
# SPDX-License-Identifier: Apache-2.0
"""Ad-hoc GraphQL queries: templates, execution and link extraction.

The playground page sends whatever the operator typed through
`IndexerClient.execute_raw` and shows the full response document. To make
the JSON navigable, `extract_links` walks it and collects every value that
maps onto a page of the explorer or onto a block explorer:

- an ``id`` ending in ``_transaction``, ``_resource``, ``_action``,
  ``_compliance`` or ``_logic`` opens that record's detail view;
- a ``txHash`` with a ``chainId`` in the same object (or an enclosing one)
  opens the transactions list searched by that hash;
- a ``blockNumber`` on a known chain opens the block on the chain's explorer.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any, Protocol
from urllib.parse import quote

from ..core.errors import IndexerError, IndexerHTTPError
from ..core.formatting import format_error
from . import networks

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueryTemplate:
    key: str
    label: str
    query: str


def _template(key: str, label: str, body: str) -> QueryTemplate:
    return QueryTemplate(key, label, "query {\n" + body.strip("\n") + "\n}\n")


TEMPLATES: dict[str, QueryTemplate] = {
    t.key: t
    for t in (
        _template(
            "list_transactions",
            "List Transactions",
            """
  Transaction(limit: 10, order_by: {evmTransaction: {blockNumber: desc}}) {
    id
    tags
    logicRefs
    evmTransaction {
      txHash
      blockNumber
      timestamp
      chainId
    }
  }""",
        ),
        _template(
            "list_resources",
            "List Resources",
            """
  Resource(limit: 10, order_by: {blockNumber: desc}) {
    id
    tag
    isConsumed
    blockNumber
    chainId
    logicRef
    decodingStatus
  }""",
        ),
        _template(
            "consumed_resources",
            "Consumed Resources",
            """
  Resource(limit: 10, where: {isConsumed: {_eq: true}}, order_by: {blockNumber: desc}) {
    id
    tag
    blockNumber
    chainId
    logicRef
    transaction { id evmTransaction { txHash chainId } }
  }""",
        ),
        _template(
            "created_resources",
            "Created Resources",
            """
  Resource(limit: 10, where: {isConsumed: {_eq: false}}, order_by: {blockNumber: desc}) {
    id
    tag
    blockNumber
    chainId
    logicRef
    transaction { id evmTransaction { txHash chainId } }
  }""",
        ),
        _template(
            "failed_decoding",
            "Failed Decoding",
            """
  Resource(limit: 10, where: {decodingStatus: {_eq: "failed"}}) {
    id
    tag
    decodingStatus
    decodingError
    blockNumber
    chainId
  }""",
        ),
        _template(
            "list_actions",
            "List Actions",
            """
  Action(limit: 10, order_by: {blockNumber: desc}) {
    id
    actionTreeRoot
    tagCount
    blockNumber
    chainId
    timestamp
    transaction { id evmTransaction { txHash chainId } }
  }""",
        ),
        _template(
            "commitment_roots",
            "Commitment Roots",
            """
  CommitmentTreeRoot(limit: 10, order_by: {blockNumber: desc}) {
    id
    root
    blockNumber
    chainId
    timestamp
  }""",
        ),
    )
}

DEFAULT_TEMPLATE = "list_transactions"

#: Detail page (url path) for each record id suffix.
_ID_SUFFIX_PAGES: tuple[tuple[str, str], ...] = (
    ("_resource", "resources"),
    ("_transaction", "transactions"),
    ("_action", "actions"),
    ("_compliance", "compliances"),
    ("_logic", "logics"),
)


def template_query(key: str | None) -> str:
    """Query text for template `key`; unknown keys fall back to the default."""
    template = TEMPLATES.get(key or "") or TEMPLATES[DEFAULT_TEMPLATE]
    return template.query


def id_link(record_id: str) -> str | None:
    """Relative detail-page URL for an indexer record id, if it has a known suffix."""
    for suffix, page in _ID_SUFFIX_PAGES:
        if record_id.endswith(suffix):
            return f"{page}?id={quote(record_id, safe='')}"
    return None


@dataclass(frozen=True)
class ResultLink:
    """A linkable value found in a response: where it sits and where it points."""

    path: str
    key: str
    value: str
    url: str
    external: bool = False


def _chain_of(obj: dict[str, Any], inherited: int | None) -> int | None:
    value = obj.get("chainId")
    if isinstance(value, bool):
        return inherited
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return inherited


def _walk(node: Any, path: str, chain: int | None) -> Iterator[ResultLink]:
    if isinstance(node, list):
        for i, item in enumerate(node):
            yield from _walk(item, f"{path}[{i}]", chain)
        return
    if not isinstance(node, dict):
        return
    chain = _chain_of(node, chain)
    for key in sorted(node):
        value = node[key]
        where = f"{path}.{key}" if path else key
        if key == "id" and isinstance(value, str):
            url = id_link(value)
            if url:
                yield ResultLink(where, key, value, url)
        elif key == "txHash" and isinstance(value, str) and chain is not None:
            yield ResultLink(where, key, value, f"transactions?search={quote(value, safe='')}")
        elif key == "blockNumber" and isinstance(value, int) and not isinstance(value, bool):
            url = networks.block_url(chain, value)
            if url:
                yield ResultLink(where, key, str(value), url, external=True)
        elif isinstance(value, (dict, list)):
            yield from _walk(value, where, chain)


def extract_links(document: Any) -> list[ResultLink]:
    """Every linkable value in `document`, in a stable (sorted-key) order."""
    return list(_walk(document, "", None))


def pretty(document: Any) -> str:
    return json.dumps(document, indent=2, sort_keys=True)


class RawQueryRunner(Protocol):
    def execute_raw(self, query: str) -> dict[str, Any]: ...


@dataclass
class PlaygroundResult:
    document: dict[str, Any] | None = None
    error: str | None = None
    links: list[ResultLink] = field(default_factory=list)

    @property
    def text(self) -> str:
        return pretty(self.document) if self.document is not None else ""

    @property
    def graphql_errors(self) -> list[Any]:
        if not self.document:
            return []
        errors = self.document.get("errors")
        return errors if isinstance(errors, list) else []


def run_query(client: RawQueryRunner, query: str) -> PlaygroundResult:
    """Execute `query`; transport failures come back as `error`, never raised."""
    if not query or not query.strip():
        return PlaygroundResult(error="Query is empty")
    try:
        document = client.execute_raw(query)
    except IndexerHTTPError as e:
        return PlaygroundResult(error=f"HTTP error {e.status_code}: {e.body[:200]}")
    except IndexerError as e:
        log.info("Playground query failed: %s", e)
        return PlaygroundResult(error=format_error(e))
    return PlaygroundResult(document=document, links=extract_links(document))
