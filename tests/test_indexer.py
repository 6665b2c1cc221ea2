# tests/test_indexer.py
# SPDX-License-Identifier: Apache-2.0
"""IndexerClient tests against a mocked `requests.Session`."""

from __future__ import annotations

import pytest
import requests

from anoma_explorer.core.constants import PROBE_CONNECT_TIMEOUT_SECONDS, PROBE_TIMEOUT_SECONDS
from anoma_explorer.core.errors import (
    GraphQLQueryError,
    IndexerConnectionError,
    IndexerDecodeError,
    IndexerHTTPError,
    IndexerTimeoutError,
    NotConfiguredError,
    RecordNotFoundError,
)
from anoma_explorer.services.indexer import IndexerClient
from anoma_explorer.services.records import Transaction

from .conftest import INDEXER_URL, make_response, sent_query

TX_ROW = {
    "id": "1_0xabc_transaction",
    "contractAddress": "0xdd4f4f0875da48ef6d8f32acb890ec81f435ff3a",
    "tags": ["0x01", "0x02"],
    "logicRefs": ["0xlogic"],
    "evmTransaction": {
        "id": "1_0xabc",
        "txHash": "0xabc",
        "blockNumber": "19000000",
        "timestamp": "1700000000",
        "chainId": 1,
        "from": "0xsender",
        "value": "0",
        "gasPrice": "1000000000",
        "gas": "300000",
        "gasUsed": "210000",
    },
}


class TestTransport:
    def test_not_configured_never_posts(self, http_session):
        client = IndexerClient("  ", session=http_session)
        assert client.configured is False
        with pytest.raises(NotConfiguredError):
            client.list_transactions()
        http_session.post.assert_not_called()

    def test_posts_json_with_timeouts(self, client, http_session):
        http_session.post.return_value = make_response(json_body={"data": {"Transaction": []}})
        client.list_transactions()
        args, kwargs = http_session.post.call_args
        assert args == (INDEXER_URL,)
        assert kwargs["timeout"] == (3, 7)
        assert "query" in kwargs["json"]
        assert http_session.headers["Content-Type"] == "application/json"

    def test_timeout(self, client, http_session):
        http_session.post.side_effect = requests.Timeout("read timed out")
        with pytest.raises(IndexerTimeoutError) as exc_info:
            client.list_resources()
        assert exc_info.value.seconds == 7

    def test_connection_error(self, client, http_session):
        http_session.post.side_effect = requests.ConnectionError("refused")
        with pytest.raises(IndexerConnectionError):
            client.list_actions()

    def test_http_error_keeps_status_and_body(self, client, http_session):
        http_session.post.return_value = make_response(503, text="maintenance")
        with pytest.raises(IndexerHTTPError) as exc_info:
            client.list_transactions()
        assert exc_info.value.status_code == 503
        assert exc_info.value.body == "maintenance"

    def test_invalid_json(self, client, http_session):
        http_session.post.return_value = make_response(json_body=ValueError("Expecting value"))
        with pytest.raises(IndexerDecodeError):
            client.list_transactions()

    def test_non_object_json(self, client, http_session):
        http_session.post.return_value = make_response(json_body=["not", "an", "object"])
        with pytest.raises(IndexerDecodeError):
            client.list_transactions()

    def test_graphql_errors(self, client, http_session):
        http_session.post.return_value = make_response(
            json_body={"errors": [{"message": "field 'nope' not found in type: 'query_root'"}]}
        )
        with pytest.raises(GraphQLQueryError) as exc_info:
            client.list_transactions()
        assert "field 'nope' not found" in str(exc_info.value)

    def test_neither_data_nor_errors(self, client, http_session):
        http_session.post.return_value = make_response(json_body={})
        with pytest.raises(IndexerDecodeError):
            client.list_transactions()

    def test_execute_raw_returns_whole_document(self, client, http_session):
        doc = {"data": None, "errors": [{"message": "bad"}]}
        http_session.post.return_value = make_response(json_body=doc)
        assert client.execute_raw("{ nope }") == doc
        assert http_session.post.call_args.kwargs["timeout"] == (3, 20)


class TestTestConnection:
    def test_success(self, client, http_session):
        http_session.post.return_value = make_response(json_body={"data": {"Transaction": []}})
        assert client.test_connection() == (True, "Connected successfully")
        assert http_session.post.call_args.kwargs["timeout"] == (
            PROBE_CONNECT_TIMEOUT_SECONDS,
            PROBE_TIMEOUT_SECONDS,
        )

    def test_explicit_url_overrides_configured(self, client, http_session):
        http_session.post.return_value = make_response(json_body={"data": {}})
        client.test_connection("https://other.test/graphql")
        assert http_session.post.call_args.args == ("https://other.test/graphql",)

    def test_not_configured(self, http_session):
        assert IndexerClient(None, session=http_session).test_connection() == (
            False,
            "Indexer endpoint not configured",
        )

    def test_invalid_url(self, client, http_session):
        assert client.test_connection("ftp://indexer") == (False, "Invalid URL")
        http_session.post.assert_not_called()

    @pytest.mark.parametrize(
        "side_effect, message",
        [
            (requests.Timeout("slow"), "Connection failed: Connection timed out"),
            (requests.ConnectionError("refused"), "Connection failed: Unable to reach server"),
        ],
    )
    def test_transport_failures(self, client, http_session, side_effect, message):
        http_session.post.side_effect = side_effect
        assert client.test_connection() == (False, message)

    def test_http_status(self, client, http_session):
        http_session.post.return_value = make_response(401, text="unauthorized")
        assert client.test_connection() == (False, "HTTP 401")

    def test_graphql_error(self, client, http_session):
        http_session.post.return_value = make_response(json_body={"errors": [{"message": "denied"}]})
        assert client.test_connection() == (False, "GraphQL error: denied")

    def test_garbage_body(self, client, http_session):
        http_session.post.return_value = make_response(json_body=ValueError("nope"))
        assert client.test_connection() == (False, "Invalid response format")


class TestQueries:
    def test_list_transactions_parses_rows(self, client, http_session):
        http_session.post.return_value = make_response(json_body={"data": {"Transaction": [TX_ROW]}})
        (tx,) = client.list_transactions(limit=21, offset=40)
        assert isinstance(tx, Transaction)
        assert tx.tx_hash == "0xabc"
        assert tx.block_number == 19_000_000
        assert tx.chain_id == 1
        assert tx.tags == ("0x01", "0x02")
        query = sent_query(http_session)
        assert "limit: 21, offset: 40" in query
        assert "where:" not in query

    def test_list_transactions_filters(self, client, http_session):
        http_session.post.return_value = make_response(json_body={"data": {"Transaction": []}})
        client.list_transactions(tx_hash="0xAB", chain_id=1, block_min=5, block_max=9)
        assert (
            'where: {evmTransaction: {txHash: {_ilike: "%0xAB%"}, chainId: {_eq: 1}, '
            "blockNumber: {_gte: 5, _lte: 9}}}"
        ) in sent_query(http_session)

    def test_missing_entity_is_empty_list(self, client, http_session):
        http_session.post.return_value = make_response(json_body={"data": {"Transaction": None}})
        assert client.list_transactions() == []

    def test_get_transaction_not_found(self, client, http_session):
        http_session.post.return_value = make_response(json_body={"data": {"Transaction": []}})
        with pytest.raises(RecordNotFoundError) as exc_info:
            client.get_transaction("1_missing_transaction")
        assert exc_info.value.entity == "Transaction"
        assert exc_info.value.record_id == "1_missing_transaction"

    def test_get_escapes_id(self, client, http_session):
        http_session.post.return_value = make_response(json_body={"data": {"Resource": []}})
        with pytest.raises(RecordNotFoundError):
            client.get_resource('x" } evil { "')
        assert '{id: {_eq: "x\\" } evil { \\""}}' in sent_query(http_session)

    def test_list_resources_boolean_filter(self, client, http_session):
        http_session.post.return_value = make_response(
            json_body={"data": {"Resource": [{"id": "r_resource", "isConsumed": False}]}}
        )
        (resource,) = client.list_resources(is_consumed=False, decoding_status="failed")
        assert resource.is_consumed is False
        query = sent_query(http_session)
        assert "isConsumed: {_eq: false}" in query
        assert 'decodingStatus: {_eq: "failed"}' in query

    def test_compliance_logic_ref_matches_either_side(self, client, http_session):
        http_session.post.return_value = make_response(json_body={"data": {"ComplianceUnit": []}})
        client.list_compliance_units(logic_ref="0xab")
        assert "_or: [{consumedLogicRef:" in sent_query(http_session)

    def test_nullifiers_only_consumed_units(self, client, http_session):
        http_session.post.return_value = make_response(json_body={"data": {"ComplianceUnit": []}})
        client.list_nullifiers()
        assert "consumedNullifier: {_is_null: false}" in sent_query(http_session)

    def test_commitments_only_created_units(self, client, http_session):
        http_session.post.return_value = make_response(json_body={"data": {"ComplianceUnit": []}})
        client.list_commitments(commitment="0xc")
        assert 'createdCommitment: {_is_null: false, _ilike: "%0xc%"}' in sent_query(http_session)

    def test_get_stats_counts_consumed_and_created(self, client, http_session):
        http_session.post.return_value = make_response(
            json_body={
                "data": {
                    "transactions": [{"id": "t1"}, {"id": "t2"}],
                    "resources": [
                        {"id": "r1", "isConsumed": True},
                        {"id": "r2", "isConsumed": False},
                        {"id": "r3", "isConsumed": False},
                    ],
                    "actions": [{"id": "a1"}],
                    "compliances": [],
                    "logics": None,
                }
            }
        )
        stats = client.get_stats()
        assert (stats.transactions, stats.resources, stats.consumed, stats.created) == (2, 3, 1, 2)
        assert (stats.actions, stats.compliances, stats.logics) == (1, 0, 0)
