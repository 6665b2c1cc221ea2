# tests/test_playground.py
# SPDX-License-Identifier: Apache-2.0
"""Playground templates, query execution and link extraction."""

from __future__ import annotations

from unittest.mock import Mock

import pytest

from anoma_explorer.core.errors import IndexerConnectionError, IndexerHTTPError
from anoma_explorer.services.playground import (
    DEFAULT_TEMPLATE,
    TEMPLATES,
    ResultLink,
    extract_links,
    id_link,
    run_query,
    template_query,
)


class TestTemplates:
    def test_every_template_is_a_query(self):
        for template in TEMPLATES.values():
            assert template.query.startswith("query {\n")
            assert template.query.rstrip().endswith("}")

    def test_unknown_key_falls_back_to_default(self):
        assert template_query("nope") == TEMPLATES[DEFAULT_TEMPLATE].query
        assert template_query(None) == TEMPLATES[DEFAULT_TEMPLATE].query


class TestLinks:
    @pytest.mark.parametrize(
        "record_id, expected",
        [
            ("1_0xabc_transaction", "transactions?id=1_0xabc_transaction"),
            ("1_0xabc_0_resource", "resources?id=1_0xabc_0_resource"),
            ("a_action", "actions?id=a_action"),
            ("c_compliance", "compliances?id=c_compliance"),
            ("l_logic", "logics?id=l_logic"),
            ("1_0xabc", None),
        ],
    )
    def test_id_link(self, record_id, expected):
        assert id_link(record_id) == expected

    def test_extract_from_nested_document(self):
        doc = {
            "data": {
                "Transaction": [
                    {
                        "id": "1_0xabc_transaction",
                        "evmTransaction": {"txHash": "0xabc", "chainId": 1, "blockNumber": 100},
                    }
                ]
            }
        }
        assert extract_links(doc) == [
            ResultLink(
                "data.Transaction[0].evmTransaction.blockNumber",
                "blockNumber",
                "100",
                "https://etherscan.io/block/100",
                external=True,
            ),
            ResultLink(
                "data.Transaction[0].evmTransaction.txHash",
                "txHash",
                "0xabc",
                "transactions?search=0xabc",
            ),
            ResultLink("data.Transaction[0].id", "id", "1_0xabc_transaction", "transactions?id=1_0xabc_transaction"),
        ]

    def test_chain_is_inherited_by_nested_objects(self):
        doc = {"chainId": "8453", "tx": {"txHash": "0xdef"}}
        (link,) = extract_links(doc)
        assert link.url == "transactions?search=0xdef"

    def test_hash_without_chain_is_not_linked(self):
        assert extract_links({"txHash": "0xdef", "blockNumber": 5}) == []


class TestRunQuery:
    def test_empty_query(self):
        client = Mock()
        assert run_query(client, "   ").error == "Query is empty"
        client.execute_raw.assert_not_called()

    def test_success_with_graphql_errors(self):
        doc = {"data": None, "errors": [{"message": "bad field"}]}
        result = run_query(Mock(execute_raw=Mock(return_value=doc)), "{ x }")
        assert result.error is None
        assert result.graphql_errors == [{"message": "bad field"}]
        assert '"errors"' in result.text

    def test_success_collects_links(self):
        doc = {"data": {"Action": [{"id": "a_action"}]}}
        result = run_query(Mock(execute_raw=Mock(return_value=doc)), "{ Action { id } }")
        assert [link.url for link in result.links] == ["actions?id=a_action"]
        assert result.graphql_errors == []

    def test_http_error_shows_status_and_body(self):
        client = Mock(execute_raw=Mock(side_effect=IndexerHTTPError(400, "query parse error")))
        result = run_query(client, "{ x }")
        assert result.error == "HTTP error 400: query parse error"
        assert result.text == ""

    def test_transport_error(self):
        client = Mock(execute_raw=Mock(side_effect=IndexerConnectionError("refused")))
        assert run_query(client, "{ x }").error == "Failed to connect to indexer"
