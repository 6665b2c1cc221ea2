# tests/test_query_builder.py
# SPDX-License-Identifier: Apache-2.0
"""Tests for GraphQL literal rendering and `where` construction."""

from __future__ import annotations

import pytest

from anoma_explorer.services.query_builder import Where, escape_like, render_value


class TestRenderValue:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (None, "null"),
            (True, "true"),
            (False, "false"),
            (42, "42"),
            ("0xab", '"0xab"'),
            ('say "hi"', '"say \\"hi\\""'),
            ([1, "a"], '[1, "a"]'),
            ({"a": {"_eq": 1}}, "{a: {_eq: 1}}"),
        ],
    )
    def test_literals(self, value, expected):
        assert render_value(value) == expected

    def test_unsupported_type(self):
        with pytest.raises(TypeError):
            render_value(object())


class TestEscapeLike:
    def test_wildcards_escaped(self):
        assert escape_like("a%b_c") == "a\\%b\\_c"

    def test_backslash_escaped_first(self):
        assert escape_like("a\\b") == "a\\\\b"


class TestWhere:
    def test_empty(self):
        w = Where()
        assert not w
        assert w.render() == ""
        assert w.clause() == ""

    def test_blank_values_ignored(self):
        w = Where().ilike("tag", "  ").eq("chainId", None).eq("status", "").boolean("isConsumed", None)
        assert not w

    def test_same_parent_is_merged(self):
        w = Where().ilike("txHash", "0xab", parent="evmTransaction").eq("chainId", 1, parent="evmTransaction")
        assert w.render() == '{evmTransaction: {txHash: {_ilike: "%0xab%"}, chainId: {_eq: 1}}}'

    def test_between_bounds(self):
        assert Where().between("blockNumber", 10, None).render() == "{blockNumber: {_gte: 10}}"
        assert Where().between("blockNumber", None, 20).render() == "{blockNumber: {_lte: 20}}"
        assert Where().between("blockNumber", None, None).render() == ""

    def test_between_inclusive_range(self):
        assert Where().between("blockNumber", 10, 20).render() == "{blockNumber: {_gte: 10, _lte: 20}}"

    def test_boolean_false_is_kept(self):
        assert Where().boolean("isConsumed", False).render() == "{isConsumed: {_eq: false}}"

    def test_ilike_escapes_and_trims(self):
        assert Where().ilike("tag", " 50% ").render() == '{tag: {_ilike: "%50\\\\%%"}}'

    def test_ilike_any_builds_or_group(self):
        w = Where().ilike_any(["consumedLogicRef", "createdLogicRef"], "0xab")
        assert w.render() == (
            '{_or: [{consumedLogicRef: {_ilike: "%0xab%"}}, {createdLogicRef: {_ilike: "%0xab%"}}]}'
        )

    def test_not_null_combines_with_ilike(self):
        w = Where().not_null("consumedNullifier").ilike("consumedNullifier", "0x1")
        assert w.render() == '{consumedNullifier: {_is_null: false, _ilike: "%0x1%"}}'

    def test_clause_prefix(self):
        assert Where().eq("chainId", 1).clause() == ", where: {chainId: {_eq: 1}}"
