# tests/test_formatting.py
# SPDX-License-Identifier: Apache-2.0
"""Unit tests for the display helpers in core.formatting."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from anoma_explorer.core.errors import (
    GraphQLQueryError,
    IndexerConnectionError,
    IndexerDecodeError,
    IndexerHTTPError,
    IndexerTimeoutError,
    NotConfiguredError,
    RecordNotFoundError,
    SettingsValidationError,
)
from anoma_explorer.core.formatting import (
    format_bool,
    format_error,
    format_eth,
    format_gwei,
    format_number,
    format_relative,
    format_status,
    format_time,
    format_timestamp,
    format_timestamp_full,
    format_tx_fee,
    truncate_hash,
    truncate_value,
)

TX_HASH = "0x" + "ab" * 32
NOW = datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class TestTruncateHash:
    def test_long_hash_keeps_prefix_and_suffix(self):
        out = truncate_hash(TX_HASH)
        assert out == TX_HASH[:10] + "..." + TX_HASH[-8:]
        assert len(out) == 21

    def test_short_value_unchanged(self):
        assert truncate_hash("0x1234") == "0x1234"

    def test_missing_values_render_placeholder(self):
        assert truncate_hash(None) == "-"
        assert truncate_hash("") == "-"

    def test_idempotent(self):
        once = truncate_hash(TX_HASH)
        assert truncate_hash(once) == once

    def test_custom_widths(self):
        assert truncate_hash(TX_HASH, prefix=4, suffix=4) == "0xab...abab"


class TestTruncateValue:
    def test_none(self):
        assert truncate_value(None) is None

    def test_within_limit(self):
        assert truncate_value("abc", 10) == "abc"

    def test_middle_elided(self):
        out = truncate_value("a" * 30 + "b" * 30, 13)
        assert out == "aaaaa...bbbbb"


class TestNumbers:
    @pytest.mark.parametrize(
        "value, expected",
        [(None, "-"), (0, "0"), (1234567, "1,234,567"), ("12", "12"), (True, "True")],
    )
    def test_format_number(self, value, expected):
        assert format_number(value) == expected

    def test_gwei(self):
        assert format_gwei(1_500_000_000) == "1.5 Gwei"
        assert format_gwei("2000000000") == "2.0 Gwei"
        assert format_gwei(None) == "-"

    def test_eth(self):
        assert format_eth(10**18) == "1.0 ETH"
        assert format_eth("not-a-number") == "-"

    def test_tx_fee(self):
        assert format_tx_fee(21_000, 50 * 10**9) == "0.00105 ETH"
        assert format_tx_fee(None, 1) == "-"
        assert format_tx_fee(21_000, None) == "-"


class TestTimes:
    @pytest.mark.parametrize(
        "delta, expected",
        [
            (timedelta(seconds=5), "5s ago"),
            (timedelta(minutes=3, seconds=12), "3m 12s ago"),
            (timedelta(hours=2, minutes=5), "2h 5m ago"),
            (timedelta(days=4, hours=1), "4d 1h ago"),
        ],
    )
    def test_relative(self, delta, expected):
        assert format_relative(NOW - delta, NOW) == expected

    def test_future(self):
        assert format_relative(NOW + timedelta(seconds=1), NOW) == "in the future"

    def test_timestamp_accepts_string_seconds(self):
        ts = str(int((NOW - timedelta(seconds=30)).timestamp()))
        assert format_timestamp(ts, NOW) == "30s ago"

    def test_timestamp_missing(self):
        assert format_timestamp(None, NOW) == "-"
        assert format_timestamp("soon", NOW) == "-"

    def test_timestamp_full(self):
        assert format_timestamp_full(0) == "1970-01-01 00:00:00 UTC"
        assert format_timestamp_full(None) == "-"

    def test_time_of_day(self):
        assert format_time(NOW) == "12:00:00"
        assert format_time(None) == "-"


class TestBoolAndErrors:
    def test_format_bool(self):
        assert format_bool(True) == "Yes"
        assert format_bool(False) == "No"
        assert format_bool(None) is None

    @pytest.mark.parametrize("value, expected", [(True, "Consumed"), (False, "Created"), (None, "-")])
    def test_format_status(self, value, expected):
        assert format_status(value) == expected

    @pytest.mark.parametrize(
        "exc, expected",
        [
            (NotConfiguredError(), "Indexer endpoint not configured"),
            (IndexerConnectionError("refused"), "Failed to connect to indexer"),
            (IndexerHTTPError(502, "bad gateway"), "HTTP error: 502"),
            (IndexerTimeoutError(15), "Indexer request timed out"),
            (GraphQLQueryError([{"message": "field not found"}]), "GraphQL error: field not found"),
            (IndexerDecodeError("expected a JSON object"), "Invalid response from indexer: expected a JSON object"),
            (RecordNotFoundError("Resource", "1_r"), "Resource not found"),
            (SettingsValidationError({"name": ["can't be blank"]}), "Invalid input: name can't be blank"),
        ],
    )
    def test_format_error(self, exc, expected):
        assert format_error(exc) == expected

    def test_format_error_unknown(self):
        assert format_error(RuntimeError("boom")) == "Error: RuntimeError('boom')"
        assert format_error(None) == ""
