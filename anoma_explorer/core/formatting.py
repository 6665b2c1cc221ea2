# anoma_explorer/core/formatting.py
# SPDX-License-Identifier: Apache-2.0
"""Pure formatting helpers for hashes, numbers, timestamps and errors.

Nothing here touches Streamlit, the network or the clock (except when a
caller omits `now`), so every function can be exercised directly in tests.
Missing values render as ``"-"`` unless a function documents otherwise.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from .errors import (
    GraphQLQueryError,
    IndexerConnectionError,
    IndexerDecodeError,
    IndexerHTTPError,
    IndexerTimeoutError,
    NotConfiguredError,
    RecordNotFoundError,
    SettingsValidationError,
)

PLACEHOLDER = "-"

# How many characters to keep on each side of an elided hash.
_HASH_PREFIX = 10
_HASH_SUFFIX = 8
_ELLIPSIS = "..."

_WEI_PER_GWEI = 10**9
_WEI_PER_ETH = 10**18


def truncate_hash(
    value: str | None, *, prefix: int = _HASH_PREFIX, suffix: int = _HASH_SUFFIX
) -> str:
    """Return a fixed-width ``prefix...suffix`` form of a long hex string.

    Examples:
      "0x1234567890abcdef...90abcdef" for a 66-char hash.

    Strings that would not get shorter are returned unchanged, which makes the
    function idempotent on its own output.
    """
    if value is None or value == "":
        return PLACEHOLDER
    value = str(value)
    if len(value) <= prefix + suffix + len(_ELLIPSIS):
        return value
    return f"{value[:prefix]}{_ELLIPSIS}{value[-suffix:]}"


def truncate_value(value: Any, max_length: int = 50) -> str | None:
    """Middle-elide long text fields (raw blobs, proofs)."""
    if value is None:
        return None
    text = str(value)
    if len(text) <= max_length:
        return text
    half = (max_length - len(_ELLIPSIS)) // 2
    return f"{text[:half]}{_ELLIPSIS}{text[-half:]}"


def format_number(n: Any) -> str:
    """Format an integer with thousands separators."""
    if n is None:
        return PLACEHOLDER
    if isinstance(n, bool):
        return str(n)
    if isinstance(n, int):
        return f"{n:,}"
    return str(n)


def _to_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def _from_unix(ts: Any) -> datetime | None:
    seconds = _to_int(ts)
    if seconds is None:
        return None
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def format_relative(dt: datetime, now: datetime | None = None) -> str:
    """Format a datetime as "5s ago", "3m 12s ago", "2h 5m ago", "4d 1h ago"."""
    now = now or datetime.now(timezone.utc)
    diff = int((now - dt).total_seconds())
    if diff < 0:
        return "in the future"
    if diff < 60:
        return f"{diff}s ago"
    if diff < 3600:
        return f"{diff // 60}m {diff % 60}s ago"
    if diff < 86_400:
        return f"{diff // 3600}h {(diff % 3600) // 60}m ago"
    return f"{diff // 86_400}d {(diff % 86_400) // 3600}h ago"


def format_timestamp(ts: Any, now: datetime | None = None) -> str:
    """Unix seconds → relative text."""
    dt = _from_unix(ts)
    if dt is None:
        return PLACEHOLDER
    return format_relative(dt, now)


def format_timestamp_full(ts: Any) -> str:
    """Unix seconds → ``YYYY-MM-DD HH:MM:SS UTC``."""
    dt = _from_unix(ts)
    if dt is None:
        return PLACEHOLDER
    return dt.strftime("%Y-%m-%d %H:%M:%S UTC")


def format_time(dt: datetime | None) -> str:
    if dt is None:
        return PLACEHOLDER
    return dt.strftime("%H:%M:%S")


def format_gwei(wei: Any) -> str:
    """Wei → "N.NN Gwei" (gas price display)."""
    amount = _to_int(wei)
    if amount is None:
        return PLACEHOLDER
    return f"{round(amount / _WEI_PER_GWEI, 2)} Gwei"


def format_eth(wei: Any) -> str:
    """Wei → "N.NNNNNN ETH" (value display)."""
    amount = _to_int(wei)
    if amount is None:
        return PLACEHOLDER
    return f"{round(amount / _WEI_PER_ETH, 6)} ETH"


def format_tx_fee(gas_used: Any, gas_price: Any) -> str:
    """gasUsed × gasPrice, shown in ETH."""
    used = _to_int(gas_used)
    price = _to_int(gas_price)
    if used is None or price is None:
        return PLACEHOLDER
    return format_eth(used * price)


def format_bool(value: bool | None) -> str | None:
    if value is None:
        return None
    return "Yes" if value else "No"


def format_status(is_consumed: bool | None) -> str:
    """Resource side: "Consumed", "Created", or the placeholder when unknown."""
    if is_consumed is None:
        return PLACEHOLDER
    return "Consumed" if is_consumed else "Created"


def format_error(exc: BaseException | None) -> str:
    """Map an exception from the service layer to an operator-facing message."""
    if exc is None:
        return ""
    if isinstance(exc, NotConfiguredError):
        return "Indexer endpoint not configured"
    if isinstance(exc, IndexerConnectionError):
        return "Failed to connect to indexer"
    if isinstance(exc, IndexerHTTPError):
        return f"HTTP error: {exc.status_code}"
    if isinstance(exc, IndexerTimeoutError):
        return "Indexer request timed out"
    if isinstance(exc, GraphQLQueryError):
        return f"GraphQL error: {exc}"
    if isinstance(exc, IndexerDecodeError):
        return f"Invalid response from indexer: {exc.reason}"
    if isinstance(exc, RecordNotFoundError):
        return f"{exc.entity} not found"
    if isinstance(exc, SettingsValidationError):
        return f"Invalid input: {exc}"
    return f"Error: {exc!r}"
