# anoma_explorer/core/errors.py
# SPDX-License-Identifier: Apache-2.0
"""Exception hierarchy for indexer queries and settings mutations.

Every failure the explorer can surface to an operator maps onto one of these
types. Services raise them; pages catch them at the render boundary and turn
them into an inline message via :func:`core.formatting.format_error`.
"""

from __future__ import annotations

from typing import Any


class IndexerError(Exception):
    """Base exception for anything that goes wrong talking to the indexer."""


class NotConfiguredError(IndexerError):
    """No GraphQL endpoint URL is configured."""

    def __init__(self) -> None:
        super().__init__("Indexer endpoint not configured")


class IndexerConnectionError(IndexerError):
    """The endpoint is set but could not be reached."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Connection failed: {reason}")


class IndexerTimeoutError(IndexerError):
    """A request (or a joined group of requests) ran past its deadline."""

    def __init__(self, seconds: float):
        self.seconds = seconds
        super().__init__(f"Request timed out after {seconds:g}s")


class IndexerHTTPError(IndexerError):
    """The endpoint answered with a non-200 status."""

    def __init__(self, status_code: int, body: str = ""):
        self.status_code = status_code
        self.body = body
        super().__init__(f"HTTP {status_code}")


class IndexerDecodeError(IndexerError):
    """The response body was not valid JSON (or not a JSON object)."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid response format: {reason}")


class GraphQLQueryError(IndexerError):
    """The endpoint returned an ``errors`` array instead of ``data``."""

    def __init__(self, errors: list[Any]):
        self.errors = errors
        messages = [e.get("message", str(e)) if isinstance(e, dict) else str(e) for e in errors]
        super().__init__("; ".join(messages) or "unknown GraphQL error")


class RecordNotFoundError(IndexerError):
    """A detail lookup by id returned nothing."""

    def __init__(self, entity: str, record_id: str):
        self.entity = entity
        self.record_id = record_id
        super().__init__(f"{entity} {record_id!r} not found")


class SettingsError(Exception):
    """Base exception for settings-store failures."""


class SettingsValidationError(SettingsError):
    """A create/update was rejected.

    Attributes:
        errors: Mapping of field name to a list of human-readable messages.
    """

    def __init__(self, errors: dict[str, list[str]]):
        self.errors = errors
        flat = ", ".join(f"{field} {msg}" for field, msgs in errors.items() for msg in msgs)
        super().__init__(flat)


class SettingsNotFoundError(SettingsError):
    """The row targeted by an update/delete does not exist."""

    def __init__(self, entity: str, key: Any):
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} {key!r} not found")
