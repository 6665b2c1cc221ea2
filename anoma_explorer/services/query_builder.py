# anoma_explorer/services/query_builder.py
# SPDX-License-Identifier: Apache-2.0
"""Build Hasura-style ``where`` arguments for the Envio GraphQL endpoint.

Filters arrive as plain Python values (``None``/``""`` meaning "no filter")
and are collected into a nested dict that is rendered as a GraphQL input
object literal::

    >>> w = Where().ilike("txHash", "0xab", parent="evmTransaction").eq("chainId", 1)
    >>> w.render()
    '{evmTransaction: {txHash: {_ilike: "%0xab%"}}, chainId: {_eq: 1}}'

Conditions that target the same relation are merged into a single object,
since GraphQL rejects duplicate keys in an input object.
"""

from __future__ import annotations

import json
from typing import Any


def escape_like(value: str) -> str:
    """Escape SQL LIKE wildcards so user input matches literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def render_value(value: Any) -> str:
    """Render a Python value as a GraphQL literal."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        # JSON string escaping is a subset of GraphQL string escaping.
        return json.dumps(value)
    if isinstance(value, dict):
        inner = ", ".join(f"{k}: {render_value(v)}" for k, v in value.items())
        return "{" + inner + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(render_value(v) for v in value) + "]"
    raise TypeError(f"cannot render {type(value).__name__} as a GraphQL literal")


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


class Where:
    """Accumulates filter conditions; blank values are ignored."""

    def __init__(self) -> None:
        self._conditions: dict[str, Any] = {}

    def _target(self, parent: str | None) -> dict[str, Any]:
        if parent is None:
            return self._conditions
        return self._conditions.setdefault(parent, {})

    def _put(self, field: str, ops: dict[str, Any], parent: str | None) -> Where:
        target = self._target(parent)
        target.setdefault(field, {}).update(ops)
        return self

    def ilike(self, field: str, value: str | None, *, parent: str | None = None) -> Where:
        """Case-insensitive substring match."""
        if _is_blank(value):
            return self
        return self._put(field, {"_ilike": f"%{escape_like(str(value).strip())}%"}, parent)

    def eq(self, field: str, value: Any, *, parent: str | None = None) -> Where:
        if _is_blank(value):
            return self
        return self._put(field, {"_eq": value}, parent)

    def boolean(self, field: str, value: bool | None, *, parent: str | None = None) -> Where:
        if value is None:
            return self
        return self._put(field, {"_eq": bool(value)}, parent)

    def between(
        self,
        field: str,
        low: int | None,
        high: int | None,
        *,
        parent: str | None = None,
    ) -> Where:
        """Inclusive range; either bound may be absent."""
        ops: dict[str, Any] = {}
        if low is not None:
            ops["_gte"] = low
        if high is not None:
            ops["_lte"] = high
        if not ops:
            return self
        return self._put(field, ops, parent)

    def not_null(self, field: str) -> Where:
        return self._put(field, {"_is_null": False}, None)

    def ilike_any(self, fields: list[str], value: str | None) -> Where:
        """Substring match against any of `fields` (an ``_or`` group)."""
        if _is_blank(value):
            return self
        pattern = f"%{escape_like(str(value).strip())}%"
        self._conditions.setdefault("_or", []).extend(
            {field: {"_ilike": pattern}} for field in fields
        )
        return self

    def __bool__(self) -> bool:
        return bool(self._conditions)

    def render(self) -> str:
        return render_value(self._conditions) if self._conditions else ""

    def clause(self) -> str:
        """``", where: {...}"`` ready to append to an argument list, or ``""``."""
        return f", where: {self.render()}" if self._conditions else ""
