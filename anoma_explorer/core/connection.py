# anoma_explorer/core/connection.py
# SPDX-License-Identifier: Apache-2.0
"""Indexer reachability: the probe every indexer-backed page runs first,
and the state behind the "configure your indexer" form.

A page asks `should_probe` whether it needs to test the endpoint again (only
when there is no cached result, the cached result was a failure, or the URL
changed), then renders one of three panels from the `ProbeResult` status.

`SetupForm` debounces the URL field: an edited URL is tested automatically
once it has been left alone for `SETUP_DEBOUNCE_SECONDS`, and a test result
that arrives for a URL the operator has since changed is ignored.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from .constants import SETUP_DEBOUNCE_SECONDS

log = logging.getLogger(__name__)

Tester = Callable[[str], tuple[bool, str]]


class ConnectionStatus(str, Enum):
    NOT_CONFIGURED = "not_configured"
    CONNECTION_ERROR = "connection_error"
    READY = "ready"


@dataclass(frozen=True)
class ProbeResult:
    status: ConnectionStatus
    message: str
    url: str | None = None

    @property
    def ready(self) -> bool:
        return self.status is ConnectionStatus.READY


def probe(url: str | None, tester: Tester) -> ProbeResult:
    """Classify the endpoint with a single test; never retries."""
    url = (url or "").strip()
    if not url:
        return ProbeResult(ConnectionStatus.NOT_CONFIGURED, "Indexer endpoint not configured")
    ok, message = tester(url)
    if ok:
        return ProbeResult(ConnectionStatus.READY, message, url)
    log.warning("Indexer probe failed for %s: %s", url, message)
    return ProbeResult(ConnectionStatus.CONNECTION_ERROR, message, url)


def should_probe(previous: ProbeResult | None, url: str | None = None) -> bool:
    """True unless a successful probe of the same URL is already cached."""
    if previous is None or not previous.ready:
        return True
    return url is not None and (url or "").strip() != previous.url


@dataclass
class SetupForm:
    """Debounced URL field of the setup panel (times in seconds)."""

    url_input: str = ""
    edited_at: float | None = None
    tested_url: str | None = None
    status: tuple[bool, str] | None = None

    def edit(self, url: str, now: float) -> None:
        url = url.strip()
        if url == self.url_input:
            return
        self.url_input = url
        self.edited_at = now
        self.tested_url = None
        self.status = None

    @property
    def testing(self) -> bool:
        """An auto-test is pending for the current input."""
        return bool(self.url_input) and self.tested_url != self.url_input

    def due_for_auto_test(self, now: float, debounce: float = SETUP_DEBOUNCE_SECONDS) -> bool:
        if not self.testing or self.edited_at is None:
            return False
        return now - self.edited_at >= debounce

    def record_test(self, url: str, result: tuple[bool, str]) -> bool:
        """Store `result` if `url` is still the current input; report whether it was kept."""
        if url.strip() != self.url_input:
            return False
        self.tested_url = self.url_input
        self.status = result
        return True
