# anoma_explorer/services/admin_auth.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Advisory admin gate for settings mutations.

When `ADMIN_SECRET_KEY` is set, edit/delete actions on the settings pages are
wrapped in `AdminGate.require_admin`. An operator unlocks the gate by typing
the shared secret; the unlock lasts `ADMIN_TIMEOUT_MINUTES` and is kept in
that browser session's `st.session_state` only. The Streamlit session is
the client session here: a page reload opens a new one, so the gate locks
again, the same as any other per-session UI state.

Design notes
------------
- `AdminGate` holds configuration (secret, lifetime, clock) and is shared by
  every session. `AdminState` is the per-session part and is mutated in
  place, the way Streamlit pages mutate their session state.
- Time is integer milliseconds since the epoch. The clock is injectable so
  tests can move time without sleeping.
- The gate is advisory: it stops accidental edits from the UI, nothing more.

Security
--------
- `verify_secret` compares with `hmac.compare_digest` (constant time).
- The secret never appears in logs, state or error messages.
"""

import hmac
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar

from ..core.constants import ADMIN_EXPIRY_MARGIN_MS, ADMIN_MAX_CHECK_INTERVAL_MS

log = logging.getLogger(__name__)

T = TypeVar("T")

INVALID_SECRET = "Invalid secret key"
SESSION_EXPIRED = "Admin session expired"
ACCESS_REVOKED = "Admin access revoked"


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class AdminState:
    """Per-session authorization state."""

    authorized: bool = False
    authorized_at: int | None = None
    show_unlock: bool = False
    error: str | None = None


@dataclass(frozen=True)
class ExpiryCheck:
    """Result of `AdminGate.check_expiration`.

    `expired` is True only on the transition from authorized to expired;
    `next_check_ms` is when to look again (None once there is nothing to
    watch).
    """

    expired: bool
    next_check_ms: int | None


class AdminGate:
    def __init__(self, secret: str | None, timeout_ms: int, clock: Callable[[], int] = now_ms):
        self._secret = secret or ""
        self.timeout_ms = timeout_ms
        self._clock = clock

    @property
    def enabled(self) -> bool:
        return bool(self._secret)

    @property
    def timeout_minutes(self) -> int:
        return self.timeout_ms // 60_000

    def authorized(self, authorized_at: int | None, now: int | None = None) -> bool:
        """True while `authorized_at` is set and younger than the timeout."""
        if authorized_at is None:
            return False
        now = self._clock() if now is None else now
        return authorized_at + self.timeout_ms > now

    def is_allowed(self, state: AdminState) -> bool:
        """Whether a gated action may run right now for this session."""
        if not self.enabled:
            return True
        return state.authorized and self.authorized(state.authorized_at)

    def verify_secret(self, key: str | None) -> bool:
        if not self.enabled or not isinstance(key, str):
            return False
        return hmac.compare_digest(key.encode(), self._secret.encode())

    # -- state transitions -----------------------------------------------

    def open_unlock(self, state: AdminState) -> None:
        state.show_unlock = True
        state.error = None

    def close_unlock(self, state: AdminState) -> None:
        state.show_unlock = False
        state.error = None

    def unlock(self, state: AdminState, key: str | None) -> bool:
        """Try `key`; on success start a fresh authorization window."""
        if not self.verify_secret(key):
            log.info("Admin unlock rejected")
            state.error = INVALID_SECRET
            return False
        state.authorized = True
        state.authorized_at = self._clock()
        state.show_unlock = False
        state.error = None
        log.info("Admin access granted for %d minutes", self.timeout_minutes)
        return True

    def logout(self, state: AdminState) -> None:
        state.authorized = False
        state.authorized_at = None
        log.info("Admin access revoked")

    def next_check_in(self, authorized_at: int | None, now: int | None = None) -> int | None:
        """Delay until the next expiry check: remaining + margin, capped at a minute."""
        if authorized_at is None:
            return None
        now = self._clock() if now is None else now
        remaining = authorized_at + self.timeout_ms - now
        if remaining <= 0:
            return None
        return min(remaining + ADMIN_EXPIRY_MARGIN_MS, ADMIN_MAX_CHECK_INTERVAL_MS)

    def check_expiration(self, state: AdminState) -> ExpiryCheck:
        """Drop an expired authorization and say when to check again."""
        if not state.authorized:
            return ExpiryCheck(expired=False, next_check_ms=None)
        now = self._clock()
        if self.authorized(state.authorized_at, now):
            return ExpiryCheck(expired=False, next_check_ms=self.next_check_in(state.authorized_at, now))
        state.authorized = False
        state.authorized_at = None
        log.info("Admin session expired")
        return ExpiryCheck(expired=True, next_check_ms=None)

    def require_admin(self, state: AdminState, action: Callable[[], T]) -> T | None:
        """Run `action` if allowed; otherwise raise the unlock prompt and return None."""
        if self.is_allowed(state):
            return action()
        self.open_unlock(state)
        return None
