# tests/test_admin_auth.py
# SPDX-License-Identifier: Apache-2.0
"""Tests for the admin gate: unlock, expiry and gated actions."""

from __future__ import annotations

from unittest.mock import Mock

import pytest

from anoma_explorer.core.constants import ADMIN_EXPIRY_MARGIN_MS, ADMIN_MAX_CHECK_INTERVAL_MS
from anoma_explorer.services.admin_auth import INVALID_SECRET, AdminGate, AdminState

TIMEOUT_MS = 30 * 60 * 1000


class FakeClock:
    def __init__(self, start: int = 1_700_000_000_000):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def gate(clock: FakeClock) -> AdminGate:
    return AdminGate("s3cret", TIMEOUT_MS, clock=clock)


class TestDisabledGate:
    @pytest.mark.parametrize("secret", [None, ""])
    def test_everything_allowed(self, secret):
        gate = AdminGate(secret, TIMEOUT_MS)
        assert gate.enabled is False
        assert gate.is_allowed(AdminState()) is True

    def test_no_secret_verifies(self):
        assert AdminGate(None, TIMEOUT_MS).verify_secret("") is False


class TestUnlock:
    def test_wrong_secret(self, gate):
        state = AdminState(show_unlock=True)
        assert gate.unlock(state, "nope") is False
        assert state.authorized is False
        assert state.error == INVALID_SECRET
        assert state.show_unlock is True

    def test_correct_secret(self, gate, clock):
        state = AdminState(show_unlock=True, error=INVALID_SECRET)
        assert gate.unlock(state, "s3cret") is True
        assert state.authorized is True
        assert state.authorized_at == clock.now
        assert state.show_unlock is False
        assert state.error is None
        assert gate.is_allowed(state) is True

    def test_non_string_secret(self, gate):
        assert gate.verify_secret(None) is False

    def test_logout(self, gate):
        state = AdminState()
        gate.unlock(state, "s3cret")
        gate.logout(state)
        assert state.authorized is False
        assert state.authorized_at is None
        assert gate.is_allowed(state) is False

    def test_open_and_close_prompt(self, gate):
        state = AdminState(error="old")
        gate.open_unlock(state)
        assert (state.show_unlock, state.error) == (True, None)
        gate.close_unlock(state)
        assert state.show_unlock is False


class TestExpiry:
    def test_allowed_until_timeout(self, gate, clock):
        state = AdminState()
        gate.unlock(state, "s3cret")
        clock.advance(TIMEOUT_MS - 1)
        assert gate.is_allowed(state) is True
        clock.advance(1)
        assert gate.is_allowed(state) is False

    def test_check_expiration_reports_transition_once(self, gate, clock):
        state = AdminState()
        gate.unlock(state, "s3cret")
        clock.advance(TIMEOUT_MS)
        first = gate.check_expiration(state)
        assert first.expired is True
        assert state.authorized is False
        second = gate.check_expiration(state)
        assert second.expired is False
        assert second.next_check_ms is None

    def test_next_check_is_capped(self, gate, clock):
        state = AdminState()
        gate.unlock(state, "s3cret")
        check = gate.check_expiration(state)
        assert check.expired is False
        assert check.next_check_ms == ADMIN_MAX_CHECK_INTERVAL_MS

    def test_next_check_close_to_expiry(self, gate, clock):
        authorized_at = clock.now
        clock.advance(TIMEOUT_MS - 500)
        assert gate.next_check_in(authorized_at) == 500 + ADMIN_EXPIRY_MARGIN_MS
        clock.advance(500)
        assert gate.next_check_in(authorized_at) is None

    def test_timeout_minutes(self, gate):
        assert gate.timeout_minutes == 30


class TestRequireAdmin:
    def test_runs_action_when_allowed(self, gate):
        state = AdminState()
        gate.unlock(state, "s3cret")
        action = Mock(return_value="done")
        assert gate.require_admin(state, action) == "done"
        action.assert_called_once_with()

    def test_refused_action_opens_prompt(self, gate):
        state = AdminState()
        action = Mock()
        assert gate.require_admin(state, action) is None
        action.assert_not_called()
        assert state.show_unlock is True

    def test_expired_session_is_refused(self, gate, clock):
        state = AdminState()
        gate.unlock(state, "s3cret")
        clock.advance(TIMEOUT_MS + 1)
        action = Mock()
        assert gate.require_admin(state, action) is None
        action.assert_not_called()


def test_authorized_boundaries(gate, clock):
    now = clock.now
    assert gate.authorized(now - 1, now) is True
    assert gate.authorized(now - TIMEOUT_MS - 1, now) is False
    assert gate.authorized(now - TIMEOUT_MS, now) is False
    assert gate.authorized(None, now) is False
