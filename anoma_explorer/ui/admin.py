# anoma_explorer/ui/admin.py
# SPDX-License-Identifier: Apache-2.0
"""Sidebar controls and page guards for the admin gate.

The gate itself (`services.admin_auth.AdminGate`) is UI-free; this module
draws the unlock form, the logout button and the expiry timer, and offers
`gated()` for pages that wrap a mutation.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TypeVar

import streamlit as st

from ..core import state as session
from ..services.admin_auth import ACCESS_REVOKED, SESSION_EXPIRED, AdminGate, AdminState
from .keys import k

log = logging.getLogger(__name__)

T = TypeVar("T")


def render_admin_controls(gate: AdminGate, state: AdminState) -> None:
    """Status line plus unlock / logout controls (sidebar)."""
    if not gate.enabled:
        st.sidebar.caption("Admin gate disabled (no ADMIN_SECRET_KEY)")
        return

    if gate.is_allowed(state):
        remaining = gate.next_check_in(state.authorized_at)
        st.sidebar.success("Admin unlocked")
        if st.sidebar.button("Lock admin", key=k("admin", "logout"), use_container_width=True):
            gate.logout(state)
            session.flash(ACCESS_REVOKED)
            st.rerun()
        if remaining is not None:
            _expiry_timer(gate, state, remaining)
        return

    if not state.show_unlock:
        if st.sidebar.button("Unlock admin", key=k("admin", "open"), use_container_width=True):
            gate.open_unlock(state)
            st.rerun()
        return

    with st.sidebar.form(key=k("admin", "unlock")):
        st.markdown("**Unlock admin**")
        st.caption("Admin access is required to change settings.")
        secret = st.text_input("Secret key", type="password", key=k("admin", "secret"))
        unlock_col, cancel_col = st.columns(2)
        submitted = unlock_col.form_submit_button("Unlock", type="primary")
        cancelled = cancel_col.form_submit_button("Cancel")
    if state.error:
        st.sidebar.error(state.error)
    if cancelled:
        gate.close_unlock(state)
        st.rerun()
    if submitted and gate.unlock(state, secret):
        session.flash(f"Admin access granted for {gate.timeout_minutes} minutes")
        st.rerun()


def _expiry_timer(gate: AdminGate, state: AdminState, delay_ms: int) -> None:
    """Re-check expiry after `delay_ms`; rerun the app once it has passed."""

    @st.fragment(run_every=delay_ms / 1000)
    def _check() -> None:
        check = gate.check_expiration(state)
        if check.expired:
            session.flash(SESSION_EXPIRED)
            st.rerun(scope="app")

    _check()


def gated(gate: AdminGate, state: AdminState, action: Callable[[], T]) -> T | None:
    """Run `action` through the gate; when refused, rerun so the sidebar shows the unlock form."""
    if gate.is_allowed(state):
        return action()
    gate.require_admin(state, action)
    log.info("Gated action refused; prompting for admin unlock")
    st.rerun()
    return None
