# anoma_explorer/app.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

__doc__ = """Anoma Explorer (Streamlit).

This module is the Streamlit entrypoint for the explorer. It wires up the
global page chrome, the left sidebar (search, indexer endpoint, admin gate)
and the page navigation.

Pages (navigation order):
  Explorer
    1) Dashboard     — Stats plus the most recent transactions, auto-refreshed.
    2) Transactions  — Filterable list and `?id=` detail (also the search target).
    3) Actions       — Actions with their compliance units and logic inputs.
    4) Resources     — Consumed / created resources and decoded payloads.
    5) Compliances   — Compliance units linking consumed and created resources.
    6) Logics        — Logic inputs per resource.
    7) Nullifiers    — Nullifiers emitted by consumed resources.
    8) Commitments   — Created commitments and commitment tree roots.
  Tools
    9) Playground    — Ad-hoc GraphQL against the indexer.
  Settings
   10) Indexer       — Envio GraphQL endpoint.
   11) Networks      — Known chains.
   12) Contracts     — Protocols and deployed addresses.

Design notes:
* Run with `streamlit run anoma_explorer/app.py`. Streamlit executes this file
  as a script, so the repository root is put on sys.path and the package is
  imported by its absolute name.
* The sidebar returns a dictionary ("ctx") that every page's `render(ctx)`
  receives. It is filled before `nav.run()` so pages always see it.
* Each page records itself with `core.state.enter_view` before rendering;
  switching pages drops what the previous page fetched, so coming back to a
  list starts from page 1 with fresh rows.
* Keep this file intentionally thin. Indexer access belongs to services/*,
  per-page UI to pages/*.
"""

# ────────────────────── sys.path bootstrap for local packages ─────────────────
import pathlib
import sys

ROOT_DIR = pathlib.Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))
# ──────────────────────────────────────────────────────────────────────────────

from types import ModuleType

import streamlit as st

from anoma_explorer.core import state as session
from anoma_explorer.pages import (
    actions,
    commitments,
    compliances,
    contracts,
    dashboard,
    indexer,
    logics,
    networks,
    nullifiers,
    playground,
    resources,
    transactions,
)
from anoma_explorer.ui.layout import configure_page
from anoma_explorer.ui.sidebar import render_sidebar_and_status

# ─────────────────────────────── Page chrome ──────────────────────────────────
configure_page()

ctx: dict = {}


def _page(module: ModuleType, title: str, url_path: str, **kwargs) -> st.Page:
    """Wrap `module.render(ctx)` as a navigation page."""

    def _render() -> None:
        session.enter_view(url_path)
        module.render(ctx)

    _render.__name__ = f"render_{url_path}"
    return st.Page(_render, title=title, url_path=url_path, **kwargs)


# ─────────────────────────────── Navigation ───────────────────────────────────
dashboard_page = _page(dashboard, "Dashboard", "dashboard", icon="📊", default=True)
transactions_page = _page(transactions, "Transactions", "transactions", icon="🧾")

PAGES: dict[str, list[st.Page]] = {
    "Explorer": [
        dashboard_page,
        transactions_page,
        _page(actions, "Actions", "actions", icon="⚙️"),
        _page(resources, "Resources", "resources", icon="📦"),
        _page(compliances, "Compliances", "compliances", icon="✅"),
        _page(logics, "Logics", "logics", icon="🧩"),
        _page(nullifiers, "Nullifiers", "nullifiers", icon="🚫"),
        _page(commitments, "Commitments", "commitments", icon="🌳"),
    ],
    "Tools": [_page(playground, "Playground", "playground", icon="🧪")],
    "Settings": [
        _page(indexer, "Indexer", "indexer", icon="🔌"),
        _page(networks, "Networks", "networks", icon="🌐"),
        _page(contracts, "Contracts", "contracts", icon="📜"),
    ],
}

nav = st.navigation(PAGES)

# The sidebar is drawn for every page; its search box targets Transactions.
ctx.update(render_sidebar_and_status(transactions_page))

nav.run()

# End of file.
