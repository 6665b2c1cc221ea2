# anoma_explorer/ui/layout.py
# SPDX-License-Identifier: Apache-2.0
"""Layout helpers shared by every page.

- `configure_page`: browser title, wide layout and app icon. Must run before
  any other element, so the entrypoint calls it first.
- `page_header`: the per-page H1 with an optional caption.
- `detail_header`: heading plus a "Back to list" button for `?id=` views.
"""

from __future__ import annotations

import streamlit as st

APP_TITLE = "Anoma Explorer"


def configure_page(title: str = APP_TITLE) -> None:
    """Configure global Streamlit page options (call once, first)."""
    st.set_page_config(page_title=title, page_icon="🔎", layout="wide")


def page_header(title: str, caption: str | None = None) -> None:
    st.title(title)
    if caption:
        st.caption(caption)


def detail_header(title: str, page: str, list_label: str) -> None:
    """Heading for a detail view with a button back to its list."""
    if st.button(f"← Back to {list_label}", key=f"{page}:back"):
        # Dropping ?id= switches the page back to list mode.
        st.query_params.clear()
        st.rerun()
    st.title(title)
