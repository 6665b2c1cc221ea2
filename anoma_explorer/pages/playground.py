# anoma_explorer/pages/playground.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Streamlit page: GraphQL Playground

Purpose
-------
Run ad-hoc queries against the configured indexer. A template picker fills
the editor; the response is shown as formatted JSON with a table of the
values that link back into the explorer (records, transaction searches,
blocks on a chain explorer).

Design Notes
------------
- Queries go through `IndexerClient.execute_raw`, so GraphQL `errors` are part
  of the shown document rather than an exception. Transport failures appear
  inline above the editor.
- The editor content is owned by the text area's session key; picking a
  template overwrites it.
"""

from typing import Final

import streamlit as st

from ..services.playground import (
    DEFAULT_TEMPLATE,
    TEMPLATES,
    PlaygroundResult,
    run_query,
    template_query,
)
from ..ui.indexer_status import require_indexer
from ..ui.keys import k
from ..ui.layout import page_header

PAGE: Final[str] = "playground"
_QUERY: Final[str] = k(PAGE, "query")
_RESULT: Final[str] = k(PAGE, "result")


def _load_template() -> None:
    st.session_state[_QUERY] = template_query(st.session_state.get(k(PAGE, "template")))


def _show(result: PlaygroundResult) -> None:
    if result.error:
        st.error(result.error)
        return
    errors = result.graphql_errors
    if errors:
        st.warning(f"The query returned {len(errors)} GraphQL error(s).")
    if result.links:
        st.subheader("Links")
        st.dataframe(
            [
                {
                    "Path": link.path,
                    "Value": link.value,
                    "Open": link.url,
                    "Target": "Block explorer" if link.external else "Explorer",
                }
                for link in result.links
            ],
            column_config={"Open": st.column_config.LinkColumn("Open", display_text="Open")},
            hide_index=True,
            use_container_width=True,
        )
    st.subheader("Response")
    st.code(result.text, language="json")


def render(ctx: dict) -> None:
    """Render the Playground page."""
    page_header("GraphQL Playground", "Query the Envio indexer directly.")
    if not require_indexer(ctx):
        return

    keys = list(TEMPLATES)
    st.session_state.setdefault(_QUERY, template_query(DEFAULT_TEMPLATE))
    st.selectbox(
        "Template",
        keys,
        index=keys.index(DEFAULT_TEMPLATE),
        format_func=lambda key: TEMPLATES[key].label,
        key=k(PAGE, "template"),
        on_change=_load_template,
    )
    query = st.text_area("Query", key=_QUERY, height=320)

    run_col, clear_col, _ = st.columns([1, 1, 4])
    if run_col.button("Run query", key=k(PAGE, "run"), type="primary", use_container_width=True):
        with st.spinner("Running query…"):
            st.session_state[_RESULT] = run_query(ctx["client"], query)
    if clear_col.button("Clear result", key=k(PAGE, "clear"), use_container_width=True):
        st.session_state.pop(_RESULT, None)

    result: PlaygroundResult | None = st.session_state.get(_RESULT)
    if result is not None:
        _show(result)
