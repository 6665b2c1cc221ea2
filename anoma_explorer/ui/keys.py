# anoma_explorer/ui/keys.py
# SPDX-License-Identifier: Apache-2.0
"""Centralized helpers for Streamlit widget and session-state keys.

Every list page has the same widgets (filter inputs, Apply/Clear, Prev/Next),
so keys must be namespaced by page or they collide and raise
`StreamlitDuplicateElementId`. Filter inputs are additionally versioned: the
list state's `filter_version` goes into the key, so "Clear" produces fresh
widgets showing their default values.

Usage
-----
    from anoma_explorer.ui.keys import k, vk

    st.text_input("Tag", key=vk("resources", "tag", state.filter_version))

Conventions
-----------
- `page` is the page's url path ("transactions", "resources", ...).
- `name` is a short identifier for the widget within that page.
- Never build keys from user input.
"""

from __future__ import annotations


def k(page: str, name: str) -> str:
    """Return a stable, namespaced key of the form "<page>:<name>"."""
    return f"{page}:{name}"


def vk(page: str, name: str, version: int) -> str:
    """Key for a widget that must be recreated when `version` changes."""
    return f"{page}:{name}:v{version}"
