# anoma_explorer/__init__.py
# SPDX-License-Identifier: Apache-2.0
"""Anoma Explorer: a Streamlit explorer for Anoma Protocol Adapter activity indexed by Envio."""

__version__ = "0.1.0"
