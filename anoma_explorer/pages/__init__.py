# anoma_explorer/pages/__init__.py
# SPDX-License-Identifier: Apache-2.0
"""One module per explorer page; each exposes `render(ctx)`."""
