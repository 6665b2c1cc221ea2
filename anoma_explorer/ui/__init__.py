# anoma_explorer/ui/__init__.py
# SPDX-License-Identifier: Apache-2.0
