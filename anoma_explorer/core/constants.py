# anoma_explorer/core/constants.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Explorer-wide constants: paging, timeouts, timer intervals and the seed data
used by the maintenance script.

Design notes
------------
- Constants are typed `Final` to communicate immutability and to help static
  analyzers catch accidental reassignment.
- Timeouts are in seconds unless the name ends in `_MS`. The admin gate works
  in milliseconds because authorization timestamps are stored that way.
"""

from typing import Final

# ---------------------------------------------------------------------------
# Paging
# ---------------------------------------------------------------------------

#: Rows shown per list page. Every list view fetches PAGE_SIZE + 1 rows and
#: uses the extra row only to decide whether a next page exists.
PAGE_SIZE: Final[int] = 20

#: Rows on the dashboard's "recent transactions" table.
RECENT_TRANSACTIONS: Final[int] = 10

#: Sample size used by the dashboard counters.
STATS_SAMPLE_LIMIT: Final[int] = 1000

# ---------------------------------------------------------------------------
# Indexer timeouts (seconds)
# ---------------------------------------------------------------------------

DEFAULT_QUERY_TIMEOUT_SECONDS: Final[int] = 15
DEFAULT_CONNECT_TIMEOUT_SECONDS: Final[int] = 10
DEFAULT_RAW_TIMEOUT_SECONDS: Final[int] = 30

#: Indexer clients kept alive at once (current endpoint and the one before).
INDEXER_CLIENT_CACHE_ENTRIES: Final[int] = 2

#: Probe timeouts are tighter than query timeouts; the probe is a tiny query.
PROBE_TIMEOUT_SECONDS: Final[int] = 10
PROBE_CONNECT_TIMEOUT_SECONDS: Final[int] = 5

#: Upper bound for the dashboard's joined stats + transactions fetch.
DASHBOARD_JOIN_TIMEOUT_SECONDS: Final[float] = 15.0

# ---------------------------------------------------------------------------
# Timers
# ---------------------------------------------------------------------------

DEFAULT_REFRESH_SECONDS: Final[int] = 30

#: Quiet period after the last edit of the setup URL before auto-testing it.
SETUP_DEBOUNCE_SECONDS: Final[float] = 1.5

DEFAULT_ADMIN_TIMEOUT_MINUTES: Final[int] = 30
#: Slack added to the remaining lifetime so the expiry check lands after it.
ADMIN_EXPIRY_MARGIN_MS: Final[int] = 100
#: The expiry check re-arms at least this often.
ADMIN_MAX_CHECK_INTERVAL_MS: Final[int] = 60_000

# ---------------------------------------------------------------------------
# Settings store
# ---------------------------------------------------------------------------

ENVIO_URL_SETTING_KEY: Final[str] = "envio_graphql_url"

#: Networks written by `scripts/manage.py seed`: (name, display, chain id,
#: explorer, testnet).
SEED_NETWORKS: Final[list[tuple[str, str, int, str, bool]]] = [
    ("eth-mainnet", "Ethereum Mainnet", 1, "https://etherscan.io", False),
    ("eth-sepolia", "Ethereum Sepolia", 11_155_111, "https://sepolia.etherscan.io", True),
    ("base-mainnet", "Base Mainnet", 8453, "https://basescan.org", False),
    ("base-sepolia", "Base Sepolia", 84_532, "https://sepolia.basescan.org", True),
    ("optimism-mainnet", "Optimism Mainnet", 10, "https://optimistic.etherscan.io", False),
    ("arb-mainnet", "Arbitrum One", 42_161, "https://arbiscan.io", False),
]

#: Protocols written by the seed command: (name, description, github url,
#: category, version, {network: address}).
SEED_PROTOCOLS: Final[list[tuple[str, str, str, str, str, dict[str, str]]]] = [
    (
        "Protocol Adapter",
        "Anoma Protocol Adapter for EVM chains",
        "https://github.com/anoma/pa-evm",
        "protocol_adapter",
        "v1.0",
        {
            "eth-sepolia": "0xc63336a48D0f60faD70ed027dFB256908bBD5e37",
            "eth-mainnet": "0xdd4f4F0875Da48EF6d8F32ACB890EC81F435Ff3a",
            "base-sepolia": "0x212f275c6dD4829cd84ABDF767b0Df4A9CB9ef60",
            "base-mainnet": "0x212f275c6dD4829cd84ABDF767b0Df4A9CB9ef60",
            "optimism-mainnet": "0x212f275c6dD4829cd84ABDF767b0Df4A9CB9ef60",
            "arb-mainnet": "0x212f275c6dD4829cd84ABDF767b0Df4A9CB9ef60",
        },
    ),
    (
        "AnomaPay ERC20 Forwarder",
        "ERC20 token forwarder for AnomaPay",
        "https://github.com/anoma/anomapay-erc20-forwarder",
        "erc20_forwarder",
        "v1.0",
        {
            "eth-sepolia": "0xa04942494174eD85A11416E716262eC0AE0a065d",
            "eth-mainnet": "0x0D38C332135f9f0de4dcc4a6F9c918b72e2A1Df3",
            "base-sepolia": "0xA73Ce304460F17C3530b58BA95bCD3B89Bd38D69",
            "base-mainnet": "0xA73Ce304460F17C3530b58BA95bCD3B89Bd38D69",
            "optimism-mainnet": "0xA73Ce304460F17C3530b58BA95bCD3B89Bd38D69",
            "arb-mainnet": "0xA73Ce304460F17C3530b58BA95bCD3B89Bd38D69",
        },
    ),
]
