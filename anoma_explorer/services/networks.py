# anoma_explorer/services/networks.py
# SPDX-License-Identifier: Apache-2.0
"""Chain-id lookups: display names, badges and block-explorer URLs.

Indexed records only carry a numeric `chainId`; this table turns it into
something an operator recognizes and into outbound links. Unknown chains get
a generic "Chain <id>" label and no explorer links.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ChainInfo:
    """Display metadata for one chain."""

    chain_id: int | None
    name: str
    short: str
    explorer: str | None


_CHAINS: dict[int, tuple[str, str, str]] = {
    1: ("Ethereum", "ETH", "https://etherscan.io"),
    5: ("Goerli", "Goerli", "https://goerli.etherscan.io"),
    10: ("Optimism", "OP", "https://optimistic.etherscan.io"),
    56: ("BNB Chain", "BNB", "https://bscscan.com"),
    100: ("Gnosis", "Gnosis", "https://gnosisscan.io"),
    137: ("Polygon", "Polygon", "https://polygonscan.com"),
    250: ("Fantom", "FTM", "https://ftmscan.com"),
    324: ("zkSync Era", "zkSync", "https://explorer.zksync.io"),
    420: ("Optimism Goerli", "OP Goerli", "https://goerli-optimism.etherscan.io"),
    8453: ("Base", "Base", "https://basescan.org"),
    42_161: ("Arbitrum One", "Arb", "https://arbiscan.io"),
    42_170: ("Arbitrum Nova", "Arb Nova", "https://nova.arbiscan.io"),
    43_114: ("Avalanche", "AVAX", "https://snowtrace.io"),
    59_144: ("Linea", "Linea", "https://lineascan.build"),
    80_001: ("Polygon Mumbai", "Mumbai", "https://mumbai.polygonscan.com"),
    80_002: ("Polygon Amoy", "Amoy", "https://amoy.polygonscan.com"),
    84_531: ("Base Goerli", "Base Goerli", "https://goerli.basescan.org"),
    84_532: ("Base Sepolia", "Base Sep", "https://sepolia.basescan.org"),
    421_613: ("Arbitrum Goerli", "Arb Goerli", "https://goerli.arbiscan.io"),
    421_614: ("Arbitrum Sepolia", "Arb Sep", "https://sepolia.arbiscan.io"),
    534_352: ("Scroll", "Scroll", "https://scrollscan.com"),
    11_155_111: ("Sepolia", "Sepolia", "https://sepolia.etherscan.io"),
    11_155_420: ("Optimism Sepolia", "OP Sep", "https://sepolia-optimism.etherscan.io"),
}


def chain_info(chain_id: int | None) -> ChainInfo:
    """Return display metadata for `chain_id`; never raises."""
    if chain_id is None:
        return ChainInfo(None, "Unknown", "?", None)
    known = _CHAINS.get(chain_id)
    if known is None:
        return ChainInfo(chain_id, f"Chain {chain_id}", str(chain_id), None)
    name, short, explorer = known
    return ChainInfo(chain_id, name, short, explorer)


def name(chain_id: int | None) -> str:
    return chain_info(chain_id).name


def short_name(chain_id: int | None) -> str:
    return chain_info(chain_id).short


def explorer_url(chain_id: int | None) -> str | None:
    return chain_info(chain_id).explorer


def _explorer_link(chain_id: int | None, kind: str, value: object) -> str | None:
    if chain_id is None or value is None:
        return None
    base = explorer_url(chain_id)
    if base is None:
        return None
    return f"{base}/{kind}/{value}"


def block_url(chain_id: int | None, block_number: int | None) -> str | None:
    return _explorer_link(chain_id, "block", block_number)


def tx_url(chain_id: int | None, tx_hash: str | None) -> str | None:
    return _explorer_link(chain_id, "tx", tx_hash)


def address_url(chain_id: int | None, address: str | None) -> str | None:
    return _explorer_link(chain_id, "address", address)


def list_chains() -> list[tuple[int, str]]:
    """All known chains as (chain_id, name) sorted by name, for select boxes."""
    return sorted(((cid, meta[0]) for cid, meta in _CHAINS.items()), key=lambda c: c[1])
