"""
Static chain registry.

Maps the chain names accepted by EthWalletProvider to EVM chain IDs.
Unknown names resolve to Ethereum mainnet.
"""

from typing import Dict

DEFAULT_CHAIN = "ethereum"
DEFAULT_CHAIN_ID = 1

CHAIN_IDS: Dict[str, int] = {
    "ethereum": 1,
    "polygon": 137,
    "fantom": 250,
    "xdai": 100,
    "bsc": 56,
    "arbitrum": 42161,
    "avalanche": 43114,
    "fuji": 43113,
    "harmony": 1666600000,
    "kovan": 42,
    "mumbai": 80001,
    "goerli": 5,
    "ropsten": 3,
    "rinkeby": 4,
    "cronos": 25,
    "optimism": 10,
    "celo": 42220,
    "aurora": 1313161554,
    "eluvio": 955305,
    "alfajores": 44787,
    "xdc": 50,
    "evmos": 9001,
    "evmosTestnet": 9000,
    "bscTestnet": 97,
    "baseGoerli": 84531,
    "moonbeam": 1284,
    "moonriver": 1285,
    "moonbaseAlpha": 1287,
    "filecoin": 314,
    "hyperspace": 3141,
    "sepolia": 11155111,
    "scrollAlphaTestnet": 534353,
    "zksync": 324,
    "base": 8453,
    "lineaGoerli": 59140,
    "chronicleTestnet": 175177,
    "zkEvm": 1101,
}


def resolve_chain_id(name: str) -> int:
    """
    Resolve chain name to chain ID.

    Args:
        name: Chain name (e.g., "polygon")

    Returns:
        Chain ID, or 1 for unknown names
    """
    return CHAIN_IDS.get(name, DEFAULT_CHAIN_ID)
