"""Pool data source clients.

Provides a unified interface for fetching pools and positions from DEXes.
"""

from liquiditylink.data.clients.base import PoolDataSource
from liquiditylink.data.clients.uniswap import UniswapSubgraphClient

__all__ = [
    "PoolDataSource",
    "UniswapSubgraphClient",
]
