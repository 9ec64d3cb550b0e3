"""Uniswap V3 subgraph client module."""

from liquiditylink.data.clients.uniswap.client import UniswapSubgraphClient
from liquiditylink.data.clients.uniswap.parser import UniswapParser
from liquiditylink.data.clients.uniswap.queries import UniswapQueries

__all__ = [
    "UniswapSubgraphClient",
    "UniswapParser",
    "UniswapQueries",
]
