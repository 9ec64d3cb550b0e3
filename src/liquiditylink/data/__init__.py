"""Data layer for LiquidityLink."""

from .pipeline import DataPipeline
from .clients.base import PoolDataSource

__all__ = [
    "DataPipeline",
    "PoolDataSource",
]
