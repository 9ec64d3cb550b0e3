"""Base pool data source interface.

Defines the abstract interface every pool/position adapter implements so the
DataPipeline can merge several sources. Adapters only produce core input
types (PoolMetrics, Position).
"""

from abc import ABC, abstractmethod
from typing import List

from liquiditylink.core.models import PoolMetrics, Position


class PoolDataSource(ABC):
    """Abstract base class for pool and position data sources.

    Implementations must raise DataSourceError for any upstream failure
    and must not retry internally.
    """

    @property
    @abstractmethod
    def source_name(self) -> str:
        """Return a human-readable source name."""
        ...

    @abstractmethod
    async def get_pools(self, first: int = 50) -> List[PoolMetrics]:
        """Fetch pool snapshots.

        Args:
            first: Maximum number of pools to fetch

        Returns:
            List of PoolMetrics
        """
        ...

    @abstractmethod
    async def get_positions(self, owner: str) -> List[Position]:
        """Fetch LP positions held by a wallet.

        Args:
            owner: Wallet address

        Returns:
            List of Position objects
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Close any open connections and clean up resources."""
        ...
