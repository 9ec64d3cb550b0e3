"""Data pipeline orchestration for LiquidityLink.

Provides a single interface for fetching pools and positions from every
configured PoolDataSource.
"""

import asyncio
import logging
import time
from typing import List, Optional, Sequence, Tuple

from liquiditylink.config.settings import Settings, get_settings
from liquiditylink.core.models import PoolMetrics, Position
from liquiditylink.data.clients.base import PoolDataSource

logger = logging.getLogger(__name__)


class DataPipeline:
    """Orchestrates data fetching from pool data sources.

    Pool snapshots are cached in memory for ``pool_cache_ttl_seconds``;
    positions are always fetched fresh.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        sources: Optional[Sequence[PoolDataSource]] = None,
    ):
        """Initialize the data pipeline.

        Args:
            settings: Application settings
            sources: Data sources (default: the Uniswap V3 subgraph client)
        """
        self.settings = settings or get_settings()

        if sources is None:
            from liquiditylink.data.clients.uniswap import UniswapSubgraphClient
            sources = [UniswapSubgraphClient(self.settings)]
        self._sources = list(sources)

        self._pools_cache: Optional[Tuple[float, List[PoolMetrics]]] = None

    @property
    def sources(self) -> List[PoolDataSource]:
        return list(self._sources)

    def _cache_valid(self) -> bool:
        if self._pools_cache is None:
            return False
        fetched_at, _ = self._pools_cache
        return time.monotonic() - fetched_at < self.settings.pool_cache_ttl_seconds

    async def get_pools(
        self,
        force_refresh: bool = False,
        first: Optional[int] = None,
    ) -> List[PoolMetrics]:
        """Get pools from all sources, in source order.

        Args:
            force_refresh: Skip cache and fetch fresh data
            first: Pools per source (default: settings.pool_fetch_limit)

        Returns:
            List of PoolMetrics

        Raises:
            DataSourceError: If any source fails
        """
        if not force_refresh and self._cache_valid():
            logger.debug("Memory cache hit for pools")
            return list(self._pools_cache[1])

        first = first or self.settings.pool_fetch_limit
        logger.info(f"Fetching pools from {len(self._sources)} source(s)")
        results = await asyncio.gather(*(s.get_pools(first=first) for s in self._sources))

        pools = [pool for batch in results for pool in batch]
        self._pools_cache = (time.monotonic(), pools)
        return list(pools)

    async def get_positions(self, owner: str) -> List[Position]:
        """Get positions for a wallet from all sources, in source order.

        Raises:
            DataSourceError: If any source fails
        """
        logger.info(f"Fetching positions for {owner}")
        results = await asyncio.gather(*(s.get_positions(owner) for s in self._sources))
        return [position for batch in results for position in batch]

    def clear_cache(self) -> None:
        """Drop cached pool snapshots."""
        self._pools_cache = None

    async def close(self) -> None:
        """Close all data sources."""
        for source in self._sources:
            await source.close()
            logger.debug(f"Closed source {source.source_name}")
