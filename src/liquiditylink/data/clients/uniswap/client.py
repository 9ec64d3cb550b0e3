"""Uniswap V3 subgraph client implementing PoolDataSource."""

import logging
from typing import Any, Dict, List, Optional

from aiolimiter import AsyncLimiter
from gql import Client, gql
from gql.transport.aiohttp import AIOHTTPTransport

from liquiditylink.config.settings import Settings, get_settings
from liquiditylink.core.models import PoolMetrics, Position
from liquiditylink.data.clients.base import PoolDataSource
from liquiditylink.data.clients.uniswap.parser import PROTOCOL_NAME, UniswapParser
from liquiditylink.data.clients.uniswap.queries import UniswapQueries
from liquiditylink.exceptions import DataSourceError

logger = logging.getLogger(__name__)


class UniswapSubgraphClient(PoolDataSource):
    """GraphQL client for the Uniswap V3 subgraph on Base.

    Requests are rate limited; failures are reported once as
    DataSourceError and never retried here.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self._rate_limiter = AsyncLimiter(
            self.settings.subgraph_rate_limit, self.settings.subgraph_rate_window
        )
        self._parser = UniswapParser()

    @property
    def source_name(self) -> str:
        return PROTOCOL_NAME

    async def _execute(self, query: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        """Execute a GraphQL query with rate limiting."""
        async with self._rate_limiter:
            transport = AIOHTTPTransport(url=self.settings.subgraph_url)
            client = Client(transport=transport, fetch_schema_from_transport=False)
            async with client as session:
                result = await session.execute(gql(query), variable_values=variables)
                return result

    async def get_pools(self, first: int = 50) -> List[PoolMetrics]:
        """Fetch the top pools by TVL."""
        try:
            result = await self._execute(
                UniswapQueries.POOLS_QUERY,
                {
                    "first": first,
                    "orderBy": "totalValueLockedUSD",
                    "orderDirection": "desc",
                },
            )
            pools_data = result.get("pools") or []
            return [self._parser.parse_pool(p) for p in pools_data]

        except Exception as e:
            logger.error(f"Failed to fetch pools: {e}")
            raise DataSourceError(self.source_name, f"failed to fetch pools: {e}") from e

    async def get_positions(self, owner: str) -> List[Position]:
        """Fetch positions for a wallet."""
        try:
            result = await self._execute(
                UniswapQueries.POSITIONS_QUERY,
                {"owner": owner.lower()},
            )
            bundle = result.get("bundle") or {}
            eth_price = self._parser.parse_decimal(bundle.get("ethPriceUSD"))
            positions_data = result.get("positions") or []
            return [self._parser.parse_position(p, owner, eth_price) for p in positions_data]

        except Exception as e:
            logger.error(f"Failed to fetch positions for {owner}: {e}")
            raise DataSourceError(
                self.source_name, f"failed to fetch positions for {owner}: {e}"
            ) from e

    async def close(self) -> None:
        """Close the client connection (no-op as we create fresh connections)."""
        pass
