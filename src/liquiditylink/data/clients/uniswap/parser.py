"""Uniswap V3 subgraph response parser.

Converts subgraph GraphQL responses into PoolMetrics and Position.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Tuple

from liquiditylink.core import constants as C
from liquiditylink.core.models import PoolMetrics, Position

PROTOCOL_NAME = C.UNISWAP_V3

HOURS_PER_DAY = 24


class UniswapParser:
    """Parser for Uniswap V3 subgraph responses."""

    @staticmethod
    def parse_decimal(value: Any) -> Decimal:
        """Safely parse a value to Decimal."""
        if value is None:
            return Decimal("0")
        if isinstance(value, Decimal):
            return value
        return Decimal(str(value))

    @staticmethod
    def parse_timestamp(value: Any) -> datetime:
        """Parse a unix timestamp (int or string) to datetime."""
        if isinstance(value, datetime):
            return value
        if isinstance(value, (int, float)):
            return datetime.fromtimestamp(value, tz=timezone.utc)
        if isinstance(value, str) and value.strip():
            return datetime.fromtimestamp(int(value), tz=timezone.utc)
        return datetime.now(tz=timezone.utc)

    @classmethod
    def pool_apy(cls, fees_usd: Any, tvl_usd: Any) -> Decimal:
        """Annualized fee APY (%), treating fees as one day's worth.

        APY = fees * 365 / tvl * 100, 0 for an empty pool.
        """
        fees = cls.parse_decimal(fees_usd)
        tvl = cls.parse_decimal(tvl_usd)
        if tvl <= 0:
            return Decimal("0")
        return fees * C.DAYS_PER_YEAR / tvl * 100

    @classmethod
    def trailing_day(cls, hours: List[Dict[str, Any]]) -> Tuple[Decimal, Decimal]:
        """Sum fees and volume over the newest 24 hourly snapshots.

        Args:
            hours: poolHourDatas entries, newest first

        Returns:
            (fees_usd, volume_usd); zeros when there is no hourly data
        """
        recent = hours[:HOURS_PER_DAY]
        fees = sum((cls.parse_decimal(h.get("feesUSD")) for h in recent), Decimal("0"))
        volume = sum((cls.parse_decimal(h.get("volumeUSD")) for h in recent), Decimal("0"))
        return fees, volume

    @classmethod
    def parse_pool(cls, data: Dict[str, Any]) -> PoolMetrics:
        """Parse a pool from the POOLS_QUERY response."""
        token0 = data.get("token0", {}) or {}
        token1 = data.get("token1", {}) or {}
        tvl = cls.parse_decimal(data.get("totalValueLockedUSD"))
        fees, volume = cls.trailing_day(data.get("poolHourDatas") or [])

        return PoolMetrics(
            protocol=PROTOCOL_NAME,
            pair_label=f"{token0.get('symbol', '')}/{token1.get('symbol', '')}",
            apy=cls.pool_apy(fees, tvl),
            tvl=max(Decimal("0"), tvl),
            volume_24h=max(Decimal("0"), volume),
            fees_24h=max(Decimal("0"), fees),
            pool_id=data.get("id"),
        )

    @classmethod
    def parse_position(
        cls,
        data: Dict[str, Any],
        owner: str,
        eth_price_usd: Decimal,
    ) -> Position:
        """
        Parse a position from the POSITIONS_QUERY response.

        Current value is the net deposited amount of each token priced
        through its derivedETH and the ETH/USD bundle price.

        Args:
            data: Raw position
            owner: Wallet address the query was run for
            eth_price_usd: ETH price from the subgraph bundle

        Returns:
            Position
        """
        token0 = data.get("token0", {}) or {}
        token1 = data.get("token1", {}) or {}
        pool = data.get("pool", {}) or {}
        tx = data.get("transaction", {}) or {}

        net0 = max(
            Decimal("0"),
            cls.parse_decimal(data.get("depositedToken0")) - cls.parse_decimal(data.get("withdrawnToken0")),
        )
        net1 = max(
            Decimal("0"),
            cls.parse_decimal(data.get("depositedToken1")) - cls.parse_decimal(data.get("withdrawnToken1")),
        )
        value = (
            net0 * cls.parse_decimal(token0.get("derivedETH"))
            + net1 * cls.parse_decimal(token1.get("derivedETH"))
        ) * eth_price_usd

        return Position(
            position_id=str(data.get("id", "")),
            owner=data.get("owner") or owner,
            protocol=PROTOCOL_NAME,
            token0=token0.get("symbol", ""),
            token1=token1.get("symbol", ""),
            amount0=net0,
            amount1=net1,
            deposited_at=cls.parse_timestamp(tx.get("timestamp")),
            current_value=max(Decimal("0"), value),
            pool_id=pool.get("id"),
        )
