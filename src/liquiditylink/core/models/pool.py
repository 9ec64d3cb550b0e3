"""Liquidity pool snapshot model."""

from dataclasses import dataclass
from decimal import Decimal
from typing import FrozenSet, Optional

from liquiditylink.exceptions import InvalidInputError

from .base import require_text, to_decimal


def normalize_token(symbol: str) -> str:
    """Canonical form of a token symbol for pair matching."""
    return symbol.strip().upper()


def pair_tokens(pair_label: str) -> FrozenSet[str]:
    """Parse 'WETH/USDC' into an unordered token set."""
    return frozenset(normalize_token(t) for t in pair_label.split("/") if t.strip())


@dataclass(frozen=True)
class PoolMetrics:
    """Immutable snapshot of one liquidity pool, produced per refresh cycle."""

    protocol: str
    pair_label: str          # e.g. "WETH/USDC"
    apy: Decimal             # Percent, e.g. 6.6 = 6.6%
    tvl: Decimal             # USD
    volume_24h: Decimal      # USD
    fees_24h: Decimal        # USD

    # Adapter-specific identifier (pool address), optional
    pool_id: Optional[str] = None

    def __post_init__(self):
        require_text(self.protocol, "protocol")
        require_text(self.pair_label, "pair_label")
        if not pair_tokens(self.pair_label):
            raise InvalidInputError(
                f"pair_label has no tokens: {self.pair_label!r}", field="pair_label"
            )
        for name in ("apy", "tvl", "volume_24h", "fees_24h"):
            object.__setattr__(self, name, to_decimal(getattr(self, name), name))

    @property
    def tokens(self) -> FrozenSet[str]:
        """Unordered set of token symbols in this pool."""
        return pair_tokens(self.pair_label)

    @property
    def key(self) -> str:
        """Display identifier: pool id, else protocol + pair (not unique across fee tiers)."""
        return self.pool_id or f"{self.protocol}:{self.pair_label}"

    @property
    def turnover(self) -> Decimal:
        """24h volume / TVL ratio (0 for an empty pool)."""
        if self.tvl == 0:
            return Decimal("0")
        return self.volume_24h / self.tvl

    def same_pair(self, token0: str, token1: str) -> bool:
        """Check whether this pool trades exactly the given pair, in any order."""
        return self.tokens == frozenset({normalize_token(token0), normalize_token(token1)})

    def to_dict(self) -> dict:
        return {
            "protocol": self.protocol,
            "pair_label": self.pair_label,
            "apy": str(self.apy),
            "tvl": str(self.tvl),
            "volume_24h": str(self.volume_24h),
            "fees_24h": str(self.fees_24h),
            "pool_id": self.pool_id,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PoolMetrics":
        return cls(
            protocol=data.get("protocol"),
            pair_label=data.get("pair_label", data.get("pair")),
            apy=data.get("apy"),
            tvl=data.get("tvl"),
            volume_24h=data.get("volume_24h", data.get("volume24h")),
            fees_24h=data.get("fees_24h", data.get("fees24h")),
            pool_id=data.get("pool_id"),
        )
