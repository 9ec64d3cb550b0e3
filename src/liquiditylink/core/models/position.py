"""LP position data model."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import FrozenSet, Optional

from .base import parse_datetime, require_text, to_decimal
from .pool import normalize_token


@dataclass(frozen=True)
class Position:
    """User's liquidity-provider stake in a pool.

    Created on deposit detection and refreshed by the data adapter.
    The engine only reads it.
    """

    position_id: str
    owner: str              # Wallet address
    protocol: str

    # Pair
    token0: str
    token1: str
    amount0: Decimal
    amount1: Decimal

    deposited_at: datetime
    current_value: Decimal  # USD

    # Pool address when the adapter knows it
    pool_id: Optional[str] = None

    def __post_init__(self):
        for name in ("position_id", "owner", "protocol", "token0", "token1"):
            require_text(getattr(self, name), name)
        for name in ("amount0", "amount1", "current_value"):
            object.__setattr__(self, name, to_decimal(getattr(self, name), name))
        object.__setattr__(self, "deposited_at", parse_datetime(self.deposited_at, "deposited_at"))

    @property
    def tokens(self) -> FrozenSet[str]:
        """Unordered token set of this position."""
        return frozenset({normalize_token(self.token0), normalize_token(self.token1)})

    @property
    def pair_label(self) -> str:
        return f"{self.token0}/{self.token1}"

    def days_held(self, as_of: datetime) -> Decimal:
        """Fractional days since deposit (0 if the deposit lies in the future)."""
        seconds = (as_of - self.deposited_at).total_seconds()
        return max(Decimal("0"), Decimal(str(seconds)) / Decimal("86400"))

    def __hash__(self):
        return hash((self.position_id, self.owner))

    def __eq__(self, other):
        if isinstance(other, Position):
            return self.position_id == other.position_id and self.owner == other.owner
        return False

    def to_dict(self) -> dict:
        return {
            "position_id": self.position_id,
            "owner": self.owner,
            "protocol": self.protocol,
            "token0": self.token0,
            "token1": self.token1,
            "amount0": str(self.amount0),
            "amount1": str(self.amount1),
            "deposited_at": self.deposited_at.isoformat(),
            "current_value": str(self.current_value),
            "pool_id": self.pool_id,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Position":
        return cls(
            position_id=data.get("position_id"),
            owner=data.get("owner"),
            protocol=data.get("protocol"),
            token0=data.get("token0"),
            token1=data.get("token1"),
            amount0=data.get("amount0", "0"),
            amount1=data.get("amount1", "0"),
            deposited_at=data.get("deposited_at"),
            current_value=data.get("current_value"),
            pool_id=data.get("pool_id"),
        )
