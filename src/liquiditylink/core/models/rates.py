"""Exchange rate quote models."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from .base import _utcnow, parse_datetime, require_text, to_decimal


@dataclass(frozen=True)
class ExchangeRate:
    """A quoted rate for a pair on one exchange."""
    pair: str
    exchange: str
    rate: Decimal
    liquidity: Decimal = Decimal("0")  # USD
    fee_pct: Decimal = Decimal("0")    # 0.3 = 0.3%
    timestamp: datetime = field(default_factory=_utcnow)

    def __post_init__(self):
        require_text(self.pair, "pair")
        require_text(self.exchange, "exchange")
        for name in ("rate", "liquidity", "fee_pct"):
            object.__setattr__(self, name, to_decimal(getattr(self, name), name))
        object.__setattr__(self, "timestamp", parse_datetime(self.timestamp, "timestamp"))

    @classmethod
    def from_dict(cls, data: dict) -> "ExchangeRate":
        return cls(
            pair=data.get("pair"),
            exchange=data.get("exchange"),
            rate=data.get("rate"),
            liquidity=data.get("liquidity", "0"),
            fee_pct=data.get("fee_pct", data.get("fees", "0")),
            timestamp=data.get("timestamp") or _utcnow(),
        )


@dataclass
class RateComparison:
    """One exchange's quote ranked against the best rate for the pair."""
    exchange: str
    rate: Decimal
    spread_pct: Decimal       # Distance below the best quoted rate, %
    effective_rate: Decimal   # Rate after exchange fee
    liquidity: Decimal
    fee_pct: Decimal
    is_best: bool = False

    def to_dict(self) -> dict:
        return {
            "exchange": self.exchange,
            "rate": str(self.rate),
            "spread_pct": str(self.spread_pct),
            "effective_rate": str(self.effective_rate),
            "liquidity": str(self.liquidity),
            "fee_pct": str(self.fee_pct),
            "is_best": self.is_best,
        }
