"""Rebalancing strategy configuration model."""

from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum

from liquiditylink.exceptions import InvalidInputError

from .base import require_text, to_decimal


class RiskTolerance(Enum):
    """How much pool risk a strategy accepts."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def parse(cls, value) -> "RiskTolerance":
        """Look up a tolerance by name, ignoring case and surrounding spaces."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            choices = ", ".join(t.value for t in cls)
            raise InvalidInputError(
                f"risk_tolerance must be one of {choices}, got {value!r}", field="risk_tolerance"
            )


@dataclass(frozen=True)
class RebalancingStrategy:
    """
    Named rebalancing policy parameters.

    Percentages are plain numbers (8 = 8%). Range checks are done by
    ``validate_strategy`` rather than here, so that an out-of-range user
    strategy can still be built and reported on.
    """

    id: str
    name: str
    target_apy: Decimal             # %
    max_impermanent_loss: Decimal   # %
    risk_tolerance: RiskTolerance
    rebalance_threshold: Decimal    # Expected annual gain (USD) above which a rebalance is urgent
    enabled: bool = False
    description: str = ""

    def __post_init__(self):
        require_text(self.id, "id")
        require_text(self.name, "name")
        for name in ("target_apy", "max_impermanent_loss", "rebalance_threshold"):
            object.__setattr__(self, name, to_decimal(getattr(self, name), name, non_negative=False))
        object.__setattr__(self, "risk_tolerance", RiskTolerance.parse(self.risk_tolerance))

    def with_enabled(self, enabled: bool) -> "RebalancingStrategy":
        """Copy of this strategy with a different enabled flag."""
        return replace(self, enabled=enabled)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "target_apy": str(self.target_apy),
            "max_impermanent_loss": str(self.max_impermanent_loss),
            "risk_tolerance": self.risk_tolerance.value,
            "rebalance_threshold": str(self.rebalance_threshold),
            "enabled": self.enabled,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "RebalancingStrategy":
        return cls(
            id=data.get("id"),
            name=data.get("name"),
            description=data.get("description", ""),
            target_apy=data.get("target_apy"),
            max_impermanent_loss=data.get("max_impermanent_loss"),
            risk_tolerance=data.get("risk_tolerance"),
            rebalance_threshold=data.get("rebalance_threshold"),
            enabled=bool(data.get("enabled", False)),
        )
