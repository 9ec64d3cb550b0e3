"""Rebalancing recommendation models."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from .base import _utcnow, optional_str
from .pool import PoolMetrics


class RebalancingAction(Enum):
    """Recommended action for a position."""
    HOLD = "hold"
    ADJUST = "adjust"
    REBALANCE = "rebalance"
    EXIT = "exit"


class Urgency(Enum):
    """How soon the recommendation should be acted on."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass
class RebalancingRecommendation:
    """Policy decision for one position, produced fresh per analysis run."""
    position_id: str
    action: RebalancingAction
    reason: str
    urgency: Urgency

    expected_gain: Optional[Decimal] = None    # USD per year
    risk_reduction: Optional[Decimal] = None   # Score or IL points
    candidate_pool: Optional[PoolMetrics] = None
    estimated_cost: Optional[Decimal] = None   # USD

    def to_dict(self) -> dict:
        return {
            "position_id": self.position_id,
            "action": self.action.value,
            "reason": self.reason,
            "urgency": self.urgency.value,
            "expected_gain": optional_str(self.expected_gain),
            "risk_reduction": optional_str(self.risk_reduction),
            "candidate_pool": self.candidate_pool.to_dict() if self.candidate_pool else None,
            "estimated_cost": optional_str(self.estimated_cost),
        }


@dataclass
class RebalancingAnalysis:
    """Result of analyzing a set of positions against one strategy."""
    strategy_id: str
    total_positions: int
    positions_at_risk: int
    underperforming_positions: int
    total_potential_gain: Decimal
    recommendations: List[RebalancingRecommendation] = field(default_factory=list)
    generated_at: datetime = field(default_factory=_utcnow)

    def for_position(self, position_id: str) -> Optional[RebalancingRecommendation]:
        """Recommendation for a position, or None if it was excluded."""
        for rec in self.recommendations:
            if rec.position_id == position_id:
                return rec
        return None

    def to_dict(self) -> dict:
        return {
            "strategy_id": self.strategy_id,
            "total_positions": self.total_positions,
            "positions_at_risk": self.positions_at_risk,
            "underperforming_positions": self.underperforming_positions,
            "total_potential_gain": str(self.total_potential_gain),
            "recommendations": [r.to_dict() for r in self.recommendations],
            "generated_at": self.generated_at.isoformat(),
        }
