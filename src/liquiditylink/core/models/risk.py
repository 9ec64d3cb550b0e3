"""Risk assessment result models."""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import List, Optional


class RiskCategory(Enum):
    """Risk factor categories, in declaration (and reporting) order."""
    IMPERMANENT_LOSS = "impermanent_loss"
    SMART_CONTRACT = "smart_contract"
    LIQUIDITY = "liquidity"
    PROTOCOL = "protocol"
    MARKET = "market"


class Severity(Enum):
    """Severity bucket of an overall risk score."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @classmethod
    def from_score(cls, overall: Decimal) -> "Severity":
        if overall >= 80:
            return cls.CRITICAL
        if overall >= 60:
            return cls.HIGH
        if overall >= 40:
            return cls.MEDIUM
        return cls.LOW


@dataclass(frozen=True)
class RiskFactor:
    """One scored risk dimension. Recomputed on every assessment."""
    category: RiskCategory
    score: Decimal   # 0-100
    weight: Decimal  # 0-1

    name: str = ""
    mitigation: str = ""

    @property
    def weighted_score(self) -> Decimal:
        return self.score * self.weight

    def to_dict(self) -> dict:
        return {
            "category": self.category.value,
            "name": self.name,
            "score": str(self.score),
            "weight": str(self.weight),
            "mitigation": self.mitigation,
        }


@dataclass
class RiskAssessment:
    """Weighted multi-factor risk assessment of a pool or position.

    ``overall`` is the rounded sum of ``score * weight`` over ``factors``.
    """
    overall: int
    factors: List[RiskFactor]
    severity: Severity
    recommendations: List[str] = field(default_factory=list)

    def factor(self, category: RiskCategory) -> Optional[Decimal]:
        """Score of a single category, or None if it was not assessed."""
        for f in self.factors:
            if f.category == category:
                return f.score
        return None

    @property
    def weighted_total(self) -> Decimal:
        """Unrounded weighted sum of factor scores."""
        return sum((f.weighted_score for f in self.factors), Decimal("0"))

    def to_dict(self) -> dict:
        return {
            "overall": self.overall,
            "severity": self.severity.value,
            "factors": [f.to_dict() for f in self.factors],
            "recommendations": list(self.recommendations),
        }


@dataclass
class PortfolioRiskMetrics:
    """Portfolio-level risk summary across matched positions."""

    total_risk: Decimal = Decimal("0")

    # Value-weighted factor averages
    impermanent_loss: Decimal = Decimal("0")
    smart_contract: Decimal = Decimal("0")
    liquidity: Decimal = Decimal("0")
    protocol: Decimal = Decimal("0")
    market: Decimal = Decimal("0")

    # Composition
    diversification_score: Decimal = Decimal("0")
    concentration_risk: Decimal = Decimal("0")      # Largest position share, %
    protocol_concentration: Decimal = Decimal("0")  # Busiest protocol share, %
    protocol_trend_risk: Decimal = Decimal("0")

    # Performance estimates
    risk_adjusted_return: Decimal = Decimal("0")
    sharpe_ratio: Decimal = Decimal("0")
    max_drawdown: Decimal = Decimal("0")
    value_at_risk: Decimal = Decimal("0")           # USD, 95%

    positions_assessed: int = 0
    recommendations: List[str] = field(default_factory=list)

    @classmethod
    def empty(cls, message: str) -> "PortfolioRiskMetrics":
        """All-zero metrics for a portfolio with nothing to assess."""
        return cls(recommendations=[message])

    def to_dict(self) -> dict:
        return {
            "total_risk": str(self.total_risk),
            "impermanent_loss": str(self.impermanent_loss),
            "smart_contract": str(self.smart_contract),
            "liquidity": str(self.liquidity),
            "protocol": str(self.protocol),
            "market": str(self.market),
            "diversification_score": str(self.diversification_score),
            "concentration_risk": str(self.concentration_risk),
            "protocol_concentration": str(self.protocol_concentration),
            "protocol_trend_risk": str(self.protocol_trend_risk),
            "risk_adjusted_return": str(self.risk_adjusted_return),
            "sharpe_ratio": str(self.sharpe_ratio),
            "max_drawdown": str(self.max_drawdown),
            "value_at_risk": str(self.value_at_risk),
            "positions_assessed": self.positions_assessed,
            "recommendations": list(self.recommendations),
        }
