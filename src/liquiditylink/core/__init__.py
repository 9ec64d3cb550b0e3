"""Core module - models, constants and risk configuration."""

from .models import (
    PoolMetrics,
    Position,
    RiskCategory,
    RiskFactor,
    RiskAssessment,
    Severity,
    PortfolioRiskMetrics,
    RebalancingStrategy,
    RiskTolerance,
    RebalancingAction,
    RebalancingAnalysis,
    RebalancingRecommendation,
    Urgency,
)
from .risk_config import RiskConfig, ProtocolReputation

__all__ = [
    "PoolMetrics",
    "Position",
    "RiskCategory",
    "RiskFactor",
    "RiskAssessment",
    "Severity",
    "PortfolioRiskMetrics",
    "RebalancingStrategy",
    "RiskTolerance",
    "RebalancingAction",
    "RebalancingAnalysis",
    "RebalancingRecommendation",
    "Urgency",
    "RiskConfig",
    "ProtocolReputation",
]
