"""Core data models for LiquidityLink."""

from .pool import PoolMetrics, normalize_token, pair_tokens
from .position import Position
from .risk import RiskCategory, RiskFactor, RiskAssessment, Severity, PortfolioRiskMetrics
from .strategy import RebalancingStrategy, RiskTolerance
from .rebalancing import (
    RebalancingAction,
    RebalancingAnalysis,
    RebalancingRecommendation,
    Urgency,
)
from .rates import ExchangeRate, RateComparison

__all__ = [
    "PoolMetrics",
    "normalize_token",
    "pair_tokens",
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
    "ExchangeRate",
    "RateComparison",
]
