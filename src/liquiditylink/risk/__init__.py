"""Risk module - factor scoring, estimators and portfolio aggregation."""

from .estimators import (
    ConstantMarketRiskEstimator,
    ConstantPerformanceEstimator,
    FlatTransactionCost,
    ImpermanentLossEstimator,
    MarketRiskEstimator,
    PerformanceEstimator,
    PriceRatioILEstimator,
    TimeDecayILEstimator,
    TransactionCostEstimator,
    impermanent_loss_from_price_ratio,
)
from .scoring import RiskScorer, match_pool
from .portfolio import PortfolioRiskAggregator

__all__ = [
    "ConstantMarketRiskEstimator",
    "ConstantPerformanceEstimator",
    "FlatTransactionCost",
    "ImpermanentLossEstimator",
    "MarketRiskEstimator",
    "PerformanceEstimator",
    "PriceRatioILEstimator",
    "TimeDecayILEstimator",
    "TransactionCostEstimator",
    "impermanent_loss_from_price_ratio",
    "RiskScorer",
    "match_pool",
    "PortfolioRiskAggregator",
]
