"""
Portfolio-level risk aggregation.

Each position is matched to its pool and scored with the position model;
factor scores are then averaged by position value. Unmatched positions are
skipped, never raised on.
"""

import logging
from collections import Counter
from decimal import Decimal
from typing import Dict, List, Optional, Sequence, Tuple

from scipy import stats

from liquiditylink.config.settings import get_settings
from liquiditylink.core import constants as C
from liquiditylink.core.models import (
    PoolMetrics,
    PortfolioRiskMetrics,
    Position,
    RiskAssessment,
    RiskCategory,
)
from liquiditylink.risk.estimators import ConstantPerformanceEstimator, PerformanceEstimator
from liquiditylink.risk.scoring import RiskScorer, match_pool

logger = logging.getLogger(__name__)

NO_POSITIONS_MESSAGE = "No positions to assess"
DIVERSIFY_MESSAGE = "Consider diversifying across more protocols"
SINGLE_PROTOCOL_MESSAGE = "All positions on single protocol - consider diversification"
PORTFOLIO_MANAGEABLE_MESSAGE = "Portfolio risk levels appear manageable"


def value_weights(positions: Sequence[Position]) -> List[Decimal]:
    """Share of total value per position (equal shares when all values are 0)."""
    if not positions:
        return []
    total = sum((p.current_value for p in positions), Decimal("0"))
    if total == 0:
        share = Decimal("1") / len(positions)
        return [share for _ in positions]
    return [p.current_value / total for p in positions]


def diversification_score(positions: Sequence[Position]) -> Decimal:
    """
    Blend of protocol, token and size diversity (0-100).

    0.4 * protocol diversity + 0.4 * token diversity + 0.2 * (1 - HHI) * 100.
    A portfolio of at most one position scores 0.
    """
    if len(positions) <= 1:
        return Decimal("0")

    protocols = {p.protocol.strip().lower() for p in positions}
    tokens = set()
    for p in positions:
        tokens.update(p.tokens)

    protocol_diversity = min(
        Decimal("100"), Decimal(len(protocols)) / C.FULLY_DIVERSIFIED_PROTOCOLS * 100
    )
    token_diversity = min(
        Decimal("100"), Decimal(len(tokens)) / C.FULLY_DIVERSIFIED_TOKENS * 100
    )
    hhi = sum((w * w for w in value_weights(positions)), Decimal("0"))
    size_diversity = (Decimal("1") - hhi) * 100

    return (
        protocol_diversity * Decimal("0.4")
        + token_diversity * Decimal("0.4")
        + size_diversity * Decimal("0.2")
    )


def concentration_risk(positions: Sequence[Position]) -> Decimal:
    """Largest position as a percentage of total value."""
    if not positions:
        return Decimal("0")
    total = sum((p.current_value for p in positions), Decimal("0"))
    if total == 0:
        return Decimal("100") / len(positions)
    return max(p.current_value for p in positions) / total * 100


def protocol_concentration(positions: Sequence[Position]) -> Decimal:
    """Share of positions held on the busiest protocol, in percent."""
    if not positions:
        return Decimal("0")
    counts = Counter(p.protocol.strip().lower() for p in positions)
    return Decimal(max(counts.values())) / len(positions) * 100


def diversification_benefit(matched_count: int) -> Decimal:
    """Fractional discount applied to aggregate risk; none for a single position."""
    if matched_count <= 1:
        return Decimal("0")
    return min(
        C.MAX_DIVERSIFICATION_BENEFIT,
        C.DIVERSIFICATION_BENEFIT_PER_POSITION * matched_count,
    )


class PortfolioRiskAggregator:
    """
    Aggregates per-position assessments into PortfolioRiskMetrics.

    Usage:
        aggregator = PortfolioRiskAggregator()
        metrics = aggregator.assess_portfolio(positions, pools)
    """

    def __init__(
        self,
        scorer: Optional[RiskScorer] = None,
        performance_estimator: Optional[PerformanceEstimator] = None,
        risk_free_rate: Optional[Decimal] = None,
    ):
        self.scorer = scorer or RiskScorer()
        self.performance_estimator = performance_estimator or ConstantPerformanceEstimator()
        if risk_free_rate is None:
            risk_free_rate = get_settings().risk_free_rate
        self.risk_free_rate = Decimal(str(risk_free_rate))

    def _match(
        self, positions: Sequence[Position], pools: Sequence[PoolMetrics]
    ) -> List[Tuple[Position, PoolMetrics, RiskAssessment]]:
        matched = []
        for position in positions:
            pool = match_pool(position, pools)
            if pool is None:
                logger.debug(f"Skipping position {position.position_id}: no matching pool")
                continue
            matched.append((position, pool, self.scorer.score_position(position, pool)))
        return matched

    def assess_portfolio(
        self, positions: Sequence[Position], pools: Sequence[PoolMetrics]
    ) -> PortfolioRiskMetrics:
        """
        Assess the risk of a set of positions.

        Args:
            positions: LP positions (value-weighted)
            pools: Known pools used for matching

        Returns:
            PortfolioRiskMetrics; all zeros with an explanatory message
            when nothing could be assessed
        """
        matched = self._match(positions, pools)
        if not matched:
            logger.info("No matched positions; returning empty portfolio metrics")
            return PortfolioRiskMetrics.empty(NO_POSITIONS_MESSAGE)

        held = [m[0] for m in matched]
        matched_pools = [m[1] for m in matched]
        assessments = [m[2] for m in matched]
        weights = value_weights(held)

        def weighted(values: Sequence[Decimal]) -> Decimal:
            return sum((v * w for v, w in zip(values, weights)), Decimal("0"))

        factor_averages: Dict[RiskCategory, Decimal] = {
            category: weighted([a.factor(category) or Decimal("0") for a in assessments])
            for category in RiskCategory
        }

        weighted_overall = weighted([Decimal(a.overall) for a in assessments])
        benefit = diversification_benefit(len(matched))
        total_risk = max(Decimal("0"), weighted_overall * (Decimal("1") - benefit))

        trend = weighted([self.scorer.protocol_trend_score(p.protocol) for p in held])

        metrics = PortfolioRiskMetrics(
            total_risk=total_risk,
            impermanent_loss=factor_averages[RiskCategory.IMPERMANENT_LOSS],
            smart_contract=factor_averages[RiskCategory.SMART_CONTRACT],
            liquidity=factor_averages[RiskCategory.LIQUIDITY],
            protocol=factor_averages[RiskCategory.PROTOCOL],
            market=factor_averages[RiskCategory.MARKET],
            diversification_score=diversification_score(held),
            concentration_risk=concentration_risk(held),
            protocol_concentration=protocol_concentration(held),
            protocol_trend_risk=trend,
            positions_assessed=len(matched),
        )
        self._apply_performance(metrics, held, matched_pools)
        metrics.recommendations = self._recommendations(held, assessments)

        logger.info(
            f"Assessed portfolio of {len(matched)}/{len(positions)} positions: "
            f"total_risk={total_risk:.2f}"
        )
        return metrics

    def _apply_performance(
        self,
        metrics: PortfolioRiskMetrics,
        positions: Sequence[Position],
        pools: Sequence[PoolMetrics],
    ):
        est = self.performance_estimator
        expected_return = est.expected_return(positions, pools)
        volatility = est.volatility(positions, pools)

        if volatility > 0:
            metrics.risk_adjusted_return = expected_return / volatility
            metrics.sharpe_ratio = (expected_return - self.risk_free_rate) / volatility

        metrics.max_drawdown = est.max_drawdown(positions)

        total_value = sum((p.current_value for p in positions), Decimal("0"))
        z = Decimal(str(stats.norm.ppf(C.VAR_CONFIDENCE)))
        metrics.value_at_risk = total_value * volatility / 100 * z

    def _recommendations(
        self, positions: Sequence[Position], assessments: Sequence[RiskAssessment]
    ) -> List[str]:
        recommendations = []

        if len(positions) < C.MIN_DIVERSIFIED_POSITIONS:
            recommendations.append(DIVERSIFY_MESSAGE)

        if len({p.protocol.strip().lower() for p in positions}) == 1:
            recommendations.append(SINGLE_PROTOCOL_MESSAGE)

        high_risk = sum(1 for a in assessments if a.overall > C.HIGH_RISK_POSITION)
        if high_risk:
            recommendations.append(f"{high_risk} high-risk position(s) detected")

        if not recommendations:
            recommendations.append(PORTFOLIO_MANAGEABLE_MESSAGE)
        return recommendations
