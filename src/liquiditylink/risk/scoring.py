"""
Multi-factor risk scoring for pools and LP positions.

Every factor is a 0-100 score (higher = riskier). The overall score is the
weighted sum of the factor scores, rounded half-up to an integer, using the
weight set from RiskConfig (4 factors for pools, 5 for positions).
"""

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Optional, Sequence

from liquiditylink.core import constants as C
from liquiditylink.core.models import (
    PoolMetrics,
    Position,
    RiskAssessment,
    RiskCategory,
    RiskFactor,
    Severity,
)
from liquiditylink.core.risk_config import RiskConfig
from liquiditylink.risk.estimators import ConstantMarketRiskEstimator, MarketRiskEstimator

logger = logging.getLogger(__name__)


FACTOR_NAMES = {
    RiskCategory.IMPERMANENT_LOSS: "Impermanent Loss Risk",
    RiskCategory.SMART_CONTRACT: "Smart Contract Risk",
    RiskCategory.LIQUIDITY: "Liquidity Risk",
    RiskCategory.PROTOCOL: "Protocol Risk",
    RiskCategory.MARKET: "Market Risk",
}

FACTOR_MITIGATIONS = {
    RiskCategory.IMPERMANENT_LOSS: "Consider correlated pairs or shorter time horizons to reduce IL risk",
    RiskCategory.SMART_CONTRACT: "Prefer audited, battle-tested protocols",
    RiskCategory.LIQUIDITY: "Prefer high-TVL pools with consistent trading volume",
    RiskCategory.PROTOCOL: "Monitor protocol governance and consider diversifying across protocols",
    RiskCategory.MARKET: "Consider market timing and maintain appropriate position sizing",
}

# Per-factor recommendation: (trigger score, message). A factor fires when
# its score is strictly above the trigger.
FACTOR_TRIGGERS = {
    RiskCategory.IMPERMANENT_LOSS: (
        Decimal("50"), "High impermanent loss risk - consider correlated or stable pairs",
    ),
    RiskCategory.SMART_CONTRACT: (
        Decimal("60"), "Smart contract risks detected - verify protocol audits",
    ),
    RiskCategory.LIQUIDITY: (
        Decimal("60"), "Low liquidity detected - monitor for slippage risks",
    ),
    RiskCategory.PROTOCOL: (
        Decimal("50"), "Protocol risks present - diversify across multiple protocols",
    ),
    RiskCategory.MARKET: (
        Decimal("60"), "Elevated market risk - maintain appropriate position sizing",
    ),
}

SEVERITY_BANNERS = {
    Severity.CRITICAL: "Critical risk - consider immediate position review and potential exit",
    Severity.HIGH: "High risk - monitor closely and consider reducing exposure",
}

HIGH_APY_HINT_THRESHOLD = Decimal("15")
HIGH_APY_HINT = "High APY may indicate elevated risks - proceed with caution"
MANAGEABLE_MESSAGE = "Risk levels appear manageable"


def clamp_score(value: Decimal) -> Decimal:
    """Clamp a factor score to [0, 100]."""
    return max(C.MIN_SCORE, min(C.MAX_SCORE, value))


def round_score(value: Decimal) -> int:
    """Round half-up to an integer score in [0, 100]."""
    rounded = int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    return max(0, min(100, rounded))


def match_pool(position: Position, pools: Sequence[PoolMetrics]) -> Optional[PoolMetrics]:
    """
    Find the pool a position sits in.

    Pools trading the same unordered pair are candidates; a pool on the
    position's own protocol wins, otherwise the first match in input order.

    Args:
        position: LP position
        pools: Known pools

    Returns:
        Matching pool or None
    """
    first_match = None
    wanted = position.protocol.strip().lower()
    for pool in pools:
        if pool.tokens != position.tokens:
            continue
        if pool.protocol.strip().lower() == wanted:
            return pool
        if first_match is None:
            first_match = pool
    return first_match


class RiskScorer:
    """
    Scores pools and positions against an injected RiskConfig.

    Stateless apart from the immutable config and market estimator, so one
    instance can be shared freely.
    """

    def __init__(
        self,
        config: Optional[RiskConfig] = None,
        market_estimator: Optional[MarketRiskEstimator] = None,
    ):
        self.config = config or RiskConfig()
        self.market_estimator = market_estimator or ConstantMarketRiskEstimator()

    # ==================== Factor scores ====================

    def _is_major(self, token: str) -> bool:
        return token in self.config.eth_tokens or token in self.config.btc_tokens

    def impermanent_loss_score(self, pool: PoolMetrics) -> Decimal:
        """Pair-category base score plus an APY bump."""
        tokens = sorted(pool.tokens)
        stable = self.config.stable_tokens

        if len(tokens) == 2:
            a, b = tokens
            if a in stable and b in stable:
                score = C.IL_BASE_STABLE_STABLE
            elif (self._is_major(a) and b in stable) or (a in stable and self._is_major(b)):
                score = C.IL_BASE_MAJOR_STABLE
            elif self._is_major(a) and self._is_major(b):
                score = C.IL_BASE_MAJOR_MAJOR
            else:
                score = C.IL_BASE_UNKNOWN
        else:
            score = C.IL_BASE_UNKNOWN

        if pool.apy > C.IL_HIGH_APY:
            score += C.IL_HIGH_APY_PENALTY
        elif pool.apy > C.IL_MID_APY:
            score += C.IL_MID_APY_PENALTY

        return clamp_score(score)

    def smart_contract_score(self, protocol: str) -> Decimal:
        """
        Audit, exploit history and time in market.

        (100 - audit) * 0.4 + min(30, exploits * 15) + max(0, 30 - days / 365 * 10)
        """
        rep = self.config.reputation(protocol)
        if rep is None or not rep.has_contract_data:
            return C.UNKNOWN_SMART_CONTRACT_RISK

        audit_risk = (Decimal("100") - rep.audit_score) * Decimal("0.4")
        exploit_risk = min(Decimal("30"), Decimal(rep.exploit_count) * 15)
        age_risk = max(
            Decimal("0"),
            Decimal("30") - Decimal(rep.days_in_market) / C.DAYS_PER_YEAR * 10,
        )
        return clamp_score(audit_risk + exploit_risk + age_risk)

    def liquidity_score(self, pool: PoolMetrics) -> Decimal:
        """Shallow TVL and low turnover raise the score above a 10 baseline."""
        threshold = self.config.liquidity_threshold
        score = C.CONCENTRATION_BASELINE

        if pool.tvl < threshold:
            score += (Decimal("1") - pool.tvl / threshold) * C.LOW_TVL_MAX_PENALTY

        turnover = pool.turnover
        if turnover < C.TARGET_DAILY_TURNOVER:
            score += min(
                C.MAX_TURNOVER_PENALTY,
                (C.TARGET_DAILY_TURNOVER - turnover) * C.TURNOVER_PENALTY_SCALE,
            )

        return clamp_score(score)

    def protocol_score(self, protocol: str) -> Decimal:
        rep = self.config.reputation(protocol)
        if rep is None:
            return C.UNKNOWN_PROTOCOL_RISK
        return clamp_score(rep.base_risk)

    def protocol_trend_score(self, protocol: str) -> Decimal:
        """TVL trend plus governance and regulatory baselines."""
        rep = self.config.reputation(protocol)
        if rep is None:
            return C.UNKNOWN_PROTOCOL_TREND_RISK

        score = C.GOVERNANCE_BASELINE + C.REGULATORY_BASELINE
        history = rep.tvl_history
        if len(history) >= 2 and history[-2] > 0:
            ratio = history[-1] / history[-2]
            if ratio < C.TVL_SHARP_DECLINE:
                score += C.TVL_SHARP_DECLINE_PENALTY
            elif ratio < C.TVL_DECLINE:
                score += C.TVL_DECLINE_PENALTY

        return clamp_score(score)

    def market_score(self, position: Position) -> Decimal:
        est = self.market_estimator
        score = (
            est.market_volatility() * Decimal("0.4")
            + est.correlation_risk(position.token0, position.token1) * Decimal("0.3")
            + est.macro_risk() * Decimal("0.3")
        )
        return clamp_score(score)

    # ==================== Assessments ====================

    def score_pool(self, pool: PoolMetrics) -> RiskAssessment:
        """
        Assess a pool with the 4-factor pool model.

        Args:
            pool: Pool snapshot

        Returns:
            RiskAssessment with factors in declaration order
        """
        scores = {
            RiskCategory.IMPERMANENT_LOSS: self.impermanent_loss_score(pool),
            RiskCategory.SMART_CONTRACT: self.smart_contract_score(pool.protocol),
            RiskCategory.LIQUIDITY: self.liquidity_score(pool),
            RiskCategory.PROTOCOL: self.protocol_score(pool.protocol),
        }
        assessment = self._assess(scores, self.config.pool_weights, pool)
        logger.debug(f"Scored pool {pool.key}: overall={assessment.overall}")
        return assessment

    def score_position(self, position: Position, pool: PoolMetrics) -> RiskAssessment:
        """
        Assess a position with the 5-factor model (pool factors plus market).

        Args:
            position: LP position
            pool: Pool the position sits in

        Returns:
            RiskAssessment with factors in declaration order
        """
        scores = {
            RiskCategory.IMPERMANENT_LOSS: self.impermanent_loss_score(pool),
            RiskCategory.SMART_CONTRACT: self.smart_contract_score(pool.protocol),
            RiskCategory.LIQUIDITY: self.liquidity_score(pool),
            RiskCategory.PROTOCOL: self.protocol_score(pool.protocol),
            RiskCategory.MARKET: self.market_score(position),
        }
        assessment = self._assess(scores, self.config.position_weights, pool)
        logger.debug(f"Scored position {position.position_id}: overall={assessment.overall}")
        return assessment

    def score_position_or_none(
        self, position: Position, pools: Sequence[PoolMetrics]
    ) -> Optional[RiskAssessment]:
        """Score a position against its matching pool; None if no pool matches."""
        pool = match_pool(position, pools)
        if pool is None:
            logger.debug(f"No pool found for position {position.position_id}")
            return None
        return self.score_position(position, pool)

    def _assess(
        self,
        scores: Dict[RiskCategory, Decimal],
        weights: Dict[RiskCategory, Decimal],
        pool: PoolMetrics,
    ) -> RiskAssessment:
        factors = [
            RiskFactor(
                category=category,
                score=score,
                weight=weights.get(category, Decimal("0")),
                name=FACTOR_NAMES[category],
                mitigation=FACTOR_MITIGATIONS[category],
            )
            for category, score in scores.items()
        ]
        total = sum((f.weighted_score for f in factors), Decimal("0"))
        overall = round_score(total)
        severity = Severity.from_score(Decimal(overall))

        return RiskAssessment(
            overall=overall,
            factors=factors,
            severity=severity,
            recommendations=self._recommendations(factors, severity, pool),
        )

    def _recommendations(
        self, factors: List[RiskFactor], severity: Severity, pool: PoolMetrics
    ) -> List[str]:
        recommendations = []

        banner = SEVERITY_BANNERS.get(severity)
        if banner:
            recommendations.append(banner)

        for factor in factors:
            trigger, message = FACTOR_TRIGGERS[factor.category]
            if factor.score > trigger:
                recommendations.append(message)

        if pool.apy > HIGH_APY_HINT_THRESHOLD:
            recommendations.append(HIGH_APY_HINT)

        if not recommendations:
            recommendations.append(MANAGEABLE_MESSAGE)
        return recommendations
