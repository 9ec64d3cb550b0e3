"""
Rebalancing policy engine.

Evaluates each LP position against a strategy and emits one of
hold / adjust / rebalance / exit. Rules are checked in strict priority
order; the first one that applies wins:

1. IL above twice the strategy maximum            -> exit (high)
2. APY below 70% of target and a better pool      -> rebalance (high/medium)
3. Pool risk above the tolerance ceiling and a
   safer pool on the same pair                    -> adjust (medium)
4. IL above the strategy maximum                  -> adjust (medium)
5. Otherwise                                      -> hold (low)
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, List, Optional, Sequence

from liquiditylink.config.settings import get_settings
from liquiditylink.core import constants as C
from liquiditylink.core.models import (
    PoolMetrics,
    Position,
    RebalancingAction,
    RebalancingAnalysis,
    RebalancingRecommendation,
    RebalancingStrategy,
    Urgency,
)
from liquiditylink.core.risk_config import RiskConfig
from liquiditylink.risk.estimators import (
    FlatTransactionCost,
    ImpermanentLossEstimator,
    TimeDecayILEstimator,
    TransactionCostEstimator,
)
from liquiditylink.risk.scoring import RiskScorer, match_pool

logger = logging.getLogger(__name__)


class RebalancingEngine:
    """
    Applies one RebalancingStrategy to positions and known pools.

    Pure given its inputs: pools are scored on demand and nothing is
    cached between calls.
    """

    def __init__(
        self,
        strategy: RebalancingStrategy,
        scorer: Optional[RiskScorer] = None,
        config: Optional[RiskConfig] = None,
        il_estimator: Optional[ImpermanentLossEstimator] = None,
        cost_estimator: Optional[TransactionCostEstimator] = None,
    ):
        self.strategy = strategy
        self.config = config or (scorer.config if scorer else RiskConfig())
        self.scorer = scorer or RiskScorer(self.config)
        self.il_estimator = il_estimator or TimeDecayILEstimator()
        self.cost_estimator = cost_estimator or FlatTransactionCost(
            get_settings().transaction_cost_usd
        )

    @property
    def risk_ceiling(self) -> Decimal:
        return self.config.ceiling(self.strategy.risk_tolerance)

    def analyze_positions(
        self,
        positions: Sequence[Position],
        pools: Sequence[PoolMetrics],
        as_of: Optional[datetime] = None,
    ) -> RebalancingAnalysis:
        """
        Evaluate every position and aggregate the results.

        Args:
            positions: Positions to evaluate, in output order
            pools: Known pools (current pools and candidates)
            as_of: Evaluation time (default: now, UTC)

        Returns:
            RebalancingAnalysis; positions with no matching pool produce
            no recommendation and are not counted in the aggregates
        """
        as_of = as_of or datetime.now(timezone.utc)
        risk_cache: Dict[PoolMetrics, Decimal] = {}

        recommendations: List[RebalancingRecommendation] = []
        positions_at_risk = 0
        underperforming = 0
        total_gain = Decimal("0")

        for position in positions:
            rec = self._evaluate(position, pools, as_of, risk_cache)
            if rec is None:
                continue
            recommendations.append(rec)

            if rec.urgency == Urgency.HIGH:
                positions_at_risk += 1
            if rec.action in (RebalancingAction.REBALANCE, RebalancingAction.EXIT):
                underperforming += 1
            if rec.expected_gain:
                total_gain += rec.expected_gain

        logger.info(
            f"Strategy {self.strategy.id}: {len(recommendations)}/{len(positions)} positions evaluated, "
            f"{positions_at_risk} at risk, {underperforming} underperforming"
        )

        return RebalancingAnalysis(
            strategy_id=self.strategy.id,
            total_positions=len(positions),
            positions_at_risk=positions_at_risk,
            underperforming_positions=underperforming,
            total_potential_gain=total_gain,
            recommendations=recommendations,
        )

    def evaluate_position(
        self,
        position: Position,
        pools: Sequence[PoolMetrics],
        as_of: Optional[datetime] = None,
    ) -> Optional[RebalancingRecommendation]:
        """Recommendation for one position, or None when no pool matches."""
        return self._evaluate(position, pools, as_of or datetime.now(timezone.utc), {})

    # ==================== Rules ====================

    def _evaluate(
        self,
        position: Position,
        pools: Sequence[PoolMetrics],
        as_of: datetime,
        risk_cache: Dict[PoolMetrics, Decimal],
    ) -> Optional[RebalancingRecommendation]:
        current = match_pool(position, pools)
        if current is None:
            logger.debug(f"No pool for position {position.position_id}; skipping")
            return None

        def risk_of(pool: PoolMetrics) -> Decimal:
            if pool not in risk_cache:
                risk_cache[pool] = Decimal(self.scorer.score_pool(pool).overall)
            return risk_cache[pool]

        strategy = self.strategy
        il = self.il_estimator.estimate(position, as_of)
        current_risk = risk_of(current)
        current_apy = current.apy

        if il > strategy.max_impermanent_loss * C.EXIT_IL_MULTIPLIER:
            return RebalancingRecommendation(
                position_id=position.position_id,
                action=RebalancingAction.EXIT,
                reason=f"Impermanent loss ({il:.2f}%) exceeds maximum tolerance",
                urgency=Urgency.HIGH,
                risk_reduction=il,
                estimated_cost=self.cost_estimator.estimate(position),
            )

        if current_apy < strategy.target_apy * C.UNDERPERFORMANCE_RATIO:
            better = self._find_better_pool(position, current, pools, risk_of)
            if better is not None:
                return self._rebalance(position, current, better)

        if current_risk > self.risk_ceiling:
            safer = self._find_safer_pool(position, current, pools, risk_of)
            if safer is not None:
                return RebalancingRecommendation(
                    position_id=position.position_id,
                    action=RebalancingAction.ADJUST,
                    reason=(
                        f"Risk score ({current_risk}) exceeds tolerance for "
                        f"{strategy.risk_tolerance.value} strategy"
                    ),
                    urgency=Urgency.MEDIUM,
                    risk_reduction=current_risk - risk_of(safer),
                    candidate_pool=safer,
                    estimated_cost=self.cost_estimator.estimate(position, safer),
                )

        if il > strategy.max_impermanent_loss:
            return RebalancingRecommendation(
                position_id=position.position_id,
                action=RebalancingAction.ADJUST,
                reason=f"Impermanent loss ({il:.2f}%) approaching maximum tolerance",
                urgency=Urgency.MEDIUM,
                risk_reduction=il - strategy.max_impermanent_loss,
                estimated_cost=self.cost_estimator.estimate(position),
            )

        return RebalancingRecommendation(
            position_id=position.position_id,
            action=RebalancingAction.HOLD,
            reason=f"Position performing within strategy parameters (APY: {current_apy:.2f}%)",
            urgency=Urgency.LOW,
        )

    def _rebalance(
        self, position: Position, current: PoolMetrics, better: PoolMetrics
    ) -> RebalancingRecommendation:
        gain = position.current_value * (better.apy - current.apy) / 100
        urgency = Urgency.HIGH if gain > self.strategy.rebalance_threshold else Urgency.MEDIUM

        return RebalancingRecommendation(
            position_id=position.position_id,
            action=RebalancingAction.REBALANCE,
            reason=f"Current APY ({current.apy:.2f}%) below target. Better opportunity available",
            urgency=urgency,
            expected_gain=gain,
            candidate_pool=better,
            estimated_cost=self.cost_estimator.estimate(position, better),
        )

    # ==================== Candidate search ====================

    @staticmethod
    def _same_pair_candidates(
        position: Position, current: PoolMetrics, pools: Sequence[PoolMetrics]
    ) -> List[PoolMetrics]:
        return [
            p for p in pools
            if p is not current and p.tokens == position.tokens
        ]

    @staticmethod
    def _best(candidates, risk_of, penalty: Decimal) -> Optional[PoolMetrics]:
        best = None
        best_score = None
        for pool in candidates:
            score = pool.apy - risk_of(pool) * penalty
            # Strict comparison keeps the earlier pool on ties
            if best is None or score > best_score:
                best, best_score = pool, score
        return best

    def _find_better_pool(self, position, current, pools, risk_of) -> Optional[PoolMetrics]:
        min_apy = current.apy * C.BETTER_POOL_MIN_APY_RATIO
        candidates = [
            p for p in self._same_pair_candidates(position, current, pools)
            if p.apy >= min_apy and p.apy > current.apy and risk_of(p) <= self.risk_ceiling
        ]
        return self._best(candidates, risk_of, C.BETTER_POOL_RISK_PENALTY)

    def _find_safer_pool(self, position, current, pools, risk_of) -> Optional[PoolMetrics]:
        max_risk = risk_of(current) * C.SAFER_POOL_MAX_RISK_RATIO
        min_apy = current.apy * C.SAFER_POOL_MIN_APY_RATIO
        candidates = [
            p for p in self._same_pair_candidates(position, current, pools)
            if risk_of(p) < max_risk and p.apy >= min_apy
        ]
        return self._best(candidates, risk_of, C.SAFER_POOL_RISK_PENALTY)
