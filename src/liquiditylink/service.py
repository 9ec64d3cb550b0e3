"""Advisor service: fetches wallet data and runs the risk and rebalancing engines."""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from liquiditylink.core.models import (
    PortfolioRiskMetrics,
    RebalancingAnalysis,
    RebalancingStrategy,
)
from liquiditylink.core.risk_config import RiskConfig
from liquiditylink.data.pipeline import DataPipeline
from liquiditylink.rebalancing.engine import RebalancingEngine
from liquiditylink.risk.portfolio import PortfolioRiskAggregator
from liquiditylink.risk.scoring import RiskScorer
from liquiditylink.strategies.validation import default_strategies

logger = logging.getLogger(__name__)

DEFAULT_STRATEGY_ID = "balanced"


@dataclass
class AdvisorReport:
    """Rebalancing analysis and portfolio risk for one wallet."""
    owner: str
    analysis: RebalancingAnalysis
    portfolio: PortfolioRiskMetrics
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict:
        return {
            "owner": self.owner,
            "generated_at": self.generated_at.isoformat(),
            "analysis": self.analysis.to_dict(),
            "portfolio": self.portfolio.to_dict(),
        }


class PortfolioAdvisor:
    """
    Orchestrates data fetching and analysis for a wallet.

    Usage:
        advisor = PortfolioAdvisor(pipeline, strategy)
        report = await advisor.analyze_wallet("0xabc...")
    """

    def __init__(
        self,
        pipeline: Optional[DataPipeline] = None,
        strategy: Optional[RebalancingStrategy] = None,
        config: Optional[RiskConfig] = None,
        engine: Optional[RebalancingEngine] = None,
        aggregator: Optional[PortfolioRiskAggregator] = None,
    ):
        self.pipeline = pipeline or DataPipeline()
        self.config = config or RiskConfig.from_settings(self.pipeline.settings)

        scorer = RiskScorer(self.config)
        if strategy is None:
            strategy = next(s for s in default_strategies() if s.id == DEFAULT_STRATEGY_ID)
        self.engine = engine or RebalancingEngine(strategy, scorer=scorer)
        self.aggregator = aggregator or PortfolioRiskAggregator(
            scorer, risk_free_rate=self.pipeline.settings.risk_free_rate
        )

    @property
    def strategy(self) -> RebalancingStrategy:
        return self.engine.strategy

    async def analyze_wallet(
        self,
        owner: str,
        as_of: Optional[datetime] = None,
        force_refresh: bool = False,
    ) -> AdvisorReport:
        """
        Fetch pools and positions, then evaluate them.

        Args:
            owner: Wallet address
            as_of: Evaluation time (default: now, UTC)
            force_refresh: Bypass the pool cache

        Returns:
            AdvisorReport

        Raises:
            DataSourceError: If the pipeline fails to fetch data
        """
        as_of = as_of or datetime.now(timezone.utc)

        pools = await self.pipeline.get_pools(force_refresh=force_refresh)
        positions = await self.pipeline.get_positions(owner)
        logger.info(f"Analyzing {len(positions)} positions for {owner} against {len(pools)} pools")

        analysis = self.engine.analyze_positions(positions, pools, as_of=as_of)
        portfolio = self.aggregator.assess_portfolio(positions, pools)

        return AdvisorReport(
            owner=owner,
            analysis=analysis,
            portfolio=portfolio,
            generated_at=as_of,
        )
