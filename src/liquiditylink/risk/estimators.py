"""Pluggable estimators behind the heuristic parts of the risk model.

Each estimator has a documented constant (or closed-form) default so a
real data-driven estimator can be swapped in without touching the scorer
or the rebalancing engine.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import Dict, Optional, Sequence

from liquiditylink.core import constants as C
from liquiditylink.core.models import PoolMetrics, Position
from liquiditylink.exceptions import InvalidInputError


def impermanent_loss_from_price_ratio(
    price_ratio: Decimal,
    initial_ratio: Decimal = Decimal("1"),
) -> Decimal:
    """
    Impermanent loss of a 50/50 constant-product position, in percent.

    IL = |2 * sqrt(r) / (1 + r) - 1| * 100, with r = price_ratio / initial_ratio

    Args:
        price_ratio: Current token0/token1 price ratio
        initial_ratio: Ratio at deposit time

    Returns:
        Loss versus holding, in [0, 100]
    """
    price_ratio = Decimal(str(price_ratio))
    initial_ratio = Decimal(str(initial_ratio))
    if price_ratio <= 0:
        raise InvalidInputError("price_ratio must be positive", field="price_ratio")
    if initial_ratio <= 0:
        raise InvalidInputError("initial_ratio must be positive", field="initial_ratio")

    r = price_ratio / initial_ratio
    il = abs(2 * r.sqrt() / (1 + r) - 1) * 100
    return min(C.GENERAL_IL_CAP, il)


class ImpermanentLossEstimator(ABC):
    """Estimates the impermanent loss (%) a position has accrued."""

    @property
    @abstractmethod
    def cap(self) -> Decimal:
        """Upper bound of any estimate."""
        ...

    @abstractmethod
    def estimate(self, position: Position, as_of: datetime) -> Decimal:
        """Return the estimated IL in percent, within [0, cap]."""
        ...


class TimeDecayILEstimator(ImpermanentLossEstimator):
    """
    IL grows linearly with position age: min(days * 0.1, 15).

    Stand-in until deposit-time prices are available.
    """

    def __init__(
        self,
        per_day: Decimal = C.TIME_DECAY_IL_PER_DAY,
        cap: Decimal = C.TIME_DECAY_IL_CAP,
    ):
        self.per_day = per_day
        self._cap = cap

    @property
    def cap(self) -> Decimal:
        return self._cap

    def estimate(self, position: Position, as_of: datetime) -> Decimal:
        days = Decimal(int(position.days_held(as_of)))
        return min(days * self.per_day, self._cap)


class PriceRatioILEstimator(ImpermanentLossEstimator):
    """Closed-form IL from observed price ratios keyed by position id.

    Positions without a known ratio are treated as unchanged (0% IL).
    """

    def __init__(self, price_ratios: Dict[str, Decimal]):
        self.price_ratios = {k: Decimal(str(v)) for k, v in price_ratios.items()}

    @property
    def cap(self) -> Decimal:
        return C.GENERAL_IL_CAP

    def estimate(self, position: Position, as_of: datetime) -> Decimal:
        ratio = self.price_ratios.get(position.position_id)
        if ratio is None:
            return Decimal("0")
        return impermanent_loss_from_price_ratio(ratio)


class MarketRiskEstimator(ABC):
    """Inputs to the market risk factor, each on a 0-100 scale."""

    @abstractmethod
    def market_volatility(self) -> Decimal:
        ...

    @abstractmethod
    def correlation_risk(self, token0: str, token1: str) -> Decimal:
        ...

    @abstractmethod
    def macro_risk(self) -> Decimal:
        ...


class ConstantMarketRiskEstimator(MarketRiskEstimator):
    """Fixed market inputs: volatility 45, correlation 60, macro 35."""

    def __init__(
        self,
        volatility: Decimal = Decimal("45"),
        correlation: Decimal = Decimal("60"),
        macro: Decimal = Decimal("35"),
    ):
        self.volatility = volatility
        self.correlation = correlation
        self.macro = macro

    def market_volatility(self) -> Decimal:
        return self.volatility

    def correlation_risk(self, token0: str, token1: str) -> Decimal:
        return self.correlation

    def macro_risk(self) -> Decimal:
        return self.macro


class PerformanceEstimator(ABC):
    """Portfolio return/volatility/drawdown estimates, all in percent."""

    @abstractmethod
    def expected_return(self, positions: Sequence[Position], pools: Sequence[PoolMetrics]) -> Decimal:
        ...

    @abstractmethod
    def volatility(self, positions: Sequence[Position], pools: Sequence[PoolMetrics]) -> Decimal:
        ...

    @abstractmethod
    def max_drawdown(self, positions: Sequence[Position]) -> Decimal:
        ...


class ConstantPerformanceEstimator(PerformanceEstimator):
    """Fixed estimates: 12% return, 25% volatility, 15% max drawdown."""

    def __init__(
        self,
        annual_return: Decimal = Decimal("12"),
        annual_volatility: Decimal = Decimal("25"),
        drawdown: Decimal = Decimal("15"),
    ):
        self.annual_return = annual_return
        self.annual_volatility = annual_volatility
        self.drawdown = drawdown

    def expected_return(self, positions: Sequence[Position], pools: Sequence[PoolMetrics]) -> Decimal:
        return self.annual_return

    def volatility(self, positions: Sequence[Position], pools: Sequence[PoolMetrics]) -> Decimal:
        return self.annual_volatility

    def max_drawdown(self, positions: Sequence[Position]) -> Decimal:
        return self.drawdown


class TransactionCostEstimator(ABC):
    """Cost (USD) of moving a position: exit plus re-entry."""

    @abstractmethod
    def estimate(self, position: Position, target: Optional[PoolMetrics] = None) -> Decimal:
        ...


class FlatTransactionCost(TransactionCostEstimator):
    """Same cost for every move (default 50 USD)."""

    def __init__(self, cost_usd: Decimal = Decimal("50")):
        self.cost_usd = Decimal(str(cost_usd))

    def estimate(self, position: Position, target: Optional[PoolMetrics] = None) -> Decimal:
        return self.cost_usd
