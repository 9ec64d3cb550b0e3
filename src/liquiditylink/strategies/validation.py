"""Strategy validation, construction and the built-in strategy set."""

import hashlib
import re
from decimal import Decimal
from typing import List, Tuple, Union

from liquiditylink.core import constants as C
from liquiditylink.core.models import RebalancingStrategy, RiskTolerance
from liquiditylink.core.models.base import require_text, to_decimal

Number = Union[int, float, str, Decimal]

# Rebalance threshold derived from risk tolerance, %
THRESHOLD_BY_TOLERANCE = {
    RiskTolerance.LOW: Decimal("10"),
    RiskTolerance.MEDIUM: Decimal("15"),
    RiskTolerance.HIGH: Decimal("20"),
}

# Ids double as file names in strategy storage
_ID_PATTERN = re.compile(r"[A-Za-z0-9][A-Za-z0-9._-]*")


def is_valid_strategy_id(strategy_id: str) -> bool:
    """Check that an id is safe to use as a file name (no path separators)."""
    return isinstance(strategy_id, str) and bool(_ID_PATTERN.fullmatch(strategy_id))


def _check_range(value: Decimal, bounds: Tuple[Decimal, Decimal], label: str) -> List[str]:
    low, high = bounds
    if value < low or value > high:
        return [f"{label} must be between {low} and {high}% (got {value})"]
    return []


def validate_strategy(strategy: RebalancingStrategy) -> List[str]:
    """
    Check a strategy's parameters.

    Every violated rule is reported, in rule order.

    Args:
        strategy: Strategy to check

    Returns:
        Violation messages; empty when the strategy is valid
    """
    violations = []
    if not is_valid_strategy_id(strategy.id):
        violations.append(
            f"Strategy id may only contain letters, digits, '.', '_' and '-' (got {strategy.id!r})"
        )
    violations += _check_range(strategy.target_apy, C.TARGET_APY_RANGE, "Target APY")
    violations += _check_range(
        strategy.max_impermanent_loss, C.MAX_IL_RANGE, "Max impermanent loss"
    )
    violations += _check_range(
        strategy.rebalance_threshold, C.REBALANCE_THRESHOLD_RANGE, "Rebalance threshold"
    )
    return violations


def _slug(name: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    return slug[:24].strip("-") or "strategy"


def strategy_id(
    name: str,
    target_apy: Decimal,
    max_impermanent_loss: Decimal,
    risk_tolerance: RiskTolerance,
) -> str:
    """Deterministic id: same parameters always give the same id."""
    fingerprint = "|".join([
        name,
        str(Decimal(str(target_apy)).normalize()),
        str(Decimal(str(max_impermanent_loss)).normalize()),
        risk_tolerance.value,
    ])
    digest = hashlib.sha1(fingerprint.encode("utf-8")).hexdigest()[:8]
    return f"custom-{_slug(name)}-{digest}"


def create_strategy(
    name: str,
    target_apy: Number,
    max_impermanent_loss: Number,
    risk_tolerance: Union[str, RiskTolerance],
) -> RebalancingStrategy:
    """
    Build a custom (disabled) strategy.

    The result is not validated; run ``validate_strategy`` or register it
    to have out-of-range parameters reported.

    Args:
        name: Display name
        target_apy: Target APY, %
        max_impermanent_loss: Maximum tolerated IL, %
        risk_tolerance: "low", "medium" or "high" (case-insensitive)

    Returns:
        RebalancingStrategy with a derived rebalance threshold

    Raises:
        InvalidInputError: If a number does not parse or the tolerance is unknown
    """
    require_text(name, "name")
    tolerance = RiskTolerance.parse(risk_tolerance)
    target = to_decimal(target_apy, "target_apy", non_negative=False)
    max_il = to_decimal(max_impermanent_loss, "max_impermanent_loss", non_negative=False)

    return RebalancingStrategy(
        id=strategy_id(name, target, max_il, tolerance),
        name=name,
        description=f"Custom strategy targeting {target}% APY with {max_il}% max IL",
        target_apy=target,
        max_impermanent_loss=max_il,
        risk_tolerance=tolerance,
        rebalance_threshold=THRESHOLD_BY_TOLERANCE[tolerance],
        enabled=False,
    )


def default_strategies() -> List[RebalancingStrategy]:
    """The built-in conservative, balanced and aggressive strategies."""
    return [
        RebalancingStrategy(
            id="conservative",
            name="Conservative Growth",
            description="Focus on stable yields with minimal impermanent loss risk",
            target_apy=Decimal("5"),
            max_impermanent_loss=Decimal("2"),
            risk_tolerance=RiskTolerance.LOW,
            rebalance_threshold=Decimal("10"),
        ),
        RebalancingStrategy(
            id="balanced",
            name="Balanced Optimization",
            description="Balance between yield and risk for steady growth",
            target_apy=Decimal("8"),
            max_impermanent_loss=Decimal("5"),
            risk_tolerance=RiskTolerance.MEDIUM,
            rebalance_threshold=Decimal("15"),
        ),
        RebalancingStrategy(
            id="aggressive",
            name="Aggressive Yield",
            description="Maximize yields with higher risk tolerance",
            target_apy=Decimal("15"),
            max_impermanent_loss=Decimal("10"),
            risk_tolerance=RiskTolerance.HIGH,
            rebalance_threshold=Decimal("20"),
        ),
    ]
