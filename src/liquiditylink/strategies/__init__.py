"""Strategies module - validation, registry and persistence."""

from .validation import (
    THRESHOLD_BY_TOLERANCE,
    create_strategy,
    is_valid_strategy_id,
    default_strategies,
    strategy_id,
    validate_strategy,
)
from .storage import DecimalEncoder, StrategyStorage
from .registry import StrategyRegistry

__all__ = [
    "THRESHOLD_BY_TOLERANCE",
    "create_strategy",
    "is_valid_strategy_id",
    "default_strategies",
    "strategy_id",
    "validate_strategy",
    "DecimalEncoder",
    "StrategyStorage",
    "StrategyRegistry",
]
