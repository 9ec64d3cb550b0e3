"""Exception hierarchy for LiquidityLink."""

from typing import List, Optional


class LiquidityLinkError(Exception):
    """Base class for all LiquidityLink errors."""


class InvalidInputError(LiquidityLinkError, ValueError):
    """Malformed input record (e.g. negative TVL).

    Attributes:
        field: Name of the offending field, if known
    """

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class InvalidStrategyError(LiquidityLinkError, ValueError):
    """Strategy rejected by validation.

    Attributes:
        violations: Every validation message, in rule order
    """

    def __init__(self, strategy_id: str, violations: List[str]):
        self.strategy_id = strategy_id
        self.violations = list(violations)
        super().__init__(
            f"Invalid strategy '{strategy_id}': " + "; ".join(self.violations)
        )


class DataSourceError(LiquidityLinkError):
    """An upstream data source failed while fetching pools or positions."""

    def __init__(self, source: str, message: str):
        self.source = source
        super().__init__(f"{source}: {message}")
