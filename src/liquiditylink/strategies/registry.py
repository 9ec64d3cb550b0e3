"""Strategy registry with the single-enabled-strategy invariant.

At most one strategy is enabled at any time: ``enable`` disables every
other strategy in the same call.
"""

import logging
from typing import Dict, List, Optional

from liquiditylink.core.models import RebalancingStrategy
from liquiditylink.exceptions import InvalidInputError, InvalidStrategyError
from liquiditylink.strategies.storage import StrategyStorage
from liquiditylink.strategies.validation import default_strategies, validate_strategy

logger = logging.getLogger(__name__)


class StrategyRegistry:
    """Holds the built-in strategies plus user strategies.

    When a StrategyStorage is given, user strategies are loaded from it on
    construction and every change to them is written back.
    """

    def __init__(
        self,
        storage: Optional[StrategyStorage] = None,
        include_defaults: bool = True,
    ):
        self.storage = storage
        self._strategies: Dict[str, RebalancingStrategy] = {}
        self._builtin_ids = set()

        if include_defaults:
            for strategy in default_strategies():
                self._strategies[strategy.id] = strategy
                self._builtin_ids.add(strategy.id)

        if storage is not None:
            for strategy in storage.load_all():
                if strategy.id in self._builtin_ids:
                    logger.warning(f"Ignoring stored strategy shadowing built-in: {strategy.id}")
                    continue
                self._strategies[strategy.id] = strategy
            logger.debug(f"Loaded {len(self._strategies)} strategies")

        # Restore the invariant if storage held more than one enabled strategy
        enabled = [s for s in self._strategies.values() if s.enabled]
        if len(enabled) > 1:
            logger.warning(f"{len(enabled)} strategies enabled; keeping {enabled[0].id}")
            self.enable(enabled[0].id)

    def is_builtin(self, strategy_id: str) -> bool:
        return strategy_id in self._builtin_ids

    def register(self, strategy: RebalancingStrategy) -> RebalancingStrategy:
        """
        Validate and add (or replace) a user strategy.

        Registration never enables a strategy; use ``enable``.

        Raises:
            InvalidStrategyError: If validation fails or the id is a built-in
        """
        if strategy.id in self._builtin_ids:
            raise InvalidStrategyError(strategy.id, ["Built-in strategies cannot be replaced"])

        violations = validate_strategy(strategy)
        if violations:
            raise InvalidStrategyError(strategy.id, violations)

        strategy = strategy.with_enabled(False)
        self._strategies[strategy.id] = strategy
        self._persist(strategy)
        logger.info(f"Registered strategy {strategy.id}")
        return strategy

    def get(self, strategy_id: str) -> Optional[RebalancingStrategy]:
        return self._strategies.get(strategy_id)

    def remove(self, strategy_id: str) -> bool:
        """
        Remove a user strategy.

        Returns:
            True if removed, False if unknown

        Raises:
            InvalidInputError: For built-in strategies
        """
        if strategy_id in self._builtin_ids:
            raise InvalidInputError(
                f"Built-in strategy '{strategy_id}' cannot be removed", field="id"
            )
        if self._strategies.pop(strategy_id, None) is None:
            return False
        if self.storage is not None:
            self.storage.delete_strategy(strategy_id)
        logger.info(f"Removed strategy {strategy_id}")
        return True

    def list(self) -> List[RebalancingStrategy]:
        """All strategies: built-ins first, then user strategies in insertion order."""
        return list(self._strategies.values())

    def enable(self, strategy_id: str) -> List[RebalancingStrategy]:
        """
        Enable one strategy and disable all others.

        Returns:
            The active strategies (exactly the enabled one)

        Raises:
            KeyError: If the strategy is unknown
        """
        if strategy_id not in self._strategies:
            raise KeyError(f"Unknown strategy: {strategy_id}")

        for sid, strategy in list(self._strategies.items()):
            wanted = sid == strategy_id
            if strategy.enabled != wanted:
                self._strategies[sid] = strategy.with_enabled(wanted)
                self._persist(self._strategies[sid])

        logger.info(f"Enabled strategy {strategy_id}")
        return self.active

    def disable(self, strategy_id: str) -> RebalancingStrategy:
        """Disable one strategy. Raises KeyError if unknown."""
        if strategy_id not in self._strategies:
            raise KeyError(f"Unknown strategy: {strategy_id}")

        strategy = self._strategies[strategy_id]
        if strategy.enabled:
            strategy = strategy.with_enabled(False)
            self._strategies[strategy_id] = strategy
            self._persist(strategy)
        return strategy

    @property
    def active(self) -> List[RebalancingStrategy]:
        """Currently enabled strategies (at most one)."""
        return [s for s in self._strategies.values() if s.enabled]

    def _persist(self, strategy: RebalancingStrategy):
        if self.storage is not None and strategy.id not in self._builtin_ids:
            self.storage.save_strategy(strategy)
