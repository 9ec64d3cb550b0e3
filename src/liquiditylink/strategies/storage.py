"""JSON file storage for user-defined rebalancing strategies."""

import json
import logging
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Optional

from liquiditylink.config.settings import get_settings
from liquiditylink.core.models import RebalancingStrategy
from liquiditylink.exceptions import InvalidInputError

from .validation import is_valid_strategy_id

logger = logging.getLogger(__name__)


class DecimalEncoder(json.JSONEncoder):
    """JSON encoder that handles Decimal and datetime values."""

    def default(self, obj):
        if isinstance(obj, Decimal):
            return str(obj)
        if isinstance(obj, datetime):
            return obj.isoformat()
        return super().default(obj)


class StrategyStorage:
    """
    Persistent storage for custom strategies.

    One human-readable JSON file per strategy:
        storage_dir/
            strategies/
                {strategy_id}.json
    """

    def __init__(self, storage_dir: Optional[Path] = None):
        """
        Initialize storage.

        Args:
            storage_dir: Base directory (default: settings.storage_dir)
        """
        if storage_dir is None:
            storage_dir = get_settings().storage_dir

        self.storage_dir = Path(storage_dir)
        self.strategies_dir = self.storage_dir / "strategies"
        self.strategies_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, strategy_id: str) -> Path:
        if not is_valid_strategy_id(strategy_id):
            raise InvalidInputError(f"Unsafe strategy id: {strategy_id!r}", field="id")
        return self.strategies_dir / f"{strategy_id}.json"

    def save_strategy(self, strategy: RebalancingStrategy) -> str:
        """
        Save (or overwrite) a strategy.

        Returns:
            Strategy ID
        """
        data = strategy.to_dict()
        data["_saved_at"] = datetime.now(timezone.utc).isoformat()

        with open(self._path(strategy.id), "w") as f:
            json.dump(data, f, cls=DecimalEncoder, indent=2)

        logger.info(f"Saved strategy: {strategy.id}")
        return strategy.id

    def load_strategy(self, strategy_id: str) -> Optional[RebalancingStrategy]:
        """
        Load a strategy.

        Returns:
            RebalancingStrategy or None if not found
        """
        file_path = self._path(strategy_id)
        if not file_path.exists():
            logger.warning(f"Strategy not found: {strategy_id}")
            return None

        with open(file_path, "r") as f:
            data = json.load(f)

        data.pop("_saved_at", None)
        return RebalancingStrategy.from_dict(data)

    def load_all(self) -> List[RebalancingStrategy]:
        """Load every stored strategy, sorted by id."""
        strategies = []
        for file_path in sorted(self.strategies_dir.glob("*.json")):
            strategy = self.load_strategy(file_path.stem)
            if strategy is not None:
                strategies.append(strategy)
        return strategies

    def list_strategies(self) -> List[Dict[str, Any]]:
        """
        List stored strategies.

        Returns:
            Summaries (id, name, risk tolerance, saved_at), newest first
        """
        summaries = []
        for file_path in self.strategies_dir.glob("*.json"):
            with open(file_path, "r") as f:
                data = json.load(f)

            summaries.append({
                "id": data.get("id", file_path.stem),
                "name": data.get("name"),
                "risk_tolerance": data.get("risk_tolerance"),
                "enabled": data.get("enabled", False),
                "saved_at": data.get("_saved_at"),
            })

        summaries.sort(key=lambda x: x.get("saved_at") or "", reverse=True)
        return summaries

    def delete_strategy(self, strategy_id: str) -> bool:
        """
        Delete a stored strategy.

        Returns:
            True if deleted, False if not found
        """
        file_path = self._path(strategy_id)
        if file_path.exists():
            file_path.unlink()
            logger.info(f"Deleted strategy: {strategy_id}")
            return True
        return False
