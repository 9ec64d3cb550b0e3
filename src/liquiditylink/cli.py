"""Command-line interface for LiquidityLink."""

import argparse
import asyncio
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, List, Optional

from liquiditylink.config.settings import Settings, get_settings
from liquiditylink.core.models import PoolMetrics, Position
from liquiditylink.core.models.base import parse_datetime
from liquiditylink.core.risk_config import RiskConfig
from liquiditylink.exceptions import InvalidStrategyError, LiquidityLinkError
from liquiditylink.logging_setup import configure_logging
from liquiditylink.rebalancing.engine import RebalancingEngine
from liquiditylink.risk.portfolio import PortfolioRiskAggregator
from liquiditylink.risk.scoring import RiskScorer
from liquiditylink.strategies import (
    DecimalEncoder,
    StrategyRegistry,
    StrategyStorage,
    create_strategy,
    validate_strategy,
)

logger = logging.getLogger(__name__)

TOLERANCES = ["low", "medium", "high"]


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="liquiditylink",
        description="LP risk assessment and rebalancing advisor",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (default: LIQUIDITYLINK_LOG_LEVEL or INFO)",
    )
    parser.add_argument(
        "--storage-dir",
        default=None,
        help="Strategy storage directory (default: LIQUIDITYLINK_STORAGE_DIR)",
    )

    sub = parser.add_subparsers(dest="command")

    analyze = sub.add_parser("analyze", help="Rebalancing and portfolio risk analysis")
    analyze.add_argument("--pools", type=Path, help="JSON file of pool snapshots")
    analyze.add_argument("--positions", type=Path, help="JSON file of positions")
    analyze.add_argument("--owner", help="Fetch pools and positions for this wallet instead")
    analyze.add_argument("--strategy", default=None, help="Strategy id (default: the enabled one, else balanced)")
    analyze.add_argument("--as-of", default=None, help="Evaluation time, ISO-8601 (default: now)")

    score = sub.add_parser("score", help="Risk-score pool snapshots")
    score.add_argument("--pools", type=Path, required=True, help="JSON file of pool snapshots")

    strategies = sub.add_parser("strategies", help="List and manage strategies")
    strategies.add_argument(
        "action",
        nargs="?",
        default="list",
        choices=["list", "create", "enable", "disable", "remove"],
    )
    strategies.add_argument("strategy_id", nargs="?", help="Strategy id for enable/disable/remove")
    _add_strategy_params(strategies, required=False)

    validate = sub.add_parser("validate", help="Validate strategy parameters")
    _add_strategy_params(validate, required=True)

    return parser


def _add_strategy_params(parser: argparse.ArgumentParser, required: bool):
    parser.add_argument("--name", default="custom", help="Strategy name")
    parser.add_argument("--target-apy", required=required, help="Target APY, %%")
    parser.add_argument("--max-il", required=required, help="Maximum impermanent loss, %%")
    parser.add_argument("--tolerance", required=required, choices=TOLERANCES, help="Risk tolerance")


def _load_records(path: Path, key: str) -> List[dict]:
    """Read a JSON list, or an object holding the list under ``key``."""
    with open(path, "r") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get(key, [])
    if not isinstance(data, list):
        raise LiquidityLinkError(f"{path}: expected a list of {key}")
    return data


def _emit(payload: Any):
    json.dump(payload, sys.stdout, cls=DecimalEncoder, indent=2)
    sys.stdout.write("\n")


def _registry(settings: Settings) -> StrategyRegistry:
    return StrategyRegistry(storage=StrategyStorage(settings.storage_dir))


def _resolve_strategy(registry: StrategyRegistry, strategy_id: Optional[str]):
    if strategy_id:
        strategy = registry.get(strategy_id)
        if strategy is None:
            raise LiquidityLinkError(f"Unknown strategy: {strategy_id}")
        return strategy
    active = registry.active
    return active[0] if active else registry.get("balanced")


async def _analyze(args: argparse.Namespace, settings: Settings) -> int:
    strategy = _resolve_strategy(_registry(settings), args.strategy)
    as_of: Optional[datetime] = parse_datetime(args.as_of, "as_of") if args.as_of else None
    config = RiskConfig.from_settings(settings)

    if args.owner:
        from liquiditylink.data.pipeline import DataPipeline
        from liquiditylink.service import PortfolioAdvisor

        pipeline = DataPipeline(settings)
        try:
            advisor = PortfolioAdvisor(pipeline, strategy, config=config)
            report = await advisor.analyze_wallet(args.owner, as_of=as_of)
        finally:
            await pipeline.close()
        _emit(report.to_dict())
        return 0

    if not args.pools or not args.positions:
        raise LiquidityLinkError("analyze needs --owner, or both --pools and --positions")

    pools = [PoolMetrics.from_dict(p) for p in _load_records(args.pools, "pools")]
    positions = [Position.from_dict(p) for p in _load_records(args.positions, "positions")]

    scorer = RiskScorer(config)
    engine = RebalancingEngine(strategy, scorer=scorer)
    aggregator = PortfolioRiskAggregator(scorer, risk_free_rate=settings.risk_free_rate)

    analysis = engine.analyze_positions(positions, pools, as_of=as_of)
    portfolio = aggregator.assess_portfolio(positions, pools)
    _emit({"analysis": analysis.to_dict(), "portfolio": portfolio.to_dict()})
    return 0


def _score(args: argparse.Namespace, settings: Settings) -> int:
    scorer = RiskScorer(RiskConfig.from_settings(settings))
    pools = [PoolMetrics.from_dict(p) for p in _load_records(args.pools, "pools")]
    _emit([
        {"pool": pool.to_dict(), "assessment": scorer.score_pool(pool).to_dict()}
        for pool in pools
    ])
    return 0


def _strategies(args: argparse.Namespace, settings: Settings) -> int:
    registry = _registry(settings)

    if args.action == "create":
        if args.target_apy is None or args.max_il is None or args.tolerance is None:
            raise LiquidityLinkError("create needs --target-apy, --max-il and --tolerance")
        strategy = registry.register(
            create_strategy(args.name, args.target_apy, args.max_il, args.tolerance)
        )
        _emit(strategy.to_dict())
        return 0

    if args.action in ("enable", "disable", "remove"):
        if not args.strategy_id:
            raise LiquidityLinkError(f"{args.action} needs a strategy id")
        try:
            if args.action == "enable":
                registry.enable(args.strategy_id)
            elif args.action == "disable":
                registry.disable(args.strategy_id)
            elif not registry.remove(args.strategy_id):
                raise KeyError(args.strategy_id)
        except KeyError:
            raise LiquidityLinkError(f"Unknown strategy: {args.strategy_id}")

    _emit([s.to_dict() for s in registry.list()])
    return 0


def _validate(args: argparse.Namespace) -> int:
    strategy = create_strategy(args.name, args.target_apy, args.max_il, args.tolerance)
    violations = validate_strategy(strategy)
    _emit({"id": strategy.id, "valid": not violations, "violations": violations})
    return 1 if violations else 0


async def _run(args: argparse.Namespace) -> int:
    """Execute the selected command."""
    settings = get_settings()
    if args.storage_dir:
        settings = settings.model_copy(update={"storage_dir": Path(args.storage_dir).expanduser()})
    configure_logging(args.log_level or settings.log_level)

    try:
        if args.command == "analyze":
            return await _analyze(args, settings)
        if args.command == "score":
            return _score(args, settings)
        if args.command == "strategies":
            return _strategies(args, settings)
        if args.command == "validate":
            return _validate(args)
    except InvalidStrategyError as e:
        for violation in e.violations:
            print(f"error: {violation}", file=sys.stderr)
        return 1
    except LiquidityLinkError as e:
        logger.error(str(e))
        print(f"error: {e}", file=sys.stderr)
        return 1

    build_parser().print_help()
    return 1


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    return asyncio.run(_run(args))
