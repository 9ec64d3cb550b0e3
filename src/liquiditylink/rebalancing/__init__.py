"""Rebalancing module - per-position policy decisions."""

from .engine import RebalancingEngine

__all__ = ["RebalancingEngine"]
