"""LiquidityLink - LP risk assessment and rebalancing recommendations."""

__version__ = "0.1.0"
