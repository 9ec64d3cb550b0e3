"""Configuration module for LiquidityLink."""

from .settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
