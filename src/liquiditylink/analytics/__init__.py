"""Analytics module - exchange rate comparison."""

from .rates import compare_rates, rate_dispersion

__all__ = ["compare_rates", "rate_dispersion"]
