"""Cross-exchange rate comparison for a single token pair."""

import logging
from decimal import Decimal
from typing import Dict, List, Sequence

import numpy as np

from liquiditylink.core.models import ExchangeRate, RateComparison, pair_tokens
from liquiditylink.exceptions import InvalidInputError

logger = logging.getLogger(__name__)


def _check_single_pair(quotes: Sequence[ExchangeRate]):
    pairs = {pair_tokens(q.pair) for q in quotes}
    if len(pairs) > 1:
        labels = sorted({q.pair for q in quotes})
        raise InvalidInputError(
            f"Quotes must all be for one pair, got: {', '.join(labels)}", field="pair"
        )


def compare_rates(quotes: Sequence[ExchangeRate]) -> List[RateComparison]:
    """
    Rank exchange quotes for one pair.

    spread_pct = (best - rate) / best * 100, where best is the highest
    quoted rate; effective_rate = rate * (1 - fee_pct / 100).

    Args:
        quotes: Quotes for the same pair (token order does not matter)

    Returns:
        Comparisons sorted by effective rate, best first. Every quote at
        the best quoted rate is flagged ``is_best``.

    Raises:
        InvalidInputError: If the quotes span more than one pair
    """
    if not quotes:
        return []
    _check_single_pair(quotes)

    best = max(q.rate for q in quotes)
    comparisons = []
    for q in quotes:
        spread = (best - q.rate) / best * 100 if best > 0 else Decimal("0")
        comparisons.append(
            RateComparison(
                exchange=q.exchange,
                rate=q.rate,
                spread_pct=spread,
                effective_rate=q.rate * (Decimal("1") - q.fee_pct / 100),
                liquidity=q.liquidity,
                fee_pct=q.fee_pct,
                is_best=q.rate == best,
            )
        )

    comparisons.sort(key=lambda c: c.effective_rate, reverse=True)
    logger.debug(f"Compared {len(comparisons)} quotes for {quotes[0].pair}")
    return comparisons


def rate_dispersion(quotes: Sequence[ExchangeRate]) -> Dict[str, float]:
    """
    Summary statistics of the quoted rates.

    Returns:
        Dict with count, mean, std (sample), min, max and spread_pct
        ((max - min) / min * 100). Zeros for an empty input.
    """
    if not quotes:
        return {"count": 0, "mean": 0.0, "std": 0.0, "min": 0.0, "max": 0.0, "spread_pct": 0.0}
    _check_single_pair(quotes)

    rates = np.array([float(q.rate) for q in quotes])
    low = float(np.min(rates))
    high = float(np.max(rates))

    return {
        "count": int(rates.size),
        "mean": float(np.mean(rates)),
        "std": float(np.std(rates, ddof=1)) if rates.size > 1 else 0.0,
        "min": low,
        "max": high,
        "spread_pct": (high - low) / low * 100 if low > 0 else 0.0,
    }
