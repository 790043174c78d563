"""Epsilon comparison for price thresholds.

Upstream feeds hand us prices with varying decimal precision (150.5 vs
150.50001), so thresholds are never compared with ``==``.
"""

from collections.abc import Iterable

# Supports crypto quotes up to 5 decimal places
PRICE_TOLERANCE = 1e-5

# Binary float error: 150.50001 - 150.5 is 1.0000000003e-05, not 1e-05
FLOAT_SLACK = 1e-10

# Largest difference still treated as the same price; shared with the ledger query
MATCH_WINDOW = PRICE_TOLERANCE + FLOAT_SLACK


def prices_equal(a: float, b: float) -> bool:
    return abs(float(a) - float(b)) <= MATCH_WINDOW


def matches_any(value: float, candidates: Iterable[float]) -> bool:
    """True if ``value`` is tolerance-equal to at least one candidate."""
    return any(prices_equal(value, candidate) for candidate in candidates)
