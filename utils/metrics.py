"""
Simple metrics calculation utilities.
"""

from typing import Mapping


def calculate_arrival_revenue(bids: Mapping[int, float], result) -> float:
    """
    Revenue collected on one arrival.

    Fractional results earn bid * fraction per advertiser,
    matches earn the winner's full bid, no match earns nothing.
    """
    return result.revenue(bids)


def calculate_match_rate(results: list) -> float:
    """Share of arrivals that were (at least partly) allocated."""
    if not results:
        return 0.0
    return sum(1 for r in results if r.matched) / len(results)
