"""
Data Simulator for Online Allocation

Generates synthetic inputs for the allocation engine:
- Advertisers with random budgets
- Arrival sequences where each advertiser bids with some probability
"""

import numpy as np
import pandas as pd
from typing import Dict, List, Optional, Tuple

from algorithms.advertiser_registry import Advertiser


class ArrivalDataSimulator:
    """
    Simulates advertisers and bid arrivals for testing and demos.
    """

    BUDGET_RANGE = (100.0, 1000.0)   # Initial budget ~ U[100, 1000)
    BID_RANGE = (10.0, 50.0)         # Bid ~ U[10, 50)
    BID_PROBABILITY = 0.8            # Chance an advertiser bids on an arrival

    def __init__(self, seed: Optional[int] = 42):
        """
        Initialize simulator with random seed for reproducibility.

        Args:
            seed: Random seed (None for a non-deterministic run)
        """
        self.seed = seed
        self.rng = np.random.default_rng(seed)

    def generate_advertisers(
        self,
        n_advertisers: int = 5,
        budget_range: Optional[Tuple[float, float]] = None
    ) -> List[Advertiser]:
        """
        Generate advertisers with ids 1..n.

        Args:
            n_advertisers: Number of advertisers
            budget_range: (low, high) for uniform initial budgets

        Returns:
            List of advertisers with full budgets
        """
        if n_advertisers <= 0:
            raise ValueError(f"n_advertisers must be positive, got {n_advertisers}")

        low, high = budget_range or self.BUDGET_RANGE
        budgets = self.rng.uniform(low, high, size=n_advertisers)

        return [
            Advertiser(id=i + 1, initial_budget=round(float(budget), 2))
            for i, budget in enumerate(budgets)
        ]

    def generate_arrivals(
        self,
        n_advertisers: int,
        n_arrivals: int = 10,
        bid_probability: Optional[float] = None,
        bid_range: Optional[Tuple[float, float]] = None
    ) -> List[Dict[int, float]]:
        """
        Generate a sequence of bid maps.

        Args:
            n_advertisers: Advertisers with ids 1..n that may bid
            n_arrivals: Number of arrivals
            bid_probability: Chance each advertiser bids on each arrival
            bid_range: (low, high) for uniform bids

        Returns:
            List of {advertiser_id: bid}
        """
        p = self.BID_PROBABILITY if bid_probability is None else bid_probability
        low, high = bid_range or self.BID_RANGE

        arrivals = []
        for _ in range(n_arrivals):
            bids = {}
            for advertiser_id in range(1, n_advertisers + 1):
                if self.rng.random() < p:
                    bids[advertiser_id] = round(float(self.rng.uniform(low, high)), 2)
            arrivals.append(bids)

        return arrivals

    def generate_test_data(
        self,
        n_advertisers: int = 5,
        n_arrivals: int = 10
    ) -> Tuple[List[Advertiser], List[Dict[int, float]]]:
        """Generate advertisers and arrivals together."""
        advertisers = self.generate_advertisers(n_advertisers)
        arrivals = self.generate_arrivals(n_advertisers, n_arrivals)
        return advertisers, arrivals

    @staticmethod
    def arrivals_to_frame(arrivals: List[Dict[int, float]]) -> pd.DataFrame:
        """
        Long-format view of an arrival sequence.

        Returns:
            DataFrame with columns ['arrival', 'advertiser_id', 'bid']
        """
        rows = [
            {'arrival': t, 'advertiser_id': advertiser_id, 'bid': bid}
            for t, bids in enumerate(arrivals, start=1)
            for advertiser_id, bid in sorted(bids.items())
        ]
        return pd.DataFrame(rows, columns=['arrival', 'advertiser_id', 'bid'])


def generate_test_data(
    n_advertisers: int = 5,
    n_arrivals: int = 10,
    seed: int = 42
) -> Tuple[List[Advertiser], List[Dict[int, float]]]:
    """
    Convenience function to generate a test dataset.

    Args:
        n_advertisers: Number of advertisers
        n_arrivals: Number of arrivals
        seed: Random seed

    Returns:
        (advertisers, arrivals)
    """
    simulator = ArrivalDataSimulator(seed=seed)
    return simulator.generate_test_data(n_advertisers, n_arrivals)
