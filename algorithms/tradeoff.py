"""
Trade-off Functions

Weights that discount a raw bid so matching stays budget-aware:
- g_time: time-based weight for the partial allocation algorithm
- g_perturb: random-draw weight for the perturbed-greedy algorithm
- psi: slab-based weight for the balance algorithm
"""

import math

import numpy as np


def g_time(t: int, beta: float) -> float:
    """
    Time trade-off exp(beta * (t - 1)).

    Grows with the number of processed arrivals. Overflows to inf
    instead of raising, matching IEEE double semantics.
    """
    with np.errstate(over='ignore'):
        return float(np.exp(beta * (t - 1)))


def g_perturb(y: float, beta: float) -> float:
    """Perturbation trade-off exp(beta * (y - 1)) for a draw y in [0, 1)."""
    with np.errstate(over='ignore'):
        return float(np.exp(beta * (y - 1)))


def psi(slab: int, k: int) -> float:
    """
    Balance trade-off 1 - exp(-(1 - slab / k)).

    Just under 1 - 1/e for slab 1, falling to 0 at slab k.
    """
    return 1 - math.exp(-(1 - slab / k))


def current_slab(budget: float, initial_budget: float, k: int) -> int:
    """
    Discretize spend into a slab in 1..k.

    Args:
        budget: Remaining budget
        initial_budget: Budget at registration
        k: Number of slabs

    Returns:
        1 when nothing is spent, otherwise ceil(spent_fraction * k) capped at k
    """
    if budget >= initial_budget:
        return 1
    spent_fraction = (initial_budget - budget) / initial_budget
    return min(k, int(math.ceil(spent_fraction * k)))
