"""
Advertiser Registry

Holds advertiser identity and budget state for the allocation engine:
- Registration with validation and perturbation draws
- Single debit path for all budget mutation
- Availability tracking for the perturbed-greedy algorithm
"""

import math
from dataclasses import dataclass, asdict
from numbers import Real
from typing import Dict, Iterable, Iterator, List, Optional

import numpy as np


@dataclass
class Advertiser:
    """A budget-constrained advertiser."""
    id: int
    initial_budget: float
    budget: Optional[float] = None          # Defaults to initial_budget
    perturbation: Optional[float] = None    # y ~ U[0, 1), drawn at registration if None
    available: bool = True

    def __post_init__(self):
        if self.budget is None:
            self.budget = self.initial_budget

    def copy(self) -> 'Advertiser':
        """Fresh advertiser with the same id, budget ceiling and draw."""
        return Advertiser(
            id=self.id,
            initial_budget=self.initial_budget,
            perturbation=self.perturbation
        )

    def to_dict(self) -> Dict:
        return asdict(self)


class AdvertiserRegistry:
    """
    Registry of advertisers keyed by id.

    The only component allowed to change an advertiser's budget;
    every change goes through debit(), which keeps
    0 <= budget <= initial_budget.
    """

    BUDGET_TOLERANCE = 1e-9     # Float slack allowed when a debit drains a budget

    def __init__(
        self,
        advertisers: Iterable[Advertiser],
        rng: Optional[np.random.Generator] = None
    ):
        """
        Register advertisers.

        Args:
            advertisers: Advertisers to register (ids must be unique and positive)
            rng: Random source for perturbation draws (default: fresh generator)
        """
        self.rng = rng if rng is not None else np.random.default_rng()
        self._advertisers: Dict[int, Advertiser] = {}

        for adv in advertisers:
            self._register(adv)

        if not self._advertisers:
            raise ValueError("At least one advertiser is required")

    def _register(self, adv: Advertiser):
        if isinstance(adv.id, bool) or not isinstance(adv.id, (int, np.integer)) or adv.id <= 0:
            raise ValueError(f"Advertiser id must be a positive integer, got {adv.id!r}")
        if adv.id in self._advertisers:
            raise ValueError(f"Duplicate advertiser id: {adv.id}")
        budget = adv.initial_budget
        if isinstance(budget, bool) or not isinstance(budget, Real) or not math.isfinite(budget) or budget <= 0:
            raise ValueError(
                f"Advertiser {adv.id}: initial budget must be positive, got {adv.initial_budget}"
            )

        if adv.perturbation is None:
            adv.perturbation = float(self.rng.random())
        elif not 0 <= adv.perturbation < 1:
            raise ValueError(
                f"Advertiser {adv.id}: perturbation must lie in [0, 1), got {adv.perturbation}"
            )

        adv.id = int(adv.id)
        adv.budget = adv.initial_budget
        adv.available = True
        self._advertisers[adv.id] = adv

    def __len__(self) -> int:
        return len(self._advertisers)

    def __contains__(self, advertiser_id) -> bool:
        return advertiser_id in self._advertisers

    def __iter__(self) -> Iterator[Advertiser]:
        for advertiser_id in self.ids():
            yield self._advertisers[advertiser_id]

    def get(self, advertiser_id: int) -> Advertiser:
        return self._advertisers[advertiser_id]

    def ids(self) -> List[int]:
        """All ids in ascending order (the tie-break order)."""
        return sorted(self._advertisers)

    def with_budget(self) -> List[int]:
        """Ids with budget left, ascending."""
        return [a.id for a in self if a.budget > 0]

    def debit(self, advertiser_id: int, amount: float) -> float:
        """
        Charge an advertiser.

        Args:
            advertiser_id: Advertiser to charge
            amount: Non-negative amount, at most the remaining budget

        Returns:
            Remaining budget after the debit
        """
        adv = self._advertisers[advertiser_id]

        if amount < 0:
            raise ValueError(f"Debit amount must be non-negative, got {amount}")
        if amount > adv.budget + self.BUDGET_TOLERANCE:
            raise ValueError(
                f"Advertiser {advertiser_id}: debit {amount} exceeds remaining budget {adv.budget}"
            )

        adv.budget = min(adv.initial_budget, max(0.0, adv.budget - amount))
        return adv.budget

    # Availability (perturbed-greedy only)

    def mark_unavailable(self, advertiser_id: int):
        self._advertisers[advertiser_id].available = False

    def is_available(self, advertiser_id: int) -> bool:
        return self._advertisers[advertiser_id].available

    def available_ids(self) -> List[int]:
        return [a.id for a in self if a.available]

    # Snapshots

    def budgets(self) -> Dict[int, float]:
        return {a.id: a.budget for a in self}

    def snapshot(self) -> List[Dict]:
        return [a.to_dict() for a in self]
