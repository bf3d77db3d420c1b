"""
Online Ad Allocation Engine

Processes a stream of arrivals (impressions) carrying advertiser bids and
decides each one immediately and irrevocably, within advertiser budgets:
- Partial Allocation: fractional split of a divisible arrival
- Generalized Perturbed-Greedy (GPG): single winner, perturbed by a random draw
- Balance: single winner, biased toward advertisers with unspent budget

Ties are resolved by evaluating advertisers in ascending id order and
replacing the incumbent only on a strictly greater score, so the lowest
id wins an exact tie.
"""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from numbers import Real
from typing import Dict, Iterable, List, Mapping, Optional, Union

import numpy as np

from algorithms.advertiser_registry import Advertiser, AdvertiserRegistry
from algorithms.tradeoff import current_slab, g_perturb, g_time, psi


class AlgorithmType(Enum):
    """Supported online allocation algorithms."""
    PARTIAL_ALLOCATION = "partial_allocation"
    GPG = "gpg"
    BALANCE = "balance"


@dataclass
class FractionalAllocation:
    """Result of a partial allocation: advertiser id -> fraction of the arrival."""
    t: int
    allocations: Dict[int, float] = field(default_factory=dict)

    @property
    def matched(self) -> bool:
        return bool(self.allocations)

    @property
    def total_fraction(self) -> float:
        return sum(self.allocations.values())

    def revenue(self, bids: Mapping[int, float]) -> float:
        return sum(bids.get(i, 0.0) * fraction for i, fraction in self.allocations.items())

    def to_dict(self) -> Dict:
        return {'t': self.t, 'allocations': dict(self.allocations)}


@dataclass
class MatchResult:
    """Result of an integral match. advertiser_id is None when nobody qualified."""
    t: int
    advertiser_id: Optional[int] = None

    @property
    def matched(self) -> bool:
        return self.advertiser_id is not None

    def revenue(self, bids: Mapping[int, float]) -> float:
        if self.advertiser_id is None:
            return 0.0
        return bids.get(self.advertiser_id, 0.0)

    def to_dict(self) -> Dict:
        return {'t': self.t, 'advertiser_id': self.advertiser_id}


AllocationResult = Union[FractionalAllocation, MatchResult]


class AllocationStrategy(ABC):
    """
    One online decision rule over a shared advertiser registry.

    Strategies read bids, score advertisers and mutate budgets only
    through the registry.
    """

    algorithm: AlgorithmType

    def __init__(self, registry: AdvertiserRegistry, beta: float, k: int):
        self.registry = registry
        self.beta = beta
        self.k = k

    @abstractmethod
    def process(self, bids: Mapping[int, float], t: int) -> AllocationResult:
        """Decide arrival number t."""


class PartialAllocationStrategy(AllocationStrategy):
    """
    Fractional allocation of a divisible arrival.

    Repeatedly gives the remaining fraction to the advertiser maximizing
    bid * (1 - g_time(t) * y), capped by what its budget can pay for,
    until the arrival is filled or nobody qualifies.
    """

    algorithm = AlgorithmType.PARTIAL_ALLOCATION

    def process(self, bids: Mapping[int, float], t: int) -> FractionalAllocation:
        allocations: Dict[int, float] = {}
        delta = 0.0
        working = self.registry.with_budget()
        gt = g_time(t, self.beta)

        while delta < 1 and working:
            best_id = self._select(bids, working, gt)
            if best_id is None:
                break

            adv = self.registry.get(best_id)
            bid = bids[best_id]
            remaining = 1 - delta
            affordable = adv.budget / bid

            if affordable <= 0:
                # Budget too small to buy any representable fraction
                working = [i for i in working if i != best_id]
                continue

            if affordable >= remaining:
                delta_i = remaining
                # bid * remaining may round one ulp above the budget
                self.registry.debit(best_id, min(bid * delta_i, adv.budget))
                delta = 1.0
            else:
                # Budget-capped step spends the whole remaining budget
                delta_i = affordable
                self.registry.debit(best_id, adv.budget)
                delta += delta_i

            allocations[best_id] = allocations.get(best_id, 0.0) + delta_i
            working = [i for i in working if self.registry.get(i).budget > 0]

        return FractionalAllocation(t=t, allocations=allocations)

    def _select(self, bids: Mapping[int, float], working: List[int], gt: float) -> Optional[int]:
        best_id = None
        best_value = -math.inf

        for advertiser_id in working:
            bid = bids.get(advertiser_id, 0.0)
            if bid <= 0:
                continue
            y = self.registry.get(advertiser_id).perturbation
            value = bid * (1 - gt * y)
            if value > best_value:
                best_value = value
                best_id = advertiser_id

        return best_id


class PerturbedGreedyStrategy(AllocationStrategy):
    """
    Generalized Perturbed-Greedy: whole arrival to argmax bid * (1 - g(y)).

    An advertiser that cannot afford its bid, or whose budget drops below
    EXHAUSTION_THRESHOLD after winning, is marked unavailable for good.
    """

    algorithm = AlgorithmType.GPG

    EXHAUSTION_THRESHOLD = 0.01

    def process(self, bids: Mapping[int, float], t: int) -> MatchResult:
        best_id = None
        best_value = -math.inf

        for advertiser_id in self.registry.available_ids():
            bid = bids.get(advertiser_id, 0.0)
            if bid <= 0:
                continue

            adv = self.registry.get(advertiser_id)
            if adv.budget < bid:
                self.registry.mark_unavailable(advertiser_id)
                continue

            value = bid * (1 - g_perturb(adv.perturbation, self.beta))
            if value > best_value:
                best_value = value
                best_id = advertiser_id

        if best_id is not None:
            remaining = self.registry.debit(best_id, bids[best_id])
            if remaining < self.EXHAUSTION_THRESHOLD:
                self.registry.mark_unavailable(best_id)

        return MatchResult(t=t, advertiser_id=best_id)


class BalanceStrategy(AllocationStrategy):
    """
    Balance: whole arrival to argmax bid * psi(slab), where the slab
    measures how much of the advertiser's budget is already spent.
    """

    algorithm = AlgorithmType.BALANCE

    def process(self, bids: Mapping[int, float], t: int) -> MatchResult:
        best_id = None
        best_value = -math.inf

        for advertiser_id in self.registry.ids():
            bid = bids.get(advertiser_id, 0.0)
            if bid <= 0:
                continue

            adv = self.registry.get(advertiser_id)
            if adv.budget < bid:
                continue

            slab = current_slab(adv.budget, adv.initial_budget, self.k)
            value = bid * psi(slab, self.k)
            if value > best_value:
                best_value = value
                best_id = advertiser_id

        if best_id is not None:
            self.registry.debit(best_id, bids[best_id])

        return MatchResult(t=t, advertiser_id=best_id)


STRATEGIES = {
    AlgorithmType.PARTIAL_ALLOCATION: PartialAllocationStrategy,
    AlgorithmType.GPG: PerturbedGreedyStrategy,
    AlgorithmType.BALANCE: BalanceStrategy,
}


class OnlineAllocationEngine:
    """
    Online ad allocation engine.

    Owns the advertiser registry and one allocation strategy fixed at
    construction. Each call to process_arrival() advances the arrival
    counter and runs to completion; the engine is not safe for
    concurrent calls.

    Example:
        >>> engine = OnlineAllocationEngine(advertisers, beta=0.5, algorithm='balance', k=100)
        >>> result = engine.process_arrival({1: 25.0, 2: 40.0})
        >>> result.advertiser_id
        2
    """

    DEFAULT_BETA = 0.5
    DEFAULT_SLABS = 100

    def __init__(
        self,
        advertisers: Iterable[Advertiser],
        beta: float = DEFAULT_BETA,
        algorithm: Union[AlgorithmType, str] = AlgorithmType.BALANCE,
        k: int = DEFAULT_SLABS,
        rng: Optional[np.random.Generator] = None
    ):
        """
        Initialize engine.

        Args:
            advertisers: Advertisers to register (budget and y are reset/drawn here)
            beta: Perturbation coefficient for the trade-off functions
            algorithm: AlgorithmType or its string value
            k: Number of budget slabs (Balance only)
            rng: Random source for perturbation draws
        """
        try:
            algorithm = AlgorithmType(algorithm)
        except ValueError:
            valid = [a.value for a in AlgorithmType]
            raise ValueError(f"Unknown algorithm {algorithm!r}, expected one of {valid}")

        if isinstance(beta, bool) or not isinstance(beta, Real) or not math.isfinite(beta):
            raise ValueError(f"beta must be a finite real number, got {beta!r}")
        if isinstance(k, bool) or not isinstance(k, (int, np.integer)) or k <= 0:
            raise ValueError(f"Slab count k must be a positive integer, got {k!r}")

        advertisers = list(advertisers)
        if not advertisers:
            raise ValueError("At least one advertiser is required")

        self.algorithm = algorithm
        self.beta = float(beta)
        self.k = int(k)
        self.registry = AdvertiserRegistry(advertisers, rng=rng)
        self.strategy = STRATEGIES[algorithm](self.registry, self.beta, self.k)
        self._t = 0

    @property
    def t(self) -> int:
        """Number of arrivals processed so far."""
        return self._t

    def process_arrival(self, bids: Mapping[int, float]) -> AllocationResult:
        """
        Process one arrival.

        Args:
            bids: advertiser id -> non-negative bid (absent or zero means no bid)

        Returns:
            FractionalAllocation for Partial Allocation, MatchResult otherwise
        """
        bids = self._validate_bids(bids)
        self._t += 1
        return self.strategy.process(bids, self._t)

    def process_arrivals(self, arrivals: Iterable[Mapping[int, float]]) -> List[AllocationResult]:
        return [self.process_arrival(bids) for bids in arrivals]

    @staticmethod
    def _validate_bids(bids: Mapping[int, float]) -> Dict[int, float]:
        if not isinstance(bids, Mapping):
            raise ValueError(f"Bids must be a mapping of advertiser id to bid, got {type(bids).__name__}")

        validated = {}
        for advertiser_id, bid in bids.items():
            if isinstance(bid, bool) or not isinstance(bid, Real) or not math.isfinite(bid):
                raise ValueError(f"Bid for advertiser {advertiser_id} must be a finite number, got {bid!r}")
            if bid < 0:
                raise ValueError(f"Bid for advertiser {advertiser_id} is negative: {bid}")
            validated[advertiser_id] = float(bid)
        return validated

    def get_budgets(self) -> Dict[int, float]:
        """Get remaining budget per advertiser."""
        return self.registry.budgets()

    def get_current_slab(self, advertiser_id: int) -> int:
        adv = self.registry.get(advertiser_id)
        return current_slab(adv.budget, adv.initial_budget, self.k)

    def get_psi(self, advertiser_id: int) -> float:
        return psi(self.get_current_slab(advertiser_id), self.k)

    def get_summary(self) -> Dict:
        """Get summary of engine state."""
        total_initial = sum(a.initial_budget for a in self.registry)
        total_remaining = sum(a.budget for a in self.registry)

        return {
            'algorithm': self.algorithm.value,
            'beta': self.beta,
            'k': self.k,
            'arrivals_processed': self._t,
            'n_advertisers': len(self.registry),
            'total_initial_budget': total_initial,
            'total_remaining_budget': total_remaining,
            'total_spent': total_initial - total_remaining,
            'budget_utilization': (total_initial - total_remaining) / total_initial,
            'exhausted_advertisers': [a.id for a in self.registry if a.budget <= 0],
            'unavailable_advertisers': [a.id for a in self.registry if not a.available]
        }
