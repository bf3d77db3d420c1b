"""
Online Allocation Algorithms

This package contains the online ad allocation core:
- tradeoff: trade-off functions g_time, g_perturb and psi
- advertiser_registry: advertiser budget state and its single debit path
- online_allocation: allocation engine with Partial Allocation, GPG and Balance strategies
"""

from algorithms.advertiser_registry import Advertiser, AdvertiserRegistry
from algorithms.tradeoff import g_time, g_perturb, psi, current_slab
from algorithms.online_allocation import (
    AlgorithmType,
    AllocationStrategy,
    PartialAllocationStrategy,
    PerturbedGreedyStrategy,
    BalanceStrategy,
    FractionalAllocation,
    MatchResult,
    OnlineAllocationEngine
)

__all__ = [
    'Advertiser',
    'AdvertiserRegistry',
    'g_time',
    'g_perturb',
    'psi',
    'current_slab',
    'AlgorithmType',
    'AllocationStrategy',
    'PartialAllocationStrategy',
    'PerturbedGreedyStrategy',
    'BalanceStrategy',
    'FractionalAllocation',
    'MatchResult',
    'OnlineAllocationEngine'
]
