"""
Automated Online Allocation Simulation

Drives the allocation engine over arrival sequences and reports results.
No service, no database - just generate (or pass in) data and simulate!

For each algorithm the simulator records:
- Per-arrival decisions and revenue
- Per-arrival budget history (budget, slab, psi, perturbation, availability)
- Summary metrics (total revenue, match rate, budget utilization)
"""

import json
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

import numpy as np
import pandas as pd

from algorithms.advertiser_registry import Advertiser
from algorithms.online_allocation import AlgorithmType, OnlineAllocationEngine
from utils.data_simulator import ArrivalDataSimulator
from utils.metrics import calculate_arrival_revenue, calculate_match_rate


class OnlineAllocationSimulator:
    """
    Automated Online Allocation Simulator.

    Runs each algorithm on fresh copies of the advertisers so budgets
    never leak between runs.

    Example:
        >>> simulator = OnlineAllocationSimulator(beta=0.5, k=100)
        >>> results = simulator.run_all_algorithms(n_advertisers=5, n_arrivals=10)
        >>> results['comparison']['balance']
    """

    ALGORITHM_DESCRIPTIONS = {
        AlgorithmType.PARTIAL_ALLOCATION: "Partial Allocation Algorithm",
        AlgorithmType.GPG: "Generalized Perturbed-Greedy Algorithm",
        AlgorithmType.BALANCE: "Balance Algorithm",
    }

    def __init__(
        self,
        beta: float = OnlineAllocationEngine.DEFAULT_BETA,
        k: int = OnlineAllocationEngine.DEFAULT_SLABS,
        output_dir: str = 'outputs',
        verbose: bool = False,
        seed: Optional[int] = None
    ):
        """
        Initialize simulator.

        Args:
            beta: Perturbation coefficient passed to every engine
            k: Slab count passed to every engine
            output_dir: Where JSON reports are saved
            verbose: Print every arrival's bids, decision and budgets
            seed: Seed for perturbation draws (None for a fresh draw each run)
        """
        self.beta = beta
        self.k = k
        self.output_dir = Path(output_dir)
        self.verbose = verbose
        self.rng = np.random.default_rng(seed)

        print("="*60)
        print("Online Allocation Simulator Initialized")
        print("="*60)

    def run_algorithm(
        self,
        algorithm: Union[AlgorithmType, str],
        advertisers: Sequence[Advertiser],
        arrivals: List[Dict[int, float]],
        save_result: bool = False
    ) -> Dict:
        """
        Simulate one algorithm over an arrival sequence.

        Args:
            algorithm: Algorithm to run
            advertisers: Advertisers (copied, never mutated)
            arrivals: Sequence of bid maps
            save_result: Whether to save result to JSON

        Returns:
            Simulation results
        """
        algorithm = AlgorithmType(algorithm)
        description = self.ALGORITHM_DESCRIPTIONS[algorithm]

        print("\n" + "="*60)
        print(f"SIMULATING: {description.upper()}")
        print("="*60)

        engine = OnlineAllocationEngine(
            [adv.copy() for adv in advertisers],
            beta=self.beta,
            algorithm=algorithm,
            k=self.k,
            rng=self.rng
        )

        history = self._snapshot(engine)
        decisions = []
        results = []
        total_revenue = 0.0

        for bids in arrivals:
            result = engine.process_arrival(bids)
            revenue = calculate_arrival_revenue(bids, result)
            total_revenue += revenue
            results.append(result)

            decision = result.to_dict()
            decision['bids'] = dict(bids)
            decision['revenue'] = revenue
            decisions.append(decision)

            history.extend(self._snapshot(engine))

            if self.verbose:
                self._print_arrival(engine, bids, result)

        summary = engine.get_summary()
        summary['total_revenue'] = round(total_revenue, 2)
        summary['match_rate'] = calculate_match_rate(results)

        simulation = {
            'algorithm': algorithm.value,
            'description': description,
            'beta': self.beta,
            'k': self.k,
            'n_arrivals': len(arrivals),
            'summary': summary,
            'final_budgets': engine.get_budgets(),
            'advertisers': engine.registry.snapshot(),
            'decisions': decisions,
            'budget_history': history
        }

        print(f"[OK] Arrivals processed: {engine.t}")
        print(f"[OK] Match rate: {summary['match_rate']:.0%}")
        print(f"[OK] Budget utilization: {summary['budget_utilization']:.1%}")
        print(f"[OK] Total Revenue for {description}: {total_revenue:.2f}")

        if save_result:
            self._save_result(simulation, f"{algorithm.value}_simulation")

        return simulation

    def run_all_algorithms(
        self,
        advertisers: Optional[Sequence[Advertiser]] = None,
        arrivals: Optional[List[Dict[int, float]]] = None,
        n_advertisers: int = 5,
        n_arrivals: int = 10,
        data_seed: int = 42,
        save_result: bool = True
    ) -> Dict:
        """
        Run every algorithm on the same data.

        Generates data with ArrivalDataSimulator when advertisers/arrivals
        are not given.

        Returns:
            {'results': {algorithm: simulation}, 'comparison': {algorithm: revenue}}
        """
        print("\n" + "="*70)
        print("RUNNING ALL ALLOCATION ALGORITHMS")
        print("="*70)

        if advertisers is None or arrivals is None:
            data_simulator = ArrivalDataSimulator(seed=data_seed)
            advertisers, arrivals = data_simulator.generate_test_data(n_advertisers, n_arrivals)
            print(f"[OK] Generated {len(advertisers)} advertisers and {len(arrivals)} arrivals")

        results = {}
        for algorithm in AlgorithmType:
            try:
                results[algorithm.value] = self.run_algorithm(
                    algorithm, advertisers, arrivals, save_result=save_result
                )
            except Exception as e:
                print(f"[ERROR] {self.ALGORITHM_DESCRIPTIONS[algorithm]} failed: {e}")

        comparison = {
            name: simulation['summary']['total_revenue']
            for name, simulation in results.items()
        }

        print("\n" + "="*70)
        print("REVENUE COMPARISON")
        print("="*70)
        for name, revenue in sorted(comparison.items(), key=lambda x: x[1], reverse=True):
            print(f"   {name:<20} {revenue:>10.2f}")

        report = {'results': results, 'comparison': comparison}
        if save_result:
            self._save_result({'comparison': comparison}, 'comparison')

        return report

    @staticmethod
    def history_frame(simulation: Dict) -> pd.DataFrame:
        """Budget history of a simulation as a DataFrame."""
        return pd.DataFrame(simulation['budget_history'])

    def _snapshot(self, engine: OnlineAllocationEngine) -> List[Dict]:
        """One history row per advertiser at the engine's current arrival."""
        return [
            {
                'arrival': engine.t,
                'advertiser_id': adv.id,
                'budget': adv.budget,
                'initial_budget': adv.initial_budget,
                'slab': engine.get_current_slab(adv.id),
                'psi': engine.get_psi(adv.id),
                'perturbation': adv.perturbation,
                'available': adv.available
            }
            for adv in engine.registry
        ]

    def _print_arrival(self, engine: OnlineAllocationEngine, bids: Dict[int, float], result):
        print(f"\nArrival {engine.t}:")
        print(f"Bids: {dict(sorted(bids.items()))}")

        if engine.algorithm == AlgorithmType.PARTIAL_ALLOCATION:
            print(f"Allocations: {result.allocations}")
        elif result.matched:
            print(f"Matched to Advertiser: {result.advertiser_id}")
        else:
            print("Matched to Advertiser: none")

        print("Remaining budgets:")
        for adv in engine.registry:
            if engine.algorithm == AlgorithmType.BALANCE:
                print(f"Advertiser {adv.id}: Budget={adv.budget:.2f}, "
                      f"Slab={engine.get_current_slab(adv.id)}, psi(slab)={engine.get_psi(adv.id):.3f}")
            else:
                print(f"Advertiser {adv.id}: {adv.budget:.2f} (y={adv.perturbation:.3f})")

    def _save_result(self, result: Dict, filename_prefix: str):
        """Save result to JSON file."""
        self.output_dir.mkdir(parents=True, exist_ok=True)

        filepath = self.output_dir / f"{filename_prefix}_result.json"

        with open(filepath, 'w') as f:
            json.dump(result, f, indent=2, default=str)

        print(f"[SAVED] Result saved: {filepath}")
