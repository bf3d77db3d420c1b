"""
Main script to run the online allocation simulation.

This is the entry point - just run this file and every algorithm is simulated!
"""

from automation.simulator import OnlineAllocationSimulator


def main():
    """
    Main function - runs all algorithms on the same generated data.

    5 advertisers, 10 arrivals, beta=0.5, k=100 slabs for Balance.
    """

    simulator = OnlineAllocationSimulator(beta=0.5, k=100, verbose=True)

    print("\nRunning all algorithms...\n")
    results = simulator.run_all_algorithms(n_advertisers=5, n_arrivals=10)

    # # Run a single algorithm on your own data instead:
    # from algorithms import Advertiser
    # advertisers = [Advertiser(id=1, initial_budget=100.0), Advertiser(id=2, initial_budget=100.0)]
    # arrivals = [{1: 40.0, 2: 60.0}, {1: 70.0, 2: 50.0}]
    # gpg_result = simulator.run_algorithm('gpg', advertisers, arrivals)

    print("\n" + "="*70)
    print("[DONE] ALL COMPLETE!")
    print("="*70)
    print("\nCheck outputs/ folder for results:")
    print("   - partial_allocation_simulation_result.json")
    print("   - gpg_simulation_result.json")
    print("   - balance_simulation_result.json")
    print("   - comparison_result.json")
    print("\nNext step: Run visualize.py to create charts!")
    print("="*70)

    return results


if __name__ == "__main__":
    main()
