"""
Visualization script - creates all charts from results.

Run this after run_simulation.py to create visualizations!
"""

from utils.visualizer import visualize_all_results


if __name__ == "__main__":
    print("\n" + "="*70)
    print("GENERATING VISUALIZATIONS")
    print("="*70)

    visualize_all_results('outputs')

    print("\n" + "="*70)
    print("[DONE]")
    print("="*70)
    print("\nCheck outputs/ folder for PNG files:")
    print("   - viz_partial_allocation_budgets.png")
    print("   - viz_gpg_budgets.png")
    print("   - viz_balance_budgets.png")
    print("   - viz_revenue_comparison.png")
    print("="*70)
