"""
Simple visualization utility.
"""

import json
import matplotlib.pyplot as plt
import seaborn as sns
import numpy as np
import pandas as pd
from pathlib import Path

# Set style
sns.set_style("whitegrid")
plt.rcParams['figure.figsize'] = (14, 8)


ALGORITHM_FILES = {
    'partial_allocation': 'partial_allocation_simulation_result.json',
    'gpg': 'gpg_simulation_result.json',
    'balance': 'balance_simulation_result.json'
}


def visualize_all_results(output_dir: str = 'outputs'):
    """
    Create all visualizations from result files.

    Args:
        output_dir: Directory containing result JSON files
    """
    output_path = Path(output_dir)

    print("\nCreating visualizations...")

    # Load results
    results = {}
    for key, filename in ALGORITHM_FILES.items():
        filepath = output_path / filename
        if filepath.exists():
            with open(filepath, 'r') as f:
                results[key] = json.load(f)
            print(f"[OK] Loaded {filename}")

    if not results:
        print(f"[WARNING] No simulation results found in {output_path}/")
        return

    # Create visualizations
    for simulation in results.values():
        plot_budget_trajectories(simulation, output_path)

    plot_revenue_comparison(results, output_path)

    print("\n[DONE] All visualizations created!")
    print(f"Saved to: {output_path}/")


def plot_budget_trajectories(result: dict, output_dir: Path) -> Path:
    """Plot remaining budgets, slabs and per-arrival revenue for one simulation."""
    fig, axes = plt.subplots(2, 2, figsize=(14, 10))
    fig.suptitle(result['description'], fontsize=16, fontweight='bold')

    history = pd.DataFrame(result['budget_history'])
    history['advertiser'] = 'Advertiser ' + history['advertiser_id'].astype(str)

    # 1. Remaining budgets
    ax1 = axes[0, 0]
    sns.lineplot(data=history, x='arrival', y='budget', hue='advertiser', marker='o', ax=ax1)
    ax1.set_xlabel('Arrival')
    ax1.set_ylabel('Remaining Budget ($)')
    ax1.set_title('Remaining Budget by Advertiser')
    ax1.grid(alpha=0.3)

    # 2. Slabs (Balance) or perturbation draws
    ax2 = axes[0, 1]
    if result['algorithm'] == 'balance':
        sns.lineplot(data=history, x='arrival', y='slab', hue='advertiser',
                     drawstyle='steps-post', ax=ax2, legend=False)
        ax2.set_ylabel('Slab')
        ax2.set_title(f"Budget Slab (k={result['k']})")
    else:
        draws = history.drop_duplicates('advertiser_id')
        ax2.bar(draws['advertiser'], draws['perturbation'], color='steelblue',
                edgecolor='black', alpha=0.7)
        ax2.set_ylabel('y')
        ax2.set_title('Perturbation Draws')
    ax2.set_xlabel('Arrival' if result['algorithm'] == 'balance' else 'Advertiser')
    ax2.grid(axis='y', alpha=0.3)

    # 3. Revenue per arrival
    ax3 = axes[1, 0]
    revenues = [d['revenue'] for d in result['decisions']]
    arrivals = np.arange(1, len(revenues) + 1)
    ax3.bar(arrivals, revenues, color='green', alpha=0.7, edgecolor='black')
    ax3.plot(arrivals, np.cumsum(revenues), marker='o', linewidth=2, color='darkgreen',
             label='Cumulative')
    ax3.set_xlabel('Arrival')
    ax3.set_ylabel('Revenue ($)')
    ax3.set_title('Revenue per Arrival')
    ax3.legend()
    ax3.grid(axis='y', alpha=0.3)

    # 4. Metrics
    ax4 = axes[1, 1]
    ax4.axis('off')
    summary = result['summary']
    metrics_text = f"""
    Algorithm: {result['algorithm']}
    beta: {result['beta']}    k: {result['k']}

    Arrivals: {summary['arrivals_processed']}
    Match Rate: {summary['match_rate']:.0%}

    Total Revenue: ${summary['total_revenue']:.2f}
    Budget Utilization: {summary['budget_utilization']:.1%}
    """
    ax4.text(0.1, 0.5, metrics_text, fontsize=12, family='monospace',
             bbox=dict(boxstyle='round', facecolor='wheat', alpha=0.5))

    filepath = Path(output_dir) / f"viz_{result['algorithm']}_budgets.png"
    plt.tight_layout()
    plt.savefig(filepath, dpi=150, bbox_inches='tight')
    plt.close()
    print(f"[OK] Created {filepath.name}")
    return filepath


def plot_revenue_comparison(results: dict, output_dir: Path) -> Path:
    """Plot total revenue and budget utilization side by side for each algorithm."""
    fig, axes = plt.subplots(1, 2, figsize=(14, 6))
    fig.suptitle('Algorithm Comparison', fontsize=16, fontweight='bold')

    names = list(results.keys())
    revenues = [results[n]['summary']['total_revenue'] for n in names]
    utilization = [results[n]['summary']['budget_utilization'] * 100 for n in names]
    x = np.arange(len(names))

    ax1 = axes[0]
    ax1.bar(x, revenues, color='steelblue', alpha=0.7, edgecolor='black')
    ax1.set_ylabel('Revenue ($)')
    ax1.set_title('Total Revenue')
    ax1.set_xticks(x)
    ax1.set_xticklabels(names, rotation=15)
    ax1.grid(axis='y', alpha=0.3)

    ax2 = axes[1]
    ax2.bar(x, utilization, color='darkred', alpha=0.7, edgecolor='black')
    ax2.set_ylabel('Utilization (%)')
    ax2.set_title('Budget Utilization')
    ax2.set_xticks(x)
    ax2.set_xticklabels(names, rotation=15)
    ax2.grid(axis='y', alpha=0.3)

    filepath = Path(output_dir) / 'viz_revenue_comparison.png'
    plt.tight_layout()
    plt.savefig(filepath, dpi=150, bbox_inches='tight')
    plt.close()
    print(f"[OK] Created {filepath.name}")
    return filepath
