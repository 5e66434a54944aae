# viz/plot_utils.py
"""
Utility plotting functions for simulation runs.

Provides:
- time-series plotting of resource pools and growth progress
- summary plots for a run (time series + final plant render + text stats)

`history` is a list of `sim.engine.snapshot` dicts, or an equivalent dict of lists.
"""

import logging
import os

import matplotlib.pyplot as plt

logger = logging.getLogger(__name__)

POOLS = ['energy', 'water', 'nitrogen', 'phosphorus', 'potassium', 'health']
GROWTH = ['root_spread', 'root_depth', 'root_structural', 'trunk_height', 'branch_length', 'leaf_mass',
          'flower_progress']


def to_columns(history):
    """Turn a list of snapshot dicts into a dict of lists."""
    if isinstance(history, dict):
        return history
    columns = {}
    for snap in history:
        for key, value in snap.items():
            columns.setdefault(key, []).append(value)
    return columns


def plot_time_series(history, out_path=None, title=None):
    """Plot pools (top) and growth progress (bottom) against the in-game day."""
    log = to_columns(history)
    n = len(log.get('health', []))
    day = log.get('day', list(range(n)))

    fig, (ax1, ax2) = plt.subplots(2, 1, figsize=(12, 8), sharex=True)
    for key in POOLS:
        if key in log:
            ax1.plot(day, log[key], label=key.capitalize(), linewidth=2 if key == 'health' else 1)
    ax1.set_ylabel('Pool (0-100)')
    ax1.set_ylim(0, 100)
    ax1.legend(loc='upper left', ncol=3, fontsize=8)

    for key in GROWTH:
        if key in log:
            ax2.plot(day, log[key], label=key.replace('_', ' '))
    ax2.set_xlabel('Day')
    ax2.set_ylabel('Growth progress')
    ax2.legend(loc='upper left', ncol=2, fontsize=8)

    if 'seeds_produced' in log and any(log['seeds_produced']):
        ax3 = ax2.twinx()
        ax3.step(day, log['seeds_produced'], color='tab:purple', linestyle=':', label='Seeds')
        ax3.set_ylabel('Seeds')
        ax3.legend(loc='upper right', fontsize=8)

    if title:
        fig.suptitle(title)

    if out_path:
        fig.savefig(out_path, dpi=150)
        plt.close(fig)
    else:
        plt.show()
    return out_path


def plot_run_summary(history, state=None, out_dir='plots', prefix='run'):
    """Save time-series plot, an optional final render and a text summary of one run."""
    from viz.render import render_plant

    os.makedirs(out_dir, exist_ok=True)
    plot_time_series(history, out_path=os.path.join(out_dir, f'{prefix}_timeseries.png'), title=f'{prefix} summary')
    if state is not None:
        render_plant(state, out_path=os.path.join(out_dir, f'{prefix}_plant.png'))

    log = to_columns(history)
    if log.get('health'):
        with open(os.path.join(out_dir, f'{prefix}_summary.txt'), 'w') as f:
            f.write(f"final_day: {log['day'][-1]}\n")
            f.write(f"final_health: {log['health'][-1]:.2f}\n")
            f.write(f"min_health: {min(log['health']):.2f}\n")
            f.write(f"seeds_produced: {log['seeds_produced'][-1]}\n")
            f.write(f"peak_leaf_mass: {max(log['leaf_mass']):.2f}\n")
            f.write(f"final_trunk_height: {log['trunk_height'][-1]:.2f}\n")

    logger.info("Saved run summary to %s/%s_*", out_dir, prefix)
