#!/usr/bin/env python3
"""
Baseline Controller for the plant growth simulation
A simple rule-based player to sanity-check the simulation and serve as a
reference for RL agents.

A healthy simulation should let this controller unlock the trunk, place
trunk segments and leaves, and keep health well above zero for a full year.
"""

import argparse
import json
import logging
from pathlib import Path
from typing import Dict, List, Optional

import numpy as np

from config import load_config
from rl.gym_env import ACTION_NAMES, PlantGrowthEnv, apply_action, decode_observation, encode_observation
from sim.engine import snapshot, tick
from sim.state import GameState

logger = logging.getLogger(__name__)

A = {name: i for i, name in enumerate(ACTION_NAMES)}


class BaselineController:
    """
    Rule-based player working from the normalized observation.

    Rules:
    1. Rest when energy or water is critically low
    2. Grow roots until the trunk unlocks
    3. Every few decisions, try placing a trunk segment, then a leaf
    4. Keep roots ahead of leaf mass and anchorage ahead of trunk height
    5. Otherwise grow leaves, then trunk, then branches
    """

    def __init__(self, place_every=6):
        self.place_every = place_every
        self.decisions = 0
        self.name = "Baseline"

    def reset(self):
        self.decisions = 0

    def _root_action(self, obs: Dict[str, float]) -> int:
        if obs['plant_root_structural'] < obs['plant_trunk_height'] * 0.8:
            return A['roots_structural']
        if obs['pool_water'] < 0.4:
            return A['roots_taproot']
        return A['roots_surface']

    def choose(self, obs: Dict[str, float]) -> int:
        self.decisions += 1
        energy, water = obs['pool_energy'], obs['pool_water']
        roots = obs['plant_root_depth'] + obs['plant_root_spread'] + obs['plant_root_structural']

        if energy < 0.12 or water < 0.08:
            return A['idle']
        if not obs['unlocked_trunk']:
            return A['roots_surface'] if obs['plant_root_spread'] < 0.25 else A['roots_structural']

        phase = self.decisions % self.place_every
        if phase == 0 and energy > 0.35 and water > 0.2:
            return A['place_trunk']
        if phase == self.place_every // 2 and energy > 0.3 and obs['unlocked_leaves']:
            return A['place_leaf']

        if obs['plant_leaf_mass'] * 1.5 > roots:
            return self._root_action(obs)
        if obs['unlocked_leaves'] and obs['plant_leaf_mass'] < 0.3:
            return A['leaves']
        if obs['plant_trunk_height'] < 0.4:
            return A['trunk']
        if obs['unlocked_branches'] and obs['plant_branch_length'] < obs['plant_trunk_height']:
            return A['branches']
        return A['leaves']

    def predict(self, obs, deterministic=True):
        return self.choose(decode_observation(obs)), None


def drive(state: GameState, ticks: int, controller: Optional[BaselineController] = None,
          ticks_per_decision: int = 10, record_every: int = 10) -> List[dict]:
    """Play `ticks` ticks with the controller; returns periodic snapshots."""
    controller = controller or BaselineController()
    history = [snapshot(state)]
    for t in range(ticks):
        if state.life_complete:
            break
        if t % ticks_per_decision == 0:
            action = controller.choose(decode_observation(encode_observation(state)))
            if not apply_action(state, action):
                logger.debug("tick %d: %s had no valid site", state.tick, ACTION_NAMES[action])
        tick(state)
        if state.tick % record_every == 0:
            history.append(snapshot(state))
    if history[-1]['tick'] != state.tick:
        history.append(snapshot(state))
    return history


def run_baseline_evaluation(n_episodes=5, cfg=None, seed=0):
    """Run the baseline controller through PlantGrowthEnv and collect statistics."""
    cfg = cfg if cfg is not None else load_config()
    env = PlantGrowthEnv(cfg=cfg)
    controller = BaselineController()

    results = {'rewards': [], 'lengths': [], 'seeds': [], 'final_health': [], 'growth': [], 'end_reasons': []}

    for episode in range(n_episodes):
        obs, info = env.reset(seed=seed + episode)
        controller.reset()
        done = False
        episode_reward = 0.0
        step = 0
        while not done:
            action, _ = controller.predict(obs, deterministic=True)
            obs, reward, terminated, truncated, info = env.step(action)
            episode_reward += reward
            step += 1
            if step % 30 == 0:
                logger.info("  Day %d: health=%.0f leaves=%.1f trunk=%.1f seeds=%d",
                            info['day'], info['health'], info['leaf_mass'],
                            info['trunk_height'], info['seeds_produced'])
            done = terminated or truncated

        if info['life_complete']:
            reason = 'life_complete'
        elif info['health'] <= 0:
            reason = 'plant_died'
        else:
            reason = 'time_limit'
        growth = sum(info[k] for k in ('root_depth', 'root_spread', 'root_structural', 'trunk_height',
                                       'trunk_girth', 'branch_length', 'leaf_mass'))
        results['rewards'].append(episode_reward)
        results['lengths'].append(step)
        results['seeds'].append(info['seeds_produced'])
        results['final_health'].append(info['health'])
        results['growth'].append(growth)
        results['end_reasons'].append(reason)
        logger.info("Episode %d/%d: steps=%d reward=%.1f seeds=%d health=%.0f end=%s",
                    episode + 1, n_episodes, step, episode_reward, info['seeds_produced'],
                    info['health'], reason)

    logger.info("Mean reward %.2f +/- %.2f | mean seeds %.1f | mean final health %.1f",
                np.mean(results['rewards']), np.std(results['rewards']),
                np.mean(results['seeds']), np.mean(results['final_health']))
    return results


def main():
    parser = argparse.ArgumentParser(description='Run baseline controller evaluation')
    parser.add_argument('--episodes', type=int, default=5, help='Number of episodes to run')
    parser.add_argument('--config', type=str, default=None, help='Config file path')
    parser.add_argument('--out', type=str, default='baseline_results.json', help='Results JSON path')
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format='%(asctime)s [%(levelname)s] %(message)s')
    results = run_baseline_evaluation(n_episodes=args.episodes, cfg=load_config(args.config))

    output_path = Path(args.out)
    with open(output_path, 'w') as f:
        json.dump({k: [v if isinstance(v, str) else float(v) for v in vals] for k, vals in results.items()},
                  f, indent=2)
    logger.info("Results saved to %s", output_path)
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
