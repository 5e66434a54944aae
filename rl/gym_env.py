# rl/gym_env.py
"""
Gymnasium environment around the plant growth simulation.

One env step selects a growth action (or a placement) and then advances
the simulation by `ticks_per_step` ticks. Observations are a flat Box in
[0, 1] whose layout is given by OBS_KEYS.
"""

import logging
from typing import Dict, Optional

import gymnasium as gym
import numpy as np
from gymnasium import spaces

from config import get_biome, get_default_config, get_seed
from sim.engine import commit_placement, create_state, snapshot, tick
from sim.placement import enter_placement
from sim.state import (PROGRESS_FIELDS, RESOURCE_FIELDS, UNIT_FIELDS, Action, GameState, NodeType,
                       RootType, Settings, SimParams)

logger = logging.getLogger(__name__)

# ============================================================================
# OBSERVATION SCHEMA - AUTHORITATIVE DEFINITION
# ============================================================================
# All code that decodes observations must use this order.
# Structure: 8 pools + 5 unit-interval + 9 growth + 4 unlocks + 3 env + 4 season + 1 year = 34
# ============================================================================
OBS_KEYS = (
    [f'pool_{name}' for name in RESOURCE_FIELDS]
    + [f'phys_{name}' for name in UNIT_FIELDS]
    + [f'plant_{name}' for name in PROGRESS_FIELDS]
    + ['unlocked_trunk', 'unlocked_branches', 'unlocked_leaves', 'unlocked_flower']
    + ['env_sunlight', 'env_rainfall', 'env_temperature']
    + ['season_spring', 'season_summer', 'season_autumn', 'season_winter']
    + ['time_year_fraction']
)

# ============================================================================
# ACTION SCHEMA
# ============================================================================
# index -> (name, growth action, root type, placement type)
ACTIONS = [
    ('idle', None, None, None),
    ('roots_taproot', Action.ROOTS, RootType.TAPROOT, None),
    ('roots_structural', Action.ROOTS, RootType.STRUCTURAL, None),
    ('roots_surface', Action.ROOTS, RootType.SURFACE, None),
    ('trunk', Action.TRUNK, None, None),
    ('branches', Action.BRANCHES, None, None),
    ('leaves', Action.LEAVES, None, None),
    ('place_trunk', None, None, NodeType.TRUNK),
    ('place_leaf', None, None, NodeType.LEAF),
]
ACTION_NAMES = [a[0] for a in ACTIONS]

SEED_REWARD = 5.0


def encode_observation(state: GameState) -> np.ndarray:
    plant, env, unlocked = state.plant, state.env, state.unlocked
    lo, hi = state.biome.temp_range
    # noise can push temperature a little past the seasonal range
    temp_norm = (env.temperature - (lo - 2.0)) / max(1e-6, (hi - lo) + 4.0)
    season = np.zeros(4)
    season[state.season] = 1.0

    values = (
        [getattr(state, name) / 100.0 for name in RESOURCE_FIELDS]
        + [getattr(state, name) for name in UNIT_FIELDS]
        + [getattr(plant, name) / 100.0 for name in PROGRESS_FIELDS]
        + [float(unlocked.trunk), float(unlocked.branches), float(unlocked.leaves), float(unlocked.flower)]
        + [env.sunlight, env.rainfall, temp_norm]
        + list(season)
        + [(state.day % 360) / 360.0]
    )
    return np.clip(np.asarray(values, dtype=np.float32), 0.0, 1.0)


def growth_total(state: GameState) -> float:
    return float(sum(getattr(state.plant, name) for name in PROGRESS_FIELDS))


def pick_candidate(candidates, node_type: NodeType):
    """Straight-up trunk extensions first; otherwise the first offered site."""
    if node_type == NodeType.TRUNK:
        for cand in candidates:
            if cand.id.endswith('-straight'):
                return cand
    return candidates[0]


def apply_action(state: GameState, action: int) -> bool:
    """Apply one discrete action to the state. Returns False when a placement had nowhere to go."""
    _, growth, root_type, node_type = ACTIONS[int(action)]
    if node_type is not None:
        candidates = enter_placement(state, node_type)
        if not candidates:
            return False
        commit_placement(state, pick_candidate(candidates, node_type), node_type)
        return True
    if root_type is not None:
        state.select_root_type(root_type)
    state.select_action(growth)
    return True


class PlantGrowthEnv(gym.Env):
    """
    Discrete-action control of one plant playthrough.

    Reward = growth-progress gained + 5 per seed produced - health lost.
    Terminated when the life cycle completes or health reaches 0;
    truncated after `max_steps` env steps.
    """

    metadata = {"render_modes": ["human"]}

    def __init__(self, cfg: Optional[dict] = None, render_mode: Optional[str] = None):
        super().__init__()
        self.cfg = cfg if cfg is not None else get_default_config()
        runner = self.cfg.get('runner', {}) or {}

        self.biome = get_biome(self.cfg.get('biome', 'plains'))
        self.seed_spec = get_seed(self.cfg.get('plant_seed', 'oak'))
        self.settings = Settings.from_dict(self.cfg.get('settings'))
        self.params = SimParams.from_dict(self.cfg.get('params'))
        self.ticks_per_step = int(runner.get('ticks_per_step', 10))
        self.max_steps = int(runner.get('max_steps', 360))
        self.render_mode = render_mode

        self.OBS_KEYS = list(OBS_KEYS)
        self.action_space = spaces.Discrete(len(ACTIONS))
        self.observation_space = spaces.Box(0.0, 1.0, (len(self.OBS_KEYS),), dtype=np.float32)

        self.state: Optional[GameState] = None
        self.step_count = 0

    def step(self, action):
        if self.state is None:
            raise RuntimeError("Call reset() before step()")
        state = self.state
        prev_growth = growth_total(state)
        prev_seeds = state.plant.seeds_produced
        prev_health = state.health

        placed = apply_action(state, action)
        for _ in range(self.ticks_per_step):
            if state.life_complete:
                break
            tick(state)
        self.step_count += 1

        new_seeds = state.plant.seeds_produced - prev_seeds
        reward = (growth_total(state) - prev_growth) + SEED_REWARD * new_seeds \
            - max(0.0, prev_health - state.health)

        terminated = bool(state.life_complete or state.health <= 0)
        truncated = bool(self.step_count >= self.max_steps and not terminated)

        info = snapshot(state)
        info['action_name'] = ACTION_NAMES[int(action)]
        info['placement_failed'] = not placed
        info['obs_keys'] = self.OBS_KEYS

        if self.render_mode == 'human':
            self.render()
        return encode_observation(state), float(reward), terminated, truncated, info

    def reset(self, seed: Optional[int] = None, options: Optional[dict] = None):
        super().reset(seed=seed)
        self.state = create_state(self.biome, self.seed_spec, self.settings, self.params, rng=self.np_random)
        self.step_count = 0
        logger.debug("Episode reset: biome=%s seed=%s", self.biome.id, self.seed_spec.id)
        return encode_observation(self.state), snapshot(self.state)

    def render(self):
        s = self.state
        if s is None:
            return
        p = s.plant
        print(f"Day {s.day} ({s.season_name})  health={s.health:.0f}  seeds={p.seeds_produced}")
        print(f"  Pools: E={s.energy:.0f} W={s.water:.0f} N={s.nitrogen:.0f} P={s.phosphorus:.0f} K={s.potassium:.0f}")
        print(f"  Plant: roots={p.total_roots:.1f} trunk={p.trunk_height:.1f} "
              f"branches={p.branch_length:.1f} leaves={p.leaf_mass:.1f} nodes={len(p.nodes)}")


def decode_observation(obs: np.ndarray) -> Dict[str, float]:
    return {key: float(v) for key, v in zip(OBS_KEYS, obs)}


if __name__ == '__main__':
    env = PlantGrowthEnv()
    print("Action space:", env.action_space)
    print("Observation space:", env.observation_space)

    obs, info = env.reset(seed=0)
    for i in range(10):
        action = env.action_space.sample()
        obs, reward, terminated, truncated, info = env.step(action)
        print(f"Step {i}: {ACTION_NAMES[action]} reward={reward:.2f}")
        if terminated or truncated:
            break
