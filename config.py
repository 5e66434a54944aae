# config.py
"""
Config loader for the plant growth simulation.

`load_config(path=None)` reads `config/defaults.yaml` by default and returns a
nested dict; it also seeds the global Python/NumPy generators when a `seed`
key is present. The static biome and seed tables live beside it in
`config/biomes.yaml` and `config/seeds.yaml` and are turned into typed
records by `load_biomes()` / `load_seeds()`.
"""

import logging
import os
import random
import sys

import numpy as np
import yaml

from sim.state import Biome, Seed, Settings, SimParams

logger = logging.getLogger(__name__)

SHARE_SUBDIR = os.path.join('share', 'plant-growth-sim', 'config')


def find_config_dir(base=None, prefix=None):
    """
    Locate the YAML tables: `config/` beside this file in a checkout or an
    editable install, else `<prefix>/share/plant-growth-sim/config` where a
    regular install puts them.
    """
    local = os.path.join(base or os.path.dirname(os.path.abspath(__file__)), 'config')
    if os.path.isdir(local):
        return local
    return os.path.join(prefix or sys.prefix, SHARE_SUBDIR)


CONFIG_DIR = find_config_dir()
DEFAULT_PATH = os.path.join(CONFIG_DIR, 'defaults.yaml')
BIOMES_PATH = os.path.join(CONFIG_DIR, 'biomes.yaml')
SEEDS_PATH = os.path.join(CONFIG_DIR, 'seeds.yaml')


def _read_yaml(p):
    if not os.path.exists(p):
        raise FileNotFoundError(f"Config file not found: {p}")
    with open(p, 'r') as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {p} must contain a mapping at the top level")
    return data


def load_config(path=None):
    """Load YAML config and return a dict. Also sets global seeds if `seed` key present."""
    cfg = _read_yaml(path or DEFAULT_PATH)

    # set reproducible seeds if provided
    seed = cfg.get('seed', None)
    if seed is not None:
        _set_seeds(seed)
    return cfg


def get_default_config():
    return load_config(DEFAULT_PATH)


def _set_seeds(seed):
    logger.info("Setting global random seed = %s", seed)
    random.seed(seed)
    np.random.seed(seed)


def load_biomes(path=None):
    """Return {biome_id: Biome} from the biome table."""
    raw = _read_yaml(path or BIOMES_PATH)
    return {bid: Biome.from_dict(bid, data) for bid, data in raw.items()}


def load_seeds(path=None):
    """Return {seed_id: Seed} from the seed table."""
    raw = _read_yaml(path or SEEDS_PATH)
    return {sid: Seed.from_dict(sid, data) for sid, data in raw.items()}


def get_biome(biome_id, path=None):
    biomes = load_biomes(path)
    if biome_id not in biomes:
        raise KeyError(f"Unknown biome '{biome_id}'. Available: {sorted(biomes)}")
    return biomes[biome_id]


def get_seed(seed_id, path=None):
    seeds = load_seeds(path)
    if seed_id not in seeds:
        raise KeyError(f"Unknown seed '{seed_id}'. Available: {sorted(seeds)}")
    return seeds[seed_id]


def get_settings(cfg=None):
    cfg = cfg if cfg is not None else get_default_config()
    return Settings.from_dict(cfg.get('settings'))


def get_params(cfg=None):
    cfg = cfg if cfg is not None else get_default_config()
    return SimParams.from_dict(cfg.get('params'))


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    print(load_config())
    print(sorted(load_biomes()), sorted(load_seeds()))
