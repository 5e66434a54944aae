# sim/hashing.py
"""
Deterministic noise for procedural structure.

`seeded_rand(key)` maps an integer key to a float in [0, 1) and is a pure
function: the same key always gives the same value. Root shapes are derived
from it so they never change between ticks. It never touches the game RNG.
"""

import math


def seeded_rand(key: int) -> float:
    s = math.sin(key + 1) * 43758.5453
    return s - math.floor(s)


def root_key(arm_seed: int, seg_index: int, depth: int) -> int:
    """Hash key of one recursion step of a root arm."""
    return arm_seed * 1000 + seg_index * 37 + depth * 13
