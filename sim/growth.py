# sim/growth.py
"""
Growth allocator and unlock gatekeeper.

`apply_growth` turns the selected action into growth-progress increments,
throttled by nutrient factors and by the structural support the plant has
already built. `check_unlocks` flips the one-way capability flags.
"""

import math

from sim.nutrient_model import growth_factors
from sim.state import ROOT_TYPES, Action, GameState, RootType, clamp


def support_ratio(plant) -> float:
    """Trunk cannot outgrow its root anchorage."""
    return clamp(plant.anchor_score / max(8.0, plant.trunk_height * 0.8), 0.0, 1.0)


def root_balance(plant) -> float:
    """Leaves cannot outgrow the roots that water them."""
    return clamp(plant.total_roots / max(10.0, plant.leaf_mass * 1.5), 0.0, 1.0)


def can_grow(state: GameState) -> bool:
    p = state.params
    return (
        state.active_action is not None
        and state.energy >= p.min_growth_energy
        and state.water >= p.min_growth_water
        and not state.dormant
    )


def _grow_roots(state: GameState, spd_r: float) -> None:
    plant = state.plant
    rt = ROOT_TYPES[state.root_type]
    if state.root_type == RootType.TAPROOT:
        plant.root_depth = clamp(plant.root_depth + spd_r * rt.water_bonus)
        plant.root_structural = clamp(plant.root_structural + spd_r * 0.3)
    elif state.root_type == RootType.STRUCTURAL:
        plant.root_structural = clamp(plant.root_structural + spd_r * rt.structural_bonus)
        plant.root_spread = clamp(plant.root_spread + spd_r * 0.4)
        plant.root_depth = clamp(plant.root_depth + spd_r * 0.5)
    else:
        plant.root_spread = clamp(plant.root_spread + spd_r * rt.nutrient_bonus)
        plant.root_depth = clamp(plant.root_depth + spd_r * 0.2)


def _grow_trunk(state: GameState, spd_t: float) -> None:
    plant = state.plant
    gain = spd_t * state.seed.trunk_strength * support_ratio(plant)
    plant.trunk_height = clamp(plant.trunk_height + gain)
    plant.trunk_girth = clamp(plant.trunk_girth + gain * 0.4)


def _grow_branches(state: GameState, spd_b: float) -> None:
    plant = state.plant
    gain = spd_b * min(1.0, plant.trunk_height / 20)
    plant.branch_count = clamp(plant.branch_count + gain * 0.5)
    plant.branch_length = clamp(plant.branch_length + gain)


def _grow_leaves(state: GameState, spd_l: float) -> None:
    plant = state.plant
    branch_base = max(0.2, plant.branch_length / 15 + plant.trunk_height / 30)
    gain = spd_l * branch_base * state.seed.leaf_efficiency * root_balance(plant)
    plant.leaf_mass = clamp(plant.leaf_mass + gain)


def apply_growth(state: GameState, npk_nutrients: bool = True) -> bool:
    """Grow the selected organ for one tick. Returns False when the preconditions block growth."""
    if not can_grow(state):
        return False

    spd = state.seed.growth_rate * state.params.growth_speed
    n_f, p_f, k_f = growth_factors(state, npk_nutrients)
    action = state.active_action

    if action == Action.ROOTS:
        _grow_roots(state, spd * p_f * k_f)
    elif action == Action.TRUNK and state.unlocked.trunk:
        _grow_trunk(state, spd * p_f)
    elif action == Action.BRANCHES and state.unlocked.branches:
        _grow_branches(state, spd * n_f * k_f)
    elif action == Action.LEAVES and state.unlocked.leaves:
        _grow_leaves(state, spd * n_f)
    return True


def check_unlocks(state: GameState) -> None:
    plant, unlocked, p = state.plant, state.unlocked, state.params
    anchor = plant.anchor_score

    if not unlocked.trunk and anchor >= p.trunk_unlock_anchor:
        unlocked.trunk = True
        state.add_log("Your roots can support a trunk, but keep them growing to match it!", "good")
    if not unlocked.trunk and anchor >= p.trunk_unlock_anchor / 2 and state.tick % 20 == 0:
        state.add_log(f"Roots {math.floor(anchor + 0.5)}/{p.trunk_unlock_anchor:g} anchor strength, "
                      "almost ready for a trunk.")

    # cotyledons count: any node at all unlocks leaves
    if not unlocked.leaves and len(plant.nodes) > 0:
        unlocked.leaves = True
        state.add_log("The seedling can grow leaves. Balance leaf growth with your roots!", "good")

    if not unlocked.branches and plant.trunk_height >= p.branch_unlock_height:
        unlocked.branches = True
        state.add_log("The trunk is tall enough to grow branches.", "good")
