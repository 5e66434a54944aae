# sim/plant.py
"""
Plant physiology
----------------
Stomatal regulation, xylem hydraulics and the per-tick resource flows
(photosynthesis, respiration, transpiration, water and nutrient uptake,
gas exchange and the flat cost of an active growth action).

Each function mutates only the GameState it is given. All pools are
clamped to [0, 100] after their deltas are applied.
"""

import math
from typing import Tuple

from sim.nutrient_model import NPK_SPLIT, nutrient_uptake
from sim.state import ROOT_TYPES, RESOURCE_MAX, Action, Flows, GameState, clamp

XYLEM_FLOOR = 0.05
CAM_FACTOR = 0.15


# Response curves ------------------------------------------------------
def temp_factor(temp: float, optimum: float, breadth: float) -> float:
    """Bell curve peaking at 1.0 at the optimum temperature."""
    delta = temp - optimum
    return max(0.0, math.exp(-(delta * delta) / (2 * breadth * breadth)))


def respiration_modifier(temp: float, optimum: float) -> float:
    """Respiration multiplier from heat stress above opt+12 and (milder) cold stress below opt-15."""
    heat = max(0.0, (temp - (optimum + 12)) / 15)
    cold = max(0.0, ((optimum - 15) - temp) / 15)
    return 1.0 + heat * 1.5 + cold * 0.5


# Stomata & hydraulics -------------------------------------------------
def update_stomata(state: GameState, enabled: bool) -> None:
    if not enabled:
        state.stomata = 1.0
        return

    water_stress = clamp((state.water - 10) / 25, 0.0, 1.0)
    temp_delta = abs(state.env.temperature - state.seed.temp_optimum)
    temp_stress = clamp(1 - temp_delta / 20, 0.1, 1.0)
    cam = CAM_FACTOR if state.seed.is_cam else 1.0
    state.stomata = clamp(water_stress * temp_stress * cam, 0.0, 1.0)

    if state.stomata < 0.2 and state.tick % 30 == 0:
        state.add_log("Stomata nearly closed, photosynthesis stalled to conserve water.", "danger")
    elif state.stomata < 0.5 and state.tick % 60 == 0:
        state.add_log("Stomata partially closed, trading growth for drought survival.")


def xylem_tension(state: GameState) -> float:
    leaf_area = state.plant.leaf_mass / 100
    demand = leaf_area * state.seed.water_need * (1 - state.stomata * 0.7)
    deficit = max(0.0, (30 - state.water) / 30)
    return demand * deficit


def update_hydraulics(state: GameState, enabled: bool) -> None:
    """
    Cavitation damage under drought tension, checked every 5th tick, and
    slow repair while water > 50 and health > 60.

    Integrity stays within [0.05, 1.0]; with the subsystem disabled it is
    held at 1.0.
    """
    if not enabled:
        state.xylem_integrity = 1.0
        return

    threshold = state.seed.cavitation_resistance
    tension = xylem_tension(state)
    if tension > threshold and state.tick % 5 == 0:
        damage = (tension - threshold) * 0.008
        state.xylem_integrity = clamp(state.xylem_integrity - damage, XYLEM_FLOOR, 1.0)
        if damage > 0.002:
            state.cavitation_events += 1
            if state.cavitation_events % 5 == 1:
                state.add_log("Xylem cavitation: air bubbles block water transport!", "danger")

    if state.xylem_integrity < 1.0 and state.water > 50 and state.health > 60:
        recovery = 0.0002 * (state.plant.trunk_girth / 50 + 0.1)
        state.xylem_integrity = clamp(state.xylem_integrity + recovery, XYLEM_FLOOR, 1.0)


# Resource flows -------------------------------------------------------
def action_costs(state: GameState) -> Tuple[float, float, float]:
    """(energy, water, nutrient) deducted for merely having an action selected."""
    action = state.active_action
    if action is None:
        return 0.0, 0.0, 0.0
    p = state.params
    water = p.roots_water_cost if action == Action.ROOTS else p.action_water_cost
    if action == Action.TRUNK:
        nutrients = p.trunk_nutrient_cost
    elif action == Action.BRANCHES:
        nutrients = p.branches_nutrient_cost
    else:
        # roots pay the leaf rate
        nutrients = p.leaves_nutrient_cost
    return p.action_energy_cost, water, nutrients


def photosynthesis(state: GameState, temp_optima: bool) -> float:
    """Gross photosynthetic energy before the dormancy scale-down."""
    plant, env, seed, p = state.plant, state.env, state.seed, state.params
    leaf_area = plant.leaf_mass / 100
    t_factor = temp_factor(env.temperature, seed.temp_optimum, p.photo_temp_breadth) if temp_optima else 1.0
    co2_factor = clamp(state.co2 / 60, 0.1, 1.5) * state.stomata
    bonus = p.leaf_action_bonus if state.active_action == Action.LEAVES else 1.0
    return leaf_area * env.sunlight * seed.leaf_efficiency * co2_factor * p.photo_scale * t_factor * bonus


def compute_resource_flows(state: GameState, temp_optima: bool = True,
                           npk_nutrients: bool = True) -> Flows:
    """Apply one tick of resource production and consumption; returns the recorded flows."""
    plant, env, seed, p = state.plant, state.env, state.seed, state.params
    rt = ROOT_TYPES[state.root_type]
    leaf_area = plant.leaf_mass / 100
    sun_factor = env.sunlight * seed.leaf_efficiency

    photo_rate = photosynthesis(state, temp_optima)
    photo_eff = photo_rate * (1.0 - state.dormancy_depth * 0.9)
    seedling = p.seedling_energy if plant.leaf_mass < p.seedling_leaf_threshold else 0.0

    biomass = (plant.trunk_height + plant.branch_length + plant.leaf_mass + plant.root_spread) / 100
    respire_cost = max(0.4, biomass * 1.5)
    respire_mod = respiration_modifier(env.temperature, seed.temp_optimum) if temp_optima else 1.0

    transpire = leaf_area * 0.8 * seed.water_need * state.stomata
    transpire_eff = transpire * (1.0 - state.dormancy_depth * 0.8)

    rain_capture = env.rainfall * plant.root_spread / 100 * rt.water_bonus * 4.5
    tap_capture = (5 / env.groundwater_depth) * plant.root_depth / 100 * rt.water_bonus * 2.0
    water_in = ((rain_capture + tap_capture) * seed.root_efficiency * state.xylem_integrity
                * (1 + state.mycorrhizal_bonus * 0.4))

    n_in, p_in, k_in = nutrient_uptake(state, npk_nutrients)

    roots = plant.total_roots / 100
    o2_out = leaf_area * sun_factor * 1.5
    co2_used = leaf_area * sun_factor * 0.8
    o2_used = roots * 0.3

    cost_energy, cost_water, cost_nutrients = action_costs(state)

    state.energy = clamp(state.energy + photo_eff + seedling - respire_cost * respire_mod - cost_energy, 0.0, RESOURCE_MAX)
    state.water = clamp(state.water + water_in - transpire_eff - cost_water, 0.0, RESOURCE_MAX)
    state.nitrogen = clamp(state.nitrogen + n_in - cost_nutrients * NPK_SPLIT[0], 0.0, RESOURCE_MAX)
    state.phosphorus = clamp(state.phosphorus + p_in - cost_nutrients * NPK_SPLIT[1], 0.0, RESOURCE_MAX)
    state.potassium = clamp(state.potassium + k_in - cost_nutrients * NPK_SPLIT[2], 0.0, RESOURCE_MAX)
    state.o2 = clamp(state.o2 + o2_out - o2_used, 0.0, RESOURCE_MAX)
    state.co2 = clamp(state.co2 - co2_used + respire_cost * 0.3, 0.0, RESOURCE_MAX)

    state.flows = Flows(photo_rate=photo_rate, water_in=water_in, respire_cost=respire_cost,
                        n_in=n_in, p_in=p_in, k_in=k_in, transpire=transpire)
    return state.flows
