# sim/lifecycle.py
"""
Life cycle and secondary growth
-------------------------------
- Annual species complete their life after seeding in autumn/winter, or
  past day 270 regardless.
- Perennial species build winter dormancy depth (max 0.9) and shed leaves
  once it passes 0.5; depth decays again outside winter.
- Cambium adds trunk girth from surplus energy, phloem flow and xylem
  integrity, and starves the roots when the canopy collapses.
"""

import math

from sim.state import DAYS_PER_YEAR, GameState, clamp

WINTER = 3
SPRING = 0
MAX_DORMANCY = 0.9
ANNUAL_LAST_DAY = 270


def update_life_cycle(state: GameState) -> None:
    seed, plant = state.seed, state.plant

    if seed.is_annual:
        if not state.life_complete:
            seeded = plant.seeds_produced > 0
            if (seeded and state.season >= 2) or state.day > ANNUAL_LAST_DAY:
                state.life_complete = True
                state.paused = True
                state.add_log(f"Life cycle complete! {plant.seeds_produced} seeds produced "
                              f"in {state.day} days.", "good")
                state.add_log("The annual plant has completed its life. Restart to grow again.")
        return

    if state.season == WINTER:
        state.dormancy_depth = clamp(state.dormancy_depth + 0.02, 0.0, MAX_DORMANCY)
        if not state.dormant and state.dormancy_depth > 0.5:
            state.dormant = True
            state.add_log("The plant enters winter dormancy; metabolism slows to survive the cold.")
            if seed.deciduous:
                plant.leaf_mass = clamp(plant.leaf_mass * 0.15)
                state.add_log("Leaves shed for winter.")
            else:
                plant.leaf_mass = clamp(plant.leaf_mass * 0.75)
    elif state.season == SPRING and state.dormant:
        state.dormancy_depth = clamp(state.dormancy_depth - 0.04, 0.0, 1.0)
        if state.dormancy_depth <= 0:
            state.dormant = False
            state.add_log("Spring returns: the plant wakes from dormancy with a burst of growth!", "good")
    else:
        state.dormancy_depth = clamp(state.dormancy_depth - 0.05, 0.0, 1.0)
        if state.dormancy_depth <= 0:
            state.dormant = False


def update_cambium(state: GameState) -> None:
    plant = state.plant
    rate = state.seed.cambium_rate
    if rate == 0 or state.dormant:
        return

    energy_surplus = max(0.0, state.energy - 40) / 60
    phloem_flow = min(1.0, plant.leaf_mass / 40)
    gain = rate * 0.004 * energy_surplus * phloem_flow * state.xylem_integrity
    plant.trunk_girth = clamp(plant.trunk_girth + gain)

    if phloem_flow < 0.2 and plant.trunk_height > 10 and state.tick % 20 == 0:
        plant.root_spread = clamp(plant.root_spread - 0.3)
        plant.root_structural = clamp(plant.root_structural - 0.2)
        if phloem_flow < 0.1 and state.tick % 60 == 0:
            state.add_log("Phloem starvation: roots are losing their sugar supply from the canopy!", "danger")

    plant.growth_rings = math.floor(plant.age_in_days / DAYS_PER_YEAR)
