# sim/flowering.py
"""
Flowering and pollination.

Flowering progress accumulates once the plant is mature (leaf mass >= 25,
age >= 30 days) and, unless the species is day-neutral, only in its
flowering season. A flowered plant waits for a per-tick pollination trial;
success produces seeds and resets the cycle.
"""

from sim.state import GameState, clamp, round_half_up

# Spring, Summer, Autumn, Winter
POLLINATOR_PRESENCE = (0.8, 1.0, 0.5, 0.0)


def pollination_chance(state: GameState) -> float:
    attraction = state.seed.pollinator_attraction
    if attraction == 0:
        return state.params.self_pollination_chance
    return attraction * POLLINATOR_PRESENCE[state.season] * state.params.pollination_rate


def seed_yield(state: GameState) -> int:
    attraction = state.seed.pollinator_attraction
    presence = POLLINATOR_PRESENCE[state.season] * 4 if attraction > 0 else 0.0
    return round_half_up(3 + state.health / 20 + state.plant.leaf_mass / 15 + presence)


def update_flowering(state: GameState) -> None:
    plant, seed = state.plant, state.seed
    if plant.leaf_mass < 25 or plant.age_in_days < 30:
        return

    if not (seed.is_day_neutral or seed.flowering_season == state.season):
        # out of season: progress slowly fades
        if plant.flower_progress > 0 and state.tick % 5 == 0:
            plant.flower_progress = clamp(plant.flower_progress - 0.5)
        return

    if plant.flower_progress < 100:
        rate = seed.growth_rate * 0.4 * (1.0 if state.energy > 20 else 0.3)
        plant.flower_progress = clamp(plant.flower_progress + rate)
        state.energy = clamp(state.energy - 0.3)
        if plant.flower_progress >= 100 and not state.flowering:
            state.flowering = True
            state.unlocked.flower = True
            state.add_log(f"The {seed.name} has flowered! Awaiting pollination...", "good")

    if state.flowering and not plant.pollinated:
        if state.random() < pollination_chance(state):
            produced = seed_yield(state)
            plant.seeds_produced += produced
            state.add_log(f"Pollination successful! {produced} seeds produced. "
                          f"(Total: {plant.seeds_produced})", "good")
            # perennials can flower again
            state.flowering = False
            plant.flower_progress = 0.0
            plant.pollinated = False
