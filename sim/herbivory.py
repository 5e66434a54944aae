# sim/herbivory.py
"""
Herbivore attacks.

An attack may start every 20 ticks while the plant carries more than 10
leaf mass. Grazers (tall trunks only) arrive at fixed pressure 0.8 and
can scar the trunk; insects arrive at pressure in [0.3, 0.8). Pressure
wanes every tick until the event ends below 0.05.
"""

from sim.state import GameState, clamp

# Spring, Summer, Autumn, Winter
SEASON_MOD = (0.8, 1.2, 1.0, 0.1)
GRAZER_PRESSURE = 0.8


def attack_chance(state: GameState) -> float:
    seed = state.seed
    return (state.params.herbivory_base_chance * seed.herbivory_susceptibility
            * SEASON_MOD[state.season] * (1 - seed.defense_strength * 0.6))


def _maybe_start_attack(state: GameState) -> None:
    plant = state.plant
    if state.herbivore_event or plant.leaf_mass <= 10 or state.tick % 20 != 0:
        return
    if state.random() >= attack_chance(state):
        return

    state.herbivore_event = True
    state.herbivore_pressure = 0.3 + state.random() * 0.5
    grazer = plant.trunk_height > 15 and state.random() < 0.3
    if grazer:
        state.herbivore_pressure = GRAZER_PRESSURE
        state.add_log("A grazer is chewing on your trunk! Structural damage imminent.", "danger")
    else:
        state.add_log("Insects are devouring your leaves!", "danger")


def _apply_damage(state: GameState) -> None:
    plant, seed = state.plant, state.seed
    susceptibility, defense = seed.herbivory_susceptibility, seed.defense_strength
    damage = state.herbivore_pressure * susceptibility * (1 - defense * 0.7) * 0.3

    plant.leaf_mass = clamp(plant.leaf_mass - damage)
    plant.damaged_leaves = clamp(plant.damaged_leaves + damage * 0.5)

    if state.herbivore_pressure > 0.7 and plant.trunk_height > 5:
        plant.trunk_girth = clamp(plant.trunk_girth - damage * 0.1)
        if state.herbivore_pressure > 0.85 and not plant.scarred_trunk:
            plant.scarred_trunk = True
            state.add_log("Deep trunk scarring: structural support permanently reduced!", "danger")

    # tannins and resins cost energy
    state.energy = clamp(state.energy - defense * 0.15)
    state.health = clamp(state.health - damage * 0.3)

    state.herbivore_pressure = clamp(state.herbivore_pressure - 0.015, 0.0, 1.0)
    if state.herbivore_pressure < 0.05:
        state.herbivore_event = False
        state.herbivore_pressure = 0.0
        state.add_log("Herbivore threat has passed.")


def update_herbivory(state: GameState) -> None:
    _maybe_start_attack(state)
    if state.herbivore_event:
        _apply_damage(state)
