# sim/symbiosis.py
"""Mycorrhizal colonisation: a phosphorus/water uptake bonus bought with a continuous sugar tax."""

from sim.state import GameState, clamp

MIN_ROOT_MASS = 10.0


def update_mycorrhizae(state: GameState) -> None:
    affinity = state.seed.mycorrhizal_affinity
    network = state.biome.fungal_network
    root_mass = state.plant.total_roots / 3
    if root_mass < MIN_ROOT_MASS:
        return

    if state.mycorrhizal_colonisation < 1.0:
        rate = affinity * network * 0.0005 * (root_mass / 50)
        before = state.mycorrhizal_colonisation
        state.mycorrhizal_colonisation = clamp(before + rate, 0.0, 1.0)
        after = state.mycorrhizal_colonisation
        if before <= 0.3 < after:
            state.add_log("Mycorrhizal fungi are colonising your roots; nutrient uptake improving!", "good")
        if before <= 0.8 < after:
            state.add_log("Mycorrhizal network fully established: major phosphorus and water boost!", "good")

    state.energy = clamp(state.energy - state.mycorrhizal_colonisation * affinity * 0.05)
    state.mycorrhizal_bonus = state.mycorrhizal_colonisation * affinity * network

    # fungi die back under severe stress
    if state.health < 20 and state.tick % 30 == 0:
        state.mycorrhizal_colonisation = clamp(state.mycorrhizal_colonisation - 0.02, 0.0, 1.0)
