# sim/health.py
"""Health aggregator: discrete stress penalties folded into a single health drift."""

from sim.plant import temp_factor
from sim.state import GameState, clamp


def stress_score(state: GameState, temp_optima: bool = True) -> int:
    stress = 0
    if state.energy < 10:
        stress += 2
    if state.water < 10:
        stress += 3
    if state.nitrogen < 8 or state.phosphorus < 8:
        stress += 1
    if state.potassium < 8:
        stress += 1
    if state.o2 < 15:
        stress += 1

    if temp_optima:
        t_factor = temp_factor(state.env.temperature, state.seed.temp_optimum,
                               state.params.survival_temp_breadth)
        # dormant plants are cold-hardened
        hardening = state.dormancy_depth if state.dormant else 0.0
        effective = t_factor + hardening * 0.4
        if effective < 0.3:
            stress += 2
        elif effective < 0.6:
            stress += 1
    return stress


def update_health(state: GameState, temp_optima: bool = True) -> int:
    stress = stress_score(state, temp_optima)

    temp, optimum = state.env.temperature, state.seed.temp_optimum
    if temp_factor(temp, optimum, state.params.survival_temp_breadth) < 0.2 and state.tick % 40 == 0:
        kind = "heat" if temp > optimum else "cold"
        state.add_log(f"Extreme {kind} stress, enzymes failing and growth halted.", "danger")

    if stress == 0:
        state.health = clamp(state.health + 0.3)
    else:
        state.health = clamp(state.health - stress * 0.5)

    if state.health < 30 and state.tick % 50 == 0:
        state.add_log("The plant is struggling to survive!", "danger")
    return stress
