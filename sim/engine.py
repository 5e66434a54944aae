# sim/engine.py
"""
Simulation engine
-----------------
Public entry points of the plant simulation:

- `create_state(biome, seed, settings=None, params=None, rng=None)`
- `tick(state)` advances one step in place (10 ticks = 1 in-game day)
- `compute_candidates` / `commit_placement` (re-exported from sim.placement)
- `snapshot(state)` flat dict of observable values for HUDs, logs and RL

Within a tick the stage order is fixed, since later stages read what
earlier ones wrote: environment, stomata, hydraulics, resource flows,
growth, root graph, base node, unlocks, health, then the optional life
events (flowering, life cycle, cambium, mycorrhizae, herbivory, weather).
A subsystem switched off mid-run has its outputs reset to neutral values
at the start of the next tick.
"""

import logging
from typing import Dict, Optional, Union

import numpy as np

from sim.env_model import seasonal_temperature, update_environment
from sim.flowering import update_flowering
from sim.growth import apply_growth, check_unlocks
from sim.health import update_health
from sim.herbivory import update_herbivory
from sim.lifecycle import update_cambium, update_life_cycle
from sim.placement import (cancel_placement, commit_placement, compute_candidates,
                           enter_placement, refresh_candidates, seed_base_node)
from sim.plant import compute_resource_flows, update_hydraulics, update_stomata
from sim.root_graph import update_root_graph
from sim.state import (DAYS_PER_SEASON, DAYS_PER_YEAR, PROGRESS_FIELDS, RESOURCE_FIELDS,
                       TICKS_PER_DAY, UNIT_FIELDS, Biome, Environment, GameState, Seed, Settings,
                       SimParams, clamp, round_half_up)
from sim.symbiosis import update_mycorrhizae
from sim.weather import update_weather_events

logger = logging.getLogger(__name__)

BIOME_VARIANCE = 0.15


def make_rng(rng: Union[None, int, np.random.Generator] = None) -> np.random.Generator:
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)


def create_state(biome: Biome, seed: Seed, settings: Optional[Settings] = None,
                 params: Optional[SimParams] = None,
                 rng: Union[None, int, np.random.Generator] = None) -> GameState:
    """Build a fresh playthrough from a biome, a seed and the feature toggles."""
    settings = settings or Settings()
    params = params or SimParams()
    rng = make_rng(rng)

    def vary(base):
        return clamp(base + (rng.random() - 0.5) * BIOME_VARIANCE * 2, 0.0, 1.0)

    env = Environment(
        sunlight=vary(biome.sunlight),
        rainfall=vary(biome.rainfall),
        groundwater_depth=biome.groundwater_depth,
        soil_nutrients=vary(biome.soil_nutrients),
        temperature=seasonal_temperature(biome.temp_range, 0),
    )
    state = GameState(
        biome=biome, seed=seed, settings=settings, params=params, env=env, rng=rng,
        energy=clamp(seed.start_energy),
        water=clamp(seed.start_water),
        nitrogen=clamp(round_half_up(seed.start_nutrients * 0.9)),
        phosphorus=clamp(round_half_up(seed.start_nutrients * 0.8)),
        potassium=clamp(round_half_up(seed.start_nutrients * 1.0)),
    )
    state.add_log(f"Your {seed.name} seed settles into the {biome.name} soil.", "good")
    state.add_log("Grow roots first: they anchor the plant and draw water.")
    logger.debug("Created state: biome=%s seed=%s settings=%s", biome.id, seed.id, settings.to_dict())
    return state


def advance_clock(state: GameState) -> None:
    state.tick += 1
    state.day = state.tick // TICKS_PER_DAY + 1
    state.season = (state.day % DAYS_PER_YEAR) // DAYS_PER_SEASON
    state.plant.age_in_days = state.day


def reset_disabled(state: GameState, settings: Settings) -> None:
    """Put the outputs of switched-off subsystems back to their neutral values."""
    if not settings.mycorrhizae:
        state.mycorrhizal_bonus = 0.0
    if not settings.life_cycles:
        state.dormant = False
        state.dormancy_depth = 0.0
    if not settings.herbivory:
        state.herbivore_event = False
        state.herbivore_pressure = 0.0
    if not settings.weather_events:
        state.active_weather_event = None
        state.weather_event_timer = 0


def tick(state: GameState) -> None:
    """Advance the simulation by one tick. A completed life is frozen."""
    if state.life_complete:
        return

    s = state.settings
    advance_clock(state)
    reset_disabled(state, s)

    update_environment(state, s.weather_events)
    update_stomata(state, s.stomatal_regulation)
    update_hydraulics(state, s.hydraulic_failure)

    compute_resource_flows(state, s.temp_optima, s.npk_nutrients)
    apply_growth(state, s.npk_nutrients)
    update_root_graph(state)
    seed_base_node(state)
    check_unlocks(state)
    update_health(state, s.temp_optima)

    if s.flowering:
        update_flowering(state)
    if s.life_cycles:
        update_life_cycle(state)
    if s.cambium_growth:
        update_cambium(state)
    if s.mycorrhizae:
        update_mycorrhizae(state)
    if s.herbivory:
        update_herbivory(state)
    if s.weather_events:
        update_weather_events(state)

    enforce_bounds(state)
    refresh_candidates(state)


def run(state: GameState, ticks: int) -> GameState:
    for _ in range(ticks):
        if state.life_complete:
            break
        tick(state)
    return state


def enforce_bounds(state: GameState) -> None:
    """Final clamp of every bounded field, so a tick always ends in range."""
    for name in RESOURCE_FIELDS:
        setattr(state, name, clamp(getattr(state, name)))
    for name in UNIT_FIELDS:
        setattr(state, name, clamp(getattr(state, name), 0.0, 1.0))
    state.xylem_integrity = clamp(state.xylem_integrity, 0.05, 1.0)
    for name in PROGRESS_FIELDS:
        setattr(state.plant, name, clamp(getattr(state.plant, name)))
    state.plant.damaged_leaves = clamp(state.plant.damaged_leaves)


def set_speed(state: GameState, speed: int) -> None:
    """Driver pacing: speed -1 pauses, any other value resumes at that speed."""
    if speed == -1:
        state.paused = True
        state.speed = 0
    else:
        state.paused = False
        state.speed = speed


def snapshot(state: GameState) -> Dict[str, object]:
    """Flat read-only view of the observable state."""
    plant, env = state.plant, state.env
    snap: Dict[str, object] = {
        "tick": state.tick,
        "day": state.day,
        "season": state.season,
        "biome": state.biome.id,
        "seed": state.seed.id,
        "active_action": state.active_action.value if state.active_action else None,
        "root_type": state.root_type.value,
        "sunlight": env.sunlight,
        "rainfall": env.rainfall,
        "temperature": env.temperature,
        "seeds_produced": plant.seeds_produced,
        "age_in_days": plant.age_in_days,
        "growth_rings": plant.growth_rings,
        "damaged_leaves": plant.damaged_leaves,
        "scarred_trunk": plant.scarred_trunk,
        "n_nodes": len(plant.nodes),
        "n_root_segments": len(plant.root_graph.all_segments()),
        "cavitation_events": state.cavitation_events,
        "mycorrhizal_bonus": state.mycorrhizal_bonus,
        "dormant": state.dormant,
        "flowering": state.flowering,
        "life_complete": state.life_complete,
        "herbivore_event": state.herbivore_event,
        "weather_event": state.active_weather_event.value if state.active_weather_event else None,
        "unlocked_trunk": state.unlocked.trunk,
        "unlocked_branches": state.unlocked.branches,
        "unlocked_leaves": state.unlocked.leaves,
        "unlocked_flower": state.unlocked.flower,
    }
    for name in RESOURCE_FIELDS + UNIT_FIELDS:
        snap[name] = getattr(state, name)
    for name in PROGRESS_FIELDS:
        snap[name] = getattr(plant, name)
    return snap


__all__ = [
    "create_state", "tick", "run", "snapshot", "set_speed", "compute_candidates",
    "commit_placement", "enter_placement", "cancel_placement",
]
