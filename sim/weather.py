# sim/weather.py
"""
Random weather events: drought, flood and storm.

At most one event is active. A new one may start on every 50th tick once
the cooldown since the last event has elapsed; its type is drawn with
weights that depend on the biome. Rainfall overrides for drought and
flood are applied by the environment model while the event lasts.
"""

from typing import Dict

from sim.state import GameState, WeatherEvent, clamp

CHECK_INTERVAL = 50

START_MESSAGES = {
    WeatherEvent.DROUGHT: "A severe drought has set in! Rainfall has dried up.",
    WeatherEvent.FLOOD: "Heavy rains are causing flooding! Root systems at risk.",
    WeatherEvent.STORM: "A violent storm is hitting; structural roots will be tested!",
}


def event_weights(biome) -> Dict[WeatherEvent, float]:
    if biome.rainfall < 0.4:
        drought = 0.5
    elif biome.rainfall < 0.7:
        drought = 0.25
    else:
        drought = 0.10
    return {
        WeatherEvent.DROUGHT: drought,
        WeatherEvent.FLOOD: 0.35 if biome.groundwater_depth <= 2 else 0.15,
        WeatherEvent.STORM: 0.4 if abs(biome.wind) > 0.3 else 0.20,
    }


def choose_event(state: GameState) -> WeatherEvent:
    weights = event_weights(state.biome)
    r = state.random() * sum(weights.values())
    for event, weight in weights.items():
        r -= weight
        if r <= 0:
            return event
    return WeatherEvent.STORM


def wind_stress(plant) -> float:
    return 1.0 - clamp(plant.root_structural / 40, 0.0, 1.0)


def _progress_event(state: GameState) -> None:
    plant = state.plant
    state.weather_event_timer -= 1
    event = state.active_weather_event

    if event == WeatherEvent.DROUGHT:
        if state.weather_event_timer % 30 == 0:
            state.add_log("Drought continues, rainfall almost zero.", "danger")
    elif event == WeatherEvent.FLOOD:
        state.water = min(100.0, state.water + 2)
        # waterlogged roots suffocate
        if state.tick % 10 == 0:
            plant.root_spread = clamp(plant.root_spread - 0.4)
            plant.root_structural = clamp(plant.root_structural - 0.2)
        if state.weather_event_timer % 30 == 0:
            state.add_log("Flooding: roots starved of oxygen, structural roots dying.", "danger")
    elif event == WeatherEvent.STORM:
        stress = wind_stress(plant)
        if state.tick % 5 == 0 and stress > 0.3:
            plant.branch_length = clamp(plant.branch_length - stress * 0.8)
            plant.leaf_mass = clamp(plant.leaf_mass - stress * 1.2)
        if state.weather_event_timer % 20 == 0:
            state.add_log("Storm battering the plant: branches and leaves tearing!", "danger")

    if state.weather_event_timer <= 0:
        state.active_weather_event = None
        state.weather_event_timer = 0
        state.add_log(f"Weather event ended: the {event.value} has passed.")


def update_weather_events(state: GameState) -> None:
    if state.active_weather_event is not None:
        _progress_event(state)
        return

    p = state.params
    if state.tick % CHECK_INTERVAL != 0:
        return
    if state.day - state.last_weather_day < p.weather_cooldown_days:
        return
    if state.random() > p.weather_event_chance:
        return

    event = choose_event(state)
    state.active_weather_event = event
    state.weather_event_timer = (20 + int(state.rng.integers(0, 40))) * 10
    state.last_weather_day = state.day
    state.add_log(START_MESSAGES[event], "danger")
