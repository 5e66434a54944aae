# sim/env_model.py
"""
Environment model: per-tick sunlight, rainfall and temperature derived
from the biome's base values, the season and bounded random variance.

Sunlight and rainfall are fractions in [0, 1]; temperature is in degC and
interpolated across the biome's seasonal range.
"""

import numpy as np

from sim.state import GameState, WeatherEvent, clamp, lerp

# Season order: Spring, Summer, Autumn, Winter
SEASON_SUN_MOD = (0.85, 1.15, 0.90, 0.60)
SEASON_RAIN_MOD = (1.10, 0.80, 1.00, 0.90)
SEASON_TEMP_FRACTION = (0.3, 0.9, 0.6, 0.05)

SUN_NOISE = 0.05
RAIN_NOISE = 0.08
TEMP_NOISE = 1.5   # degC


def vary(rng: np.random.Generator, value: float, delta: float) -> float:
    """Uniform offset in [-delta, +delta)."""
    return value + (rng.random() - 0.5) * delta * 2


def seasonal_temperature(temp_range, season: int) -> float:
    return lerp(temp_range[0], temp_range[1], SEASON_TEMP_FRACTION[season])


def update_environment(state: GameState, weather_events: bool = True) -> None:
    biome, env, rng = state.biome, state.env, state.rng
    season = state.season

    env.sunlight = clamp(vary(rng, biome.sunlight * SEASON_SUN_MOD[season], SUN_NOISE), 0.0, 1.0)
    env.rainfall = clamp(vary(rng, biome.rainfall * SEASON_RAIN_MOD[season], RAIN_NOISE), 0.0, 1.0)
    env.temperature = seasonal_temperature(biome.temp_range, season) + vary(rng, 0.0, TEMP_NOISE)

    if not weather_events:
        return
    # Weather overrides must land before this tick's water uptake reads rainfall
    if state.active_weather_event == WeatherEvent.DROUGHT:
        env.rainfall = clamp(env.rainfall * 0.3, 0.0, 0.05)
    elif state.active_weather_event == WeatherEvent.FLOOD:
        env.rainfall = min(1.0, env.rainfall * 1.5 + 0.4)
