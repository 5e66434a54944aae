# tests/test_engine.py
import dataclasses

import numpy as np
import pytest

from baseline_controller import BaselineController, drive
from sim.engine import create_state, run, set_speed, snapshot, tick
from sim.state import (PROGRESS_FIELDS, RESOURCE_FIELDS, UNIT_FIELDS, Action, RootType, Settings,
                       WeatherEvent)


def test_create_state_defaults(biomes, seeds):
    s = create_state(biomes["plains"], seeds["oak"], rng=3)
    assert s.settings == Settings()
    assert (s.tick, s.day, s.season) == (0, 1, 0)
    assert s.paused
    assert s.energy == 60.0 and s.water == 50.0
    # round(40 * 0.9), round(40 * 0.8), round(40 * 1.0)
    assert (s.nitrogen, s.phosphorus, s.potassium) == (36.0, 32.0, 40.0)
    assert (s.o2, s.co2, s.health) == (50.0, 50.0, 80.0)
    assert s.root_type == RootType.SURFACE and s.active_action is None
    assert s.stomata == 1.0 and s.xylem_integrity == 1.0
    assert len(s.plant.nodes) == 0
    assert [e.msg.split()[0] for e in s.log] == ["Grow", "Your"]


def test_biome_variance_is_bounded(biomes, seeds):
    biome = biomes["desert"]
    for i in range(50):
        s = create_state(biome, seeds["cactus"], rng=i)
        assert abs(s.env.sunlight - biome.sunlight) <= 0.15 + 1e-9
        assert abs(s.env.soil_nutrients - biome.soil_nutrients) <= 0.15 + 1e-9
        assert s.env.groundwater_depth == biome.groundwater_depth


def test_rng_accepts_generator(biomes, seeds):
    gen = np.random.default_rng(9)
    s = create_state(biomes["plains"], seeds["oak"], rng=gen)
    assert s.rng is gen


def test_clock(state):
    for _ in range(9):
        tick(state)
    assert state.day == 1
    tick(state)
    assert state.day == 2 and state.plant.age_in_days == 2
    state.tick = 899
    tick(state)
    assert (state.day, state.season, state.season_name) == (91, 1, "Summer")
    state.tick = 3599
    tick(state)
    # day 361 wraps back to spring
    assert (state.day, state.season) == (361, 0)


def test_same_seed_same_run(make_state):
    runs = []
    for _ in range(2):
        s = make_state("wetlands", "willow", rng=123)
        s.select_action(Action.ROOTS)
        run(s, 400)
        s.select_action(Action.LEAVES)
        run(s, 400)
        runs.append(snapshot(s))
    assert runs[0] == runs[1]


def test_different_seed_different_weather(make_state):
    a, b = make_state(rng=1), make_state(rng=2)
    run(a, 50)
    run(b, 50)
    assert a.env.temperature != b.env.temperature


def test_disabled_subsystems_fall_back_to_neutral(make_state):
    s = make_state(stomatal_regulation=False, hydraulic_failure=False, mycorrhizae=False)
    s.water = 1.0
    s.plant.leaf_mass = 80.0
    s.xylem_integrity = 0.2
    s.mycorrhizal_bonus = 0.7
    tick(s)
    assert s.stomata == 1.0
    assert s.xylem_integrity == 1.0
    assert s.mycorrhizal_bonus == 0.0


def test_switching_off_life_cycles_wakes_a_dormant_plant(make_state):
    s = make_state(weather_events=False, herbivory=False)
    s.dormant, s.dormancy_depth = True, 0.8
    s.select_action(Action.ROOTS)
    s.settings = dataclasses.replace(s.settings, life_cycles=False)
    spread = s.plant.root_spread
    for _ in range(20):
        s.energy = s.water = 80.0
        tick(s)
    assert not s.dormant
    assert s.dormancy_depth == 0.0
    assert s.plant.root_spread > spread


def test_switching_off_weather_ends_the_active_event(make_state):
    s = make_state("forest", "fern")
    s.active_weather_event = WeatherEvent.DROUGHT
    s.weather_event_timer = 300
    s.settings = dataclasses.replace(s.settings, weather_events=False)
    for _ in range(30):
        tick(s)
        assert s.active_weather_event is None
        assert s.weather_event_timer == 0
        assert s.env.rainfall > 0.05


def test_switching_off_herbivory_clears_the_attack(state):
    state.herbivore_event, state.herbivore_pressure = True, 0.6
    state.settings = dataclasses.replace(state.settings, herbivory=False)
    tick(state)
    assert not state.herbivore_event
    assert state.herbivore_pressure == 0.0


def _assert_in_bounds(s):
    for name in RESOURCE_FIELDS:
        assert 0.0 <= getattr(s, name) <= 100.0, name
    for name in UNIT_FIELDS:
        assert 0.0 <= getattr(s, name) <= 1.0, name
    assert 0.05 <= s.xylem_integrity <= 1.0
    for name in PROGRESS_FIELDS:
        assert 0.0 <= getattr(s.plant, name) <= 100.0, name


@pytest.mark.parametrize("biome,seed", [
    ("plains", "oak"),
    ("desert", "cactus"),
    ("wetlands", "reed"),
    ("mountain", "pine"),
    ("tropical", "palm"),
    ("forest", "fern"),
])
def test_every_tick_ends_in_range(make_state, biome, seed):
    s = make_state(biome, seed, rng=42)
    actions = [Action.ROOTS, Action.TRUNK, Action.LEAVES, Action.BRANCHES, None]
    for i in range(2400):
        if i % 60 == 0:
            s.select_action(actions[(i // 60) % len(actions)])
            s.select_root_type(list(RootType)[(i // 60) % 3])
        tick(s)
        _assert_in_bounds(s)
        if s.life_complete:
            break


def test_baseline_controller_grows_a_plant(make_state):
    s = make_state(rng=0)
    history = drive(s, 1200, BaselineController())
    assert history[0]["tick"] == 0
    assert history[-1]["tick"] == s.tick == 1200
    assert s.unlocked.trunk
    assert len(s.plant.nodes) >= 1
    assert s.plant.root_graph.surface
    _assert_in_bounds(s)


def test_set_speed(state):
    set_speed(state, 3)
    assert not state.paused and state.speed == 3
    set_speed(state, -1)
    assert state.paused and state.speed == 0


def test_snapshot_is_flat(state):
    snap = snapshot(state)
    for name in RESOURCE_FIELDS + UNIT_FIELDS + PROGRESS_FIELDS:
        assert name in snap
    assert snap["root_type"] == "surface"
    assert snap["weather_event"] is None
    assert all(not isinstance(v, (list, dict)) for v in snap.values())
