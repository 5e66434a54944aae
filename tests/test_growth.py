# tests/test_growth.py
import pytest

from sim.growth import apply_growth, can_grow, check_unlocks, root_balance, support_ratio
from sim.health import stress_score, update_health
from sim.state import Action, RootType


def _neutral_nutrients(state):
    # N, P and K growth factors of exactly 1.0
    state.nitrogen = state.phosphorus = state.potassium = 30.0


def test_root_strategies_split_growth(state):
    _neutral_nutrients(state)
    spd = state.seed.growth_rate * 0.6
    state.select_action(Action.ROOTS)

    state.select_root_type(RootType.TAPROOT)
    assert apply_growth(state)
    assert state.plant.root_depth == pytest.approx(spd * 1.8)
    assert state.plant.root_structural == pytest.approx(spd * 0.3)
    assert state.plant.root_spread == 0.0

    state.select_root_type(RootType.SURFACE)
    apply_growth(state)
    assert state.plant.root_spread == pytest.approx(spd * 1.4)
    assert state.plant.root_depth == pytest.approx(spd * 1.8 + spd * 0.2)

    state.select_root_type(RootType.STRUCTURAL)
    apply_growth(state)
    assert state.plant.root_structural == pytest.approx(spd * 0.3 + spd * 2.0)


def test_pooled_nutrients_do_not_throttle_growth(state):
    state.potassium = 0.0
    spd = state.seed.growth_rate * 0.6
    state.select_action(Action.ROOTS)
    state.select_root_type(RootType.SURFACE)
    assert apply_growth(state, npk_nutrients=False)
    assert state.plant.root_spread == pytest.approx(spd * 1.4)


def test_growth_blocked_without_resources_or_when_dormant(state):
    state.select_action(Action.ROOTS)
    assert can_grow(state)
    state.energy = 4.9
    assert not apply_growth(state)
    state.energy, state.water = 50.0, 2.0
    assert not can_grow(state)
    state.water, state.dormant = 50.0, True
    assert not can_grow(state)
    state.dormant = False
    state.select_action(None)
    assert not can_grow(state)


def test_locked_trunk_does_not_grow(state):
    state.select_action(Action.TRUNK)
    assert not state.unlocked.trunk
    apply_growth(state)
    assert state.plant.trunk_height == 0.0


def test_trunk_throttled_by_anchorage(state):
    _neutral_nutrients(state)
    state.unlocked.trunk = True
    state.select_action(Action.TRUNK)
    state.plant.root_structural = 4.0
    # anchor 4 over max(8, 0) -> half speed
    assert support_ratio(state.plant) == pytest.approx(0.5)
    apply_growth(state)
    gain = state.seed.growth_rate * 0.6 * state.seed.trunk_strength * 0.5
    assert state.plant.trunk_height == pytest.approx(gain)
    assert state.plant.trunk_girth == pytest.approx(gain * 0.4)


def test_branches_need_trunk_height(state):
    _neutral_nutrients(state)
    state.unlocked.branches = True
    state.select_action(Action.BRANCHES)
    apply_growth(state)
    assert state.plant.branch_length == 0.0
    state.plant.trunk_height = 40.0
    apply_growth(state)
    assert state.plant.branch_length == pytest.approx(state.seed.growth_rate * 0.6)
    assert state.plant.branch_count == pytest.approx(state.seed.growth_rate * 0.3)


def test_leaves_throttled_by_roots(state):
    _neutral_nutrients(state)
    state.unlocked.leaves = True
    state.select_action(Action.LEAVES)
    state.plant.leaf_mass = 40.0
    state.plant.root_spread = 30.0
    assert root_balance(state.plant) == pytest.approx(0.5)
    apply_growth(state)
    gain = state.seed.growth_rate * 0.6 * 0.2 * state.seed.leaf_efficiency * 0.5
    assert state.plant.leaf_mass == pytest.approx(40.0 + gain)


def test_growth_scalars_clamped(state):
    _neutral_nutrients(state)
    state.select_action(Action.ROOTS)
    state.select_root_type(RootType.TAPROOT)
    state.plant.root_depth = 99.9
    apply_growth(state)
    assert state.plant.root_depth == 100.0


# -------------------------
# unlocks

def test_trunk_unlock_is_one_way(state):
    state.plant.root_structural = 7.9
    check_unlocks(state)
    assert not state.unlocked.trunk
    state.plant.root_structural = 8.0
    check_unlocks(state)
    assert state.unlocked.trunk
    state.plant.root_structural = 0.0
    check_unlocks(state)
    assert state.unlocked.trunk


def test_trunk_hint_every_20_ticks(state):
    state.plant.root_structural = 5.0
    state.tick = 20
    check_unlocks(state)
    assert state.log[0].msg.startswith("Roots 5/8 anchor strength")
    n = len(state.log)
    state.tick = 21
    check_unlocks(state)
    assert len(state.log) == n


def test_leaves_unlock_with_first_node(sprouted):
    sprouted.unlocked.leaves = False
    check_unlocks(sprouted)
    assert sprouted.unlocked.leaves


def test_branches_unlock_at_height(state):
    state.plant.trunk_height = 15.9
    check_unlocks(state)
    assert not state.unlocked.branches
    state.plant.trunk_height = 16.0
    check_unlocks(state)
    assert state.unlocked.branches


# -------------------------
# health

def _comfortable(state):
    state.env.temperature = state.seed.temp_optimum
    state.energy = state.water = 50.0
    state.nitrogen = state.phosphorus = state.potassium = 50.0
    state.o2 = 50.0


def test_health_recovers_without_stress(state):
    _comfortable(state)
    assert update_health(state) == 0
    assert state.health == pytest.approx(80.3)


def test_stress_penalties_add_up(state):
    _comfortable(state)
    state.energy, state.water, state.potassium = 5.0, 5.0, 5.0
    assert stress_score(state) == 2 + 3 + 1
    update_health(state)
    assert state.health == pytest.approx(80.0 - 3.0)


def test_temperature_stress_and_cold_hardening(state):
    _comfortable(state)
    state.env.temperature = state.seed.temp_optimum - 14
    # factor exp(-0.98) ~ 0.375 -> moderate
    assert stress_score(state) == 1
    state.env.temperature = state.seed.temp_optimum - 20
    assert stress_score(state) == 2
    state.dormant, state.dormancy_depth = True, 0.9
    # 0.135 + 0.36 -> moderate only
    assert stress_score(state) == 1
    assert stress_score(state, temp_optima=False) == 0


def test_health_floor(state):
    state.energy = state.water = state.nitrogen = state.potassium = state.o2 = 0.0
    for _ in range(500):
        update_health(state)
        assert 0.0 <= state.health <= 100.0
    assert state.health == 0.0
