# tests/test_root_graph.py
import math

import pytest

from sim.engine import tick
from sim.root_graph import (build_root_segments, structural_base_angle, surface_base_angle,
                            taproot_target_depth, update_root_graph)
from sim.state import Action, RootType


def _geometry(segments):
    return [(s.x1, s.y1, s.x2, s.y2, s.cpx, s.cpy, s.max_width) for s in segments]


def test_arm_shape_is_repeatable():
    a = build_root_segments(0, 0, 0.14, 40.0, 3, 1.4, RootType.SURFACE, 5)
    b = build_root_segments(0, 0, 0.14, 40.0, 3, 1.4, RootType.SURFACE, 5)
    c = build_root_segments(0, 0, 0.14, 40.0, 3, 1.4, RootType.SURFACE, 6)
    assert _geometry(a) == _geometry(b)
    assert _geometry(a) != _geometry(c)


def test_recursion_depth_and_length_cutoff():
    # 1 + 2 + 2*2 segments for three levels
    assert len(build_root_segments(0, 0, 0.3, 40.0, 3, 1.4, RootType.SURFACE, 0)) == 7
    assert len(build_root_segments(0, 0, 0.3, 40.0, 0, 1.4, RootType.SURFACE, 0)) == 0
    assert len(build_root_segments(0, 0, 0.3, 2.4, 3, 1.4, RootType.SURFACE, 0)) == 0
    # 3.0 -> 1.8 stops the walk after the first segment
    assert len(build_root_segments(0, 0, 0.3, 3.0, 3, 1.4, RootType.SURFACE, 0)) == 1


def test_segments_are_born_thin():
    for seg in build_root_segments(0, 0, math.pi / 2, 50.0, 3, 2.2, RootType.TAPROOT, 0):
        assert seg.width < seg.max_width
        assert seg.root_type == RootType.TAPROOT
        assert (seg.col_a, seg.col_b) == ("#7a3a18", "#3a1a06")


def test_taproot_points_down():
    for seg in build_root_segments(0, 0, math.pi / 2, 80.0, 4, 2.2, RootType.TAPROOT, 0):
        assert seg.y2 > seg.y1
        assert abs(seg.x2 - seg.x1) < (seg.y2 - seg.y1)


def test_arm_angles_alternate_sides():
    assert math.cos(surface_base_angle(0)) > 0 > math.cos(surface_base_angle(1))
    assert surface_base_angle(0) < surface_base_angle(2) <= 0.52
    assert surface_base_angle(20) == 0.52
    # structural band starts ~29 degrees below horizontal
    assert structural_base_angle(0) == 0.5
    assert structural_base_angle(3) == pytest.approx(math.pi - 0.78)


def test_taproot_levels():
    assert taproot_target_depth(0) == 1
    assert taproot_target_depth(21.9) == 1
    assert taproot_target_depth(22) == 2
    assert taproot_target_depth(100) == 4


def test_arms_appended_on_thresholds(state):
    plant, graph = state.plant, state.plant.root_graph
    plant.root_spread = 11.9
    update_root_graph(state)
    assert graph.surface_arms == 0 and graph.surface == []

    plant.root_spread = 13.0
    update_root_graph(state)
    assert graph.surface_arms == 1
    first = _geometry(graph.surface)

    # more progress without crossing 24 adds nothing and moves nothing
    plant.root_spread = 23.0
    for _ in range(50):
        update_root_graph(state)
    assert _geometry(graph.surface) == first

    plant.root_spread = 37.0
    update_root_graph(state)
    assert graph.surface_arms == 3
    assert _geometry(graph.surface)[:len(first)] == first

    plant.root_structural = 31.0
    update_root_graph(state)
    assert graph.structural_arms == 2
    assert all(s.root_type == RootType.STRUCTURAL for s in graph.structural)


def test_taproot_rebuilt_per_level(state):
    plant, graph = state.plant, state.plant.root_graph
    plant.root_depth = 10.0
    update_root_graph(state)
    assert graph.taproot_depth == 1
    assert len(graph.taproot) == 1
    plant.root_depth = 23.0
    update_root_graph(state)
    assert graph.taproot_depth == 2
    assert len(graph.taproot) == 3
    # losing depth never shrinks it
    plant.root_depth = 5.0
    update_root_graph(state)
    assert graph.taproot_depth == 2


def test_widths_grow_to_max_and_stop(state):
    state.plant.root_spread = 30.0
    state.plant.root_structural = 20.0
    update_root_graph(state)
    graph = state.plant.root_graph
    prev = [s.width for s in graph.all_segments()]
    for _ in range(3000):
        update_root_graph(state)
        widths = [s.width for s in graph.all_segments()]
        assert all(w >= p for w, p in zip(widths, prev))
        prev = widths
    assert all(s.width == s.max_width for s in graph.all_segments())


def test_segments_stable_across_ticks(make_state):
    """Surface and structural segments never move once laid down."""
    state = make_state(weather_events=False, herbivory=False)
    state.select_action(Action.ROOTS)
    seen = {RootType.SURFACE: [], RootType.STRUCTURAL: []}
    for i in range(600):
        if i == 200:
            state.select_root_type(RootType.STRUCTURAL)
        tick(state)
        for rt, old in seen.items():
            segs = state.plant.root_graph.segments(rt)
            assert _geometry(segs)[:len(old)] == old
            assert all(s.width <= s.max_width for s in segs)
            seen[rt] = _geometry(segs)
    assert seen[RootType.SURFACE]
