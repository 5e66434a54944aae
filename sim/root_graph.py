# sim/root_graph.py
"""
Persistent root segment graph
-----------------------------
Expands the scalar root-growth progress into curved line segments used for
rendering. Segments are appended when a growth milestone is crossed and are
never moved afterwards; each tick only nudges their width toward its maximum.

Shapes come from `seeded_rand`, keyed by (arm, segment, depth), so an arm
built on a later tick has the same shape it would have had on any other.

Angles follow screen convention: 0 points right, pi/2 points straight down.
"""

import math
from dataclasses import dataclass
from typing import Dict, List

from sim.hashing import root_key, seeded_rand
from sim.state import GameState, RootGraph, RootSegment, RootType

SURFACE_ARM_STEP = 12.0
STRUCTURAL_ARM_STEP = 15.0
TAPROOT_DEPTH_STEP = 22.0
TAPROOT_MAX_DEPTH = 4
MIN_SEGMENT_LENGTH = 2.5
SURFACE_MAX_DIP = 0.38      # ~22 degrees below horizontal


@dataclass(frozen=True)
class RootStyle:
    wobble: float
    lateral_wobble: float
    depth_wobble: float
    max_width_scale: float
    col_a: str
    col_b: str


ROOT_STYLES: Dict[RootType, RootStyle] = {
    RootType.SURFACE: RootStyle(0.14, 0.35, 0.06, 1.2, "#c8a060", "#a07840"),
    RootType.TAPROOT: RootStyle(0.08, 0.22, 0.15, 1.4, "#7a3a18", "#3a1a06"),
    RootType.STRUCTURAL: RootStyle(0.14, 0.22, 0.15, 1.6, "#a06030", "#5a3018"),
}


def _child_angle(root_type: RootType, a: float, fraction: float) -> float:
    if root_type == RootType.SURFACE:
        # fan sideways, never dipping more than SURFACE_MAX_DIP below horizontal
        angle = a + fraction * 0.35
        if math.cos(angle) > 0:
            return min(angle, SURFACE_MAX_DIP)
        return max(angle, math.pi - SURFACE_MAX_DIP)
    if root_type == RootType.TAPROOT:
        angle = a + fraction * 0.18
        return angle * 0.25 + (math.pi / 2) * 0.75
    angle = a + fraction * 0.28
    return angle * 0.80 + (a + 0.20) * 0.20


def _recurse(x: float, y: float, angle: float, length: float, depth: int, width: float,
             root_type: RootType, arm_seed: int, seg_index: int, out: List[RootSegment]) -> None:
    if depth <= 0 or length < MIN_SEGMENT_LENGTH:
        return

    key = root_key(arm_seed, seg_index, depth)
    r1, r2, r3 = seeded_rand(key), seeded_rand(key + 7), seeded_rand(key + 17)
    style = ROOT_STYLES[root_type]

    a = angle + (r1 - 0.5) * style.wobble
    ex = x + math.cos(a) * length
    ey = y + math.sin(a) * length
    cpx = (x + ex) / 2 + (r2 - 0.5) * length * style.lateral_wobble
    cpy = (y + ey) / 2 + (r3 - 0.5) * length * style.depth_wobble

    out.append(RootSegment(
        x1=x, y1=y, x2=ex, y2=ey, cpx=cpx, cpy=cpy,
        width=width * 0.35,
        max_width=width * style.max_width_scale,
        col_a=style.col_a, col_b=style.col_b,
        root_type=root_type,
    ))

    child_count = 2 if depth > 1 else 1
    for i in range(child_count):
        fraction = 0.0 if child_count == 1 else (-0.5 if i == 0 else 0.5)
        _recurse(ex, ey, _child_angle(root_type, a, fraction), length * 0.60, depth - 1,
                 width * 0.58, root_type, arm_seed, seg_index * 10 + i + 1, out)


def build_root_segments(x: float, y: float, angle: float, length: float, depth: int,
                        width: float, root_type: RootType, arm_seed: int) -> List[RootSegment]:
    """Expand one root arm into its recursive segment list."""
    segments: List[RootSegment] = []
    _recurse(x, y, angle, length, depth, width, RootType(root_type), arm_seed, 0, segments)
    return segments


def _arm_side(arm_index: int) -> int:
    return 1 if arm_index % 2 == 0 else -1


def surface_base_angle(arm_index: int) -> float:
    # pairs alternate right/left and fan steeper, capped ~30 degrees below horizontal
    dip = min(0.52, 0.14 + (arm_index // 2) * 0.21)
    return dip if _arm_side(arm_index) > 0 else math.pi - dip


def structural_base_angle(arm_index: int) -> float:
    tilt = 0.5 + (arm_index // 2) * 0.28
    return tilt if _arm_side(arm_index) > 0 else math.pi - tilt


def taproot_target_depth(root_depth: float) -> int:
    return min(TAPROOT_MAX_DEPTH, 1 + math.floor(root_depth / TAPROOT_DEPTH_STEP))


def _extend_surface(graph: RootGraph, root_spread: float) -> None:
    target = max(0, math.floor(root_spread / SURFACE_ARM_STEP))
    for arm in range(graph.surface_arms, target):
        graph.surface.extend(build_root_segments(
            0.0, 0.0, surface_base_angle(arm), 20 + root_spread * 2.0, 3, 1.4, RootType.SURFACE, arm))
    graph.surface_arms = max(graph.surface_arms, target)


def _extend_taproot(graph: RootGraph, root_depth: float) -> None:
    # a taproot has no arms: each new depth level rebuilds it in full
    target = taproot_target_depth(root_depth)
    if target > graph.taproot_depth:
        graph.taproot = build_root_segments(
            0.0, 0.0, math.pi / 2, root_depth * 2.6, target, 2.2, RootType.TAPROOT, 0)
        graph.taproot_depth = target


def _extend_structural(graph: RootGraph, root_structural: float) -> None:
    target = max(0, math.floor(root_structural / STRUCTURAL_ARM_STEP))
    for arm in range(graph.structural_arms, target):
        graph.structural.extend(build_root_segments(
            0.0, 0.0, structural_base_angle(arm), 16 + root_structural * 0.9, 2, 2.8,
            RootType.STRUCTURAL, arm))
    graph.structural_arms = max(graph.structural_arms, target)


def _thicken(segments: List[RootSegment], step: float) -> None:
    for seg in segments:
        seg.width = min(seg.width + step, seg.max_width)


def update_root_graph(state: GameState) -> None:
    plant = state.plant
    graph = plant.root_graph

    _extend_surface(graph, plant.root_spread)
    _extend_taproot(graph, plant.root_depth)
    _extend_structural(graph, plant.root_structural)

    _thicken(graph.surface, 0.012 + plant.root_spread / 3000)
    _thicken(graph.taproot, 0.018 + plant.root_depth / 2500)
    _thicken(graph.structural, 0.020 + plant.root_structural / 2200)
