# sim/placement.py
"""
Interactive placement protocol over the trunk/leaf node graph.

Two-phase: `compute_candidates` offers placement sites, `commit_placement`
consumes exactly one of the returned Candidate objects. Candidates are
never recomputed at commit time; a commit whose parent has vanished is a
silent no-op.

Node coordinates are relative to the plant origin on the ground line,
with y growing downward (angle -pi/2 points straight up).
"""

import logging
import math
from typing import List, Optional, Sequence

from sim.state import Candidate, GameState, NodeType, clamp

logger = logging.getLogger(__name__)

TRUNK_OFFSETS = ((-0.45, "left", "Left"), (0.0, "straight", "Straight"), (0.45, "right", "Right"))
LEAF_SIDES = ((-1, "left", "Left leaf"), (1, "right", "Right leaf"))
LEAF_SPREAD = math.pi * 0.55

DEFAULT_SEGMENT_LENGTH = 14.0
DEFAULT_LEAF_SIZE = 12.0
CLICK_RADIUS = 28.0
HOVER_RADIUS = 32.0

# one-time commit costs and growth bumps
TRUNK_COST = {"energy": 12, "phosphorus": 6, "nitrogen": 4, "water": 6}
LEAF_COST = {"energy": 8, "water": 5, "nitrogen": 3, "potassium": 1}
TRUNK_GAIN = {"trunk_height": 8, "trunk_girth": 3}
LEAF_GAIN = {"leaf_mass": 6, "branch_length": 4}


def seed_base_node(state: GameState) -> bool:
    """
    Sprout the seedling's first trunk node, once.

    Happens when leaf mass first reaches 0.5, or as soon as the trunk is
    unlocked, whichever comes first; leaves only unlock once a node exists.
    """
    plant = state.plant
    if len(plant.nodes) > 0:
        return False
    if plant.leaf_mass < 0.5 and not state.unlocked.trunk:
        return False
    plant.nodes.add(NodeType.TRUNK, None, x=0.0, y=-6.0, angle=-math.pi / 2, length=6.0, thickness=2.0)
    state.add_log("A seedling has sprouted. Choose where to grow your first trunk segment!", "good")
    return True


def trunk_segment_length(state: GameState) -> float:
    return max(16.0, 12 + state.plant.trunk_height * 0.25)


def leaf_size(state: GameState) -> float:
    return max(10.0, 8 + state.plant.leaf_mass * 0.35)


def _trunk_candidates(state: GameState) -> List[Candidate]:
    graph = state.plant.nodes
    seg_len = trunk_segment_length(state)
    out = []
    for node in graph.of_type(NodeType.TRUNK):
        if graph.children_of(node, NodeType.TRUNK):
            continue
        for delta, tag, label in TRUNK_OFFSETS:
            angle = node.angle + delta
            out.append(Candidate(
                id=f"trunk-{node.id}-{tag}",
                node_type=NodeType.TRUNK,
                parent_node_id=node.id,
                x=node.x + math.cos(angle) * seg_len,
                y=node.y + math.sin(angle) * seg_len,
                angle=angle,
                label=label,
                length=seg_len,
            ))
    return out


def _leaf_candidates(state: GameState) -> List[Candidate]:
    graph = state.plant.nodes
    size = leaf_size(state)
    offset = size * 1.2
    out = []
    for node in graph.of_type(NodeType.TRUNK):
        leaves = graph.children_of(node, NodeType.LEAF)
        if len(leaves) >= 2:
            continue
        for side, tag, label in LEAF_SIDES:
            taken = any((leaf.x < node.x) if side < 0 else (leaf.x >= node.x) for leaf in leaves)
            if taken:
                continue
            angle = node.angle + side * LEAF_SPREAD
            out.append(Candidate(
                id=f"leaf-{node.id}-{tag}",
                node_type=NodeType.LEAF,
                parent_node_id=node.id,
                x=node.x + math.cos(angle) * offset,
                y=node.y + math.sin(angle) * offset,
                angle=angle,
                label=label,
                size=size,
            ))
    return out


def compute_candidates(state: GameState, node_type) -> List[Candidate]:
    """Placement sites for a new trunk segment or leaf; empty when there are none."""
    node_type = NodeType(node_type)
    if node_type == NodeType.TRUNK:
        return _trunk_candidates(state)
    return _leaf_candidates(state)


def _pay(state: GameState, costs: dict) -> None:
    for pool, amount in costs.items():
        setattr(state, pool, clamp(getattr(state, pool) - amount))


def _bump(plant, gains: dict) -> None:
    for scalar, amount in gains.items():
        setattr(plant, scalar, clamp(getattr(plant, scalar) + amount))


def commit_placement(state: GameState, candidate: Candidate, node_type=None) -> None:
    node_type = NodeType(node_type if node_type is not None else candidate.node_type)
    plant = state.plant
    if candidate.parent_node_id not in plant.nodes:
        logger.debug("Dropping placement %s: parent %s is gone", candidate.id, candidate.parent_node_id)
        return

    is_trunk = node_type == NodeType.TRUNK
    plant.nodes.add(
        node_type, candidate.parent_node_id,
        x=candidate.x, y=candidate.y, angle=candidate.angle,
        length=candidate.length or DEFAULT_SEGMENT_LENGTH,
        thickness=max(2.0, 2 + plant.trunk_girth * 0.06) if is_trunk else 0.0,
        size=0.0 if is_trunk else (candidate.size or DEFAULT_LEAF_SIZE),
    )

    if is_trunk:
        _bump(plant, TRUNK_GAIN)
        _pay(state, TRUNK_COST)
        state.add_log(f"Trunk segment placed ({candidate.label}).")
    else:
        _bump(plant, LEAF_GAIN)
        _pay(state, LEAF_COST)
        state.add_log(f"Leaf cluster placed ({candidate.label}).", "good")

    cancel_placement(state)


# Placement mode -------------------------------------------------------
def enter_placement(state: GameState, node_type) -> List[Candidate]:
    """Open placement mode; growth pauses while the player chooses a site."""
    node_type = NodeType(node_type)
    candidates = compute_candidates(state, node_type)
    if not candidates:
        state.add_log(f"No valid spots to place a {node_type.value} right now.", "warn")
        return candidates
    state.placement.mode = node_type
    state.placement.candidates = candidates
    state.placement.hovered_id = None
    state.active_action = None
    state.add_log(f"Click a glowing spot to place a {node_type.value} segment.")
    return candidates


def cancel_placement(state: GameState) -> None:
    state.placement.mode = None
    state.placement.candidates = []
    state.placement.hovered_id = None


def refresh_candidates(state: GameState) -> None:
    if state.placement.mode is not None:
        state.placement.candidates = compute_candidates(state, state.placement.mode)


def hit_test(candidates: Sequence[Candidate], x: float, y: float, radius: float = CLICK_RADIUS) -> Optional[Candidate]:
    """Nearest candidate strictly within `radius` of (x, y), or None."""
    best, best_dist = None, radius
    for cand in candidates:
        dist = math.hypot(cand.x - x, cand.y - y)
        if dist < best_dist:
            best, best_dist = cand, dist
    return best


def hover(state: GameState, x: float, y: float) -> Optional[str]:
    """Track the candidate under the pointer; returns its id."""
    if state.placement.mode is None:
        return None
    hit = hit_test(state.placement.candidates, x, y, HOVER_RADIUS)
    state.placement.hovered_id = hit.id if hit is not None else None
    return state.placement.hovered_id


def click(state: GameState, x: float, y: float) -> Optional[Candidate]:
    """Commit the candidate under a click, if any."""
    if state.placement.mode is None:
        return None
    hit = hit_test(state.placement.candidates, x, y, CLICK_RADIUS)
    if hit is not None:
        commit_placement(state, hit, state.placement.mode)
    return hit
