# viz/render.py
"""
Matplotlib renderer for a single GameState.

Draws the persistent root graph below the ground line (each segment as a
quadratic Bezier stroke), the trunk/leaf node graph above it, any open
placement candidates, and a small HUD. Read-only: nothing here mutates
the state.

World coordinates match the simulation: origin at the plant base, y grows
downward, so the y axis is inverted for display.
"""

import math
import os

import matplotlib.pyplot as plt
from matplotlib.patches import Circle, Ellipse, PathPatch
from matplotlib.path import Path

from sim.state import GameState, NodeType

SKY = '#cfe8f7'
SOIL = '#6b4a2b'
LEAF = '#3f8f3a'
LEAF_DAMAGED = '#9a9a3a'
BARK = '#5a3a1e'
CANDIDATE = '#ffd23f'


def _root_patch(seg):
    verts = [(seg.x1, seg.y1), (seg.cpx, seg.cpy), (seg.x2, seg.y2)]
    path = Path(verts, [Path.MOVETO, Path.CURVE3, Path.CURVE3])
    return PathPatch(path, facecolor='none', edgecolor=seg.col_a, linewidth=max(0.3, seg.width),
                     capstyle='round', alpha=0.95)


def _extent(state: GameState):
    xs, ys = [-40.0, 40.0], [-40.0, 40.0]
    for seg in state.plant.root_graph.all_segments():
        xs += [seg.x1, seg.x2, seg.cpx]
        ys += [seg.y1, seg.y2, seg.cpy]
    for node in state.plant.nodes:
        xs.append(node.x)
        ys.append(node.y)
    pad = 15.0
    return min(xs) - pad, max(xs) + pad, min(ys) - pad, max(ys) + pad


def draw_roots(ax, state: GameState):
    graph = state.plant.root_graph
    # thin surface roots on top of the heavier ones
    for seg in graph.structural + graph.taproot + graph.surface:
        ax.add_patch(_root_patch(seg))


def draw_nodes(ax, state: GameState):
    nodes = state.plant.nodes
    leaf_colour = LEAF_DAMAGED if state.plant.damaged_leaves > 20 else LEAF
    for node in nodes.of_type(NodeType.TRUNK):
        parent = nodes.get(node.parent_id) if node.parent_id is not None else None
        x0, y0 = (parent.x, parent.y) if parent is not None else (0.0, 0.0)
        ax.plot([x0, node.x], [y0, node.y], color=BARK, linewidth=max(1.0, node.thickness),
                solid_capstyle='round', zorder=3)
    for node in nodes.of_type(NodeType.LEAF):
        ax.add_patch(Ellipse((node.x, node.y), width=node.size, height=node.size * 0.55,
                             angle=math.degrees(node.angle), color=leaf_colour, zorder=4))


def draw_candidates(ax, state: GameState):
    placement = state.placement
    for cand in placement.candidates:
        hovered = cand.id == placement.hovered_id
        ax.add_patch(Circle((cand.x, cand.y), radius=5.0 if hovered else 3.5, facecolor=CANDIDATE,
                            edgecolor='k' if hovered else 'none', alpha=0.9, zorder=5))


def hud_text(state: GameState) -> str:
    p = state.plant
    lines = [
        f"{state.seed.name} in {state.biome.name}",
        f"Day {state.day} {state.season_name}   T={state.env.temperature:.1f}C",
        f"Health {state.health:.0f}  Energy {state.energy:.0f}  Water {state.water:.0f}",
        f"N {state.nitrogen:.0f}  P {state.phosphorus:.0f}  K {state.potassium:.0f}",
        f"Seeds {p.seeds_produced}  Rings {p.growth_rings}",
    ]
    if state.active_weather_event is not None:
        lines.append(f"Weather: {state.active_weather_event.value}")
    if state.dormant:
        lines.append("Dormant")
    return "\n".join(lines)


def render_plant(state: GameState, out_path=None, ax=None, show_hud=True):
    """Draw the plant; saves to `out_path` when given and returns the figure."""
    created = ax is None
    if created:
        fig, ax = plt.subplots(figsize=(7, 8))
    else:
        fig = ax.figure

    x0, x1, y0, y1 = _extent(state)
    ax.axhspan(y0, 0.0, color=SKY, zorder=0)
    ax.axhspan(0.0, y1, color=SOIL, alpha=0.35, zorder=0)
    ax.axhline(0.0, color=SOIL, linewidth=2, zorder=1)

    draw_roots(ax, state)
    draw_nodes(ax, state)
    draw_candidates(ax, state)

    ax.set_xlim(x0, x1)
    ax.set_ylim(y1, y0)
    ax.set_aspect('equal')
    ax.set_xticks([])
    ax.set_yticks([])
    if show_hud:
        ax.text(0.02, 0.98, hud_text(state), transform=ax.transAxes, va='top', ha='left', fontsize=8,
                family='monospace', bbox=dict(facecolor='white', alpha=0.7, edgecolor='none'))

    if out_path:
        os.makedirs(os.path.dirname(os.path.abspath(out_path)), exist_ok=True)
        fig.savefig(out_path, dpi=120, bbox_inches='tight')
        if created:
            plt.close(fig)
    return fig
