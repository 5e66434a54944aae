# sim/state.py
"""
Game state for the plant growth simulation
------------------------------------------
Static reference data (biomes, seeds, root-type profiles), the feature
toggles and tunable constants captured at creation time, and the mutable
GameState that the tick function owns.

Resource pools and growth-progress scalars are kept in [0, 100];
stomata, xylem integrity, colonisation, dormancy depth and herbivore
pressure are kept in [0, 1].
"""

import logging
import math
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple

import numpy as np

logger = logging.getLogger(__name__)

RESOURCE_MAX = 100.0
TICKS_PER_DAY = 10
DAYS_PER_SEASON = 90
DAYS_PER_YEAR = 360
LOG_LIMIT = 40

SEASON_NAMES = ("Spring", "Summer", "Autumn", "Winter")


def clamp(value: float, lo: float = 0.0, hi: float = RESOURCE_MAX) -> float:
    return float(np.clip(value, lo, hi))


def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


# Closed variant types ---------------------------------------------------
class Action(str, Enum):
    ROOTS = "roots"
    TRUNK = "trunk"
    BRANCHES = "branches"
    LEAVES = "leaves"


class RootType(str, Enum):
    TAPROOT = "taproot"
    STRUCTURAL = "structural"
    SURFACE = "surface"


class NodeType(str, Enum):
    TRUNK = "trunk"
    LEAF = "leaf"


class WeatherEvent(str, Enum):
    DROUGHT = "drought"
    FLOOD = "flood"
    STORM = "storm"


@dataclass(frozen=True)
class RootTypeProfile:
    """Allocation bonuses of one root growth strategy."""
    name: str
    water_bonus: float
    nutrient_bonus: float
    structural_bonus: float


ROOT_TYPES: Dict[RootType, RootTypeProfile] = {
    RootType.TAPROOT: RootTypeProfile("Tap Root", water_bonus=1.8, nutrient_bonus=0.6, structural_bonus=0.5),
    RootType.STRUCTURAL: RootTypeProfile("Structural Root", water_bonus=0.5, nutrient_bonus=0.7, structural_bonus=2.0),
    RootType.SURFACE: RootTypeProfile("Surface Root", water_bonus=1.2, nutrient_bonus=1.4, structural_bonus=0.8),
}


def _build(cls, data: dict, **extra):
    """Instantiate a config dataclass from a mapping, rejecting unknown keys."""
    known = {f.name for f in fields(cls)}
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"Unknown {cls.__name__} keys: {sorted(unknown)}")
    return cls(**data, **extra)


# Static reference data --------------------------------------------------
@dataclass(frozen=True)
class NPK:
    n: float
    p: float
    k: float


@dataclass(frozen=True)
class Biome:
    """Environmental parameter set a playthrough is anchored to."""
    id: str
    name: str
    sunlight: float
    rainfall: float
    groundwater_depth: float
    soil_nutrients: float
    temp_range: Tuple[float, float]
    npk: NPK = NPK(0.5, 0.5, 0.5)
    wind: float = 0.0
    fungal_network: float = 0.3
    soil_type: str = "loam"
    desc: str = ""
    seeds: Tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, biome_id: str, data: dict) -> "Biome":
        data = dict(data)
        if "npk" in data:
            data["npk"] = NPK(**data["npk"])
        if "temp_range" in data:
            data["temp_range"] = tuple(float(t) for t in data["temp_range"])
        if "seeds" in data:
            data["seeds"] = tuple(data["seeds"])
        return _build(cls, data, id=biome_id)


@dataclass(frozen=True)
class Seed:
    """Per-species growth, nutrient and survival traits."""
    id: str
    name: str
    growth_rate: float
    start_energy: float
    start_water: float
    start_nutrients: float
    trunk_strength: float
    root_efficiency: float
    leaf_efficiency: float
    water_need: float
    lifespan: str = "perennial"        # 'annual' | 'perennial'
    deciduous: bool = False
    npk_need: NPK = NPK(1.0, 1.0, 1.0)
    energy_need: float = 1.0
    max_height: float = 20.0
    max_spread: float = 20.0
    stomatal_type: str = "normal"      # 'normal' | 'cam'
    temp_optimum: float = 22.0
    cavitation_resistance: float = 0.35
    flowering_season: int = -1         # -1 = day-neutral
    pollinator_attraction: float = 0.5
    cambium_rate: float = 0.0
    mycorrhizal_affinity: float = 0.5
    herbivory_susceptibility: float = 0.5
    defense_strength: float = 0.3
    rarity: str = "common"
    desc: str = ""

    @classmethod
    def from_dict(cls, seed_id: str, data: dict) -> "Seed":
        data = dict(data)
        if "npk_need" in data:
            data["npk_need"] = NPK(**data["npk_need"])
        return _build(cls, data, id=seed_id)

    @property
    def is_annual(self) -> bool:
        return self.lifespan == "annual"

    @property
    def is_cam(self) -> bool:
        return self.stomatal_type == "cam"

    @property
    def is_day_neutral(self) -> bool:
        return self.flowering_season == -1


_CAMEL_NAMES = {
    "stomatalRegulation": "stomatal_regulation",
    "npkNutrients": "npk_nutrients",
    "hydraulicFailure": "hydraulic_failure",
    "tempOptima": "temp_optima",
    "flowering": "flowering",
    "lifeCycles": "life_cycles",
    "cambiumGrowth": "cambium_growth",
    "mycorrhizae": "mycorrhizae",
    "herbivory": "herbivory",
    "weatherEvents": "weather_events",
}


@dataclass(frozen=True)
class Settings:
    """Biology feature toggles, fixed for the lifetime of a GameState."""
    stomatal_regulation: bool = True
    npk_nutrients: bool = True
    hydraulic_failure: bool = True
    temp_optima: bool = True
    flowering: bool = True
    life_cycles: bool = True
    cambium_growth: bool = True
    mycorrhizae: bool = True
    herbivory: bool = True
    weather_events: bool = True

    @classmethod
    def from_dict(cls, data: Optional[dict] = None) -> "Settings":
        data = data or {}
        normalized = {_CAMEL_NAMES.get(k, k): v for k, v in data.items()}
        bad = sorted(k for k, v in normalized.items() if not isinstance(v, bool))
        if bad:
            raise ValueError(f"Settings values must be true/false: {bad}")
        return _build(cls, normalized)

    def to_dict(self) -> Dict[str, bool]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass
class SimParams:
    """Gameplay-tuned constants that are balance-sensitive rather than structural."""
    photo_scale: float = 3.5
    leaf_action_bonus: float = 1.3
    seedling_energy: float = 3.5
    seedling_leaf_threshold: float = 5.0
    photo_temp_breadth: float = 8.0
    survival_temp_breadth: float = 10.0
    growth_speed: float = 0.6
    min_growth_energy: float = 5.0
    min_growth_water: float = 3.0
    action_energy_cost: float = 2.0
    roots_water_cost: float = 1.5
    action_water_cost: float = 0.8
    trunk_nutrient_cost: float = 1.2
    branches_nutrient_cost: float = 1.0
    leaves_nutrient_cost: float = 0.6
    trunk_unlock_anchor: float = 8.0
    branch_unlock_height: float = 16.0
    self_pollination_chance: float = 0.02
    pollination_rate: float = 0.015
    herbivory_base_chance: float = 0.04
    weather_event_chance: float = 0.15
    weather_cooldown_days: int = 90

    @classmethod
    def from_dict(cls, data: Optional[dict] = None) -> "SimParams":
        return _build(cls, dict(data or {}))


# Structural graphs ------------------------------------------------------
@dataclass
class Node:
    """Trunk or leaf node; coordinates are relative to the plant origin (y grows downward)."""
    id: int
    type: NodeType
    parent_id: Optional[int]
    x: float
    y: float
    angle: float
    length: float = 0.0
    thickness: float = 0.0
    size: float = 0.0
    children: List[int] = field(default_factory=list)


class NodeGraph:
    """
    Append-only arena of plant nodes with an id -> position index.

    Ids increase monotonically and are never reused; a node's parent must
    already be in the arena when the node is added.
    """

    def __init__(self):
        self.nodes: List[Node] = []
        self._index: Dict[int, int] = {}
        self.next_id = 0

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self) -> Iterator[Node]:
        return iter(self.nodes)

    def __contains__(self, node_id) -> bool:
        return node_id in self._index

    def get(self, node_id: int) -> Optional[Node]:
        pos = self._index.get(node_id)
        return None if pos is None else self.nodes[pos]

    def add(self, node_type: NodeType, parent_id: Optional[int], x: float, y: float,
            angle: float, length: float = 0.0, thickness: float = 0.0, size: float = 0.0) -> Node:
        parent = None
        if parent_id is not None:
            parent = self.get(parent_id)
            if parent is None:
                raise KeyError(f"Parent node {parent_id} does not exist")
        node = Node(id=self.next_id, type=NodeType(node_type), parent_id=parent_id,
                    x=x, y=y, angle=angle, length=length, thickness=thickness, size=size)
        self.next_id += 1
        self._index[node.id] = len(self.nodes)
        self.nodes.append(node)
        if parent is not None:
            parent.children.append(node.id)
        return node

    def of_type(self, node_type: NodeType) -> List[Node]:
        return [n for n in self.nodes if n.type == node_type]

    def children_of(self, node: Node, node_type: Optional[NodeType] = None) -> List[Node]:
        kids = [self.get(cid) for cid in node.children]
        return [c for c in kids if c is not None and (node_type is None or c.type == node_type)]


@dataclass
class RootSegment:
    """One curved stroke of the root system. Only `width` ever changes after creation."""
    x1: float
    y1: float
    x2: float
    y2: float
    cpx: float
    cpy: float
    width: float
    max_width: float
    col_a: str
    col_b: str
    root_type: RootType


@dataclass
class RootGraph:
    surface: List[RootSegment] = field(default_factory=list)
    taproot: List[RootSegment] = field(default_factory=list)
    structural: List[RootSegment] = field(default_factory=list)
    surface_arms: int = 0
    taproot_depth: int = 0
    structural_arms: int = 0

    def segments(self, root_type: RootType) -> List[RootSegment]:
        return getattr(self, RootType(root_type).value)

    def all_segments(self) -> List[RootSegment]:
        return self.surface + self.taproot + self.structural


@dataclass(frozen=True)
class Candidate:
    """A placement site offered to the player; committed by identity, never recomputed."""
    id: str
    node_type: NodeType
    parent_node_id: int
    x: float
    y: float
    angle: float
    label: str
    length: float = 0.0
    size: float = 0.0


# Mutable simulation state -----------------------------------------------
@dataclass
class Environment:
    sunlight: float
    rainfall: float
    groundwater_depth: float
    soil_nutrients: float
    temperature: float


@dataclass
class Plant:
    root_depth: float = 0.0
    root_spread: float = 0.0
    root_structural: float = 0.0
    trunk_height: float = 0.0
    trunk_girth: float = 0.0
    branch_count: float = 0.0
    branch_length: float = 0.0
    leaf_mass: float = 0.0
    flower_progress: float = 0.0
    seeds_produced: int = 0
    pollinated: bool = False
    age_in_days: int = 0
    growth_rings: int = 0
    damaged_leaves: float = 0.0
    scarred_trunk: bool = False
    nodes: NodeGraph = field(default_factory=NodeGraph)
    root_graph: RootGraph = field(default_factory=RootGraph)

    @property
    def total_roots(self) -> float:
        return self.root_spread + self.root_depth + self.root_structural

    @property
    def anchor_score(self) -> float:
        return self.root_structural + self.root_depth * 0.5 + self.root_spread * 0.3


PROGRESS_FIELDS = (
    "root_depth", "root_spread", "root_structural", "trunk_height", "trunk_girth",
    "branch_count", "branch_length", "leaf_mass", "flower_progress",
)
RESOURCE_FIELDS = (
    "energy", "water", "o2", "co2", "nitrogen", "phosphorus", "potassium", "health",
)
UNIT_FIELDS = (
    "stomata", "xylem_integrity", "mycorrhizal_colonisation", "dormancy_depth", "herbivore_pressure",
)


@dataclass
class Unlocks:
    trunk: bool = False
    branches: bool = False
    leaves: bool = False
    flower: bool = False


@dataclass
class Placement:
    mode: Optional[NodeType] = None
    candidates: List[Candidate] = field(default_factory=list)
    hovered_id: Optional[str] = None


@dataclass
class Flows:
    """Flow magnitudes computed during the last tick, kept for observation."""
    photo_rate: float = 0.0
    water_in: float = 0.0
    respire_cost: float = 0.0
    n_in: float = 0.0
    p_in: float = 0.0
    k_in: float = 0.0
    transpire: float = 0.0


@dataclass
class LogEntry:
    day: int
    msg: str
    kind: str = ""    # '' | 'good' | 'danger' | 'warn'


@dataclass
class GameState:
    biome: Biome
    seed: Seed
    settings: Settings
    params: SimParams
    env: Environment
    rng: np.random.Generator = field(repr=False)

    tick: int = 0
    day: int = 1
    season: int = 0
    paused: bool = True
    speed: int = 0

    energy: float = 0.0
    water: float = 0.0
    o2: float = 50.0
    co2: float = 50.0
    nitrogen: float = 0.0
    phosphorus: float = 0.0
    potassium: float = 0.0
    health: float = 80.0

    active_action: Optional[Action] = None
    root_type: RootType = RootType.SURFACE

    stomata: float = 1.0
    xylem_integrity: float = 1.0
    cavitation_events: int = 0
    mycorrhizal_colonisation: float = 0.0
    mycorrhizal_bonus: float = 0.0
    dormant: bool = False
    dormancy_depth: float = 0.0
    life_complete: bool = False
    flowering: bool = False
    herbivore_pressure: float = 0.0
    herbivore_event: bool = False
    active_weather_event: Optional[WeatherEvent] = None
    weather_event_timer: int = 0
    last_weather_day: int = 0

    plant: Plant = field(default_factory=Plant)
    unlocked: Unlocks = field(default_factory=Unlocks)
    placement: Placement = field(default_factory=Placement)
    flows: Flows = field(default_factory=Flows)
    log: List[LogEntry] = field(default_factory=list)

    def add_log(self, msg: str, kind: str = "") -> None:
        """Push a message onto the bounded, newest-first game log."""
        self.log.insert(0, LogEntry(day=self.day, msg=msg, kind=kind))
        del self.log[LOG_LIMIT:]
        level = logging.WARNING if kind == "danger" else logging.INFO
        logger.log(level, "[day %d] %s", self.day, msg)

    def select_action(self, action) -> None:
        """Set (or clear with None) the player's growth action."""
        self.active_action = None if action is None else Action(action)

    def select_root_type(self, root_type) -> None:
        self.root_type = RootType(root_type)

    @property
    def season_name(self) -> str:
        return SEASON_NAMES[self.season]

    def random(self) -> float:
        return float(self.rng.random())
