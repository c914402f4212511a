"""
Galaxy generation.

Regions are laid out on a 100x100 plane in rings around a single core region
at (50, 50): core, inner, mid, outer, rim, then void for anything left over.
Every random draw comes from the injected random.Random, so a seed
reproduces the same galaxy.
"""

import math
import random
from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession

from dominion.models.galaxy_region import GalaxyRegion, RegionType
from dominion.models.region_connection import ConnectionType, RegionConnection, WormholeStatus

MIN_REGIONS = 4
MAX_REGIONS = 15
DEFAULT_EMPIRES_PER_REGION = 10

ADJACENT_DISTANCE = 30.0
TRADE_ROUTE_DISTANCE = 50.0
HAZARDOUS_CHANCE = 0.15
CONTESTED_CHANCE = 0.10
TRADE_ROUTE_CHANCE = 0.5

HAZARDOUS_MULTIPLIER = 1.5
CONTESTED_MULTIPLIER = 1.25

WORMHOLES_PER_10_EMPIRES = 2
WORMHOLE_BASE_COLLAPSE_CHANCE = 0.05

# Borders open gradually over this window of turns
BORDER_DISCOVERY_START_TURN = 10
BORDER_DISCOVERY_END_TURN = 15
BORDER_DISCOVERY_VARIANCE = 1
DISCOVERABLE_BORDER_TYPES = {
    ConnectionType.adjacent,
    ConnectionType.hazardous,
    ConnectionType.contested,
}

# (region type, max count, min radius, max radius)
_RINGS: list[tuple[RegionType, int, float, float]] = [
    (RegionType.inner, 4, 15.0, 20.0),
    (RegionType.mid, 4, 28.0, 32.0),
    (RegionType.outer, 4, 38.0, 42.0),
    (RegionType.rim, 2, 46.0, 50.0),
]

# Starting regions for the human player, in preference order
PLAYER_START_TYPES = {RegionType.inner, RegionType.mid, RegionType.outer}


@dataclass
class RegionTemplate:
    wealth_modifier: float
    danger_level: int
    name_prefixes: list[str]


REGION_TEMPLATES: dict[RegionType, RegionTemplate] = {
    RegionType.core: RegionTemplate(1.5, 70, ["Central", "Imperial", "Capital", "Prime", "Nexus"]),
    RegionType.inner: RegionTemplate(1.2, 50, ["Inner", "Proxima", "Near", "Core-Adjacent", "Hub"]),
    RegionType.mid: RegionTemplate(1.1, 45, ["Mid", "Median", "Meridian", "Middle", "Between"]),
    RegionType.outer: RegionTemplate(1.0, 40, ["Outer", "Frontier", "Border", "Periphery", "Marches"]),
    RegionType.rim: RegionTemplate(0.8, 30, ["Rim", "Edge", "Far", "Distant", "Remote"]),
    RegionType.void: RegionTemplate(0.5, 80, ["Void", "Dark", "Lost", "Forsaken", "Abyssal"]),
}

REGION_SUFFIXES = [
    "Sector", "Quadrant", "Expanse", "Territories", "Reaches",
    "Domain", "Cluster", "Nebula", "Zone", "Systems",
]


@dataclass
class RegionSpec:
    index: int
    name: str
    region_type: RegionType
    x: float
    y: float
    wealth_modifier: float
    danger_level: int
    max_empires: int


@dataclass
class ConnectionSpec:
    from_index: int
    to_index: int
    connection_type: ConnectionType
    force_multiplier: float = 1.0
    discovered_at_turn: int | None = None
    wormhole_status: WormholeStatus | None = None
    collapse_chance: float | None = None


@dataclass
class GalaxyLayout:
    regions: list[RegionSpec] = field(default_factory=list)
    connections: list[ConnectionSpec] = field(default_factory=list)

    @property
    def wormholes(self) -> list[ConnectionSpec]:
        return [c for c in self.connections if c.connection_type == ConnectionType.wormhole]


# ---------------------------------------------------------------------------
# Geometry helpers
# ---------------------------------------------------------------------------

def distance(x1: float, y1: float, x2: float, y2: float) -> float:
    return math.hypot(x1 - x2, y1 - y2)


def region_distance(a, b) -> float:
    """Distance between two objects exposing x/y or position_x/position_y."""
    ax = getattr(a, "position_x", None)
    if ax is None:
        return distance(a.x, a.y, b.x, b.y)
    return distance(a.position_x, a.position_y, b.position_x, b.position_y)


def calculate_region_count(empire_count: int, empires_per_region: int = DEFAULT_EMPIRES_PER_REGION) -> int:
    count = math.ceil(empire_count / max(1, empires_per_region))
    return max(MIN_REGIONS, min(count, MAX_REGIONS))


def calculate_wormhole_count(empire_count: int) -> int:
    return math.ceil(empire_count / 10) * WORMHOLES_PER_10_EMPIRES


def _pair_key(a: int, b: int) -> tuple[int, int]:
    return (a, b) if a < b else (b, a)


# ---------------------------------------------------------------------------
# Regions
# ---------------------------------------------------------------------------

def _region_positions(region_count: int, rng: random.Random) -> list[tuple[RegionType, float, float]]:
    positions: list[tuple[RegionType, float, float]] = [(RegionType.core, 50.0, 50.0)]
    remaining = region_count - 1

    for ring_no, (ring_type, max_count, min_radius, max_radius) in enumerate(_RINGS):
        if remaining <= 0:
            break
        count = min(max_count, remaining)
        # Alternate rings are rotated half a step so spokes do not line up
        offset = (ring_no % 2) * math.pi / count
        for i in range(count):
            angle = (i / count) * math.tau + offset
            radius = min_radius + rng.random() * (max_radius - min_radius)
            positions.append((ring_type, 50 + math.cos(angle) * radius, 50 + math.sin(angle) * radius))
        remaining -= count

    while remaining > 0:
        angle = rng.random() * math.tau
        radius = 20 + rng.random() * 30
        positions.append((RegionType.void, 50 + math.cos(angle) * radius, 50 + math.sin(angle) * radius))
        remaining -= 1

    return positions


def _region_name(region_type: RegionType, used: set[str], index: int, rng: random.Random) -> str:
    prefixes = REGION_TEMPLATES[region_type].name_prefixes
    name = ""
    for _ in range(10):
        name = f"{rng.choice(prefixes)} {rng.choice(REGION_SUFFIXES)}"
        if name not in used:
            break
    if name in used:
        name = f"{name} {index + 1}"
    used.add(name)
    return name


def generate_regions(
    empire_count: int,
    rng: random.Random,
    empires_per_region: int = DEFAULT_EMPIRES_PER_REGION,
) -> list[RegionSpec]:
    region_count = calculate_region_count(empire_count, empires_per_region)
    used_names: set[str] = set()
    regions: list[RegionSpec] = []

    for index, (region_type, x, y) in enumerate(_region_positions(region_count, rng)):
        template = REGION_TEMPLATES[region_type]
        regions.append(
            RegionSpec(
                index=index,
                name=_region_name(region_type, used_names, index, rng),
                region_type=region_type,
                x=round(x, 2),
                y=round(y, 2),
                wealth_modifier=template.wealth_modifier,
                danger_level=template.danger_level + rng.randint(-10, 9),
                max_empires=max(1, empires_per_region + rng.randint(-2, 2)),
            )
        )
    return regions


# ---------------------------------------------------------------------------
# Connections
# ---------------------------------------------------------------------------

def _is_trade_viable(a: RegionType, b: RegionType) -> bool:
    hubs = {RegionType.core, RegionType.inner}
    partners = {RegionType.core, RegionType.inner, RegionType.mid, RegionType.outer}
    return (a in hubs and b in partners) or (b in hubs and a in partners)


def generate_connections(regions: list[RegionSpec], rng: random.Random) -> list[ConnectionSpec]:
    connections: list[ConnectionSpec] = []

    for i, r1 in enumerate(regions):
        for r2 in regions[i + 1:]:
            dist = region_distance(r1, r2)
            if dist <= ADJACENT_DISTANCE:
                roll = rng.random()
                if roll < HAZARDOUS_CHANCE:
                    connections.append(
                        ConnectionSpec(r1.index, r2.index, ConnectionType.hazardous, HAZARDOUS_MULTIPLIER)
                    )
                elif roll < HAZARDOUS_CHANCE + CONTESTED_CHANCE:
                    connections.append(
                        ConnectionSpec(r1.index, r2.index, ConnectionType.contested, CONTESTED_MULTIPLIER)
                    )
                else:
                    connections.append(ConnectionSpec(r1.index, r2.index, ConnectionType.adjacent))
            elif dist <= TRADE_ROUTE_DISTANCE and _is_trade_viable(r1.region_type, r2.region_type):
                if rng.random() < TRADE_ROUTE_CHANCE:
                    connections.append(ConnectionSpec(r1.index, r2.index, ConnectionType.trade_route))

    _bridge_components(regions, connections)
    return connections


def _bridge_components(regions: list[RegionSpec], connections: list[ConnectionSpec]) -> None:
    """Join disconnected components with adjacent borders, nearest pair first."""
    parent = list(range(len(regions)))

    def find(i: int) -> int:
        while parent[i] != i:
            parent[i] = parent[parent[i]]
            i = parent[i]
        return i

    for conn in connections:
        parent[find(conn.from_index)] = find(conn.to_index)

    while True:
        roots = {find(r.index) for r in regions}
        if len(roots) <= 1:
            return
        best: tuple[float, int, int] | None = None
        for i, r1 in enumerate(regions):
            for r2 in regions[i + 1:]:
                if find(r1.index) == find(r2.index):
                    continue
                candidate = (region_distance(r1, r2), r1.index, r2.index)
                if best is None or candidate < best:
                    best = candidate
        _, a, b = best
        connections.append(ConnectionSpec(a, b, ConnectionType.adjacent))
        parent[find(a)] = find(b)


def generate_wormholes(
    regions: list[RegionSpec],
    connections: list[ConnectionSpec],
    empire_count: int,
    rng: random.Random,
) -> list[ConnectionSpec]:
    """Lay hidden wormholes between distant unconnected regions, biased to the farthest pairs."""
    linked = {_pair_key(c.from_index, c.to_index) for c in connections}
    candidates: list[tuple[float, int, int]] = []
    for i, r1 in enumerate(regions):
        for r2 in regions[i + 1:]:
            dist = region_distance(r1, r2)
            if _pair_key(r1.index, r2.index) not in linked and dist > TRADE_ROUTE_DISTANCE:
                candidates.append((dist, r1.index, r2.index))

    # Farthest first; ties broken by index so ordering never depends on float noise alone
    candidates.sort(key=lambda c: (-c[0], c[1], c[2]))

    wormholes: list[ConnectionSpec] = []
    for _ in range(min(calculate_wormhole_count(empire_count), len(candidates))):
        max_idx = min(len(candidates) - 1, len(candidates) // 2)
        _, a, b = candidates.pop(rng.randint(0, max_idx))
        wormholes.append(
            ConnectionSpec(
                a,
                b,
                ConnectionType.wormhole,
                wormhole_status=WormholeStatus.undiscovered,
                collapse_chance=WORMHOLE_BASE_COLLAPSE_CHANCE,
            )
        )
    return wormholes


def assign_border_discovery_turns(connections: list, rng: random.Random) -> None:
    """Spread border unlock turns evenly over the discovery window, with +/-1 jitter.

    Works on anything exposing connection_type / discovered_at_turn, so it is
    used both on generated specs and on persisted RegionConnection rows.
    """
    borders = [c for c in connections if c.connection_type in DISCOVERABLE_BORDER_TYPES]
    if not borders:
        return
    rng.shuffle(borders)
    window = BORDER_DISCOVERY_END_TURN - BORDER_DISCOVERY_START_TURN
    span = len(borders) - 1
    for i, conn in enumerate(borders):
        base = BORDER_DISCOVERY_START_TURN + ((i * window) // span if span else 0)
        jitter = rng.randint(-BORDER_DISCOVERY_VARIANCE, BORDER_DISCOVERY_VARIANCE)
        conn.discovered_at_turn = max(
            BORDER_DISCOVERY_START_TURN, min(BORDER_DISCOVERY_END_TURN, base + jitter)
        )


def generate_galaxy(
    empire_count: int,
    rng: random.Random,
    empires_per_region: int = DEFAULT_EMPIRES_PER_REGION,
) -> GalaxyLayout:
    regions = generate_regions(empire_count, rng, empires_per_region)
    connections = generate_connections(regions, rng)
    assign_border_discovery_turns(connections, rng)
    connections.extend(generate_wormholes(regions, connections, empire_count, rng))
    return GalaxyLayout(regions=regions, connections=connections)


# ---------------------------------------------------------------------------
# Empire placement
# ---------------------------------------------------------------------------

def assign_home_regions(
    layout: GalaxyLayout,
    empire_count: int,
    rng: random.Random,
    player_index: int | None = 0,
) -> list[int]:
    """Return a region index for each empire (by position). Nobody starts in the core."""
    eligible = [r for r in layout.regions if r.region_type != RegionType.core]
    load = {r.index: 0 for r in eligible}
    homes: list[int] = [-1] * empire_count

    if player_index is not None and 0 <= player_index < empire_count:
        preferred = [r for r in eligible if r.region_type in PLAYER_START_TYPES] or eligible
        choice = rng.choice(preferred)
        homes[player_index] = choice.index
        load[choice.index] += 1

    cursor = 0
    for empire_pos in range(empire_count):
        if homes[empire_pos] != -1:
            continue
        # Round-robin, skipping full regions unless every region is full
        for _ in range(len(eligible)):
            region = eligible[cursor % len(eligible)]
            cursor += 1
            if load[region.index] < region.max_empires:
                break
        else:
            region = min(eligible, key=lambda r: (load[r.index], r.index))
        homes[empire_pos] = region.index
        load[region.index] += 1

    return homes


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------

async def persist_galaxy(db: AsyncSession, game_id: int, layout: GalaxyLayout) -> dict[int, int]:
    """Insert regions and connections; returns region index -> region id."""
    rows: list[GalaxyRegion] = []
    for spec in layout.regions:
        row = GalaxyRegion(
            game_id=game_id,
            name=spec.name,
            region_type=spec.region_type,
            position_x=spec.x,
            position_y=spec.y,
            wealth_modifier=spec.wealth_modifier,
            danger_level=spec.danger_level,
            max_empires=spec.max_empires,
        )
        db.add(row)
        rows.append(row)
    await db.flush()
    region_ids = {spec.index: row.id for spec, row in zip(layout.regions, rows)}

    for spec in layout.connections:
        db.add(
            RegionConnection(
                game_id=game_id,
                from_region_id=region_ids[spec.from_index],
                to_region_id=region_ids[spec.to_index],
                connection_type=spec.connection_type,
                is_bidirectional=True,
                force_multiplier=spec.force_multiplier,
                discovered_at_turn=spec.discovered_at_turn,
                wormhole_status=spec.wormhole_status,
                collapse_chance=spec.collapse_chance,
            )
        )
    await db.flush()
    return region_ids
