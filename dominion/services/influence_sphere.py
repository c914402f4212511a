"""Sphere of influence: which empires a given empire may attack this turn."""

from dataclasses import dataclass, field
from enum import Enum

from dominion.models.region_connection import ConnectionType, WormholeStatus
from dominion.services.galaxy_generator import region_distance

BASE_INFLUENCE_RADIUS = 3
SECTOR_BONUS_THRESHOLD = 6
SECTORS_PER_BONUS = 5
RESEARCH_LEVELS_PER_BONUS = 10
MAX_DIRECT_NEIGHBORS = 8
MAX_EXTENDED_NEIGHBORS = 12

DIRECT_MULTIPLIER = 1.0
EXTENDED_MULTIPLIER = 1.5

ACTIVE_WORMHOLE_STATUSES = {WormholeStatus.discovered, WormholeStatus.stabilized}


class NeighborTier(str, Enum):
    direct = "direct"
    extended = "extended"


@dataclass
class EmpirePosition:
    empire_id: int
    region_id: int
    sector_count: int
    research_level: int = 0
    is_eliminated: bool = False


@dataclass
class Neighbor:
    empire_id: int
    tier: NeighborTier
    force_multiplier: float
    distance: float
    connection_type: ConnectionType | None = None


@dataclass
class InfluenceSphere:
    empire_id: int
    radius: int
    direct: list[Neighbor] = field(default_factory=list)
    extended: list[Neighbor] = field(default_factory=list)
    unreachable: list[int] = field(default_factory=list)

    def get(self, empire_id: int) -> Neighbor | None:
        for neighbor in self.direct + self.extended:
            if neighbor.empire_id == empire_id:
                return neighbor
        return None

    @property
    def direct_ids(self) -> list[int]:
        return [n.empire_id for n in self.direct]

    @property
    def extended_ids(self) -> list[int]:
        return [n.empire_id for n in self.extended]


@dataclass
class AttackValidation:
    is_valid: bool
    reason: str | None = None
    tier: NeighborTier | None = None
    force_multiplier: float = 1.0
    effective_forces: dict[str, int] = field(default_factory=dict)


def calculate_influence_radius(sector_count: int, research_level: int = 0) -> int:
    sector_bonus = max(0, sector_count - SECTOR_BONUS_THRESHOLD) // SECTORS_PER_BONUS
    research_bonus = research_level // RESEARCH_LEVELS_PER_BONUS
    return min(BASE_INFLUENCE_RADIUS + sector_bonus + research_bonus, MAX_DIRECT_NEIGHBORS)


def is_connection_traversable(conn, current_turn: int) -> bool:
    """Whether an edge can be crossed on `current_turn`."""
    if conn.connection_type == ConnectionType.wormhole:
        return conn.wormhole_status in ACTIVE_WORMHOLE_STATUSES
    if conn.discovered_at_turn is None:
        return True
    return current_turn >= conn.discovered_at_turn


def build_adjacency(connections, current_turn: int) -> dict[int, dict[int, object]]:
    """region id -> {neighbour region id: cheapest traversable connection}."""
    adjacency: dict[int, dict[int, object]] = {}
    for conn in connections:
        if not is_connection_traversable(conn, current_turn):
            continue
        ends = [(conn.from_region_id, conn.to_region_id)]
        if conn.is_bidirectional:
            ends.append((conn.to_region_id, conn.from_region_id))
        for a, b in ends:
            current = adjacency.setdefault(a, {}).get(b)
            if current is None or conn.force_multiplier < current.force_multiplier:
                adjacency[a][b] = conn
    return adjacency


def calculate_influence_sphere(
    empire: EmpirePosition,
    others: list[EmpirePosition],
    regions: dict,
    connections,
    current_turn: int,
) -> InfluenceSphere:
    """Partition every other live empire into direct / extended / unreachable.

    `regions` maps region id -> object with position_x / position_y.
    """
    radius = calculate_influence_radius(empire.sector_count, empire.research_level)
    adjacency = build_adjacency(connections, current_turn)
    home = regions[empire.region_id]
    links = adjacency.get(empire.region_id, {})

    ranked: list[tuple[float, int, object | None]] = []
    for other in others:
        if other.empire_id == empire.empire_id or other.is_eliminated:
            continue
        dist = region_distance(home, regions[other.region_id])
        ranked.append((dist, other.empire_id, links.get(other.region_id)))
    ranked.sort(key=lambda r: (r[0], r[1]))

    sphere = InfluenceSphere(empire_id=empire.empire_id, radius=radius)
    for position, (dist, other_id, edge) in enumerate(ranked):
        if position < radius:
            sphere.direct.append(
                Neighbor(
                    empire_id=other_id,
                    tier=NeighborTier.direct,
                    force_multiplier=edge.force_multiplier if edge is not None else DIRECT_MULTIPLIER,
                    distance=dist,
                    connection_type=edge.connection_type if edge is not None else None,
                )
            )
        elif position < radius + MAX_EXTENDED_NEIGHBORS:
            sphere.extended.append(
                Neighbor(
                    empire_id=other_id,
                    tier=NeighborTier.extended,
                    force_multiplier=EXTENDED_MULTIPLIER,
                    distance=dist,
                    connection_type=edge.connection_type if edge is not None else None,
                )
            )
        else:
            sphere.unreachable.append(other_id)
    return sphere


def apply_force_multiplier(forces: dict[str, int], multiplier: float) -> dict[str, int]:
    """Effective force per unit type: committed count divided by the multiplier, floored."""
    if multiplier <= 0:
        raise ValueError("Force multiplier must be positive")
    return {unit: int(count // multiplier) for unit, count in forces.items()}


def is_protected(current_turn: int, protection_turns: int) -> bool:
    return current_turn <= protection_turns


def validate_attack(
    sphere: InfluenceSphere,
    target_id: int,
    committed: dict[str, int],
    available: dict[str, int],
    current_turn: int,
    protection_turns: int,
    has_treaty: bool = False,
) -> AttackValidation:
    if target_id == sphere.empire_id:
        return AttackValidation(False, "Cannot attack yourself")
    if is_protected(current_turn, protection_turns):
        return AttackValidation(False, f"New-game protection lasts until turn {protection_turns}")
    if has_treaty:
        return AttackValidation(False, "An active treaty forbids this attack")

    neighbor = sphere.get(target_id)
    if neighbor is None:
        return AttackValidation(False, "Target is outside the sphere of influence")

    if not any(count > 0 for count in committed.values()):
        return AttackValidation(False, "No forces committed")
    for unit, count in committed.items():
        if count < 0:
            return AttackValidation(False, f"Negative force count for {unit}")
        if count > available.get(unit, 0):
            return AttackValidation(False, f"Insufficient {unit}: have {available.get(unit, 0)}, need {count}")

    return AttackValidation(
        True,
        tier=neighbor.tier,
        force_multiplier=neighbor.force_multiplier,
        effective_forces=apply_force_multiplier(committed, neighbor.force_multiplier),
    )
