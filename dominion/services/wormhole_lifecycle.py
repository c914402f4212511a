"""
Wormhole and border lifecycle.

    undiscovered -> discovered -> stabilized
                         |  ^
                         v  |
                      collapsed

plus constructing -> stabilized for player-built wormholes.
"""

import logging
import math
import random
from dataclasses import dataclass, field

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from dominion.exceptions import EmpireNotFoundError, GameNotActiveError, GameNotFoundError
from dominion.models.empire import Empire
from dominion.models.empire_influence import EmpireInfluence
from dominion.models.galaxy_region import GalaxyRegion
from dominion.models.game import Game, GameStatus
from dominion.models.region_connection import ConnectionType, RegionConnection, WormholeStatus
from dominion.services.galaxy_generator import WORMHOLE_BASE_COLLAPSE_CHANCE, region_distance
from dominion.services.game_locks import game_lock
from dominion.services.influence_sphere import build_adjacency

logger = logging.getLogger(__name__)

# Discovery
BASE_DISCOVERY_CHANCE = 0.02
AGENT_DISCOVERY_BONUS = 0.01
MAX_AGENTS_FOR_BONUS = 5
RESEARCH_DISCOVERY_BONUS = 0.005
MAX_DISCOVERY_CHANCE = 0.20

# Instability
COLLAPSE_AGE_SCALING = 0.01
MAX_COLLAPSE_CHANCE = 0.25
REOPEN_CHANCE = 0.01
AUTO_STABILIZE_AGE = 50

# Stabilization action
STABILIZATION_CREDIT_COST = 50_000
STABILIZATION_RESEARCH_LEVEL = 5

# Construction action
CONSTRUCTION_BASE_CREDITS = 15_000
CONSTRUCTION_CREDITS_PER_DISTANCE = 5_000
CONSTRUCTION_MAX_CREDITS = 40_000
CONSTRUCTION_BASE_PETROLEUM = 300
CONSTRUCTION_PETROLEUM_PER_DISTANCE = 100
CONSTRUCTION_MAX_PETROLEUM = 800
CONSTRUCTION_BASE_TURNS = 6
CONSTRUCTION_TURNS_PER_DISTANCE = 2
CONSTRUCTION_MAX_TURNS = 15
# Plane units per normalised distance step, and the normalised cap
DISTANCE_UNIT = 40.0
MAX_NORMALISED_DISTANCE = 5.0
BASE_CONSTRUCTION_SLOTS = 1
SLOT_RESEARCH_LEVELS = (6, 12)


@dataclass
class WormholeEvent:
    connection_id: int
    event_type: str  # discovered / collapsed / reopened / stabilized / constructed / border_opened
    empire_id: int | None = None
    from_region_id: int | None = None
    to_region_id: int | None = None
    data: dict = field(default_factory=dict)


@dataclass
class DiscoveryCandidate:
    empire_id: int
    region_id: int
    covert_agents: int
    research_level: int


@dataclass
class ConstructionCost:
    credits: int
    petroleum: int
    build_turns: int
    distance: float


# ---------------------------------------------------------------------------
# Probabilities
# ---------------------------------------------------------------------------

def calculate_discovery_chance(covert_agents: int, research_level: int) -> float:
    chance = (
        BASE_DISCOVERY_CHANCE
        + min(covert_agents, MAX_AGENTS_FOR_BONUS) * AGENT_DISCOVERY_BONUS
        + research_level * RESEARCH_DISCOVERY_BONUS
    )
    return min(chance, MAX_DISCOVERY_CHANCE)


def wormhole_age(conn, current_turn: int) -> int:
    if conn.discovered_at_turn is None:
        return 0
    return max(0, current_turn - conn.discovered_at_turn)


def calculate_collapse_chance(base_chance: float | None, age: int, status: WormholeStatus | None = None) -> float:
    """Chance a discovered wormhole collapses this turn. Never decreases with age."""
    if status in (WormholeStatus.stabilized, WormholeStatus.constructing):
        return 0.0
    if base_chance is None:
        base_chance = WORMHOLE_BASE_COLLAPSE_CHANCE
    return min(base_chance * (1 + age * COLLAPSE_AGE_SCALING), MAX_COLLAPSE_CHANCE)


# ---------------------------------------------------------------------------
# Per-turn processing
# ---------------------------------------------------------------------------

def discovery_candidates(conn, candidates: list[DiscoveryCandidate], adjacency: dict) -> list[DiscoveryCandidate]:
    """Empires standing on either endpoint or one traversable hop away, by id."""
    reach = {conn.from_region_id, conn.to_region_id}
    for endpoint in (conn.from_region_id, conn.to_region_id):
        reach.update(adjacency.get(endpoint, {}).keys())
    return sorted((c for c in candidates if c.region_id in reach), key=lambda c: c.empire_id)


def _process_one(conn, candidates, adjacency, current_turn: int, rng: random.Random) -> WormholeEvent | None:
    status = conn.wormhole_status

    if status == WormholeStatus.undiscovered:
        for candidate in discovery_candidates(conn, candidates, adjacency):
            chance = calculate_discovery_chance(candidate.covert_agents, candidate.research_level)
            if rng.random() < chance:
                conn.wormhole_status = WormholeStatus.discovered
                conn.discovered_by_empire_id = candidate.empire_id
                conn.discovered_at_turn = current_turn
                return WormholeEvent(conn.id, "discovered", candidate.empire_id, data={"chance": chance})
        return None

    if status == WormholeStatus.discovered:
        age = wormhole_age(conn, current_turn)
        if age >= AUTO_STABILIZE_AGE:
            conn.wormhole_status = WormholeStatus.stabilized
            conn.collapse_chance = 0.0
            return WormholeEvent(conn.id, "stabilized", conn.discovered_by_empire_id, data={"age": age})
        chance = calculate_collapse_chance(conn.collapse_chance, age, status)
        if rng.random() < chance:
            conn.wormhole_status = WormholeStatus.collapsed
            return WormholeEvent(conn.id, "collapsed", conn.discovered_by_empire_id, data={"age": age})
        return None

    if status == WormholeStatus.collapsed:
        if rng.random() < REOPEN_CHANCE:
            conn.wormhole_status = WormholeStatus.discovered
            # Age restarts from the reopening
            conn.discovered_at_turn = current_turn
            return WormholeEvent(conn.id, "reopened", conn.discovered_by_empire_id)
        return None

    if status == WormholeStatus.constructing:
        if conn.construction_completion_turn is not None and current_turn >= conn.construction_completion_turn:
            conn.wormhole_status = WormholeStatus.stabilized
            conn.collapse_chance = 0.0
            conn.discovered_at_turn = current_turn
            return WormholeEvent(conn.id, "constructed", conn.discovered_by_empire_id)
        return None

    return None


def process_wormholes(
    connections: list,
    candidates: list[DiscoveryCandidate],
    current_turn: int,
    rng: random.Random,
) -> list[WormholeEvent]:
    """Roll every wormhole once, in connection id order, mutating in place."""
    adjacency = build_adjacency(
        [c for c in connections if c.connection_type != ConnectionType.wormhole], current_turn
    )
    events: list[WormholeEvent] = []
    wormholes = sorted(
        (c for c in connections if c.connection_type == ConnectionType.wormhole), key=lambda c: c.id
    )
    for conn in wormholes:
        event = _process_one(conn, candidates, adjacency, current_turn, rng)
        if event is not None:
            event.from_region_id = conn.from_region_id
            event.to_region_id = conn.to_region_id
            events.append(event)
    return events


def process_border_discoveries(connections: list, current_turn: int) -> list[WormholeEvent]:
    """Borders whose unlock turn is exactly this turn."""
    return [
        WormholeEvent(
            conn.id,
            "border_opened",
            from_region_id=conn.from_region_id,
            to_region_id=conn.to_region_id,
            data={"connection_type": conn.connection_type.value},
        )
        for conn in sorted(connections, key=lambda c: c.id)
        if conn.connection_type != ConnectionType.wormhole and conn.discovered_at_turn == current_turn
    ]


# ---------------------------------------------------------------------------
# Construction helpers
# ---------------------------------------------------------------------------

def normalised_distance(region_a, region_b) -> float:
    return min(MAX_NORMALISED_DISTANCE, region_distance(region_a, region_b) / DISTANCE_UNIT)


def calculate_construction_cost(distance: float) -> ConstructionCost:
    return ConstructionCost(
        credits=min(
            CONSTRUCTION_MAX_CREDITS, math.floor(CONSTRUCTION_BASE_CREDITS + CONSTRUCTION_CREDITS_PER_DISTANCE * distance)
        ),
        petroleum=min(
            CONSTRUCTION_MAX_PETROLEUM,
            math.floor(CONSTRUCTION_BASE_PETROLEUM + CONSTRUCTION_PETROLEUM_PER_DISTANCE * distance),
        ),
        build_turns=min(
            CONSTRUCTION_MAX_TURNS, math.ceil(CONSTRUCTION_BASE_TURNS + CONSTRUCTION_TURNS_PER_DISTANCE * distance)
        ),
        distance=distance,
    )


def construction_slots(research_level: int) -> int:
    return BASE_CONSTRUCTION_SLOTS + sum(1 for level in SLOT_RESEARCH_LEVELS if research_level >= level)


# ---------------------------------------------------------------------------
# Costed actions
# ---------------------------------------------------------------------------

async def _get_active_game(db: AsyncSession, game_id: int) -> Game:
    game = await db.get(Game, game_id)
    if game is None:
        raise GameNotFoundError(game_id)
    if game.status != GameStatus.active:
        raise GameNotActiveError(game_id, game.status.value)
    return game


async def _get_empire(db: AsyncSession, game_id: int, empire_id: int) -> Empire:
    empire = await db.get(Empire, empire_id)
    if empire is None or empire.game_id != game_id:
        raise EmpireNotFoundError(empire_id, game_id)
    if empire.is_eliminated:
        raise ValueError("Eliminated empires cannot act")
    return empire


async def stabilize_wormhole(db: AsyncSession, game_id: int, connection_id: int, empire_id: int) -> RegionConnection:
    """Pay to make a discovered wormhole permanent. Only its discoverer may do this."""
    async with game_lock(game_id):
        await _get_active_game(db, game_id)
        empire = await _get_empire(db, game_id, empire_id)
        conn = await db.get(RegionConnection, connection_id)
        if conn is None or conn.game_id != game_id or conn.connection_type != ConnectionType.wormhole:
            raise ValueError("Wormhole not found")
        if conn.wormhole_status != WormholeStatus.discovered:
            raise ValueError(f"Only discovered wormholes can be stabilized (status: {conn.wormhole_status.value})")
        if conn.discovered_by_empire_id != empire_id:
            raise ValueError("Only the discovering empire can stabilize this wormhole")
        if empire.research_level < STABILIZATION_RESEARCH_LEVEL:
            raise ValueError(f"Stabilization requires research level {STABILIZATION_RESEARCH_LEVEL}")
        if empire.credits < STABILIZATION_CREDIT_COST:
            raise ValueError(f"Insufficient credits: have {empire.credits}, need {STABILIZATION_CREDIT_COST}")

        empire.credits -= STABILIZATION_CREDIT_COST
        conn.wormhole_status = WormholeStatus.stabilized
        conn.collapse_chance = 0.0
        await db.commit()
        logger.info("Empire %s stabilized wormhole %s in game %s", empire_id, connection_id, game_id)
        return conn


async def construct_wormhole(
    db: AsyncSession, game_id: int, empire_id: int, to_region_id: int
) -> RegionConnection:
    """Start building a wormhole from the empire's primary region to `to_region_id`.

    The completion turn is computed once here and stored on the connection;
    the turn pipeline completes the project when that turn arrives.
    """
    async with game_lock(game_id):
        game = await _get_active_game(db, game_id)
        empire = await _get_empire(db, game_id, empire_id)

        result = await db.execute(select(EmpireInfluence).where(EmpireInfluence.empire_id == empire_id))
        influence = result.scalar_one_or_none()
        if influence is None:
            raise ValueError("Empire has no home region")
        from_region = await db.get(GalaxyRegion, influence.primary_region_id)
        to_region = await db.get(GalaxyRegion, to_region_id)
        if to_region is None or to_region.game_id != game_id:
            raise ValueError("Target region not found")
        if to_region.id == from_region.id:
            raise ValueError("Cannot build a wormhole into your own region")

        existing = await db.execute(
            select(RegionConnection).where(
                RegionConnection.game_id == game_id,
                or_(
                    (RegionConnection.from_region_id == from_region.id)
                    & (RegionConnection.to_region_id == to_region.id),
                    (RegionConnection.from_region_id == to_region.id)
                    & (RegionConnection.to_region_id == from_region.id),
                ),
            )
        )
        if existing.scalars().first() is not None:
            raise ValueError("These regions are already connected")

        in_progress = await db.execute(
            select(RegionConnection).where(
                RegionConnection.game_id == game_id,
                RegionConnection.discovered_by_empire_id == empire_id,
                RegionConnection.wormhole_status == WormholeStatus.constructing,
            )
        )
        slots = construction_slots(empire.research_level)
        if len(in_progress.scalars().all()) >= slots:
            raise ValueError(f"All {slots} construction slot(s) are in use")

        cost = calculate_construction_cost(normalised_distance(from_region, to_region))
        if empire.credits < cost.credits:
            raise ValueError(f"Insufficient credits: have {empire.credits}, need {cost.credits}")
        if empire.petroleum < cost.petroleum:
            raise ValueError(f"Insufficient petroleum: have {empire.petroleum}, need {cost.petroleum}")

        empire.credits -= cost.credits
        empire.petroleum -= cost.petroleum
        conn = RegionConnection(
            game_id=game_id,
            from_region_id=from_region.id,
            to_region_id=to_region.id,
            connection_type=ConnectionType.wormhole,
            is_bidirectional=True,
            force_multiplier=1.0,
            wormhole_status=WormholeStatus.constructing,
            discovered_by_empire_id=empire_id,
            collapse_chance=0.0,
            construction_completion_turn=game.current_turn + cost.build_turns,
        )
        db.add(conn)
        await db.commit()
        await db.refresh(conn)
        logger.info(
            "Empire %s started wormhole %s -> %s in game %s, completes turn %s",
            empire_id, from_region.id, to_region.id, game_id, conn.construction_completion_turn,
        )
        return conn
