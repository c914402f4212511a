"""In-memory game state: loaded once per turn, written back in one pass."""

from dataclasses import dataclass, field

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dominion.data.units import UNIT_TYPES
from dominion.models.attack_order import AttackOrder, AttackStatus
from dominion.models.build_queue import BuildQueueItem
from dominion.models.civil_status_history import CivilStatusHistory
from dominion.models.empire import CivilStatus, DefeatType, Empire, EmpireType
from dominion.models.empire_influence import EmpireInfluence
from dominion.models.galaxy_region import GalaxyRegion, RegionType
from dominion.models.game import Game, GameStatus, VictoryType
from dominion.models.region_connection import ConnectionType, RegionConnection, WormholeStatus
from dominion.models.sector import Sector, SectorType
from dominion.models.treaty import Treaty

EMPIRE_COUNTERS = [
    "food_surplus_streak",
    "food_deficit_streak",
    "victory_streak",
    "last_battle_loss_ratio",
    "unrest_streak",
    "production_penalty",
]
STOCK_FIELDS = ["credits", "food", "ore", "petroleum", "research_points"]


@dataclass
class SectorState:
    id: int
    sector_type: SectorType
    acquired_turn: int = 1


@dataclass
class EmpireState:
    id: int
    name: str
    type: EmpireType
    stock: dict[str, int]
    research_level: int
    population: int
    population_cap: int
    units: dict[str, int]
    civil_status: CivilStatus
    sectors: list[SectorState]
    home_region_id: int | None = None
    primary_region_id: int | None = None
    networth: float = 0.0
    is_eliminated: bool = False
    defeat_type: DefeatType | None = None
    food_surplus_streak: int = 0
    food_deficit_streak: int = 0
    victory_streak: int = 0
    last_battle_loss_ratio: float = 0.0
    unrest_streak: int = 0
    production_penalty: float = 0.0
    # Per-turn scratch, filled by earlier phases for later ones
    credit_production: int = 0
    food_production: int = 0
    maintenance: int = 0
    net_credits: int = 0

    @property
    def sector_count(self) -> int:
        return len(self.sectors)

    @property
    def is_alive(self) -> bool:
        return not self.is_eliminated

    def has_sector(self, sector_type: SectorType) -> bool:
        return any(s.sector_type == sector_type for s in self.sectors)


@dataclass
class RegionState:
    id: int
    name: str
    region_type: RegionType
    position_x: float
    position_y: float


@dataclass
class ConnectionState:
    id: int
    from_region_id: int
    to_region_id: int
    connection_type: ConnectionType
    is_bidirectional: bool
    force_multiplier: float
    discovered_at_turn: int | None = None
    wormhole_status: WormholeStatus | None = None
    discovered_by_empire_id: int | None = None
    collapse_chance: float | None = None
    construction_completion_turn: int | None = None


@dataclass
class BuildItemState:
    id: int
    empire_id: int
    unit_type: str
    quantity: int
    turns_remaining: int
    queue_position: int


@dataclass
class AttackOrderState:
    id: int
    attacker_id: int
    defender_id: int
    forces: dict[str, int]
    status: AttackStatus = AttackStatus.pending
    outcome: dict | None = None


@dataclass
class StatusChange:
    empire_id: int
    old_status: CivilStatus
    new_status: CivilStatus
    reason: str
    income_multiplier: float


@dataclass
class GameState:
    game_id: int
    current_turn: int
    turn_limit: int
    protection_turns: int
    status: GameStatus
    empires: dict[int, EmpireState]
    regions: dict[int, RegionState]
    connections: list[ConnectionState]
    build_queue: list[BuildItemState] = field(default_factory=list)
    attack_orders: list[AttackOrderState] = field(default_factory=list)
    treaties: set[frozenset] = field(default_factory=set)
    winner_empire_id: int | None = None
    victory_type: VictoryType | None = None
    status_changes: list[StatusChange] = field(default_factory=list)
    # empire id -> (direct ids, extended ids, radius)
    influence_cache: dict[int, tuple[list[int], list[int], int]] = field(default_factory=dict)

    def live_empires(self) -> list[EmpireState]:
        """Live empires in id order; phases always iterate this way."""
        return [self.empires[eid] for eid in sorted(self.empires) if self.empires[eid].is_alive]

    def has_treaty(self, a: int, b: int) -> bool:
        return frozenset((a, b)) in self.treaties


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

async def load_game_state(db: AsyncSession, game: Game) -> GameState:
    game_id = game.id

    empires_result = await db.execute(select(Empire).where(Empire.game_id == game_id).order_by(Empire.id))
    empire_rows = list(empires_result.scalars().all())

    sectors_result = await db.execute(select(Sector).where(Sector.game_id == game_id).order_by(Sector.id))
    sectors_by_empire: dict[int, list[SectorState]] = {}
    for sector in sectors_result.scalars().all():
        sectors_by_empire.setdefault(sector.empire_id, []).append(
            SectorState(sector.id, sector.sector_type, sector.acquired_turn)
        )

    influence_result = await db.execute(select(EmpireInfluence).where(EmpireInfluence.game_id == game_id))
    influence = {row.empire_id: row for row in influence_result.scalars().all()}

    empires: dict[int, EmpireState] = {}
    for row in empire_rows:
        inf = influence.get(row.id)
        empires[row.id] = EmpireState(
            id=row.id,
            name=row.name,
            type=row.type,
            stock={f: getattr(row, f) for f in STOCK_FIELDS},
            research_level=row.research_level,
            population=row.population,
            population_cap=row.population_cap,
            units={u: getattr(row, u) for u in UNIT_TYPES},
            civil_status=row.civil_status,
            sectors=sectors_by_empire.get(row.id, []),
            home_region_id=inf.home_region_id if inf else None,
            primary_region_id=inf.primary_region_id if inf else None,
            networth=row.networth,
            is_eliminated=row.is_eliminated,
            defeat_type=row.defeat_type,
            **{c: getattr(row, c) for c in EMPIRE_COUNTERS},
        )

    regions_result = await db.execute(select(GalaxyRegion).where(GalaxyRegion.game_id == game_id))
    regions = {
        r.id: RegionState(r.id, r.name, r.region_type, r.position_x, r.position_y)
        for r in regions_result.scalars().all()
    }

    conn_result = await db.execute(
        select(RegionConnection).where(RegionConnection.game_id == game_id).order_by(RegionConnection.id)
    )
    connections = [
        ConnectionState(
            id=c.id,
            from_region_id=c.from_region_id,
            to_region_id=c.to_region_id,
            connection_type=c.connection_type,
            is_bidirectional=c.is_bidirectional,
            force_multiplier=c.force_multiplier,
            discovered_at_turn=c.discovered_at_turn,
            wormhole_status=c.wormhole_status,
            discovered_by_empire_id=c.discovered_by_empire_id,
            collapse_chance=c.collapse_chance,
            construction_completion_turn=c.construction_completion_turn,
        )
        for c in conn_result.scalars().all()
    ]

    queue_result = await db.execute(
        select(BuildQueueItem).where(BuildQueueItem.game_id == game_id).order_by(BuildQueueItem.id)
    )
    build_queue = [
        BuildItemState(i.id, i.empire_id, i.unit_type, i.quantity, i.turns_remaining, i.queue_position)
        for i in queue_result.scalars().all()
    ]

    orders_result = await db.execute(
        select(AttackOrder)
        .where(
            AttackOrder.game_id == game_id,
            AttackOrder.turn == game.current_turn,
            AttackOrder.status == AttackStatus.pending,
        )
        .order_by(AttackOrder.id)
    )
    attack_orders = [
        AttackOrderState(o.id, o.attacker_id, o.defender_id, dict(o.forces))
        for o in orders_result.scalars().all()
    ]

    treaty_result = await db.execute(
        select(Treaty).where(Treaty.game_id == game_id, Treaty.is_active == True)  # noqa: E712
    )
    treaties = {frozenset((t.empire_a_id, t.empire_b_id)) for t in treaty_result.scalars().all()}

    return GameState(
        game_id=game_id,
        current_turn=game.current_turn,
        turn_limit=game.turn_limit,
        protection_turns=game.protection_turns,
        status=game.status,
        empires=empires,
        regions=regions,
        connections=connections,
        build_queue=build_queue,
        attack_orders=attack_orders,
        treaties=treaties,
        winner_empire_id=game.winner_empire_id,
        victory_type=game.victory_type,
    )


# ---------------------------------------------------------------------------
# Write-back
# ---------------------------------------------------------------------------

async def apply_game_state(db: AsyncSession, game: Game, state: GameState) -> None:
    """Stage the whole-turn write set on the session. Does not commit."""
    game_id = game.id

    empires_result = await db.execute(select(Empire).where(Empire.game_id == game_id))
    for row in empires_result.scalars().all():
        empire = state.empires[row.id]
        for f in STOCK_FIELDS:
            setattr(row, f, empire.stock[f])
        for unit in UNIT_TYPES:
            setattr(row, unit, empire.units[unit])
        for counter in EMPIRE_COUNTERS:
            setattr(row, counter, getattr(empire, counter))
        row.research_level = empire.research_level
        row.population = empire.population
        row.population_cap = empire.population_cap
        row.civil_status = empire.civil_status
        row.networth = empire.networth
        row.is_eliminated = empire.is_eliminated
        row.defeat_type = empire.defeat_type

    # Sector ownership changes through conquest
    owner_by_sector = {s.id: e.id for e in state.empires.values() for s in e.sectors}
    acquired_by_sector = {s.id: s.acquired_turn for e in state.empires.values() for s in e.sectors}
    sectors_result = await db.execute(select(Sector).where(Sector.game_id == game_id))
    for sector in sectors_result.scalars().all():
        owner = owner_by_sector.get(sector.id)
        if owner is not None and owner != sector.empire_id:
            sector.empire_id = owner
            sector.acquired_turn = acquired_by_sector[sector.id]

    conns = {c.id: c for c in state.connections}
    conn_result = await db.execute(select(RegionConnection).where(RegionConnection.game_id == game_id))
    for row in conn_result.scalars().all():
        conn = conns.get(row.id)
        if conn is None:
            continue
        row.wormhole_status = conn.wormhole_status
        row.discovered_by_empire_id = conn.discovered_by_empire_id
        row.discovered_at_turn = conn.discovered_at_turn
        row.collapse_chance = conn.collapse_chance
        row.construction_completion_turn = conn.construction_completion_turn

    remaining = {i.id: i for i in state.build_queue}
    queue_result = await db.execute(select(BuildQueueItem).where(BuildQueueItem.game_id == game_id))
    for row in queue_result.scalars().all():
        item = remaining.get(row.id)
        if item is None:
            await db.delete(row)
        else:
            row.turns_remaining = item.turns_remaining

    orders = {o.id: o for o in state.attack_orders}
    if orders:
        orders_result = await db.execute(select(AttackOrder).where(AttackOrder.id.in_(list(orders))))
        for row in orders_result.scalars().all():
            row.status = orders[row.id].status
            row.outcome = orders[row.id].outcome

    for change in state.status_changes:
        db.add(
            CivilStatusHistory(
                game_id=game_id,
                empire_id=change.empire_id,
                turn=state.current_turn,
                old_status=change.old_status,
                new_status=change.new_status,
                reason=change.reason,
                income_multiplier=change.income_multiplier,
            )
        )

    influence_result = await db.execute(select(EmpireInfluence).where(EmpireInfluence.game_id == game_id))
    for row in influence_result.scalars().all():
        cached = state.influence_cache.get(row.empire_id)
        if cached is None:
            row.direct_neighbor_ids = []
            row.extended_neighbor_ids = []
            continue
        row.direct_neighbor_ids, row.extended_neighbor_ids, row.total_influence_radius = cached

    game.status = state.status
    game.winner_empire_id = state.winner_empire_id
    game.victory_type = state.victory_type
    game.current_turn = state.current_turn + 1

    await db.flush()

