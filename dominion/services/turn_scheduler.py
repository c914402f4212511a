import logging
import random
import time
from dataclasses import dataclass, field
from typing import Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from dominion.config import settings
from dominion.data.units import IMMOBILE_UNITS, UNIT_DATA
from dominion.exceptions import (
    GameNotActiveError,
    GameNotFoundError,
    PersistenceUnavailableError,
    TurnLimitReachedError,
    TurnPhaseError,
    TurnValidationError,
)
from dominion.models.attack_order import AttackStatus
from dominion.models.empire import CivilStatus, DefeatType
from dominion.models.game import Game, GameStatus
from dominion.models.sector import SectorType
from dominion.services.build_queue import advance_build_queue
from dominion.services.civil_status import CivilStatusInputs, evaluate_civil_status
from dominion.services.combat_resolver import resolve_battle
from dominion.services.game_locks import exclusive_game_lock
from dominion.services.game_state import (
    EmpireState,
    GameState,
    StatusChange,
    apply_game_state,
    load_game_state,
)
from dominion.services.influence_sphere import (
    EmpirePosition,
    InfluenceSphere,
    calculate_influence_sphere,
    validate_attack,
)
from dominion.services.networth import calculate_networth
from dominion.services.notification_service import notify_turn_committed
from dominion.services.population_engine import PopulationStatus, is_meaningful_surplus, process_population
from dominion.services.resource_engine import maintenance_ratio, process_resources
from dominion.services.revolt_engine import apply_revolt_consequences
from dominion.services.snapshot_store import write_snapshot
from dominion.services.victory_evaluator import (
    EmpireStanding,
    VictoryResult,
    check_defeat,
    check_stalemate,
    check_victory,
)
from dominion.services.wormhole_lifecycle import (
    DiscoveryCandidate,
    process_border_discoveries,
    process_wormholes,
)

logger = logging.getLogger(__name__)

PHASE_RESOURCES = "resources"
PHASE_POPULATION = "population"
PHASE_CIVIL_STATUS = "civil_status"
PHASE_BUILD_QUEUE = "build_queue"
PHASE_WORMHOLES = "wormholes"
PHASE_COMBAT = "combat"
PHASE_REVOLT = "revolt"
PHASE_VICTORY = "victory"
PHASE_PERSIST = "persist"
PHASE_SNAPSHOT = "snapshot"


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass
class TurnEvent:
    phase: str
    event_type: str
    message: str
    empire_id: int | None = None
    data: dict = field(default_factory=dict)


@dataclass
class EmpireTurnReport:
    empire_id: int
    empire_name: str
    resources_before: dict[str, int]
    resources_after: dict[str, int] = field(default_factory=dict)
    production: dict[str, int] = field(default_factory=dict)
    maintenance: int = 0
    resource_deltas: dict[str, int] = field(default_factory=dict)
    food_consumed: int = 0
    population_before: int = 0
    population_after: int = 0
    population_status: PopulationStatus | None = None
    civil_status_before: CivilStatus | None = None
    civil_status_after: CivilStatus | None = None
    networth: float = 0.0
    defeat_type: DefeatType | None = None
    events: list[TurnEvent] = field(default_factory=list)


@dataclass
class TurnResult:
    game_id: int
    turn: int
    next_turn: int
    empires: list[EmpireTurnReport] = field(default_factory=list)
    events: list[TurnEvent] = field(default_factory=list)
    eliminated_empires: list[str] = field(default_factory=list)
    victory: VictoryResult | None = None
    game_over: bool = False
    snapshot_error: str | None = None


class TurnContext:
    """State plus per-turn bookkeeping shared by the phases."""

    def __init__(self, state: GameState, rng: random.Random):
        self.state = state
        self.rng = rng
        self.turn = state.current_turn
        self.reports: dict[int, EmpireTurnReport] = {}
        self.events: list[TurnEvent] = []
        self.eliminated: list[str] = []
        self.victory: VictoryResult | None = None
        for empire in state.live_empires():
            self.reports[empire.id] = EmpireTurnReport(
                empire_id=empire.id,
                empire_name=empire.name,
                resources_before=dict(empire.stock),
                population_before=empire.population,
                civil_status_before=empire.civil_status,
            )

    def emit(self, phase: str, event_type: str, message: str, empire_id: int | None = None, **data) -> None:
        event = TurnEvent(phase, event_type, message, empire_id, data)
        if empire_id is not None and empire_id in self.reports:
            self.reports[empire_id].events.append(event)
        else:
            self.events.append(event)

    def eliminate(self, empire: EmpireState, defeat_type: DefeatType, phase: str) -> None:
        empire.is_eliminated = True
        empire.defeat_type = defeat_type
        self.eliminated.append(empire.name)
        self.emit(phase, "defeat", f"{empire.name} has been defeated ({defeat_type.value})", empire.id,
                  defeat_type=defeat_type.value)

    def result(self) -> TurnResult:
        for empire_id, report in self.reports.items():
            empire = self.state.empires[empire_id]
            report.resources_after = dict(empire.stock)
            report.population_after = empire.population
            report.civil_status_after = empire.civil_status
            report.networth = empire.networth
            report.defeat_type = empire.defeat_type
        return TurnResult(
            game_id=self.state.game_id,
            turn=self.turn,
            next_turn=self.turn + 1,
            empires=[self.reports[eid] for eid in sorted(self.reports)],
            events=self.events,
            eliminated_empires=self.eliminated,
            victory=self.victory,
            game_over=self.state.status == GameStatus.ended,
        )


# ---------------------------------------------------------------------------
# Phases
# ---------------------------------------------------------------------------

def _phase_resources(ctx: TurnContext) -> None:
    for empire in ctx.state.live_empires():
        result = process_resources(
            empire.stock,
            [s.sector_type for s in empire.sectors],
            empire.units,
            empire.civil_status,
            empire.production_penalty,
        )
        empire.stock = result.new_stock
        empire.credit_production = result.production["credits"]
        empire.food_production = result.production["food"]
        empire.maintenance = result.maintenance.total
        empire.net_credits = result.net_credits

        report = ctx.reports[empire.id]
        report.production = result.production
        report.maintenance = result.maintenance.total
        report.resource_deltas = result.deltas
        if result.clamped:
            ctx.emit(PHASE_RESOURCES, "shortfall", f"Ran dry of {', '.join(result.clamped)}", empire.id,
                     resources=result.clamped)


def _phase_population(ctx: TurnContext) -> None:
    for empire in ctx.state.live_empires():
        food_on_hand = empire.stock["food"]
        result = process_population(
            empire.population,
            empire.population_cap,
            food_produced=empire.food_production,
            food_stock=food_on_hand - empire.food_production,
        )
        empire.population = result.population_after
        empire.stock["food"] = result.food_remaining
        ctx.reports[empire.id].food_consumed = result.food_consumed
        ctx.reports[empire.id].population_status = result.status

        if result.status == PopulationStatus.starvation:
            empire.food_deficit_streak += 1
            empire.food_surplus_streak = 0
            ctx.emit(PHASE_POPULATION, "starvation",
                     f"{-result.change} citizens died from starvation", empire.id, deficit_ratio=result.deficit_ratio)
        else:
            empire.food_deficit_streak = 0
            if is_meaningful_surplus(result):
                empire.food_surplus_streak += 1
            else:
                empire.food_surplus_streak = 0
            if result.status == PopulationStatus.growth:
                ctx.emit(PHASE_POPULATION, "growth", f"Population grew by {result.change}", empire.id)


def _phase_civil_status(ctx: TurnContext) -> None:
    for empire in ctx.state.live_empires():
        inputs = CivilStatusInputs(
            starved=ctx.reports[empire.id].population_status == PopulationStatus.starvation,
            food_surplus_streak=empire.food_surplus_streak,
            food_deficit_streak=empire.food_deficit_streak,
            battle_loss_ratio=empire.last_battle_loss_ratio,
            victory_streak=empire.victory_streak,
            maintenance_ratio=maintenance_ratio(empire.maintenance, empire.credit_production),
            has_education=empire.has_sector(SectorType.education),
        )
        transition = evaluate_civil_status(empire.civil_status, inputs)
        # Battle severity is a single-shot trigger
        empire.last_battle_loss_ratio = 0.0

        if not transition.changed:
            continue
        # Streak triggers are spent once they move the ladder
        if transition.trigger == "food_surplus":
            empire.food_surplus_streak = 0
        elif transition.trigger == "victory_streak":
            empire.victory_streak = 0

        empire.civil_status = transition.new_status
        ctx.state.status_changes.append(
            StatusChange(
                empire_id=empire.id,
                old_status=transition.old_status,
                new_status=transition.new_status,
                reason=transition.reason,
                income_multiplier=transition.income_multiplier,
            )
        )
        ctx.emit(
            PHASE_CIVIL_STATUS,
            f"civil_status_{transition.direction}",
            f"Civil status {transition.old_status.value} -> {transition.new_status.value}: {transition.reason}",
            empire.id,
        )


def _phase_build_queue(ctx: TurnContext) -> None:
    live_ids = {e.id for e in ctx.state.live_empires()}
    active = [item for item in ctx.state.build_queue if item.empire_id in live_ids]
    delivered_ids: set[int] = set()
    for delivery in advance_build_queue(active):
        empire = ctx.state.empires[delivery.empire_id]
        empire.units[delivery.unit_type] = empire.units.get(delivery.unit_type, 0) + delivery.quantity
        delivered_ids.add(delivery.item_id)
        ctx.emit(PHASE_BUILD_QUEUE, "units_delivered", f"{delivery.quantity} {delivery.unit_type} completed",
                 empire.id, unit_type=delivery.unit_type, quantity=delivery.quantity)
    ctx.state.build_queue = [item for item in ctx.state.build_queue if item.id not in delivered_ids]


def _phase_wormholes(ctx: TurnContext) -> None:
    state = ctx.state
    candidates = [
        DiscoveryCandidate(e.id, e.primary_region_id, e.units.get("covert_agents", 0), e.research_level)
        for e in state.live_empires()
        if e.primary_region_id is not None
    ]
    events = process_border_discoveries(state.connections, ctx.turn)
    events += process_wormholes(state.connections, candidates, ctx.turn, ctx.rng)
    for event in events:
        ctx.emit(
            PHASE_WORMHOLES,
            event.event_type,
            f"Connection {event.connection_id} ({event.from_region_id} <-> {event.to_region_id}) {event.event_type}",
            event.empire_id if event.event_type == "discovered" else None,
            connection_id=event.connection_id,
            **event.data,
        )


def compute_sphere(state: GameState, empire: EmpireState) -> InfluenceSphere:
    """Fresh influence sphere for `empire` from the current in-memory state."""
    positions = [
        EmpirePosition(e.id, e.primary_region_id, e.sector_count, e.research_level, e.is_eliminated)
        for e in state.empires.values()
        if e.primary_region_id is not None
    ]
    me = EmpirePosition(empire.id, empire.primary_region_id, empire.sector_count, empire.research_level)
    return calculate_influence_sphere(me, positions, state.regions, state.connections, state.current_turn)


def _reject(ctx: TurnContext, order, reason: str) -> None:
    order.status = AttackStatus.rejected
    order.outcome = {"reason": reason}
    logger.warning("Game %s turn %s: attack %s rejected: %s", ctx.state.game_id, ctx.turn, order.id, reason)
    ctx.emit(PHASE_COMBAT, "attack_rejected", f"Attack rejected: {reason}", order.attacker_id,
             order_id=order.id, defender_id=order.defender_id)


def _phase_combat(ctx: TurnContext) -> None:
    state = ctx.state
    for order in sorted(state.attack_orders, key=lambda o: o.id):
        attacker = state.empires.get(order.attacker_id)
        defender = state.empires.get(order.defender_id)
        if attacker is None or not attacker.is_alive:
            _reject(ctx, order, "attacker is no longer in the game")
            continue
        if defender is None or not defender.is_alive:
            _reject(ctx, order, "target is no longer in the game")
            continue
        if attacker.primary_region_id is None or defender.primary_region_id is None:
            _reject(ctx, order, "empire has no position in the galaxy")
            continue

        mobile = {u: c for u, c in attacker.units.items() if u not in IMMOBILE_UNITS}
        validation = validate_attack(
            compute_sphere(state, attacker),
            defender.id,
            order.forces,
            mobile,
            ctx.turn,
            state.protection_turns,
            state.has_treaty(attacker.id, defender.id),
        )
        if not validation.is_valid:
            _reject(ctx, order, validation.reason)
            continue

        defending = {u: c for u, c in defender.units.items() if UNIT_DATA[u].power > 0}
        battle = resolve_battle(order.forces, validation.effective_forces, defending, defender.sector_count, ctx.rng)

        for unit, lost in battle.attacker_casualties.items():
            attacker.units[unit] -= lost
        for unit, lost in battle.defender_casualties.items():
            defender.units[unit] -= lost

        if battle.sectors_captured:
            # Most recently acquired sectors fall first
            taken = sorted(defender.sectors, key=lambda s: s.id)[-battle.sectors_captured:]
            taken_ids = {s.id for s in taken}
            defender.sectors = [s for s in defender.sectors if s.id not in taken_ids]
            for sector in taken:
                sector.acquired_turn = ctx.turn
                attacker.sectors.append(sector)

        winner, loser = (attacker, defender) if battle.attacker_won else (defender, attacker)
        winner.victory_streak += 1
        loser.victory_streak = 0
        attacker.last_battle_loss_ratio = max(attacker.last_battle_loss_ratio, battle.attacker_loss_ratio)
        defender.last_battle_loss_ratio = max(defender.last_battle_loss_ratio, battle.defender_loss_ratio)

        order.status = AttackStatus.resolved
        order.outcome = {
            "outcome": battle.outcome,
            "tier": validation.tier.value,
            "force_multiplier": validation.force_multiplier,
            "attacker_power": battle.attacker_power,
            "defender_power": battle.defender_power,
            "attacker_casualties": battle.attacker_casualties,
            "defender_casualties": battle.defender_casualties,
            "sectors_captured": battle.sectors_captured,
        }
        for empire in (attacker, defender):
            ctx.emit(
                PHASE_COMBAT,
                "battle",
                f"{attacker.name} attacked {defender.name}: {battle.outcome}",
                empire.id,
                order_id=order.id,
                sectors_captured=battle.sectors_captured,
            )


def _phase_revolt(ctx: TurnContext) -> None:
    for empire in ctx.state.live_empires():
        result = apply_revolt_consequences(empire.civil_status, empire.unrest_streak, empire.units)
        was_in_revolt = empire.unrest_streak > 0
        empire.unrest_streak = result.unrest_streak
        empire.production_penalty = result.production_penalty
        for unit, lost in result.unit_losses.items():
            empire.units[unit] -= lost

        if result.in_revolt:
            ctx.emit(PHASE_REVOLT, "revolt",
                     f"Unrest turn {result.unrest_streak}: {result.production_penalty:.0%} production penalty",
                     empire.id, unit_losses=result.unit_losses)
        elif was_in_revolt:
            ctx.emit(PHASE_REVOLT, "revolt_ended", "Order has been restored", empire.id)
        if result.is_defeated:
            ctx.eliminate(empire, DefeatType.civil_collapse, PHASE_REVOLT)


def _phase_victory(ctx: TurnContext) -> None:
    state = ctx.state
    for empire in state.live_empires():
        empire.networth = calculate_networth(empire.sector_count, empire.units)
        defeat = check_defeat(
            EmpireStanding(empire.id, empire.name, empire.sector_count, empire.stock["credits"],
                           empire.net_credits, empire.networth)
        )
        if defeat is not None:
            ctx.eliminate(empire, defeat, PHASE_VICTORY)

    standings = [
        EmpireStanding(e.id, e.name, e.sector_count, e.stock["credits"], e.net_credits, e.networth, e.is_eliminated)
        for e in (state.empires[eid] for eid in sorted(state.empires))
    ]
    victory = check_victory(standings, ctx.turn, state.turn_limit)
    if victory is not None:
        ctx.victory = victory
        state.status = GameStatus.ended
        state.winner_empire_id = victory.empire_id
        state.victory_type = victory.victory_type
        ctx.emit(PHASE_VICTORY, "victory", victory.message, None, winner_id=victory.empire_id,
                 victory_type=victory.victory_type.value)
    elif ctx.turn >= state.turn_limit or not state.live_empires():
        state.status = GameStatus.ended
        ctx.emit(PHASE_VICTORY, "game_over", "The game has ended without a victor")
    else:
        warning = check_stalemate(standings, ctx.turn, state.turn_limit)
        if warning is not None:
            ctx.emit(PHASE_VICTORY, "stalemate_warning", warning.message, None, leader_id=warning.leader_id,
                     leader_networth=warning.leader_networth, turns_remaining=warning.turns_remaining)


PhaseFn = Callable[[TurnContext], None]

# Fixed order; phase 9 (snapshot) runs after commit in advance_turn
PHASES: list[tuple[str, PhaseFn]] = [
    (PHASE_RESOURCES, _phase_resources),
    (PHASE_POPULATION, _phase_population),
    (PHASE_CIVIL_STATUS, _phase_civil_status),
    (PHASE_BUILD_QUEUE, _phase_build_queue),
    (PHASE_WORMHOLES, _phase_wormholes),
    (PHASE_COMBAT, _phase_combat),
    (PHASE_REVOLT, _phase_revolt),
    (PHASE_VICTORY, _phase_victory),
]


def _check_invariants(state: GameState, phase: str) -> None:
    for empire in state.empires.values():
        if empire.population < 0:
            raise TurnPhaseError(phase, "negative population", {"empire_id": empire.id})
        for resource, amount in empire.stock.items():
            if amount < 0:
                raise TurnPhaseError(phase, f"negative {resource}", {"empire_id": empire.id})
        for unit, count in empire.units.items():
            if count < 0:
                raise TurnPhaseError(phase, f"negative {unit}", {"empire_id": empire.id})


def _refresh_influence_cache(state: GameState) -> None:
    state.influence_cache = {}
    for empire in state.live_empires():
        if empire.primary_region_id is None:
            continue
        sphere = compute_sphere(state, empire)
        state.influence_cache[empire.id] = (sphere.direct_ids, sphere.extended_ids, sphere.radius)


def run_turn_phases(state: GameState, rng: random.Random) -> TurnResult:
    """Run phases 1-8 over `state` in place. No I/O; same state + seed gives the same result."""
    ctx = TurnContext(state, rng)
    for name, phase in PHASES:
        try:
            phase(ctx)
        except TurnPhaseError:
            raise
        except Exception as exc:
            raise TurnPhaseError(name, str(exc) or exc.__class__.__name__) from exc
        _check_invariants(state, name)
    _refresh_influence_cache(state)
    return ctx.result()


def turn_rng(seed: int, turn: int) -> random.Random:
    return random.Random(f"{seed}:{turn}")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

async def _get_game_for_turn(db: AsyncSession, game_id: int) -> Game:
    try:
        game = await db.get(Game, game_id)
    except SQLAlchemyError as exc:
        raise PersistenceUnavailableError(details={"game_id": game_id}) from exc
    if game is None:
        raise GameNotFoundError(game_id)
    if game.status != GameStatus.active:
        raise GameNotActiveError(game_id, game.status.value)
    if game.current_turn > game.turn_limit:
        raise TurnLimitReachedError(game_id, game.current_turn, game.turn_limit)
    return game


async def _write_snapshot_best_effort(db: AsyncSession, game_id: int) -> str | None:
    try:
        await write_snapshot(db, game_id)
        await db.commit()
    except Exception as exc:
        await db.rollback()
        logger.exception("Snapshot write failed for game %s", game_id)
        return str(exc) or exc.__class__.__name__
    return None


async def advance_turn(db: AsyncSession, game_id: int, rng: random.Random | None = None) -> TurnResult:
    """Process one full turn for `game_id` and commit it atomically."""
    async with exclusive_game_lock(game_id):
        game = await _get_game_for_turn(db, game_id)
        started = time.perf_counter()

        try:
            state = await load_game_state(db, game)
        except SQLAlchemyError as exc:
            raise PersistenceUnavailableError(details={"game_id": game_id}) from exc
        if not state.empires:
            raise TurnValidationError("Game has no empires", details={"game_id": game_id})

        rng = rng or turn_rng(game.seed, game.current_turn)
        try:
            result = run_turn_phases(state, rng)
            await apply_game_state(db, game, state)
            await db.commit()
        except TurnPhaseError as exc:
            await db.rollback()
            logger.error("Game %s turn %s aborted in phase %s: %s", game_id, state.current_turn, exc.phase, exc)
            raise
        except SQLAlchemyError as exc:
            await db.rollback()
            logger.error("Game %s turn %s could not be persisted: %s", game_id, state.current_turn, exc)
            raise PersistenceUnavailableError(details={"game_id": game_id, "turn": state.current_turn}) from exc
        except Exception as exc:
            await db.rollback()
            raise TurnPhaseError(PHASE_PERSIST, str(exc) or exc.__class__.__name__) from exc

        logger.info(
            "Game %s turn %s committed in %.1fms (%d eliminated%s)",
            game_id,
            result.turn,
            (time.perf_counter() - started) * 1000,
            len(result.eliminated_empires),
            f", {result.victory.victory_type.value} victory" if result.victory else "",
        )

        if settings.snapshot_enabled:
            result.snapshot_error = await _write_snapshot_best_effort(db, game_id)

    notify_turn_committed(game_id, result.turn)
    return result
