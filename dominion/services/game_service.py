import logging
import random

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dominion.config import settings
from dominion.data.sectors import STARTING_SECTORS
from dominion.data.units import IMMOBILE_UNITS, UNIT_TYPES
from dominion.exceptions import EmpireNotFoundError, GameNotActiveError, GameNotFoundError
from dominion.models.attack_order import AttackOrder, AttackStatus
from dominion.models.empire import Empire, EmpireType
from dominion.models.empire_influence import EmpireInfluence
from dominion.models.galaxy_region import GalaxyRegion
from dominion.models.game import Game, GameStatus
from dominion.models.region_connection import RegionConnection
from dominion.models.sector import Sector
from dominion.services.galaxy_generator import assign_home_regions, generate_galaxy, persist_galaxy
from dominion.services.game_locks import game_lock
from dominion.services.game_state import load_game_state
from dominion.services.influence_sphere import InfluenceSphere, is_protected
from dominion.services.networth import calculate_networth
from dominion.services.turn_scheduler import compute_sphere

logger = logging.getLogger(__name__)

BOT_NAME_PREFIXES = [
    "Hegemony", "Dominion", "Collective", "Syndicate", "Republic",
    "Directorate", "Concord", "Ascendancy", "Covenant", "Sovereignty",
]


def _bot_name(index: int) -> str:
    prefix = BOT_NAME_PREFIXES[index % len(BOT_NAME_PREFIXES)]
    return f"{prefix} {index + 1}"


async def create_game(
    db: AsyncSession,
    name: str,
    player_name: str,
    bot_count: int | None = None,
    seed: int | None = None,
    turn_limit: int | None = None,
    protection_turns: int | None = None,
) -> Game:
    """Create a game with one player empire, `bot_count` bots and a generated galaxy."""
    bot_count = settings.default_bot_count if bot_count is None else bot_count
    seed = random.randrange(2**31) if seed is None else seed
    rng = random.Random(seed)

    game = Game(
        name=name,
        status=GameStatus.active,
        current_turn=1,
        turn_limit=settings.default_turn_limit if turn_limit is None else turn_limit,
        protection_turns=settings.protection_turns if protection_turns is None else protection_turns,
        seed=seed,
    )
    db.add(game)
    await db.flush()  # get game.id before adding empires

    empires = [Empire(game_id=game.id, name=player_name, type=EmpireType.player)]
    empires += [Empire(game_id=game.id, name=_bot_name(i), type=EmpireType.bot) for i in range(bot_count)]
    db.add_all(empires)
    await db.flush()

    for empire in empires:
        for sector_type in STARTING_SECTORS:
            db.add(Sector(game_id=game.id, empire_id=empire.id, sector_type=sector_type, acquired_turn=1))
        empire.networth = calculate_networth(len(STARTING_SECTORS), {u: getattr(empire, u) or 0 for u in UNIT_TYPES})

    layout = generate_galaxy(len(empires), rng, settings.empires_per_region)
    region_ids = await persist_galaxy(db, game.id, layout)
    homes = assign_home_regions(layout, len(empires), rng, player_index=0)
    for empire, home_index in zip(empires, homes):
        region_id = region_ids[home_index]
        db.add(
            EmpireInfluence(
                empire_id=empire.id,
                game_id=game.id,
                home_region_id=region_id,
                primary_region_id=region_id,
                direct_neighbor_ids=[],
                extended_neighbor_ids=[],
            )
        )

    await db.commit()
    await db.refresh(game)
    logger.info(
        "Created game %s (%s empires, %s regions, %s connections, seed %s)",
        game.id, len(empires), len(layout.regions), len(layout.connections), seed,
    )
    return game


async def get_game(db: AsyncSession, game_id: int) -> Game | None:
    result = await db.execute(select(Game).where(Game.id == game_id))
    return result.scalar_one_or_none()


async def get_empires(db: AsyncSession, game_id: int) -> list[Empire]:
    result = await db.execute(select(Empire).where(Empire.game_id == game_id).order_by(Empire.id))
    return list(result.scalars().all())


async def get_sector_counts(db: AsyncSession, game_id: int) -> dict[int, int]:
    result = await db.execute(select(Sector.empire_id).where(Sector.game_id == game_id))
    counts: dict[int, int] = {}
    for empire_id in result.scalars().all():
        counts[empire_id] = counts.get(empire_id, 0) + 1
    return counts


async def get_galaxy(db: AsyncSession, game_id: int) -> tuple[list[GalaxyRegion], list[RegionConnection]]:
    regions = await db.execute(select(GalaxyRegion).where(GalaxyRegion.game_id == game_id).order_by(GalaxyRegion.id))
    connections = await db.execute(
        select(RegionConnection).where(RegionConnection.game_id == game_id).order_by(RegionConnection.id)
    )
    return list(regions.scalars().all()), list(connections.scalars().all())


async def get_influence(db: AsyncSession, game_id: int, empire_id: int) -> InfluenceSphere:
    """Recompute the empire's sphere from the live game; never served from the cache."""
    game = await get_game(db, game_id)
    if game is None:
        raise GameNotFoundError(game_id)
    state = await load_game_state(db, game)
    empire = state.empires.get(empire_id)
    if empire is None:
        raise EmpireNotFoundError(empire_id, game_id)
    if empire.primary_region_id is None:
        raise ValueError("Empire has no position in the galaxy")
    return compute_sphere(state, empire)


async def queue_attack(
    db: AsyncSession, game_id: int, attacker_id: int, defender_id: int, forces: dict[str, int]
) -> AttackOrder:
    """Queue an attack for resolution in the current turn's combat phase.

    Only shape checks happen here. Sphere membership, protection and treaties
    are checked again against the state the combat phase sees.
    """
    for unit, count in forces.items():
        if unit not in UNIT_TYPES:
            raise ValueError(f"Unknown unit type: {unit}")
        if unit in IMMOBILE_UNITS:
            raise ValueError(f"{unit} cannot be sent on an attack")
        if count < 0:
            raise ValueError(f"Negative force count for {unit}")
    if not any(count > 0 for count in forces.values()):
        raise ValueError("No forces committed")
    if attacker_id == defender_id:
        raise ValueError("Cannot attack yourself")

    async with game_lock(game_id):
        game = await get_game(db, game_id)
        if game is None:
            raise GameNotFoundError(game_id)
        if game.status != GameStatus.active:
            raise GameNotActiveError(game_id, game.status.value)
        if is_protected(game.current_turn, game.protection_turns):
            raise ValueError(f"New-game protection lasts until turn {game.protection_turns}")

        attacker = await db.get(Empire, attacker_id)
        if attacker is None or attacker.game_id != game_id:
            raise EmpireNotFoundError(attacker_id, game_id)
        defender = await db.get(Empire, defender_id)
        if defender is None or defender.game_id != game_id:
            raise EmpireNotFoundError(defender_id, game_id)
        if attacker.is_eliminated or defender.is_eliminated:
            raise ValueError("Eliminated empires cannot take part in combat")
        for unit, count in forces.items():
            if count > getattr(attacker, unit):
                raise ValueError(f"Insufficient {unit}: have {getattr(attacker, unit)}, need {count}")

        order = AttackOrder(
            game_id=game_id,
            turn=game.current_turn,
            attacker_id=attacker_id,
            defender_id=defender_id,
            forces={u: c for u, c in forces.items() if c > 0},
            status=AttackStatus.pending,
        )
        db.add(order)
        await db.commit()
        await db.refresh(order)
        logger.info("Game %s turn %s: empire %s queued attack on %s", game_id, order.turn, attacker_id, defender_id)
        return order
