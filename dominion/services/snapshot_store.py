"""Ironman save: one versioned snapshot per game, overwritten after every turn."""

import logging

from pydantic import ValidationError
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from dominion.exceptions import (
    GameNotFoundError,
    PersistenceUnavailableError,
    SnapshotCorruptedError,
    SnapshotNotFoundError,
    SnapshotVersionError,
)
from dominion.models.build_queue import BuildQueueItem
from dominion.models.empire import Empire
from dominion.models.empire_influence import EmpireInfluence
from dominion.models.game import Game
from dominion.models.game_save import GameSave
from dominion.models.region_connection import RegionConnection
from dominion.models.sector import Sector
from dominion.schemas.snapshot import (
    SNAPSHOT_VERSION,
    BuildQueueSnapshot,
    ConnectionSnapshot,
    EmpireSnapshot,
    GameSnapshot,
    GameSnapshotData,
    InfluenceSnapshot,
    SectorSnapshot,
)
from dominion.services.game_locks import game_lock

logger = logging.getLogger(__name__)

_EMPIRE_SCALARS = [
    name for name in EmpireSnapshot.model_fields
    if name not in {"id", "sectors", "build_queue", "influence"}
]


async def serialize_game(db: AsyncSession, game_id: int) -> GameSnapshot:
    game = await db.get(Game, game_id)
    if game is None:
        raise GameNotFoundError(game_id)

    empires = (await db.execute(select(Empire).where(Empire.game_id == game_id).order_by(Empire.id))).scalars().all()
    sectors = (await db.execute(select(Sector).where(Sector.game_id == game_id).order_by(Sector.id))).scalars().all()
    queue = (
        await db.execute(
            select(BuildQueueItem)
            .where(BuildQueueItem.game_id == game_id)
            .order_by(BuildQueueItem.queue_position, BuildQueueItem.id)
        )
    ).scalars().all()
    influence = {
        row.empire_id: row
        for row in (await db.execute(select(EmpireInfluence).where(EmpireInfluence.game_id == game_id))).scalars()
    }
    connections = (
        await db.execute(
            select(RegionConnection).where(RegionConnection.game_id == game_id).order_by(RegionConnection.id)
        )
    ).scalars().all()

    empire_snapshots = []
    for empire in empires:
        data = {name: getattr(empire, name) for name in _EMPIRE_SCALARS}
        inf = influence.get(empire.id)
        empire_snapshots.append(
            EmpireSnapshot(
                id=empire.id,
                **data,
                sectors=[SectorSnapshot.model_validate(s) for s in sectors if s.empire_id == empire.id],
                build_queue=[BuildQueueSnapshot.model_validate(i) for i in queue if i.empire_id == empire.id],
                influence=InfluenceSnapshot.model_validate(inf) if inf else None,
            )
        )

    return GameSnapshot(
        version=SNAPSHOT_VERSION,
        game=GameSnapshotData.model_validate(game),
        empires=empire_snapshots,
        connections=[ConnectionSnapshot.model_validate(c) for c in connections],
    )


async def write_snapshot(db: AsyncSession, game_id: int) -> GameSave:
    """Replace the game's single save row. The caller commits."""
    snapshot = await serialize_game(db, game_id)
    payload = snapshot.model_dump(mode="json")

    result = await db.execute(select(GameSave).where(GameSave.game_id == game_id))
    save = result.scalar_one_or_none()
    if save is None:
        save = GameSave(game_id=game_id, turn=snapshot.game.current_turn, version=SNAPSHOT_VERSION, snapshot=payload)
        db.add(save)
    else:
        save.turn = snapshot.game.current_turn
        save.version = SNAPSHOT_VERSION
        save.snapshot = payload
    await db.flush()
    return save


async def get_snapshot(db: AsyncSession, game_id: int) -> GameSave:
    result = await db.execute(select(GameSave).where(GameSave.game_id == game_id))
    save = result.scalar_one_or_none()
    if save is None:
        raise SnapshotNotFoundError(game_id)
    return save


def parse_snapshot(raw: object) -> GameSnapshot:
    """Validate a stored payload. Raises SnapshotVersionError or SnapshotCorruptedError."""
    if not isinstance(raw, dict):
        raise SnapshotCorruptedError("payload is not an object")
    found = raw.get("version")
    if found != SNAPSHOT_VERSION:
        raise SnapshotVersionError(found, SNAPSHOT_VERSION)
    try:
        return GameSnapshot.model_validate(raw)
    except ValidationError as exc:
        raise SnapshotCorruptedError(f"{exc.error_count()} validation error(s): {exc.errors()[0]['msg']}") from exc


async def _apply_snapshot(db: AsyncSession, game: Game, snapshot: GameSnapshot) -> None:
    data = snapshot.game
    game.current_turn = data.current_turn
    game.turn_limit = data.turn_limit
    game.status = data.status
    game.protection_turns = data.protection_turns
    game.winner_empire_id = data.winner_empire_id
    game.victory_type = data.victory_type

    empires = {
        e.id: e for e in (await db.execute(select(Empire).where(Empire.game_id == game.id))).scalars()
    }
    sectors = {s.id: s for s in (await db.execute(select(Sector).where(Sector.game_id == game.id))).scalars()}
    influence = {
        i.empire_id: i
        for i in (await db.execute(select(EmpireInfluence).where(EmpireInfluence.game_id == game.id))).scalars()
    }

    await db.execute(delete(BuildQueueItem).where(BuildQueueItem.game_id == game.id))

    for saved in snapshot.empires:
        empire = empires.get(saved.id)
        if empire is None:
            raise SnapshotCorruptedError(f"empire {saved.id} does not exist in game {game.id}")
        for name in _EMPIRE_SCALARS:
            setattr(empire, name, getattr(saved, name))

        for sector_data in saved.sectors:
            sector = sectors.get(sector_data.id)
            if sector is None:
                raise SnapshotCorruptedError(f"sector {sector_data.id} does not exist in game {game.id}")
            sector.empire_id = empire.id
            sector.acquired_turn = sector_data.acquired_turn

        for item in saved.build_queue:
            db.add(BuildQueueItem(game_id=game.id, empire_id=empire.id, **item.model_dump()))

        inf = influence.get(empire.id)
        if saved.influence is not None and inf is not None:
            for name, value in saved.influence.model_dump().items():
                setattr(inf, name, value)

    connections = {
        c.id: c
        for c in (await db.execute(select(RegionConnection).where(RegionConnection.game_id == game.id))).scalars()
    }
    for saved in snapshot.connections:
        row = connections.get(saved.id)
        if row is None:
            db.add(RegionConnection(game_id=game.id, **saved.model_dump()))
            continue
        row.discovered_at_turn = saved.discovered_at_turn
        row.wormhole_status = saved.wormhole_status
        row.discovered_by_empire_id = saved.discovered_by_empire_id
        row.collapse_chance = saved.collapse_chance
        row.construction_completion_turn = saved.construction_completion_turn

    await db.flush()


async def restore_snapshot(db: AsyncSession, game_id: int) -> GameSnapshot:
    """Roll the live game back to its saved snapshot."""
    async with game_lock(game_id):
        game = await db.get(Game, game_id)
        if game is None:
            raise GameNotFoundError(game_id)
        save = await get_snapshot(db, game_id)
        if save.version != SNAPSHOT_VERSION:
            raise SnapshotVersionError(save.version, SNAPSHOT_VERSION)
        snapshot = parse_snapshot(save.snapshot)
        if snapshot.game.id != game_id:
            raise SnapshotCorruptedError(f"snapshot belongs to game {snapshot.game.id}")

        try:
            await _apply_snapshot(db, game, snapshot)
            await db.commit()
        except SnapshotCorruptedError:
            await db.rollback()
            raise
        except SQLAlchemyError as exc:
            await db.rollback()
            raise PersistenceUnavailableError(details={"game_id": game_id}) from exc

        logger.info("Game %s restored to turn %s from snapshot", game_id, snapshot.game.current_turn)
        return snapshot


