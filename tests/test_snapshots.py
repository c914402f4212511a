"""Tests for the ironman save: write, validate, restore, refuse."""

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dominion.exceptions import (
    GameNotFoundError,
    SnapshotCorruptedError,
    SnapshotNotFoundError,
    SnapshotVersionError,
)
from dominion.models.build_queue import BuildQueueItem
from dominion.models.game import Game
from dominion.models.game_save import GameSave
from dominion.schemas.snapshot import SNAPSHOT_VERSION
from dominion.services import turn_scheduler
from dominion.services.build_queue import queue_build
from dominion.services.game_service import create_game, get_empires
from dominion.services.snapshot_store import (
    get_snapshot,
    parse_snapshot,
    restore_snapshot,
    serialize_game,
    write_snapshot,
)
from dominion.services.turn_scheduler import advance_turn


async def _game(db: AsyncSession) -> Game:
    return await create_game(db, "Snapshot Test", "Player", bot_count=3, seed=7)


# ---------------------------------------------------------------------------
# Writing
# ---------------------------------------------------------------------------

class TestWriteSnapshot:
    async def test_serializes_every_empire(self, db_session: AsyncSession):
        game = await _game(db_session)
        snapshot = await serialize_game(db_session, game.id)
        assert snapshot.version == SNAPSHOT_VERSION
        assert snapshot.game.current_turn == 1
        assert len(snapshot.empires) == 4
        assert all(len(e.sectors) == 5 for e in snapshot.empires)
        assert all(e.influence is not None for e in snapshot.empires)
        assert snapshot.connections

    async def test_single_row_per_game(self, db_session: AsyncSession):
        game = await _game(db_session)
        await write_snapshot(db_session, game.id)
        await db_session.commit()
        await write_snapshot(db_session, game.id)
        await db_session.commit()

        saves = await db_session.execute(select(GameSave).where(GameSave.game_id == game.id))
        assert len(saves.scalars().all()) == 1

    async def test_unknown_game(self, db_session: AsyncSession):
        with pytest.raises(GameNotFoundError):
            await serialize_game(db_session, 9999)

    async def test_missing_snapshot(self, db_session: AsyncSession):
        game = await _game(db_session)
        with pytest.raises(SnapshotNotFoundError):
            await get_snapshot(db_session, game.id)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

class TestParseSnapshot:
    def test_not_an_object(self):
        with pytest.raises(SnapshotCorruptedError):
            parse_snapshot(["not", "a", "snapshot"])

    def test_wrong_version(self):
        with pytest.raises(SnapshotVersionError):
            parse_snapshot({"version": SNAPSHOT_VERSION + 1})

    def test_missing_fields(self):
        with pytest.raises(SnapshotCorruptedError):
            parse_snapshot({"version": SNAPSHOT_VERSION, "game": {}})

    async def test_negative_stock_rejected(self, db_session: AsyncSession):
        game = await _game(db_session)
        payload = (await serialize_game(db_session, game.id)).model_dump(mode="json")
        payload["empires"][0]["credits"] = -5
        with pytest.raises(SnapshotCorruptedError):
            parse_snapshot(payload)

    async def test_valid_payload_round_trips(self, db_session: AsyncSession):
        game = await _game(db_session)
        snapshot = await serialize_game(db_session, game.id)
        assert parse_snapshot(snapshot.model_dump(mode="json")) == snapshot


# ---------------------------------------------------------------------------
# Restoring
# ---------------------------------------------------------------------------

class TestRestoreSnapshot:
    async def test_restore_rolls_back_later_turns(self, db_session: AsyncSession, monkeypatch):
        game = await _game(db_session)
        await advance_turn(db_session, game.id)
        saved_credits = {e.id: e.credits for e in await get_empires(db_session, game.id)}

        monkeypatch.setattr(turn_scheduler.settings, "snapshot_enabled", False)
        await advance_turn(db_session, game.id)
        await db_session.refresh(game)
        assert game.current_turn == 3

        snapshot = await restore_snapshot(db_session, game.id)
        assert snapshot.game.current_turn == 2

        await db_session.refresh(game)
        assert game.current_turn == 2
        for empire in await get_empires(db_session, game.id):
            await db_session.refresh(empire)
            assert empire.credits == saved_credits[empire.id]

    async def test_restore_drops_later_build_orders(self, db_session: AsyncSession):
        game = await _game(db_session)
        await advance_turn(db_session, game.id)
        player = (await get_empires(db_session, game.id))[0]
        await db_session.refresh(player)
        credits_before = player.credits

        await queue_build(db_session, game.id, player.id, "fighters", 10)
        await restore_snapshot(db_session, game.id)

        await db_session.refresh(player)
        assert player.credits == credits_before
        queued = await db_session.execute(select(BuildQueueItem).where(BuildQueueItem.empire_id == player.id))
        assert queued.scalars().all() == []

    async def test_version_mismatch_refused(self, db_session: AsyncSession):
        game = await _game(db_session)
        await advance_turn(db_session, game.id)
        save = await get_snapshot(db_session, game.id)
        save.version = SNAPSHOT_VERSION + 1
        await db_session.commit()

        with pytest.raises(SnapshotVersionError):
            await restore_snapshot(db_session, game.id)

    async def test_corrupted_payload_refused(self, db_session: AsyncSession):
        game = await _game(db_session)
        await advance_turn(db_session, game.id)
        save = await get_snapshot(db_session, game.id)
        save.snapshot = {"version": SNAPSHOT_VERSION, "game": "garbage"}
        await db_session.commit()

        with pytest.raises(SnapshotCorruptedError):
            await restore_snapshot(db_session, game.id)

    async def test_refused_restore_leaves_live_state(self, db_session: AsyncSession, session_factory, monkeypatch):
        game = await _game(db_session)
        await advance_turn(db_session, game.id)
        save = await get_snapshot(db_session, game.id)
        payload = dict(save.snapshot)
        empires = [dict(e) for e in payload["empires"]]
        empires[-1]["id"] = 99999
        payload["empires"] = empires
        save.snapshot = payload
        await db_session.commit()

        monkeypatch.setattr(turn_scheduler.settings, "snapshot_enabled", False)
        await advance_turn(db_session, game.id)

        with pytest.raises(SnapshotCorruptedError):
            await restore_snapshot(db_session, game.id)

        async with session_factory() as fresh:
            stored = await fresh.get(Game, game.id)
            assert stored.current_turn == 3

    async def test_no_snapshot_to_restore(self, db_session: AsyncSession):
        game = await _game(db_session)
        with pytest.raises(SnapshotNotFoundError):
            await restore_snapshot(db_session, game.id)
