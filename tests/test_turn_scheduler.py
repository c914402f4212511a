"""Tests for the turn pipeline.

Covers:
- One committed turn per advance
- Determinism for identical state and seed
- Atomicity when a phase fails
- Concurrent advance rejection
- Combat orders resolved and persisted
- Turn limit, stalemate warning and ended games
- Auto-save and turn listeners
"""

import copy
import random

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dominion.exceptions import (
    GameNotActiveError,
    GameNotFoundError,
    SnapshotNotFoundError,
    TurnInProgressError,
    TurnPhaseError,
)
from dominion.models.attack_order import AttackOrder, AttackStatus
from dominion.models.empire import Empire
from dominion.models.game import Game, GameStatus, VictoryType
from dominion.models.sector import Sector
from dominion.services import turn_scheduler
from dominion.services.game_locks import get_game_lock
from dominion.services.game_service import create_game, get_empires, queue_attack
from dominion.services.game_state import load_game_state
from dominion.services.notification_service import register_turn_listener
from dominion.services.snapshot_store import get_snapshot
from dominion.services.turn_scheduler import PHASES, advance_turn, run_turn_phases, turn_rng


async def _game(db: AsyncSession, **kwargs) -> Game:
    kwargs.setdefault("bot_count", 3)
    kwargs.setdefault("seed", 42)
    return await create_game(db, "Turn Test", "Player", **kwargs)


# ---------------------------------------------------------------------------
# Advancing
# ---------------------------------------------------------------------------

class TestAdvanceTurn:
    async def test_turn_moves_forward_by_one(self, db_session: AsyncSession):
        game = await _game(db_session)
        result = await advance_turn(db_session, game.id)
        assert result.turn == 1
        assert result.next_turn == 2
        await db_session.refresh(game)
        assert game.current_turn == 2

    async def test_report_per_live_empire(self, db_session: AsyncSession):
        game = await _game(db_session)
        result = await advance_turn(db_session, game.id)
        empires = await get_empires(db_session, game.id)
        assert [r.empire_id for r in result.empires] == [e.id for e in empires]

    async def test_economy_is_applied(self, db_session: AsyncSession):
        game = await _game(db_session)
        result = await advance_turn(db_session, game.id)
        report = result.empires[0]
        assert report.production["credits"] > 0
        assert report.resources_after["credits"] == report.resources_before["credits"] + report.resource_deltas["credits"]

    async def test_several_turns_in_a_row(self, db_session: AsyncSession):
        game = await _game(db_session)
        for expected in range(1, 4):
            result = await advance_turn(db_session, game.id)
            assert result.turn == expected
        await db_session.refresh(game)
        assert game.current_turn == 4

    async def test_unknown_game(self, db_session: AsyncSession):
        with pytest.raises(GameNotFoundError):
            await advance_turn(db_session, 9999)

    async def test_phase_order_is_fixed(self):
        assert [name for name, _ in PHASES] == [
            "resources", "population", "civil_status", "build_queue",
            "wormholes", "combat", "revolt", "victory",
        ]


class TestDeterminism:
    async def test_same_state_same_seed_same_result(self, db_session: AsyncSession):
        game = await _game(db_session)
        state_a = await load_game_state(db_session, game)
        state_b = copy.deepcopy(state_a)

        result_a = run_turn_phases(state_a, turn_rng(game.seed, game.current_turn))
        result_b = run_turn_phases(state_b, turn_rng(game.seed, game.current_turn))
        assert result_a == result_b
        assert state_a == state_b

    def test_turn_rng_depends_on_turn(self):
        assert turn_rng(7, 1).random() == turn_rng(7, 1).random()
        assert turn_rng(7, 1).random() != turn_rng(7, 2).random()


# ---------------------------------------------------------------------------
# Failure handling
# ---------------------------------------------------------------------------

class TestAtomicity:
    async def test_failed_phase_commits_nothing(self, db_session: AsyncSession, session_factory, monkeypatch):
        game = await _game(db_session)

        def explode(ctx):
            raise RuntimeError("boom")

        monkeypatch.setattr(turn_scheduler, "PHASES", [PHASES[0], ("explode", explode)])
        with pytest.raises(TurnPhaseError) as exc_info:
            await advance_turn(db_session, game.id)
        assert exc_info.value.phase == "explode"

        async with session_factory() as fresh:
            stored = await fresh.get(Game, game.id)
            assert stored.current_turn == 1
            result = await fresh.execute(select(Empire).where(Empire.game_id == game.id))
            assert all(e.credits == 100000 for e in result.scalars())

    async def test_negative_stock_aborts_turn(self, db_session: AsyncSession, session_factory, monkeypatch):
        game = await _game(db_session)

        def overspend(ctx):
            empire = ctx.state.live_empires()[0]
            empire.stock["credits"] = -1

        monkeypatch.setattr(turn_scheduler, "PHASES", [("overspend", overspend)])
        with pytest.raises(TurnPhaseError):
            await advance_turn(db_session, game.id)

        async with session_factory() as fresh:
            assert (await fresh.get(Game, game.id)).current_turn == 1

    async def test_lock_released_after_failure(self, db_session: AsyncSession, monkeypatch):
        game = await _game(db_session)

        def explode(ctx):
            raise RuntimeError("boom")

        monkeypatch.setattr(turn_scheduler, "PHASES", [("explode", explode)])
        with pytest.raises(TurnPhaseError):
            await advance_turn(db_session, game.id)
        assert not get_game_lock(game.id).locked()


class TestConcurrency:
    async def test_second_advance_rejected_while_locked(self, db_session: AsyncSession):
        game = await _game(db_session)
        async with get_game_lock(game.id):
            with pytest.raises(TurnInProgressError):
                await advance_turn(db_session, game.id)
        await db_session.refresh(game)
        assert game.current_turn == 1

    async def test_other_games_not_blocked(self, db_session: AsyncSession):
        first = await _game(db_session)
        second = await _game(db_session, seed=43)
        async with get_game_lock(first.id):
            result = await advance_turn(db_session, second.id)
        assert result.game_id == second.id


# ---------------------------------------------------------------------------
# Combat
# ---------------------------------------------------------------------------

class LowRoll(random.Random):
    """Every uniform draw comes out at the bottom of its range."""

    def random(self) -> float:
        return 0.0


async def _sector_counts(db: AsyncSession, game_id: int) -> dict[int, int]:
    result = await db.execute(select(Sector).where(Sector.game_id == game_id))
    counts: dict[int, int] = {}
    for sector in result.scalars():
        counts[sector.empire_id] = counts.get(sector.empire_id, 0) + 1
    return counts


class TestCombatPhase:
    async def test_won_attack_is_resolved_and_persisted(self, db_session: AsyncSession, session_factory):
        game = await _game(db_session, protection_turns=0)
        attacker, defender = (await get_empires(db_session, game.id))[:2]
        order = await queue_attack(db_session, game.id, attacker.id, defender.id, {"soldiers": 50})

        result = await advance_turn(db_session, game.id, rng=LowRoll(0))
        battles = [e for e in result.empires[0].events if e.event_type == "battle"]
        assert battles and battles[0].data["order_id"] == order.id

        async with session_factory() as fresh:
            stored = await fresh.get(AttackOrder, order.id)
            assert stored.status == AttackStatus.resolved
            assert stored.outcome["outcome"] == "attacker_victory"
            assert stored.outcome["sectors_captured"] == 1

            counts = await _sector_counts(fresh, game.id)
            assert counts[attacker.id] == 6
            assert counts[defender.id] == 4

            won = await fresh.get(Empire, attacker.id)
            lost = await fresh.get(Empire, defender.id)
            assert won.soldiers == 100 - stored.outcome["attacker_casualties"]["soldiers"]
            assert lost.soldiers == 100 - stored.outcome["defender_casualties"]["soldiers"]
            assert won.victory_streak == 1
            assert lost.victory_streak == 0

    async def test_protection_rechecked_at_resolution(self, db_session: AsyncSession, session_factory):
        game = await _game(db_session, protection_turns=0)
        attacker, defender = (await get_empires(db_session, game.id))[:2]
        order = await queue_attack(db_session, game.id, attacker.id, defender.id, {"soldiers": 50})

        game.protection_turns = 5
        await db_session.commit()
        await advance_turn(db_session, game.id)

        async with session_factory() as fresh:
            stored = await fresh.get(AttackOrder, order.id)
            assert stored.status == AttackStatus.rejected
            assert "protection" in stored.outcome["reason"]
            counts = await _sector_counts(fresh, game.id)
            assert counts[attacker.id] == 5
            assert counts[defender.id] == 5
            assert (await fresh.get(Empire, attacker.id)).soldiers == 100


# ---------------------------------------------------------------------------
# End of game
# ---------------------------------------------------------------------------

class TestGameEnd:
    async def test_turn_limit_ends_game_with_survival(self, db_session: AsyncSession):
        game = await _game(db_session, turn_limit=1)
        result = await advance_turn(db_session, game.id)
        assert result.game_over
        assert result.victory.victory_type == VictoryType.survival

        await db_session.refresh(game)
        assert game.status == GameStatus.ended
        assert game.winner_empire_id == result.victory.empire_id
        assert game.victory_type == VictoryType.survival

    async def test_ended_game_cannot_advance(self, db_session: AsyncSession):
        game = await _game(db_session, turn_limit=1)
        await advance_turn(db_session, game.id)
        with pytest.raises(GameNotActiveError):
            await advance_turn(db_session, game.id)

    async def test_stalemate_warning_near_turn_limit(self, db_session: AsyncSession):
        game = await _game(db_session, turn_limit=20)
        result = await advance_turn(db_session, game.id)
        warnings = [e for e in result.events if e.event_type == "stalemate_warning"]
        assert len(warnings) == 1
        assert warnings[0].phase == "victory"
        assert warnings[0].data["turns_remaining"] == 19
        assert not result.game_over

    async def test_no_stalemate_warning_early(self, db_session: AsyncSession):
        game = await _game(db_session)
        result = await advance_turn(db_session, game.id)
        assert not any(e.event_type == "stalemate_warning" for e in result.events)


# ---------------------------------------------------------------------------
# After commit
# ---------------------------------------------------------------------------

class TestAfterCommit:
    async def test_snapshot_written_after_turn(self, db_session: AsyncSession):
        game = await _game(db_session)
        result = await advance_turn(db_session, game.id)
        assert result.snapshot_error is None

        save = await get_snapshot(db_session, game.id)
        assert save.turn == 2
        assert save.snapshot["game"]["current_turn"] == 2

    async def test_snapshot_can_be_disabled(self, db_session: AsyncSession, monkeypatch):
        monkeypatch.setattr(turn_scheduler.settings, "snapshot_enabled", False)
        game = await _game(db_session)
        await advance_turn(db_session, game.id)
        with pytest.raises(SnapshotNotFoundError):
            await get_snapshot(db_session, game.id)

    async def test_snapshot_failure_keeps_turn(self, db_session: AsyncSession, session_factory, monkeypatch):
        async def disk_full(db, game_id):
            raise RuntimeError("disk full")

        monkeypatch.setattr(turn_scheduler, "write_snapshot", disk_full)
        game = await _game(db_session)
        result = await advance_turn(db_session, game.id)
        assert result.snapshot_error == "disk full"

        async with session_factory() as fresh:
            assert (await fresh.get(Game, game.id)).current_turn == 2
        with pytest.raises(SnapshotNotFoundError):
            await get_snapshot(db_session, game.id)

    async def test_listeners_told_about_committed_turn(self, db_session: AsyncSession):
        calls = []
        register_turn_listener(lambda game_id, turn: calls.append((game_id, turn)))
        game = await _game(db_session)
        await advance_turn(db_session, game.id)
        assert calls == [(game.id, 1)]

    async def test_failing_listener_does_not_break_turn(self, db_session: AsyncSession):
        def broken(game_id, turn):
            raise RuntimeError("listener down")

        register_turn_listener(broken)
        game = await _game(db_session)
        result = await advance_turn(db_session, game.id)
        assert result.turn == 1
