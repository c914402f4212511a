"""Tests for the turn-committed signal."""

import asyncio
import logging

from dominion.services import notification_service
from dominion.services.notification_service import (
    notify_turn_committed,
    register_turn_listener,
    unregister_turn_listener,
)


# ---- registration -------------------------------------------------------------

class TestRegistration:
    def test_listener_registered_once(self):
        def listener(game_id, turn):
            pass

        register_turn_listener(listener)
        register_turn_listener(listener)
        assert notification_service._listeners == [listener]

    def test_unregister(self):
        def listener(game_id, turn):
            pass

        register_turn_listener(listener)
        unregister_turn_listener(listener)
        unregister_turn_listener(listener)
        assert notification_service._listeners == []


# ---- delivery -----------------------------------------------------------------

class TestDelivery:
    async def test_sync_listener_called(self):
        calls = []
        register_turn_listener(lambda game_id, turn: calls.append((game_id, turn)))
        notify_turn_committed(3, 12)
        assert calls == [(3, 12)]

    async def test_async_listener_scheduled(self):
        calls = []

        async def listener(game_id, turn):
            calls.append((game_id, turn))

        register_turn_listener(listener)
        notify_turn_committed(3, 12)
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        assert calls == [(3, 12)]

    async def test_failing_listener_is_logged_not_raised(self, caplog):
        calls = []

        def broken(game_id, turn):
            raise RuntimeError("listener down")

        register_turn_listener(broken)
        register_turn_listener(lambda game_id, turn: calls.append(turn))
        with caplog.at_level(logging.ERROR, logger="dominion.services.notification_service"):
            notify_turn_committed(1, 1)

        assert calls == [1]
        assert "raised for game 1 turn 1" in caplog.text

    async def test_failing_async_listener_is_logged(self, caplog):
        async def broken(game_id, turn):
            raise RuntimeError("listener down")

        register_turn_listener(broken)
        with caplog.at_level(logging.ERROR, logger="dominion.services.notification_service"):
            notify_turn_committed(1, 1)
            for _ in range(3):
                await asyncio.sleep(0)

        assert "Turn listener failed" in caplog.text
        assert not notification_service._pending
