"""Per-game writer locks.

A game has at most one writer at a time: the turn pipeline or a single
out-of-band action. Different games never share a lock.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from dominion.exceptions import TurnInProgressError

logger = logging.getLogger(__name__)

_locks: dict[int, asyncio.Lock] = {}


def get_game_lock(game_id: int) -> asyncio.Lock:
    lock = _locks.get(game_id)
    if lock is None:
        lock = asyncio.Lock()
        _locks[game_id] = lock
    return lock


def is_game_locked(game_id: int) -> bool:
    lock = _locks.get(game_id)
    return lock is not None and lock.locked()


@asynccontextmanager
async def game_lock(game_id: int) -> AsyncIterator[None]:
    """Wait for the game's lock. Used by actions."""
    async with get_game_lock(game_id):
        yield


@asynccontextmanager
async def exclusive_game_lock(game_id: int) -> AsyncIterator[None]:
    """Take the game's lock or fail immediately. Used by turn advancement."""
    lock = get_game_lock(game_id)
    if lock.locked():
        logger.warning("Rejected concurrent turn advance for game %s", game_id)
        raise TurnInProgressError(game_id)
    async with lock:
        yield


def clear_game_locks() -> None:
    """Drop every idle lock (locks bind to the event loop that first waits on them)."""
    for game_id in [gid for gid, lock in _locks.items() if not lock.locked()]:
        del _locks[game_id]
