"""Turn-committed signal for out-of-process listeners (e.g. bot decision precompute).

Delivery is fire-and-forget: a failing or slow listener is logged and never
affects the turn that triggered it.
"""

import asyncio
import inspect
import logging
from typing import Awaitable, Callable, Union

logger = logging.getLogger(__name__)

TurnListener = Callable[[int, int], Union[Awaitable[None], None]]

_listeners: list[TurnListener] = []
_pending: set[asyncio.Task] = set()


def register_turn_listener(listener: TurnListener) -> None:
    if listener not in _listeners:
        _listeners.append(listener)


def unregister_turn_listener(listener: TurnListener) -> None:
    if listener in _listeners:
        _listeners.remove(listener)


def _on_listener_done(task: asyncio.Task) -> None:
    _pending.discard(task)
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Turn listener failed: %s", exc, exc_info=exc)


def notify_turn_committed(game_id: int, turn: int) -> None:
    """Tell every listener that `turn` of `game_id` is committed."""
    for listener in list(_listeners):
        try:
            outcome = listener(game_id, turn)
            if inspect.isawaitable(outcome):
                task = asyncio.ensure_future(outcome)
                _pending.add(task)
                task.add_done_callback(_on_listener_done)
        except Exception:
            logger.exception("Turn listener %r raised for game %s turn %s", listener, game_id, turn)
