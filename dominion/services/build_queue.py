import logging
from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from dominion.data.units import get_unit
from dominion.exceptions import EmpireNotFoundError, GameNotActiveError, GameNotFoundError
from dominion.models.build_queue import BuildQueueItem
from dominion.models.empire import Empire
from dominion.models.game import Game, GameStatus
from dominion.services.game_locks import game_lock

logger = logging.getLogger(__name__)

MAX_QUEUE_LENGTH = 10


@dataclass
class Delivery:
    item_id: int
    empire_id: int
    unit_type: str
    quantity: int


def advance_build_queue(items: list) -> list[Delivery]:
    """Tick every item down one turn; items reaching zero are delivered.

    Mutates `turns_remaining` in place. Delivered items are returned in queue
    order; callers drop them from the queue.
    """
    deliveries: list[Delivery] = []
    for item in sorted(items, key=lambda i: (i.empire_id, i.queue_position, i.id)):
        item.turns_remaining -= 1
        if item.turns_remaining <= 0:
            deliveries.append(Delivery(item.id, item.empire_id, item.unit_type, item.quantity))
    return deliveries


async def get_build_queue(db: AsyncSession, empire_id: int) -> list[BuildQueueItem]:
    result = await db.execute(
        select(BuildQueueItem)
        .where(BuildQueueItem.empire_id == empire_id)
        .order_by(BuildQueueItem.queue_position, BuildQueueItem.id)
    )
    return list(result.scalars().all())


async def queue_build(
    db: AsyncSession, game_id: int, empire_id: int, unit_type: str, quantity: int
) -> BuildQueueItem:
    """Pay for units up front and add them to the empire's build queue."""
    data = get_unit(unit_type)
    if quantity <= 0:
        raise ValueError("Quantity must be positive")

    async with game_lock(game_id):
        game = await db.get(Game, game_id)
        if game is None:
            raise GameNotFoundError(game_id)
        if game.status != GameStatus.active:
            raise GameNotActiveError(game_id, game.status.value)
        empire = await db.get(Empire, empire_id)
        if empire is None or empire.game_id != game_id:
            raise EmpireNotFoundError(empire_id, game_id)
        if empire.is_eliminated:
            raise ValueError("Eliminated empires cannot build")

        count = await db.scalar(
            select(func.count()).select_from(BuildQueueItem).where(BuildQueueItem.empire_id == empire_id)
        )
        if count >= MAX_QUEUE_LENGTH:
            raise ValueError(f"Build queue is full ({MAX_QUEUE_LENGTH} items)")

        cost = data.cost * quantity
        if empire.credits < cost:
            raise ValueError(f"Insufficient credits: have {empire.credits}, need {cost}")

        empire.credits -= cost
        item = BuildQueueItem(
            game_id=game_id,
            empire_id=empire_id,
            unit_type=unit_type,
            quantity=quantity,
            turns_remaining=data.build_time,
            total_cost=cost,
            queue_position=count,
        )
        db.add(item)
        await db.commit()
        await db.refresh(item)
        logger.info("Empire %s queued %s %s (%s turns)", empire_id, quantity, unit_type, data.build_time)
        return item
