from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from dominion.database import get_db
from dominion.exceptions import DominionError
from dominion.routers.errors import http_error
from dominion.schemas.game import (
    AttackCreate,
    AttackOrderResponse,
    BuildCreate,
    BuildQueueItemResponse,
    EmpireResponse,
    GameCreate,
    GameResponse,
)
from dominion.services.build_queue import queue_build
from dominion.services.game_service import (
    create_game,
    get_empires,
    get_game,
    get_sector_counts,
    queue_attack,
)

router = APIRouter(prefix="/games", tags=["games"])


async def _get_game_or_404(db: AsyncSession, game_id: int):
    game = await get_game(db, game_id)
    if game is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Game not found")
    return game


async def _game_response(db: AsyncSession, game) -> GameResponse:
    response = GameResponse.model_validate(game)
    response.empire_count = len(await get_empires(db, game.id))
    return response


@router.post("", response_model=GameResponse, status_code=status.HTTP_201_CREATED)
async def create_new_game(body: GameCreate, db: AsyncSession = Depends(get_db)):
    game = await create_game(
        db,
        name=body.name,
        player_name=body.player_name,
        bot_count=body.bot_count,
        seed=body.seed,
        turn_limit=body.turn_limit,
        protection_turns=body.protection_turns,
    )
    return await _game_response(db, game)


@router.get("/{game_id}", response_model=GameResponse)
async def get_game_details(game_id: int, db: AsyncSession = Depends(get_db)):
    game = await _get_game_or_404(db, game_id)
    return await _game_response(db, game)


@router.get("/{game_id}/empires", response_model=list[EmpireResponse])
async def list_empires(game_id: int, db: AsyncSession = Depends(get_db)):
    await _get_game_or_404(db, game_id)
    counts = await get_sector_counts(db, game_id)
    responses = []
    for empire in await get_empires(db, game_id):
        response = EmpireResponse.model_validate(empire)
        response.sector_count = counts.get(empire.id, 0)
        responses.append(response)
    return responses


@router.post(
    "/{game_id}/attacks",
    response_model=AttackOrderResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_attack(game_id: int, body: AttackCreate, db: AsyncSession = Depends(get_db)):
    """Queue an attack; it is resolved in the combat phase of the current turn."""
    try:
        order = await queue_attack(db, game_id, body.attacker_id, body.defender_id, body.forces)
    except (DominionError, ValueError) as e:
        raise http_error(e)
    return order


@router.post(
    "/{game_id}/builds",
    response_model=BuildQueueItemResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_build(game_id: int, body: BuildCreate, db: AsyncSession = Depends(get_db)):
    try:
        item = await queue_build(db, game_id, body.empire_id, body.unit_type, body.quantity)
    except (DominionError, ValueError) as e:
        raise http_error(e)
    return item
