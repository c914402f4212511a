from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from dominion.database import get_db
from dominion.exceptions import DominionError
from dominion.routers.errors import http_error
from dominion.schemas.turn import TurnResultResponse
from dominion.services.turn_scheduler import advance_turn

router = APIRouter(prefix="/games", tags=["turns"])


@router.post("/{game_id}/turns/advance", response_model=TurnResultResponse)
async def advance_game_turn(game_id: int, db: AsyncSession = Depends(get_db)):
    """Run the full turn pipeline once. Returns 409 if a turn is already running."""
    try:
        result = await advance_turn(db, game_id)
    except DominionError as e:
        raise http_error(e)
    return TurnResultResponse.model_validate(result)
