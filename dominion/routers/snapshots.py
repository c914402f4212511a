from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from dominion.database import get_db
from dominion.exceptions import DominionError
from dominion.routers.errors import http_error
from dominion.schemas.snapshot import RestoreResponse, SnapshotInfoResponse
from dominion.services.snapshot_store import get_snapshot, restore_snapshot

router = APIRouter(prefix="/games", tags=["snapshots"])


@router.get("/{game_id}/snapshot", response_model=SnapshotInfoResponse)
async def get_saved_snapshot(game_id: int, db: AsyncSession = Depends(get_db)):
    try:
        save = await get_snapshot(db, game_id)
    except DominionError as e:
        raise http_error(e)
    empires = save.snapshot.get("empires", []) if isinstance(save.snapshot, dict) else []
    return SnapshotInfoResponse(game_id=game_id, turn=save.turn, version=save.version, empire_count=len(empires))


@router.post("/{game_id}/snapshot/restore", response_model=RestoreResponse)
async def restore_saved_snapshot(game_id: int, db: AsyncSession = Depends(get_db)):
    """Roll the game back to its last save. The live game is untouched if the save is unusable."""
    try:
        snapshot = await restore_snapshot(db, game_id)
    except DominionError as e:
        raise http_error(e)
    return RestoreResponse(game_id=game_id, restored_turn=snapshot.game.current_turn, version=snapshot.version)
