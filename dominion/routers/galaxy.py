from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from dominion.database import get_db
from dominion.exceptions import DominionError
from dominion.routers.errors import http_error
from dominion.schemas.galaxy import (
    ConnectionResponse,
    ConstructRequest,
    GalaxyResponse,
    InfluenceResponse,
    RegionResponse,
    StabilizeRequest,
)
from dominion.services.game_service import get_galaxy, get_game, get_influence
from dominion.services.wormhole_lifecycle import construct_wormhole, stabilize_wormhole

router = APIRouter(prefix="/games", tags=["galaxy"])


@router.get("/{game_id}/galaxy", response_model=GalaxyResponse)
async def get_galaxy_map(game_id: int, db: AsyncSession = Depends(get_db)):
    game = await get_game(db, game_id)
    if game is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Game not found")
    regions, connections = await get_galaxy(db, game_id)
    return GalaxyResponse(
        regions=[RegionResponse.model_validate(r) for r in regions],
        connections=[ConnectionResponse.model_validate(c) for c in connections],
    )


@router.get("/{game_id}/empires/{empire_id}/influence", response_model=InfluenceResponse)
async def get_empire_influence(game_id: int, empire_id: int, db: AsyncSession = Depends(get_db)):
    """Direct and extended neighbors (the legal attack targets) with their force multipliers."""
    try:
        sphere = await get_influence(db, game_id, empire_id)
    except (DominionError, ValueError) as e:
        raise http_error(e)
    return InfluenceResponse.model_validate(sphere)


@router.post("/{game_id}/wormholes/{connection_id}/stabilize", response_model=ConnectionResponse)
async def stabilize(game_id: int, connection_id: int, body: StabilizeRequest, db: AsyncSession = Depends(get_db)):
    try:
        conn = await stabilize_wormhole(db, game_id, connection_id, body.empire_id)
    except (DominionError, ValueError) as e:
        raise http_error(e)
    return conn


@router.post(
    "/{game_id}/wormholes/construct",
    response_model=ConnectionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def construct(game_id: int, body: ConstructRequest, db: AsyncSession = Depends(get_db)):
    try:
        conn = await construct_wormhole(db, game_id, body.empire_id, body.to_region_id)
    except (DominionError, ValueError) as e:
        raise http_error(e)
    return conn
