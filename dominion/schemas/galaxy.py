from typing import Optional

from pydantic import BaseModel

from dominion.models.galaxy_region import RegionType
from dominion.models.region_connection import ConnectionType, WormholeStatus
from dominion.services.influence_sphere import NeighborTier


class RegionResponse(BaseModel):
    id: int
    name: str
    region_type: RegionType
    position_x: float
    position_y: float
    wealth_modifier: float
    danger_level: int
    max_empires: int

    model_config = {"from_attributes": True}


class ConnectionResponse(BaseModel):
    id: int
    from_region_id: int
    to_region_id: int
    connection_type: ConnectionType
    force_multiplier: float
    discovered_at_turn: Optional[int]
    wormhole_status: Optional[WormholeStatus]
    discovered_by_empire_id: Optional[int]
    collapse_chance: Optional[float]
    construction_completion_turn: Optional[int]

    model_config = {"from_attributes": True}


class GalaxyResponse(BaseModel):
    regions: list[RegionResponse]
    connections: list[ConnectionResponse]


class NeighborResponse(BaseModel):
    empire_id: int
    tier: NeighborTier
    force_multiplier: float
    distance: float
    connection_type: Optional[ConnectionType]

    model_config = {"from_attributes": True}


class InfluenceResponse(BaseModel):
    empire_id: int
    radius: int
    direct: list[NeighborResponse]
    extended: list[NeighborResponse]
    unreachable: list[int]

    model_config = {"from_attributes": True}


class StabilizeRequest(BaseModel):
    empire_id: int


class ConstructRequest(BaseModel):
    empire_id: int
    to_region_id: int
