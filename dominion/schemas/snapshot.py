from typing import Optional

from pydantic import BaseModel, Field, field_validator

from dominion.models.empire import CivilStatus, DefeatType, EmpireType
from dominion.models.game import GameStatus, VictoryType
from dominion.models.region_connection import ConnectionType, WormholeStatus
from dominion.models.sector import SectorType

SNAPSHOT_VERSION = 1


class GameSnapshotData(BaseModel):
    id: int
    name: str
    current_turn: int
    turn_limit: int
    status: GameStatus
    protection_turns: int
    seed: int
    winner_empire_id: Optional[int] = None
    victory_type: Optional[VictoryType] = None

    model_config = {"from_attributes": True}


class SectorSnapshot(BaseModel):
    id: int
    sector_type: SectorType
    acquired_turn: int

    model_config = {"from_attributes": True}


class BuildQueueSnapshot(BaseModel):
    unit_type: str
    quantity: int = Field(gt=0)
    turns_remaining: int
    total_cost: int
    queue_position: int

    model_config = {"from_attributes": True}


class InfluenceSnapshot(BaseModel):
    home_region_id: int
    primary_region_id: int
    direct_neighbor_ids: list[int] = []
    extended_neighbor_ids: list[int] = []
    total_influence_radius: int

    model_config = {"from_attributes": True}


class EmpireSnapshot(BaseModel):
    id: int
    name: str
    type: EmpireType
    credits: int = Field(ge=0)
    food: int = Field(ge=0)
    ore: int = Field(ge=0)
    petroleum: int = Field(ge=0)
    research_points: int = Field(ge=0)
    research_level: int = Field(ge=0)
    population: int = Field(ge=0)
    population_cap: int = Field(ge=0)
    soldiers: int = Field(ge=0)
    fighters: int = Field(ge=0)
    stations: int = Field(ge=0)
    light_cruisers: int = Field(ge=0)
    heavy_cruisers: int = Field(ge=0)
    carriers: int = Field(ge=0)
    covert_agents: int = Field(ge=0)
    civil_status: CivilStatus
    networth: float
    is_eliminated: bool
    defeat_type: Optional[DefeatType] = None
    food_surplus_streak: int
    food_deficit_streak: int
    victory_streak: int
    last_battle_loss_ratio: float
    unrest_streak: int
    production_penalty: float
    sectors: list[SectorSnapshot] = []
    build_queue: list[BuildQueueSnapshot] = []
    influence: Optional[InfluenceSnapshot] = None

    model_config = {"from_attributes": True}


class ConnectionSnapshot(BaseModel):
    id: int
    from_region_id: int
    to_region_id: int
    connection_type: ConnectionType
    is_bidirectional: bool
    force_multiplier: float
    discovered_at_turn: Optional[int] = None
    wormhole_status: Optional[WormholeStatus] = None
    discovered_by_empire_id: Optional[int] = None
    collapse_chance: Optional[float] = None
    construction_completion_turn: Optional[int] = None

    model_config = {"from_attributes": True}


class GameSnapshot(BaseModel):
    version: int = SNAPSHOT_VERSION
    game: GameSnapshotData
    empires: list[EmpireSnapshot]
    connections: list[ConnectionSnapshot] = []

    @field_validator("version")
    @classmethod
    def validate_version(cls, v: int) -> int:
        if v != SNAPSHOT_VERSION:
            raise ValueError(f"unsupported snapshot version {v}")
        return v


class SnapshotInfoResponse(BaseModel):
    game_id: int
    turn: int
    version: int
    empire_count: int


class RestoreResponse(BaseModel):
    game_id: int
    restored_turn: int
    version: int
