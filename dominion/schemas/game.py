from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from dominion.data.units import UNIT_TYPES
from dominion.models.attack_order import AttackStatus
from dominion.models.empire import CivilStatus, DefeatType, EmpireType
from dominion.models.game import GameStatus, VictoryType


class GameCreate(BaseModel):
    name: str
    player_name: str = "Player"
    bot_count: int = 25
    seed: Optional[int] = None
    turn_limit: int = 200
    protection_turns: int = 20

    @field_validator("bot_count")
    @classmethod
    def validate_bot_count(cls, v: int) -> int:
        if v < 1 or v > 100:
            raise ValueError("bot_count must be between 1 and 100")
        return v

    @field_validator("turn_limit")
    @classmethod
    def validate_turn_limit(cls, v: int) -> int:
        if v < 1:
            raise ValueError("turn_limit must be at least 1")
        return v

    @field_validator("protection_turns")
    @classmethod
    def validate_protection_turns(cls, v: int) -> int:
        if v < 0:
            raise ValueError("protection_turns cannot be negative")
        return v


class EmpireResponse(BaseModel):
    id: int
    game_id: int
    name: str
    type: EmpireType
    credits: int
    food: int
    ore: int
    petroleum: int
    research_points: int
    research_level: int
    population: int
    population_cap: int
    soldiers: int
    fighters: int
    stations: int
    light_cruisers: int
    heavy_cruisers: int
    carriers: int
    covert_agents: int
    civil_status: CivilStatus
    networth: float
    is_eliminated: bool
    defeat_type: Optional[DefeatType]
    sector_count: int = 0

    model_config = {"from_attributes": True}


class GameResponse(BaseModel):
    id: int
    name: str
    status: GameStatus
    current_turn: int
    turn_limit: int
    protection_turns: int
    seed: int
    winner_empire_id: Optional[int]
    victory_type: Optional[VictoryType]
    created_at: datetime
    empire_count: int = 0

    model_config = {"from_attributes": True}


class AttackCreate(BaseModel):
    attacker_id: int
    defender_id: int
    forces: dict[str, int]

    @field_validator("forces")
    @classmethod
    def validate_forces(cls, v: dict[str, int]) -> dict[str, int]:
        unknown = sorted(set(v) - set(UNIT_TYPES))
        if unknown:
            raise ValueError(f"unknown unit types: {', '.join(unknown)}")
        return v


class AttackOrderResponse(BaseModel):
    id: int
    game_id: int
    turn: int
    attacker_id: int
    defender_id: int
    forces: dict[str, int]
    status: AttackStatus
    outcome: Optional[dict]

    model_config = {"from_attributes": True}


class BuildCreate(BaseModel):
    empire_id: int
    unit_type: str
    quantity: int

    @field_validator("unit_type")
    @classmethod
    def validate_unit_type(cls, v: str) -> str:
        if v not in UNIT_TYPES:
            raise ValueError(f"unknown unit type: {v}")
        return v

    @field_validator("quantity")
    @classmethod
    def validate_quantity(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("quantity must be positive")
        return v


class BuildQueueItemResponse(BaseModel):
    id: int
    empire_id: int
    unit_type: str
    quantity: int
    turns_remaining: int
    total_cost: int
    queue_position: int

    model_config = {"from_attributes": True}
