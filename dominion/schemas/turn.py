from typing import Any, Optional

from pydantic import BaseModel

from dominion.models.empire import CivilStatus, DefeatType
from dominion.models.game import VictoryType
from dominion.services.population_engine import PopulationStatus


class TurnEventResponse(BaseModel):
    phase: str
    event_type: str
    message: str
    empire_id: Optional[int] = None
    data: dict[str, Any] = {}

    model_config = {"from_attributes": True}


class EmpireTurnReportResponse(BaseModel):
    empire_id: int
    empire_name: str
    resources_before: dict[str, int]
    resources_after: dict[str, int]
    production: dict[str, int]
    maintenance: int
    resource_deltas: dict[str, int]
    food_consumed: int
    population_before: int
    population_after: int
    population_status: Optional[PopulationStatus]
    civil_status_before: Optional[CivilStatus]
    civil_status_after: Optional[CivilStatus]
    networth: float
    defeat_type: Optional[DefeatType]
    events: list[TurnEventResponse] = []

    model_config = {"from_attributes": True}


class VictoryResponse(BaseModel):
    empire_id: int
    empire_name: str
    victory_type: VictoryType
    message: str

    model_config = {"from_attributes": True}


class TurnResultResponse(BaseModel):
    game_id: int
    turn: int
    next_turn: int
    empires: list[EmpireTurnReportResponse] = []
    events: list[TurnEventResponse] = []
    eliminated_empires: list[str] = []
    victory: Optional[VictoryResponse] = None
    game_over: bool
    snapshot_error: Optional[str] = None

    model_config = {"from_attributes": True}
