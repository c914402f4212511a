"""Resource production and maintenance for one empire."""

import math
from dataclasses import dataclass, field

from dominion.data.civil_status import get_income_multiplier
from dominion.data.sectors import SECTOR_MAINTENANCE_COST, get_sector_production
from dominion.data.units import UNIT_DATA
from dominion.models.empire import CivilStatus
from dominion.models.sector import SectorType

RESOURCE_TYPES = ["credits", "food", "ore", "petroleum", "research_points"]
# Resources scaled by the civil-status income multiplier
INCOME_RESOURCES = {"credits", "research_points"}


@dataclass
class MaintenanceBreakdown:
    sector_cost: int
    unit_cost: int

    @property
    def total(self) -> int:
        return self.sector_cost + self.unit_cost


@dataclass
class ResourceResult:
    base_production: dict[str, int]
    production: dict[str, int]
    maintenance: MaintenanceBreakdown
    deltas: dict[str, int]
    new_stock: dict[str, int]
    income_multiplier: float
    penalty: float = 0.0
    clamped: list[str] = field(default_factory=list)

    @property
    def net_credits(self) -> int:
        return self.deltas["credits"]


def calculate_base_production(sector_types: list[SectorType]) -> dict[str, int]:
    totals = {resource: 0 for resource in RESOURCE_TYPES}
    for sector_type in sector_types:
        for resource, amount in get_sector_production(sector_type).items():
            totals[resource] += amount
    return totals


def apply_income_multiplier(base: dict[str, int], multiplier: float, penalty: float = 0.0) -> dict[str, int]:
    if not 0.0 <= penalty <= 1.0:
        raise ValueError(f"Production penalty must be within [0, 1], got {penalty}")
    result: dict[str, int] = {}
    for resource, amount in base.items():
        value = amount * multiplier if resource in INCOME_RESOURCES else amount
        result[resource] = math.floor(value * (1 - penalty))
    return result


def calculate_maintenance(sector_count: int, units: dict[str, int]) -> MaintenanceBreakdown:
    unit_cost = sum(UNIT_DATA[unit].maintenance * count for unit, count in units.items() if unit in UNIT_DATA)
    return MaintenanceBreakdown(
        sector_cost=sector_count * SECTOR_MAINTENANCE_COST,
        unit_cost=math.floor(unit_cost),
    )


def process_resources(
    stock: dict[str, int],
    sector_types: list[SectorType],
    units: dict[str, int],
    civil_status: CivilStatus,
    penalty: float = 0.0,
) -> ResourceResult:
    multiplier = get_income_multiplier(civil_status)
    base = calculate_base_production(sector_types)
    production = apply_income_multiplier(base, multiplier, penalty)
    maintenance = calculate_maintenance(len(sector_types), units)

    deltas = dict(production)
    deltas["credits"] = production["credits"] - maintenance.total

    new_stock: dict[str, int] = {}
    clamped: list[str] = []
    for resource in RESOURCE_TYPES:
        value = stock.get(resource, 0) + deltas[resource]
        if value < 0:
            clamped.append(resource)
            value = 0
        new_stock[resource] = value

    return ResourceResult(
        base_production=base,
        production=production,
        maintenance=maintenance,
        deltas=deltas,
        new_stock=new_stock,
        income_multiplier=multiplier,
        penalty=penalty,
        clamped=clamped,
    )


def maintenance_ratio(maintenance_total: int, credit_production: int) -> float:
    """Share of credit income eaten by upkeep; feeds civil status."""
    return maintenance_total / max(1, credit_production)
