from dataclasses import dataclass, field

from dominion.models.sector import SectorType

# Flat upkeep charged per owned sector, regardless of type
SECTOR_MAINTENANCE_COST = 168


@dataclass
class SectorData:
    sector_type: SectorType
    # resource name -> amount per turn
    production: dict[str, int] = field(default_factory=dict)
    description: str = ""


SECTOR_DATA: dict[SectorType, SectorData] = {
    SectorType.food: SectorData(SectorType.food, {"food": 160}, "Agricultural world"),
    SectorType.ore: SectorData(SectorType.ore, {"ore": 112}, "Mining colony"),
    SectorType.petroleum: SectorData(SectorType.petroleum, {"petroleum": 92}, "Refinery world"),
    SectorType.tourism: SectorData(SectorType.tourism, {"credits": 8000}, "Resort system"),
    SectorType.urban: SectorData(SectorType.urban, {"credits": 1000}, "Population centre"),
    SectorType.research: SectorData(SectorType.research, {"research_points": 100}, "Research institute"),
    SectorType.government: SectorData(SectorType.government, {}, "Administrative seat"),
    SectorType.education: SectorData(SectorType.education, {}, "Academy world; lifts civil status"),
    SectorType.supply: SectorData(SectorType.supply, {}, "Logistics depot"),
    SectorType.anti_pollution: SectorData(SectorType.anti_pollution, {}, "Environmental station"),
}

# Sectors granted to every new empire
STARTING_SECTORS: list[SectorType] = [
    SectorType.food,
    SectorType.ore,
    SectorType.petroleum,
    SectorType.tourism,
    SectorType.government,
]


def get_sector_production(sector_type: SectorType) -> dict[str, int]:
    return SECTOR_DATA[sector_type].production
