from dataclasses import dataclass

UNIT_TYPES: list[str] = [
    "soldiers",
    "fighters",
    "stations",
    "light_cruisers",
    "heavy_cruisers",
    "carriers",
    "covert_agents",
]


@dataclass
class UnitData:
    unit_type: str
    cost: int  # credits per unit
    maintenance: float  # credits per unit per turn
    build_time: int  # turns
    power: int  # combat contribution per unit
    networth: float  # networth contribution per unit


UNIT_DATA: dict[str, UnitData] = {
    "soldiers": UnitData("soldiers", cost=50, maintenance=0.5, build_time=1, power=1, networth=0.0005),
    "fighters": UnitData("fighters", cost=200, maintenance=2, build_time=1, power=3, networth=0.001),
    "stations": UnitData("stations", cost=5000, maintenance=50, build_time=3, power=30, networth=0.002),
    "light_cruisers": UnitData(
        "light_cruisers", cost=500, maintenance=5, build_time=2, power=5, networth=0.001
    ),
    "heavy_cruisers": UnitData(
        "heavy_cruisers", cost=1000, maintenance=10, build_time=2, power=8, networth=0.002
    ),
    "carriers": UnitData("carriers", cost=2500, maintenance=25, build_time=3, power=2, networth=0.005),
    # Agents never fight; they only count toward wormhole discovery and networth
    "covert_agents": UnitData(
        "covert_agents", cost=4090, maintenance=40, build_time=1, power=0, networth=0.001
    ),
}

# Stations guard the home system and can never be committed to an attack
IMMOBILE_UNITS = {"stations"}


def get_unit(unit_type: str) -> UnitData:
    if unit_type not in UNIT_DATA:
        raise ValueError(f"Unknown unit type: {unit_type}")
    return UNIT_DATA[unit_type]
