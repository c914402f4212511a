from dominion.data.units import UNIT_DATA

NETWORTH_PER_SECTOR = 10


def calculate_networth(sector_count: int, units: dict[str, int]) -> float:
    """Territory dominates; units add a small weighted bonus."""
    total = sector_count * NETWORTH_PER_SECTOR
    for unit, count in units.items():
        data = UNIT_DATA.get(unit)
        if data is not None:
            total += count * data.networth
    return round(total, 4)
