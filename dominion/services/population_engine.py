"""Population growth and starvation."""

import math
from dataclasses import dataclass
from enum import Enum

FOOD_PER_CAPITA = 0.05
GROWTH_RATE = 0.02
STARVATION_RATE = 0.10
# A surplus only counts toward the civil-status streak above this share of consumption
SURPLUS_STREAK_THRESHOLD = 0.5


class PopulationStatus(str, Enum):
    growth = "growth"
    stable = "stable"
    starvation = "starvation"


@dataclass
class PopulationResult:
    population_before: int
    population_after: int
    status: PopulationStatus
    food_consumed: int
    food_remaining: int
    deficit_ratio: float = 0.0

    @property
    def change(self) -> int:
        return self.population_after - self.population_before


def calculate_food_consumption(population: int) -> int:
    return math.floor(population * FOOD_PER_CAPITA)


def process_population(
    population: int,
    population_cap: int,
    food_produced: int,
    food_stock: int = 0,
) -> PopulationResult:
    """Feed the population from this turn's food plus any stock on hand.

    10,000 people eat 500 food. With 800 available they grow 2% to 10,200;
    with none they lose 10% (the full-deficit rate) down to 9,000.
    """
    if population < 0 or population_cap < 0:
        raise ValueError("Population and cap must be non-negative")

    consumption = calculate_food_consumption(population)
    available = food_produced + food_stock

    if available >= consumption:
        remaining = available - consumption
        if available > consumption and population < population_cap:
            growth = math.floor(population * GROWTH_RATE)
            new_population = min(population + growth, population_cap)
            status = PopulationStatus.growth if new_population > population else PopulationStatus.stable
        else:
            new_population = min(population, population_cap)
            status = PopulationStatus.stable
        return PopulationResult(population, new_population, status, consumption, remaining)

    deficit_ratio = (consumption - available) / consumption
    loss = math.floor(population * STARVATION_RATE * deficit_ratio)
    return PopulationResult(
        population_before=population,
        population_after=max(0, population - loss),
        status=PopulationStatus.starvation,
        food_consumed=available,
        food_remaining=0,
        deficit_ratio=deficit_ratio,
    )


def is_meaningful_surplus(result: PopulationResult) -> bool:
    return (
        result.status != PopulationStatus.starvation
        and result.food_remaining > result.food_consumed * SURPLUS_STREAK_THRESHOLD
    )
