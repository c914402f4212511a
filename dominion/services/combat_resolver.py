"""
Combat resolution.

A battle is a single roll. The attacker's win chance is its power ratio
mapped to ratio / (ratio + 1) and clamped to [5%, 95%].
"""

import math
import random
from dataclasses import dataclass, field

from dominion.data.units import UNIT_DATA

DEFENDER_BONUS = 1.10
MIN_WIN_CHANCE = 0.05
MAX_WIN_CHANCE = 0.95

BASE_LOSS_RATE = 0.15
MAX_LOSS_RATE = 0.40
WINNER_LOSS_FACTOR = 0.5
LOSER_LOSS_FACTOR = 1.5
LOSS_VARIANCE = 0.2

SECTOR_CAPTURE_MIN = 0.05
SECTOR_CAPTURE_MAX = 0.15

ATTACKER_VICTORY = "attacker_victory"
DEFENDER_VICTORY = "defender_victory"
STALEMATE = "stalemate"


@dataclass
class BattleResult:
    outcome: str
    attacker_power: float
    defender_power: float
    attacker_win_chance: float
    attacker_casualties: dict[str, int] = field(default_factory=dict)
    defender_casualties: dict[str, int] = field(default_factory=dict)
    sectors_captured: int = 0
    attacker_loss_ratio: float = 0.0
    defender_loss_ratio: float = 0.0

    @property
    def attacker_won(self) -> bool:
        return self.outcome == ATTACKER_VICTORY


def calculate_power(forces: dict[str, int], is_defender: bool = False) -> float:
    power = sum(UNIT_DATA[unit].power * count for unit, count in forces.items() if unit in UNIT_DATA)
    if is_defender:
        power *= DEFENDER_BONUS
    return power


def calculate_win_chance(attacker_power: float, defender_power: float) -> float:
    if attacker_power <= 0:
        return 0.0
    if defender_power <= 0:
        return 1.0
    ratio = attacker_power / defender_power
    return max(MIN_WIN_CHANCE, min(MAX_WIN_CHANCE, ratio / (ratio + 1)))


def calculate_loss_rate(enemy_power: float, own_power: float) -> float:
    if own_power <= 0:
        return MAX_LOSS_RATE
    return min(MAX_LOSS_RATE, BASE_LOSS_RATE * enemy_power / own_power)


def _casualties(forces: dict[str, int], rate: float, variance: float) -> dict[str, int]:
    return {unit: min(count, math.floor(count * rate * variance)) for unit, count in forces.items()}


def _loss_ratio(forces: dict[str, int], losses: dict[str, int]) -> float:
    total = sum(forces.values())
    if total <= 0:
        return 0.0
    return sum(losses.values()) / total


def resolve_battle(
    committed: dict[str, int],
    effective: dict[str, int],
    defender_forces: dict[str, int],
    defender_sector_count: int,
    rng: random.Random,
) -> BattleResult:
    attacker_power = calculate_power(effective)
    defender_power = calculate_power(defender_forces, is_defender=True)

    if attacker_power <= 0 and defender_power <= 0:
        return BattleResult(STALEMATE, attacker_power, defender_power, 0.5)

    win_chance = calculate_win_chance(attacker_power, defender_power)
    outcome = ATTACKER_VICTORY if rng.random() < win_chance else DEFENDER_VICTORY

    variance = 1 + rng.uniform(-LOSS_VARIANCE, LOSS_VARIANCE)
    attacker_factor = WINNER_LOSS_FACTOR if outcome == ATTACKER_VICTORY else LOSER_LOSS_FACTOR
    defender_factor = LOSER_LOSS_FACTOR if outcome == ATTACKER_VICTORY else WINNER_LOSS_FACTOR
    attacker_losses = _casualties(
        committed, calculate_loss_rate(defender_power, attacker_power) * attacker_factor, variance
    )
    defender_losses = _casualties(
        defender_forces, calculate_loss_rate(attacker_power, defender_power) * defender_factor, variance
    )

    captured = 0
    if outcome == ATTACKER_VICTORY and defender_sector_count > 0:
        share = rng.uniform(SECTOR_CAPTURE_MIN, SECTOR_CAPTURE_MAX)
        captured = min(defender_sector_count, max(1, math.floor(defender_sector_count * share)))

    return BattleResult(
        outcome=outcome,
        attacker_power=attacker_power,
        defender_power=defender_power,
        attacker_win_chance=win_chance,
        attacker_casualties=attacker_losses,
        defender_casualties=defender_losses,
        sectors_captured=captured,
        attacker_loss_ratio=_loss_ratio(committed, attacker_losses),
        defender_loss_ratio=_loss_ratio(defender_forces, defender_losses),
    )
