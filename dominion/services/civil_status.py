"""
Civil status transitions.

Status moves at most one step per turn along the 8-level ladder. Downgrade
triggers are checked first and win over any upgrade trigger on the same
turn. The ladder is clamped at both ends.
"""

from dataclasses import dataclass

from dominion.data.civil_status import (
    BATTLE_LOSS_SEVERITY,
    CIVIL_STATUS_LEVELS,
    FOOD_DEFICIT_TURNS_TO_DOWNGRADE,
    FOOD_SURPLUS_TURNS_TO_UPGRADE,
    HIGH_MAINTENANCE_RATIO,
    VICTORY_STREAK_TO_UPGRADE,
    get_income_multiplier,
    status_index,
)
from dominion.models.empire import CivilStatus


@dataclass
class CivilStatusInputs:
    starved: bool = False
    food_surplus_streak: int = 0
    food_deficit_streak: int = 0
    battle_loss_ratio: float = 0.0
    victory_streak: int = 0
    maintenance_ratio: float = 0.0
    has_education: bool = False


@dataclass
class CivilStatusTransition:
    old_status: CivilStatus
    new_status: CivilStatus
    reason: str | None = None
    direction: str | None = None  # "upgrade" / "downgrade" / None
    trigger: str | None = None

    @property
    def changed(self) -> bool:
        return self.old_status != self.new_status

    @property
    def income_multiplier(self) -> float:
        return get_income_multiplier(self.new_status)


def downgrade_trigger(inputs: CivilStatusInputs) -> tuple[str, str] | None:
    """(trigger, reason) of the first negative event, checked in severity order."""
    if inputs.starved:
        return "starvation", "starvation"
    if inputs.food_deficit_streak >= FOOD_DEFICIT_TURNS_TO_DOWNGRADE:
        return "food_deficit", f"food deficit for {inputs.food_deficit_streak} turns"
    if inputs.battle_loss_ratio >= BATTLE_LOSS_SEVERITY:
        return "battle_loss", f"heavy battle losses ({inputs.battle_loss_ratio:.0%})"
    if inputs.maintenance_ratio > HIGH_MAINTENANCE_RATIO:
        return "high_maintenance", "crushing maintenance costs"
    return None


def upgrade_trigger(inputs: CivilStatusInputs) -> tuple[str, str] | None:
    if inputs.food_surplus_streak >= FOOD_SURPLUS_TURNS_TO_UPGRADE:
        return "food_surplus", f"food surplus for {inputs.food_surplus_streak} turns"
    if inputs.victory_streak >= VICTORY_STREAK_TO_UPGRADE:
        return "victory_streak", f"{inputs.victory_streak} consecutive victories"
    if inputs.has_education:
        return "education", "education programs"
    return None


def evaluate_civil_status(current: CivilStatus, inputs: CivilStatusInputs) -> CivilStatusTransition:
    index = status_index(current)

    hit = downgrade_trigger(inputs)
    if hit is not None:
        new_index = min(index + 1, len(CIVIL_STATUS_LEVELS) - 1)
        return CivilStatusTransition(current, CIVIL_STATUS_LEVELS[new_index], hit[1], "downgrade", hit[0])

    hit = upgrade_trigger(inputs)
    if hit is not None:
        new_index = max(index - 1, 0)
        return CivilStatusTransition(current, CIVIL_STATUS_LEVELS[new_index], hit[1], "upgrade", hit[0])

    return CivilStatusTransition(current, current)
