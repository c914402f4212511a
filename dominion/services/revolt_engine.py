"""
Revolt consequences.

Each consecutive turn an empire ends in the revolting state adds to its
unrest streak. The streak drives an escalating ladder:

  1 turn  - 10% production penalty
  2 turns - 25% penalty, and 10% of every unit type deserts (floored per type)
  3+      - production halts and the empire falls to civil war

Any turn ending outside revolting resets the streak and lifts the penalty.
"""

import math
from dataclasses import dataclass, field

from dominion.models.empire import CivilStatus

UNIT_DESERTION_RATE = 0.10
CIVIL_WAR_STREAK = 3
REVOLT_PENALTIES: dict[int, float] = {
    1: 0.10,
    2: 0.25,
    3: 1.0,
}


@dataclass
class RevoltResult:
    unrest_streak: int
    production_penalty: float
    unit_losses: dict[str, int] = field(default_factory=dict)
    is_defeated: bool = False

    @property
    def in_revolt(self) -> bool:
        return self.unrest_streak > 0


def revolt_penalty(unrest_streak: int) -> float:
    if unrest_streak <= 0:
        return 0.0
    return REVOLT_PENALTIES[min(unrest_streak, CIVIL_WAR_STREAK)]


def apply_revolt_consequences(
    civil_status: CivilStatus,
    unrest_streak: int,
    units: dict[str, int],
) -> RevoltResult:
    if civil_status != CivilStatus.revolting:
        return RevoltResult(unrest_streak=0, production_penalty=0.0)

    streak = unrest_streak + 1
    losses: dict[str, int] = {}
    if streak == 2:
        losses = {
            unit: math.floor(count * UNIT_DESERTION_RATE)
            for unit, count in units.items()
            if math.floor(count * UNIT_DESERTION_RATE) > 0
        }
    return RevoltResult(
        unrest_streak=streak,
        production_penalty=revolt_penalty(streak),
        unit_losses=losses,
        is_defeated=streak >= CIVIL_WAR_STREAK,
    )
