from dominion.models.empire import CivilStatus

# Ladder order, best first. Index 0 is ecstatic, index 7 is revolting.
CIVIL_STATUS_LEVELS: list[CivilStatus] = list(CivilStatus)

# Income multiplier applied to credit and research production
CIVIL_STATUS_MULTIPLIERS: dict[CivilStatus, float] = {
    CivilStatus.ecstatic: 2.5,
    CivilStatus.happy: 2.0,
    CivilStatus.content: 1.5,
    CivilStatus.neutral: 1.2,
    CivilStatus.unhappy: 1.0,
    CivilStatus.angry: 0.85,
    CivilStatus.rioting: 0.7,
    CivilStatus.revolting: 0.5,
}

# Streak thresholds
FOOD_SURPLUS_TURNS_TO_UPGRADE = 5
FOOD_DEFICIT_TURNS_TO_DOWNGRADE = 2
VICTORY_STREAK_TO_UPGRADE = 3

# Single-shot severities
BATTLE_LOSS_SEVERITY = 0.30
HIGH_MAINTENANCE_RATIO = 0.8


def status_index(status: CivilStatus) -> int:
    return CIVIL_STATUS_LEVELS.index(status)


def get_income_multiplier(status: CivilStatus) -> float:
    return CIVIL_STATUS_MULTIPLIERS[status]
