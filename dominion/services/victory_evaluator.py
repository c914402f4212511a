"""
Defeat and victory evaluation, run after every other mutation of the turn.

Victory is checked in order and the first hit ends the game: last empire
standing, conquest, economic, then survival at the turn limit.
"""

from dataclasses import dataclass

from dominion.models.empire import DefeatType
from dominion.models.game import VictoryType

CONQUEST_THRESHOLD = 0.60
ECONOMIC_MULTIPLIER = 1.5
MIN_EMPIRES_FOR_ECONOMIC = 2

# Stalemate warning window and the leads that still count as a path to victory
STALEMATE_WARNING_TURNS = 20
STALEMATE_SECTOR_SHARE = 0.40
STALEMATE_NETWORTH_RATIO = 1.2


@dataclass
class EmpireStanding:
    empire_id: int
    name: str
    sector_count: int
    credits: int
    net_credits: int
    networth: float
    is_eliminated: bool = False


@dataclass
class VictoryResult:
    empire_id: int
    empire_name: str
    victory_type: VictoryType
    message: str


def check_defeat(standing: EmpireStanding) -> DefeatType | None:
    if standing.sector_count <= 0:
        return DefeatType.elimination
    if standing.credits <= 0 and standing.net_credits < 0:
        return DefeatType.bankruptcy
    return None


def _rank_key(standing: EmpireStanding) -> tuple:
    return (-standing.networth, -standing.sector_count, standing.empire_id)


def check_victory(
    standings: list[EmpireStanding],
    turn: int,
    turn_limit: int,
) -> VictoryResult | None:
    alive = [s for s in standings if not s.is_eliminated]

    if len(standings) > 1 and len(alive) == 1:
        winner = alive[0]
        return VictoryResult(
            winner.empire_id, winner.name, VictoryType.elimination,
            f"{winner.name} is the last empire standing",
        )
    if not alive:
        return None

    total_sectors = sum(s.sector_count for s in alive)
    if total_sectors > 0:
        leader = max(alive, key=lambda s: (s.sector_count, -s.empire_id))
        share = leader.sector_count / total_sectors
        if len(alive) > 1 and share >= CONQUEST_THRESHOLD:
            return VictoryResult(
                leader.empire_id, leader.name, VictoryType.conquest,
                f"{leader.name} controls {share:.0%} of the galaxy",
            )

    if len(alive) >= MIN_EMPIRES_FOR_ECONOMIC:
        average = sum(s.networth for s in alive) / len(alive)
        richest = sorted(alive, key=_rank_key)[0]
        if average > 0 and richest.networth >= average * ECONOMIC_MULTIPLIER:
            return VictoryResult(
                richest.empire_id, richest.name, VictoryType.economic,
                f"{richest.name} dominates the economy at {richest.networth / average:.2f}x the average networth",
            )

    if turn >= turn_limit:
        winner = sorted(alive, key=_rank_key)[0]
        return VictoryResult(
            winner.empire_id, winner.name, VictoryType.survival,
            f"{winner.name} leads with networth {winner.networth} at the turn limit",
        )

    return None


@dataclass
class StalemateWarning:
    leader_id: int
    leader_name: str
    leader_networth: float
    turns_remaining: int
    message: str


def check_stalemate(standings: list[EmpireStanding], turn: int, turn_limit: int) -> StalemateWarning | None:
    """Warn when the end is near and no empire is on course for conquest or economic victory."""
    if turn < turn_limit - STALEMATE_WARNING_TURNS or turn >= turn_limit:
        return None
    alive = sorted((s for s in standings if not s.is_eliminated), key=_rank_key)
    if len(alive) < 2:
        return None

    total_sectors = sum(s.sector_count for s in standings)
    if total_sectors <= 0:
        return None
    leader, second = alive[0], alive[1]
    if leader.sector_count / total_sectors >= STALEMATE_SECTOR_SHARE:
        return None
    if leader.networth / (second.networth or 1) >= STALEMATE_NETWORTH_RATIO:
        return None

    return StalemateWarning(
        leader.empire_id,
        leader.name,
        leader.networth,
        turn_limit - turn,
        f"No clear victory path: the game ends at turn {turn_limit} with the highest networth winning",
    )
