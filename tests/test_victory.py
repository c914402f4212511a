"""Tests for defeat and victory evaluation.

Covers:
- Defeat by elimination and bankruptcy
- Victory order: last standing, conquest, economic, survival
- Tie-breaking at the turn limit
- Stalemate warning near the turn limit
- Networth
"""

from dominion.models.empire import DefeatType
from dominion.models.game import VictoryType
from dominion.services.networth import calculate_networth
from dominion.services.victory_evaluator import EmpireStanding, check_defeat, check_stalemate, check_victory


def standing(empire_id: int, sectors: int = 10, networth: float = 100.0, **kwargs) -> EmpireStanding:
    return EmpireStanding(
        empire_id=empire_id,
        name=f"Empire {empire_id}",
        sector_count=sectors,
        credits=kwargs.pop("credits", 1000),
        net_credits=kwargs.pop("net_credits", 100),
        networth=networth,
        **kwargs,
    )


# ---------------------------------------------------------------------------
# Defeat
# ---------------------------------------------------------------------------

class TestDefeat:
    def test_no_sectors_is_elimination_even_when_rich(self):
        assert check_defeat(standing(1, sectors=0, credits=1_000_000)) == DefeatType.elimination

    def test_bankruptcy_needs_empty_treasury_and_losses(self):
        assert check_defeat(standing(1, credits=0, net_credits=-5)) == DefeatType.bankruptcy

    def test_empty_treasury_breaking_even_survives(self):
        assert check_defeat(standing(1, credits=0, net_credits=0)) is None

    def test_losses_with_credits_left_survive(self):
        assert check_defeat(standing(1, credits=10, net_credits=-5)) is None


# ---------------------------------------------------------------------------
# Victory
# ---------------------------------------------------------------------------

class TestVictory:
    def test_last_empire_standing(self):
        result = check_victory([standing(1), standing(2, is_eliminated=True)], turn=5, turn_limit=200)
        assert result.victory_type == VictoryType.elimination
        assert result.empire_id == 1

    def test_conquest_at_sixty_percent(self):
        result = check_victory([standing(1, sectors=60), standing(2, sectors=40)], turn=5, turn_limit=200)
        assert result.victory_type == VictoryType.conquest
        assert result.empire_id == 1

    def test_no_conquest_below_threshold(self):
        result = check_victory([standing(1, sectors=59), standing(2, sectors=41)], turn=5, turn_limit=200)
        assert result is None

    def test_economic_victory(self):
        standings = [standing(1, networth=300), standing(2, networth=100), standing(3, networth=100)]
        result = check_victory(standings, turn=5, turn_limit=200)
        assert result.victory_type == VictoryType.economic
        assert result.empire_id == 1

    def test_survival_at_turn_limit(self):
        standings = [standing(1, networth=120), standing(2, networth=100)]
        result = check_victory(standings, turn=200, turn_limit=200)
        assert result.victory_type == VictoryType.survival
        assert result.empire_id == 1

    def test_survival_tie_broken_by_sectors(self):
        standings = [standing(1, sectors=10), standing(2, sectors=12)]
        result = check_victory(standings, turn=200, turn_limit=200)
        assert result.empire_id == 2

    def test_survival_full_tie_broken_by_id(self):
        standings = [standing(4), standing(3)]
        result = check_victory(standings, turn=200, turn_limit=200)
        assert result.empire_id == 3

    def test_no_victory_before_limit(self):
        assert check_victory([standing(1), standing(2)], turn=199, turn_limit=200) is None

    def test_single_empire_game_only_ends_at_limit(self):
        assert check_victory([standing(1)], turn=10, turn_limit=200) is None
        result = check_victory([standing(1)], turn=200, turn_limit=200)
        assert result.victory_type == VictoryType.survival

    def test_everyone_eliminated_has_no_winner(self):
        standings = [standing(1, is_eliminated=True), standing(2, is_eliminated=True)]
        assert check_victory(standings, turn=200, turn_limit=200) is None


class TestStalemateWarning:
    def test_quiet_before_the_last_twenty_turns(self):
        assert check_stalemate([standing(1), standing(2)], turn=179, turn_limit=200) is None

    def test_even_race_is_warned(self):
        warning = check_stalemate([standing(1), standing(2), standing(3)], turn=180, turn_limit=200)
        assert warning is not None
        assert warning.leader_id == 1
        assert warning.turns_remaining == 20
        assert "turn 200" in warning.message

    def test_leader_near_conquest_is_not_a_stalemate(self):
        standings = [standing(1, sectors=40), standing(2, sectors=30), standing(3, sectors=30)]
        assert check_stalemate(standings, turn=190, turn_limit=200) is None

    def test_clear_networth_lead_is_not_a_stalemate(self):
        standings = [standing(1, networth=120.0), standing(2), standing(3)]
        assert check_stalemate(standings, turn=190, turn_limit=200) is None

    def test_leader_picked_by_networth(self):
        standings = [standing(1, networth=100.0), standing(2, networth=110.0), standing(3)]
        assert check_stalemate(standings, turn=185, turn_limit=200).leader_id == 2

    def test_needs_two_live_empires(self):
        standings = [standing(1), standing(2, is_eliminated=True)]
        assert check_stalemate(standings, turn=190, turn_limit=200) is None

    def test_silent_on_the_final_turn(self):
        assert check_stalemate([standing(1), standing(2)], turn=200, turn_limit=200) is None


class TestNetworth:
    def test_sectors_dominate(self):
        assert calculate_networth(5, {"soldiers": 100}) == 50.05

    def test_unknown_units_ignored(self):
        assert calculate_networth(1, {"dragons": 10}) == 10
