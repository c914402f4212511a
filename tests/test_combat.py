"""Tests for combat resolution."""

import random

import pytest

from dominion.services.combat_resolver import (
    ATTACKER_VICTORY,
    DEFENDER_VICTORY,
    STALEMATE,
    calculate_loss_rate,
    calculate_power,
    calculate_win_chance,
    resolve_battle,
)


class FixedRandom(random.Random):
    """random() always returns `roll`; uniform() returns the midpoint."""

    def __init__(self, roll: float):
        super().__init__(0)
        self.roll = roll

    def random(self) -> float:
        return self.roll

    def uniform(self, a: float, b: float) -> float:
        return (a + b) / 2


# ---------------------------------------------------------------------------
# Power and odds
# ---------------------------------------------------------------------------

class TestPower:
    def test_power_sums_unit_strength(self):
        assert calculate_power({"soldiers": 10, "fighters": 2}) == 16

    def test_defender_bonus(self):
        assert calculate_power({"soldiers": 10, "fighters": 2}, is_defender=True) == pytest.approx(17.6)

    def test_even_fight(self):
        assert calculate_win_chance(100, 100) == pytest.approx(0.5)

    def test_win_chance_clamped(self):
        assert calculate_win_chance(1_000_000, 1) == 0.95
        assert calculate_win_chance(1, 1_000_000) == 0.05

    def test_no_attacking_power_never_wins(self):
        assert calculate_win_chance(0, 100) == 0.0

    def test_undefended_always_falls(self):
        assert calculate_win_chance(10, 0) == 1.0

    def test_loss_rate_capped(self):
        assert calculate_loss_rate(1000, 1) == 0.40
        assert calculate_loss_rate(100, 100) == pytest.approx(0.15)


# ---------------------------------------------------------------------------
# Battles
# ---------------------------------------------------------------------------

class TestResolveBattle:
    def test_stalemate_without_power(self):
        result = resolve_battle({"covert_agents": 5}, {"covert_agents": 5}, {}, 10, random.Random(1))
        assert result.outcome == STALEMATE
        assert result.sectors_captured == 0
        assert result.attacker_casualties == {}

    def test_attacker_victory_captures_sectors(self):
        forces = {"heavy_cruisers": 100}
        result = resolve_battle(forces, forces, {"soldiers": 100}, 20, FixedRandom(0.0))
        assert result.outcome == ATTACKER_VICTORY
        assert result.attacker_won
        # 10% of 20 sectors
        assert result.sectors_captured == 2

    def test_captures_at_least_one_sector(self):
        forces = {"heavy_cruisers": 100}
        result = resolve_battle(forces, forces, {"soldiers": 100}, 3, FixedRandom(0.0))
        assert result.sectors_captured == 1

    def test_defender_victory_captures_nothing(self):
        forces = {"soldiers": 10}
        result = resolve_battle(forces, forces, {"heavy_cruisers": 100}, 20, FixedRandom(0.99))
        assert result.outcome == DEFENDER_VICTORY
        assert result.sectors_captured == 0

    def test_casualties_come_from_committed_units(self):
        committed = {"soldiers": 150}
        effective = {"soldiers": 100}
        result = resolve_battle(committed, effective, {"soldiers": 100}, 10, FixedRandom(0.99))
        assert set(result.attacker_casualties) == {"soldiers"}
        assert 0 < result.attacker_casualties["soldiers"] <= 150
        # Strength comes from the effective forces
        assert result.attacker_power == 100

    def test_casualties_never_exceed_forces(self):
        rng = random.Random(42)
        for _ in range(50):
            committed = {"soldiers": 3, "fighters": 1}
            defender = {"soldiers": 1000}
            result = resolve_battle(committed, committed, defender, 5, rng)
            for unit, lost in result.attacker_casualties.items():
                assert 0 <= lost <= committed[unit]
            for unit, lost in result.defender_casualties.items():
                assert 0 <= lost <= defender[unit]

    def test_same_seed_same_battle(self):
        args = ({"fighters": 40}, {"fighters": 26}, {"soldiers": 90, "fighters": 10}, 12)
        assert resolve_battle(*args, random.Random(7)) == resolve_battle(*args, random.Random(7))
