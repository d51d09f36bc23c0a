"""
Tests for shared cycle utilities.
"""
from datetime import date

from src.models.cycle import CycleConfig
from src.services.utils import (
    calculate_cycle_day,
    days_between,
    get_current_cycle_start,
    get_most_frequent,
    ovulation_day_of_cycle,
    season_index,
)


def test_cycle_day_wraps_each_cycle():
    """Test day of cycle restarts at 1 every cycle length."""
    anchor = date(2024, 1, 1)
    assert calculate_cycle_day(anchor, date(2024, 1, 28), 28) == 28
    assert calculate_cycle_day(anchor, date(2024, 1, 29), 28) == 1
    assert calculate_cycle_day(anchor, date(2024, 2, 4), 30) == 5


def test_current_cycle_start():
    assert get_current_cycle_start(date(2024, 1, 1), date(2024, 2, 10), 28) == date(2024, 1, 29)
    assert get_current_cycle_start(date(2024, 1, 1), date(2023, 12, 20), 28) == date(2023, 12, 4)


def test_days_between_is_signed():
    assert days_between(date(2024, 1, 10), date(2024, 1, 1)) == -9


def test_ovulation_day_follows_luteal_phase():
    """Test ovulation falls 14 days before the next period."""
    for cycle_length in range(22, 36):
        config = CycleConfig(
            last_period_date=date(2024, 1, 1),
            average_cycle_length=cycle_length,
            average_period_length=5
        )
        assert cycle_length - ovulation_day_of_cycle(config) + 1 == 14


def test_most_frequent():
    assert get_most_frequent(["sad", "happy", "happy"]) == "happy"
    assert get_most_frequent(["calm", "tired"]) == "calm"
    assert get_most_frequent([]) is None


def test_season_index():
    assert season_index(date(2024, 1, 31)) == 0
    assert season_index(date(2024, 6, 1)) == 1
    assert season_index(date(2024, 9, 30)) == 2
    assert season_index(date(2024, 12, 25)) == 3
