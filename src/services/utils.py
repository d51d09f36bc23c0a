"""
Shared utility functions for cycle-related services.

These utilities are used across multiple service modules to handle common
operations like date arithmetic, cycle day calculation and frequency counts.
"""
import calendar
from collections import Counter
from datetime import date, timedelta
from typing import Iterable, Optional

from src.models.cycle import CycleConfig
from src.services.constants import LUTEAL_PHASE_DAYS


def days_between(start: date, end: date) -> int:
    """Signed number of days from start to end."""
    return (end - start).days


def calculate_cycle_day(last_period_date: date, target_date: date, cycle_length: int) -> int:
    """
    Calculate the 1-based day of cycle for a date.

    Dates before the last period wrap into earlier cycles, so the result is
    always in [1, cycle_length].

    Example:
        >>> calculate_cycle_day(date(2024, 1, 1), date(2024, 1, 29), 28)
        1
    """
    return days_between(last_period_date, target_date) % cycle_length + 1


def get_current_cycle_start(last_period_date: date, target_date: date, cycle_length: int) -> date:
    """Get the start date of the cycle containing target_date."""
    day_of_cycle = calculate_cycle_day(last_period_date, target_date, cycle_length)
    return target_date - timedelta(days=day_of_cycle - 1)


def ovulation_day_of_cycle(config: CycleConfig) -> int:
    """
    Return the 1-based day of cycle on which ovulation is expected.

    Ovulation falls LUTEAL_PHASE_DAYS before the next period, i.e.
    ``cycle_length - 14`` days after the period start, which is day
    ``cycle_length - 13`` of the cycle. The result never falls inside the
    configured period.

    Example:
        >>> ovulation_day_of_cycle(CycleConfig(last_period_date=date(2024, 1, 1),
        ...                                    average_cycle_length=28,
        ...                                    average_period_length=5))
        15
    """
    day = config.average_cycle_length - LUTEAL_PHASE_DAYS + 1
    return max(day, config.average_period_length + 1)


def add_months(value: date, months: int) -> date:
    """Add calendar months, clamping the day to the target month's length."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def get_most_frequent(values: Iterable[str]) -> Optional[str]:
    """
    Return the most frequent value, first-seen wins on ties.

    Returns:
        The most common value or None for an empty input
    """
    counts = Counter(values)
    if not counts:
        return None
    return counts.most_common(1)[0][0]


def season_index(value: date) -> int:
    """Map a date to a quarter bucket 0-3 (Jan-Mar, Apr-Jun, Jul-Sep, Oct-Dec)."""
    return (value.month - 1) // 3
