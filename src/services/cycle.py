"""
Service module for menstrual cycle calculations.

This module derives the cycle state for a date from the user's cycle
configuration: day of cycle, phase, next period and ovulation dates, the
fertile window and an estimated pregnancy chance. It also builds calendar
data and projections of upcoming cycles.

Everything here is a pure function of its arguments except the pregnancy
chance, which draws a jitter inside a fixed band. Pass a seeded
``random.Random`` as ``rng`` for reproducible output.

Typical usage:
    config = repository.load_cycle_config()
    state = compute_cycle_state(config, date.today())
    print(f"Day {state.day_of_cycle}: {state.phase.value}")
"""
import calendar
import random
from datetime import date, timedelta
from typing import List, Optional, Tuple

from src.models.cycle import CycleConfig, CycleProjection, CycleState, DayInfo
from src.services.constants import (
    FERTILE_CHANCE_BASE,
    FERTILE_CHANCE_FLOOR,
    FERTILE_CHANCE_JITTER,
    FERTILE_CHANCE_STEP,
    FERTILE_WINDOW_DAYS_AFTER,
    FERTILE_WINDOW_DAYS_BEFORE,
    MENSTRUAL_CHANCE_RANGE,
    OVULATION_CHANCE_RANGE,
    POST_MENSTRUAL_CHANCE_LAST_DAY,
    POST_MENSTRUAL_CHANCE_RANGE,
    PRE_MENSTRUAL_CHANCE_RANGE,
)
from src.services.phase import calculate_phase_intensity, classify_phase
from src.services.utils import (
    calculate_cycle_day,
    days_between,
    get_current_cycle_start,
    ovulation_day_of_cycle,
)


def is_in_fertile_window(day_of_cycle: int, config: CycleConfig) -> bool:
    """Check if a day of cycle falls in the fertile window around ovulation."""
    ovulation_day = ovulation_day_of_cycle(config)
    return (
        ovulation_day - FERTILE_WINDOW_DAYS_BEFORE
        <= day_of_cycle
        <= ovulation_day + FERTILE_WINDOW_DAYS_AFTER
    )


def pregnancy_chance_band(day_of_cycle: int, config: CycleConfig) -> Tuple[int, int]:
    """
    Return the inclusive percent range the pregnancy chance is drawn from.

    Bands, first match wins:
        - ovulation day: 30-40
        - rest of the fertile window: max(15, 25 - 3 * distance) plus 0-8
        - period days: 1-5
        - up to day 11: 5-15
        - otherwise: 3-10
    """
    ovulation_day = ovulation_day_of_cycle(config)
    distance = abs(day_of_cycle - ovulation_day)

    if distance == 0:
        return OVULATION_CHANCE_RANGE
    if is_in_fertile_window(day_of_cycle, config):
        base = max(FERTILE_CHANCE_FLOOR, FERTILE_CHANCE_BASE - FERTILE_CHANCE_STEP * distance)
        return base + FERTILE_CHANCE_JITTER[0], base + FERTILE_CHANCE_JITTER[1]
    if day_of_cycle <= config.average_period_length:
        return MENSTRUAL_CHANCE_RANGE
    if day_of_cycle <= POST_MENSTRUAL_CHANCE_LAST_DAY:
        return POST_MENSTRUAL_CHANCE_RANGE
    return PRE_MENSTRUAL_CHANCE_RANGE


def calculate_pregnancy_chance(
    day_of_cycle: int,
    config: CycleConfig,
    rng: Optional[random.Random] = None
) -> int:
    """
    Estimate the pregnancy chance in percent for a day of cycle.

    The value is drawn uniformly from pregnancy_chance_band, so repeated calls
    for the same day may differ unless a seeded rng is supplied.
    """
    rng = rng or random.Random()
    low, high = pregnancy_chance_band(day_of_cycle, config)
    return max(0, min(100, rng.randint(low, high)))


def compute_cycle_state(
    config: CycleConfig,
    reference_date: Optional[date] = None,
    rng: Optional[random.Random] = None
) -> CycleState:
    """
    Derive the cycle state for a reference date.

    Args:
        config: Cycle configuration
        reference_date: Date to analyze, defaults to today
        rng: Random source for the pregnancy chance jitter

    Returns:
        CycleState for the date

    Example:
        >>> config = CycleConfig(last_period_date=date(2024, 1, 1),
        ...                      average_cycle_length=28, average_period_length=5)
        >>> state = compute_cycle_state(config, date(2024, 1, 15))
        >>> state.day_of_cycle, state.phase.value
        (15, 'ovulation')
    """
    if reference_date is None:
        reference_date = date.today()

    cycle_length = config.average_cycle_length
    day_of_cycle = calculate_cycle_day(config.last_period_date, reference_date, cycle_length)

    # Smallest whole number of cycles from the anchor landing on or after the reference date
    elapsed = days_between(config.last_period_date, reference_date)
    cycles_ahead = -(-elapsed // cycle_length)
    next_period_date = config.last_period_date + timedelta(days=cycles_ahead * cycle_length)

    ovulation_day = ovulation_day_of_cycle(config)
    cycle_start = get_current_cycle_start(config.last_period_date, reference_date, cycle_length)
    ovulation_date = cycle_start + timedelta(days=ovulation_day - 1)
    if ovulation_date < reference_date:
        ovulation_date += timedelta(days=cycle_length)

    return CycleState(
        day_of_cycle=day_of_cycle,
        phase=classify_phase(day_of_cycle, config),
        next_period_date=next_period_date,
        ovulation_date=ovulation_date,
        days_until_next_period=max(0, days_between(reference_date, next_period_date)),
        days_until_ovulation=max(0, days_between(reference_date, ovulation_date)),
        pregnancy_chance=calculate_pregnancy_chance(day_of_cycle, config, rng),
        in_fertile_window=is_in_fertile_window(day_of_cycle, config),
    )


def get_day_info(
    target_date: date,
    config: CycleConfig,
    current_month: date,
    today: Optional[date] = None,
    rng: Optional[random.Random] = None
) -> DayInfo:
    """
    Build calendar cell data for a date.

    Args:
        target_date: Date of the cell
        config: Cycle configuration
        current_month: Any date in the month being displayed
        today: Date considered "today", defaults to date.today()
        rng: Random source for the pregnancy chance jitter
    """
    if today is None:
        today = date.today()

    day_of_cycle = calculate_cycle_day(
        config.last_period_date, target_date, config.average_cycle_length
    )
    phase = classify_phase(day_of_cycle, config)

    return DayInfo(
        date=target_date,
        phase=phase,
        pregnancy_chance=calculate_pregnancy_chance(day_of_cycle, config, rng),
        is_today=target_date == today,
        is_current_month=(target_date.year, target_date.month) == (current_month.year, current_month.month),
        day_of_cycle=day_of_cycle,
        phase_intensity=calculate_phase_intensity(day_of_cycle, phase, config),
    )


def get_month_days(
    config: CycleConfig,
    month: date,
    today: Optional[date] = None,
    rng: Optional[random.Random] = None
) -> List[DayInfo]:
    """Build calendar data for every day of the month containing ``month``."""
    days_in_month = calendar.monthrange(month.year, month.month)[1]
    first_day = month.replace(day=1)
    return [
        get_day_info(first_day + timedelta(days=offset), config, month, today, rng)
        for offset in range(days_in_month)
    ]


def project_cycles(
    config: CycleConfig,
    reference_date: Optional[date] = None,
    count: int = 3
) -> List[CycleProjection]:
    """
    Project the next ``count`` cycles from the configuration.

    The first projection starts at the next period on or after the
    reference date.
    """
    if reference_date is None:
        reference_date = date.today()

    cycle_length = config.average_cycle_length
    ovulation_offset = ovulation_day_of_cycle(config) - 1
    first_start = compute_cycle_state(config, reference_date, random.Random(0)).next_period_date

    projections = []
    for index in range(count):
        period_start = first_start + timedelta(days=index * cycle_length)
        ovulation = period_start + timedelta(days=ovulation_offset)
        projections.append(CycleProjection(
            cycle_number=index + 1,
            period_start=period_start,
            period_end=period_start + timedelta(days=config.average_period_length - 1),
            ovulation=ovulation,
            fertile_window_start=ovulation - timedelta(days=FERTILE_WINDOW_DAYS_BEFORE),
            fertile_window_end=ovulation + timedelta(days=FERTILE_WINDOW_DAYS_AFTER),
        ))
    return projections
