"""
Service module for classifying menstrual cycle phases.

Typical usage:
    >>> phase = classify_phase(day_of_cycle, config)
    >>> intensity = calculate_phase_intensity(day_of_cycle, phase, config)
"""
from src.models.cycle import CycleConfig, PhaseLabel
from src.services.constants import (
    DEFAULT_PHASE_INTENSITY,
    FERTILE_PHASE_RADIUS,
    MIN_PHASE_INTENSITY,
    PHASE_DESCRIPTIONS,
)
from src.services.utils import ovulation_day_of_cycle


def classify_phase(day_of_cycle: int, config: CycleConfig) -> PhaseLabel:
    """
    Map a day of cycle to its phase label.

    Rules are evaluated in order; the post-menstrual and fertile ranges may
    touch around the ovulation day on short cycles and the first matching
    rule wins.

    Args:
        day_of_cycle: 1-based day in the cycle
        config: Cycle configuration

    Returns:
        Phase label for the day

    Example:
        >>> classify_phase(1, config)
        <PhaseLabel.MENSTRUAL: 'menstrual'>
    """
    period_length = config.average_period_length
    ovulation_day = ovulation_day_of_cycle(config)

    if 1 <= day_of_cycle <= period_length:
        return PhaseLabel.MENSTRUAL
    if period_length < day_of_cycle < ovulation_day - FERTILE_PHASE_RADIUS:
        return PhaseLabel.POST_MENSTRUAL
    if day_of_cycle == ovulation_day:
        return PhaseLabel.OVULATION
    if ovulation_day - FERTILE_PHASE_RADIUS <= day_of_cycle <= ovulation_day + FERTILE_PHASE_RADIUS:
        return PhaseLabel.FERTILE
    return PhaseLabel.PRE_MENSTRUAL


def calculate_phase_intensity(day_of_cycle: int, phase: PhaseLabel, config: CycleConfig) -> float:
    """
    Calculate how deep into its phase a day is, for calendar gradients.

    Returns 1.0 at the phase peak, falling linearly to a floor of 0.3 at the
    phase edges.
    """
    cycle_length = config.average_cycle_length
    period_length = config.average_period_length
    ovulation_day = ovulation_day_of_cycle(config)

    if phase == PhaseLabel.MENSTRUAL:
        start, end = 1, period_length
        peak = (start + end + 1) // 2
    elif phase == PhaseLabel.POST_MENSTRUAL:
        start = period_length + 1
        end = max(start, ovulation_day - FERTILE_PHASE_RADIUS - 1)
        peak = (start + end) // 2
    elif phase in (PhaseLabel.FERTILE, PhaseLabel.OVULATION):
        start = ovulation_day - FERTILE_PHASE_RADIUS
        end = ovulation_day + FERTILE_PHASE_RADIUS
        peak = ovulation_day
    elif phase == PhaseLabel.PRE_MENSTRUAL:
        start = ovulation_day + FERTILE_PHASE_RADIUS + 1
        end = max(start, cycle_length)
        peak = max(start, cycle_length - 5)
    else:
        return DEFAULT_PHASE_INTENSITY

    max_distance = max(peak - start, end - peak)
    if max_distance <= 0:
        return 1.0

    distance = abs(day_of_cycle - peak)
    intensity = max(MIN_PHASE_INTENSITY, 1 - (distance / max_distance) * (1 - MIN_PHASE_INTENSITY))
    return round(intensity, 2)


def get_phase_description(phase: PhaseLabel) -> str:
    """Return a short human-readable description of a phase."""
    return PHASE_DESCRIPTIONS[phase]
