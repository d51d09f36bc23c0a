"""
Statistics calculation service for historical cycle data.

This module provides the small statistics the prediction engine is built on:
cycle length weighting, seasonal factors and the model accuracy score. It
also computes the summaries shown on the analytics screen.
"""
import math
from collections import Counter
from datetime import date, timedelta
from statistics import mean, pstdev
from typing import List, Optional

from src.models.record import (
    CycleStatistics,
    CycleSummary,
    DailyRecord,
    HistoricalCycle,
    MoodShare,
    SymptomFrequency,
)
from src.services.constants import (
    ANALYTICS_RECENT_DAYS,
    BASE_CYCLE_LENGTH,
    BASIC_MODEL_ACCURACY,
    IRREGULAR_VARIATION_DAYS,
    MAX_ACCURACY,
    MIN_TRAINING_CYCLES,
    RECENT_CYCLE_SUMMARIES,
    TOP_SYMPTOMS_LIMIT,
)
from src.services.utils import season_index


def calculate_weights(lengths: List[int]) -> List[float]:
    """
    Build a 5-point Gaussian weight vector over cycle length offsets.

    The points sit at mean + k * stdev for k in -2..2 and are weighted by
    exp(-k^2 / 2), normalized to sum to 1. When every length is identical
    the points coincide and all weight goes to the center.

    Args:
        lengths: Historical cycle lengths

    Returns:
        Five weights summing to 1

    Raises:
        ValueError: If no lengths are provided
    """
    if not lengths:
        raise ValueError("No cycle lengths provided")

    if pstdev(lengths) == 0:
        return [0.0, 0.0, 1.0, 0.0, 0.0]

    weights = [math.exp(-(k ** 2) / 2) for k in range(-2, 3)]
    total = sum(weights)
    return [w / total for w in weights]


def calculate_seasonal_factors(cycles: List[HistoricalCycle]) -> List[float]:
    """
    Average cycle length per start quarter, relative to a 28-day cycle.

    Quarters without data default to 1.0.
    """
    totals = [0, 0, 0, 0]
    counts = [0, 0, 0, 0]

    for cycle in cycles:
        quarter = season_index(cycle.start_date)
        totals[quarter] += cycle.length
        counts[quarter] += 1

    return [
        total / count / BASE_CYCLE_LENGTH if count else 1.0
        for total, count in zip(totals, counts)
    ]


def calculate_model_accuracy(cycles: List[HistoricalCycle]) -> int:
    """
    Score model accuracy from the consistency and amount of data.

    ``min(95, round(70 + 25 * consistency + min(10, cycle_count)))`` where
    ``consistency = max(0, 1 - stdev / mean)``. This is a heuristic, not a
    calibrated measure.
    """
    if len(cycles) < MIN_TRAINING_CYCLES:
        return BASIC_MODEL_ACCURACY

    lengths = [c.length for c in cycles]
    average = mean(lengths)
    consistency = max(0.0, 1 - pstdev(lengths) / average)
    data_bonus = min(10, len(cycles))

    return min(MAX_ACCURACY, round(70 + consistency * 25 + data_bonus))


def calculate_cycle_statistics(cycles: List[HistoricalCycle]) -> CycleStatistics:
    """
    Calculate summary statistics over historical cycle lengths.

    Args:
        cycles: Historical cycles

    Returns:
        CycleStatistics; a cycle is irregular when its lengths vary by more
        than 7 days between shortest and longest

    Raises:
        ValueError: If no cycles are provided
    """
    if not cycles:
        raise ValueError("No historical cycles provided")

    lengths = [c.length for c in cycles]
    shortest, longest = min(lengths), max(lengths)

    return CycleStatistics(
        average_length=round(mean(lengths), 1),
        shortest_cycle=shortest,
        longest_cycle=longest,
        variation=round(pstdev(lengths), 2),
        regularity="irregular" if longest - shortest > IRREGULAR_VARIATION_DAYS else "regular",
        cycle_count=len(cycles),
    )


def calculate_symptom_frequencies(
    records: List[DailyRecord],
    today: Optional[date] = None,
    recent_days: int = ANALYTICS_RECENT_DAYS,
    limit: int = TOP_SYMPTOMS_LIMIT
) -> List[SymptomFrequency]:
    """
    Count logged symptoms and how their frequency is moving.

    A symptom logged after ``today - recent_days`` is recent; the trend is
    the percent change of recent against older occurrences, or 0 when there
    are no older ones.

    Args:
        records: Daily records in any order
        today: Reference date, defaults to today
        recent_days: Size of the recent window in days
        limit: Maximum number of symptoms returned

    Returns:
        The most frequent symptoms, highest count first. Ties keep the
        order in which the symptoms were first logged.
    """
    if today is None:
        today = date.today()
    window_start = today - timedelta(days=recent_days)

    totals = Counter()
    recent = Counter()
    for record in sorted(records, key=lambda r: r.date):
        for symptom in record.symptoms:
            if not symptom or not symptom.strip():
                continue
            totals[symptom] += 1
            if record.date > window_start:
                recent[symptom] += 1

    frequencies = []
    for name, count in totals.most_common(limit):
        older = count - recent[name]
        trend = round((recent[name] - older) / older * 100) if older > 0 else 0
        frequencies.append(SymptomFrequency(name=name, count=count, trend=trend))
    return frequencies


def calculate_mood_distribution(records: List[DailyRecord]) -> List[MoodShare]:
    """Share of each logged mood, most frequent first."""
    moods = Counter(
        r.mood for r in sorted(records, key=lambda r: r.date)
        if r.mood and r.mood.strip()
    )
    total = sum(moods.values())

    return [
        MoodShare(mood=mood, count=count, percentage=round(count / total * 100))
        for mood, count in moods.most_common()
    ]


def summarize_cycles(
    cycles: List[HistoricalCycle],
    limit: int = RECENT_CYCLE_SUMMARIES
) -> List[CycleSummary]:
    """
    Summarize the most recent cycles, newest first.

    Args:
        cycles: Historical cycles ordered by start date
        limit: Maximum number of summaries

    Returns:
        One CycleSummary per cycle with its length, the number of symptoms
        logged during it and its dominant mood
    """
    if limit <= 0:
        return []

    return [
        CycleSummary(
            start_date=cycle.start_date,
            length=cycle.length,
            symptom_count=len(cycle.symptoms),
            dominant_mood=cycle.dominant_mood,
        )
        for cycle in reversed(cycles[-limit:])
    ]
