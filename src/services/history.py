"""
Service module for reconstructing historical cycles from daily records.

Typical usage:
    records = repository.load_daily_records()
    cycles = extract_historical_cycles(records)
    for cycle in cycles:
        print(f"{cycle.start_date}: {cycle.length} days")
"""
from typing import List

from aws_lambda_powertools import Logger

from src.models.record import DailyRecord, HistoricalCycle
from src.services.constants import (
    DEFAULT_MOOD,
    MAX_HISTORICAL_CYCLE_LENGTH,
    MIN_HISTORICAL_CYCLE_LENGTH,
)
from src.services.utils import days_between, get_most_frequent

logger = Logger()


def get_flow_records(records: List[DailyRecord]) -> List[DailyRecord]:
    """Return records with logged menstrual flow, oldest first."""
    return sorted((r for r in records if r.has_flow), key=lambda r: r.date)


def extract_historical_cycles(records: List[DailyRecord]) -> List[HistoricalCycle]:
    """
    Build historical cycles from consecutive flow markers.

    Every record with logged flow is a candidate cycle start; a cycle spans
    from one marker to the next. Spans outside 21-40 days are discarded as
    noise (missed logging, consecutive period days).

    Args:
        records: Daily records in any order

    Returns:
        Historical cycles ordered by start date
    """
    markers = get_flow_records(records)
    cycles = []
    discarded = 0

    for current, following in zip(markers, markers[1:]):
        length = days_between(current.date, following.date)
        if not MIN_HISTORICAL_CYCLE_LENGTH <= length <= MAX_HISTORICAL_CYCLE_LENGTH:
            discarded += 1
            continue

        cycle_records = [r for r in records if current.date <= r.date < following.date]
        symptoms = [
            symptom
            for r in cycle_records
            for symptom in r.symptoms
            if symptom and symptom.strip()
        ]
        moods = [r.mood for r in cycle_records if r.mood and r.mood.strip()]

        cycles.append(HistoricalCycle(
            start_date=current.date,
            length=length,
            period_length=sum(1 for r in cycle_records if r.has_flow),
            symptoms=symptoms,
            dominant_mood=get_most_frequent(moods) or DEFAULT_MOOD,
        ))

    logger.debug(
        "Extracted historical cycles",
        extra={"markers": len(markers), "cycles": len(cycles), "discarded_spans": discarded}
    )
    return cycles
