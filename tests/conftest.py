"""
Pytest configuration and shared fixtures.
"""
import os

os.environ.setdefault("POWERTOOLS_TRACE_DISABLED", "1")
os.environ.setdefault("POWERTOOLS_SERVICE_NAME", "cycle_tracker")
os.environ.setdefault("TRACKER_TABLE_NAME", "TrackerTable-test")
os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")

import random
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import List

import pytest

from src.models.cycle import CycleConfig
from src.models.record import DailyRecord, FlowLevel
from src.utils.storage import InMemoryKeyValueStore


class FakeClock:
    """Controllable epoch-seconds clock."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@dataclass
class LambdaContext:
    function_name: str = "test"
    memory_limit_in_mb: int = 128
    invoked_function_arn: str = "arn:aws:lambda:us-east-1:123456789012:function:test"
    aws_request_id: str = "52fdfc07-2182-154f-163f-5f0f9a621d72"


@pytest.fixture
def config_28() -> CycleConfig:
    """28-day cycle, 5-day period, starting 2024-01-01."""
    return CycleConfig(
        last_period_date=date(2024, 1, 1),
        average_cycle_length=28,
        average_period_length=5
    )


@pytest.fixture
def store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(42)


@pytest.fixture
def lambda_context() -> LambdaContext:
    return LambdaContext()


def build_history(
    start: date,
    lengths: List[int],
    symptoms: List[str] = None,
    mood: str = "happy"
) -> List[DailyRecord]:
    """
    Build daily records with one flow marker at day 1 of each cycle.

    A trailing marker closes the last cycle. Day 20 of each cycle carries
    the given symptoms and mood.
    """
    records = []
    cycle_start = start
    for length in lengths:
        records.append(DailyRecord(date=cycle_start, flow=FlowLevel.MODERATE, mood=mood))
        records.append(DailyRecord(
            date=cycle_start + timedelta(days=19),
            flow=FlowLevel.NONE,
            symptoms=list(symptoms or []),
            mood=mood
        ))
        cycle_start += timedelta(days=length)
    records.append(DailyRecord(date=cycle_start, flow=FlowLevel.HEAVY))
    return records


@pytest.fixture
def regular_history() -> List[DailyRecord]:
    """Four 28-day cycles starting 2024-01-01."""
    return build_history(date(2024, 1, 1), [28, 28, 28, 28], symptoms=["cramps", "bloating"])


@pytest.fixture
def irregular_history() -> List[DailyRecord]:
    """Cycles of 24, 31, 26 and 33 days."""
    return build_history(date(2024, 1, 1), [24, 31, 26, 33], symptoms=["headache"], mood="irritated")


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 1, 10, 8, 0)


@pytest.fixture
def history_builder():
    """Expose build_history to tests that need custom cycle lengths."""
    return build_history
