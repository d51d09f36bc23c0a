"""
Tests for cycle statistics.
"""
import pytest
from datetime import date

from src.models.record import DailyRecord, HistoricalCycle
from src.services.statistics import (
    calculate_cycle_statistics,
    calculate_mood_distribution,
    calculate_model_accuracy,
    calculate_seasonal_factors,
    calculate_symptom_frequencies,
    calculate_weights,
    summarize_cycles,
)


def make_cycles(starts_and_lengths):
    return [
        HistoricalCycle(start_date=start, length=length, period_length=5)
        for start, length in starts_and_lengths
    ]


def test_weights_sum_to_one():
    """Test weights are normalized."""
    weights = calculate_weights([26, 28, 30, 29])

    assert len(weights) == 5
    assert sum(weights) == pytest.approx(1.0, abs=1e-6)
    assert weights[2] == max(weights)
    assert weights[0] == pytest.approx(weights[4])


def test_weights_for_identical_lengths():
    """Test all weight goes to the center when lengths do not vary."""
    assert calculate_weights([28, 28, 28]) == [0.0, 0.0, 1.0, 0.0, 0.0]


def test_weights_require_data():
    with pytest.raises(ValueError):
        calculate_weights([])


def test_seasonal_factors():
    """Test per-quarter factors relative to 28 days."""
    cycles = make_cycles([
        (date(2024, 1, 1), 28),
        (date(2024, 2, 1), 30),
        (date(2024, 7, 1), 35),
    ])
    factors = calculate_seasonal_factors(cycles)

    assert factors[0] == pytest.approx(29 / 28)
    assert factors[1] == 1.0
    assert factors[2] == pytest.approx(35 / 28)
    assert factors[3] == 1.0


def test_accuracy_with_few_cycles():
    """Test fewer than three cycles score the basic accuracy."""
    cycles = make_cycles([(date(2024, 1, 1), 28), (date(2024, 1, 29), 28)])
    assert calculate_model_accuracy(cycles) == 65


def test_accuracy_bounds():
    """Test accuracy stays within 70 and 95."""
    regular = make_cycles([(date(2024, 1, 1), 28)] * 3)
    erratic = make_cycles([
        (date(2024, 1, 1), 21),
        (date(2024, 2, 1), 40),
        (date(2024, 3, 1), 21),
    ])

    assert calculate_model_accuracy(regular) == 95
    assert 70 <= calculate_model_accuracy(erratic) <= 95
    assert calculate_model_accuracy(erratic) < calculate_model_accuracy(regular)


def test_cycle_statistics():
    """Test summary statistics and regularity."""
    stats = calculate_cycle_statistics(make_cycles([
        (date(2024, 1, 1), 26),
        (date(2024, 1, 27), 28),
        (date(2024, 2, 24), 30),
    ]))

    assert stats.average_length == 28.0
    assert stats.shortest_cycle == 26
    assert stats.longest_cycle == 30
    assert stats.variation == pytest.approx(1.63, abs=0.01)
    assert stats.regularity == "regular"
    assert stats.cycle_count == 3


def test_irregular_statistics():
    stats = calculate_cycle_statistics(make_cycles([
        (date(2024, 1, 1), 24),
        (date(2024, 1, 25), 33),
    ]))
    assert stats.regularity == "irregular"


def test_statistics_require_cycles():
    with pytest.raises(ValueError):
        calculate_cycle_statistics([])


def test_symptom_frequencies_and_trends():
    """Test counts, ordering and the recent-versus-older trend."""
    records = [
        DailyRecord(date=date(2024, 5, 1), symptoms=["headache", "cramps"]),
        DailyRecord(date=date(2024, 5, 10), symptoms=["headache", " "]),
        DailyRecord(date=date(2024, 6, 10), symptoms=["headache"]),
        DailyRecord(date=date(2024, 6, 15), symptoms=["cramps"]),
        DailyRecord(date=date(2024, 6, 25), symptoms=["cramps"]),
        DailyRecord(date=date(2024, 6, 28), symptoms=["cramps"]),
        DailyRecord(date=date(2024, 6, 29), symptoms=["fatigue"]),
    ]

    frequencies = calculate_symptom_frequencies(records, today=date(2024, 6, 30))

    assert [(f.name, f.count, f.trend) for f in frequencies] == [
        ("cramps", 4, 200),
        ("headache", 3, -50),
        ("fatigue", 1, 0),
    ]


def test_symptom_window_excludes_its_first_day():
    records = [DailyRecord(date=date(2024, 5, 31), symptoms=["acne"])]

    frequencies = calculate_symptom_frequencies(records, today=date(2024, 6, 30))

    assert frequencies[0].trend == -100


def test_symptom_frequencies_keep_top_eight():
    records = [
        DailyRecord(date=date(2024, 6, day), symptoms=[f"symptom-{i}" for i in range(day)])
        for day in range(1, 11)
    ]

    frequencies = calculate_symptom_frequencies(records, today=date(2024, 6, 30))

    assert len(frequencies) == 8
    assert frequencies[0].name == "symptom-0"
    assert frequencies[0].count == 10
    assert [f.count for f in frequencies] == sorted((f.count for f in frequencies), reverse=True)


def test_mood_distribution():
    """Test mood shares are rounded percentages, most frequent first."""
    moods = ["happy", "anxious", "happy", "", "sad", "happy", "anxious"]
    records = [
        DailyRecord(date=date(2024, 6, 1 + i), mood=mood)
        for i, mood in enumerate(moods)
    ]

    distribution = calculate_mood_distribution(records)

    assert [(m.mood, m.count, m.percentage) for m in distribution] == [
        ("happy", 3, 50),
        ("anxious", 2, 33),
        ("sad", 1, 17),
    ]


def test_mood_distribution_without_moods():
    assert calculate_mood_distribution([DailyRecord(date=date(2024, 6, 1))]) == []


def test_summarize_cycles_newest_first():
    cycles = [
        HistoricalCycle(
            start_date=date(2024, month, 1),
            length=28 + month,
            period_length=5,
            symptoms=["cramps"] * month,
            dominant_mood="calm",
        )
        for month in range(1, 9)
    ]

    summaries = summarize_cycles(cycles)

    assert len(summaries) == 6
    assert summaries[0].start_date == date(2024, 8, 1)
    assert summaries[0].length == 36
    assert summaries[0].symptom_count == 8
    assert summaries[-1].start_date == date(2024, 3, 1)
    assert summaries[-1].dominant_mood == "calm"
    assert summarize_cycles(cycles, limit=0) == []
