"""
Tests for the prediction engine.
"""
import pytest
from datetime import date, datetime

from src.services.prediction import (
    create_basic_model,
    predict,
    predict_cycle_length,
    predict_mood,
    predict_symptoms,
    train,
)

TRAINED_AT = datetime(2024, 5, 1, 12, 0)


def test_train_regular_history(regular_history):
    """Test training on four 28-day cycles."""
    model = train(regular_history, now=TRAINED_AT)

    assert model.cycle_count == 4
    assert not model.is_basic
    assert sum(model.cycle_length_weights) == pytest.approx(1.0, abs=1e-6)
    assert 70 <= model.accuracy <= 95
    assert model.trained_at == TRAINED_AT
    assert set(model.symptom_patterns) == {"cramps", "bloating"}
    assert set(model.mood_patterns) == {"happy"}
    assert all(len(curve) == 35 for curve in model.symptom_patterns.values())
    assert sum(model.symptom_patterns["cramps"]) == pytest.approx(1.0)


def test_train_irregular_history(irregular_history):
    """Test training on varying cycle lengths."""
    model = train(irregular_history, now=TRAINED_AT)

    assert model.cycle_count == 4
    assert sum(model.cycle_length_weights) == pytest.approx(1.0, abs=1e-6)
    assert 70 <= model.accuracy <= 95
    assert model.seasonal_factors[0] == pytest.approx(28.5 / 28)


def test_two_cycles_yield_basic_model(history_builder):
    """Test fewer than three cycles returns the fixed basic model."""
    records = history_builder(date(2024, 1, 1), [28, 28])
    model = train(records, now=TRAINED_AT)

    assert model.accuracy == 65
    assert model.is_basic
    assert model == create_basic_model(TRAINED_AT)


def test_train_without_records():
    assert train([], now=TRAINED_AT).accuracy == 65


def test_retrain_is_full_rebuild(regular_history, history_builder):
    """Test training again only reflects the records it is given."""
    train(regular_history, now=TRAINED_AT)
    other = history_builder(date(2024, 1, 1), [30, 30, 30], symptoms=["acne"])
    model = train(other, now=TRAINED_AT)

    assert set(model.symptom_patterns) == {"acne"}
    assert model.cycle_count == 3


def test_predict_cycle_length_basic_model():
    """Test the basic weights center on 28 days."""
    assert predict_cycle_length(create_basic_model(), date(2024, 1, 10)) == 28


def test_predict_cycle_length_seasonal():
    """Test the quarter's seasonal factor scales the length."""
    model = create_basic_model().model_copy(update={"seasonal_factors": [1.0, 1.0, 1.1, 1.0]})

    assert predict_cycle_length(model, date(2024, 7, 15)) == 31
    assert predict_cycle_length(model, date(2024, 1, 15)) == 28


def test_predict_with_basic_model(config_28):
    """Test predicted dates and confidences from the basic model."""
    result = predict(create_basic_model(), config_28, date(2024, 1, 10))

    assert result.predicted_cycle_length == 28
    assert result.current_day == 10
    assert result.accuracy == 65

    assert result.next_period.date == date(2024, 1, 29)
    assert result.next_period.earliest == date(2024, 1, 27)
    assert result.next_period.latest == date(2024, 1, 31)
    assert result.next_period.confidence == 60

    assert result.ovulation.date == date(2024, 1, 15)
    assert result.ovulation.earliest == date(2024, 1, 14)
    assert result.ovulation.latest == date(2024, 1, 16)
    assert result.ovulation.confidence == 55

    assert result.fertile_window.start == date(2024, 1, 12)
    assert result.fertile_window.end == date(2024, 1, 16)
    assert result.fertile_window.confidence == 70


def test_predict_next_period_not_in_past(config_28):
    """Test the next period is never before the reference date."""
    model = create_basic_model()
    for day in range(1, 60):
        reference = date.fromordinal(date(2024, 1, 1).toordinal() + day)
        result = predict(model, config_28, reference)
        assert result.next_period.date >= reference
        assert 1 <= result.current_day <= 28


def test_predict_symptoms_basic_model():
    """Test symptoms below a 10% peak are not forecast."""
    forecasts = predict_symptoms(create_basic_model(), 28)

    assert [f.name for f in forecasts] == ["bloating", "cramps"]
    assert forecasts[0].probability == 40
    assert forecasts[0].expected_days == list(range(22, 29))
    assert forecasts[1].probability == 30
    assert forecasts[1].expected_days == [1, 2, 3, 4, 5, 27, 28]


def test_predict_symptoms_trained(regular_history):
    """Test trained symptom curves peak late in the cycle."""
    model = train(regular_history, now=TRAINED_AT)
    forecasts = predict_symptoms(model, 28)

    assert {f.name for f in forecasts} == {"cramps", "bloating"}
    for forecast in forecasts:
        assert forecast.probability > 10
        assert 23 in forecast.expected_days
        assert 1 not in forecast.expected_days


def test_predict_mood_basic_model():
    """Test dominant mood per coarse phase."""
    forecasts = predict_mood(create_basic_model(), 28)

    assert [f.phase for f in forecasts] == ["menstrual", "follicular", "ovulatory", "luteal"]
    assert forecasts[0].mood == "happy"
    assert forecasts[0].probability == 30
    assert forecasts[3].mood == "irritated"
    assert forecasts[3].probability == 30


def test_predict_mood_capped(regular_history):
    """Test mood probabilities never exceed 100."""
    model = train(regular_history, now=TRAINED_AT)
    forecasts = predict_mood(model, 28)

    assert all(f.mood == "happy" for f in forecasts)
    assert all(0 <= f.probability <= 100 for f in forecasts)
