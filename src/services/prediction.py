"""
Service module for cycle predictions.

The prediction engine trains a lightweight statistical model from the user's
daily records (cycle length weighting, symptom and mood curves over a
35-day cycle, quarterly seasonal factors) and uses it to forecast the next
period, ovulation, the fertile window, likely symptoms and mood per phase.

Training is always a full rebuild. Fewer than three usable cycles yield a
fixed basic model.

Typical usage:
    model = train(repository.load_daily_records())
    repository.save_prediction_model(model)
    result = predict(model, repository.load_cycle_config())
"""
import math
from datetime import date, datetime, timedelta, timezone
from typing import Dict, List, Optional

from aws_lambda_powertools import Logger

from src.models.cycle import CycleConfig
from src.models.prediction import (
    PATTERN_DAYS,
    DatePrediction,
    FertileWindowPrediction,
    MoodForecast,
    PredictionModel,
    PredictionResult,
    SymptomForecast,
)
from src.models.record import DailyRecord, HistoricalCycle
from src.services.constants import (
    BASE_CYCLE_LENGTH,
    BASIC_CYCLE_LENGTH_WEIGHTS,
    BASIC_MODEL_ACCURACY,
    BASIC_MOOD_PATTERNS,
    BASIC_SYMPTOM_PATTERNS,
    EARLY_CYCLE_MOODS,
    FERTILE_WINDOW_END_OFFSET,
    FERTILE_WINDOW_START_OFFSET,
    LATE_CYCLE_MOODS,
    LUTEAL_PHASE_DAYS,
    MENSTRUAL_FORECAST_DAYS,
    MIN_SYMPTOM_PEAK,
    MIN_TRAINING_CYCLES,
    OVULATION_RANGE_DAYS,
    OVULATORY_FORECAST_END,
    PERIOD_RANGE_DAYS,
    SYMPTOM_DECAY_DAYS,
    SYMPTOM_PEAK_POSITION,
)
from src.services.history import extract_historical_cycles
from src.services.statistics import (
    calculate_model_accuracy,
    calculate_seasonal_factors,
    calculate_weights,
)
from src.services.utils import days_between, get_current_cycle_start, season_index

logger = Logger()


def create_basic_model(now: Optional[datetime] = None) -> PredictionModel:
    """
    Create the cold-start model used until enough cycles are logged.

    Returns:
        PredictionModel with fixed curves and accuracy 65
    """
    return PredictionModel(
        cycle_length_weights=list(BASIC_CYCLE_LENGTH_WEIGHTS),
        symptom_patterns={name: list(curve) for name, curve in BASIC_SYMPTOM_PATTERNS.items()},
        mood_patterns={name: list(curve) for name, curve in BASIC_MOOD_PATTERNS.items()},
        seasonal_factors=[1.0, 1.0, 1.0, 1.0],
        accuracy=BASIC_MODEL_ACCURACY,
        trained_at=now or datetime.now(timezone.utc),
        cycle_count=0,
    )


def build_symptom_patterns(cycles: List[HistoricalCycle]) -> Dict[str, List[float]]:
    """
    Build a normalized 35-day probability curve per observed symptom.

    Each cycle containing a symptom adds exp(-distance / 5) around a peak at
    80% of that cycle's length.
    """
    patterns: Dict[str, List[float]] = {}

    for cycle in cycles:
        peak_day = math.floor(cycle.length * SYMPTOM_PEAK_POSITION)
        for symptom in dict.fromkeys(cycle.symptoms):
            curve = patterns.setdefault(symptom, [0.0] * PATTERN_DAYS)
            for day in range(min(cycle.length, PATTERN_DAYS)):
                curve[day] += math.exp(-abs(day - peak_day) / SYMPTOM_DECAY_DAYS)

    for symptom, curve in patterns.items():
        total = sum(curve)
        if total > 0:
            patterns[symptom] = [value / total for value in curve]

    return patterns


def _mood_intensity(mood: str, cycle_position: float) -> float:
    if mood in LATE_CYCLE_MOODS:
        return 2.0 if cycle_position > 0.7 else 0.5
    if mood in EARLY_CYCLE_MOODS:
        return 1.5 if cycle_position < 0.5 else 1.0
    return 1.0


def build_mood_patterns(cycles: List[HistoricalCycle]) -> Dict[str, List[float]]:
    """
    Build a 35-day intensity curve per dominant mood.

    Irritated and anxious moods weigh the late cycle, happy and energetic
    moods the early cycle, anything else is flat. Curves are averaged over
    all cycles, so a mood that dominated every cycle reaches about 1.0.
    """
    patterns: Dict[str, List[float]] = {}

    for cycle in cycles:
        curve = patterns.setdefault(cycle.dominant_mood, [0.0] * PATTERN_DAYS)
        for day in range(min(cycle.length, PATTERN_DAYS)):
            curve[day] += _mood_intensity(cycle.dominant_mood, day / cycle.length)

    if cycles:
        for mood, curve in patterns.items():
            patterns[mood] = [value / len(cycles) for value in curve]

    return patterns


def train(records: List[DailyRecord], now: Optional[datetime] = None) -> PredictionModel:
    """
    Train a prediction model from daily records.

    Args:
        records: Every daily record logged by the user
        now: Training timestamp, defaults to the current UTC time

    Returns:
        A freshly built PredictionModel; the basic model when fewer than
        three valid historical cycles exist
    """
    cycles = extract_historical_cycles(records)

    if len(cycles) < MIN_TRAINING_CYCLES:
        logger.info(
            "Not enough cycles to train, using basic model",
            extra={"cycles_found": len(cycles), "cycles_required": MIN_TRAINING_CYCLES}
        )
        return create_basic_model(now)

    model = PredictionModel(
        cycle_length_weights=calculate_weights([c.length for c in cycles]),
        symptom_patterns=build_symptom_patterns(cycles),
        mood_patterns=build_mood_patterns(cycles),
        seasonal_factors=calculate_seasonal_factors(cycles),
        accuracy=calculate_model_accuracy(cycles),
        trained_at=now or datetime.now(timezone.utc),
        cycle_count=len(cycles),
    )

    logger.info(
        "Prediction model trained",
        extra={
            "cycles": len(cycles),
            "accuracy": model.accuracy,
            "symptoms": len(model.symptom_patterns),
            "moods": len(model.mood_patterns)
        }
    )
    return model


def predict_cycle_length(model: PredictionModel, reference_date: date) -> int:
    """
    Predict the next cycle length.

    Weighted average of the five points 26..30 days, scaled by the seasonal
    factor of the reference date's quarter.
    """
    weighted_length = sum(
        weight * (BASE_CYCLE_LENGTH + offset - 2)
        for offset, weight in enumerate(model.cycle_length_weights)
    )
    seasonal_factor = model.seasonal_factors[season_index(reference_date)]
    return round(weighted_length * seasonal_factor)


def predict_symptoms(model: PredictionModel, cycle_length: int) -> List[SymptomForecast]:
    """
    Forecast symptoms whose curve peaks above 10%.

    Expected days are the 1-based days of cycle where the curve exceeds half
    its peak. Sorted by probability, highest first.
    """
    forecasts = []

    for name, pattern in model.symptom_patterns.items():
        probabilities = pattern[:cycle_length]
        if not probabilities:
            continue
        peak = max(probabilities)
        if peak <= MIN_SYMPTOM_PEAK:
            continue

        forecasts.append(SymptomForecast(
            name=name,
            probability=round(peak * 100),
            expected_days=[day + 1 for day, p in enumerate(probabilities) if p > peak * 0.5],
        ))

    return sorted(forecasts, key=lambda f: f.probability, reverse=True)


def forecast_phases(cycle_length: int) -> List[Dict[str, int]]:
    """Split a cycle into the four coarse phases used by the mood forecast."""
    half = cycle_length // 2
    ovulatory_end = math.floor(cycle_length * OVULATORY_FORECAST_END)
    return [
        {"name": "menstrual", "start": 1, "end": MENSTRUAL_FORECAST_DAYS},
        {"name": "follicular", "start": MENSTRUAL_FORECAST_DAYS + 1, "end": half},
        {"name": "ovulatory", "start": half + 1, "end": ovulatory_end},
        {"name": "luteal", "start": ovulatory_end + 1, "end": cycle_length},
    ]


def predict_mood(model: PredictionModel, cycle_length: int) -> List[MoodForecast]:
    """
    Pick the dominant mood for each coarse phase.

    The mood whose curve carries the most mass in a phase's day range wins;
    its probability is the mean daily value in that range, capped at 100%.
    """
    forecasts = []

    for phase in forecast_phases(cycle_length):
        dominant_mood = "neutral"
        best_sum = 0.0
        for mood, pattern in model.mood_patterns.items():
            phase_sum = sum(pattern[phase["start"] - 1:phase["end"]])
            if phase_sum > best_sum:
                best_sum = phase_sum
                dominant_mood = mood

        phase_days = max(1, phase["end"] - phase["start"] + 1)
        forecasts.append(MoodForecast(
            phase=phase["name"],
            mood=dominant_mood,
            probability=min(100, round(best_sum / phase_days * 100)),
        ))

    return forecasts


def predict(
    model: PredictionModel,
    config: CycleConfig,
    reference_date: Optional[date] = None
) -> PredictionResult:
    """
    Generate predictions for the cycle following the reference date.

    Args:
        model: Trained or basic prediction model
        config: Cycle configuration anchoring the current cycle
        reference_date: Date to predict from, defaults to today

    Returns:
        PredictionResult with dates, confidences and forecasts

    Example:
        >>> result = predict(create_basic_model(), config, date(2024, 1, 10))
        >>> result.next_period.date
        datetime.date(2024, 1, 29)
    """
    if reference_date is None:
        reference_date = date.today()

    cycle_length = predict_cycle_length(model, reference_date)
    cycle_start = get_current_cycle_start(
        config.last_period_date, reference_date, config.average_cycle_length
    )
    next_period = cycle_start + timedelta(days=cycle_length)
    while next_period < reference_date:
        next_period += timedelta(days=cycle_length)

    ovulation = next_period - timedelta(days=LUTEAL_PHASE_DAYS)
    accuracy = model.accuracy

    return PredictionResult(
        next_period=DatePrediction(
            date=next_period,
            confidence=max(60, accuracy - 5),
            earliest=next_period - timedelta(days=PERIOD_RANGE_DAYS),
            latest=next_period + timedelta(days=PERIOD_RANGE_DAYS),
        ),
        ovulation=DatePrediction(
            date=ovulation,
            confidence=max(55, accuracy - 10),
            earliest=ovulation - timedelta(days=OVULATION_RANGE_DAYS),
            latest=ovulation + timedelta(days=OVULATION_RANGE_DAYS),
        ),
        fertile_window=FertileWindowPrediction(
            start=ovulation - timedelta(days=FERTILE_WINDOW_START_OFFSET),
            end=ovulation + timedelta(days=FERTILE_WINDOW_END_OFFSET),
            confidence=max(70, accuracy - 5),
        ),
        symptoms=predict_symptoms(model, cycle_length),
        mood_forecast=predict_mood(model, cycle_length),
        predicted_cycle_length=cycle_length,
        current_day=days_between(cycle_start, reference_date) + 1,
        accuracy=accuracy,
    )
