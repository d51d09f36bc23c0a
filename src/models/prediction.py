"""
Prediction model definitions.
"""
from datetime import date, datetime
from typing import Dict, List
from pydantic import BaseModel, Field

PATTERN_DAYS = 35


class PredictionModel(BaseModel):
    """
    Trained statistical model. Rebuilt wholesale on every training pass.
    """
    cycle_length_weights: List[float] = Field(..., min_length=5, max_length=5)
    symptom_patterns: Dict[str, List[float]] = Field(default_factory=dict)
    mood_patterns: Dict[str, List[float]] = Field(default_factory=dict)
    seasonal_factors: List[float] = Field(..., min_length=4, max_length=4)
    accuracy: int = Field(..., ge=0, le=100)
    trained_at: datetime
    cycle_count: int = 0

    @property
    def is_basic(self) -> bool:
        """Check if this is the cold-start model."""
        return self.cycle_count == 0


class DatePrediction(BaseModel):
    date: date
    confidence: int = Field(..., ge=0, le=100)
    earliest: date
    latest: date


class FertileWindowPrediction(BaseModel):
    start: date
    end: date
    confidence: int = Field(..., ge=0, le=100)


class SymptomForecast(BaseModel):
    name: str
    probability: int
    expected_days: List[int]


class MoodForecast(BaseModel):
    phase: str
    mood: str
    probability: int


class PredictionResult(BaseModel):
    """
    Forward-looking predictions for the next cycle.
    """
    next_period: DatePrediction
    ovulation: DatePrediction
    fertile_window: FertileWindowPrediction
    symptoms: List[SymptomForecast]
    mood_forecast: List[MoodForecast]
    predicted_cycle_length: int
    current_day: int
    accuracy: int
