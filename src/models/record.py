"""
Daily record and historical cycle models.
"""
from datetime import date
from enum import Enum
from typing import List
from pydantic import BaseModel, Field


class FlowLevel(str, Enum):
    """
    Menstrual flow logged for a day. Empty string means not logged.
    """
    NONE = "none"
    LIGHT = "light"
    MODERATE = "moderate"
    HEAVY = "heavy"
    NOT_LOGGED = ""


class DailyRecord(BaseModel):
    """
    Represents a single day logged by the user.
    """
    date: date
    symptoms: List[str] = Field(default_factory=list)
    mood: str = ""
    flow: FlowLevel = FlowLevel.NOT_LOGGED
    notes: str = ""

    @property
    def has_flow(self) -> bool:
        """Check if this record marks a menstruation day."""
        return self.flow not in (FlowLevel.NONE, FlowLevel.NOT_LOGGED)


class HistoricalCycle(BaseModel):
    """
    A completed cycle reconstructed from daily records.
    """
    start_date: date
    length: int = Field(..., ge=1)
    period_length: int = Field(..., ge=0)
    symptoms: List[str] = Field(default_factory=list)
    dominant_mood: str = "neutral"


class CycleStatistics(BaseModel):
    """
    Summary statistics over historical cycle lengths.
    """
    average_length: float
    shortest_cycle: int
    longest_cycle: int
    variation: float
    regularity: str = Field(..., pattern="^(regular|irregular)$")
    cycle_count: int


class SymptomFrequency(BaseModel):
    """
    How often a symptom was logged, with its recent trend in percent.
    """
    name: str
    count: int = Field(..., ge=0)
    trend: int = 0


class MoodShare(BaseModel):
    mood: str
    count: int = Field(..., ge=0)
    percentage: int = Field(..., ge=0, le=100)


class CycleSummary(BaseModel):
    """
    Compact view of one historical cycle for the analytics screen.
    """
    start_date: date
    length: int
    symptom_count: int
    dominant_mood: str
