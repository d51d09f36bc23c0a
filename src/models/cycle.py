"""
Cycle model definitions: configuration, derived state and calendar data.
"""
from datetime import date
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

MIN_CYCLE_LENGTH = 21
MAX_CYCLE_LENGTH = 35
MIN_PERIOD_LENGTH = 3
MAX_PERIOD_LENGTH = 8


class PhaseLabel(str, Enum):
    """
    Phases of the menstrual cycle, ordered by day of cycle.
    """
    MENSTRUAL = "menstrual"
    POST_MENSTRUAL = "postMenstrual"
    FERTILE = "fertile"
    OVULATION = "ovulation"
    PRE_MENSTRUAL = "preMenstrual"


class CycleConfig(BaseModel):
    """
    User cycle configuration. Sole source of truth for cycle math.

    Replaced wholesale when the user edits it; never mutated.
    """
    model_config = ConfigDict(frozen=True)

    last_period_date: date
    average_cycle_length: int = Field(..., gt=0)
    average_period_length: int = Field(..., gt=0)
    setup_date: Optional[date] = None
    irregular_cycle: bool = False

    def validate_ranges(self) -> List[str]:
        """
        Return problems a setup form should report before saving.

        The cycle services accept any positive lengths; range checks belong
        to the input layer.
        """
        problems = []
        if not MIN_CYCLE_LENGTH <= self.average_cycle_length <= MAX_CYCLE_LENGTH:
            problems.append(
                f"Cycle length must be between {MIN_CYCLE_LENGTH} and {MAX_CYCLE_LENGTH} days"
            )
        if not MIN_PERIOD_LENGTH <= self.average_period_length <= MAX_PERIOD_LENGTH:
            problems.append(
                f"Period length must be between {MIN_PERIOD_LENGTH} and {MAX_PERIOD_LENGTH} days"
            )
        return problems

    def is_within_recommended_ranges(self) -> bool:
        return not self.validate_ranges()


class CycleState(BaseModel):
    """
    Derived cycle state for a reference date. Recomputed on demand.
    """
    day_of_cycle: int = Field(..., ge=1)
    phase: PhaseLabel
    next_period_date: date
    ovulation_date: date
    days_until_next_period: int = Field(..., ge=0)
    days_until_ovulation: int = Field(..., ge=0)
    pregnancy_chance: int = Field(..., ge=0, le=100)
    in_fertile_window: bool


class DayInfo(BaseModel):
    """
    Calendar cell data for a single date.
    """
    date: date
    phase: PhaseLabel
    pregnancy_chance: int = Field(..., ge=0, le=100)
    is_today: bool
    is_current_month: bool
    day_of_cycle: int = Field(..., ge=1)
    phase_intensity: float = Field(..., ge=0, le=1)


class CycleProjection(BaseModel):
    """
    Projected dates for an upcoming cycle.
    """
    cycle_number: int = Field(..., ge=1)
    period_start: date
    period_end: date
    ovulation: date
    fertile_window_start: date
    fertile_window_end: date
