"""
Constants and shared data for cycle-related services.
"""
from typing import Dict, List

from src.models.cycle import PhaseLabel
from src.models.prediction import PATTERN_DAYS

# Luteal phase length: ovulation happens this many days before the next period
LUTEAL_PHASE_DAYS = 14

# Fertile window relative to the ovulation day of cycle
FERTILE_WINDOW_DAYS_BEFORE = 5
FERTILE_WINDOW_DAYS_AFTER = 1

# Fertile phase label band around the ovulation day
FERTILE_PHASE_RADIUS = 2

# Last day of cycle still counted as post-menstrual for pregnancy chance
POST_MENSTRUAL_CHANCE_LAST_DAY = 11

# Pregnancy chance bands as inclusive (low, high) percent ranges
OVULATION_CHANCE_RANGE = (30, 40)
FERTILE_CHANCE_BASE = 25
FERTILE_CHANCE_STEP = 3
FERTILE_CHANCE_FLOOR = 15
FERTILE_CHANCE_JITTER = (0, 8)
MENSTRUAL_CHANCE_RANGE = (1, 5)
POST_MENSTRUAL_CHANCE_RANGE = (5, 15)
PRE_MENSTRUAL_CHANCE_RANGE = (3, 10)

# Phase intensity bounds for calendar gradients
MIN_PHASE_INTENSITY = 0.3
DEFAULT_PHASE_INTENSITY = 0.7

PHASE_DESCRIPTIONS: Dict[PhaseLabel, str] = {
    PhaseLabel.MENSTRUAL: "Menstruation: the uterine lining is shed. Rest and stay warm.",
    PhaseLabel.POST_MENSTRUAL: "Post-menstrual: estrogen rises and energy returns.",
    PhaseLabel.FERTILE: "Fertile window: conception is possible.",
    PhaseLabel.OVULATION: "Ovulation: peak fertility and energy.",
    PhaseLabel.PRE_MENSTRUAL: "Pre-menstrual: progesterone dominates, PMS symptoms may appear.",
}

# Historical cycle extraction
MIN_HISTORICAL_CYCLE_LENGTH = 21
MAX_HISTORICAL_CYCLE_LENGTH = 40
DEFAULT_MOOD = "neutral"

# Training
MIN_TRAINING_CYCLES = 3
BASIC_MODEL_ACCURACY = 65
BASE_CYCLE_LENGTH = 28
SYMPTOM_PEAK_POSITION = 0.8
SYMPTOM_DECAY_DAYS = 5
LATE_CYCLE_MOODS = ("irritated", "anxious")
EARLY_CYCLE_MOODS = ("happy", "energetic")
MAX_ACCURACY = 95
IRREGULAR_VARIATION_DAYS = 7

# Analytics
ANALYTICS_RECENT_DAYS = 30
TOP_SYMPTOMS_LIMIT = 8
RECENT_CYCLE_SUMMARIES = 6

# Prediction
MIN_SYMPTOM_PEAK = 0.1
PERIOD_RANGE_DAYS = 2
OVULATION_RANGE_DAYS = 1
FERTILE_WINDOW_START_OFFSET = 3
FERTILE_WINDOW_END_OFFSET = 1
MENSTRUAL_FORECAST_DAYS = 5
OVULATORY_FORECAST_END = 0.7


BASIC_SYMPTOM_PATTERNS: Dict[str, List[float]] = {
    "cramps": [0.3 if day < 5 or day > 25 else 0.1 for day in range(PATTERN_DAYS)],
    "headache": [0.1] * PATTERN_DAYS,
    "bloating": [0.4 if day > 20 else 0.1 for day in range(PATTERN_DAYS)],
}

BASIC_MOOD_PATTERNS: Dict[str, List[float]] = {
    "happy": [0.3 if day < 14 else 0.1 for day in range(PATTERN_DAYS)],
    "irritated": [0.4 if day > 21 else 0.1 for day in range(PATTERN_DAYS)],
}

BASIC_CYCLE_LENGTH_WEIGHTS = [0.1, 0.2, 0.4, 0.2, 0.1]

# Cache
CACHE_PREFIX = "__smart_cache__"
CACHE_STATS_KEY = "__cache_stats__"
CACHE_CLEANUP_INTERVAL_SECONDS = 6 * 60 * 60

# Application data keys
CYCLE_DATA_KEY = "cycle_data"
DAILY_RECORDS_KEY = "daily_records"
PREDICTION_MODEL_KEY = "prediction_model"
NOTIFICATION_SETTINGS_KEY = "notification_settings"
USER_PROFILE_KEY = "user_profile"
SCHEDULED_NOTIFICATIONS_KEY = "scheduled_notifications"
BACKUP_SETTINGS_KEY = "backup_settings"
BACKUP_KEY_PREFIX = "backup_"

APP_DATA_KEYS = (
    USER_PROFILE_KEY,
    CYCLE_DATA_KEY,
    DAILY_RECORDS_KEY,
    NOTIFICATION_SETTINGS_KEY,
)

# Notifications
REMINDER_HOUR = 9
LATE_REMINDER_DAYS = 3
REMINDER_MONTHS_AHEAD = 3

NOTIFICATION_TEXT = {
    "periodReminder": "🌸 Period approaching",
    "ovulationReminder": "⭐ Ovulation approaching",
    "fertileWindowReminder": "🔥 Fertile window started",
    "lateReminder": "⏰ Period is late",
    "dailyReminder": "💜 Daily check-in",
}
