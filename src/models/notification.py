"""
Notification settings and scheduled reminder models.
"""
from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class ReminderType(str, Enum):
    PERIOD = "periodReminder"
    OVULATION = "ovulationReminder"
    FERTILE_WINDOW = "fertileWindowReminder"
    LATE = "lateReminder"
    DAILY = "dailyReminder"


class NotificationSettings(BaseModel):
    """
    User reminder preferences.
    """
    period_reminder: bool = True
    period_reminder_days: int = Field(2, ge=0)
    ovulation_reminder: bool = True
    ovulation_reminder_days: int = Field(1, ge=0)
    daily_reminder: bool = False
    daily_reminder_time: str = "20:00"
    fertile_window_reminder: bool = True
    late_reminder: bool = True


class ScheduledReminder(BaseModel):
    """
    A reminder handed to the notification backend.

    One-off reminders carry ``fire_at``; the daily reminder repeats at
    ``hour``/``minute`` instead.
    """
    type: ReminderType
    title: str
    body: str
    fire_at: Optional[datetime] = None
    repeats: bool = False
    hour: Optional[int] = Field(None, ge=0, le=23)
    minute: Optional[int] = Field(None, ge=0, le=59)
