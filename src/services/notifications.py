"""
Reminder scheduling service.

Turns the dates computed by the cycle model into reminders and hands them to
a NotificationBackend. Delivery itself belongs to the backend.

Typical usage:
    scheduler = NotificationScheduler(StoreNotificationBackend(store))
    scheduler.schedule_all(repository.load_cycle_config(),
                           repository.load_notification_settings())
"""
import random
from datetime import date, datetime, time, timedelta
from typing import Callable, List, Optional, Protocol, Tuple

from aws_lambda_powertools import Logger
from pydantic import TypeAdapter, ValidationError

from src.models.cycle import CycleConfig
from src.models.notification import NotificationSettings, ReminderType, ScheduledReminder
from src.services.constants import (
    FERTILE_WINDOW_DAYS_BEFORE,
    LATE_REMINDER_DAYS,
    NOTIFICATION_TEXT,
    REMINDER_HOUR,
    REMINDER_MONTHS_AHEAD,
    SCHEDULED_NOTIFICATIONS_KEY,
)
from src.services.cycle import compute_cycle_state
from src.services.utils import add_months
from src.utils.storage import KeyValueStore

logger = Logger()

_reminders_adapter = TypeAdapter(List[ScheduledReminder])


class NotificationBackend(Protocol):
    """Delivery side of reminders (push service, device scheduler, queue)."""

    def schedule(self, reminder: ScheduledReminder) -> None:
        ...

    def cancel_all(self) -> None:
        ...

    def list_scheduled(self) -> List[ScheduledReminder]:
        ...


class StoreNotificationBackend:
    """Keeps the scheduled reminder list in the key/value store for a delivery worker."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def list_scheduled(self) -> List[ScheduledReminder]:
        raw = self.store.get_item(SCHEDULED_NOTIFICATIONS_KEY)
        if not raw:
            return []
        try:
            return _reminders_adapter.validate_json(raw)
        except ValidationError:
            logger.warning("Discarding corrupted reminder list")
            self.store.remove_item(SCHEDULED_NOTIFICATIONS_KEY)
            return []

    def schedule(self, reminder: ScheduledReminder) -> None:
        reminders = self.list_scheduled()
        reminders.append(reminder)
        self.store.set_item(
            SCHEDULED_NOTIFICATIONS_KEY,
            _reminders_adapter.dump_json(reminders).decode("utf-8")
        )

    def cancel_all(self) -> None:
        self.store.remove_item(SCHEDULED_NOTIFICATIONS_KEY)


def reminder_body(reminder_type: ReminderType, days_before: int = 0) -> str:
    """Build the notification body text."""
    when = "tomorrow" if days_before == 1 else f"in {days_before} days"
    if reminder_type == ReminderType.PERIOD:
        return f"Your period is expected {when}. Time to get your supplies ready."
    if reminder_type == ReminderType.OVULATION:
        return f"Ovulation is expected {when}. This is your most fertile time."
    if reminder_type == ReminderType.FERTILE_WINDOW:
        return "Your fertile window started today."
    if reminder_type == ReminderType.LATE:
        return "Your period is late. Consider taking a test or talking to a doctor."
    return "How are you feeling today? Log your symptoms."


def parse_reminder_time(value: str) -> Optional[Tuple[int, int]]:
    """
    Parse an "HH:MM" reminder time.

    Returns:
        (hour, minute) or None when the value is not a valid time of day
    """
    try:
        hour_text, minute_text = value.split(":")
        parsed = time(int(hour_text), int(minute_text))
    except (ValueError, AttributeError):
        return None
    return parsed.hour, parsed.minute


class NotificationScheduler:
    """Plans and (re)schedules cycle reminders."""

    def __init__(
        self,
        backend: NotificationBackend,
        clock: Callable[[], datetime] = datetime.now
    ):
        self.backend = backend
        self.clock = clock

    def _one_off(
        self,
        reminder_type: ReminderType,
        event_date: date,
        now: datetime,
        days_before: int = 0
    ) -> Optional[ScheduledReminder]:
        fire_at = datetime.combine(event_date - timedelta(days=days_before), time(REMINDER_HOUR))
        if fire_at < now:
            return None
        return ScheduledReminder(
            type=reminder_type,
            title=NOTIFICATION_TEXT[reminder_type.value],
            body=reminder_body(reminder_type, days_before),
            fire_at=fire_at,
        )

    def plan_reminders(
        self,
        config: CycleConfig,
        settings: NotificationSettings,
        now: Optional[datetime] = None
    ) -> List[ScheduledReminder]:
        """
        Build the reminder plan for the current and next two months.

        Reminders fire at 09:00; those already in the past are skipped and
        duplicates (same type and time) are dropped.

        Args:
            config: Cycle configuration
            settings: Notification preferences
            now: Planning time, defaults to the scheduler clock

        Returns:
            Reminders ordered by type of first appearance
        """
        if now is None:
            now = self.clock()
        today = now.date()
        rng = random.Random(0)
        planned: List[Optional[ScheduledReminder]] = []

        if settings.late_reminder:
            state = compute_cycle_state(config, today, rng)
            planned.append(self._one_off(
                ReminderType.LATE,
                state.next_period_date + timedelta(days=LATE_REMINDER_DAYS),
                now
            ))

        for month_offset in range(REMINDER_MONTHS_AHEAD):
            state = compute_cycle_state(config, add_months(today, month_offset), rng)

            if settings.period_reminder:
                planned.append(self._one_off(
                    ReminderType.PERIOD, state.next_period_date, now, settings.period_reminder_days
                ))
            if settings.ovulation_reminder:
                planned.append(self._one_off(
                    ReminderType.OVULATION, state.ovulation_date, now, settings.ovulation_reminder_days
                ))
            if settings.fertile_window_reminder:
                planned.append(self._one_off(
                    ReminderType.FERTILE_WINDOW,
                    state.ovulation_date - timedelta(days=FERTILE_WINDOW_DAYS_BEFORE),
                    now
                ))

        if settings.daily_reminder:
            parsed = parse_reminder_time(settings.daily_reminder_time)
            if parsed is None:
                logger.warning("Invalid daily reminder time", extra={
                    "daily_reminder_time": settings.daily_reminder_time
                })
            else:
                hour, minute = parsed
                planned.append(ScheduledReminder(
                    type=ReminderType.DAILY,
                    title=NOTIFICATION_TEXT[ReminderType.DAILY.value],
                    body=reminder_body(ReminderType.DAILY),
                    repeats=True,
                    hour=hour,
                    minute=minute,
                ))

        reminders = []
        seen = set()
        for reminder in planned:
            if reminder is None:
                continue
            identity = (reminder.type, reminder.fire_at)
            if identity in seen:
                continue
            seen.add(identity)
            reminders.append(reminder)
        return reminders

    def schedule_all(
        self,
        config: Optional[CycleConfig],
        settings: NotificationSettings
    ) -> List[ScheduledReminder]:
        """
        Cancel every scheduled reminder and schedule a fresh plan.

        Returns:
            Reminders that were handed to the backend; empty when no cycle
            configuration exists
        """
        self.cancel_all()

        if config is None:
            logger.info("No cycle configuration, skipping reminder scheduling")
            return []

        scheduled = []
        for reminder in self.plan_reminders(config, settings):
            try:
                self.backend.schedule(reminder)
                scheduled.append(reminder)
            except Exception as e:
                logger.error("Failed to schedule reminder", extra={
                    "type": reminder.type.value,
                    "error": str(e),
                    "error_type": e.__class__.__name__
                })

        logger.info("Reminders rescheduled", extra={"count": len(scheduled)})
        return scheduled

    def cancel_all(self) -> None:
        try:
            self.backend.cancel_all()
        except Exception as e:
            logger.error("Failed to cancel reminders", extra={
                "error": str(e),
                "error_type": e.__class__.__name__
            })
