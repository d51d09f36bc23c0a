"""
Application data repository.

Loads and saves the JSON documents the app keeps in its key/value store:
cycle configuration, daily records, the trained prediction model,
notification settings and the user profile.

Absent data is reported as None (or an empty list) so callers can render an
unconfigured state. Payloads that cannot be decoded are logged, removed and
treated as absent. Storage failures are logged and degrade to "no data".
"""
import json
from typing import Any, Dict, List, Optional, Type, TypeVar

from aws_lambda_powertools import Logger
from pydantic import BaseModel, TypeAdapter, ValidationError

from src.models.cycle import CycleConfig
from src.models.notification import NotificationSettings
from src.models.prediction import PredictionModel
from src.models.record import DailyRecord
from src.services.constants import (
    CYCLE_DATA_KEY,
    DAILY_RECORDS_KEY,
    NOTIFICATION_SETTINGS_KEY,
    PREDICTION_MODEL_KEY,
    USER_PROFILE_KEY,
)
from src.services.exceptions import CorruptedDataError, StorageError
from src.utils.storage import KeyValueStore

logger = Logger()

ModelT = TypeVar("ModelT", bound=BaseModel)

_records_adapter = TypeAdapter(List[DailyRecord])


class AppDataRepository:
    """Typed access to application data in a key/value store."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def _read(self, key: str) -> Optional[str]:
        try:
            return self.store.get_item(key)
        except Exception as e:
            logger.error("Error reading from storage", extra={
                "key": key,
                "error": str(e),
                "error_type": e.__class__.__name__
            })
            return None

    def _write(self, key: str, payload: str) -> None:
        try:
            self.store.set_item(key, payload)
        except Exception as e:
            logger.error("Error writing to storage", extra={
                "key": key,
                "error": str(e),
                "error_type": e.__class__.__name__
            })
            raise StorageError(f"Failed to save {key}: {str(e)}")

    def _discard(self, key: str, error: Exception) -> None:
        logger.warning("Discarding corrupted data", extra={
            "key": key,
            "error": str(error),
            "error_type": error.__class__.__name__
        })
        try:
            self.store.remove_item(key)
        except Exception as e:
            logger.error("Error removing corrupted data", extra={"key": key, "error": str(e)})

    def _load_model(self, key: str, model_type: Type[ModelT]) -> Optional[ModelT]:
        raw = self._read(key)
        if raw is None:
            return None
        try:
            return model_type.model_validate_json(raw)
        except ValidationError as e:
            self._discard(key, CorruptedDataError(str(e)))
            return None

    # ── Cycle configuration ─────────────────────────────────────────

    def load_cycle_config(self) -> Optional[CycleConfig]:
        """Load the cycle configuration, or None when setup is incomplete."""
        return self._load_model(CYCLE_DATA_KEY, CycleConfig)

    def save_cycle_config(self, config: CycleConfig) -> None:
        self._write(CYCLE_DATA_KEY, config.model_dump_json())
        logger.info("Cycle configuration saved", extra={
            "cycle_length": config.average_cycle_length,
            "period_length": config.average_period_length
        })

    def has_cycle_config(self) -> bool:
        return self.load_cycle_config() is not None

    # ── Daily records ───────────────────────────────────────────────

    def load_daily_records(self) -> List[DailyRecord]:
        raw = self._read(DAILY_RECORDS_KEY)
        if raw is None:
            return []
        try:
            return _records_adapter.validate_json(raw)
        except ValidationError as e:
            self._discard(DAILY_RECORDS_KEY, CorruptedDataError(str(e)))
            return []

    def save_daily_records(self, records: List[DailyRecord]) -> None:
        ordered = sorted(records, key=lambda r: r.date)
        self._write(DAILY_RECORDS_KEY, _records_adapter.dump_json(ordered).decode("utf-8"))

    def add_daily_record(self, record: DailyRecord) -> List[DailyRecord]:
        """
        Append a daily record.

        The log is append-only; several records for the same date are kept.

        Returns:
            The updated list of records
        """
        records = self.load_daily_records()
        records.append(record)
        self.save_daily_records(records)
        return records

    # ── Prediction model ────────────────────────────────────────────

    def load_prediction_model(self) -> Optional[PredictionModel]:
        return self._load_model(PREDICTION_MODEL_KEY, PredictionModel)

    def save_prediction_model(self, model: PredictionModel) -> None:
        self._write(PREDICTION_MODEL_KEY, model.model_dump_json())

    # ── Notification settings ───────────────────────────────────────

    def load_notification_settings(self) -> NotificationSettings:
        """Load notification settings, falling back to defaults."""
        raw = self._read(NOTIFICATION_SETTINGS_KEY)
        if raw is None:
            return NotificationSettings()
        try:
            stored = json.loads(raw)
            return NotificationSettings(**{**NotificationSettings().model_dump(), **stored})
        except (ValueError, TypeError) as e:
            self._discard(NOTIFICATION_SETTINGS_KEY, CorruptedDataError(str(e)))
            return NotificationSettings()

    def save_notification_settings(self, settings: NotificationSettings) -> None:
        self._write(NOTIFICATION_SETTINGS_KEY, settings.model_dump_json())

    # ── User profile ────────────────────────────────────────────────

    def load_user_profile(self) -> Optional[Dict[str, Any]]:
        raw = self._read(USER_PROFILE_KEY)
        if raw is None:
            return None
        try:
            profile = json.loads(raw)
        except ValueError as e:
            self._discard(USER_PROFILE_KEY, CorruptedDataError(str(e)))
            return None
        return profile if isinstance(profile, dict) else None

    def save_user_profile(self, profile: Dict[str, Any]) -> None:
        self._write(USER_PROFILE_KEY, json.dumps(profile))
