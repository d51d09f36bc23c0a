"""
Tests for the application data repository.
"""
import json
import pytest
from datetime import date, datetime
from unittest.mock import Mock

from src.models.cycle import CycleConfig
from src.models.notification import NotificationSettings
from src.models.record import DailyRecord, FlowLevel
from src.services.exceptions import StorageError
from src.services.prediction import create_basic_model
from src.services.repository import AppDataRepository


@pytest.fixture
def repository(store):
    return AppDataRepository(store)


def test_unconfigured_returns_none(repository):
    """Test missing data reads as absent rather than failing."""
    assert repository.load_cycle_config() is None
    assert repository.has_cycle_config() is False
    assert repository.load_daily_records() == []
    assert repository.load_prediction_model() is None
    assert repository.load_user_profile() is None
    assert repository.load_notification_settings() == NotificationSettings()


def test_cycle_config_round_trip(repository, config_28, store):
    repository.save_cycle_config(config_28)

    assert repository.load_cycle_config() == config_28
    assert json.loads(store.get_item("cycle_data"))["last_period_date"] == "2024-01-01"


@pytest.mark.parametrize("payload", [
    "{not json",
    json.dumps({"last_period_date": "yesterday", "average_cycle_length": 28}),
    json.dumps([1, 2, 3]),
])
def test_corrupted_config_discarded(repository, store, payload):
    """Test undecodable payloads are removed and treated as absent."""
    store.set_item("cycle_data", payload)

    assert repository.load_cycle_config() is None
    assert store.get_item("cycle_data") is None


def test_daily_records(repository):
    """Test records are appended and kept in date order."""
    repository.add_daily_record(DailyRecord(date=date(2024, 1, 3), mood="happy"))
    records = repository.add_daily_record(
        DailyRecord(date=date(2024, 1, 1), flow=FlowLevel.HEAVY, symptoms=["cramps"])
    )
    repository.add_daily_record(DailyRecord(date=date(2024, 1, 3), notes="second entry"))

    assert len(records) == 2
    loaded = repository.load_daily_records()
    assert [r.date for r in loaded] == [date(2024, 1, 1), date(2024, 1, 3), date(2024, 1, 3)]
    assert loaded[0].flow == FlowLevel.HEAVY


def test_corrupted_records_discarded(repository, store):
    store.set_item("daily_records", json.dumps([{"date": "not a date"}]))

    assert repository.load_daily_records() == []
    assert store.get_item("daily_records") is None


def test_prediction_model_round_trip(repository):
    model = create_basic_model(datetime(2024, 1, 1, 12, 0))
    repository.save_prediction_model(model)

    assert repository.load_prediction_model() == model


def test_notification_settings_merge_defaults(repository, store):
    """Test stored settings override defaults key by key."""
    store.set_item("notification_settings", json.dumps({"daily_reminder": True}))

    settings = repository.load_notification_settings()

    assert settings.daily_reminder is True
    assert settings.period_reminder_days == 2


def test_corrupted_notification_settings(repository, store):
    store.set_item("notification_settings", json.dumps({"period_reminder_days": -4}))

    assert repository.load_notification_settings() == NotificationSettings()
    assert store.get_item("notification_settings") is None


def test_user_profile(repository, store):
    repository.save_user_profile({"name": "Ana", "birth_year": 1990})
    assert repository.load_user_profile() == {"name": "Ana", "birth_year": 1990}

    store.set_item("user_profile", "][")
    assert repository.load_user_profile() is None


def test_storage_read_failure_degrades():
    """Test read errors are reported as missing data."""
    failing = Mock()
    failing.get_item.side_effect = RuntimeError("unavailable")
    repository = AppDataRepository(failing)

    assert repository.load_cycle_config() is None
    assert repository.load_daily_records() == []


def test_storage_write_failure_raises():
    failing = Mock()
    failing.set_item.side_effect = RuntimeError("unavailable")
    repository = AppDataRepository(failing)

    with pytest.raises(StorageError):
        repository.save_cycle_config(CycleConfig(
            last_period_date=date(2024, 1, 1),
            average_cycle_length=28,
            average_period_length=5
        ))
