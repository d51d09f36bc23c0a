"""
Backup and restore of application data.

A backup is a JSON snapshot of every application key, stored in the same
key/value store under ``backup_<id>`` and optionally exported through a
BackupExporter (file share, object storage, ...).

Typical usage:
    service = BackupService(store)
    backup = service.create_backup()
    service.restore_backup(backup)
"""
import json
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional, Protocol

from aws_lambda_powertools import Logger
from pydantic import ValidationError

from src.models.backup import BACKUP_VERSION, BackupData, BackupMetadata, BackupSettings
from src.services.constants import (
    APP_DATA_KEYS,
    BACKUP_KEY_PREFIX,
    BACKUP_SETTINGS_KEY,
    DAILY_RECORDS_KEY,
)
from src.services.exceptions import BackupError, BackupVersionError, ExportUnavailableError
from src.utils.storage import KeyValueStore

logger = Logger()

APP_VERSION = "1.0.0"

BACKUP_FREQUENCY_DAYS = {
    "daily": 1,
    "weekly": 7,
    "monthly": 30,
}


class BackupExporter(Protocol):
    """Optional capability that ships a backup outside the store."""

    def is_available(self) -> bool:
        ...

    def export(self, filename: str, payload: str) -> str:
        """Write the payload and return its location."""
        ...


def _major(version: str) -> str:
    return version.split(".")[0]


class BackupService:
    """Creates, prunes, restores and exports backups."""

    def __init__(
        self,
        store: KeyValueStore,
        exporter: Optional[BackupExporter] = None,
        clock: Callable[[], datetime] = datetime.now
    ):
        self.store = store
        self.exporter = exporter
        self.clock = clock

    def load_settings(self) -> BackupSettings:
        raw = self.store.get_item(BACKUP_SETTINGS_KEY)
        if raw is None:
            return BackupSettings()
        try:
            return BackupSettings.model_validate_json(raw)
        except ValidationError as e:
            logger.warning("Discarding corrupted backup settings", extra={"error": str(e)})
            return BackupSettings()

    def save_settings(self, settings: BackupSettings) -> None:
        self.store.set_item(BACKUP_SETTINGS_KEY, settings.model_dump_json())

    def _snapshot(self) -> Dict[str, Optional[Any]]:
        data: Dict[str, Optional[Any]] = {}
        for key in APP_DATA_KEYS:
            raw = self.store.get_item(key)
            if raw is None:
                data[key] = None
                continue
            try:
                data[key] = json.loads(raw)
            except ValueError:
                logger.warning("Skipping undecodable key in backup", extra={"key": key})
                data[key] = None
        return data

    def create_backup(self) -> BackupData:
        """
        Snapshot every application key and store the backup.

        Older backups beyond ``max_backup_files`` are removed.

        Returns:
            The stored backup

        Raises:
            BackupError: If the snapshot cannot be read or written
        """
        now = self.clock()
        backup_id = str(int(now.timestamp() * 1000))

        try:
            data = self._snapshot()
            records = data.get(DAILY_RECORDS_KEY)
            backup = BackupData(
                backup_id=backup_id,
                timestamp=now,
                data=data,
                metadata=BackupMetadata(
                    total_records=len(records) if isinstance(records, list) else 0,
                    app_version=APP_VERSION
                )
            )
            self.store.set_item(BACKUP_KEY_PREFIX + backup_id, backup.model_dump_json())

            settings = self.load_settings()
            history = [b for b in settings.history if b != backup_id] + [backup_id]
            expired = history[:-settings.max_backup_files]
            if expired:
                self.store.multi_remove([BACKUP_KEY_PREFIX + b for b in expired])
            self.save_settings(settings.model_copy(update={
                "history": history[-settings.max_backup_files:],
                "last_backup_date": now
            }))
        except Exception as e:
            logger.error("Error creating backup", extra={
                "backup_id": backup_id,
                "error": str(e),
                "error_type": e.__class__.__name__
            })
            raise BackupError(f"Failed to create backup: {str(e)}")

        logger.info("Backup created", extra={
            "backup_id": backup_id,
            "total_records": backup.metadata.total_records,
            "pruned": len(expired)
        })
        return backup

    def list_backups(self) -> List[str]:
        """Backup ids, oldest first."""
        return list(self.load_settings().history)

    def load_backup(self, backup_id: str) -> Optional[BackupData]:
        raw = self.store.get_item(BACKUP_KEY_PREFIX + backup_id)
        if raw is None:
            return None
        try:
            return BackupData.model_validate_json(raw)
        except ValidationError as e:
            logger.warning("Corrupted backup", extra={"backup_id": backup_id, "error": str(e)})
            return None

    def restore_backup(self, backup: BackupData) -> int:
        """
        Write a backup's snapshot back into the store.

        Keys captured as missing are removed so the store matches the snapshot.

        Args:
            backup: Backup to restore

        Returns:
            Number of keys written

        Raises:
            BackupVersionError: If the backup was written by an incompatible version
        """
        if _major(backup.version) != _major(BACKUP_VERSION):
            raise BackupVersionError(
                f"Backup version {backup.version} is not compatible with {BACKUP_VERSION}"
            )

        restored = 0
        for key, value in backup.data.items():
            if key not in APP_DATA_KEYS:
                logger.warning("Ignoring unknown key in backup", extra={"key": key})
                continue
            if value is None:
                self.store.remove_item(key)
            else:
                self.store.set_item(key, json.dumps(value))
                restored += 1

        logger.info("Backup restored", extra={"backup_id": backup.backup_id, "keys": restored})
        return restored

    def restore_from_id(self, backup_id: str) -> int:
        backup = self.load_backup(backup_id)
        if backup is None:
            raise BackupError(f"Backup {backup_id} not found")
        return self.restore_backup(backup)

    def export_backup(self, backup: BackupData) -> str:
        """
        Export a backup through the configured exporter.

        Raises:
            ExportUnavailableError: If no exporter is configured or it reports
                itself unavailable
        """
        if self.exporter is None or not self.exporter.is_available():
            raise ExportUnavailableError("Backup export is not available")

        filename = f"cycle-tracker-backup-{backup.timestamp.date().isoformat()}.json"
        location = self.exporter.export(filename, backup.model_dump_json(indent=2))
        logger.info("Backup exported", extra={"backup_id": backup.backup_id, "location": location})
        return location

    def should_auto_backup(self, now: Optional[datetime] = None) -> bool:
        settings = self.load_settings()
        if not settings.auto_backup_enabled:
            return False
        if settings.last_backup_date is None:
            return True
        if now is None:
            now = self.clock()
        interval = timedelta(days=BACKUP_FREQUENCY_DAYS[settings.backup_frequency])
        return now - settings.last_backup_date >= interval
