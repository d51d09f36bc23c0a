"""
Backup payload and settings models.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

BACKUP_VERSION = "1.0"


class BackupMetadata(BaseModel):
    total_records: int = 0
    app_version: str


class BackupData(BaseModel):
    """
    Snapshot of every application key.
    """
    version: str = BACKUP_VERSION
    backup_id: str
    timestamp: datetime
    data: Dict[str, Optional[Any]]
    metadata: BackupMetadata


class BackupSettings(BaseModel):
    auto_backup_enabled: bool = True
    backup_frequency: str = Field("weekly", pattern="^(daily|weekly|monthly)$")
    last_backup_date: Optional[datetime] = None
    max_backup_files: int = Field(5, ge=1)
    history: List[str] = Field(default_factory=list)
