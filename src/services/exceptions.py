"""
Service-level exceptions.

This module contains exceptions that can be raised by various services
in the application.
"""

class CycleTrackerError(Exception):
    """Base exception for cycle tracker services."""
    pass

class StorageError(CycleTrackerError):
    """Raised when the key/value store cannot be read or written."""
    pass

class CorruptedDataError(CycleTrackerError):
    """Raised when a persisted payload cannot be decoded."""
    pass

class BackupError(CycleTrackerError):
    """Base exception for backup and restore errors."""
    pass

class BackupVersionError(BackupError):
    """Raised when a backup was written by an incompatible version."""
    pass

class ExportUnavailableError(BackupError):
    """Raised when no export capability is available on this device."""
    pass
