"""Exception hierarchy for pg-backup.

Every failure an operation can surface derives from ``BackupError`` so the
CLI and the scheduler can catch one type and report it.
"""

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pg_backup.runner import CommandResult


class BackupError(Exception):
    """Base class for all pg-backup errors."""

    pass


class ConfigError(BackupError):
    """Raised when configuration values cannot be interpreted."""

    pass


class BackupStorageError(BackupError):
    """Raised when the backup directories cannot be created or listed."""

    pass


class CommandError(BackupError):
    """Raised when an external tool cannot be launched or exits non-zero."""

    def __init__(self, message: str, result: "CommandResult | None" = None):
        super().__init__(message)
        self.result = result


class CommandTimeoutError(CommandError):
    """Raised when an external tool exceeds its time budget and is killed."""

    pass


class BackupFailedError(BackupError):
    """Raised when either dump of a backup pair fails."""

    def __init__(self, message: str, database: str, timestamp: str):
        super().__init__(message)
        self.database = database
        self.timestamp = timestamp


class RestoreFailedError(BackupError):
    """Raised when a restore invocation fails."""

    def __init__(self, message: str, database: str, path: Path):
        super().__init__(message)
        self.database = database
        self.path = path
