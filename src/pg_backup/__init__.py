"""pg-backup: pg_dump based backup and restore for one PostgreSQL database.

Creates paired plain-text and custom-format dumps, restores either kind,
lists the inventory, and can run a daily backup unattended.

Usage:
    from pg_backup import PostgresBackup, load_backup_config
    from pg_backup import RestoreSession, DailyBackupScheduler
"""

__version__ = "0.1.0"

# Config
from pg_backup.config.loader import load_backup_config
from pg_backup.config.models import BackupConfig

# Errors
from pg_backup.errors import (
    BackupError,
    BackupFailedError,
    BackupStorageError,
    CommandError,
    CommandTimeoutError,
    ConfigError,
    RestoreFailedError,
)

# Backup
from pg_backup.backup.models import ArtifactKind, BackupFileInfo, BackupPaths
from pg_backup.backup.orchestrator import PostgresBackup
from pg_backup.backup.store import UNKNOWN_DB, BackupStore, derive_identifier

# Process runner
from pg_backup.runner import CommandResult, run_command

# Interactive restore and scheduling
from pg_backup.scheduler import DAILY_AT_MIDNIGHT, DailyBackupScheduler
from pg_backup.session import RestoreSession, SessionOutcome

__all__ = [
    # Config
    "load_backup_config",
    "BackupConfig",
    # Errors
    "BackupError",
    "BackupFailedError",
    "BackupStorageError",
    "CommandError",
    "CommandTimeoutError",
    "ConfigError",
    "RestoreFailedError",
    # Backup
    "ArtifactKind",
    "BackupFileInfo",
    "BackupPaths",
    "BackupStore",
    "PostgresBackup",
    "UNKNOWN_DB",
    "derive_identifier",
    # Runner
    "CommandResult",
    "run_command",
    # Session / scheduler
    "RestoreSession",
    "SessionOutcome",
    "DailyBackupScheduler",
    "DAILY_AT_MIDNIGHT",
]
