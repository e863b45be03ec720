"""Backup creation, restore and inventory.

Usage:
    from pg_backup.backup import PostgresBackup, BackupStore, ArtifactKind
"""

from pg_backup.backup.models import ArtifactKind, BackupFileInfo, BackupPaths
from pg_backup.backup.orchestrator import PostgresBackup
from pg_backup.backup.store import UNKNOWN_DB, BackupStore, derive_identifier

__all__ = [
    "ArtifactKind",
    "BackupFileInfo",
    "BackupPaths",
    "BackupStore",
    "PostgresBackup",
    "UNKNOWN_DB",
    "derive_identifier",
]
