"""Configuration: the ``BackupConfig`` model and its environment loader.

Usage:
    >>> from pg_backup.config import load_backup_config, BackupConfig
"""

from pg_backup.config.loader import load_backup_config
from pg_backup.config.models import BackupConfig

__all__ = ["load_backup_config", "BackupConfig"]
