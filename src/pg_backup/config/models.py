"""Pydantic models for backup configuration."""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


DEFAULT_BACKUP_DIR = Path("./backups")


class BackupConfig(BaseModel):
    """Settings for one backed-up database, fixed for the process lifetime."""

    model_config = ConfigDict(frozen=True)

    database_url: str | None = None
    backup_dir: Path = DEFAULT_BACKUP_DIR
    pg_dump_bin: str = "pg_dump"
    pg_restore_bin: str = "pg_restore"
    psql_bin: str = "psql"
    command_timeout: float | None = Field(default=None, gt=0)  # seconds, None = wait forever
