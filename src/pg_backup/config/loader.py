"""Load ``BackupConfig`` from the process environment.

Values come from environment variables, optionally seeded from a ``.env``
file. Variables already set in the host environment win over the file.

Recognised variables (each optionally prefixed, see ``env_prefix``):

    DATABASE_URL              connection string handed to the tools
    BACKUP_DIR                root backup directory (default ./backups)
    PG_DUMP / PG_RESTORE / PSQL   tool executables
    BACKUP_COMMAND_TIMEOUT    seconds before a tool is killed
"""

import os
from pathlib import Path

from dotenv import find_dotenv, load_dotenv
from pydantic import ValidationError

from pg_backup.config.models import DEFAULT_BACKUP_DIR, BackupConfig
from pg_backup.errors import ConfigError


def load_backup_config(
    env_prefix: str = "",
    env_file: str | Path | None = None,
    backup_dir: str | Path | None = None,
) -> BackupConfig:
    """Build the configuration once at startup.

    Args:
        env_prefix: Prefix for variable lookup (``"APP_"`` reads
            ``APP_DATABASE_URL``).
        env_file: ``.env`` file to load. ``None`` searches for ``.env``
            from the working directory upwards.
        backup_dir: Explicit backup directory, overriding ``BACKUP_DIR``.

    Returns:
        Frozen ``BackupConfig``. A missing ``DATABASE_URL`` is allowed.

    Raises:
        ConfigError: If a value is present but invalid (e.g. a timeout
            that is not a positive number).
    """
    if env_file is not None:
        load_dotenv(env_file, override=False)
    else:
        load_dotenv(find_dotenv(usecwd=True), override=False)

    def env(name: str) -> str | None:
        value = os.environ.get(f"{env_prefix}{name}")
        return value if value else None

    values: dict = {
        "database_url": env("DATABASE_URL"),
        "backup_dir": Path(backup_dir or env("BACKUP_DIR") or DEFAULT_BACKUP_DIR),
    }
    for field, var in (
        ("pg_dump_bin", "PG_DUMP"),
        ("pg_restore_bin", "PG_RESTORE"),
        ("psql_bin", "PSQL"),
        ("command_timeout", "BACKUP_COMMAND_TIMEOUT"),
    ):
        value = env(var)
        if value is not None:
            values[field] = value

    try:
        return BackupConfig(**values)
    except ValidationError as e:
        raise ConfigError(f"Invalid backup configuration: {e}") from e
