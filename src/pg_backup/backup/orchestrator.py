"""Create, restore and list backups of one PostgreSQL database.

``PostgresBackup`` is the primary API. Each backup is a pair of files
sharing one timestamp: a plain-text ``pg_dump`` under ``<root>/sql/`` and a
custom-format ``pg_dump -Fc`` under ``<root>/``. Both dumps run
concurrently and the backup succeeds only when both do.

Usage:
    from pg_backup.backup.orchestrator import PostgresBackup
    from pg_backup.config import load_backup_config

    backup = PostgresBackup(load_backup_config())
    paths = await backup.create_backup()
    await backup.restore_backup(paths.backup)
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from datetime import datetime, timezone
from pathlib import Path

from pg_backup.backup.models import ArtifactKind, BackupPaths
from pg_backup.backup.store import (
    BackupStore,
    backup_filename,
    derive_identifier,
    format_timestamp,
)
from pg_backup.config.models import BackupConfig
from pg_backup.errors import (
    BackupError,
    BackupFailedError,
    ConfigError,
    RestoreFailedError,
)
from pg_backup.runner import CommandResult, run_command

logger = logging.getLogger(__name__)

Runner = Callable[..., Awaitable[CommandResult]]
Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PostgresBackup:
    """Backup orchestrator bound to a single ``BackupConfig``.

    Constructing it creates the backup directory tree and derives the
    database identifier used in file names.

    Args:
        config: Startup configuration. Never re-read from the environment.
        clock: Returns the backup instant. Defaults to the current UTC time.
        runner: Async callable with the ``run_command`` signature.

    Raises:
        BackupStorageError: If the backup directories cannot be created.
    """

    def __init__(
        self,
        config: BackupConfig,
        *,
        clock: Clock | None = None,
        runner: Runner | None = None,
    ):
        self._config = config
        self._clock = clock or _utcnow
        self._runner = runner or run_command
        self._store = BackupStore(config.backup_dir)
        self._store.ensure_directories()
        self._database = derive_identifier(config.database_url)

    @property
    def config(self) -> BackupConfig:
        return self._config

    @property
    def store(self) -> BackupStore:
        return self._store

    @property
    def database_name(self) -> str:
        return self._database

    # ------------------------------------------------------------------
    # Command construction
    # ------------------------------------------------------------------

    def _connection(self) -> str:
        if not self._config.database_url:
            raise ConfigError("DATABASE_URL is not set")
        return self._config.database_url

    def build_dump_args(self, kind: ArtifactKind, target: Path) -> list[str]:
        """``pg_dump`` argv writing ``kind`` format to ``target``."""
        args = [self._config.pg_dump_bin]
        if kind is ArtifactKind.CUSTOM:
            args.append("-Fc")
        args += [self._connection(), "-f", str(target)]
        return args

    def build_restore_args(self, path: Path) -> list[str]:
        """Restore argv chosen by file suffix.

        ``.backup`` files go through ``pg_restore --clean --if-exists``;
        every other file is executed with ``psql -f``.
        """
        if path.name.endswith(ArtifactKind.CUSTOM.suffix):
            return [
                self._config.pg_restore_bin,
                "-d",
                self._connection(),
                "--clean",
                "--if-exists",
                str(path),
            ]
        return [self._config.psql_bin, self._connection(), "-f", str(path)]

    async def _run(self, args: Sequence[str]) -> CommandResult:
        return await self._runner(args, timeout=self._config.command_timeout)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def create_backup(self) -> BackupPaths:
        """Dump the database in both formats concurrently.

        Returns:
            ``BackupPaths`` with the plain and custom file paths.

        Raises:
            BackupFailedError: If either dump fails. The cause is chained.
                The other dump still runs to completion and its file is
                left in place.
        """
        timestamp = format_timestamp(self._clock())
        sql_name = backup_filename(self._database, timestamp, ArtifactKind.PLAIN)
        backup_name = backup_filename(self._database, timestamp, ArtifactKind.CUSTOM)
        sql_path = self._store.path_for(ArtifactKind.PLAIN, sql_name)
        backup_path = self._store.path_for(ArtifactKind.CUSTOM, backup_name)

        cause: BaseException | None = None
        try:
            sql_args = self.build_dump_args(ArtifactKind.PLAIN, sql_path)
            custom_args = self.build_dump_args(ArtifactKind.CUSTOM, backup_path)
        except ConfigError as e:
            cause = e
        else:
            # Join, not race: a failing dump never cuts its sibling short
            results = await asyncio.gather(
                self._run(sql_args),
                self._run(custom_args),
                return_exceptions=True,
            )
            cause = next(
                (r for r in results if isinstance(r, BaseException)), None
            )

        if cause is not None:
            logger.error(
                f"Backup failed for database '{self._database}': {cause}",
                extra={"database": self._database, "timestamp": timestamp},
            )
            leftovers = [str(p) for p in (sql_path, backup_path) if p.exists()]
            if leftovers:
                logger.warning(
                    f"Partial backup files left on disk: {', '.join(leftovers)}",
                    extra={"database": self._database, "files": leftovers},
                )
            raise BackupFailedError(
                f"Backup failed for database '{self._database}': {cause}",
                database=self._database,
                timestamp=timestamp,
            ) from cause

        logger.info(
            f"Backups created successfully for database '{self._database}'",
            extra={
                "database": self._database,
                "sql_backup": sql_name,
                "custom_backup": backup_name,
                "timestamp": timestamp,
            },
        )
        return BackupPaths(sql=sql_path, backup=backup_path, timestamp=timestamp)

    async def restore_backup(self, path: str | Path) -> None:
        """Restore the database from ``path``.

        Raises:
            RestoreFailedError: If the restore tool fails. The cause is chained.
        """
        path = Path(path)
        try:
            await self._run(self.build_restore_args(path))
        except BackupError as e:
            logger.error(
                f"Restore failed for database '{self._database}' from {path}: {e}",
                extra={"database": self._database, "path": str(path)},
            )
            raise RestoreFailedError(
                f"Restore from {path.name} failed: {e}",
                database=self._database,
                path=path,
            ) from e

        logger.info(
            f"Restore completed successfully from: {path}",
            extra={"database": self._database, "path": str(path)},
        )

    def list_backups(self) -> list[Path]:
        """Custom-format ``.backup`` files in the root directory."""
        return self._store.list_artifacts(ArtifactKind.CUSTOM)

    def list_sql_dumps(self) -> list[Path]:
        """Plain-text ``.sql`` files in the ``sql`` subdirectory."""
        return self._store.list_artifacts(ArtifactKind.PLAIN)
