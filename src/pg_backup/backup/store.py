"""On-disk layout of backup artifacts.

Layout::

    <root>/                  <dbid>-backup-<timestamp>.backup
    <root>/sql/              <dbid>-backup-<timestamp>.sql

Listings follow the filesystem's directory order; nothing here sorts.
"""

import os
from datetime import datetime, timezone
from pathlib import Path
from urllib.parse import urlsplit

from pg_backup.backup.models import ArtifactKind, BackupFileInfo
from pg_backup.errors import BackupStorageError

UNKNOWN_DB = "unknown-db"
SQL_SUBDIR = "sql"


def derive_identifier(connection_string: str | None) -> str:
    """Extract the database name from a connection URL.

    Returns the URL path without its leading ``/``. Anything that is not a
    URL with a scheme and a non-empty path yields ``UNKNOWN_DB``.

    Example:
        >>> derive_identifier("postgresql://u:p@db:5432/orders")
        'orders'
        >>> derive_identifier("not a url")
        'unknown-db'
    """
    if not connection_string:
        return UNKNOWN_DB
    try:
        parts = urlsplit(connection_string.strip())
    except ValueError:
        return UNKNOWN_DB
    if not parts.scheme:
        return UNKNOWN_DB
    return parts.path.removeprefix("/") or UNKNOWN_DB


def format_timestamp(moment: datetime) -> str:
    """Filesystem-safe ISO-8601 UTC timestamp with millisecond precision.

    Example:
        >>> format_timestamp(datetime(2024, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc))
        '2024-01-02T03-04-05-678Z'
    """
    if moment.tzinfo is None:
        moment = moment.astimezone()
    utc = moment.astimezone(timezone.utc)
    iso = f"{utc.strftime('%Y-%m-%dT%H:%M:%S')}.{utc.microsecond // 1000:03d}Z"
    return iso.replace(":", "-").replace(".", "-")


def backup_filename(identifier: str, timestamp: str, kind: ArtifactKind) -> str:
    return f"{identifier}-backup-{timestamp}{kind.suffix}"


class BackupStore:
    """Directory bookkeeping for one backup root."""

    def __init__(self, root: str | Path):
        self.root = Path(root)
        self.sql_dir = self.root / SQL_SUBDIR

    def ensure_directories(self) -> None:
        """Create the root and ``sql`` directories if missing.

        Raises:
            BackupStorageError: If a directory cannot be created.
        """
        for directory in (self.root, self.sql_dir):
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise BackupStorageError(
                    f"Cannot create backup directory {directory}: {e}"
                ) from e

    def directory_for(self, kind: ArtifactKind) -> Path:
        return self.sql_dir if kind is ArtifactKind.PLAIN else self.root

    def path_for(self, kind: ArtifactKind, filename: str) -> Path:
        return self.directory_for(kind) / filename

    def list_artifacts(self, kind: ArtifactKind) -> list[Path]:
        """Full paths of ``kind`` files, in directory-listing order.

        Raises:
            BackupStorageError: If the directory cannot be read.
        """
        directory = self.directory_for(kind)
        try:
            with os.scandir(directory) as entries:
                return [
                    directory / entry.name
                    for entry in entries
                    if entry.name.endswith(kind.suffix) and entry.is_file()
                ]
        except OSError as e:
            raise BackupStorageError(
                f"Cannot list backup directory {directory}: {e}"
            ) from e

    @staticmethod
    def describe(path: Path) -> BackupFileInfo:
        """Size and modification time of ``path``.

        Raises:
            BackupStorageError: If the file is gone or unreadable.
        """
        try:
            stat = path.stat()
        except OSError as e:
            raise BackupStorageError(f"Cannot read backup file {path}: {e}") from e
        return BackupFileInfo(
            name=path.name,
            path=path,
            size_bytes=stat.st_size,
            modified=datetime.fromtimestamp(stat.st_mtime),
        )
