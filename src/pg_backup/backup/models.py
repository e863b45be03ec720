"""Models describing backup artifacts on disk."""

from datetime import datetime
from enum import Enum
from pathlib import Path

from pydantic import BaseModel


class ArtifactKind(str, Enum):
    """The two formats written for every backup."""

    PLAIN = "sql"           # pg_dump plain text, lives in <root>/sql/
    CUSTOM = "backup"       # pg_dump -Fc, lives in <root>/

    @property
    def suffix(self) -> str:
        return f".{self.value}"


class BackupPaths(BaseModel):
    """Both files produced by one ``create_backup()`` call."""

    sql: Path
    backup: Path
    timestamp: str


class BackupFileInfo(BaseModel):
    """Display details for one artifact."""

    name: str
    path: Path
    size_bytes: int
    modified: datetime

    @property
    def size_mb(self) -> str:
        """Size in megabytes with two decimals, e.g. ``'0.01'``."""
        return f"{self.size_bytes / (1024 * 1024):.2f}"

    @property
    def modified_display(self) -> str:
        return self.modified.strftime("%Y-%m-%d %H:%M:%S")
