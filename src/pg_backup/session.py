"""Interactive restore: pick a backup, confirm, restore.

The flow is List -> Select -> Confirm -> Execute. Anything other than a
valid selection followed by an explicit ``y`` cancels without touching the
database.

Usage:
    with RestoreSession(backup) as session:
        outcome = await session.run()
"""

import logging
from enum import Enum
from typing import TextIO

from rich.console import Console
from rich.table import Table

from pg_backup.backup.orchestrator import PostgresBackup
from pg_backup.errors import BackupError

logger = logging.getLogger(__name__)

QUIT = "q"
AFFIRMATIVE = "y"


class SessionOutcome(str, Enum):
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    FAILED = "failed"


class PromptReader:
    """Line-oriented answers from a text stream.

    Reads ``sys.stdin`` when no stream is given. After ``close()`` (or at
    end of input) every answer is empty, which the session treats as a
    cancellation. Ctrl-C at a prompt answers ``q`` and closes the reader.
    The underlying stream is never closed here.
    """

    def __init__(self, console: Console, stream: TextIO | None = None):
        self._console = console
        self._stream = stream
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def ask(self, prompt: str) -> str:
        if self._closed:
            return ""
        try:
            answer = self._console.input(prompt, stream=self._stream)
        except EOFError:
            return ""
        except KeyboardInterrupt:
            # Ctrl-C at a prompt quits; later prompts answer empty
            self._console.print()
            self.close()
            return QUIT
        return answer.strip()

    def close(self) -> None:
        self._closed = True


def parse_selection(answer: str, count: int) -> int | None:
    """0-based index for a 1-based ``answer``, or None if invalid.

    Example:
        >>> parse_selection("2", 3)
        1
        >>> parse_selection("4", 3) is None
        True
    """
    try:
        index = int(answer) - 1
    except ValueError:
        return None
    if 0 <= index < count:
        return index
    return None


class RestoreSession:
    """One interactive restore, bound to a ``PostgresBackup``.

    Use as a context manager so the prompt reader is released on every
    exit path.
    """

    def __init__(
        self,
        backup: PostgresBackup,
        *,
        console: Console | None = None,
        reader: PromptReader | None = None,
    ):
        self._backup = backup
        self._console = console or Console()
        self._reader = reader or PromptReader(self._console)

    def __enter__(self) -> "RestoreSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._reader.close()

    def _render(self, backups) -> None:
        table = Table(
            title="Available backups (custom format)",
            show_header=True,
            header_style="bold",
        )
        table.add_column("#", justify="right", style="bold cyan")
        table.add_column("File")
        table.add_column("Size (MB)", justify="right")
        table.add_column("Date", style="dim")

        for index, path in enumerate(backups, start=1):
            info = self._backup.store.describe(path)
            table.add_row(str(index), info.name, info.size_mb, info.modified_display)

        self._console.print()
        self._console.print(table)

    async def run(self) -> SessionOutcome:
        """Drive the session to a terminal outcome.

        Failures of the listing or of the restore itself are reported and
        returned as ``FAILED``; they are not re-raised.
        """
        try:
            backups = self._backup.list_backups()
            if backups:
                self._render(backups)
        except BackupError as e:
            self._console.print(f"[bold red]x[/bold red] {e}")
            return SessionOutcome.FAILED

        if not backups:
            self._console.print("[yellow]No backup files available[/yellow]")
            return SessionOutcome.CANCELLED

        answer = self._reader.ask(
            f"\nEnter the number of the backup to restore (1-{len(backups)}), "
            f"or '{QUIT}' to quit: "
        )
        if answer.lower() == QUIT:
            self._console.print("Restore cancelled")
            return SessionOutcome.CANCELLED

        index = parse_selection(answer, len(backups))
        if index is None:
            self._console.print("[yellow]Invalid selection[/yellow]")
            return SessionOutcome.CANCELLED

        selected = backups[index]
        confirmation = self._reader.ask(
            f"\nAre you sure you want to restore from {selected.name}? (y/N): "
        )
        if confirmation.lower() != AFFIRMATIVE:
            self._console.print("Restore cancelled")
            return SessionOutcome.CANCELLED

        self._console.print(f"Restoring from [bold]{selected.name}[/bold]...", style="dim")
        try:
            await self._backup.restore_backup(selected)
        except BackupError as e:
            self._console.print(f"[bold red]x[/bold red] Restore failed: {e}")
            return SessionOutcome.FAILED

        self._console.print("[bold green]v[/bold green] Restore completed successfully")
        return SessionOutcome.COMPLETED
