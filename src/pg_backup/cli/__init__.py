"""CLI for PostgreSQL backup and restore.

Usage:
    pg-backup backup
    pg-backup restore
    pg-backup list
    pg-backup list --sql
    pg-backup schedule
    pg-backup --env-prefix APP_ --backup-dir /var/backups/pg backup

Commands:
    backup    - Create a plain-text and a custom-format dump
    restore   - Pick a custom-format backup interactively and restore it
    list      - List custom-format backups (or SQL dumps with --sql)
    schedule  - Run a backup every day at midnight until interrupted

Configuration is read once from the environment (optionally seeded from a
``.env`` file): ``DATABASE_URL``, ``BACKUP_DIR``, ``PG_DUMP``,
``PG_RESTORE``, ``PSQL`` and ``BACKUP_COMMAND_TIMEOUT``.
"""

import argparse
import asyncio
import sys

from rich.console import Console
from rich.table import Table

from pg_backup.backup.orchestrator import PostgresBackup
from pg_backup.config.loader import load_backup_config
from pg_backup.errors import BackupError
from pg_backup.logging_config import setup_logging
from pg_backup.scheduler import DailyBackupScheduler
from pg_backup.session import RestoreSession, SessionOutcome

console = Console()


def _build_backup(args: argparse.Namespace) -> PostgresBackup:
    """Load configuration once and construct the orchestrator.

    Raises:
        BackupError: On invalid configuration or unusable backup directory.
    """
    config = load_backup_config(
        env_prefix=getattr(args, "env_prefix", ""),
        env_file=getattr(args, "env_file", None),
        backup_dir=getattr(args, "backup_dir", None),
    )
    return PostgresBackup(config)


# ============================================================================
# Async command implementations
# ============================================================================


async def _async_backup(args: argparse.Namespace) -> int:
    """Async implementation for backup command.

    Returns:
        0 on success, 1 on failure.
    """
    try:
        backup = _build_backup(args)
        console.print(
            f"Backing up database [bold cyan]{backup.database_name}[/bold cyan]...",
            style="dim",
        )
        paths = await backup.create_backup()
    except BackupError as e:
        console.print(f"[bold red]x[/bold red] {e}")
        return 1

    console.print("[bold green]v[/bold green] Backups created")
    console.print(f"  SQL dump:      {paths.sql}")
    console.print(f"  Custom format: {paths.backup}")
    return 0


async def _async_restore(args: argparse.Namespace) -> int:
    """Async implementation for the interactive restore command.

    Returns:
        0 when restored or cancelled, 1 on failure.
    """
    try:
        backup = _build_backup(args)
    except BackupError as e:
        console.print(f"[bold red]x[/bold red] {e}")
        return 1

    with RestoreSession(backup, console=console) as session:
        outcome = await session.run()

    return 1 if outcome is SessionOutcome.FAILED else 0


async def _async_schedule(args: argparse.Namespace) -> int:
    """Register the daily trigger and serve it until interrupted.

    Returns:
        1 if the orchestrator cannot be built, otherwise 0 when stopped.
    """
    try:
        backup = _build_backup(args)
    except BackupError as e:
        console.print(f"[bold red]x[/bold red] {e}")
        return 1

    scheduler = DailyBackupScheduler(backup)
    scheduler.start()
    console.print(
        f"[bold green]v[/bold green] Daily backups scheduled for "
        f"[bold cyan]{backup.database_name}[/bold cyan]"
    )
    console.print(
        f"  Next run: {scheduler.next_run().isoformat(sep=' ')}", style="dim"
    )
    console.print("  Press Ctrl-C to stop.", style="dim")
    try:
        await scheduler.wait()
    finally:
        await scheduler.stop()
    return 0


# ============================================================================
# Sync command wrappers
# ============================================================================


def cmd_backup(args: argparse.Namespace) -> int:
    """Create a new backup pair.

    Wraps the async implementation with ``asyncio.run()``.
    """
    return asyncio.run(_async_backup(args))


def cmd_restore(args: argparse.Namespace) -> int:
    """Restore from a backup file chosen interactively.

    Wraps the async implementation with ``asyncio.run()``. Ctrl-C while the
    restore tool runs kills it and exits 1.
    """
    try:
        return asyncio.run(_async_restore(args))
    except KeyboardInterrupt:
        console.print("\n[bold red]x[/bold red] Restore interrupted")
        return 1


def cmd_list(args: argparse.Namespace) -> int:
    """List backups, or SQL dumps with ``--sql``.

    Reads only the local backup directories -- no database calls.

    Returns:
        0 on success (including an empty listing), 1 on failure.
    """
    sql = getattr(args, "sql", False)
    try:
        backup = _build_backup(args)
        files = backup.list_sql_dumps() if sql else backup.list_backups()
    except BackupError as e:
        console.print(f"[bold red]x[/bold red] {e}")
        return 1

    if not files:
        console.print(
            "[yellow]No SQL dumps available[/yellow]"
            if sql
            else "[yellow]No backups available[/yellow]"
        )
        return 0

    table = Table(
        title=f"Available {'SQL dumps' if sql else 'backups'}",
        show_header=True,
        header_style="bold",
    )
    table.add_column("File")
    table.add_column("Size (MB)", justify="right")
    table.add_column("Date", style="dim")

    try:
        for path in files:
            info = backup.store.describe(path)
            table.add_row(info.name, info.size_mb, info.modified_display)
    except BackupError as e:
        console.print(f"[bold red]x[/bold red] {e}")
        return 1

    console.print(table)
    return 0


def cmd_schedule(args: argparse.Namespace) -> int:
    """Schedule daily backups and keep running until Ctrl-C.

    Wraps the async implementation with ``asyncio.run()``.
    """
    try:
        return asyncio.run(_async_schedule(args))
    except KeyboardInterrupt:
        console.print("\nSchedule stopped.", style="dim")
        return 0


# ============================================================================
# Main entry point
# ============================================================================


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    Parses command line arguments and dispatches to appropriate handler.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = argparse.ArgumentParser(
        prog="pg-backup",
        description="PostgreSQL backup and restore utility",
    )

    parser.add_argument(
        "--env-prefix",
        default="",
        help=(
            "Prefix for environment variable lookup "
            "(e.g., --env-prefix APP_ reads APP_DATABASE_URL)"
        ),
    )
    parser.add_argument(
        "--env-file",
        default=None,
        help="Path to a .env file (default: search for .env upwards)",
    )
    parser.add_argument(
        "--backup-dir",
        default=None,
        help="Root backup directory (overrides BACKUP_DIR, default ./backups)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # backup command
    p_backup = subparsers.add_parser(
        "backup",
        help="Create a new backup",
    )
    p_backup.set_defaults(func=cmd_backup)

    # restore command
    p_restore = subparsers.add_parser(
        "restore",
        help="Restore from a backup file (interactive)",
    )
    p_restore.set_defaults(func=cmd_restore)

    # list command
    p_list = subparsers.add_parser(
        "list",
        help="List all backups",
    )
    p_list.add_argument(
        "--sql",
        "-s",
        action="store_true",
        help="List SQL dumps instead of backup files",
    )
    p_list.set_defaults(func=cmd_list)

    # schedule command
    p_schedule = subparsers.add_parser(
        "schedule",
        help="Schedule daily backups",
    )
    p_schedule.set_defaults(func=cmd_schedule)

    args = parser.parse_args(argv)
    setup_logging(verbose=args.verbose)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
