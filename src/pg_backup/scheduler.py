"""Unattended daily backups.

``DailyBackupScheduler`` runs ``create_backup()`` once a day at local
midnight inside a background asyncio task. A failed backup is logged and
the schedule carries on to the next day.

Usage:
    scheduler = DailyBackupScheduler(backup)
    scheduler.start()        # returns immediately
    await scheduler.wait()   # serve until stop() or cancellation
"""

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime

from croniter import croniter

from pg_backup.backup.orchestrator import PostgresBackup

logger = logging.getLogger(__name__)

# Every day at 00:00, host local time
DAILY_AT_MIDNIGHT = "0 0 * * *"


def next_run(cron_expr: str, after: datetime) -> datetime:
    """Next firing of ``cron_expr`` strictly after ``after`` (naive local)."""
    return croniter(cron_expr, after).get_next(datetime)


class DailyBackupScheduler:
    """One recurring backup trigger for the lifetime of the process."""

    def __init__(
        self,
        backup: PostgresBackup,
        *,
        cron_expr: str = DAILY_AT_MIDNIGHT,
        now: Callable[[], datetime] | None = None,
    ):
        """
        Args:
            backup: Orchestrator whose ``create_backup()`` is fired.
            cron_expr: Firing schedule. Defaults to local midnight.
            now: Returns the current naive local time (injectable for tests).
        """
        self._backup = backup
        self._cron_expr = cron_expr
        self._now = now or datetime.now
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def next_run(self) -> datetime:
        return next_run(self._cron_expr, self._now())

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Register the trigger. Must be called from a running event loop."""
        if self.running:
            logger.warning("Daily backup already scheduled; ignoring second registration")
            return
        self._task = asyncio.get_running_loop().create_task(
            self._loop(), name="daily-backup"
        )
        logger.info(
            f"Daily backups scheduled ({self._cron_expr}), "
            f"first run {self.next_run().isoformat(sep=' ')}"
        )

    async def stop(self) -> None:
        if self._task and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None
        logger.info("Daily backup schedule stopped")

    async def wait(self) -> None:
        """Block until the trigger task ends."""
        if self._task is not None:
            await self._task

    # ------------------------------------------------------------------
    # Firing
    # ------------------------------------------------------------------

    async def fire(self) -> bool:
        """Run one scheduled backup. Never raises for backup failures.

        Returns:
            True if the backup succeeded.
        """
        try:
            paths = await self._backup.create_backup()
        except Exception as e:
            logger.error(
                f"Scheduled backup failed: {e}",
                extra={"database": self._backup.database_name},
            )
            return False

        logger.info(
            "Scheduled backup completed",
            extra={
                "database": self._backup.database_name,
                "sql_backup": str(paths.sql),
                "custom_backup": str(paths.backup),
            },
        )
        return True

    async def _loop(self) -> None:
        after = self._now()
        while True:
            due = next_run(self._cron_expr, after)
            delay = max((due - self._now()).total_seconds(), 0.0)
            logger.debug(f"Next scheduled backup at {due.isoformat(sep=' ')}")
            await asyncio.sleep(delay)
            await self.fire()
            # An early wake-up must not fire the same slot twice
            after = max(due, self._now())
