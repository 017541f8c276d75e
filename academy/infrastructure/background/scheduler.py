# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Cron jobs run inside the API process.

APScheduler's AsyncIOScheduler drives coroutine jobs on the application's
event loop. A run that raises is logged and counted; the next run happens
at the next cron fire time, there is no retry. At most one instance of a
job runs at a time and missed fire times are coalesced.

The only job today is the expired registration sweep, registered by
start_scheduler() when ``CLEANUP_ENABLED`` is set.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any, Awaitable, Callable
from uuid import uuid4

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from academy.utils.datetime import utc_now

if TYPE_CHECKING:
    from academy.core.config.settings import Settings

logger = logging.getLogger(__name__)

JobFunc = Callable[..., Awaitable[Any]]

CLEANUP_TASK_NAME = "Expired Registration Cleanup"


def parse_cron(cron_expression: str) -> CronTrigger:
    """UTC trigger for a standard five-field crontab line.

    Raises:
        ValueError: If the expression is not five fields or a field is invalid.
    """
    if len(cron_expression.split()) != 5:
        raise ValueError(f"Invalid cron expression: {cron_expression!r}")
    return CronTrigger.from_crontab(cron_expression, timezone="UTC")


@dataclass
class ScheduledTask:
    """A registered job and its run counters."""

    name: str
    func: JobFunc
    trigger: CronTrigger
    args: tuple = ()
    kwargs: dict[str, Any] = field(default_factory=dict)
    enabled: bool = True
    id: str = field(default_factory=lambda: uuid4().hex)
    last_run: datetime | None = None
    run_count: int = 0
    error_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "enabled": self.enabled,
            "trigger": str(self.trigger),
            "last_run": self.last_run.isoformat() if self.last_run else None,
            "run_count": self.run_count,
            "error_count": self.error_count,
        }


class JobScheduler:
    """Registry of cron tasks backed by an AsyncIOScheduler.

    Tasks may be added before or after start(); anything registered
    earlier is handed to APScheduler when it starts.
    """

    def __init__(self) -> None:
        self._tasks: dict[str, ScheduledTask] = {}
        self._scheduler: AsyncIOScheduler | None = None

    @property
    def is_running(self) -> bool:
        return self._scheduler is not None

    def list_tasks(self) -> list[ScheduledTask]:
        return list(self._tasks.values())

    def add_cron_task(
        self,
        name: str,
        func: JobFunc,
        cron_expression: str,
        args: tuple = (),
        kwargs: dict[str, Any] | None = None,
        enabled: bool = True,
    ) -> ScheduledTask:
        """Register a coroutine to run on a cron schedule.

        Args:
            name: Label used in logs and stats.
            func: Coroutine function.
            cron_expression: minute hour day month weekday, evaluated in UTC.
            args: Positional arguments for each run.
            kwargs: Keyword arguments for each run.
            enabled: Disabled tasks are kept but never run.

        Raises:
            ValueError: If the cron expression is invalid.
        """
        task = ScheduledTask(
            name=name,
            func=func,
            trigger=parse_cron(cron_expression),
            args=args,
            kwargs=kwargs or {},
            enabled=enabled,
        )
        self._tasks[task.id] = task
        self._submit(task)

        logger.info("Scheduled task %r on %r (enabled=%s)", name, cron_expression, enabled)
        return task

    def _submit(self, task: ScheduledTask) -> None:
        if self._scheduler is None or not task.enabled:
            return
        self._scheduler.add_job(
            self._execute_task,
            trigger=task.trigger,
            args=[task.id],
            id=task.id,
            name=task.name,
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )

    async def _execute_task(self, task_id: str) -> None:
        task = self._tasks.get(task_id)
        if task is None or not task.enabled:
            return

        try:
            result = await task.func(*task.args, **task.kwargs)
        except Exception:
            task.error_count += 1
            logger.exception("Scheduled task %r failed", task.name)
            return

        task.run_count += 1
        task.last_run = utc_now()
        logger.info("Scheduled task %r finished: %s", task.name, result)

    async def start(self) -> None:
        """Start APScheduler on the running event loop."""
        if self._scheduler is not None:
            return

        self._scheduler = AsyncIOScheduler(timezone="UTC")
        for task in self._tasks.values():
            self._submit(task)
        self._scheduler.start()
        logger.info("Job scheduler started with %d task(s)", len(self._tasks))

    async def stop(self) -> None:
        if self._scheduler is None:
            return

        scheduler, self._scheduler = self._scheduler, None
        scheduler.shutdown(wait=False)
        logger.info("Job scheduler stopped")

    def get_stats(self) -> dict[str, Any]:
        tasks = self.list_tasks()
        return {
            "is_running": self.is_running,
            "task_count": len(tasks),
            "total_runs": sum(t.run_count for t in tasks),
            "total_errors": sum(t.error_count for t in tasks),
            "tasks": [t.to_dict() for t in tasks],
        }


async def execute_registration_cleanup() -> dict[str, Any]:
    """One expired registration sweep in a fresh session."""
    from academy.core.config import get_settings
    from academy.domains.registrations.service import RegistrationService
    from academy.infrastructure.database import get_session

    default_days = get_settings().cleanup.default_expiry_days
    async with get_session() as session:
        result = await RegistrationService(session).cleanup_expired_registrations(
            default_expiry_days=default_days,
        )

    return {"records_deleted": result.records_deleted, "deadline_days": result.deadline_days}


_scheduler: JobScheduler | None = None


def get_scheduler() -> JobScheduler:
    """Process-wide scheduler, created on first use."""
    global _scheduler
    if _scheduler is None:
        _scheduler = JobScheduler()
    return _scheduler


async def start_scheduler(settings: "Settings") -> JobScheduler:
    """Start the process-wide scheduler with the configured jobs."""
    scheduler = get_scheduler()

    if settings.cleanup.enabled:
        scheduler.add_cron_task(
            name=CLEANUP_TASK_NAME,
            func=execute_registration_cleanup,
            cron_expression=settings.cleanup.cron,
        )
    else:
        logger.info("Registration cleanup disabled")

    await scheduler.start()
    return scheduler


async def stop_scheduler() -> None:
    global _scheduler
    if _scheduler is not None:
        await _scheduler.stop()
        _scheduler = None
