"""
Single-Slot Background Job Scheduler.

Runs one async job on a recurring interval and on demand ("run soon"),
with at most one execution in flight at any time.

- schedule_soon(): debounced trigger. Repeated calls within the delay
  window collapse into a single pending run.
- schedule_every(interval): recurring loop, first run after one interval.
- run_now(): executes immediately unless a run is already in progress,
  in which case the request is dropped (not queued).

All tasks live on the running asyncio event loop; the scheduler must be
used from inside that loop (FastAPI lifespan / request handlers).
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


JobFunc = Callable[[], Awaitable[Any]]


class SingleSlotScheduler:
    """
    Mutually-exclusive job runner with debounce and interval triggers.

    Usage:
        scheduler = SingleSlotScheduler(service.run_sweep, name="reminders")
        scheduler.schedule_every(3600)
        ...
        scheduler.schedule_soon()   # after a mutation
        ...
        await scheduler.shutdown()
    """

    def __init__(
        self,
        job: JobFunc,
        name: str = "job",
        debounce_seconds: float = 5.0,
    ) -> None:
        self._job = job
        self._name = name
        self._debounce_seconds = debounce_seconds

        self._running = False
        self._pending_task: Optional[asyncio.Task[Any]] = None
        self._interval_task: Optional[asyncio.Task[Any]] = None
        # Debounced runs past their delay, executing the job
        self._active_tasks: set[asyncio.Task[Any]] = set()
        self._run_count = 0
        self._skipped_count = 0

    @property
    def is_running(self) -> bool:
        """True while the job is executing."""
        return self._running

    @property
    def has_pending_run(self) -> bool:
        """True while a debounced run is waiting for its delay."""
        return self._pending_task is not None and not self._pending_task.done()

    @property
    def run_count(self) -> int:
        return self._run_count

    @property
    def skipped_count(self) -> int:
        return self._skipped_count

    async def run_now(self) -> bool:
        """
        Execute the job once, unless it is already running.

        Returns:
            bool: True if the job ran, False if the trigger was dropped.
        """
        if self._running:
            self._skipped_count += 1
            logger.debug(f"[{self._name}] run already in progress, trigger dropped")
            return False

        self._running = True
        try:
            await self._job()
            self._run_count += 1
        except Exception as e:
            logger.exception(f"[{self._name}] job failed: {e}")
        finally:
            self._running = False
        return True

    def schedule_soon(self) -> None:
        """
        Request a run after the debounce delay.

        A trigger arriving while a run is pending restarts the delay, so a
        burst of triggers results in a single execution.
        """
        if self._pending_task is not None and not self._pending_task.done():
            self._pending_task.cancel()

        self._pending_task = asyncio.create_task(
            self._delayed_run(), name=f"{self._name}-debounce"
        )

    async def _delayed_run(self) -> None:
        await asyncio.sleep(self._debounce_seconds)
        # Detach before running so a trigger fired during the run schedules anew
        self._pending_task = None
        task = asyncio.current_task()
        self._active_tasks.add(task)
        try:
            await self.run_now()
        finally:
            self._active_tasks.discard(task)

    def schedule_every(self, interval_seconds: float) -> None:
        """Start the recurring loop (replaces an existing loop)."""
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")

        if self._interval_task is not None and not self._interval_task.done():
            self._interval_task.cancel()

        self._interval_task = asyncio.create_task(
            self._interval_loop(interval_seconds), name=f"{self._name}-interval"
        )
        logger.info(f"[{self._name}] scheduled every {interval_seconds:g}s")

    async def _interval_loop(self, interval_seconds: float) -> None:
        while True:
            await asyncio.sleep(interval_seconds)
            await self.run_now()

    async def shutdown(self) -> None:
        """Cancel every scheduled or executing task and wait for them to finish."""
        tasks = [
            task for task in (self._pending_task, self._interval_task, *self._active_tasks)
            if task is not None and not task.done()
        ]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

        self._pending_task = None
        self._interval_task = None
        logger.info(f"[{self._name}] scheduler stopped")
