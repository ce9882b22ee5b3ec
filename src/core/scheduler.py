"""
Asyncio scheduler for recurring background jobs.

Recurring jobs fire on wall-clock boundaries: an interval of 6 hours runs at
00:00, 06:00, 12:00 and 18:00 UTC, regardless of when the process started.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, List, Optional

import structlog

logger = structlog.get_logger(__name__)

Task = Callable[[], Awaitable[Any]]


class CancellationToken:
    def __init__(self):
        self._event = asyncio.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    async def wait(self, timeout: Optional[float] = None) -> bool:
        """Wait until cancelled or ``timeout`` elapses. Returns True if cancelled."""
        try:
            await asyncio.wait_for(self._event.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            return False
        return True


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def next_aligned_run(now: datetime, interval: timedelta) -> datetime:
    """
    Next run time strictly after ``now``, aligned to the interval measured from
    midnight UTC. Intervals shorter than an hour align to the minute instead.
    """
    if interval.total_seconds() <= 0:
        raise ValueError("interval must be positive")

    now = _as_utc(now)

    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    step = interval.total_seconds()
    elapsed = (now - midnight).total_seconds()
    slots = int(elapsed // step) + 1
    candidate = midnight + timedelta(seconds=slots * step)

    unit = timedelta(hours=1) if interval >= timedelta(hours=1) else timedelta(minutes=1)
    remainder = (candidate - midnight) % unit
    if remainder:
        candidate += unit - remainder
    return candidate


class Scheduler:
    def __init__(self, clock: Callable[[], datetime] = None):
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._loops: List[asyncio.Task] = []

    def schedule_recurring(self, interval: timedelta, task: Task, token: CancellationToken, name: str = "job") -> asyncio.Task:
        loop_task = asyncio.create_task(self._run_recurring(interval, task, token, name), name=f"recurring:{name}")
        self._loops.append(loop_task)
        logger.info("Recurring job scheduled", job=name, interval_seconds=interval.total_seconds())
        return loop_task

    async def trigger_now(self, task: Task, token: CancellationToken, name: str = "job") -> Any:
        if token.cancelled:
            logger.info("Skipping on-demand job, token already cancelled", job=name)
            return None
        logger.info("On-demand job triggered", job=name)
        return await task()

    async def _run_recurring(self, interval: timedelta, task: Task, token: CancellationToken, name: str) -> None:
        while not token.cancelled:
            now = _as_utc(self._clock())
            next_run = next_aligned_run(now, interval)
            delay = (next_run - now).total_seconds()
            logger.info("Next scheduled run", job=name, next_run=next_run.isoformat(), delay_seconds=round(delay, 1))

            if await token.wait(timeout=max(delay, 0)):
                break

            try:
                await task()
            except Exception as e:
                logger.error("Scheduled job failed", job=name, error=str(e), exc_info=e)

        logger.info("Recurring job stopped", job=name)

    async def shutdown(self) -> None:
        for loop_task in self._loops:
            loop_task.cancel()
        for loop_task in self._loops:
            try:
                await loop_task
            except asyncio.CancelledError:
                pass
        self._loops.clear()
