"""Scheduled Task Runner - periodic background jobs on independent asyncio tasks.

Invariants:
    - Jobs are registered before start(); registering after start raises
    - start() is idempotent: a second call does not spawn duplicate loops
    - A failing run is logged and the job keeps its schedule
    - stop() cancels every loop and waits for them to unwind

Design Decisions:
    - Fixed-delay loop per job (sleep, then run): runs never overlap within a
      job and no job can starve another
    - Jobs take no arguments; dependencies are bound with closures at
      registration (see jobs.py)
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)

Job = Callable[[], Awaitable[object]]


@dataclass(frozen=True)
class ScheduledJob:
    name: str
    interval_seconds: float
    run: Job


class TaskRunner:
    """Owns the periodic job loops for the process."""

    def __init__(self) -> None:
        self._jobs: list[ScheduledJob] = []
        self._tasks: dict[str, asyncio.Task] = {}

    @property
    def jobs(self) -> tuple[ScheduledJob, ...]:
        return tuple(self._jobs)

    @property
    def running(self) -> bool:
        return bool(self._tasks)

    def register(self, name: str, interval_seconds: float, job: Job) -> None:
        if self.running:
            raise RuntimeError(f"Cannot register job {name} after start()")
        if interval_seconds <= 0:
            raise ValueError(f"Job {name} needs a positive interval")
        if any(j.name == name for j in self._jobs):
            raise ValueError(f"Job {name} already registered")
        self._jobs.append(ScheduledJob(name, interval_seconds, job))

    def start(self) -> None:
        if self.running:
            return
        for job in self._jobs:
            self._tasks[job.name] = asyncio.create_task(
                self._loop(job), name=f"job:{job.name}",
            )
        logger.info(f"Started {len(self._tasks)} scheduled job(s)")

    async def stop(self) -> None:
        tasks = list(self._tasks.values())
        self._tasks.clear()
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    async def run_once(self, name: str) -> object:
        """Run a registered job immediately, outside its schedule."""
        for job in self._jobs:
            if job.name == name:
                return await job.run()
        raise KeyError(name)

    async def _loop(self, job: ScheduledJob) -> None:
        while True:
            await asyncio.sleep(job.interval_seconds)
            try:
                await job.run()
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                logger.error(
                    f"Scheduled job {job.name} failed: {exc}",
                    exc_info=True,
                    extra={"job": job.name},
                )
