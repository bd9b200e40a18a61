"""
Common utilities for recurring background tasks.

This module exposes helpers for scheduling periodic jobs (feed refresh, link
store flush, listing publication) and cancelling them when the application
shuts down. Individual components register their task functions here rather
than duplicating scheduling logic.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)


async def startup(
    task_fn: Callable[[], Awaitable[object]],
    interval: float,
    *,
    name: str = "maintenance",
) -> asyncio.Task:
    """
    Schedule ``task_fn`` to run every ``interval`` seconds.

    Cycles start at a fixed rate. A cycle that is due while the previous one
    is still running is skipped, so a slow iteration never overlaps the next
    trigger. Any exceptions raised by the task function are logged but do not
    stop the periodic execution.

    Returns the created :class:`asyncio.Task` handle.
    """

    async def _run_once() -> None:
        try:
            await task_fn()
        except Exception:
            logger.exception("%s cycle failed", name)

    async def _periodic() -> None:
        running: asyncio.Task | None = None
        try:
            await asyncio.sleep(interval)   # delay initial loop
            while True:
                if running is not None and not running.done():
                    logger.warning("%s cycle still running; skipping this trigger", name)
                else:
                    running = asyncio.create_task(_run_once())
                await asyncio.sleep(interval)
        finally:
            if running is not None and not running.done():
                running.cancel()

    return asyncio.create_task(_periodic(), name=name)


async def shutdown(task: asyncio.Task | None) -> None:
    """
    Cancel a task started with :func:`startup`.

    The function is tolerant of ``None`` and awaits task cancellation to finish
    silently.
    """

    if not task:
        return

    task.cancel()
    try:
        await task
    except asyncio.CancelledError:  # pragma: no cover - normal cancellation
        pass
