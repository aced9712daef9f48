"""Detached background tasks.

Side effects that must never fail the triggering request (search ingestion,
secondary index sync) are scheduled with ``fire_and_forget``. The task is
not awaited by the caller; its outcome only reaches the log.
"""

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any

logger = logging.getLogger(__name__)

# Strong references so pending tasks are not garbage-collected mid-flight.
_pending: set[asyncio.Task] = set()


def fire_and_forget(coro: Coroutine[Any, Any, Any], *, name: str | None = None) -> asyncio.Task:
    """Schedule ``coro`` on the running loop and return immediately."""
    task = asyncio.create_task(coro, name=name)
    _pending.add(task)
    task.add_done_callback(_on_done)
    return task


def _on_done(task: asyncio.Task) -> None:
    _pending.discard(task)
    if task.cancelled():
        logger.warning("Background task %s was cancelled", task.get_name())
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Background task %s failed", task.get_name(), exc_info=exc)


def pending_count() -> int:
    return len(_pending)


async def drain(timeout: float | None = 10) -> None:
    """Wait for outstanding background tasks (shutdown and tests)."""
    if not _pending:
        return
    _, still_pending = await asyncio.wait(set(_pending), timeout=timeout)
    for task in still_pending:
        task.cancel()
    if still_pending:
        logger.warning("Cancelled %d background tasks still running", len(still_pending))
