"""Detached background tasks."""

import asyncio
import logging

import pytest

from quillhub.core import tasks


@pytest.mark.asyncio
async def test_fire_and_forget_runs_without_being_awaited():
    done = asyncio.Event()

    async def work():
        done.set()

    tasks.fire_and_forget(work(), name="set-event")
    await tasks.drain()
    assert done.is_set()
    assert tasks.pending_count() == 0


@pytest.mark.asyncio
async def test_failure_is_logged_not_raised(caplog):
    async def boom():
        raise RuntimeError("ingestion exploded")

    with caplog.at_level(logging.ERROR, logger="quillhub.core.tasks"):
        tasks.fire_and_forget(boom(), name="boom")
        await tasks.drain()

    assert "Background task boom failed" in caplog.text
    assert tasks.pending_count() == 0


@pytest.mark.asyncio
async def test_drain_cancels_stragglers():
    async def forever():
        await asyncio.sleep(3600)

    task = tasks.fire_and_forget(forever(), name="forever")
    await tasks.drain(timeout=0.01)
    await asyncio.gather(task, return_exceptions=True)
    assert task.cancelled()
