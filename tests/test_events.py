"""Tests for the EventEmitter."""
import asyncio

import pytest

from photo_uploader.utils.events import EventEmitter


@pytest.mark.asyncio
async def test_concurrent_emits_do_not_wait_on_each_other():
    emitter = EventEmitter()
    release = asyncio.Event()
    seen = []

    async def listener(name):
        if name == "slow":
            await release.wait()
        seen.append(name)

    emitter.on("task_update", listener)
    slow = asyncio.create_task(emitter.emit("task_update", "slow"))
    await asyncio.sleep(0)

    await asyncio.wait_for(emitter.emit("task_update", "fast"), timeout=1)
    assert seen == ["fast"]

    release.set()
    await slow
    assert seen == ["fast", "slow"]


@pytest.mark.asyncio
async def test_failing_listener_is_isolated():
    emitter = EventEmitter()
    calls = []

    def broken(value):
        raise RuntimeError("boom")

    emitter.on("batch_settled", broken)
    emitter.on("batch_settled", calls.append)

    await emitter.emit("batch_settled", 3)

    assert calls == [3]


@pytest.mark.asyncio
async def test_off_and_duplicate_registration():
    emitter = EventEmitter()
    calls = []
    emitter.on("e", calls.append)
    emitter.on("e", calls.append)

    await emitter.emit("e", 1)
    emitter.off("e", calls.append)
    await emitter.emit("e", 2)

    assert calls == [1]
    assert emitter.listeners("missing") == []
