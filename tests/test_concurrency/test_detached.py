"""Tests for detached side-effect tasks."""

import asyncio

from offlinegate.concurrency.detached import DetachedTasks


class TestDetachedTasks:
    async def test_spawn_does_not_block_caller(self):
        tasks = DetachedTasks()
        gate = asyncio.Event()

        async def slow():
            await gate.wait()

        tasks.spawn(slow(), label="slow")
        assert tasks.pending == 1
        gate.set()
        await tasks.drain()
        assert tasks.pending == 0

    async def test_failures_counted_not_raised(self):
        tasks = DetachedTasks()

        async def boom():
            raise RuntimeError("write failed")

        tasks.spawn(boom(), label="boom")
        await tasks.drain()
        assert tasks.failures == 1
        assert tasks.pending == 0

    async def test_drain_waits_for_nested_spawns(self):
        tasks = DetachedTasks()
        order: list[str] = []

        async def inner():
            await asyncio.sleep(0)
            order.append("inner")

        async def outer():
            order.append("outer")
            tasks.spawn(inner(), label="inner")

        tasks.spawn(outer(), label="outer")
        await tasks.drain()
        assert order == ["outer", "inner"]

    async def test_drain_with_nothing_pending(self):
        tasks = DetachedTasks()
        await tasks.drain()
        assert tasks.pending == 0

    async def test_label_becomes_task_name(self):
        tasks = DetachedTasks()

        async def noop():
            return None

        task = tasks.spawn(noop(), label="trim:images")
        assert task.get_name() == "trim:images"
        await tasks.drain()
