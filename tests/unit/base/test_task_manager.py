"""Unit tests for AsyncTaskManager."""

import asyncio
import logging

import pytest

from rvr_color.modules.base import AsyncTaskManager


async def forever():
    await asyncio.sleep(3600)


class TestCreate:

    @pytest.mark.asyncio
    async def test_tracks_named_task(self):
        manager = AsyncTaskManager("test")
        task = manager.create(forever(), name="color-sampling-1")

        assert manager.active_count() == 1
        assert manager.active_names() == ["color-sampling-1"]
        assert task.get_name() == "color-sampling-1"

        await manager.shutdown(timeout=1.0)
        assert task.cancelled()

    @pytest.mark.asyncio
    async def test_finished_task_is_forgotten(self):
        manager = AsyncTaskManager("test")
        task = manager.create(asyncio.sleep(0), name="short")

        await task
        await asyncio.sleep(0)

        assert manager.active_count() == 0
        assert manager.active_names() == []

    @pytest.mark.asyncio
    async def test_failed_task_is_logged(self, caplog):
        manager = AsyncTaskManager("test")

        async def broken():
            raise ValueError("sensor unplugged")

        with caplog.at_level(logging.ERROR, logger="rvr_color"):
            task = manager.create(broken(), name="broken")
            with pytest.raises(ValueError):
                await task
            await asyncio.sleep(0)

        assert "broken failed: sensor unplugged" in caplog.text

    @pytest.mark.asyncio
    async def test_closed_manager_rejects_tasks(self):
        manager = AsyncTaskManager("test")
        await manager.shutdown()

        assert manager.closed
        coro = forever()
        with pytest.raises(RuntimeError):
            manager.create(coro, name="late")
        assert coro.cr_frame is None


class TestCancel:

    @pytest.mark.asyncio
    async def test_cancel_by_name(self):
        manager = AsyncTaskManager("test")
        scan = manager.create(forever(), name="color-scan-1")
        sampling = manager.create(forever(), name="color-sampling-1")

        assert await manager.cancel("color-scan-1", timeout=1.0)

        assert scan.cancelled()
        assert not sampling.done()
        await manager.shutdown(timeout=1.0)

    @pytest.mark.asyncio
    async def test_cancel_unknown_name(self):
        manager = AsyncTaskManager("test")
        assert await manager.cancel("missing") is True

