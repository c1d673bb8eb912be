"""异步适配器与进度管理测试"""

import asyncio
import io
from unittest.mock import Mock

import pytest
from rich.console import Console

from promised.async_adapter import AsyncAdapter, async_to_sync, is_loop_running, smart_run
from promised.core.progress_manager import ProgressManager
from promised.models import DownloadProgress


async def _answer(value=42):
    await asyncio.sleep(0)
    return value


class TestAsyncAdapter:
    """测试同步调用协程"""

    def test_no_running_loop(self):
        assert not is_loop_running()
        assert smart_run(_answer()) == 42

    @pytest.mark.asyncio
    async def test_inside_running_loop(self):
        assert is_loop_running()
        assert smart_run(_answer("nested")) == "nested"

    def test_exception_propagates(self):
        async def failing():
            raise KeyError("missing")

        with pytest.raises(KeyError):
            smart_run(failing())

    def test_async_to_sync_decorator(self):
        @async_to_sync
        async def double(x):
            await asyncio.sleep(0)
            return x * 2

        assert double(21) == 42

    @pytest.mark.asyncio
    async def test_thread_pool_created_lazily_and_shut_down(self):
        adapter = AsyncAdapter()
        assert adapter._thread_pool is None

        assert adapter.run_sync(_answer(1)) == 1
        assert adapter._thread_pool is not None

        adapter.shutdown()
        assert adapter._thread_pool is None


class TestProgressManager:
    """测试进度管理器"""

    def test_callback_receives_progress(self):
        callback = Mock()
        manager = ProgressManager(callback)

        manager.tracker("a.bin")(50, 100)

        progress = callback.call_args[0][0]
        assert isinstance(progress, DownloadProgress)
        assert progress.filename == "a.bin"
        assert progress.percentage == 50.0

    def test_inactive_without_callback_or_display(self):
        with ProgressManager() as manager:
            assert not manager.active

    def test_rich_display(self):
        console = Console(file=io.StringIO(), force_terminal=False)
        with ProgressManager(show_progress=True, console=console) as manager:
            assert manager.active
            track = manager.tracker("b.bin")
            track(10, 20)
            track(20, 20)

            task = manager._progress_display.tasks[0]
            assert task.description == "b.bin"
            assert task.completed == 20

        assert manager._progress_display is None
