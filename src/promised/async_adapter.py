"""异步适配器模块

从同步代码调用协程：没有运行中的事件循环时直接 asyncio.run，
已经在事件循环里（Jupyter、IDE 等）时交给后台线程中的新循环执行。
"""

import asyncio
import concurrent.futures
import functools
from typing import Awaitable, Callable, Coroutine, Any, Optional, TypeVar

T = TypeVar("T")


def is_loop_running() -> bool:
    """检测是否在运行中的事件循环内"""
    try:
        asyncio.get_running_loop()
        return True
    except RuntimeError:
        return False


class AsyncAdapter:
    """同步调用协程的适配器"""

    def __init__(self):
        self._thread_pool: Optional[concurrent.futures.ThreadPoolExecutor] = None

    def run_sync(self, coro: Coroutine[Any, Any, T]) -> T:
        """运行协程并返回结果，协程抛出的异常原样传出"""
        if is_loop_running():
            return self._run_in_thread_pool(coro)
        return asyncio.run(coro)

    def _run_in_thread_pool(self, coro: Coroutine[Any, Any, T]) -> T:
        if self._thread_pool is None:
            self._thread_pool = concurrent.futures.ThreadPoolExecutor(
                max_workers=1, thread_name_prefix="promised-sync"
            )

        future = self._thread_pool.submit(asyncio.run, coro)
        return future.result()

    def shutdown(self) -> None:
        """关闭后台线程池"""
        if self._thread_pool:
            self._thread_pool.shutdown(wait=False)
            self._thread_pool = None


# 全局适配器实例
_default_adapter = AsyncAdapter()


def smart_run(coro: Coroutine[Any, Any, T]) -> T:
    """自动选择执行策略运行协程"""
    return _default_adapter.run_sync(coro)


def async_to_sync(func: Callable[..., Awaitable[T]]) -> Callable[..., T]:
    """装饰器：把异步函数变成可在任何环境中调用的同步函数"""

    @functools.wraps(func)
    def wrapper(*args, **kwargs) -> T:
        return smart_run(func(*args, **kwargs))

    return wrapper
