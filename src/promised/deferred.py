"""可手动完成的 Future

asyncio.Future 重复 set_result 会抛出 InvalidStateError，
Deferred 把 resolve/reject 包装成只生效一次的回调。
"""

import asyncio
from typing import Any, Callable, Generator, Generic, Optional, TypeVar

T = TypeVar("T")


class Deferred(Generic[T]):
    """持有 future 以及 resolve/reject 两个回调

    使用示例:
    ```python
    deferred = Deferred()
    loop.call_later(1, deferred.resolve, "done")
    result = await deferred
    ```
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        """初始化

        Args:
            loop: 所属事件循环，默认为当前运行中的事件循环
        """
        self._loop = loop or asyncio.get_running_loop()
        self.future: "asyncio.Future[T]" = self._loop.create_future()

    @property
    def settled(self) -> bool:
        """是否已完成（成功或失败）"""
        return self.future.done()

    def resolve(self, value: T = None) -> None:
        """以 value 完成 future，已完成时忽略"""
        if not self.future.done():
            self.future.set_result(value)

    def reject(self, error: BaseException) -> None:
        """以 error 使 future 失败，已完成时忽略"""
        if not self.future.done():
            self.future.set_exception(error)

    def add_callbacks(
        self,
        on_fulfilled: Optional[Callable[[T], Any]] = None,
        on_rejected: Optional[Callable[[BaseException], Any]] = None,
    ) -> None:
        """注册完成/失败回调

        在完成之后注册也会被调用，调用顺序由事件循环的 call_soon 决定。
        """

        def dispatch(future: "asyncio.Future[T]") -> None:
            if future.cancelled():
                return
            error = future.exception()
            if error is not None:
                if on_rejected is not None:
                    on_rejected(error)
            elif on_fulfilled is not None:
                on_fulfilled(future.result())

        self.future.add_done_callback(dispatch)

    def __await__(self) -> Generator[Any, None, T]:
        return self.future.__await__()


def defer() -> Deferred:
    """创建一个绑定到当前事件循环的 Deferred"""
    return Deferred()


async def delay(seconds: float, value: T = None) -> T:
    """等待 seconds 秒后返回 value"""
    await asyncio.sleep(seconds)
    return value
