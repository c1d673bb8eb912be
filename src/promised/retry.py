"""重试机制模块

固定间隔的重试组合子：有限次数或无限重试，不做退避也不加抖动
"""

import asyncio
import functools
import inspect
import time
from typing import Any, Awaitable, Callable, Optional, Sequence, TypeVar, Union

from pydantic import BaseModel, Field, field_validator

from .log import logger as default_logger, trace

F = TypeVar("F", bound=Callable[..., Any])
T = TypeVar("T")


class RetryConfig(BaseModel):
    """重试配置

    max_attempts 表示首次调用失败后还允许的重试次数：
    0 表示不再重试，None 表示无限重试。
    """

    max_attempts: Optional[int] = Field(default=None, description="剩余重试次数，None为无限")
    delay: float = Field(default=0.0, description="两次尝试之间的固定间隔(秒)")

    @field_validator("max_attempts")
    @classmethod
    def validate_max_attempts(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 0:
            raise ValueError("max_attempts cannot be negative")
        return v

    @field_validator("delay")
    @classmethod
    def validate_delay(cls, v: float) -> float:
        if v < 0:
            raise ValueError("delay cannot be negative")
        return v


class RetryStats(BaseModel):
    """重试统计"""

    total_attempts: int = Field(default=0, description="总尝试次数")
    failed_attempts: int = Field(default=0, description="失败次数")
    total_delay: float = Field(default=0.0, description="总延迟时间")
    last_error: Optional[str] = Field(default=None, description="最后的错误信息")
    start_time: Optional[float] = Field(default=None, description="开始时间")

    def reset(self) -> None:
        """重置统计"""
        self.total_attempts = 0
        self.failed_attempts = 0
        self.total_delay = 0.0
        self.last_error = None
        self.start_time = None

    def record_attempt(self, is_success: bool, error: Optional[str] = None) -> None:
        """记录一次尝试"""
        if self.start_time is None:
            self.start_time = time.time()

        self.total_attempts += 1
        if not is_success:
            self.failed_attempts += 1
            self.last_error = error

    def record_delay(self, delay: float) -> None:
        """记录延迟时间"""
        self.total_delay += delay


async def try_operation(
    operation: Callable[..., Union[Awaitable[T], T]],
    args: Sequence[Any] = (),
    max_attempts: Optional[int] = None,
    delay: float = 0.0,
    logger: Any = default_logger,
    stats: Optional[RetryStats] = None,
) -> T:
    """反复调用 operation(*args) 直到成功

    Args:
        operation: 要执行的操作，可以返回普通值或可等待对象
        args: 传给 operation 的位置参数
        max_attempts: 失败后允许的重试次数，0 表示立即失败，None 表示无限重试
        delay: 每次重试前的固定等待时间(秒)
        logger: 任何带 debug 方法的对象
        stats: 可选的统计对象

    Returns:
        operation 的结果

    Raises:
        Exception: 重试次数耗尽时原样抛出最后一次的错误
    """
    retry_config = RetryConfig(max_attempts=max_attempts, delay=delay)
    remaining = retry_config.max_attempts

    while True:
        try:
            result = operation(*args)
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            if stats is not None:
                stats.record_attempt(False, str(e))

            trace(logger, "Error occurred: %r", e)
            if remaining is None:
                trace(logger, "Retrying...")
            else:
                trace(logger, "Left attempts : %d", remaining)
                if remaining == 0:
                    raise
                remaining -= 1

            if stats is not None:
                stats.record_delay(retry_config.delay)
            await asyncio.sleep(retry_config.delay)
            continue

        if stats is not None:
            stats.record_attempt(True)
        return result


def retrying(
    max_attempts: Optional[int] = None,
    delay: float = 0.0,
    logger: Any = default_logger,
    stats: Optional[RetryStats] = None,
) -> Callable[[F], F]:
    """创建重试装饰器

    使用示例:
    ```python
    @retrying(max_attempts=3, delay=0.5)
    async def fetch(url):
        ...
    ```
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            return await try_operation(
                functools.partial(func, *args, **kwargs),
                max_attempts=max_attempts,
                delay=delay,
                logger=logger,
                stats=stats,
            )

        return wrapper  # type: ignore

    return decorator
