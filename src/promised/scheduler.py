"""有界并发调度模块

把任务按 index % width 分配到若干通道，通道内串行、通道间并发，
结果按任务的原始位置写回。
"""

import asyncio
import inspect
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Generic, List, Optional, Sequence, Tuple, TypeVar, Union

from .exceptions import ValidationError

T = TypeVar("T")

Task = Callable[[], Union[Awaitable[T], T]]


class AggregationPolicy(str, Enum):
    """结果汇总策略"""

    FAIL_FAST = "fail_fast"  # 第一个失败立即向上抛出
    SETTLE_ALL = "settle_all"  # 等待全部任务，逐个记录成功或失败


@dataclass
class Settled(Generic[T]):
    """SETTLE_ALL 策略下单个任务的结果"""

    value: Optional[T] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def partition_lanes(tasks: Sequence[T], width: int) -> List[List[Tuple[int, T]]]:
    """按 index % width 轮询分配任务

    Returns:
        每个通道的 (原始位置, 任务) 列表，空通道不会出现在结果里
    """
    if not isinstance(width, int) or isinstance(width, bool) or width < 1:
        raise ValidationError(f"width must be a positive integer, got {width!r}")

    lanes: List[List[Tuple[int, T]]] = [[] for _ in range(min(width, len(tasks)))]
    for index, task in enumerate(tasks):
        lanes[index % width].append((index, task))
    return lanes


async def _invoke(task: Task) -> Any:
    result = task()
    if inspect.isawaitable(result):
        result = await result
    return result


async def _run_lane(
    lane: List[Tuple[int, Task]], results: List[Any], policy: AggregationPolicy
) -> None:
    """串行执行一个通道内的任务"""
    for index, task in lane:
        try:
            value = await _invoke(task)
        except Exception as e:
            if policy is AggregationPolicy.FAIL_FAST:
                raise
            results[index] = Settled(error=e)
            continue

        if policy is AggregationPolicy.FAIL_FAST:
            results[index] = value
        else:
            results[index] = Settled(value=value)


async def all_limit(
    tasks: Sequence[Task],
    width: int,
    policy: AggregationPolicy = AggregationPolicy.FAIL_FAST,
) -> List[Any]:
    """以最多 width 个并发通道执行 tasks

    Args:
        tasks: 无参的任务列表，每个任务返回可等待对象或普通值
        width: 通道数量，必须为正整数
        policy: FAIL_FAST 在第一个失败时抛出；SETTLE_ALL 返回 Settled 列表

    Returns:
        与 tasks 顺序一致的结果列表

    FAIL_FAST 模式下其他通道不会被取消，会在后台继续运行直到结束，
    它们的结果被丢弃。
    """
    lanes = partition_lanes(tasks, width)
    results: List[Any] = [None] * len(tasks)
    if not lanes:
        return results

    runners = [asyncio.ensure_future(_run_lane(lane, results, policy)) for lane in lanes]
    await asyncio.gather(*runners)
    return results
