"""重试策略模块

提供重试机制，支持:
- 可配置的重试参数
- 指数退避（base_delay 为 0 时立即重试）
- 异步重试装饰器
"""
import asyncio
import functools
import random
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional, ParamSpec, TypeVar

from loguru import logger

from xcode.exceptions import TaskError, XcodebuildTimeoutError

# 类型变量用于泛型装饰器
P = ParamSpec("P")
T = TypeVar("T")


@dataclass
class RetryConfig:
    """重试配置

    Attributes:
        max_retries: 最大重试次数（不含首次尝试）
        base_delay: 基础延迟时间（秒）
        max_delay: 最大延迟时间（秒）
        exponential_base: 指数基数
        jitter: 是否添加随机抖动
        retry_on: 需要重试的异常类型
    """
    max_retries: int = 5
    base_delay: float = 0.0
    max_delay: float = 60.0
    exponential_base: float = 2.0
    jitter: bool = False
    retry_on: tuple = field(default_factory=lambda: (
        TaskError,
        XcodebuildTimeoutError,
    ))

    def calculate_delay(self, attempt: int) -> float:
        """计算重试延迟时间

        使用指数退避算法：delay = base_delay * (exponential_base ^ attempt)

        Args:
            attempt: 当前尝试次数（从 0 开始）

        Returns:
            延迟时间（秒）
        """
        delay = self.base_delay * (self.exponential_base ** attempt)
        delay = min(delay, self.max_delay)

        # 添加随机抖动（0-25%）
        if self.jitter and delay > 0:
            jitter_range = delay * 0.25
            delay += random.uniform(0, jitter_range)

        return delay


def with_retry(
    config: Optional[RetryConfig] = None,
    on_retry: Optional[Callable[[int, Exception, float], None]] = None,
):
    """重试装饰器（用于异步函数）

    重试耗尽后原样重新抛出最后一次的异常。

    Args:
        config: 重试配置
        on_retry: 重试回调函数，接收 (attempt, error, delay) 参数

    Returns:
        装饰器函数

    Example:
        @with_retry(RetryConfig(max_retries=5))
        async def show_build_settings():
            ...
    """
    retry_config = config or RetryConfig()

    def decorator(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            for attempt in range(retry_config.max_retries + 1):
                try:
                    return await func(*args, **kwargs)

                except retry_config.retry_on as e:
                    # 最后一次尝试失败，不再重试
                    if attempt >= retry_config.max_retries:
                        logger.error(
                            f"重试耗尽 [{func.__name__}]: 已尝试 {attempt + 1} 次, "
                            f"错误: {e}"
                        )
                        raise

                    delay = retry_config.calculate_delay(attempt)

                    logger.warning(
                        f"重试 [{func.__name__}]: 尝试 {attempt + 1}/{retry_config.max_retries + 1}, "
                        f"延迟 {delay:.1f}s, 错误: {type(e).__name__}: {e}"
                    )

                    if on_retry:
                        on_retry(attempt, e, delay)

                    if delay > 0:
                        await asyncio.sleep(delay)

            # 不应该到达这里
            raise RuntimeError("重试逻辑错误")

        return wrapper

    return decorator


async def retry_async(
    func: Callable[[], Awaitable[T]],
    config: Optional[RetryConfig] = None,
    on_retry: Optional[Callable[[int, Exception, float], None]] = None,
) -> T:
    """异步重试辅助函数

    对于不方便使用装饰器的场景，提供函数式重试接口。

    Example:
        output = await retry_async(
            lambda: task.run(arguments),
            RetryConfig(max_retries=5),
        )
    """
    retry_config = config or RetryConfig()

    @with_retry(retry_config, on_retry)
    async def _wrapper():
        return await func()

    return await _wrapper()
