"""限流重试策略."""

import asyncio
import logging

from .exceptions import BulkRetryExhaustedError
from .models import RetryConfig

logger = logging.getLogger(__name__)


class RetryPolicy:
    """单个批次的限流重试状态.

    每次收到 429 时等待当前退避时间，然后将退避时间翻倍（不超过上限）并
    增加发送次数。默认不限制重试次数。

    Args:
        config: 重试配置，默认使用 RetryConfig 的默认值
    """

    def __init__(self, config: RetryConfig | None = None):
        self.config = config or RetryConfig()
        self.attempt = 1
        self.backoff = min(self.config.initial_backoff, self.config.max_backoff)

    def next_delay(self) -> float:
        """计算下一次重试前的等待时间，并推进重试状态.

        Raises:
            BulkRetryExhaustedError: 已达到 max_attempts 时抛出
        """
        max_attempts = self.config.max_attempts
        if max_attempts is not None and self.attempt >= max_attempts:
            raise BulkRetryExhaustedError(f"限流重试次数耗尽: 已发送 {self.attempt} 次")

        delay = self.backoff
        self.backoff = min(self.backoff * 2, self.config.max_backoff)
        self.attempt += 1
        return delay

    async def wait(self) -> float:
        """等待下一次重试，返回实际等待的秒数."""
        delay = self.next_delay()
        logger.debug(f"等待 {delay} 秒后进行第 {self.attempt} 次发送")
        await asyncio.sleep(delay)
        return delay
