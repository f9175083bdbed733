"""批量写入调度核心工具类."""

from __future__ import annotations

import asyncio
import copy
import logging
import time
from typing import Any

from elasticsearch import AsyncElasticsearch
from elasticsearch.exceptions import ApiError, ConnectionTimeout, TransportError
from elasticsearch.exceptions import ConnectionError as ESConnectionError

from ..connection.models import Destination
from ..typing import BulkPayload, Document
from .encoder import BulkOperationEncoder
from .exceptions import (
    BulkDispatcherClosedError,
    BulkEncodingError,
    BulkResponseDecodeError,
    BulkRetryExhaustedError,
)
from .models import BatchOutcome, BatchResult, BulkConfig, BulkSummary, RetryConfig
from .queue import BatchQueue
from .response import UNKNOWN_CAUSE, BulkResponse
from .retry import RetryPolicy

logger = logging.getLogger(__name__)


class BulkDispatcher:
    """批量写入调度器.

    持有待发送队列，每当队列达到批次大小时取出一批文档并启动一个异步任务
    发送 bulk 请求，调用方可以立即继续提交。所有批次的成功数只在 shutdown()
    时汇总确认。

    单个批次的失败（编码失败、传输失败、400 拒绝、限流重试耗尽）只会被记录
    为该批次的结果，不会中断调度器。

    Args:
        client: AsyncElasticsearch 客户端实例，由所有批次任务共享
        destination: 写入目标
        config: 批量写入配置，默认使用 BulkConfig 的默认值
        retry_config: 限流重试配置，默认使用 RetryConfig 的默认值

    Examples:
        >>> dispatcher = BulkDispatcher(client, Destination.from_url(url))
        >>> for doc in documents:
        ...     await dispatcher.submit(doc)
        >>> success = await dispatcher.shutdown()
    """

    def __init__(
        self,
        client: AsyncElasticsearch,
        destination: Destination,
        config: BulkConfig | None = None,
        retry_config: RetryConfig | None = None,
    ):
        self.client = client
        self.destination = destination
        self.config = config or BulkConfig()
        self.retry_config = retry_config or RetryConfig()

        self._queue = BatchQueue(self.config.batch_size)
        self._encoder = BulkOperationEncoder(self.config.action, self.config.id_field)
        self._semaphore = (
            asyncio.Semaphore(self.config.max_in_flight)
            if self.config.max_in_flight is not None
            else None
        )
        self._tasks: list[asyncio.Task[BatchResult]] = []
        self._results: list[BatchResult] = []
        self._batch_count = 0
        self._closed = False
        self._start_time = time.time()

        logger.info(
            f"初始化批量写入调度器: target={self}, action={self.config.action.value}, "
            f"batch_size={self.config.batch_size}, max_in_flight={self.config.max_in_flight}"
        )

    @classmethod
    def from_url(
        cls,
        client: AsyncElasticsearch,
        url: str,
        config: BulkConfig | None = None,
        retry_config: RetryConfig | None = None,
    ) -> BulkDispatcher:
        """根据目标 URL 创建调度器.

        Raises:
            DestinationError: 无法从 URL 解析出主机名或索引名时抛出
        """
        return cls(client, Destination.from_url(url), config, retry_config)

    def __str__(self) -> str:
        return str(self.destination)

    @property
    def pending(self) -> int:
        """尚未完成的批次任务数."""
        return sum(1 for task in self._tasks if not task.done())

    @property
    def queued(self) -> int:
        """队列中尚未发送的文档数."""
        return len(self._queue)

    @property
    def results(self) -> list[BatchResult]:
        """已完成批次的结果，按批次序号排序."""
        return sorted(self._results, key=lambda r: r.batch_number)

    def summary(self) -> BulkSummary:
        """汇总已完成批次的结果."""
        return BulkSummary.from_results(self.results, took=time.time() - self._start_time)

    # ============================================================
    # 提交与关闭
    # ============================================================

    async def submit(self, doc: Document) -> int:
        """提交一条文档.

        文档在入队时被深拷贝，调用方之后修改或复用该对象不影响已提交的批次。
        队列达到批次大小时触发一次异步发送。配置了 max_in_flight 且发送中的
        批次已达上限时，会等待直到有批次完成。

        Returns:
            始终为 0，成功数只在 shutdown() 时确认

        Raises:
            BulkDispatcherClosedError: 调度器已关闭时抛出
        """
        if self._closed:
            raise BulkDispatcherClosedError(f"调度器 {self} 已关闭，无法继续提交文档")
        if self._queue.push(copy.deepcopy(doc)):
            await self._flush()
        return 0

    async def shutdown(self) -> int:
        """发送剩余文档并等待所有批次完成.

        Returns:
            所有批次确认写入成功的文档总数
        """
        if not self._closed:
            self._closed = True
            await self._flush()

        tasks, self._tasks = self._tasks, []
        for outcome in await asyncio.gather(*tasks, return_exceptions=True):
            self._record(outcome)

        summary = self.summary()
        log = logger.info if summary.is_success() else logger.warning
        log(
            f"{self} 写入完成: 成功 {summary.success}/{summary.total}, "
            f"批次 {summary.batch_count} ({summary.get_outcome_summary()}), "
            f"耗时 {summary.took:.3f} 秒"
        )
        return summary.success

    async def __aenter__(self) -> BulkDispatcher:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.shutdown()

    # ============================================================
    # 批次发送
    # ============================================================

    def _record(self, outcome: BatchResult | BaseException) -> None:
        if isinstance(outcome, BaseException):
            logger.error(f"批次任务异常退出: {outcome!r}")
            return
        self._results.append(outcome)

    def _collect_finished(self) -> None:
        """收集已完成任务的结果并移出任务列表."""
        running: list[asyncio.Task[BatchResult]] = []
        for task in self._tasks:
            if not task.done():
                running.append(task)
            elif task.cancelled():
                logger.error("批次任务被取消")
            else:
                self._record(task.exception() or task.result())
        self._tasks = running

    async def _flush(self) -> None:
        """取出一批文档，编码后启动发送任务."""
        self._collect_finished()
        batch = self._queue.drain()
        if not batch:
            return

        self._batch_count += 1
        batch_number = self._batch_count
        try:
            payload = self._encoder.encode_payload(batch)
        except BulkEncodingError as e:
            logger.error(f"批次 {batch_number} 编码失败，丢弃 {len(batch)} 条文档: {e}")
            self._results.append(
                BatchResult(
                    batch_number=batch_number,
                    size=len(batch),
                    outcome=BatchOutcome.ENCODING_ERROR,
                    error=str(e),
                )
            )
            return

        if self._semaphore is not None:
            await self._semaphore.acquire()

        logger.debug(f"批次 {batch_number}: 发送 {len(batch)} 条文档到 {self}")
        task = asyncio.create_task(self._run_batch(batch_number, len(batch), payload))
        self._tasks.append(task)

    async def _run_batch(self, batch_number: int, size: int, payload: BulkPayload) -> BatchResult:
        try:
            return await self._send_with_retry(batch_number, size, payload)
        except Exception as e:
            logger.error(f"批次 {batch_number} 处理失败: {e!r}")
            return BatchResult(
                batch_number=batch_number,
                size=size,
                outcome=BatchOutcome.TRANSPORT_ERROR,
                error=str(e),
            )
        finally:
            if self._semaphore is not None:
                self._semaphore.release()

    async def _send(self, payload: BulkPayload) -> tuple[int, Any]:
        """发送一次 bulk 请求，返回 (状态码, 响应体).

        客户端对 4xx/5xx 抛出的 ApiError 会被还原为状态码和响应体。
        """
        try:
            response = await self.client.bulk(index=self.destination.index, operations=payload)
        except ApiError as e:
            return e.meta.status, e.body
        return response.meta.status, response.body

    async def _send_with_retry(
        self, batch_number: int, size: int, payload: BulkPayload
    ) -> BatchResult:
        """发送批次，遇到 429 时按退避策略重发同一请求体."""
        policy = RetryPolicy(self.retry_config)

        def result(outcome: BatchOutcome, **kwargs) -> BatchResult:
            return BatchResult(
                batch_number=batch_number,
                size=size,
                outcome=outcome,
                attempts=policy.attempt,
                **kwargs,
            )

        while True:
            try:
                status, body = await self._send(payload)
            except (ESConnectionError, ConnectionTimeout, TransportError) as e:
                logger.error(f"批次 {batch_number} 发送失败: {e}")
                return result(BatchOutcome.TRANSPORT_ERROR, error=str(e))

            if status == 400:
                cause = _error_cause(body)
                logger.error(f"批次 {batch_number} bulk 响应: 400 - Bad request ({cause})")
                return result(BatchOutcome.REJECTED, error=cause)

            if status == 429:
                cause = _error_cause(body)
                logger.warning(
                    f"批次 {batch_number} bulk 响应: 429 - Too many requests ({cause})，"
                    f"第 {policy.attempt} 次发送，{policy.backoff} 秒后重试"
                )
                try:
                    await policy.wait()
                except BulkRetryExhaustedError as e:
                    logger.error(f"批次 {batch_number} {e}")
                    return result(BatchOutcome.THROTTLED, error=str(e))
                continue

            try:
                response = BulkResponse.from_body(body)
            except BulkResponseDecodeError as e:
                logger.error(f"批次 {batch_number} bulk 响应状态 {status}: {e}")
                return result(BatchOutcome.TRANSPORT_ERROR, error=str(e))

            logger.debug(f"批次 {batch_number} bulk 响应状态: {status}")
            error_counts = ""
            if response.has_errors():
                error_counts = response.error_counts()
                logger.warning(f"批次 {batch_number} bulk 响应包含错误: {error_counts}")

            success = min(response.success_count(self.config.action), size)
            return result(BatchOutcome.ACCEPTED, success=success, error_counts=error_counts)


def _error_cause(body: Any) -> str:
    try:
        return BulkResponse.from_body(body).error_cause()
    except BulkResponseDecodeError:
        return UNKNOWN_CAUSE
