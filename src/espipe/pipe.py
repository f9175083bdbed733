"""文档管道驱动模块.

逐条读取文档并提交给调度器，结束后关闭调度器并生成运行摘要。
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterable, Iterable
from dataclasses import dataclass

from .bulk.tool import BulkDispatcher
from .typing import Document

logger = logging.getLogger(__name__)


def comma_formatted(number: int) -> str:
    """按千位加逗号格式化整数，例如 12000 -> "12,000"."""
    return f"{number:,}"


@dataclass
class PipeSummary:
    """管道运行摘要.

    Attributes:
        input_count: 读取的文档数
        output_count: 确认写入成功的文档数
        target: 写入目标描述
        took: 总耗时（秒）
    """

    input_count: int
    output_count: int
    target: str
    took: float

    def format(self) -> str:
        return (
            f"Piped {comma_formatted(self.output_count)} of "
            f"{comma_formatted(self.input_count)} docs to {self.target} "
            f"in {self.took:.3f} seconds"
        )


async def pipe(
    documents: Iterable[Document] | AsyncIterable[Document],
    dispatcher: BulkDispatcher,
) -> PipeSummary:
    """将文档全部写入调度器并等待完成.

    Args:
        documents: 文档迭代器，支持同步或异步迭代
        dispatcher: 批量写入调度器

    Returns:
        管道运行摘要

    Raises:
        文档迭代器抛出的异常会在调度器关闭后原样抛出
    """
    start_time = time.time()
    input_count = 0
    output_count = 0

    target = str(dispatcher)
    try:
        if isinstance(documents, AsyncIterable):
            async for doc in documents:
                input_count += 1
                output_count += await dispatcher.submit(doc)
        else:
            for doc in documents:
                input_count += 1
                output_count += await dispatcher.submit(doc)
    except Exception:
        # 读取中断时仍发送已读取的文档并等待所有批次
        logger.error(f"管道在读取 {input_count} 条文档后中断，关闭 {target}")
        await dispatcher.shutdown()
        raise

    output_count += await dispatcher.shutdown()

    summary = PipeSummary(
        input_count=input_count,
        output_count=output_count,
        target=target,
        took=time.time() - start_time,
    )
    logger.debug(summary.format())
    return summary
