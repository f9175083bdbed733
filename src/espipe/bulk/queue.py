"""待发送文档队列."""

import logging

from ..typing import Document
from .exceptions import BulkConfigError
from .models import DEFAULT_BATCH_SIZE

logger = logging.getLogger(__name__)


class BatchQueue:
    """按到达顺序累积文档的先进先出队列.

    容量即批次大小，仅作为阈值提示，由调用方在每次 push 后检查并触发 drain。

    Args:
        capacity: 批次大小，默认 5000
    """

    def __init__(self, capacity: int = DEFAULT_BATCH_SIZE):
        if capacity < 1:
            raise BulkConfigError(f"capacity 必须 >= 1，当前值: {capacity}")
        self.capacity = capacity
        self._items: list[Document] = []

    def __len__(self) -> int:
        return len(self._items)

    def is_full(self) -> bool:
        return len(self._items) >= self.capacity

    def push(self, doc: Document) -> bool:
        """追加文档到队尾.

        Returns:
            队列是否已达到批次大小
        """
        self._items.append(doc)
        return self.is_full()

    def drain(self, up_to: int | None = None) -> list[Document]:
        """取出队首最多 up_to 条文档，默认 up_to 为 capacity."""
        if up_to is None:
            up_to = self.capacity
        elif up_to < 0:
            raise BulkConfigError(f"up_to 必须 >= 0，当前值: {up_to}")
        count = min(len(self._items), up_to)
        batch = self._items[:count]
        del self._items[:count]
        logger.debug(f"取出 {count} 条文档，队列剩余 {len(self._items)}")
        return batch
