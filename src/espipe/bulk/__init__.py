"""批量写入模块.

该模块提供面向 Elasticsearch bulk 接口的流式写入功能，包括：
- 按批次大小自动分批
- 每个批次并发异步发送
- 429 限流时指数退避重试
- 解析部分失败的 bulk 响应

示例用法:
    >>> from espipe.bulk import BulkDispatcher, BulkConfig, BulkAction
    >>> dispatcher = BulkDispatcher.from_url(
    ...     client, "http://localhost:9200/logs", BulkConfig(action=BulkAction.INDEX)
    ... )
    >>> for doc in documents:
    ...     await dispatcher.submit(doc)
    >>> success = await dispatcher.shutdown()
"""

from .encoder import BulkOperationEncoder
from .exceptions import (
    BulkConfigError,
    BulkDispatcherClosedError,
    BulkEncodingError,
    BulkOperationError,
    BulkResponseDecodeError,
    BulkRetryExhaustedError,
    EncodingError,
)
from .models import (
    BatchOutcome,
    BatchResult,
    BulkAction,
    BulkConfig,
    BulkErrorItem,
    BulkOperation,
    BulkSummary,
    RetryConfig,
)
from .queue import BatchQueue
from .response import BulkResponse
from .retry import RetryPolicy
from .tool import BulkDispatcher

__all__ = [
    "BatchOutcome",
    "BatchQueue",
    "BatchResult",
    "BulkAction",
    "BulkConfig",
    "BulkDispatcher",
    "BulkErrorItem",
    "BulkOperation",
    "BulkOperationEncoder",
    "BulkResponse",
    "BulkSummary",
    "RetryConfig",
    "RetryPolicy",
    "BulkConfigError",
    "BulkDispatcherClosedError",
    "BulkEncodingError",
    "BulkOperationError",
    "BulkResponseDecodeError",
    "BulkRetryExhaustedError",
    "EncodingError",
]
