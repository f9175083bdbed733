"""espipe - 将 JSON 文档流式批量写入 Elasticsearch.

主要功能:
    - BulkDispatcher: 分批、并发发送、限流退避重试的批量写入调度器
    - BulkOperationEncoder: 将文档编码为 bulk 请求体
    - BulkResponse: 解析 bulk 响应中的成功数和错误摘要
    - AsyncClientFactory: 创建 AsyncElasticsearch 客户端
    - pipe: 将文档迭代器写入调度器并生成运行摘要

使用示例:
    from espipe import AsyncClientFactory, BulkDispatcher, Destination, pipe

    destination = Destination.from_url("http://localhost:9200/logs")
    async with AsyncClientFactory.for_destination(destination) as factory:
        dispatcher = BulkDispatcher(factory.get_client(), destination)
        summary = await pipe(documents, dispatcher)
        print(summary.format())
"""

__version__ = "0.3.0"

# 导出批量写入组件
from espipe.bulk import (
    BatchOutcome,
    BatchQueue,
    BatchResult,
    BulkAction,
    BulkConfig,
    BulkDispatcher,
    BulkOperationEncoder,
    BulkResponse,
    BulkSummary,
    RetryConfig,
    RetryPolicy,
)

# 导出客户端组件
from espipe.connection import (
    AsyncClientFactory,
    ClusterConfig,
    ConnectionConfig,
    Destination,
)

# 导出异常
from espipe.bulk.exceptions import (
    BulkEncodingError,
    BulkOperationError,
    EncodingError,
)
from espipe.connection.exceptions import ConnectionConfigError, DestinationError
from espipe.exceptions import EspipeError

# 导出管道驱动
from espipe.pipe import PipeSummary, pipe

__all__ = [
    # 版本
    "__version__",
    # 批量写入
    "BulkDispatcher",
    "BulkConfig",
    "RetryConfig",
    "BulkAction",
    "BatchOutcome",
    "BatchResult",
    "BulkSummary",
    "BatchQueue",
    "BulkOperationEncoder",
    "BulkResponse",
    "RetryPolicy",
    # 客户端
    "AsyncClientFactory",
    "ClusterConfig",
    "ConnectionConfig",
    "Destination",
    # 异常
    "EspipeError",
    "BulkOperationError",
    "BulkEncodingError",
    "EncodingError",
    "ConnectionConfigError",
    "DestinationError",
    # 管道
    "pipe",
    "PipeSummary",
]
