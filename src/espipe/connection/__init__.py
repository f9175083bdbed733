"""ES 客户端模块 - 目标地址解析与 AsyncElasticsearch 客户端的创建和生命周期管理.

主要组件:
    - AsyncClientFactory: 客户端工厂，负责认证、TLS 与重试配置
    - ClusterConfig: 集群配置模型
    - ConnectionConfig: 连接配置模型
    - Destination: 写入目标（主机 + 索引）

使用示例:
    from espipe.connection import AsyncClientFactory, Destination

    destination = Destination.from_url("http://localhost:9200/logs")
    async with AsyncClientFactory.for_destination(destination) as factory:
        client = factory.get_client()
"""

from .exceptions import (
    ConnectionConfigError,
    DestinationError,
    ESClientFactoryError,
)
from .models import ClusterConfig, ConnectionConfig, Destination
from .tool import AsyncClientFactory

__all__ = [
    # 工厂
    "AsyncClientFactory",
    # 模型
    "ClusterConfig",
    "ConnectionConfig",
    "Destination",
    # 异常
    "ESClientFactoryError",
    "ConnectionConfigError",
    "DestinationError",
]
