"""ES 客户端工厂工具模块.

提供 AsyncClientFactory 类，用于统一管理 AsyncElasticsearch 客户端的创建、
认证与 TLS 配置、生命周期管理和连通性检查。

使用示例:
    from espipe.connection import AsyncClientFactory, ClusterConfig

    async with AsyncClientFactory(ClusterConfig(hosts=["http://localhost:9200"])) as factory:
        client = factory.get_client()
"""

from __future__ import annotations

import logging

from elasticsearch import AsyncElasticsearch
from elasticsearch.exceptions import ApiError, TransportError
from elasticsearch.exceptions import ConnectionError as ESConnectionError

from .models import ClusterConfig, ConnectionConfig, Destination

logger = logging.getLogger(__name__)


class AsyncClientFactory:
    """AsyncElasticsearch 客户端工厂.

    惰性创建并缓存客户端，支持多认证方式和异步上下文管理器。

    Attributes:
        _cluster: 集群配置
        _connection_config: 连接配置
        _client: 缓存的客户端实例

    Examples:
        >>> factory = AsyncClientFactory(ClusterConfig(hosts=["http://localhost:9200"]))
        >>> client = factory.get_client()
    """

    def __init__(
        self,
        cluster: ClusterConfig,
        connection_config: ConnectionConfig | None = None,
    ) -> None:
        """初始化客户端工厂.

        Args:
            cluster: 集群配置
            connection_config: 连接配置，默认使用 ConnectionConfig 的默认值
        """
        self._cluster = cluster
        self._connection_config = connection_config or ConnectionConfig()
        self._client: AsyncElasticsearch | None = None

    @classmethod
    def for_destination(
        cls,
        destination: Destination,
        connection_config: ConnectionConfig | None = None,
        **auth,
    ) -> AsyncClientFactory:
        """根据写入目标创建工厂.

        Args:
            destination: 写入目标
            connection_config: 连接配置
            **auth: 传递给 ClusterConfig 的认证与 TLS 参数

        Raises:
            ConnectionConfigError: 认证配置冲突时抛出
        """
        cluster = ClusterConfig(hosts=[destination.base_url], **auth)
        return cls(cluster, connection_config)

    def _create_client(self) -> AsyncElasticsearch:
        """根据配置创建 AsyncElasticsearch 客户端实例.

        Returns:
            AsyncElasticsearch 客户端实例
        """
        cluster_config = self._cluster
        kwargs: dict = {
            "hosts": cluster_config.hosts,
            "max_retries": self._connection_config.max_retries,
            "retry_on_timeout": self._connection_config.retry_on_timeout,
            "retry_on_status": self._connection_config.retry_on_status,
            "request_timeout": self._connection_config.request_timeout,
            "http_compress": self._connection_config.http_compress,
        }

        # Basic Auth 认证
        if cluster_config.username is not None and cluster_config.password is not None:
            kwargs["basic_auth"] = (
                cluster_config.username,
                cluster_config.password,
            )

        # API Key 认证
        if cluster_config.api_key:
            kwargs["api_key"] = cluster_config.api_key

        # Bearer Token 认证
        if cluster_config.bearer_token:
            kwargs["bearer_auth"] = cluster_config.bearer_token

        # SSL/TLS 配置
        if cluster_config.ca_certs:
            kwargs["ca_certs"] = cluster_config.ca_certs
        kwargs["verify_certs"] = cluster_config.verify_certs

        logger.debug(
            f"创建客户端: hosts={cluster_config.hosts}, "
            f"auth={cluster_config.auth_method}, verify_certs={cluster_config.verify_certs}"
        )
        return AsyncElasticsearch(**kwargs)

    def get_client(self) -> AsyncElasticsearch:
        """获取客户端，首次调用时创建并缓存.

        Returns:
            AsyncElasticsearch 客户端实例
        """
        if self._client is None:
            self._client = self._create_client()
        return self._client

    # ============================================================
    # 生命周期管理
    # ============================================================

    async def __aenter__(self) -> AsyncClientFactory:
        """异步上下文管理器入口.

        Returns:
            工厂实例自身
        """
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """异步上下文管理器退出，自动关闭客户端."""
        await self.close()

    async def close(self) -> None:
        """关闭已创建的客户端连接并清空缓存.

        关闭后可重新调用 get_client() 创建新的客户端。
        """
        client, self._client = self._client, None
        if client is None:
            return
        try:
            await client.close()
        except TransportError as e:
            logger.warning(f"关闭客户端失败: {e}")

    # ============================================================
    # 连通性检查
    # ============================================================

    async def is_connected(self) -> bool:
        """检查集群是否可达.

        Returns:
            ping 成功时返回 True，不可达时返回 False
        """
        try:
            return bool(await self.get_client().ping())
        except (ApiError, ESConnectionError, TransportError) as e:
            logger.debug(f"集群不可达: {e}")
            return False
