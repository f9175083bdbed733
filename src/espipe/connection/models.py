"""ES 客户端数据模型定义模块.

提供客户端相关的数据模型，包括：
- ClusterConfig: 集群配置
- ConnectionConfig: 连接配置
- Destination: 写入目标
"""

from __future__ import annotations

from dataclasses import dataclass, field
from urllib.parse import urlsplit

from .exceptions import ConnectionConfigError, DestinationError


@dataclass
class ClusterConfig:
    """集群配置模型.

    定义 ES 集群的连接信息，包括地址和认证方式。Basic Auth、API Key 和
    Bearer Token 最多只能配置一种，用户名和密码必须成对出现。

    Attributes:
        hosts: ES 节点地址列表（必需，不可为空）
        username: Basic Auth 用户名
        password: Basic Auth 密码
        api_key: API Key 认证（字符串或元组）
        bearer_token: Bearer Token 认证
        ca_certs: CA 证书文件路径
        verify_certs: 是否验证 SSL 证书，默认 True

    Raises:
        ConnectionConfigError: 当 hosts 为空或认证配置冲突时抛出

    Examples:
        >>> config = ClusterConfig(
        ...     hosts=["https://localhost:9200"],
        ...     username="elastic",
        ...     password="changeme",
        ...     verify_certs=False,
        ... )
    """

    hosts: list[str] = field(default_factory=list)
    username: str | None = None
    password: str | None = None
    api_key: str | tuple[str, str] | None = None
    bearer_token: str | None = None
    ca_certs: str | None = None
    verify_certs: bool = True

    def __post_init__(self) -> None:
        """校验集群配置参数合法性."""
        if not self.hosts:
            raise ConnectionConfigError("hosts 不能为空，请提供至少一个 ES 节点地址")
        if (self.username is None) != (self.password is None):
            raise ConnectionConfigError("username 和 password 必须同时提供")
        methods = [
            name
            for name, configured in (
                ("username/password", self.username is not None),
                ("api_key", bool(self.api_key)),
                ("bearer_token", bool(self.bearer_token)),
            )
            if configured
        ]
        if len(methods) > 1:
            raise ConnectionConfigError(f"{' 与 '.join(methods)} 不能同时配置")

    @property
    def auth_method(self) -> str:
        """当前认证方式名称，用于日志输出（不含凭据）."""
        if self.api_key:
            return "ApiKey"
        if self.username is not None:
            return "Basic"
        if self.bearer_token:
            return "Bearer"
        return "None"


@dataclass
class ConnectionConfig:
    """连接配置模型.

    定义 ES 客户端的超时、压缩和传输层重试策略。429 不在传输层重试的
    状态码中，限流由批量写入引擎自行退避重试。

    Attributes:
        max_retries: 传输层最大重试次数，默认 3
        retry_on_timeout: 超时是否重试，默认 True
        retry_on_status: 传输层自动重试的状态码，默认 (502, 503, 504)
        request_timeout: 请求超时时间（秒），默认 30，必须 >= 0
        http_compress: 是否启用请求体 gzip 压缩，默认 True

    Raises:
        ConnectionConfigError: 当参数不合法时抛出
    """

    max_retries: int = 3
    retry_on_timeout: bool = True
    retry_on_status: tuple[int, ...] = (502, 503, 504)
    request_timeout: int = 30
    http_compress: bool = True

    def __post_init__(self) -> None:
        """校验连接配置参数合法性."""
        if self.max_retries < 0:
            raise ConnectionConfigError(
                f"max_retries 必须 >= 0，当前值: {self.max_retries}"
            )
        if self.request_timeout < 0:
            raise ConnectionConfigError(
                f"request_timeout 必须 >= 0，当前值: {self.request_timeout}"
            )
        if 429 in self.retry_on_status:
            raise ConnectionConfigError("retry_on_status 不能包含 429，限流由写入引擎处理")


@dataclass(frozen=True)
class Destination:
    """写入目标.

    由形如 ``http://host:9200/index`` 的 URL 解析得到，路径部分即索引名。

    Attributes:
        scheme: 协议，http 或 https
        host: 主机名
        index: 索引名
        port: 端口，可选
    """

    scheme: str
    host: str
    index: str
    port: int | None = None

    @classmethod
    def from_url(cls, url: str) -> Destination:
        """从目标 URL 解析写入目标.

        Raises:
            DestinationError: 缺少主机名、索引名或协议不受支持时抛出
        """
        try:
            parts = urlsplit(url)
            port = parts.port
        except ValueError as e:
            raise DestinationError(f"无法解析目标地址 {url!r}: {e}") from e

        if parts.scheme not in ("http", "https"):
            raise DestinationError(f"不支持的协议: {parts.scheme!r}，目标地址: {url!r}")
        if not parts.hostname:
            raise DestinationError(f"目标地址缺少主机名: {url!r}")

        index = parts.path.strip("/")
        if not index:
            raise DestinationError(f"目标地址缺少索引名: {url!r}")
        if "/" in index:
            raise DestinationError(f"索引名不能包含 '/': {index!r}")

        return cls(scheme=parts.scheme, host=parts.hostname, index=index, port=port)

    @property
    def base_url(self) -> str:
        """不含索引路径的集群地址."""
        host = f"[{self.host}]" if ":" in self.host else self.host
        if self.port is not None:
            return f"{self.scheme}://{host}:{self.port}"
        return f"{self.scheme}://{host}"

    def __str__(self) -> str:
        return f"{self.host}:{self.index}"
