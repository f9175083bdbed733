"""ES 客户端工厂异常定义模块."""

from ..exceptions import EspipeError


class ESClientFactoryError(EspipeError):
    """客户端工厂基础异常类.

    所有客户端与目标地址相关异常的基类，继承自 EspipeError。
    """

    pass


class ConnectionConfigError(ESClientFactoryError):
    """连接配置校验异常.

    当连接配置参数不合法时抛出，例如 hosts 为空、同时配置了 API Key 和
    Basic Auth 等。
    """

    pass


class DestinationError(ESClientFactoryError):
    """目标地址解析异常.

    当无法从目标 URL 中解析出主机名或索引名时抛出。
    """

    pass
