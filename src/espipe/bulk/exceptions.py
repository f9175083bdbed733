"""批量写入异常定义模块."""

from ..exceptions import EspipeError


class BulkOperationError(EspipeError):
    """批量写入基础异常类."""

    pass


class BulkConfigError(BulkOperationError):
    """批量写入配置校验异常.

    当 batch_size、max_in_flight、退避参数等配置不合法时抛出。
    """

    pass


class BulkEncodingError(BulkOperationError):
    """文档编码异常.

    当文档无法按当前操作类型编码时抛出，例如 UPDATE 操作缺少 ID 字段。
    任意一条文档编码失败都会导致整个批次编码失败。
    """

    def __init__(self, message: str, field: str | None = None, position: int | None = None):
        super().__init__(message)
        self.field = field
        self.position = position


# 与 bulk 语义保持一致的简短别名
EncodingError = BulkEncodingError


class BulkResponseDecodeError(BulkOperationError):
    """bulk 响应解析异常."""

    pass


class BulkRetryExhaustedError(BulkOperationError):
    """限流重试次数耗尽异常."""

    pass


class BulkDispatcherClosedError(BulkOperationError):
    """调度器已关闭后继续提交文档时抛出."""

    pass
