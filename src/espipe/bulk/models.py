"""批量写入数据模型定义模块.

提供批量写入相关的数据模型，包括：
- BulkAction: 操作类型枚举
- BatchOutcome: 批次结果类型枚举
- BulkOperation: 单条 bulk 操作（动作行 + 数据行）
- BulkErrorItem / BatchResult / BulkSummary: 结果模型
- BulkConfig / RetryConfig: 配置模型
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .exceptions import BulkConfigError

DEFAULT_BATCH_SIZE = 5_000
DEFAULT_ID_FIELD = "_id"


class BulkAction(Enum):
    """批量操作类型枚举.

    Attributes:
        CREATE: 创建文档，文档已存在时失败
        INDEX: 索引文档，文档已存在时覆盖
        UPDATE: 按 ID 局部更新文档
    """

    CREATE = "create"
    INDEX = "index"
    UPDATE = "update"

    def accepts(self, status: int) -> bool:
        """判断单条结果的状态码是否表示写入成功.

        CREATE 只接受 201；INDEX 和 UPDATE 接受 200 或 201。
        """
        if self is BulkAction.CREATE:
            return status == 201
        return status in (200, 201)


class BatchOutcome(Enum):
    """批次最终结果类型枚举.

    Attributes:
        ACCEPTED: 存储端已接受请求（可能包含部分条目失败）
        REJECTED: 存储端返回 400，整批放弃
        THROTTLED: 限流重试次数耗尽
        TRANSPORT_ERROR: 网络/传输失败或响应无法解析
        ENCODING_ERROR: 批次编码失败，未发送
    """

    ACCEPTED = "accepted"
    REJECTED = "rejected"
    THROTTLED = "throttled"
    TRANSPORT_ERROR = "transport_error"
    ENCODING_ERROR = "encoding_error"


@dataclass
class BulkOperation:
    """单条 bulk 操作.

    Attributes:
        action: 操作类型
        source: 数据行内容
        doc_id: 文档ID（仅 UPDATE 操作）
    """

    action: BulkAction
    source: Any
    doc_id: str | None = None

    @property
    def header(self) -> dict[str, Any]:
        """动作行."""
        meta: dict[str, Any] = {}
        if self.doc_id is not None:
            meta["_id"] = self.doc_id
        return {self.action.value: meta}

    def to_lines(self) -> tuple[dict[str, Any], Any]:
        """返回 (动作行, 数据行)."""
        return self.header, self.source


@dataclass
class BulkErrorItem:
    """bulk 响应中失败的条目.

    Attributes:
        index_name: 索引名称
        doc_id: 文档ID
        status: HTTP状态码
        error_type: 错误类型（优先取 caused_by.type）
        error_reason: 错误原因
        operation: 操作类型
    """

    index_name: str
    doc_id: str | None
    status: int
    error_type: str
    error_reason: str
    operation: str | None = None


@dataclass
class BatchResult:
    """单个批次的处理结果.

    Attributes:
        batch_number: 批次序号，从 1 开始
        size: 批次文档数
        outcome: 结果类型
        success: 确认写入成功的文档数
        attempts: 发送次数
        error: 错误描述
        error_counts: 条目级错误汇总
    """

    batch_number: int
    size: int
    outcome: BatchOutcome
    success: int = 0
    attempts: int = 0
    error: str | None = None
    error_counts: str = ""

    @property
    def failed(self) -> int:
        return self.size - self.success


@dataclass
class BulkSummary:
    """全部批次的汇总结果.

    Attributes:
        total: 总文档数
        success: 成功数
        failed: 失败数
        batch_count: 批次数
        outcomes: 各结果类型的批次数
        took: 总耗时（秒）
    """

    total: int = 0
    success: int = 0
    failed: int = 0
    batch_count: int = 0
    outcomes: dict[BatchOutcome, int] = field(default_factory=dict)
    took: float = 0.0

    @classmethod
    def from_results(cls, results: list[BatchResult], took: float = 0.0) -> "BulkSummary":
        summary = cls(took=took)
        for result in results:
            summary.total += result.size
            summary.success += result.success
            summary.failed += result.failed
            summary.batch_count += 1
            summary.outcomes[result.outcome] = summary.outcomes.get(result.outcome, 0) + 1
        return summary

    def is_success(self) -> bool:
        """判断是否全部写入成功."""
        return self.failed == 0

    def get_outcome_summary(self) -> str:
        """获取批次结果摘要."""
        if not self.outcomes:
            return "No batches"
        return ", ".join(
            f"{outcome.value}={count}" for outcome, count in self.outcomes.items()
        )


@dataclass
class BulkConfig:
    """批量写入配置模型.

    Attributes:
        action: 操作类型，默认 CREATE
        batch_size: 每批次文档数，默认 5000，必须 >= 1
        id_field: UPDATE 操作使用的文档ID字段，默认 "_id"
        max_in_flight: 同时发送中的批次上限，None 表示不限制

    Raises:
        BulkConfigError: 当参数不合法时抛出

    Examples:
        >>> config = BulkConfig(action=BulkAction.UPDATE, batch_size=1000)
    """

    action: BulkAction = BulkAction.CREATE
    batch_size: int = DEFAULT_BATCH_SIZE
    id_field: str = DEFAULT_ID_FIELD
    max_in_flight: int | None = None

    def __post_init__(self) -> None:
        """校验批量写入配置参数合法性."""
        if not isinstance(self.action, BulkAction):
            try:
                self.action = BulkAction(self.action)
            except ValueError as e:
                raise BulkConfigError(f"不支持的操作类型: {self.action}") from e
        if self.batch_size < 1:
            raise BulkConfigError(f"batch_size 必须 >= 1，当前值: {self.batch_size}")
        if not self.id_field:
            raise BulkConfigError("id_field 不能为空")
        if self.max_in_flight is not None and self.max_in_flight < 1:
            raise BulkConfigError(
                f"max_in_flight 必须 >= 1，当前值: {self.max_in_flight}"
            )


@dataclass
class RetryConfig:
    """限流重试配置模型.

    Attributes:
        initial_backoff: 首次重试前的等待时间（秒），默认 1
        max_backoff: 等待时间上限（秒），默认 30
        max_attempts: 最大发送次数，None 表示一直重试直到成功

    Raises:
        BulkConfigError: 当参数不合法时抛出
    """

    initial_backoff: float = 1.0
    max_backoff: float = 30.0
    max_attempts: int | None = None

    def __post_init__(self) -> None:
        """校验重试配置参数合法性."""
        if self.initial_backoff < 0:
            raise BulkConfigError(
                f"initial_backoff 必须 >= 0，当前值: {self.initial_backoff}"
            )
        if self.max_backoff < self.initial_backoff:
            raise BulkConfigError(
                f"max_backoff 必须 >= initial_backoff，当前值: {self.max_backoff}"
            )
        if self.max_attempts is not None and self.max_attempts < 1:
            raise BulkConfigError(
                f"max_attempts 必须 >= 1，当前值: {self.max_attempts}"
            )
