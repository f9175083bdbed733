"""bulk 响应解析模块.

将 bulk 接口的原始响应体解析为成功数和错误摘要。响应格式::

    {
        "errors": true,
        "items": [
            {"create": {"_index": "logs", "_id": "1", "status": 201}},
            {"create": {"_index": "logs", "_id": "2", "status": 400,
                        "error": {"type": "document_parsing_exception",
                                  "reason": "...",
                                  "caused_by": {"type": "...", "reason": "..."}}}}
        ]
    }
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Mapping
from typing import Any

from .exceptions import BulkResponseDecodeError
from .models import BulkAction, BulkErrorItem

UNKNOWN_CAUSE = "unknown"


class BulkResponse:
    """bulk 响应解释器.

    只用于判定成功与失败，不做持久化。

    Args:
        body: 反序列化后的响应体
    """

    def __init__(self, body: Mapping[str, Any]):
        self._errors = body.get("errors")
        self._error = body.get("error")
        items = body.get("items")
        self._items: list[Any] = items if isinstance(items, list) else []

    @classmethod
    def from_body(cls, body: Any) -> BulkResponse:
        """从原始响应体构建解释器.

        Raises:
            BulkResponseDecodeError: 响应体不是 JSON 对象时抛出
        """
        if not isinstance(body, Mapping):
            preview = str(body)[:200]
            raise BulkResponseDecodeError(f"无法解析 bulk 响应: {preview}")
        return cls(body)

    def has_errors(self) -> bool:
        """存储端是否明确报告了错误."""
        return self._errors is True

    def error_cause(self) -> str:
        """顶层错误原因，不存在时返回 "unknown"."""
        cause = self._error
        if isinstance(cause, str) and cause:
            return cause
        if isinstance(cause, Mapping) and cause.get("type"):
            return str(cause["type"])
        return UNKNOWN_CAUSE

    def _iter_results(self):
        """遍历 (操作类型, 条目结果)."""
        for item in self._items:
            if not isinstance(item, Mapping):
                continue
            for op_type, result in item.items():
                if isinstance(result, Mapping):
                    yield op_type, result

    def success_count(self, action: BulkAction | None = None) -> int:
        """统计状态码表示写入成功的条目数.

        每个条目按其自身的操作类型判定：create 只接受 201，index 和 update
        接受 200 或 201。指定 action 时只统计该操作类型的条目，无法识别的
        操作类型（如 delete）不计数。
        """
        count = 0
        for op_type, result in self._iter_results():
            try:
                item_action = BulkAction(op_type)
            except ValueError:
                continue
            if action is not None and item_action is not action:
                continue
            status = result.get("status")
            if isinstance(status, int) and item_action.accepts(status):
                count += 1
        return count

    def error_items(self) -> list[BulkErrorItem]:
        """返回所有携带错误信息的条目."""
        error_items: list[BulkErrorItem] = []
        for op_type, result in self._iter_results():
            error = result.get("error")
            if not error:
                continue
            if isinstance(error, Mapping):
                caused_by = error.get("caused_by")
                if isinstance(caused_by, Mapping) and caused_by.get("type"):
                    error_type = str(caused_by["type"])
                    error_reason = str(caused_by.get("reason", ""))
                else:
                    error_type = str(error.get("type", UNKNOWN_CAUSE))
                    error_reason = str(error.get("reason", ""))
            else:
                error_type, error_reason = str(error), ""

            error_items.append(
                BulkErrorItem(
                    index_name=str(result.get("_index", "")),
                    doc_id=result.get("_id"),
                    status=result.get("status", 0),
                    error_type=error_type,
                    error_reason=error_reason,
                    operation=op_type,
                )
            )
        return error_items

    def error_counts(self) -> str:
        """按 (索引, 错误类型) 汇总失败条目，用于日志输出.

        仅在 has_errors() 为真时统计，例如 "(2) <logs> mapper_parsing_exception"。
        """
        if not self.has_errors():
            return ""
        counts = Counter(
            f"<{item.index_name}> {item.error_type}" for item in self.error_items()
        )
        return ", ".join(f"({count}) {key}" for key, count in counts.items())
