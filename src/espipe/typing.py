"""espipe 类型定义模块."""

from typing import Any, List

# 文档类型，任意 JSON 兼容值
Document = Any

# 发送给 bulk 接口的完整请求体，动作行与数据行交替
BulkPayload = List[Any]
