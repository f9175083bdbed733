"""bulk 请求体编码模块.

将一批文档按操作类型编码为 bulk 接口要求的成对行格式::

    {"create": {}}
    {"message": "hello"}
    {"update": {"_id": "1"}}
    {"doc": {"message": "world"}}
"""

import json
from collections.abc import Mapping, Sequence
from typing import Any

from ..typing import BulkPayload, Document
from .exceptions import BulkEncodingError
from .models import DEFAULT_ID_FIELD, BulkAction, BulkOperation


class BulkOperationEncoder:
    """bulk 操作编码器.

    CREATE 和 INDEX 操作直接使用原始文档作为数据行；UPDATE 操作从文档中
    取出 ID 字段放入动作行，剩余字段包装为 ``{"doc": ...}``。

    编码是全有或全无的：任意一条文档编码失败时抛出 BulkEncodingError，
    整个批次都不会产生输出。

    Args:
        action: 操作类型
        id_field: UPDATE 操作使用的文档ID字段，默认为 "_id"
    """

    def __init__(self, action: BulkAction, id_field: str = DEFAULT_ID_FIELD):
        self.action = action
        self.id_field = id_field

    def _encode_update(self, doc: Document, position: int) -> BulkOperation:
        if not isinstance(doc, Mapping):
            raise BulkEncodingError(
                f"UPDATE 操作要求文档为对象，第 {position} 条文档类型为 "
                f"{type(doc).__name__}",
                field=self.id_field,
                position=position,
            )
        if self.id_field not in doc:
            raise BulkEncodingError(
                f"第 {position} 条文档缺少文档ID字段 '{self.id_field}'",
                field=self.id_field,
                position=position,
            )
        doc_id = doc[self.id_field]
        if not isinstance(doc_id, str):
            raise BulkEncodingError(
                f"第 {position} 条文档的ID字段 '{self.id_field}' 必须为字符串，"
                f"当前类型为 {type(doc_id).__name__}",
                field=self.id_field,
                position=position,
            )

        # 排除ID字段，只保留需要更新的字段
        fields = {k: v for k, v in doc.items() if k != self.id_field}
        return BulkOperation(action=self.action, source={"doc": fields}, doc_id=doc_id)

    def encode_one(self, doc: Document, position: int = 0) -> BulkOperation:
        """编码单条文档."""
        if self.action is BulkAction.UPDATE:
            return self._encode_update(doc, position)
        return BulkOperation(action=self.action, source=doc)

    def encode(self, documents: Sequence[Document]) -> list[BulkOperation]:
        """按输入顺序编码一批文档.

        Args:
            documents: 文档列表

        Returns:
            BulkOperation 列表，与输入一一对应

        Raises:
            BulkEncodingError: 任意一条文档无法编码时抛出
        """
        return [self.encode_one(doc, i) for i, doc in enumerate(documents)]

    def encode_payload(self, documents: Sequence[Document]) -> BulkPayload:
        """编码为 AsyncElasticsearch.bulk 的 operations 参数（动作行与数据行交替）."""
        payload: list[Any] = []
        for operation in self.encode(documents):
            payload.extend(operation.to_lines())
        return payload

    def to_ndjson(self, documents: Sequence[Document]) -> str:
        """编码为换行分隔的 JSON 文本，末尾带换行符."""
        lines = [
            json.dumps(line, ensure_ascii=False, separators=(",", ":"))
            for line in self.encode_payload(documents)
        ]
        return "\n".join(lines) + "\n" if lines else ""
