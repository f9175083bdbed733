"""BulkOperationEncoder 单元测试."""

import json

import pytest

from espipe.bulk import BulkAction, BulkOperationEncoder
from espipe.bulk.exceptions import BulkEncodingError, EncodingError


class TestCreateAndIndex:
    """CREATE / INDEX 编码测试."""

    @pytest.mark.parametrize("action", [BulkAction.CREATE, BulkAction.INDEX])
    def test_two_lines_per_document(self, action):
        """测试每条文档生成两行."""
        documents = [{"message": f"doc-{i}"} for i in range(7)]
        encoder = BulkOperationEncoder(action)

        payload = encoder.encode_payload(documents)

        assert len(payload) == 14
        for i, doc in enumerate(documents):
            assert payload[2 * i] == {action.value: {}}
            assert payload[2 * i + 1] is doc

    def test_document_verbatim(self):
        """测试数据行保持原样，包括非对象文档."""
        encoder = BulkOperationEncoder(BulkAction.CREATE)

        payload = encoder.encode_payload([{"_id": "x", "a": 1}, [1, 2], "text"])

        assert payload[1] == {"_id": "x", "a": 1}
        assert payload[3] == [1, 2]
        assert payload[5] == "text"

    def test_empty_batch(self):
        """测试空批次."""
        encoder = BulkOperationEncoder(BulkAction.INDEX)

        assert encoder.encode_payload([]) == []
        assert encoder.to_ndjson([]) == ""

    def test_to_ndjson(self):
        """测试换行分隔 JSON 输出."""
        encoder = BulkOperationEncoder(BulkAction.CREATE)

        text = encoder.to_ndjson([{"message": "hello"}, {"message": "世界"}])

        assert text.endswith("\n")
        lines = text.splitlines()
        assert len(lines) == 4
        assert json.loads(lines[0]) == {"create": {}}
        assert json.loads(lines[3]) == {"message": "世界"}


class TestUpdate:
    """UPDATE 编码测试."""

    def test_update_extracts_id(self):
        """测试提取ID并包装剩余字段."""
        documents = [{"_id": str(i), "name": f"user-{i}", "age": i} for i in range(3)]
        encoder = BulkOperationEncoder(BulkAction.UPDATE)

        payload = encoder.encode_payload(documents)

        assert len(payload) == 6
        for i in range(3):
            assert payload[2 * i] == {"update": {"_id": str(i)}}
            assert payload[2 * i + 1] == {"doc": {"name": f"user-{i}", "age": i}}

    def test_update_does_not_mutate_document(self):
        """测试编码不修改原文档."""
        doc = {"_id": "1", "name": "Alice"}
        BulkOperationEncoder(BulkAction.UPDATE).encode([doc])

        assert doc == {"_id": "1", "name": "Alice"}

    def test_custom_id_field(self):
        """测试自定义ID字段."""
        encoder = BulkOperationEncoder(BulkAction.UPDATE, id_field="id")

        operations = encoder.encode([{"id": "42", "_id": "kept"}])

        assert operations[0].doc_id == "42"
        assert operations[0].to_lines() == (
            {"update": {"_id": "42"}},
            {"doc": {"_id": "kept"}},
        )

    def test_missing_id_fails_whole_batch(self):
        """测试缺少ID字段时整批失败并指出字段名."""
        documents = [{"_id": "1", "a": 1}, {"a": 2}, {"_id": "3", "a": 3}]
        encoder = BulkOperationEncoder(BulkAction.UPDATE)

        with pytest.raises(BulkEncodingError, match="'_id'") as exc_info:
            encoder.encode_payload(documents)

        assert exc_info.value.field == "_id"
        assert exc_info.value.position == 1

    def test_non_string_id(self):
        """测试ID字段不是字符串."""
        encoder = BulkOperationEncoder(BulkAction.UPDATE)

        with pytest.raises(BulkEncodingError, match="必须为字符串"):
            encoder.encode([{"_id": 1, "a": 1}])

    def test_non_object_document(self):
        """测试文档不是对象."""
        encoder = BulkOperationEncoder(BulkAction.UPDATE)

        with pytest.raises(EncodingError, match="要求文档为对象"):
            encoder.encode(["not-an-object"])

    def test_to_ndjson_emits_nothing_on_failure(self):
        """测试编码失败时不输出任何行."""
        encoder = BulkOperationEncoder(BulkAction.UPDATE)

        with pytest.raises(BulkEncodingError):
            encoder.to_ndjson([{"_id": "1"}, {}])
