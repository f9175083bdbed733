"""BulkResponse 单元测试."""

import pytest

from espipe.bulk import BulkAction, BulkResponse
from espipe.bulk.exceptions import BulkResponseDecodeError


def _item(op_type, status, index="logs", doc_id="1", error=None):
    result = {"_index": index, "_id": doc_id, "status": status}
    if error is not None:
        result["error"] = error
    return {op_type: result}


MAPPING_ERROR = {
    "type": "document_parsing_exception",
    "reason": "failed to parse",
    "caused_by": {"type": "illegal_argument_exception", "reason": "bad value"},
}


class TestErrorFlags:
    """顶层错误信息测试."""

    def test_has_errors_only_when_true(self):
        """测试只有 errors 为 true 时才算有错误."""
        assert BulkResponse({"errors": True}).has_errors() is True
        assert BulkResponse({"errors": False}).has_errors() is False
        assert BulkResponse({}).has_errors() is False
        assert BulkResponse({"errors": "true"}).has_errors() is False

    def test_error_cause_object(self):
        """测试对象形式的顶层错误."""
        body = {"error": {"type": "es_rejected_execution_exception", "reason": "full"}}

        assert BulkResponse(body).error_cause() == "es_rejected_execution_exception"

    def test_error_cause_string(self):
        """测试字符串形式的顶层错误."""
        assert BulkResponse({"error": "Incorrect HTTP method"}).error_cause() == (
            "Incorrect HTTP method"
        )

    def test_error_cause_unknown(self):
        """测试缺少顶层错误."""
        assert BulkResponse({}).error_cause() == "unknown"
        assert BulkResponse({"error": {"reason": "x"}}).error_cause() == "unknown"

    def test_from_body_rejects_non_object(self):
        """测试非对象响应体."""
        with pytest.raises(BulkResponseDecodeError):
            BulkResponse.from_body("<html>Bad Gateway</html>")
        with pytest.raises(BulkResponseDecodeError):
            BulkResponse.from_body(None)


class TestSuccessCount:
    """成功数统计测试."""

    def test_create_accepts_only_created(self):
        """测试 CREATE 只接受 201."""
        body = {
            "items": [
                _item("create", 201),
                _item("create", 200),
                _item("create", 409, error=MAPPING_ERROR),
            ]
        }

        assert BulkResponse(body).success_count(BulkAction.CREATE) == 1

    def test_index_accepts_ok_and_created(self):
        """测试 INDEX 接受 200 和 201."""
        body = {"items": [_item("index", 200), _item("index", 201), _item("index", 500)]}

        assert BulkResponse(body).success_count(BulkAction.INDEX) == 2

    def test_update_same_as_index(self):
        """测试 UPDATE 与 INDEX 使用相同的成功判定."""
        body = {"items": [_item("update", 200), _item("update", 201), _item("update", 404)]}

        assert BulkResponse(body).success_count(BulkAction.UPDATE) == 2

    def test_other_operation_types_ignored(self):
        """测试不匹配的操作类型不计数."""
        body = {"items": [_item("index", 201), _item("delete", 200)]}

        assert BulkResponse(body).success_count(BulkAction.CREATE) == 0

    def test_rule_follows_item_operation(self):
        """测试未指定 action 时按条目自身的操作类型判定."""
        body = {
            "items": [
                _item("index", 200),
                _item("index", 201),
                _item("create", 200),
                _item("create", 201),
                _item("update", 200),
                _item("delete", 200),
            ]
        }

        assert BulkResponse(body).success_count() == 4

    def test_index_only_response_without_action(self):
        """测试全部为 index 条目的响应不依赖 action 参数."""
        body = {"items": [_item("index", 200), _item("index", 200)]}

        assert BulkResponse(body).success_count() == 2

    def test_missing_items(self):
        """测试缺少 items."""
        assert BulkResponse({"errors": False}).success_count() == 0

    def test_partial_failure(self):
        """测试 3 条中 2 条失败."""
        body = {
            "errors": True,
            "items": [
                _item("create", 201, doc_id="1"),
                _item("create", 400, doc_id="2", error=MAPPING_ERROR),
                _item("create", 400, doc_id="3", error=MAPPING_ERROR),
            ],
        }
        response = BulkResponse(body)

        assert response.success_count(BulkAction.CREATE) == 1
        counts = response.error_counts()
        assert counts == "(2) <logs> illegal_argument_exception"


class TestErrorCounts:
    """错误汇总测试."""

    def test_empty_without_errors_flag(self):
        """测试 errors 不为 true 时不统计."""
        body = {"errors": False, "items": [_item("create", 400, error=MAPPING_ERROR)]}

        assert BulkResponse(body).error_counts() == ""

    def test_groups_by_index_and_type(self):
        """测试按索引和错误类型分组."""
        conflict = {"type": "version_conflict_engine_exception", "reason": "exists"}
        body = {
            "errors": True,
            "items": [
                _item("create", 409, index="a", error=conflict),
                _item("create", 400, index="b", error=MAPPING_ERROR),
                _item("create", 409, index="a", error=conflict),
                _item("create", 201, index="a"),
            ],
        }

        counts = BulkResponse(body).error_counts()

        assert counts == (
            "(2) <a> version_conflict_engine_exception, "
            "(1) <b> illegal_argument_exception"
        )

    def test_error_items(self):
        """测试失败条目详情."""
        body = {"errors": True, "items": [_item("index", 400, doc_id="7", error=MAPPING_ERROR)]}

        items = BulkResponse(body).error_items()

        assert len(items) == 1
        assert items[0].doc_id == "7"
        assert items[0].status == 400
        assert items[0].error_type == "illegal_argument_exception"
        assert items[0].error_reason == "bad value"
        assert items[0].operation == "index"
