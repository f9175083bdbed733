"""BatchQueue 单元测试."""

import pytest

from espipe.bulk import BatchQueue
from espipe.bulk.exceptions import BulkConfigError


class TestBatchQueue:
    """BatchQueue 测试."""

    def test_default_capacity(self):
        """测试默认容量."""
        assert BatchQueue().capacity == 5000

    def test_invalid_capacity(self):
        """测试非法容量."""
        with pytest.raises(BulkConfigError, match="capacity 必须 >= 1"):
            BatchQueue(0)

    def test_push_reports_threshold(self):
        """测试 push 返回是否达到阈值."""
        queue = BatchQueue(3)

        assert queue.push({"n": 1}) is False
        assert queue.push({"n": 2}) is False
        assert queue.push({"n": 3}) is True
        assert len(queue) == 3
        assert queue.is_full()

    def test_drain_fifo(self):
        """测试按到达顺序取出."""
        queue = BatchQueue(2)
        for i in range(5):
            queue.push(i)

        assert queue.drain() == [0, 1]
        assert queue.drain() == [2, 3]
        assert queue.drain() == [4]
        assert queue.drain() == []
        assert len(queue) == 0

    def test_drain_partial(self):
        """测试不足一批时取出全部."""
        queue = BatchQueue(10)
        queue.push("a")
        queue.push("b")

        assert queue.drain() == ["a", "b"]

    def test_drain_up_to(self):
        """测试按指定数量取出."""
        queue = BatchQueue(10)
        for i in range(5):
            queue.push(i)

        assert queue.drain(2) == [0, 1]
        assert queue.drain(0) == []
        assert queue.drain(100) == [2, 3, 4]
        assert len(queue) == 0

    def test_drain_negative(self):
        """测试取出数量为负数时抛出异常."""
        with pytest.raises(BulkConfigError):
            BatchQueue(2).drain(-1)

    def test_drained_batch_is_independent(self):
        """测试取出的批次与队列互不影响."""
        queue = BatchQueue(2)
        queue.push(1)
        queue.push(2)
        batch = queue.drain()
        queue.push(3)

        assert batch == [1, 2]
        assert queue.drain() == [3]

    def test_no_deduplication(self):
        """测试重复文档不去重."""
        queue = BatchQueue(3)
        doc = {"id": "1"}
        queue.push(doc)
        queue.push(doc)

        assert queue.drain() == [doc, doc]
