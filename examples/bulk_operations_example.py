"""批量写入使用示例.

本文件展示了如何使用 BulkDispatcher 将 NDJSON 文件流式写入 Elasticsearch。
"""

import asyncio
import json
import logging
import sys

from espipe import (
    AsyncClientFactory,
    BulkAction,
    BulkConfig,
    BulkDispatcher,
    Destination,
    RetryConfig,
    pipe,
)

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def read_ndjson(path):
    """逐行读取 NDJSON 文件."""
    with open(path, encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if line:
                yield json.loads(line)


# ==================== 示例1：创建文档 ====================
async def example_create(path: str, url: str = "http://localhost:9200/users"):
    """以 CREATE 方式写入文件中的全部文档."""
    destination = Destination.from_url(url)

    async with AsyncClientFactory.for_destination(destination) as factory:
        dispatcher = BulkDispatcher(
            factory.get_client(),
            destination,
            BulkConfig(batch_size=1000),  # 每批处理1000条记录
        )
        summary = await pipe(read_ndjson(path), dispatcher)

    print(summary.format())
    for result in dispatcher.results:
        if result.error or result.error_counts:
            print(f"  批次 {result.batch_number}: {result.outcome.value} {result.error or result.error_counts}")


# ==================== 示例2：按ID更新，限制并发与重试 ====================
async def example_update(url: str = "https://localhost:9200/users"):
    """按 _id 局部更新文档."""
    destination = Destination.from_url(url)
    updates = [
        {"_id": "1", "age": 26, "city": "杭州"},  # 更新张三的年龄和城市
        {"_id": "2", "age": 31},  # 只更新李四的年龄
    ]

    factory = AsyncClientFactory.for_destination(
        destination, username="elastic", password="changeme", verify_certs=False
    )
    async with factory:
        dispatcher = BulkDispatcher(
            factory.get_client(),
            destination,
            BulkConfig(action=BulkAction.UPDATE, max_in_flight=4),
            RetryConfig(max_attempts=10),  # 限流时最多发送10次
        )
        for doc in updates:
            await dispatcher.submit(doc)
        success = await dispatcher.shutdown()

    print(f"批量更新结果: 成功={success}, 汇总={dispatcher.summary().get_outcome_summary()}")


if __name__ == "__main__":
    asyncio.run(example_create(sys.argv[1]))
