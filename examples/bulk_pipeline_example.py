"""批量导入管道使用示例.

本文件展示了如何在代码中使用 BulkPipeline 将 NDJSON / CSV 数据导入 Elasticsearch。
"""

import io
import json

from elasticpipe.bulk import ElasticsearchSink, StreamSink
from elasticpipe.connection import ClusterConfig, ConnectionConfig, ESClientFactory
from elasticpipe.pipeline import BulkPipeline, PipelineConfig
from elasticpipe.source import InputFormat

# 创建客户端工厂
factory = ESClientFactory(
    ClusterConfig(
        hosts=["https://localhost:9200"],
        username="elastic",
        password="changeme",
        verify_certs=False,  # 本地自签名证书
    ),
    ConnectionConfig(max_retries=2, request_timeout=60),
)


# ==================== 示例1：导入 NDJSON ====================
def example_ndjson_to_elasticsearch():
    """将 NDJSON 文档导入 logs 索引."""
    documents = [
        {"id": "1", "level": "INFO", "message": "服务启动"},
        {"id": "2", "level": "WARNING", "message": "磁盘使用率 85%"},
        {"id": "3", "level": "ERROR", "message": "连接数据库失败"},
    ]
    payload = "".join(json.dumps(doc, ensure_ascii=False) + "\n" for doc in documents)

    sink = ElasticsearchSink(factory.get_client(), "logs", id_field="id")
    pipeline = BulkPipeline(sink, PipelineConfig(batch_size=1000, concurrency=4))
    summary = pipeline.run(io.BytesIO(payload.encode("utf-8")), InputFormat.NDJSON)

    # 重复运行时已存在的 ID 会以 version_conflict_engine_exception 失败
    print(summary.render(sink.name))
    return summary


# ==================== 示例2：导入 CSV ====================
def example_csv_to_elasticsearch():
    """将 CSV 文件导入 users 索引，首行为表头."""
    csv_data = "id,name,city\n1,张三,北京\n2,李四,上海\n3,王五\n"  # 第 4 行列数不一致

    sink = ElasticsearchSink(factory.get_client(), "users", id_field="id")
    summary = BulkPipeline(sink).run(io.BytesIO(csv_data.encode("utf-8")), InputFormat.CSV)

    print(f"成功: {summary.succeeded}, 失败: {summary.failed}, 解析错误: {summary.parse_errors}")
    return summary


# ==================== 示例3：转写到文件 ====================
def example_ndjson_to_file():
    """不连接集群，将记录转写为 NDJSON 文件."""
    payload = b'{"n": 1}\n{"n": 2}\n{"n": 3}\n'

    with StreamSink.open("out.ndjson") as sink:
        summary = BulkPipeline(sink, PipelineConfig(batch_size=2)).run(io.BytesIO(payload))

    print(summary.render(sink.name))
    return summary


def main():
    """运行所有示例."""
    print("=" * 50)
    print("批量导入管道示例")
    print("=" * 50)

    print("\n1. NDJSON 导入示例")
    print("-" * 50)
    example_ndjson_to_elasticsearch()

    print("\n2. CSV 导入示例")
    print("-" * 50)
    example_csv_to_elasticsearch()

    print("\n3. 转写文件示例")
    print("-" * 50)
    example_ndjson_to_file()

    factory.close()


if __name__ == "__main__":
    main()
