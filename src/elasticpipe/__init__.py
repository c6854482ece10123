"""elasticpipe - Elasticsearch 并发批量导入工具.

从文件或标准输入读取 NDJSON / CSV 记录，按固定容量分批，由固定数量的 worker
并发写入 Elasticsearch ``_bulk`` 接口（或原样写出到文件 / 标准输出），
并汇总逐条写入结果。

主要功能:
    - BulkPipeline: 批量导入管道（批次生成、有界反压调度、结果聚合）
    - ElasticsearchSink / StreamSink: 两种写入端
    - resolve_input / resolve_output: 位置字符串解析
    - ESClientFactory: Elasticsearch 客户端工厂

使用示例:
    from elasticpipe import BulkPipeline, PipelineConfig, resolve_input, resolve_output

    with resolve_input("docs.ndjson") as channel, resolve_output(
        "http://localhost:9200/logs"
    ) as sink:
        summary = BulkPipeline(sink, PipelineConfig(batch_size=5000)).run(
            channel.stream, channel.input_format
        )
    print(summary.render(sink.name))
"""

__version__ = "0.1.0"

# 导出写入端
from elasticpipe.bulk import (
    Batch,
    BulkActionResult,
    ElasticsearchSink,
    Sink,
    SinkError,
    StreamSink,
)

# 导出连接组件
from elasticpipe.connection import ClusterConfig, ConnectionConfig, ESClientFactory

# 导出异常
from elasticpipe.exceptions import ConfigurationError, ElasticPipeError

# 导出管道
from elasticpipe.pipeline import BulkPipeline, PipelineConfig, Summary

# 导出位置解析
from elasticpipe.resolver import resolve_input, resolve_output

# 导出记录源
from elasticpipe.source import InputFormat, open_record_source

__all__ = [
    # 版本
    "__version__",
    # 管道
    "BulkPipeline",
    "PipelineConfig",
    "Summary",
    # 记录源
    "InputFormat",
    "open_record_source",
    # 写入端
    "Sink",
    "ElasticsearchSink",
    "StreamSink",
    "Batch",
    "BulkActionResult",
    # 连接
    "ClusterConfig",
    "ConnectionConfig",
    "ESClientFactory",
    # 位置解析
    "resolve_input",
    "resolve_output",
    # 异常
    "ElasticPipeError",
    "ConfigurationError",
    "SinkError",
]
