"""批量写入模块.

该模块提供批次模型、bulk 响应解析以及两种写入端：
- ElasticsearchSink：使用 create 动作写入 Elasticsearch ``_bulk`` 接口
- StreamSink：逐行写出 JSON 到文件或标准输出

示例用法:
    >>> from elasticpipe.bulk import Batch, ElasticsearchSink
    >>> sink = ElasticsearchSink(es_client, "users", id_field="id")
    >>> results = sink.send(Batch(0, ({"id": "1", "name": "Alice"},)))
    >>> print(all(r.is_success() for r in results))
"""

from .exceptions import (
    MalformedBulkResponseError,
    SinkAuthenticationError,
    SinkConnectionError,
    SinkError,
    SinkWriteError,
)
from .models import (
    Batch,
    BulkAction,
    BulkActionResult,
    BulkErrorItem,
    BulkItemStatus,
)
from .response import error_counts, parse_bulk_item, parse_bulk_response
from .sink import ElasticsearchSink, Sink, StreamSink

__all__ = [
    "Batch",
    "BulkAction",
    "BulkActionResult",
    "BulkErrorItem",
    "BulkItemStatus",
    "Sink",
    "ElasticsearchSink",
    "StreamSink",
    "parse_bulk_response",
    "parse_bulk_item",
    "error_counts",
    "SinkError",
    "SinkConnectionError",
    "SinkAuthenticationError",
    "MalformedBulkResponseError",
    "SinkWriteError",
]
