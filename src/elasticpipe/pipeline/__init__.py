"""批量导入管道模块.

该模块提供并发批量导入管道，包括：
- 固定容量的批次生成
- 有界队列反压的并发调度
- 逐条结果聚合与有限的失败样本
- 致命错误时的协作式取消

示例用法:
    >>> from elasticpipe.pipeline import BulkPipeline, PipelineConfig
    >>> pipeline = BulkPipeline(sink, PipelineConfig(batch_size=5000, concurrency=4))
    >>> summary = pipeline.run(stream)
    >>> print(f"成功: {summary.succeeded}, 失败: {summary.failed}")
"""

from .aggregator import ResultAggregator
from .batcher import iter_batches
from .dispatcher import Dispatcher
from .exceptions import PipelineConfigError
from .models import (
    DEFAULT_BATCH_SIZE,
    FailureSample,
    PipelineConfig,
    Summary,
    default_concurrency,
)
from .tool import BulkPipeline

__all__ = [
    "BulkPipeline",
    "PipelineConfig",
    "Summary",
    "FailureSample",
    "ResultAggregator",
    "Dispatcher",
    "iter_batches",
    "default_concurrency",
    "DEFAULT_BATCH_SIZE",
    "PipelineConfigError",
]
