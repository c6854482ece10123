"""批量导入管道核心工具类."""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import BinaryIO

from ..bulk.sink import Sink
from ..source.models import InputFormat
from ..source.tool import open_record_source
from .aggregator import ResultAggregator
from .batcher import iter_batches
from .dispatcher import Dispatcher
from .models import PipelineConfig, Summary

logger = logging.getLogger(__name__)


class BulkPipeline:
    """批量导入管道.

    将记录源、批次生成、并发调度与结果聚合串联起来：

        记录源 -> 批次生成 -> 调度器（N 个 worker） -> 结果聚合器

    记录源与批次生成运行在单个生产者线程上，写入在 worker 线程上进行，
    运行摘要只由聚合器的消费循环修改。

    Args:
        sink: 写入端
        config: 管道配置，默认使用 PipelineConfig 的默认值

    Example:
        >>> pipeline = BulkPipeline(sink, PipelineConfig(batch_size=1000))
        >>> with open("docs.ndjson", "rb") as f:
        ...     summary = pipeline.run(f, InputFormat.NDJSON)
        >>> print(summary.render(sink.name))
    """

    def __init__(self, sink: Sink, config: PipelineConfig | None = None) -> None:
        self.sink = sink
        self.config = config or PipelineConfig()
        logger.info(
            f"初始化批量导入管道: batch_size={self.config.batch_size}, "
            f"concurrency={self.config.concurrency}, "
            f"queue_slack={self.config.queue_slack}"
        )

    def run(
        self,
        stream: BinaryIO,
        input_format: InputFormat = InputFormat.NDJSON,
    ) -> Summary:
        """运行管道直到输入耗尽或出现致命错误.

        Args:
            stream: 已打开的可读二进制流
            input_format: 输入编码格式

        Returns:
            运行摘要。出现致命错误时为部分摘要，fatal_error 记录该错误

        Raises:
            Exception: 调度过程中出现的非预期异常
        """
        cancel_event = threading.Event()
        aggregator = ResultAggregator(
            cancel_event=cancel_event,
            max_failure_samples=self.config.max_failure_samples,
        )
        source = open_record_source(
            stream, input_format, on_error=aggregator.submit_parse_error
        )
        batches = iter_batches(source, self.config.batch_size, cancel_event)
        dispatcher = Dispatcher(
            self.sink,
            concurrency=self.config.concurrency,
            queue_slack=self.config.queue_slack,
            cancel_event=cancel_event,
        )

        logger.info(f"开始导入 ({input_format.value}) -> {self.sink.name}")
        with ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="elasticpipe-aggregator"
        ) as pool:
            summary_future = pool.submit(aggregator.run)
            try:
                dispatcher.run(batches, aggregator)
            finally:
                aggregator.close()
            summary = summary_future.result()

        if summary.is_success():
            logger.info(
                f"导入完成: 批次 {summary.batches_sent}, 成功 {summary.succeeded}, "
                f"失败 {summary.failed}, 解析错误 {summary.parse_errors}, "
                f"耗时 {summary.elapsed:.3f}s"
            )
        else:
            logger.error(
                f"导入中止: 已完成批次 {summary.batches_sent}/{summary.batches_produced}, "
                f"错误: {summary.fatal_error}"
            )
        return summary
