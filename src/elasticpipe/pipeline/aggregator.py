"""结果聚合模块."""

import logging
import queue
import threading
import time
from collections.abc import Sequence

from ..bulk.models import Batch, BulkActionResult
from ..exceptions import ElasticPipeError
from ..source.exceptions import RecordParseError
from .models import (
    DEFAULT_MAX_FAILURE_SAMPLES,
    BatchCompleted,
    BatchProduced,
    FailureSample,
    FatalFailure,
    ParseFailure,
    Summary,
)

logger = logging.getLogger(__name__)

_CLOSE = object()


class ResultAggregator:
    """结果聚合器.

    运行摘要的唯一所有者。任意线程都可以通过 submit_* 方法投递不可变消息，
    消息进入线程安全的收件箱；只有 run() 所在的单个消费循环读写 Summary，
    因此累加过程无需加锁。

    Args:
        cancel_event: 管道级取消信号，收到致命错误时被设置
        max_failure_samples: 保留的不同失败原因数上限

    Example:
        >>> aggregator = ResultAggregator()
        >>> aggregator.submit_outcome(batch, results)
        >>> aggregator.close()
        >>> summary = aggregator.run()
    """

    def __init__(
        self,
        cancel_event: threading.Event | None = None,
        max_failure_samples: int = DEFAULT_MAX_FAILURE_SAMPLES,
    ) -> None:
        self.cancel_event = cancel_event or threading.Event()
        self.max_failure_samples = max_failure_samples
        self._inbox: queue.Queue = queue.Queue()
        self._summary = Summary()
        self._start_time = time.monotonic()

    # ============================================================
    # 投递（线程安全）
    # ============================================================

    def submit_batch_produced(self, batch: Batch) -> None:
        self._inbox.put(BatchProduced(sequence=batch.sequence, size=len(batch)))

    def submit_parse_error(self, error: RecordParseError) -> None:
        self._inbox.put(ParseFailure(error=error))

    def submit_outcome(self, batch: Batch, results: Sequence[BulkActionResult]) -> None:
        self._inbox.put(BatchCompleted(sequence=batch.sequence, results=tuple(results)))

    def submit_fatal(self, error: ElasticPipeError, batch: Batch | None = None) -> None:
        """投递致命错误并立即发出取消信号."""
        self.cancel_event.set()
        sequence = batch.sequence if batch is not None else None
        self._inbox.put(FatalFailure(error=error, sequence=sequence))

    def close(self) -> None:
        """通知消费循环不会再有新消息."""
        self._inbox.put(_CLOSE)

    # ============================================================
    # 消费（单线程）
    # ============================================================

    def run(self) -> Summary:
        """消费收件箱直到 close()，返回最终摘要."""
        while True:
            message = self._inbox.get()
            if message is _CLOSE:
                break
            self._apply(message)
        self._summary.elapsed = time.monotonic() - self._start_time
        return self._summary

    def _apply(self, message: object) -> None:
        summary = self._summary
        if isinstance(message, BatchProduced):
            summary.batches_produced += 1
            summary.records_read += message.size
        elif isinstance(message, ParseFailure):
            summary.records_read += 1
            summary.parse_errors += 1
        elif isinstance(message, BatchCompleted):
            summary.batches_sent += 1
            for result in message.results:
                if result.is_success():
                    summary.succeeded += 1
                else:
                    summary.failed += 1
                    self._sample_failure(result)
        elif isinstance(message, FatalFailure):
            self.cancel_event.set()
            if summary.fatal_error is None:
                summary.fatal_error = message.error
                logger.error(f"批次 {message.sequence} 致命错误，取消管道: {message.error}")
            else:
                logger.warning(f"取消过程中的其他致命错误: {message.error}")
        else:
            raise TypeError(f"未知的聚合消息: {message!r}")

    def _sample_failure(self, result: BulkActionResult) -> None:
        reason = result.reason or "unknown"
        samples = self._summary.failure_samples
        sample = samples.get(reason)
        if sample is None:
            if len(samples) >= self.max_failure_samples:
                self._summary.unsampled_failures += 1
                return
            example = result.detail.describe() if result.detail else None
            sample = samples[reason] = FailureSample(reason=reason, example=example)
        sample.count += 1
