"""管道数据模型定义模块.

提供管道相关的数据模型，包括：
- PipelineConfig: 管道配置
- Summary: 运行摘要（只由结果聚合器写入）
- FailureSample: 失败原因样本
- 聚合器收件箱中的不可变消息
"""

import os
from dataclasses import dataclass, field

from ..bulk.models import BulkActionResult
from ..exceptions import ElasticPipeError
from ..source.exceptions import RecordParseError
from .exceptions import PipelineConfigError

DEFAULT_BATCH_SIZE = 5000
DEFAULT_QUEUE_SLACK = 2
DEFAULT_MAX_FAILURE_SAMPLES = 10


def default_concurrency() -> int:
    """根据可用 CPU 数推导默认并发数."""
    return os.cpu_count() or 1


@dataclass
class PipelineConfig:
    """管道配置模型.

    Attributes:
        batch_size: 每批次记录数，默认 5000，必须 >= 1
        concurrency: 并发 worker 数，默认 None（取 CPU 数），必须 >= 1
        queue_slack: 交接队列在 concurrency 之外的额外容量，默认 2，必须 >= 0
        max_failure_samples: 保留的不同失败原因数上限，默认 10

    Raises:
        PipelineConfigError: 当参数不合法时抛出

    Examples:
        >>> config = PipelineConfig(batch_size=1000, concurrency=4)
    """

    batch_size: int = DEFAULT_BATCH_SIZE
    concurrency: int | None = None
    queue_slack: int = DEFAULT_QUEUE_SLACK
    max_failure_samples: int = DEFAULT_MAX_FAILURE_SAMPLES

    def __post_init__(self) -> None:
        """校验管道配置参数合法性."""
        if self.batch_size < 1:
            raise PipelineConfigError(f"batch_size 必须 >= 1，当前值: {self.batch_size}")
        if self.concurrency is not None and self.concurrency < 1:
            raise PipelineConfigError(
                f"concurrency 必须 >= 1，当前值: {self.concurrency}"
            )
        if self.queue_slack < 0:
            raise PipelineConfigError(
                f"queue_slack 必须 >= 0，当前值: {self.queue_slack}"
            )
        if self.max_failure_samples < 0:
            raise PipelineConfigError(
                f"max_failure_samples 必须 >= 0，当前值: {self.max_failure_samples}"
            )


@dataclass
class FailureSample:
    """某一类失败原因的样本.

    Attributes:
        reason: 失败类型
        count: 出现次数
        example: 第一次出现时的详细描述
    """

    reason: str
    count: int = 0
    example: str | None = None


@dataclass
class Summary:
    """运行摘要数据类.

    在管道启动时创建，只由结果聚合器修改，在结束时读取一次用于输出。

    Attributes:
        records_read: 读取的记录数（包含解析失败的记录）
        batches_produced: 生成的批次数
        batches_sent: 完成发送的批次数
        succeeded: 写入成功数
        failed: 写入失败数
        parse_errors: 解析失败（被跳过）的记录数
        failure_samples: 按失败类型聚合的有限样本
        unsampled_failures: 超出样本上限而未归类的失败数
        fatal_error: 导致管道中止的致命错误
        elapsed: 总耗时（秒）
    """

    records_read: int = 0
    batches_produced: int = 0
    batches_sent: int = 0
    succeeded: int = 0
    failed: int = 0
    parse_errors: int = 0
    failure_samples: dict[str, FailureSample] = field(default_factory=dict)
    unsampled_failures: int = 0
    fatal_error: ElasticPipeError | None = None
    elapsed: float = 0.0

    def is_success(self) -> bool:
        """判断管道是否完整运行（记录级失败不算致命）."""
        return self.fatal_error is None

    def render(self, target_name: str) -> str:
        """渲染摘要文本.

        Args:
            target_name: 写入目标的展示名称

        Returns:
            首行为总计，其后每行一个失败样本
        """
        lines = [
            f"Piped {self.succeeded:,} of {self.records_read:,} docs to {target_name} "
            f"in {self.elapsed:.3f} seconds "
            f"({self.failed:,} failed, {self.parse_errors:,} parse errors)"
        ]
        for sample in self.failure_samples.values():
            line = f"  ({sample.count:,}) {sample.reason}"
            if sample.example:
                line += f" - {sample.example}"
            lines.append(line)
        if self.unsampled_failures:
            lines.append(f"  ... and {self.unsampled_failures:,} more failures")
        return "\n".join(lines)


# ============================================================
# 聚合器消息
# ============================================================


@dataclass(frozen=True)
class BatchProduced:
    """批次已生成."""

    sequence: int
    size: int


@dataclass(frozen=True)
class ParseFailure:
    """记录解析失败."""

    error: RecordParseError


@dataclass(frozen=True)
class BatchCompleted:
    """批次发送完成，附带逐条结果."""

    sequence: int
    results: tuple[BulkActionResult, ...]


@dataclass(frozen=True)
class FatalFailure:
    """致命错误，批次序号在错误与具体批次无关时为 None."""

    error: ElasticPipeError
    sequence: int | None = None
