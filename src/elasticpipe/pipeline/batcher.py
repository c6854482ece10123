"""批次生成模块."""

import itertools
import logging
import threading
from collections.abc import Iterable, Iterator

from ..bulk.models import Batch
from ..typing import Record
from .exceptions import PipelineConfigError
from .models import DEFAULT_BATCH_SIZE

logger = logging.getLogger(__name__)


def iter_batches(
    records: Iterable[Record],
    batch_size: int = DEFAULT_BATCH_SIZE,
    cancel_event: threading.Event | None = None,
) -> Iterator[Batch]:
    """将记录序列切分为固定容量的批次.

    批次按记录产生顺序生成，序号从 0 开始递增。任何时刻只缓冲一个未完成的批次，
    记录源耗尽时输出不足 batch_size 的最后一个批次。开始读取下一个批次之前检查
    cancel_event，已取消则停止生成。

    Args:
        records: 记录序列
        batch_size: 每批次最多记录数，必须 >= 1
        cancel_event: 取消信号（可选）

    Returns:
        批次迭代器

    Raises:
        PipelineConfigError: batch_size 小于 1 时抛出

    Example:
        >>> batches = iter_batches(({"n": i} for i in range(12000)), batch_size=5000)
        >>> [len(batch) for batch in batches]
        [5000, 5000, 2000]
    """
    if batch_size < 1:
        raise PipelineConfigError(f"batch_size 必须 >= 1，当前值: {batch_size}")
    return _generate(iter(records), batch_size, cancel_event)


def _generate(
    records: Iterator[Record],
    batch_size: int,
    cancel_event: threading.Event | None,
) -> Iterator[Batch]:
    for sequence in itertools.count():
        if cancel_event is not None and cancel_event.is_set():
            logger.info(f"管道已取消，停止生成批次（已生成 {sequence} 个）")
            return
        chunk = tuple(itertools.islice(records, batch_size))
        if not chunk:
            return
        yield Batch(sequence=sequence, records=chunk)
