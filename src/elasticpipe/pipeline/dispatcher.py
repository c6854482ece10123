"""批次调度模块.

一个生产者线程从批次生成器拉取批次放入有界交接队列，固定数量的 worker 线程
从队列取出批次调用 Sink.send，并把结果交给结果聚合器。队列满时生产者阻塞，
写入端变慢会一路反压到记录源，内存占用不会无限增长。
"""

import logging
import queue
import threading
from collections.abc import Iterable
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait

from ..bulk.exceptions import SinkError
from ..bulk.models import Batch
from ..bulk.sink import Sink
from ..source.exceptions import SourceError
from .aggregator import ResultAggregator
from .exceptions import PipelineConfigError
from .models import DEFAULT_QUEUE_SLACK, default_concurrency

logger = logging.getLogger(__name__)


class Dispatcher:
    """批次调度器.

    每个批次只会交给一个 worker。worker 之间相互独立，批次 N+1 可能先于批次 N 完成。
    任意 worker 遇到 SinkError 后，取消信号被设置：生产者停止生成，其余 worker 完成
    手上正在进行的 send 调用后退出，队列中剩余的批次不再尝试。

    Args:
        sink: 写入端（所有 worker 共享，必须线程安全）
        concurrency: worker 数量，默认取 CPU 数
        queue_slack: 交接队列在 concurrency 之外的额外容量
        cancel_event: 管道级取消信号
        poll_interval: 阻塞等待时检查取消信号的间隔（秒）

    Raises:
        PipelineConfigError: 参数不合法时抛出
    """

    def __init__(
        self,
        sink: Sink,
        concurrency: int | None = None,
        queue_slack: int = DEFAULT_QUEUE_SLACK,
        cancel_event: threading.Event | None = None,
        poll_interval: float = 0.05,
    ) -> None:
        if concurrency is None:
            concurrency = default_concurrency()
        if concurrency < 1:
            raise PipelineConfigError(f"concurrency 必须 >= 1，当前值: {concurrency}")
        if queue_slack < 0:
            raise PipelineConfigError(f"queue_slack 必须 >= 0，当前值: {queue_slack}")
        self.sink = sink
        self.concurrency = concurrency
        self.queue_slack = queue_slack
        self.cancel_event = cancel_event or threading.Event()
        self.poll_interval = poll_interval
        self.in_flight_high_water = 0
        self._in_flight = 0
        self._lock = threading.Lock()

    @property
    def queue_size(self) -> int:
        """交接队列容量."""
        return self.concurrency + self.queue_slack

    def run(self, batches: Iterable[Batch], aggregator: ResultAggregator) -> None:
        """调度所有批次直到耗尽或被取消.

        Args:
            batches: 批次序列（在生产者线程中迭代）
            aggregator: 结果聚合器

        Raises:
            Exception: 生产者或 worker 中出现的非预期异常，先取消管道再向上抛出
        """
        handoff: queue.Queue = queue.Queue(maxsize=self.queue_size)
        exhausted = threading.Event()
        logger.debug(
            f"启动调度: concurrency={self.concurrency}, queue_size={self.queue_size}"
        )

        with ThreadPoolExecutor(
            max_workers=self.concurrency + 1,
            thread_name_prefix="elasticpipe",
        ) as pool:
            futures = [pool.submit(self._produce, batches, handoff, exhausted, aggregator)]
            futures += [
                pool.submit(self._work, handoff, exhausted, aggregator)
                for _ in range(self.concurrency)
            ]
            done, _ = wait(futures, return_when=FIRST_EXCEPTION)
            for future in done:
                if future.exception() is not None:
                    self.cancel_event.set()
                    raise future.exception()

    def _produce(
        self,
        batches: Iterable[Batch],
        handoff: queue.Queue,
        exhausted: threading.Event,
        aggregator: ResultAggregator,
    ) -> None:
        try:
            for batch in batches:
                aggregator.submit_batch_produced(batch)
                if not self._put(handoff, batch):
                    logger.info(f"管道已取消，批次 {batch.sequence} 未进入队列")
                    break
        except SourceError as e:
            logger.error(f"读取记录失败: {str(e)}")
            aggregator.submit_fatal(e)
        finally:
            exhausted.set()

    def _put(self, handoff: queue.Queue, batch: Batch) -> bool:
        """放入交接队列，队列满时阻塞（反压点）；被取消时返回 False."""
        while not self.cancel_event.is_set():
            try:
                handoff.put(batch, timeout=self.poll_interval)
                return True
            except queue.Full:
                continue
        return False

    def _work(
        self,
        handoff: queue.Queue,
        exhausted: threading.Event,
        aggregator: ResultAggregator,
    ) -> None:
        while not self.cancel_event.is_set():
            try:
                batch = handoff.get(timeout=self.poll_interval)
            except queue.Empty:
                # 先确认生产者已结束，再确认队列为空
                if exhausted.is_set() and handoff.empty():
                    return
                continue

            if self.cancel_event.is_set():
                logger.debug(f"管道已取消，放弃批次 {batch.sequence}")
                return

            self._enter()
            try:
                results = self.sink.send(batch)
            except SinkError as e:
                logger.error(f"批次 {batch.sequence} 发送失败: {str(e)}")
                aggregator.submit_fatal(e, batch)
                return
            finally:
                self._leave()
            aggregator.submit_outcome(batch, results)

    def _enter(self) -> None:
        with self._lock:
            self._in_flight += 1
            self.in_flight_high_water = max(self.in_flight_high_water, self._in_flight)

    def _leave(self) -> None:
        with self._lock:
            self._in_flight -= 1
