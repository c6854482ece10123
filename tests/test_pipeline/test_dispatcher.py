"""批次调度器单元测试."""

import threading
import time

import pytest

from elasticpipe.bulk import Batch, BulkActionResult, Sink, SinkConnectionError
from elasticpipe.pipeline import Dispatcher, PipelineConfigError, ResultAggregator
from elasticpipe.source import SourceReadError


def _wait_for(condition, timeout: float = 5.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if condition():
            return True
        time.sleep(0.01)
    return condition()


def _batches(count: int, produced: list | None = None):
    for i in range(count):
        if produced is not None:
            produced.append(i)
        yield Batch(i, ({"n": i},))


class RecordingSink(Sink):
    """全部成功并记录收到的批次序号."""

    name = "recording"

    def __init__(self) -> None:
        self.sequences: list[int] = []
        self._lock = threading.Lock()

    def send(self, batch):
        with self._lock:
            self.sequences.append(batch.sequence)
        return [BulkActionResult.success()] * len(batch)


class BlockingSink(Sink):
    """send 阻塞直到 release 被设置."""

    name = "blocking"

    def __init__(self) -> None:
        self.release = threading.Event()
        self.in_flight = 0
        self.max_in_flight = 0
        self.completed = 0
        self._lock = threading.Lock()

    def send(self, batch):
        with self._lock:
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        self.release.wait()
        with self._lock:
            self.in_flight -= 1
            self.completed += 1
        return [BulkActionResult.success()] * len(batch)


class FailingSink(Sink):
    """第 fail_on 次调用时抛出致命错误."""

    name = "failing"

    def __init__(self, fail_on: int) -> None:
        self.fail_on = fail_on
        self.calls = 0
        self._lock = threading.Lock()

    def send(self, batch):
        with self._lock:
            self.calls += 1
            call = self.calls
        if call == self.fail_on:
            raise SinkConnectionError("connection reset by peer")
        return [BulkActionResult.success()] * len(batch)


class TestDispatcherInit:
    """Dispatcher 初始化测试."""

    def test_default_concurrency_from_cpu(self, monkeypatch) -> None:
        """测试默认并发数取 CPU 数."""
        monkeypatch.setattr("os.cpu_count", lambda: 6)
        dispatcher = Dispatcher(RecordingSink())
        assert dispatcher.concurrency == 6
        assert dispatcher.queue_size == 8

    def test_invalid_concurrency(self) -> None:
        """测试 concurrency 小于 1 抛出异常."""
        with pytest.raises(PipelineConfigError):
            Dispatcher(RecordingSink(), concurrency=0)

    def test_invalid_queue_slack(self) -> None:
        """测试 queue_slack 小于 0 抛出异常."""
        with pytest.raises(PipelineConfigError):
            Dispatcher(RecordingSink(), concurrency=1, queue_slack=-1)


class TestDispatcherRun:
    """Dispatcher.run 测试."""

    def test_every_batch_delivered_exactly_once(self) -> None:
        """测试每个批次只交给一个 worker."""
        sink = RecordingSink()
        aggregator = ResultAggregator()
        Dispatcher(sink, concurrency=4).run(_batches(200), aggregator)
        aggregator.close()

        summary = aggregator.run()

        assert sorted(sink.sequences) == list(range(200))
        assert summary.batches_sent == 200
        assert summary.succeeded == 200

    def test_at_most_k_in_flight_and_backpressure(self) -> None:
        """测试最多 K 个批次同时发送，且队列满后生产停滞."""
        concurrency, slack = 3, 1
        sink = BlockingSink()
        produced: list[int] = []
        aggregator = ResultAggregator()
        dispatcher = Dispatcher(sink, concurrency=concurrency, queue_slack=slack)
        thread = threading.Thread(
            target=dispatcher.run, args=(_batches(20, produced), aggregator)
        )
        thread.start()
        try:
            assert _wait_for(lambda: sink.in_flight == concurrency)
            # K 个在发送中 + 队列满 + 生产者手上阻塞的 1 个
            bound = concurrency + dispatcher.queue_size + 1
            assert _wait_for(lambda: len(produced) == bound)
            time.sleep(0.3)
            assert len(produced) == bound
            assert sink.in_flight == concurrency
        finally:
            sink.release.set()
            thread.join(timeout=10)

        assert not thread.is_alive()
        assert sink.max_in_flight == concurrency
        assert dispatcher.in_flight_high_water == concurrency
        assert sink.completed == 20

    def test_sink_error_cancels_remaining_batches(self) -> None:
        """测试 SinkError 后剩余批次不再发送."""
        sink = FailingSink(fail_on=3)
        aggregator = ResultAggregator()
        dispatcher = Dispatcher(sink, concurrency=1)

        dispatcher.run(_batches(10), aggregator)
        aggregator.close()
        summary = aggregator.run()

        assert sink.calls == 3
        assert summary.batches_sent == 2
        assert isinstance(summary.fatal_error, SinkConnectionError)
        assert dispatcher.cancel_event.is_set()

    def test_source_error_is_fatal(self) -> None:
        """测试读取失败作为致命错误交给聚合器."""

        def broken_batches():
            yield Batch(0, ({"n": 0},))
            raise SourceReadError("disk unplugged")

        aggregator = ResultAggregator()
        Dispatcher(RecordingSink(), concurrency=2).run(broken_batches(), aggregator)
        aggregator.close()
        summary = aggregator.run()

        assert isinstance(summary.fatal_error, SourceReadError)

    def test_unexpected_error_propagates(self) -> None:
        """测试非预期异常取消管道并向上抛出."""

        class BuggySink(RecordingSink):
            def send(self, batch):
                raise KeyError("bug")

        aggregator = ResultAggregator()
        dispatcher = Dispatcher(BuggySink(), concurrency=2)

        with pytest.raises(KeyError):
            dispatcher.run(_batches(10), aggregator)
        assert dispatcher.cancel_event.is_set()
