"""写入端模块.

写入端接收一个批次并返回逐条写入结果，只提供一个操作：

    send(batch) -> list[BulkActionResult]

无法归因到单条记录的失败抛出 SinkError。提供两种实现：
- ElasticsearchSink：使用 create 动作向 ``_bulk`` 接口发送一次请求
- StreamSink：将每条记录重新序列化为一行 JSON 写入文件或标准流
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any, BinaryIO

from elasticsearch import Elasticsearch
from elasticsearch.exceptions import (
    ApiError,
    AuthenticationException,
    AuthorizationException,
    SerializationError,
    TransportError,
)

from ..typing import ActionLine, BulkBody, Record
from .exceptions import (
    MalformedBulkResponseError,
    SinkAuthenticationError,
    SinkConnectionError,
    SinkError,
    SinkWriteError,
)
from .models import Batch, BulkAction, BulkActionResult
from .response import error_counts, parse_bulk_response

logger = logging.getLogger(__name__)


class Sink:
    """写入端抽象基类.

    实现必须是线程安全的：同一个写入端实例会被调度器的多个 worker 同时调用。

    Attributes:
        name: 用于日志和摘要展示的目标名称
    """

    name: str = "sink"

    def send(self, batch: Batch) -> list[BulkActionResult]:
        """写入一个批次.

        Args:
            batch: 待写入批次

        Returns:
            与批次记录一一对应的写入结果

        Raises:
            SinkError: 传输或协议层面的致命失败
        """
        raise NotImplementedError

    def close(self) -> None:
        """释放写入端持有的资源."""

    def __enter__(self) -> Sink:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __str__(self) -> str:
        return self.name


class ElasticsearchSink(Sink):
    """Elasticsearch bulk 写入端.

    每个批次序列化为「动作行 + 文档行」交替的请求体，只使用 create 动作，
    已存在的文档ID会得到版本冲突失败而不是被覆盖。

    Args:
        client: Elasticsearch 客户端实例（线程安全，可在 worker 间共享）
        index: 目标索引名称
        id_field: 用作文档ID的字段名，不指定或记录中缺失时由 ES 自动生成ID
        name: 展示名称，默认为 "<host>:<index>"
        owns_client: close() 时是否关闭客户端
    """

    def __init__(
        self,
        client: Elasticsearch,
        index: str,
        id_field: str | None = None,
        name: str | None = None,
        owns_client: bool = False,
    ) -> None:
        if not index:
            raise ValueError("index 不能为空")
        self.client = client
        self.index = index
        self.id_field = id_field
        self.name = name or index
        self.owns_client = owns_client

    def _prepare_bulk_action(self, record: Record) -> ActionLine:
        """准备单条记录的 create 动作元数据."""
        metadata: dict[str, Any] = {"_index": self.index}
        if self.id_field is not None:
            doc_id = record.get(self.id_field)
            if doc_id is not None and doc_id != "":
                metadata["_id"] = str(doc_id)
        return {BulkAction.CREATE.value: metadata}

    def _prepare_bulk_body(self, batch: Batch) -> BulkBody:
        """将批次序列化为动作行与文档行交替的请求体."""
        operations: BulkBody = []
        for record in batch.records:
            operations.append(self._prepare_bulk_action(record))
            operations.append(record)
        return operations

    def send(self, batch: Batch) -> list[BulkActionResult]:
        if not batch.records:
            return []

        operations = self._prepare_bulk_body(batch)
        logger.debug(f"批次 {batch.sequence}: 发送 {len(batch)} 条文档到 {self.name}")

        try:
            response = self.client.bulk(operations=operations, index=self.index)
        except (AuthenticationException, AuthorizationException) as e:
            raise SinkAuthenticationError(
                f"{self.name} 拒绝了认证信息 ({e.meta.status}): {e.message}"
            ) from e
        except ApiError as e:
            raise SinkError(
                f"bulk 请求被 {self.name} 拒绝 ({e.meta.status}): {e.message}"
            ) from e
        except SerializationError as e:
            raise MalformedBulkResponseError(f"无法解析 bulk 响应: {str(e)}") from e
        except TransportError as e:
            raise SinkConnectionError(f"连接 {self.name} 失败: {str(e)}") from e

        results = parse_bulk_response(
            response.body, expected_items=len(batch), status=response.meta.status
        )

        failed = sum(1 for result in results if not result.is_success())
        if failed > 0:
            logger.warning(
                f"批次 {batch.sequence}: 成功 {len(results) - failed}, 失败 {failed} "
                f"[{error_counts(results)}]"
            )
        else:
            logger.info(f"批次 {batch.sequence}: 全部成功 ({len(results)})")
        return results

    def close(self) -> None:
        if self.owns_client:
            self.client.close()


class StreamSink(Sink):
    """文件 / 标准流写入端.

    每条记录重新序列化为一行 JSON 写出。写入失败意味着整个批次失败（SinkWriteError），
    否则每条记录都视为成功。多个 worker 的写入通过锁串行化，批次之间互不交错。

    Args:
        stream: 可写二进制流
        name: 展示名称
        close_stream: close() 时是否关闭底层流（标准输出不应关闭）
    """

    def __init__(
        self,
        stream: BinaryIO,
        name: str = "stdout",
        close_stream: bool = False,
    ) -> None:
        self.stream = stream
        self.name = name
        self.close_stream = close_stream
        self._lock = threading.Lock()

    @classmethod
    def open(cls, path: str | Path) -> StreamSink:
        """创建（或截断）文件并返回对应的写入端.

        Raises:
            OSError: 文件无法打开时抛出
        """
        path = Path(path)
        stream = path.open("wb")
        return cls(stream, name=str(path), close_stream=True)

    def send(self, batch: Batch) -> list[BulkActionResult]:
        payload = b"".join(
            json.dumps(record, ensure_ascii=False).encode("utf-8") + b"\n"
            for record in batch.records
        )
        try:
            with self._lock:
                self.stream.write(payload)
                self.stream.flush()
        except (OSError, ValueError) as e:
            raise SinkWriteError(f"写入 {self.name} 失败: {str(e)}") from e

        logger.debug(f"批次 {batch.sequence}: 写入 {len(batch)} 条记录到 {self.name}")
        return [BulkActionResult.success()] * len(batch)

    def close(self) -> None:
        with self._lock:
            if self.close_stream:
                self.stream.close()
            else:
                self.stream.flush()
