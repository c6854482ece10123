"""批量写入数据模型定义模块."""

from dataclasses import dataclass
from enum import Enum

from ..typing import Record


class BulkAction(Enum):
    """批量操作类型枚举.

    管道只使用 CREATE：文档已存在时失败而不是覆盖，从而在至少一次投递下保持无损。
    """

    CREATE = "create"


class BulkItemStatus(Enum):
    """单条记录的写入结果状态."""

    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class Batch:
    """批次数据类.

    批次创建后不可变，在生命周期内只属于一个 worker。

    Attributes:
        sequence: 批次序号，从 0 开始按生成顺序单调递增，仅用于报告
        records: 批次内的记录，保持读取顺序
    """

    sequence: int
    records: tuple[Record, ...]

    def __len__(self) -> int:
        return len(self.records)


@dataclass(frozen=True)
class BulkErrorItem:
    """批量操作错误项数据类.

    Attributes:
        index_name: 索引名称
        doc_id: 文档ID
        error_type: 错误类型
        error_reason: 错误原因
        status: HTTP状态码
        caused_by: 根本原因
        operation: 失败的操作类型
    """

    index_name: str
    doc_id: str | None
    error_type: str
    error_reason: str
    status: int
    caused_by: str | None = None
    operation: BulkAction | None = None

    def describe(self) -> str:
        """返回用于摘要展示的单行描述."""
        message = f"<{self.index_name}> {self.error_type}: {self.error_reason}"
        if self.caused_by:
            message += f" (caused by {self.caused_by})"
        return message


@dataclass(frozen=True)
class BulkActionResult:
    """单条记录的写入结果.

    由写入端产生，只被结果聚合器消费。

    Attributes:
        status: 成功或失败
        reason: 失败类型（如 version_conflict_engine_exception），成功时为 None
        detail: 文档级错误详情（可选）
    """

    status: BulkItemStatus
    reason: str | None = None
    detail: BulkErrorItem | None = None

    @classmethod
    def success(cls) -> "BulkActionResult":
        """创建成功结果."""
        return _SUCCESS

    @classmethod
    def failure(
        cls, reason: str, detail: BulkErrorItem | None = None
    ) -> "BulkActionResult":
        """创建失败结果."""
        return cls(status=BulkItemStatus.FAILURE, reason=reason, detail=detail)

    def is_success(self) -> bool:
        """判断该条记录是否写入成功."""
        return self.status == BulkItemStatus.SUCCESS


_SUCCESS = BulkActionResult(status=BulkItemStatus.SUCCESS)
