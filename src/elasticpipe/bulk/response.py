"""bulk 响应解析模块.

将 Elasticsearch ``_bulk`` 接口的原始响应解析为逐条记录的写入结果。
响应格式::

    {
        "took": 30,
        "errors": true,
        "items": [
            {"create": {"_index": "logs", "_id": "1", "status": 201}},
            {"create": {"_index": "logs", "_id": "2", "status": 409,
                        "error": {"type": "version_conflict_engine_exception",
                                  "reason": "[2]: version conflict, document already exists"}}}
        ]
    }

顶层结构错误（缺少 items、条目数量与提交数量不一致、非 2xx 状态）无法归因到单条记录，
抛出 MalformedBulkResponseError；单个条目的错误只影响该条记录。
"""

import logging
from collections import Counter
from collections.abc import Mapping
from typing import Any

from .exceptions import MalformedBulkResponseError
from .models import BulkAction, BulkActionResult, BulkErrorItem

logger = logging.getLogger(__name__)


def _parse_error_item(action: str, item: Mapping[str, Any]) -> BulkErrorItem:
    """从失败的响应条目中提取错误详情."""
    error_info = item.get("error") or {}
    if not isinstance(error_info, Mapping):
        # 旧版本集群会直接返回字符串形式的错误
        error_info = {"type": "unknown", "reason": str(error_info)}

    caused_by = None
    if "caused_by" in error_info:
        caused_by_info = error_info["caused_by"]
        if not isinstance(caused_by_info, Mapping):
            caused_by_info = {"type": "unknown", "reason": str(caused_by_info)}
        caused_by = f"{caused_by_info.get('type', '')}: {caused_by_info.get('reason', '')}"

    try:
        operation = BulkAction(action)
    except ValueError:
        operation = None

    return BulkErrorItem(
        index_name=item.get("_index", ""),
        doc_id=item.get("_id"),
        error_type=error_info.get("type", "unknown"),
        error_reason=error_info.get("reason", "unknown error"),
        status=item.get("status", 0),
        caused_by=caused_by,
        operation=operation,
    )


def parse_bulk_item(entry: Any) -> BulkActionResult:
    """解析单个响应条目.

    Args:
        entry: 形如 ``{"create": {...}}`` 的响应条目

    Returns:
        该条记录的写入结果

    Raises:
        MalformedBulkResponseError: 条目结构不合法时抛出
    """
    if not isinstance(entry, Mapping) or len(entry) != 1:
        raise MalformedBulkResponseError(f"无法识别的 bulk 响应条目: {entry!r}")

    action, item = next(iter(entry.items()))
    if not isinstance(item, Mapping) or not isinstance(item.get("status"), int):
        raise MalformedBulkResponseError(f"bulk 响应条目缺少 status: {entry!r}")

    if 200 <= item["status"] < 300 and "error" not in item:
        return BulkActionResult.success()

    detail = _parse_error_item(action, item)
    return BulkActionResult.failure(reason=detail.error_type, detail=detail)


def parse_bulk_response(
    body: Any,
    expected_items: int,
    status: int = 200,
) -> list[BulkActionResult]:
    """解析 bulk 响应为逐条结果列表.

    Args:
        body: 响应体（已反序列化的 JSON）
        expected_items: 提交的记录数
        status: 顶层 HTTP 状态码

    Returns:
        与提交顺序一致的结果列表，长度等于 expected_items

    Raises:
        MalformedBulkResponseError: 顶层状态非 2xx 或响应结构不合法时抛出

    Example:
        >>> body = {"errors": False, "items": [{"create": {"_id": "1", "status": 201}}]}
        >>> [r.is_success() for r in parse_bulk_response(body, 1)]
        [True]
    """
    if not 200 <= status < 300:
        raise MalformedBulkResponseError(f"bulk 请求返回非 2xx 状态: {status}")

    if not isinstance(body, Mapping):
        raise MalformedBulkResponseError(
            f"bulk 响应不是 JSON 对象: {type(body).__name__}"
        )

    if "error" in body and "items" not in body:
        error = body["error"]
        cause = error.get("type", "unknown") if isinstance(error, Mapping) else error
        raise MalformedBulkResponseError(f"bulk 请求失败: {cause}")

    items = body.get("items")
    if not isinstance(items, list):
        raise MalformedBulkResponseError("bulk 响应缺少 items 数组")

    if len(items) != expected_items:
        raise MalformedBulkResponseError(
            f"bulk 响应条目数 {len(items)} 与提交数 {expected_items} 不一致"
        )

    return [parse_bulk_item(entry) for entry in items]


def error_counts(results: list[BulkActionResult]) -> str:
    """按错误类型统计失败数，返回形如 ``(3) <logs> version_conflict...`` 的摘要."""
    counter: Counter[str] = Counter(
        f"<{result.detail.index_name}> {result.reason}"
        if result.detail
        else str(result.reason)
        for result in results
        if not result.is_success()
    )
    return ", ".join(f"({count}) {message}" for message, count in counter.items())
