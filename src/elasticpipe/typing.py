"""elasticpipe 类型定义模块."""

from typing import Any, Dict, List

# 记录类型：解析后的 JSON 对象，或以表头为键的 CSV 行
Record = Dict[str, Any]

# bulk 请求中的动作元数据行
# 格式: {"create": {"_index": "logs", "_id": "1"}}
ActionLine = Dict[str, Dict[str, Any]]

# bulk 请求体：动作行与文档行交替排列
BulkBody = List[Dict[str, Any]]
