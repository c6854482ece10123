"""位置解析模块.

将命令行中的输入 / 输出位置字符串解析为输入通道与写入端。

示例用法:
    >>> from elasticpipe.resolver import resolve_input, resolve_output
    >>> channel = resolve_input("docs.ndjson")
    >>> sink = resolve_output("https://localhost:9200/logs", api_key="...")
"""

from .exceptions import InputResolutionError, OutputResolutionError
from .models import InputChannel
from .tool import resolve_input, resolve_output

__all__ = [
    "InputChannel",
    "resolve_input",
    "resolve_output",
    "InputResolutionError",
    "OutputResolutionError",
]
