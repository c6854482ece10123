"""记录源模块.

从文件或标准输入读取记录，支持 NDJSON 与 CSV 两种编码。

示例用法:
    >>> from elasticpipe.source import InputFormat, open_record_source
    >>> with open("users.csv", "rb") as f:
    ...     for record in open_record_source(f, InputFormat.CSV):
    ...         print(record["name"])
"""

from .exceptions import RecordParseError, SourceError, SourceReadError
from .models import InputFormat
from .tool import (
    CsvRecordSource,
    NdjsonRecordSource,
    RecordSource,
    open_record_source,
)

__all__ = [
    "InputFormat",
    "RecordSource",
    "NdjsonRecordSource",
    "CsvRecordSource",
    "open_record_source",
    "SourceError",
    "RecordParseError",
    "SourceReadError",
]
