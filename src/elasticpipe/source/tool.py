"""记录源核心模块.

从已打开的二进制输入流中惰性地读取记录，支持两种编码：
- NDJSON：每个非空行解析为一个 JSON 对象
- CSV：首行定义字段名，后续每行转换为以字段名为键的对象

无法解析的行属于记录级错误：跳过并通过 on_error 回调上报，不会中断读取。
"""

import codecs
import csv
import json
import logging
from collections.abc import Callable, Iterator
from typing import BinaryIO

from ..typing import Record
from .exceptions import RecordParseError, SourceReadError
from .models import InputFormat

logger = logging.getLogger(__name__)

ParseErrorCallback = Callable[[RecordParseError], None]


class RecordSource:
    """记录源基类.

    Args:
        stream: 已打开的可读二进制流
        on_error: 记录级解析错误回调，默认只记录日志
    """

    input_format: InputFormat

    def __init__(
        self,
        stream: BinaryIO,
        on_error: ParseErrorCallback | None = None,
    ) -> None:
        self.stream = stream
        self.on_error = on_error
        self.parse_errors = 0

    def __iter__(self) -> Iterator[Record]:
        try:
            yield from self._read()
        except (OSError, csv.Error) as e:
            raise SourceReadError(f"读取输入流失败: {str(e)}") from e

    def _read(self) -> Iterator[Record]:
        raise NotImplementedError

    def _report(self, error: RecordParseError) -> None:
        self.parse_errors += 1
        logger.warning(f"跳过无法解析的记录: {error}")
        if self.on_error is not None:
            self.on_error(error)


class NdjsonRecordSource(RecordSource):
    """换行分隔 JSON 记录源.

    空行被静默忽略；不是合法 JSON 或不是 JSON 对象的行作为解析错误上报。
    """

    input_format = InputFormat.NDJSON

    def _read(self) -> Iterator[Record]:
        for line_number, raw in enumerate(self.stream, 1):
            if not raw.strip():
                continue
            try:
                value = json.loads(raw)
            except (ValueError, RecursionError) as e:
                # 嵌套过深的数组或对象会触发 RecursionError
                self._report(RecordParseError(line_number, str(e)))
                continue
            if not isinstance(value, dict):
                self._report(
                    RecordParseError(
                        line_number, f"期望 JSON 对象，实际为 {type(value).__name__}"
                    )
                )
                continue
            yield value


class CsvRecordSource(RecordSource):
    """CSV 记录源.

    首行为表头。列数与表头不一致的行作为解析错误上报，完全空白的行被忽略。
    所有字段值保持为字符串，不做类型推断。

    Args:
        stream: 已打开的可读二进制流
        on_error: 记录级解析错误回调
        delimiter: 字段分隔符，默认为逗号
        encoding: 文本编码，默认为 utf-8（兼容 BOM）
    """

    input_format = InputFormat.CSV

    def __init__(
        self,
        stream: BinaryIO,
        on_error: ParseErrorCallback | None = None,
        delimiter: str = ",",
        encoding: str = "utf-8-sig",
    ) -> None:
        super().__init__(stream, on_error)
        self.delimiter = delimiter
        self.encoding = encoding
        self._line_number = 0

    def _lines(self) -> Iterator[str]:
        # 逐个物理行解码，避免 TextIOWrapper 接管（并在回收时关闭）底层流。
        # 多字节字符不会跨越换行符，无法解码的行作为解析错误上报并跳过
        decoder = codecs.getincrementaldecoder(self.encoding)()
        for self._line_number, raw in enumerate(self.stream, 1):
            try:
                text = decoder.decode(raw, final=True)
            except UnicodeDecodeError as e:
                self._report(
                    RecordParseError(self._line_number, f"无法按 {self.encoding} 解码: {e.reason}")
                )
                continue
            yield text

    def _read(self) -> Iterator[Record]:
        reader = csv.reader(self._lines(), delimiter=self.delimiter)
        header: list[str] | None = None
        for row in reader:
            if not row or not any(cell.strip() for cell in row):
                continue
            if header is None:
                header = row
                logger.debug(f"CSV 表头: {header}")
                continue
            if len(row) != len(header):
                self._report(
                    RecordParseError(
                        self._line_number,
                        f"列数 {len(row)} 与表头列数 {len(header)} 不一致",
                    )
                )
                continue
            yield dict(zip(header, row))


def open_record_source(
    stream: BinaryIO,
    input_format: InputFormat,
    on_error: ParseErrorCallback | None = None,
) -> RecordSource:
    """根据输入格式创建记录源.

    Args:
        stream: 已打开的可读二进制流
        input_format: 输入编码格式
        on_error: 记录级解析错误回调

    Returns:
        对应格式的记录源

    Example:
        >>> with open("docs.ndjson", "rb") as f:
        ...     for record in open_record_source(f, InputFormat.NDJSON):
        ...         print(record)
    """
    if input_format == InputFormat.CSV:
        return CsvRecordSource(stream, on_error=on_error)
    return NdjsonRecordSource(stream, on_error=on_error)
