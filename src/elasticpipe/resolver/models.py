"""位置解析数据模型定义模块."""

from dataclasses import dataclass
from typing import BinaryIO

from ..source.models import InputFormat

STDIO_MARKER = "-"


@dataclass
class InputChannel:
    """已解析的输入通道.

    Attributes:
        stream: 可读二进制流
        input_format: 输入编码格式
        name: 展示名称（文件路径或 stdin）
        close_stream: close() 时是否关闭底层流（标准输入不关闭）
    """

    stream: BinaryIO
    input_format: InputFormat
    name: str
    close_stream: bool = True

    def close(self) -> None:
        if self.close_stream:
            self.stream.close()

    def __enter__(self) -> "InputChannel":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __str__(self) -> str:
        return self.name
