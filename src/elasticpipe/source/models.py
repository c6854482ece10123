"""记录源数据模型定义模块."""

from enum import Enum


class InputFormat(Enum):
    """输入编码格式枚举.

    Attributes:
        NDJSON: 换行分隔的 JSON，每个非空行是一个对象
        CSV: 表格格式，首行为字段名
    """

    NDJSON = "ndjson"
    CSV = "csv"

    @classmethod
    def from_extension(cls, extension: str) -> "InputFormat | None":
        """根据文件扩展名推断输入格式，无法识别时返回 None."""
        return _EXTENSIONS.get(extension.lower().lstrip("."))


_EXTENSIONS = {
    "ndjson": InputFormat.NDJSON,
    "jsonl": InputFormat.NDJSON,
    "json": InputFormat.NDJSON,
    "csv": InputFormat.CSV,
}
