"""记录源异常定义模块."""

from ..exceptions import ElasticPipeError


class SourceError(ElasticPipeError):
    """记录源基础异常类."""

    pass


class RecordParseError(SourceError):
    """记录级解析异常.

    某一行（或 CSV 行）无法解析为结构化对象时产生。该异常不会从记录源中抛出，
    而是交给错误回调计数，对应记录被跳过，读取继续。

    Attributes:
        line_number: 出错的行号（从 1 开始，CSV 包含表头行）
        reason: 错误原因
    """

    def __init__(self, line_number: int, reason: str) -> None:
        self.line_number = line_number
        self.reason = reason
        super().__init__(f"第 {line_number} 行解析失败: {reason}")


class SourceReadError(SourceError):
    """读取输入流失败异常（致命）."""

    pass
