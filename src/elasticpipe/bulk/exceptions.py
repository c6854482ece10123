"""批量写入异常定义模块."""

from ..exceptions import ElasticPipeError


class SinkError(ElasticPipeError):
    """写入端致命异常.

    传输或协议层面的失败，无法归因到某一条记录（连接失败、认证失败、
    响应格式错误、文件写入失败等）。任意 worker 遇到该异常都会触发整个管道的取消。
    """

    pass


class SinkConnectionError(SinkError):
    """连接被拒绝、重置或请求超时."""

    pass


class SinkAuthenticationError(SinkError):
    """认证或授权被目标集群拒绝."""

    pass


class MalformedBulkResponseError(SinkError):
    """bulk 响应结构不合法，或顶层状态不是 2xx."""

    pass


class SinkWriteError(SinkError):
    """写入文件或标准流失败."""

    pass
