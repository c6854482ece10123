"""位置解析异常定义模块."""

from ..exceptions import ConfigurationError


class InputResolutionError(ConfigurationError):
    """输入位置无法解析或打开."""

    pass


class OutputResolutionError(ConfigurationError):
    """输出位置无法解析（未知 scheme、缺少目标索引、文件无法创建等）."""

    pass
