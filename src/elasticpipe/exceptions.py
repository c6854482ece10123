"""elasticpipe 异常定义模块."""


class ElasticPipeError(Exception):
    """elasticpipe 基础异常类."""

    pass


class ConfigurationError(ElasticPipeError):
    """配置异常.

    在管道启动前检测到的错误（无效的位置字符串、缺少目标索引、未知主机等），
    运行会立即终止且不输出摘要。
    """

    pass
