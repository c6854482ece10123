"""管道异常定义模块."""

from ..exceptions import ConfigurationError


class PipelineConfigError(ConfigurationError):
    """管道配置校验异常.

    当 batch_size、concurrency 等参数不合法时抛出。
    """

    pass
