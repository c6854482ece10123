"""连接配置异常定义模块."""

from ..exceptions import ConfigurationError


class ConnectionConfigError(ConfigurationError):
    """连接配置校验异常.

    当连接配置参数不合法时抛出，例如 hosts 为空、同时配置了 API Key 与用户名密码、
    request_timeout 小于 0 等。
    """

    pass


class KnownHostError(ConfigurationError):
    """主机注册表异常.

    当 hosts.yml 无法读取或条目格式不合法时抛出。
    """

    pass


class UnknownHostError(ConfigurationError):
    """主机未找到异常.

    当请求的简称在主机注册表中不存在时抛出。
    """

    pass
