"""连接配置数据模型定义模块.

提供连接相关的数据模型，包括：
- AuthMode: 认证方式枚举
- ClusterConfig: 集群配置（地址、认证、证书校验）
- ConnectionConfig: 传输层配置（超时、重试、压缩）
- KnownHost: 主机注册表条目
"""

from dataclasses import dataclass, field
from enum import Enum

from .exceptions import ConnectionConfigError


class AuthMode(Enum):
    """认证方式枚举.

    每次运行只有一种认证方式生效。

    Attributes:
        NONE: 无认证
        API_KEY: 通过 ``Authorization: ApiKey`` 请求头认证
        BASIC: 用户名密码 Basic Auth
    """

    NONE = "None"
    API_KEY = "ApiKey"
    BASIC = "Basic"


@dataclass
class ClusterConfig:
    """集群配置模型.

    定义 ES 集群的连接信息，包括地址和认证方式。

    Attributes:
        hosts: ES 节点地址列表（必需，不可为空）
        username: Basic Auth 用户名
        password: Basic Auth 密码
        api_key: API Key 认证
        ca_certs: CA 证书文件路径
        verify_certs: 是否验证 SSL 证书，默认 True。关闭后不做任何证书链校验

    Raises:
        ConnectionConfigError: 当 hosts 为空或认证参数组合不合法时抛出

    Examples:
        >>> config = ClusterConfig(
        ...     hosts=["https://localhost:9200"],
        ...     username="elastic",
        ...     password="changeme",
        ... )
        >>> config.auth_mode
        <AuthMode.BASIC: 'Basic'>
    """

    hosts: list[str] = field(default_factory=list)
    username: str | None = None
    password: str | None = None
    api_key: str | None = None
    ca_certs: str | None = None
    verify_certs: bool = True

    def __post_init__(self) -> None:
        """校验集群配置参数合法性."""
        if not self.hosts:
            raise ConnectionConfigError("hosts 不能为空，请提供至少一个 ES 节点地址")
        if self.api_key and (self.username or self.password):
            raise ConnectionConfigError("api_key 不能与 username/password 同时使用")
        if bool(self.username) != bool(self.password):
            raise ConnectionConfigError("username 与 password 必须同时提供")

    @property
    def auth_mode(self) -> AuthMode:
        """当前生效的认证方式."""
        if self.api_key:
            return AuthMode.API_KEY
        if self.username and self.password:
            return AuthMode.BASIC
        return AuthMode.NONE


@dataclass
class ConnectionConfig:
    """传输层配置模型.

    Attributes:
        max_retries: 传输层错误（连接失败、超时、429/502/503/504）的最大重试次数，默认 0。
            协议层拒绝（400/401/403）永远不会重试
        retry_on_timeout: 超时是否重试，默认 False
        request_timeout: 请求超时时间（秒），默认 30，必须 >= 0
        http_compress: 是否 gzip 压缩请求体，默认 True

    Raises:
        ConnectionConfigError: 当参数不合法时抛出

    Examples:
        >>> config = ConnectionConfig(max_retries=2, request_timeout=60)
    """

    max_retries: int = 0
    retry_on_timeout: bool = False
    request_timeout: float = 30
    http_compress: bool = True

    def __post_init__(self) -> None:
        """校验传输层配置参数合法性."""
        if self.max_retries < 0:
            raise ConnectionConfigError(
                f"max_retries 必须 >= 0，当前值: {self.max_retries}"
            )
        if self.request_timeout < 0:
            raise ConnectionConfigError(
                f"request_timeout 必须 >= 0，当前值: {self.request_timeout}"
            )


@dataclass
class KnownHost:
    """主机注册表条目.

    Attributes:
        name: 简称
        url: 集群基础地址
        auth: 认证方式
        apikey: API Key（auth 为 ApiKey 时必需）
        username: 用户名（auth 为 Basic 时必需）
        password: 密码（auth 为 Basic 时必需）
        insecure: 是否跳过证书校验
    """

    name: str
    url: str
    auth: AuthMode = AuthMode.NONE
    apikey: str | None = None
    username: str | None = None
    password: str | None = None
    insecure: bool = False

    def to_cluster_config(self) -> ClusterConfig:
        """转换为集群配置，只携带 auth 指定的那一种凭据."""
        if self.auth == AuthMode.API_KEY:
            return ClusterConfig(
                hosts=[self.url], api_key=self.apikey, verify_certs=not self.insecure
            )
        if self.auth == AuthMode.BASIC:
            return ClusterConfig(
                hosts=[self.url],
                username=self.username,
                password=self.password,
                verify_certs=not self.insecure,
            )
        return ClusterConfig(hosts=[self.url], verify_certs=not self.insecure)

    def __str__(self) -> str:
        if self.auth == AuthMode.BASIC:
            return f"Basic auth: {self.username}@ {self.url}"
        if self.auth == AuthMode.API_KEY:
            return f"ApiKey auth: {self.url}"
        return f"No auth: {self.url}"
