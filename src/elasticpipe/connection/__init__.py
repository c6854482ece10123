"""ES 连接模块 - 统一管理 Elasticsearch 客户端的创建、认证和生命周期.

主要组件:
    - ESClientFactory: 客户端工厂
    - ClusterConfig: 集群配置模型（地址、认证、证书校验）
    - ConnectionConfig: 传输层配置模型
    - AuthMode: 认证方式枚举
    - KnownHost / load_known_hosts: 主机注册表

使用示例:
    from elasticpipe.connection import ESClientFactory, ClusterConfig

    factory = ESClientFactory(ClusterConfig(hosts=["http://localhost:9200"]))
    client = factory.get_client()
"""

from .exceptions import ConnectionConfigError, KnownHostError, UnknownHostError
from .known_hosts import get_hosts_path, get_known_host, load_known_hosts
from .models import AuthMode, ClusterConfig, ConnectionConfig, KnownHost
from .tool import ESClientFactory

__all__ = [
    # 工厂
    "ESClientFactory",
    # 模型
    "ClusterConfig",
    "ConnectionConfig",
    "AuthMode",
    "KnownHost",
    # 主机注册表
    "load_known_hosts",
    "get_known_host",
    "get_hosts_path",
    # 异常
    "ConnectionConfigError",
    "KnownHostError",
    "UnknownHostError",
]
