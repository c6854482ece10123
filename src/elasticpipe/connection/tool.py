"""ES 客户端工厂工具模块.

提供 ESClientFactory 类，根据集群配置与传输层配置创建 Elasticsearch 客户端，
负责认证信息的附加、证书校验开关以及客户端的生命周期管理。

使用示例:
    from elasticpipe.connection import ESClientFactory, ClusterConfig

    with ESClientFactory(ClusterConfig(hosts=["http://localhost:9200"])) as factory:
        client = factory.get_client()
"""

from __future__ import annotations

import logging
from typing import Any

from elasticsearch import Elasticsearch

from .models import AuthMode, ClusterConfig, ConnectionConfig

logger = logging.getLogger(__name__)


class ESClientFactory:
    """Elasticsearch 客户端工厂.

    惰性创建并缓存客户端。Elasticsearch 客户端是线程安全的，
    同一个实例会被所有 worker 共享。

    Attributes:
        _cluster: 集群配置
        _connection_config: 传输层配置
        _client: 已缓存的客户端

    Examples:
        >>> factory = ESClientFactory(ClusterConfig(hosts=["http://localhost:9200"]))
        >>> client = factory.get_client()
    """

    def __init__(
        self,
        cluster: ClusterConfig,
        connection_config: ConnectionConfig | None = None,
    ) -> None:
        """初始化客户端工厂.

        Args:
            cluster: 集群配置
            connection_config: 传输层配置，默认使用 ConnectionConfig 的默认值
        """
        self._cluster = cluster
        self._connection_config = connection_config or ConnectionConfig()
        self._client: Elasticsearch | None = None

    def _create_client(self) -> Elasticsearch:
        """根据配置创建 Elasticsearch 客户端实例.

        根据认证方式（API Key / Basic Auth / 无认证）和 SSL 配置构建客户端。

        Returns:
            Elasticsearch 客户端实例
        """
        cluster = self._cluster
        kwargs: dict[str, Any] = {
            "hosts": cluster.hosts,
            "max_retries": self._connection_config.max_retries,
            "retry_on_timeout": self._connection_config.retry_on_timeout,
            "request_timeout": self._connection_config.request_timeout,
            "http_compress": self._connection_config.http_compress,
        }

        auth_mode = cluster.auth_mode
        if auth_mode == AuthMode.API_KEY:
            kwargs["api_key"] = cluster.api_key
        elif auth_mode == AuthMode.BASIC:
            kwargs["basic_auth"] = (cluster.username, cluster.password)
        logger.debug(f"客户端认证方式: {auth_mode.value}")

        # SSL/TLS 配置
        if cluster.ca_certs:
            kwargs["ca_certs"] = cluster.ca_certs
        kwargs["verify_certs"] = cluster.verify_certs
        if not cluster.verify_certs:
            kwargs["ssl_show_warn"] = False
            logger.warning(
                f"已关闭证书校验，不会验证 {', '.join(cluster.hosts)} 的证书链"
            )

        return Elasticsearch(**kwargs)

    def get_client(self) -> Elasticsearch:
        """获取客户端，首次调用时创建.

        Returns:
            Elasticsearch 客户端实例
        """
        if self._client is None:
            self._client = self._create_client()
        return self._client

    # ============================================================
    # 生命周期管理
    # ============================================================

    def __enter__(self) -> ESClientFactory:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """上下文管理器退出，自动关闭客户端."""
        self.close()

    def close(self) -> None:
        """关闭已创建的客户端连接.

        关闭后可重新调用 get_client() 创建新的客户端。
        """
        if self._client is not None:
            self._client.close()
            self._client = None
