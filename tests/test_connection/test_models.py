"""数据模型（AuthMode、ClusterConfig、ConnectionConfig、KnownHost）单元测试."""

import pytest

from elasticpipe.connection.exceptions import ConnectionConfigError
from elasticpipe.connection.models import (
    AuthMode,
    ClusterConfig,
    ConnectionConfig,
    KnownHost,
)


class TestClusterConfig:
    """ClusterConfig 数据模型测试."""

    # --- 正常创建 ---

    def test_create_with_hosts(self) -> None:
        """测试使用 hosts 创建配置."""
        config = ClusterConfig(hosts=["http://localhost:9200"])
        assert config.hosts == ["http://localhost:9200"]
        assert config.verify_certs is True
        assert config.auth_mode == AuthMode.NONE

    def test_create_with_basic_auth(self) -> None:
        """测试使用 Basic Auth 创建配置."""
        config = ClusterConfig(
            hosts=["http://localhost:9200"],
            username="elastic",
            password="changeme",
        )
        assert config.auth_mode == AuthMode.BASIC

    def test_create_with_api_key(self) -> None:
        """测试使用 API Key 创建配置."""
        config = ClusterConfig(hosts=["http://localhost:9200"], api_key="my_api_key")
        assert config.auth_mode == AuthMode.API_KEY

    # --- 校验失败 ---

    def test_empty_hosts_raises_error(self) -> None:
        """测试空 hosts 抛出异常."""
        with pytest.raises(ConnectionConfigError, match="hosts 不能为空"):
            ClusterConfig(hosts=[])

    def test_api_key_with_basic_auth_raises_error(self) -> None:
        """测试 API Key 与 Basic Auth 同时使用抛出异常."""
        with pytest.raises(ConnectionConfigError, match="api_key"):
            ClusterConfig(
                hosts=["http://localhost:9200"],
                api_key="key",
                username="elastic",
                password="changeme",
            )

    @pytest.mark.parametrize(
        "username, password",
        [("elastic", None), (None, "changeme")],
    )
    def test_incomplete_basic_auth_raises_error(self, username, password) -> None:
        """测试只提供用户名或密码抛出异常."""
        with pytest.raises(ConnectionConfigError, match="同时提供"):
            ClusterConfig(
                hosts=["http://localhost:9200"], username=username, password=password
            )


class TestConnectionConfig:
    """ConnectionConfig 数据模型测试."""

    def test_defaults(self) -> None:
        """测试默认值."""
        config = ConnectionConfig()
        assert config.max_retries == 0
        assert config.retry_on_timeout is False
        assert config.request_timeout == 30
        assert config.http_compress is True

    def test_negative_max_retries_raises_error(self) -> None:
        """测试负数重试次数抛出异常."""
        with pytest.raises(ConnectionConfigError, match="max_retries"):
            ConnectionConfig(max_retries=-1)

    def test_negative_timeout_raises_error(self) -> None:
        """测试负数超时抛出异常."""
        with pytest.raises(ConnectionConfigError, match="request_timeout"):
            ConnectionConfig(request_timeout=-1)

    def test_zero_timeout_allowed(self) -> None:
        """测试超时可以为 0."""
        assert ConnectionConfig(request_timeout=0).request_timeout == 0


class TestKnownHost:
    """KnownHost 数据模型测试."""

    def test_api_key_host(self) -> None:
        """测试 ApiKey 主机只携带 API Key."""
        host = KnownHost(
            name="prod",
            url="https://es.example.com:9200",
            auth=AuthMode.API_KEY,
            apikey="bXkta2V5",
            username="ignored",
        )
        config = host.to_cluster_config()
        assert config.api_key == "bXkta2V5"
        assert config.username is None
        assert config.auth_mode == AuthMode.API_KEY
        assert str(host) == "ApiKey auth: https://es.example.com:9200"

    def test_basic_host(self) -> None:
        """测试 Basic 主机."""
        host = KnownHost(
            name="local",
            url="https://localhost:9200",
            auth=AuthMode.BASIC,
            username="elastic",
            password="changeme",
            insecure=True,
        )
        config = host.to_cluster_config()
        assert config.auth_mode == AuthMode.BASIC
        assert config.verify_certs is False
        assert str(host) == "Basic auth: elastic@ https://localhost:9200"

    def test_no_auth_host(self) -> None:
        """测试无认证主机."""
        host = KnownHost(name="dev", url="http://localhost:9200")
        config = host.to_cluster_config()
        assert config.hosts == ["http://localhost:9200"]
        assert config.auth_mode == AuthMode.NONE
        assert str(host) == "No auth: http://localhost:9200"
