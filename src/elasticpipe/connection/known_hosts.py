"""主机注册表模块.

从 YAML 文件读取「简称 -> 集群」映射，使输出位置可以写成 ``<简称>:<索引>``。
文件位置取环境变量 ``ELASTICPIPE_HOSTS``，默认 ``~/.elasticpipe/hosts.yml``::

    prod:
      auth: ApiKey
      url: https://es.example.com:9200
      apikey: bXktYXBpLWtleQ==
    local:
      auth: Basic
      url: https://localhost:9200
      username: elastic
      password: changeme
      insecure: true
    dev:
      auth: None
      url: http://localhost:9200
"""

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from .exceptions import KnownHostError, UnknownHostError
from .models import AuthMode, KnownHost

logger = logging.getLogger(__name__)

HOSTS_ENV = "ELASTICPIPE_HOSTS"


def get_hosts_path() -> Path:
    """获取 hosts.yml 路径，优先使用环境变量."""
    path = os.environ.get(HOSTS_ENV)
    if path:
        return Path(path)
    return Path.home() / ".elasticpipe" / "hosts.yml"


def _parse_entry(name: str, entry: Any) -> KnownHost:
    if not isinstance(entry, Mapping):
        raise KnownHostError(f"主机 '{name}' 的配置必须是映射")
    url = entry.get("url")
    if not url:
        raise KnownHostError(f"主机 '{name}' 缺少 url")

    try:
        auth = AuthMode(entry.get("auth") or AuthMode.NONE.value)
    except ValueError as e:
        raise KnownHostError(
            f"主机 '{name}' 的 auth 必须是 ApiKey、Basic 或 None，当前值: {entry.get('auth')}"
        ) from e

    host = KnownHost(
        name=name,
        url=str(url),
        auth=auth,
        apikey=entry.get("apikey"),
        username=entry.get("username"),
        password=entry.get("password"),
        insecure=bool(entry.get("insecure", False)),
    )
    if auth == AuthMode.API_KEY and not host.apikey:
        raise KnownHostError(f"主机 '{name}' 使用 ApiKey 认证但缺少 apikey")
    if auth == AuthMode.BASIC and not (host.username and host.password):
        raise KnownHostError(f"主机 '{name}' 使用 Basic 认证但缺少 username/password")
    return host


def load_known_hosts(path: Path | None = None) -> dict[str, KnownHost]:
    """加载主机注册表.

    Args:
        path: hosts.yml 路径，默认由 get_hosts_path() 决定

    Returns:
        简称到主机条目的字典。文件不存在时返回空字典

    Raises:
        KnownHostError: 文件无法读取或内容不合法时抛出
    """
    path = path or get_hosts_path()
    if not path.is_file():
        logger.info(f"主机注册表不存在: {path}")
        return {}

    logger.debug(f"解析主机注册表: {path}")
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise KnownHostError(f"读取主机注册表 {path} 失败: {str(e)}") from e

    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise KnownHostError(f"主机注册表 {path} 的顶层必须是映射")

    hosts = {str(name): _parse_entry(str(name), entry) for name, entry in data.items()}
    logger.debug(f"已知主机: {', '.join(hosts)}")
    return hosts


def get_known_host(name: str, path: Path | None = None) -> KnownHost:
    """按简称查找主机.

    Raises:
        UnknownHostError: 简称不存在时抛出
    """
    hosts = load_known_hosts(path)
    try:
        return hosts[name]
    except KeyError:
        raise UnknownHostError(f"没有名为 '{name}' 的已知主机") from None
