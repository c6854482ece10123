"""位置解析工具模块.

将不透明的位置字符串解析为具体的输入通道或写入端：

输入:
    - ``-``                      标准输入（NDJSON）
    - ``docs.ndjson``            相对或绝对路径，按扩展名决定格式
    - ``file:///data/users.csv`` file 协议 URI

输出:
    - ``-``                      标准输出
    - ``out.ndjson`` / ``file:///tmp/out.ndjson``  文件（创建或截断）
    - ``https://localhost:9200/logs``              Elasticsearch，路径第一段为目标索引
    - ``prod:logs``                                主机注册表中的简称 + 目标索引
"""

import logging
import sys
from pathlib import Path
from urllib.parse import SplitResult, unquote, urlsplit, urlunsplit

from ..bulk.sink import ElasticsearchSink, Sink, StreamSink
from ..connection.known_hosts import get_known_host
from ..connection.models import ClusterConfig, ConnectionConfig
from ..connection.tool import ESClientFactory
from ..source.models import InputFormat
from .exceptions import InputResolutionError, OutputResolutionError
from .models import STDIO_MARKER, InputChannel

logger = logging.getLogger(__name__)

HTTP_SCHEMES = ("http", "https")


def _split(location: str) -> SplitResult:
    parts = urlsplit(location)
    # Windows 盘符（C:\data\docs.ndjson）不是 scheme
    if len(parts.scheme) == 1:
        return parts._replace(scheme="", netloc="", path=location)
    return parts


def _file_path(parts: SplitResult, location: str) -> Path:
    if parts.scheme == "file":
        return Path(unquote(parts.path))
    return Path(location)


def resolve_input(
    location: str,
    input_format: InputFormat | None = None,
) -> InputChannel:
    """解析输入位置.

    Args:
        location: 输入位置字符串
        input_format: 强制指定的输入格式，默认按扩展名推断（标准输入默认为 NDJSON）

    Returns:
        已打开的输入通道

    Raises:
        InputResolutionError: 不支持的 scheme / 扩展名，或文件无法打开时抛出

    Example:
        >>> with resolve_input("file:///data/users.csv") as channel:
        ...     print(channel.input_format)
        InputFormat.CSV
    """
    if location == STDIO_MARKER:
        return InputChannel(
            stream=sys.stdin.buffer,
            input_format=input_format or InputFormat.NDJSON,
            name="stdin",
            close_stream=False,
        )

    parts = _split(location)
    if parts.scheme in HTTP_SCHEMES:
        raise InputResolutionError(f"暂不支持从 URL 读取输入: {location}")
    if parts.scheme not in ("", "file"):
        raise InputResolutionError(f"不支持的输入 scheme: {parts.scheme}")

    path = _file_path(parts, location)
    if input_format is None:
        input_format = InputFormat.from_extension(path.suffix)
        if input_format is None:
            raise InputResolutionError(
                f"不支持的文件扩展名 '{path.suffix}'，请使用 .ndjson、.jsonl、.json 或 .csv"
            )

    try:
        stream = path.open("rb")
    except OSError as e:
        raise InputResolutionError(f"无法打开输入文件 {path}: {str(e)}") from e

    logger.debug(f"输入: {path} ({input_format.value})")
    return InputChannel(stream=stream, input_format=input_format, name=str(path))


def _extract_index(parts: SplitResult, location: str) -> str:
    index = unquote(parts.path).strip("/").split("/")[0]
    if not index:
        raise OutputResolutionError(f"输出位置缺少目标索引名称: {location}")
    return index


def resolve_output(
    location: str,
    api_key: str | None = None,
    username: str | None = None,
    password: str | None = None,
    insecure: bool = False,
    ca_certs: str | None = None,
    connection: ConnectionConfig | None = None,
    id_field: str | None = None,
    hosts_path: Path | None = None,
) -> Sink:
    """解析输出位置为写入端.

    Args:
        location: 输出位置字符串
        api_key: API Key 认证（与 username/password 互斥）
        username: Basic Auth 用户名
        password: Basic Auth 密码
        insecure: 是否跳过证书校验
        ca_certs: 用于校验服务端证书的 CA 证书文件路径
        connection: 传输层配置
        id_field: 用作文档ID的字段名
        hosts_path: 主机注册表路径，默认由环境变量或 ~/.elasticpipe/hosts.yml 决定

    Returns:
        写入端

    Raises:
        ConfigurationError: 位置无法解析、认证参数不合法或简称未知时抛出
    """
    if location == STDIO_MARKER:
        return StreamSink(sys.stdout.buffer, name="stdout")

    parts = _split(location)

    if parts.scheme in HTTP_SCHEMES:
        index = _extract_index(parts, location)
        base_url = urlunsplit((parts.scheme, parts.netloc, "", "", ""))
        cluster = ClusterConfig(
            hosts=[base_url],
            username=username,
            password=password,
            api_key=api_key,
            ca_certs=ca_certs,
            verify_certs=not insecure,
        )
        name = f"{parts.hostname}:{index}"
    elif parts.scheme and parts.scheme != "file":
        host = get_known_host(parts.scheme, hosts_path)
        if api_key or username or password:
            logger.warning(f"已知主机 '{host.name}' 使用注册表中的凭据，忽略命令行认证参数")
        index = _extract_index(parts, location)
        cluster = host.to_cluster_config()
        if insecure:
            cluster.verify_certs = False
        if ca_certs:
            cluster.ca_certs = ca_certs
        name = f"{host.name}:{index}"
        logger.debug(f"已知主机 {host}")
    else:
        path = _file_path(parts, location)
        try:
            return StreamSink.open(path)
        except OSError as e:
            raise OutputResolutionError(f"无法创建输出文件 {path}: {str(e)}") from e

    client = ESClientFactory(cluster, connection).get_client()
    logger.debug(f"Elasticsearch 输出: {name}")
    return ElasticsearchSink(
        client, index, id_field=id_field, name=name, owns_client=True
    )
