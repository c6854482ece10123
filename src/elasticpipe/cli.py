"""命令行入口模块.

用法::

    elasticpipe INPUT OUTPUT [选项]

    elasticpipe docs.ndjson https://localhost:9200/logs -u elastic -p changeme -k
    elasticpipe users.csv prod:users --id-field id
    cat docs.ndjson | elasticpipe - out.ndjson

退出码: 0 成功（允许记录级失败）；1 管道致命错误；2 配置或参数错误。
日志级别由环境变量 ``LOG_LEVEL`` 控制，默认 WARNING。
"""

import argparse
import logging
import os
import sys
from collections.abc import Sequence

from . import __version__
from .connection.models import ConnectionConfig
from .exceptions import ConfigurationError
from .pipeline.models import DEFAULT_BATCH_SIZE, PipelineConfig
from .pipeline.tool import BulkPipeline
from .resolver.tool import resolve_input, resolve_output
from .source.models import InputFormat

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_CONFIG = 2

LOG_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"


def configure_logging(level_name: str | None = None) -> None:
    """根据 LOG_LEVEL 环境变量配置根日志记录器."""
    level_name = (level_name or os.environ.get("LOG_LEVEL") or "WARNING").upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)


def build_parser() -> argparse.ArgumentParser:
    """构建命令行参数解析器."""
    parser = argparse.ArgumentParser(
        prog="elasticpipe",
        description="Bulk-load NDJSON or CSV documents into Elasticsearch, a file or stdout.",
    )
    parser.add_argument("input", help="The input URI to read docs from ('-' for stdin)")
    parser.add_argument("output", help="The output URI to send docs to ('-' for stdout)")
    parser.add_argument(
        "-k", "--insecure", action="store_true", help="Ignore certificate validation"
    )
    parser.add_argument(
        "--ca-certs", help="CA certificate file used to verify the server certificate"
    )
    parser.add_argument(
        "-a", "--apikey", help="Apikey to authenticate via http header"
    )
    parser.add_argument("-u", "--username", help="Username for basic authentication")
    parser.add_argument("-p", "--password", help="Password for basic authentication")
    parser.add_argument(
        "-q", "--quiet", action="store_true", help="Quiet mode, don't print runtime summary"
    )
    parser.add_argument(
        "-z",
        "--uncompressed",
        action="store_true",
        help="Disable request body gzip compression",
    )
    parser.add_argument(
        "-b",
        "--batch-size",
        type=int,
        default=DEFAULT_BATCH_SIZE,
        help=f"Docs per bulk request (default: {DEFAULT_BATCH_SIZE})",
    )
    parser.add_argument(
        "-c",
        "--concurrency",
        type=int,
        default=None,
        help="Concurrent bulk requests (default: number of CPUs)",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=[fmt.value for fmt in InputFormat],
        default=None,
        help="Input format (default: from file extension, ndjson for stdin)",
    )
    parser.add_argument("--id-field", help="Document field to use as the _id")
    parser.add_argument(
        "--retries",
        type=int,
        default=0,
        help="Retries for transport-level errors (default: 0)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=30,
        help="Request timeout in seconds (default: 30)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """命令行主函数.

    Args:
        argv: 命令行参数，默认读取 sys.argv

    Returns:
        进程退出码
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.apikey and (args.username or args.password):
        parser.error("--apikey cannot be used with --username/--password")

    configure_logging()

    try:
        config = PipelineConfig(batch_size=args.batch_size, concurrency=args.concurrency)
        connection = ConnectionConfig(
            max_retries=args.retries,
            request_timeout=args.timeout,
            http_compress=not args.uncompressed,
        )
        input_format = InputFormat(args.format) if args.format else None
        channel = resolve_input(args.input, input_format)
        try:
            sink = resolve_output(
                args.output,
                api_key=args.apikey,
                username=args.username,
                password=args.password,
                insecure=args.insecure,
                ca_certs=args.ca_certs,
                connection=connection,
                id_field=args.id_field,
            )
        except ConfigurationError:
            channel.close()
            raise
    except ConfigurationError as e:
        print(f"elasticpipe: {e}", file=sys.stderr)
        return EXIT_CONFIG

    logger.debug(f"input: {channel}, output: {sink}")
    with channel, sink:
        summary = BulkPipeline(sink, config).run(channel.stream, channel.input_format)

    if not args.quiet:
        print(summary.render(sink.name), file=sys.stderr)
    if not summary.is_success():
        print(f"elasticpipe: {summary.fatal_error}", file=sys.stderr)
        return EXIT_FATAL
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
