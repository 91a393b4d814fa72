"""Server configuration and CLI argument parsing."""

import argparse
import os
from dataclasses import dataclass, field

from fileserver.domain.mime_table import MimeTable


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value is not None else default


def _env_str(name: str, default: str) -> str:
    value = os.getenv(name)
    return value if value else default


DEFAULT_WEBROOT = _env_str("FILE_SERVER_WEBROOT", os.getenv("PWD") or ".")
DEFAULT_HOST = _env_str("FILE_SERVER_HOST", "0.0.0.0")
DEFAULT_PORT = _env_int("FILE_SERVER_PORT", 4221)
DEFAULT_SOCKET_TIMEOUT = _env_int("FILE_SERVER_SOCKET_TIMEOUT", 0)
DEFAULT_SHUTDOWN_GRACE_SECONDS = _env_int("FILE_SERVER_SHUTDOWN_GRACE_SECONDS", 30)
DEFAULT_MAX_REQUEST_BYTES = _env_int("FILE_SERVER_MAX_REQUEST_BYTES", 64 * 1024)
DEFAULT_LINE_ENDING = _env_str("FILE_SERVER_LINE_ENDING", "lf").lower()
DEFAULT_CHUNK_SIZE = _env_int("FILE_SERVER_CHUNK_SIZE", 1024)

LINE_ENDINGS = {"lf": "\n", "crlf": "\r\n"}
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("json", "text")


@dataclass(frozen=True)
class ServerConfig:
    """Immutable per-process settings handed to every connection worker."""

    web_root: str
    socket_timeout: int = DEFAULT_SOCKET_TIMEOUT
    shutdown_grace_seconds: int = DEFAULT_SHUTDOWN_GRACE_SECONDS
    max_request_bytes: int = DEFAULT_MAX_REQUEST_BYTES
    line_ending: str = LINE_ENDINGS["lf"]
    chunk_size: int = DEFAULT_CHUNK_SIZE
    mime_table: MimeTable = field(default_factory=MimeTable)


def build_config(args: argparse.Namespace) -> ServerConfig:
    """Freeze parsed CLI arguments into a ServerConfig."""
    return ServerConfig(
        web_root=args.directory,
        socket_timeout=args.socket_timeout,
        shutdown_grace_seconds=args.shutdown_grace_seconds,
        max_request_bytes=args.max_request_bytes,
        line_ending=LINE_ENDINGS[args.line_ending],
        chunk_size=args.chunk_size,
    )


def _positive_int(value: str) -> int:
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value}")
    return number


def parse_cli_args(argv: list[str]) -> argparse.Namespace:
    """Return parsed CLI arguments for server configuration."""
    parser = argparse.ArgumentParser(description="Static file server")
    parser.add_argument(
        "port_arg",
        nargs="?",
        type=int,
        metavar="port",
        help="Port to listen on (same as --port)",
    )
    parser.add_argument(
        "--directory",
        default=DEFAULT_WEBROOT,
        help="Web root the requested paths are appended to",
    )
    parser.add_argument("--host", default=DEFAULT_HOST)
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    default_log_level = os.getenv("FILE_SERVER_LOG_LEVEL", "INFO").upper()
    default_destination = os.getenv("FILE_SERVER_LOG_DESTINATION", "stdout")
    default_log_format = os.getenv("FILE_SERVER_LOG_FORMAT", "json").lower()
    parser.add_argument(
        "--log-level",
        default=default_log_level,
        choices=LOG_LEVELS,
        type=str.upper,
    )
    parser.add_argument(
        "--log-destination",
        default=default_destination,
        help="stdout or a file path",
    )
    parser.add_argument(
        "--log-format",
        default=default_log_format,
        choices=LOG_FORMATS,
        type=str.lower,
    )
    parser.add_argument(
        "--socket-timeout",
        type=int,
        default=DEFAULT_SOCKET_TIMEOUT,
        help="Socket timeout in seconds for request processing (0 waits forever)",
    )
    parser.add_argument(
        "--shutdown-grace-seconds",
        type=int,
        default=DEFAULT_SHUTDOWN_GRACE_SECONDS,
        help="Grace period in seconds for graceful shutdown",
    )
    parser.add_argument(
        "--max-request-bytes",
        type=_positive_int,
        default=DEFAULT_MAX_REQUEST_BYTES,
        help="Connections sending more than this before the blank line are dropped",
    )
    parser.add_argument(
        "--line-ending",
        default=DEFAULT_LINE_ENDING,
        choices=sorted(LINE_ENDINGS),
        type=str.lower,
        help="Terminator for response lines (lf matches the legacy wire format)",
    )
    parser.add_argument(
        "--chunk-size",
        type=_positive_int,
        default=DEFAULT_CHUNK_SIZE,
        help="Read size used when streaming files",
    )
    args = parser.parse_args(argv)
    # Env-seeded defaults bypass argparse's choices check.
    for option, value, choices in (
        ("--log-level", args.log_level, LOG_LEVELS),
        ("--log-format", args.log_format, LOG_FORMATS),
        ("--line-ending", args.line_ending, tuple(LINE_ENDINGS)),
    ):
        if value not in choices:
            parser.error(
                f"argument {option}: invalid choice: {value!r} "
                f"(choose from {', '.join(choices)})"
            )
    if args.port_arg is not None:
        args.port = args.port_arg
    del args.port_arg
    return args
