"""Static file server: serves files and directory listings from a web root."""

import signal
import sys

from fileserver.bootstrap.config import ServerConfig, build_config, parse_cli_args
from fileserver.bootstrap.logging_setup import configure_logging
from fileserver.domain.connection_log import ComponentLogger
from fileserver.lifecycle.state import ServerLifecycle
from fileserver.transport.accept_loop import run_server

SERVER_LOGGER = ComponentLogger("server")


def install_signal_handlers(lifecycle: ServerLifecycle) -> None:
    """Drain instead of dying on SIGTERM/SIGINT."""

    def shutdown_handler(signum: int, _frame) -> None:
        SERVER_LOGGER.info(
            "Received shutdown signal",
            extra={"event": "shutdown_signal", "signal": signum},
        )
        lifecycle.begin_draining()

    signal.signal(signal.SIGTERM, shutdown_handler)
    signal.signal(signal.SIGINT, shutdown_handler)


def main(argv: list[str] | None = None) -> None:
    """Start the server and spawn one worker thread per connection."""
    args = parse_cli_args(sys.argv[1:] if argv is None else argv)
    configure_logging(
        args.log_level, args.log_destination, use_json=args.log_format == "json"
    )

    config: ServerConfig = build_config(args)
    lifecycle = ServerLifecycle()
    install_signal_handlers(lifecycle)

    SERVER_LOGGER.info(
        "Starting file server",
        extra={
            "event": "server_starting",
            "host": args.host,
            "port": args.port,
            "directory": config.web_root,
            "log_destination": args.log_destination,
            "log_level": args.log_level,
            "line_ending": args.line_ending,
            "socket_timeout": config.socket_timeout,
            "shutdown_grace_seconds": config.shutdown_grace_seconds,
        },
    )
    try:
        run_server(args, config, lifecycle)
    except OSError as error:
        SERVER_LOGGER.critical(
            "Could not open listening socket",
            extra={
                "event": "bind_failed",
                "host": args.host,
                "port": args.port,
                "error": str(error),
            },
        )
        sys.exit(1)


if __name__ == "__main__":
    main()
