"""Main connection acceptance loop."""

import argparse
import logging
import socket
import threading

from fileserver.bootstrap.config import ServerConfig
from fileserver.bootstrap.socket_factory import create_server_socket
from fileserver.domain.connection_log import ComponentLogger
from fileserver.lifecycle.state import ServerLifecycle
from fileserver.transport.context import WorkerContext
from fileserver.transport.worker import handle_client

ACCEPT_LOGGER = ComponentLogger("transport.accept")


def _dispatch_client(
    client_socket: socket.socket,
    client_address: tuple[str, int],
    handler_context: WorkerContext,
    lifecycle: ServerLifecycle,
) -> None:
    """Start a tracked thread serving the freshly accepted connection."""
    client_addr_str = f"{client_address[0]}:{client_address[1]}"
    if ACCEPT_LOGGER.logger.isEnabledFor(logging.DEBUG):
        ACCEPT_LOGGER.debug(
            "Client connection accepted",
            extra={"event": "client_accepted", "client": client_addr_str},
        )
    thread = threading.Thread(
        target=handle_client,
        args=(client_socket, client_address, handler_context),
        daemon=False,
    )
    lifecycle.track_worker(thread)
    try:
        thread.start()
    except RuntimeError as error:
        lifecycle.release_worker(thread)
        client_socket.close()
        ACCEPT_LOGGER.error(
            "Could not start connection thread",
            extra={
                "event": "dispatch_failed",
                "client": client_addr_str,
                "error": str(error),
            },
        )


def run_server(
    args: argparse.Namespace, config: ServerConfig, lifecycle: ServerLifecycle
) -> None:
    """Create listening socket and handle client lifecycle."""

    server_socket = create_server_socket(args)

    ACCEPT_LOGGER.info(
        "Server listening for connections",
        extra={
            "event": "server_listening",
            "host": args.host,
            "port": server_socket.getsockname()[1],
            "directory": config.web_root,
        },
    )

    handler_context = WorkerContext(config=config, lifecycle=lifecycle)

    try:
        while True:
            try:
                client_socket, client_address = server_socket.accept()
            except socket.timeout:
                if lifecycle.is_draining():
                    break
                continue
            except OSError as error:
                if lifecycle.is_draining():
                    break
                ACCEPT_LOGGER.error(
                    "Socket accept failed",
                    extra={"event": "accept_error", "error_type": type(error).__name__},
                )
                continue

            if lifecycle.is_draining():
                client_socket.close()
                continue

            _dispatch_client(client_socket, client_address, handler_context, lifecycle)
    finally:
        server_socket.close()
        ACCEPT_LOGGER.info(
            "Waiting for active connections to complete",
            extra={
                "event": "shutdown_waiting",
                "shutdown_grace_seconds": config.shutdown_grace_seconds,
            },
        )
        lifecycle.wait_for_workers(config.shutdown_grace_seconds)
        ACCEPT_LOGGER.info(
            "Server shutdown complete", extra={"event": "server_stopped"}
        )
