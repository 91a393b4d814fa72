"""Worker thread logic for handling individual client connections."""

import logging
import socket
import threading
import time
from typing import Optional

from fileserver.bootstrap.config import ServerConfig
from fileserver.domain.connection_log import ComponentLogger, connection_scope
from fileserver.domain.http_types import ParseError, RequestFrame, RequestTooLarge
from fileserver.domain.resolution import resolve
from fileserver.lifecycle.state import ServerLifecycle
from fileserver.pipeline.generator import generate_response
from fileserver.pipeline.io import receive_request, write_response
from fileserver.pipeline.parser import parse_request
from fileserver.transport.context import WorkerContext

WORKER_LOGGER = ComponentLogger("transport.worker")


def _read_request(
    client_socket: socket.socket, config: ServerConfig, client_addr_str: str
) -> Optional[RequestFrame]:
    """Read and parse one request; None means close without answering."""
    try:
        buffer = receive_request(client_socket, config.max_request_bytes)
    except RequestTooLarge:
        WORKER_LOGGER.warning(
            "Request exceeded size limit",
            extra={
                "event": "request_too_large",
                "client": client_addr_str,
                "limit": config.max_request_bytes,
            },
        )
        return None

    if not buffer:
        if WORKER_LOGGER.logger.isEnabledFor(logging.DEBUG):
            WORKER_LOGGER.debug(
                "Client disconnected before sending a request",
                extra={"event": "client_disconnected", "client": client_addr_str},
            )
        return None

    try:
        return parse_request(buffer)
    except ParseError:
        WORKER_LOGGER.warning(
            "Malformed request received",
            extra={
                "event": "malformed_request",
                "client": client_addr_str,
                "bytes_in": len(buffer),
            },
        )
        return None


def _log_request(request: RequestFrame, client_addr_str: str) -> None:
    WORKER_LOGGER.info(
        "Request received",
        extra={
            "event": "request_received",
            "client": client_addr_str,
            "method": request.method,
            "route": request.resource,
            "protocol": request.protocol,
        },
    )
    if WORKER_LOGGER.logger.isEnabledFor(logging.DEBUG):
        WORKER_LOGGER.debug(
            "Request headers",
            extra={
                "event": "request_headers",
                "headers": [[entry.field, entry.value] for entry in request.headers],
                "bytes_in": len(request.body),
            },
        )


def _process_request(
    request: RequestFrame,
    client_socket: socket.socket,
    config: ServerConfig,
    client_addr_str: str,
) -> None:
    started = time.monotonic()
    resolution = resolve(config.web_root, request.resource, config.mime_table)
    response = generate_response(request, resolution)
    bytes_out = write_response(
        client_socket,
        response,
        resolution,
        line_ending=config.line_ending,
        chunk_size=config.chunk_size,
    )
    WORKER_LOGGER.info(
        "Response sent",
        extra={
            "event": "response_sent",
            "client": client_addr_str,
            "kind": type(resolution).__name__,
            "status_code": response.status_code,
            "bytes_out": bytes_out,
            "duration_ms": round((time.monotonic() - started) * 1000, 3),
        },
    )


def _serve_connection(
    client_socket: socket.socket, config: ServerConfig, client_addr_str: str
) -> None:
    timeout = config.socket_timeout
    client_socket.settimeout(timeout if timeout > 0 else None)
    WORKER_LOGGER.debug(
        "Request processing started",
        extra={"event": "request_started", "client": client_addr_str},
    )
    request = _read_request(client_socket, config, client_addr_str)
    if request is None:
        return
    _log_request(request, client_addr_str)
    _process_request(request, client_socket, config, client_addr_str)
    WORKER_LOGGER.debug(
        "Request processing complete",
        extra={"event": "request_complete", "client": client_addr_str},
    )


def _close_connection(
    client_socket: socket.socket,
    client_addr_str: str,
    lifecycle: Optional[ServerLifecycle],
) -> None:
    try:
        client_socket.shutdown(socket.SHUT_WR)
    except OSError:
        pass
    client_socket.close()
    WORKER_LOGGER.debug(
        "Socket closed", extra={"event": "socket_closed", "client": client_addr_str}
    )
    if lifecycle is not None:
        lifecycle.release_worker(threading.current_thread())


def handle_client(
    client_socket: socket.socket,
    client_address: tuple[str, int],
    context: WorkerContext,
) -> None:
    """Serve exactly one request on ``client_socket``, then close it.

    Failures end this connection only; nothing is raised to the accept loop.
    """
    client_addr_str = f"{client_address[0]}:{client_address[1]}"
    with connection_scope():
        try:
            _serve_connection(client_socket, context.config, client_addr_str)
        except (ConnectionError, TimeoutError, OSError) as error:
            WORKER_LOGGER.error(
                "Error handling client connection",
                extra={
                    "event": "connection_error",
                    "client": client_addr_str,
                    "error_type": type(error).__name__,
                    "error": str(error),
                },
            )
        except Exception as error:  # pylint: disable=broad-except
            WORKER_LOGGER.error(
                "Unexpected error in worker",
                extra={
                    "event": "worker_error",
                    "client": client_addr_str,
                    "error_type": type(error).__name__,
                    "error": str(error),
                },
                exc_info=True,
            )
        finally:
            _close_connection(client_socket, client_addr_str, context.lifecycle)
