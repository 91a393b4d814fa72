"""Listening socket creation."""

import argparse
import socket

ACCEPT_POLL_SECONDS = 0.5
LISTEN_BACKLOG = 10


def create_server_socket(args: argparse.Namespace) -> socket.socket:
    """Bind the listening socket; accept() wakes periodically to notice shutdown."""
    server_socket = socket.create_server(
        (args.host, args.port),
        backlog=LISTEN_BACKLOG,
        reuse_port=hasattr(socket, "SO_REUSEPORT"),
    )
    server_socket.settimeout(ACCEPT_POLL_SECONDS)
    return server_socket
