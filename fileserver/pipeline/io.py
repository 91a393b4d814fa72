"""HTTP Input/Output operations."""

import logging
import os
import socket
from typing import Iterable, Optional, Protocol

from fileserver.domain.connection_log import ComponentLogger
from fileserver.domain.http_types import WIRE_ENCODING, RequestTooLarge, ResponseFrame
from fileserver.domain.resolution import Directory, RegularFile, ResolutionResult

IO_LOGGER = ComponentLogger("pipeline.io")

# Either form of blank line closes the header block.
HEADER_TERMINATORS = (b"\n\n", b"\n\r\n")
RECV_SIZE = 4096

LISTING_OPEN = b"<html><body><h1>File Listing</h1><ul>"
LISTING_CLOSE = b"</ul></body></html>"


class ByteSink(Protocol):  # pylint: disable=too-few-public-methods
    """Anything that accepts whole byte strings, usually a connected socket."""

    def sendall(self, data: bytes) -> None: ...


def _header_block_length(buffer: bytes) -> Optional[int]:
    """Bytes up to and including the first blank line, or None if not yet seen."""
    ends = [
        buffer.find(terminator) + len(terminator)
        for terminator in HEADER_TERMINATORS
        if terminator in buffer
    ]
    return min(ends) if ends else None


def receive_request(client_socket: socket.socket, max_request_bytes: int) -> bytes:
    """Read until the header block is closed or the peer hangs up.

    Only the bytes before the blank line count against ``max_request_bytes``.
    Bytes that arrived with the header block are kept as the body; nothing
    further is read on behalf of Content-Length.
    """
    buffer = b""
    header_length = None
    while header_length is None:
        chunk = client_socket.recv(RECV_SIZE)
        if not chunk:
            break
        buffer += chunk
        header_length = _header_block_length(buffer)
        counted = len(buffer) if header_length is None else header_length
        if counted > max_request_bytes:
            raise RequestTooLarge(f"Request exceeded {max_request_bytes} bytes")
    if IO_LOGGER.logger.isEnabledFor(logging.DEBUG):
        IO_LOGGER.debug(
            "Request bytes received",
            extra={"event": "request_read", "bytes_in": len(buffer)},
        )
    return buffer


def serialize_head(response: ResponseFrame, line_ending: str = "\n") -> bytes:
    """Render the status line, headers and blank separator line."""
    lines = [response.status_line]
    lines.extend(f"{entry.field}: {entry.value}" for entry in response.headers)
    head = "".join(line + line_ending for line in lines) + line_ending
    return head.encode(WIRE_ENCODING)


def listing_href(display_prefix: bytes, name: bytes) -> bytes:
    """Link target for a listing entry, rooted at the web root."""
    if not display_prefix:
        return b"/" + name
    return b"/" + display_prefix + b"/" + name


def render_listing_item(display_prefix: str, name: str) -> bytes:
    # The prefix came off the wire, the name off the filesystem.
    raw_name = os.fsencode(name)
    href = listing_href(display_prefix.encode(WIRE_ENCODING), raw_name)
    return b'<a href="' + href + b'"><li>' + raw_name + b"</li></a>"


def render_listing(display_prefix: str, names: Iterable[str]) -> Iterable[bytes]:
    """Yield the listing page piece by piece, wrapper included."""
    yield LISTING_OPEN
    for name in names:
        yield render_listing_item(display_prefix, name)
    yield LISTING_CLOSE


def stream_file(path: str, chunk_size: int = 1024) -> Iterable[bytes]:
    """Yield file contents in fixed-size chunks for streaming responses."""
    with open(path, "rb") as file_handle:
        while True:
            chunk = file_handle.read(chunk_size)
            if not chunk:
                break
            yield chunk


def body_chunks(
    resolution: ResolutionResult, line_ending: str = "\n", chunk_size: int = 1024
) -> Iterable[bytes]:
    """Select the body for a resolution; missing resources get an empty listing."""
    if isinstance(resolution, RegularFile):
        yield from stream_file(resolution.absolute_path, chunk_size)
        yield line_ending.encode(WIRE_ENCODING)
    elif isinstance(resolution, Directory):
        yield from render_listing(resolution.display_prefix, resolution.entries())
    else:
        yield from render_listing("", ())


def write_response(
    sink: ByteSink,
    response: ResponseFrame,
    resolution: ResolutionResult,
    line_ending: str = "\n",
    chunk_size: int = 1024,
) -> int:
    """Serialize the response onto ``sink`` and return the number of bytes sent.

    Errors from the sink or the filesystem propagate; the caller owns closing.
    """
    head = serialize_head(response, line_ending)
    sink.sendall(head)
    bytes_out = len(head)
    for chunk in body_chunks(resolution, line_ending, chunk_size):
        sink.sendall(chunk)
        bytes_out += len(chunk)
    IO_LOGGER.debug(
        "Sent response",
        extra={
            "event": "response_written",
            "status_code": response.status_code,
            "bytes_out": bytes_out,
        },
    )
    return bytes_out
