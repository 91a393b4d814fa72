"""Hand-rolled tokenizer turning a raw request buffer into a RequestFrame."""

import logging

from fileserver.domain.connection_log import ComponentLogger
from fileserver.domain.http_types import (
    WIRE_ENCODING,
    HeaderEntry,
    ParseError,
    RequestFrame,
)

PARSER_LOGGER = ComponentLogger("pipeline.parser")


def parse_request_line(line: str) -> tuple[str, str, str]:
    """Split the request line into method, resource and protocol.

    A missing protocol becomes the empty string; tokens past the third are
    ignored.
    """
    tokens = line.split()
    if len(tokens) < 2:
        raise ParseError("Invalid request line")
    method, resource = tokens[0], tokens[1]
    protocol = tokens[2] if len(tokens) > 2 else ""
    return method, resource, protocol


def is_header_terminator(line: str) -> bool:
    """True for a line with no field name: empty, colons only, or a stray CR.

    ``":"``, ``":::"`` and ``"::\r"`` all end the header block.
    """
    return line.strip(":") in ("", "\r")


def parse_header_line(line: str) -> HeaderEntry:
    """Split a header at its first colon and drop one leading space."""
    name, _, value = line.partition(":")
    if value.startswith(" "):
        value = value[1:]
    return HeaderEntry(name, value)


def parse_headers(lines: list[str]) -> tuple[list[HeaderEntry], int]:
    """Collect headers up to the terminator line.

    Returns the headers and the index of the first body line, which equals
    ``len(lines)`` when no terminator was found.
    """
    headers = []
    for index, line in enumerate(lines):
        if is_header_terminator(line):
            return headers, index + 1
        headers.append(parse_header_line(line))
    return headers, len(lines)


def parse_request(buffer: bytes) -> RequestFrame:
    """Parse a raw request buffer without consulting header semantics."""
    if not buffer:
        raise ParseError("Empty request")

    lines = buffer.decode(WIRE_ENCODING).split("\n")
    method, resource, protocol = parse_request_line(lines[0])
    headers, body_start = parse_headers(lines[1:])
    body = "\n".join(lines[1 + body_start :])

    if PARSER_LOGGER.logger.isEnabledFor(logging.DEBUG):
        PARSER_LOGGER.debug(
            "Request parsed",
            extra={
                "event": "request_parsed",
                "method": method,
                "route": resource,
                "header_count": len(headers),
                "bytes_in": len(buffer),
            },
        )
    return RequestFrame(method, resource, protocol, tuple(headers), body)
