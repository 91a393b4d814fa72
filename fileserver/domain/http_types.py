"""Shared HTTP type definitions to avoid circular imports."""

from dataclasses import dataclass, field

SUPPORTED_PROTOCOLS = ("HTTP/1.1", "HTTP/1.0")

# Maps every byte to one code point, so request text round-trips to raw bytes.
WIRE_ENCODING = "iso-8859-1"


class ParseError(ValueError):
    """Raised when a raw request buffer cannot yield a request line."""


class RequestTooLarge(Exception):
    """Raised when a request grows past the configured read limit."""


@dataclass(frozen=True)
class HeaderEntry:
    """A single header as it appeared on the wire, field case preserved."""

    field: str
    value: str


@dataclass(frozen=True)
class RequestFrame:
    """Represents a parsed HTTP request."""

    method: str
    resource: str
    protocol: str
    headers: tuple[HeaderEntry, ...] = ()
    body: str = ""


@dataclass
class ResponseFrame:
    """Status line and headers of a response; the body is written separately."""

    protocol: str = "HTTP/1.1"
    status_code: int = 200
    status_message: str = "OK"
    headers: list[HeaderEntry] = field(default_factory=list)

    @property
    def status_line(self) -> str:
        return f"{self.protocol} {self.status_code} {self.status_message}"

    def add_header(self, name: str, value: str) -> None:
        """Append a header, keeping insertion order."""
        self.headers.append(HeaderEntry(name, value))
