"""Classify a requested path as a regular file, a directory, or missing."""

import logging
import os
import stat
from dataclasses import dataclass
from typing import Iterator, Union

from fileserver.domain.connection_log import ComponentLogger
from fileserver.domain.http_types import WIRE_ENCODING
from fileserver.domain.mime_table import MimeTable, extension_of

RESOLVER_LOGGER = ComponentLogger("domain.resolution")

HIDDEN_ENTRIES = frozenset({".", ".."})


@dataclass(frozen=True)
class RegularFile:
    """A readable regular file and the metadata needed to serve it."""

    absolute_path: str
    size_bytes: int
    mime_type: str


@dataclass(frozen=True)
class Directory:
    """A listable directory; entries are read only when iterated."""

    absolute_path: str
    display_prefix: str

    def entries(self) -> Iterator[str]:
        """Yield entry names, skipping ``.`` and ``..``."""
        with os.scandir(self.absolute_path) as iterator:
            for entry in iterator:
                if entry.name in HIDDEN_ENTRIES:
                    continue
                yield entry.name


@dataclass(frozen=True)
class Missing:
    """Neither a readable regular file nor a listable directory."""

    absolute_path: str


ResolutionResult = Union[RegularFile, Directory, Missing]


def display_prefix_for(requested_path: str) -> str:
    """Strip leading slashes so listing links compose from the web root."""
    return requested_path.lstrip("/")


def _is_regular_file(path: str) -> bool:
    try:
        return stat.S_ISREG(os.stat(path).st_mode)
    except (OSError, ValueError):
        return False


def _measure_file(path: str) -> int:
    with open(path, "rb") as file_handle:
        file_handle.seek(0, os.SEEK_END)
        return file_handle.tell()


def _open_directory(path: str) -> None:
    with os.scandir(path):
        pass


def resolve(
    web_root: str, requested_path: str, mime_table: MimeTable
) -> ResolutionResult:
    """Resolve ``requested_path`` against ``web_root`` without normalization.

    The absolute path is the plain concatenation of both strings, so ``..``
    segments and percent escapes reach the filesystem untouched.
    """
    absolute_path = web_root + os.fsdecode(requested_path.encode(WIRE_ENCODING))

    if _is_regular_file(absolute_path):
        try:
            size_bytes = _measure_file(absolute_path)
        except OSError as error:
            RESOLVER_LOGGER.debug(
                "File could not be opened",
                extra={
                    "event": "resource_unreadable",
                    "path": absolute_path,
                    "error_type": type(error).__name__,
                },
            )
            return Missing(absolute_path)
        mime_type = mime_table.lookup(extension_of(absolute_path))
        if RESOLVER_LOGGER.logger.isEnabledFor(logging.DEBUG):
            RESOLVER_LOGGER.debug(
                "Resource resolved",
                extra={
                    "event": "resource_resolved",
                    "kind": "file",
                    "path": absolute_path,
                    "bytes_out": size_bytes,
                },
            )
        return RegularFile(absolute_path, size_bytes, mime_type)

    try:
        _open_directory(absolute_path)
    except (OSError, ValueError) as error:
        if RESOLVER_LOGGER.logger.isEnabledFor(logging.DEBUG):
            RESOLVER_LOGGER.debug(
                "Resource missing",
                extra={
                    "event": "resource_missing",
                    "path": absolute_path,
                    "error_type": type(error).__name__,
                },
            )
        return Missing(absolute_path)

    if RESOLVER_LOGGER.logger.isEnabledFor(logging.DEBUG):
        RESOLVER_LOGGER.debug(
            "Resource resolved",
            extra={"event": "resource_resolved", "kind": "directory", "path": absolute_path},
        )
    return Directory(absolute_path, display_prefix_for(requested_path))
