"""Extension to MIME-type lookup table."""

from dataclasses import dataclass
from typing import Iterable

DEFAULT_MIME_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class MimeEntry:
    """Maps a bare extension (no leading dot) to a MIME type."""

    extension: str
    mime_type: str


# Order matters: lookups return the first matching entry, duplicates included.
DEFAULT_ENTRIES = (
    MimeEntry("aiff", "audio/x-aiff"),
    MimeEntry("avi", "video/avi"),
    MimeEntry("bin", "application/octet-stream"),
    MimeEntry("bmp", "image/bmp"),
    MimeEntry("css", "text/css"),
    MimeEntry("c", "text/x-c"),
    MimeEntry("doc", "application/msword"),
    MimeEntry("gif", "image/gif"),
    MimeEntry("gz", "image/gz"),
    MimeEntry("htmls", "text/html"),
    MimeEntry("html", "text/html"),
    MimeEntry("html", "text/html"),
    MimeEntry("ico", "image/ico"),
    MimeEntry("jpeg", "image/jpeg"),
    MimeEntry("jpg", "image/jpg"),
    MimeEntry("js", "application/x-javascript"),
    MimeEntry("mp3", "audio/mpeg3"),
    MimeEntry("mpeg", "video/mpeg"),
    MimeEntry("mpg", "video/mpeg"),
    MimeEntry("md", "text/markdown"),
    MimeEntry("pdf", "application/pdf"),
    MimeEntry("php", "text/html"),
    MimeEntry("png", "image/png"),
    MimeEntry("png", "image/png"),
    MimeEntry("rar", "application/octet-stream"),
    MimeEntry("tar", "image/tar"),
    MimeEntry("tiff", "image/tiff"),
    MimeEntry("txt", "text/plain"),
    MimeEntry("xml", "application/xml"),
    MimeEntry("zip", "application/zip"),
)


class MimeTable:
    """Read-only, ordered extension table shared by every connection."""

    def __init__(self, entries: Iterable[MimeEntry] = DEFAULT_ENTRIES) -> None:
        self._entries = tuple(entries)

    @property
    def entries(self) -> tuple[MimeEntry, ...]:
        return self._entries

    def lookup(self, extension: str) -> str:
        """Return the MIME type of the first entry matching ``extension``."""
        for entry in self._entries:
            if entry.extension == extension:
                return entry.mime_type
        return DEFAULT_MIME_TYPE

    def __len__(self) -> int:
        return len(self._entries)


def extension_of(filename: str) -> str:
    """Return the text after the last dot of the final path component.

    Names without a dot, and dotfiles such as ``.bashrc``, have no extension.
    """
    basename = filename.rsplit("/", 1)[-1]
    dot = basename.rfind(".")
    if dot <= 0:
        return ""
    return basename[dot + 1 :]
