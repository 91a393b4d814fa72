"""Build the status line and headers for a resolved request."""

from fileserver.domain.http_types import SUPPORTED_PROTOCOLS, RequestFrame, ResponseFrame
from fileserver.domain.resolution import RegularFile, ResolutionResult


def generate_response(
    request: RequestFrame, resolution: ResolutionResult
) -> ResponseFrame:
    """Return the response frame for ``request``; performs no I/O.

    An unsupported protocol downgrades the status to 400 but still carries
    the resource headers, and the caller still writes a body.
    """
    response = ResponseFrame()

    if request.protocol not in SUPPORTED_PROTOCOLS:
        response.status_code = 400
        response.status_message = "Bad Request"

    if isinstance(resolution, RegularFile):
        response.add_header("Content-Length", str(resolution.size_bytes))
        response.add_header("Content-Type", resolution.mime_type)

    return response
