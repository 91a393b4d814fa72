"""Context object shared across worker threads."""

from dataclasses import dataclass
from typing import Optional

from fileserver.bootstrap.config import ServerConfig
from fileserver.lifecycle.state import ServerLifecycle


@dataclass(frozen=True)
class WorkerContext:
    """Read-only dependencies every connection thread receives."""

    config: ServerConfig
    lifecycle: Optional[ServerLifecycle] = None
