"""Component loggers stamped with the ID of the connection being served."""

import contextvars
import logging
import uuid
from contextlib import contextmanager
from typing import Any, Iterator, MutableMapping, Optional

ROOT_LOGGER_NAME = "file_server"
NO_CONNECTION = "-"

_connection_id: contextvars.ContextVar[str] = contextvars.ContextVar(
    "connection_id", default=NO_CONNECTION
)


def current_connection_id() -> str:
    return _connection_id.get()


@contextmanager
def connection_scope(connection_id: Optional[str] = None) -> Iterator[str]:
    """Tag every record logged inside the block with one connection ID.

    The previous value is restored on exit, so scopes never leak between
    connections served by the same thread.
    """
    token = _connection_id.set(connection_id or str(uuid.uuid4()))
    try:
        yield _connection_id.get()
    finally:
        _connection_id.reset(token)


class ComponentLogger(logging.LoggerAdapter):
    """Adapter over ``file_server.<component>`` adding component and connection ID."""

    def __init__(self, component: str = "") -> None:
        name = f"{ROOT_LOGGER_NAME}.{component}" if component else ROOT_LOGGER_NAME
        super().__init__(logging.getLogger(name), {"component": component or "root"})

    def process(
        self, msg: str, kwargs: MutableMapping[str, Any]
    ) -> tuple[str, MutableMapping[str, Any]]:
        kwargs["extra"] = {
            **self.extra,
            **kwargs.get("extra", {}),
            "correlation_id": current_connection_id(),
        }
        return msg, kwargs
