"""Shared fixtures for unit tests."""

import logging

import pytest


@pytest.fixture(autouse=True)
def enable_log_propagation():
    """Ensure logs propagate to root so caplog can catch them."""
    logger = logging.getLogger("file_server")
    old_propagate = logger.propagate
    old_level = logger.level
    old_handlers = list(logger.handlers)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
    yield
    for handler in list(logger.handlers):
        if handler not in old_handlers:
            handler.close()
    logger.handlers[:] = old_handlers
    logger.setLevel(old_level)
    logger.propagate = old_propagate


@pytest.fixture(name="web_root")
def fixture_web_root(tmp_path):
    """A web root holding two files and a nested directory."""
    (tmp_path / "a.txt").write_bytes(b"hello")
    (tmp_path / "b.html").write_bytes(b"<p>b</p>")
    nested = tmp_path / "docs"
    nested.mkdir()
    (nested / "guide.md").write_bytes(b"# guide")
    return tmp_path
