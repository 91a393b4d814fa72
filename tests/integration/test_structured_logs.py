"""Integration tests for the JSON log stream written by a running server."""

from __future__ import annotations

import json
import time
from typing import TYPE_CHECKING

import pytest
import requests

pytestmark = pytest.mark.integration

if TYPE_CHECKING:
    from pathlib import Path

    from tests.conftest import ServerProcessInfo


def _read_events(log_file: "Path", wanted: str, timeout: float = 5.0) -> list[dict]:
    """Poll the log file until an entry with ``wanted`` event appears."""

    deadline = time.perf_counter() + timeout
    entries: list[dict] = []
    while time.perf_counter() < deadline:
        entries = [
            json.loads(line)
            for line in log_file.read_text().splitlines()
            if line.strip()
        ]
        if any(entry.get("event") == wanted for entry in entries):
            return entries
        time.sleep(0.05)
    raise AssertionError(f"event {wanted!r} not logged")


def test_startup_is_logged(server_process: "ServerProcessInfo") -> None:
    entries = _read_events(server_process["log_file"], "server_listening")
    listening = next(e for e in entries if e.get("event") == "server_listening")
    assert listening["port"] == server_process["port"]
    assert listening["directory"] == str(server_process["directory"])
    assert listening["correlation_id"] == "-"


def test_request_entries_share_correlation_id(
    server_process: "ServerProcessInfo",
) -> None:
    """Every entry for one connection carries the same correlation ID."""

    requests.get(f"{server_process['base_url']}/docs/guide.md", timeout=5)
    entries = _read_events(server_process["log_file"], "response_sent")

    received = next(e for e in entries if e.get("event") == "request_received")
    sent = next(e for e in entries if e.get("event") == "response_sent")
    assert received["route"] == "/docs/guide.md"
    assert received["method"] == "GET"
    assert received["component"] == "transport.worker"
    assert sent["kind"] == "RegularFile"
    assert sent["status_code"] == 200
    assert received["correlation_id"] == sent["correlation_id"] != "-"
