"""Shared fixtures: an httpx mock transport that records outbound requests."""

import json
import logging
from typing import Callable, List

import httpx
import pytest

from imgrouter.http_client import HttpClient


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served, in order."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.requests: List[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(_record)

    def urls(self) -> List[str]:
        return [str(r.url) for r in self.requests]


@pytest.fixture
def mock_http():
    """Factory: handler -> (HttpClient, RecordingTransport)."""
    def _make(handler):
        transport = RecordingTransport(handler)
        return HttpClient(timeout=5.0, transport=transport), transport
    return _make


@pytest.fixture
def audit_events(caplog):
    """Callable returning decoded entries from the imgrouter.audit logger."""
    caplog.set_level(logging.DEBUG, logger="imgrouter.audit")

    def _events() -> List[dict]:
        return [
            json.loads(r.getMessage())
            for r in caplog.records
            if r.name == "imgrouter.audit"
        ]
    return _events
