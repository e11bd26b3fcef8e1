"""
Pytest configuration and fixtures for Postbridge tests.

HTTP is faked with httpx.MockTransport; every request the client sends is
recorded so tests can assert on method, URL, headers and body.
"""

import os
from typing import Callable

import httpx
import pytest

# Set test environment before importing postbridge modules
os.environ["POSTBRIDGE_ENV"] = "development"
os.environ.pop("POSTGREST_API_KEY", None)

from postbridge.db.client import PostgrestClient

BASE_URL = "http://postgrest.test/api"

Handler = Callable[[httpx.Request], httpx.Response]


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it handled."""

    def __init__(self, handler: Handler):
        self.requests: list[httpx.Request] = []

        def record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(record)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


def _rows_handler(rows: list[dict], status: int = 200, headers: dict | None = None) -> Handler:
    """Handler that answers every request with the same rows."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, json=rows, headers=headers or {})

    return handler


@pytest.fixture
def make_client():
    """Factory: PostgrestClient wired to a RecordingTransport."""

    def factory(handler: Handler | None = None, **kwargs) -> tuple[PostgrestClient, RecordingTransport]:
        transport = RecordingTransport(handler or _rows_handler([]))
        client = PostgrestClient(BASE_URL, transport=transport, **kwargs)
        return client, transport

    return factory


@pytest.fixture
def sample_subscribers():
    """Sample subscriber rows for testing."""
    return [
        {
            "id": "sub-1",
            "psid": "26188149954121766",
            "full_name": "Melina Mirale",
            "is_active": True,
            "tags": ["vip", "newsletter"],
            "total_messages_sent": 3,
        },
        {
            "id": "sub-2",
            "psid": "25384744947845188",
            "full_name": "Nouha Blk",
            "is_active": True,
            "tags": ["newsletter"],
            "total_messages_sent": 3,
        },
        {
            "id": "sub-3",
            "psid": "33412284531718499",
            "full_name": "Salah Elachgar",
            "is_active": False,
            "tags": [],
            "total_messages_sent": 0,
        },
    ]
