"""Shared fixtures for the qaympy tests.

The HTTP transport is replaced by ``httpx.MockTransport`` so that no test
touches the network.
"""

import sys
from collections.abc import Callable

import httpx
import pytest

from qaympy import QaymAPI, set_logging_level


@pytest.fixture(autouse=True)
def _reset_logging():
    """Restore the default stderr WARNING sink after every test."""
    yield
    set_logging_level("WARNING", sink=sys.stderr)


@pytest.fixture
def log_messages() -> list[str]:
    """Collect qaympy log messages at DEBUG and above."""
    messages: list[str] = []
    set_logging_level("DEBUG", sink=messages.append)
    return messages


@pytest.fixture
def sent_requests() -> list[httpx.Request]:
    return []


@pytest.fixture
def make_client(sent_requests) -> Callable[..., QaymAPI]:
    """Build a QaymAPI whose transport is served by a handler function.

    The default handler answers every request with ``{"ok": true}``.
    """
    clients: list[QaymAPI] = []

    def _make(handler=None, api_key: str = "abc", **kwargs) -> QaymAPI:
        def default_handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"ok": True})

        serve = handler or default_handler

        def recording_handler(request: httpx.Request) -> httpx.Response:
            sent_requests.append(request)
            return serve(request)

        client = QaymAPI(
            api_key=api_key,
            transport=httpx.MockTransport(recording_handler),
            **kwargs,
        )
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.close()
