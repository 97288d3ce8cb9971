"""Shared fixtures: RequestClients wired to httpx.MockTransport."""

import httpx
import pytest

from axer.http.client import RequestClient


@pytest.fixture(autouse=True)
def _no_env_proxy(monkeypatch):
    for name in ("HTTPS_PROXY", "HTTP_PROXY", "https_proxy", "http_proxy"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def make_client():
    """Build a RequestClient whose requests are answered by handler."""

    def factory(handler, cookie_path=None, **overrides):
        config = {"transport": httpx.MockTransport(handler), **overrides}
        return RequestClient(cookie_path, config)

    return factory
