from __future__ import annotations

import pytest
import requests
from fastapi.testclient import TestClient
from requests.adapters import BaseAdapter
from requests.structures import CaseInsensitiveDict
from requests.utils import get_encoding_from_headers

from aw_client.blocking import BlockingClient

from .fake_server import build_app

_HOP_HEADERS = {"host", "content-length", "connection", "accept-encoding"}


class ASGIAdapter(BaseAdapter):
    """requests transport adapter that forwards to an ASGI app via TestClient."""

    def __init__(self, app) -> None:
        super().__init__()
        self._client = TestClient(app)
        self.sent: list[requests.PreparedRequest] = []

    def send(self, request, stream=False, timeout=None, verify=True, cert=None, proxies=None):
        self.sent.append(request)
        headers = {k: v for k, v in request.headers.items() if k.lower() not in _HOP_HEADERS}
        upstream = self._client.request(
            request.method,
            request.url,
            content=request.body,
            headers=headers,
        )
        response = requests.Response()
        response.status_code = upstream.status_code
        response.reason = upstream.reason_phrase
        response.headers = CaseInsensitiveDict(upstream.headers)
        response.encoding = get_encoding_from_headers(response.headers)
        response._content = upstream.content
        response.url = request.url
        response.request = request
        return response

    def close(self) -> None:
        # Sessions close their adapters; the fixture owns the TestClient.
        pass

    def shutdown(self) -> None:
        self._client.close()


@pytest.fixture
def fake_app():
    return build_app()


@pytest.fixture
def asgi_adapter(fake_app):
    adapter = ASGIAdapter(fake_app)
    yield adapter
    adapter.shutdown()


@pytest.fixture
def blocking_client(asgi_adapter):
    session = requests.Session()
    session.mount("http://", asgi_adapter)
    client = BlockingClient("127.0.0.1", 5666, "test-client", session=session)
    yield client
    client.close()
