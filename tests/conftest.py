from __future__ import annotations

import json
from typing import Any, Callable, Dict, List

import httpx
import pytest

from nse_tracker.config.models import NseEndpointConfig, PollingConfig
from nse_tracker.data_feed.nse_client import NseClient
from nse_tracker.data_feed.session import SessionManager, build_http_client

LANDING_COOKIES = [
    "nsit=abc123; Path=/; HttpOnly; SameSite=Lax",
    "nseappid=tok.en.value; Path=/; Secure",
]


class FakeNseSite:
    """``httpx.MockTransport`` handler emulating the three NSE endpoints.

    Every request and every settle-pause call is appended to ``events`` so
    tests can assert on ordering. ``snapshot_responses`` is consumed one item
    per snapshot call; the last item repeats once the list runs out. Items may
    be :class:`httpx.Response` objects or exceptions to raise.
    """

    def __init__(self) -> None:
        self.events: List[str] = []
        self.requests: List[httpx.Request] = []
        self.landing_cookies: List[str] = list(LANDING_COOKIES)
        self.landing_status = 200
        self.landing_error: Exception | None = None
        self.status_code_for_warmup = 200
        self.snapshot_responses: List[Any] = [httpx.Response(200, text=json.dumps({"data": []}))]

    def sleep(self, seconds: float) -> None:
        self.events.append("sleep")

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path == "/get-quotes/equity":
            self.events.append("landing")
            if self.landing_error is not None:
                raise self.landing_error
            headers = [("set-cookie", cookie) for cookie in self.landing_cookies]
            return httpx.Response(self.landing_status, headers=headers, text="<html></html>")
        if path == "/api/marketStatus":
            self.events.append("warmup")
            return httpx.Response(self.status_code_for_warmup, json={"marketState": []})
        if path == "/api/equity-stockIndices":
            self.events.append("snapshot")
            item = self.snapshot_responses.pop(0) if len(self.snapshot_responses) > 1 else self.snapshot_responses[0]
            if isinstance(item, Exception):
                raise item
            return httpx.Response(item.status_code, headers=item.headers, content=item.content)
        return httpx.Response(404)

    def requests_to(self, path: str) -> List[httpx.Request]:
        return [request for request in self.requests if request.url.path == path]


@pytest.fixture
def nse_config() -> NseEndpointConfig:
    return NseEndpointConfig(warmup_delay_sec=0.5)


@pytest.fixture
def fake_site() -> FakeNseSite:
    return FakeNseSite()


@pytest.fixture
def http_client(fake_site: FakeNseSite, nse_config: NseEndpointConfig):
    client = build_http_client(nse_config, transport=httpx.MockTransport(fake_site.handler))
    yield client
    client.close()


@pytest.fixture
def session_manager(nse_config: NseEndpointConfig, http_client: httpx.Client, fake_site: FakeNseSite) -> SessionManager:
    return SessionManager(nse_config, http_client, sleep=fake_site.sleep)


@pytest.fixture
def nse_client(nse_config: NseEndpointConfig, session_manager: SessionManager, http_client: httpx.Client) -> NseClient:
    return NseClient(nse_config, session_manager, http_client)


@pytest.fixture
def fast_polling() -> PollingConfig:
    return PollingConfig(initial_delay_ms=0, min_delay_ms=1, max_delay_ms=2)


@pytest.fixture
def snapshot_body() -> Callable[..., str]:
    def _factory(*rows: Dict[str, Any]) -> str:
        return json.dumps({"data": list(rows)})

    return _factory
