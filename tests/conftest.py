from typing import Any, Dict, List, Tuple

import httpx
import pytest
from fastapi.testclient import TestClient

from config import Settings
from main import create_app
from services.auth import TokenManager
from services.cache import TTLCache
from services.stock_exchange import StockExchangeClient
from services.stocks import StockPriceFetcher

BASE_URL = "http://exchange.test/evaluation-service"
CREDENTIALS = {
    "email": "dev@example.com",
    "name": "dev",
    "rollNo": "1",
    "accessCode": "abc",
    "clientID": "client-id",
    "clientSecret": "client-secret",
}


def point(price: float, minute: int, second: int = 0) -> Dict[str, Any]:
    return {"price": price, "lastUpdatedAt": f"2025-05-09T02:{minute:02d}:{second:02d}.000000Z"}


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeExchange:
    """Simula la API del exchange detrás de httpx.MockTransport."""

    def __init__(self):
        self.auth_calls = 0
        self.auth_payloads: List[Any] = []
        self.stock_calls: List[Tuple[str, str]] = []
        self.auth_response: Any = (
            200, {"token_type": "Bearer", "access_token": "mock-token-123", "expires_in": 3600}
        )
        self.stock_responses: Dict[str, Any] = {}
        self.stocks_response: Any = (200, {"stocks": {"Nvidia Corporation": "NVDA"}})
        self.seen_authorization: List[str] = []
        self.raw_paths: List[bytes] = []

    def set_series(self, ticker: str, payload: Any, status_code: int = 200) -> None:
        self.stock_responses[ticker] = (status_code, payload)

    def _reply(self, response: Any) -> httpx.Response:
        if isinstance(response, Exception):
            raise response
        status_code, payload = response
        if isinstance(payload, bytes):
            return httpx.Response(status_code, content=payload)
        return httpx.Response(status_code, json=payload)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.raw_paths.append(request.url.raw_path)
        path = request.url.path.replace("/evaluation-service", "", 1)

        if path == "/auth":
            self.auth_calls += 1
            self.auth_payloads.append(request.content)
            return self._reply(self.auth_response)

        self.seen_authorization.append(request.headers.get("Authorization", ""))

        if path == "/stocks":
            return self._reply(self.stocks_response)

        ticker = path.rsplit("/", 1)[-1]
        self.stock_calls.append((ticker, request.url.params.get("minutes", "")))
        if ticker not in self.stock_responses:
            return httpx.Response(404, json={"message": "unknown ticker"})
        return self._reply(self.stock_responses[ticker])

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def exchange():
    return FakeExchange()


@pytest.fixture
def settings():
    return Settings(base_url=BASE_URL, credentials=dict(CREDENTIALS), log_level="DEBUG")


@pytest.fixture
def token_manager(exchange, clock, settings):
    client = StockExchangeClient(settings.base_url, transport=exchange.transport)
    return TokenManager(client, settings.credentials, TTLCache(settings.token_ttl, clock=clock), clock=clock)


@pytest.fixture
def fetcher(exchange, clock, settings, token_manager):
    return StockPriceFetcher(
        token_manager.client,
        token_manager,
        TTLCache(settings.series_ttl, clock=clock),
        stock_list_ttl=settings.stock_list_ttl,
    )


@pytest.fixture
def api(exchange, clock, settings):
    app = create_app(settings, transport=exchange.transport, clock=clock)
    with TestClient(app) as client:
        yield client
