from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx


class StockExchangeClient:
    """
    Cliente HTTP crudo de la API del exchange.
    No cachea ni normaliza: devuelve el JSON tal cual y deja que
    httpx levante sus excepciones (red, status no-2xx, JSON inválido).
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 20.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    async def post_auth(self, credentials: Dict[str, str]) -> Any:
        url = f"{self.base_url}/auth"
        async with self._client() as client:
            r = await client.post(url, json=credentials)
            r.raise_for_status()
            return r.json()

    async def get_stock(self, token: str, ticker: str, minutes: Optional[int] = None) -> Any:
        # el ticker viene del cliente: escapado no puede salir de /stocks/
        url = f"{self.base_url}/stocks/{quote(ticker, safe='')}"
        params = {"minutes": minutes} if minutes else None
        async with self._client() as client:
            r = await client.get(url, params=params, headers={"Authorization": f"Bearer {token}"})
            r.raise_for_status()
            return r.json()

    async def get_stocks(self, token: str) -> Any:
        url = f"{self.base_url}/stocks"
        async with self._client() as client:
            r = await client.get(url, headers={"Authorization": f"Bearer {token}"})
            r.raise_for_status()
            return r.json()
