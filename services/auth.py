import logging
import time
from typing import Callable, Dict, Tuple

import httpx

from services.cache import CACHE_KEYS, TTLCache
from services.errors import AuthError
from services.models import AuthToken
from services.stock_exchange import StockExchangeClient

logger = logging.getLogger(__name__)


class TokenManager:
    """
    Mantiene un único bearer token cacheado.

    Sin locks: dos requests concurrentes con el cache vacío pueden
    autenticar dos veces; gana el último en escribir y ambos tokens valen.
    """

    def __init__(
        self,
        client: StockExchangeClient,
        credentials: Dict[str, str],
        cache: TTLCache,
        clock: Callable[[], float] = time.time,
    ):
        self.client = client
        self.credentials = credentials
        self.cache = cache
        self._clock = clock

    async def get_token(self) -> AuthToken:
        cached = self.cache.get(CACHE_KEYS.AUTH_TOKEN)
        if cached is not None:
            return cached

        try:
            data = await self.client.post_auth(self.credentials)
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Error getting auth token: %s", e)
            raise AuthError("Failed to authenticate with the stock exchange API") from e

        token, ttl = self._parse(data)
        self.cache.set(CACHE_KEYS.AUTH_TOKEN, token, ttl)
        logger.info("Auth token refreshed (expires in %.0fs)", ttl)
        return token

    def invalidate(self) -> None:
        self.cache.delete(CACHE_KEYS.AUTH_TOKEN)

    def _parse(self, data) -> Tuple[AuthToken, float]:
        if not isinstance(data, dict):
            raise AuthError("Unexpected auth response format")

        value = data.get("access_token")
        if not isinstance(value, str) or not value:
            raise AuthError("Auth response without access_token")

        # expires_in es la vida útil en segundos; nunca más que el TTL configurado
        ttl = self.cache.default_ttl
        expires_in = data.get("expires_in")
        if isinstance(expires_in, (int, float)) and not isinstance(expires_in, bool) and expires_in > 0:
            ttl = min(float(expires_in), ttl)

        token = AuthToken(
            value=value,
            expires_at=self._clock() + ttl,
            token_type=data.get("token_type") or "Bearer",
        )
        return token, ttl
