import logging
import math
from typing import Any, Dict

import httpx
import pandas as pd

from services.auth import TokenManager
from services.cache import CACHE_KEYS, TTLCache, series_key
from services.errors import FetchError
from services.models import PricePoint, PriceSeries
from services.stock_exchange import StockExchangeClient

logger = logging.getLogger(__name__)


def parse_timestamp(raw: str) -> pd.Timestamp:
    """
    ISO8601 -> Timestamp UTC. Sin zona se asume UTC.
    El exchange manda hasta 10 decimales en los segundos ("02:04:22.4649084652").
    """
    ts = pd.Timestamp(raw.strip())
    if pd.isna(ts):
        raise ValueError(f"Empty timestamp {raw!r}")
    if ts.tzinfo is None:
        return ts.tz_localize("UTC")
    return ts.tz_convert("UTC")


def _to_point(item: Any) -> PricePoint:
    if not isinstance(item, dict):
        raise FetchError("Unexpected price point format from stock API")

    price = item.get("price")
    stamp = item.get("lastUpdatedAt")
    if isinstance(price, bool) or not isinstance(price, (int, float)) or not isinstance(stamp, str):
        raise FetchError("Unexpected price point format from stock API")
    if not math.isfinite(price):
        # json.loads acepta NaN/Infinity; no son precios
        raise FetchError(f"Non-finite price {price!r} from stock API")

    try:
        observed_at = parse_timestamp(stamp)
    except ValueError as e:
        raise FetchError(f"Invalid lastUpdatedAt {stamp!r}") from e

    return PricePoint(price=float(price), observed_at=observed_at, last_updated_at=stamp)


def normalize_series(data: Any) -> PriceSeries:
    """
    El exchange devuelve:
    - una lista de puntos si se pide ventana (minutes)
    - {"stock": {...}} con un único punto si no
    Ambas formas terminan como la misma tupla de PricePoint.
    """
    if isinstance(data, list):
        return tuple(_to_point(item) for item in data)
    if isinstance(data, dict) and data.get("stock") is not None:
        return (_to_point(data["stock"]),)
    raise FetchError("Unexpected response format from stock API")


class StockPriceFetcher:
    def __init__(
        self,
        client: StockExchangeClient,
        tokens: TokenManager,
        cache: TTLCache,
        stock_list_ttl: float = 300,
    ):
        self.client = client
        self.tokens = tokens
        self.cache = cache
        self.stock_list_ttl = stock_list_ttl

    async def get_series(self, ticker: str, minutes: int) -> PriceSeries:
        key = series_key(ticker, minutes)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("Series cache hit %s", key)
            return cached

        token = await self.tokens.get_token()
        data = await self._call(f"stock data for {ticker}", self.client.get_stock(token.value, ticker, minutes))

        series = normalize_series(data)
        self.cache.set(key, series)
        logger.debug("Series cached %s (%d points)", key, len(series))
        return series

    async def list_stocks(self) -> Dict[str, str]:
        cached = self.cache.get(CACHE_KEYS.ALL_STOCKS)
        if cached is not None:
            return cached

        token = await self.tokens.get_token()
        data = await self._call("all stocks", self.client.get_stocks(token.value))

        stocks = data.get("stocks") if isinstance(data, dict) else None
        if not isinstance(stocks, dict):
            raise FetchError("Unexpected stock list format from stock API")

        self.cache.set(CACHE_KEYS.ALL_STOCKS, stocks, self.stock_list_ttl)
        return stocks

    async def _call(self, what: str, request) -> Any:
        try:
            return await request
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 401:
                # token revocado o vencido antes de tiempo
                self.tokens.invalidate()
            logger.error("Error fetching %s: %s", what, e)
            raise FetchError(f"Stock API returned {e.response.status_code}") from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Error fetching %s: %s", what, e)
            raise FetchError(f"Failed to fetch {what}") from e
