import datetime as dt
import logging
import time
from typing import Callable, List, Optional

import httpx
from fastapi import Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import Settings, load_settings
from logger import setup_logging
from services.aggregation import (
    average_price,
    parse_minutes,
    require_aggregation,
    stock_correlation,
)
from services.auth import TokenManager
from services.cache import TTLCache
from services.errors import AuthError, FetchError, NotFoundError, ValidationError
from services.stock_exchange import StockExchangeClient
from services.stocks import StockPriceFetcher

logger = logging.getLogger(__name__)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def get_fetcher(request: Request) -> StockPriceFetcher:
    return request.app.state.fetcher


def create_app(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    clock: Callable[[], float] = time.time,
) -> FastAPI:
    settings = settings or load_settings()
    setup_logging(settings.log_level)

    app = FastAPI(
        title="Stock Price Aggregation API",
        version="1.0.0"
    )

    # ============================
    # CORS
    # ============================
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ============================
    # SERVICIOS (viven lo que vive el proceso)
    # ============================
    client = StockExchangeClient(settings.base_url, timeout=settings.http_timeout, transport=transport)
    token_cache = TTLCache(settings.token_ttl, clock=clock)
    series_cache = TTLCache(settings.series_ttl, clock=clock)
    tokens = TokenManager(client, settings.credentials, token_cache, clock=clock)

    app.state.settings = settings
    app.state.token_cache = token_cache
    app.state.series_cache = series_cache
    app.state.fetcher = StockPriceFetcher(client, tokens, series_cache, stock_list_ttl=settings.stock_list_ttl)

    # ============================
    # HEALTHCHECK
    # ============================
    @app.get("/health")
    def health():
        now = dt.datetime.now(dt.timezone.utc)
        return {
            "status": "UP",
            "timestamp": now.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
        }

    # ============================
    # LISTADO DE ACCIONES
    # ============================
    @app.get("/stocks")
    async def list_stocks(fetcher: StockPriceFetcher = Depends(get_fetcher)):
        try:
            stocks = await fetcher.list_stocks()
        except (AuthError, FetchError) as e:
            logger.error("Error in stock list API: %s", e)
            return _error(500, "Failed to fetch stock list")
        return {"stocks": stocks}

    # ============================
    # PROMEDIO
    # ============================
    @app.get("/stocks/{ticker}")
    async def stock_average(
        ticker: str,
        request: Request,
        minutes: Optional[str] = Query(default=None),
        fetcher: StockPriceFetcher = Depends(get_fetcher),
    ):
        # ?aggregation-average viene sin valor: alcanza con que esté presente
        aggregation = "aggregation-average" in request.query_params
        try:
            require_aggregation(aggregation)
            window = parse_minutes(minutes, settings.default_minutes)
            return await average_price(fetcher, ticker, window)
        except ValidationError as e:
            return _error(400, str(e))
        except NotFoundError as e:
            return _error(404, str(e))
        except (AuthError, FetchError) as e:
            logger.error("Error in average price API for %s: %s", ticker, e)
            return _error(500, "Failed to fetch stock price data")

    # ============================
    # CORRELACIÓN
    # ============================
    @app.get("/stockcorrelation")
    async def correlation(
        minutes: Optional[str] = Query(default=None),
        ticker: List[str] = Query(default=[]),
        fetcher: StockPriceFetcher = Depends(get_fetcher),
    ):
        try:
            window = parse_minutes(minutes, settings.default_minutes)
            return await stock_correlation(fetcher, ticker, window)
        except ValidationError as e:
            return _error(400, str(e))
        except NotFoundError as e:
            return _error(404, str(e))
        except (AuthError, FetchError) as e:
            logger.error("Error in correlation API for %s: %s", ticker, e)
            return _error(500, "Failed to calculate stock correlation")

    return app


app = create_app()
