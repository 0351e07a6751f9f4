import asyncio
from typing import Any, Dict, List, Optional

from services.alignment import align_series
from services.analytics import average, pearson
from services.errors import NotFoundError, ValidationError
from services.models import price_history
from services.stocks import StockPriceFetcher

MISSING_AGGREGATION = "Missing aggregation-average parameter"
NO_PRICE_DATA = "No price data available for the specified stock and time range"
TWO_TICKERS_REQUIRED = "Exactly 2 stock tickers are required for correlation calculation"
INSUFFICIENT_PRICE_DATA = "Insufficient price data available for the specified stocks and time range"
INSUFFICIENT_OVERLAP = "Insufficient overlapping data points for correlation calculation"


def parse_minutes(raw: Optional[str], default: int) -> int:
    if raw is None or raw == "":
        return default
    try:
        minutes = int(raw)
    except ValueError:
        raise ValidationError("minutes must be a positive integer")
    if minutes <= 0:
        raise ValidationError("minutes must be a positive integer")
    return minutes


def require_aggregation(aggregation: bool) -> None:
    if not aggregation:
        raise ValidationError(MISSING_AGGREGATION)


async def average_price(fetcher: StockPriceFetcher, ticker: str, minutes: int) -> Dict[str, Any]:
    series = await fetcher.get_series(ticker, minutes)
    if not series:
        raise NotFoundError(NO_PRICE_DATA)

    return {
        "averageStockPrice": average([p.price for p in series]),
        "priceHistory": price_history(series),
    }


async def stock_correlation(
    fetcher: StockPriceFetcher,
    tickers: List[str],
    minutes: int,
) -> Dict[str, Any]:
    if len(tickers) != 2:
        raise ValidationError(TWO_TICKERS_REQUIRED)

    first, second = tickers
    # si una falla, gather propaga y el resultado de la otra se descarta
    series_1, series_2 = await asyncio.gather(
        fetcher.get_series(first, minutes),
        fetcher.get_series(second, minutes),
    )

    if not series_1 or not series_2:
        raise NotFoundError(INSUFFICIENT_PRICE_DATA)

    prices_1, prices_2 = align_series(series_1, series_2)
    if len(prices_1) < 2 or len(prices_2) < 2:
        raise NotFoundError(INSUFFICIENT_OVERLAP)

    correlation = pearson(prices_1, prices_2)

    return {
        "correlation": round(correlation, 4) if correlation is not None else None,
        "stocks": {
            first: {
                "averagePrice": average([p.price for p in series_1]),
                "priceHistory": price_history(series_1),
            },
            second: {
                "averagePrice": average([p.price for p in series_2]),
                "priceHistory": price_history(series_2),
            },
        },
    }
