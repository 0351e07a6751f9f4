import datetime as dt
from dataclasses import dataclass
from typing import Any, Dict, Tuple


@dataclass(frozen=True)
class PricePoint:
    price: float
    observed_at: dt.datetime
    # texto original del exchange, se devuelve tal cual en priceHistory
    last_updated_at: str

    def to_dict(self) -> Dict[str, Any]:
        return {"price": self.price, "lastUpdatedAt": self.last_updated_at}


PriceSeries = Tuple[PricePoint, ...]


@dataclass(frozen=True)
class AuthToken:
    value: str
    expires_at: float
    token_type: str = "Bearer"


def price_history(series: PriceSeries):
    return [p.to_dict() for p in series]
