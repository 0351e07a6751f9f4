from typing import List, Optional, Tuple

import numpy as np
import pandas as pd

from services.models import PriceSeries

MAX_ALIGNMENT_GAP = pd.Timedelta(minutes=5)


def _to_frame(series: PriceSeries) -> pd.DataFrame:
    df = pd.DataFrame({
        "ts": pd.to_datetime([p.observed_at for p in series], utc=True),
        "price": [p.price for p in series],
    })
    # mergesort es estable: empates conservan el orden de llegada
    return df.sort_values("ts", kind="mergesort").reset_index(drop=True)


def _nearest_price(df: pd.DataFrame, target: pd.Timestamp) -> Optional[float]:
    if df.empty:
        return None
    gaps = (df["ts"] - target).abs().to_numpy()
    # argmin devuelve el primer mínimo: en empate gana el punto más viejo
    i = int(np.argmin(gaps))
    if gaps[i] > MAX_ALIGNMENT_GAP.to_timedelta64():
        return None
    return float(df["price"].iat[i])


def align_series(series_a: PriceSeries, series_b: PriceSeries) -> Tuple[List[float], List[float]]:
    """
    Alinea dos series muestreadas de forma independiente.

    1. Ordena cada serie por timestamp.
    2. Recorta ambas al rango en común [max(inicios), min(finales)].
    3. Arma una línea de tiempo con la unión (sin duplicados) de los timestamps recortados.
    4. Para cada timestamp toma el punto más cercano de cada serie; el par entra
       sólo si ambos están a <= 5 minutos. Si no, se descarta el timestamp entero.

    Las dos listas de salida tienen siempre el mismo largo.
    """
    if not series_a or not series_b:
        return [], []

    a = _to_frame(series_a)
    b = _to_frame(series_b)

    start = max(a["ts"].iat[0], b["ts"].iat[0])
    end = min(a["ts"].iat[-1], b["ts"].iat[-1])
    if start > end:
        return [], []

    a = a[(a["ts"] >= start) & (a["ts"] <= end)]
    b = b[(b["ts"] >= start) & (b["ts"] <= end)]

    timeline = pd.concat([a["ts"], b["ts"]]).drop_duplicates().sort_values()

    prices_a: List[float] = []
    prices_b: List[float] = []
    for ts in timeline:
        near_a = _nearest_price(a, ts)
        near_b = _nearest_price(b, ts)
        if near_a is None or near_b is None:
            continue
        prices_a.append(near_a)
        prices_b.append(near_b)

    return prices_a, prices_b
