import math
from typing import Optional, Sequence

import numpy as np


def average(values: Sequence[float]) -> float:
    """Media aritmética; 0.0 si no hay valores."""
    if len(values) == 0:
        return 0.0
    return float(np.mean(np.asarray(values, dtype=float)))


def pearson(xs: Sequence[float], ys: Sequence[float]) -> Optional[float]:
    """
    Coeficiente de correlación de Pearson.

    Devuelve None (no levanta) cuando:
    - las series tienen distinto largo o están vacías
    - alguna de las dos tiene varianza cero (todos los valores iguales)
    """
    if len(xs) != len(ys) or len(xs) == 0:
        return None

    x = np.asarray(xs, dtype=float)
    y = np.asarray(ys, dtype=float)

    # valores idénticos: la media puede no ser exacta y dejar varianza residual
    if np.all(x == x[0]) or np.all(y == y[0]):
        return None

    x_diff = x - x.mean()
    y_diff = y - y.mean()

    covariance = float(np.sum(x_diff * y_diff))
    x_std = math.sqrt(float(np.sum(x_diff * x_diff)))
    y_std = math.sqrt(float(np.sum(y_diff * y_diff)))

    if x_std == 0 or y_std == 0:
        return None

    return covariance / (x_std * y_std)
