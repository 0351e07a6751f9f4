import os
from dataclasses import dataclass, field
from typing import Dict, List

# ============================
# API DEL EXCHANGE
# ============================
DEFAULT_BASE_URL = "http://20.244.56.144/evaluation-service"

# ============================
# FRECUENCIAS (TTL)
# ============================
TTL_TOKEN = 3500          # ~1 h, el token dura 3600
TTL_SERIES = 30           # 30 s, precios intradía
TTL_STOCK_LIST = 300      # 5 min

DEFAULT_MINUTES = 60
HTTP_TIMEOUT = 20.0


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


@dataclass(frozen=True)
class Settings:
    base_url: str = DEFAULT_BASE_URL
    credentials: Dict[str, str] = field(default_factory=dict)
    token_ttl: int = TTL_TOKEN
    series_ttl: int = TTL_SERIES
    stock_list_ttl: int = TTL_STOCK_LIST
    http_timeout: float = HTTP_TIMEOUT
    default_minutes: int = DEFAULT_MINUTES
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"


def load_settings() -> Settings:
    """
    Arma Settings desde variables de entorno.
    Las credenciales nunca van hardcodeadas: vienen de STOCK_API_*.
    """
    prefix = "STOCK_API_"
    credentials = {
        "email": os.getenv(f"{prefix}EMAIL", ""),
        "name": os.getenv(f"{prefix}NAME", ""),
        "rollNo": os.getenv(f"{prefix}ROLL_NO", ""),
        "accessCode": os.getenv(f"{prefix}ACCESS_CODE", ""),
        "clientID": os.getenv(f"{prefix}CLIENT_ID", ""),
        "clientSecret": os.getenv(f"{prefix}CLIENT_SECRET", ""),
    }
    origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

    return Settings(
        base_url=os.getenv(f"{prefix}BASE_URL", DEFAULT_BASE_URL).rstrip("/"),
        credentials=credentials,
        token_ttl=_env_int("TOKEN_TTL_SECONDS", TTL_TOKEN),
        series_ttl=_env_int("SERIES_TTL_SECONDS", TTL_SERIES),
        stock_list_ttl=_env_int("STOCK_LIST_TTL_SECONDS", TTL_STOCK_LIST),
        http_timeout=_env_float("HTTP_TIMEOUT_SECONDS", HTTP_TIMEOUT),
        default_minutes=_env_int("DEFAULT_MINUTES", DEFAULT_MINUTES),
        cors_origins=origins or ["*"],
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
