"""Runtime settings read from the environment.

SIMPERFI_DB_PATH and SIMPERFI_LOG_LEVEL are read by the CLI options that
carry them; everything else is read here.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEFAULT_BINANCE_URL = "https://api.binance.com"


@dataclass(frozen=True)
class Settings:
    """Application settings."""

    binance_url: str = DEFAULT_BINANCE_URL
    http_timeout: float = 10.0
    price_cache_ttl: float = 900.0
    history_days: int = 30


def _number(environ: Mapping[str, str], name: str, default: float) -> float:
    raw = environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got '{raw}'")


def _day_count(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        raise ValueError(f"{name} must be a whole number of days, got '{raw}'")
    if value < 0:
        raise ValueError(f"{name} cannot be negative, got '{raw}'")
    return value


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build Settings from SIMPERFI_* environment variables.

    Args:
        environ: Mapping to read from (defaults to os.environ)

    Raises:
        ValueError: If a numeric variable cannot be parsed or is out of range
    """
    environ = os.environ if environ is None else environ
    return Settings(
        binance_url=(environ.get("SIMPERFI_BINANCE_URL") or DEFAULT_BINANCE_URL).rstrip("/"),
        http_timeout=_number(environ, "SIMPERFI_HTTP_TIMEOUT", 10.0),
        price_cache_ttl=_number(environ, "SIMPERFI_PRICE_CACHE_TTL", 900.0),
        history_days=_day_count(environ, "SIMPERFI_HISTORY_DAYS", 30),
    )
