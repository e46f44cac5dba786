"""Binance public market-data client.

Prices are quoted against USDT, which the engine treats as 1 USD.
"""

import logging
from datetime import date, datetime, time, timedelta, UTC
from typing import Optional

import requests

from simperfi.domain.errors import PriceUnavailableError

logger = logging.getLogger(__name__)

QUOTE_ASSET = "USDT"
KLINES_LIMIT = 1000
MS_PER_DAY = 86_400_000


def _to_ms(day: date) -> int:
    return int(datetime.combine(day, time(), tzinfo=UTC).timestamp() * 1000)


class BinanceClient:
    """Live and historical daily prices from the Binance REST API."""

    def __init__(
        self,
        base_url: str = "https://api.binance.com",
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        """Initialize the client.

        Args:
            base_url: API root
            timeout: Per-request timeout in seconds
            session: requests session to reuse (a new one by default)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _get(self, path: str, params: dict):
        url = f"{self.base_url}{path}"
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.RequestException as e:
            raise PriceUnavailableError(f"GET {path} failed: {e}") from e
        except ValueError as e:
            raise PriceUnavailableError(f"GET {path} returned invalid JSON: {e}") from e

    @staticmethod
    def market_symbol(symbol: str) -> str:
        return f"{symbol.strip().upper()}{QUOTE_ASSET}"

    def get_live_price(self, symbol: str) -> Optional[float]:
        """Return the latest traded price of ``symbol`` in USDT.

        Raises:
            PriceUnavailableError: If the request fails or the answer is unusable
        """
        payload = self._get("/api/v3/ticker/price", {"symbol": self.market_symbol(symbol)})
        try:
            price = float(payload["price"])
        except (KeyError, TypeError, ValueError) as e:
            raise PriceUnavailableError(f"Unexpected ticker payload for {symbol}: {payload!r}") from e
        return price if price > 0 else None

    def get_daily_closes(self, symbol: str, start: date, end: date) -> dict[date, float]:
        """Return daily closes (UTC days) between ``start`` and ``end`` inclusive.

        Raises:
            PriceUnavailableError: If a request fails
        """
        closes: dict[date, float] = {}
        start_ms = _to_ms(start)
        end_ms = _to_ms(end + timedelta(days=1)) - 1
        while start_ms <= end_ms:
            rows = self._get(
                "/api/v3/klines",
                {
                    "symbol": self.market_symbol(symbol),
                    "interval": "1d",
                    "startTime": start_ms,
                    "endTime": end_ms,
                    "limit": KLINES_LIMIT,
                },
            )
            if not rows:
                break
            for row in rows:
                try:
                    opened = datetime.fromtimestamp(int(row[0]) / 1000, tz=UTC).date()
                    closes[opened] = float(row[4])
                except (IndexError, TypeError, ValueError):
                    logger.debug("Skipping malformed kline for %s: %r", symbol, row)
            if len(rows) < KLINES_LIMIT:
                break
            start_ms = int(rows[-1][0]) + MS_PER_DAY
        logger.debug("Fetched %d closes for %s", len(closes), symbol)
        return closes
