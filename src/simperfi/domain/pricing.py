"""Price resolution for valuing holdings.

A price is resolved from the first source that can answer, in this order:
manual override, stablecoin peg, live price (today only), historical daily
close on the day, the latest earlier close (forward-fill), the latest
positive price recorded in the ledger, and finally zero.
"""

import logging
import math
import threading
import time
from bisect import bisect_right
from collections import defaultdict
from datetime import date, timedelta
from typing import Callable, Iterable, Mapping, Optional, Protocol, runtime_checkable

from simperfi.domain.entities import LedgerEntry, Trade
from simperfi.domain.errors import PriceUnavailableError
from simperfi.domain.stablecoins import is_stablecoin

logger = logging.getLogger(__name__)

# Days of history fetched before a lookup so forward-fill has something to use
FORWARD_FILL_LOOKBACK_DAYS = 30
DEFAULT_CACHE_TTL_SECONDS = 900.0
DEFAULT_FAILURE_TTL_SECONDS = 60.0


@runtime_checkable
class LivePriceFeed(Protocol):
    def get_live_price(self, symbol: str) -> Optional[float]: ...


@runtime_checkable
class HistoricalPriceSource(Protocol):
    def get_daily_closes(self, symbol: str, start: date, end: date) -> dict[date, float]: ...


def _usable(price: Optional[float]) -> bool:
    return price is not None and math.isfinite(price) and price > 0


class HistoricalPriceCache:
    """Time-boxed cache of daily closes keyed by ``(symbol, start, end)``.

    Lookups of a missing or expired key fetch from the source without waiting
    for other in-flight fetches of the same key. A failed fetch is remembered
    as an empty range for ``failure_ttl_seconds`` so a replay asking for the
    same symbol day after day hits the source once. Expired keys are swept on
    every insert.
    """

    def __init__(
        self,
        source: HistoricalPriceSource,
        ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        failure_ttl_seconds: float = DEFAULT_FAILURE_TTL_SECONDS,
    ):
        """Initialize the cache.

        Args:
            source: Historical price source to fetch from
            ttl_seconds: How long a fetched range stays valid
            clock: Monotonic clock, replaceable in tests
            failure_ttl_seconds: How long a failed fetch is remembered
        """
        self.source = source
        self.ttl_seconds = ttl_seconds
        self.failure_ttl_seconds = failure_ttl_seconds
        self.clock = clock
        # key -> (expires_at, closes)
        self._entries: dict[tuple[str, date, date], tuple[float, dict[date, float]]] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _cached(self, key: tuple[str, date, date]) -> Optional[dict[date, float]]:
        with self._lock:
            cached = self._entries.get(key)
            if cached is None:
                return None
            expires_at, closes = cached
            if self.clock() >= expires_at:
                del self._entries[key]
                return None
            return closes

    def _store(self, key: tuple[str, date, date], closes: dict[date, float], ttl: float) -> None:
        with self._lock:
            now = self.clock()
            expired = [k for k, (expires_at, _) in self._entries.items() if now >= expires_at]
            for k in expired:
                del self._entries[k]
            self._entries[key] = (now + ttl, closes)

    def get_closes(self, symbol: str, start: date, end: date) -> dict[date, float]:
        """Return daily closes for ``symbol`` between ``start`` and ``end``."""
        key = (symbol.upper(), start, end)
        closes = self._cached(key)
        if closes is not None:
            return closes

        try:
            fetched = self.source.get_daily_closes(key[0], start, end)
        except PriceUnavailableError as e:
            logger.warning("Historical prices unavailable for %s: %s", key[0], e)
            self._store(key, {}, self.failure_ttl_seconds)
            return {}

        closes = {day: price for day, price in fetched.items() if _usable(price)}
        self._store(key, closes, self.ttl_seconds)
        return closes

    def clear(self) -> None:
        """Drop every cached range."""
        with self._lock:
            self._entries.clear()


class LedgerPriceIndex:
    """Latest positive ledger price per symbol, as of any day."""

    def __init__(self, entries: Iterable[LedgerEntry], trades: Iterable[Trade]):
        trades_by_id = {trade.id: trade for trade in trades}
        observed: dict[str, list] = defaultdict(list)
        for entry in entries:
            trade = trades_by_id.get(entry.trade_id)
            if trade is None or not _usable(entry.usd_price):
                continue
            observed[entry.asset].append((trade.timestamp, entry.id, entry.usd_price))

        self._days: dict[str, list[date]] = {}
        self._prices: dict[str, list[float]] = {}
        for symbol, rows in observed.items():
            rows.sort(key=lambda row: (row[0], row[1]))
            self._days[symbol] = [row[0].date() for row in rows]
            self._prices[symbol] = [row[2] for row in rows]

    def latest(self, symbol: str, day: date) -> Optional[float]:
        """Return the last price recorded for ``symbol`` on or before ``day``."""
        days = self._days.get(symbol.upper())
        if not days:
            return None
        index = bisect_right(days, day) - 1
        if index < 0:
            return None
        return self._prices[symbol.upper()][index]


class PriceResolver:
    """Best-effort USD price per symbol for today or a past day."""

    def __init__(
        self,
        today: Optional[date] = None,
        manual_overrides: Optional[Mapping[str, float]] = None,
        live_prices: Optional[Mapping[str, float]] = None,
        historical: Optional[HistoricalPriceCache] = None,
        ledger_prices: Optional[LedgerPriceIndex] = None,
        history_start: Optional[date] = None,
    ):
        """Initialize the resolver.

        Args:
            today: The day live prices apply to (defaults to date.today())
            manual_overrides: User-set prices, used regardless of the day
            live_prices: Latest live prices, used only for ``today``
            historical: Cache in front of the historical close source
            ledger_prices: Index of prices recorded in the ledger
            history_start: First day historical ranges are fetched from, so one
                replay shares a single cache key per symbol
        """
        self.today = today or date.today()
        self.manual_overrides = {
            symbol.strip().upper(): price
            for symbol, price in (manual_overrides or {}).items()
            if _usable(price)
        }
        self.live_prices = {
            symbol.strip().upper(): price for symbol, price in (live_prices or {}).items()
        }
        self.historical = historical
        self.ledger_prices = ledger_prices
        self.history_start = history_start

    def is_manual(self, symbol: str) -> bool:
        """Check if ``symbol`` is priced by a manual override."""
        return symbol.upper() in self.manual_overrides

    def _history_range(self, day: date) -> tuple[date, date]:
        start = day - timedelta(days=FORWARD_FILL_LOOKBACK_DAYS)
        if self.history_start is not None and self.history_start <= day:
            start = self.history_start
        return start, max(day, self.today)

    def historical_close(self, symbol: str, day: date) -> Optional[float]:
        """Return the close on ``day``, or the latest close before it."""
        if self.historical is None:
            return None
        start, end = self._history_range(day)
        closes = self.historical.get_closes(symbol, start, end)
        if day in closes:
            return closes[day]
        earlier = [close_day for close_day in closes if close_day <= day]
        if not earlier:
            return None
        return closes[max(earlier)]

    def resolve(self, symbol: str, day: Optional[date] = None) -> float:
        """Resolve the USD price of ``symbol`` on ``day`` (default today).

        Returns:
            Price in USD, 0.0 when every source is exhausted
        """
        symbol = symbol.strip().upper()
        day = day or self.today

        if symbol in self.manual_overrides:
            return self.manual_overrides[symbol]
        if is_stablecoin(symbol):
            return 1.0
        if day == self.today:
            live = self.live_prices.get(symbol)
            if _usable(live):
                return live

        close = self.historical_close(symbol, day)
        if close is not None:
            return close

        if self.ledger_prices is not None:
            recorded = self.ledger_prices.latest(symbol, day)
            if recorded is not None:
                return recorded

        logger.debug("No price for %s on %s", symbol, day)
        return 0.0


def resolve_price(
    symbol: str,
    day: date,
    *,
    manual_overrides: Optional[Mapping[str, float]] = None,
    live_prices: Optional[Mapping[str, float]] = None,
    historical: Optional[HistoricalPriceCache] = None,
    ledger_prices: Optional[LedgerPriceIndex] = None,
    today: Optional[date] = None,
) -> float:
    """Resolve a single price without keeping a resolver around."""
    resolver = PriceResolver(
        today=today,
        manual_overrides=manual_overrides,
        live_prices=live_prices,
        historical=historical,
        ledger_prices=ledger_prices,
    )
    return resolver.resolve(symbol, day)
