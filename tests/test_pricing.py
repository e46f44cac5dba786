"""Tests for price resolution and the historical price cache."""

from datetime import date, datetime, timedelta

import pytest

from simperfi.domain.entities import TradeKind
from simperfi.domain.errors import PriceUnavailableError
from simperfi.domain.pricing import (
    HistoricalPriceCache,
    LedgerPriceIndex,
    PriceResolver,
    resolve_price,
)

TODAY = date(2024, 6, 30)


class FakeHistory:
    """Historical source returning fixed closes and counting calls."""

    def __init__(self, closes=None, fail=False):
        self.closes = closes or {}
        self.fail = fail
        self.calls = []

    def get_daily_closes(self, symbol, start, end):
        self.calls.append((symbol, start, end))
        if self.fail:
            raise PriceUnavailableError("source down")
        return {
            day: price
            for day, price in self.closes.get(symbol, {}).items()
            if start <= day <= end
        }


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def test_manual_override_wins():
    """Test that a manual price outranks every other source."""
    history = HistoricalPriceCache(FakeHistory({"BTC": {TODAY: 60000.0}}))
    resolver = PriceResolver(
        today=TODAY,
        manual_overrides={"btc": 1.0},
        live_prices={"BTC": 65000.0},
        historical=history,
    )

    assert resolver.resolve("BTC") == 1.0
    assert resolver.resolve("BTC", TODAY - timedelta(days=10)) == 1.0
    assert resolver.is_manual("btc")


def test_manual_override_on_stablecoin():
    """Test that an override also applies to a stablecoin."""
    resolver = PriceResolver(today=TODAY, manual_overrides={"USDT": 0.98})

    assert resolver.resolve("USDT") == 0.98


def test_stablecoin_pegged_to_one():
    """Test that stablecoins resolve to one without any source."""
    resolver = PriceResolver(today=TODAY, live_prices={"USDC": 0.5})

    assert resolver.resolve("usdc") == 1.0
    assert resolver.resolve("DAI", date(2020, 1, 1)) == 1.0


def test_live_price_only_applies_today():
    """Test that live prices are used for today and ignored for past days."""
    history = HistoricalPriceCache(
        FakeHistory({"ETH": {TODAY - timedelta(days=1): 3000.0, TODAY: 3100.0}})
    )
    resolver = PriceResolver(today=TODAY, live_prices={"ETH": 3500.0}, historical=history)

    assert resolver.resolve("ETH") == 3500.0
    assert resolver.resolve("ETH", TODAY - timedelta(days=1)) == 3000.0


def test_historical_exact_close():
    """Test that the close of the requested day is used."""
    history = HistoricalPriceCache(FakeHistory({"SOL": {date(2024, 6, 1): 150.0}}))
    resolver = PriceResolver(today=TODAY, historical=history)

    assert resolver.resolve("SOL", date(2024, 6, 1)) == 150.0


def test_historical_forward_fill():
    """Test that a missing day uses the latest earlier close."""
    history = HistoricalPriceCache(
        FakeHistory({"SOL": {date(2024, 6, 1): 150.0, date(2024, 6, 3): 160.0}})
    )
    resolver = PriceResolver(today=TODAY, historical=history)

    assert resolver.resolve("SOL", date(2024, 6, 2)) == 150.0
    assert resolver.resolve("SOL", date(2024, 6, 10)) == 160.0


def test_ledger_price_fallback(ledger):
    """Test that the latest ledger price on or before the day is used."""
    ledger.add(TradeKind.BUY, datetime(2024, 6, 1, 12), ("XYZ", 10.0, 2.0))
    ledger.add(TradeKind.BUY, datetime(2024, 6, 5, 9), ("XYZ", 10.0, 3.0))
    ledger.add(TradeKind.GAIN, datetime(2024, 6, 6), ("XYZ", 1.0, None))
    index = LedgerPriceIndex(ledger.entries, ledger.trades)
    resolver = PriceResolver(today=TODAY, historical=None, ledger_prices=index)

    assert resolver.resolve("XYZ", date(2024, 5, 31)) == 0.0
    assert resolver.resolve("XYZ", date(2024, 6, 1)) == 2.0
    assert resolver.resolve("XYZ", date(2024, 6, 4)) == 2.0
    assert resolver.resolve("XYZ", TODAY) == 3.0


def test_unknown_symbol_resolves_to_zero():
    """Test that an exhausted chain returns zero."""
    resolver = PriceResolver(today=TODAY, historical=HistoricalPriceCache(FakeHistory()))

    assert resolver.resolve("NOPE") == 0.0


def test_source_failure_falls_through(ledger):
    """Test that a failing historical source falls back to ledger prices."""
    ledger.add(TradeKind.BUY, datetime(2024, 6, 1), ("BTC", 1.0, 50000.0))
    resolver = PriceResolver(
        today=TODAY,
        historical=HistoricalPriceCache(FakeHistory(fail=True)),
        ledger_prices=LedgerPriceIndex(ledger.entries, ledger.trades),
    )

    assert resolver.resolve("BTC", date(2024, 6, 2)) == 50000.0


def test_non_positive_live_price_is_ignored():
    """Test that a zero live price does not win."""
    history = HistoricalPriceCache(FakeHistory({"ADA": {TODAY: 0.4}}))
    resolver = PriceResolver(today=TODAY, live_prices={"ADA": 0.0}, historical=history)

    assert resolver.resolve("ADA") == 0.4


def test_history_start_shares_cache_key():
    """Test that one replay fetches a single range per symbol."""
    source = FakeHistory({"BTC": {TODAY - timedelta(days=3): 100.0}})
    cache = HistoricalPriceCache(source)
    resolver = PriceResolver(
        today=TODAY, historical=cache, history_start=TODAY - timedelta(days=60)
    )

    for offset in range(10):
        resolver.resolve("BTC", TODAY - timedelta(days=offset))

    assert len(source.calls) == 1
    assert source.calls[0] == ("BTC", TODAY - timedelta(days=60), TODAY)


def test_cache_hit_within_ttl_and_refetch_after():
    """Test that cached ranges expire after the TTL."""
    source = FakeHistory({"ETH": {TODAY: 3000.0}})
    clock = FakeClock()
    cache = HistoricalPriceCache(source, ttl_seconds=60, clock=clock)

    assert cache.get_closes("ETH", TODAY, TODAY) == {TODAY: 3000.0}
    clock.now = 59
    cache.get_closes("eth", TODAY, TODAY)
    assert len(source.calls) == 1

    clock.now = 61
    cache.get_closes("ETH", TODAY, TODAY)
    assert len(source.calls) == 2
    assert len(cache) == 1


def test_cache_remembers_failures_briefly():
    """Test that a failed fetch is served empty until the failure TTL passes."""
    source = FakeHistory({"ETH": {TODAY: 3000.0}}, fail=True)
    clock = FakeClock()
    cache = HistoricalPriceCache(source, ttl_seconds=900, clock=clock, failure_ttl_seconds=30)

    assert cache.get_closes("ETH", TODAY, TODAY) == {}
    clock.now = 29
    source.fail = False
    assert cache.get_closes("ETH", TODAY, TODAY) == {}
    assert len(source.calls) == 1

    clock.now = 30
    assert cache.get_closes("ETH", TODAY, TODAY) == {TODAY: 3000.0}
    assert len(source.calls) == 2


def test_failing_source_hit_once_per_replay(ledger):
    """Test that a replay over a dead symbol asks the source only once."""
    ledger.add(TradeKind.BUY, datetime(2024, 6, 1), ("DEAD", 5.0, 2.0))
    source = FakeHistory(fail=True)
    cache = HistoricalPriceCache(source)
    resolver = PriceResolver(
        today=TODAY,
        historical=cache,
        ledger_prices=LedgerPriceIndex(ledger.entries, ledger.trades),
        history_start=TODAY - timedelta(days=60),
    )

    for offset in range(31):
        assert resolver.resolve("DEAD", TODAY - timedelta(days=offset)) in (0.0, 2.0)

    assert len(source.calls) == 1


def test_expired_entries_swept_on_insert():
    """Test that stale keys are dropped when a new range is stored."""
    source = FakeHistory({"ETH": {TODAY: 3000.0}, "BTC": {TODAY: 60000.0}})
    clock = FakeClock()
    cache = HistoricalPriceCache(source, ttl_seconds=60, clock=clock)

    for offset in range(5):
        day = TODAY - timedelta(days=offset)
        cache.get_closes("ETH", day, TODAY)
    assert len(cache) == 5

    clock.now = 61
    cache.get_closes("BTC", TODAY, TODAY)
    assert len(cache) == 1


def test_cache_drops_unusable_closes():
    """Test that zero or negative closes never reach the resolver."""
    source = FakeHistory({"BAD": {TODAY - timedelta(days=1): 5.0, TODAY: 0.0}})
    cache = HistoricalPriceCache(source)
    resolver = PriceResolver(today=TODAY, historical=cache)

    assert resolver.resolve("BAD") == 5.0


def test_cache_clear():
    """Test that clear empties the cache."""
    cache = HistoricalPriceCache(FakeHistory({"ETH": {TODAY: 1.0}}))
    cache.get_closes("ETH", TODAY, TODAY)
    cache.clear()

    assert len(cache) == 0


def test_resolve_price_function():
    """Test the one-shot resolve_price helper."""
    assert resolve_price("BTC", TODAY, manual_overrides={"BTC": 42.0}, today=TODAY) == 42.0
    assert resolve_price("USDT", TODAY, today=TODAY) == 1.0
    assert resolve_price("BTC", TODAY, today=TODAY) == pytest.approx(0.0)
