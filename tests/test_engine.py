"""Tests for the portfolio engine and its generations."""

from datetime import date, datetime

import pytest

from simperfi.domain.engine import EngineInputs, PortfolioEngine, build_snapshot
from simperfi.domain.entities import TargetAllocation, TradeKind
from simperfi.domain.errors import PriceUnavailableError
from simperfi.domain.pricing import HistoricalPriceCache

TODAY = date(2024, 6, 30)


@pytest.fixture
def inputs(ledger):
    ledger.add(
        TradeKind.BUY,
        datetime(2024, 6, 1),
        ("BTC", 1.0, 100.0),
        ("USDT", -100.0, 1.0),
    )
    ledger.add(TradeKind.DEPOSIT, datetime(2024, 5, 1), ("USDT", 300.0, 1.0))
    ledger.add(
        TradeKind.SELL,
        datetime(2024, 6, 10),
        ("BTC", -0.5, 100.0),
        ("USDT", 60.0, 1.0),
    )
    return EngineInputs(
        entries=tuple(ledger.entries),
        trades=tuple(ledger.trades),
        targets=(TargetAllocation(asset="BTC", percentage=50.0),),
        manual_overrides={"BTC": 200.0},
        today=TODAY,
        history_window=5,
    )


def test_build_snapshot_totals(inputs):
    """Test snapshot totals, PnL and valuations."""
    snapshot = build_snapshot(1, inputs)

    assert snapshot.generation == 1
    assert snapshot.as_of == TODAY
    assert [h.asset for h in snapshot.holdings] == ["BTC", "USDT"]
    btc, usdt = snapshot.valuations
    assert btc.value == pytest.approx(100.0)
    assert btc.is_manual_price
    assert btc.unrealized_pnl == pytest.approx(50.0)
    assert usdt.value == pytest.approx(260.0)
    assert snapshot.total_value == pytest.approx(360.0)
    assert snapshot.total_cost_basis == pytest.approx(310.0)
    assert snapshot.unrealized_pnl == pytest.approx(50.0)
    assert snapshot.realized_pnl == pytest.approx(10.0)
    assert btc.target_percent == 50.0
    assert btc.drift_percent == pytest.approx(100.0 / 360.0 * 100 - 50.0)
    assert len(snapshot.history) == 6
    assert snapshot.history[-1].value == pytest.approx(snapshot.total_value)


def test_snapshot_without_history(inputs):
    """Test skipping the history replay."""
    from dataclasses import replace

    snapshot = build_snapshot(1, replace(inputs, include_history=False))

    assert snapshot.history == ()


def test_recompute_publishes_snapshot(inputs):
    """Test a normal recompute."""
    engine = PortfolioEngine()
    generation = engine.next_generation()

    snapshot = engine.recompute(generation, inputs)

    assert snapshot is not None
    assert engine.snapshot is snapshot
    assert snapshot.generation == generation


def test_superseded_generation_is_discarded(inputs):
    """Test that a stale result never replaces a newer request."""
    engine = PortfolioEngine()
    stale = engine.next_generation()
    fresh = engine.next_generation()

    assert engine.recompute(stale, inputs) is None
    assert engine.snapshot is None

    published = engine.recompute(fresh, inputs)
    assert published is not None
    assert published.generation == fresh


def test_older_result_after_newer_publish_is_discarded(inputs):
    """Test that a finished generation cannot be published twice."""
    engine = PortfolioEngine()
    generation = engine.next_generation()
    first = engine.recompute(generation, inputs)

    assert engine.recompute(generation, inputs) is None
    assert engine.snapshot is first


def test_refresh_takes_new_generation(inputs):
    """Test refresh across successive runs."""
    engine = PortfolioEngine()

    first = engine.refresh(inputs)
    second = engine.refresh(inputs)

    assert second.generation == first.generation + 1
    assert engine.snapshot is second


class DeadSource:
    def __init__(self):
        self.calls = 0

    def get_daily_closes(self, symbol, start, end):
        self.calls += 1
        raise PriceUnavailableError(f"{symbol} is delisted")


def test_dead_asset_queried_once_per_snapshot(ledger):
    """Test that a month of history over an unpriced asset makes one source call."""
    ledger.add(TradeKind.BUY, datetime(2024, 5, 1), ("DEAD", 10.0, 3.0))
    source = DeadSource()
    inputs = EngineInputs(
        entries=tuple(ledger.entries),
        trades=tuple(ledger.trades),
        today=TODAY,
        history_window=30,
    )

    snapshot = build_snapshot(1, inputs, historical=HistoricalPriceCache(source))

    assert len(snapshot.history) == 31
    assert source.calls == 1
