"""Tests for realized PnL."""

from datetime import datetime

import pytest

from simperfi.domain.entities import LedgerEntry, TradeKind
from simperfi.domain.pnl import compute_realized_pnl, sell_pnl


def test_no_sells_no_pnl(ledger):
    """Test that buys alone realize nothing."""
    ledger.add(
        TradeKind.BUY, datetime(2024, 1, 1), ("BTC", 1.0, 100.0), ("USDT", -100.0, 1.0)
    )

    assert compute_realized_pnl(ledger.entries, ledger.trades) == 0.0


def test_sell_at_same_price_is_zero(ledger):
    """Test a sell whose proceeds equal the sold value."""
    ledger.add(
        TradeKind.SELL, datetime(2024, 1, 2), ("BTC", -1.0, 300.0), ("USDT", 300.0, 1.0)
    )

    assert compute_realized_pnl(ledger.entries, ledger.trades) == pytest.approx(0.0)


def test_sell_with_profit(ledger):
    """Test a sell receiving more than the sold leg's value."""
    ledger.add(
        TradeKind.SELL, datetime(2024, 1, 2), ("ETH", -2.0, 1000.0), ("USDT", 2200.0, 1.0)
    )

    assert compute_realized_pnl(ledger.entries, ledger.trades) == pytest.approx(200.0)


def test_unpriced_proceeds_valued_as_usd(ledger):
    """Test that an unpriced received leg counts one USD per unit."""
    ledger.add(
        TradeKind.SELL, datetime(2024, 1, 2), ("SOL", -10.0, 20.0), ("USDC", 150.0, None)
    )

    assert compute_realized_pnl(ledger.entries, ledger.trades) == pytest.approx(-50.0)


def test_sell_missing_leg_contributes_zero(ledger):
    """Test that an incomplete sell is skipped."""
    ledger.add(TradeKind.SELL, datetime(2024, 1, 2), ("BTC", -1.0, 300.0))
    ledger.add(
        TradeKind.SELL, datetime(2024, 1, 3), ("BTC", -1.0, 100.0), ("USDT", 150.0, 1.0)
    )

    assert compute_realized_pnl(ledger.entries, ledger.trades) == pytest.approx(50.0)


def test_sell_without_sold_price_contributes_zero():
    """Test that a sold leg without a price yields no PnL."""
    entries = [
        LedgerEntry(id=1, trade_id=1, account_id=1, asset="BTC", amount=-1.0, usd_price=None),
        LedgerEntry(id=2, trade_id=1, account_id=1, asset="USDT", amount=500.0, usd_price=1.0),
    ]

    assert sell_pnl(entries) == 0.0


def test_only_sell_trades_count(ledger):
    """Test that trades of other kinds never realize PnL."""
    ledger.add(
        TradeKind.TRADE, datetime(2024, 1, 1), ("ETH", -1.0, 1000.0), ("SOL", 100.0, 50.0)
    )
    ledger.add(TradeKind.WITHDRAW, datetime(2024, 1, 2), ("SOL", -10.0, 80.0))

    assert compute_realized_pnl(ledger.entries, ledger.trades) == 0.0


def test_pnl_is_summed_across_sells(ledger):
    """Test that realized PnL adds up over several sells."""
    ledger.add(
        TradeKind.SELL, datetime(2024, 1, 2), ("BTC", -1.0, 100.0), ("USDT", 300.0, 1.0)
    )
    ledger.add(
        TradeKind.SELL, datetime(2024, 1, 3), ("ETH", -1.0, 200.0), ("USDT", 150.0, 1.0)
    )

    assert compute_realized_pnl(ledger.entries, ledger.trades) == pytest.approx(150.0)
