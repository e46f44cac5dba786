"""Portfolio value history.

Every day in the window replays the ledger from scratch up to that day and
values the result with the prices of that day.
"""

import logging
from datetime import date, timedelta
from typing import Collection, Iterable, Optional

from simperfi.domain.entities import HistoryPoint, LedgerEntry, Trade
from simperfi.domain.errors import ValidationError
from simperfi.domain.holdings import compute_holdings
from simperfi.domain.pricing import PriceResolver

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_DAYS = 30


def window_days(window: int, today: date) -> list[date]:
    """Return the ``window + 1`` calendar days ending on ``today``."""
    if window < 0:
        raise ValidationError(f"History window must not be negative, got {window}")
    start = today - timedelta(days=window)
    return [start + timedelta(days=offset) for offset in range(window + 1)]


def value_on(
    day: date,
    entries: list[LedgerEntry],
    trades: list[Trade],
    trade_days: dict[int, date],
    excluded_trade_ids: Optional[Collection[int]],
    resolver: PriceResolver,
) -> float:
    """Replay the ledger up to ``day`` and return the portfolio value."""
    visible = [
        entry
        for entry in entries
        if entry.trade_id in trade_days and trade_days[entry.trade_id] <= day
    ]
    total = 0.0
    for holding in compute_holdings(visible, trades, excluded_trade_ids):
        price = resolver.resolve(holding.asset, day)
        if price <= 0:
            logger.debug("No price for %s on %s; valued at zero", holding.asset, day)
            continue
        total += holding.amount * price
    return total


def compute_history(
    entries: Iterable[LedgerEntry],
    trades: Iterable[Trade],
    excluded_trade_ids: Optional[Collection[int]] = None,
    window: int = DEFAULT_WINDOW_DAYS,
    resolver: Optional[PriceResolver] = None,
) -> list[HistoryPoint]:
    """Compute the daily portfolio value series.

    Args:
        entries: All ledger entries
        trades: All trades
        excluded_trade_ids: Trade IDs left out of holdings math (transfers)
        window: Number of days before today to include
        resolver: Price resolver; its ``today`` anchors the window. A resolver
            without any source values everything at zero.

    Returns:
        One HistoryPoint per day, oldest first, ending today
    """
    entries = list(entries)
    trades = list(trades)
    resolver = resolver or PriceResolver()
    trade_days = {trade.id: trade.timestamp.date() for trade in trades}

    return [
        HistoryPoint(
            date=day,
            value=value_on(day, entries, trades, trade_days, excluded_trade_ids, resolver),
        )
        for day in window_days(window, resolver.today)
    ]
