"""Realized profit and loss from completed sells."""

import logging
from collections import defaultdict
from typing import Iterable

from simperfi.domain.entities import LedgerEntry, Trade, TradeKind

logger = logging.getLogger(__name__)


def sell_pnl(entries: Iterable[LedgerEntry]) -> float:
    """Return the realized PnL of a single sell trade's entries.

    A sell missing either leg, or whose sold leg carries no price, yields 0.
    A received leg without a price is valued as a USD-pegged asset.
    """
    sold = None
    received = None
    for entry in entries:
        if entry.amount < 0 and sold is None:
            sold = entry
        elif entry.amount > 0 and received is None:
            received = entry

    if sold is None or received is None or sold.usd_price is None:
        return 0.0

    cost_basis = abs(sold.amount) * sold.usd_price
    received_price = received.usd_price if received.usd_price is not None else 1.0
    proceeds = received.amount * received_price
    return proceeds - cost_basis


def compute_realized_pnl(
    entries: Iterable[LedgerEntry], trades: Iterable[Trade]
) -> float:
    """Sum realized PnL in USD across all sell trades.

    Args:
        entries: All ledger entries
        trades: All trades

    Returns:
        Total realized PnL (best effort, incomplete sells contribute zero)
    """
    sell_ids = {trade.id for trade in trades if trade.kind == TradeKind.SELL}
    by_trade: dict[int, list[LedgerEntry]] = defaultdict(list)
    for entry in entries:
        if entry.trade_id in sell_ids:
            by_trade[entry.trade_id].append(entry)

    total = 0.0
    for trade_id in sorted(sell_ids):
        legs = by_trade.get(trade_id, [])
        if len(legs) < 2:
            logger.debug("Sell trade %s is missing a leg; skipped", trade_id)
        total += sell_pnl(sorted(legs, key=lambda entry: entry.id))
    return total
