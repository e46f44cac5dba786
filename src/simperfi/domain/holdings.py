"""Holdings calculator.

Replays ledger entries per asset and folds them into a weighted-average cost
position. The calculation is a pure function of its inputs.
"""

import logging
from collections import defaultdict
from typing import Collection, Iterable, Optional

from simperfi.domain.entities import Holding, LedgerEntry, Trade, TradeKind

logger = logging.getLogger(__name__)

DUST_THRESHOLD = 1e-8


def transfer_trade_ids(trades: Iterable[Trade]) -> set[int]:
    """Return IDs of transfer trades, which never count toward holdings."""
    return {trade.id for trade in trades if trade.kind == TradeKind.TRANSFER}


def order_entries(
    entries: Iterable[LedgerEntry], trades_by_id: dict[int, Trade]
) -> list[LedgerEntry]:
    """Sort entries by their trade timestamp, using entry ID as tie-breaker.

    Entries whose trade is missing are dropped.
    """
    known = [entry for entry in entries if entry.trade_id in trades_by_id]
    return sorted(
        known, key=lambda entry: (trades_by_id[entry.trade_id].timestamp, entry.id)
    )


def fold_asset(
    asset: str,
    entries: Iterable[LedgerEntry],
    trades_by_id: dict[int, Trade],
) -> Optional[Holding]:
    """Fold one asset's ordered entries into a holding.

    Cost basis is depleted at the blended average cost of everything held.
    ``paid`` tracks the units that carry a cost, so gains grow the amount
    without moving the average buy price.

    Args:
        asset: Asset symbol the entries belong to
        entries: Entries for ``asset`` in replay order
        trades_by_id: Trade lookup used to recognise gains

    Returns:
        Holding, or None if nothing positive remains
    """
    quantity = 0.0
    paid = 0.0
    cost_basis = 0.0
    last_buy_price = 0.0

    for entry in entries:
        amount = entry.amount
        if amount > 0:
            trade = trades_by_id.get(entry.trade_id)
            if trade is not None and trade.kind == TradeKind.GAIN:
                quantity += amount
                continue
            price = entry.usd_price or 0.0
            cost_basis += amount * price
            quantity += amount
            paid += amount
            if price > 0:
                last_buy_price = price
        elif amount < 0:
            removed = -amount
            if removed >= quantity:
                if removed - quantity >= DUST_THRESHOLD:
                    logger.warning(
                        "Entry %s removes %s %s but only %s is held; clamping",
                        entry.id,
                        removed,
                        asset,
                        quantity,
                    )
                quantity = paid = cost_basis = 0.0
                continue
            remaining = 1.0 - removed / quantity
            cost_basis *= remaining
            paid *= remaining
            quantity -= removed

    if abs(quantity) < DUST_THRESHOLD:
        return None

    return Holding(
        asset=asset,
        amount=quantity,
        avg_buy_price=cost_basis / paid if paid > 0 else 0.0,
        total_cost_basis=cost_basis,
        last_buy_price=last_buy_price,
    )


def compute_holdings(
    entries: Iterable[LedgerEntry],
    trades: Iterable[Trade],
    excluded_trade_ids: Optional[Collection[int]] = None,
) -> list[Holding]:
    """Compute current holdings from the full ledger.

    Args:
        entries: All ledger entries (may be empty)
        trades: All trades the entries belong to
        excluded_trade_ids: Trade IDs to leave out, normally the transfers

    Returns:
        Holdings with a strictly positive amount, sorted by asset symbol
    """
    trades_by_id = {trade.id: trade for trade in trades}
    excluded = excluded_trade_ids or ()

    grouped: dict[str, list[LedgerEntry]] = defaultdict(list)
    for entry in order_entries(entries, trades_by_id):
        if entry.trade_id in excluded:
            continue
        grouped[entry.asset].append(entry)

    holdings = []
    for asset in sorted(grouped):
        holding = fold_asset(asset, grouped[asset], trades_by_id)
        if holding is not None:
            holdings.append(holding)
    return holdings
