"""Portfolio domain service.

Glue between the store, the price feeds and the engine: loads the full
ledger, fetches what the engine needs and publishes a snapshot.
"""

import logging
from datetime import date
from typing import Iterable, Optional

from simperfi.database.base import Database
from simperfi.domain.engine import EngineInputs, PortfolioEngine
from simperfi.domain.entities import Holding, HistoryPoint, PortfolioSnapshot
from simperfi.domain.errors import PriceUnavailableError
from simperfi.domain.history import DEFAULT_WINDOW_DAYS
from simperfi.domain.holdings import compute_holdings, transfer_trade_ids
from simperfi.domain.pnl import compute_realized_pnl
from simperfi.domain.pricing import HistoricalPriceCache, LivePriceFeed
from simperfi.domain.stablecoins import is_stablecoin

logger = logging.getLogger(__name__)


class PortfolioService:
    """Service computing holdings, PnL and history from the stored ledger."""

    def __init__(
        self,
        db: Database,
        live_feed: Optional[LivePriceFeed] = None,
        historical: Optional[HistoricalPriceCache] = None,
        engine: Optional[PortfolioEngine] = None,
    ):
        """Initialize portfolio service.

        Args:
            db: Database instance
            live_feed: Live price feed, or None to work offline
            historical: Historical close cache, or None to work offline
            engine: Engine to publish snapshots to (a new one by default)
        """
        self.db = db
        self.live_feed = live_feed
        self.engine = engine or PortfolioEngine(historical=historical)

    def fetch_live_prices(self, symbols: Iterable[str]) -> dict[str, float]:
        """Fetch live prices for symbols, skipping those the feed can't price."""
        prices: dict[str, float] = {}
        if self.live_feed is None:
            return prices
        overrides = self.db.list_price_overrides()
        for symbol in sorted(set(symbols)):
            if symbol in overrides or is_stablecoin(symbol):
                continue
            try:
                price = self.live_feed.get_live_price(symbol)
            except PriceUnavailableError as e:
                logger.warning("Live price unavailable for %s: %s", symbol, e)
                continue
            if price is not None:
                prices[symbol] = price
        return prices

    def holdings(self) -> list[Holding]:
        """Return current holdings (transfers excluded)."""
        trades = self.db.list_trades()
        entries = self.db.list_ledger_entries()
        return compute_holdings(entries, trades, transfer_trade_ids(trades))

    def realized_pnl(self) -> float:
        """Return realized PnL over all sells."""
        return compute_realized_pnl(self.db.list_ledger_entries(), self.db.list_trades())

    def build_inputs(
        self,
        history_window: int = DEFAULT_WINDOW_DAYS,
        include_history: bool = True,
        today: Optional[date] = None,
    ) -> EngineInputs:
        """Read everything one engine run needs from the store and feeds."""
        trades = tuple(self.db.list_trades())
        entries = tuple(self.db.list_ledger_entries())
        held = [
            holding.asset
            for holding in compute_holdings(entries, trades, transfer_trade_ids(trades))
        ]
        return EngineInputs(
            entries=entries,
            trades=trades,
            targets=tuple(self.db.list_target_allocations()),
            manual_overrides=self.db.list_price_overrides(),
            live_prices=self.fetch_live_prices(held),
            today=today,
            history_window=history_window,
            include_history=include_history,
        )

    def snapshot(
        self,
        history_window: int = DEFAULT_WINDOW_DAYS,
        include_history: bool = True,
        today: Optional[date] = None,
    ) -> Optional[PortfolioSnapshot]:
        """Recompute and return a fresh snapshot.

        Returns:
            The snapshot, or None if a newer recompute superseded this one
        """
        generation = self.engine.next_generation()
        inputs = self.build_inputs(history_window, include_history, today)
        return self.engine.recompute(generation, inputs)

    def history(
        self, history_window: int = DEFAULT_WINDOW_DAYS, today: Optional[date] = None
    ) -> list[HistoryPoint]:
        """Return the daily value series for the trailing window."""
        snapshot = self.snapshot(history_window=history_window, today=today)
        if snapshot is None:
            snapshot = self.engine.snapshot
        return list(snapshot.history) if snapshot is not None else []
