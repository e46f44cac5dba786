"""Snapshot recomputation with last-write-wins generations.

The engine is re-run from scratch whenever the ledger or a price changes.
Callers take a generation number before collecting inputs; a result is only
published if no newer generation was requested in the meantime.
"""

import itertools
import logging
import threading
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Mapping, Optional

from simperfi.domain.entities import (
    LedgerEntry,
    PortfolioSnapshot,
    TargetAllocation,
    Trade,
)
from simperfi.domain.history import DEFAULT_WINDOW_DAYS, compute_history
from simperfi.domain.holdings import compute_holdings, transfer_trade_ids
from simperfi.domain.pnl import compute_realized_pnl
from simperfi.domain.pricing import (
    FORWARD_FILL_LOOKBACK_DAYS,
    HistoricalPriceCache,
    LedgerPriceIndex,
    PriceResolver,
)
from simperfi.domain.valuation import value_holdings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EngineInputs:
    """Everything one engine run reads."""

    entries: tuple[LedgerEntry, ...]
    trades: tuple[Trade, ...]
    targets: tuple[TargetAllocation, ...] = ()
    manual_overrides: Mapping[str, float] = field(default_factory=dict)
    live_prices: Mapping[str, float] = field(default_factory=dict)
    today: Optional[date] = None
    history_window: int = DEFAULT_WINDOW_DAYS
    include_history: bool = True


def build_snapshot(
    generation: int,
    inputs: EngineInputs,
    historical: Optional[HistoricalPriceCache] = None,
) -> PortfolioSnapshot:
    """Compute a full snapshot from inputs. Pure apart from cache reads."""
    today = inputs.today or date.today()
    excluded = transfer_trade_ids(inputs.trades)
    resolver = PriceResolver(
        today=today,
        manual_overrides=inputs.manual_overrides,
        live_prices=inputs.live_prices,
        historical=historical,
        ledger_prices=LedgerPriceIndex(inputs.entries, inputs.trades),
        history_start=today - timedelta(days=inputs.history_window + FORWARD_FILL_LOOKBACK_DAYS),
    )

    holdings = compute_holdings(inputs.entries, inputs.trades, excluded)
    valuations = value_holdings(holdings, resolver, inputs.targets)
    total_value = sum(valuation.value for valuation in valuations)
    total_cost_basis = sum(holding.total_cost_basis for holding in holdings)
    unrealized = total_value - total_cost_basis

    history = ()
    if inputs.include_history:
        history = tuple(
            compute_history(
                inputs.entries,
                inputs.trades,
                excluded,
                window=inputs.history_window,
                resolver=resolver,
            )
        )

    return PortfolioSnapshot(
        generation=generation,
        as_of=today,
        holdings=tuple(holdings),
        valuations=tuple(valuations),
        total_value=total_value,
        total_cost_basis=total_cost_basis,
        unrealized_pnl=unrealized,
        unrealized_pnl_percent=(
            unrealized / total_cost_basis * 100 if total_cost_basis > 0 else 0.0
        ),
        realized_pnl=compute_realized_pnl(inputs.entries, inputs.trades),
        history=history,
    )


class PortfolioEngine:
    """Holds the latest published snapshot."""

    def __init__(self, historical: Optional[HistoricalPriceCache] = None):
        """Initialize the engine.

        Args:
            historical: Shared historical price cache, if any
        """
        self.historical = historical
        self._counter = itertools.count(1)
        self._requested = 0
        self._published = 0
        self._snapshot: Optional[PortfolioSnapshot] = None
        self._lock = threading.Lock()

    @property
    def snapshot(self) -> Optional[PortfolioSnapshot]:
        """Latest published snapshot, or None before the first run."""
        with self._lock:
            return self._snapshot

    def next_generation(self) -> int:
        """Reserve a new generation number, superseding older ones."""
        with self._lock:
            generation = next(self._counter)
            self._requested = generation
            return generation

    def recompute(
        self, generation: int, inputs: EngineInputs
    ) -> Optional[PortfolioSnapshot]:
        """Compute and publish a snapshot for ``generation``.

        Returns:
            The published snapshot, or None if the result was superseded
        """
        snapshot = build_snapshot(generation, inputs, self.historical)
        with self._lock:
            if generation < self._requested or generation <= self._published:
                logger.debug(
                    "Discarding generation %s (requested %s, published %s)",
                    generation,
                    self._requested,
                    self._published,
                )
                return None
            self._published = generation
            self._snapshot = snapshot
            return snapshot

    def refresh(self, inputs: EngineInputs) -> Optional[PortfolioSnapshot]:
        """Take a generation and recompute in one call."""
        return self.recompute(self.next_generation(), inputs)
