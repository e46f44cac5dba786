"""Trade domain service.

Records financial events as a trade plus its ledger legs, written in one
atomic store call so a trade never exists with only some of its legs.
"""

import logging
import math
import re
from datetime import datetime
from typing import Optional, Sequence

from simperfi.database.base import Database
from simperfi.domain.entities import (
    LedgerEntry as LedgerEntryEntity,
    LedgerLeg,
    Trade as TradeEntity,
    TradeKind,
)
from simperfi.domain.errors import (
    NotFoundError,
    ValidationError,
    account_not_found,
    invalid_symbol,
    non_positive_quantity,
    trade_not_found,
)
from simperfi.domain.stablecoins import stablecoin_price

logger = logging.getLogger(__name__)

SYMBOL_PATTERN = re.compile(r"^[A-Z0-9.\-]{1,20}$")


def normalize_symbol(symbol: str) -> str:
    """Strip and upper-case an asset symbol.

    Raises:
        ValidationError: If the symbol is malformed
    """
    normalized = (symbol or "").strip().upper()
    if not SYMBOL_PATTERN.match(normalized):
        raise ValidationError(invalid_symbol(symbol))
    return normalized


def require_positive(name: str, value: float) -> float:
    """Return ``value`` as float if it is finite and greater than zero."""
    value = float(value)
    if not math.isfinite(value) or value <= 0:
        raise ValidationError(non_positive_quantity(name, value))
    return value


def optional_price(name: str, value: Optional[float]) -> Optional[float]:
    """Validate an optional USD price (finite, not negative)."""
    if value is None:
        return None
    value = float(value)
    if not math.isfinite(value) or value < 0:
        raise ValidationError(f"{name} must be a non-negative number, got {value}")
    return value


def naive_timestamp(timestamp: Optional[datetime]) -> datetime:
    """Return a naive local timestamp, defaulting to now."""
    if timestamp is None:
        return datetime.now()
    if timestamp.tzinfo is not None:
        return timestamp.astimezone().replace(tzinfo=None)
    return timestamp


class TradeService:
    """Service for recording and managing trades."""

    def __init__(self, db: Database):
        """Initialize trade service.

        Args:
            db: Database instance
        """
        self.db = db

    def _require_account(self, account_id: int) -> None:
        if self.db.get_account(account_id) is None:
            raise NotFoundError(account_not_found(account_id))

    def _record(
        self,
        kind: TradeKind,
        legs: Sequence[LedgerLeg],
        timestamp: Optional[datetime],
        notes: Optional[str],
        pair: Optional[str] = None,
        pair_price: Optional[float] = None,
    ) -> int:
        for account_id in {leg.account_id for leg in legs}:
            self._require_account(account_id)
        trade_id = self.db.create_trade(
            timestamp=naive_timestamp(timestamp),
            kind=kind,
            legs=legs,
            notes=notes or None,
            pair=pair,
            pair_price=pair_price,
        )
        logger.info("Recorded %s trade %s with %d legs", kind.value, trade_id, len(legs))
        return trade_id

    def record_buy(
        self,
        account_id: int,
        asset: str,
        quantity: float,
        price: float,
        pay_asset: str,
        pay_quantity: Optional[float] = None,
        timestamp: Optional[datetime] = None,
        notes: Optional[str] = None,
    ) -> int:
        """Record buying ``asset`` with ``pay_asset`` at a pair price.

        Args:
            account_id: Account holding both legs
            asset: Asset bought
            quantity: Quantity bought
            price: Price of one unit of ``asset`` in ``pay_asset``
            pay_asset: Asset paid with (usually a stablecoin)
            pay_quantity: Quantity paid, defaults to ``quantity * price``
            timestamp: When the trade happened, defaults to now
            notes: Optional notes

        Returns:
            Trade ID
        """
        asset = normalize_symbol(asset)
        pay_asset = normalize_symbol(pay_asset)
        quantity = require_positive("Quantity", quantity)
        price = require_positive("Price", price)
        pay_quantity = require_positive(
            "Pay quantity", pay_quantity if pay_quantity is not None else quantity * price
        )
        legs = [
            LedgerLeg(account_id=account_id, asset=asset, amount=quantity, usd_price=price),
            LedgerLeg(
                account_id=account_id,
                asset=pay_asset,
                amount=-pay_quantity,
                usd_price=stablecoin_price(pay_asset),
            ),
        ]
        return self._record(
            TradeKind.BUY, legs, timestamp, notes, pair=f"{asset}/{pay_asset}", pair_price=price
        )

    def record_sell(
        self,
        account_id: int,
        asset: str,
        quantity: float,
        price: float,
        receive_asset: str,
        receive_quantity: Optional[float] = None,
        timestamp: Optional[datetime] = None,
        notes: Optional[str] = None,
    ) -> int:
        """Record selling ``asset`` for ``receive_asset`` at a pair price.

        Args:
            account_id: Account holding both legs
            asset: Asset sold
            quantity: Quantity sold
            price: Price of one unit of ``asset`` in ``receive_asset``
            receive_asset: Asset received (usually a stablecoin)
            receive_quantity: Quantity received, defaults to ``quantity * price``
            timestamp: When the trade happened, defaults to now
            notes: Optional notes

        Returns:
            Trade ID
        """
        asset = normalize_symbol(asset)
        receive_asset = normalize_symbol(receive_asset)
        quantity = require_positive("Quantity", quantity)
        price = require_positive("Price", price)
        receive_quantity = require_positive(
            "Receive quantity",
            receive_quantity if receive_quantity is not None else quantity * price,
        )
        legs = [
            LedgerLeg(account_id=account_id, asset=asset, amount=-quantity, usd_price=price),
            LedgerLeg(
                account_id=account_id,
                asset=receive_asset,
                amount=receive_quantity,
                usd_price=stablecoin_price(receive_asset),
            ),
        ]
        return self._record(
            TradeKind.SELL,
            legs,
            timestamp,
            notes,
            pair=f"{asset}/{receive_asset}",
            pair_price=price,
        )

    def record_trade(
        self,
        account_id: int,
        out_asset: str,
        out_quantity: float,
        in_asset: str,
        in_quantity: float,
        out_price: Optional[float] = None,
        in_price: Optional[float] = None,
        timestamp: Optional[datetime] = None,
        notes: Optional[str] = None,
    ) -> int:
        """Record a generic exchange of one asset for another.

        Returns:
            Trade ID
        """
        legs = [
            LedgerLeg(
                account_id=account_id,
                asset=normalize_symbol(out_asset),
                amount=-require_positive("Outgoing quantity", out_quantity),
                usd_price=optional_price("Outgoing price", out_price),
            ),
            LedgerLeg(
                account_id=account_id,
                asset=normalize_symbol(in_asset),
                amount=require_positive("Incoming quantity", in_quantity),
                usd_price=optional_price("Incoming price", in_price),
            ),
        ]
        return self._record(TradeKind.TRADE, legs, timestamp, notes)

    def _record_single(
        self,
        kind: TradeKind,
        account_id: int,
        asset: str,
        quantity: float,
        price: Optional[float],
        timestamp: Optional[datetime],
        notes: Optional[str],
        inflow: bool,
    ) -> int:
        quantity = require_positive("Quantity", quantity)
        leg = LedgerLeg(
            account_id=account_id,
            asset=normalize_symbol(asset),
            amount=quantity if inflow else -quantity,
            usd_price=optional_price("Price", price),
        )
        return self._record(kind, [leg], timestamp, notes)

    def record_deposit(
        self,
        account_id: int,
        asset: str,
        quantity: float,
        price: Optional[float] = None,
        timestamp: Optional[datetime] = None,
        notes: Optional[str] = None,
    ) -> int:
        """Record an asset entering the portfolio at a known cost."""
        return self._record_single(
            TradeKind.DEPOSIT, account_id, asset, quantity, price, timestamp, notes, inflow=True
        )

    def record_withdraw(
        self,
        account_id: int,
        asset: str,
        quantity: float,
        price: Optional[float] = None,
        timestamp: Optional[datetime] = None,
        notes: Optional[str] = None,
    ) -> int:
        """Record an asset leaving the portfolio."""
        return self._record_single(
            TradeKind.WITHDRAW, account_id, asset, quantity, price, timestamp, notes, inflow=False
        )

    def record_gain(
        self,
        account_id: int,
        asset: str,
        quantity: float,
        price: Optional[float] = None,
        timestamp: Optional[datetime] = None,
        notes: Optional[str] = None,
    ) -> int:
        """Record free inventory (rewards, airdrops).

        The price is kept for display only and never enters cost basis.
        """
        return self._record_single(
            TradeKind.GAIN, account_id, asset, quantity, price, timestamp, notes, inflow=True
        )

    def record_loss(
        self,
        account_id: int,
        asset: str,
        quantity: float,
        price: Optional[float] = None,
        timestamp: Optional[datetime] = None,
        notes: Optional[str] = None,
    ) -> int:
        """Record an asset lost (hack, fee, slashing)."""
        return self._record_single(
            TradeKind.LOSS, account_id, asset, quantity, price, timestamp, notes, inflow=False
        )

    def record_transfer(
        self,
        from_account_id: int,
        to_account_id: int,
        asset: str,
        quantity: float,
        timestamp: Optional[datetime] = None,
        notes: Optional[str] = None,
    ) -> int:
        """Record moving an asset between two accounts.

        Raises:
            ValidationError: If source and destination are the same account
        """
        if from_account_id == to_account_id:
            raise ValidationError("Source and destination accounts must differ")
        asset = normalize_symbol(asset)
        quantity = require_positive("Quantity", quantity)
        legs = [
            LedgerLeg(account_id=from_account_id, asset=asset, amount=-quantity),
            LedgerLeg(account_id=to_account_id, asset=asset, amount=quantity),
        ]
        return self._record(TradeKind.TRANSFER, legs, timestamp, notes)

    def get_trade(self, trade_id: int) -> Optional[TradeEntity]:
        """Get trade by ID.

        Args:
            trade_id: Trade ID

        Returns:
            Trade entity or None if not found
        """
        return self.db.get_trade(trade_id)

    def list_trades(self) -> list[TradeEntity]:
        """List all trades, oldest first."""
        return self.db.list_trades()

    def list_entries(self, trade_id: Optional[int] = None) -> list[LedgerEntryEntity]:
        """List ledger entries, optionally for a single trade."""
        return self.db.list_ledger_entries(trade_id=trade_id)

    def update_notes(self, trade_id: int, notes: Optional[str]) -> None:
        """Update trade notes.

        Raises:
            NotFoundError: If trade doesn't exist
        """
        if self.db.get_trade(trade_id) is None:
            raise NotFoundError(trade_not_found(trade_id))
        self.db.update_trade_notes(trade_id, notes)

    def delete_trade(self, trade_id: int) -> None:
        """Delete a trade and all of its ledger entries.

        Raises:
            NotFoundError: If trade doesn't exist
        """
        if self.db.get_trade(trade_id) is None:
            raise NotFoundError(trade_not_found(trade_id))
        self.db.delete_trade(trade_id)
        logger.info("Deleted trade %s", trade_id)
