"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, making it easy to change when
the database schema changes.
"""

from simperfi.domain import entities as domain
from simperfi.domain.entities import normalize_account_type
from simperfi.database.models import (
    Account as ORMAccount,
    Trade as ORMTrade,
    LedgerEntry as ORMLedgerEntry,
    TargetAllocation as ORMTargetAllocation,
)


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        name=orm_account.name,
        account_type=normalize_account_type(orm_account.account_type),
        created_at=orm_account.created_at,
    )


def trade_to_domain(orm_trade: ORMTrade) -> domain.Trade:
    """Convert SQLAlchemy Trade model to domain Trade entity."""
    return domain.Trade(
        id=orm_trade.id,
        timestamp=orm_trade.timestamp,
        kind=domain.TradeKind(orm_trade.kind),
        notes=orm_trade.notes,
        pair=orm_trade.pair,
        pair_price=orm_trade.pair_price,
    )


def ledger_entry_to_domain(orm_entry: ORMLedgerEntry) -> domain.LedgerEntry:
    """Convert SQLAlchemy LedgerEntry model to domain LedgerEntry entity."""
    return domain.LedgerEntry(
        id=orm_entry.id,
        trade_id=orm_entry.trade_id,
        account_id=orm_entry.account_id,
        asset=orm_entry.asset,
        amount=orm_entry.amount,
        usd_price=orm_entry.usd_price,
    )


def target_allocation_to_domain(orm_target: ORMTargetAllocation) -> domain.TargetAllocation:
    """Convert SQLAlchemy TargetAllocation model to domain entity."""
    return domain.TargetAllocation(
        asset=orm_target.asset,
        percentage=orm_target.percentage,
    )
