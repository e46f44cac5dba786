"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Optional, Sequence
from datetime import datetime

# Import entities directly to avoid circular import through the domain services
from simperfi.domain.entities import (
    Account,
    AccountType,
    LedgerEntry,
    LedgerLeg,
    TargetAllocation,
    Trade,
    TradeKind,
)


class Database(ABC):
    """Abstract database interface for simperfi."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Account operations
    @abstractmethod
    def create_account(self, name: str, account_type: AccountType) -> int:
        """Create a new account. Returns account ID."""
        pass

    @abstractmethod
    def get_account(self, account_id: int) -> Optional[Account]:
        """Get account by ID."""
        pass

    @abstractmethod
    def list_accounts(self) -> list[Account]:
        """List all accounts."""
        pass

    @abstractmethod
    def update_account(
        self, account_id: int, name: str, account_type: Optional[AccountType] = None
    ) -> None:
        """Update account name and optionally its type."""
        pass

    @abstractmethod
    def delete_account(self, account_id: int) -> None:
        """Delete an account."""
        pass

    @abstractmethod
    def get_account_entry_count(self, account_id: int) -> int:
        """Get count of ledger entries referencing an account."""
        pass

    # Trade and ledger operations
    @abstractmethod
    def create_trade(
        self,
        timestamp: datetime,
        kind: TradeKind,
        legs: Sequence[LedgerLeg],
        notes: Optional[str] = None,
        pair: Optional[str] = None,
        pair_price: Optional[float] = None,
    ) -> int:
        """Create a trade and its ledger entries atomically. Returns trade ID."""
        pass

    @abstractmethod
    def get_trade(self, trade_id: int) -> Optional[Trade]:
        """Get trade by ID."""
        pass

    @abstractmethod
    def list_trades(self) -> list[Trade]:
        """List all trades, oldest first."""
        pass

    @abstractmethod
    def list_ledger_entries(self, trade_id: Optional[int] = None) -> list[LedgerEntry]:
        """List ledger entries, optionally only those of one trade."""
        pass

    @abstractmethod
    def update_trade_notes(self, trade_id: int, notes: Optional[str]) -> None:
        """Update trade notes."""
        pass

    @abstractmethod
    def delete_trade(self, trade_id: int) -> None:
        """Delete a trade together with its ledger entries."""
        pass

    # Target allocation operations
    @abstractmethod
    def set_target_allocation(self, asset: str, percentage: float) -> None:
        """Create or replace the target allocation for an asset."""
        pass

    @abstractmethod
    def delete_target_allocation(self, asset: str) -> bool:
        """Delete a target allocation. Returns True if one existed."""
        pass

    @abstractmethod
    def list_target_allocations(self) -> list[TargetAllocation]:
        """List target allocations ordered by asset."""
        pass

    # Manual price override operations
    @abstractmethod
    def set_price_override(self, asset: str, price: float) -> None:
        """Create or replace a manual price override."""
        pass

    @abstractmethod
    def delete_price_override(self, asset: str) -> bool:
        """Delete a manual price override. Returns True if one existed."""
        pass

    @abstractmethod
    def list_price_overrides(self) -> dict[str, float]:
        """Return all manual price overrides keyed by asset."""
        pass

    # Bulk operations
    @abstractmethod
    def replace_all(
        self,
        accounts: Sequence[Account],
        trades: Sequence[Trade],
        entries: Sequence[LedgerEntry],
        targets: Sequence[TargetAllocation],
        price_overrides: dict[str, float],
    ) -> None:
        """Replace every record in one atomic write, keeping the given IDs."""
        pass
