"""Account domain service."""

from typing import Optional
from simperfi.database.base import Database
from simperfi.domain.entities import Account as AccountEntity, AccountType, normalize_account_type
from simperfi.domain.errors import (
    ConflictError,
    DependencyError,
    NotFoundError,
    ValidationError,
    account_delete_blocked,
    account_not_found,
    duplicate_account_name,
)

ACCOUNT_TYPE_LABELS = {
    AccountType.CRYPTO_WALLET: "Crypto Wallet",
    AccountType.BANK_ACCOUNT: "Bank Account",
    AccountType.PLATFORM: "Exchange / Platform",
    AccountType.CUSTODY: "Custody / Staking",
    AccountType.OTHER: "Other",
}


def account_type_label(account_type: AccountType) -> str:
    """Return the display label for an account type."""
    return ACCOUNT_TYPE_LABELS[account_type]


class AccountService:
    """Service for managing accounts."""

    def __init__(self, db: Database):
        """Initialize account service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_account(
        self, name: str, account_type: AccountType = AccountType.CRYPTO_WALLET
    ) -> int:
        """Create a new account.

        Args:
            name: Account name
            account_type: Kind of account

        Returns:
            Account ID

        Raises:
            ValidationError: If the name is empty
            ConflictError: If account name already exists
        """
        name = name.strip()
        if not name:
            raise ValidationError("Account name is required")

        for acc in self.db.list_accounts():
            if acc.name == name:
                raise ConflictError(duplicate_account_name(name))

        return self.db.create_account(name=name, account_type=account_type)

    def get_account(self, account_id: int) -> Optional[AccountEntity]:
        """Get account by ID.

        Args:
            account_id: Account ID

        Returns:
            Account entity or None if not found
        """
        return self.db.get_account(account_id)

    def list_accounts(self) -> list[AccountEntity]:
        """List all accounts.

        Returns:
            List of account entities
        """
        return self.db.list_accounts()

    def rename_account(
        self, account_id: int, name: str, account_type: Optional[AccountType] = None
    ) -> None:
        """Rename an account.

        Args:
            account_id: Account ID to rename
            name: New account name
            account_type: Optional new type (if None, the type is not updated)

        Raises:
            NotFoundError: If account not found
            ConflictError: If the name is taken by another account
        """
        if self.db.get_account(account_id) is None:
            raise NotFoundError(account_not_found(account_id))

        for acc in self.db.list_accounts():
            if acc.id != account_id and acc.name == name:
                raise ConflictError(duplicate_account_name(name))

        self.db.update_account(account_id=account_id, name=name, account_type=account_type)

    def delete_account(self, account_id: int) -> None:
        """Delete an account.

        Args:
            account_id: Account ID to delete

        Raises:
            NotFoundError: If account not found
            DependencyError: If ledger entries still reference the account
        """
        if self.db.get_account(account_id) is None:
            raise NotFoundError(account_not_found(account_id))

        entry_count = self.db.get_account_entry_count(account_id)
        if entry_count > 0:
            raise DependencyError(account_delete_blocked(account_id, entry_count))

        self.db.delete_account(account_id)
