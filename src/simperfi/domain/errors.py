"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""


class PriceUnavailableError(Exception):
    """A price source could not answer a request."""


def account_not_found(account_id: int) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def trade_not_found(trade_id: int) -> str:
    """Return message for missing trade."""
    return f"Trade {trade_id} not found"


def duplicate_account_name(name: str) -> str:
    """Return message for duplicate account name."""
    return f"Account with name '{name}' already exists"


def account_delete_blocked(account_id: int, entry_count: int) -> str:
    """Return message when account still has ledger entries."""
    return (
        f"Cannot delete account {account_id}: it has {entry_count} "
        f"ledger entr{'ies' if entry_count != 1 else 'y'}. "
        "Please delete the transactions first."
    )


def invalid_symbol(symbol: str) -> str:
    """Return message for a malformed asset symbol."""
    return f"Invalid asset symbol '{symbol}'"


def non_positive_quantity(name: str, value: float) -> str:
    """Return message for a quantity that must be positive."""
    return f"{name} must be greater than zero, got {value}"
