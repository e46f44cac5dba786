"""Resolve account references given on the command line."""

from simperfi.domain.account import AccountService
from simperfi.domain.errors import NotFoundError, ValidationError


def resolve_account(account_service: AccountService, account: str | int) -> int:
    """Resolve an account ID or name to an account ID.

    Numeric input is an ID. Otherwise the name is matched exactly, then
    case-insensitively if that leaves a single candidate.

    Raises:
        NotFoundError: If no account matches
        ValidationError: If a case-insensitive name matches several accounts
    """
    if isinstance(account, int) or str(account).strip().isdigit():
        account_id = int(account)
        if account_service.get_account(account_id) is None:
            raise NotFoundError(f"Account ID {account_id} not found")
        return account_id

    name = str(account).strip()
    accounts = account_service.list_accounts()
    for acc in accounts:
        if acc.name == name:
            return acc.id

    folded = [acc for acc in accounts if acc.name.casefold() == name.casefold()]
    if len(folded) == 1:
        return folded[0].id
    if folded:
        names = ", ".join(f"'{acc.name}'" for acc in folded)
        raise ValidationError(f"Account '{name}' is ambiguous: {names}")

    raise NotFoundError(f"Account '{name}' not found")
