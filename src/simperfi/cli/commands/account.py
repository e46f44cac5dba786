"""Account management commands."""

import click
from simperfi.cli.account_resolution import resolve_account_or_exit
from simperfi.cli.error_handling import handle_domain_error
from simperfi.domain.account import AccountService, account_type_label, normalize_account_type
from simperfi.domain.entities import AccountType

ACCOUNT_TYPE_CHOICES = [t.value for t in AccountType] + ["hot", "cold", "exchange", "staked"]


@click.group()
def account_group():
    """Manage accounts."""
    pass


@account_group.command("create")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option(
    "--type",
    "account_type",
    type=click.Choice(ACCOUNT_TYPE_CHOICES, case_sensitive=False),
    default=AccountType.CRYPTO_WALLET.value,
    show_default=True,
    help="Kind of account",
)
@click.pass_context
def create_account(ctx, name: str, account_type: str):
    """Create a new account.

    Examples:
        simperfi account create "Ledger Nano"
        simperfi account create "Binance" --type platform
        simperfi account create "Checking" --type bank_account
    """
    db = ctx.obj["db"]
    service = AccountService(db)
    resolved_type = normalize_account_type(account_type)

    try:
        account_id = service.create_account(name=name, account_type=resolved_type)
        click.echo(f"Created account '{name.strip()}' (ID: {account_id})")
        click.echo(f"Type: {account_type_label(resolved_type)}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@account_group.command("list")
@click.pass_context
def list_accounts(ctx):
    """List all accounts."""
    db = ctx.obj["db"]
    service = AccountService(db)

    accounts = service.list_accounts()
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 60)
    for acc in accounts:
        click.echo(
            f"ID: {acc.id:3d} | {acc.name:20s} | Type: {account_type_label(acc.account_type)}"
        )


@account_group.command("rename")
@click.argument("account", metavar="ACCOUNT")
@click.argument("new_name", metavar="NEW_NAME")
@click.option(
    "--type",
    "account_type",
    type=click.Choice(ACCOUNT_TYPE_CHOICES, case_sensitive=False),
    help="New account type (optional)",
)
@click.pass_context
def rename_account(ctx, account: str, new_name: str, account_type: str | None) -> None:
    """Rename an account.

    ACCOUNT can be an account name or ID.
    NEW_NAME is the new name for the account.

    Examples:
        simperfi account rename "Binance" "Binance Spot"
        simperfi account rename 1 "Cold Storage" --type custody
    """
    db = ctx.obj["db"]
    service = AccountService(db)
    account_id = resolve_account_or_exit(ctx, service, account)
    resolved_type = normalize_account_type(account_type) if account_type else None

    try:
        service.rename_account(account_id=account_id, name=new_name, account_type=resolved_type)
        click.echo(f"Renamed account to '{new_name}'")
        if resolved_type is not None:
            click.echo(f"Type updated to '{account_type_label(resolved_type)}'")
    except ValueError as e:
        handle_domain_error(ctx, e)


@account_group.command("delete")
@click.argument("account", metavar="ACCOUNT")
@click.option("--yes", is_flag=True, help="Skip confirmation prompt")
@click.pass_context
def delete_account(ctx, account: str, yes: bool) -> None:
    """Delete an account.

    ACCOUNT can be an account name or ID.

    The account can only be deleted if no ledger entries reference it. Use
    'trade delete' to remove its transactions first.

    Examples:
        simperfi account delete "Old Wallet"
        simperfi account delete 1 --yes
    """
    db = ctx.obj["db"]
    service = AccountService(db)
    account_id = resolve_account_or_exit(ctx, service, account)
    account_obj = service.get_account(account_id)

    if not yes and not click.confirm(
        f"Are you sure you want to delete account '{account_obj.name}' (ID: {account_id})?"
    ):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_account(account_id)
        click.echo(f"Deleted account '{account_obj.name}'")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
