"""CLI helpers for account resolution and value parsing."""

from __future__ import annotations

from datetime import datetime

import click
from simperfi.domain.account import AccountService
from simperfi.utils.account_resolver import resolve_account
from simperfi.utils.amount_parser import parse_amount
from simperfi.utils.date_parser import parse_timestamp


def resolve_account_or_exit(
    ctx: click.Context, account_service: AccountService, account: str | int
) -> int:
    """Resolve account name or ID, or exit with a CLI error.

    This keeps error messaging and exit behavior consistent across commands.
    """
    try:
        return resolve_account(account_service, account)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)


def parse_amount_or_exit(ctx: click.Context, label: str, value: str | None) -> float | None:
    """Parse an optional number option, or exit with a CLI error."""
    if value is None:
        return None
    try:
        return parse_amount(value)
    except ValueError as exc:
        click.echo(f"Error: Invalid {label}: {exc}", err=True)
        ctx.exit(1)


def parse_timestamp_or_exit(ctx: click.Context, value: str | None) -> datetime | None:
    """Parse an optional --date option, or exit with a CLI error."""
    if value is None:
        return None
    try:
        return parse_timestamp(value)
    except ValueError as exc:
        click.echo(f"Error: Invalid date: {exc}", err=True)
        ctx.exit(1)
