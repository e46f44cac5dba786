"""Trade recording and management commands."""

import click
from simperfi.cli.account_resolution import (
    parse_amount_or_exit,
    parse_timestamp_or_exit,
    resolve_account_or_exit,
)
from simperfi.cli.error_handling import handle_domain_error
from simperfi.domain.account import AccountService
from simperfi.domain.trade import TradeService
from simperfi.utils.date_parser import parse_date

DATE_HELP = "When it happened (YYYY-MM-DD [HH:MM], 'now', 'yesterday'...). Defaults to now"


@click.group()
def trade_group():
    """Record and manage transactions."""
    pass


def _record(ctx, label: str, record, **kwargs) -> None:
    """Run a TradeService record call and report the result."""
    try:
        trade_id = record(**kwargs)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Recorded {label} (trade ID: {trade_id})")


@trade_group.command("buy")
@click.option("--account", required=True, help="Account name or ID")
@click.option("--asset", required=True, help="Asset bought (e.g. BTC)")
@click.option("--quantity", required=True, help="Quantity bought")
@click.option("--price", required=True, help="Price per unit in the pay asset")
@click.option("--pay-with", default="USDT", show_default=True, help="Asset paid with")
@click.option("--pay-quantity", help="Quantity paid (defaults to quantity x price)")
@click.option("--date", "when", help=DATE_HELP)
@click.option("--notes", help="Notes")
@click.pass_context
def buy(ctx, account, asset, quantity, price, pay_with, pay_quantity, when, notes):
    """Record a buy.

    Examples:
        simperfi trade buy --account Binance --asset BTC --quantity 0.5 --price 30000
        simperfi trade buy --account 1 --asset ETH --quantity 2 --price 0.05 --pay-with BTC
    """
    db = ctx.obj["db"]
    account_id = resolve_account_or_exit(ctx, AccountService(db), account)
    _record(
        ctx,
        "buy",
        TradeService(db).record_buy,
        account_id=account_id,
        asset=asset,
        quantity=parse_amount_or_exit(ctx, "quantity", quantity),
        price=parse_amount_or_exit(ctx, "price", price),
        pay_asset=pay_with,
        pay_quantity=parse_amount_or_exit(ctx, "pay quantity", pay_quantity),
        timestamp=parse_timestamp_or_exit(ctx, when),
        notes=notes,
    )


@trade_group.command("sell")
@click.option("--account", required=True, help="Account name or ID")
@click.option("--asset", required=True, help="Asset sold (e.g. BTC)")
@click.option("--quantity", required=True, help="Quantity sold")
@click.option("--price", required=True, help="Price per unit in the received asset")
@click.option("--receive", default="USDT", show_default=True, help="Asset received")
@click.option("--receive-quantity", help="Quantity received (defaults to quantity x price)")
@click.option("--date", "when", help=DATE_HELP)
@click.option("--notes", help="Notes")
@click.pass_context
def sell(ctx, account, asset, quantity, price, receive, receive_quantity, when, notes):
    """Record a sell.

    Examples:
        simperfi trade sell --account Binance --asset BTC --quantity 0.1 --price 45000
        simperfi trade sell --account 1 --asset ETH --quantity 1 --price 2200 --receive USDC
    """
    db = ctx.obj["db"]
    account_id = resolve_account_or_exit(ctx, AccountService(db), account)
    _record(
        ctx,
        "sell",
        TradeService(db).record_sell,
        account_id=account_id,
        asset=asset,
        quantity=parse_amount_or_exit(ctx, "quantity", quantity),
        price=parse_amount_or_exit(ctx, "price", price),
        receive_asset=receive,
        receive_quantity=parse_amount_or_exit(ctx, "receive quantity", receive_quantity),
        timestamp=parse_timestamp_or_exit(ctx, when),
        notes=notes,
    )


@trade_group.command("exchange")
@click.option("--account", required=True, help="Account name or ID")
@click.option("--from-asset", required=True, help="Asset given away")
@click.option("--from-quantity", required=True, help="Quantity given away")
@click.option("--from-price", help="USD price of the asset given away")
@click.option("--to-asset", required=True, help="Asset received")
@click.option("--to-quantity", required=True, help="Quantity received")
@click.option("--to-price", help="USD price of the asset received")
@click.option("--date", "when", help=DATE_HELP)
@click.option("--notes", help="Notes")
@click.pass_context
def exchange(
    ctx, account, from_asset, from_quantity, from_price, to_asset, to_quantity, to_price, when, notes
):
    """Record a swap of one asset for another.

    Example:
        simperfi trade exchange --account 1 --from-asset ETH --from-quantity 1 \\
            --to-asset SOL --to-quantity 20 --to-price 100
    """
    db = ctx.obj["db"]
    account_id = resolve_account_or_exit(ctx, AccountService(db), account)
    _record(
        ctx,
        "exchange",
        TradeService(db).record_trade,
        account_id=account_id,
        out_asset=from_asset,
        out_quantity=parse_amount_or_exit(ctx, "from quantity", from_quantity),
        in_asset=to_asset,
        in_quantity=parse_amount_or_exit(ctx, "to quantity", to_quantity),
        out_price=parse_amount_or_exit(ctx, "from price", from_price),
        in_price=parse_amount_or_exit(ctx, "to price", to_price),
        timestamp=parse_timestamp_or_exit(ctx, when),
        notes=notes,
    )


def _single_leg_command(name: str, label: str, method: str, price_help: str):
    """Build a command recording a one-leg event (deposit, withdraw...)."""

    @click.option("--account", required=True, help="Account name or ID")
    @click.option("--asset", required=True, help="Asset symbol")
    @click.option("--quantity", required=True, help="Quantity")
    @click.option("--price", help=price_help)
    @click.option("--date", "when", help=DATE_HELP)
    @click.option("--notes", help="Notes")
    @click.pass_context
    def command(ctx, account, asset, quantity, price, when, notes):
        db = ctx.obj["db"]
        account_id = resolve_account_or_exit(ctx, AccountService(db), account)
        _record(
            ctx,
            label,
            getattr(TradeService(db), method),
            account_id=account_id,
            asset=asset,
            quantity=parse_amount_or_exit(ctx, "quantity", quantity),
            price=parse_amount_or_exit(ctx, "price", price),
            timestamp=parse_timestamp_or_exit(ctx, when),
            notes=notes,
        )

    command.__doc__ = f"Record a {label}."
    return trade_group.command(name)(command)


deposit = _single_leg_command(
    "deposit", "deposit", "record_deposit", "USD cost per unit (used for cost basis)"
)
withdraw = _single_leg_command("withdraw", "withdrawal", "record_withdraw", "USD price per unit")
gain = _single_leg_command(
    "gain", "gain", "record_gain", "USD value per unit (display only, not cost basis)"
)
loss = _single_leg_command("loss", "loss", "record_loss", "USD price per unit")


@trade_group.command("transfer")
@click.option("--from-account", required=True, help="Source account name or ID")
@click.option("--to-account", required=True, help="Destination account name or ID")
@click.option("--asset", required=True, help="Asset symbol")
@click.option("--quantity", required=True, help="Quantity moved")
@click.option("--date", "when", help=DATE_HELP)
@click.option("--notes", help="Notes")
@click.pass_context
def transfer(ctx, from_account, to_account, asset, quantity, when, notes):
    """Record moving an asset between two of your accounts.

    Transfers do not change holdings or cost basis.
    """
    db = ctx.obj["db"]
    account_service = AccountService(db)
    _record(
        ctx,
        "transfer",
        TradeService(db).record_transfer,
        from_account_id=resolve_account_or_exit(ctx, account_service, from_account),
        to_account_id=resolve_account_or_exit(ctx, account_service, to_account),
        asset=asset,
        quantity=parse_amount_or_exit(ctx, "quantity", quantity),
        timestamp=parse_timestamp_or_exit(ctx, when),
        notes=notes,
    )


@trade_group.command("list")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like '7 days ago')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today')")
@click.option("--asset", help="Only trades moving this asset")
@click.option("--account", help="Only trades touching this account (name or ID)")
@click.pass_context
def list_trades(ctx, start_date, end_date, asset, account):
    """List transactions, newest first."""
    db = ctx.obj["db"]
    service = TradeService(db)
    account_service = AccountService(db)

    try:
        start = parse_date(start_date) if start_date else None
        end = parse_date(end_date) if end_date else None
    except ValueError as e:
        click.echo(f"Error: Invalid date: {e}", err=True)
        ctx.exit(1)

    account_id = resolve_account_or_exit(ctx, account_service, account) if account else None
    accounts = {acc.id: acc.name for acc in account_service.list_accounts()}

    entries_by_trade: dict[int, list] = {}
    for entry in service.list_entries():
        entries_by_trade.setdefault(entry.trade_id, []).append(entry)

    rows = []
    for trade in reversed(service.list_trades()):
        day = trade.timestamp.date()
        if (start and day < start) or (end and day > end):
            continue
        entries = entries_by_trade.get(trade.id, [])
        if asset and all(entry.asset != asset.strip().upper() for entry in entries):
            continue
        if account_id is not None and all(entry.account_id != account_id for entry in entries):
            continue
        rows.append((trade, entries))

    if not rows:
        click.echo("No transactions found.")
        return

    for trade, entries in rows:
        header = f"#{trade.id:<5d} {trade.timestamp:%Y-%m-%d %H:%M}  {trade.kind.value.upper():8s}"
        if trade.pair and trade.pair_price is not None:
            header += f"  {trade.pair} @ {trade.pair_price:,.8g}"
        click.echo(header)
        for entry in entries:
            direction = "Received" if entry.amount > 0 else "Sent"
            account_name = accounts.get(entry.account_id, "no account")
            price = f" @ ${entry.usd_price:,.2f}" if entry.usd_price is not None else ""
            click.echo(f"    {direction}: {abs(entry.amount):,.8g} {entry.asset}{price} ({account_name})")
        if trade.notes:
            click.echo(f"    Notes: {trade.notes}")


@trade_group.command("notes")
@click.argument("trade_id", type=int)
@click.argument("notes", required=False)
@click.pass_context
def update_notes(ctx, trade_id: int, notes: str | None):
    """Set or clear (omit NOTES) the notes of a transaction."""
    service = TradeService(ctx.obj["db"])
    try:
        service.update_notes(trade_id, notes or None)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated notes of trade {trade_id}")


@trade_group.command("delete")
@click.argument("trade_id", type=int)
@click.option("--yes", is_flag=True, help="Skip confirmation prompt")
@click.pass_context
def delete_trade(ctx, trade_id: int, yes: bool):
    """Delete a transaction and all of its ledger entries."""
    service = TradeService(ctx.obj["db"])
    if service.get_trade(trade_id) is None:
        click.echo(f"Error: Trade {trade_id} not found", err=True)
        ctx.exit(1)

    if not yes and not click.confirm(f"Are you sure you want to delete trade {trade_id}?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_trade(trade_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted trade {trade_id}")


def register_commands(cli):
    """Register trade commands with main CLI."""
    cli.add_command(trade_group, name="trade")
