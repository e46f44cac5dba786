"""Manual price override commands."""

import click
from simperfi.cli.account_resolution import parse_amount_or_exit
from simperfi.cli.error_handling import handle_domain_error
from simperfi.domain.price_override import PriceOverrideService


@click.group()
def price_group():
    """Manage manual USD prices."""
    pass


@price_group.command("set")
@click.argument("symbol")
@click.argument("price")
@click.pass_context
def set_price(ctx, symbol: str, price: str):
    """Set a manual USD price for SYMBOL.

    Manual prices win over every other source, today and in history.

    Example:
        simperfi price set MYTOKEN 0.42
    """
    service = PriceOverrideService(ctx.obj["db"])
    value = parse_amount_or_exit(ctx, "price", price)
    try:
        symbol = service.set_override(symbol, value)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Manual price for {symbol} set to ${value:,.8g}")


@price_group.command("clear")
@click.argument("symbol")
@click.pass_context
def clear_price(ctx, symbol: str):
    """Remove the manual price for SYMBOL."""
    service = PriceOverrideService(ctx.obj["db"])
    try:
        removed = service.clear_override(symbol)
    except ValueError as e:
        handle_domain_error(ctx, e)
    if removed:
        click.echo(f"Cleared manual price for {symbol.strip().upper()}")
    else:
        click.echo(f"No manual price set for {symbol.strip().upper()}")


@price_group.command("list")
@click.pass_context
def list_prices(ctx):
    """List manual prices."""
    overrides = PriceOverrideService(ctx.obj["db"]).list_overrides()
    if not overrides:
        click.echo("No manual prices set.")
        return

    click.echo("\nManual prices:")
    click.echo("-" * 40)
    for symbol, value in overrides.items():
        click.echo(f"{symbol:12s} ${value:>20,.8g}")


def register_commands(cli):
    """Register price commands with main CLI."""
    cli.add_command(price_group, name="price")
