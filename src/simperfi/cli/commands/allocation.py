"""Target allocation commands."""

import click
from simperfi.cli.account_resolution import parse_amount_or_exit
from simperfi.cli.error_handling import handle_domain_error
from simperfi.domain.allocation import AllocationService


@click.group()
def allocation_group():
    """Manage target allocations."""
    pass


@allocation_group.command("set")
@click.argument("symbol")
@click.argument("percentage")
@click.pass_context
def set_target(ctx, symbol: str, percentage: str):
    """Set the target share of the portfolio for SYMBOL, in percent.

    Example:
        simperfi allocation set BTC 50
    """
    service = AllocationService(ctx.obj["db"])
    value = parse_amount_or_exit(ctx, "percentage", percentage.rstrip("%"))
    try:
        symbol = service.set_target(symbol, value)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Target for {symbol} set to {value:.2f}%")
    click.echo(f"Total allocated: {service.total_percentage():.2f}%")


@allocation_group.command("clear")
@click.argument("symbol")
@click.pass_context
def clear_target(ctx, symbol: str):
    """Remove the target for SYMBOL."""
    service = AllocationService(ctx.obj["db"])
    try:
        removed = service.clear_target(symbol)
    except ValueError as e:
        handle_domain_error(ctx, e)
    if removed:
        click.echo(f"Cleared target for {symbol.strip().upper()}")
    else:
        click.echo(f"No target set for {symbol.strip().upper()}")


@allocation_group.command("list")
@click.pass_context
def list_targets(ctx):
    """List target allocations."""
    service = AllocationService(ctx.obj["db"])
    targets = service.list_targets()
    if not targets:
        click.echo("No targets set.")
        return

    click.echo("\nTarget allocations:")
    click.echo("-" * 30)
    for target in targets:
        click.echo(f"{target.asset:12s} {target.percentage:>8.2f}%")
    click.echo("-" * 30)
    click.echo(f"{'Total':12s} {service.total_percentage():>8.2f}%")


def register_commands(cli):
    """Register allocation commands with main CLI."""
    cli.add_command(allocation_group, name="allocation")
