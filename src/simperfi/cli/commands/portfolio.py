"""Portfolio reporting commands."""

import click
from simperfi.cli.error_handling import handle_domain_error
from simperfi.domain.portfolio import PortfolioService
from simperfi.domain.pricing import HistoricalPriceCache
from simperfi.providers import BinanceClient

OFFLINE_HELP = "Skip the price API; use manual, stablecoin and ledger prices only"


def _portfolio_service(ctx, offline: bool) -> PortfolioService:
    """Build a PortfolioService, wired to Binance unless offline."""
    db = ctx.obj["db"]
    if offline:
        return PortfolioService(db)
    settings = ctx.obj["settings"]
    client = BinanceClient(settings.binance_url, timeout=settings.http_timeout)
    return PortfolioService(
        db,
        live_feed=client,
        historical=HistoricalPriceCache(client, ttl_seconds=settings.price_cache_ttl),
    )


def _signed(value: float) -> str:
    sign = "+" if value >= 0 else "-"
    return f"{sign}${abs(value):,.2f}"


@click.group()
def portfolio_group():
    """Holdings, profit and loss, and value history."""
    pass


@portfolio_group.command("holdings")
@click.option("--offline", is_flag=True, help=OFFLINE_HELP)
@click.pass_context
def show_holdings(ctx, offline: bool):
    """Show current holdings valued at today's prices."""
    service = _portfolio_service(ctx, offline)
    snapshot = service.snapshot(include_history=False)
    if snapshot is None:
        click.echo("Error: Portfolio changed while computing, try again", err=True)
        ctx.exit(1)

    if not snapshot.valuations:
        click.echo("No holdings.")
        return

    click.echo(
        f"\n{'Asset':10s} {'Amount':>16s} {'Avg cost':>12s} {'Price':>12s} "
        f"{'Value':>14s} {'PnL':>14s} {'Alloc':>7s} {'Target':>7s}"
    )
    click.echo("-" * 100)
    for valuation in snapshot.valuations:
        holding = valuation.holding
        price = f"${valuation.price:,.4f}" + ("*" if valuation.is_manual_price else "")
        target = f"{valuation.target_percent:.1f}%" if valuation.target_percent else "-"
        click.echo(
            f"{holding.asset:10s} {holding.amount:>16,.8g} {holding.avg_buy_price:>12,.4f} "
            f"{price:>12s} {valuation.value:>14,.2f} {_signed(valuation.unrealized_pnl):>14s} "
            f"{valuation.allocation_percent:>6.1f}% {target:>7s}"
        )
    click.echo("-" * 100)
    click.echo(f"Total value:     ${snapshot.total_value:,.2f}")
    click.echo(f"Cost basis:      ${snapshot.total_cost_basis:,.2f}")
    click.echo(
        f"Unrealized PnL:  {_signed(snapshot.unrealized_pnl)} "
        f"({snapshot.unrealized_pnl_percent:+.2f}%)"
    )
    if any(valuation.is_manual_price for valuation in snapshot.valuations):
        click.echo("* manual price")


@portfolio_group.command("pnl")
@click.pass_context
def show_pnl(ctx):
    """Show realized profit and loss over all sells."""
    service = PortfolioService(ctx.obj["db"])
    click.echo(f"Realized PnL: {_signed(service.realized_pnl())}")


@portfolio_group.command("history")
@click.option("--days", type=click.IntRange(min=0), help="Number of trailing days")
@click.option("--offline", is_flag=True, help=OFFLINE_HELP)
@click.pass_context
def show_history(ctx, days: int | None, offline: bool):
    """Show the portfolio's value at the end of each trailing day."""
    if days is None:
        days = ctx.obj["settings"].history_days
    service = _portfolio_service(ctx, offline)
    try:
        points = service.history(history_window=days)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"\n{'Date':12s} {'Value':>16s}")
    click.echo("-" * 29)
    for point in points:
        click.echo(f"{point.date.isoformat():12s} {point.value:>16,.2f}")


def register_commands(cli):
    """Register portfolio commands with main CLI."""
    cli.add_command(portfolio_group, name="portfolio")
