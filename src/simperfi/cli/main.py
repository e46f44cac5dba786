"""Main CLI entry point."""

import logging

import click
from simperfi.config import load_settings
from simperfi.database.factories import create_sqlite_database

# Import and register all commands at module level
from simperfi.cli.commands import (
    account,
    trade,
    price,
    allocation,
    portfolio,
    backup,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides SIMPERFI_DB_PATH environment variable)",
    envvar="SIMPERFI_DB_PATH",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    envvar="SIMPERFI_LOG_LEVEL",
    default="WARNING",
    show_default=True,
    help="Logging verbosity",
)
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str):
    """Simperfi - Multi-asset portfolio tracker.

    Record trades, deposits, withdrawals, transfers, gains and losses, then
    see holdings with weighted-average cost, realized PnL and a daily value
    history.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        try:
            ctx.obj["settings"] = load_settings()
        except ValueError as e:
            raise click.UsageError(str(e))
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
account.register_commands(cli)
trade.register_commands(cli)
price.register_commands(cli)
allocation.register_commands(cli)
portfolio.register_commands(cli)
backup.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
