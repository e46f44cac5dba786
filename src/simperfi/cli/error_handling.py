"""CLI error handling helpers."""

import logging

import click

from simperfi.domain.errors import DomainError

logger = logging.getLogger(__name__)


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Print a domain error to stderr and exit with status 1.

    Errors that are not DomainError subclasses come from unexpected places
    (parsers, the ORM) and are logged with their traceback at debug level.
    """
    if not isinstance(error, DomainError):
        logger.debug("Unexpected %s in %s", type(error).__name__, ctx.info_name, exc_info=error)
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)
