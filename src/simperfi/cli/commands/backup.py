"""Backup export and import commands."""

from pathlib import Path

import click
from simperfi.cli.error_handling import handle_domain_error
from simperfi.domain.backup import BackupService


@click.group()
def backup_group():
    """Export or restore the whole portfolio."""
    pass


@backup_group.command("export")
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
@click.pass_context
def export_backup(ctx, path: Path):
    """Write all accounts, trades and settings to a JSON file."""
    service = BackupService(ctx.obj["db"])
    try:
        service.export_to_file(path)
    except OSError as e:
        click.echo(f"Error: Cannot write {path}: {e}", err=True)
        ctx.exit(1)
    click.echo(f"Backup written to {path}")


@backup_group.command("import")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--yes", is_flag=True, help="Skip confirmation prompt")
@click.pass_context
def import_backup(ctx, path: Path, yes: bool):
    """Replace all data with the contents of a JSON backup.

    Backups exported by the browser version are accepted too.
    """
    if not yes and not click.confirm("This replaces all existing data. Continue?"):
        click.echo("Import cancelled.")
        return

    service = BackupService(ctx.obj["db"])
    try:
        service.import_from_file(path)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Restored backup from {path}")


def register_commands(cli):
    """Register backup commands with main CLI."""
    cli.add_command(backup_group, name="backup")
