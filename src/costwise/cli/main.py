"""Main CLI entry point."""

import logging

import click
from costwise.config import load_settings
from costwise.database.factories import create_sqlite_database

# Import and register all commands at module level
from costwise.cli.commands import (
    analytics,
    budget,
    classify,
    pattern,
    profile,
    rule,
    transaction,
)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str, verbose: bool) -> None:
    """Configure root logging for a CLI run."""
    if verbose:
        level = "DEBUG"
    logging.basicConfig(format=LOG_FORMAT)
    # basicConfig is a no-op once handlers exist, so set the level directly
    logging.getLogger().setLevel(getattr(logging, level, logging.WARNING))


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides COSTWISE_DB_PATH environment variable)",
    envvar="COSTWISE_DB_PATH",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, db_path: str | None, verbose: bool):
    """Costwise - cost classification and financial analytics.

    Record transactions, classify expenses as fixed/variable and
    direct/indirect for your type of business, and review margins,
    break-even and budget variance.
    """
    ctx.ensure_object(dict)

    try:
        settings = load_settings()
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    configure_logging(settings.log_level, verbose)
    ctx.obj["settings"] = settings

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
profile.register_commands(cli)
transaction.register_commands(cli)
rule.register_commands(cli)
pattern.register_commands(cli)
classify.register_commands(cli)
analytics.register_commands(cli)
budget.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
