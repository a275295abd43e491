"""Main CLI entry point."""

import click
from donortrack.database.factories import create_sqlite_database
from donortrack.log_config import DEFAULT_LOG_LEVEL, LOG_FORMATS, configure_logging

# Import and register all commands at module level
from donortrack.cli.commands import (
    import_cmd,
    project,
    rule,
    unmapped,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides DONORTRACK_DB_PATH environment variable)",
    envvar="DONORTRACK_DB_PATH",
)
@click.option(
    "--log-level",
    default=DEFAULT_LOG_LEVEL,
    show_default=True,
    envvar="DONORTRACK_LOG_LEVEL",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    help="Log level for messages written to stderr",
)
@click.option(
    "--log-format",
    default="console",
    show_default=True,
    envvar="DONORTRACK_LOG_FORMAT",
    type=click.Choice(LOG_FORMATS, case_sensitive=False),
    help="Log output format",
)
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str, log_format: str):
    """Donortrack - Donation tracking for sponsorship programs.

    Import Stripe payment exports, route payments to projects and child
    sponsorships, and review the payments that could not be mapped.
    """
    ctx.ensure_object(dict)
    configure_logging(log_level=log_level, log_format=log_format)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
import_cmd.register_commands(cli)
rule.register_commands(cli)
unmapped.register_commands(cli)
project.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
