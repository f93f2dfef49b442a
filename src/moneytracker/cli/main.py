"""Main CLI entry point."""

import click
from moneytracker.database.factories import create_sqlite_database
from moneytracker.logging_config import configure_logging

# Import and register all commands at module level
from moneytracker.cli.commands import (
    user,
    category,
    mail,
    scan,
    import_cmd,
    notifications,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides MONEYTRACKER_DB_PATH environment variable)",
    envvar="MONEYTRACKER_DB_PATH",
)
@click.pass_context
def cli(ctx, db_path: str | None):
    """Moneytracker - personal expense tracking.

    Turns bank, card and merchant emails into transactions, and imports
    transactions from CSV files.
    """
    ctx.ensure_object(dict)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        configure_logging()
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db


# Register all commands
user.register_commands(cli)
category.register_commands(cli)
mail.register_commands(cli)
scan.register_commands(cli)
import_cmd.register_commands(cli)
notifications.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
