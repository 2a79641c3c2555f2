"""Main CLI entry point."""

import click
from shopledger.database.factories import create_sqlite_database
from shopledger.domain.reminders import DEFAULT_STORE_NAME
from shopledger.logging_config import configure_logging

# Import and register all commands at module level
from shopledger.cli.commands import debtor, transaction, report


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides SHOPLEDGER_DB_PATH environment variable)",
    envvar="SHOPLEDGER_DB_PATH",
)
@click.option(
    "--store-name",
    default=DEFAULT_STORE_NAME,
    show_default=True,
    help="Store name used to sign payment reminders",
    envvar="SHOPLEDGER_STORE_NAME",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Logging verbosity",
    envvar="SHOPLEDGER_LOG_LEVEL",
)
@click.pass_context
def cli(ctx, db_path: str | None, store_name: str, log_level: str):
    """Shopledger - customer debt and cash book for small shops.

    Record what customers owe, take payments, log income and expenses and
    see period reports.
    """
    ctx.ensure_object(dict)
    configure_logging(log_level)
    ctx.obj["store_name"] = store_name

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
debtor.register_commands(cli)
transaction.register_commands(cli)
report.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
