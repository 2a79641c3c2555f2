"""CLI error reporting helpers."""

import logging
from typing import NoReturn

import click

from shopledger.domain.errors import DomainError

logger = logging.getLogger(__name__)


def exit_with_error(ctx: click.Context, message: str) -> NoReturn:
    """Print ``Error: <message>`` to stderr and exit with status 1."""
    click.echo(f"Error: {message}", err=True)
    ctx.exit(1)


def handle_domain_error(ctx: click.Context, error: DomainError) -> NoReturn:
    """Report a command the domain layer rejected."""
    logger.debug("%s rejected: %s", ctx.command_path, error)
    exit_with_error(ctx, str(error))
