"""Debtor management commands."""

from datetime import datetime

import click
from shopledger.cli.error_handling import exit_with_error, handle_domain_error
from shopledger.domain.debt import DebtService, debt_status, running_balance_history
from shopledger.domain.entities import DebtAccount, DebtorSortKey, DebtorStatusFilter, MovementKind
from shopledger.domain.errors import DomainError
from shopledger.domain.export import debtor_status_label
from shopledger.domain.reminders import build_reminder, format_amount, sms_link, whatsapp_link
from shopledger.utils.amount_parser import parse_amount
from shopledger.utils.date_parser import parse_date, parse_occurred_at


def _parse_amount_or_exit(ctx, amount: str) -> int:
    try:
        return parse_amount(amount)
    except ValueError as e:
        exit_with_error(ctx, f"Invalid amount format: {e}")


def _echo_account_line(account: DebtAccount, now: datetime) -> None:
    due = account.due_date.isoformat() if account.due_date else "-"
    status = debtor_status_label(account, now)
    click.echo(
        f"ID: {account.id:3d} | {account.customer_name:20s} | "
        f"{format_amount(account.total_debt):>12s} | Due: {due:10s} | {status}"
    )


@click.group("debtor")
def debtor_group():
    """Manage customer debts."""
    pass


@debtor_group.command("add")
@click.argument("name", metavar="CUSTOMER_NAME")
@click.option("--amount", required=True, help="Initial debt amount (e.g., 150000)")
@click.option("--phone", help="Customer phone number")
@click.option("--due-date", help="Due date (YYYY-MM-DD or relative like 'next week')")
@click.pass_context
def add_debtor(ctx, name: str, amount: str, phone: str | None, due_date: str | None):
    """Add a debtor with an initial debt.

    Examples:
        shopledger debtor add "Budi" --amount 100000
        shopledger debtor add "Siti" --amount 50000 --phone 0812-3456-789 --due-date 2024-02-01
    """
    service = DebtService(ctx.obj["db"])
    debt_amount = _parse_amount_or_exit(ctx, amount)

    due = None
    if due_date:
        try:
            due = parse_date(due_date)
        except ValueError as e:
            exit_with_error(ctx, f"Invalid due date: {e}")

    try:
        account = service.create_debtor(
            name=name, initial_debt_amount=debt_amount, phone=phone, due_date=due
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created debtor '{account.customer_name}' (ID: {account.id})")
    click.echo(f"  Balance: {format_amount(account.total_debt)}")
    if account.due_date:
        click.echo(f"  Due date: {account.due_date}")


@debtor_group.command("list")
@click.option("--search", help="Filter by customer name")
@click.option(
    "--status",
    type=click.Choice([s.value for s in DebtorStatusFilter]),
    default=DebtorStatusFilter.ALL.value,
    show_default=True,
    help="Filter by status",
)
@click.option(
    "--sort-by",
    type=click.Choice([k.value for k in DebtorSortKey]),
    default=DebtorSortKey.CREATED.value,
    show_default=True,
    help="Sort key",
)
@click.option("--desc", is_flag=True, help="Sort in descending order")
@click.pass_context
def list_debtors(ctx, search: str | None, status: str, sort_by: str, desc: bool):
    """List debtors with their balances."""
    service = DebtService(ctx.obj["db"])
    now = service.clock()
    accounts = service.list_debtors(
        search=search, status=status, sort_by=sort_by, descending=desc, now=now
    )
    if not accounts:
        click.echo("No debtors found.")
        return

    click.echo("\nDebtors:")
    click.echo("-" * 80)
    for account in accounts:
        _echo_account_line(account, now)

    summary = service.summarize(now=now)
    click.echo("-" * 80)
    click.echo(f"Owed by customers: {format_amount(summary.total_receivable)}")
    click.echo(f"Owed to customers: {format_amount(summary.total_credit)}")
    click.echo(f"Overdue debtors:   {summary.overdue_count}")


@debtor_group.command("show")
@click.argument("account_id", type=int, metavar="DEBTOR_ID")
@click.pass_context
def show_debtor(ctx, account_id: int):
    """Show a debtor with the running balance of each movement."""
    service = DebtService(ctx.obj["db"])
    try:
        account = service.require_debtor(account_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    now = service.clock()
    click.echo(f"Debtor {account.id}: {account.customer_name}")
    if account.customer_phone:
        click.echo(f"  Phone: {account.customer_phone}")
    click.echo(f"  Balance: {format_amount(account.total_debt)}")
    click.echo(f"  Status: {debt_status(account, now).value}")
    if account.due_date:
        click.echo(f"  Due date: {account.due_date}")

    click.echo("\nHistory:")
    click.echo("-" * 80)
    for entry in running_balance_history(account):
        movement = entry.movement
        click.echo(
            f"{movement.occurred_at:%Y-%m-%d %H:%M} | {movement.kind.value:7s} | "
            f"{format_amount(movement.amount):>12s} | {format_amount(entry.balance):>12s} | "
            f"{movement.note}"
        )


def _record(ctx, account_id: int, kind: MovementKind, amount: str, note: str, date: str | None):
    service = DebtService(ctx.obj["db"])
    value = _parse_amount_or_exit(ctx, amount)
    now = service.clock()
    try:
        occurred_at = parse_occurred_at(date, now)
    except ValueError as e:
        exit_with_error(ctx, f"Invalid date format: {e}")

    try:
        movement = service.record_movement(
            account_id, kind, value, note, occurred_at=occurred_at, now=now
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    account = service.require_debtor(account_id)
    click.echo(
        f"Recorded {movement.kind.value} of {format_amount(movement.amount)} "
        f"for '{account.customer_name}'"
    )
    click.echo(f"  New balance: {format_amount(account.total_debt)}")


@debtor_group.command("give")
@click.argument("account_id", type=int, metavar="DEBTOR_ID")
@click.argument("amount")
@click.option("--note", required=True, help="What the credit was for")
@click.option("--date", help="Date of the movement (defaults to today)")
@click.pass_context
def give(ctx, account_id: int, amount: str, note: str, date: str | None):
    """Add to a debtor's debt (the shop gives credit)."""
    _record(ctx, account_id, MovementKind.GIVE, amount, note, date)


@debtor_group.command("receive")
@click.argument("account_id", type=int, metavar="DEBTOR_ID")
@click.argument("amount")
@click.option("--note", required=True, help="Payment description")
@click.option("--date", help="Date of the payment (defaults to today)")
@click.pass_context
def receive(ctx, account_id: int, amount: str, note: str, date: str | None):
    """Record a payment from a debtor."""
    _record(ctx, account_id, MovementKind.RECEIVE, amount, note, date)


@debtor_group.command("payoff")
@click.argument("account_id", type=int, metavar="DEBTOR_ID")
@click.pass_context
def payoff(ctx, account_id: int):
    """Settle a debtor's whole outstanding balance."""
    service = DebtService(ctx.obj["db"])
    try:
        movement = service.pay_off(account_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Debtor {account_id} paid off ({format_amount(movement.amount)} received)")


@debtor_group.command("refund")
@click.argument("account_id", type=int, metavar="DEBTOR_ID")
@click.argument("amount")
@click.pass_context
def refund(ctx, account_id: int, amount: str):
    """Refund credit the shop owes a customer."""
    service = DebtService(ctx.obj["db"])
    value = _parse_amount_or_exit(ctx, amount)
    try:
        movement = service.refund_credit(account_id, value)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Refunded {format_amount(movement.amount)} to debtor {account_id}")


@debtor_group.command("due")
@click.argument("account_id", type=int, metavar="DEBTOR_ID")
@click.argument("due_date", required=False)
@click.option("--clear", is_flag=True, help="Remove the due date")
@click.pass_context
def set_due(ctx, account_id: int, due_date: str | None, clear: bool):
    """Set or clear a debtor's due date."""
    if clear == bool(due_date):
        exit_with_error(ctx, "Provide either a DUE_DATE or --clear.")

    new_due = None
    if due_date:
        try:
            new_due = parse_date(due_date)
        except ValueError as e:
            exit_with_error(ctx, f"Invalid due date: {e}")

    service = DebtService(ctx.obj["db"])
    try:
        account = service.set_due_date(account_id, new_due)
    except DomainError as e:
        handle_domain_error(ctx, e)
    if account.due_date:
        click.echo(f"Due date of '{account.customer_name}' set to {account.due_date}")
    else:
        click.echo(f"Due date of '{account.customer_name}' cleared")


@debtor_group.command("delete")
@click.argument("account_id", type=int, metavar="DEBTOR_ID")
@click.confirmation_option(prompt="Delete this debtor and its whole history?")
@click.pass_context
def delete(ctx, account_id: int):
    """Delete a debtor and all of its movements."""
    service = DebtService(ctx.obj["db"])
    try:
        service.delete_debtor(account_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted debtor {account_id}")


@debtor_group.command("remind")
@click.argument("account_id", type=int, metavar="DEBTOR_ID")
@click.option(
    "--channel",
    type=click.Choice(["whatsapp", "sms", "text"]),
    default="whatsapp",
    show_default=True,
    help="Print a WhatsApp link, an SMS link or just the message",
)
@click.pass_context
def remind(ctx, account_id: int, channel: str):
    """Compose a payment reminder for a debtor."""
    service = DebtService(ctx.obj["db"])
    try:
        account = service.require_debtor(account_id)
        message = build_reminder(account, ctx.obj.get("store_name"))
        if channel == "whatsapp":
            output = whatsapp_link(message.customer_phone, message.text)
        elif channel == "sms":
            output = sms_link(message.customer_phone, message.text)
        else:
            output = message.text
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(output)


def register_commands(cli):
    """Register debtor commands with main CLI."""
    cli.add_command(debtor_group)
