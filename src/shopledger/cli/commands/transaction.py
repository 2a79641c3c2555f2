"""Income/expense transaction commands."""

import click
from shopledger.cli.error_handling import exit_with_error, handle_domain_error
from shopledger.domain.entities import PaymentStatus, TransactionKind
from shopledger.domain.errors import DomainError
from shopledger.domain.journal import JournalService, running_totals, total_by_kind, total_owed
from shopledger.domain.reminders import format_amount
from shopledger.utils.amount_parser import parse_amount
from shopledger.utils.date_parser import parse_occurred_at


@click.group("transaction")
def transaction_group():
    """Record and list income and expenses."""
    pass


@transaction_group.command("add")
@click.argument("kind", type=click.Choice([k.value for k in TransactionKind]))
@click.argument("amount")
@click.option("--note", required=True, help="What the transaction was for")
@click.option("--cost", help="Cost of goods sold (income only)")
@click.option("--category", help="Category label")
@click.option("--date", help="Transaction date (defaults to today)")
@click.option("--customer", help="Customer name")
@click.option("--phone", help="Customer phone")
@click.option("--owed", is_flag=True, help="Mark as not yet paid")
@click.pass_context
def add_transaction(
    ctx,
    kind: str,
    amount: str,
    note: str,
    cost: str | None,
    category: str | None,
    date: str | None,
    customer: str | None,
    phone: str | None,
    owed: bool,
):
    """Add an income or expense transaction.

    Examples:
        shopledger transaction add income 100000 --cost 60000 --note "Rice 10kg" --category Groceries
        shopledger transaction add expense 30000 --note "Electricity"
    """
    service = JournalService(ctx.obj["db"])
    now = service.clock()

    try:
        gross_amount = parse_amount(amount)
        cost_amount = parse_amount(cost) if cost else None
    except ValueError as e:
        exit_with_error(ctx, f"Invalid amount format: {e}")

    try:
        occurred_at = parse_occurred_at(date, now)
    except ValueError as e:
        exit_with_error(ctx, f"Invalid date format: {e}")

    try:
        txn = service.record_transaction(
            kind=kind,
            gross_amount=gross_amount,
            note=note,
            cost_amount=cost_amount,
            category=category,
            occurred_at=occurred_at,
            customer_name=customer,
            customer_phone=phone,
            payment_status=PaymentStatus.OWED if owed else PaymentStatus.SETTLED,
            now=now,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created transaction {txn.id}")
    click.echo(f"  Kind: {txn.kind.value}")
    click.echo(f"  Amount: {format_amount(txn.gross_amount)}")
    if txn.line_profit is not None and txn.cost_amount is not None:
        click.echo(f"  Profit: {format_amount(txn.line_profit)}")
    if txn.category:
        click.echo(f"  Category: {txn.category}")


@transaction_group.command("list")
@click.option("--search", help="Search notes and customer names")
@click.option(
    "--kind",
    type=click.Choice(["all"] + [k.value for k in TransactionKind]),
    default="all",
    show_default=True,
)
@click.option(
    "--status",
    type=click.Choice(["all"] + [s.value for s in PaymentStatus]),
    default="all",
    show_default=True,
)
@click.pass_context
def list_transactions(ctx, search: str | None, kind: str, status: str):
    """List transactions with running totals."""
    service = JournalService(ctx.obj["db"])
    transactions = service.list_transactions(
        search_text=search, kind_filter=kind, payment_status_filter=status
    )
    if not transactions:
        click.echo("No transactions found.")
        return

    click.echo(f"\nTransactions ({len(transactions)}):")
    click.echo("-" * 90)
    for entry in running_totals(transactions):
        txn = entry.transaction
        profit = format_amount(entry.line_profit) if entry.line_profit is not None else "-"
        click.echo(
            f"{txn.id:4d} | {txn.occurred_at:%Y-%m-%d} | {txn.kind.value:7s} | "
            f"{format_amount(txn.gross_amount):>12s} | profit {profit:>10s} | "
            f"{txn.payment_status.value:7s} | {txn.note}"
        )
    click.echo("-" * 90)
    click.echo(f"Income:  {format_amount(total_by_kind(transactions, TransactionKind.INCOME))}")
    click.echo(f"Expense: {format_amount(total_by_kind(transactions, TransactionKind.EXPENSE))}")
    click.echo(f"Owed:    {format_amount(total_owed(transactions))}")


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group)
