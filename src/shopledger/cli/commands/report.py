"""Report and export commands."""

import click
from shopledger.cli.error_handling import exit_with_error
from shopledger.domain.debt import DebtService
from shopledger.domain.entities import PeriodWindow
from shopledger.domain.export import debtor_rows, summary_rows, write_csv
from shopledger.domain.reminders import format_amount
from shopledger.domain.report import ReportService
from shopledger.utils.date_parser import parse_period


def _resolve_period(ctx, period: str) -> PeriodWindow:
    try:
        return parse_period(period)
    except ValueError as e:
        exit_with_error(ctx, str(e))


@click.group("report")
def report_group():
    """Financial reports and exports."""
    pass


@report_group.command("summary")
@click.option(
    "--period",
    default="this-month",
    show_default=True,
    help="today, this-week, this-month, this-year or all",
)
@click.pass_context
def summary(ctx, period: str):
    """Show revenue, costs, profit and top categories for a period."""
    window = _resolve_period(ctx, period)
    report = ReportService(ctx.obj["db"]).build_summary(window)

    click.echo(f"\nFinancial summary ({report.window.value}):")
    click.echo("-" * 50)
    click.echo(f"{'Revenue':<30} {format_amount(report.total_revenue):>18}")
    click.echo(f"{'Cost of goods':<30} {format_amount(report.total_cost_of_goods):>18}")
    click.echo(f"{'Gross profit':<30} {format_amount(report.gross_profit):>18}")
    click.echo(f"{'Expenses':<30} {format_amount(report.total_expenses):>18}")
    click.echo(f"{'Net profit':<30} {format_amount(report.net_profit):>18}")
    click.echo(f"{'Gross margin':<30} {report.profit_margin_percent:>17.1f}%")
    click.echo(f"{'Net margin':<30} {report.net_margin_percent:>17.1f}%")

    if report.time_series:
        click.echo("\nBy date:")
        for day in report.time_series:
            click.echo(
                f"  {day.date.isoformat()}  in {format_amount(day.income):>12}"
                f"  out {format_amount(day.expense):>12}"
            )

    if report.category_breakdown:
        click.echo("\nTop categories:")
        for entry in report.category_breakdown:
            click.echo(
                f"  {entry.category:<28} {format_amount(entry.amount):>12} ({entry.count})"
                f"  margin {entry.margin_percent:.1f}%"
            )


@report_group.command("export-debtors")
@click.argument("output", type=click.File("w"))
@click.pass_context
def export_debtors(ctx, output):
    """Export all debtors to CSV (use - for stdout)."""
    service = DebtService(ctx.obj["db"])
    rows = debtor_rows(service.list_debtors(), service.clock())
    count = write_csv(rows, output)
    if output.name != "<stdout>":
        click.echo(f"Exported {count} debtors")


@report_group.command("export-summary")
@click.argument("output", type=click.File("w"))
@click.option("--period", default="this-month", show_default=True)
@click.pass_context
def export_summary(ctx, output, period: str):
    """Export a period summary to CSV (use - for stdout)."""
    window = _resolve_period(ctx, period)
    report = ReportService(ctx.obj["db"]).build_summary(window)
    count = write_csv(summary_rows(report), output)
    if output.name != "<stdout>":
        click.echo(f"Exported {count} rows")


def register_commands(cli):
    """Register report commands with main CLI."""
    cli.add_command(report_group)
