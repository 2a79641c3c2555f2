"""Tabular rows for exporting debtor lists and report summaries."""

import csv
from collections.abc import Iterable, Sequence
from datetime import datetime
from typing import Any, TextIO

from shopledger.domain.debt import debt_status
from shopledger.domain.entities import DebtAccount, DebtStatus, FinancialSummary


def debtor_status_label(account: DebtAccount, now: datetime) -> str:
    """Human label for an account: active, overdue, credit or paid."""
    if account.total_debt < 0:
        return "credit"
    status = debt_status(account, now)
    if status == DebtStatus.PAID_OFF:
        return "paid"
    return status.value


def debtor_rows(accounts: Iterable[DebtAccount], now: datetime) -> list[dict[str, Any]]:
    """One row per account with its balance and status at ``now``."""
    return [
        {
            "id": account.id,
            "customer_name": account.customer_name,
            "customer_phone": account.customer_phone or "",
            "balance": account.total_debt,
            "due_date": account.due_date.isoformat() if account.due_date else "",
            "status": debtor_status_label(account, now),
        }
        for account in accounts
    ]


def summary_rows(summary: FinancialSummary) -> list[dict[str, Any]]:
    """Metric/value rows followed by per-date and per-category rows."""
    rows: list[dict[str, Any]] = [
        {"section": "summary", "label": "period", "value": summary.window.value},
        {"section": "summary", "label": "total_revenue", "value": summary.total_revenue},
        {"section": "summary", "label": "total_expenses", "value": summary.total_expenses},
        {
            "section": "summary",
            "label": "total_cost_of_goods",
            "value": summary.total_cost_of_goods,
        },
        {"section": "summary", "label": "gross_profit", "value": summary.gross_profit},
        {"section": "summary", "label": "net_profit", "value": summary.net_profit},
        {
            "section": "summary",
            "label": "profit_margin_percent",
            "value": round(summary.profit_margin_percent, 2),
        },
        {
            "section": "summary",
            "label": "net_margin_percent",
            "value": round(summary.net_margin_percent, 2),
        },
    ]
    for day in summary.time_series:
        rows.append(
            {"section": "income_by_date", "label": day.date.isoformat(), "value": day.income}
        )
        rows.append(
            {"section": "expense_by_date", "label": day.date.isoformat(), "value": day.expense}
        )
    for entry in summary.category_breakdown:
        rows.append({"section": "category", "label": entry.category, "value": entry.amount})
    return rows


def write_csv(rows: Sequence[dict[str, Any]], stream: TextIO) -> int:
    """Write rows as CSV with a header taken from the first row. Returns row count."""
    if not rows:
        return 0
    writer = csv.DictWriter(stream, fieldnames=list(rows[0].keys()))
    writer.writeheader()
    writer.writerows(rows)
    return len(rows)
