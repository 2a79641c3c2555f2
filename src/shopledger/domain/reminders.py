"""Payment reminder composition.

Builds the text and messaging links for a reminder; sending is left to
whatever opens the link.
"""

import re
from typing import Optional
from urllib.parse import quote

from shopledger.domain.entities import DebtAccount, ReminderMessage
from shopledger.domain.errors import InvalidStateError, ValidationError

DEFAULT_STORE_NAME = "Our Shop"


def format_amount(amount: int) -> str:
    """Render a whole-unit amount with thousands separators."""
    return f"{amount:,}"


def build_reminder(account: DebtAccount, store_name: Optional[str] = None) -> ReminderMessage:
    """Compose a payment reminder for an account with outstanding debt.

    Raises:
        InvalidStateError: If the customer owes nothing
    """
    if account.total_debt <= 0:
        raise InvalidStateError(
            f"Debtor {account.id} has no outstanding debt to remind about"
        )

    lines = [
        f"Hello {account.customer_name},",
        "",
        f"This is a friendly reminder that you have an outstanding balance of "
        f"{format_amount(account.total_debt)}.",
    ]
    if account.due_date is not None:
        lines.append(f"Due date: {account.due_date.strftime('%d %b %Y')}")
    lines.extend(
        [
            "",
            "Please settle the payment at your earliest convenience.",
            "",
            "Thank you!",
            store_name or DEFAULT_STORE_NAME,
        ]
    )
    return ReminderMessage(
        customer_name=account.customer_name,
        customer_phone=account.customer_phone,
        amount=account.total_debt,
        due_date=account.due_date,
        text="\n".join(lines),
    )


def _phone_digits(phone: Optional[str]) -> str:
    digits = re.sub(r"\D", "", phone or "")
    if not digits:
        raise ValidationError("Customer phone number is required to send a reminder")
    return digits


def whatsapp_link(phone: Optional[str], text: str) -> str:
    """Build a WhatsApp click-to-chat link carrying ``text``."""
    return f"https://wa.me/{_phone_digits(phone)}?text={quote(text, safe='')}"


def sms_link(phone: Optional[str], text: str) -> str:
    """Build an ``sms:`` link carrying ``text``."""
    return f"sms:{_phone_digits(phone)}?body={quote(text, safe='')}"
