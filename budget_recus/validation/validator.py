"""
Entry Validation

Form input (draft review, budget edit, new card) is checked here before
anything touches the ledger. A rejected entry raises InvalidEntryError
with a message meant for the user; the ledger is left unchanged, so the
form can keep what was typed for correction.

Validation never silently fixes a value. The only normalization applied
is the one the user can see in the form: comma as decimal separator,
an empty merchant shown as the placeholder, a rolled-over calendar date.
"""

import re
from datetime import date, datetime, time, timezone
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from budget_recus.models.ledger import UNKNOWN_MERCHANT, ExpensePatch
from budget_recus.parsing.dates import normalize_date


# Committed expenses are stamped at midday UTC so the derived month
# is the same in every time zone
EXPENSE_TIME = time(12, 0, tzinfo=timezone.utc)


class InvalidEntryError(ValueError):
    """User input that cannot be committed."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(message)


def _to_decimal(text: str) -> Optional[Decimal]:
    try:
        value = Decimal(text)
    except InvalidOperation:
        return None
    return value if value.is_finite() else None


def parse_amount_input(value: Union[str, Decimal, float, int, None]) -> Decimal:
    """
    Read the amount typed in the review form.

    Raises:
        InvalidEntryError: If the amount is missing, not a number or <= 0
    """
    if isinstance(value, Decimal):
        amount = value if value.is_finite() else None
    elif isinstance(value, (int, float)):
        amount = _to_decimal(str(value))
    else:
        amount = _to_decimal(str(value or "").strip().replace(",", "."))

    if amount is None or amount <= 0:
        raise InvalidEntryError("amount", "Invalid amount (must be > 0).")
    return amount


def parse_budget_input(value: Union[str, Decimal, float, int, None]) -> Decimal:
    """
    Read a monthly budget typed by the user ("2 500,00 €" is fine).

    Raises:
        InvalidEntryError: If nothing numeric remains or the value is negative
    """
    if isinstance(value, Decimal):
        amount = value if value.is_finite() else None
    elif isinstance(value, (int, float)):
        amount = _to_decimal(str(value))
    else:
        cleaned = re.sub(r"[^\d.]", "", str(value or "").replace(",", "."))
        amount = _to_decimal(cleaned) if cleaned else None

    if amount is None or amount < 0:
        raise InvalidEntryError("budget", "Invalid budget.")
    return amount


def parse_date_input(value: Union[str, date, None]) -> date:
    """
    Read the date of the review form.

    Raises:
        InvalidEntryError: If the date is missing or unreadable
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value or not str(value).strip():
        raise InvalidEntryError("date", "Invalid date.")
    try:
        return normalize_date(str(value))
    except ValueError:
        raise InvalidEntryError("date", "Invalid date.")


def validate_card_name(name: Optional[str]) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise InvalidEntryError("name", "Card name is required.")
    return cleaned


def validate_draft_input(
    amount: Union[str, Decimal, float, int, None],
    expense_date: Union[str, date, None],
    merchant: Optional[str] = None,
    note: Optional[str] = None,
) -> ExpensePatch:
    """
    Validate the reviewed draft fields.

    Returns:
        ExpensePatch ready to apply to a new or existing expense

    Raises:
        InvalidEntryError: On the first invalid field (amount, then date)
    """
    checked_amount = parse_amount_input(amount)
    checked_date = parse_date_input(expense_date)

    return ExpensePatch(
        amount=checked_amount,
        date_iso=datetime.combine(checked_date, EXPENSE_TIME),
        merchant=(merchant or "").strip() or UNKNOWN_MERCHANT,
        note=(note or "").strip(),
    )
