"""
Receipt Text Interpreter

Turns raw OCR text into proposed expense fields. Amount, date and
merchant are read independently; any of them may be wrong, so the
result is only ever shown to the user as a draft to review.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from budget_recus.models.ledger import ReceiptFields
from budget_recus.parsing.amount import DEFAULT_MAX_AMOUNT, parse_amount
from budget_recus.parsing.dates import parse_date
from budget_recus.parsing.merchant import parse_merchant


def interpret_receipt(
    text: str,
    today: Optional[date] = None,
    max_amount: Decimal = DEFAULT_MAX_AMOUNT,
) -> ReceiptFields:
    """Extract amount, date and merchant from one receipt's OCR text."""
    return ReceiptFields(
        amount=parse_amount(text, max_amount=max_amount),
        date=parse_date(text, today=today),
        merchant=parse_merchant(text),
        raw_text=text,
    )
