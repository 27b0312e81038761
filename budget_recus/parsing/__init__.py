"""Receipt text parsing package."""

from budget_recus.parsing.amount import parse_amount, token_to_decimal
from budget_recus.parsing.dates import normalize_date, parse_date
from budget_recus.parsing.interpreter import interpret_receipt
from budget_recus.parsing.merchant import parse_merchant

__all__ = [
    "interpret_receipt",
    "normalize_date",
    "parse_amount",
    "parse_date",
    "parse_merchant",
    "token_to_decimal",
]
