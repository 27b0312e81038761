"""
Receipt amount extraction.

French receipts write 1 234,56 or 1.234,56; imported ones write 1,234.56.
The separator roles are worked out per token:
- dot and comma both present: the right-most one is the decimal separator
- commas only: the last comma is decimal
- dots only: the last dot is decimal only when exactly two digits follow it
  at the end of the token (264.98), otherwise dots group thousands (1.234)
Spaces always group thousands.

Lines carrying a total keyword win over the rest of the receipt; without
one, the largest plausible amount on the ticket is taken.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Optional

# Grouped digits with an optional 2-digit decimal part, or a plain decimal.
# A token must not touch another digit (dates like 05.03.2024 never match).
_MONEY_RE = re.compile(
    r"(?<![\d.,])"
    r"(\d{1,3}(?:[ .,]\d{3})+(?:[.,]\d{2})?|\d+[.,]\d{2})"
    r"(?![.,]?\d)"
)

_TOTAL_LINE_RE = re.compile(
    r"TOTAL|TTC|MONTANT|A PAYER|À PAYER|A\s*PAYER",
    re.IGNORECASE,
)

_TWO_DECIMALS_RE = re.compile(r"\.\d{2}$")

DEFAULT_MAX_AMOUNT = Decimal("100000")


def amount_tokens(text: str) -> list[str]:
    """Every money-looking token in text, left to right."""
    return _MONEY_RE.findall(text)


def token_to_decimal(token: str) -> Optional[Decimal]:
    """Convert one money token to a Decimal, resolving separator roles."""
    s = token.replace(" ", "")
    has_dot = "." in s
    has_comma = "," in s

    if has_dot and has_comma:
        decimal_sep = "." if s.rfind(".") > s.rfind(",") else ","
    elif has_comma:
        decimal_sep = ","
    elif has_dot and _TWO_DECIMALS_RE.search(s):
        decimal_sep = "."
    else:
        decimal_sep = None

    if decimal_sep:
        whole, fraction = s.rsplit(decimal_sep, 1)
        s = f"{re.sub(r'[.,]', '', whole)}.{fraction}"
    else:
        s = re.sub(r"[.,]", "", s)

    try:
        value = Decimal(s)
    except InvalidOperation:
        return None
    return value if value.is_finite() else None


def parse_amount(
    text: str,
    max_amount: Decimal = DEFAULT_MAX_AMOUNT,
) -> Optional[Decimal]:
    """
    Find the amount paid on a receipt.

    Args:
        text: Raw OCR text
        max_amount: Fallback scan ignores values at or above this

    Returns:
        The amount, or None when nothing on the receipt parses
    """
    lines = [line.strip() for line in text.splitlines() if line.strip()]

    for line in lines:
        if not _TOTAL_LINE_RE.search(line):
            continue
        tokens = amount_tokens(line)
        if tokens:
            value = token_to_decimal(tokens[-1])
            if value is not None and value > 0:
                return value

    candidates = [
        value
        for value in (token_to_decimal(t) for t in amount_tokens(text))
        if value is not None and 0 < value < max_amount
    ]
    if not candidates:
        return None
    return max(candidates)
