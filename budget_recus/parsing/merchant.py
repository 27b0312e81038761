"""Receipt merchant-name extraction."""

import re

from budget_recus.models.ledger import UNKNOWN_MERCHANT

MAX_HEADER_LINES = 10
MAX_MERCHANT_LENGTH = 50

# Receipt boilerplate, matched against the upper-cased line
_BOILERPLATE_RE = re.compile(
    r"TICKET|RECU|REÇU|FACTURE|MERCI|CARTE|CB|TVA|SIRET|RCS|TEL|WWW|HTTP|HTTPS|FR\d{2}"
)
_LETTER_RE = re.compile(r"[A-Za-zÀ-ÿ]")
_DIGITS_ONLY_RE = re.compile(r"\d+")


def _is_merchant_candidate(line: str) -> bool:
    if _BOILERPLATE_RE.search(line.upper()):
        return False
    if _DIGITS_ONLY_RE.fullmatch(re.sub(r"\s", "", line)):
        return False
    if len(line) < 3:
        return False
    # Noisy OCR lines of symbols and digits
    if len(_LETTER_RE.findall(line)) < 3:
        return False
    return True


def parse_merchant(text: str) -> str:
    """
    Pick the merchant name from the receipt header.

    Only the first 10 non-empty lines are considered; the first one that
    is not boilerplate, not a number and has at least three letters wins.
    """
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    for line in lines[:MAX_HEADER_LINES]:
        if _is_merchant_candidate(line):
            return line[:MAX_MERCHANT_LENGTH]
    return UNKNOWN_MERCHANT
