"""Ledger and rollover engine package."""

from budget_recus.ledger.engine import (
    Ledger,
    LedgerError,
    UnknownCardError,
    UnknownExpenseError,
)

__all__ = ["Ledger", "LedgerError", "UnknownCardError", "UnknownExpenseError"]
