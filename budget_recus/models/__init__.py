"""
Data Models Package

All records flowing through Budget Reçus are pydantic models.
"""

from budget_recus.models.ledger import (
    EXPORT_FORMAT_VERSION,
    SCANNED_RECEIPT_NOTE,
    UNKNOWN_MERCHANT,
    BudgetMap,
    Card,
    Draft,
    DraftMode,
    Expense,
    ExpensePatch,
    ExportDocument,
    LedgerState,
    MonthSummary,
    MonthToken,
    OCRProgress,
    ReceiptFields,
    SaveOutcome,
    new_id,
)
from budget_recus.models.activity import (
    ActivityEvent,
    ActivityEventBuilder,
    ActivityEventType,
    ActivitySeverity,
)

__all__ = [
    # Ledger models
    "EXPORT_FORMAT_VERSION",
    "SCANNED_RECEIPT_NOTE",
    "UNKNOWN_MERCHANT",
    "BudgetMap",
    "Card",
    "Draft",
    "DraftMode",
    "Expense",
    "ExpensePatch",
    "ExportDocument",
    "LedgerState",
    "MonthSummary",
    "MonthToken",
    "OCRProgress",
    "ReceiptFields",
    "SaveOutcome",
    "new_id",
    # Activity models
    "ActivityEvent",
    "ActivityEventBuilder",
    "ActivityEventType",
    "ActivitySeverity",
]
