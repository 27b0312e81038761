"""
Activity Event Models

Every user action handled by the controller produces one structured log
event. Events go to the application log only; the ledger keeps no history
of past states, so nothing here is persisted.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class ActivityEventType(str, Enum):
    """Types of events we log, one per controller action."""
    # Startup / persistence
    STATE_LOADED = "state_loaded"
    STATE_PERSISTED = "state_persisted"

    # Cards and budgets
    CARD_ADDED = "card_added"
    CARD_SELECTED = "card_selected"
    MONTH_SELECTED = "month_selected"
    BUDGET_EDITED = "budget_edited"

    # Receipt scanning
    RECEIPT_SCANNED = "receipt_scanned"
    OCR_FAILED = "ocr_failed"

    # Expenses
    EXPENSE_SAVED = "expense_saved"
    EXPENSE_UPDATED = "expense_updated"
    EXPENSE_DELETED = "expense_deleted"
    DRAFT_DISCARDED = "draft_discarded"
    ENTRY_REJECTED = "entry_rejected"

    # Import / export
    DATA_EXPORTED = "data_exported"
    DATA_IMPORTED = "data_imported"
    IMPORT_REJECTED = "import_rejected"


class ActivitySeverity(str, Enum):
    """Severity level for activity events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class ActivityEvent(BaseModel):
    """A single activity event."""

    event_id: UUID = Field(default_factory=uuid4)
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    event_type: ActivityEventType
    severity: ActivitySeverity = ActivitySeverity.INFO

    # What the event is about
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'card', 'expense', 'receipt')"
    )
    entity_id: Optional[str] = None

    # Groups the events of one user action
    correlation_id: Optional[UUID] = None

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class ActivityEventBuilder:
    """
    Helper to build the events the controller emits.

    Usage:
        event = ActivityEventBuilder.card_added(card_id, name, start_month)
    """

    @staticmethod
    def card_added(
        card_id: str,
        name: str,
        start_month: str,
        correlation_id: Optional[UUID] = None,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.CARD_ADDED,
            entity_type="card",
            entity_id=card_id,
            correlation_id=correlation_id,
            description=f"Card added: {name}",
            details={"name": name, "start_month": start_month},
        )

    @staticmethod
    def budget_edited(
        card_id: str,
        month: str,
        amount: str,
        correlation_id: Optional[UUID] = None,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.BUDGET_EDITED,
            entity_type="card",
            entity_id=card_id,
            correlation_id=correlation_id,
            description=f"Budget for {month} set to {amount} EUR",
            details={"month": month, "amount": amount},
        )

    @staticmethod
    def receipt_scanned(
        amount: Optional[str],
        date: str,
        merchant: str,
        correlation_id: Optional[UUID] = None,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.RECEIPT_SCANNED,
            entity_type="receipt",
            correlation_id=correlation_id,
            description=f"Receipt read: {merchant}",
            details={"amount": amount, "date": date, "merchant": merchant},
        )

    @staticmethod
    def ocr_failed(
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.OCR_FAILED,
            severity=ActivitySeverity.ERROR,
            entity_type="receipt",
            correlation_id=correlation_id,
            description="Receipt recognition failed",
            error_message=error_message,
        )

    @staticmethod
    def expense_saved(
        expense_id: str,
        card_id: str,
        amount: str,
        month: str,
        updated: bool = False,
        correlation_id: Optional[UUID] = None,
    ) -> ActivityEvent:
        event_type = (
            ActivityEventType.EXPENSE_UPDATED
            if updated
            else ActivityEventType.EXPENSE_SAVED
        )
        verb = "updated" if updated else "saved"
        return ActivityEvent(
            event_type=event_type,
            entity_type="expense",
            entity_id=expense_id,
            correlation_id=correlation_id,
            description=f"Expense {verb}: {amount} EUR in {month}",
            details={"card_id": card_id, "amount": amount, "month": month},
        )

    @staticmethod
    def expense_deleted(
        expense_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.EXPENSE_DELETED,
            entity_type="expense",
            entity_id=expense_id,
            correlation_id=correlation_id,
            description="Expense deleted",
        )

    @staticmethod
    def entry_rejected(
        field: str,
        message: str,
        correlation_id: Optional[UUID] = None,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.ENTRY_REJECTED,
            severity=ActivitySeverity.WARNING,
            correlation_id=correlation_id,
            description=f"Invalid input for {field}",
            details={"field": field},
            error_message=message,
        )

    @staticmethod
    def data_imported(
        card_count: int,
        expense_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.DATA_IMPORTED,
            correlation_id=correlation_id,
            description=f"Imported {card_count} cards and {expense_count} expenses",
            details={"cards": card_count, "expenses": expense_count},
        )

    @staticmethod
    def import_rejected(
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.IMPORT_REJECTED,
            severity=ActivitySeverity.WARNING,
            correlation_id=correlation_id,
            description="Import document rejected",
            error_message=error_message,
        )
