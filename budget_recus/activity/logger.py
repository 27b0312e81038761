"""
Activity Logger

Every controller action is logged as one structured event, tagged with a
correlation ID so the steps of one user action (scan, review, save) can
be followed in the log.

Events are written to the local structured log only. The ledger keeps
no audit trail: nothing here is persisted or ever read back.
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from budget_recus.models.activity import (
    ActivityEvent,
    ActivityEventBuilder,
    ActivityEventType,
    ActivitySeverity,
)


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class ActivityLogger:
    """
    Central activity logging service.

    Keeps the last events in memory (bounded) so the UI and tests can
    inspect what just happened.
    """

    def __init__(self, keep_last: int = 50):
        self._logger = structlog.get_logger("budget_recus.activity")
        self._keep_last = keep_last
        self.recent: list[ActivityEvent] = []

    def log(self, event: ActivityEvent) -> None:
        """Log an activity event at its severity."""
        log_dict = event.to_log_dict()

        if event.severity == ActivitySeverity.ERROR:
            self._logger.error("activity_event", **log_dict)
        elif event.severity == ActivitySeverity.WARNING:
            self._logger.warning("activity_event", **log_dict)
        elif event.severity == ActivitySeverity.DEBUG:
            self._logger.debug("activity_event", **log_dict)
        else:
            self._logger.info("activity_event", **log_dict)

        self.recent.append(event)
        del self.recent[:-self._keep_last]

    def log_simple(
        self,
        event_type: ActivityEventType,
        description: str,
        entity_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
        **details,
    ) -> None:
        """Log an event that needs no dedicated builder."""
        self.log(ActivityEvent(
            event_type=event_type,
            severity=ActivitySeverity.DEBUG
            if event_type == ActivityEventType.STATE_PERSISTED
            else ActivitySeverity.INFO,
            entity_id=entity_id,
            correlation_id=correlation_id,
            description=description,
            details=details,
        ))

    def log_card_added(
        self,
        card_id: str,
        name: str,
        start_month: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(ActivityEventBuilder.card_added(
            card_id=card_id,
            name=name,
            start_month=start_month,
            correlation_id=correlation_id,
        ))

    def log_budget_edited(
        self,
        card_id: str,
        month: str,
        amount: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(ActivityEventBuilder.budget_edited(
            card_id=card_id,
            month=month,
            amount=amount,
            correlation_id=correlation_id,
        ))

    def log_receipt_scanned(
        self,
        amount: Optional[str],
        date: str,
        merchant: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(ActivityEventBuilder.receipt_scanned(
            amount=amount,
            date=date,
            merchant=merchant,
            correlation_id=correlation_id,
        ))

    def log_ocr_failed(
        self,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(ActivityEventBuilder.ocr_failed(
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    def log_expense_saved(
        self,
        expense_id: str,
        card_id: str,
        amount: str,
        month: str,
        updated: bool = False,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(ActivityEventBuilder.expense_saved(
            expense_id=expense_id,
            card_id=card_id,
            amount=amount,
            month=month,
            updated=updated,
            correlation_id=correlation_id,
        ))

    def log_expense_deleted(
        self,
        expense_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(ActivityEventBuilder.expense_deleted(
            expense_id=expense_id,
            correlation_id=correlation_id,
        ))

    def log_entry_rejected(
        self,
        field: str,
        message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(ActivityEventBuilder.entry_rejected(
            field=field,
            message=message,
            correlation_id=correlation_id,
        ))

    def log_data_imported(
        self,
        card_count: int,
        expense_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(ActivityEventBuilder.data_imported(
            card_count=card_count,
            expense_count=expense_count,
            correlation_id=correlation_id,
        ))

    def log_import_rejected(
        self,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(ActivityEventBuilder.import_rejected(
            error_message=error_message,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., receipt scan).
    """
    return uuid4()
