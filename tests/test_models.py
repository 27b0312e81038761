"""
Tests for Budget Reçus

Test strategy:
1. Unit tests for individual components (models, months, parsers, validators)
2. Engine tests for the rollover arithmetic
3. Controller tests driven through an in-memory store and a fake OCR engine
4. No real OCR and no filesystem outside tmp_path
"""

import pytest
from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

from budget_recus.models.ledger import (
    UNKNOWN_MERCHANT,
    Card,
    Draft,
    DraftMode,
    Expense,
    ExportDocument,
    LedgerState,
    MonthSummary,
    OCRProgress,
)
from budget_recus.models.activity import (
    ActivityEvent,
    ActivityEventBuilder,
    ActivityEventType,
    ActivitySeverity,
)


class TestCardModel:
    """Tests for the Card model."""

    def test_card_creation(self):
        """Test Card creation with a generated id."""
        card = Card(name="Carte parents", start_month="2024-01")
        assert card.name == "Carte parents"
        assert card.start_month == "2024-01"
        assert card.id

    def test_card_strips_whitespace(self):
        """Test that whitespace is stripped from the card name."""
        card = Card(name="  Visa  ", start_month="2024-01")
        assert card.name == "Visa"

    def test_card_rejects_empty_name(self):
        """Test that a blank name is rejected."""
        with pytest.raises(ValueError):
            Card(name="   ", start_month="2024-01")

    def test_card_rejects_bad_start_month(self):
        """Test that the start month must be a YYYY-MM token."""
        with pytest.raises(ValueError):
            Card(name="Visa", start_month="2024-13")
        with pytest.raises(ValueError):
            Card(name="Visa", start_month="2024-1")

    def test_card_start_month_frozen(self):
        """Test that the start month cannot change after creation."""
        card = Card(name="Visa", start_month="2024-01")
        with pytest.raises(ValueError):
            card.start_month = "2023-01"
        assert card.start_month == "2024-01"

    def test_card_accepts_camel_case_keys(self):
        """Test that stored JSON keys are accepted and produced."""
        card = Card.model_validate({"id": "c1", "name": "Visa", "startMonth": "2023-11"})
        assert card.start_month == "2023-11"
        assert card.model_dump(by_alias=True) == {
            "id": "c1",
            "name": "Visa",
            "startMonth": "2023-11",
        }


class TestExpenseModel:
    """Tests for the Expense model."""

    def test_expense_creation(self):
        """Test Expense creation with defaults."""
        expense = Expense(
            card_id="c1",
            amount=Decimal("12.50"),
            date_iso=datetime(2024, 3, 5, 12, tzinfo=timezone.utc),
        )
        assert expense.merchant == UNKNOWN_MERCHANT
        assert expense.note == ""
        assert expense.raw_text is None

    def test_expense_amount_must_be_positive(self):
        """Test that zero and negative amounts are rejected."""
        for amount in (Decimal("0"), Decimal("-1")):
            with pytest.raises(ValueError):
                Expense(
                    card_id="c1",
                    amount=amount,
                    date_iso=datetime(2024, 3, 5, 12, tzinfo=timezone.utc),
                )

    def test_naive_timestamp_is_utc(self):
        """Test that a naive timestamp is stored as UTC."""
        expense = Expense(card_id="c1", amount=Decimal("1"), date_iso=datetime(2024, 3, 5, 12))
        assert expense.date_iso.tzinfo == timezone.utc

    def test_expense_reads_stored_format(self):
        """Test loading an expense saved by the web version."""
        expense = Expense.model_validate({
            "id": "e1",
            "cardId": "c1",
            "amount": 42,
            "dateISO": "2024-03-05T12:00:00.000Z",
            "merchant": "SUPER MARCHE",
            "note": "Reçu scanné",
            "rawText": "TOTAL 42,00",
        })
        assert expense.card_id == "c1"
        assert expense.amount == Decimal("42")
        assert expense.date_iso == datetime(2024, 3, 5, 12, tzinfo=timezone.utc)
        assert expense.raw_text == "TOTAL 42,00"


class TestDerivedModels:
    """Tests for drafts, summaries and state helpers."""

    def test_draft_modes(self):
        """Test create and edit drafts."""
        assert not Draft(date="2024-03-05").is_edit
        draft = Draft(mode=DraftMode.EDIT, expense_id="e1", date="2024-03-05")
        assert draft.is_edit

    def test_draft_amount_may_be_missing(self):
        """Test that a draft without an amount is distinct from zero."""
        draft = Draft(date="2024-03-05")
        assert draft.amount is None

    def test_month_summary_remaining(self):
        """Test that remaining can go negative."""
        summary = MonthSummary(
            card_id="c1",
            month="2024-03",
            budget=Decimal("2500"),
            available=Decimal("3100"),
            spent=Decimal("3300"),
        )
        assert summary.remaining == Decimal("-200")

    def test_ocr_progress_bounds(self):
        """Test that progress is a fraction."""
        assert OCRProgress(phase="done", progress=1.0).progress == 1.0
        with pytest.raises(ValueError):
            OCRProgress(phase="done", progress=1.5)

    def test_state_lookups(self):
        """Test finding cards and expenses by id."""
        card = Card(id="c1", name="Visa", start_month="2024-01")
        expense = Expense(
            id="e1",
            card_id="c1",
            amount=Decimal("5"),
            date_iso=datetime(2024, 1, 2, 12, tzinfo=timezone.utc),
        )
        state = LedgerState(cards=[card], expenses=[expense], current_month="2024-01")
        assert state.find_card("c1") is card
        assert state.find_card("missing") is None
        assert state.find_expense("e1") is expense
        assert state.find_expense("missing") is None

    def test_state_rejects_bad_budget_month(self):
        """Test that budget keys must be month tokens."""
        with pytest.raises(ValueError):
            LedgerState(budgets={"c1": {"March": Decimal("1")}}, current_month="2024-03")

    def test_export_document_aliases(self):
        """Test the export document key names."""
        doc = ExportDocument(cards=[], expenses=[], current_month="2024-03")
        dumped = doc.model_dump(mode="json", by_alias=True)
        assert dumped["version"] == 2
        assert set(dumped) == {
            "version",
            "exportedAt",
            "cards",
            "expenses",
            "budgets",
            "currentCardId",
            "currentMonth",
        }


class TestActivityModels:
    """Tests for activity event models."""

    def test_activity_event_creation(self):
        """Test ActivityEvent creation."""
        event = ActivityEvent(
            event_type=ActivityEventType.CARD_ADDED,
            description="Card added",
        )
        assert event.event_id is not None
        assert event.timestamp is not None
        assert event.severity == ActivitySeverity.INFO

    def test_event_builder_expense_saved(self):
        """Test the builder for a saved expense."""
        correlation_id = uuid4()
        event = ActivityEventBuilder.expense_saved(
            expense_id="e1",
            card_id="c1",
            amount="12.50",
            month="2024-03",
            correlation_id=correlation_id,
        )
        assert event.event_type == ActivityEventType.EXPENSE_SAVED
        assert event.entity_id == "e1"
        assert event.correlation_id == correlation_id

    def test_event_builder_expense_updated(self):
        """Test that an edit is logged as an update."""
        event = ActivityEventBuilder.expense_saved(
            expense_id="e1",
            card_id="c1",
            amount="12.50",
            month="2024-03",
            updated=True,
        )
        assert event.event_type == ActivityEventType.EXPENSE_UPDATED

    def test_event_builder_ocr_failed(self):
        """Test that OCR failures carry the error."""
        event = ActivityEventBuilder.ocr_failed(error_message="blurry")
        assert event.event_type == ActivityEventType.OCR_FAILED
        assert event.severity in (ActivitySeverity.WARNING, ActivitySeverity.ERROR)
        assert event.error_message == "blurry"

    def test_event_to_log_dict(self):
        """Test conversion to a log dictionary."""
        event = ActivityEventBuilder.card_added(card_id="c1", name="Visa", start_month="2024-01")
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "card_added"
        assert log_dict["entity_id"] == "c1"
        assert log_dict["details"]["start_month"] == "2024-01"
