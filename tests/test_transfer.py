"""Tests for JSON import and export."""

import json

import pytest
from datetime import datetime, timezone
from decimal import Decimal

from budget_recus.models.ledger import Card, Draft, Expense, LedgerState
from budget_recus.services.transfer import (
    ImportDocumentError,
    export_document,
    export_filename,
    parse_import_document,
    state_from_document,
)


def sample_state() -> LedgerState:
    cards = [
        Card(id="c1", name="Carte parents", start_month="2024-01"),
        Card(id="c2", name="Visa", start_month="2024-02"),
    ]
    expenses = [
        Expense(
            id="e1",
            card_id="c1",
            amount=Decimal("1800"),
            date_iso=datetime(2024, 1, 15, 12, tzinfo=timezone.utc),
            merchant="SUPER MARCHE",
        ),
        Expense(
            id="e2",
            card_id="c2",
            amount=Decimal("12.50"),
            date_iso=datetime(2024, 2, 3, 12, tzinfo=timezone.utc),
            note="Reçu scanné",
            raw_text="TOTAL 12,50",
        ),
    ]
    return LedgerState(
        cards=cards,
        expenses=expenses,
        budgets={
            "c1": {"2024-01": Decimal("2500"), "2024-02": Decimal("2000")},
            "c2": {"2024-02": Decimal("300")},
        },
        current_card_id="c2",
        current_month="2024-02",
    )


class TestExport:
    """Tests for the export document."""

    def test_document_shape(self):
        """Test the exported keys and values."""
        exported_at = datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc)
        data = json.loads(export_document(sample_state(), exported_at=exported_at))

        assert data["version"] == 2
        assert data["exportedAt"].startswith("2024-03-01T09:30:00")
        assert data["currentCardId"] == "c2"
        assert data["currentMonth"] == "2024-02"
        assert data["cards"][0] == {"id": "c1", "name": "Carte parents", "startMonth": "2024-01"}
        assert data["expenses"][1]["cardId"] == "c2"
        assert data["expenses"][1]["rawText"] == "TOTAL 12,50"
        assert set(data["budgets"]) == {"c1", "c2"}

    def test_indented(self):
        """Test that the file is human-readable."""
        assert "\n  " in export_document(sample_state())

    def test_draft_not_exported(self):
        """Test that an open draft stays out of the file."""
        state = sample_state()
        state.draft = Draft(date="2024-02-01", merchant="Monoprix")
        assert "draft" not in json.loads(export_document(state))

    def test_filename(self):
        """Test the download file name."""
        moment = datetime(2024, 3, 1, tzinfo=timezone.utc)
        assert export_filename(moment) == f"budget-recus-export-{int(moment.timestamp() * 1000)}.json"


class TestImport:
    """Tests for parsing an import file."""

    def test_round_trip(self):
        """Test that export then import reproduces the ledger."""
        state = sample_state()
        document = parse_import_document(export_document(state), fallback_month="2030-01")
        restored = state_from_document(document, fallback_month="2030-01")

        assert restored.cards == state.cards
        assert restored.expenses == state.expenses
        assert restored.budgets == state.budgets
        assert restored.current_card_id == "c2"
        assert restored.current_month == "2024-02"

    def test_invalid_json(self):
        """Test that unreadable text is rejected."""
        with pytest.raises(ImportDocumentError, match="Invalid JSON."):
            parse_import_document("{not json", fallback_month="2024-06")

    @pytest.mark.parametrize("text", [
        '{"cards": []}',
        '{"expenses": []}',
        '{"cards": {}, "expenses": []}',
        '[]',
    ])
    def test_missing_arrays(self, text):
        """Test that cards and expenses arrays are required."""
        with pytest.raises(ImportDocumentError, match="cards and expenses are required"):
            parse_import_document(text, fallback_month="2024-06")

    def test_invalid_record(self):
        """Test that a non-positive amount is rejected."""
        text = json.dumps({
            "cards": [{"id": "c1", "name": "A", "startMonth": "2024-01"}],
            "expenses": [{"id": "e1", "cardId": "c1", "amount": 0, "dateISO": "2024-01-02T12:00:00Z"}],
        })
        with pytest.raises(ImportDocumentError, match="Invalid file"):
            parse_import_document(text, fallback_month="2024-06")

    def test_orphan_expense(self):
        """Test that expenses must reference an imported card."""
        text = json.dumps({
            "cards": [{"id": "c1", "name": "A", "startMonth": "2024-01"}],
            "expenses": [{"id": "e1", "cardId": "zz", "amount": 5, "dateISO": "2024-01-02T12:00:00Z"}],
        })
        with pytest.raises(ImportDocumentError, match="unknown card"):
            parse_import_document(text, fallback_month="2024-06")

    @pytest.mark.parametrize("text", [
        '{"cards": [{"id": [1], "name": "x"}], "expenses": []}',
        '{"cards": [{"id": {"a": 1}, "name": "x"}], "expenses": []}',
        '{"cards": [{"id": "c1", "name": "x"}], "expenses": [], "budgets": {"c1": 5}}',
        '{"cards": [{"id": "c1", "name": "x"}], "expenses": [], "budgets": [1]}',
    ])
    def test_malformed_cards_rejected(self, text):
        """Test that malformed ids and budgets give a readable error."""
        with pytest.raises(ImportDocumentError, match="Invalid file"):
            parse_import_document(text, fallback_month="2024-06")

    def test_duplicate_card_ids(self):
        """Test that card ids must be unique."""
        text = json.dumps({
            "cards": [
                {"id": "c1", "name": "A", "startMonth": "2024-01"},
                {"id": "c1", "name": "B", "startMonth": "2024-01"},
            ],
            "expenses": [],
        })
        with pytest.raises(ImportDocumentError, match="duplicate"):
            parse_import_document(text, fallback_month="2024-06")

    def test_legacy_file(self):
        """Test a file from the web version: no startMonth, no selections."""
        text = json.dumps({
            "version": 1,
            "cards": [{"id": "c1", "name": "Carte parents"}],
            "expenses": [{
                "id": "e1",
                "cardId": "c1",
                "amount": 42,
                "dateISO": "2023-10-05T12:00:00.000Z",
                "merchant": "Monoprix",
                "note": "",
                "rawText": "",
            }],
            "budgets": {"c1": {"2023-11": 2500}},
        })
        document = parse_import_document(text, fallback_month="2024-06")
        state = state_from_document(document, fallback_month="2024-06")

        assert state.cards[0].start_month == "2023-10"
        assert state.current_card_id == "c1"
        assert state.current_month == "2024-06"

    def test_unknown_current_card_falls_back(self):
        """Test that a dangling selection picks the first card."""
        text = json.dumps({
            "cards": [{"id": "c1", "name": "A", "startMonth": "2024-01"}],
            "expenses": [],
            "currentCardId": "gone",
            "currentMonth": "2024-02",
        })
        state = state_from_document(
            parse_import_document(text, fallback_month="2024-06"),
            fallback_month="2024-06",
        )
        assert state.current_card_id == "c1"
        assert state.current_month == "2024-02"
