"""Tests for form entry validation."""

import pytest
from datetime import date, datetime, timezone
from decimal import Decimal

from budget_recus.models.ledger import UNKNOWN_MERCHANT
from budget_recus.validation import (
    InvalidEntryError,
    parse_amount_input,
    parse_budget_input,
    parse_date_input,
    validate_card_name,
    validate_draft_input,
)


class TestAmountInput:
    """Tests for the draft amount field."""

    @pytest.mark.parametrize("value, expected", [
        ("12,50", Decimal("12.50")),
        ("12.5", Decimal("12.5")),
        (" 7 ", Decimal("7")),
        (Decimal("3.20"), Decimal("3.20")),
        (4, Decimal("4")),
    ])
    def test_valid_amounts(self, value, expected):
        """Test accepted spellings."""
        assert parse_amount_input(value) == expected

    @pytest.mark.parametrize("value", ["0", "-3", "abc", "", None, "nan", "inf"])
    def test_invalid_amounts(self, value):
        """Test that the amount must be a finite number above zero."""
        with pytest.raises(InvalidEntryError) as excinfo:
            parse_amount_input(value)
        assert excinfo.value.field == "amount"
        assert str(excinfo.value) == "Invalid amount (must be > 0)."


class TestBudgetInput:
    """Tests for the budget prompt."""

    def test_formatted_budget(self):
        """Test that spaces, currency and comma are tolerated."""
        assert parse_budget_input("2 500,00 €") == Decimal("2500.00")

    def test_zero_budget(self):
        """Test that zero is a valid budget."""
        assert parse_budget_input("0") == Decimal("0")

    @pytest.mark.parametrize("value", ["abc", "", None, Decimal("-1"), -5])
    def test_invalid_budgets(self, value):
        """Test rejected budgets."""
        with pytest.raises(InvalidEntryError, match="Invalid budget."):
            parse_budget_input(value)


class TestDateInput:
    """Tests for the draft date field."""

    def test_iso_string(self):
        """Test a normal date."""
        assert parse_date_input("2024-03-05") == date(2024, 3, 5)

    def test_rolls_invalid_calendar_date(self):
        """Test that an impossible day rolls into the next month."""
        assert parse_date_input("2024-02-30") == date(2024, 3, 1)

    def test_date_objects(self):
        """Test that dates and datetimes are accepted."""
        assert parse_date_input(date(2024, 3, 5)) == date(2024, 3, 5)
        assert parse_date_input(datetime(2024, 3, 5, 23, 0)) == date(2024, 3, 5)

    @pytest.mark.parametrize("value", ["", "   ", None, "hier"])
    def test_missing_or_unreadable(self, value):
        """Test that a date is required."""
        with pytest.raises(InvalidEntryError) as excinfo:
            parse_date_input(value)
        assert excinfo.value.field == "date"


class TestCardName:
    """Tests for new card names."""

    def test_strips(self):
        """Test that the name is trimmed."""
        assert validate_card_name("  Visa ") == "Visa"

    def test_required(self):
        """Test that a blank name is rejected."""
        with pytest.raises(InvalidEntryError, match="Card name is required."):
            validate_card_name("   ")
        with pytest.raises(InvalidEntryError):
            validate_card_name(None)


class TestDraftInput:
    """Tests for the whole review form."""

    def test_valid_draft(self):
        """Test normalization of a complete form."""
        patch = validate_draft_input("12,5", "2024-03-05", " Monoprix ", "  courses ")
        assert patch.amount == Decimal("12.5")
        assert patch.date_iso == datetime(2024, 3, 5, 12, tzinfo=timezone.utc)
        assert patch.merchant == "Monoprix"
        assert patch.note == "courses"

    def test_empty_merchant_gets_placeholder(self):
        """Test the merchant placeholder."""
        patch = validate_draft_input("1", "2024-03-05", "  ", None)
        assert patch.merchant == UNKNOWN_MERCHANT
        assert patch.note == ""

    def test_amount_checked_first(self):
        """Test that the amount error is reported before the date error."""
        with pytest.raises(InvalidEntryError) as excinfo:
            validate_draft_input("0", "", "Monoprix", "")
        assert excinfo.value.field == "amount"

    def test_missing_date(self):
        """Test that the date is required."""
        with pytest.raises(InvalidEntryError) as excinfo:
            validate_draft_input("5", "", "Monoprix", "")
        assert excinfo.value.field == "date"
