"""Entry validation package."""

from budget_recus.validation.validator import (
    InvalidEntryError,
    parse_amount_input,
    parse_budget_input,
    parse_date_input,
    validate_card_name,
    validate_draft_input,
)

__all__ = [
    "InvalidEntryError",
    "parse_amount_input",
    "parse_budget_input",
    "parse_date_input",
    "validate_card_name",
    "validate_draft_input",
]
