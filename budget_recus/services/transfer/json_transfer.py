"""
Import / Export

The whole ledger travels as one indented JSON document:

    {version, exportedAt, cards, expenses, budgets, currentCardId, currentMonth}

Import is all-or-nothing. The document is fully parsed and validated
before the caller is allowed to replace anything; any problem raises
ImportDocumentError with a message that can be shown as-is.

Files exported by the earlier web version (cards without a startMonth)
are accepted: the missing start month is derived from the card's data.
"""

import json
from datetime import datetime, timezone
from typing import Optional

from pydantic import ValidationError

from budget_recus.models.ledger import ExportDocument, LedgerState
from budget_recus.services.storage.repository import fill_missing_start_months


class ImportDocumentError(Exception):
    """The import file is unreadable or incomplete; nothing was changed."""
    pass


def export_document(
    state: LedgerState,
    exported_at: Optional[datetime] = None,
) -> str:
    """Serialize the ledger (minus any open draft) to the export format."""
    document = ExportDocument(
        exported_at=exported_at or datetime.now(timezone.utc),
        cards=state.cards,
        expenses=state.expenses,
        budgets=state.budgets,
        current_card_id=state.current_card_id,
        current_month=state.current_month,
    )
    return document.model_dump_json(by_alias=True, indent=2)


def export_filename(exported_at: Optional[datetime] = None) -> str:
    moment = exported_at or datetime.now(timezone.utc)
    return f"budget-recus-export-{int(moment.timestamp() * 1000)}.json"


def _first_error(error: ValidationError) -> str:
    detail = error.errors()[0]
    location = ".".join(str(part) for part in detail["loc"])
    return f"{location}: {detail['msg']}"


def parse_import_document(text: str, fallback_month: str) -> ExportDocument:
    """
    Parse and validate an export file.

    Args:
        text: File content
        fallback_month: Start month for legacy cards without any data

    Raises:
        ImportDocumentError: On invalid JSON, missing cards/expenses arrays,
            invalid records, or expenses pointing at unknown cards
    """
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, TypeError):
        raise ImportDocumentError("Invalid JSON.")

    if (
        not isinstance(data, dict)
        or not isinstance(data.get("cards"), list)
        or not isinstance(data.get("expenses"), list)
    ):
        raise ImportDocumentError("Invalid file: cards and expenses are required.")

    budgets = data.get("budgets") or {}
    cards = fill_missing_start_months(
        data["cards"], data["expenses"], budgets, fallback_month
    )

    try:
        document = ExportDocument.model_validate(
            {**data, "cards": cards, "budgets": budgets}
        )
    except ValidationError as e:
        raise ImportDocumentError(f"Invalid file: {_first_error(e)}")

    card_ids = [card.id for card in document.cards]
    if len(set(card_ids)) != len(card_ids):
        raise ImportDocumentError("Invalid file: duplicate card ids.")

    orphans = [e.id for e in document.expenses if e.card_id not in set(card_ids)]
    if orphans:
        raise ImportDocumentError(
            f"Invalid file: {len(orphans)} expense(s) reference an unknown card."
        )

    return document


def state_from_document(document: ExportDocument, fallback_month: str) -> LedgerState:
    """Build the replacement state; selections default like a fresh start."""
    card_ids = {card.id for card in document.cards}
    current_card_id = document.current_card_id
    if current_card_id not in card_ids:
        current_card_id = document.cards[0].id if document.cards else None

    return LedgerState(
        cards=document.cards,
        expenses=document.expenses,
        budgets=document.budgets,
        current_card_id=current_card_id,
        current_month=document.current_month or fallback_month,
    )
