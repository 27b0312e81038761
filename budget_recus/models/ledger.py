"""
Core Data Models for Budget Reçus

These models define the schemas for every record the ledger owns or
derives. They are designed to:
1. Reject invalid records at construction (amount <= 0, bad month tokens)
2. Serialize to the same JSON shape the earlier web app exported
3. Keep ephemeral review data (drafts) apart from committed data

JSON keys are camelCase aliases (cardId, dateISO, startMonth, ...);
Python attributes are snake_case. Both are accepted on input.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Annotated, Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StringConstraints,
    field_validator,
)

from budget_recus.months import MONTH_TOKEN_PATTERN


UNKNOWN_MERCHANT = "Commerçant inconnu"
SCANNED_RECEIPT_NOTE = "Reçu scanné"
EXPORT_FORMAT_VERSION = 2

MonthToken = Annotated[str, StringConstraints(pattern=MONTH_TOKEN_PATTERN)]
BudgetAmount = Annotated[Decimal, Field(ge=0)]

# budgets[card_id][YYYY-MM] = amount
BudgetMap = dict[str, dict[MonthToken, BudgetAmount]]


def new_id() -> str:
    """Opaque record identifier."""
    return uuid4().hex


# =============================================================================
# ENUMS
# =============================================================================

class DraftMode(str, Enum):
    """Whether saving a draft creates a new expense or edits an existing one."""
    CREATE = "create"
    EDIT = "edit"


# =============================================================================
# COMMITTED RECORDS
# =============================================================================

class Card(BaseModel):
    """
    An independent budget ledger, typically one payment card.

    start_month is fixed at creation. Rollover never looks at months
    before it, so each card's carry-forward series starts at zero.
    """
    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    id: str = Field(default_factory=new_id, min_length=1)
    name: str = Field(..., min_length=1, max_length=100)
    start_month: MonthToken = Field(..., alias="startMonth", frozen=True)


class Expense(BaseModel):
    """
    A committed expense.

    card_id must reference an existing card; the ledger enforces that
    because a single record cannot see the card list.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=new_id, min_length=1)
    card_id: str = Field(..., min_length=1, alias="cardId")
    amount: Decimal = Field(..., gt=0, description="Amount in EUR")
    date_iso: datetime = Field(..., alias="dateISO")
    merchant: str = Field(default=UNKNOWN_MERCHANT)
    note: str = Field(default="")
    raw_text: Optional[str] = Field(default=None, alias="rawText")

    @field_validator('date_iso')
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        """Naive timestamps are stored as UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


# =============================================================================
# EPHEMERAL / DERIVED RECORDS
# =============================================================================

class ReceiptFields(BaseModel):
    """
    What the receipt interpreter read from OCR text.

    PROPOSED data only: it becomes an expense after the user reviews it.
    amount is None when nothing parsed, which is not the same as zero.
    """
    amount: Optional[Decimal] = None
    date: str = Field(..., description="YYYY-MM-DD, not calendar-validated")
    merchant: str
    raw_text: str = ""


class Draft(BaseModel):
    """
    A candidate expense under user review. Never persisted.

    In edit mode expense_id names the expense being changed.
    """
    mode: DraftMode = DraftMode.CREATE
    expense_id: Optional[str] = None
    amount: Optional[Decimal] = None
    date: str = Field(..., description="YYYY-MM-DD as shown in the form")
    merchant: str = ""
    note: str = ""
    raw_text: str = ""

    @property
    def is_edit(self) -> bool:
        return self.mode == DraftMode.EDIT


class ExpensePatch(BaseModel):
    """Validated form input, ready to be applied to an expense."""
    amount: Decimal = Field(..., gt=0)
    date_iso: datetime
    merchant: str
    note: str = ""


class SaveOutcome(BaseModel):
    """Result of committing a draft."""
    expense: Expense
    month: MonthToken
    warnings: list[str] = Field(default_factory=list)


class OCRProgress(BaseModel):
    """A progress notification emitted while a receipt is being read."""
    phase: str
    progress: float = Field(..., ge=0.0, le=1.0)


class MonthSummary(BaseModel):
    """Figures shown for one card and one month."""
    card_id: str
    month: MonthToken
    budget: Decimal
    available: Decimal
    spent: Decimal
    expenses: list[Expense] = Field(default_factory=list)

    @property
    def remaining(self) -> Decimal:
        """What carries into next month."""
        return self.available - self.spent


# =============================================================================
# APPLICATION STATE
# =============================================================================

class LedgerState(BaseModel):
    """
    Everything the application knows, owned by a single controller.

    Only the draft is ephemeral; the rest is persisted after each mutation.
    """
    cards: list[Card] = Field(default_factory=list)
    expenses: list[Expense] = Field(default_factory=list)
    budgets: BudgetMap = Field(default_factory=dict)
    current_card_id: Optional[str] = None
    current_month: MonthToken
    draft: Optional[Draft] = None

    def find_card(self, card_id: str) -> Optional[Card]:
        return next((c for c in self.cards if c.id == card_id), None)

    def find_expense(self, expense_id: str) -> Optional[Expense]:
        return next((e for e in self.expenses if e.id == expense_id), None)


class ExportDocument(BaseModel):
    """The import/export file format."""
    model_config = ConfigDict(populate_by_name=True)

    version: int = EXPORT_FORMAT_VERSION
    exported_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        alias="exportedAt",
    )
    cards: list[Card]
    expenses: list[Expense]
    budgets: BudgetMap = Field(default_factory=dict)
    current_card_id: Optional[str] = Field(default=None, alias="currentCardId")
    current_month: Optional[MonthToken] = Field(default=None, alias="currentMonth")
