"""
Ledger Controller for Budget Reçus

This module ties the components together and maps every UI event to one
core operation:

    card-select, month-select, add-card, edit-budget, scan-receipt,
    save-draft, discard-draft, edit-expense, delete-expense, export, import

The controller enforces the boundaries:
- Nothing is committed without an explicit save of a reviewed draft
- Invalid input is rejected before the ledger is touched
- Every mutation is followed by a full persistence flush
- Every action is logged

Actions are processed one at a time by a single owner of the state; the
only suspending calls (OCR, storage) are awaited in sequence.
"""

from datetime import date, timezone
from decimal import Decimal
from typing import Callable, Optional, Union

from budget_recus.activity import ActivityLogger, create_correlation_id
from budget_recus.config import LedgerSettings, get_settings
from budget_recus.ledger import Ledger, LedgerError
from budget_recus.models.activity import ActivityEventType
from budget_recus.models.ledger import (
    SCANNED_RECEIPT_NOTE,
    Card,
    Draft,
    DraftMode,
    Expense,
    LedgerState,
    MonthSummary,
    SaveOutcome,
)
from budget_recus.months import current_month, is_month_token, month_of
from budget_recus.parsing import interpret_receipt
from budget_recus.services.ocr import (
    ImageInput,
    OCREngine,
    OCRError,
    ProgressCallback,
    TesseractOCRService,
)
from budget_recus.services.storage import (
    JsonFileKeyValueStore,
    KeyValueStore,
    LedgerRepository,
)
from budget_recus.services.transfer import (
    ImportDocumentError,
    export_document,
    parse_import_document,
    state_from_document,
)
from budget_recus.validation import (
    InvalidEntryError,
    parse_budget_input,
    validate_card_name,
    validate_draft_input,
)


class NoDraftError(LedgerError):
    """Save was requested while no draft is open."""
    pass


class LedgerController:
    """
    Single owner of the application state.

    Call hydrate() once before anything else.
    """

    def __init__(
        self,
        store: KeyValueStore,
        ocr_engine: Optional[OCREngine] = None,
        activity_logger: Optional[ActivityLogger] = None,
        settings: Optional[LedgerSettings] = None,
        today: Callable[[], date] = date.today,
    ):
        self._settings = settings or get_settings().ledger
        self._repository = LedgerRepository(store)
        self._ocr_engine = ocr_engine
        self._activity = activity_logger or ActivityLogger()
        self._today = today
        self._ledger: Optional[Ledger] = None

    # -------------------------------------------------------------------------
    # State access
    # -------------------------------------------------------------------------

    @property
    def ledger(self) -> Ledger:
        if self._ledger is None:
            raise LedgerError("Ledger not loaded; call hydrate() first")
        return self._ledger

    @property
    def state(self) -> LedgerState:
        return self.ledger.state

    @property
    def activity(self) -> ActivityLogger:
        return self._activity

    def _this_month(self) -> str:
        return current_month(self._today())

    def _use_state(self, state: LedgerState) -> Ledger:
        self._ledger = Ledger(
            state,
            default_budget=Decimal(str(self._settings.default_budget)),
            max_depth=self._settings.rollover_max_depth,
        )
        return self._ledger

    def _ocr(self) -> OCREngine:
        if self._ocr_engine is None:
            self._ocr_engine = TesseractOCRService()
        return self._ocr_engine

    async def _persist(self) -> None:
        """Flush every persisted key. A mutation is committed once this returns."""
        await self._repository.save(self.state)
        self._activity.log_simple(
            ActivityEventType.STATE_PERSISTED,
            "State persisted",
        )

    # -------------------------------------------------------------------------
    # Startup
    # -------------------------------------------------------------------------

    async def hydrate(self) -> LedgerState:
        """
        Load persisted state and make it usable.

        A first start creates the default card; the selected card and
        month always end up valid and the displayed month's budget
        materialized.
        """
        state = await self._repository.load(default_month=self._this_month())
        self._use_state(state)

        if self._ensure_selection():
            await self._persist()

        self._activity.log_simple(
            ActivityEventType.STATE_LOADED,
            f"Loaded {len(state.cards)} cards and {len(state.expenses)} expenses",
        )
        return state

    def _ensure_selection(self) -> bool:
        """
        Guarantee a selected card and a materialized displayed month.

        An empty ledger gets the default card. Returns True if the state
        changed and needs persisting.
        """
        state = self.state
        changed = False

        if not state.cards:
            card = Card(
                name=self._settings.default_card_name,
                start_month=state.current_month,
            )
            self.ledger.add_card(card)
            state.current_card_id = card.id
            changed = True

        if state.find_card(state.current_card_id) is None:
            state.current_card_id = state.cards[0].id
            changed = True

        if self.ledger.ensure_budget(state.current_card_id, state.current_month):
            changed = True

        return changed

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def summary(
        self,
        card_id: Optional[str] = None,
        month: Optional[str] = None,
    ) -> MonthSummary:
        """Budget, available, spent and expenses for display."""
        return self.ledger.summarize(
            card_id or self.state.current_card_id,
            month or self.state.current_month,
        )

    # -------------------------------------------------------------------------
    # Selections
    # -------------------------------------------------------------------------

    async def select_card(self, card_id: str) -> Card:
        card = self.ledger.card(card_id)
        self.state.current_card_id = card.id
        self.ledger.ensure_budget(card.id, self.state.current_month)
        await self._persist()
        self._activity.log_simple(
            ActivityEventType.CARD_SELECTED,
            f"Card selected: {card.name}",
            entity_id=card.id,
        )
        return card

    async def select_month(self, month: Optional[str]) -> str:
        """Show another month; an empty choice means the current month."""
        month = month or self._this_month()
        if not is_month_token(month):
            raise InvalidEntryError("month", "Invalid month.")
        self.state.current_month = month
        self.ledger.ensure_budget(self.state.current_card_id, month)
        await self._persist()
        self._activity.log_simple(
            ActivityEventType.MONTH_SELECTED,
            f"Month selected: {month}",
            month=month,
        )
        return month

    # -------------------------------------------------------------------------
    # Cards and budgets
    # -------------------------------------------------------------------------

    async def add_card(
        self,
        name: Optional[str],
        start_month: Optional[str] = None,
    ) -> Card:
        """
        Create a card and select it.

        The start month defaults to the displayed month and can never be
        changed afterwards.
        """
        correlation_id = create_correlation_id()
        try:
            name = validate_card_name(name)
            start_month = start_month or self.state.current_month
            if not is_month_token(start_month):
                raise InvalidEntryError("start_month", "Invalid start month.")
        except InvalidEntryError as e:
            self._activity.log_entry_rejected(e.field, str(e), correlation_id)
            raise

        card = self.ledger.add_card(Card(name=name, start_month=start_month))
        self.ledger.ensure_budget(card.id, self.state.current_month)
        self.state.current_card_id = card.id
        await self._persist()

        self._activity.log_card_added(
            card_id=card.id,
            name=card.name,
            start_month=card.start_month,
            correlation_id=correlation_id,
        )
        return card

    async def edit_budget(
        self,
        value: Union[str, Decimal, float, int, None],
        month: Optional[str] = None,
    ) -> Decimal:
        """Overwrite the budget of the current card for a month."""
        correlation_id = create_correlation_id()
        month = month or self.state.current_month
        try:
            if not is_month_token(month):
                raise InvalidEntryError("month", "Invalid month.")
            amount = parse_budget_input(value)
        except InvalidEntryError as e:
            self._activity.log_entry_rejected(e.field, str(e), correlation_id)
            raise

        card_id = self.state.current_card_id
        self.ledger.set_budget(card_id, month, amount)
        await self._persist()

        self._activity.log_budget_edited(
            card_id=card_id,
            month=month,
            amount=str(amount),
            correlation_id=correlation_id,
        )
        return amount

    # -------------------------------------------------------------------------
    # Drafts
    # -------------------------------------------------------------------------

    async def scan_receipt(
        self,
        image: ImageInput,
        on_progress: Optional[ProgressCallback] = None,
        language: Optional[str] = None,
    ) -> Draft:
        """
        Read a receipt photo and open a draft with what was found.

        Raises:
            RecognitionFailedError: If OCR fails; no draft is opened
        """
        correlation_id = create_correlation_id()
        self.state.draft = None

        try:
            text = await self._ocr().recognize(
                image,
                language=language,
                on_progress=on_progress,
            )
        except OCRError as e:
            self._activity.log_ocr_failed(
                error_message=getattr(e, "reason", str(e)),
                correlation_id=correlation_id,
            )
            raise

        fields = interpret_receipt(
            text,
            today=self._today(),
            max_amount=Decimal(str(self._settings.max_plausible_amount)),
        )
        draft = Draft(
            mode=DraftMode.CREATE,
            amount=fields.amount,
            date=fields.date,
            merchant=fields.merchant,
            note=SCANNED_RECEIPT_NOTE,
            raw_text=fields.raw_text,
        )
        self.state.draft = draft

        self._activity.log_receipt_scanned(
            amount=str(fields.amount) if fields.amount is not None else None,
            date=fields.date,
            merchant=fields.merchant,
            correlation_id=correlation_id,
        )
        return draft

    def new_manual_draft(self) -> Draft:
        """Open an empty draft dated today."""
        draft = Draft(mode=DraftMode.CREATE, date=self._today().isoformat())
        self.state.draft = draft
        return draft

    def edit_expense(self, expense_id: str) -> Draft:
        """Open a draft pre-filled with an existing expense."""
        expense = self.ledger.expense(expense_id)
        draft = Draft(
            mode=DraftMode.EDIT,
            expense_id=expense.id,
            amount=expense.amount,
            date=expense.date_iso.astimezone(timezone.utc).date().isoformat(),
            merchant=expense.merchant,
            note=expense.note,
            raw_text=expense.raw_text or "",
        )
        self.state.draft = draft
        return draft

    def discard_draft(self) -> None:
        if self.state.draft is not None:
            self._activity.log_simple(
                ActivityEventType.DRAFT_DISCARDED,
                "Draft discarded",
                entity_id=self.state.draft.expense_id,
            )
        self.state.draft = None

    async def save_draft(
        self,
        amount: Union[str, Decimal, float, int, None],
        expense_date: Union[str, date, None],
        merchant: Optional[str] = None,
        note: Optional[str] = None,
    ) -> SaveOutcome:
        """
        Commit the open draft with the values the user reviewed.

        A new expense goes to the current card and the display jumps to
        its month. An edit changes the expense in place.

        Raises:
            NoDraftError: If no draft is open
            InvalidEntryError: If a field is invalid; nothing is changed
                and the draft stays open
        """
        draft = self.state.draft
        if draft is None:
            raise NoDraftError("No draft to save")

        correlation_id = create_correlation_id()
        try:
            patch = validate_draft_input(amount, expense_date, merchant, note)
        except InvalidEntryError as e:
            self._activity.log_entry_rejected(e.field, str(e), correlation_id)
            raise

        warnings: list[str] = []
        if draft.is_edit:
            expense = self.ledger.update_expense(
                draft.expense_id,
                amount=patch.amount,
                date_iso=patch.date_iso,
                merchant=patch.merchant,
                note=patch.note,
            )
            month = month_of(expense.date_iso)
        else:
            card = self.ledger.card(self.state.current_card_id)
            expense = self.ledger.add_expense(Expense(
                card_id=card.id,
                amount=patch.amount,
                date_iso=patch.date_iso,
                merchant=patch.merchant,
                note=patch.note,
                raw_text=draft.raw_text,
            ))
            month = month_of(expense.date_iso)
            if month != self.state.current_month:
                warnings.append(
                    f"This expense is dated {month}; "
                    f"switched the view from {self.state.current_month} to {month}."
                )
            self.state.current_month = month

        start_month = self.ledger.card(expense.card_id).start_month
        if month < start_month:
            warnings.append(
                f"{month} is before this card's start month ({start_month}); "
                "the expense will not count toward rollover."
            )

        self.state.draft = None
        await self._persist()

        self._activity.log_expense_saved(
            expense_id=expense.id,
            card_id=expense.card_id,
            amount=str(expense.amount),
            month=month,
            updated=draft.is_edit,
            correlation_id=correlation_id,
        )
        return SaveOutcome(expense=expense, month=month, warnings=warnings)

    async def delete_expense(self, expense_id: str) -> Expense:
        expense = self.ledger.remove_expense(expense_id)
        draft = self.state.draft
        if draft is not None and draft.expense_id == expense_id:
            self.state.draft = None
        await self._persist()
        self._activity.log_expense_deleted(expense_id=expense.id)
        return expense

    # -------------------------------------------------------------------------
    # Import / export
    # -------------------------------------------------------------------------

    def export_document(self) -> str:
        """The whole ledger as an export file."""
        text = export_document(self.state)
        self._activity.log_simple(
            ActivityEventType.DATA_EXPORTED,
            "Data exported",
            cards=len(self.state.cards),
            expenses=len(self.state.expenses),
        )
        return text

    async def import_document(
        self,
        text: str,
        confirm: Union[bool, Callable[[], bool]] = True,
    ) -> bool:
        """
        Replace the whole ledger with an export file.

        The document is validated first; confirm is only consulted for a
        valid one. Returns False if the user declined.

        Raises:
            ImportDocumentError: If the document is invalid; state unchanged
        """
        correlation_id = create_correlation_id()
        try:
            document = parse_import_document(text, fallback_month=self._this_month())
        except ImportDocumentError as e:
            self._activity.log_import_rejected(str(e), correlation_id)
            raise

        confirmed = confirm() if callable(confirm) else confirm
        if not confirmed:
            return False

        state = state_from_document(document, fallback_month=self._this_month())
        self._use_state(state)
        self._ensure_selection()
        await self._persist()

        self._activity.log_data_imported(
            card_count=len(state.cards),
            expense_count=len(state.expenses),
            correlation_id=correlation_id,
        )
        return True


def create_controller(
    store: Optional[KeyValueStore] = None,
    ocr_engine: Optional[OCREngine] = None,
) -> LedgerController:
    """
    Factory for the application controller.

    Defaults to the JSON-file store in the configured data directory and
    local Tesseract OCR (created on first scan).
    """
    settings = get_settings().ledger
    return LedgerController(
        store=store or JsonFileKeyValueStore(settings.data_dir),
        ocr_engine=ocr_engine,
        settings=settings,
    )
